"""Cores, their deployment descriptors and the container that owns them."""
from __future__ import annotations

from .container import CoreContainer
from .descriptors import CloudDescriptor, CoreDescriptor, CoreDescriptorProvider, DescriptorProvider
from .unit import Core

__all__ = [
    "CloudDescriptor",
    "CoreDescriptor",
    "CoreDescriptorProvider",
    "DescriptorProvider",
    "Core",
    "CoreContainer",
]
