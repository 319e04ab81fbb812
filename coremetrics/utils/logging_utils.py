"""Unified logging setup for coremetrics."""
from __future__ import annotations

import json
import logging
import os
import sys
import time

from coremetrics.config import env
from coremetrics.utils import log_context

DEFAULT_FORMAT = '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s'
# Minimal console format (message only) used for cleaner terminal output.
MINIMAL_CONSOLE_FORMAT = '%(message)s'


class _CtxFilter(logging.Filter):
    """Expose log_context fields as record attributes for formatters that include them."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = log_context.get_context()
        for k in log_context.CONTEXT_KEYS:
            if k in ctx and not hasattr(record, k):
                setattr(record, k, ctx[k])
        return True


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'ts': getattr(record, 'created', time.time()),
            'level': record.levelname,
            'logger': record.name,
            'thread': record.threadName,
            'msg': record.getMessage(),
            'ctx': log_context.get_context() or None,
        }
        if record.exc_info:
            payload['exc_info'] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(level: str = 'INFO', log_file: str | None = None, fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """Configure root logging.

    Console handler uses the minimal message-only format unless
    CM_VERBOSE_CONSOLE=1 or an explicit ``fmt`` is passed. CM_JSON_LOGS=1
    switches the console to one JSON object per line including the current
    log context. The file handler (if enabled) always uses DEFAULT_FORMAT.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(log_level)
    # Remove existing handlers to avoid duplication on re-init
    for h in root.handlers[:]:
        root.removeHandler(h)
        h.close()

    if fmt != DEFAULT_FORMAT:
        console_fmt = fmt
    elif env.get_bool('VERBOSE_CONSOLE'):
        console_fmt = DEFAULT_FORMAT
    else:
        console_fmt = MINIMAL_CONSOLE_FORMAT

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(log_level)
    console.addFilter(_CtxFilter())
    if env.get_bool('JSON_LOGS'):
        console.setFormatter(_JsonFormatter())
    else:
        console.setFormatter(logging.Formatter(console_fmt))
    root.addHandler(console)

    if log_file:
        try:
            directory = os.path.dirname(log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            fh = logging.FileHandler(log_file, encoding='utf-8')
        except OSError as e:
            root.error("Failed to create log file handler for %s: %s", log_file, e)
        else:
            fh.setLevel(log_level)
            fh.addFilter(_CtxFilter())
            fh.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            root.addHandler(fh)

    return root


__all__ = ["setup_logging", "DEFAULT_FORMAT", "MINIMAL_CONSOLE_FORMAT"]
