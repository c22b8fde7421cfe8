"""
Logging for Label PR Desk.

Every module logs through a child of the 'labelpr' logger, which carries two
handlers:

  logs/labelpr.log  everything at LOG_LEVEL (default INFO), rotated at 5 MB,
                    three backups kept
  stderr            WARNING and above from labelpr.db, so a store that could
                    not be read (and was replaced by sample data) is reported
                    on the terminal, not only in the file

Call configure_logging() once per CLI entry; repeat calls are no-ops.
Wrap functions with @log_call to trace them:

    2026-10-17 14:32:01 | DEBUG    | CALL tracks_edit | args=('t1', status='Released')
    2026-10-17 14:32:01 | INFO     | OK   tracks_edit | 4ms
    2026-10-17 14:32:01 | ERROR    | FAIL tracks_edit | StorageError: disk full | 3ms
"""

import functools
import logging
import logging.handlers
import os
import time
from pathlib import Path

_LOG_DIR = Path(__file__).parent.parent / "logs"
_LOG_FILE = _LOG_DIR / "labelpr.log"
_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
_CONSOLE_FORMAT = "Warning: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_ROTATE_AT = 5 * 1024 * 1024
_KEEP = 3

# Loggers whose warnings also go to the terminal
_CONSOLE_SOURCE = "labelpr.db"


def _level_from_env() -> int:
    name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _file_handler() -> logging.Handler:
    _LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        _LOG_FILE, maxBytes=_ROTATE_AT, backupCount=_KEEP, encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(logging.WARNING)
    handler.addFilter(logging.Filter(_CONSOLE_SOURCE))
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    return handler


def configure_logging() -> logging.Logger:
    """Attach the file and console handlers to the labelpr logger. Returns it."""
    logger = logging.getLogger("labelpr")
    if logger.handlers:
        return logger

    logger.setLevel(_level_from_env())
    logger.addHandler(_file_handler())
    logger.addHandler(_console_handler())
    return logger


def _describe_args(args, kwargs) -> str:
    parts = [repr(a) for a in args]
    parts += [f"{k}={v!r}" for k, v in kwargs.items()]
    return ", ".join(parts) or "—"


def log_call(func):
    """
    Trace a function: CALL at DEBUG, then OK at INFO or FAIL at ERROR with
    the elapsed milliseconds. Exceptions are re-raised untouched.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger("labelpr")
        logger.debug(f"CALL {func.__name__} | args=({_describe_args(args, kwargs)})")
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            elapsed = int((time.perf_counter() - started) * 1000)
            logger.error(f"FAIL {func.__name__} | {type(exc).__name__}: {exc} | {elapsed}ms")
            raise
        elapsed = int((time.perf_counter() - started) * 1000)
        logger.info(f"OK   {func.__name__} | {elapsed}ms")
        return result

    return wrapper
