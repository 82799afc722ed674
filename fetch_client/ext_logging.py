import logging
import os
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from typing import Optional

from .config import LoggingConfig

LOGGER_NAME = "fetch_client"

trace_id_var: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)


def trace_id_generator() -> str:
    return str(uuid.uuid4().hex)


@contextmanager
def bind_trace_id(trace_id: str | None = None) -> Iterator[str]:
    """Bind a trace id to every log record emitted inside the block."""
    value = trace_id or trace_id_generator()
    token = trace_id_var.set(value)
    try:
        yield value
    finally:
        trace_id_var.reset(token)


def init_logging(config: LoggingConfig | None = None) -> logging.Logger:
    config = config or LoggingConfig()
    logger = logging.getLogger(LOGGER_NAME)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_handlers: list[logging.Handler] = []
    log_file = config.LOG_FILE
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        log_handlers.append(
            RotatingFileHandler(
                filename=log_file,
                maxBytes=config.LOG_FILE_MAX_SIZE * 1024 * 1024,
                backupCount=config.LOG_FILE_BACKUP_COUNT,
            )
        )

    # Always log to console
    log_handlers.append(logging.StreamHandler(sys.stdout))

    formatter = TraceIdFormatter(config.LOG_FORMAT, config.LOG_DATEFORMAT)
    if config.LOG_TZ:
        formatter.converter = _time_converter(config.LOG_TZ)

    for handler in log_handlers:
        handler.addFilter(TraceIdFilter())
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(config.LOG_LEVEL)
    logger.propagate = False
    return logger


def _time_converter(log_tz: str):
    from datetime import datetime

    import pytz

    timezone = pytz.timezone(log_tz)

    def time_converter(seconds):
        return datetime.fromtimestamp(seconds, tz=timezone).timetuple()

    return time_converter


class TraceIdFilter(logging.Filter):
    # Makes the trace id of the current fetch available to the log format.
    def filter(self, record):
        record.trace_id = trace_id_var.get()
        return True


class TraceIdFormatter(logging.Formatter):
    def format(self, record):
        if getattr(record, "trace_id", None) is None:
            record.trace_id = ""
        return super().format(record)
