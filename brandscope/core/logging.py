"""Centralized logging configuration with JSON-formatted extras."""

import json
import logging
import sys


class JSONExtrasFormatter(logging.Formatter):
    """Formatter that outputs a readable log line with extras as JSON.

    Output format:
        2024-01-15 10:30:45 | INFO | brandscope.module | Message {"key": "value"}
    """

    RESERVED_ATTRS = frozenset(
        {
            "args",
            "asctime",
            "created",
            "exc_info",
            "exc_text",
            "filename",
            "funcName",
            "levelname",
            "levelno",
            "lineno",
            "message",
            "module",
            "msecs",
            "msg",
            "name",
            "pathname",
            "process",
            "processName",
            "relativeCreated",
            "stack_info",
            "taskName",
            "thread",
            "threadName",
        }
    )

    def __init__(self, datefmt: str | None = None, include_extras: bool = True) -> None:
        super().__init__(datefmt=datefmt)
        self.include_extras = include_extras

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        timestamp = self.formatTime(record, self.datefmt)
        base = f"{timestamp} | {record.levelname:<8} | {record.name} | {record.message}"

        extras = (
            {
                k: v
                for k, v in record.__dict__.items()
                if k not in self.RESERVED_ATTRS and not k.startswith("_")
            }
            if self.include_extras
            else {}
        )

        if extras:
            try:
                extras_str = json.dumps(extras, default=str, ensure_ascii=False)
                base = f"{base} {extras_str}"
            except (TypeError, ValueError):
                pass

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            base = f"{base}\n{record.exc_text}"

        return base


def setup_logging(level: int | None = None) -> None:
    """Configure the 'brandscope' logger from Settings.

    ``level`` overrides ``LOG_LEVEL``/``DEBUG``. The date format, the JSON
    extras suffix and the output stream come from the ``LOG_*`` settings.
    """
    from brandscope.config import settings

    effective_level = level if level is not None else settings.get_log_level()
    logger = logging.getLogger("brandscope")
    logger.setLevel(effective_level)

    # setup_logging runs on every app startup; keep a single handler
    if logger.handlers:
        return

    handler = logging.StreamHandler(sys.stderr if settings.log_stream == "stderr" else sys.stdout)
    handler.setLevel(effective_level)
    handler.setFormatter(
        JSONExtrasFormatter(
            datefmt=settings.log_date_format,
            include_extras=settings.log_json_extras,
        )
    )

    logger.addHandler(handler)
    logger.propagate = False
