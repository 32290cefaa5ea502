# logging.py

import logging
import os
from logging.handlers import RotatingFileHandler

import structlog
from structlog.contextvars import merge_contextvars

from Tierbot.config import Settings


def _level(name: str | None, default: int) -> int:
    return getattr(logging, (name or "").upper(), default)


def setup_logging(settings: Settings | None = None) -> None:
    """Initialize structlog + stdlib logging.

    Console and rotating-file handlers each take their own level; "NONE"
    disables a handler. Without settings: INFO to console only.
    """
    level_name = (settings.logging_level if settings else "INFO").upper()
    level = _level(level_name, logging.INFO)
    enabled = settings.logging_enabled if settings is not None else True

    logging.captureWarnings(True)

    # Renders both structlog and stdlib/third-party records as JSON
    processor_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=[
            structlog.processors.add_log_level,
            merge_contextvars,
        ],
    )

    root_handlers: list[logging.Handler] = []
    console_lvl = (settings.logging_console if settings is not None else None) or level_name
    if enabled and console_lvl.upper() != "NONE":
        ch = logging.StreamHandler()
        ch.setLevel(_level(console_lvl, level))
        ch.setFormatter(processor_formatter)
        root_handlers.append(ch)

    file_lvl = (settings.logging_file or level_name) if settings is not None else "NONE"
    if enabled and settings is not None and file_lvl.upper() != "NONE":
        path = settings.logging_file_path
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        fh = RotatingFileHandler(
            path,
            maxBytes=settings.logging_max_bytes,
            backupCount=settings.logging_backup_count,
        )
        fh.setLevel(_level(file_lvl, level))
        fh.setFormatter(processor_formatter)
        root_handlers.append(fh)

    if not root_handlers:
        root_handlers.append(logging.NullHandler())

    logging.basicConfig(level=level, handlers=root_handlers, force=True)

    # Let uvicorn/asyncio loggers bubble up into our root handlers
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "asyncio"):
        lg = logging.getLogger(name)
        lg.handlers = []
        lg.propagate = True

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def redact_settings(settings: Settings) -> dict:
    """Return a dict of settings safe for logging.

    Tokens, keys and secrets are replaced with "[REDACTED]" when set.
    """
    data = settings.model_dump()
    for k in list(data.keys()):
        if k.endswith("_token") or k.endswith("_secret") or k.endswith("_key"):
            data[k] = "[REDACTED]" if data[k] else None
    return data
