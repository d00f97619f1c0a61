"""
Logging Setup.

structlog on top of the standard library's handlers. Every module gets its
logger from get_logger(); setup_logging() is called once by the app
lifespan and by run.py. Defaults come from config/settings/logging.yaml
(validated as LoggingSchema); keyword arguments override them.

Call sites pass structured fields through `extra`:

    logger = get_logger(__name__)
    logger.info("Image stored", extra={"reference": ref, "size": 1024})

The `extra` mapping is merged into the top level of the record, so the JSON
line carries `reference` and `size` next to `event`, `level`, `logger`,
`timestamp`, `func_name` and `lineno`. Request-scoped fields bound by the
middleware and the auth guard (`request_id`, `frontend`, `method`, `path`,
`user_id`) are merged from structlog contextvars.

Records go to stdout and, when enabled, to a rotating JSONL file
(logs/system.jsonl by default).
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from notes_app.core.config import find_project_root, get_app_config
from notes_app.core.config_schema import FileHandlerSchema

_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore")


def merge_extra(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Lift the `extra` mapping into the record. Explicit keys win on clashes."""
    extra = event_dict.pop("extra", None)
    if isinstance(extra, dict):
        for key, value in extra.items():
            event_dict.setdefault(key, value)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        merge_extra,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _formatter(renderer: Processor, pre_chain: list[Processor]) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=pre_chain,
    )


def _file_handler(file_config: FileHandlerSchema, formatter: logging.Formatter) -> logging.Handler:
    log_path = Path(file_config.path)
    if not log_path.is_absolute():
        log_path = find_project_root() / log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=file_config.max_bytes,
        backupCount=file_config.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the root logger.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: 'json' or 'console' for stdout; the file is always JSON
        enable_console: Write records to stdout
        enable_file_logging: Write records to the JSONL file
    """
    config = get_app_config().logging
    handlers = config.handlers

    level = (level or config.level).upper()
    format_type = format_type or config.format
    if enable_console is None:
        enable_console = handlers.console.enabled
    if enable_file_logging is None:
        enable_file_logging = handlers.file.enabled

    pre_chain = _shared_processors()
    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = _formatter(structlog.processors.JSONRenderer(), pre_chain)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level))
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if enable_console:
        console = logging.StreamHandler(sys.stdout)
        if format_type == "console":
            console.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=True), pre_chain))
        else:
            console.setFormatter(json_formatter)
        root.addHandler(console)

    if enable_file_logging:
        root.addHandler(_file_handler(handlers.file, json_formatter))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """Logger for a module; pass __name__."""
    return structlog.get_logger(name)
