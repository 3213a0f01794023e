"""structlog setup shared by the API process and the test suite.

Application code logs through ``structlog.get_logger(__name__)`` with
snake_case event names and keyword context (session_id, analyzer, ...).
Stdlib loggers from uvicorn, SQLAlchemy and the Anthropic SDK are routed
through the same processor chain so every line has one shape: JSON in
production, colored console output when ``debug`` is on.
"""

import logging
import logging.config

import structlog
from asgi_correlation_id.context import correlation_id

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = {
    "uvicorn.access": "WARNING",
    "httpx": "WARNING",
    "anthropic": "WARNING",
    "aiosqlite": "WARNING",
}


def add_correlation_id(logger, method, event_dict):
    """Copy the request's X-Request-ID into the event as ``correlation_id``."""
    cid = correlation_id.get(None)
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_correlation_id,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def _stdlib_config(log_level: str, renderer, pre_chain: list, sql_echo: bool) -> dict:
    loggers = {name: {"level": level} for name, level in QUIET_LOGGERS.items()}
    loggers["sqlalchemy.engine"] = {"level": "INFO" if sql_echo else "WARNING"}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structlog": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": pre_chain,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "structlog",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["stdout"], "level": log_level},
        "loggers": loggers,
    }


def configure_structlog(log_level: str = "INFO", json_logs: bool = True, sql_echo: bool = False) -> None:
    """Install the processor chain; main.py calls this before importing routes.

    Args:
        log_level: Root log level ("DEBUG", "INFO", "WARNING", "ERROR")
        json_logs: JSONRenderer when True, ConsoleRenderer otherwise
        sql_echo: Let SQLAlchemy statement logging through at INFO
    """
    pre_chain = _shared_processors()
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    logging.config.dictConfig(_stdlib_config(log_level, renderer, pre_chain, sql_echo))

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
