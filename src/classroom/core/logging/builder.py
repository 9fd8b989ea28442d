"""
Logging builder: build a dictConfig mapping from Settings and apply it.

    setup_logging(settings)

is called once by the application factory. Handlers:
  - console: always
  - file + error_file: when LOG_TO_STDOUT is false and LOG_DIR is set
  - error_console: otherwise
"""

import logging
import logging.config
from pathlib import Path

from classroom.config.settings import Settings

from .filters import RedactFilter, RequestIdFilter
from .formatters import SERVICE_NAME, ColorFormatter, JsonFormatter
from .handlers import (
    get_console_handler,
    get_error_console_handler,
    get_error_file_handler,
    get_file_handler,
)


def _writes_files(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping:
      - formatters: "standard" (colored or plain text) and "json"
      - filters: "request_id", "redact"
      - handlers: see module docstring
      - loggers: root, uvicorn.error, uvicorn.access, sqlalchemy.engine
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.ENV == "development" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": SERVICE_NAME,
        },
    }

    filters = {
        "request_id": {"()": RequestIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}
    if _writes_files(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    root_handlers = list(handlers)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": root_handlers,
                "level": settings.LOG_LEVEL,
            },
            "uvicorn.error": {
                "level": settings.LOG_LEVEL,
                "handlers": root_handlers,
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            # SQL statements may carry user data
            "sqlalchemy.engine": {
                "level": "INFO" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Apply the logging configuration. Safe to call more than once (e.g. from tests);
    each call replaces the previous handlers.
    """
    if _writes_files(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    # Records logged straight on the root logger still get a request_id
    root = logging.getLogger()
    if not any(isinstance(f, RequestIdFilter) for f in root.filters):
        root.addFilter(RequestIdFilter())

    logging.getLogger(__name__).debug(
        "logging.configured",
        extra={"log_level": settings.LOG_LEVEL, "log_format": settings.LOG_FORMAT, "log_files": _writes_files(settings)},
    )
