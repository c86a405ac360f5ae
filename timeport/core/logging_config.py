"""
Logging setup shared by the import service, the CLI and the tests.

Log lines go to stderr in a single pipe-separated format. Timestamps are
rendered in UTC by default so that lines from workers in different zones
line up with the UTC timestamps written to time entries.
"""
from __future__ import annotations

import logging
import time
from logging.config import dictConfig
from typing import Optional


_is_configured = False

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class UTCFormatter(logging.Formatter):
    converter = time.gmtime


def configure_logging(
    level: Optional[str] = None,
    *,
    log_timezone: str = "UTC",
    echo_sql: bool = False,
) -> None:
    """
    Configure the root logger once per process.

    Args:
        level: Log level name for timeport loggers (default "INFO").
        log_timezone: "UTC" or "local" rendering for timestamps.
        echo_sql: Surface SQLAlchemy statement logging at INFO.
    """
    global _is_configured

    if _is_configured:
        return

    log_level = (level or "INFO").upper()
    formatter_class = (
        "timeport.core.logging_config.UTCFormatter"
        if log_timezone.upper() == "UTC"
        else "logging.Formatter"
    )

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "pipeline": {
                    "class": formatter_class,
                    "format": LOG_FORMAT,
                    "datefmt": LOG_DATE_FORMAT,
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "pipeline",
                    "stream": "ext://sys.stderr",
                }
            },
            "loggers": {
                "timeport": {"level": log_level},
                "sqlalchemy.engine": {"level": "INFO" if echo_sql else "WARNING"},
            },
            "root": {
                "handlers": ["stderr"],
                "level": "WARNING",
            },
        }
    )

    _is_configured = True
