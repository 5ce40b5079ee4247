"""JSON logging for cluster PKI bootstrap.

Every artifact event carries structured ``artifact`` and ``action`` fields so a
bootstrap log can be filtered by path without parsing messages.
"""

import logging
import os
from pathlib import Path

from pythonjsonlogger import jsonlogger

LOG_LEVEL_ENV = "CLUSTER_PKI_LOG_LEVEL"

BOOTSTRAP_FIELDS = frozenset(
    {
        "timestamp",
        "level",
        "message",
        "exc_info",
        "funcName",
        "lineno",
        "artifact",
        "action",
        "stage",
    }
)


class BootstrapJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter emitting only BOOTSTRAP_FIELDS."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        if "levelname" in log_record:
            log_record["level"] = log_record.pop("levelname")

        for key in [key for key in log_record if key not in BOOTSTRAP_FIELDS]:
            log_record.pop(key)


def log_artifact(action: str, path: Path, message: str, *args: object) -> None:
    """Log one artifact event (created, reusing, issued) with its path attached."""
    LOGGER.info(message, *args, extra={"artifact": str(path), "action": action}, stacklevel=2)


def _resolve_level() -> int:
    name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _setup_logger() -> logging.Logger:
    """Initialize the package logger.

    Returns:
        Logger writing JSON lines to stderr at the level named by CLUSTER_PKI_LOG_LEVEL
    """
    logger = logging.getLogger("cluster_pki")

    # Module reloads must not stack handlers
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(
        BootstrapJsonFormatter(
            fmt="%(timestamp)s %(levelname)s %(funcName)s %(lineno)d %(message)s",
            timestamp=True,
        )
    )

    logger.setLevel(_resolve_level())
    logger.addHandler(handler)
    logger.propagate = False

    return logger


LOGGER = _setup_logger()
