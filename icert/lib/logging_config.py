"""JSON logging configuration for icert scripts."""

import logging

from pythonjsonlogger import jsonlogger

LOGGER_NAME = "icert"

# Fields kept in every JSON record; "stage" and "path" are set for issuance errors.
ALLOWED_FIELDS = frozenset(
    {
        "timestamp",
        "level",
        "message",
        "exc_info",
        "funcName",
        "lineno",
        "stage",
        "path",
    }
)


class IcertJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter emitting a short, fixed set of fields.

    Drops module, process, thread and logger name noise; renames levelname to
    level.
    """

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        if "levelname" in log_record:
            log_record["level"] = log_record.pop("levelname")

        for key in [key for key in log_record if key not in ALLOWED_FIELDS]:
            log_record.pop(key)


def _setup_logger() -> logging.Logger:
    """Initialize and configure the package logger once.

    Returns:
        "icert" logger writing JSON lines to stderr
    """
    logger = logging.getLogger(LOGGER_NAME)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(
        IcertJsonFormatter(
            fmt="%(timestamp)s %(levelname)s %(funcName)s %(lineno)d %(message)s",
            timestamp=True,
        )
    )

    logger.setLevel(logging.INFO)
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def set_log_level(level: str) -> None:
    """Set the package log level by name (e.g. "DEBUG", "warning")."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level}")
    LOGGER.setLevel(numeric)


# Singleton logger instance - import this in scripts
LOGGER = _setup_logger()
