"""Logging setup: JSON lines in deployed environments, plain text locally"""

import logging
import sys
from pythonjsonlogger import jsonlogger

from app.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Tags every record with level, logger, environment and the request correlation id"""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["environment"] = settings.ENVIRONMENT
        log_record["app_name"] = settings.APP_NAME

        if hasattr(record, "correlation_id"):
            log_record["correlation_id"] = record.correlation_id


DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# SQL echo, access lines and S3 client chatter
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "botocore")


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return CustomJsonFormatter(fmt="%(asctime)s %(level)s %(name)s %(message)s", datefmt=DATE_FORMAT)
    return logging.Formatter(fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt=DATE_FORMAT)


def setup_logging() -> None:
    """Install one stdout handler on the root logger; calling it again replaces it"""
    root_logger = logging.getLogger()
    for existing in [h for h in root_logger.handlers if getattr(h, "_app_handler", False)]:
        root_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(settings.LOG_FORMAT))
    handler._app_handler = True

    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; handlers come from setup_logging"""
    return logging.getLogger(name)
