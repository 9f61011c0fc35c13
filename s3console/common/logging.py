import json
import logging
from logging.config import dictConfig

# Chatty client libraries; they only follow the configured level at DEBUG.
_LIBRARY_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer")


def setup_logging(level: str = "INFO", log_format: str = "json") -> None:
    library_level = "DEBUG" if level == "DEBUG" else "WARNING"
    loggers = {name: {"level": library_level} for name in _LIBRARY_LOGGERS}
    loggers["s3console.cli"] = {
        "handlers": ["cli_console"],
        "level": level,
        "propagate": False,
    }
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": JsonFormatter,
                },
                "plain": {
                    "format": "%(levelname)s %(name)s: %(message)s",
                },
            },
            "handlers": {
                # stdout carries the progress line
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": log_format,
                },
                "cli_console": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "plain",
                },
            },
            "root": {
                "level": level,
                "handlers": ["console"],
            },
            "loggers": loggers,
        }
    )


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "extra") and isinstance(record.extra, dict):
            payload.update(record.extra)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)
