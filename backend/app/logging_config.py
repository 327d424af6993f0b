"""
Logging Configuration
Console and rotating-file logging for the API. Every handler passes records
through RedactSecretsFilter, so passwords, bcrypt hashes, bearer tokens and
the signing key never reach a log line.
"""

import os
import re
import sys
import logging
import logging.config
from pathlib import Path
from typing import Optional

from app.config import settings

REDACTED = "[REDACTED]"

SECRET_PATTERNS = [
    # Authorization: Bearer <jwt>
    (re.compile(r"(Bearer\s+)[\w\-.=]+", re.IGNORECASE), r"\1" + REDACTED),
    # password=..., "hashedPassword": "...", access_token=...
    (
        re.compile(
            r"""(\b(?:password|hashed_?password|secret_?key|access_?token)["']?\s*[:=]\s*["']?)[^\s"',}]+""",
            re.IGNORECASE,
        ),
        r"\1" + REDACTED,
    ),
    # JSON {"token": "..."}
    (re.compile(r"""("token"\s*:\s*")[^"]+"""), r"\1" + REDACTED),
    (re.compile(r"\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}"), REDACTED),
]


def redact(message: str, secret_key: Optional[str] = None) -> str:
    if secret_key:
        message = message.replace(secret_key, REDACTED)
    for pattern, replacement in SECRET_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class RedactSecretsFilter(logging.Filter):
    """Rewrites the rendered message with credentials masked. Never drops a record."""

    def __init__(self, secret_key: Optional[str] = None):
        super().__init__()
        self.secret_key = secret_key

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message, self.secret_key)
        if cleaned != message:
            record.msg = cleaned
            record.args = ()
        if record.exc_info and not record.exc_text:
            record.exc_text = redact(logging.Formatter().formatException(record.exc_info), self.secret_key)
        return True


def build_logging_config(log_file_path: str, log_level: str) -> dict:
    handlers = ["console", "file"]

    def logger(level: str) -> dict:
        return {"handlers": handlers, "level": level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "redact_secrets": {
                "()": RedactSecretsFilter,
                "secret_key": settings.secret_key,
            },
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "default",
                "filters": ["redact_secrets"],
                "level": log_level,
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": log_file_path,
                "maxBytes": 10 * 1024 * 1024,  # 10 MB
                "backupCount": 5,
                "formatter": "default",
                "filters": ["redact_secrets"],
                "level": log_level,
                "encoding": "utf8",
            },
        },
        "loggers": {
            "": {"handlers": handlers, "level": log_level},
            "uvicorn": logger("INFO"),
            "uvicorn.error": logger("INFO"),
            "uvicorn.access": logger("INFO"),
            "app": logger(log_level),
        },
    }


def setup_logging(log_dir: str = settings.log_dir, log_level: str = settings.log_level) -> str:
    """
    Configure logging for the application.

    Args:
        log_dir: Directory for app.log and its rotated backups
        log_level: Level for the root and ``app`` loggers

    Returns:
        Path of the active log file
    """
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_file_path = os.path.join(log_dir, "app.log")

    logging.config.dictConfig(build_logging_config(log_file_path, log_level.upper()))

    logging.getLogger("app").info(f"Logging initialized. Writing logs to {log_file_path}")
    return log_file_path
