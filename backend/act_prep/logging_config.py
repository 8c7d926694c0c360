"""
Structured JSON logging for the ACT prep backend.

Every log line is one JSON object on stdout with a channel (http, db,
scoring, analytics), the current request ID and any business context the
caller attaches (attempt_id, user_id, session_id, ...).
"""

import logging
import json
import os
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

# Request ID of the HTTP request being served; empty outside a request.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGER_PREFIX = "act_prep"
CHANNELS = ["http", "db", "scoring", "analytics"]


class StructuredJsonFormatter(logging.Formatter):
    """
    Render a LogRecord as a single JSON object.

    Keys: timestamp (UTC, millisecond precision), level, message, channel,
    context (request_id merged with caller context) and extra.
    """

    def format(self, record: logging.LogRecord) -> str:
        channel = getattr(record, "channel", None)
        if not channel:
            channel = record.name.rsplit(".", 1)[-1] if "." in record.name else "app"
        log_entry = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": channel,
            "context": {
                "request_id": request_id_var.get(""),
                **(getattr(record, "context", {}) or {})
            },
            "extra": getattr(record, "extra_data", {}) or {}
        }
        return json.dumps(log_entry, default=str)


def setup_logging():
    """
    Install the JSON formatter on a stdout handler attached to the root
    logger and set the level of every channel logger from LOG_LEVEL.
    """
    level = getattr(logging, LOG_LEVEL, logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredJsonFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        logging.getLogger(f"{LOGGER_PREFIX}.{channel}").setLevel(level)

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    """Return the logger for a channel (http, db, scoring, analytics)."""
    return logging.getLogger(f"{LOGGER_PREFIX}.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None):
    """
    Emit a structured log entry.

    Args:
        logger: Channel logger from get_logger()
        level: Level name (DEBUG, INFO, WARNING, ERROR)
        message: Human-readable message
        context: Business identifiers (attempt_id, user_id, passage_id)
        extra_data: Measurements and other metadata (duration_ms, counts)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.log(
        log_level,
        message,
        extra={
            "context": context or {},
            "extra_data": extra_data or {},
            "channel": logger.name.rsplit(".", 1)[-1]
        }
    )


def generate_request_id() -> str:
    """New UUID4 string for request tracking."""
    return str(uuid.uuid4())
