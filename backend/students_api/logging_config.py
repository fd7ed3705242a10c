"""
Structured JSON logging for the Students API.

Every record is written to stdout as one JSON object. The channel is the
last segment of the logger name (`students_api.http` -> `http`), and the
context always carries the ID of the request being served plus the student
the entry is about, when there is one.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

# Set by the request middleware for the duration of each HTTP request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CHANNELS = ("http", "db")


class StructuredJsonFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        context = {"request_id": request_id_var.get()}
        student_id = getattr(record, "student_id", None)
        if student_id is not None:
            context["student_id"] = str(student_id)
        context.update(getattr(record, "context", None) or {})

        created = datetime.fromtimestamp(record.created, timezone.utc)
        entry = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "channel": record.name.rsplit(".", 1)[-1],
            "message": record.getMessage(),
            "context": context,
            "extra": getattr(record, "extra_data", None) or {},
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO") -> logging.Logger:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        get_logger(channel).setLevel(log_level)
    return root_logger


def get_logger(channel: str) -> logging.Logger:
    return logging.getLogger(f"students_api.{channel}")


def log_event(logger: logging.Logger, level: str, message: str, student_id=None,
              context: dict = None, extra_data: dict = None):
    """
    Log `message` on a channel logger.

    `student_id` names the record the event concerns; `context` adds other
    identifying fields and `extra_data` free-form metadata (timings, status).
    """
    logger.log(
        getattr(logging, level.upper(), logging.INFO),
        message,
        extra={"student_id": student_id, "context": context, "extra_data": extra_data},
    )
