"""Structured JSON logging with request correlation"""

import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

# Set per request by the API middleware; "-" outside a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


class RequestIDFilter(logging.Filter):
    """Stamp every record with the current request id unless the caller passed one"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get()
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and service name"""

    def __init__(self, *args, service: str = "finwell-gateway", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service


def setup_logging(level: str = "INFO", service: str = "finwell-gateway") -> None:
    """Route the root logger to stdout as JSON; client libraries log at WARNING"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(request_id)s %(message)s", service=service))
    handler.addFilter(RequestIDFilter())
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_generation(
    user_id: str,
    artifact: str,
    source: str,
    count: int,
    persisted: bool,
    duration_ms: float,
) -> None:
    """One event per regenerated batch: which strategy won and whether it was stored"""
    logging.getLogger("finwell_gateway.generation").info(
        "Generation completed",
        extra={
            "user_id": user_id,
            "step": "generation_complete",
            "artifact": artifact,
            "source": source,
            "count": count,
            "persisted": persisted,
            "duration_ms": round(duration_ms, 2),
        },
    )


def log_transition(user_id: str, artifact: str, item_id: str, transition: str, persisted: bool) -> None:
    """Dismiss / resolve audit event"""
    logging.getLogger("finwell_gateway.transitions").info(
        f"{artifact} {transition}",
        extra={
            "user_id": user_id,
            "artifact": artifact,
            "item_id": item_id,
            "transition": transition,
            "persisted": persisted,
        },
    )
