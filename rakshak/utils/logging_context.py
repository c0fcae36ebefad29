"""
Logging Context - Per-request tracing with a request ID

Every log line emitted while a request is being handled carries its
request_id, so a reading can be followed from validation to the SMS send.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"

_request_id: ContextVar[str] = ContextVar("request_id", default="")


class RequestIdFilter(logging.Filter):
    """Filter that adds request_id to every LogRecord."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get() or "N/A"
        return True


class LoggingContext:
    """Accessors for the per-request logging context."""

    @staticmethod
    def set_request_id(request_id: Optional[str] = None) -> str:
        """Define request_id, generating a new one if not provided."""
        if not request_id:
            request_id = str(uuid.uuid4())
        _request_id.set(request_id)
        return request_id

    @staticmethod
    def get_request_id() -> str:
        return _request_id.get()

    @staticmethod
    def clear():
        _request_id.set("")


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging with the request-aware format."""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[handler],
        force=True,
    )
