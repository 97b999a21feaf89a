"""
Structured logging for the blog posts platform.

Every service logs through structlog on top of the stdlib ``logging`` module.
Events carry the service name, the request id of the HTTP request being
served and, once a bearer token has been resolved, the id of the
authenticated user. Credentials never reach the log output.
"""

import sys
import structlog
import logging
import uuid
from typing import Any, Dict, Optional
from contextvars import ContextVar

# Context variables for correlation IDs
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)

REDACTED = "[redacted]"
SENSITIVE_FIELDS = frozenset({"password", "password_hash", "token", "access_token", "authorization"})

MAX_REQUEST_ID_LENGTH = 128

_service_name: Optional[str] = None


def configure_logging(service_name: str, log_level: str = "info", json_logs: bool = True) -> None:
    """Configure structured logging for a service.

    ``json_logs=False`` switches to the human-readable console renderer used
    for local development.
    """
    global _service_name
    _service_name = service_name

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_service_context,
            add_correlation_context,
            redact_sensitive_fields,
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )


def add_service_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Tag events with the name of the service that emitted them."""
    if _service_name:
        event_dict.setdefault("service", _service_name)
    return event_dict


def add_correlation_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add correlation context to log events."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id

    user_id = user_id_var.get()
    if user_id:
        event_dict["user_id"] = user_id

    return event_dict


def redact_sensitive_fields(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Mask credential values passed as event fields."""
    for field in SENSITIVE_FIELDS.intersection(event_dict):
        event_dict[field] = REDACTED
    return event_dict


def set_request_id(request_id: Optional[str] = None) -> str:
    """Adopt the caller's request id, or mint one when none was sent."""
    request_id = (request_id or "").strip()[:MAX_REQUEST_ID_LENGTH]
    if not request_id:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def set_user_context(user_id: Optional[Any] = None):
    """Attach the authenticated user to subsequent log events."""
    if user_id is not None:
        user_id_var.set(str(user_id))


def clear_context():
    request_id_var.set(None)
    user_id_var.set(None)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
