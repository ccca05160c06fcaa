"""Audit trail functionality for the SAML POST identity provider.

This module provides structured audit logging for tracking issued responses
and failed exchanges.
"""

import time
from typing import Any, Dict

from .logger import get_logger

logger = get_logger(__name__)

# Audit event types
EVENT_REQUEST_ABSENT = "REQUEST_ABSENT"
EVENT_BINDING_CREATED = "BINDING_CREATED"
EVENT_RESPONSE_ISSUED = "RESPONSE_ISSUED"
EVENT_RESPONSE_FAILED = "RESPONSE_FAILED"


def log_audit_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log an audit trail event.

    Creates a structured audit log entry. Events are logged at INFO level for
    successful operations and ERROR level for failures.

    Args:
        event_type: Type of operation (e.g., "BINDING_CREATED", "RESPONSE_ISSUED")
        details: Dictionary with event details. Common fields include:
                - status: "success" or "failure"
                - service_id: Registered service identifier
                - correlation_id: InResponseTo of the exchange
                - response_id: ID of the issued response
                - duration: Operation duration in seconds
                - error_message: Error details (if status is failure)

    Example:
        >>> log_audit_event("RESPONSE_ISSUED", {
        ...     "status": "success",
        ...     "service_id": "https://svc.example.org/acs",
        ...     "response_id": "_9f2c...",
        ... })
    """
    details = dict(details)
    details.setdefault("timestamp", time.time())

    message_parts = [f"AUDIT [{event_type}]"]

    field_order = [
        "status",
        "service_id",
        "correlation_id",
        "response_id",
        "duration",
        "error_type",
        "error_message",
    ]

    for field in field_order:
        if field in details:
            value = details[field]
            if field == "duration" and isinstance(value, (int, float)):
                message_parts.append(f"{field}={value:.3f}s")
            else:
                message_parts.append(f"{field}={value}")

    for key, value in details.items():
        if key not in field_order and key != "timestamp":
            message_parts.append(f"{key}={value}")

    audit_message = " | ".join(message_parts)

    if details.get("status") == "failure":
        logger.error(audit_message)
    else:
        logger.info(audit_message)
