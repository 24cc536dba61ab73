"""
Audit logging for security-critical operations.

Logs authentication, stock and invoice changes, denied access and API
calls as JSON lines on the ``audit`` logger.

Passwords and tokens are never written to these records.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Separate logger for audit events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for security-critical events."""

    @staticmethod
    def log_authentication(
        action: str,  # "login", "failed_login"
        email: str,
        ip_address: str,
        success: bool,
        reason: str = "",
    ):
        """
        Log authentication events.

        Usage:
            AuditLog.log_authentication("login", "owner@shop.in", "127.0.0.1", True)
            AuditLog.log_authentication("failed_login", "owner@shop.in", "127.0.0.1", False, reason="Invalid password")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"auth.{action}",
            "email": email,
            "ip_address": ip_address,
            "success": success,
        }

        if reason and not success:
            log_entry["reason"] = reason

        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_action(
        action: str,  # "create", "update", "delete"
        resource_type: str,  # "item", "invoice"
        resource_id: int,
        user_id: int,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log changes to stock and invoices.

        Usage:
            AuditLog.log_action("create", "invoice", 12, principal.user_id, changes={"invoice_no": "MPK/25-26/00012"})
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"{resource_type}.{action}",
            "user_id": user_id,
            "resource_id": resource_id,
        }

        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_access_denied(
        action: str,
        resource_type: str,
        resource_id: Any,
        user_id: int,
        reason: str,
    ):
        """
        Log denied access attempts, e.g. a token for one shop used on
        another shop's user id.
        """
        log_entry = {
            "timestamp": _now(),
            "event_severity": "WARNING",
            "event_type": "access_denied",
            "action": action,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "user_id": user_id,
            "reason": reason,
        }

        audit_logger.warning(json.dumps(log_entry, default=str))

    @staticmethod
    def log_api_call(
        endpoint: str,
        method: str,
        ip_address: str = "",
        status_code: int = 200,
        duration_ms: float = 0,
    ):
        log_entry = {
            "timestamp": _now(),
            "event_type": "api.call",
            "endpoint": endpoint,
            "method": method,
            "ip_address": ip_address,
            "status_code": status_code,
            "duration_ms": duration_ms,
        }

        audit_logger.info(json.dumps(log_entry))
