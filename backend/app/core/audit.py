"""
Audit logging for document mutations and assistant calls.

One JSON line per event on the "audit" logger, so the stream can be shipped
to centralized logging separately from application logs.

Never logs document payloads beyond the changed field names, and never
logs API keys or uploaded file contents.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Any, Optional, Dict, Iterable

# Separate logger for audit events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for store writes and advisor calls."""

    @staticmethod
    def log_document(
        action: str,  # "create", "update", "delete"
        collection: str,
        doc_id: str,
        version: Optional[int] = None,
        fields: Optional[Iterable[str]] = None,
    ):
        """
        Log a committed write against the Entity Store.

        Usage:
            AuditLog.log_document("create", "customers", "a1b2...", version=1)
            AuditLog.log_document("update", "invoices", "c3d4...", version=4, fields=["items"])
        """
        log_entry: Dict[str, Any] = {
            "timestamp": _now(),
            "event_type": f"{collection}.{action}",
            "resource_id": doc_id,
        }
        if version is not None:
            log_entry["version"] = version
        if fields:
            log_entry["fields"] = sorted(fields)

        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_status_appended(
        invoice_id: str,
        slot: int,
        status: str,
        effective_date: str,
        attempts: int,
    ):
        """Log a status history entry appended to one invoice item."""
        log_entry = {
            "timestamp": _now(),
            "event_type": "invoice_item.status_appended",
            "resource_id": invoice_id,
            "slot": slot,
            "status": status,
            "effective_date": effective_date,
            "attempts": attempts,
        }
        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_item_fields(invoice_id: str, slot: int, fields: Iterable[str], attempts: int):
        log_entry = {
            "timestamp": _now(),
            "event_type": "invoice_item.fields_updated",
            "resource_id": invoice_id,
            "slot": slot,
            "fields": sorted(fields),
            "attempts": attempts,
        }
        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_advisor_call(
        flow: str,  # "smart_assignment", "invoice_extraction"
        success: bool,
        duration_ms: float = 0,
        reason: str = "",
    ):
        """
        Log a call to the external reasoning service.

        Usage:
            AuditLog.log_advisor_call("smart_assignment", True, duration_ms=812.4)
            AuditLog.log_advisor_call("invoice_extraction", False, reason="schema validation failed")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"advisor.{flow}",
            "success": success,
            "duration_ms": round(duration_ms, 1),
        }
        if reason and not success:
            log_entry["reason"] = reason

        if success:
            audit_logger.info(json.dumps(log_entry))
        else:
            audit_logger.warning(json.dumps(log_entry))
