"""
Status reconciliation for invoice items.

Appending a status is a read-modify-write on the whole invoice document:
read the invoice, rebuild its items array with only the targeted slot
replaced, merge-write the array back. The write is a compare-and-set on the
version that was read; when another writer got there first, the loop re-reads
and rebuilds so a concurrent edit to a sibling item is never discarded.

Invariant kept by every write here: an item's top-level status and
processedDate equal the status and date of the last statusHistory entry.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from app.core.audit import AuditLog
from app.core.config import settings
from app.core.exceptions import DocumentNotFound, ValidationFailed, VersionConflict
from app.schemas.invoice import (
    InvoiceItem,
    ItemStatus,
    StatusHistory,
    parse_iso_date,
)
from app.store.entity_store import EntityStore

logger = logging.getLogger(__name__)

INVOICES = "invoices"

# Fields written only by append_status
MIRRORED_FIELDS = ("status", "processedDate", "statusHistory")
EDITABLE_ITEM_FIELDS = ("name", "quantity", "price", "total", "acknowledgmentNumber")

ItemRewrite = Callable[[Dict[str, Any]], Dict[str, Any]]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _rewrite_slot(store: EntityStore, invoice_id: str, slot: int, rewrite: ItemRewrite) -> tuple:
    """
    Replace items[slot] with rewrite(items[slot]) under optimistic concurrency.

    Returns (new_item_record, attempts). Raises DocumentNotFound when the
    invoice or the slot is absent at read time (nothing is written), and
    VersionConflict when every attempt lost the race.
    """
    max_attempts = max(1, settings.STATUS_WRITE_MAX_ATTEMPTS)
    attempt = 0
    while True:
        attempt += 1
        snapshot = store.get_snapshot(INVOICES, invoice_id)
        items: List[Dict[str, Any]] = list(snapshot.data.get("items") or [])
        if slot < 0 or slot >= len(items):
            raise DocumentNotFound(
                INVOICES, invoice_id, f"Invoice {invoice_id} has no item at slot {slot}"
            )

        updated = rewrite(dict(items[slot]))
        items[slot] = updated
        try:
            store.update(
                INVOICES, invoice_id, {"items": items},
                merge=True, expected_version=snapshot.version,
            )
            return updated, attempt
        except VersionConflict:
            if attempt >= max_attempts:
                logger.warning(
                    f"Giving up on invoice {invoice_id} slot {slot} after {attempt} conflicting writes"
                )
                raise
            logger.info(f"Invoice {invoice_id} changed underneath us, retrying ({attempt}/{max_attempts})")


def append_status(
    store: EntityStore,
    invoice_id: str,
    slot: int,
    status: ItemStatus,
    effective_date: str,
    updated_at: Optional[str] = None,
    notes: Optional[str] = None,
) -> InvoiceItem:
    """
    Append a status history entry to items[slot] and update its mirrors.

    Ordering of effective dates is not re-validated here; callers apply
    check_effective_date() when the date is picked.
    """
    try:
        entry = StatusHistory(
            status=status,
            date=effective_date,
            updated_at=updated_at or utc_now_iso(),
            notes=notes,
        ).to_record()
    except ValidationError as e:
        raise ValidationFailed(f"Invalid status update: {e.errors()[0]['msg']}") from e

    def rewrite(item: Dict[str, Any]) -> Dict[str, Any]:
        history = list(item.get("statusHistory") or [])
        history.append(entry)
        return {
            **item,
            "statusHistory": history,
            "status": entry["status"],
            "processedDate": entry["date"],
        }

    record, attempts = _rewrite_slot(store, invoice_id, slot, rewrite)
    AuditLog.log_status_appended(invoice_id, slot, entry["status"], entry["date"], attempts)
    return InvoiceItem.model_validate(record)


def update_item_fields(
    store: EntityStore,
    invoice_id: str,
    slot: int,
    fields: Dict[str, Any],
) -> InvoiceItem:
    """Merge non-history fields (e.g. acknowledgmentNumber) into items[slot]."""
    refused = sorted(set(fields) & set(MIRRORED_FIELDS))
    if refused:
        raise ValidationFailed(
            f"{', '.join(refused)} can only change through a status update"
        )
    unknown = sorted(set(fields) - set(EDITABLE_ITEM_FIELDS))
    if unknown:
        raise ValidationFailed(f"Unknown item fields: {', '.join(unknown)}")
    if not fields:
        raise ValidationFailed("Nothing to update")

    def rewrite(item: Dict[str, Any]) -> Dict[str, Any]:
        updated = {**item, **fields}
        try:
            InvoiceItem.model_validate(updated)
        except ValidationError as e:
            raise ValidationFailed(f"Invalid item fields: {e.errors()[0]['msg']}") from e
        return updated

    record, attempts = _rewrite_slot(store, invoice_id, slot, rewrite)
    AuditLog.log_item_fields(invoice_id, slot, fields.keys(), attempts)
    return InvoiceItem.model_validate(record)


def check_effective_date(item: InvoiceItem, effective_date: str, today: Optional[date] = None) -> None:
    """
    Date-picker rule for a new status: not in the future, and not earlier
    than the item's last recorded status date (same day is allowed).
    """
    today = today or datetime.now(timezone.utc).date()
    try:
        picked = parse_iso_date(effective_date)
    except ValueError as e:
        raise ValidationFailed(str(e)) from e
    if picked > today:
        raise ValidationFailed("Status date cannot be in the future")
    last = item.last_history()
    if last is not None and picked < parse_iso_date(last.date):
        raise ValidationFailed(
            f"Status date must be on or after the last update ({parse_iso_date(last.date).isoformat()})"
        )


def current_status(item: InvoiceItem) -> tuple:
    """(status, processedDate) for display; legacy items without mirrors fall back to history."""
    last = item.last_history()
    status = item.status or (last.status if last else None)
    processed = item.processed_date or (last.date if last else None)
    return status, processed
