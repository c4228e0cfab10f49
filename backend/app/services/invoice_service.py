"""Invoice creation, manual or from an extracted upload."""
import logging
import re
from typing import List, Optional, Tuple

from app.core.exceptions import DocumentNotFound, ValidationFailed
from app.schemas.customer import Customer, CustomerCreate
from app.schemas.invoice import Invoice, InvoiceCreate, InvoiceItem
from app.services.customer_service import CUSTOMERS, create_customer, find_customer_by_name
from app.store.entity_store import EntityStore
from ai.advisor_schema import InvoiceExtraction

logger = logging.getLogger(__name__)

INVOICES = "invoices"


def sanitize_customer_name(name: str) -> str:
    """Clean an extracted customer name before it becomes a record.

    - Strip control characters and markup-ish fragments
    - Collapse whitespace
    - Limit length to 100 characters
    """
    if not name:
        raise ValidationFailed("Customer name cannot be empty")

    name = re.sub(r"[\x00-\x1f\x7f]", " ", name)
    name = re.sub(r"</?[a-zA-Z][^>]*>", "", name)
    name = " ".join(name.split())[:100].strip()

    if len(name) < 2:
        raise ValidationFailed("Customer name must be at least 2 characters")
    return name


def invoice_total(items: List[InvoiceItem]) -> float:
    """Sum of item totals. Computed once at creation, not kept in sync afterwards."""
    return round(sum(item.total for item in items), 2)


def _write_invoice(
    store: EntityStore,
    customer_id: str,
    date: str,
    items: List[InvoiceItem],
    invoice_number: Optional[str] = None,
) -> Invoice:
    record = {
        "customerId": customer_id,
        "date": date,
        "items": [item.to_record() for item in items],
        "total": invoice_total(items),
    }
    if invoice_number:
        record["invoiceNumber"] = invoice_number
    invoice_id = store.create(INVOICES, record)
    logger.info(f"Invoice {invoice_id} saved for customer {customer_id} ({len(items)} items)")
    return Invoice.model_validate(store.get(INVOICES, invoice_id))


def create_invoice(store: EntityStore, data: InvoiceCreate) -> Invoice:
    try:
        store.get(CUSTOMERS, data.customer_id)
    except DocumentNotFound:
        raise ValidationFailed(f"Customer {data.customer_id} does not exist")
    items = [item.to_item() for item in data.items]
    return _write_invoice(store, data.customer_id, data.date, items, data.invoice_number)


def get_or_create_customer(store: EntityStore, name: str, aadhaar: Optional[str] = None) -> Tuple[Customer, bool]:
    """Find customer by name (case-insensitive) or create one. Returns (customer, created)."""
    name_clean = sanitize_customer_name(name)
    existing = find_customer_by_name(store, name_clean)
    if existing:
        return existing, False
    created = create_customer(store, CustomerCreate(name=name_clean, aadhaar=aadhaar or ""))
    return created, True


def save_extracted_invoice(store: EntityStore, extraction: InvoiceExtraction) -> Tuple[Invoice, Customer, bool]:
    """Persist a reviewed extraction: find-or-create the customer, then the invoice."""
    customer, created = get_or_create_customer(store, extraction.customer_name, extraction.aadhaar_number)
    items = [
        InvoiceItem(name=line.name, quantity=line.quantity, price=line.price, total=line.total)
        for line in extraction.items
    ]
    invoice = _write_invoice(store, customer.id, extraction.date, items, extraction.invoice_number)
    return invoice, customer, created


def get_invoice(store: EntityStore, invoice_id: str) -> Invoice:
    return Invoice.model_validate(store.get(INVOICES, invoice_id))


def list_invoices(store: EntityStore, customer_id: Optional[str] = None) -> List[Invoice]:
    predicate = None
    if customer_id:
        predicate = lambda r: r.get("customerId") == customer_id  # noqa: E731
    return [Invoice.model_validate(r) for r in store.query(INVOICES, predicate)]
