"""
Invoices: capture (manual or extracted from an upload) and per-item edits.

Item edits address an item by its slot (array index) and always go through
the status protocol, so status/processedDate never drift from statusHistory.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_advisor_client, get_store
from app.core.exceptions import DocumentNotFound
from app.schemas.base import RecordModel
from app.schemas.customer import Customer
from app.schemas.invoice import (
    Invoice,
    InvoiceCreate,
    InvoiceItem,
    ItemFieldsUpdate,
    StatusUpdateRequest,
)
from app.services import invoice_service, status_service
from app.store.entity_store import EntityStore
from ai.advisor_schema import InvoiceExtraction, InvoiceExtractionInput
from ai.groq_client import GroqClient
from ai.invoice_extraction import extract_invoice_data

logger = logging.getLogger(__name__)
router = APIRouter()


class SavedInvoice(RecordModel):
    invoice: Invoice
    customer: Customer
    customer_created: bool


@router.get("", response_model=List[Invoice])
def list_invoices(
    customer_id: Optional[str] = Query(None, alias="customerId"),
    store: EntityStore = Depends(get_store),
):
    return invoice_service.list_invoices(store, customer_id=customer_id)


@router.post("", response_model=Invoice, status_code=status.HTTP_201_CREATED)
def create_invoice(data: InvoiceCreate, store: EntityStore = Depends(get_store)):
    """Manual invoice. Total is the sum of item totals at this moment."""
    return invoice_service.create_invoice(store, data)


@router.post("/extract", response_model=InvoiceExtraction)
def extract_invoice(
    data: InvoiceExtractionInput,
    client: GroqClient = Depends(get_advisor_client),
):
    """Read invoice fields from an uploaded image. Nothing is saved until /from-extraction."""
    return extract_invoice_data(data.invoice_data_uri, client=client)


@router.post("/from-extraction", response_model=SavedInvoice, status_code=status.HTTP_201_CREATED)
def save_extracted_invoice(data: InvoiceExtraction, store: EntityStore = Depends(get_store)):
    """Save reviewed extraction results; the customer is matched by name or created."""
    invoice, customer, created = invoice_service.save_extracted_invoice(store, data)
    return SavedInvoice(invoice=invoice, customer=customer, customer_created=created)


@router.get("/{invoice_id}", response_model=Invoice)
def get_invoice(invoice_id: str, store: EntityStore = Depends(get_store)):
    return invoice_service.get_invoice(store, invoice_id)


@router.post("/{invoice_id}/items/{slot}/status", response_model=InvoiceItem)
def add_item_status(
    invoice_id: str,
    slot: int,
    data: StatusUpdateRequest,
    store: EntityStore = Depends(get_store),
):
    """Append a status update to one item's history."""
    invoice = invoice_service.get_invoice(store, invoice_id)
    if slot < 0 or slot >= len(invoice.items):
        raise DocumentNotFound("invoices", invoice_id, f"Invoice {invoice_id} has no item at slot {slot}")
    status_service.check_effective_date(invoice.items[slot], data.date)

    return status_service.append_status(
        store, invoice_id, slot, data.status, data.date, notes=data.notes
    )


@router.patch("/{invoice_id}/items/{slot}", response_model=InvoiceItem)
def update_item(
    invoice_id: str,
    slot: int,
    data: ItemFieldsUpdate,
    store: EntityStore = Depends(get_store),
):
    """Edit non-history fields of one item (e.g. acknowledgment number)."""
    return status_service.update_item_fields(store, invoice_id, slot, data.to_fields())
