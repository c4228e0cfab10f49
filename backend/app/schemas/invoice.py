"""
Invoice records and their nested line items.

An Invoice owns its ordered items; the array index of an item is its slot,
the address the status protocol uses. Each item carries an append-only
statusHistory plus top-level status/processedDate fields that mirror the
last history entry. Only app.services.status_service writes those three.
"""
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from app.schemas.base import InputModel, RecordModel, clean_text


class ItemStatus(str, Enum):
    UNDER_PROCESS = "Under Process"
    COMPLETED = "Completed"
    CANCELLED_BY_CUSTOMER = "Cancelled by Customer"


def parse_iso_date(value: str) -> date:
    """Calendar date of an ISO-8601 date or timestamp ("2024-01-10", "2024-01-10T12:00:00Z")."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if "T" in text or " " in text:
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"'{value}' is not an ISO-8601 date")


class StatusHistory(RecordModel):
    status: ItemStatus
    date: str
    updated_at: str
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def date_is_iso(cls, v: str) -> str:
        parse_iso_date(v)
        return v


class InvoiceItem(RecordModel):
    name: str
    quantity: float
    price: float
    total: float
    acknowledgment_number: Optional[str] = None
    processed_date: Optional[str] = None
    status: Optional[ItemStatus] = None
    status_history: Optional[List[StatusHistory]] = None

    def last_history(self) -> Optional[StatusHistory]:
        if not self.status_history:
            return None
        return self.status_history[-1]


class Invoice(RecordModel):
    id: str
    invoice_number: Optional[str] = None
    customer_id: str
    date: str
    items: List[InvoiceItem] = Field(default_factory=list)
    total: float = 0


class InvoiceItemInput(InputModel):
    name: str
    quantity: float = 1
    price: float = 0
    total: Optional[float] = None

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Item name is required")
        return v

    @field_validator("quantity", "price")
    @classmethod
    def not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Quantity and price cannot be negative")
        return v

    @model_validator(mode="after")
    def fill_total(self):
        if self.total is None:
            self.total = round(self.quantity * self.price, 2)
        return self

    def to_item(self) -> InvoiceItem:
        return InvoiceItem(name=self.name, quantity=self.quantity, price=self.price, total=self.total)


class InvoiceCreate(InputModel):
    invoice_number: Optional[str] = None
    customer_id: str
    date: str
    items: List[InvoiceItemInput] = Field(default_factory=list)

    @field_validator("customer_id", "date")
    @classmethod
    def required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Field is required")
        return v


class StatusUpdateRequest(InputModel):
    status: ItemStatus
    date: str
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def date_is_iso(cls, v: str) -> str:
        parse_iso_date(v)
        return v


class ItemFieldsUpdate(InputModel):
    """Non-history item fields. status, processedDate and statusHistory belong to the status protocol."""

    name: Optional[str] = None
    quantity: Optional[float] = None
    price: Optional[float] = None
    total: Optional[float] = None
    acknowledgment_number: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Item name cannot be empty")
        return v

    @field_validator("quantity", "price", "total")
    @classmethod
    def not_negative(cls, v: Optional[float]) -> float:
        if v is None:
            raise ValueError("Quantity, price and total cannot be cleared")
        if v < 0:
            raise ValueError("Quantity, price and total cannot be negative")
        return v

    def to_fields(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


class ServiceLine(InvoiceItem):
    """An invoice item tagged with where it lives, for the per-customer services view."""

    invoice_id: str
    invoice_number: Optional[str] = None
    original_index: int
