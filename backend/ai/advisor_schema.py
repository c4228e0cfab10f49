"""Request/response schemas for the two advisor flows.

Requests are strict (unknown fields rejected). Responses tolerate extra keys
the model adds, but every required field must be present and well-typed or
the whole response is rejected.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.task import TaskPriority


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ------------------------------------------------------------------------------
# Smart task assignment
# ------------------------------------------------------------------------------

class SmartTaskInput(_CamelModel):
    """What the reasoning service sees. Skills are not part of the snapshot."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    task_description: str
    priority: TaskPriority
    due_date: str
    staff_workload: Dict[str, int]
    staff_availability: Dict[str, bool]

    @field_validator("task_description")
    @classmethod
    def description_required(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Task description must be at least 10 characters")
        return v


class SmartTaskOutput(_CamelModel):
    suggested_staff: str
    reasoning: str

    @field_validator("suggested_staff", "reasoning")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


# ------------------------------------------------------------------------------
# Invoice extraction
# ------------------------------------------------------------------------------

class InvoiceExtractionInput(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    invoice_data_uri: str


class ExtractedLineItem(_CamelModel):
    name: str
    quantity: float
    price: float
    total: float


class InvoiceExtraction(_CamelModel):
    invoice_number: Optional[str] = None
    customer_name: str
    date: str
    aadhaar_number: Optional[str] = None
    items: List[ExtractedLineItem] = Field(default_factory=list)

    @field_validator("invoice_number", "aadhaar_number", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        # Models fill missing fields with "" or null interchangeably
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return str(v).strip()

    @field_validator("customer_name", "date")
    @classmethod
    def required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("items", mode="before")
    @classmethod
    def null_items(cls, v):
        return [] if v is None else v
