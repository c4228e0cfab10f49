"""Shared base for records stored in the Entity Store.

Attributes are snake_case in Python and camelCase in the stored record
(customerId, statusHistory, ...), matching what the dashboard reads.
"""
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> Dict[str, Any]:
        """Store shape: camelCase keys, absent optionals omitted."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class InputModel(RecordModel):
    """Request bodies: unknown fields are rejected."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


def clean_text(v):
    if v is None:
        return v
    return " ".join(str(v).split())
