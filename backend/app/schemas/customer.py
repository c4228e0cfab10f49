from typing import Optional

from pydantic import field_validator

from app.schemas.base import InputModel, RecordModel, clean_text

SEARCHABLE_FIELDS = ("name", "email", "mobile", "aadhaar", "pan")


class Customer(RecordModel):
    id: str
    name: str
    email: str = ""
    mobile: str = ""
    avatar: str = ""
    aadhaar: str = ""
    pan: str = ""


class CustomerCreate(InputModel):
    name: str
    email: str = ""
    mobile: str = ""
    aadhaar: str = ""
    pan: str = ""

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Customer name is required")
        return v

    @field_validator("email", "mobile", "aadhaar", "pan")
    @classmethod
    def strip_optional(cls, v: str) -> str:
        return (v or "").strip()


class CustomerUpdate(InputModel):
    name: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    aadhaar: Optional[str] = None
    pan: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = clean_text(v)
        if not v:
            raise ValueError("Customer name cannot be empty")
        return v
