from typing import List, Optional

from pydantic import Field, field_validator

from app.schemas.base import InputModel, RecordModel, clean_text


class Employee(RecordModel):
    id: str
    name: str
    email: str = ""
    role: str = ""
    mobile: str = ""
    avatar: str = ""
    # Stored for display only; never sent to the assignment advisor
    skills: List[str] = Field(default_factory=list)
    workload: int = 0
    availability: bool = True


class EmployeeCreate(InputModel):
    name: str
    mobile: str = ""
    email: str = ""
    role: str = ""
    skills: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Employee name is required")
        return v


class EmployeeUpdate(InputModel):
    name: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    skills: Optional[List[str]] = None
    availability: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = clean_text(v)
        if not v:
            raise ValueError("Employee name cannot be empty")
        return v
