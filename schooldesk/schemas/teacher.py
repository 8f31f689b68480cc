# schooldesk/schemas/teacher.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List, Literal
from datetime import date, datetime
from uuid import UUID

from schooldesk.schemas.common import strip_required

TeacherStatus = Literal["active", "inactive", "terminated"]


class TeacherCreate(BaseModel):
    employee_id: str = Field(..., max_length=32)
    first_name: str = Field(..., max_length=64)
    middle_name: Optional[str] = Field(None, max_length=64)
    last_name: str = Field(..., max_length=64)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=32)
    gender: Optional[Literal["male", "female"]] = None
    qualification: Optional[str] = Field(None, max_length=128)
    experience_years: int = Field(0, ge=0)
    subjects: List[str] = []
    hire_date: Optional[date] = None

    @field_validator("employee_id")
    @classmethod
    def validate_employee_id(cls, v: str) -> str:
        return strip_required(v, "Employee ID").upper()

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, v: str) -> str:
        return strip_required(v, "Name")


class TeacherUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=64)
    middle_name: Optional[str] = Field(None, max_length=64)
    last_name: Optional[str] = Field(None, max_length=64)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=32)
    qualification: Optional[str] = Field(None, max_length=128)
    experience_years: Optional[int] = Field(None, ge=0)
    subjects: Optional[List[str]] = None
    status: Optional[TeacherStatus] = None


class TeacherOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    employee_id: str
    first_name: str
    middle_name: Optional[str]
    last_name: str
    full_name: str
    email: str
    phone: Optional[str]
    gender: Optional[str]
    qualification: Optional[str]
    experience_years: int
    subjects: List[str]
    hire_date: Optional[date]
    status: str
    created_at: datetime
    updated_at: datetime
