# schooldesk/schemas/student.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List, Literal
from datetime import date, datetime
from uuid import UUID

from schooldesk.schemas.common import strip_required

StudentStatus = Literal["active", "inactive", "graduated", "transferred"]


class StudentCreate(BaseModel):
    admission_number: str = Field(..., max_length=32)
    first_name: str = Field(..., max_length=64)
    middle_name: Optional[str] = Field(None, max_length=64)
    last_name: str = Field(..., max_length=64)
    gender: Optional[Literal["male", "female"]] = None
    date_of_birth: Optional[date] = None
    class_name: str = Field(..., max_length=32)
    parent_name: Optional[str] = Field(None, max_length=128)
    parent_email: Optional[EmailStr] = None
    parent_phone: Optional[str] = Field(None, max_length=32)

    @field_validator("admission_number")
    @classmethod
    def validate_admission_number(cls, v: str) -> str:
        return strip_required(v, "Admission number").upper()

    @field_validator("first_name", "last_name", "class_name")
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        return strip_required(v, "Field")


class StudentUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=64)
    middle_name: Optional[str] = Field(None, max_length=64)
    last_name: Optional[str] = Field(None, max_length=64)
    gender: Optional[Literal["male", "female"]] = None
    date_of_birth: Optional[date] = None
    class_name: Optional[str] = Field(None, max_length=32)
    parent_name: Optional[str] = Field(None, max_length=128)
    parent_email: Optional[EmailStr] = None
    parent_phone: Optional[str] = Field(None, max_length=32)
    status: Optional[StudentStatus] = None


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    admission_number: str
    first_name: str
    middle_name: Optional[str]
    last_name: str
    full_name: str
    gender: Optional[str]
    date_of_birth: Optional[date]
    class_name: str
    parent_name: Optional[str]
    parent_email: Optional[str]
    parent_phone: Optional[str]
    status: str
    created_at: datetime
    updated_at: datetime


class StudentList(BaseModel):
    students: List[StudentOut]
    total: int
