# schooldesk/schemas/subject.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime
from uuid import UUID

from schooldesk.schemas.common import strip_required


class SubjectCreate(BaseModel):
    name: str = Field(..., max_length=64)
    code: str = Field(..., max_length=16)
    description: Optional[str] = Field(None, max_length=255)
    classes: List[str] = []
    teacher_id: Optional[UUID] = None
    is_core: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return strip_required(v, "Subject name")

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        return strip_required(v, "Subject code").upper()


class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = Field(None, max_length=255)
    classes: Optional[List[str]] = None
    teacher_id: Optional[UUID] = None
    is_core: Optional[bool] = None
    status: Optional[Literal["active", "inactive"]] = None


class SubjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    code: str
    description: Optional[str]
    classes: List[str]
    teacher_id: Optional[UUID]
    teacher_name: Optional[str]
    is_core: bool
    status: str
    created_at: datetime
    updated_at: datetime
