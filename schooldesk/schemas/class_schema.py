# schooldesk/schemas/class_schema.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime
from uuid import UUID

from schooldesk.schemas.common import AcademicYear, strip_required


class ClassCreate(BaseModel):
    name: str = Field(..., max_length=32)
    level: str = Field(..., max_length=32)
    section: Optional[str] = Field(None, max_length=16)
    capacity: int = Field(40, gt=0)
    academic_year: AcademicYear
    class_teacher_id: Optional[UUID] = None
    subjects: List[str] = []

    @field_validator("name", "level")
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        return strip_required(v, "Field")


class ClassUpdate(BaseModel):
    level: Optional[str] = Field(None, max_length=32)
    section: Optional[str] = Field(None, max_length=16)
    capacity: Optional[int] = Field(None, gt=0)
    class_teacher_id: Optional[UUID] = None
    subjects: Optional[List[str]] = None
    status: Optional[Literal["active", "inactive"]] = None


class ClassOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    level: str
    section: Optional[str]
    capacity: int
    academic_year: str
    class_teacher_id: Optional[UUID]
    class_teacher_name: Optional[str]
    subjects: List[str]
    status: str
    current_enrollment: int = 0
    created_at: datetime
    updated_at: datetime
