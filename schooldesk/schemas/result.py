# schooldesk/schemas/result.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from schooldesk.schemas.common import AcademicYear, Term, strip_required


class SubjectScoreIn(BaseModel):
    """Raw scores as entered; ranges are checked by the result service"""
    subject_name: str = Field(..., min_length=1, max_length=64)
    ca1: int = 0
    ca2: int = 0
    exam: int = 0

    @field_validator("subject_name")
    @classmethod
    def validate_subject_name(cls, v: str) -> str:
        return strip_required(v, "Subject name")


class SubjectScoreOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subject_name: str
    ca1: int
    ca2: int
    exam: int
    total: int
    grade: str
    remarks: str


class ResultCreate(BaseModel):
    student_id: UUID
    term: Term
    academic_year: AcademicYear
    class_name: Optional[str] = Field(None, max_length=32, description="Defaults to the student's class")
    subjects: List[SubjectScoreIn] = Field(..., min_length=1)
    teacher_remarks: Optional[str] = None
    principal_remarks: Optional[str] = None


class ResultUpdate(BaseModel):
    subjects: Optional[List[SubjectScoreIn]] = Field(None, min_length=1)
    teacher_remarks: Optional[str] = None
    principal_remarks: Optional[str] = None


class BulkResultEntry(BaseModel):
    student_id: UUID
    subjects: List[SubjectScoreIn] = Field(..., min_length=1)


class BulkResultCreate(BaseModel):
    class_name: str = Field(..., min_length=1, max_length=32)
    term: Term
    academic_year: AcademicYear
    entries: List[BulkResultEntry] = Field(..., min_length=1)


class ResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    student_name: str
    class_name: str
    term: str
    academic_year: str
    subjects: List[SubjectScoreOut]
    total_score: int
    average_score: Decimal
    position: int
    total_students: int
    class_average: Decimal
    teacher_remarks: Optional[str]
    principal_remarks: Optional[str]
    status: Literal["draft", "published"]
    created_at: datetime
    updated_at: datetime


class CohortRankRequest(BaseModel):
    class_name: str = Field(..., min_length=1, max_length=32)
    term: Term
    academic_year: AcademicYear


class CohortRankOut(BaseModel):
    class_name: str
    term: str
    academic_year: str
    total_students: int
    class_average: Decimal
    results: List[ResultOut]


class SubjectAnalysis(BaseModel):
    subject_name: str
    students: int
    average_total: Decimal
    highest_total: int
    lowest_total: int
    pass_rate: Decimal  # Percentage of students graded above F
    grade_distribution: dict[str, int]


class CohortAnalysisOut(BaseModel):
    class_name: str
    term: str
    academic_year: str
    total_students: int
    class_average: Decimal
    subjects: List[SubjectAnalysis]
