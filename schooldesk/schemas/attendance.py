# schooldesk/schemas/attendance.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

AttendanceStatus = Literal["present", "absent", "late", "excused"]


class AttendanceEntry(BaseModel):
    student_id: UUID
    status: AttendanceStatus = "present"
    remarks: Optional[str] = Field(None, max_length=255)


class BulkAttendanceCreate(BaseModel):
    """A whole class marked for one day"""
    class_name: str = Field(..., min_length=1, max_length=32)
    date: date
    recorded_by: Optional[str] = Field(None, max_length=128)
    entries: List[AttendanceEntry] = Field(..., min_length=1)


class AttendanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    student_name: str
    class_name: str
    date: date
    status: AttendanceStatus
    remarks: Optional[str]
    recorded_by: Optional[str]
    created_at: datetime
    updated_at: datetime


class AttendanceDaySummary(BaseModel):
    class_name: str
    date: date
    total_students: int
    present_count: int
    absent_count: int
    late_count: int
    excused_count: int
    attendance_rate: Decimal  # Percentage of marked students who attended


class StudentAttendanceRate(BaseModel):
    student_id: UUID
    student_name: str
    class_name: str
    days_recorded: int
    present: int
    late: int
    absent: int
    excused: int
    attendance_rate: Decimal


class ClassAttendanceReport(BaseModel):
    class_name: str
    start_date: Optional[date]
    end_date: Optional[date]
    days_recorded: int
    average_attendance_rate: Decimal
    students: List[StudentAttendanceRate]


class AttendanceAlerts(BaseModel):
    threshold: Decimal
    students: List[StudentAttendanceRate]
