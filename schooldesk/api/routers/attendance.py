# schooldesk/api/routers/attendance.py
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from datetime import date
from decimal import Decimal
from uuid import UUID

from schooldesk.api.deps.services import attendance_service
from schooldesk.schemas.attendance import (
    AttendanceAlerts,
    AttendanceDaySummary,
    AttendanceOut,
    AttendanceStatus,
    BulkAttendanceCreate,
    ClassAttendanceReport,
    StudentAttendanceRate,
)
from schooldesk.services.attendance_service import DEFAULT_ALERT_THRESHOLD, AttendanceService

router = APIRouter()


@router.post("/bulk", response_model=AttendanceDaySummary, status_code=status.HTTP_201_CREATED)
async def bulk_record_attendance(data: BulkAttendanceCreate, service: AttendanceService = Depends(attendance_service)):
    """Mark a whole class for one day; re-marking a day replaces earlier marks"""
    return AttendanceDaySummary(**service.bulk_record(data))


@router.get("/", response_model=List[AttendanceOut])
async def list_attendance(
    class_name: Optional[str] = Query(None),
    student_id: Optional[UUID] = Query(None),
    start_date: Optional[date] = Query(None, description="Inclusive"),
    end_date: Optional[date] = Query(None, description="Inclusive"),
    attendance_status: Optional[AttendanceStatus] = Query(None, alias="status"),
    service: AttendanceService = Depends(attendance_service),
):
    records = service.list_attendance(
        class_name=class_name,
        student_id=student_id,
        start_date=start_date,
        end_date=end_date,
        status=attendance_status,
    )
    return [AttendanceOut.model_validate(r) for r in records]


@router.get("/report", response_model=ClassAttendanceReport)
async def class_attendance_report(
    class_name: str = Query(...),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: AttendanceService = Depends(attendance_service),
):
    return ClassAttendanceReport(**service.class_report(class_name, start_date, end_date))


@router.get("/alerts", response_model=AttendanceAlerts)
async def attendance_alerts(
    class_name: Optional[str] = Query(None),
    threshold: Decimal = Query(DEFAULT_ALERT_THRESHOLD, description="Percentage below which a student is flagged"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: AttendanceService = Depends(attendance_service),
):
    return AttendanceAlerts(**service.alerts(class_name, threshold, start_date, end_date))


@router.get("/student/{student_id}", response_model=StudentAttendanceRate)
async def student_attendance_rate(
    student_id: UUID,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: AttendanceService = Depends(attendance_service),
):
    return StudentAttendanceRate(**service.student_rate(student_id, start_date, end_date))
