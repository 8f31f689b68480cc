# schooldesk/services/attendance_service.py - Daily attendance and attendance rates
"""
Attendance is marked per student per school day. A day can be marked again;
the new mark replaces the old one.

Rates are percentages of recorded days on which the student attended,
where a late arrival counts as attending and an excused absence does not.
"""
import logging
from collections import Counter, defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from schooldesk import repositories
from schooldesk.core.exceptions import NotFoundError, ValidationError
from schooldesk.models import AttendanceRecord, Student
from schooldesk.models.attendance import ATTENDANCE_STATUSES, ATTENDED_STATUSES
from schooldesk.schemas.attendance import BulkAttendanceCreate
from schooldesk.services.base import BaseService
from schooldesk.services.grading import TWO_PLACES, mean

logger = logging.getLogger(__name__)

DEFAULT_ALERT_THRESHOLD = Decimal("75")


def attendance_rate(attended: int, total: int) -> Decimal:
    """``attended / total`` as a percentage with two decimals; 0 when nothing is recorded"""
    if total <= 0:
        return Decimal("0.00")
    return (Decimal(attended * 100) / total).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def tally(statuses: Iterable[str]) -> Dict[str, int]:
    counts = Counter(statuses)
    return {status: counts.get(status, 0) for status in ATTENDANCE_STATUSES}


class AttendanceService(BaseService):
    def __init__(self, session: Session):
        super().__init__(session)
        self.records = repositories.attendance(session)
        self.students = repositories.students(session)

    def bulk_record(self, data: BulkAttendanceCreate, today: Optional[date] = None) -> dict:
        """
        Mark a class for one day in a single transaction.

        Every entry must name an active student of ``data.class_name``;
        one bad entry rejects the whole sheet. Students already marked for
        the day are overwritten.
        """
        today = today or date.today()
        if data.date > today:
            raise ValidationError("Attendance cannot be recorded for a future date")

        student_ids = [entry.student_id for entry in data.entries]
        if len(set(student_ids)) != len(student_ids):
            raise ValidationError("Each student may appear only once on an attendance sheet")

        students = {s.id: s for s in self.students.list(Student.id.in_(student_ids))}
        for student_id in student_ids:
            student = students.get(student_id)
            if student is None:
                raise NotFoundError("Student", student_id)
            if student.class_name != data.class_name or student.status != "active":
                raise ValidationError(f"{student.full_name} is not an active student of {data.class_name}")

        existing = {
            r.student_id: r
            for r in self.records.list(AttendanceRecord.student_id.in_(student_ids), date=data.date)
        }

        with self.unit_of_work("Failed to record attendance", conflict_message="Attendance was recorded concurrently; try again"):
            for entry in data.entries:
                student = students[entry.student_id]
                record = existing.get(entry.student_id)
                if record is None:
                    record = self.records.add(AttendanceRecord(
                        student_id=student.id,
                        student_name=student.full_name,
                        date=data.date,
                    ))
                record.class_name = data.class_name
                record.status = entry.status
                record.remarks = entry.remarks
                record.recorded_by = data.recorded_by

        counts = tally(entry.status for entry in data.entries)
        attended = sum(counts[s] for s in ATTENDED_STATUSES)
        logger.info(
            f"Recorded attendance for {data.class_name} on {data.date}: "
            f"{attended}/{len(data.entries)} attended ({len(existing)} re-marked)"
        )
        return {
            "class_name": data.class_name,
            "date": data.date,
            "total_students": len(data.entries),
            "present_count": counts["present"],
            "absent_count": counts["absent"],
            "late_count": counts["late"],
            "excused_count": counts["excused"],
            "attendance_rate": attendance_rate(attended, len(data.entries)),
        }

    def list_attendance(
        self,
        class_name: Optional[str] = None,
        student_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        criteria = self._date_criteria(start_date, end_date)
        filters = {}
        if class_name:
            filters["class_name"] = class_name
        if student_id:
            filters["student_id"] = student_id
        if status:
            filters["status"] = status
        return self.records.list(
            *criteria,
            order_by=(AttendanceRecord.date.desc(), AttendanceRecord.student_name),
            **filters,
        )

    def student_rate(self, student_id: UUID, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
        student = self.students.get_or_404(student_id)
        records = self.list_attendance(student_id=student.id, start_date=start_date, end_date=end_date)
        return self._rate_row(student, [r.status for r in records])

    def class_report(self, class_name: str, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
        """Per-student rates for the active students of a class, lowest first"""
        students = self.students.list(
            order_by=(Student.last_name, Student.first_name), class_name=class_name, status="active"
        )
        records = self.list_attendance(class_name=class_name, start_date=start_date, end_date=end_date)

        by_student: Dict[UUID, List[str]] = defaultdict(list)
        for record in records:
            by_student[record.student_id].append(record.status)

        rows = [self._rate_row(s, by_student.get(s.id, [])) for s in students]
        marked = [row["attendance_rate"] for row in rows if row["days_recorded"]]
        rows.sort(key=lambda row: row["attendance_rate"])

        return {
            "class_name": class_name,
            "start_date": start_date,
            "end_date": end_date,
            "days_recorded": len({r.date for r in records}),
            "average_attendance_rate": mean(marked) if marked else Decimal("0.00"),
            "students": rows,
        }

    def alerts(
        self,
        class_name: Optional[str] = None,
        threshold: Decimal = DEFAULT_ALERT_THRESHOLD,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict:
        """Active students with recorded attendance strictly below ``threshold`` percent"""
        if not Decimal(0) <= threshold <= Decimal(100):
            raise ValidationError("Threshold must be between 0 and 100")

        if class_name:
            class_names = [class_name]
        else:
            class_names = sorted({s.class_name for s in self.students.list(status="active")})

        flagged = []
        for name in class_names:
            report = self.class_report(name, start_date, end_date)
            flagged.extend(
                row for row in report["students"]
                if row["days_recorded"] and row["attendance_rate"] < threshold
            )

        if flagged:
            logger.info(f"{len(flagged)} student(s) below {threshold}% attendance")
        flagged.sort(key=lambda row: row["attendance_rate"])
        return {"threshold": threshold, "students": flagged}

    @staticmethod
    def _date_criteria(start_date: Optional[date], end_date: Optional[date]) -> list:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        criteria = []
        if start_date:
            criteria.append(AttendanceRecord.date >= start_date)
        if end_date:
            criteria.append(AttendanceRecord.date <= end_date)
        return criteria

    @staticmethod
    def _rate_row(student: Student, statuses: List[str]) -> dict:
        counts = tally(statuses)
        return {
            "student_id": student.id,
            "student_name": student.full_name,
            "class_name": student.class_name,
            "days_recorded": len(statuses),
            "present": counts["present"],
            "late": counts["late"],
            "absent": counts["absent"],
            "excused": counts["excused"],
            "attendance_rate": attendance_rate(sum(counts[s] for s in ATTENDED_STATUSES), len(statuses)),
        }
