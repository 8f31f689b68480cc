#!/usr/bin/env python3
# scripts/seed_demo_data.py - Populate a development database with a small demo school
import sys
import os
from datetime import date, timedelta

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from schooldesk.core.config import settings
from schooldesk.core.db import db_manager, get_engine
from schooldesk.core.exceptions import SchoolDeskError
from schooldesk.core.logging_config import setup_logging
from schooldesk.core.money import format_naira, to_kobo
from schooldesk.models import Base
from schooldesk.schemas.attendance import AttendanceEntry, BulkAttendanceCreate
from schooldesk.schemas.class_schema import ClassCreate
from schooldesk.schemas.coupon import CouponCreate
from schooldesk.schemas.fee import FeeStructureCreate, FeeStructureItemIn
from schooldesk.schemas.result import BulkResultCreate, BulkResultEntry, SubjectScoreIn
from schooldesk.schemas.student import StudentCreate
from schooldesk.schemas.subject import SubjectCreate
from schooldesk.schemas.teacher import TeacherCreate
from schooldesk.services.attendance_service import AttendanceService
from schooldesk.services.class_service import ClassService
from schooldesk.services.coupon_service import CouponService
from schooldesk.services.fee_service import FeeService
from schooldesk.services.payment_service import PaymentRecorder
from schooldesk.services.result_service import ResultService
from schooldesk.services.student_service import StudentService
from schooldesk.services.teacher_service import TeacherService

TERM = "1st Term"
ACADEMIC_YEAR = "2025/2026"
CLASS_NAME = "JSS 1"

STUDENTS = [
    ("SKL/001", "John", "Doe"),
    ("SKL/002", "Jane", "Smith"),
    ("SKL/003", "Michael", "Johnson"),
    ("SKL/004", "Sarah", "Williams"),
]

SCORES = [
    {"Mathematics": (14, 12, 60), "English": (12, 13, 52), "Basic Science": (10, 11, 45)},
    {"Mathematics": (15, 15, 65), "English": (13, 14, 58), "Basic Science": (12, 12, 50)},
    {"Mathematics": (8, 9, 30), "English": (10, 9, 41), "Basic Science": (7, 8, 25)},
    {"Mathematics": (12, 11, 48), "English": (11, 12, 47), "Basic Science": (13, 12, 55)},
]


def seed():
    if settings.is_production:
        print("❌ Refusing to seed a production database")
        return False

    Base.metadata.create_all(bind=get_engine())

    with db_manager.transaction() as session:
        students = [
            StudentService(session).create_student(StudentCreate(
                admission_number=admission, first_name=first, last_name=last, class_name=CLASS_NAME,
            ))
            for admission, first, last in STUDENTS
        ]
        print(f"✅ Created {len(students)} students in {CLASS_NAME}")

        teacher = TeacherService(session).create_teacher(TeacherCreate(
            employee_id="TCH/001", first_name="Grace", last_name="Eze",
            email="grace.eze@example.com", subjects=list(SCORES[0]),
        ))
        class_service = ClassService(session)
        class_service.create_class(ClassCreate(
            name=CLASS_NAME, level="Junior Secondary", academic_year=ACADEMIC_YEAR,
            class_teacher_id=teacher.id, subjects=list(SCORES[0]),
        ))
        for code, name in zip(("MTH", "ENG", "BSC"), SCORES[0]):
            class_service.create_subject(SubjectCreate(
                name=name, code=code, classes=[CLASS_NAME], teacher_id=teacher.id, is_core=True,
            ))
        print(f"✅ Created {CLASS_NAME} with class teacher {teacher.full_name} and {len(SCORES[0])} subjects")

        day = AttendanceService(session).bulk_record(BulkAttendanceCreate(
            class_name=CLASS_NAME,
            date=date.today(),
            recorded_by=teacher.full_name,
            entries=[
                AttendanceEntry(student_id=s.id, status=status)
                for s, status in zip(students, ("present", "present", "late", "absent"))
            ],
        ))
        print(f"✅ Marked attendance for {day['date']} ({day['attendance_rate']}% attended)")

        fee_service = FeeService(session)
        structure = fee_service.create_fee_structure(FeeStructureCreate(
            class_name=CLASS_NAME,
            academic_year=ACADEMIC_YEAR,
            term=TERM,
            due_date=date.today() + timedelta(days=30),
            items=[
                FeeStructureItemIn(fee_type="Tuition", amount=to_kobo(50000)),
                FeeStructureItemIn(fee_type="Development Levy", amount=to_kobo(7500)),
            ],
        ))
        counts = fee_service.apply_fee_structure(structure.id)
        print(f"✅ Billed {counts['records_created']} fee records ({format_naira(counts['total_billed'])})")

        CouponService(session).create_coupon(CouponCreate(
            code="WELCOME10",
            description="10% off tuition for new students",
            discount_type="percentage",
            discount_value=10,
            max_uses=50,
            expiry_date=date.today() + timedelta(days=90),
            applicable_fee_types=["Tuition"],
        ))
        print("✅ Created coupon WELCOME10")

        recorder = PaymentRecorder(session)
        tuition = {
            f.student_id: f for f in fee_service.list_fee_records(class_name=CLASS_NAME) if f.fee_type == "Tuition"
        }
        recorder.record_payment(tuition[students[0].id].id, to_kobo(45000), coupon_code="WELCOME10")
        recorder.record_payment(tuition[students[1].id].id, to_kobo(20000), payment_method="bank_transfer")
        recorder.record_payment(tuition[students[2].id].id, to_kobo(50000), payment_method="cheque")
        print("✅ Recorded 3 payments")

        result_service = ResultService(session)
        result_service.bulk_create_results(BulkResultCreate(
            class_name=CLASS_NAME,
            term=TERM,
            academic_year=ACADEMIC_YEAR,
            entries=[
                BulkResultEntry(
                    student_id=student.id,
                    subjects=[
                        SubjectScoreIn(subject_name=name, ca1=ca1, ca2=ca2, exam=exam)
                        for name, (ca1, ca2, exam) in scores.items()
                    ],
                )
                for student, scores in zip(students, SCORES)
            ],
        ))
        ranked = result_service.rank_cohort(CLASS_NAME, TERM, ACADEMIC_YEAR)
        print(f"✅ Entered and ranked {ranked['total_students']} results (class average {ranked['class_average']})")

    return True


if __name__ == "__main__":
    setup_logging()
    try:
        ok = seed()
    except SchoolDeskError as e:
        print(f"❌ Seeding failed: {e.message}")
        ok = False
    sys.exit(0 if ok else 1)
