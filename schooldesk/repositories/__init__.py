# schooldesk/repositories/__init__.py
from sqlalchemy.orm import Session

from schooldesk.models import (
    AttendanceRecord, Coupon, CouponUsage, FeeRecord, FeeStructure, Payment, Result, SchoolClass, Student, Subject, Teacher
)
from schooldesk.repositories.base import Repository


def students(session: Session) -> Repository[Student]:
    return Repository(Student, session, "Student")


def fees(session: Session) -> Repository[FeeRecord]:
    return Repository(FeeRecord, session, "Fee record")


def fee_structures(session: Session) -> Repository[FeeStructure]:
    return Repository(FeeStructure, session, "Fee structure")


def payments(session: Session) -> Repository[Payment]:
    return Repository(Payment, session, "Payment")


def coupons(session: Session) -> Repository[Coupon]:
    return Repository(Coupon, session, "Coupon")


def coupon_usages(session: Session) -> Repository[CouponUsage]:
    return Repository(CouponUsage, session, "Coupon usage")


def results(session: Session) -> Repository[Result]:
    return Repository(Result, session, "Result")


def teachers(session: Session) -> Repository[Teacher]:
    return Repository(Teacher, session, "Teacher")


def classes(session: Session) -> Repository[SchoolClass]:
    return Repository(SchoolClass, session, "Class")


def subjects(session: Session) -> Repository[Subject]:
    return Repository(Subject, session, "Subject")


def attendance(session: Session) -> Repository[AttendanceRecord]:
    return Repository(AttendanceRecord, session, "Attendance record")


__all__ = [
    "Repository",
    "students",
    "fees",
    "fee_structures",
    "payments",
    "coupons",
    "coupon_usages",
    "results",
    "teachers",
    "classes",
    "subjects",
    "attendance",
]
