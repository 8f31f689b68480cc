# schooldesk/models/__init__.py - Import all models so SQLAlchemy can discover them

from schooldesk.models.base import Base

from schooldesk.models.student import Student
from schooldesk.models.fee import FeeStructure, FeeStructureItem, FeeRecord
from schooldesk.models.coupon import Coupon, CouponUsage
from schooldesk.models.payment import Payment
from schooldesk.models.result import Result, SubjectScore
from schooldesk.models.teacher import Teacher
from schooldesk.models.class_model import SchoolClass
from schooldesk.models.subject import Subject
from schooldesk.models.attendance import AttendanceRecord

__all__ = [
    "Base",
    "Student",
    "FeeStructure",
    "FeeStructureItem",
    "FeeRecord",
    "Coupon",
    "CouponUsage",
    "Payment",
    "Result",
    "SubjectScore",
    "Teacher",
    "SchoolClass",
    "Subject",
    "AttendanceRecord",
]
