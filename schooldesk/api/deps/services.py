# schooldesk/api/deps/services.py - Per-request service construction
from fastapi import Depends
from sqlalchemy.orm import Session

from schooldesk.core.db import get_db
from schooldesk.services.attendance_service import AttendanceService
from schooldesk.services.class_service import ClassService
from schooldesk.services.coupon_service import CouponService
from schooldesk.services.fee_service import FeeService
from schooldesk.services.payment_service import PaymentRecorder
from schooldesk.services.paystack import PaystackClient, PaystackService, get_paystack_client
from schooldesk.services.result_service import ResultService
from schooldesk.services.student_service import StudentService
from schooldesk.services.teacher_service import TeacherService


def student_service(db: Session = Depends(get_db)) -> StudentService:
    return StudentService(db)


def teacher_service(db: Session = Depends(get_db)) -> TeacherService:
    return TeacherService(db)


def class_service(db: Session = Depends(get_db)) -> ClassService:
    return ClassService(db)


def attendance_service(db: Session = Depends(get_db)) -> AttendanceService:
    return AttendanceService(db)


def fee_service(db: Session = Depends(get_db)) -> FeeService:
    return FeeService(db)


def coupon_service(db: Session = Depends(get_db)) -> CouponService:
    return CouponService(db)


def payment_recorder(
    db: Session = Depends(get_db),
    coupons: CouponService = Depends(coupon_service),
) -> PaymentRecorder:
    return PaymentRecorder(db, coupon_service=coupons)


def result_service(db: Session = Depends(get_db)) -> ResultService:
    return ResultService(db)


def paystack_service(
    db: Session = Depends(get_db),
    recorder: PaymentRecorder = Depends(payment_recorder),
    client: PaystackClient = Depends(get_paystack_client),
) -> PaystackService:
    return PaystackService(db, client, recorder=recorder)
