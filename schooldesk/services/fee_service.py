# schooldesk/services/fee_service.py - Fee records, fee structures and collection reports
import logging
from datetime import date
from typing import Dict, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from schooldesk import repositories
from schooldesk.core.exceptions import ConflictError, ValidationError
from schooldesk.core.money import format_naira
from schooldesk.models import FeeRecord, FeeStructure, FeeStructureItem, Payment, Student
from schooldesk.models.fee import FEE_STATUSES
from schooldesk.schemas.fee import FeeRecordCreate, FeeStructureCreate
from schooldesk.services.base import BaseService

logger = logging.getLogger(__name__)

OUTSTANDING_STATUSES = ("unpaid", "partial", "overdue")


def derive_status(amount_paid: int, balance: int) -> str:
    """
    Status of a fee record as a pure function of what was paid and what is
    left. ``overdue`` is never derived here; only the overdue sweep sets it.
    """
    if balance <= 0:
        return "paid"
    if amount_paid == 0:
        return "unpaid"
    return "partial"


def settle(fee: FeeRecord, amount: int, discount: int = 0) -> FeeRecord:
    """
    Apply a payment of ``amount`` plus a coupon ``discount`` to ``fee``.

    The discount lowers the obligation itself, so
    ``amount == amount_paid + balance`` keeps holding afterwards.
    Callers validate the figures first.
    """
    fee.amount_paid += amount
    fee.amount -= discount
    fee.discount_total += discount
    fee.balance = fee.amount - fee.amount_paid
    fee.status = derive_status(fee.amount_paid, fee.balance)
    return fee


class FeeService(BaseService):
    def __init__(self, session: Session):
        super().__init__(session)
        self.fees = repositories.fees(session)
        self.structures = repositories.fee_structures(session)
        self.students = repositories.students(session)
        self.payments = repositories.payments(session)

    # ------------------------------------------------------------------
    # Fee records
    # ------------------------------------------------------------------

    def create_fee_record(self, data: FeeRecordCreate) -> FeeRecord:
        student = self.students.get_or_404(data.student_id)
        if self._existing_record(student.id, data.fee_type, data.term, data.academic_year):
            raise ConflictError(
                f"{student.full_name} already has a {data.fee_type} record for {data.term} {data.academic_year}"
            )

        fee = self._new_record(student, data.fee_type, data.amount, data.due_date, data.term, data.academic_year)
        fee.description = data.description

        with self.unit_of_work("Failed to create fee record", conflict_message="Fee record already exists"):
            self.fees.add(fee)

        logger.info(f"Created {fee.fee_type} record for {fee.student_name}: {format_naira(fee.amount)}")
        return fee

    def get_fee_record(self, fee_id: UUID) -> FeeRecord:
        return self.fees.get_or_404(fee_id)

    def payments_for(self, fee_id: UUID) -> Sequence[Payment]:
        return self.payments.list(Payment.fee_id == fee_id, order_by=Payment.payment_date)

    def list_fee_records(
        self,
        student_id: Optional[UUID] = None,
        class_name: Optional[str] = None,
        status: Optional[str] = None,
        term: Optional[str] = None,
        academic_year: Optional[str] = None,
    ) -> Sequence[FeeRecord]:
        filters = {
            key: value for key, value in {
                "student_id": student_id,
                "class_name": class_name,
                "status": status,
                "term": term,
                "academic_year": academic_year,
            }.items() if value is not None
        }
        return self.fees.list(order_by=(FeeRecord.due_date, FeeRecord.student_name), **filters)

    def delete_fee_record(self, fee_id: UUID) -> None:
        fee = self.fees.get_or_404(fee_id)
        if self.payments.count(Payment.fee_id == fee.id):
            raise ConflictError("A fee record with payments cannot be deleted")
        with self.unit_of_work("Failed to delete fee record"):
            self.fees.delete(fee)
        logger.info(f"Deleted fee record {fee_id}")

    def refresh_overdue(self, today: Optional[date] = None) -> int:
        """Flag unpaid and partial records whose due date has passed"""
        today = today or date.today()
        candidates = self.fees.list(
            FeeRecord.balance > 0,
            FeeRecord.due_date < today,
            FeeRecord.status.in_(("unpaid", "partial")),
        )
        with self.unit_of_work("Failed to refresh overdue fees"):
            for fee in candidates:
                fee.status = "overdue"

        if candidates:
            logger.info(f"Flagged {len(candidates)} fee record(s) overdue as of {today}")
        return len(candidates)

    # ------------------------------------------------------------------
    # Fee structures
    # ------------------------------------------------------------------

    def create_fee_structure(self, data: FeeStructureCreate) -> FeeStructure:
        existing = self.structures.find_by(
            class_name=data.class_name, term=data.term, academic_year=data.academic_year
        )
        if existing:
            raise ConflictError(
                f"A fee structure for {data.class_name} {data.term} {data.academic_year} already exists"
            )

        structure = FeeStructure(
            class_name=data.class_name,
            academic_year=data.academic_year,
            term=data.term,
            due_date=data.due_date,
            items=[FeeStructureItem(fee_type=item.fee_type, amount=item.amount) for item in data.items],
        )
        with self.unit_of_work("Failed to create fee structure", conflict_message="Fee structure already exists"):
            self.structures.add(structure)
        return structure

    def get_fee_structure(self, structure_id: UUID) -> FeeStructure:
        return self.structures.get_or_404(structure_id)

    def list_fee_structures(self, academic_year: Optional[str] = None, term: Optional[str] = None) -> Sequence[FeeStructure]:
        filters = {}
        if academic_year:
            filters["academic_year"] = academic_year
        if term:
            filters["term"] = term
        return self.structures.list(
            order_by=(FeeStructure.academic_year.desc(), FeeStructure.term, FeeStructure.class_name), **filters
        )

    def set_fee_structure_active(self, structure_id: UUID, is_active: bool) -> FeeStructure:
        structure = self.structures.get_or_404(structure_id)
        with self.unit_of_work("Failed to update fee structure"):
            structure.is_active = is_active
        return structure

    def apply_fee_structure(self, structure_id: UUID) -> Dict[str, int]:
        """
        Bill every active student of the structure's class, one record per
        fee item. Records that already exist are skipped; everything else is
        written in a single transaction.
        """
        structure = self.structures.get_or_404(structure_id)
        if not structure.is_active:
            raise ValidationError("Cannot apply an inactive fee structure")

        students = self.students.list(
            order_by=Student.last_name, class_name=structure.class_name, status="active"
        )
        created = skipped = billed = 0

        with self.unit_of_work("Failed to apply fee structure", conflict_message="Some fee records already exist"):
            for student in students:
                for item in structure.items:
                    if self._existing_record(student.id, item.fee_type, structure.term, structure.academic_year):
                        skipped += 1
                        continue
                    self.fees.add(self._new_record(
                        student, item.fee_type, item.amount,
                        structure.due_date, structure.term, structure.academic_year,
                    ))
                    created += 1
                    billed += item.amount

        logger.info(
            f"Applied fee structure {structure.id} to {len(students)} student(s): "
            f"{created} created, {skipped} skipped, {format_naira(billed)} billed"
        )
        return {
            "students_processed": len(students),
            "records_created": created,
            "records_skipped": skipped,
            "total_billed": billed,
        }

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def collection_summary(self, term: Optional[str] = None, academic_year: Optional[str] = None) -> dict:
        criteria = []
        if term:
            criteria.append(FeeRecord.term == term)
        if academic_year:
            criteria.append(FeeRecord.academic_year == academic_year)

        totals = self.session.execute(
            select(
                func.count(FeeRecord.id),
                func.coalesce(func.sum(FeeRecord.amount), 0),
                func.coalesce(func.sum(FeeRecord.discount_total), 0),
                func.coalesce(func.sum(FeeRecord.amount_paid), 0),
                func.coalesce(func.sum(FeeRecord.balance), 0),
            ).where(*criteria)
        ).one()
        status_rows = self.session.execute(
            select(FeeRecord.status, func.count(FeeRecord.id)).where(*criteria).group_by(FeeRecord.status)
        ).all()

        status_counts = {status: 0 for status in FEE_STATUSES}
        status_counts.update({status: count for status, count in status_rows})

        record_count, billed, discounted, collected, outstanding = (int(v) for v in totals)
        collection_rate = round(collected / billed * 100, 2) if billed else 0.0

        return {
            "term": term,
            "academic_year": academic_year,
            "record_count": record_count,
            "total_billed": billed,
            "total_discounted": discounted,
            "total_collected": collected,
            "total_outstanding": outstanding,
            "status_counts": status_counts,
            "collection_rate": collection_rate,
        }

    def dashboard_stats(self) -> dict:
        pending = self.session.execute(
            select(func.coalesce(func.sum(FeeRecord.balance), 0)).where(FeeRecord.status.in_(OUTSTANDING_STATUSES))
        ).scalar_one()
        revenue = self.session.execute(
            select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.status == "completed")
        ).scalar_one()
        total_students = self.students.count(status="active")
        return {
            "total_students": total_students,
            "pending_fees": int(pending),
            "total_revenue": int(revenue),
            "pending_fees_display": format_naira(int(pending)),
            "total_revenue_display": format_naira(int(revenue)),
        }

    # ------------------------------------------------------------------

    def _existing_record(self, student_id: UUID, fee_type: str, term: str, academic_year: str) -> Optional[FeeRecord]:
        return self.fees.find_by(student_id=student_id, fee_type=fee_type, term=term, academic_year=academic_year)

    @staticmethod
    def _new_record(student: Student, fee_type: str, amount: int, due_date: date, term: str, academic_year: str) -> FeeRecord:
        return FeeRecord(
            student_id=student.id,
            student_name=student.full_name,
            class_name=student.class_name,
            fee_type=fee_type,
            amount=amount,
            amount_paid=0,
            balance=amount,
            discount_total=0,
            due_date=due_date,
            status="unpaid",
            term=term,
            academic_year=academic_year,
        )
