# schooldesk/schemas/fee.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Literal
from datetime import date, datetime
from uuid import UUID

from schooldesk.schemas.common import AcademicYear, Kobo, PositiveKobo, Term, strip_required
from schooldesk.schemas.payment import PaymentOut

FeeStatus = Literal["unpaid", "partial", "paid", "overdue"]


# Fee Record Schemas
class FeeRecordCreate(BaseModel):
    student_id: UUID
    fee_type: str = Field(..., min_length=1, max_length=64)
    amount: PositiveKobo
    due_date: date
    term: Term
    academic_year: AcademicYear
    description: Optional[str] = Field(None, max_length=255)

    @field_validator("fee_type")
    @classmethod
    def validate_fee_type(cls, v: str) -> str:
        return strip_required(v, "Fee type")


class FeeRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    student_name: str
    class_name: str
    fee_type: str
    description: Optional[str]
    amount: int
    amount_paid: int
    balance: int
    discount_total: int
    gross_amount: int
    due_date: date
    status: FeeStatus
    term: str
    academic_year: str
    created_at: datetime
    updated_at: datetime


class FeeRecordDetail(FeeRecordOut):
    """Fee record with its payment history"""
    payments: List[PaymentOut] = []


class OverdueRefreshResponse(BaseModel):
    as_of: date
    flagged: int


# Fee Structure Schemas
class FeeStructureItemIn(BaseModel):
    fee_type: str = Field(..., min_length=1, max_length=64)
    amount: PositiveKobo

    @field_validator("fee_type")
    @classmethod
    def validate_fee_type(cls, v: str) -> str:
        return strip_required(v, "Fee type")


class FeeStructureCreate(BaseModel):
    class_name: str = Field(..., min_length=1, max_length=32)
    academic_year: AcademicYear
    term: Term
    due_date: date
    items: List[FeeStructureItemIn] = Field(..., min_length=1)

    @field_validator("items")
    @classmethod
    def validate_unique_fee_types(cls, v: List[FeeStructureItemIn]) -> List[FeeStructureItemIn]:
        seen = set()
        for item in v:
            key = item.fee_type.lower()
            if key in seen:
                raise ValueError(f"Fee type '{item.fee_type}' appears more than once")
            seen.add(key)
        return v


class FeeStructureItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    fee_type: str
    amount: int


class FeeStructureOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    class_name: str
    academic_year: str
    term: str
    due_date: date
    is_active: bool
    total_amount: int
    items: List[FeeStructureItemOut] = []
    created_at: datetime
    updated_at: datetime


class ApplyFeeStructureResponse(BaseModel):
    """What the admin sees after billing a class from a structure"""
    structure_id: UUID
    students_processed: int
    records_created: int
    records_skipped: int
    total_billed: Kobo


# Reports
class CollectionSummary(BaseModel):
    term: Optional[str] = None
    academic_year: Optional[str] = None
    record_count: int
    total_billed: int
    total_discounted: int
    total_collected: int
    total_outstanding: int
    status_counts: Dict[str, int]
    collection_rate: float  # Percentage of billed amount collected


class DashboardStats(BaseModel):
    total_students: int
    pending_fees: int
    total_revenue: int
    pending_fees_display: str
    total_revenue_display: str


class PaymentReceiptOut(BaseModel):
    """Result of recording a payment: the new payment and the fee after it"""
    payment: PaymentOut
    fee: FeeRecordOut
    discount_amount: int
    amount_display: str
    balance_display: str
