# schooldesk/api/routers/fees.py
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from datetime import date
from uuid import UUID

from schooldesk.api.deps.services import fee_service
from schooldesk.schemas.common import Term
from schooldesk.schemas.fee import (
    ApplyFeeStructureResponse,
    CollectionSummary,
    DashboardStats,
    FeeRecordCreate,
    FeeRecordDetail,
    FeeRecordOut,
    FeeStatus,
    FeeStructureCreate,
    FeeStructureOut,
    OverdueRefreshResponse,
)
from schooldesk.schemas.payment import PaymentOut
from schooldesk.services.fee_service import FeeService

router = APIRouter()


# Fee structures
# Declared before /{fee_id} so "structures" is never parsed as an id

@router.post("/structures", response_model=FeeStructureOut, status_code=status.HTTP_201_CREATED)
async def create_fee_structure(data: FeeStructureCreate, service: FeeService = Depends(fee_service)):
    """Create a class fee structure with its items"""
    return FeeStructureOut.model_validate(service.create_fee_structure(data))


@router.get("/structures", response_model=List[FeeStructureOut])
async def list_fee_structures(
    academic_year: Optional[str] = Query(None),
    term: Optional[Term] = Query(None),
    service: FeeService = Depends(fee_service),
):
    return [FeeStructureOut.model_validate(s) for s in service.list_fee_structures(academic_year, term)]


@router.get("/structures/{structure_id}", response_model=FeeStructureOut)
async def get_fee_structure(structure_id: UUID, service: FeeService = Depends(fee_service)):
    return FeeStructureOut.model_validate(service.get_fee_structure(structure_id))


@router.post("/structures/{structure_id}/apply", response_model=ApplyFeeStructureResponse)
async def apply_fee_structure(structure_id: UUID, service: FeeService = Depends(fee_service)):
    """Bill every active student in the structure's class"""
    counts = service.apply_fee_structure(structure_id)
    return ApplyFeeStructureResponse(structure_id=structure_id, **counts)


# Reports

@router.post("/refresh-overdue", response_model=OverdueRefreshResponse)
async def refresh_overdue(
    as_of: Optional[date] = Query(None, description="Defaults to today"),
    service: FeeService = Depends(fee_service),
):
    as_of = as_of or date.today()
    return OverdueRefreshResponse(as_of=as_of, flagged=service.refresh_overdue(as_of))


@router.get("/summary", response_model=CollectionSummary)
async def collection_summary(
    term: Optional[Term] = Query(None),
    academic_year: Optional[str] = Query(None),
    service: FeeService = Depends(fee_service),
):
    return CollectionSummary(**service.collection_summary(term=term, academic_year=academic_year))


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(service: FeeService = Depends(fee_service)):
    return DashboardStats(**service.dashboard_stats())


# Fee records

@router.post("/", response_model=FeeRecordOut, status_code=status.HTTP_201_CREATED)
async def create_fee_record(data: FeeRecordCreate, service: FeeService = Depends(fee_service)):
    return FeeRecordOut.model_validate(service.create_fee_record(data))


@router.get("/", response_model=List[FeeRecordOut])
async def list_fee_records(
    student_id: Optional[UUID] = Query(None),
    class_name: Optional[str] = Query(None),
    fee_status: Optional[FeeStatus] = Query(None, alias="status"),
    term: Optional[Term] = Query(None),
    academic_year: Optional[str] = Query(None),
    service: FeeService = Depends(fee_service),
):
    fees = service.list_fee_records(
        student_id=student_id,
        class_name=class_name,
        status=fee_status,
        term=term,
        academic_year=academic_year,
    )
    return [FeeRecordOut.model_validate(f) for f in fees]


@router.get("/{fee_id}", response_model=FeeRecordDetail)
async def get_fee_record(fee_id: UUID, service: FeeService = Depends(fee_service)):
    """Fee record with its payment history"""
    fee = service.get_fee_record(fee_id)
    detail = FeeRecordDetail.model_validate(fee)
    detail.payments = [PaymentOut.model_validate(p) for p in service.payments_for(fee_id)]
    return detail


@router.delete("/{fee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fee_record(fee_id: UUID, service: FeeService = Depends(fee_service)):
    service.delete_fee_record(fee_id)
