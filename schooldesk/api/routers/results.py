# schooldesk/api/routers/results.py
from fastapi import APIRouter, Depends, Query, status
from typing import List, Literal, Optional
from uuid import UUID

from schooldesk.api.deps.services import result_service
from schooldesk.schemas.common import AcademicYear, Term
from schooldesk.schemas.result import (
    BulkResultCreate,
    CohortAnalysisOut,
    CohortRankOut,
    CohortRankRequest,
    ResultCreate,
    ResultOut,
    ResultUpdate,
)
from schooldesk.services.result_service import ResultService

router = APIRouter()


@router.post("/", response_model=ResultOut, status_code=status.HTTP_201_CREATED)
async def create_result(data: ResultCreate, service: ResultService = Depends(result_service)):
    return ResultOut.model_validate(service.create_result(data))


@router.post("/bulk", response_model=List[ResultOut], status_code=status.HTTP_201_CREATED)
async def bulk_create_results(data: BulkResultCreate, service: ResultService = Depends(result_service)):
    """Enter a whole class at once; nothing is saved if any entry is invalid"""
    return [ResultOut.model_validate(r) for r in service.bulk_create_results(data)]


@router.post("/rank", response_model=CohortRankOut)
async def rank_cohort(data: CohortRankRequest, service: ResultService = Depends(result_service)):
    ranked = service.rank_cohort(data.class_name, data.term, data.academic_year)
    ranked["results"] = [ResultOut.model_validate(r) for r in ranked["results"]]
    return CohortRankOut(**ranked)


@router.get("/analysis", response_model=CohortAnalysisOut)
async def cohort_analysis(
    class_name: str = Query(...),
    term: Term = Query(...),
    academic_year: AcademicYear = Query(...),
    service: ResultService = Depends(result_service),
):
    return CohortAnalysisOut(**service.cohort_analysis(class_name, term, academic_year))


@router.get("/", response_model=List[ResultOut])
async def list_results(
    class_name: Optional[str] = Query(None),
    term: Optional[Term] = Query(None),
    academic_year: Optional[str] = Query(None),
    student_id: Optional[UUID] = Query(None),
    result_status: Optional[Literal["draft", "published"]] = Query(None, alias="status"),
    service: ResultService = Depends(result_service),
):
    results = service.list_results(
        class_name=class_name,
        term=term,
        academic_year=academic_year,
        student_id=student_id,
        status=result_status,
    )
    return [ResultOut.model_validate(r) for r in results]


@router.get("/{result_id}", response_model=ResultOut)
async def get_result(result_id: UUID, service: ResultService = Depends(result_service)):
    return ResultOut.model_validate(service.get_result(result_id))


@router.put("/{result_id}", response_model=ResultOut)
async def update_result(result_id: UUID, data: ResultUpdate, service: ResultService = Depends(result_service)):
    return ResultOut.model_validate(service.update_result(result_id, data))


@router.delete("/{result_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_result(result_id: UUID, service: ResultService = Depends(result_service)):
    service.delete_result(result_id)


@router.post("/{result_id}/publish", response_model=ResultOut)
async def publish_result(result_id: UUID, service: ResultService = Depends(result_service)):
    """Publish a result and re-rank its cohort"""
    return ResultOut.model_validate(service.publish_result(result_id))
