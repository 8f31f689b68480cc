# schooldesk/api/routers/subjects.py
from fastapi import APIRouter, Depends, Query, status
from typing import List, Literal, Optional
from uuid import UUID

from schooldesk.api.deps.services import class_service
from schooldesk.schemas.subject import SubjectCreate, SubjectOut, SubjectUpdate
from schooldesk.services.class_service import ClassService

router = APIRouter()


@router.post("/", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
async def create_subject(data: SubjectCreate, service: ClassService = Depends(class_service)):
    return SubjectOut.model_validate(service.create_subject(data))


@router.get("/", response_model=List[SubjectOut])
async def list_subjects(
    class_name: Optional[str] = Query(None, description="Subjects offered to this class"),
    subject_status: Optional[Literal["active", "inactive"]] = Query(None, alias="status"),
    service: ClassService = Depends(class_service),
):
    return [SubjectOut.model_validate(s) for s in service.list_subjects(class_name=class_name, status=subject_status)]


@router.get("/{subject_id}", response_model=SubjectOut)
async def get_subject(subject_id: UUID, service: ClassService = Depends(class_service)):
    return SubjectOut.model_validate(service.get_subject(subject_id))


@router.put("/{subject_id}", response_model=SubjectOut)
async def update_subject(subject_id: UUID, data: SubjectUpdate, service: ClassService = Depends(class_service)):
    return SubjectOut.model_validate(service.update_subject(subject_id, data))


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subject(subject_id: UUID, service: ClassService = Depends(class_service)):
    service.delete_subject(subject_id)
