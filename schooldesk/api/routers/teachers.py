# schooldesk/api/routers/teachers.py
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from uuid import UUID

from schooldesk.api.deps.services import teacher_service
from schooldesk.schemas.teacher import TeacherCreate, TeacherOut, TeacherStatus, TeacherUpdate
from schooldesk.services.teacher_service import TeacherService

router = APIRouter()


@router.post("/", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
async def create_teacher(data: TeacherCreate, service: TeacherService = Depends(teacher_service)):
    return TeacherOut.model_validate(service.create_teacher(data))


@router.get("/", response_model=List[TeacherOut])
async def list_teachers(
    teacher_status: Optional[TeacherStatus] = Query(None, alias="status"),
    subject: Optional[str] = Query(None, description="Teachers who teach this subject"),
    service: TeacherService = Depends(teacher_service),
):
    return [TeacherOut.model_validate(t) for t in service.list_teachers(status=teacher_status, subject=subject)]


@router.get("/{teacher_id}", response_model=TeacherOut)
async def get_teacher(teacher_id: UUID, service: TeacherService = Depends(teacher_service)):
    return TeacherOut.model_validate(service.get_teacher(teacher_id))


@router.put("/{teacher_id}", response_model=TeacherOut)
async def update_teacher(teacher_id: UUID, data: TeacherUpdate, service: TeacherService = Depends(teacher_service)):
    return TeacherOut.model_validate(service.update_teacher(teacher_id, data))


@router.delete("/{teacher_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_teacher(teacher_id: UUID, service: TeacherService = Depends(teacher_service)):
    service.delete_teacher(teacher_id)
