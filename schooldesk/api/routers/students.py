# schooldesk/api/routers/students.py
from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from uuid import UUID

from schooldesk.api.deps.services import student_service
from schooldesk.schemas.student import StudentCreate, StudentList, StudentOut, StudentStatus, StudentUpdate
from schooldesk.services.student_service import StudentService

router = APIRouter()


@router.post("/", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
async def create_student(data: StudentCreate, service: StudentService = Depends(student_service)):
    return StudentOut.model_validate(service.create_student(data))


@router.get("/", response_model=StudentList)
async def list_students(
    class_name: Optional[str] = Query(None, description="Filter by class"),
    student_status: Optional[StudentStatus] = Query(None, alias="status"),
    service: StudentService = Depends(student_service),
):
    students = service.list_students(class_name=class_name, status=student_status)
    return StudentList(students=[StudentOut.model_validate(s) for s in students], total=len(students))


@router.get("/{student_id}", response_model=StudentOut)
async def get_student(student_id: UUID, service: StudentService = Depends(student_service)):
    return StudentOut.model_validate(service.get_student(student_id))


@router.put("/{student_id}", response_model=StudentOut)
async def update_student(student_id: UUID, data: StudentUpdate, service: StudentService = Depends(student_service)):
    return StudentOut.model_validate(service.update_student(student_id, data))
