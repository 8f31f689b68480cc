# schooldesk/api/routers/classes.py
from fastapi import APIRouter, Depends, Query, status
from typing import List, Literal, Optional
from uuid import UUID

from schooldesk.api.deps.services import class_service
from schooldesk.models import SchoolClass
from schooldesk.schemas.class_schema import ClassCreate, ClassOut, ClassUpdate
from schooldesk.schemas.student import StudentOut
from schooldesk.services.class_service import ClassService

router = APIRouter()


def to_out(school_class: SchoolClass, enrollment: int) -> ClassOut:
    out = ClassOut.model_validate(school_class)
    out.current_enrollment = enrollment
    return out


@router.post("/", response_model=ClassOut, status_code=status.HTTP_201_CREATED)
async def create_class(data: ClassCreate, service: ClassService = Depends(class_service)):
    school_class = service.create_class(data)
    return to_out(school_class, service.enrollment(school_class.name))


@router.get("/", response_model=List[ClassOut])
async def list_classes(
    academic_year: Optional[str] = Query(None),
    class_status: Optional[Literal["active", "inactive"]] = Query(None, alias="status"),
    service: ClassService = Depends(class_service),
):
    classes = service.list_classes(academic_year=academic_year, status=class_status)
    counts = service.enrollments([c.name for c in classes])
    return [to_out(c, counts.get(c.name, 0)) for c in classes]


@router.get("/{class_id}", response_model=ClassOut)
async def get_class(class_id: UUID, service: ClassService = Depends(class_service)):
    school_class = service.get_class(class_id)
    return to_out(school_class, service.enrollment(school_class.name))


@router.get("/{class_id}/students", response_model=List[StudentOut])
async def get_class_students(class_id: UUID, service: ClassService = Depends(class_service)):
    """Active students of the class"""
    school_class = service.get_class(class_id)
    students = service.students.list(class_name=school_class.name, status="active")
    return [StudentOut.model_validate(s) for s in students]


@router.put("/{class_id}", response_model=ClassOut)
async def update_class(class_id: UUID, data: ClassUpdate, service: ClassService = Depends(class_service)):
    school_class = service.update_class(class_id, data)
    return to_out(school_class, service.enrollment(school_class.name))


@router.delete("/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_class(class_id: UUID, service: ClassService = Depends(class_service)):
    service.delete_class(class_id)
