# schooldesk/services/teacher_service.py
import logging
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from schooldesk import repositories
from schooldesk.core.exceptions import ConflictError
from schooldesk.models import Teacher
from schooldesk.schemas.teacher import TeacherCreate, TeacherUpdate
from schooldesk.services.base import BaseService

logger = logging.getLogger(__name__)


class TeacherService(BaseService):
    def __init__(self, session: Session):
        super().__init__(session)
        self.teachers = repositories.teachers(session)
        self.classes = repositories.classes(session)

    def create_teacher(self, data: TeacherCreate) -> Teacher:
        if self.teachers.find_by(employee_id=data.employee_id):
            raise ConflictError(f"Employee ID {data.employee_id} is already in use")
        if self.teachers.find_by(email=data.email):
            raise ConflictError(f"A teacher with email {data.email} already exists")

        teacher = Teacher(**data.model_dump())
        with self.unit_of_work("Failed to create teacher", conflict_message="Teacher already exists"):
            self.teachers.add(teacher)

        logger.info(f"Created teacher {teacher.employee_id} ({teacher.full_name})")
        return teacher

    def get_teacher(self, teacher_id: UUID) -> Teacher:
        return self.teachers.get_or_404(teacher_id)

    def list_teachers(self, status: Optional[str] = None, subject: Optional[str] = None) -> Sequence[Teacher]:
        filters = {"status": status} if status else {}
        teachers = self.teachers.list(order_by=(Teacher.last_name, Teacher.first_name), **filters)
        if subject:
            # subjects is a JSON list
            teachers = [t for t in teachers if subject in t.subjects]
        return teachers

    def update_teacher(self, teacher_id: UUID, data: TeacherUpdate) -> Teacher:
        teacher = self.teachers.get_or_404(teacher_id)
        changes = data.model_dump(exclude_unset=True)

        if "email" in changes and changes["email"] != teacher.email and self.teachers.find_by(email=changes["email"]):
            raise ConflictError(f"A teacher with email {changes['email']} already exists")

        with self.unit_of_work("Failed to update teacher", conflict_message="Teacher already exists"):
            for field, value in changes.items():
                setattr(teacher, field, value)
        return teacher

    def delete_teacher(self, teacher_id: UUID) -> None:
        teacher = self.teachers.get_or_404(teacher_id)
        if self.classes.count(class_teacher_id=teacher.id):
            raise ConflictError("Teacher is assigned as a class teacher; reassign the class first")

        with self.unit_of_work("Failed to delete teacher"):
            self.teachers.delete(teacher)
        logger.info(f"Deleted teacher {teacher.employee_id}")
