# schooldesk/services/student_service.py
import logging
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from schooldesk import repositories
from schooldesk.core.exceptions import ConflictError
from schooldesk.models import Student
from schooldesk.schemas.student import StudentCreate, StudentUpdate
from schooldesk.services.base import BaseService

logger = logging.getLogger(__name__)


class StudentService(BaseService):
    def __init__(self, session: Session):
        super().__init__(session)
        self.students = repositories.students(session)

    def create_student(self, data: StudentCreate) -> Student:
        if self.students.find_by(admission_number=data.admission_number):
            raise ConflictError(f"Admission number {data.admission_number} is already in use")

        student = Student(**data.model_dump())
        with self.unit_of_work(
            "Failed to create student",
            conflict_message=f"Admission number {data.admission_number} is already in use",
        ):
            self.students.add(student)

        logger.info(f"Created student {student.admission_number} in {student.class_name}")
        return student

    def get_student(self, student_id: UUID) -> Student:
        return self.students.get_or_404(student_id)

    def list_students(self, class_name: Optional[str] = None, status: Optional[str] = None) -> Sequence[Student]:
        filters = {}
        if class_name:
            filters["class_name"] = class_name
        if status:
            filters["status"] = status
        return self.students.list(order_by=(Student.last_name, Student.first_name), **filters)

    def update_student(self, student_id: UUID, data: StudentUpdate) -> Student:
        student = self.students.get_or_404(student_id)
        with self.unit_of_work("Failed to update student"):
            for field, value in data.model_dump(exclude_unset=True).items():
                setattr(student, field, value)
        return student
