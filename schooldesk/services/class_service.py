# schooldesk/services/class_service.py - Classes and subjects
import logging
from typing import Dict, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from schooldesk import repositories
from schooldesk.core.exceptions import ConflictError, ValidationError
from schooldesk.models import SchoolClass, Student, Subject, Teacher
from schooldesk.schemas.class_schema import ClassCreate, ClassUpdate
from schooldesk.schemas.subject import SubjectCreate, SubjectUpdate
from schooldesk.services.base import BaseService

logger = logging.getLogger(__name__)


class ClassService(BaseService):
    def __init__(self, session: Session):
        super().__init__(session)
        self.classes = repositories.classes(session)
        self.subjects = repositories.subjects(session)
        self.teachers = repositories.teachers(session)
        self.students = repositories.students(session)

    def _active_teacher(self, teacher_id: Optional[UUID]) -> Optional[Teacher]:
        if teacher_id is None:
            return None
        teacher = self.teachers.get_or_404(teacher_id)
        if teacher.status != "active":
            raise ValidationError(f"{teacher.full_name} is not an active teacher")
        return teacher

    # ------------------------------------------------------------------
    # Classes
    # ------------------------------------------------------------------

    def create_class(self, data: ClassCreate) -> SchoolClass:
        if self.classes.find_by(name=data.name, academic_year=data.academic_year):
            raise ConflictError(f"Class {data.name} already exists for {data.academic_year}")
        self._active_teacher(data.class_teacher_id)

        school_class = SchoolClass(**data.model_dump())
        with self.unit_of_work(
            "Failed to create class",
            conflict_message=f"Class {data.name} already exists for {data.academic_year}",
        ):
            self.classes.add(school_class)

        logger.info(f"Created class {school_class.name} ({school_class.academic_year})")
        return school_class

    def get_class(self, class_id: UUID) -> SchoolClass:
        return self.classes.get_or_404(class_id)

    def list_classes(self, academic_year: Optional[str] = None, status: Optional[str] = None) -> Sequence[SchoolClass]:
        filters = {}
        if academic_year:
            filters["academic_year"] = academic_year
        if status:
            filters["status"] = status
        return self.classes.list(order_by=(SchoolClass.academic_year, SchoolClass.name), **filters)

    def update_class(self, class_id: UUID, data: ClassUpdate) -> SchoolClass:
        school_class = self.classes.get_or_404(class_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("class_teacher_id") is not None:
            self._active_teacher(changes["class_teacher_id"])
        if "capacity" in changes and changes["capacity"] < self.enrollment(school_class.name):
            raise ValidationError("Capacity cannot be below the current enrollment")

        with self.unit_of_work("Failed to update class"):
            for field, value in changes.items():
                setattr(school_class, field, value)
        self.session.refresh(school_class, ["class_teacher"])
        return school_class

    def delete_class(self, class_id: UUID) -> None:
        school_class = self.classes.get_or_404(class_id)
        if self.enrollment(school_class.name):
            raise ConflictError("Cannot delete a class that still has active students")

        with self.unit_of_work("Failed to delete class"):
            self.classes.delete(school_class)
        logger.info(f"Deleted class {school_class.name} ({school_class.academic_year})")

    def enrollment(self, class_name: str) -> int:
        return self.students.count(class_name=class_name, status="active")

    def enrollments(self, class_names: Sequence[str]) -> Dict[str, int]:
        """Active student counts for several classes in one query"""
        if not class_names:
            return {}
        rows = self.session.execute(
            select(Student.class_name, func.count())
            .where(Student.class_name.in_(class_names), Student.status == "active")
            .group_by(Student.class_name)
        ).all()
        return {name: count for name, count in rows}

    # ------------------------------------------------------------------
    # Subjects
    # ------------------------------------------------------------------

    def create_subject(self, data: SubjectCreate) -> Subject:
        if self.subjects.find_by(code=data.code):
            raise ConflictError(f"Subject code {data.code} is already in use")
        self._active_teacher(data.teacher_id)

        subject = Subject(**data.model_dump())
        with self.unit_of_work("Failed to create subject", conflict_message=f"Subject code {data.code} is already in use"):
            self.subjects.add(subject)

        logger.info(f"Created subject {subject.code} ({subject.name})")
        return subject

    def get_subject(self, subject_id: UUID) -> Subject:
        return self.subjects.get_or_404(subject_id)

    def list_subjects(self, class_name: Optional[str] = None, status: Optional[str] = None) -> Sequence[Subject]:
        filters = {"status": status} if status else {}
        subjects = self.subjects.list(order_by=Subject.name, **filters)
        if class_name:
            subjects = [s for s in subjects if class_name in s.classes]
        return subjects

    def update_subject(self, subject_id: UUID, data: SubjectUpdate) -> Subject:
        subject = self.subjects.get_or_404(subject_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("teacher_id") is not None:
            self._active_teacher(changes["teacher_id"])

        with self.unit_of_work("Failed to update subject"):
            for field, value in changes.items():
                setattr(subject, field, value)
        self.session.refresh(subject, ["teacher"])
        return subject

    def delete_subject(self, subject_id: UUID) -> None:
        subject = self.subjects.get_or_404(subject_id)
        with self.unit_of_work("Failed to delete subject"):
            self.subjects.delete(subject)
