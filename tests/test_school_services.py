# tests/test_school_services.py - Teachers, classes and subjects
import uuid

import pytest

from schooldesk.core.exceptions import ConflictError, NotFoundError, ValidationError
from schooldesk.schemas.class_schema import ClassCreate, ClassUpdate
from schooldesk.schemas.subject import SubjectCreate, SubjectUpdate
from schooldesk.schemas.teacher import TeacherCreate, TeacherUpdate
from schooldesk.services.class_service import ClassService
from schooldesk.services.teacher_service import TeacherService
from tests.conftest import YEAR


@pytest.fixture
def make_teacher(session):
    counter = iter(range(1, 10_000))

    def _make(first_name="Ngozi", last_name="Adeyemi", subjects=("Mathematics",), **extra):
        n = next(counter)
        return TeacherService(session).create_teacher(TeacherCreate(
            employee_id=f"emp{n:03d}",
            first_name=first_name,
            last_name=last_name,
            email=f"teacher{n}@greenfield.edu.ng",
            subjects=list(subjects),
            **extra,
        ))

    return _make


def class_data(name="JSS 1", **extra):
    return ClassCreate(name=name, level="Junior Secondary", academic_year=YEAR, **extra)


def test_create_teacher_normalises_employee_id(make_teacher):
    teacher = make_teacher()
    assert teacher.employee_id == "EMP001"
    assert teacher.full_name == "Ngozi Adeyemi"
    assert teacher.status == "active"


def test_duplicate_teacher_email_conflicts(session, make_teacher):
    teacher = make_teacher()
    with pytest.raises(ConflictError, match="already exists"):
        TeacherService(session).create_teacher(TeacherCreate(
            employee_id="EMP999", first_name="Ife", last_name="Ola", email=teacher.email,
        ))


def test_update_teacher_email_to_taken_address_conflicts(session, make_teacher):
    first, second = make_teacher(), make_teacher()
    with pytest.raises(ConflictError):
        TeacherService(session).update_teacher(second.id, TeacherUpdate(email=first.email))


def test_list_teachers_by_subject(session, make_teacher):
    make_teacher(last_name="Bello", subjects=("English",))
    maths = make_teacher(last_name="Chukwu", subjects=("Mathematics", "Physics"))

    found = TeacherService(session).list_teachers(subject="Physics")
    assert [t.id for t in found] == [maths.id]


def test_class_teacher_cannot_be_deleted(session, make_teacher):
    teacher = make_teacher()
    ClassService(session).create_class(class_data(class_teacher_id=teacher.id))

    with pytest.raises(ConflictError, match="class teacher"):
        TeacherService(session).delete_teacher(teacher.id)


def test_create_class_with_teacher(session, make_teacher):
    teacher = make_teacher()
    school_class = ClassService(session).create_class(class_data(class_teacher_id=teacher.id))
    assert school_class.class_teacher_name == "Ngozi Adeyemi"
    assert school_class.capacity == 40


def test_duplicate_class_for_year_conflicts(session):
    service = ClassService(session)
    service.create_class(class_data())
    with pytest.raises(ConflictError, match="already exists"):
        service.create_class(class_data())
    # Same name in another year is a different class
    service.create_class(ClassCreate(name="JSS 1", level="Junior Secondary", academic_year="2025/2026"))


def test_inactive_teacher_cannot_lead_class(session, make_teacher):
    teacher = make_teacher()
    TeacherService(session).update_teacher(teacher.id, TeacherUpdate(status="inactive"))
    with pytest.raises(ValidationError, match="not an active teacher"):
        ClassService(session).create_class(class_data(class_teacher_id=teacher.id))


def test_unknown_class_teacher(session):
    with pytest.raises(NotFoundError):
        ClassService(session).create_class(class_data(class_teacher_id=uuid.uuid4()))


def test_capacity_cannot_drop_below_enrollment(session, make_student):
    service = ClassService(session)
    school_class = service.create_class(class_data(name="JSS 2"))
    make_student(class_name="JSS 2")
    make_student(class_name="JSS 2")
    make_student(class_name="JSS 2", status="graduated")

    assert service.enrollment("JSS 2") == 2
    with pytest.raises(ValidationError, match="below the current enrollment"):
        service.update_class(school_class.id, ClassUpdate(capacity=1))
    assert service.update_class(school_class.id, ClassUpdate(capacity=2)).capacity == 2


def test_reassigning_class_teacher_refreshes_name(session, make_teacher):
    service = ClassService(session)
    school_class = service.create_class(class_data(class_teacher_id=make_teacher().id))
    other = make_teacher(first_name="Kunle", last_name="Ade")

    updated = service.update_class(school_class.id, ClassUpdate(class_teacher_id=other.id))
    assert updated.class_teacher_name == "Kunle Ade"


def test_class_with_active_students_cannot_be_deleted(session, make_student):
    service = ClassService(session)
    school_class = service.create_class(class_data())
    student = make_student(class_name="JSS 1")

    with pytest.raises(ConflictError, match="active students"):
        service.delete_class(school_class.id)

    student.status = "transferred"
    session.commit()
    service.delete_class(school_class.id)
    with pytest.raises(NotFoundError):
        service.get_class(school_class.id)


def test_enrollments_groups_counts(session, make_student):
    make_student(class_name="JSS 1")
    make_student(class_name="JSS 1")
    make_student(class_name="JSS 3")

    counts = ClassService(session).enrollments(["JSS 1", "JSS 2", "JSS 3"])
    assert counts == {"JSS 1": 2, "JSS 3": 1}


def test_subject_code_is_unique(session, make_teacher):
    service = ClassService(session)
    subject = service.create_subject(SubjectCreate(
        name="Mathematics", code="mth", classes=["JSS 1"], teacher_id=make_teacher().id, is_core=True,
    ))
    assert subject.code == "MTH"
    assert subject.teacher_name == "Ngozi Adeyemi"

    with pytest.raises(ConflictError, match="MTH"):
        service.create_subject(SubjectCreate(name="Further Maths", code="MTH"))


def test_list_subjects_for_class(session):
    service = ClassService(session)
    service.create_subject(SubjectCreate(name="Mathematics", code="MTH", classes=["JSS 1", "JSS 2"]))
    service.create_subject(SubjectCreate(name="Chemistry", code="CHM", classes=["SS 1"]))
    basic = service.create_subject(SubjectCreate(name="Basic Science", code="BSC", classes=["JSS 1"]))
    service.update_subject(basic.id, SubjectUpdate(status="inactive"))

    assert [s.code for s in service.list_subjects(class_name="JSS 1")] == ["BSC", "MTH"]
    assert [s.code for s in service.list_subjects(class_name="JSS 1", status="active")] == ["MTH"]


def test_delete_subject(session):
    service = ClassService(session)
    subject = service.create_subject(SubjectCreate(name="Music", code="MUS"))
    service.delete_subject(subject.id)
    with pytest.raises(NotFoundError):
        service.get_subject(subject.id)
