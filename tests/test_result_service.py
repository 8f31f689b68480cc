# tests/test_result_service.py
from decimal import Decimal

import pytest

from schooldesk.core.exceptions import ConflictError, ValidationError
from schooldesk.models import Result
from schooldesk.schemas.result import (
    BulkResultCreate, BulkResultEntry, ResultCreate, ResultUpdate, SubjectScoreIn
)
from schooldesk.services.result_service import ResultService
from tests.conftest import TERM, YEAR


def sheet(*rows):
    return [SubjectScoreIn(subject_name=name, ca1=ca1, ca2=ca2, exam=exam) for name, ca1, ca2, exam in rows]


def create(session, student, *rows, **extra):
    return ResultService(session).create_result(ResultCreate(
        student_id=student.id, term=TERM, academic_year=YEAR, subjects=sheet(*rows), **extra
    ))


def test_create_result_grades_and_aggregates(session, make_student):
    student = make_student(class_name="JSS 3")
    result = create(session, student, ("Mathematics", 15, 15, 55), ("English", 10, 12, 40), ("Civic", 5, 5, 20))

    assert result.class_name == "JSS 3"
    assert result.status == "draft"
    assert [s.grade for s in result.subjects] == ["A", "C", "F"]
    assert [s.remarks for s in result.subjects] == ["Excellent", "Good", "Fail"]
    assert result.total_score == 85 + 62 + 30
    assert result.average_score == Decimal("59.00")


def test_out_of_range_score_names_subject(session, make_student):
    with pytest.raises(ValidationError, match="CA2 score for Mathematics"):
        create(session, make_student(), ("Mathematics", 15, 18, 55))
    assert session.query(Result).count() == 0


def test_repeated_subject_rejected(session, make_student):
    with pytest.raises(ValidationError):
        create(session, make_student(), ("Mathematics", 1, 1, 1), ("mathematics", 2, 2, 2))


def test_one_result_per_student_and_term(session, make_student):
    student = make_student()
    create(session, student, ("Mathematics", 10, 10, 50))
    with pytest.raises(ConflictError):
        create(session, student, ("English", 10, 10, 50))


def test_bulk_create_is_all_or_nothing(session, make_student):
    good, bad = make_student(first_name="Good"), make_student(first_name="Bad")
    payload = BulkResultCreate(
        class_name="JSS 1",
        term=TERM,
        academic_year=YEAR,
        entries=[
            BulkResultEntry(student_id=good.id, subjects=sheet(("Mathematics", 10, 10, 50))),
            BulkResultEntry(student_id=bad.id, subjects=sheet(("Mathematics", 10, 10, 90))),
        ],
    )
    with pytest.raises(ValidationError, match="Bad Obi"):
        ResultService(session).bulk_create_results(payload)
    assert session.query(Result).count() == 0


def test_bulk_create(session, make_student):
    students = [make_student(first_name=name) for name in ("Ada", "Ben", "Cy")]
    results = ResultService(session).bulk_create_results(BulkResultCreate(
        class_name="JSS 1",
        term=TERM,
        academic_year=YEAR,
        entries=[BulkResultEntry(student_id=s.id, subjects=sheet(("Mathematics", 10, 10, 40 + i))) for i, s in enumerate(students)],
    ))
    assert [r.total_score for r in results] == [60, 61, 62]
    assert session.query(Result).count() == 3


def test_rank_cohort_uses_competition_ranking(session, make_student):
    sheets = {"Ada": (10, 10, 50), "Ben": (15, 15, 55), "Cy": (10, 10, 50), "Dee": (10, 10, 40)}
    results = {
        name: create(session, make_student(first_name=name), ("Mathematics", *scores))
        for name, scores in sheets.items()
    }

    ranked = ResultService(session).rank_cohort("JSS 1", TERM, YEAR)

    positions = {r.student_name.split()[0]: r.position for r in ranked["results"]}
    assert positions == {"Ben": 1, "Ada": 2, "Cy": 2, "Dee": 4}
    assert ranked["total_students"] == 4
    assert ranked["class_average"] == Decimal("71.25")
    assert all(r.total_students == 4 and r.class_average == Decimal("71.25") for r in results.values())


def test_publish_ranks_whole_cohort_including_drafts(session, make_student):
    first = create(session, make_student(first_name="Ada"), ("Mathematics", 15, 15, 60))
    second = create(session, make_student(first_name="Ben"), ("Mathematics", 10, 10, 30))

    service = ResultService(session)
    published = service.publish_result(second.id)

    assert published.status == "published"
    assert published.position == 2
    assert first.status == "draft"
    assert first.position == 1
    assert first.class_average == Decimal("70.00")

    with pytest.raises(ConflictError):
        service.publish_result(second.id)


def test_update_only_while_draft(session, make_student):
    result = create(session, make_student(), ("Mathematics", 10, 10, 50), ("English", 10, 10, 50))
    service = ResultService(session)

    updated = service.update_result(result.id, ResultUpdate(
        subjects=sheet(("Mathematics", 15, 15, 70)), teacher_remarks="Much improved",
    ))
    assert [s.subject_name for s in updated.subjects] == ["Mathematics"]
    assert (updated.total_score, updated.average_score) == (100, Decimal("100.00"))
    assert updated.teacher_remarks == "Much improved"

    service.publish_result(result.id)
    with pytest.raises(ConflictError):
        service.update_result(result.id, ResultUpdate(teacher_remarks="Too late"))
    with pytest.raises(ConflictError):
        service.delete_result(result.id)


def test_delete_draft(session, make_student):
    result = create(session, make_student(), ("Mathematics", 10, 10, 50))
    ResultService(session).delete_result(result.id)
    assert session.query(Result).count() == 0


def test_cohort_analysis(session, make_student):
    create(session, make_student(first_name="Ada"), ("Mathematics", 15, 15, 60), ("English", 10, 10, 10))
    create(session, make_student(first_name="Ben"), ("Mathematics", 10, 10, 30), ("English", 10, 10, 30))

    analysis = ResultService(session).cohort_analysis("JSS 1", TERM, YEAR)
    assert analysis["total_students"] == 2

    english, maths = analysis["subjects"]
    assert maths["subject_name"] == "Mathematics"
    assert (maths["highest_total"], maths["lowest_total"], maths["average_total"]) == (90, 50, Decimal("70.00"))
    assert maths["pass_rate"] == Decimal("100.00")
    assert english["pass_rate"] == Decimal("50.00")
    assert english["grade_distribution"]["F"] == 1
    assert english["grade_distribution"]["D"] == 1


def test_cohort_analysis_of_empty_cohort(session):
    analysis = ResultService(session).cohort_analysis("SS 3", TERM, YEAR)
    assert analysis["total_students"] == 0
    assert analysis["subjects"] == []
