# schooldesk/services/result_service.py - Term results, cohort ranking and analysis
import logging
from collections import Counter, defaultdict
from decimal import Decimal
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from schooldesk import repositories
from schooldesk.core.exceptions import ConflictError, ValidationError
from schooldesk.models import Result, Student, SubjectScore
from schooldesk.schemas.result import BulkResultCreate, ResultCreate, ResultUpdate, SubjectScoreIn
from schooldesk.services.base import BaseService
from schooldesk.services.grading import (
    GRADING_SYSTEM, PASSING_GRADES, competition_ranks, mean, score_range_errors, score_subject, summarize
)

logger = logging.getLogger(__name__)


def build_subject_scores(subjects: Sequence[SubjectScoreIn]) -> List[SubjectScore]:
    """Check score ranges and grade every subject of a result sheet"""
    if not subjects:
        raise ValidationError("A result needs at least one subject")

    seen = set()
    rows = []
    for index, entry in enumerate(subjects):
        key = entry.subject_name.lower()
        if key in seen:
            raise ValidationError(f"Subject {entry.subject_name} appears more than once")
        seen.add(key)

        errors = score_range_errors(entry.subject_name, entry.ca1, entry.ca2, entry.exam)
        if errors:
            raise ValidationError(errors[0], {"errors": errors})

        scored = score_subject(entry.subject_name, entry.ca1, entry.ca2, entry.exam)
        rows.append(SubjectScore(
            position_in_sheet=index,
            subject_name=scored.subject_name,
            ca1=scored.ca1,
            ca2=scored.ca2,
            exam=scored.exam,
            total=scored.total,
            grade=scored.grade,
            remarks=scored.remarks,
        ))
    return rows


def apply_aggregates(result: Result) -> Result:
    total_score, average_score = summarize([score_subject(s.subject_name, s.ca1, s.ca2, s.exam) for s in result.subjects])
    result.total_score = total_score
    result.average_score = average_score
    return result


class ResultService(BaseService):
    def __init__(self, session: Session):
        super().__init__(session)
        self.results = repositories.results(session)
        self.students = repositories.students(session)

    def create_result(self, data: ResultCreate) -> Result:
        student = self.students.get_or_404(data.student_id)
        result = self._new_result(
            student, data.class_name or student.class_name, data.term, data.academic_year, data.subjects
        )
        result.teacher_remarks = data.teacher_remarks
        result.principal_remarks = data.principal_remarks

        with self.unit_of_work("Failed to save result", conflict_message="A result for this student and term already exists"):
            self.results.add(result)

        logger.info(
            f"Created result for {result.student_name} ({result.class_name} {result.term} {result.academic_year}): "
            f"average {result.average_score}"
        )
        return result

    def bulk_create_results(self, data: BulkResultCreate) -> List[Result]:
        """Create a result per entry; either all of them are saved or none is"""
        student_ids = [entry.student_id for entry in data.entries]
        if len(set(student_ids)) != len(student_ids):
            raise ValidationError("Each student may appear only once in a bulk entry")

        created = []
        with self.unit_of_work("Failed to save results", conflict_message="Some students already have results for this term"):
            for entry in data.entries:
                student = self.students.get_or_404(entry.student_id)
                try:
                    result = self._new_result(student, data.class_name, data.term, data.academic_year, entry.subjects)
                except ValidationError as e:
                    raise ValidationError(f"{student.full_name}: {e.message}", e.details) from e
                created.append(self.results.add(result))

        logger.info(f"Created {len(created)} result(s) for {data.class_name} {data.term} {data.academic_year}")
        return created

    def get_result(self, result_id: UUID) -> Result:
        return self.results.get_or_404(result_id)

    def list_results(
        self,
        class_name: Optional[str] = None,
        term: Optional[str] = None,
        academic_year: Optional[str] = None,
        student_id: Optional[UUID] = None,
        status: Optional[str] = None,
    ) -> Sequence[Result]:
        filters = {
            key: value for key, value in {
                "class_name": class_name,
                "term": term,
                "academic_year": academic_year,
                "student_id": student_id,
                "status": status,
            }.items() if value is not None
        }
        return self.results.list(
            order_by=(Result.academic_year.desc(), Result.term, Result.class_name, Result.student_name),
            **filters,
        )

    def update_result(self, result_id: UUID, data: ResultUpdate) -> Result:
        result = self._draft_or_conflict(result_id, "updated")

        with self.unit_of_work("Failed to update result"):
            if data.subjects is not None:
                rows = build_subject_scores(data.subjects)
                # Old rows go first; subject names are unique per result
                result.subjects.clear()
                self.session.flush()
                result.subjects.extend(rows)
                apply_aggregates(result)
            if data.teacher_remarks is not None:
                result.teacher_remarks = data.teacher_remarks
            if data.principal_remarks is not None:
                result.principal_remarks = data.principal_remarks
        return result

    def delete_result(self, result_id: UUID) -> None:
        result = self._draft_or_conflict(result_id, "deleted")
        with self.unit_of_work("Failed to delete result"):
            self.results.delete(result)
        logger.info(f"Deleted draft result {result_id}")

    def publish_result(self, result_id: UUID) -> Result:
        result = self.results.get_or_404(result_id)
        if result.status == "published":
            raise ConflictError("Result is already published")

        with self.unit_of_work("Failed to publish result"):
            result.status = "published"
            self._rank(result.class_name, result.term, result.academic_year)

        logger.info(f"Published result {result.id} for {result.student_name}: position {result.position} of {result.total_students}")
        return result

    def rank_cohort(self, class_name: str, term: str, academic_year: str) -> dict:
        with self.unit_of_work("Failed to rank results"):
            cohort = self._rank(class_name, term, academic_year)

        class_average = cohort[0].class_average if cohort else Decimal("0.00")
        return {
            "class_name": class_name,
            "term": term,
            "academic_year": academic_year,
            "total_students": len(cohort),
            "class_average": class_average,
            "results": sorted(cohort, key=lambda r: (r.position, r.student_name)),
        }

    def cohort_analysis(self, class_name: str, term: str, academic_year: str) -> dict:
        cohort = self._cohort(class_name, term, academic_year)

        per_subject: Dict[str, List[SubjectScore]] = defaultdict(list)
        for result in cohort:
            for score in result.subjects:
                per_subject[score.subject_name].append(score)

        subjects = []
        for subject_name in sorted(per_subject):
            scores = per_subject[subject_name]
            totals = [s.total for s in scores]
            grades = Counter(s.grade for s in scores)
            passed = sum(count for grade, count in grades.items() if grade in PASSING_GRADES)
            subjects.append({
                "subject_name": subject_name,
                "students": len(scores),
                "average_total": mean(totals),
                "highest_total": max(totals),
                "lowest_total": min(totals),
                "pass_rate": mean([100 * passed / len(scores)]),
                "grade_distribution": {band.grade: grades.get(band.grade, 0) for band in GRADING_SYSTEM},
            })

        return {
            "class_name": class_name,
            "term": term,
            "academic_year": academic_year,
            "total_students": len(cohort),
            "class_average": mean([r.average_score for r in cohort]) if cohort else Decimal("0.00"),
            "subjects": subjects,
        }

    # ------------------------------------------------------------------

    def _cohort(self, class_name: str, term: str, academic_year: str) -> Sequence[Result]:
        return self.results.list(class_name=class_name, term=term, academic_year=academic_year)

    def _rank(self, class_name: str, term: str, academic_year: str) -> Sequence[Result]:
        """Assign competition positions and the class average; the caller commits"""
        cohort = self._cohort(class_name, term, academic_year)
        if not cohort:
            return cohort

        positions = competition_ranks([r.average_score for r in cohort])
        class_average = mean([r.average_score for r in cohort])
        for result, position in zip(cohort, positions):
            result.position = position
            result.total_students = len(cohort)
            result.class_average = class_average
        return cohort

    def _draft_or_conflict(self, result_id: UUID, action: str) -> Result:
        result = self.results.get_or_404(result_id)
        if result.status != "draft":
            raise ConflictError(f"Only draft results can be {action}")
        return result

    @staticmethod
    def _new_result(student: Student, class_name: str, term: str, academic_year: str, subjects) -> Result:
        result = Result(
            student_id=student.id,
            student_name=student.full_name,
            class_name=class_name,
            term=term,
            academic_year=academic_year,
            status="draft",
            position=0,
            total_students=0,
            class_average=Decimal("0.00"),
            subjects=build_subject_scores(subjects),
        )
        return apply_aggregates(result)
