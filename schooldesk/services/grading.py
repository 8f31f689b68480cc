# schooldesk/services/grading.py - Score totals, grade bands and rankings
"""
Pure functions behind result aggregation.

Each subject is scored out of 100: two continuous assessments worth 15
each and an exam worth 70. Grades are fixed bands on that total.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, NamedTuple, Sequence, Tuple, Union

Number = Union[int, float, Decimal]

CA_MAX = 15
EXAM_MAX = 70
TOTAL_MAX = CA_MAX * 2 + EXAM_MAX
TWO_PLACES = Decimal("0.01")


class GradeBand(NamedTuple):
    grade: str
    minimum: int
    maximum: int
    remarks: str


# Highest band first; lookup takes the first band whose minimum is reached
GRADING_SYSTEM: Tuple[GradeBand, ...] = (
    GradeBand("A", 80, 100, "Excellent"),
    GradeBand("B", 70, 79, "Very Good"),
    GradeBand("C", 60, 69, "Good"),
    GradeBand("D", 50, 59, "Fair"),
    GradeBand("E", 40, 49, "Pass"),
    GradeBand("F", 0, 39, "Fail"),
)

PASSING_GRADES = frozenset(band.grade for band in GRADING_SYSTEM if band.grade != "F")


@dataclass(frozen=True)
class ScoredSubject:
    subject_name: str
    ca1: int
    ca2: int
    exam: int
    total: int
    grade: str
    remarks: str


def grade_for(total: Number) -> Tuple[str, str]:
    """Return ``(grade, remarks)`` for a subject total out of 100"""
    if total < 0 or total > TOTAL_MAX:
        raise ValueError(f"Total score must be between 0 and {TOTAL_MAX}, got {total}")
    for band in GRADING_SYSTEM:
        if total >= band.minimum:
            return band.grade, band.remarks
    raise AssertionError("grading bands must cover 0")


def score_subject(subject_name: str, ca1: int, ca2: int, exam: int) -> ScoredSubject:
    total = ca1 + ca2 + exam
    grade, remarks = grade_for(total)
    return ScoredSubject(subject_name, ca1, ca2, exam, total, grade, remarks)


def score_range_errors(subject_name: str, ca1: int, ca2: int, exam: int) -> List[str]:
    errors = []
    if not 0 <= ca1 <= CA_MAX:
        errors.append(f"CA1 score for {subject_name} must be between 0 and {CA_MAX}")
    if not 0 <= ca2 <= CA_MAX:
        errors.append(f"CA2 score for {subject_name} must be between 0 and {CA_MAX}")
    if not 0 <= exam <= EXAM_MAX:
        errors.append(f"Exam score for {subject_name} must be between 0 and {EXAM_MAX}")
    return errors


def mean(values: Sequence[Number]) -> Decimal:
    if not values:
        raise ValueError("Cannot average an empty sequence")
    total = sum(Decimal(str(v)) for v in values)
    return (total / len(values)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def summarize(subjects: Sequence[ScoredSubject]) -> Tuple[int, Decimal]:
    """Student-level ``(total_score, average_score)``"""
    if not subjects:
        raise ValueError("A result needs at least one subject")
    totals = [s.total for s in subjects]
    return sum(totals), mean(totals)


def competition_ranks(scores: Iterable[Number]) -> List[int]:
    """
    Standard competition ranking ("1224"), highest score first.

    Returns positions aligned with the input order.
    """
    scores = list(scores)
    order = sorted(range(len(scores)), key=lambda i: scores[i], reverse=True)
    positions = [0] * len(scores)
    previous = None
    for rank, index in enumerate(order, start=1):
        if previous is not None and scores[index] == scores[previous]:
            positions[index] = positions[previous]
        else:
            positions[index] = rank
        previous = index
    return positions


def ordinal(position: int) -> str:
    """1 -> '1st', 12 -> '12th', 22 -> '22nd'"""
    if 10 <= position % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(position % 10, "th")
    return f"{position}{suffix}"
