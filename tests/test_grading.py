# tests/test_grading.py
from decimal import Decimal

import pytest

from schooldesk.services.grading import (
    competition_ranks, grade_for, mean, ordinal, score_range_errors, score_subject, summarize
)


@pytest.mark.parametrize("total, expected", [
    (100, ("A", "Excellent")),
    (80, ("A", "Excellent")),
    (79, ("B", "Very Good")),
    (70, ("B", "Very Good")),
    (69, ("C", "Good")),
    (60, ("C", "Good")),
    (59, ("D", "Fair")),
    (50, ("D", "Fair")),
    (49, ("E", "Pass")),
    (40, ("E", "Pass")),
    (39, ("F", "Fail")),
    (0, ("F", "Fail")),
])
def test_grade_band_boundaries(total, expected):
    assert grade_for(total) == expected


def test_every_whole_total_has_exactly_one_band():
    grades = [grade_for(total)[0] for total in range(0, 101)]
    assert grades.count("A") == 21
    assert grades.count("F") == 40
    assert set(grades) == {"A", "B", "C", "D", "E", "F"}


def test_fractional_total_falls_into_band_it_reaches():
    assert grade_for(79.5) == ("B", "Very Good")
    assert grade_for(Decimal("39.99")) == ("F", "Fail")


@pytest.mark.parametrize("total", [-1, 101, 150])
def test_grade_outside_range_raises(total):
    with pytest.raises(ValueError):
        grade_for(total)


def test_score_subject_example_sheet():
    scored = score_subject("Mathematics", 15, 18, 55)
    assert scored.total == 88
    assert (scored.grade, scored.remarks) == ("A", "Excellent")


def test_score_range_errors_name_the_subject():
    errors = score_range_errors("English", 16, 3, 71)
    assert errors == [
        "CA1 score for English must be between 0 and 15",
        "Exam score for English must be between 0 and 70",
    ]
    assert score_range_errors("English", 15, 15, 70) == []


def test_summarize_rounds_average_to_two_places():
    subjects = [score_subject("A", 10, 10, 50), score_subject("B", 10, 10, 47), score_subject("C", 5, 5, 50)]
    total, average = summarize(subjects)
    assert total == 197
    assert average == Decimal("65.67")


def test_summarize_empty_raises():
    with pytest.raises(ValueError):
        summarize([])


def test_mean_rounds_half_up():
    assert mean([Decimal("70.125")]) == Decimal("70.13")


def test_competition_ranks_share_ties_and_skip():
    assert competition_ranks([70, 85, 70, 60]) == [2, 1, 2, 4]
    assert competition_ranks([]) == []


@pytest.mark.parametrize("position, expected", [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"), (12, "12th"), (22, "22nd"), (113, "113th")])
def test_ordinal(position, expected):
    assert ordinal(position) == expected
