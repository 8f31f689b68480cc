# schooldesk/schemas/common.py - Field types shared across schemas
import re
from typing import Annotated, Literal

from pydantic import AfterValidator, Field

Term = Literal["1st Term", "2nd Term", "3rd Term"]

ACADEMIC_YEAR_PATTERN = re.compile(r"^(\d{4})/(\d{4})$")


def _check_academic_year(v: str) -> str:
    match = ACADEMIC_YEAR_PATTERN.match(v)
    if not match or int(match.group(2)) != int(match.group(1)) + 1:
        raise ValueError("Academic year must look like 2023/2024")
    return v


AcademicYear = Annotated[str, AfterValidator(_check_academic_year)]

# Money travels as integer kobo
Kobo = Annotated[int, Field(ge=0, description="Amount in kobo (1 NGN = 100 kobo)")]
PositiveKobo = Annotated[int, Field(gt=0, description="Amount in kobo (1 NGN = 100 kobo)")]


def strip_required(value: str, label: str) -> str:
    """Ensure a text field is not just whitespace"""
    if not value or not value.strip():
        raise ValueError(f"{label} cannot be empty or whitespace")
    return value.strip()
