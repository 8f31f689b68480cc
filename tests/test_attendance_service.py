# tests/test_attendance_service.py
import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest

from schooldesk.core.exceptions import NotFoundError, ValidationError
from schooldesk.schemas.attendance import AttendanceEntry, BulkAttendanceCreate
from schooldesk.services.attendance_service import AttendanceService, attendance_rate

MONDAY = date(2024, 10, 7)


def sheet(day, marks, class_name="JSS 1"):
    return BulkAttendanceCreate(
        class_name=class_name,
        date=day,
        recorded_by="Form teacher",
        entries=[AttendanceEntry(student_id=student.id, status=status) for student, status in marks],
    )


@pytest.mark.parametrize("attended, total, expected", [
    (0, 0, Decimal("0.00")),
    (3, 3, Decimal("100.00")),
    (2, 3, Decimal("66.67")),
    (1, 8, Decimal("12.50")),
])
def test_attendance_rate(attended, total, expected):
    assert attendance_rate(attended, total) == expected


def test_bulk_record_summarises_day(session, make_student):
    ada, bayo, chi, dele = (make_student(first_name=n) for n in ("Ada", "Bayo", "Chi", "Dele"))
    summary = AttendanceService(session).bulk_record(
        sheet(MONDAY, [(ada, "present"), (bayo, "late"), (chi, "absent"), (dele, "excused")])
    )
    assert summary["total_students"] == 4
    assert (summary["present_count"], summary["late_count"], summary["absent_count"], summary["excused_count"]) == (1, 1, 1, 1)
    assert summary["attendance_rate"] == Decimal("50.00")


def test_remarking_a_day_overwrites(session, make_student):
    ada = make_student()
    service = AttendanceService(session)
    service.bulk_record(sheet(MONDAY, [(ada, "absent")]))
    service.bulk_record(sheet(MONDAY, [(ada, "present")]))

    records = service.list_attendance(student_id=ada.id)
    assert len(records) == 1
    assert records[0].status == "present"
    assert records[0].student_name == "Ada Obi"


def test_student_from_another_class_rejects_whole_sheet(session, make_student):
    ada = make_student()
    outsider = make_student(first_name="Efe", class_name="JSS 2")
    service = AttendanceService(session)

    with pytest.raises(ValidationError, match="Efe Obi is not an active student of JSS 1"):
        service.bulk_record(sheet(MONDAY, [(ada, "present"), (outsider, "present")]))
    assert service.list_attendance(class_name="JSS 1") == []


def test_inactive_student_cannot_be_marked(session, make_student):
    graduated = make_student(status="graduated")
    with pytest.raises(ValidationError):
        AttendanceService(session).bulk_record(sheet(MONDAY, [(graduated, "present")]))


def test_future_date_rejected(session, make_student):
    ada = make_student()
    with pytest.raises(ValidationError, match="future date"):
        AttendanceService(session).bulk_record(sheet(MONDAY + timedelta(days=1), [(ada, "present")]), today=MONDAY)


def test_duplicate_student_on_sheet_rejected(session, make_student):
    ada = make_student()
    with pytest.raises(ValidationError, match="only once"):
        AttendanceService(session).bulk_record(sheet(MONDAY, [(ada, "present"), (ada, "absent")]))


def test_unknown_student_on_sheet(session):
    entry = BulkAttendanceCreate(
        class_name="JSS 1", date=MONDAY, entries=[AttendanceEntry(student_id=uuid.uuid4())],
    )
    with pytest.raises(NotFoundError):
        AttendanceService(session).bulk_record(entry)


def test_student_rate_counts_late_as_attended(session, make_student):
    ada = make_student()
    service = AttendanceService(session)
    for offset, status in enumerate(["present", "late", "absent", "excused"]):
        service.bulk_record(sheet(MONDAY + timedelta(days=offset), [(ada, status)]))

    rate = service.student_rate(ada.id)
    assert rate["days_recorded"] == 4
    assert (rate["present"], rate["late"], rate["absent"], rate["excused"]) == (1, 1, 1, 1)
    assert rate["attendance_rate"] == Decimal("50.00")

    first_two = service.student_rate(ada.id, start_date=MONDAY, end_date=MONDAY + timedelta(days=1))
    assert first_two["attendance_rate"] == Decimal("100.00")


def test_inverted_date_range_rejected(session, make_student):
    ada = make_student()
    with pytest.raises(ValidationError, match="start_date"):
        AttendanceService(session).student_rate(ada.id, start_date=MONDAY, end_date=MONDAY - timedelta(days=1))


def test_class_report_lowest_rate_first(session, make_student):
    ada = make_student(first_name="Ada", last_name="Ani")
    bayo = make_student(first_name="Bayo", last_name="Bello")
    new = make_student(first_name="Chi", last_name="Cole")
    service = AttendanceService(session)
    service.bulk_record(sheet(MONDAY, [(ada, "present"), (bayo, "absent")]))
    service.bulk_record(sheet(MONDAY + timedelta(days=1), [(ada, "present"), (bayo, "present")]))

    report = service.class_report("JSS 1")
    assert report["days_recorded"] == 2
    assert [row["student_name"] for row in report["students"]] == ["Chi Cole", "Bayo Bello", "Ada Ani"]
    assert report["students"][0]["days_recorded"] == 0
    # Students with nothing recorded do not drag the average down
    assert report["average_attendance_rate"] == Decimal("75.00")
    assert new.id in {row["student_id"] for row in report["students"]}


def test_alerts_flag_students_below_threshold(session, make_student):
    ada = make_student(first_name="Ada")
    bayo = make_student(first_name="Bayo")
    efe = make_student(first_name="Efe", class_name="JSS 2")
    make_student(first_name="Unmarked")
    service = AttendanceService(session)
    for offset in range(4):
        day = MONDAY + timedelta(days=offset)
        service.bulk_record(sheet(day, [(ada, "present"), (bayo, "present" if offset == 0 else "absent")]))
        service.bulk_record(sheet(day, [(efe, "absent" if offset else "late")], class_name="JSS 2"))

    alerts = service.alerts()
    assert alerts["threshold"] == Decimal("75")
    assert [(row["student_name"], row["attendance_rate"]) for row in alerts["students"]] == [
        ("Bayo Obi", Decimal("25.00")),
        ("Efe Obi", Decimal("25.00")),
    ]

    only_jss2 = service.alerts(class_name="JSS 2", threshold=Decimal("25"))
    assert only_jss2["students"] == []


def test_alert_threshold_range(session):
    with pytest.raises(ValidationError, match="between 0 and 100"):
        AttendanceService(session).alerts(threshold=Decimal("101"))
