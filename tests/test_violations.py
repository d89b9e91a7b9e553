import datetime as dt

from carerota.models import Assignment, DaySchedule, Employee, ShiftKind
from carerota.violations import ScheduleViolationDetector, ViolationType

START = dt.date(2025, 8, 1)


def employees():
    return [
        Employee(id="ns1", name="NS1", role="NURSE"),
        Employee(id="pt1", name="PT1", role="PART_TIME", employment="PART_TIME", restricted_to_shift_kinds=["DAY"]),
    ]


def schedule(days, bookings):
    """bookings: (day index, kind, employee id)"""
    result = {}
    for i in range(days):
        day = START + dt.timedelta(days=i)
        result[day.isoformat()] = DaySchedule(date=day)
    for i, kind, employee_id in bookings:
        day = START + dt.timedelta(days=i)
        result[day.isoformat()].shifts[kind].append(Assignment(employee_id=employee_id, employee_name=employee_id))
    return result


def types(violations):
    return [v.violation_type for v in violations]


def test_clean_schedule():
    s = schedule(4, [(0, ShiftKind.NIGHT, "ns1"), (1, ShiftKind.MORNING_OFF, "ns1"), (2, ShiftKind.OFF, "ns1"),
                     (0, ShiftKind.DAY, "pt1")])
    assert ScheduleViolationDetector(employees()).detect_violations(s) == []


def test_double_booking():
    s = schedule(1, [(0, ShiftKind.DAY, "ns1"), (0, ShiftKind.LATE, "ns1")])
    assert types(ScheduleViolationDetector(employees()).detect_violations(s)) == [ViolationType.DOUBLE_BOOKING]


def test_long_run():
    s = schedule(6, [(i, ShiftKind.DAY, "ns1") for i in range(6)])
    violations = ScheduleViolationDetector(employees()).detect_violations(s)
    assert types(violations) == [ViolationType.CONSECUTIVE_DAYS]
    assert violations[0].date_range == (START, START + dt.timedelta(days=5))


def test_missing_night_followup():
    s = schedule(3, [(0, ShiftKind.NIGHT, "ns1"), (1, ShiftKind.DAY, "ns1")])
    violations = ScheduleViolationDetector(employees()).detect_violations(s)
    assert types(violations) == [ViolationType.NIGHT_FOLLOWUP, ViolationType.NIGHT_FOLLOWUP]


def test_night_ban_and_restriction():
    s = schedule(1, [(0, ShiftKind.NIGHT, "pt1")])
    violations = ScheduleViolationDetector(employees()).detect_violations(s)
    assert types(violations) == [ViolationType.NIGHT_BAN, ViolationType.SHIFT_RESTRICTION]
