import datetime as dt
from pathlib import Path

from carerota.config import load_employees_csv, load_problem
from carerota.models import EmploymentKind, Role, ShiftKind

DATA = Path(__file__).resolve().parent.parent / "data"


def test_sample_problem_loads():
    problem = load_problem(DATA / "sample_problem.yml")

    assert problem.start_date == dt.date(2025, 8, 1)
    assert problem.days == 31
    assert len(problem.employees) == 16
    assert len(problem.time_off_requests) == 19
    assert problem.constraints.mandatory_days_off_per_month == 9
    assert problem.shift_rules is None


def test_roster_csv_columns():
    employees = {e.id: e for e in load_employees_csv(DATA / "sample_roster.csv")}

    pt21 = employees["pt21"]
    assert pt21.role == Role.PART_TIME
    assert pt21.employment == EmploymentKind.PART_TIME
    assert pt21.flexible_substitute
    assert pt21.restricted_to_shift_kinds == [ShiftKind.DAY]
    assert pt21.skills == ["PART_TIME", "CAREGIVER"]
    assert employees["ad31"].licensed_capable
    assert employees["ns1"].can_work_night
    assert not employees["ns1"].restricted_to_shift_kinds
    assert employees["pt22"].night_banned


def test_inline_employees_and_partial_constraints(tmp_path):
    path = tmp_path / "problem.yml"
    path.write_text(
        "start_date: 2025-09-01\n"
        "days: 7\n"
        "constraints:\n"
        "  max_consecutive_work_days: 4\n"
        "employees:\n"
        "  - {id: ns1, name: NS1, role: NURSE}\n"
        "  - {id: cg1, name: CG1, role: CAREGIVER}\n"
        "time_off_requests:\n"
        "  - {employee_id: ns1, date: 2025-09-03, priority: HIGH, status: PENDING}\n"
    )

    problem = load_problem(path)

    assert [e.id for e in problem.employees] == ["ns1", "cg1"]
    assert problem.constraints.max_consecutive_work_days == 4
    assert problem.constraints.mandatory_days_off_per_month == 9
    assert problem.time_off_requests[0].priority_level == 3
    assert problem.time_off_requests[0].status == "PENDING"


def test_explicit_roster_csv_overrides_inline_employees(tmp_path):
    path = tmp_path / "problem.yml"
    path.write_text(
        "start_date: '2025-09-01'\n"
        "days: 3\n"
        "employees:\n"
        "  - {id: x1, name: X1, role: NURSE}\n"
    )

    problem = load_problem(path, roster_csv=DATA / "sample_roster.csv")

    assert len(problem.employees) == 16
    assert problem.start_date == dt.date(2025, 9, 1)
