"""
Scheduling context shared by every pipeline stage.

One context is built per optimize call. Stages receive it explicitly and
mutate only its schedule, tracking and alert list; the employees, rules
and requests it references are never modified.
"""

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .models import (
    Alert,
    AlertCategory,
    Assignment,
    ConstraintSet,
    DaySchedule,
    Employee,
    EmployeeTrackingState,
    Severity,
    ShiftKind,
    ShiftRule,
    TimeOffRequest,
    SHIFT_DEFINITIONS,
    WORKING_SHIFTS,
)
from .utils import date_list

logger = logging.getLogger(__name__)


@dataclass
class SchedulingContext:
    employees: List[Employee]
    start_date: dt.date
    days: int
    constraints: ConstraintSet
    rules: Dict[ShiftKind, ShiftRule]
    time_off_requests: List[TimeOffRequest] = field(default_factory=list)

    dates: List[dt.date] = field(init=False)
    schedule: Dict[dt.date, DaySchedule] = field(init=False)
    tracking: Dict[str, EmployeeTrackingState] = field(init=False)
    employees_by_id: Dict[str, Employee] = field(init=False)
    alerts: List[Alert] = field(default_factory=list, init=False)

    def __post_init__(self):
        self.dates = date_list(self.start_date, self.days)
        self.schedule = {}
        self.tracking = {e.id: EmployeeTrackingState() for e in self.employees}
        self.employees_by_id = {e.id: e for e in self.employees}

    # ---- lookups -------------------------------------------------------

    @property
    def end_date(self) -> dt.date:
        return self.dates[-1]

    def in_range(self, day: dt.date) -> bool:
        return self.start_date <= day <= self.end_date

    def shift_of(self, employee_id: str, day: dt.date) -> Optional[ShiftKind]:
        """Kind the employee is booked on for the day, None if unassigned or out of range."""
        day_schedule = self.schedule.get(day)
        if day_schedule is None:
            return None
        return day_schedule.find(employee_id)

    def is_assigned(self, employee_id: str, day: dt.date) -> bool:
        return self.shift_of(employee_id, day) is not None

    def is_working(self, employee_id: str, day: dt.date) -> bool:
        kind = self.shift_of(employee_id, day)
        return kind is not None and SHIFT_DEFINITIONS[kind]["working"]

    def count_work_days(self, employee_id: str) -> int:
        return sum(1 for day in self.schedule if self.is_working(employee_id, day))

    def count_days_off(self, employee_id: str) -> int:
        """Non-working days: OFF, MORNING_OFF or no assignment at all."""
        return len(self.dates) - self.count_work_days(employee_id)

    def count_shift(self, employee_id: str, kind: ShiftKind) -> int:
        return sum(
            1 for day_schedule in self.schedule.values()
            if any(a.employee_id == employee_id for a in day_schedule.shifts[kind])
        )

    def working_headcount(self, day: dt.date) -> int:
        day_schedule = self.schedule[day]
        return sum(day_schedule.headcount(kind) for kind in WORKING_SHIFTS)

    def work_run_with(self, employee_id: str, day: dt.date) -> int:
        """Length of the working run through `day` if the employee also worked that day."""
        run = 1
        cursor = day - dt.timedelta(days=1)
        while self.is_working(employee_id, cursor):
            run += 1
            cursor -= dt.timedelta(days=1)
        cursor = day + dt.timedelta(days=1)
        while self.is_working(employee_id, cursor):
            run += 1
            cursor += dt.timedelta(days=1)
        return run

    # ---- mutation ------------------------------------------------------

    def add(self, day: dt.date, kind: ShiftKind, employee: Employee, reason: str = "", **flags) -> Assignment:
        if self.is_assigned(employee.id, day):
            raise RuntimeError(
                f"{employee.name} already booked on {day} as {self.shift_of(employee.id, day).value}"
            )
        assignment = Assignment(employee_id=employee.id, employee_name=employee.name, reason=reason, **flags)
        self.schedule[day].shifts[kind].append(assignment)
        return assignment

    def remove(self, employee_id: str, day: dt.date) -> Optional[Assignment]:
        """Drop the employee from every bucket of the day, returning what was removed."""
        removed = None
        for kind, assignments in self.schedule[day].shifts.items():
            kept = [a for a in assignments if a.employee_id != employee_id]
            if len(kept) != len(assignments):
                removed = next(a for a in assignments if a.employee_id == employee_id)
                self.schedule[day].shifts[kind] = kept
        return removed

    def reassign(self, day: dt.date, kind: ShiftKind, employee: Employee, reason: str = "", **flags):
        """Remove-then-add; returns the kind the employee held before (or None)."""
        previous = self.shift_of(employee.id, day)
        self.remove(employee.id, day)
        self.add(day, kind, employee, reason, **flags)
        return previous

    # ---- alerts --------------------------------------------------------

    def alert(self, category: AlertCategory, code: str, severity: Severity, message: str, **details) -> Alert:
        alert = Alert(category=category, code=code, severity=severity, message=message, **details)
        self.alerts.append(alert)
        log = logger.warning if severity == Severity.ERROR else logger.debug
        log("[%s] %s", code, message)
        return alert
