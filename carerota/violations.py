"""
Schedule invariant detection.

Used after each pipeline stage when `check_invariants` is on, and by the
tests, to confirm a schedule still honours the rules no stage may break.
"""

from typing import Dict, List, Tuple, Optional
from dataclasses import dataclass
from enum import Enum
import datetime as dt

from carerota.models import ConstraintSet, DaySchedule, Employee, ShiftKind, SHIFT_DEFINITIONS


class ViolationType(str, Enum):
    """Types of schedule invariant violations."""
    DOUBLE_BOOKING = "double_booking"          # >1 assignment on one date
    CONSECUTIVE_DAYS = "consecutive_days"      # run longer than the limit
    NIGHT_FOLLOWUP = "night_followup"          # NIGHT not followed by MORNING_OFF, OFF
    NIGHT_BAN = "night_ban"                    # part-time/admin on NIGHT
    SHIFT_RESTRICTION = "shift_restriction"    # restricted employee on another kind


@dataclass
class ScheduleViolation:
    """Details of a specific invariant violation."""
    violation_type: ViolationType
    employee_id: str
    employee_name: str
    date_range: Tuple[dt.date, dt.date]
    description: str


class ScheduleViolationDetector:
    """Checks a built schedule against the rules every stage must preserve."""

    def __init__(self, employees: List[Employee], constraints: Optional[ConstraintSet] = None):
        self.employees = {e.id: e for e in employees}
        self.constraints = constraints or ConstraintSet()

    def detect_violations(self, schedule: Dict) -> List[ScheduleViolation]:
        """
        Args:
            schedule: date (or ISO date string) -> DaySchedule

        Returns:
            Violations ordered by type, then date
        """
        days, assignments = self._convert_schedule_format(schedule)

        violations = []
        violations.extend(self._check_double_booking(schedule))
        violations.extend(self._check_consecutive_days(days, assignments))
        violations.extend(self._check_night_followup(days, assignments))
        violations.extend(self._check_night_bans(assignments))
        violations.extend(self._check_shift_restrictions(assignments))

        return sorted(violations, key=lambda v: (v.violation_type.value, v.date_range[0], v.employee_id))

    def _convert_schedule_format(self, schedule: Dict) -> Tuple[List[dt.date], Dict[str, Dict[dt.date, ShiftKind]]]:
        """employee_id -> date -> kind, plus the sorted list of dates."""
        assignments = {employee_id: {} for employee_id in self.employees}
        days = []
        for key, day_schedule in schedule.items():
            day = key if isinstance(key, dt.date) else dt.date.fromisoformat(key)
            days.append(day)
            for kind, entries in day_schedule.shifts.items():
                for entry in entries:
                    assignments.setdefault(entry.employee_id, {})[day] = kind
        return sorted(days), assignments

    def _name(self, employee_id: str) -> str:
        employee = self.employees.get(employee_id)
        return employee.name if employee else employee_id

    def _check_double_booking(self, schedule: Dict) -> List[ScheduleViolation]:
        violations = []
        for key, day_schedule in schedule.items():
            day = key if isinstance(key, dt.date) else dt.date.fromisoformat(key)
            seen = {}
            for kind, entries in day_schedule.shifts.items():
                for entry in entries:
                    seen.setdefault(entry.employee_id, []).append(kind)
            for employee_id, kinds in seen.items():
                if len(kinds) > 1:
                    violations.append(ScheduleViolation(
                        violation_type=ViolationType.DOUBLE_BOOKING,
                        employee_id=employee_id,
                        employee_name=self._name(employee_id),
                        date_range=(day, day),
                        description=f"{self._name(employee_id)} booked {len(kinds)} times on {day}: "
                                    f"{', '.join(k.value for k in kinds)}",
                    ))
        return violations

    def _check_consecutive_days(self, days: List[dt.date],
                                assignments: Dict[str, Dict[dt.date, ShiftKind]]) -> List[ScheduleViolation]:
        violations = []
        limit = self.constraints.max_consecutive_work_days

        for employee_id, booked in assignments.items():
            run_start, run = None, 0
            for day in days:
                kind = booked.get(day)
                if kind is not None and SHIFT_DEFINITIONS[kind]["working"]:
                    run_start = run_start or day
                    run += 1
                    if run == limit + 1:
                        violations.append(ScheduleViolation(
                            violation_type=ViolationType.CONSECUTIVE_DAYS,
                            employee_id=employee_id,
                            employee_name=self._name(employee_id),
                            date_range=(run_start, day),
                            description=f"{self._name(employee_id)} works more than {limit} days in a row",
                        ))
                else:
                    run_start, run = None, 0
        return violations

    def _check_night_followup(self, days: List[dt.date],
                              assignments: Dict[str, Dict[dt.date, ShiftKind]]) -> List[ScheduleViolation]:
        violations = []
        in_range = set(days)

        for employee_id, booked in assignments.items():
            for day, kind in booked.items():
                if kind != ShiftKind.NIGHT:
                    continue
                expected = []
                if self.constraints.rest_after_night:
                    expected.append((day + dt.timedelta(days=1), ShiftKind.MORNING_OFF))
                if self.constraints.rest_after_morning_off:
                    expected.append((day + dt.timedelta(days=2), ShiftKind.OFF))
                for target, wanted in expected:
                    if target in in_range and booked.get(target) != wanted:
                        found = booked.get(target)
                        violations.append(ScheduleViolation(
                            violation_type=ViolationType.NIGHT_FOLLOWUP,
                            employee_id=employee_id,
                            employee_name=self._name(employee_id),
                            date_range=(day, target),
                            description=f"{self._name(employee_id)} night on {day} needs {wanted.value} on "
                                        f"{target}, found {found.value if found else 'nothing'}",
                        ))
        return violations

    def _check_night_bans(self, assignments: Dict[str, Dict[dt.date, ShiftKind]]) -> List[ScheduleViolation]:
        violations = []
        for employee_id, booked in assignments.items():
            employee = self.employees.get(employee_id)
            if employee is None or not employee.night_banned:
                continue
            for day, kind in booked.items():
                if kind == ShiftKind.NIGHT:
                    violations.append(ScheduleViolation(
                        violation_type=ViolationType.NIGHT_BAN,
                        employee_id=employee_id,
                        employee_name=employee.name,
                        date_range=(day, day),
                        description=f"{employee.name} ({employee.role.value}) is not allowed nights",
                    ))
        return violations

    def _check_shift_restrictions(self, assignments: Dict[str, Dict[dt.date, ShiftKind]]) -> List[ScheduleViolation]:
        violations = []
        for employee_id, booked in assignments.items():
            employee = self.employees.get(employee_id)
            if employee is None:
                continue
            for day, kind in booked.items():
                if not employee.allows_kind(kind):
                    violations.append(ScheduleViolation(
                        violation_type=ViolationType.SHIFT_RESTRICTION,
                        employee_id=employee_id,
                        employee_name=employee.name,
                        date_range=(day, day),
                        description=f"{employee.name} is restricted to "
                                    f"{', '.join(k.value for k in employee.restricted_to_shift_kinds)}, "
                                    f"found {kind.value} on {day}",
                    ))
        return violations
