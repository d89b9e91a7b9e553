"""
Shift optimizer: runs the scheduling stages in fixed order over one
freshly built context and returns the finished schedule with its alerts.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional

from .consecutive import enforce_max_consecutive_work_days
from .context import SchedulingContext
from .daily_assigner import assign_daily_shifts, check_mandatory_staffing
from .days_off import enforce_mandatory_days_off
from .errors import InputValidationError
from .initializer import initialize_schedule
from .models import (
    ConstraintSet,
    DEFAULT_SHIFT_RULES,
    Employee,
    ProblemInput,
    ScheduleResult,
    ShiftKind,
    ShiftRule,
    TimeOffRequest,
)
from .night_followup import apply_night_followup
from .utils import date_key, parse_date
from .violations import ScheduleViolationDetector, ViolationType
from .workload import build_workload_report, report_workload

logger = logging.getLogger(__name__)

STAGES = [
    "initialize",
    "daily_assignment",
    "night_followup",
    "mandatory_days_off",
    "workload_report",
    "consecutive_cap",
    "staffing_audit",
]


class ShiftOptimizer:
    """Builds a schedule for one contiguous date range."""

    def __init__(self, employees: List[Employee], constraints: Optional[ConstraintSet] = None,
                 time_off_requests: Optional[List[TimeOffRequest]] = None,
                 shift_rules: Optional[List[ShiftRule]] = None):
        self.employees = list(employees or [])
        self.constraints = constraints or ConstraintSet()
        self.time_off_requests = list(time_off_requests or [])
        self.shift_rules = shift_rules if shift_rules is not None else DEFAULT_SHIFT_RULES

    def optimize(self, start_date, days: int) -> ScheduleResult:
        ctx = self.build_context(start_date, days)
        for stage_name in STAGES:
            self.run_stage(ctx, stage_name)
        return build_result(ctx)

    def build_context(self, start_date, days: int) -> SchedulingContext:
        """Validate inputs and return a fresh context; nothing is scheduled yet."""
        try:
            start = parse_date(start_date)
        except (TypeError, ValueError) as e:
            raise InputValidationError(f"Invalid start date {start_date!r}: {e}") from e
        if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
            raise InputValidationError(f"Day count must be a positive integer, got {days!r}")
        if not self.employees:
            raise InputValidationError("Employee roster is empty")
        ids = [e.id for e in self.employees]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise InputValidationError(f"Duplicate employee ids: {', '.join(duplicates)}")

        rules = {r.kind: r for r in self.shift_rules}
        ordered_rules: Dict[ShiftKind, ShiftRule] = {kind: rules[kind] for kind in ShiftKind if kind in rules}

        return SchedulingContext(
            employees=self.employees,
            start_date=start,
            days=days,
            constraints=self.constraints,
            rules=ordered_rules,
            time_off_requests=self.time_off_requests,
        )

    def run_stage(self, ctx: SchedulingContext, stage_name: str) -> None:
        logger.info("Stage %s", stage_name)
        if stage_name == "initialize":
            initialize_schedule(ctx)
        elif stage_name == "daily_assignment":
            for day in ctx.dates:
                assign_daily_shifts(ctx, day)
        elif stage_name == "night_followup":
            apply_night_followup(ctx)
        elif stage_name == "mandatory_days_off":
            enforce_mandatory_days_off(ctx)
        elif stage_name == "workload_report":
            report_workload(ctx)
        elif stage_name == "consecutive_cap":
            enforce_max_consecutive_work_days(ctx)
        elif stage_name == "staffing_audit":
            audit_staffing(ctx)
        else:
            raise ValueError(f"Unknown stage: {stage_name}")

        if ctx.constraints.check_invariants:
            check_stage_invariants(ctx, stage_name)


def audit_staffing(ctx: SchedulingContext) -> int:
    """Report shifts left short by the later stages that the daily check never saw."""
    raised = 0
    for day in ctx.dates:
        raised += check_mandatory_staffing(ctx, day, code="FINAL_STAFF_SHORTAGE")
    return raised


def check_stage_invariants(ctx: SchedulingContext, stage_name: str) -> None:
    detector = ScheduleViolationDetector(ctx.employees, ctx.constraints)
    violations = detector.detect_violations(ctx.schedule)
    # night follow-up and the run cap only hold once their own stages have run
    done = STAGES[: STAGES.index(stage_name) + 1]
    for v in violations:
        if v.violation_type == ViolationType.NIGHT_FOLLOWUP and "night_followup" not in done:
            continue
        if v.violation_type == ViolationType.CONSECUTIVE_DAYS and "consecutive_cap" not in done:
            continue
        logger.error("After %s: %s", stage_name, v.description)


def build_result(ctx: SchedulingContext) -> ScheduleResult:
    schedule = {date_key(day): ctx.schedule[day] for day in ctx.dates}
    roster = {
        date_key(day): {
            a.employee_id: kind.value
            for kind, entries in ctx.schedule[day].shifts.items()
            for a in entries
        }
        for day in ctx.dates
    }
    severities = Counter(a.severity.value for a in ctx.alerts)
    categories = Counter(a.category.value for a in ctx.alerts)
    summary = {
        "start_date": ctx.start_date.isoformat(),
        "end_date": ctx.end_date.isoformat(),
        "days": len(ctx.dates),
        "employees": len(ctx.employees),
        "alerts_by_severity": dict(severities),
        "alerts_by_category": dict(categories),
    }
    return ScheduleResult(
        schedule=schedule,
        alerts=list(ctx.alerts),
        roster=roster,
        workload=build_workload_report(ctx),
        summary=summary,
    )


def optimize_schedule(problem: ProblemInput) -> ScheduleResult:
    """Run the full pipeline for a validated problem input."""
    optimizer = ShiftOptimizer(
        problem.employees,
        constraints=problem.constraints,
        time_off_requests=problem.time_off_requests,
        shift_rules=problem.shift_rules,
    )
    return optimizer.optimize(problem.start_date, problem.days)
