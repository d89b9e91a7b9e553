import logging

from .context import SchedulingContext
from .models import AlertCategory, Severity, ShiftKind

logger = logging.getLogger(__name__)


def enforce_max_consecutive_work_days(ctx: SchedulingContext) -> int:
    """Turn the day that would break the run limit into OFF; returns the number of days changed."""
    limit = ctx.constraints.max_consecutive_work_days
    counters = {e.id: 0 for e in ctx.employees}
    changed = 0

    for day in ctx.dates:
        for employee in ctx.employees:
            if not ctx.is_working(employee.id, day):
                counters[employee.id] = 0
                continue

            counters[employee.id] += 1
            if counters[employee.id] <= limit:
                continue

            previous = ctx.reassign(day, ShiftKind.OFF, employee, reason="Consecutive-limit adjustment",
                                    auto_assigned=True, forced=True)
            counters[employee.id] = 0
            changed += 1
            ctx.alert(
                AlertCategory.FORCED_OVERRIDE, "CONSECUTIVE_WORK_ADJUSTMENT", Severity.WARNING,
                f"{employee.name}: {previous.value} on {day.isoformat()} set to OFF, "
                f"run exceeded {limit} consecutive working days",
                date=day, employee_name=employee.name, shift=ShiftKind.OFF,
            )

    logger.info("Consecutive cap changed %d assignments", changed)
    return changed
