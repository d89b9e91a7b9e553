import datetime as dt
import logging

from .context import SchedulingContext
from .models import AlertCategory, Employee, Severity, ShiftKind

logger = logging.getLogger(__name__)


def apply_night_followup(ctx: SchedulingContext) -> None:
    """NIGHT(D) -> MORNING_OFF(D+1) -> OFF(D+2), overriding whatever was there."""
    for day in ctx.dates:
        night_ids = [a.employee_id for a in ctx.schedule[day].shifts[ShiftKind.NIGHT]]
        for employee_id in night_ids:
            employee = ctx.employees_by_id[employee_id]
            if ctx.constraints.rest_after_night:
                set_morning_off(ctx, employee, day)
            if ctx.constraints.rest_after_morning_off:
                set_rest_after_morning_off(ctx, employee, day)


def set_morning_off(ctx: SchedulingContext, employee: Employee, night: dt.date) -> None:
    target = night + dt.timedelta(days=1)
    _force(ctx, employee, target, ShiftKind.MORNING_OFF,
           reason="Post-night (forced)", code="FORCED_MORNING_OFF",
           transition="day after a night")


def set_rest_after_morning_off(ctx: SchedulingContext, employee: Employee, night: dt.date) -> None:
    target = night + dt.timedelta(days=2)
    _force(ctx, employee, target, ShiftKind.OFF,
           reason="Rest after post-night (forced)", code="FORCED_REST_AFTER_MORNING_OFF",
           transition="rest day after a post-night")


def _force(ctx: SchedulingContext, employee: Employee, target: dt.date, kind: ShiftKind,
           reason: str, code: str, transition: str) -> None:
    if not ctx.in_range(target):
        return
    previous = ctx.shift_of(employee.id, target)
    if previous == kind:
        return

    replaced = previous is not None
    ctx.reassign(target, kind, employee, reason=reason, auto_assigned=True, forced=replaced)
    if replaced:
        ctx.alert(
            AlertCategory.FORCED_OVERRIDE, code, Severity.WARNING,
            f"{employee.name}: {previous.value} on {target.isoformat()} replaced by {kind.value} ({transition})",
            date=target, employee_name=employee.name, shift=kind,
        )
    else:
        logger.debug("%s set to %s on %s", employee.name, kind.value, target)
