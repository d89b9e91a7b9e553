import datetime as dt
import logging

from .context import SchedulingContext
from .hard_constraints import available_employees, can_work_shift
from .models import AlertCategory, Role, Severity, ShiftKind, ShiftRule, SHIFT_DEFINITIONS
from .selection import fill_slot, select_with_balance

logger = logging.getLogger(__name__)


def assign_daily_shifts(ctx: SchedulingContext, day: dt.date) -> None:
    """Fill every rule-driven shift for one day, then top up DAY and update tracking."""
    for kind, rule in ctx.rules.items():
        if SHIFT_DEFINITIONS[kind]["working"]:
            assign_shift_staff(ctx, day, rule)

    add_supplemental_day_assist(ctx, day)
    backfill_day_shift_with_admins(ctx, day)
    update_consecutive_work_days(ctx, day)
    check_mandatory_staffing(ctx, day)
    logger.debug("%s staffed: %s", day, {k.value: len(v) for k, v in ctx.schedule[day].shifts.items() if v})


def assign_shift_staff(ctx: SchedulingContext, day: dt.date, rule: ShiftRule) -> None:
    kind = rule.kind
    pool = available_employees(ctx, day, kind)

    if not pool:
        current = ctx.schedule[day].headcount(kind)
        ctx.alert(
            AlertCategory.STAFFING_SHORTAGE, "NO_AVAILABLE_STAFF", Severity.ERROR,
            f"{day.isoformat()} {kind.value}: no available staff",
            date=day, shift=kind,
            required=rule.min_staff, current=current, shortfall=max(rule.min_staff - current, 0),
        )
        return

    slots = rule.requirement.slots()
    unfilled = []
    for slot in slots:
        selected = fill_slot(ctx, day, rule, slot, pool)
        if selected is None:
            unfilled.append(slot)
            continue
        ctx.add(day, kind, selected, reason=rule.description or kind.value, auto_assigned=True)
        pool.remove(selected)

    # only heads beyond the slot list are topped up, never a missing role
    direct_roles = {role for slot in slots for role in slot}
    for _ in range(rule.min_staff - len(slots)):
        qualified = [e for e in pool if e.role in direct_roles]
        if not qualified:
            break
        selected = select_with_balance(ctx, qualified, kind, day)
        ctx.add(day, kind, selected, reason=f"{kind.value} headcount", auto_assigned=True)
        pool.remove(selected)

    if unfilled:
        current = ctx.schedule[day].headcount(kind)
        missing = ", ".join("/".join(role.value for role in slot) for slot in unfilled)
        ctx.alert(
            AlertCategory.STAFFING_SHORTAGE, "REQUIRED_ROLE_UNFILLED", Severity.ERROR,
            f"{day.isoformat()} {kind.value}: no {missing} available",
            date=day, shift=kind, required=rule.min_staff, current=current,
            shortfall=max(rule.min_staff - current, len(unfilled)),
        )


def add_supplemental_day_assist(ctx: SchedulingContext, day: dt.date) -> None:
    """Flexible part-timers who are still free join an already covered DAY shift."""
    rule = ctx.rules.get(ShiftKind.DAY)
    if rule is None:
        return

    for employee in ctx.employees:
        if not employee.flexible_substitute:
            continue
        if ctx.schedule[day].headcount(ShiftKind.DAY) < rule.min_staff:
            return
        if not can_work_shift(ctx, employee, day, ShiftKind.DAY):
            continue
        ctx.add(day, ShiftKind.DAY, employee, reason="Day assist (flexible part-timer)",
                auto_assigned=True, supplemental=True)
        ctx.alert(
            AlertCategory.STAFFING_ADJUSTMENT, "PART_TIMER_DAY_ASSIST", Severity.INFO,
            f"{employee.name} added to DAY as supplemental assist",
            date=day, employee_name=employee.name, shift=ShiftKind.DAY,
        )


def backfill_day_shift_with_admins(ctx: SchedulingContext, day: dt.date) -> None:
    """Headcount before skills: free admins are added until DAY reaches its minimum."""
    rule = ctx.rules.get(ShiftKind.DAY)
    if rule is None:
        return

    for employee in ctx.employees:
        current = ctx.schedule[day].headcount(ShiftKind.DAY)
        if current >= rule.min_staff:
            return
        if employee.role != Role.ADMIN or not can_work_shift(ctx, employee, day, ShiftKind.DAY):
            continue
        ctx.add(day, ShiftKind.DAY, employee, reason="DAY backfill (admin)",
                auto_assigned=True, backfilled=True)
        ctx.alert(
            AlertCategory.STAFFING_ADJUSTMENT, "DAY_BACKFILL_ADMIN", Severity.INFO,
            f"DAY below minimum: admin {employee.name} backfilled ({current + 1}/{rule.min_staff})",
            date=day, employee_name=employee.name, shift=ShiftKind.DAY,
            required=rule.min_staff, current=current + 1,
        )


def update_consecutive_work_days(ctx: SchedulingContext, day: dt.date) -> None:
    for employee in ctx.employees:
        state = ctx.tracking[employee.id]
        if ctx.is_working(employee.id, day):
            state.consecutive_work_days += 1
        else:
            state.consecutive_work_days = 0


def has_shortage_alert(ctx: SchedulingContext, day: dt.date, kind: ShiftKind) -> bool:
    return any(
        a.category == AlertCategory.STAFFING_SHORTAGE and a.date == day and a.shift == kind
        for a in ctx.alerts
    )


def check_mandatory_staffing(ctx: SchedulingContext, day: dt.date, code: str = "STAFF_SHORTAGE") -> int:
    """Raise one shortage alert per mandatory shift under its minimum; returns how many were raised."""
    raised = 0
    for kind, rule in ctx.rules.items():
        if not rule.mandatory:
            continue
        current = ctx.schedule[day].headcount(kind)
        if current >= rule.min_staff or has_shortage_alert(ctx, day, kind):
            continue
        shortfall = rule.min_staff - current
        ctx.alert(
            AlertCategory.STAFFING_SHORTAGE, code, Severity.ERROR,
            f"{day.isoformat()} {kind.value}: {shortfall} short (required {rule.min_staff}, assigned {current})",
            date=day, shift=kind, required=rule.min_staff, current=current, shortfall=shortfall,
        )
        raised += 1
    return raised
