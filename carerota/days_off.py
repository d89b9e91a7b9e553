"""
Mandatory days-off enforcement.

Every employee should end the period with at least
`mandatory_days_off_per_month` non-working days. Shortfalls are closed in
two tiers:

* soft: dates carrying a time-off request first, then dates whose working
  headcount is comfortably above the DAY + LATE minimums;
* aggressive: the same conversion under the absolute staffing floor, then
  substitution of DAY shifts by flexible part-timers or licence-holding
  admins so the employee can go off without losing headcount.

Whatever is still missing afterwards is reported, never retried.
"""

import datetime as dt
import logging
from typing import Callable, List, Optional, Tuple

from .context import SchedulingContext
from .hard_constraints import can_work_shift
from .models import (
    AlertCategory,
    Employee,
    RequestStatus,
    Severity,
    ShiftKind,
    TimeOffRequest,
)

logger = logging.getLogger(__name__)


def enforce_mandatory_days_off(ctx: SchedulingContext) -> None:
    required = ctx.constraints.mandatory_days_off_per_month

    for employee in ctx.employees:
        current = ctx.count_days_off(employee.id)
        shortage = required - current
        if shortage <= 0:
            logger.debug("%s: %d days off - OK", employee.name, current)
            continue

        logger.info("%s: %d days off short, securing", employee.name, shortage)
        added = soft_tier(ctx, employee, shortage)
        if added < shortage:
            added += aggressive_tier(ctx, employee, shortage - added)

        if added < shortage:
            final = ctx.count_days_off(employee.id)
            ctx.alert(
                AlertCategory.MANDATORY_DAYS_OFF_SHORTAGE, "MANDATORY_DAYS_OFF_SHORTAGE", Severity.ERROR,
                f"{employee.name} has {final} days off (required {required})",
                employee_name=employee.name,
                required=required, current=final, shortfall=required - final,
            )


def convertible(ctx: SchedulingContext, employee: Employee, day: dt.date) -> bool:
    """Working days other than nights can be given back as OFF."""
    kind = ctx.shift_of(employee.id, day)
    return ctx.is_working(employee.id, day) and kind != ShiftKind.NIGHT


def request_dates(ctx: SchedulingContext, employee: Employee) -> List[Tuple[dt.date, TimeOffRequest]]:
    """Convertible dates the employee asked for, highest priority first."""
    found = {}
    for request in ctx.time_off_requests:
        if request.employee_id != employee.id or request.status == RequestStatus.REJECTED:
            continue
        if not ctx.in_range(request.date) or not convertible(ctx, employee, request.date):
            continue
        best = found.get(request.date)
        if best is None or request.priority_level > best.priority_level:
            found[request.date] = request
    return sorted(found.items(), key=lambda item: (-item[1].priority_level, item[0]))


def pick_date(ctx: SchedulingContext, employee: Employee, allowed: Callable[[dt.date], bool]) -> Optional[dt.date]:
    """Busiest convertible date passing `allowed`; earliest date breaks ties."""
    best = None
    best_count = -1
    for day in ctx.dates:
        if not convertible(ctx, employee, day) or not allowed(day):
            continue
        count = ctx.working_headcount(day)
        if count > best_count:
            best, best_count = day, count
    return best


def convert_to_off(ctx: SchedulingContext, employee: Employee, day: dt.date, reason: str,
                   forced: bool, from_time_off_request: bool = False) -> None:
    previous = ctx.reassign(day, ShiftKind.OFF, employee, reason=reason, auto_assigned=True,
                            forced=forced, from_time_off_request=from_time_off_request)
    if forced:
        ctx.alert(
            AlertCategory.FORCED_OVERRIDE, "FORCED_DAY_OFF", Severity.WARNING,
            f"{employee.name}: {previous.value} on {day.isoformat()} forced to OFF to secure mandatory days off",
            date=day, employee_name=employee.name, shift=ShiftKind.OFF,
        )


def soft_tier(ctx: SchedulingContext, employee: Employee, needed: int) -> int:
    added = 0
    for day, request in request_dates(ctx, employee):
        if added >= needed:
            return added
        convert_to_off(ctx, employee, day, reason=request.reason or "Time-off request",
                       forced=False, from_time_off_request=True)
        added += 1

    floor = comfortable_headcount(ctx)
    while added < needed:
        day = pick_date(ctx, employee, lambda d: ctx.working_headcount(d) > floor + 1)
        if day is None:
            break
        convert_to_off(ctx, employee, day, reason="Mandatory day off", forced=True)
        added += 1
    return added


def comfortable_headcount(ctx: SchedulingContext) -> int:
    """DAY minimum plus LATE minimum, the staffing the soft tier protects."""
    total = 0
    for kind in (ShiftKind.DAY, ShiftKind.LATE):
        rule = ctx.rules.get(kind)
        if rule is not None:
            total += rule.min_staff
    return total


def aggressive_tier(ctx: SchedulingContext, employee: Employee, needed: int) -> int:
    added = 0
    floor = ctx.constraints.absolute_minimum_staff
    while added < needed:
        day = pick_date(ctx, employee, lambda d: ctx.working_headcount(d) > floor)
        if day is None:
            break
        convert_to_off(ctx, employee, day, reason="Mandatory day off (relaxed floor)", forced=True)
        added += 1

    for day in ctx.dates:
        if added >= needed:
            break
        if ctx.shift_of(employee.id, day) != ShiftKind.DAY:
            continue
        substitute = find_substitute(ctx, employee, day)
        if substitute is None:
            continue
        ctx.reassign(day, ShiftKind.OFF, employee, reason=f"Mandatory day off (covered by {substitute.name})",
                     auto_assigned=True, forced=True)
        ctx.add(day, ShiftKind.DAY, substitute, reason=f"Covering day off of {employee.name}",
                auto_assigned=True)
        code = "PART_TIME_SUBSTITUTION" if substitute.flexible_substitute else "ADMIN_AS_NURSE"
        ctx.alert(
            AlertCategory.SUBSTITUTION_APPLIED, code, Severity.INFO,
            f"{substitute.name} covers DAY on {day.isoformat()} so {employee.name} can take a day off",
            date=day, employee_name=employee.name, shift=ShiftKind.DAY, substitute=substitute.name,
        )
        added += 1
    return added


def find_substitute(ctx: SchedulingContext, employee: Employee, day: dt.date) -> Optional[Employee]:
    """Flexible part-timers first, then licence-holding admins, who keep their own quota."""
    required = ctx.constraints.mandatory_days_off_per_month
    flexible = [e for e in ctx.employees if e.flexible_substitute]
    admins = [e for e in ctx.employees if e.licensed_capable and not e.flexible_substitute]
    for candidate in flexible + admins:
        if candidate.id == employee.id:
            continue
        if not can_work_shift(ctx, candidate, day, ShiftKind.DAY, measure_run=True):
            continue
        if ctx.count_days_off(candidate.id) - 1 < required:
            continue
        return candidate
    return None
