"""
Hard eligibility rules checked before any candidate is considered for a shift.
These never bend: a candidate that fails one is simply not in the pool.
"""

import datetime as dt
from typing import List

from .context import SchedulingContext
from .models import Employee, ShiftKind


def rests_after_night(ctx: SchedulingContext, employee: Employee, day: dt.date) -> bool:
    """True when the previous day was a night, so `day` is reserved for MORNING_OFF."""
    return ctx.constraints.rest_after_night and ctx.shift_of(employee.id, day - dt.timedelta(days=1)) == ShiftKind.NIGHT


def rests_after_morning_off(ctx: SchedulingContext, employee: Employee, day: dt.date) -> bool:
    """True when the previous day was (or will become) MORNING_OFF, so `day` is reserved for OFF."""
    if not ctx.constraints.rest_after_morning_off:
        return False
    yesterday = ctx.shift_of(employee.id, day - dt.timedelta(days=1))
    if yesterday == ShiftKind.MORNING_OFF:
        return True
    # the follow-up pass will turn yesterday into MORNING_OFF
    return ctx.constraints.rest_after_night and ctx.shift_of(employee.id, day - dt.timedelta(days=2)) == ShiftKind.NIGHT


def at_consecutive_limit(ctx: SchedulingContext, employee: Employee) -> bool:
    return ctx.tracking[employee.id].consecutive_work_days >= ctx.constraints.max_consecutive_work_days


def can_work_shift(ctx: SchedulingContext, employee: Employee, day: dt.date, kind: ShiftKind,
                   measure_run: bool = False) -> bool:
    """
    Daily assignment reads the running consecutive counter. Later passes that
    insert into an already built schedule pass measure_run=True so the actual
    working run around `day` is measured instead.
    """
    if ctx.is_assigned(employee.id, day):
        return False
    if not employee.allows_kind(kind):
        return False
    if kind == ShiftKind.NIGHT and employee.night_banned:
        return False
    if kind != ShiftKind.MORNING_OFF and rests_after_night(ctx, employee, day):
        return False
    if kind != ShiftKind.OFF and rests_after_morning_off(ctx, employee, day):
        return False
    if measure_run:
        return ctx.work_run_with(employee.id, day) <= ctx.constraints.max_consecutive_work_days
    return not at_consecutive_limit(ctx, employee)


def available_employees(ctx: SchedulingContext, day: dt.date, kind: ShiftKind) -> List[Employee]:
    """Eligible employees for the shift, in roster order."""
    return [e for e in ctx.employees if can_work_shift(ctx, e, day, kind)]
