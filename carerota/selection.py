"""
Candidate selection: balance heuristics and the role substitution cascade.

Candidates always arrive in roster order, and min() keeps the first of
equal keys, so every tie resolves to the earlier roster entry.
"""

import datetime as dt
from typing import List, Optional, Tuple

from .context import SchedulingContext
from .models import AlertCategory, Employee, Role, Severity, ShiftKind, ShiftRule


def select_for_night(ctx: SchedulingContext, candidates: List[Employee], day: dt.date) -> Employee:
    """Lowest night-balance score wins; the winner's night counters move up by one."""
    selected = min(candidates, key=lambda e: ctx.tracking[e.id].night_shift_balance)
    record_night(ctx, selected, day)
    return selected


def record_night(ctx: SchedulingContext, employee: Employee, day: dt.date) -> None:
    state = ctx.tracking[employee.id]
    state.total_night_shifts += 1
    state.night_shift_balance += 1
    state.last_night_shift = day


def select_by_work_balance(ctx: SchedulingContext, candidates: List[Employee]) -> Employee:
    if len(candidates) == 1:
        return candidates[0]
    return min(candidates, key=lambda e: ctx.count_work_days(e.id))


def select_with_balance(ctx: SchedulingContext, candidates: List[Employee], kind: ShiftKind, day: dt.date) -> Employee:
    if kind == ShiftKind.NIGHT and ctx.constraints.balance_night_shifts:
        return select_for_night(ctx, candidates, day)
    selected = select_by_work_balance(ctx, candidates)
    if kind == ShiftKind.NIGHT:
        record_night(ctx, selected, day)
    return selected


def fill_slot(ctx: SchedulingContext, day: dt.date, rule: ShiftRule, slot: Tuple[Role, ...],
              pool: List[Employee]) -> Optional[Employee]:
    """
    Pick one employee for a slot of `rule` on `day` from the eligible pool.

    A direct role match always wins. Only when none is available does the
    cascade try, in order: an admin holding a nursing licence (for a nurse
    slot), any part-timer (nurse slot on a DAY rule that allows it), a nurse
    (for a caregiver slot) and finally a flexible part-timer on DAY.
    """
    kind = rule.kind
    qualified = [e for e in pool if e.role in slot]
    if qualified:
        return select_with_balance(ctx, qualified, kind, day)
    if len(slot) != 1:
        return None

    role = slot[0]
    if role == Role.NURSE:
        admins = [e for e in pool if e.licensed_capable]
        if admins:
            selected = select_with_balance(ctx, admins, kind, day)
            ctx.alert(
                AlertCategory.SUBSTITUTION_APPLIED, "ADMIN_AS_NURSE", Severity.WARNING,
                f"No nurse available: {selected.name} (admin) placed as nurse on {kind.value}",
                date=day, employee_name=selected.name, shift=kind,
            )
            return selected
        if kind == ShiftKind.DAY and rule.allow_part_time_as_nurse:
            part_timers = [e for e in pool if e.role == Role.PART_TIME]
            if part_timers:
                return select_with_balance(ctx, part_timers, kind, day)

    if role == Role.CAREGIVER:
        nurses = [e for e in pool if e.role == Role.NURSE]
        if nurses:
            selected = select_with_balance(ctx, nurses, kind, day)
            ctx.alert(
                AlertCategory.SUBSTITUTION_APPLIED, "NURSE_AS_CAREGIVER", Severity.INFO,
                f"{selected.name} (nurse) placed as caregiver on {kind.value}",
                date=day, employee_name=selected.name, shift=kind,
            )
            return selected

    if role in (Role.NURSE, Role.CAREGIVER) and kind == ShiftKind.DAY:
        flexible = [e for e in pool if e.flexible_substitute]
        if flexible:
            selected = select_with_balance(ctx, flexible, kind, day)
            ctx.alert(
                AlertCategory.SUBSTITUTION_APPLIED, "PART_TIME_SUBSTITUTION", Severity.INFO,
                f"{selected.name} placed on DAY covering the {role.value.lower()} role",
                date=day, employee_name=selected.name, shift=kind,
            )
            return selected

    return None
