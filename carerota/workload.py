"""
Workload and night-shift distribution reporting.

Reporting only: the schedule is never changed here. Outliers are surfaced as
info alerts so they travel with the result.
"""

import logging
import math
from collections import defaultdict
from typing import Dict

from .context import SchedulingContext
from .models import AlertCategory, Severity, ShiftKind, WorkloadReport, WORKING_SHIFTS
from .utils import date_key

logger = logging.getLogger(__name__)


def build_workload_report(ctx: SchedulingContext) -> WorkloadReport:
    work_days = {e.id: ctx.count_work_days(e.id) for e in ctx.employees}
    night_shifts = {e.id: ctx.count_shift(e.id, ShiftKind.NIGHT) for e in ctx.employees}
    days_off = {e.id: len(ctx.dates) - work_days[e.id] for e in ctx.employees}

    by_role = defaultdict(list)
    for employee in ctx.employees:
        by_role[employee.role].append(work_days[employee.id])
    role_average = {role: sum(counts) / len(counts) for role, counts in by_role.items()}

    night_eligible = [e for e in ctx.employees if not e.night_banned]
    average_nights = (
        sum(night_shifts[e.id] for e in night_eligible) / len(night_eligible)
        if night_eligible else 0.0
    )

    daily = {
        date_key(day): {kind: ctx.schedule[day].headcount(kind) for kind in ShiftKind}
        for day in ctx.dates
    }

    return WorkloadReport(
        work_days=work_days,
        days_off=days_off,
        night_shifts=night_shifts,
        role_average_work_days=role_average,
        average_night_shifts=average_nights,
        daily_headcounts=daily,
    )


def working_total_from_headcounts(daily_headcounts: Dict[str, Dict[ShiftKind, int]]) -> int:
    """Total working assignments implied by per-day headcounts."""
    return sum(
        count
        for counts in daily_headcounts.values()
        for kind, count in counts.items()
        if kind in WORKING_SHIFTS
    )


def report_workload(ctx: SchedulingContext) -> WorkloadReport:
    """Build the report and raise an info alert for every night-count outlier."""
    report = build_workload_report(ctx)
    for role, average in report.role_average_work_days.items():
        logger.info("Average work days for %s: %.1f", role.value, average)

    night_eligible = [e for e in ctx.employees if not e.night_banned]
    if not night_eligible:
        return report

    low = math.floor(report.average_night_shifts)
    high = math.ceil(report.average_night_shifts)
    for employee in night_eligible:
        count = report.night_shifts[employee.id]
        if low <= count <= high:
            continue
        direction = "below" if count < low else "above"
        ctx.alert(
            AlertCategory.WORKLOAD_IMBALANCE, "NIGHT_SHIFT_IMBALANCE", Severity.INFO,
            f"{employee.name} has {count} nights, {direction} the average of {report.average_night_shifts:.1f}",
            employee_name=employee.name, shift=ShiftKind.NIGHT,
            required=round(report.average_night_shifts), current=count,
        )
    return report
