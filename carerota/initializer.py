import logging

from .context import SchedulingContext
from .models import DaySchedule, RequestStatus, ShiftKind

logger = logging.getLogger(__name__)


def initialize_schedule(ctx: SchedulingContext) -> None:
    """Create empty buckets for every date and seed approved time off as OFF."""
    ctx.schedule = {day: DaySchedule(date=day) for day in ctx.dates}

    for request in ctx.time_off_requests:
        if request.status != RequestStatus.APPROVED:
            continue
        if not ctx.in_range(request.date):
            continue
        employee = ctx.employees_by_id.get(request.employee_id)
        if employee is None:
            logger.warning("Time-off request %s names unknown employee %s", request.id, request.employee_id)
            continue
        if ctx.is_assigned(employee.id, request.date):
            # second request for the same day
            continue
        ctx.add(
            request.date, ShiftKind.OFF, employee,
            reason=request.reason or "Paid leave",
            from_time_off_request=True,
        )

    logger.info("Initialised %d days from %s", len(ctx.dates), ctx.start_date)
