import datetime as dt

from carerota.days_off import enforce_mandatory_days_off
from carerota.initializer import initialize_schedule
from carerota.models import ConstraintSet, Employee, ShiftKind, TimeOffRequest
from carerota.optimizer import ShiftOptimizer

START = dt.date(2025, 8, 1)


def build_context(employees, days, constraints=None, requests=None, working=None):
    """Context with every employee in `working` booked on DAY for the whole range."""
    ctx = ShiftOptimizer(employees, constraints=constraints, time_off_requests=requests).build_context(START, days)
    initialize_schedule(ctx)
    for employee in employees:
        if working is not None and employee.id not in working:
            continue
        for day in ctx.dates:
            ctx.add(day, ShiftKind.DAY, employee)
    return ctx


def test_unresolvable_shortage_is_reported():
    employees = [
        Employee(id="ns1", name="NS1", role="NURSE"),
        Employee(id="cg1", name="CG1", role="CAREGIVER"),
    ]
    ctx = build_context(employees, days=10)

    enforce_mandatory_days_off(ctx)

    shortages = [a for a in ctx.alerts if a.category == "MANDATORY_DAYS_OFF_SHORTAGE"]
    assert [a.employee_name for a in shortages] == ["NS1", "CG1"]
    assert all(a.required == 9 and a.current == 0 and a.shortfall == 9 for a in shortages)
    assert all(a.severity == "error" for a in shortages)
    assert all(ctx.shift_of("ns1", d) == ShiftKind.DAY for d in ctx.dates)


def test_requested_date_is_given_first():
    employees = [Employee(id="ns1", name="NS1", role="NURSE")]
    requests = [TimeOffRequest(employee_id="ns1", date=START + dt.timedelta(days=2), status="PENDING",
                               reason="Family errand")]
    ctx = build_context(employees, days=10, constraints=ConstraintSet(mandatory_days_off_per_month=1),
                        requests=requests)

    enforce_mandatory_days_off(ctx)

    day = START + dt.timedelta(days=2)
    assert ctx.shift_of("ns1", day) == ShiftKind.OFF
    entry = ctx.schedule[day].shifts[ShiftKind.OFF][0]
    assert entry.from_time_off_request
    assert not entry.forced
    assert ctx.alerts == []


def test_soft_tier_spreads_conversions_over_busiest_days():
    employees = [Employee(id=f"ns{i}", name=f"NS{i}", role="NURSE") for i in range(1, 7)]
    ctx = build_context(employees, days=5, constraints=ConstraintSet(mandatory_days_off_per_month=1))

    enforce_mandatory_days_off(ctx)

    for employee in employees:
        assert ctx.count_days_off(employee.id) == 1
    assert ctx.shift_of("ns1", START) == ShiftKind.OFF
    assert ctx.shift_of("ns2", START + dt.timedelta(days=1)) == ShiftKind.OFF
    assert [a.code for a in ctx.alerts] == ["FORCED_DAY_OFF"] * 6


def test_flexible_part_timer_substitutes_when_floor_blocks():
    employees = [
        Employee(id="ns1", name="NS1", role="NURSE"),
        Employee(id="pt21", name="PT21", role="PART_TIME", employment="PART_TIME",
                 flexible_substitute=True, restricted_to_shift_kinds=["DAY"]),
    ]
    ctx = build_context(employees, days=5, constraints=ConstraintSet(mandatory_days_off_per_month=1),
                        working={"ns1"})

    enforce_mandatory_days_off(ctx)

    assert ctx.shift_of("ns1", START) == ShiftKind.OFF
    assert ctx.shift_of("pt21", START) == ShiftKind.DAY
    alert = next(a for a in ctx.alerts if a.category == "SUBSTITUTION_APPLIED")
    assert alert.code == "PART_TIME_SUBSTITUTION"
    assert alert.substitute == "PT21"
    assert alert.employee_name == "NS1"
    assert not any(a.category == "MANDATORY_DAYS_OFF_SHORTAGE" for a in ctx.alerts)


def test_nights_are_never_converted():
    employees = [Employee(id="ns1", name="NS1", role="NURSE")]
    ctx = build_context(employees, days=3, constraints=ConstraintSet(mandatory_days_off_per_month=1),
                        working=set())
    ns1 = employees[0]
    for day in ctx.dates:
        ctx.add(day, ShiftKind.NIGHT, ns1)

    enforce_mandatory_days_off(ctx)

    assert all(ctx.shift_of("ns1", d) == ShiftKind.NIGHT for d in ctx.dates)
    assert ctx.alerts[-1].code == "MANDATORY_DAYS_OFF_SHORTAGE"


def test_aggressive_tier_uses_relaxed_floor():
    employees = [Employee(id=f"ns{i}", name=f"NS{i}", role="NURSE") for i in range(1, 4)]
    ctx = build_context(employees, days=3, constraints=ConstraintSet(mandatory_days_off_per_month=1))

    enforce_mandatory_days_off(ctx)

    for i, employee in enumerate(employees):
        day = START + dt.timedelta(days=i)
        assert ctx.shift_of(employee.id, day) == ShiftKind.OFF
        entry = next(a for a in ctx.schedule[day].shifts[ShiftKind.OFF] if a.employee_id == employee.id)
        assert entry.reason == "Mandatory day off (relaxed floor)"
        assert entry.forced
    assert [a.code for a in ctx.alerts] == ["FORCED_DAY_OFF"] * 3


def test_licensed_admin_substitutes_when_no_flexible_part_timer():
    employees = [
        Employee(id="ns1", name="NS1", role="NURSE"),
        Employee(id="ad31", name="AD31", role="ADMIN", can_act_as_roles=["NURSE"]),
    ]
    ctx = build_context(employees, days=5, constraints=ConstraintSet(mandatory_days_off_per_month=1),
                        working={"ns1"})

    enforce_mandatory_days_off(ctx)

    assert ctx.shift_of("ns1", START) == ShiftKind.OFF
    assert ctx.shift_of("ad31", START) == ShiftKind.DAY
    alert = next(a for a in ctx.alerts if a.category == "SUBSTITUTION_APPLIED")
    assert alert.code == "ADMIN_AS_NURSE"
    assert alert.substitute == "AD31"
