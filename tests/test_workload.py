import datetime as dt
import logging

from carerota.initializer import initialize_schedule
from carerota.models import Employee, Role, ShiftKind
from carerota.optimizer import ShiftOptimizer
from carerota.workload import build_workload_report, report_workload, working_total_from_headcounts

START = dt.date(2025, 8, 1)


def build_context(days=4):
    employees = [
        Employee(id="ns1", name="NS1", role="NURSE"),
        Employee(id="ns2", name="NS2", role="NURSE"),
        Employee(id="ns3", name="NS3", role="NURSE"),
        Employee(id="pt1", name="PT1", role="PART_TIME", employment="PART_TIME"),
    ]
    ctx = ShiftOptimizer(employees).build_context(START, days)
    initialize_schedule(ctx)
    return ctx


def test_report_counts_and_round_trip():
    ctx = build_context()
    by_id = ctx.employees_by_id
    ctx.add(ctx.dates[0], ShiftKind.NIGHT, by_id["ns1"])
    ctx.add(ctx.dates[1], ShiftKind.MORNING_OFF, by_id["ns1"])
    ctx.add(ctx.dates[0], ShiftKind.DAY, by_id["ns2"])
    ctx.add(ctx.dates[1], ShiftKind.DAY, by_id["ns2"])
    ctx.add(ctx.dates[2], ShiftKind.PM_ONLY, by_id["pt1"])

    report = build_workload_report(ctx)

    assert report.work_days == {"ns1": 1, "ns2": 2, "ns3": 0, "pt1": 1}
    assert report.days_off == {"ns1": 3, "ns2": 2, "ns3": 4, "pt1": 3}
    assert report.night_shifts["ns1"] == 1
    assert report.role_average_work_days[Role.NURSE] == 1.0
    assert report.average_night_shifts == 1 / 3
    assert report.daily_headcounts["2025-08-01"][ShiftKind.NIGHT] == 1
    assert working_total_from_headcounts(report.daily_headcounts) == sum(report.work_days.values())


def test_night_outliers_raise_info_alerts():
    ctx = build_context(days=6)
    ns1 = ctx.employees_by_id["ns1"]
    for day in ctx.dates[::2]:
        ctx.add(day, ShiftKind.NIGHT, ns1)

    report_workload(ctx)

    assert {a.employee_name for a in ctx.alerts} == {"NS1", "NS2", "NS3"}
    assert all(a.code == "NIGHT_SHIFT_IMBALANCE" and a.severity == "info" for a in ctx.alerts)
    assert "above" in next(a.message for a in ctx.alerts if a.employee_name == "NS1")


def test_reporter_never_changes_the_schedule():
    ctx = build_context()
    ctx.add(ctx.dates[0], ShiftKind.NIGHT, ctx.employees_by_id["ns1"])
    before = {day: s.model_dump() for day, s in ctx.schedule.items()}

    report_workload(ctx)

    assert {day: s.model_dump() for day, s in ctx.schedule.items()} == before


def test_uneven_work_days_are_logged_not_alerted(caplog):
    caplog.set_level(logging.INFO, logger="carerota.workload")
    ctx = build_context()
    for day in ctx.dates:
        ctx.add(day, ShiftKind.DAY, ctx.employees_by_id["ns2"])

    report = report_workload(ctx)

    assert report.role_average_work_days[Role.NURSE] == 4 / 3
    assert ctx.alerts == []
    assert any("Average work days for NURSE" in r.getMessage() for r in caplog.records)
