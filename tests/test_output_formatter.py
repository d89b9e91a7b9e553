import datetime as dt

from carerota.models import Employee, ProblemInput
from carerota.optimizer import optimize_schedule
from carerota.output_formatter import export_csv, generate_enhanced_output
from carerota.workload import working_total_from_headcounts


def run():
    employees = [
        Employee(id="ns1", name="NS1", role="NURSE"),
        Employee(id="ns2", name="NS2", role="NURSE"),
        Employee(id="cg1", name="CG1", role="CAREGIVER"),
        Employee(id="cg2", name="CG2", role="CAREGIVER"),
        Employee(id="pt1", name="PT1", role="PART_TIME", employment="PART_TIME"),
    ]
    result = optimize_schedule(ProblemInput(employees=employees, start_date=dt.date(2025, 8, 1), days=7))
    return result, employees


def test_tables():
    result, employees = run()
    tables = generate_enhanced_output(result, employees)

    roster = tables["roster_table"]
    assert list(roster.index) == [e.id for e in employees]
    assert "2025-08-01" in roster.columns
    assert (roster["Work Days"] + roster["Days Off"] == 7).all()
    assert roster.loc["ns1", "Work Days"] == result.workload.work_days["ns1"]

    staffing = tables["daily_staffing"]
    assert len(staffing) == 7
    assert staffing["Working"].sum() == working_total_from_headcounts(result.workload.daily_headcounts)

    alerts = tables["alert_table"]
    assert len(alerts) == len(result.alerts)
    assert "code" in alerts.columns


def test_export_csv(tmp_path):
    result, employees = run()
    written = export_csv(generate_enhanced_output(result, employees), tmp_path / "out")
    assert sorted(p.name for p in written) == ["alert_table.csv", "daily_staffing.csv", "roster_table.csv"]
    assert all(p.exists() for p in written)
