"""
Tabular output for a finished schedule: roster grid with per-kind totals,
daily staffing levels and the alert list, plus CSV export.
"""

import pandas as pd
from pathlib import Path
from typing import Dict, List, Union

from carerota.models import Employee, ScheduleResult, ShiftKind, SHIFT_DEFINITIONS, WORKING_SHIFTS


def generate_enhanced_output(result: ScheduleResult, employees: List[Employee]) -> Dict:
    """Build all presentation tables for a result."""
    roster_table = generate_roster_table(result, employees)
    daily_staffing = calculate_daily_staffing(result)
    alert_table = generate_alert_table(result)

    return {
        "roster_table": roster_table,
        "daily_staffing": daily_staffing,
        "alert_table": alert_table,
        "summary": result.summary,
    }


def generate_roster_table(result: ScheduleResult, employees: List[Employee]) -> pd.DataFrame:
    """Employees as rows, dates as columns of shift codes, then totals per kind."""
    days = list(result.schedule.keys())
    rows = {}

    for employee in employees:
        codes = {}
        totals = {kind: 0 for kind in ShiftKind}
        for day_str in days:
            kind = result.schedule[day_str].find(employee.id)
            if kind is None:
                codes[day_str] = ""
                continue
            codes[day_str] = SHIFT_DEFINITIONS[kind]["code"]
            totals[kind] += 1

        row = {"Name": employee.name, "Role": employee.role.value}
        row.update(codes)
        for kind in WORKING_SHIFTS:
            row[SHIFT_DEFINITIONS[kind]["code"]] = totals[kind]
        row["Work Days"] = sum(totals[kind] for kind in WORKING_SHIFTS)
        row["Days Off"] = len(days) - row["Work Days"]
        rows[employee.id] = row

    df = pd.DataFrame.from_dict(rows, orient="index")
    df.index.name = "Employee"
    return df


def calculate_daily_staffing(result: ScheduleResult) -> pd.DataFrame:
    """Headcount per date (rows) and shift kind (columns)."""
    data = {
        day_str: {kind.value: day.headcount(kind) for kind in ShiftKind}
        for day_str, day in result.schedule.items()
    }
    df = pd.DataFrame.from_dict(data, orient="index")
    df.index.name = "Date"
    df["Working"] = df[[kind.value for kind in WORKING_SHIFTS]].sum(axis=1)
    return df


def generate_alert_table(result: ScheduleResult) -> pd.DataFrame:
    columns = ["date", "severity", "category", "code", "shift", "employee_name",
               "substitute", "required", "current", "shortfall", "message"]
    records = []
    for alert in result.alerts:
        record = alert.model_dump(mode="json")
        records.append({c: record.get(c) for c in columns})
    return pd.DataFrame(records, columns=columns)


def export_csv(tables: Dict, out_dir: Union[str, Path]) -> List[Path]:
    """Write each DataFrame in `tables` to `<out_dir>/<name>.csv`."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for name, table in tables.items():
        if not isinstance(table, pd.DataFrame):
            continue
        path = out_dir / f"{name}.csv"
        table.to_csv(path)
        written.append(path)
    return written
