"""
Problem loading from YAML (and optionally a roster CSV), in the same shape
the sample data under data/ uses.
"""

import datetime as dt
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd
import yaml

from carerota.models import Employee, ProblemInput


def _to_list(value) -> List[str]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return []
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value).replace(";", ",").split(",") if part.strip()]


def _to_bool(value, default: bool = False) -> bool:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "y")


def load_employees_csv(path: Union[str, Path]) -> List[Employee]:
    """Roster CSV: id,name,role[,employment,skills,can_act_as_roles,restricted_to_shift_kinds,flexible_substitute,can_work_night]."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    employees = []
    for _, r in df.iterrows():
        row = {k: (v.strip() if isinstance(v, str) else v) for k, v in r.items()}
        employees.append(Employee(
            id=row["id"],
            name=row.get("name") or row["id"],
            role=row["role"],
            employment=row.get("employment") or "FULL_TIME",
            skills=_to_list(row.get("skills")),
            can_act_as_roles=_to_list(row.get("can_act_as_roles")),
            restricted_to_shift_kinds=_to_list(row.get("restricted_to_shift_kinds")),
            flexible_substitute=_to_bool(row.get("flexible_substitute") or None),
            can_work_night=_to_bool(row.get("can_work_night") or None, default=True),
        ))
    return employees


def load_problem(path: Union[str, Path], roster_csv: Optional[Union[str, Path]] = None) -> ProblemInput:
    """
    Read a problem file. Keys: start_date, days, constraints, shift_rules,
    employees, time_off_requests, roster_csv. A roster_csv (argument or
    key, relative to the YAML file) replaces the inline employee list.
    """
    path = Path(path)
    with open(path) as f:
        cfg = yaml.safe_load(f) or {}

    configured_csv = cfg.pop("roster_csv", None)
    if roster_csv is not None:
        csv_path = Path(roster_csv)
    elif configured_csv is not None:
        csv_path = Path(configured_csv)
        if not csv_path.is_absolute():
            csv_path = path.parent / csv_path
    else:
        csv_path = None
    if csv_path is not None:
        cfg["employees"] = [e.model_dump() for e in load_employees_csv(csv_path)]

    # YAML may hand back real dates or strings
    if isinstance(cfg.get("start_date"), dt.datetime):
        cfg["start_date"] = cfg["start_date"].date()

    return ProblemInput.model_validate(cfg)
