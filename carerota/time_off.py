from collections import defaultdict
from typing import Dict, List

from carerota.models import TimeOffRequest


def group_consecutive_requests(requests: List[TimeOffRequest]) -> Dict[str, List[TimeOffRequest]]:
    """Multi-day requests by group tag, each group in date order."""
    groups = defaultdict(list)
    for request in requests:
        if request.consecutive_group:
            groups[request.consecutive_group].append(request)
    return {tag: sorted(items, key=lambda r: r.date) for tag, items in groups.items()}


def monthly_request_stats(requests: List[TimeOffRequest]) -> Dict[str, dict]:
    """Totals per YYYY-MM broken down by category, priority and employee."""
    stats = {}
    for request in requests:
        month = request.date.strftime("%Y-%m")
        if month not in stats:
            stats[month] = {"total": 0, "by_category": {}, "by_priority": {}, "by_employee": {}}
        entry = stats[month]
        entry["total"] += 1
        for bucket, key in (
            ("by_category", request.category.value),
            ("by_priority", request.priority.value),
            ("by_employee", request.employee_id),
        ):
            entry[bucket][key] = entry[bucket].get(key, 0) + 1
    return stats
