import argparse, logging, sys, os

# Add the parent directory to the path so we can import carerota
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from carerota.config import load_problem
from carerota.optimizer import optimize_schedule
from carerota.output_formatter import generate_enhanced_output, export_csv
from carerota.time_off import group_consecutive_requests, monthly_request_stats


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate a shift schedule from a problem file")
    parser.add_argument("problem", nargs="?", default="data/sample_problem.yml")
    parser.add_argument("--roster-csv", default=None, help="roster CSV overriding the problem file's employees")
    parser.add_argument("--out", default="out", help="directory for CSV tables")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    problem = load_problem(args.problem, roster_csv=args.roster_csv)
    print(f"Scheduling {len(problem.employees)} employees over {problem.days} days from {problem.start_date}...")

    groups = group_consecutive_requests(problem.time_off_requests)
    for month, stats in sorted(monthly_request_stats(problem.time_off_requests).items()):
        print(f"  {month}: {stats['total']} time-off requests")
    for tag, requests in groups.items():
        print(f"  {tag}: {', '.join(r.date.isoformat() for r in requests)}")

    result = optimize_schedule(problem)

    print("\nAlerts by severity:")
    for severity, count in sorted(result.summary["alerts_by_severity"].items()):
        print(f"  {severity}: {count}")
    print("Alerts by category:")
    for category, count in sorted(result.summary["alerts_by_category"].items()):
        print(f"  {category}: {count}")

    print("\nWork days / days off / nights:")
    for employee in problem.employees:
        print(f"  {employee.name:6} {result.workload.work_days[employee.id]:3} "
              f"{result.workload.days_off[employee.id]:3} {result.workload.night_shifts[employee.id]:3}")

    tables = generate_enhanced_output(result, problem.employees)
    for path in export_csv(tables, args.out):
        print(f"Wrote {path}")


if __name__ == "__main__":
    main()
