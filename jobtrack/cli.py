"""
Command-line interface for JobTrack.

Usage:
    python -m jobtrack add "Backend Engineer" "Acme" --location Remote
    python -m jobtrack list --stage interview --sort company
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from jobtrack.config import Settings, get_settings
from jobtrack.context import TrackerContext
from jobtrack.export import export_to_csv, export_to_excel
from jobtrack.models import Application, Stage
from jobtrack.query import DateRangePreset, QueryEngine, QuickFilters, SalaryFilter, SortSpec
from jobtrack.query.filters import FILTERABLE_COLUMNS
from jobtrack.query.sorting import SORT_KEYS
from jobtrack.workflows import change_stage


def _column_filter(value: str):
    """Parse `COLUMN=TEXT` for --column."""
    column, sep, text = value.partition("=")
    column = column.strip()
    if not sep or column not in FILTERABLE_COLUMNS:
        raise argparse.ArgumentTypeError(
            f"expected COLUMN=TEXT with COLUMN one of: {', '.join(FILTERABLE_COLUMNS)}"
        )
    return column, text


def _add_filter_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--search", "-s", default="", help="Free-text search")
    parser.add_argument(
        "--stage",
        default="all",
        choices=["all"] + [s.value for s in Stage],
        help="Only this stage (default: all)",
    )
    parser.add_argument(
        "--range",
        dest="date_range",
        default="all",
        choices=[p.value for p in DateRangePreset],
        help="Applied within the last N days (default: all)",
    )
    parser.add_argument(
        "--salary",
        default="all",
        choices=[f.value for f in SalaryFilter],
        help="Salary presence (default: all)",
    )
    parser.add_argument(
        "--sort",
        default="date_applied",
        choices=sorted(SORT_KEYS),
        help="Sort column (default: date_applied)",
    )
    parser.add_argument(
        "--column",
        "-c",
        action="append",
        default=[],
        type=_column_filter,
        metavar="COLUMN=TEXT",
        help="Substring filter on one column (repeatable)",
    )
    parser.add_argument(
        "--asc",
        action="store_true",
        help="Sort ascending (default: descending)",
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="jobtrack",
        description="Local-first job application tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Track a new application
  python -m jobtrack add "Data Engineer" "DataVision" --salary "$120k"

  # Move it along the pipeline
  python -m jobtrack stage <id> interview

  # Filtered listing and export
  python -m jobtrack list --stage interview --range 30d
  python -m jobtrack export applications.xlsx --salary with
""",
    )
    parser.add_argument(
        "--db",
        default=None,
        help="SQLite database path (default: JOBTRACK_DB_PATH or jobtrack.db)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Print debug logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress all output except errors")

    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List applications")
    _add_filter_args(p_list)
    p_list.add_argument("--limit", type=int, default=None, help="Show at most N rows")

    sub.add_parser("stats", help="Show pipeline statistics")

    p_add = sub.add_parser("add", help="Add an application")
    p_add.add_argument("position")
    p_add.add_argument("company")
    p_add.add_argument("--location", default="")
    p_add.add_argument("--salary", default="")
    p_add.add_argument("--notes", default="")
    p_add.add_argument("--remote", action="store_true")
    p_add.add_argument("--stage", default=Stage.APPLIED.value, choices=[s.value for s in Stage])

    p_stage = sub.add_parser("stage", help="Move an application to another stage")
    p_stage.add_argument("id")
    p_stage.add_argument("stage", choices=[s.value for s in Stage])
    p_stage.add_argument(
        "--atomic",
        action="store_true",
        help="Roll back if the activity entry cannot be saved",
    )

    p_delete = sub.add_parser("delete", help="Delete an application")
    p_delete.add_argument("id")

    p_rem = sub.add_parser("reminders", help="List reminders")
    group = p_rem.add_mutually_exclusive_group()
    group.add_argument("--overdue", action="store_true")
    group.add_argument("--today", action="store_true")
    group.add_argument("--upcoming", action="store_true")

    p_export = sub.add_parser("export", help="Export applications to .csv or .xlsx")
    p_export.add_argument("path", help="Output file (.csv or .xlsx)")
    _add_filter_args(p_export)

    p_backup = sub.add_parser("backup", help="Write a JSON backup")
    p_backup.add_argument("path")

    p_restore = sub.add_parser("restore", help="Replace all data from a JSON backup")
    p_restore.add_argument("path")

    p_reset = sub.add_parser("reset", help="Delete all data and reseed defaults")
    p_reset.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    return parser.parse_args(argv)


def _settings_for(args: argparse.Namespace) -> Settings:
    settings = get_settings()
    if args.db:
        settings = settings.model_copy(update={"db_path": args.db})
    return settings


def _configure_logging(args: argparse.Namespace, settings: Settings) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _build_engine(ctx: TrackerContext, args: argparse.Namespace) -> QueryEngine:
    return QueryEngine(
        ctx.applications,
        settings=ctx.settings,
        search=args.search,
        column_filters=dict(args.column),
        quick=QuickFilters(stage=args.stage, date_range=args.date_range, salary=args.salary),
        sort=SortSpec(args.sort, "asc" if args.asc else "desc"),
    )


def _format_row(app: Application) -> str:
    flags = ("*" if app.is_shortlisted else " ") + ("R" if app.remote else " ")
    return (
        f"{app.id:<26} {flags} {app.stage.label:<15} "
        f"{app.date_applied:%Y-%m-%d}  {app.position} @ {app.company.name}"
    )


# ----------------------------- Commands -----------------------------

def cmd_list(ctx: TrackerContext, args: argparse.Namespace) -> int:
    engine = _build_engine(ctx, args)
    items = engine.filtered_items
    if args.limit:
        items = items[:args.limit]
    for app in items:
        print(_format_row(app))
    if not args.quiet:
        print(f"\n{len(engine.filtered_items)} of {engine.stats.total} application(s)")
    return 0


def cmd_stats(ctx: TrackerContext, args: argparse.Namespace) -> int:
    engine = QueryEngine(ctx.applications, settings=ctx.settings)
    s = engine.stats
    print("=" * 50)
    print("Pipeline")
    print("=" * 50)
    print(f"  Total:               {s.total}")
    for stage in Stage.ordered():
        print(f"  {stage.label + ':':<20} {s.by_stage[stage]}")
    print(f"  Active:              {s.active}")
    print(f"  Applied this week:   {s.applied_this_week}")
    print(f"  Applied this month:  {s.applied_this_month}")
    print(f"  Upcoming interviews: {s.upcoming_interviews}")
    print(f"  Pending tasks:       {s.pending_tasks} ({s.overdue_tasks} overdue)")
    print(f"  Response rate:       {s.response_rate}%")
    print(f"  Success rate:        {s.success_rate}%")
    return 0


def cmd_add(ctx: TrackerContext, args: argparse.Namespace) -> int:
    app = ctx.applications.create({
        "position": args.position,
        "company": args.company,
        "location": args.location,
        "salary": args.salary,
        "notes": args.notes,
        "remote": args.remote,
        "stage": args.stage,
    })
    ctx.activities.add_application_activity(app)
    if not args.quiet:
        print(f"Added {app.id}: {app.position} @ {app.company.name}")
    return 0


def cmd_stage(ctx: TrackerContext, args: argparse.Namespace) -> int:
    result = change_stage(ctx.applications, ctx.activities, args.id, args.stage, atomic=args.atomic)
    if result.application is None:
        print(f"Error: application {args.id} not updated", file=sys.stderr)
        return 1
    update = ctx.status.push(f"Moved to {result.application.stage.label}", app_id=args.id)
    if not args.quiet:
        print(update.message)
    return 0


def cmd_delete(ctx: TrackerContext, args: argparse.Namespace) -> int:
    if not ctx.applications.delete(args.id):
        print(f"Error: no application with id {args.id}", file=sys.stderr)
        return 1
    if not args.quiet:
        print(f"Deleted {args.id}")
    return 0


def cmd_reminders(ctx: TrackerContext, args: argparse.Namespace) -> int:
    if args.overdue:
        reminders = ctx.reminders.get_overdue()
    elif args.today:
        reminders = ctx.reminders.get_due_today()
    elif args.upcoming:
        reminders = ctx.reminders.get_upcoming()
    else:
        reminders = ctx.reminders.get_pending()
    for r in reminders:
        print(f"{r.due_date:%Y-%m-%d %H:%M}  [{r.priority.value:<6}] {r.title}")
    if not args.quiet:
        print(f"\n{len(reminders)} reminder(s)")
    return 0


def cmd_export(ctx: TrackerContext, args: argparse.Namespace) -> int:
    items = _build_engine(ctx, args).filtered_items
    if args.path.lower().endswith((".xlsx", ".xls")):
        count = export_to_excel(items, args.path)
    else:
        count = export_to_csv(items, args.path)
    if not args.quiet:
        print(f"Exported {count} application(s) to {args.path}")
    return 0


def cmd_backup(ctx: TrackerContext, args: argparse.Namespace) -> int:
    count = ctx.backup_to_file(args.path)
    if not args.quiet:
        print(f"Saved {count} key(s) to {args.path}")
    return 0


def cmd_restore(ctx: TrackerContext, args: argparse.Namespace) -> int:
    count = ctx.restore_from_file(args.path)
    if not args.quiet:
        print(f"Restored {count} key(s) from {args.path}")
    return 0


def cmd_reset(ctx: TrackerContext, args: argparse.Namespace) -> int:
    if not args.yes:
        answer = input("Delete all tracker data? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Aborted")
            return 1
    ctx.reset()
    if not args.quiet:
        print("All data cleared")
    return 0


COMMANDS = {
    "list": cmd_list,
    "stats": cmd_stats,
    "add": cmd_add,
    "stage": cmd_stage,
    "delete": cmd_delete,
    "reminders": cmd_reminders,
    "export": cmd_export,
    "backup": cmd_backup,
    "restore": cmd_restore,
    "reset": cmd_reset,
}


def run(args: argparse.Namespace) -> int:
    settings = _settings_for(args)
    _configure_logging(args, settings)

    ctx = TrackerContext(settings=settings)
    if not ctx.init():
        print(f"Error: cannot open database {settings.db_path}", file=sys.stderr)
        return 1

    try:
        return COMMANDS[args.command](ctx, args)

    except KeyboardInterrupt:
        if not args.quiet:
            print("\nInterrupted by user")
        return 130

    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    finally:
        ctx.teardown()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
