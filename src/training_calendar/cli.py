#!/usr/bin/env python3
"""
Training calendar CLI.

Inspect, validate and convert training plan documents, and manage the
persisted session.

Usage:
    training-calendar validate plan.json
    training-calendar show plan.json         # Week-by-week table
    training-calendar show                   # The current session's plan
    training-calendar convert plan.json --to miles -o plan-mi.json
    training-calendar import plan.json
    training-calendar export -o plan.json
    training-calendar status
    training-calendar reset
"""

import argparse
from dataclasses import replace
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .config import get_settings
from .db.session_store import SqliteSessionStore
from .exceptions import PlanValidationError, TrainingCalendarError
from .models.document import PlanDocument
from .models.plans import DAYS, Plan, Workout, WorkoutType
from .schema import from_json, revise_after_edit, to_json, validate
from .services.plan_editor import convert_units
from .services.session import TrainingSession
from .units import DistanceUnit, format_distance, format_week_date_range

console = Console()


def get_type_color(workout_type: WorkoutType) -> str:
    """Get rich color for a workout type."""
    colors = {
        WorkoutType.REST: "dim",
        WorkoutType.EASY: "green",
        WorkoutType.LONG: "blue",
        WorkoutType.INTERVAL: "red",
        WorkoutType.TEMPO: "yellow",
        WorkoutType.RACE: "magenta",
        WorkoutType.STRENGTH: "cyan",
    }
    return colors.get(workout_type, "white")


def format_workout(workout: Workout, unit: DistanceUnit) -> str:
    """One-line rich markup for a workout cell."""
    label = workout.nickname or workout.type.value
    if workout.distance is not None:
        amount = format_distance(workout.distance, unit)
    elif workout.time is not None:
        amount = f"{workout.time:g}min"
    else:
        amount = ""
    color = get_type_color(workout.type)
    return f"[{color}]{label}[/{color}] {amount}".rstrip()


def _load_document(path: Path) -> PlanDocument:
    return from_json(path.read_bytes())


def _open_session() -> TrainingSession:
    settings = get_settings()
    return TrainingSession.restore(SqliteSessionStore(settings.session_db_path))


def print_plan(plan: Plan, unit: DistanceUnit, title: str) -> None:
    """Render a plan as a week-by-day table."""
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Week", style="bold")
    table.add_column("Dates")
    for day in DAYS:
        table.add_column(day.value)
    table.add_column("Total", justify="right")

    peak = plan.peak_week
    for week in plan.weeks:
        cells = [
            "\n".join(format_workout(w, unit) for w in week.days[day]) or "-"
            for day in DAYS
        ]
        total = format_distance(week.weekly_total, unit)
        if peak is not None and week.week == peak.week and week.weekly_total > 0:
            total = f"[bold]{total}[/bold]"
        table.add_row(
            str(week.week),
            format_week_date_range(week.start_date),
            *cells,
            total,
        )

    console.print(table)


# ============================================================================
# Commands
# ============================================================================

def cmd_validate(args) -> int:
    """Validate a plan document file."""
    path = Path(args.file)
    try:
        raw = json.loads(path.read_bytes())
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot read {path}: {e}[/red]")
        return 1

    result = validate(raw)
    if result.valid:
        console.print(f"[green]{path} is a valid training plan document.[/green]")
        return 0

    table = Table(title=f"{len(result.errors)} problem(s) in {path}", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Problem")
    for i, error in enumerate(result.errors, 1):
        table.add_row(str(i), error)
    console.print(table)
    return 1


def cmd_show(args) -> int:
    """Show a plan document, or the current session's plan."""
    if args.file:
        document = _load_document(Path(args.file))
        title = f"{args.file}"
    else:
        document = _open_session().export_document()
        if document is None:
            console.print("No training plan in the current session.")
            console.print("Import one with: training-calendar import plan.json")
            return 1
        title = "Current session"

    settings = document.settings
    summary = (
        f"Race: {settings.race_distance.label} on {settings.race_date.isoformat()}\n"
        f"Source: {document.source.value}\n"
        f"Weeks: {document.plan.total_weeks}  Workouts: {document.plan.workout_count}\n"
        f"Updated: {document.updated_at.isoformat()}"
    )
    console.print()
    console.print(Panel(summary, title=title, box=box.ROUNDED))
    print_plan(document.plan, settings.unit, title=f"Training Plan ({settings.unit.value})")
    console.print()
    return 0


def cmd_convert(args) -> int:
    """Convert a document file to another distance unit."""
    path = Path(args.file)
    document = _load_document(path)
    to_unit = DistanceUnit(args.to)

    plan = convert_units(document.plan, document.settings.unit, to_unit)
    converted = revise_after_edit(
        document, plan, settings=replace(document.settings, unit=to_unit)
    )
    text = to_json(converted, indent=get_settings().export_indent)

    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        console.print(f"[green]Wrote {to_unit.value} plan to {args.output}[/green]")
    else:
        print(text)
    return 0


def cmd_import(args) -> int:
    """Import a document file into the persisted session."""
    session = _open_session()
    document = session.import_document(Path(args.file).read_bytes())
    console.print(
        f"[green]Imported {document.plan.total_weeks}-week plan "
        f"({document.source.value}).[/green]"
    )
    return 0


def cmd_export(args) -> int:
    """Export the persisted session's document."""
    session = _open_session()
    text = session.export_json(indent=get_settings().export_indent)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        console.print(f"[green]Exported plan to {args.output}[/green]")
    else:
        print(text)
    return 0


def cmd_status(args) -> int:
    """Show the persisted session's status."""
    session = _open_session()
    document = session.export_document()

    table = Table(title="Session", box=box.ROUNDED, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Step", session.step.value)
    if document is None:
        table.add_row("Plan", "none")
    else:
        peak = document.plan.peak_week
        table.add_row("Source", document.source.value)
        table.add_row("Weeks", str(document.plan.total_weeks))
        table.add_row("Workouts", str(document.plan.workout_count))
        table.add_row("Unit", document.settings.unit.value)
        if peak is not None:
            table.add_row(
                "Peak week",
                f"{peak.week} ({format_distance(peak.weekly_total, document.settings.unit)})",
            )
        table.add_row("Updated", document.updated_at.isoformat())
    console.print(table)
    return 0


def cmd_reset(args) -> int:
    """Discard the persisted session."""
    _open_session().reset()
    console.print("[green]Session cleared.[/green]")
    return 0


COMMANDS = {
    "validate": cmd_validate,
    "show": cmd_show,
    "convert": cmd_convert,
    "import": cmd_import,
    "export": cmd_export,
    "status": cmd_status,
    "reset": cmd_reset,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="training-calendar",
        description="Training calendar - plan documents and session state",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  training-calendar validate plan.json
  training-calendar show plan.json
  training-calendar convert plan.json --to miles
  training-calendar import plan.json
  training-calendar export -o plan.json
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    validate_p = subparsers.add_parser("validate", help="Validate a plan document")
    validate_p.add_argument("file", help="Path to a plan document (JSON)")

    show_p = subparsers.add_parser("show", help="Show a plan week by week")
    show_p.add_argument("file", nargs="?", help="Plan document; defaults to the current session")

    convert_p = subparsers.add_parser("convert", help="Convert a plan to another unit")
    convert_p.add_argument("file", help="Path to a plan document (JSON)")
    convert_p.add_argument(
        "--to",
        choices=[u.value for u in DistanceUnit],
        required=True,
        help="Target distance unit",
    )
    convert_p.add_argument("--output", "-o", help="Write to a file instead of stdout")

    import_p = subparsers.add_parser("import", help="Import a plan into the session")
    import_p.add_argument("file", help="Path to a plan document (JSON)")

    export_p = subparsers.add_parser("export", help="Export the session's plan")
    export_p.add_argument("--output", "-o", help="Write to a file instead of stdout")

    subparsers.add_parser("status", help="Show session status")
    subparsers.add_parser("reset", help="Discard the session's plan")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    try:
        return COMMANDS[args.command](args)
    except PlanValidationError as e:
        console.print(f"[red]{e.message.split(':')[0]}:[/red]")
        for error in e.errors:
            console.print(f"  - {error}")
        return 1
    except TrainingCalendarError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        return 1
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
