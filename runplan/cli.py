"""
Command-line interface for the running program generator.

Provides commands for:
- Program generation and display
- Pace lookup and VMA estimation
- Session tracking (completion, feedback, day swaps)
- Calendar and device exports
- Archiving and history
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from runplan.adaptation import IntensityAdvisor, adapt_program_intensity, suggested_vma
from runplan.database import ProgramStore, init_database
from runplan.exports import generate_ics, generate_tcx, session_start
from runplan.pace import pace_at
from runplan.plan_schemas import (
    AthleteLevel,
    Program,
    ProgramSettings,
    RaceDistance,
    RaceInfo,
    SessionFeedback,
    Week,
    WeekPhase,
)
from runplan.planner import TrainingPlanGenerator
from runplan.schemas import PlannerConfig
from runplan.tracking import (
    find_session,
    get_week,
    set_session_feedback,
    swap_session_days,
    toggle_session_completed,
    week_progress,
)
from runplan.vma import RaceTestDistance, vma_from_half_cooper, vma_from_race_time, vma_from_vameval

# Initialize Typer app and Rich console
app = typer.Typer(help="Running program generator - periodized plans from your race and VMA")
console = Console()

PHASE_COLORS = {
    WeekPhase.BUILD_UP: "cyan",
    WeekPhase.PROGRESSION: "green",
    WeekPhase.RECOVERY: "yellow",
    WeekPhase.TAPER: "magenta",
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ===== HELPERS =====


def _open_store(database_url: Optional[str]) -> ProgramStore:
    return ProgramStore(init_database(database_url))


def _load_active(store: ProgramStore) -> Program:
    program = store.load_active()
    if program is None:
        console.print("[red]✗ No active program. Run 'generate' first.[/red]")
        raise typer.Exit(1)
    return program


def _load_config(config: Optional[Path]) -> PlannerConfig:
    if config is None:
        return PlannerConfig()
    try:
        return PlannerConfig.from_file(config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]✗ Failed to load config: {e}[/red]")
        raise typer.Exit(1)


def _parse_race_time(value: str) -> int:
    """Parse H:MM:SS or MM:SS into seconds."""
    try:
        parts = [int(p) for p in value.split(":")]
    except ValueError:
        raise typer.BadParameter(f"Invalid race time: {value}")
    if len(parts) not in (2, 3):
        raise typer.BadParameter(f"Invalid race time: {value}")
    seconds = 0
    for part in parts:
        seconds = seconds * 60 + part
    return seconds


# ===== DISPLAY HELPER FUNCTIONS =====


def _display_program_summary(program: Program):
    """
    Display program summary with the week-by-week overview.

    Args:
        program: Program to display
    """
    race = program.race_name or program.distance.value
    console.print(
        f"\n✓ [green]{program.total_weeks}-week program[/green] for [bold]{race}[/bold] "
        f"on {program.race_date}"
    )
    console.print(f"  Level: {program.level.value}, VMA: {program.vma or 'default'}")
    console.print(f"  Objective: {program.time_objective or '-'}")

    table = Table(title="Weeks", box=box.ROUNDED)
    table.add_column("Week", justify="right")
    table.add_column("Title")
    table.add_column("Phase")
    table.add_column("km", justify="right", style="yellow")
    table.add_column("Done", justify="right")

    for week in program.weeks:
        completed, count = week_progress(week)
        color = PHASE_COLORS[week.phase]
        table.add_row(
            str(week.week_number),
            week.title,
            f"[{color}]{week.phase.value}[/{color}]",
            str(week.total_km),
            f"{completed}/{count}",
        )

    console.print(table)


def _display_week(week: Week):
    """
    Display every session of a week with its blocks.

    Args:
        week: Week to display
    """
    console.print(f"\n[bold]Week {week.week_number}: {week.title}[/bold] ({week.total_km} km)\n")

    table = Table(box=box.SIMPLE)
    table.add_column("Day", style="cyan")
    table.add_column("Session")
    table.add_column("Min", justify="right")
    table.add_column("km", justify="right")
    table.add_column("Structure")
    table.add_column("Id", style="dim")

    for session in week.sessions:
        done = "✓ " if session.completed else ""
        structure = "\n".join(f"[{b.kind.value}] {b.details}" for b in session.structure)
        table.add_row(
            session.day.value.title(),
            f"{done}{session.title}",
            str(session.duration_minutes or "-"),
            str(session.distance_km if session.distance_km is not None else "-"),
            structure,
            session.id,
        )

    console.print(table)


# ===== CLI COMMANDS =====


@app.command()
def generate(
    distance: RaceDistance = typer.Option(..., "--distance", "-d", help="Race distance"),
    level: AthleteLevel = typer.Option(..., "--level", "-l", help="Athlete level"),
    race_date: datetime = typer.Option(
        ..., "--race-date", "-r", formats=["%Y-%m-%d"], help="Race date (YYYY-MM-DD)"
    ),
    sessions: int = typer.Option(3, "--sessions", "-s", help="Sessions per week (2-6)"),
    vma: Optional[float] = typer.Option(None, "--vma", help="VMA in km/h"),
    race_name: str = typer.Option("", "--race-name", help="Race name"),
    objective: str = typer.Option("", "--objective", help="Time objective label"),
    elevation: Optional[float] = typer.Option(
        None, "--elevation", help="Course elevation gain in meters"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to planner config JSON file", exists=True
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write program JSON here"),
    save: bool = typer.Option(True, "--save/--no-save", help="Store as the active program"),
    database_url: Optional[str] = typer.Option(None, "--db", help="Database URL"),
):
    """
    Generate a new program.

    The new program replaces the active one (the previous one is not archived).
    """
    console.print("\n[bold cyan]Running Program Generator[/bold cyan]\n")

    race_info = None
    if elevation is not None:
        race_info = RaceInfo(
            name=race_name or distance.value,
            race_date=race_date.date(),
            elevation_gain_m=elevation,
        )

    settings = ProgramSettings(
        distance=distance,
        level=level,
        race_name=race_name,
        race_date=race_date.date(),
        sessions_per_week=sessions,
        time_objective=objective,
        vma=vma,
        race_info=race_info,
    )

    program = TrainingPlanGenerator(_load_config(config)).generate(settings)
    _display_program_summary(program)

    if output:
        output.write_text(program.model_dump_json(indent=2))
        console.print(f"\n✓ Program saved: [cyan]{output}[/cyan]")

    if save:
        _open_store(database_url).save_active(program)
        console.print("✓ Active program updated")


@app.command()
def show(
    week: Optional[int] = typer.Option(None, "--week", "-w", help="Week number to detail"),
    database_url: Optional[str] = typer.Option(None, "--db", help="Database URL"),
):
    """Show the active program, or one week in detail."""
    program = _load_active(_open_store(database_url))

    if week is None:
        _display_program_summary(program)
        return

    try:
        _display_week(get_week(program, week))
    except LookupError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)


@app.command()
def pace(
    vma: float = typer.Argument(..., help="VMA in km/h"),
    percent: float = typer.Argument(100.0, help="Percentage of VMA"),
):
    """Pace per km at a percentage of VMA."""
    console.print(f"{percent:g}% of {vma:g} km/h: [bold]{pace_at(vma, percent)}[/bold]/km")


@app.command()
def vma(
    half_cooper: Optional[float] = typer.Option(
        None, "--half-cooper", help="Meters covered in 6 minutes"
    ),
    vameval: Optional[int] = typer.Option(None, "--vameval", help="Last completed VAMEVAL stage"),
    race_distance: Optional[RaceTestDistance] = typer.Option(
        None, "--race-distance", help="Recent race distance"
    ),
    race_time: Optional[str] = typer.Option(None, "--race-time", help="Race time (MM:SS or H:MM:SS)"),
):
    """Estimate VMA from a field test or a recent race."""
    try:
        if half_cooper is not None:
            result = vma_from_half_cooper(half_cooper)
        elif vameval is not None:
            result = vma_from_vameval(vameval)
        elif race_distance is not None and race_time is not None:
            result = vma_from_race_time(race_distance, _parse_race_time(race_time))
        else:
            console.print(
                "[yellow]Use --half-cooper, --vameval or --race-distance with --race-time[/yellow]"
            )
            raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    console.print(f"Estimated VMA: [bold green]{result:g} km/h[/bold green]")


@app.command()
def complete(
    session_id: str = typer.Argument(..., help="Session id"),
    database_url: Optional[str] = typer.Option(None, "--db", help="Database URL"),
):
    """Toggle a session's completion."""
    store = _open_store(database_url)
    try:
        program = toggle_session_completed(_load_active(store), session_id)
    except LookupError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)
    store.save_active(program)

    _, session = find_session(program, session_id)
    state = "completed" if session.completed else "not completed"
    console.print(f"✓ {session.title} ({session.day.value}) marked {state}")


@app.command()
def feedback(
    session_id: str = typer.Argument(..., help="Session id"),
    value: Optional[SessionFeedback] = typer.Argument(None, help="easy, medium or hard (omit to clear)"),
    database_url: Optional[str] = typer.Option(None, "--db", help="Database URL"),
):
    """Rate how hard a session felt."""
    store = _open_store(database_url)
    try:
        program = set_session_feedback(_load_active(store), session_id, value)
    except LookupError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)
    store.save_active(program)
    console.print(f"✓ Feedback saved for {session_id}")

    advice = IntensityAdvisor(program).advise()
    if advice.reduce_intensity:
        console.print(f"\n[yellow]{advice.message}[/yellow]")
        new_vma = suggested_vma(program, advice)
        if new_vma is not None:
            console.print(f"  Run 'adapt {advice.reduction_percent:g}' to use {new_vma:g} km/h")


@app.command()
def adapt(
    reduction: float = typer.Argument(..., help="VMA reduction in percent"),
    database_url: Optional[str] = typer.Option(None, "--db", help="Database URL"),
):
    """Lower the active program's VMA."""
    store = _open_store(database_url)
    try:
        program = adapt_program_intensity(_load_active(store), reduction)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)
    store.save_active(program)
    console.print(f"✓ VMA is now {program.vma or 'unset'}")


@app.command()
def swap(
    week: int = typer.Argument(..., help="Week number"),
    dragged: str = typer.Argument(..., help="Id of the session to move"),
    target: str = typer.Argument(..., help="Id of the session whose day it takes"),
    database_url: Optional[str] = typer.Option(None, "--db", help="Database URL"),
):
    """Swap the days of two sessions within a week."""
    store = _open_store(database_url)
    try:
        program = swap_session_days(_load_active(store), week, dragged, target)
    except LookupError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)
    store.save_active(program)
    _display_week(get_week(program, week))


@app.command()
def delete(
    database_url: Optional[str] = typer.Option(None, "--db", help="Database URL"),
):
    """Archive the active program into history."""
    archived = _open_store(database_url).delete_active()
    if archived is None:
        console.print("[yellow]No active program to delete[/yellow]")
        return
    console.print(f"✓ Program {archived.id} archived")


@app.command()
def history(
    clear: bool = typer.Option(False, "--clear", help="Delete every archived program"),
    database_url: Optional[str] = typer.Option(None, "--db", help="Database URL"),
):
    """List archived programs."""
    store = _open_store(database_url)
    if clear:
        count = store.clear_history()
        console.print(f"✓ Removed {count} archived program(s)")
        return

    programs = store.history()
    if not programs:
        console.print("[yellow]History is empty[/yellow]")
        return

    table = Table(title="Program History", box=box.ROUNDED)
    table.add_column("Archived")
    table.add_column("Race")
    table.add_column("Distance")
    table.add_column("Weeks", justify="right")
    for program in programs:
        archived = program.archived_at.strftime("%Y-%m-%d") if program.archived_at else "-"
        table.add_row(
            archived,
            program.race_name or "-",
            program.distance.value,
            str(program.total_weeks),
        )
    console.print(table)


@app.command("export-ics")
def export_ics(
    week: int = typer.Argument(..., help="Week number"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output .ics file"),
    database_url: Optional[str] = typer.Option(None, "--db", help="Database URL"),
):
    """Export one week to an iCalendar file."""
    program = _load_active(_open_store(database_url))
    try:
        content = generate_ics(program, week)
    except LookupError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    output = output or Path(f"runplan_week_{week}.ics")
    output.write_text(content)
    console.print(f"✓ Calendar saved: [cyan]{output}[/cyan]")


@app.command("export-tcx")
def export_tcx(
    session_id: str = typer.Argument(..., help="Session id"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output .tcx file"),
    database_url: Optional[str] = typer.Option(None, "--db", help="Database URL"),
):
    """Export one session to a TCX file for GPS watches."""
    program = _load_active(_open_store(database_url))
    try:
        week, session = find_session(program, session_id)
    except LookupError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    content = generate_tcx(session, session_start(program, week.week_number, session))
    output = output or Path(f"runplan_{session.id}.tcx")
    output.write_text(content)
    console.print(f"✓ Workout saved: [cyan]{output}[/cyan]")


@app.command("dump")
def dump(
    database_url: Optional[str] = typer.Option(None, "--db", help="Database URL"),
):
    """Print the active program as JSON."""
    program = _load_active(_open_store(database_url))
    console.print_json(json.dumps(program.model_dump(mode="json")))


if __name__ == "__main__":
    app()
