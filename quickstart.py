#!/usr/bin/env python3
"""
Quick start script to demonstrate the running program generator.

This script shows the complete workflow:
1. Estimate VMA from a field test
2. Generate a periodized program
3. Track sessions and leave feedback
4. Review intensity advice
5. Export a week to a calendar and a session to a watch
"""

from datetime import date, timedelta
from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from runplan.adaptation import IntensityAdvisor, adapt_program_intensity
from runplan.exports import generate_ics, generate_tcx, session_start
from runplan.pace import pace_range
from runplan.plan_schemas import (
    AthleteLevel,
    ProgramSettings,
    RaceDistance,
    SessionFeedback,
    Weekday,
)
from runplan.planner import generate_plan
from runplan.schemas import PlannerConfig
from runplan.tracking import find_session, set_session_feedback, toggle_session_completed
from runplan.vma import vma_from_half_cooper

console = Console()


def print_header(title: str):
    """Print a formatted header."""
    console.print(f"\n[bold cyan]{title}[/bold cyan]")
    console.print("=" * len(title))


def main():
    """Run the complete demonstration workflow."""
    console.print("\n[bold magenta]🏃 Running Program Generator[/bold magenta]")
    console.print("[dim]Demonstration of complete workflow[/dim]\n")

    # ===== STEP 1: Estimate VMA =====
    print_header("Step 1: Estimate VMA")

    vma = vma_from_half_cooper(1450)
    console.print(f"✓ Half-Cooper 1450 m → VMA [green]{vma:g} km/h[/green]")
    console.print(f"  Easy pace: {pace_range(vma, 65, 70)}")

    # ===== STEP 2: Generate Program =====
    print_header("Step 2: Generate Program")

    config_path = Path("models/planner_config.json")
    config = PlannerConfig.from_file(config_path) if config_path.exists() else PlannerConfig()

    settings = ProgramSettings(
        distance=RaceDistance.HALF_MARATHON,
        level=AthleteLevel.INTERMEDIATE,
        race_name="Demo Half Marathon",
        race_date=date.today() + timedelta(weeks=12),
        sessions_per_week=4,
        time_objective="< 1h45",
        vma=vma,
    )
    program = generate_plan(settings, config=config)

    console.print(f"✓ Generated [green]{program.total_weeks}-week program[/green]")
    console.print(f"  Total distance: {program.total_distance_km()} km")

    table = Table(title="Phase Distribution", box=box.ROUNDED)
    table.add_column("Phase", style="cyan")
    table.add_column("Weeks", justify="right", style="yellow")
    for phase, weeks in program.get_phase_breakdown().items():
        table.add_row(phase, str(weeks))
    console.print(table)

    first_week = program.weeks[0]
    console.print(f"\n[bold]Sample Week ({first_week.title}):[/bold]")
    for session in first_week.training_sessions():
        console.print(
            f"  {session.day.value}: {session.title} "
            f"({session.duration_minutes} min, ~{session.distance_km} km)"
        )

    # ===== STEP 3: Track Sessions =====
    print_header("Step 3: Track Sessions")

    for session in first_week.training_sessions():
        program = toggle_session_completed(program, session.id)
        program = set_session_feedback(program, session.id, SessionFeedback.HARD)
    console.print(f"✓ Completed {len(first_week.training_sessions())} sessions, all rated hard")

    # ===== STEP 4: Intensity Advice =====
    print_header("Step 4: Intensity Advice")

    advice = IntensityAdvisor(program).advise()
    console.print(f"  {advice.message}")
    if advice.reduce_intensity:
        program = adapt_program_intensity(program, advice.reduction_percent)
        console.print(f"✓ VMA lowered to [green]{program.vma:g} km/h[/green]")

    # ===== STEP 5: Exports =====
    print_header("Step 5: Exports")

    export_dir = Path("exports")
    export_dir.mkdir(exist_ok=True)

    ics_path = export_dir / "week_1.ics"
    ics_path.write_text(generate_ics(program, 1))
    console.print(f"✓ Calendar saved to: [cyan]{ics_path}[/cyan]")

    long_run_id = first_week.get_session(Weekday.SUNDAY).id
    week, long_run = find_session(program, long_run_id)
    tcx_path = export_dir / f"{long_run.id}.tcx"
    tcx_path.write_text(generate_tcx(long_run, session_start(program, week.week_number, long_run)))
    console.print(f"✓ Workout saved to: [cyan]{tcx_path}[/cyan]")

    # ===== COMPLETION =====
    console.print("\n")
    panel = Panel(
        "[green]✓[/green] Demonstration complete!\n\n"
        "The system successfully:\n"
        "  1. Estimated VMA from a field test\n"
        "  2. Generated a periodized program\n"
        "  3. Tracked sessions and adapted intensity\n"
        "  4. Exported calendar and watch files\n\n"
        "Check the exports/ directory.",
        title="[bold green]Success[/bold green]",
        border_style="green",
    )
    console.print(panel)

    console.print("\n[bold cyan]Next Steps:[/bold cyan]")
    console.print("  • Run CLI: python3 -m runplan.cli generate --help")
    console.print("  • Start the API: python3 -m runplan.api.main")
    console.print("  • Run tests: python3 -m pytest\n")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        console.print(f"\n[red]Error: {e}[/red]")
        console.print("\n[dim]Make sure you're in the project directory[/dim]")
        console.print("[dim]and have installed dependencies: pip install -e .[/dim]")
        raise
