"""Command-line interface for the adaptive workout engine."""

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .config import config
from .analysis.models import (
    BaseWorkout,
    Exercise,
    FatigueLevel,
    PerformanceMetrics,
    PerformanceUpdate,
    SetPerformance,
    SubstitutionReason,
    UserProfile,
)
from .analysis.rest_timer import RestTimeCalculator
from .analysis.substitution import SubstitutionRanker
from .db import get_db, PerformanceStore
from .engine import AdaptiveWorkoutEngine
from .errors import AdaptiveWorkoutError

console = Console()


def _load_json(path: str):
    return json.loads(Path(path).read_text())


def _engine() -> AdaptiveWorkoutEngine:
    return AdaptiveWorkoutEngine(store=PerformanceStore(get_db()))


def _print_plan(plan) -> None:
    table = Table(title="Progression Plan", box=box.ROUNDED)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Strategy", plan.type.value)
    table.add_row("Weight increment", f"{plan.parameters.weight_increase:.2f}")
    table.add_row("Rep increment", f"{plan.parameters.rep_increase:.2f}")
    table.add_row("Next progression", plan.next_progression.strftime("%Y-%m-%d %H:%M"))
    table.add_row("Last deload", plan.last_deload.strftime("%Y-%m-%d %H:%M") if plan.last_deload else "-")
    console.print(table)


@click.group()
def cli():
    """Adaptive Workout Engine."""
    logging.basicConfig(level=config.LOG_LEVEL)
    config.validate()


@cli.command()
def init_db():
    """Create database tables."""
    get_db().create_tables()
    console.print("[green]✅ Database initialized[/green]")


@cli.command()
@click.option("--workout", "workout_file", required=True, help="Path to base workout JSON")
@click.option("--profile", "profile_file", required=True, help="Path to user profile JSON")
@click.option("--history", "history_file", help="Path to JSON list of recent sessions, most recent first")
def build(workout_file, profile_file, history_file):
    """Build an adaptive config for a workout."""
    workout = BaseWorkout.from_dict(_load_json(workout_file))
    profile = UserProfile.from_dict(_load_json(profile_file))
    history = None
    if history_file:
        history = [PerformanceMetrics.from_dict(item) for item in _load_json(history_file)]

    try:
        workout_config = _engine().build(workout, profile, history)
    except AdaptiveWorkoutError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise SystemExit(1)

    console.print(Panel.fit(f"🏋️  Adaptive workout {workout.name}", style="bold blue"))

    difficulty = workout_config.difficulty
    table = Table(title="Difficulty", box=box.ROUNDED)
    table.add_column("Level", style="cyan")
    table.add_column("Intensity", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("Complexity", justify="right")
    table.add_row(
        difficulty.level.value,
        f"{difficulty.intensity:.2f}",
        f"{difficulty.volume:.2f}",
        f"{difficulty.complexity:.2f}",
    )
    console.print(table)

    pending = workout_config.pending_modifications()
    if pending:
        mods = Table(title="Pending Modifications", box=box.SIMPLE)
        mods.add_column("Exercise", style="cyan")
        mods.add_column("Change")
        mods.add_column("Reason", style="orange3")
        for mod in pending:
            mods.add_row(mod.exercise_id, mod.modification.value, mod.reason.value)
        console.print(mods)

    _print_plan(workout_config.progression_plan)


@cli.command()
@click.argument("workout_id")
@click.option("--fatigue", type=float, help="Overall fatigue 1-10")
@click.option("--heart-rate", type=float, help="Average heart rate so far")
@click.option("--completion", type=float, help="Completion ratio so far, 0-1")
def update(workout_id, fatigue, heart_rate, completion):
    """Apply a live performance update."""
    live = PerformanceUpdate(
        fatigue=FatigueLevel(overall=fatigue) if fatigue is not None else None,
        avg_heart_rate=heart_rate,
        completion_rate=completion,
    )
    try:
        adaptations = _engine().apply_live_update(workout_id, live)
    except AdaptiveWorkoutError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise SystemExit(1)

    if not adaptations:
        console.print("[green]✅ No adaptation needed[/green]")
        return

    table = Table(title="Adaptations", box=box.ROUNDED)
    table.add_column("Trigger", style="cyan")
    table.add_column("Action")
    table.add_column("Severity", style="orange3")
    table.add_column("Confidence", justify="right")
    for adaptation in adaptations:
        table.add_row(
            adaptation.trigger.value,
            adaptation.modification.value,
            adaptation.severity.value,
            f"{adaptation.confidence:.0%}",
        )
    console.print(table)


@cli.command()
@click.argument("workout_id")
@click.option("--metrics", "metrics_file", required=True, help="Path to finalized session JSON")
def close(workout_id, metrics_file):
    """Close a session and update the progression plan."""
    metrics = PerformanceMetrics.from_dict(_load_json(metrics_file))
    engine = _engine()
    try:
        plan = engine.close_session(workout_id, metrics)
    except AdaptiveWorkoutError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise SystemExit(1)

    _print_plan(plan)

    report = engine.analyze_session(metrics)
    console.print(f"\n[bold]Session score:[/bold] {report.overall_score}/100")
    for strength in report.strengths:
        console.print(f"  [green]✓[/green] {strength}")
    for improvement in report.improvements:
        console.print(f"  [orange3]•[/orange3] {improvement}")
    for recommendation in report.next_workout_recommendations:
        console.print(f"  [blue]→[/blue] {recommendation}")


@cli.command()
@click.option("--exercise", "exercise_file", required=True, help="Path to exercise JSON")
@click.option("--reps", type=int, required=True, help="Reps performed in the set")
@click.option("--rpe", type=float, required=True, help="RPE of the set, 1-10")
@click.option("--completed/--failed", default=True, help="Whether the set was completed")
@click.option("--hr-recovery", type=float, help="Heart-rate drop since set end (bpm)")
@click.option("--muscle-fatigue", type=float, help="Muscle-group fatigue, 0-1")
@click.option("--sleep", type=float, help="Sleep quality, 0-1")
def rest(exercise_file, reps, rpe, completed, hr_recovery, muscle_fatigue, sleep):
    """Recommend rest after a set."""
    exercise = Exercise.from_dict(_load_json(exercise_file))
    overrides = {}
    if hr_recovery is not None:
        overrides['heart_rate_recovery'] = hr_recovery
    if muscle_fatigue is not None:
        overrides['muscle_group_fatigue'] = muscle_fatigue
    if sleep is not None:
        overrides['sleep_quality'] = sleep

    timer = RestTimeCalculator().calculate(
        exercise, SetPerformance(reps=reps, rpe=rpe, completed=completed), overrides
    )

    console.print(f"⏱️  Rest [bold]{timer.current_rest}s[/bold] (base {timer.base_rest_time}s, "
                  f"{timer.factors.exercise_type.value})")
    for rec in timer.recommendations:
        console.print(f"  {rec.type.value} ({rec.priority.value} priority): {rec.reason}")


@cli.command()
@click.option("--exercise", "exercise_file", required=True, help="Path to exercise JSON")
@click.option("--catalog", "catalog_file", required=True, help="Path to exercise catalog JSON list")
@click.option("--profile", "profile_file", required=True, help="Path to user profile JSON")
@click.option("--reason", type=click.Choice([r.value for r in SubstitutionReason]), default="variety")
def substitute(exercise_file, catalog_file, profile_file, reason):
    """Rank substitute exercises."""
    exercise = Exercise.from_dict(_load_json(exercise_file))
    catalog = [Exercise.from_dict(item) for item in _load_json(catalog_file)]
    profile = UserProfile.from_dict(_load_json(profile_file))

    ranked = SubstitutionRanker().rank(exercise, SubstitutionReason(reason), profile, catalog)
    if not ranked:
        console.print("[orange3]No suitable substitutes found[/orange3]")
        return

    table = Table(title=f"Substitutes for {exercise.name}", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Exercise", style="cyan")
    table.add_column("Muscles")
    table.add_column("Equipment")
    for i, candidate in enumerate(ranked, 1):
        table.add_row(
            str(i),
            candidate.name,
            ", ".join(sorted(candidate.muscle_groups)),
            ", ".join(sorted(candidate.equipment)) or "bodyweight",
        )
    console.print(table)


@cli.command()
@click.argument("workout_id")
def trends(workout_id):
    """Show performance trends for a workout."""
    results = _engine().performance_trends(workout_id)
    if not results:
        console.print("[orange3]Not enough sessions for trend analysis[/orange3]")
        return

    table = Table(title="Performance Trends", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Trend")
    table.add_column("Change/session", justify="right")
    table.add_column("Confidence", justify="right")
    for trend in results:
        table.add_row(trend.metric, trend.direction.value, f"{trend.change_rate:+.1%}", f"{trend.confidence:.0%}")
    console.print(table)


@cli.command()
@click.argument("workout_id")
@click.option("--sleep", type=float, default=5, help="Sleep quality last night, 1-10")
@click.option("--stress", type=float, default=5, help="Current stress level, 1-10")
def intensity(workout_id, sleep, stress):
    """Recommend an intensity target for the next session."""
    try:
        target = _engine().recommend_intensity(workout_id, sleep_quality=sleep, stress_level=stress)
    except AdaptiveWorkoutError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise SystemExit(1)

    table = Table(title="Next Session Target", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Intensity", f"{target.target:.1f}/10")
    table.add_row("Heart rate zone", f"Z{target.heart_rate_zone}")
    table.add_row("Target RPE", f"{target.perceived_exertion:.1f}")
    table.add_row("Work:rest", f"1:{target.work_to_rest_ratio:g}")
    table.add_row("Duration", f"{target.expected_duration:.0f} min")
    console.print(table)


def main():
    cli()


if __name__ == "__main__":
    main()
