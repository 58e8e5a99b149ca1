"""Command-line interface for the adaptive periodization engine."""

import logging
from datetime import date, datetime, timedelta

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .ai_coach import AICoach
from .analysis.phases import iter_phases, phase_for_week
from .analysis.progression import ExerciseProgressionRule, ProgressionCalculator
from .analysis.schedule import generate_week
from .analysis.wellness import WellnessSnapshot
from .config import config
from .db import SqlHistoryProvider, get_db
from .engine import evaluate_safety, generate_session_recommendation, next_exercise_weight, resolve_week
from .errors import CoachUnavailableError, PeriodizationError
from .history import CheckIn, SessionRecord, SessionStatus, SetLog, load_safety_window

console = Console()

SEVERITY_STYLES = {
    'low': 'green',
    'medium': 'yellow',
    'high': 'orange3',
    'critical': 'bold red',
}


def _history() -> SqlHistoryProvider:
    return SqlHistoryProvider(get_db())


def _parse_date(value, default=None) -> date:
    if value is None:
        return default or date.today()
    return datetime.strptime(value, '%Y-%m-%d').date()


def _program_start(start) -> date:
    if start:
        return _parse_date(start)
    configured = config.get_program_start_date()
    if configured is None:
        raise click.UsageError("Program start date required: pass --start or set PROGRAM_START_DATE")
    return configured


def _fail(error: Exception):
    console.print(f"[red]❌ {escape(str(error))}[/red]")
    raise SystemExit(1)


def _completed_counts(history: SqlHistoryProvider, user_id: str, start: date, today: date):
    """(completed this program week, completed since start) up to today."""
    days_in = (today - start).days
    if days_in < 0:
        return 0, 0
    week_start = start + timedelta(days=(days_in // 7) * 7)
    return (
        history.completed_sessions(user_id, week_start, today),
        history.completed_sessions(user_id, start, today),
    )


def _sessions_table(title, sessions) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Day", style="cyan")
    table.add_column("Slot")
    table.add_column("Focus", style="yellow")
    table.add_column("Duration", style="green")
    table.add_column("Intensity", style="magenta")
    table.add_column("Exercises")

    for session in sessions:
        table.add_row(
            str(session.day),
            session.slot.value.upper(),
            session.focus,
            f"{session.duration_minutes}min",
            f"{session.intensity_modifier:.2f}",
            ", ".join(session.exercises),
        )
    return table


def _print_alerts(alerts):
    if not alerts:
        console.print("[green]✅ No safety alerts[/green]")
        return
    for alert in alerts:
        style = SEVERITY_STYLES.get(alert.severity.value, 'white')
        console.print(f"[{style}]⚠️  {alert.severity.value.upper()} {alert.alert_type.value}: {alert.message}[/{style}]")


@click.group()
@click.option("--log-level", default=None, help="Logging level (defaults to LOG_LEVEL)")
def cli(log_level):
    """Adaptive periodization and training safety tool."""
    level = (log_level or config.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@cli.command()
@click.option("--week", type=int, help="Program week (1-11); omit for the whole program")
def phase(week):
    """Show the periodization phase for a week or the whole program."""
    try:
        phases = [phase_for_week(week)] if week is not None else list(iter_phases())
    except PeriodizationError as e:
        _fail(e)

    table = Table(title="Periodization", box=box.ROUNDED)
    table.add_column("Week", style="cyan")
    table.add_column("Phase", style="yellow")
    table.add_column("Intensity", style="magenta")
    table.add_column("Volume", style="green")
    table.add_column("Focus")

    for p in phases:
        name = f"[bold]{p.phase.value.upper()}[/bold]" if p.is_deload else p.phase.value.title()
        table.add_row(str(p.week), name, str(p.intensity), str(p.volume), p.focus)

    console.print(table)
    if week is not None:
        console.print(f"[dim]{phases[0].notes}[/dim]")


@cli.command()
@click.option("--week", type=int, required=True, help="Program week (1-11)")
def schedule(week):
    """Show the session templates for a program week."""
    try:
        sessions = generate_week(week)
    except PeriodizationError as e:
        _fail(e)

    console.print(_sessions_table(f"Week {week} Schedule", sessions))


@cli.command()
@click.option("--start", help="Program start date (YYYY-MM-DD), defaults to PROGRAM_START_DATE")
@click.option("--date", "on_date", help="Date to resolve (YYYY-MM-DD), defaults to today")
@click.option("--user-id", default=None, help="Trainee ID (defaults to USER_ID)")
def week(start, on_date, user_id):
    """Show where a date falls in the program."""
    user_id = user_id or config.USER_ID
    program_start = _program_start(start)
    today = _parse_date(on_date)

    history = _history()
    completed_this_week, completed_total = _completed_counts(history, user_id, program_start, today)

    try:
        status = resolve_week(program_start, today, completed_this_week, completed_total)
    except PeriodizationError as e:
        _fail(e)

    if status.is_complete:
        console.print(Panel.fit(f"🏁 Program complete (week {status.week})", style="bold green"))
        return

    console.print(Panel.fit(f"📅 Week {status.week}, Day {status.day}", style="bold blue"))
    console.print(f"  • Phase: {phase_for_week(status.week).phase.value}")
    console.print(f"  • Deload week: {'yes' if status.is_deload else 'no'}")
    console.print(f"  • Rest day: {'yes' if status.is_rest_day else 'no'}")
    console.print(f"  • Completed this week: {completed_this_week}/{config.SESSION_FREQUENCY}")
    console.print(f"  • Missed sessions: {status.missed_sessions}")
    console.print(f"  • Progress: {status.progress_pct:.1f}%")
    next_date = status.next_session_date.isoformat() if status.next_session_date else "N/A"
    console.print(f"  • Next session: {next_date}")


@cli.command()
@click.option("--start", help="Program start date (YYYY-MM-DD), defaults to PROGRAM_START_DATE")
@click.option("--date", "on_date", help="Date to plan (YYYY-MM-DD), defaults to today")
@click.option("--user-id", default=None, help="Trainee ID (defaults to USER_ID)")
@click.option("--age", type=int, default=None, help="Trainee age (defaults to TRAINEE_AGE)")
@click.option("--coach/--no-coach", default=False, help="Add a motivational message from the AI coach")
def today(start, on_date, user_id, age, coach):
    """Recommend today's sessions, adapted to wellness and safety."""
    user_id = user_id or config.USER_ID
    age = age or config.TRAINEE_AGE
    program_start = _program_start(start)
    today_date = _parse_date(on_date)

    history = _history()
    completed_this_week, completed_total = _completed_counts(history, user_id, program_start, today_date)

    todays_checkins = history.checkins(user_id, today_date, today_date)
    wellness = None
    if todays_checkins:
        checkin = todays_checkins[-1]
        wellness = WellnessSnapshot(
            mood=checkin.mood,
            energy_level=checkin.energy_level,
            sleep_hours=checkin.sleep_hours,
            muscle_soreness=checkin.muscle_soreness,
        )
    else:
        console.print("[yellow]⚠️  No check-in for today, using the nominal plan[/yellow]")

    copy_generator = None
    if coach:
        try:
            copy_generator = AICoach()
        except CoachUnavailableError as e:
            console.print(f"[yellow]⚠️  AI coach unavailable: {e}[/yellow]")

    try:
        window = load_safety_window(history, user_id, today_date)
        safety = evaluate_safety(window.checkins, window.sessions, window.set_logs, age, as_of=today_date)
        recommendation = generate_session_recommendation(
            program_start, today_date,
            wellness=wellness,
            safety=safety,
            completed_this_week=completed_this_week,
            completed_total=completed_total,
            copy_generator=copy_generator,
            recent_sessions=window.sessions,
        )
    except PeriodizationError as e:
        _fail(e)

    status = recommendation.status
    if status.is_complete:
        console.print(Panel.fit("🏁 Program complete", style="bold green"))
        return

    console.print(Panel.fit(
        f"🏋️ Week {status.week}, Day {status.day} - {recommendation.phase.phase.value.title()}",
        style="bold blue",
    ))

    if not recommendation.is_training_day:
        console.print("[green]😴 Rest day - no sessions scheduled[/green]")
    else:
        console.print(_sessions_table("Today's Sessions", recommendation.sessions))
        if recommendation.sessions != recommendation.nominal_sessions:
            console.print("[yellow]Sessions adapted from the nominal plan[/yellow]")

    if recommendation.micro_deload:
        console.print("[yellow]📉 Micro-deload suggested: keep today's loads light[/yellow]")

    _print_alerts(recommendation.alerts)
    if recommendation.message:
        console.print(Panel(recommendation.message, title="💡 Coach", box=box.ROUNDED))
    for exercise_id, cues in recommendation.form_cues.items():
        console.print(f"[bold]{exercise_id.replace('_', ' ').title()}[/bold] cues: {escape(', '.join(cues))}")


@cli.command()
@click.option("--exercise", required=True, help="Exercise ID (e.g. squat)")
@click.option("--week", type=int, required=True, help="Program week (1-11)")
@click.option("--weight", type=float, default=None, help="Current working weight (defaults to last logged)")
@click.option("--rpe", type=float, default=None, help="Last RPE (defaults to last logged)")
@click.option("--rate", type=float, default=5.0, help="Base progression rate, percent")
@click.option("--max-increase", type=float, default=20.0, help="Maximum single increase, percent")
@click.option("--threshold", type=float, default=7.0, help="RPE above which the load is held")
@click.option("--user-id", default=None, help="Trainee ID (defaults to USER_ID)")
def progress(exercise, week, weight, rpe, rate, max_increase, threshold, user_id):
    """Recommend the next working weight for an exercise."""
    if weight is None or rpe is None:
        last_set = _history().last_set_for(user_id or config.USER_ID, exercise)
        if last_set is None:
            raise click.UsageError(f"No logged sets for {exercise}; pass --weight and --rpe")
        weight = (last_set.weight_used or 0.0) if weight is None else weight
        rpe = last_set.rpe if rpe is None else rpe

    rule = ExerciseProgressionRule(
        exercise_id=exercise,
        base_weight=weight,
        progression_rate_pct=rate,
        max_increase_pct=max_increase,
        rpe_threshold=threshold,
    )

    try:
        next_weight = next_exercise_weight(weight, rpe, week, rule)
        week_phase = phase_for_week(week)
    except PeriodizationError as e:
        _fail(e)

    change = next_weight - weight
    console.print(f"[bold]{exercise}[/bold] week {week}: {weight:g} → [green]{next_weight:g}[/green] ({change:+.2f})")
    if rpe > threshold:
        console.print(f"[yellow]RPE {rpe:g} above {threshold:g} - holding the load[/yellow]")

    rest = ProgressionCalculator().rest_seconds_for(exercise, week_phase.intensity, week_phase)
    console.print(f"Rest between sets: {rest}s")


@cli.command()
@click.option("--date", "on_date", help="Evaluation date (YYYY-MM-DD), defaults to today")
@click.option("--user-id", default=None, help="Trainee ID (defaults to USER_ID)")
@click.option("--age", type=int, default=None, help="Trainee age (defaults to TRAINEE_AGE)")
@click.option("--save/--no-save", default=True, help="Store generated alerts")
def safety(on_date, user_id, age, save):
    """Evaluate fatigue, form, load and overtraining risk."""
    user_id = user_id or config.USER_ID
    age = age or config.TRAINEE_AGE
    today_date = _parse_date(on_date)

    history = _history()
    window = load_safety_window(history, user_id, today_date)

    try:
        assessment = evaluate_safety(window.checkins, window.sessions, window.set_logs, age, as_of=today_date)
    except PeriodizationError as e:
        _fail(e)

    metrics = assessment.metrics
    risk_style = SEVERITY_STYLES.get(metrics.injury_risk.value, 'white')

    table = Table(title="Safety Metrics", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    table.add_row("Fatigue level", f"{metrics.fatigue_level}/10")
    table.add_row("Form quality", f"{metrics.form_quality}/10")
    table.add_row("Load progression", f"{metrics.load_progression_pct:.1f}%")
    table.add_row("Overtraining score", f"{metrics.overtraining_score:.2f}")
    table.add_row("Injury risk", f"[{risk_style}]{metrics.injury_risk.value.upper()}[/{risk_style}]")
    console.print(table)

    console.print(f"[dim]Window: {len(window.checkins)} check-ins, {len(window.sessions)} sessions, "
                  f"{len(window.set_logs)} sets[/dim]")

    for recommendation in metrics.recommendations:
        console.print(f"  • {recommendation}")

    _print_alerts(assessment.alerts)

    mods = assessment.modifications
    if mods.should_modify:
        applied = [name for name, flag in (
            ("reduce intensity", mods.reduce_intensity),
            ("reduce volume", mods.reduce_volume),
            ("add rest", mods.add_rest),
            ("focus on form", mods.focus_on_form),
        ) if flag]
        console.print(f"[yellow]Session modifications: {', '.join(applied)}[/yellow]")

    if save and assessment.alerts:
        count = history.save_alerts(user_id, assessment.alerts)
        console.print(f"[dim]Stored {count} alert(s)[/dim]")


@cli.command()
@click.option("--user-id", default=None, help="Trainee ID (defaults to USER_ID)")
@click.option("--all", "include_resolved", is_flag=True, help="Include resolved alerts")
@click.option("--resolve", "resolve_ids", type=int, multiple=True, help="Alert ID to mark resolved")
def alerts(user_id, include_resolved, resolve_ids):
    """List stored safety alerts or resolve them."""
    user_id = user_id or config.USER_ID
    history = _history()

    if resolve_ids:
        count = history.resolve_alerts(user_id, resolve_ids)
        console.print(f"[green]✅ Resolved {count} alert(s)[/green]")
        return

    rows = history.alerts(user_id, include_resolved=include_resolved)
    if not rows:
        console.print("[green]✅ No safety alerts[/green]")
        return

    table = Table(title="Safety Alerts", box=box.ROUNDED)
    table.add_column("ID", style="cyan")
    table.add_column("Date")
    table.add_column("Type", style="yellow")
    table.add_column("Severity")
    table.add_column("Message")
    table.add_column("Resolved")

    for row in rows:
        style = SEVERITY_STYLES.get(row.severity, 'white')
        table.add_row(
            str(row.id),
            row.created_at.strftime("%Y-%m-%d") if row.created_at else "N/A",
            row.alert_type,
            f"[{style}]{row.severity}[/{style}]",
            row.message,
            "yes" if row.is_resolved else "no",
        )
    console.print(table)


@cli.command()
@click.option("--mood", type=int, required=True, help="Mood 1-5")
@click.option("--energy", type=int, required=True, help="Energy level 1-10")
@click.option("--sleep", type=float, required=True, help="Hours slept")
@click.option("--soreness", type=int, required=True, help="Muscle soreness 1-5")
@click.option("--date", "on_date", help="Check-in date (YYYY-MM-DD), defaults to today")
@click.option("--notes", default="", help="Free-text notes")
@click.option("--user-id", default=None, help="Trainee ID (defaults to USER_ID)")
def checkin(mood, energy, sleep, soreness, on_date, notes, user_id):
    """Record a daily wellness check-in."""
    user_id = user_id or config.USER_ID
    record = CheckIn(
        date=_parse_date(on_date),
        mood=mood,
        energy_level=energy,
        sleep_hours=sleep,
        muscle_soreness=soreness,
        notes=notes,
    )

    try:
        _history().add_checkin(user_id, record)
    except ValueError as e:
        _fail(e)

    console.print(f"[green]✅ Check-in saved for {record.date.isoformat()}[/green]")


@cli.command("log-session")
@click.option("--week", type=int, required=True, help="Program week (1-11)")
@click.option("--day", type=int, required=True, help="Program day (1-7)")
@click.option("--date", "on_date", help="Session date (YYYY-MM-DD), defaults to today")
@click.option("--slot", type=click.Choice(["am", "pm"]), default="am")
@click.option("--status", type=click.Choice([s.value for s in SessionStatus]), default="completed")
@click.option("--rpe", type=float, default=None, help="Average session RPE 1-10")
@click.option("--duration", type=int, default=None, help="Duration in minutes")
@click.option("--notes", default=None)
@click.option("--user-id", default=None, help="Trainee ID (defaults to USER_ID)")
def log_session(week, day, on_date, slot, status, rpe, duration, notes, user_id):
    """Record a training session."""
    user_id = user_id or config.USER_ID
    record = SessionRecord(
        date=_parse_date(on_date),
        week=week,
        day=day,
        slot=slot,
        status=SessionStatus(status),
        average_rpe=rpe,
        duration_minutes=duration,
    )

    try:
        session_id = _history().add_session(user_id, record, notes=notes)
    except ValueError as e:
        _fail(e)

    console.print(f"[green]✅ Session {session_id} saved ({status}, week {week} day {day})[/green]")


@cli.command("log-set")
@click.option("--exercise", required=True, help="Exercise ID (e.g. squat)")
@click.option("--rpe", type=float, required=True, help="RPE 1-10")
@click.option("--weight", type=float, default=None, help="Weight used (omit for bodyweight)")
@click.option("--reps", type=int, default=0, help="Reps completed")
@click.option("--set-number", type=int, default=1)
@click.option("--session-id", type=int, default=None, help="Session the set belongs to")
@click.option("--user-id", default=None, help="Trainee ID (defaults to USER_ID)")
def log_set(exercise, rpe, weight, reps, set_number, session_id, user_id):
    """Record one working set."""
    user_id = user_id or config.USER_ID
    record = SetLog(
        exercise_id=exercise,
        rpe=rpe,
        weight_used=weight,
        set_number=set_number,
        reps_completed=reps,
    )

    try:
        _history().add_set_log(user_id, record, session_id=session_id)
    except ValueError as e:
        _fail(e)

    weight_str = f"{weight:g}" if weight is not None else "bodyweight"
    console.print(f"[green]✅ Logged {exercise} set {set_number}: {reps} reps @ {weight_str}, RPE {rpe:g}[/green]")


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user.[/yellow]")


if __name__ == "__main__":
    main()
