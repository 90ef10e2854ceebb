"""Interactive CLI application."""
import logging
import os
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.prompt import Prompt, IntPrompt, Confirm

from expert_maker.assistant import ask_assistant, summarize_plan
from expert_maker.catalog import get_catalog
from expert_maker.db import init_db, list_tests, DEFAULT_DB_PATH
from expert_maker.importer import export_plan, import_plan
from expert_maker.lesson import build_lesson_timeline, PACE_NARRATIVE
from expert_maker.models import Pace, QuizMode, RankConfig
from expert_maker.plan import PlanRequest, PlanRequestError, MAX_WEEKS, MIN_WEEKS, MIN_HOURS, MAX_HOURS
from expert_maker.progress import compute_progress, get_progress_color, get_progress_label, plan_completion
from expert_maker.rank import format_belt
from expert_maker.review import latest_results, recent_weaknesses, session_weaknesses
from expert_maker.study import (
    create_plan, get_current_plan, get_rank, get_setting, set_setting, submit_quiz,
    toggle_session_complete, update_plan_settings, update_rank_config,
)
from expert_maker.utils import format_minutes

log = logging.getLogger(__name__)
console = Console()

DEFAULT_TOPICS = ["oauth", "rag", "node", "system"]
EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """Raised when the user leaves a quiz or picker midway."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    answer = session_prompt(prompt, choices=choices + list(EXIT_WORDS), show_choices=False)
    return int(answer)


def show_welcome():
    console.print(Panel(
        "[bold]ExpertMaker[/bold]\n[dim]Study plans with belt progression[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("new", "Generate a new plan"),
        ("plan", "View the current plan"),
        ("lesson", "Open a session's lesson agenda"),
        ("diagnostic", "Baseline quiz before a session"),
        ("assessment", "Post-session test (affects rank)"),
        ("complete", "Toggle a session as done"),
        ("rank", "Belt, stripes and progress"),
        ("settings", "Pace, notes and rank rules"),
        ("export", "Save the plan as JSON"),
        ("import", "Load a plan from JSON"),
        ("ask", "Ask for study hints"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def _require_plan(db_path: str):
    plan = get_current_plan(db_path)
    if not plan:
        console.print("[yellow]No plan yet. Use 'new' to generate one.[/yellow]")
    return plan


def pick_session(plan):
    """Number every session in the plan and let the user choose one."""
    sessions = list(plan.iter_sessions())
    week_by_session = {s.id: w.week_number for w in plan.weeks_data for s in w.sessions}
    for i, s in enumerate(sessions, 1):
        done = "[green]✓[/green]" if s.id in plan.completed_session_ids else " "
        console.print(f"  {done} [cyan]{i:>2}[/cyan]) W{week_by_session[s.id]} {s.topic_title}: {s.focus.title}")
    if not sessions:
        console.print("[yellow]This plan has no sessions.[/yellow]")
        return None
    index = session_int_prompt("Session", choices=[str(i) for i in range(1, len(sessions) + 1)])
    return sessions[index - 1]


def run_quiz_session(questions: list) -> dict:
    """Ask every question and return responses keyed by question id."""
    responses = {}
    if not questions:
        console.print("[yellow]This session has no quiz questions.[/yellow]")
        return responses
    console.print(f"\n[bold]Quiz[/bold] — {len(questions)} questions [dim](q to leave)[/dim]\n")
    for i, q in enumerate(questions, 1):
        console.print(f"[bold]Q{i}.[/bold] {q.question}\n")
        for n, option in enumerate(q.options, 1):
            console.print(f"  [cyan]{n})[/cyan] {option}")
        answer = session_int_prompt("\nYour answer", choices=[str(n) for n in range(1, len(q.options) + 1)])
        responses[q.id] = answer - 1
        console.print()
    return responses


def cmd_new(db_path: str):
    catalog = get_catalog()
    for topic in catalog:
        console.print(f"  [cyan]{topic.id:<12}[/cyan] {topic.title} [dim]{topic.description}[/dim]")
    raw = Prompt.ask("Topics (comma separated)", default=",".join(DEFAULT_TOPICS))
    selected = [t.strip() for t in raw.split(",") if t.strip()]
    weeks = IntPrompt.ask(f"Weeks ({MIN_WEEKS}-{MAX_WEEKS})", default=6)
    hours = IntPrompt.ask(f"Hours per week ({MIN_HOURS}-{MAX_HOURS})", default=8)
    pace = Prompt.ask("Pace", choices=[p.value for p in Pace], default=Pace.BALANCED.value)
    try:
        plan = create_plan(db_path, PlanRequest(tuple(selected), weeks, hours, Pace(pace)))
    except PlanRequestError as e:
        console.print(f"[red]{e}[/red]")
        return
    console.print(f"[green]{plan.title} generated.[/green] Review diagnostics before starting each session.")


def cmd_plan(db_path: str):
    plan = _require_plan(db_path)
    if not plan:
        return
    console.print(Panel(
        f"[bold]{plan.title}[/bold]\n{plan.weeks} weeks · {plan.hours_per_week} hrs/week · "
        f"{plan.pace.value} pace · {plan_completion(plan)}% complete"
        + (f"\n\n[dim]{plan.personal_note}[/dim]" if plan.personal_note else ""),
        border_style="blue",
    ))
    for week in plan.weeks_data:
        table = Table(title=week.theme, caption=week.summary)
        table.add_column("Topic", style="cyan")
        table.add_column("Focus")
        table.add_column("Duration", justify="right")
        table.add_column("Quiz", justify="right")
        table.add_column("Status")
        for s in week.sessions:
            done = s.id in plan.completed_session_ids
            table.add_row(
                s.topic_title, s.focus.title, format_minutes(s.duration_minutes), str(len(s.quiz)),
                "[green]Done[/green]" if done else "",
            )
        console.print(table)


def cmd_lesson(db_path: str):
    plan = _require_plan(db_path)
    if not plan:
        return
    session = pick_session(plan)
    if not session:
        return
    guide = session.focus.study_guide
    console.print(Panel(
        f"{session.summary}\n\n[italic]{PACE_NARRATIVE[plan.pace]}[/italic]"
        + (f"\n\n{guide.overview}" if guide.overview else ""),
        title=f"{session.topic_title}: {session.focus.title}", border_style="cyan",
    ))
    if guide.objectives:
        console.print("[bold]Objectives[/bold]")
        for objective in guide.objectives:
            console.print(f"  • {objective}")
    for step in build_lesson_timeline(session):
        console.print(f"\n[bold]{step.title}[/bold] [dim]{format_minutes(step.minutes)} · {step.focus}[/dim]")
        if step.description:
            console.print(f"  {step.description}")
        for action in step.actions:
            console.print(f"  - {action}")
    if session.focus.resources:
        console.print("\n[bold]Resources[/bold]")
        for r in session.focus.resources:
            console.print(f"  {r.title}: [link={r.url}]{r.url}[/link]")

    tests = list_tests(db_path)
    for label, mode in (("Diagnostic", QuizMode.DIAGNOSTIC), ("Assessment", QuizMode.ASSESSMENT)):
        record = latest_results(tests, mode).get(session.id)
        if record:
            status = "[green]passed[/green]" if record.passed else "[red]not passed[/red]"
            console.print(f"\n{label}: {record.score}% {status} [dim]{record.timestamp}[/dim]")
    for w in session_weaknesses(tests).get(session.id, []):
        console.print(f"  [red]Review:[/red] {w.question}\n    [dim]{w.rationale} {w.doc_link}[/dim]")


def cmd_quiz(db_path: str, mode: QuizMode):
    plan = _require_plan(db_path)
    if not plan:
        return
    session = pick_session(plan)
    if not session:
        return
    responses = run_quiz_session(list(session.quiz))
    if not responses:
        return
    outcome = submit_quiz(db_path, plan, session.id, mode, responses)
    result = outcome.result
    console.print(f"[bold]Score: {result.correct}/{result.total} ({result.score}%)[/bold]")
    for w in result.weaknesses:
        console.print(f"  [red]Missed:[/red] {w.question}\n    [dim]{w.rationale} {w.doc_link}[/dim]")
    console.print(f"[cyan]{outcome.message}[/cyan]")
    if outcome.rank_update and outcome.rank_update.leveled_up:
        console.print(f"[bold magenta]New belt: {format_belt(outcome.rank_update.state)}![/bold magenta]")


def cmd_complete(db_path: str):
    plan = _require_plan(db_path)
    if not plan:
        return
    session = pick_session(plan)
    if not session:
        return
    plan = toggle_session_complete(db_path, plan, session.id)
    state = "complete" if session.id in plan.completed_session_ids else "not complete"
    console.print(f"[green]Marked {session.topic_title}: {session.focus.title} {state}.[/green]")


def cmd_rank(db_path: str):
    state, config = get_rank(db_path)
    progress = compute_progress(state, config)
    color = get_progress_color(progress)
    label = get_progress_label(progress)
    console.print(Panel(
        f"[bold]{format_belt(state)} Belt[/bold]  Stripes: {state.stripes}/{config.stripes_per_belt}  "
        f"Points: {state.points}/{config.points_per_stripe}",
        title="Rank", border_style="blue",
    ))
    bar_filled = int(progress / 5)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(f"\n  Overall progress: [bold]{progress}%[/bold] {bar} [{color}]{label}[/{color}]")
    plan = get_current_plan(db_path)
    if plan:
        console.print(f"  Plan sessions complete: [bold]{plan_completion(plan)}%[/bold]")
    weak = recent_weaknesses(list_tests(db_path))
    if weak:
        console.print("\n[bold]Recent weaknesses:[/bold]")
        for question in weak:
            console.print(f"  [red]•[/red] {question}")


def cmd_settings(db_path: str):
    plan = get_current_plan(db_path)
    if plan:
        pace = Prompt.ask("Pace", choices=[p.value for p in Pace], default=plan.pace.value)
        note = Prompt.ask("Personal note", default=plan.personal_note)
        auto = Confirm.ask("Mark sessions complete when an assessment passes?", default=plan.auto_complete_on_pass)
        update_plan_settings(db_path, plan, pace=pace, personal_note=note, auto_complete_on_pass=auto)
    _, config = get_rank(db_path)
    if Confirm.ask("Edit rank rules?", default=False):
        try:
            config = RankConfig(
                points_per_stripe=IntPrompt.ask("Points per stripe", default=config.points_per_stripe),
                stripes_per_belt=IntPrompt.ask("Stripes per belt", default=config.stripes_per_belt),
                pass_points=IntPrompt.ask("Points for a pass", default=config.pass_points),
                fail_points=IntPrompt.ask("Points for a review", default=config.fail_points),
                pass_score=IntPrompt.ask("Pass score", default=config.pass_score),
            )
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            return
        update_rank_config(db_path, config)
    console.print("[green]Settings saved.[/green]")


def cmd_export(db_path: str):
    plan = _require_plan(db_path)
    if not plan:
        return
    directory = Prompt.ask("Directory", default=get_setting(db_path, "export_dir", str(Path.cwd())))
    path = export_plan(plan, directory)
    set_setting(db_path, "export_dir", directory)
    console.print(f"[green]Exported to {path}[/green]")


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    result = import_plan(db_path, file_path)
    if not result.ok:
        console.print("[red]Unable to import plan. The file may be malformed.[/red]")
        console.print(f"[dim]{result.error.message}[/dim]")
        return
    console.print(f"[green]Imported plan {result.plan.title}[/green]")


def cmd_ask(db_path: str):
    question = Prompt.ask("Question")
    plan = get_current_plan(db_path)
    summary = summarize_plan(plan) if plan else ""
    console.print(Panel(ask_assistant(question, summary, recent_weaknesses(list_tests(db_path))), border_style="green"))


COMMANDS = {
    "new": cmd_new,
    "plan": cmd_plan,
    "lesson": cmd_lesson,
    "diagnostic": lambda db_path: cmd_quiz(db_path, QuizMode.DIAGNOSTIC),
    "assessment": lambda db_path: cmd_quiz(db_path, QuizMode.ASSESSMENT),
    "complete": cmd_complete,
    "rank": cmd_rank,
    "settings": cmd_settings,
    "export": cmd_export,
    "import": cmd_import,
    "ask": cmd_ask,
}


def main():
    logging.basicConfig(
        level=os.environ.get("EXPERT_MAKER_LOG_LEVEL", "WARNING").upper(),
        format="[%(levelname)s] %(message)s",
    )
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="plan").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]Keep training![/dim]")
            break
        command = COMMANDS.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            command(db_path)
        except SessionExitRequested:
            console.print("[dim]Back to the menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            log.debug("Command %s failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
