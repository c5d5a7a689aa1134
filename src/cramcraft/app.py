"""Interactive CLI application."""
import argparse
import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from cramcraft.client import RequestClient
from cramcraft.config import Settings, get_settings
from cramcraft.db import has_snapshot, init_db, load_snapshot, save_snapshot
from cramcraft.errors import AppError, CramCraftError, friendly_message, to_app_error
from cramcraft.extraction import check_file_count, content_stats, extract_file
from cramcraft.generation import GenerationOrchestrator
from cramcraft.models import ExtractedText, Quiz, QuizResults, RevisionPack, UserAnswers, to_plain
from cramcraft.scoring import calculate_quiz_results

console = Console()
logger = logging.getLogger(__name__)

# rich has no plain "orange"
RICH_COLORS = {"orange": "dark_orange"}

# Failures after which extracted work is snapshotted for "resume"
SNAPSHOT_ON = ("network-error", "api-timeout")


@dataclass
class Session:
    settings: Settings
    texts: list[ExtractedText] = field(default_factory=list)
    pack: RevisionPack | None = None
    quiz: Quiz | None = None
    results: QuizResults | None = None
    orchestrator: GenerationOrchestrator | None = None


def show_welcome():
    console.print(Panel(
        "[bold]CramCraft[/bold]\n[dim]Revision packs and readiness quizzes from your notes[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("load", "Extract text from study files"),
        ("resume", "Restore files from the last session"),
        ("pack", "Generate a revision pack"),
        ("quiz", "Generate and take a readiness quiz"),
        ("export", "Save the revision pack and quiz results as JSON"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def get_orchestrator(session: Session) -> GenerationOrchestrator:
    if session.orchestrator is None:
        client = RequestClient(session.settings)
        session.orchestrator = GenerationOrchestrator(client, session.settings)
    return session.orchestrator


def snapshot_files(texts: list[ExtractedText]) -> list[dict]:
    return [{"id": t.file_id, "name": t.file_name, "status": "completed"} for t in texts]


def handle_generation_error(session: Session, error: CramCraftError) -> AppError:
    app_error = to_app_error(error)
    if app_error.type in SNAPSHOT_ON and session.texts:
        save_snapshot(session.settings.db_path, snapshot_files(session.texts), session.texts)
    console.print(f"[red]{app_error.message}[/red]")
    logger.debug("Generation failed (%s, retryable=%s): %s", app_error.type, app_error.retryable, error.message)
    return app_error


def show_revision_pack(pack: RevisionPack) -> None:
    console.print(f"\n[bold]Revision Pack[/bold] [dim]~{pack.total_reading_time} min reading[/dim]\n")
    for doc in pack.documents:
        body = "[bold]Key concepts[/bold]\n" + "\n".join(f"  • {c}" for c in doc.key_concepts)
        if doc.definitions:
            body += "\n\n[bold]Definitions[/bold]\n" + "\n".join(
                f"  [cyan]{d.term}[/cyan]: {d.definition}" for d in doc.definitions
            )
        body += f"\n\n[bold]Summary[/bold]\n{doc.summary}"
        if doc.memory_aids:
            body += "\n\n[bold]Memory aids[/bold]\n" + "\n".join(f"  • {m}" for m in doc.memory_aids)
        console.print(Panel(body, title=doc.title, subtitle=doc.subject or "", border_style="cyan"))


def run_quiz_session(quiz: Quiz) -> UserAnswers:
    answers = {}
    start = datetime.now()
    console.print(f"\n[bold]Quiz[/bold]: {len(quiz.questions)} questions\n")
    for i, q in enumerate(quiz.questions, 1):
        console.print(f"[bold]Q{i}.[/bold] {q.question} [dim]({q.difficulty})[/dim]\n")
        for option in q.options:
            console.print(f"  [cyan]{option}[/cyan]")
        answer = Prompt.ask("\nYour answer", choices=["a", "b", "c", "d"])
        answers[q.id] = answer.upper()
        console.print()
    end = datetime.now()
    return UserAnswers(
        quiz_id=quiz.id,
        answers=answers,
        start_time=start,
        end_time=end,
        elapsed_seconds=(end - start).total_seconds(),
    )


def show_results(results: QuizResults) -> None:
    color = RICH_COLORS.get(results.readiness_color, results.readiness_color)
    console.print(Panel(
        f"Score: [bold]{results.score}/{results.total_questions}[/bold] ({results.percentage:.0f}%)\n"
        f"[{color}]{results.readiness_message}[/{color}]",
        title="Results", border_style=color,
    ))
    table = Table(title="Question Breakdown")
    table.add_column("#", justify="right")
    table.add_column("Your answer")
    table.add_column("Correct")
    table.add_column("Topic")
    for i, item in enumerate(results.breakdown, 1):
        mark = "[green]✓[/green]" if item.is_correct else f"[red]✗ {item.question.correct_answer}[/red]"
        table.add_row(str(i), item.user_answer, mark, item.question.topic or "")
    console.print(table)
    for item in results.breakdown:
        if not item.is_correct:
            console.print(f"[dim]{item.question.question}[/dim]\n  {item.question.explanation}")
    if results.weak_areas:
        console.print("\n[bold]Weak areas:[/bold] " + ", ".join(results.weak_areas))


def cmd_load(session: Session):
    raw = Prompt.ask("File paths (comma separated)")
    paths = [part.strip() for part in raw.split(",") if part.strip()]
    try:
        check_file_count(len(session.texts), len(paths))
    except CramCraftError as e:
        console.print(f"[red]{friendly_message(e)}[/red]")
        return
    texts = []
    for file_path in paths:
        if not Path(file_path).exists():
            console.print(f"[red]File not found: {file_path}[/red]")
            continue
        try:
            texts.append(extract_file(file_path))
        except CramCraftError as e:
            console.print(f"[red]{friendly_message(e)}[/red]")
    if not texts:
        return
    session.texts.extend(texts)
    save_snapshot(session.settings.db_path, snapshot_files(session.texts), session.texts)
    stats = content_stats(session.texts)
    console.print(f"[green]Loaded {stats['total']} files ({stats['total_words']} words).[/green]")
    if stats["empty"]:
        console.print(f"[yellow]{stats['empty']} file(s) contained no readable text.[/yellow]")


def cmd_resume(session: Session):
    snapshot = load_snapshot(session.settings.db_path)
    if snapshot is None:
        console.print("[yellow]No saved session from the last 24 hours.[/yellow]")
        return
    session.texts = list(snapshot.extracted_texts)
    console.print(f"[green]Restored {len(session.texts)} files saved at {snapshot.timestamp:%H:%M}.[/green]")


def cmd_pack(session: Session):
    try:
        orchestrator = get_orchestrator(session)
        with console.status("Generating revision pack..."):
            session.pack = asyncio.run(orchestrator.aggregate_revision_pack(session.texts))
    except CramCraftError as e:
        handle_generation_error(session, e)
        return
    show_revision_pack(session.pack)


def cmd_quiz(session: Session):
    try:
        orchestrator = get_orchestrator(session)
        with console.status("Generating quiz..."):
            session.quiz = asyncio.run(orchestrator.generate_quiz(session.texts))
    except CramCraftError as e:
        handle_generation_error(session, e)
        return
    user_answers = run_quiz_session(session.quiz)
    session.results = calculate_quiz_results(session.quiz, user_answers)
    show_results(session.results)


def export_session(session: Session) -> dict:
    """JSON-ready view of the current revision pack and last quiz attempt."""
    data = {}
    if session.pack is not None:
        data["revisionPack"] = to_plain(session.pack)
    if session.results is not None:
        data["quizResults"] = to_plain(session.results)
    elif session.quiz is not None:
        data["quiz"] = to_plain(session.quiz)
    return data


def cmd_export(session: Session):
    data = export_session(session)
    if not data:
        console.print("[yellow]Nothing to export yet. Generate a pack or take a quiz first.[/yellow]")
        return
    out_path = Path(Prompt.ask("Output file", default="cramcraft-export.json"))
    out_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    console.print(f"[green]Exported to {out_path}[/green]")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(prog="cramcraft")
    parser.add_argument("-v", "--verbose", action="store_true", help="show debug logging")
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    session = Session(settings=get_settings())
    init_db(session.settings.db_path)
    show_welcome()
    if has_snapshot(session.settings.db_path):
        console.print("[dim]A saved session is available. Type 'resume' to restore it.[/dim]")

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="load").strip().lower()
        try:
            if choice == "load":
                cmd_load(session)
            elif choice == "resume":
                cmd_resume(session)
            elif choice == "pack":
                cmd_pack(session)
            elif choice == "quiz":
                cmd_quiz(session)
            elif choice == "export":
                cmd_export(session)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck on your exam![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Unhandled error in %s", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
