"""
Typer CLI for Study Buddy.

Commands:
    studybuddy notes list                 - List your notes
    studybuddy notes create TITLE         - Create a note
    studybuddy notes show NOTE_ID         - Show a note and its summarizations
    studybuddy notes rename NOTE_ID TITLE - Rename a note
    studybuddy notes delete NOTE_ID       - Delete a note and its summarizations
    studybuddy summarize TEXT             - Summarize text (optionally save to a note)
    studybuddy flashcards SUMMARY_ID      - Study a summarization as flashcards
    studybuddy mindmap SUMMARY_ID         - Show the mind map of a summarization
    studybuddy quiz SUMMARY_ID            - Take an AI-generated quiz
    studybuddy db init                    - Initialize database tables
    studybuddy serve                      - Run the HTTP API

Usage:
    studybuddy --help
    studybuddy --user alice notes create "Biology"
    studybuddy summarize --file lecture.txt --format bullet --note <note id>
    studybuddy quiz <summarization id> --questions 10 --difficulty hard
"""

from __future__ import annotations

import asyncio
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich.tree import Tree

from config import get_settings
from studybuddy import __version__
from studybuddy.core.errors import StudyBuddyError
from studybuddy.db.database import SessionLocal, init_db
from studybuddy.generation.quiz_generator import GeminiQuizGenerator
from studybuddy.generation.summarizer import SummaryOptions, generate_summary
from studybuddy.integrations.gemini_client import GeminiClient
from studybuddy.logging_setup import configure_logging
from studybuddy.notes import ExternalIdentity, NoteStore, require_user
from studybuddy.study.flashcards import AutoplaySpeed, AutoplayTicker, FlashcardDeck
from studybuddy.study.mindmap import DEFAULT_TITLE, MindMapView
from studybuddy.study.quiz_engine import QuizConfig, QuizPhase, QuizSession
from studybuddy.study.segmentation import source_text, study_points

app = typer.Typer(
    help="Study Buddy CLI: notes, AI summaries, flashcards, mind maps and quizzes",
    no_args_is_help=True,
)
console = Console()


# ========================================
# Context Builder (Dependency Injection)
# ========================================


class CLIContext:
    """
    Dependency injection container for CLI commands.

    The database session and the local user are created on first use so
    commands like ``serve`` never touch the database.
    """

    def __init__(self, user_id: str):
        self.settings = get_settings()
        self.user_id = user_id
        self._session = None
        self._user = None

    @property
    def session(self):
        if self._session is None:
            init_db()
            self._session = SessionLocal()
        return self._session

    @property
    def store(self) -> NoteStore:
        return NoteStore(self.session)

    @property
    def user(self):
        """Local user for --user, provisioned on first use."""
        if self._user is None:
            self._user = require_user(
                self.session, ExternalIdentity(id=self.user_id, name=self.user_id)
            )
        return self._user

    def quiz_generator(self) -> GeminiQuizGenerator:
        return GeminiQuizGenerator(GeminiClient(model_name=self.settings.quiz_model))

    def completion_client(self) -> GeminiClient:
        return GeminiClient(model_name=self.settings.summary_model)

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None


@app.callback()
def main_callback(
    ctx: typer.Context,
    user: str = typer.Option(
        "local", "--user", "-u", envvar="STUDYBUDDY_USER", help="Identity to act as"
    ),
):
    """Study Buddy: summarize text and study it."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)
    context = CLIContext(user_id=user)
    ctx.obj = context
    ctx.call_on_close(context.close)


@contextmanager
def _user_errors() -> Generator[None, None, None]:
    """Print Study Buddy errors as one red line and exit non-zero."""
    try:
        yield
    except StudyBuddyError as e:
        rprint(f"[red]✗[/red] {e.message}")
        raise typer.Exit(code=1) from e


# ========================================
# NOTES COMMANDS
# ========================================

notes_app = typer.Typer(help="Create, list, rename and delete notes")
app.add_typer(notes_app, name="notes")


@notes_app.command("list")
def notes_list(ctx: typer.Context) -> None:
    """List your notes, most recently updated first."""
    cli: CLIContext = ctx.obj
    with _user_errors():
        notes = cli.store.list_notes(cli.user.id)

    if not notes:
        rprint("[dim]No notes yet. Create one with 'studybuddy notes create TITLE'.[/dim]")
        return

    table = Table(title="Notes", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Updated", style="green")
    for note in notes:
        table.add_row(note.id, note.title, note.updated_at.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


@notes_app.command("create")
def notes_create(ctx: typer.Context, title: str = typer.Argument(..., help="Note title")) -> None:
    cli: CLIContext = ctx.obj
    with _user_errors():
        note = cli.store.create_note(cli.user.id, title)
    rprint(f"[green]✓[/green] Created note [cyan]{note.title}[/cyan] ({note.id})")


@notes_app.command("show")
def notes_show(ctx: typer.Context, note_id: str = typer.Argument(..., help="Note ID")) -> None:
    """Show a note and its summarizations, newest first."""
    cli: CLIContext = ctx.obj
    with _user_errors():
        note = cli.store.get_note(note_id, cli.user.id)

    rprint(f"\n[bold cyan]{note.title}[/bold cyan] [dim]({note.id})[/dim]")
    if not note.summarizations:
        rprint("[dim]No summarizations yet.[/dim]")
        return

    table = Table(show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Created", style="green")
    table.add_column("Summary")
    for s in note.summarizations:
        preview = s.summary if len(s.summary) <= 80 else s.summary[:80] + "..."
        table.add_row(s.id, s.created_at.strftime("%Y-%m-%d %H:%M"), preview)
    console.print(table)


@notes_app.command("rename")
def notes_rename(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID"),
    title: str = typer.Argument(..., help="New title"),
) -> None:
    cli: CLIContext = ctx.obj
    with _user_errors():
        note = cli.store.update_note(note_id, title, cli.user.id)
    rprint(f"[green]✓[/green] Renamed note to [cyan]{note.title}[/cyan]")


@notes_app.command("delete")
def notes_delete(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a note and all of its summarizations."""
    cli: CLIContext = ctx.obj
    with _user_errors():
        note = cli.store.get_note(note_id, cli.user.id)
        if not yes and not Confirm.ask(
            f"Delete [cyan]{note.title}[/cyan] and {len(note.summarizations)} summarization(s)?",
            default=False,
        ):
            rprint("[dim]Cancelled.[/dim]")
            return
        cli.store.delete_note(note_id, cli.user.id)
    rprint("[green]✓[/green] Note deleted")


# ========================================
# SUMMARIZE COMMAND
# ========================================


@app.command("summarize")
def summarize(
    ctx: typer.Context,
    text: str | None = typer.Argument(None, help="Text to summarize"),
    file: Path | None = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, readable=True, help="Read the text from a file"
    ),
    length: str = typer.Option("medium", "--length", help="short, medium or long"),
    fmt: str = typer.Option("paragraph", "--format", help="paragraph, bullet or numbered"),
    focus: str = typer.Option("keyPoints", "--focus", help="keyPoints, detailed or actionItems"),
    strategy: str = typer.Option("balanced", "--strategy", help="fast, balanced or thorough"),
    priority: str = typer.Option("accuracy", "--priority", help="speed, accuracy or creativity"),
    note_id: str | None = typer.Option(None, "--note", help="Save the summary to this note"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Also write the summary to a file"),
) -> None:
    """
    Summarize text with Gemini.

    Examples:
        studybuddy summarize "Long text ..." --length short
        studybuddy summarize --file lecture.txt --format bullet --note <note id>
    """
    cli: CLIContext = ctx.obj
    if file is not None:
        text = file.read_text(encoding="utf-8")

    with _user_errors():
        try:
            options = SummaryOptions(
                length=length, format=fmt, focus=focus, strategy=strategy, priority=priority
            )
        except ValueError as e:
            rprint(f"[red]✗[/red] Invalid summary options: {e}")
            raise typer.Exit(code=1) from e

        if note_id:
            cli.store.get_note(note_id, cli.user.id)

        with console.status("Summarizing..."):
            summary = asyncio.run(
                generate_summary(text or "", options, client=cli.completion_client())
            )

        console.print(Panel(summary, title="Summary", border_style="cyan"))

        if note_id:
            saved = cli.store.create_summarization(note_id, text or "", summary, cli.user.id)
            rprint(f"[green]✓[/green] Saved summarization {saved.id}")

    if output is not None:
        output.write_text(summary, encoding="utf-8")
        rprint(f"[green]✓[/green] Wrote summary to {output}")


# ========================================
# FLASHCARDS COMMAND
# ========================================

# Console letter -> deck key binding
FLASHCARD_KEYS = {"n": "ArrowRight", "p": "ArrowLeft", "a": "Enter"}


def _show_card(deck: FlashcardDeck) -> None:
    console.print(
        Panel(
            deck.current_card or "",
            title=deck.position_label,
            subtitle=f"{deck.progress:.0%}",
            border_style="cyan",
        )
    )


def _on_autoplay_tick(deck: FlashcardDeck, advanced: bool) -> None:
    if advanced:
        _show_card(deck)


async def _autoplay(ticker: AutoplayTicker) -> None:
    deck = ticker.deck
    ticker.start()
    try:
        while deck.autoplay_enabled and not deck.closed:
            await asyncio.sleep(ticker.tick_seconds)
    finally:
        await ticker.aclose()


def _run_autoplay(deck: FlashcardDeck, tick_seconds: float = 1.0) -> None:
    """Let the ticker advance the deck until autoplay stops or Ctrl+C pauses it."""
    rprint(
        f"[dim]Autoplay every {deck.interval_seconds}s. Press Ctrl+C to pause.[/dim]"
    )
    ticker = AutoplayTicker(deck, tick_seconds=tick_seconds, on_tick=_on_autoplay_tick)
    try:
        asyncio.run(_autoplay(ticker))
    except KeyboardInterrupt:
        deck.toggle_autoplay()
        rprint("\n[yellow]Autoplay paused[/yellow]")
    finally:
        ticker.detach()


@app.command("flashcards")
def flashcards(
    ctx: typer.Context,
    summarization_id: str = typer.Argument(..., help="Summarization ID"),
    shuffle: bool = typer.Option(False, "--shuffle", help="Start in shuffled order"),
    speed: str | None = typer.Option(
        None, "--autoplay", help="Start autoplay at a speed: slow, normal or fast"
    ),
) -> None:
    """
    Study a summarization one point at a time.

    Controls: [n]ext, [p]rev, [s]huffle, [r]eset, [a]utoplay on/off, [q]uit.
    """
    cli: CLIContext = ctx.obj
    with _user_errors():
        summarization = cli.store.get_summarization(summarization_id, cli.user.id)
        deck = FlashcardDeck(
            study_points(summarization),
            interval_ms=cli.settings.flashcard_default_interval_ms,
        )
        if speed is not None:
            try:
                deck.set_autoplay_speed(AutoplaySpeed[speed.upper()].value)
            except KeyError:
                rprint("[red]✗[/red] Autoplay speed must be slow, normal or fast")
                raise typer.Exit(code=1) from None

    if deck.is_empty:
        rprint(f"[yellow]{deck.position_label}[/yellow]")
        return

    if shuffle:
        deck.shuffle()
    _show_card(deck)
    if speed is not None:
        deck.toggle_autoplay()
        _run_autoplay(deck)

    while True:
        choice = Prompt.ask(
            "[cyan]>_[/cyan] [n]ext [p]rev [s]huffle [r]eset [a]utoplay [q]uit",
            default="n",
        ).strip().lower()
        if choice == "q":
            break
        if choice == "s":
            deck.shuffle()
        elif choice == "r":
            deck.reset()
        elif choice in FLASHCARD_KEYS:
            deck.handle_key(FLASHCARD_KEYS[choice])
        else:
            continue

        _show_card(deck)
        if deck.autoplay_enabled:
            _run_autoplay(deck)

    deck.close()


# ========================================
# MIND MAP COMMAND
# ========================================


@app.command("mindmap")
def mindmap(
    ctx: typer.Context,
    summarization_id: str = typer.Argument(..., help="Summarization ID"),
    positions: bool = typer.Option(False, "--positions", help="Also print node coordinates"),
    select: str | None = typer.Option(
        None, "--select", "-s", help="Highlight a node (e.g. point-2) and show its full text"
    ),
) -> None:
    """Show the note title with up to 12 study points around it."""
    cli: CLIContext = ctx.obj
    with _user_errors():
        summarization = cli.store.get_summarization(summarization_id, cli.user.id)
        title = summarization.note.title or DEFAULT_TITLE
        view = MindMapView(study_points(summarization), title)
        if select is not None and not view.is_empty:
            view.select(select)

    if view.is_empty:
        rprint(f"[yellow]{view.empty_message}[/yellow]")
        return

    nodes = view.nodes
    tree = Tree(f"[bold cyan]{title}[/bold cyan]")
    for node in nodes:
        if node.is_center:
            continue
        tree.add(f"[reverse]{node.label}[/reverse]" if node.selected else node.label)
    console.print(tree)

    if view.selected_id is not None:
        console.print(
            Panel(view.full_text(view.selected_id), title=view.selected_id, border_style="cyan")
        )

    if positions:
        table = Table(title=f"Layout (radius {view.radius:.0f})", show_header=True)
        table.add_column("Node", style="cyan")
        table.add_column("X", justify="right")
        table.add_column("Y", justify="right")
        table.add_column("Angle", justify="right", style="dim")
        for node in nodes:
            angle = "-" if node.angle_degrees is None else f"{node.angle_degrees:.0f}°"
            table.add_row(node.id, f"{node.x:.1f}", f"{node.y:.1f}", angle)
        console.print(table)


# ========================================
# QUIZ COMMAND
# ========================================


def _ask_answers(session: QuizSession) -> None:
    for index, question in enumerate(session.questions):
        rprint(f"\n[bold]Q{index + 1}.[/bold] {question.question}")
        for number, choice in enumerate(question.choices, start=1):
            rprint(f"  {number}. {choice}")
        pick = IntPrompt.ask(
            "[cyan]Answer[/cyan]",
            choices=[str(n) for n in range(1, len(question.choices) + 1)],
            show_choices=False,
        )
        session.answer(index, question.choices[pick - 1])


def _show_results(session: QuizSession) -> None:
    results = session.results
    if results is None:
        return

    table = Table(title="Results", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Your answer")
    table.add_column("Correct answer", style="green")
    table.add_column("", justify="center")
    for outcome in results.outcomes:
        table.add_row(
            str(outcome.index + 1),
            outcome.chosen or "-",
            outcome.correct,
            "[green]✓[/green]" if outcome.is_correct else "[red]✗[/red]",
        )
    console.print(table)

    for outcome in results.outcomes:
        if not outcome.is_correct:
            rprint(f"[dim]Q{outcome.index + 1}: {outcome.explanation}[/dim]")

    rprint(
        f"\n[bold]Score:[/bold] {results.score}/{results.total} ({results.percentage}%)"
        f"  [bold]Grade:[/bold] {results.grade}"
        f"  [bold]Time:[/bold] {results.elapsed_seconds}s"
    )


@app.command("quiz")
def quiz(
    ctx: typer.Context,
    summarization_id: str = typer.Argument(..., help="Summarization ID"),
    questions: int | None = typer.Option(None, "--questions", "-n", help="Number of questions (3-15)"),
    difficulty: str | None = typer.Option(None, "--difficulty", "-d", help="easy, medium or hard"),
    question_type: str | None = typer.Option(None, "--type", "-t", help="mcq or true-false"),
) -> None:
    """
    Take a quiz generated from a summarization.

    After the results you can retake the same questions or generate a new set.
    """
    cli: CLIContext = ctx.obj
    with _user_errors():
        summarization = cli.store.get_summarization(summarization_id, cli.user.id)
        session = QuizSession(
            source_text(summarization.summary, summarization.input_text),
            cli.quiz_generator(),
            default_config=QuizConfig(**cli.settings.get_quiz_config()),
        )
        changes = {
            "num_questions": questions,
            "difficulty": difficulty,
            "question_type": question_type,
        }
        overrides = {k: v for k, v in changes.items() if v is not None}

        while True:
            if session.phase != QuizPhase.ACTIVE:
                session.update_config(**overrides)
                with console.status("Generating quiz..."):
                    asyncio.run(session.generate_quiz())
                if session.phase == QuizPhase.ERROR:
                    rprint(f"[red]✗[/red] {session.error}")
                    raise typer.Exit(code=1)

            _ask_answers(session)
            session.submit_quiz()
            _show_results(session)

            choice = Prompt.ask(
                "[cyan]>_[/cyan] [r]etake, [n]ew quiz, [q]uit",
                choices=["r", "n", "q"],
                default="q",
            )
            if choice == "r":
                session.retake_quiz()
            elif choice == "n":
                session.reset_quiz()
            else:
                break

    session.close()


# ========================================
# DATABASE & SERVER COMMANDS
# ========================================

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Create the database tables."""
    init_db()
    rprint("[green]✓[/green] Database initialized")


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind host (default: from config)"),
    port: int | None = typer.Option(None, "--port", help="Bind port (default: from config)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    logger.info(f"Serving Study Buddy API on {host}:{port}")
    uvicorn.run(
        "studybuddy.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("version")
def show_version() -> None:
    """Show version information."""
    rprint(f"[bold]studybuddy[/bold] v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
