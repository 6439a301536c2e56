"""
Smoke Tests for CLI Commands.

These tests run the Typer app in-process against an in-memory database
with a fake AI collaborator. They check that commands work and print the
expected headline output, not every detail of the formatting.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import pytest
from typer.testing import CliRunner

import studybuddy.cli.main as cli_main
from studybuddy.core.errors import ConfigurationError
from studybuddy.generation.quiz_generator import GeminiQuizGenerator
from studybuddy.notes import ExternalIdentity, NoteStore, require_user
from studybuddy.study.flashcards import FlashcardDeck

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def ai(make_client):
    return make_client()


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, session_factory, ai):
    """Point the CLI at the in-memory database and the fake AI client."""
    monkeypatch.setattr(cli_main, "SessionLocal", session_factory)
    monkeypatch.setattr(cli_main, "init_db", lambda: None)
    monkeypatch.setattr(cli_main, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(cli_main.CLIContext, "completion_client", lambda self: ai)
    monkeypatch.setattr(
        cli_main.CLIContext, "quiz_generator", lambda self: GeminiQuizGenerator(client=ai)
    )


@pytest.fixture
def seeded(session_factory, sample_summary):
    """A note for user 'alice' with one summarization; returns (note_id, summarization_id)."""
    session = session_factory()
    try:
        user = require_user(session, ExternalIdentity(id="alice", name="alice"))
        store = NoteStore(session)
        note = store.create_note(user.id, "Cell Biology")
        summarization = store.create_summarization(note.id, "Lecture notes.", sample_summary)
        return note.id, summarization.id
    finally:
        session.close()


def invoke(*args, input=None):
    return runner.invoke(cli_main.app, ["--user", "alice", *args], input=input)


# ============================================================================
# Help & version
# ============================================================================


class TestCLIHelp:
    def test_main_help(self):
        result = runner.invoke(cli_main.app, ["--help"])
        assert result.exit_code == 0
        for command in ("notes", "summarize", "flashcards", "mindmap", "quiz", "serve"):
            assert command in result.stdout

    def test_version(self):
        result = runner.invoke(cli_main.app, ["version"])
        assert result.exit_code == 0
        assert "studybuddy" in result.stdout


# ============================================================================
# Notes
# ============================================================================


class TestNotesCommands:
    def test_create_and_list(self):
        created = invoke("notes", "create", "Biology")
        assert created.exit_code == 0, created.stdout
        assert "Created note" in created.stdout

        listed = invoke("notes", "list")
        assert "Biology" in listed.stdout

    def test_list_empty(self):
        result = invoke("notes", "list")
        assert result.exit_code == 0
        assert "No notes yet" in result.stdout

    def test_blank_title_fails(self):
        result = invoke("notes", "create", "   ")
        assert result.exit_code == 1
        assert "Title required" in result.stdout

    def test_show_rename_delete(self, seeded):
        note_id, _ = seeded
        shown = invoke("notes", "show", note_id)
        assert "Cell Biology" in shown.stdout

        renamed = invoke("notes", "rename", note_id, "Cells")
        assert "Renamed note" in renamed.stdout

        deleted = invoke("notes", "delete", note_id, "--yes")
        assert deleted.exit_code == 0
        assert "Note deleted" in deleted.stdout

        missing = invoke("notes", "show", note_id)
        assert missing.exit_code == 1
        assert "Note not found" in missing.stdout

    def test_delete_can_be_cancelled(self, seeded):
        note_id, _ = seeded
        result = invoke("notes", "delete", note_id, input="n\n")
        assert "Cancelled" in result.stdout
        assert invoke("notes", "show", note_id).exit_code == 0

    def test_other_user_cannot_see_note(self, seeded):
        note_id, _ = seeded
        result = runner.invoke(cli_main.app, ["--user", "mallory", "notes", "show", note_id])
        assert result.exit_code == 1


# ============================================================================
# Summaries & study aids
# ============================================================================


class TestStudyCommands:
    def test_summarize_and_save(self, seeded, ai):
        note_id, _ = seeded
        ai.responses.append("- Cells are the unit of life.")
        result = invoke("summarize", "Cells are the basic unit of life.", "--note", note_id)
        assert result.exit_code == 0, result.stdout
        assert "Cells are the unit of life." in result.stdout
        assert "Saved summarization" in result.stdout

    def test_summarize_blank(self):
        result = invoke("summarize", "  ")
        assert result.exit_code == 1
        assert "Please enter some text to summarize" in result.stdout

    def test_flashcards_navigation(self, seeded):
        _, summarization_id = seeded
        result = invoke("flashcards", summarization_id, input="n\nq\n")
        assert result.exit_code == 0, result.stdout
        assert "Card 1 of 3" in result.stdout
        assert "Card 2 of 3" in result.stdout

    def test_flashcards_bad_speed(self, seeded):
        _, summarization_id = seeded
        result = invoke("flashcards", summarization_id, "--autoplay", "warp")
        assert result.exit_code == 1

    def test_mindmap(self, seeded):
        _, summarization_id = seeded
        result = invoke("mindmap", summarization_id, "--positions")
        assert result.exit_code == 0, result.stdout
        assert "Cell Biology" in result.stdout
        assert "It produces ATP." in result.stdout
        assert "point-2" in result.stdout

    def test_mindmap_select_shows_full_text(self, seeded):
        _, summarization_id = seeded
        result = invoke("mindmap", summarization_id, "--select", "point-1")
        assert result.exit_code == 0, result.stdout
        assert "point-1" in result.stdout
        assert "It produces ATP." in result.stdout

    def test_mindmap_select_unknown_node(self, seeded):
        _, summarization_id = seeded
        result = invoke("mindmap", summarization_id, "--select", "point-99")
        assert result.exit_code == 1
        assert "Mind map node not found: point-99" in result.stdout


class TestFlashcardAutoplay:
    def test_autoplay_is_driven_by_the_ticker(self, monkeypatch):
        deck = FlashcardDeck(["One.", "Two.", "Three."], interval_ms=1000)
        shown = []

        def show(d):
            shown.append(d.current_index)
            if len(shown) == 2:
                d.toggle_autoplay()

        monkeypatch.setattr(cli_main, "_show_card", show)
        deck.toggle_autoplay()
        cli_main._run_autoplay(deck, tick_seconds=0.01)

        assert shown == [1, 2]
        assert not deck.autoplay_enabled
        assert deck._listeners == []

    def test_autoplay_stops_when_deck_closes(self, monkeypatch):
        deck = FlashcardDeck(["One.", "Two."], interval_ms=1000)
        monkeypatch.setattr(cli_main, "_show_card", lambda d: d.close())
        deck.toggle_autoplay()
        cli_main._run_autoplay(deck, tick_seconds=0.01)
        assert deck.closed

    def test_quiz_round_trip(self, seeded, ai, quiz_reply):
        _, summarization_id = seeded
        ai.responses.append(quiz_reply(3))
        # Correct answer is always option 1 in the fake reply
        result = invoke("quiz", summarization_id, "-n", "3", input="1\n1\n2\nq\n")
        assert result.exit_code == 0, result.stdout
        assert "2/3" in result.stdout
        assert "67%" in result.stdout
        assert "Grade:" in result.stdout

    def test_quiz_generation_error(self, seeded, ai):
        _, summarization_id = seeded
        ai.responses.append(ConfigurationError("Gemini API key missing."))
        result = invoke("quiz", summarization_id)
        assert result.exit_code == 1
        assert "Gemini API key missing." in result.stdout

    def test_quiz_invalid_count(self, seeded):
        _, summarization_id = seeded
        result = invoke("quiz", summarization_id, "-n", "2")
        assert result.exit_code == 1
        assert "Invalid quiz configuration" in result.stdout
