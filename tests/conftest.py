"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import json
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from studybuddy.db.models import Base  # noqa: E402

MITOCHONDRIA_SUMMARY = (
    "The mitochondria is the powerhouse of the cell. It produces ATP. "
    "Photosynthesis occurs in chloroplasts."
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FakeCompletionClient:
    """
    Stand-in for the Gemini client.

    Returns queued responses in order; a queued exception is raised instead.
    Every prompt is recorded.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    async def complete(self, prompt):
        self.prompts.append(prompt)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def quiz_payload(count=3, question_type="mcq"):
    """Build a well-formed quiz reply with ``count`` questions."""
    questions = []
    for i in range(count):
        if question_type == "true-false":
            choices = ["True", "False"]
            correct = "True" if i % 2 == 0 else "False"
        else:
            choices = [f"Option {i}-A", f"Option {i}-B", f"Option {i}-C", f"Option {i}-D"]
            correct = choices[0]
        questions.append(
            {
                "id": f"q{i + 1}",
                "question": f"Question number {i + 1}?",
                "choices": choices,
                "correct": correct,
                "explanation": f"Because {correct} is right.",
                "difficulty": "medium",
                "concept": f"Concept {i + 1}",
            }
        )
    return {"questions": questions}


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across threads, with tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_client():
    return FakeCompletionClient()


@pytest.fixture
def sample_summary():
    return MITOCHONDRIA_SUMMARY


@pytest.fixture
def quiz_reply():
    """Factory for quiz replies wrapped in prose, the way the model tends to answer."""

    def _reply(count=3, question_type="mcq"):
        body = json.dumps(quiz_payload(count, question_type), indent=2)
        return f"Here is your quiz:\n```json\n{body}\n```"

    return _reply


@pytest.fixture
def make_client():
    """Factory for fake completion clients with queued responses."""
    return FakeCompletionClient


@pytest.fixture
def make_quiz_payload():
    return quiz_payload
