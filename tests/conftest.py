"""Shared test fixtures for termtype tests."""

import pytest

from core.history import HistoryStore
from core.typing_session import SessionModes, TypingSession


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_session(clock):
    """Factory for sessions driven by the fake clock."""

    def factory(words, **modes):
        return TypingSession(words, SessionModes(**modes), clock=clock)

    return factory


@pytest.fixture
def type_text(clock):
    """Type a string into a session, one second per keystroke."""

    def typer(session, text, step=1.0):
        for ch in text:
            clock.advance(step)
            session.apply_keystroke(ch)
        return session

    return typer


@pytest.fixture
def history_path(tmp_path):
    """History file path inside a temporary directory."""
    return tmp_path / "history" / "history.csv"


@pytest.fixture
def store(history_path):
    return HistoryStore(history_path)
