"""Tests for the curses front end, driven through a scripted screen."""

import curses

import pytest

from core.typing_session import SessionModes, SessionState, TypingSession
from ui.terminal import DELETE_WORD, ESCAPE, Action, TerminalUI, run_interactive


class OutOfKeys(Exception):
    pass


class FakeScreen:
    """Minimal stand-in for a curses window fed from a list of keys."""

    def __init__(self, keys, size=(24, 80)):
        self.keys = list(keys)
        self.size = size
        self.text = []

    def get_wch(self):
        if not self.keys:
            raise OutOfKeys()
        return self.keys.pop(0)

    def getmaxyx(self):
        return self.size

    def addstr(self, y, x, text, attr=0):
        self.text.append(text)

    def erase(self):
        pass

    def refresh(self):
        pass

    @property
    def output(self) -> str:
        return "\n".join(self.text)


@pytest.fixture(autouse=True)
def no_terminal(monkeypatch):
    """Allow drawing without an initialized terminal."""
    monkeypatch.setattr(curses, "has_colors", lambda: False)
    monkeypatch.setattr(curses, "color_pair", lambda n: 0)
    monkeypatch.setattr(curses, "curs_set", lambda v: None)


@pytest.fixture
def completed():
    """Collects every summary passed to on_complete."""
    summaries = []

    def on_complete(summary):
        summaries.append(summary)
        return None

    on_complete.summaries = summaries
    return on_complete


class TestRunSession:
    """Tests for TerminalUI.run_session."""

    def test_completes(self):
        screen = FakeScreen(list("ab cd"))
        session = TerminalUI(screen).run_session(TypingSession(["ab", "cd"]))

        assert session.state == SessionState.COMPLETED
        assert session.correct_count == 4
        assert session.incorrect_count == 0

    def test_escape_abandons(self):
        screen = FakeScreen(["a", ESCAPE])
        session = TerminalUI(screen).run_session(TypingSession(["ab"]))
        assert session.state == SessionState.ABORTED

    def test_backspace_erases(self):
        screen = FakeScreen(["a", "\x7f", curses.KEY_BACKSPACE, "a", "b"])
        session = TerminalUI(screen).run_session(TypingSession(["ab"]))

        assert session.state == SessionState.COMPLETED
        assert session.correct_count == 2

    def test_ctrl_w_deletes_word(self):
        screen = FakeScreen(["a", "b", DELETE_WORD, "a", "b", "c"])
        session = TerminalUI(screen).run_session(TypingSession(["abc"]))

        assert session.state == SessionState.COMPLETED
        assert session.correct_count == 3

    def test_special_keys_ignored(self):
        screen = FakeScreen([curses.KEY_RESIZE, "\n", "\t", "a", "b"])
        session = TerminalUI(screen).run_session(TypingSession(["ab"]))
        assert session.total_keystrokes == 2

    def test_sudden_death_restarts(self):
        screen = FakeScreen(["x", "a", "b"])
        modes = SessionModes(sudden_death=True)
        session = TerminalUI(screen).run_session(TypingSession(["ab"], modes))

        assert session.state == SessionState.COMPLETED
        assert session.incorrect_count == 0
        assert "Sudden death! Test restarted." in screen.output

    def test_draws_words_and_header(self):
        screen = FakeScreen(["a", ESCAPE])
        TerminalUI(screen).run_session(TypingSession(["ab", "cd"]))
        assert "Word 1/2" in screen.output
        assert "cd" in screen.output


class TestShowLines:
    def test_unknown_keys_skipped(self):
        screen = FakeScreen(["x", 260, "n"])
        assert TerminalUI(screen).show_lines("Results", ["line"]) == Action.NEW_TEST

    def test_escape_quits(self):
        screen = FakeScreen([ESCAPE])
        assert TerminalUI(screen).show_lines("Results", []) == Action.QUIT


class TestRunInteractive:
    """Tests for the test/results loop."""

    def test_result_reported_then_quit(self, completed):
        screen = FakeScreen(list("abcd") + ["q"])
        run_interactive(screen, lambda: ["ab", "cd"], SessionModes(), completed)

        assert len(completed.summaries) == 1
        summary = completed.summaries[0]
        assert summary.words == 2
        assert summary.accuracy == 100.0
        assert "Adjusted WPM" in screen.output

    def test_abandoned_test_not_reported(self, completed):
        screen = FakeScreen(["a", ESCAPE, "q"])
        run_interactive(screen, lambda: ["ab"], SessionModes(), completed)

        assert completed.summaries == []
        assert "Test abandoned" in screen.output

    def test_warning_is_shown(self):
        screen = FakeScreen(["a", "b", "q"])
        run_interactive(screen, lambda: ["ab"], SessionModes(), lambda s: "disk full")
        assert "Warning: disk full" in screen.output

    def test_new_test_requests_words(self, completed):
        lists = iter([["ab"], ["cd"]])
        screen = FakeScreen(["a", "b", "n", "c", "d", "q"])
        run_interactive(screen, lambda: next(lists), SessionModes(), completed)
        assert len(completed.summaries) == 2

    def test_restart_reuses_words(self, completed):
        screen = FakeScreen(["a", "b", "r", "a", "b", "q"])
        run_interactive(screen, lambda: ["ab"], SessionModes(), completed)
        assert len(completed.summaries) == 2

    def test_practice_missed_words(self, completed):
        screen = FakeScreen(["a", "b", "x", "c", "d", "p", "c", "d", "q"])
        run_interactive(screen, lambda: ["ab", "cd"], SessionModes(), completed)

        first, second = completed.summaries
        assert first.missed_words == ["cd"]
        assert second.words == 1
        assert second.accuracy == 100.0
