"""curses front end driving the typing session engine."""

import curses
import logging
from enum import Enum
from typing import Callable, Optional

from core.metrics import calculate_wpm, summarize
from core.models import ResultSummary
from core.typing_session import SessionModes, SessionState, TypingSession, WordState
from ui.history_view import format_summary

log = logging.getLogger("termtype.ui")

BACKSPACE_KEYS = (curses.KEY_BACKSPACE, "\x7f", "\x08")
DELETE_WORD = "\x17"  # Ctrl-W
ESCAPE = "\x1b"
IGNORED_CHARS = ("\n", "\r", "\t")
FOOTER = "Esc = abandon test | Ctrl-W = delete word | Ctrl-C = quit"


class Action(str, Enum):
    """Choices offered on the results screen."""

    QUIT = "q"
    RESTART = "r"
    NEW_TEST = "n"
    PRACTICE_MISSED = "p"
    PRACTICE_SLOW = "s"


class TerminalUI:
    """Renders a session and feeds keyboard input into it."""

    COLOR_OK = 1
    COLOR_ERR = 2
    COLOR_DIM = 3
    COLOR_INFO = 4

    def __init__(self, stdscr):
        self.stdscr = stdscr
        self.init_colors()

    def init_colors(self) -> None:
        if not curses.has_colors():
            return
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(self.COLOR_OK, curses.COLOR_GREEN, -1)
        curses.init_pair(self.COLOR_ERR, curses.COLOR_RED, -1)
        curses.init_pair(self.COLOR_DIM, curses.COLOR_CYAN, -1)
        curses.init_pair(self.COLOR_INFO, curses.COLOR_YELLOW, -1)

    def _put(self, y: int, x: int, text: str, attr: int = 0) -> None:
        maxy, maxx = self.stdscr.getmaxyx()
        if y >= maxy or x >= maxx - 1:
            return
        try:
            self.stdscr.addstr(y, x, text[: maxx - 1 - x], attr)
        except curses.error:
            pass

    def draw_session(self, session: TypingSession, notice: str = "") -> None:
        """Draw the header and the wrapped target words."""
        self.stdscr.erase()
        maxy, maxx = self.stdscr.getmaxyx()

        wpm = calculate_wpm(session.correct_count, session.elapsed_seconds)
        current = min(session.word_index + 1, len(session.words))
        header = f"Word {current}/{len(session.words)}  |  WPM: {wpm:.0f}"
        if session.modes.sudden_death:
            header += "  |  sudden death"
        self._put(0, 0, header, curses.color_pair(self.COLOR_INFO))
        if notice:
            self._put(1, 0, notice, curses.color_pair(self.COLOR_ERR) | curses.A_BOLD)

        y, x = 3, 0
        for index, word in enumerate(session.words):
            if x and x + len(word) >= maxx - 1:
                y, x = y + 1, 0
            self._draw_word(session, index, word, y, x)
            x += len(word) + 1

        self._put(maxy - 1, 0, FOOTER, curses.A_DIM)
        self.stdscr.refresh()

    def _draw_word(self, session: TypingSession, index: int, word: str, y: int, x: int) -> None:
        state = session.word_states[index]
        ok = curses.color_pair(self.COLOR_OK)
        err = curses.color_pair(self.COLOR_ERR)
        dim = curses.color_pair(self.COLOR_DIM)

        if index != session.word_index:
            if state == WordState.CORRECT:
                self._put(y, x, word, ok)
            elif state == WordState.INCORRECT and index < session.word_index:
                self._put(y, x, word, err)
            else:
                self._put(y, x, word, dim)
            return

        typed = session.typed_text(index)
        self._put(y, x, typed, err if state == WordState.INCORRECT else ok)
        rest = word[len(typed):]
        if rest:
            self._put(y, x + len(typed), rest[0], curses.A_REVERSE | curses.A_BOLD)
            self._put(y, x + len(typed) + 1, rest[1:], dim | curses.A_UNDERLINE)

    def run_session(self, session: TypingSession) -> TypingSession:
        """Feed keys into the session until it completes or is abandoned.

        A sudden-death abort restarts the same words. Returns the session
        that finished, which may be a restarted one.
        """
        notice = ""
        while True:
            self.draw_session(session, notice)
            key = self.stdscr.get_wch()

            if key == ESCAPE:
                session.abort()
                return session
            if key in BACKSPACE_KEYS:
                session.apply_backtrack()
                continue
            if key == DELETE_WORD:
                session.apply_word_backtrack()
                continue
            if not isinstance(key, str) or key in IGNORED_CHARS:
                continue
            # Spaces separate words; the engine advances on its own
            if key == " " and session.char_index == 0:
                continue

            notice = ""
            state = session.apply_keystroke(key)
            if state == SessionState.ABORTED:
                log.info("Sudden death triggered, restarting test")
                notice = "Sudden death! Test restarted."
                session = session.restarted()
            elif state == SessionState.COMPLETED:
                return session

    def show_lines(self, title: str, lines: list[str]) -> Action:
        """Show a results screen and wait for one of the menu keys."""
        self.stdscr.erase()
        self._put(0, 0, title, curses.A_BOLD)
        for offset, line in enumerate(lines, start=2):
            self._put(offset, 0, line)
        maxy, _ = self.stdscr.getmaxyx()
        self._put(
            maxy - 1,
            0,
            "(q)uit  (r)estart  (n)ew test  (p)ractice missed  (s)low words",
            curses.A_DIM,
        )
        self.stdscr.refresh()

        choices = {a.value: a for a in Action}
        while True:
            key = self.stdscr.get_wch()
            if key == ESCAPE:
                return Action.QUIT
            if isinstance(key, str) and key in choices:
                return choices[key]


def run_interactive(
    stdscr,
    make_words: Callable[[], list[str]],
    modes: SessionModes,
    on_complete: Callable[[ResultSummary], Optional[str]],
) -> None:
    """Run tests until the user quits.

    Args:
        stdscr: curses screen from curses.wrapper
        make_words: Produces the words for a new test
        modes: Session modes for every test
        on_complete: Called with each summary; returns a warning to display
            (e.g. when saving failed) or None
    """
    curses.curs_set(0)
    ui = TerminalUI(stdscr)
    words = make_words()

    while True:
        session = ui.run_session(TypingSession(words, modes))
        summary = None
        if session.state == SessionState.COMPLETED:
            summary = summarize(session)
            warning = on_complete(summary)
            action = ui.show_lines("Results", format_summary(summary, warning))
        else:
            action = ui.show_lines("Test abandoned", ["Nothing was saved."])

        if action == Action.QUIT:
            return
        if action == Action.NEW_TEST:
            words = make_words()
        elif action == Action.PRACTICE_MISSED and summary and summary.missed_words:
            words = list(summary.missed_words)
        elif action == Action.PRACTICE_SLOW and summary and summary.slow_words:
            words = list(summary.slow_words)
