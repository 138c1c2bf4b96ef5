"""Keystroke state machine for a single typing test.

A session owns a fixed sequence of target words and a cursor
(word index, character index). Every typed character is compared with the
expected character at the cursor; correct characters advance the cursor,
mismatches are recorded and the same position must be typed again.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from core.errors import EmptySourceError

log = logging.getLogger("termtype.session")


class SessionState(str, Enum):
    """Lifecycle of a typing session."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABORTED = "aborted"


class WordState(str, Enum):
    """Per-word typing status."""

    UNTYPED = "untyped"
    IN_PROGRESS = "in_progress"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class SessionModes:
    """Behaviour switches for a session."""

    backtrack_enabled: bool = True
    sudden_death: bool = False
    case_insensitive: bool = False


@dataclass(frozen=True)
class Keystroke:
    """One typed character and where it was applied."""

    char: str
    expected: str
    correct: bool
    word_index: int
    char_index: int
    timestamp: float


class TypingSession:
    """Typing test over a fixed word sequence."""

    def __init__(
        self,
        words: Sequence[str],
        modes: Optional[SessionModes] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize session.

        Args:
            words: Target words, non-empty, none of them empty
            modes: Backtracking, sudden death and case folding switches
            clock: Monotonic time source in seconds

        Raises:
            EmptySourceError: If there are no words
            ValueError: If a word is empty
        """
        if not words:
            raise EmptySourceError()
        if any(not w for w in words):
            raise ValueError("target words must not be empty")

        self._words: tuple[str, ...] = tuple(words)
        self.modes = modes or SessionModes()
        self._clock = clock

        self._state = SessionState.NOT_STARTED
        self._word_index = 0
        self._char_index = 0
        self._highest_word_index = 0
        self._keystrokes: list[Keystroke] = []
        self._word_states = [WordState.UNTYPED] * len(self._words)
        self._word_errors = [0] * len(self._words)
        self._correct = 0
        self._incorrect = 0
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None

    # -- read-only views ---------------------------------------------------

    @property
    def words(self) -> tuple[str, ...]:
        return self._words

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def word_index(self) -> int:
        return self._word_index

    @property
    def char_index(self) -> int:
        return self._char_index

    @property
    def highest_word_index(self) -> int:
        """Highest word index the cursor has reached so far."""
        return self._highest_word_index

    @property
    def keystrokes(self) -> tuple[Keystroke, ...]:
        return tuple(self._keystrokes)

    @property
    def word_states(self) -> tuple[WordState, ...]:
        return tuple(self._word_states)

    @property
    def correct_count(self) -> int:
        return self._correct

    @property
    def incorrect_count(self) -> int:
        return self._incorrect

    @property
    def total_keystrokes(self) -> int:
        return self._correct + self._incorrect

    @property
    def is_finished(self) -> bool:
        return self._state in (SessionState.COMPLETED, SessionState.ABORTED)

    @property
    def expected_char(self) -> Optional[str]:
        """Character expected at the cursor, or None once the end is reached."""
        if self._word_index >= len(self._words):
            return None
        return self._words[self._word_index][self._char_index]

    @property
    def elapsed_seconds(self) -> float:
        """Seconds between the first keystroke and completion (or now)."""
        if self.started_at is None:
            return 0.0
        end = self.finished_at if self.finished_at is not None else self._clock()
        return max(0.0, end - self.started_at)

    def typed_text(self, index: int) -> str:
        """Correctly typed prefix of the word at `index`."""
        if index < self._word_index:
            return self._words[index]
        if index == self._word_index:
            return self._words[index][: self._char_index]
        return ""

    def word_error_count(self, index: int) -> int:
        """Number of incorrect keystrokes ever recorded against a word."""
        return self._word_errors[index]

    # -- transitions -------------------------------------------------------

    def apply_keystroke(self, char: str) -> SessionState:
        """Process one typed character.

        Args:
            char: The typed character

        Returns:
            Session state after the keystroke
        """
        if self.is_finished:
            log.debug(f"Ignoring keystroke {char!r} on {self._state.value} session")
            return self._state

        now = self._clock()
        if self._state == SessionState.NOT_STARTED:
            self._state = SessionState.IN_PROGRESS
            self.started_at = now

        expected = self.expected_char
        correct = self._matches(char, expected)
        self._keystrokes.append(
            Keystroke(
                char=char,
                expected=expected,
                correct=correct,
                word_index=self._word_index,
                char_index=self._char_index,
                timestamp=now,
            )
        )

        if correct:
            self._correct += 1
            self._advance(now)
        else:
            self._incorrect += 1
            self._word_errors[self._word_index] += 1
            self._word_states[self._word_index] = WordState.INCORRECT
            if self.modes.sudden_death:
                log.info("Sudden death: session aborted on first error")
                self._finish(SessionState.ABORTED, now)

        return self._state

    def apply_backtrack(self) -> SessionState:
        """Process a backspace.

        Within a word the last correctly typed character is erased. At the
        start of a word the cursor only crosses into the previous word when
        backtracking is enabled.

        Returns:
            Session state after the backspace
        """
        if self.is_finished or self._state == SessionState.NOT_STARTED:
            return self._state
        if self._char_index == 0 and not self._step_back_word():
            return self._state

        self._erase_last_char()
        return self._state

    def apply_word_backtrack(self) -> SessionState:
        """Process Ctrl-W: erase everything typed in the current word.

        On a word with nothing typed yet, the cursor first moves into the
        previous word under the same rules as apply_backtrack, and that
        word is erased instead.

        Returns:
            Session state after the deletion
        """
        if self.is_finished or self._state == SessionState.NOT_STARTED:
            return self._state
        if self._char_index == 0 and not self._step_back_word():
            return self._state

        while self._char_index:
            self._erase_last_char()
        return self._state

    def abort(self) -> SessionState:
        """Abandon the session. Aborted sessions are never summarized."""
        if not self.is_finished:
            self._finish(SessionState.ABORTED, self._clock())
        return self._state

    def restarted(self) -> "TypingSession":
        """Fresh session over the same words and modes."""
        return TypingSession(self._words, self.modes, self._clock)

    # -- internals ---------------------------------------------------------

    def _matches(self, char: str, expected: str) -> bool:
        if self.modes.case_insensitive:
            return char.casefold() == expected.casefold()
        return char == expected

    def _advance(self, now: float) -> None:
        index = self._word_index
        self._char_index += 1
        if self._word_states[index] != WordState.INCORRECT:
            self._word_states[index] = WordState.IN_PROGRESS

        if self._char_index < len(self._words[index]):
            return

        self._word_states[index] = (
            WordState.INCORRECT if self._word_errors[index] else WordState.CORRECT
        )
        self._word_index += 1
        self._char_index = 0
        self._highest_word_index = max(self._highest_word_index, self._word_index)
        if self._word_index == len(self._words):
            self._finish(SessionState.COMPLETED, now)

    def _step_back_word(self) -> bool:
        """Move the cursor to the end of the previous word, if allowed."""
        if not self.modes.backtrack_enabled or self._word_index == 0:
            return False
        # Leaving the current word: it counts as untyped again unless it
        # already carries errors
        left = self._word_index
        self._word_states[left] = (
            WordState.INCORRECT if self._word_errors[left] else WordState.UNTYPED
        )
        self._word_index -= 1
        self._char_index = len(self._words[self._word_index])
        self._word_states[self._word_index] = WordState.IN_PROGRESS
        return True

    def _erase_last_char(self) -> None:
        position = (self._word_index, self._char_index - 1)
        for i in range(len(self._keystrokes) - 1, -1, -1):
            ks = self._keystrokes[i]
            if ks.correct and (ks.word_index, ks.char_index) == position:
                del self._keystrokes[i]
                self._correct -= 1
                break
        self._char_index -= 1

    def _finish(self, state: SessionState, now: float) -> None:
        self._state = state
        self.finished_at = now
        log.debug(
            f"Session {state.value}: {self._correct} correct, "
            f"{self._incorrect} incorrect keystrokes"
        )
