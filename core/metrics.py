"""Metric derivation for completed typing sessions."""

from collections import defaultdict
from typing import Iterable

from core.errors import SessionNotCompletedError
from core.models import KeyAccuracy, ResultSummary
from core.typing_session import Keystroke, SessionState, TypingSession, WordState

WORST_KEYS_LIMIT = 5
SLOW_WORDS_LIMIT = 5


def calculate_wpm(key_count: int, elapsed_seconds: float) -> float:
    """Calculate words per minute.

    Args:
        key_count: Number of keystrokes
        elapsed_seconds: Typing time in seconds

    Returns:
        WPM (words per minute), or 0.0 if no time elapsed
    """
    if elapsed_seconds <= 0:
        return 0.0

    words = key_count / 5.0
    minutes = elapsed_seconds / 60.0
    return words / minutes


def calculate_accuracy(correct: int, total: int) -> float:
    """Percentage of correct keystrokes, 0.0 when nothing was typed."""
    if total <= 0:
        return 0.0
    return 100.0 * correct / total


def rank_worst_keys(
    keystrokes: Iterable[Keystroke], limit: int = WORST_KEYS_LIMIT
) -> list[KeyAccuracy]:
    """Rank expected characters by how often they were mistyped.

    Only characters with at least one incorrect attempt are ranked. Accuracy
    is correct attempts over all attempts at that character; the worst come
    first, ties go to the character with more attempts.
    """
    attempts: dict[str, int] = defaultdict(int)
    hits: dict[str, int] = defaultdict(int)
    for ks in keystrokes:
        attempts[ks.expected] += 1
        if ks.correct:
            hits[ks.expected] += 1

    ranked = sorted(
        (
            (hits[key] / count, -count, key)
            for key, count in attempts.items()
            if hits[key] < count
        )
    )
    return [
        KeyAccuracy(key=key, accuracy=round(ratio * 100))
        for ratio, _, key in ranked[:limit]
    ]


def find_missed_words(session: TypingSession) -> list[str]:
    """Words whose final state is INCORRECT, in sequence order."""
    return [
        word
        for word, state in zip(session.words, session.word_states)
        if state == WordState.INCORRECT
    ]


def find_slow_words(session: TypingSession, limit: int = SLOW_WORDS_LIMIT) -> list[str]:
    """Slowest cleanly typed words, measured as time per character.

    Words with errors are excluded, as are words with fewer than two
    keystrokes since their typing time cannot be measured.
    """
    times: dict[int, list[float]] = defaultdict(list)
    for ks in session.keystrokes:
        times[ks.word_index].append(ks.timestamp)

    speeds = []
    for index, stamps in times.items():
        word = session.words[index]
        if len(stamps) < 2 or session.word_error_count(index):
            continue
        speeds.append(((max(stamps) - min(stamps)) / len(word), index))

    speeds.sort(key=lambda item: (-item[0], item[1]))
    return [session.words[index] for _, index in speeds[:limit]]


def summarize(session: TypingSession) -> ResultSummary:
    """Derive the result summary of a completed session.

    Raises:
        SessionNotCompletedError: If the session is not COMPLETED
    """
    if session.state != SessionState.COMPLETED:
        raise SessionNotCompletedError(
            f"Cannot summarize a session in state '{session.state.value}'"
        )

    correct = session.correct_count
    total = session.total_keystrokes
    elapsed = session.elapsed_seconds
    keystrokes = session.keystrokes

    return ResultSummary(
        words=len(session.words),
        wpm_raw=calculate_wpm(total, elapsed),
        wpm_adjusted=calculate_wpm(correct, elapsed),
        accuracy=calculate_accuracy(correct, total),
        correct=correct,
        total=total,
        worst_keys=rank_worst_keys(keystrokes),
        missed_words=find_missed_words(session),
        slow_words=find_slow_words(session),
        elapsed_seconds=elapsed,
    )
