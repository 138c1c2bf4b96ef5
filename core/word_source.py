"""Target word generation for typing tests."""

import logging
import random
from dataclasses import dataclass, field
from itertools import cycle, islice
from typing import Optional, Sequence, Union

from core.errors import EmptySourceError

log = logging.getLogger("termtype.word_source")


@dataclass(frozen=True)
class RandomSample:
    """Draw `count` random words from a language list."""

    count: int
    words: Sequence[str]
    allow_repeats: bool = True
    seed: Optional[int] = None


@dataclass(frozen=True)
class LiteralWords:
    """Use a fixed word sequence as-is."""

    words: Sequence[str] = field(default_factory=tuple)


WordSource = Union[RandomSample, LiteralWords]


def generate(source: WordSource) -> list[str]:
    """Produce the ordered target words for a session.

    Args:
        source: RandomSample or LiteralWords

    Returns:
        Non-empty list of words

    Raises:
        EmptySourceError: If the source yields no words
        ValueError: If a random sample asks for fewer than one word
    """
    if isinstance(source, LiteralWords):
        words = [w for w in source.words if w]
    elif isinstance(source, RandomSample):
        words = _sample(source)
    else:
        raise TypeError(f"Unknown word source: {type(source).__name__}")

    if not words:
        raise EmptySourceError()
    return words


def from_content(text: str) -> list[str]:
    """Split literal test content into words.

    Every line is split on whitespace, so one-word-per-line files and
    free text both work. Blank lines are ignored.

    Raises:
        EmptySourceError: If the content holds no words
    """
    words = [word for line in text.splitlines() for word in line.split()]
    return generate(LiteralWords(words))


def _sample(source: RandomSample) -> list[str]:
    if source.count < 1:
        raise ValueError(f"word count must be at least 1, got {source.count}")

    pool = [w for w in source.words if w.strip()]
    if not pool:
        return []

    rng = random.Random(source.seed)
    if source.count <= len(pool):
        return rng.sample(pool, source.count)

    if not source.allow_repeats:
        log.warning(
            f"Requested {source.count} words but the list only has {len(pool)}; "
            "using each word once"
        )
        rng.shuffle(pool)
        return pool

    rng.shuffle(pool)
    words = list(islice(cycle(pool), source.count))
    rng.shuffle(words)
    return words
