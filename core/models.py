"""Pydantic models for termtype results and history."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class KeyAccuracy(BaseModel):
    """Accuracy for a single expected character."""

    key: str = Field(..., min_length=1, max_length=1, description="Expected character")
    accuracy: int = Field(..., ge=0, le=100, description="Accuracy in percent")

    model_config = ConfigDict(extra="ignore", frozen=True)

    def __str__(self) -> str:
        return f"{self.key}:{self.accuracy}%"


class ResultSummary(BaseModel):
    """Metrics derived from a completed typing session."""

    words: int = Field(..., ge=1, description="Number of words in the test")
    wpm_raw: float = Field(..., ge=0, description="Words per minute over all keystrokes")
    wpm_adjusted: float = Field(
        ..., ge=0, description="Words per minute over correct keystrokes"
    )
    accuracy: float = Field(..., ge=0, le=100, description="Accuracy in percent")
    correct: int = Field(..., ge=0, description="Correct keystroke count")
    total: int = Field(..., ge=0, description="Total keystroke count")
    worst_keys: list[KeyAccuracy] = Field(
        default_factory=list, max_length=5, description="Worst keys, worst first"
    )
    missed_words: list[str] = Field(
        default_factory=list, description="Words with at least one error"
    )
    slow_words: list[str] = Field(
        default_factory=list, description="Slowest cleanly typed words"
    )
    elapsed_seconds: float = Field(default=0.0, ge=0, description="Typing time")

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def incorrect(self) -> int:
        return self.total - self.correct


class HistoryRecord(BaseModel):
    """One persisted row of the history log."""

    timestamp: datetime = Field(..., description="When the test was completed")
    language: str = Field(..., description="Language tag of the test")
    words: int = Field(..., ge=0, description="Number of words in the test")
    wpm_raw: float = Field(..., ge=0, description="Raw words per minute")
    wpm_adjusted: float = Field(..., ge=0, description="Adjusted words per minute")
    accuracy: float = Field(..., ge=0, le=100, description="Accuracy in percent")
    correct: int = Field(..., ge=0, description="Correct keystroke count")
    total: int = Field(..., ge=0, description="Total keystroke count")
    worst_keys: list[KeyAccuracy] = Field(default_factory=list, max_length=5)
    missed_words: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", frozen=True)

    @classmethod
    def from_summary(
        cls, summary: ResultSummary, language: str, timestamp: datetime
    ) -> "HistoryRecord":
        """Build a record from a result summary."""
        return cls(
            timestamp=timestamp.replace(microsecond=0),
            language=language,
            words=summary.words,
            wpm_raw=round(summary.wpm_raw, 1),
            wpm_adjusted=round(summary.wpm_adjusted, 1),
            accuracy=round(summary.accuracy, 1),
            correct=summary.correct,
            total=summary.total,
            worst_keys=summary.worst_keys,
            missed_words=summary.missed_words,
        )


class HistoryQuery(BaseModel):
    """Filter applied to the history log."""

    language: Optional[str] = Field(default=None, description="Exact language tag")
    since: Optional[date] = Field(default=None, description="First date (inclusive)")
    until: Optional[date] = Field(default=None, description="Last date (inclusive)")
    last: Optional[int] = Field(
        default=None, ge=0, description="Keep only the most recent N records"
    )

    model_config = ConfigDict(extra="ignore", frozen=True)

    @model_validator(mode="after")
    def validate_range(self) -> "HistoryQuery":
        """Reject ranges whose start lies after their end."""
        if self.since and self.until and self.since > self.until:
            raise ValueError(
                f"since ({self.since}) must be before or equal to until ({self.until})"
            )
        return self

    def matches(self, record: HistoryRecord) -> bool:
        """Check language and date filters (not the `last` truncation)."""
        if self.language is not None and record.language != self.language:
            return False
        day = record.timestamp.date()
        if self.since is not None and day < self.since:
            return False
        if self.until is not None and day > self.until:
            return False
        return True


class HistoryStats(BaseModel):
    """Aggregate statistics over a filtered set of history records."""

    count: int = Field(default=0, ge=0, description="Number of records")
    avg_wpm_raw: Optional[float] = Field(default=None, description="Mean raw WPM")
    avg_wpm_adjusted: Optional[float] = Field(
        default=None, description="Mean adjusted WPM"
    )
    avg_accuracy: Optional[float] = Field(default=None, description="Mean accuracy")
    best_wpm_adjusted: Optional[float] = Field(
        default=None, description="Best adjusted WPM"
    )
    first: Optional[datetime] = Field(default=None, description="Oldest record")
    last: Optional[datetime] = Field(default=None, description="Newest record")

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def has_data(self) -> bool:
        return self.count > 0
