"""Append-only CSV history of completed typing tests."""

import csv
import io
import logging
from datetime import datetime
from pathlib import Path
from statistics import fmean
from typing import Iterator, Optional

from pydantic import ValidationError

from core.errors import PersistenceError
from core.models import HistoryQuery, HistoryRecord, HistoryStats, KeyAccuracy, ResultSummary

log = logging.getLogger("termtype.history")

CSV_HEADER = [
    "datetime",
    "language",
    "words",
    "wpm_raw",
    "wpm_adjusted",
    "accuracy",
    "correct",
    "total",
    "worst_keys",
    "missed_words",
]
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
LIST_SEPARATOR = ";"
ESCAPE = "\\"


def join_list(items: list[str]) -> str:
    """Join items with ';', escaping separators inside items."""
    return LIST_SEPARATOR.join(
        item.replace(ESCAPE, ESCAPE * 2).replace(LIST_SEPARATOR, ESCAPE + LIST_SEPARATOR)
        for item in items
    )


def split_list(value: str) -> list[str]:
    """Inverse of join_list."""
    if not value:
        return []
    items = []
    current = []
    chars = iter(value)
    for ch in chars:
        if ch == ESCAPE:
            current.append(next(chars, ESCAPE))
        elif ch == LIST_SEPARATOR:
            items.append("".join(current))
            current = []
        else:
            current.append(ch)
    items.append("".join(current))
    return items


def format_worst_keys(keys: list[KeyAccuracy]) -> str:
    """Format worst keys as 'y:50%;A:75%'."""
    return join_list([str(k) for k in keys])


def parse_worst_keys(value: str) -> list[KeyAccuracy]:
    """Parse the worst_keys column.

    Raises:
        ValueError: If an entry is not 'c:NN%'
    """
    keys = []
    for entry in split_list(value):
        key, sep, pct = entry.rpartition(":")
        if not sep or not pct.endswith("%"):
            raise ValueError(f"Malformed worst key entry: {entry!r}")
        keys.append(KeyAccuracy(key=key, accuracy=int(pct[:-1])))
    return keys


def record_to_row(record: HistoryRecord) -> list[str]:
    """Serialize a record into CSV fields."""
    return [
        record.timestamp.strftime(TIMESTAMP_FORMAT),
        record.language,
        str(record.words),
        f"{record.wpm_raw:.1f}",
        f"{record.wpm_adjusted:.1f}",
        f"{record.accuracy:.1f}",
        str(record.correct),
        str(record.total),
        format_worst_keys(record.worst_keys),
        join_list(record.missed_words),
    ]


def row_to_record(row: list[str]) -> HistoryRecord:
    """Parse CSV fields into a record.

    Raises:
        ValueError: If the row does not match the schema
    """
    if len(row) != len(CSV_HEADER):
        raise ValueError(f"Expected {len(CSV_HEADER)} fields, got {len(row)}")
    fields = dict(zip(CSV_HEADER, row))
    return HistoryRecord(
        timestamp=datetime.strptime(fields["datetime"], TIMESTAMP_FORMAT),
        language=fields["language"],
        words=fields["words"],
        wpm_raw=fields["wpm_raw"],
        wpm_adjusted=fields["wpm_adjusted"],
        accuracy=fields["accuracy"],
        correct=fields["correct"],
        total=fields["total"],
        worst_keys=parse_worst_keys(fields["worst_keys"]),
        missed_words=split_list(fields["missed_words"]),
    )


class HistoryStore:
    """History log stored as a CSV file, one row per completed test."""

    def __init__(self, path: Path):
        """Initialize store.

        Args:
            path: CSV file path; created on first append
        """
        self.path = Path(path)

    def append(self, record: HistoryRecord) -> None:
        """Append one record as a single complete line.

        Raises:
            PersistenceError: If the history file cannot be written
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self._drop_torn_row():
                writer.writerow(CSV_HEADER)
            writer.writerow(record_to_row(record))
            with open(self.path, "a", encoding="utf-8", newline="") as f:
                f.write(buffer.getvalue())
        except OSError as e:
            raise PersistenceError(f"Cannot write history file {self.path}: {e}") from e
        log.debug(f"Appended history record for {record.timestamp}")

    def save(
        self,
        summary: ResultSummary,
        language: str,
        timestamp: Optional[datetime] = None,
    ) -> HistoryRecord:
        """Build a record from a summary and append it.

        Raises:
            PersistenceError: If the history file cannot be written
        """
        record = HistoryRecord.from_summary(
            summary, language, timestamp or datetime.now()
        )
        self.append(record)
        return record

    def read_all(self) -> list[HistoryRecord]:
        """All parseable records in append order."""
        return list(self._iter_records())

    def query(self, query: Optional[HistoryQuery] = None) -> list[HistoryRecord]:
        """Filter records by language and date, then keep the last N.

        The result stays in ascending chronological (append) order.
        """
        query = query or HistoryQuery()
        records = [r for r in self._iter_records() if query.matches(r)]
        if query.last is not None:
            records = records[max(0, len(records) - query.last) :] if query.last else []
        return records

    def aggregate(self, query: Optional[HistoryQuery] = None) -> HistoryStats:
        """Count and averages over the filtered records.

        Returns an empty HistoryStats (has_data False) when nothing matches.
        """
        records = self.query(query)
        if not records:
            return HistoryStats()
        return HistoryStats(
            count=len(records),
            avg_wpm_raw=fmean(r.wpm_raw for r in records),
            avg_wpm_adjusted=fmean(r.wpm_adjusted for r in records),
            avg_accuracy=fmean(r.accuracy for r in records),
            best_wpm_adjusted=max(r.wpm_adjusted for r in records),
            first=min(r.timestamp for r in records),
            last=max(r.timestamp for r in records),
        )

    def _drop_torn_row(self) -> bool:
        """Truncate a partial last row left by an interrupted write.

        Every row is written together with its newline, so text after the
        last newline was never completely written. It may end inside a
        quoted field, where it would swallow every row appended after it.

        Returns:
            True if complete rows remain, False if a header must be written
        """
        if not self.path.exists() or self.path.stat().st_size == 0:
            return False
        with open(self.path, "r+b") as f:
            f.seek(-1, io.SEEK_END)
            if f.read(1) == b"\n":
                return True
            f.seek(0)
            data = f.read()
            keep = data.rfind(b"\n") + 1
            log.warning(
                f"Discarding torn row at the end of {self.path} "
                f"({len(data) - keep} bytes)"
            )
            f.truncate(keep)
        return keep > 0

    def _iter_records(self) -> Iterator[HistoryRecord]:
        try:
            f = open(self.path, encoding="utf-8", errors="replace", newline="")
        except FileNotFoundError:
            return
        except OSError as e:
            log.warning(f"Cannot read history file {self.path}: {e}")
            return

        with f:
            reader = csv.reader(f)
            row_no = 0
            while True:
                # The reader starts a fresh row after an error, so one
                # unparsable line only costs that line
                try:
                    row = next(reader)
                except StopIteration:
                    break
                except csv.Error as e:
                    log.warning(f"Skipping unreadable history line {reader.line_num}: {e}")
                    continue
                row_no += 1
                if row_no == 1 and row == CSV_HEADER:
                    continue
                if not row:
                    continue
                try:
                    yield row_to_record(row)
                except (ValueError, ValidationError) as e:
                    log.warning(f"Skipping malformed history row {reader.line_num}: {e}")
