"""Plain-text rendering of history and aggregate statistics."""

from pathlib import Path
from typing import Optional

from core.history import TIMESTAMP_FORMAT, format_worst_keys
from core.models import HistoryQuery, HistoryRecord, HistoryStats, ResultSummary

ROW_FORMAT = "{:<20} {:<15} {:>5} {:>8} {:>8} {:>8} {}"


def _describe_filters(query: HistoryQuery) -> str:
    parts = []
    if query.language:
        parts.append(f"language={query.language}")
    if query.since:
        parts.append(f"since={query.since}")
    if query.until:
        parts.append(f"until={query.until}")
    return ", ".join(parts)


def format_history(
    records: list[HistoryRecord],
    query: HistoryQuery,
    history_file: Path,
) -> list[str]:
    """Format records as a table with a trailing summary line."""
    if not records:
        lines = ["No results recorded yet."]
        filters = _describe_filters(query)
        if filters:
            lines = [f"No results match the filters ({filters})."]
        lines.append(f"History file: {history_file}")
        return lines

    lines = [
        ROW_FORMAT.format(
            "Date", "Language", "Words", "Raw WPM", "Adj WPM", "Acc %", "Worst Keys"
        ),
        "-" * 90,
    ]
    for r in records:
        lines.append(
            ROW_FORMAT.format(
                r.timestamp.strftime(TIMESTAMP_FORMAT),
                r.language,
                r.words,
                f"{r.wpm_raw:.1f}",
                f"{r.wpm_adjusted:.1f}",
                f"{r.accuracy:.1f}",
                format_worst_keys(r.worst_keys),
            )
        )

    lines.append("")
    if query.last is not None:
        lines.append(f"Showing last {len(records)} results. History file: {history_file}")
    else:
        lines.append(f"{len(records)} results total. History file: {history_file}")
    return lines


def format_stats(stats: HistoryStats, query: HistoryQuery) -> list[str]:
    """Format aggregate statistics."""
    filters = _describe_filters(query)
    if not stats.has_data:
        if filters:
            return [f"No data for the selected filters ({filters})."]
        return ["No data recorded yet."]

    lines = ["Statistics" + (f" ({filters})" if filters else "")]
    lines.append("-" * 40)
    lines.append(f"{'Tests':<22}{stats.count:>10}")
    lines.append(f"{'Average raw WPM':<22}{stats.avg_wpm_raw:>10.1f}")
    lines.append(f"{'Average adjusted WPM':<22}{stats.avg_wpm_adjusted:>10.1f}")
    lines.append(f"{'Best adjusted WPM':<22}{stats.best_wpm_adjusted:>10.1f}")
    lines.append(f"{'Average accuracy':<22}{stats.avg_accuracy:>9.1f}%")
    lines.append(f"{'First test':<22}{stats.first.strftime(TIMESTAMP_FORMAT):>20}")
    lines.append(f"{'Last test':<22}{stats.last.strftime(TIMESTAMP_FORMAT):>20}")
    return lines


def format_summary(summary: ResultSummary, warning: Optional[str] = None) -> list[str]:
    """Lines shown on the results screen after a completed test."""
    lines = [
        f"Adjusted WPM: {summary.wpm_adjusted:.1f}",
        f"Raw WPM:      {summary.wpm_raw:.1f}",
        f"Accuracy:     {summary.accuracy:.1f}% ({summary.correct}/{summary.total})",
        f"Time:         {summary.elapsed_seconds:.1f}s",
    ]
    if summary.worst_keys:
        lines.append("Worst keys:   " + ", ".join(str(k) for k in summary.worst_keys))
    if summary.missed_words:
        lines.append("Missed words: " + " ".join(summary.missed_words))
    if summary.slow_words:
        lines.append("Slow words:   " + " ".join(summary.slow_words))
    if warning:
        lines.append("")
        lines.append(f"Warning: {warning}")
    return lines
