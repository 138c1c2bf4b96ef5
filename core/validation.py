"""Validation helpers for termtype."""

import logging
from datetime import date, datetime
from typing import Optional

from core.errors import InvalidDateFormatError, InvalidDateRangeError

log = logging.getLogger("termtype.validation")

DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD date.

    Raises:
        InvalidDateFormatError: If the value is not a valid date
    """
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise InvalidDateFormatError(value)


def validate_date_range(
    since: Optional[str], until: Optional[str]
) -> tuple[Optional[date], Optional[date]]:
    """Parse an optional inclusive date range.

    Args:
        since: First date or None
        until: Last date or None

    Returns:
        Parsed (since, until)

    Raises:
        InvalidDateFormatError: If either value does not parse
        InvalidDateRangeError: If since lies after until
    """
    since_date = parse_date(since) if since is not None else None
    until_date = parse_date(until) if until is not None else None

    if since_date and until_date and since_date > until_date:
        log.warning(f"Rejected date range: since={since}, until={until}")
        raise InvalidDateRangeError(
            "--since date must be before or equal to --until date"
        )
    return since_date, until_date
