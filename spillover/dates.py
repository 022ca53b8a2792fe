"""Date window conversion and JIRA timestamp parsing"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from spillover.config import DEFAULT_DAYS_PRIOR
from spillover.errors import ConfigurationError

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"

# Tried in order, first match wins
TIMESTAMP_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    DATE_FORMAT,
]


def parse_jira_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a JIRA timestamp string

    Args:
        value: Timestamp such as 2025-07-01T10:15:30.000+0000

    Returns:
        Parsed datetime (naive when the source had no offset), or None
    """
    if not value:
        return None

    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    return None


def format_date(value: Optional[str]) -> str:
    """Reduce a JIRA timestamp to yyyy-mm-dd, or empty if missing/unparseable"""
    if not value:
        return ""

    parsed = parse_jira_timestamp(value)
    if parsed is None:
        logger.warning(f"Error formatting date '{value}'")
        return ""

    return parsed.strftime(DATE_FORMAT)


def days_since(value: datetime, now: Optional[datetime] = None) -> int:
    """Whole days between a timestamp and now (naive timestamps are taken as UTC)"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if now is None:
        now = datetime.now(timezone.utc)
    return (now - value).days


def resolve_days_prior(from_date: Optional[str] = None, days_prior: Optional[int] = None,
                       today: Optional[datetime] = None) -> int:
    """
    Convert the date window to a day count

    A from date takes precedence over days prior. A missing or non-positive
    days prior falls back to the default.

    Args:
        from_date: Optional start date in yyyy-mm-dd format
        days_prior: Optional number of days to look back
        today: Reference time (defaults to now)

    Returns:
        Number of days in the window
    """
    if today is None:
        today = datetime.now()

    if from_date:
        try:
            start = datetime.strptime(from_date, DATE_FORMAT)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid from date format '{from_date}': must be yyyy-mm-dd",
                original_error=e
            ) from e

        if start > today:
            raise ConfigurationError(f"From date '{from_date}' is in the future")

        days = (today - start).days
        logger.info(f"Using date range: {from_date} to present ({days} days)")
        return days

    if not days_prior or days_prior <= 0:
        days_prior = DEFAULT_DAYS_PRIOR

    start = today - timedelta(days=days_prior)
    logger.info(f"Using date range: {start.strftime(DATE_FORMAT)} to present ({days_prior} days)")
    return days_prior
