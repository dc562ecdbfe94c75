"""
Deadline arithmetic: days remaining and urgency buckets.
"""

from datetime import date, datetime
from typing import Callable, Optional, Union

import structlog
from dateutil import parser as date_parser

from .models import UrgencyCategory

logger = structlog.get_logger(__name__)

Deadline = Union[str, date, datetime, None]

URGENT_THRESHOLD = 30
SOON_THRESHOLD = 60
LATER_THRESHOLD = 90


def to_calendar_date(deadline: Deadline) -> Optional[date]:
    """
    Reduce a deadline to its calendar date.

    Aware datetimes keep their own offset, so a UTC midnight deadline maps
    to that same calendar day.

    Returns:
        date or None if the value cannot be parsed
    """
    if not deadline:
        return None

    if isinstance(deadline, datetime):
        # Date in the value's own offset, not the local clock: normalized
        # deadlines are UTC midnight and must stay on their calendar day
        return deadline.date()
    if isinstance(deadline, date):
        return deadline

    text = str(deadline).strip()
    if not text:
        return None

    try:
        return date_parser.isoparse(text).date()
    except (ValueError, OverflowError):
        pass

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        logger.debug("deadline_unparseable", deadline=text, error=str(e))
        return None


class DeadlineCalculator:
    """
    Computes whole-day offsets to deadlines.

    Time of day never matters: both today and the deadline are compared as
    calendar dates.
    """

    def __init__(self, today: Optional[Callable[[], date]] = None):
        """
        Args:
            today: Callable returning the current date (defaults to date.today)
        """
        self._today = today or date.today

    def days_until(self, deadline: Deadline) -> Optional[int]:
        """
        Days from today until the deadline (negative when past).

        Returns:
            Integer day count or None if the deadline is invalid
        """
        deadline_date = to_calendar_date(deadline)
        if deadline_date is None:
            return None

        return (deadline_date - self._today()).days

    def is_within_days(self, deadline: Deadline, days: int) -> bool:
        """True if the deadline is today or within the next ``days`` days."""
        remaining = self.days_until(deadline)
        if remaining is None:
            return False
        return 0 <= remaining <= days

    def categorize_urgency(self, deadline: Deadline) -> UrgencyCategory:
        remaining = self.days_until(deadline)

        # Past deadlines are not urgent
        if remaining is None or remaining < 0:
            return UrgencyCategory.NONE

        if remaining <= URGENT_THRESHOLD:
            return UrgencyCategory.URGENT
        if remaining <= SOON_THRESHOLD:
            return UrgencyCategory.SOON
        if remaining <= LATER_THRESHOLD:
            return UrgencyCategory.LATER
        return UrgencyCategory.NONE
