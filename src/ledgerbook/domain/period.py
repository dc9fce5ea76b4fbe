"""Booking period closing."""

import logging
from datetime import date
from typing import Optional

from ledgerbook.database.base import Database
from ledgerbook.domain.entities import PeriodClosing
from ledgerbook.domain.errors import ValidationError

logger = logging.getLogger(__name__)


class PeriodService:
    """Service for closing booking periods.

    Once the books are closed through a date, no entry dated on or before it
    can be created, changed or posted.
    """

    def __init__(self, db: Database):
        self.db = db

    def closed_through(self) -> Optional[date]:
        """Return the latest closed-through date, or None if nothing is closed."""
        closings = self.db.list_period_closings()
        if not closings:
            return None
        return closings[0].closed_through

    def close_period(self, through: date, closed_by: str) -> PeriodClosing:
        """Close the books up to and including a date.

        Args:
            through: Last date of the closed period
            closed_by: User closing the period

        Returns:
            The recorded closing

        Raises:
            ValidationError: If the date lies before the current closing
        """
        current = self.closed_through()
        if current is not None and through < current:
            raise ValidationError(
                f"Books are already closed through {current.isoformat()}; cannot move back to {through.isoformat()}"
            )
        self.db.create_period_closing(through, closed_by)
        logger.info("Closed books through %s", through.isoformat())
        return self.db.list_period_closings()[0]

    def list_closings(self) -> list[PeriodClosing]:
        return self.db.list_period_closings()
