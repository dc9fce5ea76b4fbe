"""Multi-step operations that commit together or not at all."""

import logging
from typing import Any, Callable, Sequence

from ledgerbook.database.base import Database

logger = logging.getLogger(__name__)

Step = tuple[str, Callable[[dict[str, Any]], Any]]


class UnitOfWork:
    """Run named steps inside one database unit of work.

    Each step receives the results of the steps before it, keyed by name.
    The first step that raises aborts the run; everything written by earlier
    steps is rolled back and the exception propagates unchanged.
    """

    def __init__(self, db: Database):
        self.db = db

    def run(self, steps: Sequence[Step]) -> dict[str, Any]:
        """Run steps in order.

        Args:
            steps: (name, callable) pairs

        Returns:
            Mapping of step name to the value the step returned
        """
        results: dict[str, Any] = {}
        current = None
        try:
            with self.db.atomic():
                for name, step in steps:
                    current = name
                    results[name] = step(results)
        except Exception:
            logger.debug("Unit of work failed at step %s", current)
            raise
        return results
