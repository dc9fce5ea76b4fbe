"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date, datetime
from typing import Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerbook.domain.amount import Amount
from ledgerbook.domain.entities import (
    Account,
    Entry,
    EntryStatus,
    PeriodClosing,
    Position,
    PositionInput,
    Template,
    TemplateLineInput,
)


class Database(ABC):
    """Abstract database interface for ledgerbook.

    Writes outside of ``atomic()`` are committed immediately. Inside an
    ``atomic()`` block they become visible to later reads in the same block
    and are committed together when the outermost block exits cleanly.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Return a context manager running its body as one unit of work.

        Nested blocks join the outermost one. If the block raises, every
        write made inside it is rolled back and the exception propagates.
        """
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        path: str,
        name: str,
        parent_path: Optional[str],
        depth: int,
        created_by: str,
        description: Optional[str] = None,
    ) -> int:
        """Create an account. Returns account ID."""
        pass

    @abstractmethod
    def get_account_by_path(self, path: str) -> Optional[Account]:
        """Get account by normalized path."""
        pass

    @abstractmethod
    def get_accounts_by_paths(self, paths: Sequence[str]) -> list[Account]:
        """Get all accounts whose path is in paths."""
        pass

    @abstractmethod
    def list_accounts(self, active: Optional[bool] = None) -> list[Account]:
        """List accounts ordered by path, optionally filtered by active flag."""
        pass

    @abstractmethod
    def list_child_accounts(self, parent_path: Optional[str], active: Optional[bool] = None) -> list[Account]:
        """List direct children of parent_path (root accounts for None)."""
        pass

    @abstractmethod
    def list_descendant_accounts(self, path: str, active: Optional[bool] = None) -> list[Account]:
        """List all accounts below path."""
        pass

    @abstractmethod
    def set_account_active(self, path: str, active: bool) -> None:
        """Activate or deactivate an account."""
        pass

    @abstractmethod
    def update_account_description(self, path: str, description: Optional[str]) -> None:
        """Update an account's description."""
        pass

    @abstractmethod
    def delete_account(self, path: str) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def count_positions_for_account(
        self,
        path: str,
        since: Optional[date] = None,
        posted_only: bool = False,
    ) -> int:
        """Count positions booked on an account, optionally since a date."""
        pass

    # Entry operations
    @abstractmethod
    def create_entry(
        self,
        date: date,
        description: str,
        created_by: str,
        positions: Sequence[PositionInput],
        reference: Optional[str] = None,
        reverses_entry_id: Optional[int] = None,
    ) -> int:
        """Create a draft entry with its positions. Returns entry ID."""
        pass

    @abstractmethod
    def get_entry(self, entry_id: int) -> Optional[Entry]:
        """Get entry by ID, including positions."""
        pass

    @abstractmethod
    def update_draft_entry(
        self,
        entry_id: int,
        expected_version: int,
        date: date,
        description: str,
        reference: Optional[str],
        positions: Sequence[PositionInput],
    ) -> None:
        """Replace a draft entry's fields and positions.

        Raises:
            ConcurrentModificationError: If the entry is no longer a draft at
                expected_version
        """
        pass

    @abstractmethod
    def delete_draft_entry(self, entry_id: int, expected_version: int) -> None:
        """Delete a draft entry and its positions.

        Raises:
            ConcurrentModificationError: If the entry is no longer a draft at
                expected_version
        """
        pass

    @abstractmethod
    def transition_entry(
        self,
        entry_id: int,
        expected_status: EntryStatus,
        expected_version: int,
        new_status: EntryStatus,
        acting_user: str,
        at: datetime,
        void_reason: Optional[str] = None,
    ) -> None:
        """Move an entry to a new status and stamp the audit fields.

        Raises:
            ConcurrentModificationError: If the entry is not at
                expected_status/expected_version any more
        """
        pass

    @abstractmethod
    def set_reversal_link(self, entry_id: int, reversal_entry_id: int) -> None:
        """Record which entry reverses a voided entry."""
        pass

    @abstractmethod
    def list_entries(
        self,
        status: Optional[EntryStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_path: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[Entry]:
        """List entries, newest first, with optional filters."""
        pass

    @abstractmethod
    def list_positions(
        self,
        account_path: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[EntryStatus] = None,
        tax_relevant: Optional[bool] = None,
    ) -> list[Position]:
        """List positions filtered by account, owning entry's date and status."""
        pass

    # Template operations
    @abstractmethod
    def create_template(
        self,
        name: str,
        version: int,
        created_by: str,
        lines: Sequence[TemplateLineInput],
        description: Optional[str] = None,
        default_total: Optional[Amount] = None,
    ) -> int:
        """Create a template version with its lines. Returns template ID.

        Raises:
            ConflictError: If (name, version) already exists
        """
        pass

    @abstractmethod
    def get_template(self, template_id: int) -> Optional[Template]:
        """Get template by ID, including lines."""
        pass

    @abstractmethod
    def get_template_version(self, name: str, version: int) -> Optional[Template]:
        """Get a template by (name, version)."""
        pass

    @abstractmethod
    def get_latest_template_version(self, name: str) -> Optional[int]:
        """Return max(version) for name, or None if name is unknown."""
        pass

    @abstractmethod
    def list_templates(self, name: Optional[str] = None, active_only: bool = False) -> list[Template]:
        """List template versions ordered by name and descending version."""
        pass

    @abstractmethod
    def set_template_active(self, template_id: int, active: bool) -> None:
        """Toggle a template version's active flag."""
        pass

    # Period operations
    @abstractmethod
    def create_period_closing(self, closed_through: date, closed_by: str) -> int:
        """Record a period closing. Returns closing ID."""
        pass

    @abstractmethod
    def list_period_closings(self) -> list[PeriodClosing]:
        """List period closings, latest first."""
        pass
