"""Entry lifecycle domain service.

Entries move through draft -> posted -> void. Drafts can be edited and
deleted freely; posted entries are immutable and can only be cancelled by
voiding, which books a reversal entry with negated positions.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta, UTC
from typing import Callable, Optional, Sequence

from ledgerbook.config import LedgerConfig
from ledgerbook.database.base import Database
from ledgerbook.domain import account_path
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.amount import Amount
from ledgerbook.domain.entities import Entry, EntryStatus, Position, PositionInput
from ledgerbook.domain.errors import (
    AccountsInactiveError,
    AccountsNotFoundOrInactiveError,
    AlreadyPostedError,
    EntryNotBalancedError,
    EntryNotDeletableError,
    EntryNotEditableError,
    ExceedsMaxPositionsError,
    InsufficientPositionsError,
    InvalidDateError,
    NotFoundError,
    NotPostedError,
    PeriodClosedError,
    ValidationError,
    VoidReasonRequiredError,
    entry_not_found,
)
from ledgerbook.domain.period import PeriodService
from ledgerbook.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

REVERSAL_PREFIX = "Storno: "
MIN_DESCRIPTION_LENGTH = 3
MIN_VOID_REASON_LENGTH = 5

# Default for update_entry arguments that keep their current value
UNCHANGED = object()


class DatePolicy:
    """Decides which dates entries may carry."""

    def __init__(
        self,
        config: LedgerConfig,
        periods: Optional[PeriodService] = None,
        today: Callable[[], date] = date.today,
    ):
        """Initialize date policy.

        Args:
            config: Ledger configuration (backdating rules)
            periods: Source of the closed-through date; no closing if omitted
            today: Clock, replaceable in tests
        """
        self.config = config
        self.periods = periods
        self.today = today

    def check(self, entry_date: date) -> None:
        """Validate the date of a new or edited entry.

        Raises:
            InvalidDateError: If the date is in the future or backdated too far
            PeriodClosedError: If the date falls into a closed period
        """
        today = self.today()
        if entry_date > today:
            raise InvalidDateError(f"Entry date {entry_date.isoformat()} is in the future")
        if entry_date < today:
            if not self.config.allow_backdated:
                raise InvalidDateError("Backdated entries are not allowed")
            if entry_date < today - timedelta(days=self.config.max_backdate_days):
                raise InvalidDateError(
                    f"Entry date {entry_date.isoformat()} is more than "
                    f"{self.config.max_backdate_days} days in the past"
                )
        self.check_period_open(entry_date)

    def check_period_open(self, entry_date: date) -> None:
        """Raise PeriodClosedError if entry_date lies in a closed period.

        This is the only date rule posting re-checks; a draft does not go
        stale because the clock moved on.
        """
        if self.periods is not None:
            closed_through = self.periods.closed_through()
            if closed_through is not None and entry_date <= closed_through:
                raise PeriodClosedError(entry_date, closed_through)


def imbalances(positions: Sequence[PositionInput]) -> dict[str, Amount]:
    """Return the non-zero sum per currency of a set of positions."""
    totals: dict[str, Amount] = {}
    for position in positions:
        currency = position.amount.currency
        totals[currency] = totals.get(currency, Amount.zero(currency)) + position.amount
    return {currency: total for currency, total in totals.items() if not total.is_zero()}


def _as_inputs(positions: Sequence[Position]) -> list[PositionInput]:
    return [
        PositionInput(
            account_path=p.account_path,
            amount=p.amount,
            description=p.description,
            tax_relevant=p.tax_relevant,
            order=p.order,
        )
        for p in positions
    ]


class EntryService:
    """Service for creating, posting and voiding entries."""

    def __init__(
        self,
        db: Database,
        config: Optional[LedgerConfig] = None,
        accounts: Optional[AccountService] = None,
        period_policy: Optional[DatePolicy] = None,
    ):
        """Initialize entry service.

        Args:
            db: Database instance
            config: Ledger configuration
            accounts: Account lookups (built from db if omitted)
            period_policy: Date policy (built from config and db if omitted)
        """
        self.db = db
        self.config = config or LedgerConfig()
        self.accounts = accounts or AccountService(db, self.config)
        self.period_policy = period_policy or DatePolicy(self.config, PeriodService(db))

    def _normalize_positions(self, positions: Sequence[PositionInput]) -> list[PositionInput]:
        return [replace(p, account_path=account_path.normalize(p.account_path)) for p in positions]

    def _validate(self, entry_date: date, description: str, positions: Sequence[PositionInput]) -> None:
        """Run the entry validations in their fixed order."""
        resolution = self.accounts.resolve(p.account_path for p in positions)
        unusable = list(resolution.missing) + [acc.path for acc in resolution.found if not acc.active]
        if unusable:
            raise AccountsNotFoundOrInactiveError(sorted(unusable))

        self.period_policy.check(entry_date)

        if description is None or description.strip() == "":
            raise ValidationError("Entry description must not be empty")
        if len(description.strip()) < MIN_DESCRIPTION_LENGTH:
            raise ValidationError(f"Entry description must be at least {MIN_DESCRIPTION_LENGTH} characters")

        if len(positions) < 2:
            raise InsufficientPositionsError(len(positions))
        if len(positions) > self.config.max_positions_per_entry:
            raise ExceedsMaxPositionsError(self.config.max_positions_per_entry)
        for position in positions:
            if position.amount.is_zero():
                raise ValidationError(f"Position on '{position.account_path}' has a zero amount")

        off = imbalances(positions)
        if off:
            raise EntryNotBalancedError(off)

    def create_entry(
        self,
        date: date,
        description: str,
        positions: Sequence[PositionInput],
        created_by: str,
        reference: Optional[str] = None,
    ) -> Entry:
        """Create a draft entry.

        Args:
            date: Booking date
            description: Entry description
            positions: Positions; they must balance to zero per currency
            created_by: User creating the entry
            reference: Optional external reference (receipt number etc.)

        Returns:
            The created draft entry

        Raises:
            AccountsNotFoundOrInactiveError: If an account is unknown or inactive
            InvalidDateError: If the date violates the backdating rules
            PeriodClosedError: If the date falls into a closed period
            ValidationError: If the description is too short or an amount is zero
            InsufficientPositionsError: If there are fewer than two positions
            ExceedsMaxPositionsError: If there are too many positions
            EntryNotBalancedError: If positions do not sum to zero
        """
        return self._create(date, description, positions, created_by, reference)

    def _create(
        self,
        entry_date: date,
        description: str,
        positions: Sequence[PositionInput],
        created_by: str,
        reference: Optional[str],
        reverses_entry_id: Optional[int] = None,
    ) -> Entry:
        positions = self._normalize_positions(positions)
        try:
            self._validate(entry_date, description, positions)
        except ValidationError as exc:
            logger.debug("Rejected entry %r: %s", description, exc)
            raise

        entry_id = self.db.create_entry(
            date=entry_date,
            description=description.strip(),
            created_by=created_by,
            positions=positions,
            reference=reference,
            reverses_entry_id=reverses_entry_id,
        )
        logger.info("Created draft entry %s", entry_id)
        return self.db.get_entry(entry_id)

    def update_entry(
        self,
        entry: Entry,
        date: Optional[date] = None,
        description: Optional[str] = None,
        positions: Optional[Sequence[PositionInput]] = None,
        reference: Optional[str] = UNCHANGED,
    ) -> Entry:
        """Update a draft entry.

        Omitted arguments keep their current value. Positions are replaced as a
        whole.

        Args:
            entry: Entry as last read; its version guards against lost updates
            date: New booking date
            description: New description
            positions: New complete set of positions
            reference: New reference; None clears it

        Returns:
            The updated entry

        Raises:
            EntryNotEditableError: If the entry is not a draft
            ConcurrentModificationError: If the entry changed since it was read
            (plus every validation error of create_entry)
        """
        if not entry.is_editable:
            raise EntryNotEditableError(entry.id, entry.status.value)

        new_date = date if date is not None else entry.date
        new_description = description if description is not None else entry.description
        new_reference = entry.reference if reference is UNCHANGED else reference
        new_positions = self._normalize_positions(
            positions if positions is not None else _as_inputs(entry.positions)
        )
        self._validate(new_date, new_description, new_positions)

        self.db.update_draft_entry(
            entry_id=entry.id,
            expected_version=entry.version,
            date=new_date,
            description=new_description.strip(),
            reference=new_reference,
            positions=new_positions,
        )
        logger.info("Updated draft entry %s", entry.id)
        return self.db.get_entry(entry.id)

    def delete_entry(self, entry: Entry) -> None:
        """Delete a draft entry.

        Raises:
            EntryNotDeletableError: If the entry is posted or void
            ConcurrentModificationError: If the entry changed since it was read
        """
        if entry.status != EntryStatus.DRAFT:
            raise EntryNotDeletableError(entry.id, entry.status.value)
        self.db.delete_draft_entry(entry.id, entry.version)
        logger.info("Deleted draft entry %s", entry.id)

    def post_entry(self, entry: Entry, acting_user: str) -> Entry:
        """Post a draft entry, making it immutable.

        Args:
            entry: Draft entry
            acting_user: User posting the entry

        Returns:
            The posted entry

        Raises:
            AlreadyPostedError: If the entry is not a draft
            PeriodClosedError: If the period was closed since drafting
            AccountsInactiveError: If an account was deactivated since drafting
            EntryNotBalancedError: If the stored positions do not balance
            ConcurrentModificationError: If the entry changed since it was read
        """
        if not entry.can_post:
            raise AlreadyPostedError(entry.id)

        self.period_policy.check_period_open(entry.date)

        resolution = self.accounts.resolve(p.account_path for p in entry.positions)
        inactive = list(resolution.missing) + [acc.path for acc in resolution.found if not acc.active]
        if inactive:
            logger.debug("Refused to post entry %s: inactive accounts %s", entry.id, inactive)
            raise AccountsInactiveError(sorted(inactive))

        off = imbalances(_as_inputs(entry.positions))
        if off:
            raise EntryNotBalancedError(off)

        self.db.transition_entry(
            entry_id=entry.id,
            expected_status=EntryStatus.DRAFT,
            expected_version=entry.version,
            new_status=EntryStatus.POSTED,
            acting_user=acting_user,
            at=datetime.now(UTC),
        )
        logger.info("Posted entry %s", entry.id)
        return self.db.get_entry(entry.id)

    def void_entry(
        self,
        entry: Entry,
        acting_user: str,
        reason: str,
        reversal_date: Optional[date] = None,
    ) -> tuple[Entry, Entry]:
        """Void a posted entry by booking a reversal.

        Marking the entry void, creating the reversal and posting it happen in
        one unit of work: either all three take effect or none does.

        Args:
            entry: Posted entry
            acting_user: User voiding the entry
            reason: Why the entry is voided
            reversal_date: Date of the reversal (defaults to today)

        Returns:
            (voided entry, posted reversal entry)

        Raises:
            NotPostedError: If the entry is not posted
            VoidReasonRequiredError: If the reason is blank
            ValidationError: If the reason is shorter than MIN_VOID_REASON_LENGTH
            ConcurrentModificationError: If the entry changed since it was read
            (plus any error raised while creating or posting the reversal)
        """
        if not entry.can_void:
            raise NotPostedError(entry.id)
        if reason is None or reason.strip() == "":
            raise VoidReasonRequiredError()
        if len(reason.strip()) < MIN_VOID_REASON_LENGTH:
            raise ValidationError(f"Void reason must be at least {MIN_VOID_REASON_LENGTH} characters")

        if reversal_date is None:
            reversal_date = self.period_policy.today()
        reversal_positions = [
            replace(p, amount=-p.amount) for p in _as_inputs(entry.positions)
        ]

        def mark_void(results):
            self.db.transition_entry(
                entry_id=entry.id,
                expected_status=EntryStatus.POSTED,
                expected_version=entry.version,
                new_status=EntryStatus.VOID,
                acting_user=acting_user,
                at=datetime.now(UTC),
                void_reason=reason.strip(),
            )

        def create_reversal(results):
            return self._create(
                reversal_date,
                REVERSAL_PREFIX + entry.description,
                reversal_positions,
                acting_user,
                entry.reference,
                reverses_entry_id=entry.id,
            )

        def post_reversal(results):
            return self.post_entry(results["create_reversal"], acting_user)

        def link(results):
            self.db.set_reversal_link(entry.id, results["post_reversal"].id)

        UnitOfWork(self.db).run(
            [
                ("mark_void", mark_void),
                ("create_reversal", create_reversal),
                ("post_reversal", post_reversal),
                ("link", link),
            ]
        )
        voided = self.db.get_entry(entry.id)
        reversal = self.db.get_entry(voided.reversal_entry_id)
        logger.info("Voided entry %s with reversal %s", entry.id, reversal.id)
        return voided, reversal

    def get_entry(self, entry_id: int) -> Optional[Entry]:
        return self.db.get_entry(entry_id)

    def require_entry(self, entry_id: int) -> Entry:
        """Get entry by ID or raise NotFoundError."""
        entry = self.db.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(entry_not_found(entry_id))
        return entry

    def list_entries(
        self,
        status: Optional[EntryStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_path: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Entry]:
        """List entries, newest first.

        Args:
            status: Only entries in this state
            start_date: Earliest booking date (inclusive)
            end_date: Latest booking date (inclusive)
            account_path: Only entries with a position on this account
            search: Substring of description or reference
            limit: Maximum number of entries

        Returns:
            List of entries
        """
        if account_path is not None:
            account_path = _normalize(account_path)
        return self.db.list_entries(
            status=status,
            start_date=start_date,
            end_date=end_date,
            account_path=account_path,
            search=search,
            limit=limit,
        )

    def list_positions_for_account(
        self,
        path: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        posted_only: bool = True,
    ) -> list[Position]:
        """List positions booked on an account in date order."""
        return self.db.list_positions(
            account_path=_normalize(path),
            start_date=start_date,
            end_date=end_date,
            status=EntryStatus.POSTED if posted_only else None,
        )

    def list_tax_relevant_positions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Position]:
        """List posted, tax-relevant positions in date order."""
        return self.db.list_positions(
            start_date=start_date,
            end_date=end_date,
            status=EntryStatus.POSTED,
            tax_relevant=True,
        )


def _normalize(path: str) -> str:
    return account_path.normalize(path)
