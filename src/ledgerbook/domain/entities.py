"""Domain model entities for ledgerbook.

These are pure data classes representing business concepts, independent of
database schema. Services receive and return these; the database layer maps
them to and from its ORM rows.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from ledgerbook.domain.amount import Amount


class EntryStatus(str, Enum):
    """Lifecycle states of an entry: draft -> posted -> void."""

    DRAFT = "draft"
    POSTED = "posted"
    VOID = "void"


class AmountType(str, Enum):
    """How a template line's value is turned into an amount."""

    FIXED = "fixed"
    PERCENTAGE = "percentage"


@dataclass(frozen=True)
class Account:
    """Account in the hierarchical chart of accounts."""

    id: int
    path: str
    name: str
    description: Optional[str]
    parent_path: Optional[str]
    depth: int
    active: bool
    created_by: str
    created_at: datetime


@dataclass(frozen=True)
class AccountTreeNode:
    """Account with its nested children, for tree displays."""

    account: Account
    children: tuple["AccountTreeNode", ...] = ()


@dataclass(frozen=True)
class AccountResolution:
    """Result of resolving a set of account paths."""

    found: tuple[Account, ...]
    missing: tuple[str, ...]


@dataclass(frozen=True)
class PositionInput:
    """Position data used to create or update an entry."""

    account_path: str
    amount: Amount
    description: Optional[str] = None
    tax_relevant: bool = False
    order: Optional[int] = None


@dataclass(frozen=True)
class Position:
    """One account/amount line of an entry."""

    id: int
    entry_id: int
    account_path: str
    amount: Amount
    description: Optional[str]
    tax_relevant: bool
    order: int


@dataclass(frozen=True)
class Entry:
    """Dated, balanced bookkeeping record."""

    id: int
    date: date
    description: str
    reference: Optional[str]
    status: EntryStatus
    positions: tuple[Position, ...]
    created_by: str
    created_at: datetime
    version: int = 1
    posted_by: Optional[str] = None
    posted_at: Optional[datetime] = None
    voided_by: Optional[str] = None
    voided_at: Optional[datetime] = None
    void_reason: Optional[str] = None
    reverses_entry_id: Optional[int] = None
    reversal_entry_id: Optional[int] = None

    @property
    def is_editable(self) -> bool:
        return self.status == EntryStatus.DRAFT

    @property
    def can_post(self) -> bool:
        return self.status == EntryStatus.DRAFT

    @property
    def can_void(self) -> bool:
        return self.status == EntryStatus.POSTED

    def totals_by_currency(self) -> dict[str, Amount]:
        """Sum of positive positions per currency (the entry's volume)."""
        totals: dict[str, Amount] = {}
        for position in self.positions:
            if position.amount.is_positive():
                current = totals.get(position.amount.currency, Amount.zero(position.amount.currency))
                totals[position.amount.currency] = current + position.amount
        return totals

    def display(self) -> str:
        reference = f" ({self.reference})" if self.reference else ""
        return f"{self.date.isoformat()} - {self.description}{reference}"


@dataclass(frozen=True)
class TemplateLineInput:
    """Line data used to create a template version."""

    account_path: str
    amount_type: AmountType = AmountType.FIXED
    amount_value: Decimal = Decimal("0")
    fraction: Decimal = Decimal("1")
    description: Optional[str] = None
    tax_relevant: bool = False
    position: Optional[int] = None


@dataclass(frozen=True)
class TemplateLine:
    """Line of a stored template version."""

    id: int
    template_id: int
    account_path: str
    description: Optional[str]
    amount_type: AmountType
    amount_value: Decimal
    fraction: Decimal
    tax_relevant: bool
    position: int


@dataclass(frozen=True)
class Template:
    """Immutable, versioned pattern of positions identified by (name, version)."""

    id: int
    name: str
    version: int
    description: Optional[str]
    default_total: Optional[Amount]
    active: bool
    created_by: str
    created_at: datetime
    lines: tuple[TemplateLine, ...] = field(default_factory=tuple)

    @property
    def has_percentage_lines(self) -> bool:
        return any(line.amount_type == AmountType.PERCENTAGE for line in self.lines)


@dataclass(frozen=True)
class TrialBalanceRow:
    """Net balance of one account (in one currency) as of a date."""

    account_path: str
    debit: Amount
    credit: Amount
    balance: Amount


@dataclass(frozen=True)
class PeriodClosing:
    """Record that the books are closed up to and including a date."""

    id: int
    closed_through: date
    closed_by: str
    closed_at: datetime
