"""Account balances and trial balance."""

from datetime import date
from typing import Optional

from ledgerbook.database.base import Database
from ledgerbook.domain import account_path
from ledgerbook.domain.amount import Amount, DEFAULT_CURRENCY
from ledgerbook.domain.entities import EntryStatus, Position, TrialBalanceRow


class BalanceService:
    """Service for balance queries over posted entries."""

    def __init__(self, db: Database):
        """Initialize balance service.

        Args:
            db: Database instance
        """
        self.db = db

    def _posted_positions(self, as_of: date, path: Optional[str] = None) -> list[Position]:
        return self.db.list_positions(account_path=path, end_date=as_of, status=EntryStatus.POSTED)

    def balance_as_of(self, path: str, as_of: Optional[date] = None, currency: str = DEFAULT_CURRENCY) -> Amount:
        """Sum of an account's posted positions dated on or before as_of.

        Only entries in posted state count. A voided entry is no longer
        posted, while its reversal is.

        Args:
            path: Account path
            as_of: Cut-off date (inclusive), defaults to today
            currency: Currency to sum

        Returns:
            Balance in currency; zero if nothing was booked
        """
        as_of = as_of or date.today()
        positions = self._posted_positions(as_of, account_path.normalize(path))
        return Amount.sum((p.amount for p in positions if p.amount.currency == currency), currency)

    def balances_by_currency(self, path: str, as_of: Optional[date] = None) -> dict[str, Amount]:
        """Balance of an account per currency it was booked in."""
        as_of = as_of or date.today()
        balances: dict[str, Amount] = {}
        for position in self._posted_positions(as_of, account_path.normalize(path)):
            currency = position.amount.currency
            balances[currency] = balances.get(currency, Amount.zero(currency)) + position.amount
        return balances

    def trial_balance(self, as_of: Optional[date] = None) -> list[TrialBalanceRow]:
        """Build the trial balance as of a date.

        For every account and currency, positive positions add up to the
        debit total and negative ones to the credit total. Rows whose balance
        is zero are omitted; the rest are sorted by account path.

        Args:
            as_of: Cut-off date (inclusive), defaults to today

        Returns:
            List of trial balance rows
        """
        as_of = as_of or date.today()
        debits: dict[tuple[str, str], Amount] = {}
        credits: dict[tuple[str, str], Amount] = {}

        for position in self._posted_positions(as_of):
            key = (position.account_path, position.amount.currency)
            zero = Amount.zero(position.amount.currency)
            debits.setdefault(key, zero)
            credits.setdefault(key, zero)
            if position.amount.is_positive():
                debits[key] = debits[key] + position.amount
            else:
                credits[key] = credits[key] + position.amount.abs()

        rows = []
        for key in sorted(debits):
            balance = debits[key] - credits[key]
            if balance.is_zero():
                continue
            rows.append(
                TrialBalanceRow(
                    account_path=key[0],
                    debit=debits[key],
                    credit=credits[key],
                    balance=balance,
                )
            )
        return rows
