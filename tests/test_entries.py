"""Tests for the entry lifecycle: create, update, post, void, delete."""

from datetime import date, timedelta

import pytest

from ledgerbook.config import LedgerConfig
from ledgerbook.domain.amount import Amount
from ledgerbook.domain.entities import EntryStatus, PositionInput
from ledgerbook.domain.entry import DatePolicy, EntryService
from ledgerbook.domain.errors import (
    AccountsInactiveError,
    AccountsNotFoundOrInactiveError,
    AlreadyPostedError,
    ConcurrentModificationError,
    EntryNotBalancedError,
    EntryNotDeletableError,
    EntryNotEditableError,
    ExceedsMaxPositionsError,
    InsufficientPositionsError,
    InvalidDateError,
    NotPostedError,
    PeriodClosedError,
    PersistenceError,
    ValidationError,
    VoidReasonRequiredError,
)

from conftest import GIROKONTO, MATERIAL, positions


class TestCreate:
    """Tests for creating draft entries."""

    def test_create_draft(self, entry_service, sample_accounts):
        entry = entry_service.create_entry(
            date=date.today(),
            description="Druckerpapier",
            positions=positions(("Ausgaben:Büro:Material", "12,50"), (GIROKONTO, "-12,50")),
            created_by="tester",
            reference="R-1",
        )

        assert entry.status == EntryStatus.DRAFT
        assert entry.version == 1
        assert entry.reference == "R-1"
        assert [p.account_path for p in entry.positions] == [MATERIAL, GIROKONTO]
        assert [p.order for p in entry.positions] == [1, 2]
        assert entry.positions[0].amount == Amount.parse("12,50")
        assert entry.totals_by_currency() == {"EUR": Amount.parse("12,50")}

    def test_unknown_and_inactive_accounts(self, entry_service, account_service, sample_accounts):
        account_service.deactivate_account("Ausgaben : Reisen")
        with pytest.raises(AccountsNotFoundOrInactiveError) as excinfo:
            entry_service.create_entry(
                date=date.today(),
                description="Reise",
                positions=positions(("Ausgaben : Reisen", "10"), ("Nirgendwo", "-10")),
                created_by="tester",
            )
        assert excinfo.value.paths == ("Ausgaben : Reisen", "Nirgendwo")
        assert excinfo.value.code == "accounts_not_found_or_inactive"

    def test_unbalanced(self, entry_service, sample_accounts):
        with pytest.raises(EntryNotBalancedError) as excinfo:
            entry_service.create_entry(
                date=date.today(),
                description="Schief",
                positions=positions((MATERIAL, "10,00"), (GIROKONTO, "-9,99")),
                created_by="tester",
            )
        assert excinfo.value.imbalances == {"EUR": Amount.parse("0,01")}

    def test_balances_per_currency(self, entry_service, sample_accounts):
        mixed = [
            PositionInput(MATERIAL, Amount.from_decimal("10", "EUR")),
            PositionInput(GIROKONTO, Amount.from_decimal("-10", "USD")),
        ]
        with pytest.raises(EntryNotBalancedError) as excinfo:
            entry_service.create_entry(date.today(), "Gemischt", mixed, "tester")
        assert set(excinfo.value.imbalances) == {"EUR", "USD"}

    def test_insufficient_positions(self, entry_service, sample_accounts):
        with pytest.raises(InsufficientPositionsError):
            entry_service.create_entry(date.today(), "Eins", positions((MATERIAL, "0,01")), "tester")

    def test_too_many_positions(self, temp_db, sample_accounts):
        service = EntryService(temp_db, LedgerConfig(max_positions_per_entry=2))
        with pytest.raises(ExceedsMaxPositionsError):
            service.create_entry(
                date.today(),
                "Drei",
                positions((MATERIAL, "1"), (MATERIAL, "1"), (GIROKONTO, "-2")),
                "tester",
            )

    def test_zero_amount_rejected(self, entry_service, sample_accounts):
        with pytest.raises(ValidationError):
            entry_service.create_entry(
                date.today(),
                "Null",
                positions((MATERIAL, "0"), (GIROKONTO, "0"), (MATERIAL, "1"), (GIROKONTO, "-1")),
                "tester",
            )

    def test_blank_description(self, entry_service, sample_accounts):
        with pytest.raises(ValidationError):
            entry_service.create_entry(date.today(), "  ", positions((MATERIAL, "1"), (GIROKONTO, "-1")), "tester")

    def test_short_description(self, entry_service, sample_accounts):
        with pytest.raises(ValidationError):
            entry_service.create_entry(date.today(), "ab", positions((MATERIAL, "1"), (GIROKONTO, "-1")), "tester")

    def test_accounts_checked_before_balance(self, entry_service, sample_accounts):
        with pytest.raises(AccountsNotFoundOrInactiveError):
            entry_service.create_entry(date.today(), "Test", positions(("Nirgendwo", "1")), "tester")

    def test_nothing_written_on_failure(self, entry_service, sample_accounts):
        with pytest.raises(EntryNotBalancedError):
            entry_service.create_entry(date.today(), "Test", positions((MATERIAL, "1"), (GIROKONTO, "-2")), "tester")
        assert entry_service.list_entries() == []


class TestDatePolicy:
    """Tests for booking date rules."""

    def test_future_date(self, entry_service, sample_accounts):
        with pytest.raises(InvalidDateError):
            entry_service.create_entry(
                date.today() + timedelta(days=1),
                "Morgen",
                positions((MATERIAL, "1"), (GIROKONTO, "-1")),
                "tester",
            )

    def test_backdate_limit(self, entry_service, sample_accounts):
        with pytest.raises(InvalidDateError):
            entry_service.create_entry(
                date.today() - timedelta(days=366),
                "Alt",
                positions((MATERIAL, "1"), (GIROKONTO, "-1")),
                "tester",
            )

    def test_backdating_disabled(self):
        policy = DatePolicy(LedgerConfig(allow_backdated=False))
        policy.check(date.today())
        with pytest.raises(InvalidDateError):
            policy.check(date.today() - timedelta(days=1))

    def test_fixed_clock(self):
        policy = DatePolicy(LedgerConfig(max_backdate_days=10), today=lambda: date(2024, 6, 30))
        policy.check(date(2024, 6, 20))
        with pytest.raises(InvalidDateError):
            policy.check(date(2024, 6, 19))
        with pytest.raises(InvalidDateError):
            policy.check(date(2024, 7, 1))

    def test_closed_period(self, entry_service, period_service, sample_accounts):
        period_service.close_period(date.today() - timedelta(days=5), "tester")
        with pytest.raises(PeriodClosedError) as excinfo:
            entry_service.create_entry(
                date.today() - timedelta(days=5),
                "Geschlossen",
                positions((MATERIAL, "1"), (GIROKONTO, "-1")),
                "tester",
            )
        assert excinfo.value.code == "period_closed"

    @pytest.mark.parametrize(
        "config, days_later",
        [
            (LedgerConfig(allow_backdated=False), 1),
            (LedgerConfig(max_backdate_days=10), 30),
        ],
    )
    def test_draft_stays_postable_as_days_pass(
        self, temp_db, account_service, period_service, sample_accounts, config, days_later
    ):
        clock = {"today": date(2026, 3, 2)}
        policy = DatePolicy(config, period_service, today=lambda: clock["today"])
        service = EntryService(temp_db, config, accounts=account_service, period_policy=policy)

        entry = service.create_entry(
            date(2026, 3, 2), "Druckerpapier", positions((MATERIAL, "5"), (GIROKONTO, "-5")), "tester"
        )
        clock["today"] = date(2026, 3, 2) + timedelta(days=days_later)

        assert service.post_entry(entry, "tester").status == EntryStatus.POSTED

    def test_post_rechecks_closed_period(self, temp_db, account_service, period_service, sample_accounts):
        policy = DatePolicy(LedgerConfig(), period_service, today=lambda: date(2026, 3, 2))
        service = EntryService(temp_db, LedgerConfig(), accounts=account_service, period_policy=policy)
        entry = service.create_entry(
            date(2026, 3, 2), "Druckerpapier", positions((MATERIAL, "5"), (GIROKONTO, "-5")), "tester"
        )
        period_service.close_period(date(2026, 3, 31), "chef")

        with pytest.raises(PeriodClosedError):
            service.post_entry(entry, "tester")


class TestUpdateAndDelete:
    """Tests for editing drafts."""

    def test_update_draft(self, entry_service, make_entry):
        entry = make_entry()
        updated = entry_service.update_entry(
            entry,
            description="Toner",
            positions=positions((MATERIAL, "80,00"), (GIROKONTO, "-80,00")),
        )

        assert updated.description == "Toner"
        assert updated.version == entry.version + 1
        assert updated.positions[0].amount == Amount.parse("80,00")
        assert len(updated.positions) == 2

    def test_update_revalidates(self, entry_service, make_entry):
        entry = make_entry()
        with pytest.raises(EntryNotBalancedError):
            entry_service.update_entry(entry, positions=positions((MATERIAL, "1"), (GIROKONTO, "-2")))

    def test_update_posted_entry(self, entry_service, make_entry):
        entry = make_entry(post=True)
        with pytest.raises(EntryNotEditableError):
            entry_service.update_entry(entry, description="Nein")

    def test_stale_update(self, entry_service, make_entry):
        entry = make_entry()
        entry_service.update_entry(entry, description="Erste Änderung")
        with pytest.raises(ConcurrentModificationError):
            entry_service.update_entry(entry, description="Zweite Änderung")

    def test_update_keeps_or_clears_reference(self, entry_service, make_entry):
        entry = make_entry(reference="RE-1")

        kept = entry_service.update_entry(entry, description="Toner")
        assert kept.reference == "RE-1"

        cleared = entry_service.update_entry(kept, reference=None)
        assert cleared.reference is None

    def test_delete_draft(self, entry_service, make_entry):
        entry = make_entry()
        entry_service.delete_entry(entry)
        assert entry_service.get_entry(entry.id) is None

    def test_delete_posted(self, entry_service, make_entry):
        entry = make_entry(post=True)
        with pytest.raises(EntryNotDeletableError):
            entry_service.delete_entry(entry)


class TestPost:
    """Tests for posting."""

    def test_post(self, entry_service, make_entry):
        entry = make_entry()
        posted = entry_service.post_entry(entry, "chef")

        assert posted.status == EntryStatus.POSTED
        assert posted.posted_by == "chef"
        assert posted.posted_at is not None
        assert posted.version == entry.version + 1

    def test_post_twice(self, entry_service, make_entry):
        posted = make_entry(post=True)
        with pytest.raises(AlreadyPostedError):
            entry_service.post_entry(posted, "chef")

    def test_post_with_deactivated_account(self, entry_service, account_service, make_entry):
        entry = make_entry()
        account_service.deactivate_account(MATERIAL)
        with pytest.raises(AccountsInactiveError) as excinfo:
            entry_service.post_entry(entry, "chef")
        assert excinfo.value.paths == (MATERIAL,)

    def test_post_after_period_closed(self, entry_service, period_service, make_entry):
        entry = make_entry(days_ago=3)
        period_service.close_period(date.today() - timedelta(days=1), "chef")
        with pytest.raises(PeriodClosedError):
            entry_service.post_entry(entry, "chef")

    def test_concurrent_post(self, entry_service, make_entry):
        entry = make_entry()
        stale = entry_service.get_entry(entry.id)
        entry_service.post_entry(entry, "first")
        with pytest.raises(ConcurrentModificationError):
            entry_service.post_entry(stale, "second")
        assert entry_service.get_entry(entry.id).posted_by == "first"


class TestVoid:
    """Tests for voiding with automatic reversal."""

    def test_void_creates_posted_reversal(self, entry_service, make_entry):
        original = make_entry(post=True, reference="R-7")
        voided, reversal = entry_service.void_entry(original, "chef", "duplicate")

        assert voided.status == EntryStatus.VOID
        assert voided.voided_by == "chef"
        assert voided.void_reason == "duplicate"
        assert voided.reversal_entry_id == reversal.id

        assert reversal.status == EntryStatus.POSTED
        assert reversal.description == "Storno: Druckerpapier"
        assert reversal.reference == "R-7"
        assert reversal.date == date.today()
        assert reversal.reverses_entry_id == original.id
        assert [p.account_path for p in reversal.positions] == [p.account_path for p in original.positions]
        assert [p.amount for p in reversal.positions] == [-p.amount for p in original.positions]

    def test_void_with_reversal_date(self, entry_service, make_entry):
        original = make_entry(post=True, days_ago=10)
        _, reversal = entry_service.void_entry(
            original, "chef", "falsch", reversal_date=date.today() - timedelta(days=2)
        )
        assert reversal.date == date.today() - timedelta(days=2)

    def test_void_requires_posted(self, entry_service, make_entry):
        with pytest.raises(NotPostedError):
            entry_service.void_entry(make_entry(), "chef", "duplicate")

    def test_void_twice(self, entry_service, make_entry):
        voided, _ = entry_service.void_entry(make_entry(post=True), "chef", "duplicate")
        with pytest.raises(NotPostedError):
            entry_service.void_entry(voided, "chef", "again")

    @pytest.mark.parametrize("reason", ["", "   "])
    def test_void_requires_reason(self, entry_service, make_entry, reason):
        with pytest.raises(VoidReasonRequiredError):
            entry_service.void_entry(make_entry(post=True), "chef", reason)

    def test_void_reason_too_short(self, entry_service, make_entry):
        entry = make_entry(post=True)
        with pytest.raises(ValidationError):
            entry_service.void_entry(entry, "chef", "oops")
        assert entry_service.get_entry(entry.id).status == EntryStatus.POSTED

    def test_void_rolls_back_on_failure(self, entry_service, temp_db, make_entry, monkeypatch):
        original = make_entry(post=True)

        def fail(*args, **kwargs):
            raise PersistenceError("disk full")

        monkeypatch.setattr(temp_db, "set_reversal_link", fail)
        with pytest.raises(PersistenceError):
            entry_service.void_entry(original, "chef", "duplicate")

        reloaded = entry_service.get_entry(original.id)
        assert reloaded.status == EntryStatus.POSTED
        assert reloaded.version == original.version
        assert [e.id for e in entry_service.list_entries()] == [original.id]

    def test_stale_void(self, entry_service, make_entry):
        original = make_entry(post=True)
        entry_service.void_entry(original, "first", "duplicate")
        with pytest.raises(ConcurrentModificationError):
            entry_service.void_entry(original, "second", "duplicate")
        assert len(entry_service.list_entries()) == 2


class TestQueries:
    """Tests for listing entries and positions."""

    def test_list_entries_filters(self, entry_service, make_entry):
        old = make_entry(days_ago=20, description="Papier", reference="INV-1")
        new = make_entry(days_ago=1, description="Toner", post=True)

        assert [e.id for e in entry_service.list_entries()] == [new.id, old.id]
        assert [e.id for e in entry_service.list_entries(status=EntryStatus.DRAFT)] == [old.id]
        assert [e.id for e in entry_service.list_entries(start_date=date.today() - timedelta(days=5))] == [new.id]
        assert [e.id for e in entry_service.list_entries(search="inv-1")] == [old.id]
        assert [e.id for e in entry_service.list_entries(account_path="Ausgaben:Büro:Material")] == [new.id, old.id]
        assert entry_service.list_entries(account_path="Ausgaben : Reisen") == []

    def test_positions_for_account(self, entry_service, make_entry):
        make_entry(amount="5,00", post=True)
        make_entry(amount="7,00")

        posted = entry_service.list_positions_for_account(MATERIAL)
        assert [p.amount for p in posted] == [Amount.parse("5,00")]
        everything = entry_service.list_positions_for_account(MATERIAL, posted_only=False)
        assert len(everything) == 2

    def test_tax_relevant_positions(self, entry_service, sample_accounts):
        entry = entry_service.create_entry(
            date.today(),
            "Honorar",
            [
                PositionInput(GIROKONTO, Amount.parse("119,00")),
                PositionInput("Einnahmen : Honorare", Amount.parse("-100,00")),
                PositionInput("Verbindlichkeiten : Umsatzsteuer", Amount.parse("-19,00"), tax_relevant=True),
            ],
            "tester",
        )
        assert entry_service.list_tax_relevant_positions() == []

        entry_service.post_entry(entry, "tester")
        tax = entry_service.list_tax_relevant_positions()
        assert [p.account_path for p in tax] == ["Verbindlichkeiten : Umsatzsteuer"]
