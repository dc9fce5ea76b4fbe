"""Shared pytest fixtures for ledgerbook tests."""

import tempfile
import os
from datetime import date, timedelta
import pytest

from ledgerbook.config import LedgerConfig
from ledgerbook.database.factories import create_sqlite_database
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.amount import Amount
from ledgerbook.domain.balance import BalanceService
from ledgerbook.domain.entities import PositionInput
from ledgerbook.domain.entry import EntryService
from ledgerbook.domain.period import PeriodService
from ledgerbook.domain.template import TemplateService

SAMPLE_CHART = [
    "Ausgaben",
    "Ausgaben : Büro",
    "Ausgaben : Büro : Material",
    "Ausgaben : Reisen",
    "Einnahmen",
    "Einnahmen : Honorare",
    "Vermögen",
    "Vermögen : Bank",
    "Vermögen : Bank : Girokonto",
    "Verbindlichkeiten",
    "Verbindlichkeiten : Umsatzsteuer",
]

MATERIAL = "Ausgaben : Büro : Material"
GIROKONTO = "Vermögen : Bank : Girokonto"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def config():
    """Default ledger configuration."""
    return LedgerConfig()


@pytest.fixture
def account_service(temp_db, config):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db, config)


@pytest.fixture
def entry_service(temp_db, config, account_service):
    """Create an EntryService with a temporary database."""
    return EntryService(temp_db, config, accounts=account_service)


@pytest.fixture
def balance_service(temp_db):
    """Create a BalanceService with a temporary database."""
    return BalanceService(temp_db)


@pytest.fixture
def template_service(temp_db, config):
    """Create a TemplateService with a temporary database."""
    return TemplateService(temp_db, config)


@pytest.fixture
def period_service(temp_db):
    """Create a PeriodService with a temporary database."""
    return PeriodService(temp_db)


@pytest.fixture
def sample_accounts(account_service):
    """Create a small German chart of accounts."""
    return [account_service.create_account(path, created_by="tester") for path in SAMPLE_CHART]


def positions(*pairs):
    """Build position inputs from (path, "amount") pairs."""
    return [PositionInput(account_path=path, amount=Amount.parse(value)) for path, value in pairs]


@pytest.fixture
def make_entry(entry_service, sample_accounts):
    """Factory creating a balanced draft entry of material bought from the bank account."""

    def _make(amount="12,50", days_ago=0, description="Druckerpapier", post=False, reference=None):
        entry = entry_service.create_entry(
            date=date.today() - timedelta(days=days_ago),
            description=description,
            positions=positions((MATERIAL, amount), (GIROKONTO, f"-{amount}")),
            created_by="tester",
            reference=reference,
        )
        if post:
            entry = entry_service.post_entry(entry, "tester")
        return entry

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
