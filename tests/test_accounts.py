"""Tests for the account service."""

import pytest

from ledgerbook.config import LedgerConfig
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.entities import Account
from ledgerbook.domain.errors import (
    ConflictError,
    DependencyError,
    ExceedsMaxDepthError,
    InvalidSegmentError,
    NotFoundError,
    ValidationError,
)

from conftest import GIROKONTO, MATERIAL


def test_create_account_normalizes_path(account_service):
    account_service.create_account("Ausgaben", created_by="tester")
    account = account_service.create_account("Ausgaben:Büro", created_by="tester", description="Office")

    assert isinstance(account, Account)
    assert account.path == "Ausgaben : Büro"
    assert account.name == "Büro"
    assert account.parent_path == "Ausgaben"
    assert account.depth == 2
    assert account.active
    assert account.description == "Office"
    assert account.created_by == "tester"


def test_create_account_requires_parent(account_service):
    with pytest.raises(NotFoundError):
        account_service.create_account("Ausgaben : Büro", created_by="tester")


def test_create_account_rejects_inactive_parent(account_service):
    account_service.create_account("Ausgaben", created_by="tester")
    account_service.deactivate_account("Ausgaben")
    with pytest.raises(ValidationError):
        account_service.create_account("Ausgaben : Büro", created_by="tester")


def test_create_account_duplicate(account_service):
    account_service.create_account("Ausgaben", created_by="tester")
    with pytest.raises(ConflictError) as excinfo:
        account_service.create_account(" Ausgaben ", created_by="tester")
    assert "already exists" in str(excinfo.value)


def test_create_account_invalid_paths(account_service):
    with pytest.raises(InvalidSegmentError):
        account_service.create_account("Ausgaben::Büro", created_by="tester")


def test_create_account_respects_configured_depth(temp_db):
    service = AccountService(temp_db, LedgerConfig(max_account_depth=2))
    service.create_account("A", created_by="tester")
    service.create_account("A : B", created_by="tester")
    with pytest.raises(ExceedsMaxDepthError) as excinfo:
        service.create_account("A : B : C", created_by="tester")
    assert excinfo.value.max_depth == 2


def test_hierarchy_queries(account_service, sample_accounts):
    children = account_service.list_children("Ausgaben")
    assert [acc.path for acc in children] == ["Ausgaben : Büro", "Ausgaben : Reisen"]

    roots = account_service.list_children(None)
    assert [acc.path for acc in roots] == ["Ausgaben", "Einnahmen", "Verbindlichkeiten", "Vermögen"]

    descendants = account_service.list_descendants("Ausgaben")
    assert [acc.path for acc in descendants] == [
        "Ausgaben : Büro",
        "Ausgaben : Büro : Material",
        "Ausgaben : Reisen",
    ]

    ancestors = account_service.list_ancestors(MATERIAL)
    assert [acc.path for acc in ancestors] == ["Ausgaben", "Ausgaben : Büro"]

    siblings = account_service.list_siblings("Ausgaben : Büro")
    assert [acc.path for acc in siblings] == ["Ausgaben : Reisen"]


def test_build_account_tree(account_service, sample_accounts):
    tree = account_service.build_account_tree()
    assert [node.account.path for node in tree] == ["Ausgaben", "Einnahmen", "Verbindlichkeiten", "Vermögen"]

    ausgaben = tree[0]
    assert [child.account.name for child in ausgaben.children] == ["Büro", "Reisen"]
    assert ausgaben.children[0].children[0].account.path == MATERIAL


def test_lookup_contract(account_service, sample_accounts):
    assert account_service.exists("Ausgaben:Büro")
    assert not account_service.exists("Ausgaben : Unbekannt")
    assert account_service.is_active(GIROKONTO)

    resolution = account_service.resolve([MATERIAL, "Nirgendwo", "Ausgaben:Büro:Material"])
    assert [acc.path for acc in resolution.found] == [MATERIAL]
    assert resolution.missing == ("Nirgendwo",)


class TestDeactivation:
    """Tests for deactivating and reactivating accounts."""

    def test_deactivate_leaf(self, account_service, sample_accounts):
        account_service.deactivate_account("Ausgaben : Reisen")
        assert not account_service.is_active("Ausgaben : Reisen")
        assert "Ausgaben : Reisen" not in [acc.path for acc in account_service.list_accounts(active=True)]

    def test_deactivate_with_active_children(self, account_service, sample_accounts):
        with pytest.raises(DependencyError):
            account_service.deactivate_account("Ausgaben : Büro")

    def test_deactivate_with_recent_positions(self, account_service, make_entry):
        make_entry(post=True)
        with pytest.raises(DependencyError) as excinfo:
            account_service.deactivate_account(MATERIAL)
        assert "posted positions" in str(excinfo.value)

    def test_deactivate_with_old_positions(self, account_service, make_entry):
        make_entry(post=True, days_ago=60)
        account_service.deactivate_account(MATERIAL)
        assert not account_service.is_active(MATERIAL)

    def test_drafts_do_not_block_deactivation(self, account_service, make_entry):
        make_entry()
        account_service.deactivate_account(MATERIAL)
        assert not account_service.is_active(MATERIAL)

    def test_reactivate_requires_active_ancestors(self, account_service, sample_accounts):
        account_service.deactivate_account(MATERIAL)
        account_service.deactivate_account("Ausgaben : Büro")
        with pytest.raises(DependencyError):
            account_service.reactivate_account(MATERIAL)

        account_service.reactivate_account("Ausgaben : Büro")
        account_service.reactivate_account(MATERIAL)
        assert account_service.is_active(MATERIAL)

    def test_deactivate_unknown_account(self, account_service):
        with pytest.raises(NotFoundError):
            account_service.deactivate_account("Nirgendwo")


class TestDeletion:
    """Tests for deleting accounts."""

    def test_delete_leaf(self, account_service, sample_accounts):
        account_service.delete_account("Ausgaben : Reisen")
        assert not account_service.exists("Ausgaben : Reisen")

    def test_delete_with_children(self, account_service, sample_accounts):
        with pytest.raises(DependencyError) as excinfo:
            account_service.delete_account("Ausgaben")
        assert "child account" in str(excinfo.value)

    def test_delete_with_positions(self, account_service, make_entry):
        make_entry()
        with pytest.raises(DependencyError) as excinfo:
            account_service.delete_account(MATERIAL)
        assert "1 position" in str(excinfo.value)
