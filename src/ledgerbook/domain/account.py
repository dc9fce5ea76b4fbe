"""Account domain service."""

import logging
from datetime import date, timedelta
from typing import Iterable, Optional

from ledgerbook.config import LedgerConfig
from ledgerbook.database.base import Database
from ledgerbook.domain import account_path
from ledgerbook.domain.entities import Account, AccountResolution, AccountTreeNode
from ledgerbook.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
)

logger = logging.getLogger(__name__)


class AccountService:
    """Service for managing the hierarchical chart of accounts."""

    def __init__(self, db: Database, config: Optional[LedgerConfig] = None):
        """Initialize account service.

        Args:
            db: Database instance
            config: Ledger configuration (defaults apply when omitted)
        """
        self.db = db
        self.config = config or LedgerConfig()

    def create_account(self, path: str, created_by: str, description: Optional[str] = None) -> Account:
        """Create a new account.

        Args:
            path: Account path, normalized before use (e.g. "Ausgaben:Büro")
            created_by: User creating the account
            description: Optional description

        Returns:
            Created account

        Raises:
            ValidationError: If the path is invalid or the parent is inactive
            ConflictError: If the account already exists
            NotFoundError: If the parent account does not exist
        """
        account_path.validate(path, self.config.max_account_depth)
        normalized = account_path.normalize(path)

        if self.db.get_account_by_path(normalized) is not None:
            raise ConflictError(f"Account '{normalized}' already exists")

        parent_path = account_path.parent(normalized)
        if parent_path is not None:
            parent = self.db.get_account_by_path(parent_path)
            if parent is None:
                raise NotFoundError(f"Parent account '{parent_path}' not found")
            if not parent.active:
                raise ValidationError(f"Parent account '{parent_path}' is inactive")

        self.db.create_account(
            path=normalized,
            name=account_path.leaf(normalized),
            parent_path=parent_path,
            depth=account_path.depth(normalized),
            created_by=created_by,
            description=description,
        )
        logger.info("Created account %s", normalized)
        return self.db.get_account_by_path(normalized)

    def get_account_by_path(self, path: str) -> Optional[Account]:
        """Get account by path (normalized before lookup)."""
        return self.db.get_account_by_path(account_path.normalize(path))

    def require_account(self, path: str) -> Account:
        """Get account by path or raise NotFoundError."""
        account = self.get_account_by_path(path)
        if account is None:
            raise NotFoundError(account_not_found(account_path.normalize(path)))
        return account

    def list_accounts(self, active: Optional[bool] = None) -> list[Account]:
        """List accounts ordered by path.

        Args:
            active: If given, only accounts with this active flag

        Returns:
            List of accounts
        """
        return self.db.list_accounts(active=active)

    def list_children(self, path: Optional[str], active: Optional[bool] = None) -> list[Account]:
        """List direct children of an account, or the root accounts for None."""
        parent_path = account_path.normalize(path) if path is not None else None
        return self.db.list_child_accounts(parent_path, active=active)

    def list_descendants(self, path: str, active: Optional[bool] = None) -> list[Account]:
        return self.db.list_descendant_accounts(account_path.normalize(path), active=active)

    def list_ancestors(self, path: str) -> list[Account]:
        """List the existing ancestors of an account, root first."""
        paths = account_path.ancestors_without_self(path)
        found = {acc.path: acc for acc in self.db.get_accounts_by_paths(paths)}
        return [found[p] for p in paths if p in found]

    def list_siblings(self, path: str, active: Optional[bool] = None) -> list[Account]:
        normalized = account_path.normalize(path)
        siblings = self.db.list_child_accounts(account_path.parent(normalized), active=active)
        return [acc for acc in siblings if acc.path != normalized]

    def build_account_tree(self, active: Optional[bool] = None) -> list[AccountTreeNode]:
        """Build the account hierarchy as nested nodes.

        Accounts whose parent is filtered out are treated as roots.

        Args:
            active: If given, only accounts with this active flag

        Returns:
            Root nodes ordered by path
        """
        accounts = self.db.list_accounts(active=active)
        children_map: dict[Optional[str], list[Account]] = {}
        known = {acc.path for acc in accounts}
        for acc in accounts:
            parent_key = acc.parent_path if acc.parent_path in known else None
            children_map.setdefault(parent_key, []).append(acc)

        def build(acc: Account) -> AccountTreeNode:
            return AccountTreeNode(
                account=acc,
                children=tuple(build(child) for child in children_map.get(acc.path, [])),
            )

        return [build(acc) for acc in children_map.get(None, [])]

    def deactivate_account(self, path: str) -> None:
        """Deactivate an account.

        Args:
            path: Account path

        Raises:
            NotFoundError: If the account does not exist
            DependencyError: If it has active children or recent posted positions
        """
        account = self.require_account(path)
        if not account.active:
            return

        active_children = self.db.list_child_accounts(account.path, active=True)
        if active_children:
            logger.debug("Refused to deactivate %s: active children", account.path)
            raise DependencyError(
                f"Cannot deactivate account '{account.path}': it has "
                f"{len(active_children)} active child account{'s' if len(active_children) != 1 else ''}"
            )

        since = date.today() - timedelta(days=self.config.recent_transaction_days)
        recent = self.db.count_positions_for_account(account.path, since=since, posted_only=True)
        if recent > 0:
            logger.debug("Refused to deactivate %s: recent positions", account.path)
            raise DependencyError(
                f"Cannot deactivate account '{account.path}': it has posted positions "
                f"within the last {self.config.recent_transaction_days} days"
            )

        self.db.set_account_active(account.path, False)
        logger.info("Deactivated account %s", account.path)

    def reactivate_account(self, path: str) -> None:
        """Reactivate an account.

        Raises:
            NotFoundError: If the account does not exist
            DependencyError: If an ancestor account is inactive
        """
        account = self.require_account(path)
        inactive = [acc.path for acc in self.list_ancestors(account.path) if not acc.active]
        if inactive:
            raise DependencyError(
                f"Cannot reactivate account '{account.path}': inactive ancestor '{inactive[0]}'"
            )
        self.db.set_account_active(account.path, True)
        logger.info("Reactivated account %s", account.path)

    def update_description(self, path: str, description: Optional[str]) -> None:
        account = self.require_account(path)
        self.db.update_account_description(account.path, description)

    def delete_account(self, path: str) -> None:
        """Delete an account.

        Args:
            path: Account path

        Raises:
            NotFoundError: If the account does not exist
            DependencyError: If it has child accounts or positions
        """
        account = self.require_account(path)
        child_count = len(self.db.list_child_accounts(account.path))
        position_count = self.db.count_positions_for_account(account.path)
        if child_count > 0 or position_count > 0:
            raise DependencyError(account_delete_blocked(account.path, child_count, position_count))
        self.db.delete_account(account.path)
        logger.info("Deleted account %s", account.path)

    # Lookup contract used by the entry lifecycle

    def exists(self, path: str) -> bool:
        return self.get_account_by_path(path) is not None

    def is_active(self, path: str) -> bool:
        account = self.get_account_by_path(path)
        return account is not None and account.active

    def resolve(self, paths: Iterable[str]) -> AccountResolution:
        """Resolve paths to accounts.

        Args:
            paths: Account paths, normalized before lookup

        Returns:
            AccountResolution with found accounts and missing paths, both in
            first-seen order without duplicates
        """
        normalized = list(dict.fromkeys(account_path.normalize(p) for p in paths))
        found = {acc.path: acc for acc in self.db.get_accounts_by_paths(normalized)}
        return AccountResolution(
            found=tuple(found[p] for p in normalized if p in found),
            missing=tuple(p for p in normalized if p not in found),
        )
