"""Shared domain error types.

Every failure the domain layer can produce is a subclass of ``DomainError``.
Each class carries a stable ``code`` so callers (the CLI, tests, any UI) can
branch on the kind of failure without parsing messages.
"""

from collections.abc import Iterable


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """

    code = "domain_error"


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    code = "validation_error"


class NotFoundError(DomainError):
    """Requested domain entity or path does not exist."""

    code = "not_found"


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""

    code = "conflict"


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""

    code = "dependency"


class StateError(DomainError):
    """Operation not allowed in the entity's current lifecycle state."""

    code = "invalid_state"


class InfrastructureError(DomainError):
    """Failure surfaced from the persistence layer."""

    code = "infrastructure"


# Amount errors


class CurrencyMismatchError(ValidationError):
    code = "currency_mismatch"

    def __init__(self, left: str, right: str, operation: str = "combine"):
        self.left = left
        self.right = right
        super().__init__(f"Cannot {operation} amounts in different currencies: {left} and {right}")


class InvalidAmountFormatError(ValidationError):
    code = "invalid_amount_format"

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Could not parse amount '{text}'")


# Account path errors


class EmptyPathError(ValidationError):
    code = "empty_path"

    def __init__(self):
        super().__init__("Account path must not be empty")


class ExceedsMaxDepthError(ValidationError):
    code = "exceeds_max_depth"

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Account path exceeds the maximum depth of {max_depth} levels")


class InvalidSegmentError(ValidationError):
    code = "invalid_segment"

    def __init__(self, segment: str):
        self.segment = segment
        if segment.strip() == "":
            message = "Account path contains an empty segment"
        else:
            message = f"Account path contains an invalid segment: '{segment}'"
        super().__init__(message)


# Entry errors


class InsufficientPositionsError(ValidationError):
    code = "insufficient_positions"

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"An entry needs at least two positions, got {count}")


class ExceedsMaxPositionsError(ValidationError):
    code = "exceeds_max_positions"

    def __init__(self, max_positions: int):
        self.max_positions = max_positions
        super().__init__(f"An entry may contain at most {max_positions} positions")


class EntryNotBalancedError(ValidationError):
    code = "entry_not_balanced"

    def __init__(self, imbalances: dict):
        # currency -> non-zero sum as Amount
        self.imbalances = imbalances
        details = ", ".join(str(amount) for amount in imbalances.values())
        super().__init__(f"Entry is not balanced (off by {details})")


class AccountsNotFoundOrInactiveError(ValidationError):
    code = "accounts_not_found_or_inactive"

    def __init__(self, paths: Iterable[str]):
        self.paths = tuple(paths)
        super().__init__(f"Accounts not found or inactive: {', '.join(self.paths)}")


class AccountsInactiveError(ValidationError):
    code = "accounts_inactive"

    def __init__(self, paths: Iterable[str]):
        self.paths = tuple(paths)
        super().__init__(f"Accounts are inactive: {', '.join(self.paths)}")


class InvalidDateError(ValidationError):
    code = "invalid_date"


class PeriodClosedError(ValidationError):
    code = "period_closed"

    def __init__(self, entry_date, closed_through):
        self.entry_date = entry_date
        self.closed_through = closed_through
        super().__init__(
            f"Booking period is closed: {entry_date} is on or before {closed_through}"
        )


class EntryNotEditableError(StateError):
    code = "entry_not_editable"

    def __init__(self, entry_id: int, status: str):
        self.entry_id = entry_id
        super().__init__(f"Entry {entry_id} is {status} and can no longer be edited")


class EntryNotDeletableError(StateError):
    code = "entry_not_deletable"

    def __init__(self, entry_id: int, status: str):
        self.entry_id = entry_id
        super().__init__(f"Entry {entry_id} is {status}; only drafts can be deleted, void it instead")


class AlreadyPostedError(StateError):
    code = "already_posted"

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"Entry {entry_id} has already been posted")


class NotPostedError(StateError):
    code = "not_posted"

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"Entry {entry_id} is not posted and cannot be voided")


class VoidReasonRequiredError(ValidationError):
    code = "void_reason_required"

    def __init__(self):
        super().__init__("A reason is required to void an entry")


# Template errors


class TotalAmountRequiredError(ValidationError):
    code = "total_amount_required"

    def __init__(self, template_name: str):
        self.template_name = template_name
        super().__init__(f"Template '{template_name}' needs a total amount")


# Infrastructure errors


class ConcurrentModificationError(InfrastructureError):
    code = "concurrent_modification"

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} was modified concurrently; reload and retry")


class PersistenceError(InfrastructureError):
    code = "persistence_error"


def account_not_found(path: str) -> str:
    """Return message for missing account."""
    return f"Account '{path}' not found"


def entry_not_found(entry_id: int) -> str:
    """Return message for missing entry."""
    return f"Entry {entry_id} not found"


def template_not_found(name: str, version: int | None = None) -> str:
    """Return message for missing template."""
    if version is None:
        return f"Template '{name}' not found"
    return f"Template '{name}' version {version} not found"


def account_delete_blocked(path: str, child_count: int, position_count: int) -> str:
    """Return message when account has child accounts or positions."""
    parts = []
    if child_count > 0:
        parts.append(f"{child_count} child account{'s' if child_count != 1 else ''}")
    if position_count > 0:
        parts.append(f"{position_count} position{'s' if position_count != 1 else ''}")
    return (
        f"Cannot delete account '{path}': it has {', '.join(parts)}. "
        "Deactivate it instead."
    )
