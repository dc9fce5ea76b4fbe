"""Template domain service.

Templates are reusable position patterns. They are immutable: a change is
recorded as a new version under the same name, and the only thing that can
be toggled on an existing version is whether it is active.
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Optional, Sequence

from ledgerbook.config import LedgerConfig
from ledgerbook.database.base import Database
from ledgerbook.domain import account_path
from ledgerbook.domain.amount import Amount
from ledgerbook.domain.entities import AmountType, PositionInput, Template, TemplateLineInput
from ledgerbook.domain.errors import (
    ConflictError,
    NotFoundError,
    StateError,
    TotalAmountRequiredError,
    ValidationError,
    template_not_found,
)

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 100
MAX_PERCENTAGE = Decimal("100")


def balance_positions(positions: list[PositionInput]) -> list[PositionInput]:
    """Make positions sum to zero per currency.

    The imbalance of each currency is subtracted from that currency's
    position with the largest absolute amount (first one on ties).
    """
    result = list(positions)
    currencies = list(dict.fromkeys(p.amount.currency for p in result))
    for currency in currencies:
        indexes = [i for i, p in enumerate(result) if p.amount.currency == currency]
        imbalance = Amount.sum((result[i].amount for i in indexes), currency)
        if imbalance.is_zero():
            continue
        largest = max(indexes, key=lambda i: (abs(result[i].amount.minor_units), -i))
        result[largest] = replace(result[largest], amount=result[largest].amount - imbalance)
    return result


class TemplateService:
    """Service for versioned entry templates."""

    def __init__(self, db: Database, config: Optional[LedgerConfig] = None):
        """Initialize template service.

        Args:
            db: Database instance
            config: Ledger configuration
        """
        self.db = db
        self.config = config or LedgerConfig()

    def _validate(self, name: str, lines: Sequence[TemplateLineInput]) -> list[TemplateLineInput]:
        """Validate name and lines, returning lines with normalized paths."""
        if name is None or not MIN_NAME_LENGTH <= len(name.strip()) <= MAX_NAME_LENGTH:
            raise ValidationError(
                f"Template name must be between {MIN_NAME_LENGTH} and {MAX_NAME_LENGTH} characters"
            )
        if len(lines) < 2:
            raise ValidationError("A template needs at least two lines")

        normalized = []
        for line in lines:
            account_path.validate(line.account_path, self.config.max_account_depth)
            amount_type = AmountType(line.amount_type)
            if amount_type == AmountType.PERCENTAGE and abs(Decimal(line.amount_value)) > MAX_PERCENTAGE:
                raise ValidationError(
                    f"Percentage for '{line.account_path}' must be between -100 and 100"
                )
            normalized.append(
                replace(
                    line,
                    account_path=account_path.normalize(line.account_path),
                    amount_type=amount_type,
                )
            )
        return normalized

    def create_template(
        self,
        name: str,
        lines: Sequence[TemplateLineInput],
        created_by: str,
        description: Optional[str] = None,
        default_total: Optional[Amount] = None,
    ) -> Template:
        """Create a template.

        A new name starts at version 1; an existing name gets the next version.

        Args:
            name: Template name (3-100 characters)
            lines: Template lines (at least two)
            created_by: User creating the template
            description: Optional description
            default_total: Total used when applying without one

        Returns:
            The created template version

        Raises:
            ValidationError: If name or lines are invalid
        """
        name = (name or "").strip()
        lines = self._validate(name, lines)
        latest = self.db.get_latest_template_version(name)
        version = 1 if latest is None else latest + 1
        return self._insert(name, version, lines, created_by, description, default_total)

    def create_new_version(
        self,
        template: Template,
        lines: Sequence[TemplateLineInput],
        created_by: str,
        description: Optional[str] = None,
        default_total: Optional[Amount] = None,
    ) -> Template:
        """Create the version following an existing template.

        The name is taken from template and the version is template.version + 1,
        so branching from an old version conflicts with the newer one.

        Raises:
            ValidationError: If lines are invalid
            ConflictError: If that version already exists
        """
        lines = self._validate(template.name, lines)
        version = template.version + 1
        if self.db.get_template_version(template.name, version) is not None:
            raise ConflictError(f"Template '{template.name}' version {version} already exists")
        return self._insert(template.name, version, lines, created_by, description, default_total)

    def _insert(self, name, version, lines, created_by, description, default_total) -> Template:
        template_id = self.db.create_template(
            name=name,
            version=version,
            created_by=created_by,
            lines=lines,
            description=description,
            default_total=default_total,
        )
        logger.info("Created template %s version %s", name, version)
        return self.db.get_template(template_id)

    def set_template_active(self, template: Template, active: bool) -> Template:
        """Activate or deactivate a template version."""
        self.db.set_template_active(template.id, active)
        logger.info("Set template %s version %s active=%s", template.name, template.version, active)
        return self.db.get_template(template.id)

    def get_template(self, name: str, version: int) -> Optional[Template]:
        return self.db.get_template_version(name, version)

    def get_latest_template(self, name: str) -> Optional[Template]:
        """Get the highest version of a template, or None."""
        latest = self.db.get_latest_template_version(name)
        if latest is None:
            return None
        return self.db.get_template_version(name, latest)

    def require_template(self, name: str, version: Optional[int] = None) -> Template:
        """Get a template version (latest if version is None) or raise NotFoundError."""
        if version is None:
            template = self.get_latest_template(name)
        else:
            template = self.get_template(name, version)
        if template is None:
            raise NotFoundError(template_not_found(name, version))
        return template

    def list_template_versions(self, name: str) -> list[Template]:
        """List all versions of a template, newest first."""
        return self.db.list_templates(name=name)

    def list_templates(self, include_all_versions: bool = False, active_only: bool = False) -> list[Template]:
        """List templates ordered by name.

        Args:
            include_all_versions: If False, only the latest version of each name
            active_only: If True, skip inactive versions

        Returns:
            List of templates
        """
        templates = self.db.list_templates(active_only=active_only)
        if include_all_versions:
            return templates
        latest: dict[str, int] = {}
        for template in self.db.list_templates():
            latest[template.name] = max(latest.get(template.name, 0), template.version)
        return [t for t in templates if t.version == latest[t.name]]

    def _require_active(self, template: Template) -> None:
        if not template.active:
            raise StateError(f"Template '{template.name}' version {template.version} is inactive")

    def apply_template(
        self,
        template: Template,
        total: Optional[Amount] = None,
        entry_attrs: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Expand a template into arguments for EntryService.create_entry.

        Fixed lines use their value as-is; percentage lines take their share
        of the total (total, else the template's default total), rounded
        half-to-even. Positions that do not balance are corrected on the
        largest one. Nothing is booked.

        Args:
            template: Template version to apply
            total: Total amount for percentage lines
            entry_attrs: Extra entry arguments (date, description, ...)

        Returns:
            entry_attrs plus a "positions" list of PositionInput

        Raises:
            TotalAmountRequiredError: If a percentage line has no total to use
            StateError: If the template is inactive
        """
        self._require_active(template)
        effective_total = total if total is not None else template.default_total
        if template.has_percentage_lines and effective_total is None:
            raise TotalAmountRequiredError(template.name)

        currency = effective_total.currency if effective_total is not None else self.config.default_currency
        positions = []
        for line in template.lines:
            if line.amount_type == AmountType.PERCENTAGE:
                amount = effective_total.multiply(line.amount_value / Decimal(100))
            else:
                amount = Amount.from_decimal(line.amount_value, currency)
            positions.append(self._position(line, amount))

        return dict(entry_attrs or {}, positions=balance_positions(positions))

    def apply_template_with_fractions(
        self,
        template: Template,
        total: Optional[Amount],
        entry_attrs: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Expand a template by splitting total according to line fractions.

        Unlike apply_template there is no fallback to the default total.

        Raises:
            TotalAmountRequiredError: If total is None
            StateError: If the template is inactive
        """
        self._require_active(template)
        if total is None:
            raise TotalAmountRequiredError(template.name)
        positions = [self._position(line, total.multiply(line.fraction)) for line in template.lines]
        return dict(entry_attrs or {}, positions=balance_positions(positions))

    @staticmethod
    def _position(line, amount: Amount) -> PositionInput:
        return PositionInput(
            account_path=line.account_path,
            amount=amount,
            description=line.description,
            tax_relevant=line.tax_relevant,
            order=line.position,
        )
