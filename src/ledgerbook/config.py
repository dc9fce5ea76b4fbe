"""Ledger configuration.

Configuration is an explicit, read-only value handed to the services that need
it. Nothing in the domain layer reads the environment on its own.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ledgerbook.domain.errors import ValidationError

ENV_PREFIX = "LEDGERBOOK_"


@dataclass(frozen=True)
class LedgerConfig:
    """Limits and defaults for the ledger."""

    max_account_depth: int = 6
    max_positions_per_entry: int = 100
    allow_backdated: bool = True
    max_backdate_days: int = 365
    default_currency: str = "EUR"
    recent_transaction_days: int = 30

    def __post_init__(self):
        for name in (
            "max_account_depth",
            "max_positions_per_entry",
            "max_backdate_days",
            "recent_transaction_days",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValidationError(f"Configuration value {name} must be a non-negative integer")
        if self.max_account_depth < 1:
            raise ValidationError("Configuration value max_account_depth must be at least 1")
        if self.max_positions_per_entry < 2:
            raise ValidationError("Configuration value max_positions_per_entry must be at least 2")
        if len(self.default_currency) != 3:
            raise ValidationError("Configuration value default_currency must be a 3-letter code")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LedgerConfig":
        """Build a configuration from LEDGERBOOK_* environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            LedgerConfig with overrides applied to the defaults

        Raises:
            ValidationError: If a variable holds an unusable value
        """
        if environ is None:
            environ = os.environ

        overrides: dict = {}
        for name in ("max_account_depth", "max_positions_per_entry", "max_backdate_days", "recent_transaction_days"):
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is not None:
                try:
                    overrides[name] = int(raw)
                except ValueError:
                    raise ValidationError(f"{ENV_PREFIX}{name.upper()} must be an integer, got '{raw}'")

        raw = environ.get(ENV_PREFIX + "ALLOW_BACKDATED")
        if raw is not None:
            overrides["allow_backdated"] = _parse_bool(raw, ENV_PREFIX + "ALLOW_BACKDATED")

        raw = environ.get(ENV_PREFIX + "DEFAULT_CURRENCY")
        if raw is not None:
            overrides["default_currency"] = raw.strip().upper()

        return cls(**overrides)


def _parse_bool(raw: str, name: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValidationError(f"{name} must be a boolean, got '{raw}'")
