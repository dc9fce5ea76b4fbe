"""Domain layer for ledgerbook.

Services are imported lazily: the database layer imports the domain value
types, and the services import the database layer.
"""

_SERVICES = {
    "AccountService": "ledgerbook.domain.account",
    "EntryService": "ledgerbook.domain.entry",
    "DatePolicy": "ledgerbook.domain.entry",
    "BalanceService": "ledgerbook.domain.balance",
    "TemplateService": "ledgerbook.domain.template",
    "PeriodService": "ledgerbook.domain.period",
    "UnitOfWork": "ledgerbook.domain.unit_of_work",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
