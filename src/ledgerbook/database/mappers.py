"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, in particular the split of an
Amount into (minor units, currency) columns.
"""

from decimal import Decimal

from ledgerbook.domain import entities as domain
from ledgerbook.domain.amount import Amount
from ledgerbook.database.models import (
    Account as ORMAccount,
    Entry as ORMEntry,
    Position as ORMPosition,
    Template as ORMTemplate,
    TemplateLine as ORMTemplateLine,
    PeriodClosing as ORMPeriodClosing,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        path=orm_account.path,
        name=orm_account.name,
        description=orm_account.description,
        parent_path=orm_account.parent_path,
        depth=orm_account.depth,
        active=orm_account.active,
        created_by=orm_account.created_by,
        created_at=orm_account.created_at,
    )


def position_to_domain(orm_position: ORMPosition) -> domain.Position:
    """Convert SQLAlchemy Position model to domain Position entity."""
    return domain.Position(
        id=orm_position.id,
        entry_id=orm_position.entry_id,
        account_path=orm_position.account_path,
        amount=Amount(orm_position.amount_minor, orm_position.currency),
        description=orm_position.description,
        tax_relevant=orm_position.tax_relevant,
        order=orm_position.order,
    )


def entry_to_domain(orm_entry: ORMEntry) -> domain.Entry:
    """Convert SQLAlchemy Entry model (with positions) to domain Entry entity."""
    return domain.Entry(
        id=orm_entry.id,
        date=orm_entry.date,
        description=orm_entry.description,
        reference=orm_entry.reference,
        status=domain.EntryStatus(orm_entry.status),
        positions=tuple(position_to_domain(p) for p in orm_entry.positions),
        created_by=orm_entry.created_by,
        created_at=orm_entry.created_at,
        version=orm_entry.version,
        posted_by=orm_entry.posted_by,
        posted_at=orm_entry.posted_at,
        voided_by=orm_entry.voided_by,
        voided_at=orm_entry.voided_at,
        void_reason=orm_entry.void_reason,
        reverses_entry_id=orm_entry.reverses_entry_id,
        reversal_entry_id=orm_entry.reversal_entry_id,
    )


def position_to_orm(position: domain.PositionInput, order: int) -> ORMPosition:
    """Build a SQLAlchemy Position row from position input."""
    return ORMPosition(
        account_path=position.account_path,
        amount_minor=position.amount.minor_units,
        currency=position.amount.currency,
        description=position.description,
        tax_relevant=position.tax_relevant,
        order=order,
    )


def template_line_to_domain(orm_line: ORMTemplateLine) -> domain.TemplateLine:
    """Convert SQLAlchemy TemplateLine model to domain TemplateLine entity."""
    return domain.TemplateLine(
        id=orm_line.id,
        template_id=orm_line.template_id,
        account_path=orm_line.account_path,
        description=orm_line.description,
        amount_type=domain.AmountType(orm_line.amount_type),
        amount_value=Decimal(orm_line.amount_value),
        fraction=Decimal(orm_line.fraction),
        tax_relevant=orm_line.tax_relevant,
        position=orm_line.position,
    )


def template_to_domain(orm_template: ORMTemplate) -> domain.Template:
    """Convert SQLAlchemy Template model (with lines) to domain Template entity."""
    default_total = None
    if orm_template.default_total_minor is not None:
        default_total = Amount(orm_template.default_total_minor, orm_template.default_total_currency)
    return domain.Template(
        id=orm_template.id,
        name=orm_template.name,
        version=orm_template.version,
        description=orm_template.description,
        default_total=default_total,
        active=orm_template.active,
        created_by=orm_template.created_by,
        created_at=orm_template.created_at,
        lines=tuple(template_line_to_domain(line) for line in orm_template.lines),
    )


def template_line_to_orm(line: domain.TemplateLineInput, position: int) -> ORMTemplateLine:
    """Build a SQLAlchemy TemplateLine row from line input."""
    return ORMTemplateLine(
        account_path=line.account_path,
        description=line.description,
        amount_type=domain.AmountType(line.amount_type).value,
        amount_value=str(line.amount_value),
        fraction=str(line.fraction),
        tax_relevant=line.tax_relevant,
        position=position,
    )


def period_closing_to_domain(orm_closing: ORMPeriodClosing) -> domain.PeriodClosing:
    """Convert SQLAlchemy PeriodClosing model to domain PeriodClosing entity."""
    return domain.PeriodClosing(
        id=orm_closing.id,
        closed_through=orm_closing.closed_through,
        closed_by=orm_closing.closed_by,
        closed_at=orm_closing.closed_at,
    )
