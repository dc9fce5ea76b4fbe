"""SQLAlchemy models for ledgerbook database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Boolean,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Account in the chart of accounts, identified by its normalized path."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    path = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    parent_path = Column(String, nullable=True, index=True)
    depth = Column(Integer, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Entry(Base):
    """Bookkeeping entry model."""

    __tablename__ = "entries"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    description = Column(String, nullable=False)
    reference = Column(String, nullable=True, index=True)
    status = Column(String, default="draft", nullable=False, index=True)
    # Bumped on every write; status transitions are conditional on it.
    version = Column(Integer, default=1, nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    posted_by = Column(String, nullable=True)
    posted_at = Column(DateTime, nullable=True)
    voided_by = Column(String, nullable=True)
    voided_at = Column(DateTime, nullable=True)
    void_reason = Column(String, nullable=True)
    reverses_entry_id = Column(Integer, ForeignKey("entries.id"), nullable=True)
    reversal_entry_id = Column(Integer, ForeignKey("entries.id"), nullable=True)

    # Relationships
    positions = relationship(
        "Position",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="Position.order",
    )


class Position(Base):
    """Position (entry line) model. Amounts are stored in minor units."""

    __tablename__ = "positions"

    id = Column(Integer, primary_key=True)
    entry_id = Column(Integer, ForeignKey("entries.id"), nullable=False, index=True)
    account_path = Column(String, ForeignKey("accounts.path"), nullable=False, index=True)
    amount_minor = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False)
    description = Column(String, nullable=True)
    tax_relevant = Column(Boolean, default=False, nullable=False)
    order = Column(Integer, nullable=False)

    __table_args__ = (UniqueConstraint("entry_id", "order", name="uq_position_entry_order"),)

    # Relationships
    entry = relationship("Entry", back_populates="positions")


class Template(Base):
    """Template version model. Rows are never updated except for active."""

    __tablename__ = "templates"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, index=True)
    version = Column(Integer, nullable=False, default=1)
    description = Column(String, nullable=True)
    default_total_minor = Column(Integer, nullable=True)
    default_total_currency = Column(String(3), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("name", "version", name="uq_template_name_version"),)

    # Relationships
    lines = relationship(
        "TemplateLine",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="TemplateLine.position",
    )


class TemplateLine(Base):
    """Template line model."""

    __tablename__ = "template_lines"

    id = Column(Integer, primary_key=True)
    template_id = Column(Integer, ForeignKey("templates.id"), nullable=False, index=True)
    account_path = Column(String, nullable=False)
    description = Column(String(200), nullable=True)
    amount_type = Column(String, default="fixed", nullable=False)
    # Decimal text, kept exact
    amount_value = Column(String, nullable=False)
    fraction = Column(String, nullable=False)
    tax_relevant = Column(Boolean, default=False, nullable=False)
    position = Column(Integer, nullable=False)

    # Relationships
    template = relationship("Template", back_populates="lines")


class PeriodClosing(Base):
    """Books closed up to and including closed_through."""

    __tablename__ = "period_closings"

    id = Column(Integer, primary_key=True)
    closed_through = Column(Date, nullable=False)
    closed_by = Column(String, nullable=False)
    closed_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
