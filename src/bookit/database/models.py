"""SQLAlchemy models for bookit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class LedgerAccount(Base):
    """Chart of accounts model."""

    __tablename__ = "ledger_accounts"

    id = Column(Integer, primary_key=True)
    code = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    journal_lines = relationship("JournalLine", back_populates="account")


class Contact(Base):
    """Counterparty model."""

    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    relation_type = Column(String, nullable=False)
    iban = Column(String, nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    default_account_id = Column(Integer, ForeignKey("ledger_accounts.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    default_account = relationship("LedgerAccount")


class BankTransaction(Base):
    """Imported bank transaction model."""

    __tablename__ = "bank_transactions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String, nullable=False, default="")
    counterparty_name = Column(String, nullable=True)
    counterparty_account = Column(String, nullable=True)
    reference = Column(String, nullable=True)
    status = Column(String, nullable=False, default="Unmatched")
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    suggestion = Column(Text, nullable=True)
    confidence_score = Column(Integer, nullable=True)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    journal_entry = relationship("JournalEntry")


class JournalEntry(Base):
    """Journal entry model."""

    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    entry_date = Column(Date, nullable=False)
    description = Column(String, nullable=False, default="")
    reference = Column(String, nullable=True)
    kind = Column(String, nullable=False)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    lines = relationship(
        "JournalLine",
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.id",
    )


class JournalLine(Base):
    """Journal line model."""

    __tablename__ = "journal_lines"

    id = Column(Integer, primary_key=True)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    account_id = Column(Integer, ForeignKey("ledger_accounts.id"), nullable=False)
    debit = Column(Numeric(12, 2), nullable=False, default=0)
    credit = Column(Numeric(12, 2), nullable=False, default=0)
    memo = Column(String, nullable=True)

    # Relationships
    journal_entry = relationship("JournalEntry", back_populates="lines")
    account = relationship("LedgerAccount", back_populates="journal_lines")


class BankRule(Base):
    """Keyword to ledger account rule model."""

    __tablename__ = "bank_rules"

    id = Column(Integer, primary_key=True)
    keyword = Column(String, nullable=False)
    target_account_id = Column(Integer, ForeignKey("ledger_accounts.id"), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    target_account = relationship("LedgerAccount")


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Enforce foreign keys on SQLite connections."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
