"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain entities stay stable
when the database schema changes.
"""

import json
from decimal import Decimal

from bookit.domain import entities as domain
from bookit.database.models import (
    LedgerAccount as ORMLedgerAccount,
    Contact as ORMContact,
    BankTransaction as ORMBankTransaction,
    JournalEntry as ORMJournalEntry,
    JournalLine as ORMJournalLine,
    BankRule as ORMBankRule,
)


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def ledger_account_to_domain(orm_account: ORMLedgerAccount) -> domain.LedgerAccount:
    """Convert SQLAlchemy LedgerAccount model to domain LedgerAccount entity."""
    return domain.LedgerAccount(
        id=orm_account.id,
        code=orm_account.code,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
    )


def contact_to_domain(orm_contact: ORMContact) -> domain.Contact:
    """Convert SQLAlchemy Contact model to domain Contact entity."""
    return domain.Contact(
        id=orm_contact.id,
        name=orm_contact.name,
        relation_type=domain.RelationType(orm_contact.relation_type),
        is_active=orm_contact.is_active,
        default_account_id=orm_contact.default_account_id,
        created_at=orm_contact.created_at,
        iban=orm_contact.iban,
    )


def bank_transaction_to_domain(orm_transaction: ORMBankTransaction) -> domain.BankTransaction:
    """Convert SQLAlchemy BankTransaction model to domain BankTransaction entity."""
    suggestion = None
    if orm_transaction.suggestion:
        suggestion = json.loads(orm_transaction.suggestion)
    return domain.BankTransaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        amount=_to_decimal(orm_transaction.amount),
        description=orm_transaction.description or "",
        counterparty_name=orm_transaction.counterparty_name,
        counterparty_account=orm_transaction.counterparty_account,
        reference=orm_transaction.reference,
        status=domain.TransactionStatus(orm_transaction.status),
        journal_entry_id=orm_transaction.journal_entry_id,
        suggestion=suggestion,
        confidence_score=orm_transaction.confidence_score,
        imported_at=orm_transaction.imported_at,
    )


def journal_line_to_domain(orm_line: ORMJournalLine) -> domain.JournalLine:
    """Convert SQLAlchemy JournalLine model to domain JournalLine entity."""
    return domain.JournalLine(
        id=orm_line.id,
        journal_entry_id=orm_line.journal_entry_id,
        account_id=orm_line.account_id,
        debit=_to_decimal(orm_line.debit),
        credit=_to_decimal(orm_line.credit),
        memo=orm_line.memo,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model (with lines) to domain JournalEntry entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        entry_date=orm_entry.entry_date,
        description=orm_entry.description or "",
        reference=orm_entry.reference,
        kind=domain.EntryKind(orm_entry.kind),
        contact_id=orm_entry.contact_id,
        created_at=orm_entry.created_at,
        lines=tuple(journal_line_to_domain(line) for line in orm_entry.lines),
    )


def bank_rule_to_domain(orm_rule: ORMBankRule) -> domain.BankRule:
    """Convert SQLAlchemy BankRule model to domain BankRule entity."""
    return domain.BankRule(
        id=orm_rule.id,
        keyword=orm_rule.keyword,
        target_account_id=orm_rule.target_account_id,
        created_at=orm_rule.created_at,
    )
