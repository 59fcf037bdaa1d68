"""Move the ledger side of an already booked transaction to another account."""

from dataclasses import replace
from typing import Optional

import structlog

from bookit.database.base import Database
from bookit.domain.account import AccountService
from bookit.domain.entities import JournalEntry, JournalLine, LedgerAccount
from bookit.domain.errors import (
    AmbiguousPostingError,
    NotFoundError,
    ValidationError,
    transaction_not_booked,
    transaction_not_found,
)
from bookit.settings import BookingSettings

logger = structlog.get_logger(__name__)


class ReclassificationService:
    """Service for correcting the target account of booked transactions."""

    def __init__(self, db: Database, settings: Optional[BookingSettings] = None):
        self.db = db
        self.settings = settings or BookingSettings()
        self.accounts = AccountService(db, self.settings)

    def _linked_entry(self, transaction_id: int) -> JournalEntry:
        transaction = self.db.get_bank_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if not transaction.is_posted:
            raise ValidationError(transaction_not_booked(transaction_id))
        entry = self.db.get_journal_entry(transaction.journal_entry_id)
        if entry is None:
            raise NotFoundError(f"Journal entry {transaction.journal_entry_id} not found")
        return entry

    def non_cash_lines(self, entry: JournalEntry) -> list[JournalLine]:
        """Lines of an entry that don't post to a cash account."""
        lines = []
        for line in entry.lines:
            account = self.db.get_ledger_account(line.account_id)
            if account is None or not self.accounts.is_cash_account(account):
                lines.append(line)
        return lines

    def find_non_cash_line(self, entry: JournalEntry) -> JournalLine:
        """The single non-cash line of an entry.

        Raises:
            AmbiguousPostingError: If the entry has no or several non-cash lines
        """
        lines = self.non_cash_lines(entry)
        if len(lines) != 1:
            raise AmbiguousPostingError(
                f"Journal entry {entry.id} has {len(lines)} non-cash lines; "
                "cannot tell which one to reclassify"
            )
        return lines[0]

    def posted_account(self, transaction_id: int) -> Optional[LedgerAccount]:
        """Ledger account the transaction is booked against, if it can be told."""
        transaction = self.db.get_bank_transaction(transaction_id)
        if transaction is None or not transaction.is_posted:
            return None
        entry = self.db.get_journal_entry(transaction.journal_entry_id)
        if entry is None:
            return None
        lines = self.non_cash_lines(entry)
        if len(lines) != 1:
            return None
        return self.db.get_ledger_account(lines[0].account_id)

    def reclassify(self, transaction_id: int, new_account_id: int) -> None:
        """Point the non-cash line of a booked transaction at another account.

        Amounts are not touched, so the entry stays balanced.

        Args:
            transaction_id: Booked bank transaction
            new_account_id: Active ledger account to move the posting to

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If the transaction isn't booked or the account is
                unknown or inactive
            AmbiguousPostingError: If the non-cash line can't be identified
        """
        entry = self._linked_entry(transaction_id)
        new_account = self.accounts.require_active_account(new_account_id)
        line = self.find_non_cash_line(entry)

        if line.account_id == new_account.id:
            logger.info("reclassify_noop", transaction_id=transaction_id, account=new_account.code)
            return

        moved = tuple(
            replace(other, account_id=new_account.id) if other.id == line.id else other
            for other in entry.lines
        )
        if not replace(entry, lines=moved).is_balanced:
            raise ValidationError(f"Journal entry {entry.id} would become unbalanced")

        self.db.reassign_journal_line(line.id, new_account.id)
        logger.info(
            "transaction_reclassified",
            transaction_id=transaction_id,
            journal_entry_id=entry.id,
            old_account_id=line.account_id,
            new_account=new_account.code,
        )
