"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from bookit.domain.entities import (
    AccountType,
    BankRule,
    BankTransaction,
    Contact,
    EntryDraft,
    JournalEntry,
    LedgerAccount,
    RelationType,
    TransactionStatus,
)


class Database(ABC):
    """Abstract database interface for bookit."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Ledger account operations
    @abstractmethod
    def create_ledger_account(
        self, code: str, name: str, account_type: AccountType, is_active: bool = True
    ) -> int:
        """Create a ledger account. Returns account ID."""
        pass

    @abstractmethod
    def get_ledger_account(self, account_id: int) -> Optional[LedgerAccount]:
        """Get ledger account by ID."""
        pass

    @abstractmethod
    def get_ledger_account_by_code(self, code: str) -> Optional[LedgerAccount]:
        """Get ledger account by code."""
        pass

    @abstractmethod
    def list_ledger_accounts(self, active_only: bool = False) -> list[LedgerAccount]:
        """List ledger accounts."""
        pass

    # Contact operations
    @abstractmethod
    def create_contact(
        self,
        name: str,
        relation_type: RelationType,
        default_account_id: Optional[int] = None,
        is_active: bool = True,
        iban: Optional[str] = None,
    ) -> int:
        """Create a contact. Returns contact ID."""
        pass

    @abstractmethod
    def get_contact(self, contact_id: int) -> Optional[Contact]:
        """Get contact by ID."""
        pass

    @abstractmethod
    def get_contact_by_iban(self, iban: str) -> Optional[Contact]:
        """Get the oldest active contact with this (normalized) IBAN."""
        pass

    @abstractmethod
    def list_contacts(self, active_only: bool = False) -> list[Contact]:
        """List contacts ordered by name."""
        pass

    @abstractmethod
    def update_contact_default_account(self, contact_id: int, account_id: Optional[int]) -> None:
        """Set or clear the default ledger account of a contact."""
        pass

    # Bank transaction operations
    @abstractmethod
    def create_bank_transaction(
        self,
        date: date,
        amount: Decimal,
        description: str,
        counterparty_name: Optional[str] = None,
        counterparty_account: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> int:
        """Create an unmatched bank transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_bank_transaction(self, transaction_id: int) -> Optional[BankTransaction]:
        """Get bank transaction by ID."""
        pass

    @abstractmethod
    def list_bank_transactions(
        self, status: Optional[TransactionStatus] = None
    ) -> list[BankTransaction]:
        """List bank transactions ordered by date and ID, optionally filtered by status."""
        pass

    @abstractmethod
    def update_transaction_suggestion(
        self, transaction_id: int, suggestion: Optional[dict[str, Any]], score: Optional[int]
    ) -> None:
        """Store the classification suggestion payload and score."""
        pass

    # Journal operations
    @abstractmethod
    def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry with its lines."""
        pass

    @abstractmethod
    def list_journal_entries(self) -> list[JournalEntry]:
        """List all journal entries with their lines, oldest first."""
        pass

    @abstractmethod
    def post_booking(
        self,
        transaction_id: int,
        entries: Sequence[EntryDraft],
        link_index: int,
        default_account: Optional[tuple[int, int]] = None,
        rule: Optional[tuple[str, int]] = None,
    ) -> list[int]:
        """Write a booking as one unit.

        Inserts the journal entries with their lines, marks the transaction
        Booked, links it to ``entries[link_index]``, and optionally updates a
        contact's default account (``(contact_id, account_id)``) and creates a
        bank rule (``(keyword, account_id)``). Either everything is written or
        nothing is.

        Returns:
            IDs of the created journal entries, in the order given

        Raises:
            ConflictError: If the transaction was booked concurrently
            StorageError: If the database rejects the write
        """
        pass

    @abstractmethod
    def reassign_journal_line(self, line_id: int, account_id: int) -> None:
        """Point a journal line at another ledger account."""
        pass

    # Bank rule operations
    @abstractmethod
    def create_bank_rule(self, keyword: str, target_account_id: int) -> int:
        """Create a bank rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_bank_rule_by_keyword(self, keyword: str) -> Optional[BankRule]:
        """Get bank rule by keyword, compared case-insensitively."""
        pass

    @abstractmethod
    def list_bank_rules(self) -> list[BankRule]:
        """List bank rules in creation order."""
        pass

    @abstractmethod
    def delete_bank_rule(self, rule_id: int) -> None:
        """Delete a bank rule."""
        pass
