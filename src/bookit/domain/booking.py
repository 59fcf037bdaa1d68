"""Booking engine: post bank transactions to the ledger."""

from typing import Optional

import structlog

from bookit.database.base import Database
from bookit.domain.account import AccountService
from bookit.domain.contact import ContactService
from bookit.domain.entities import BankTransaction, BookingMode, TransactionStatus
from bookit.domain.errors import (
    NotFoundError,
    ValidationError,
    transaction_already_booked,
    transaction_not_found,
)
from bookit.domain.posting import PostingPlan, assert_balanced, plan_direct, plan_via_relatie
from bookit.domain.rules import RuleService
from bookit.settings import BookingSettings

logger = structlog.get_logger(__name__)


class BookingService:
    """Service that turns unmatched bank transactions into journal entries."""

    def __init__(self, db: Database, settings: Optional[BookingSettings] = None):
        """Initialize booking service.

        Args:
            db: Database instance
            settings: Booking settings (system account codes)
        """
        self.db = db
        self.settings = settings or BookingSettings()
        self.accounts = AccountService(db, self.settings)
        self.contacts = ContactService(db)
        self.rules = RuleService(db)

    def _require_bookable(self, transaction_id: int) -> BankTransaction:
        transaction = self.db.get_bank_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if transaction.is_posted or transaction.status != TransactionStatus.UNMATCHED:
            raise ValidationError(transaction_already_booked(transaction_id))
        if transaction.amount == 0:
            raise ValidationError(f"Transaction {transaction_id} has a zero amount")
        return transaction

    def book(
        self,
        transaction_id: int,
        target_account_id: Optional[int],
        description: Optional[str] = None,
        mode: BookingMode | str = BookingMode.DIRECT,
        counterparty_id: Optional[int] = None,
        set_as_default: bool = False,
        rule_keyword: Optional[str] = None,
    ) -> int:
        """Book a bank transaction.

        Every check runs before anything is written; the journal entries, the
        status change, the optional default account and the optional rule are
        then stored in one database transaction.

        Args:
            transaction_id: Bank transaction to book
            target_account_id: Ledger account receiving the non-cash side
            description: Entry description, the transaction's own when blank
            mode: "direct" or "relation" (via the counterparty)
            counterparty_id: Contact to book via, required for "relation"
            set_as_default: Remember the target as the counterparty's default account
            rule_keyword: Also create a bank rule for this keyword

        Returns:
            ID of the journal entry the transaction is linked to (the
            settlement entry for a relation booking)

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If the transaction, account, counterparty or
                rule keyword is not acceptable
            ConflictError: If a rule with the keyword exists, or the
                transaction was booked concurrently
            StorageError: If writing fails; nothing is stored
        """
        try:
            mode = BookingMode(mode)
        except ValueError:
            raise ValidationError(f"Unknown booking mode '{mode}'")

        transaction = self._require_bookable(transaction_id)
        target = self.accounts.require_active_account(target_account_id)
        cash = self.accounts.bank_account()

        contact = None
        if mode == BookingMode.VIA_RELATIE:
            contact = self.contacts.require_counterparty(counterparty_id, transaction.is_inflow)
        elif counterparty_id is not None:
            contact = self.contacts.get_contact(counterparty_id)
            if contact is None:
                raise ValidationError(f"Contact {counterparty_id} not found")

        if set_as_default and contact is None:
            raise ValidationError("Cannot set a default account without a counterparty")

        rule = None
        if rule_keyword is not None:
            keyword = self.rules.validate_new_rule(rule_keyword, target.id)
            rule = (keyword, target.id)

        plan = self._plan(transaction, mode, cash.id, target.id, contact, description)
        assert_balanced(plan.entries)

        entry_ids = self.db.post_booking(
            transaction_id=transaction.id,
            entries=plan.entries,
            link_index=plan.link_index,
            default_account=(contact.id, target.id) if set_as_default else None,
            rule=rule,
        )
        journal_entry_id = entry_ids[plan.link_index]

        logger.info(
            "transaction_booked",
            transaction_id=transaction.id,
            mode=mode.value,
            account=target.code,
            contact_id=contact.id if contact is not None else None,
            journal_entry_id=journal_entry_id,
            entry_kind=plan.link_entry.kind.value,
            rule_created=rule is not None,
        )
        return journal_entry_id

    def _plan(self, transaction, mode, cash_id, target_id, contact, description) -> PostingPlan:
        if mode == BookingMode.DIRECT:
            return plan_direct(transaction, cash_id, target_id, description)

        if transaction.is_inflow:
            clearing = self.accounts.debtors_account()
        else:
            clearing = self.accounts.creditors_account()
        return plan_via_relatie(
            transaction, cash_id, clearing.id, target_id, contact.id, description
        )

    def book_direct(
        self,
        transaction_id: int,
        target_account_id: int,
        description: Optional[str] = None,
        rule_keyword: Optional[str] = None,
    ) -> int:
        """Book a transaction straight between the bank and the target account."""
        return self.book(
            transaction_id,
            target_account_id,
            description=description,
            mode=BookingMode.DIRECT,
            rule_keyword=rule_keyword,
        )

    def book_via_relatie(
        self,
        transaction_id: int,
        target_account_id: int,
        counterparty_id: int,
        description: Optional[str] = None,
        set_as_default: bool = False,
        rule_keyword: Optional[str] = None,
    ) -> int:
        """Book a transaction as an invoice plus its payment for a counterparty."""
        return self.book(
            transaction_id,
            target_account_id,
            description=description,
            mode=BookingMode.VIA_RELATIE,
            counterparty_id=counterparty_id,
            set_as_default=set_as_default,
            rule_keyword=rule_keyword,
        )
