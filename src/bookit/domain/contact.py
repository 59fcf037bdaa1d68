"""Contact directory service."""

from typing import Optional

import structlog

from bookit.database.base import Database
from bookit.domain.entities import BankTransaction, Contact, RelationType
from bookit.domain.errors import (
    NotFoundError,
    ValidationError,
    account_inactive,
    account_not_found,
    contact_not_found,
    relation_incompatible,
)

logger = structlog.get_logger(__name__)


def relation_accepts(relation_type: RelationType, inflow: bool) -> bool:
    """Whether a relation type may be used for a payment direction.

    Incoming money comes from customers, outgoing money goes to suppliers.
    """
    if relation_type == RelationType.BOTH:
        return True
    if inflow:
        return relation_type == RelationType.CUSTOMER
    return relation_type == RelationType.SUPPLIER


def _normalize(name: Optional[str]) -> str:
    return (name or "").strip().lower()


def normalize_iban(value: Optional[str]) -> Optional[str]:
    """Uppercase an account number and drop its spaces. Blank means None."""
    iban = "".join((value or "").split()).upper()
    return iban or None


def _valid_iban(iban: str) -> bool:
    return iban.isascii() and iban.isalnum() and 5 <= len(iban) <= 34


class ContactService:
    """Service for managing counterparties."""

    def __init__(self, db: Database):
        """Initialize contact service.

        Args:
            db: Database instance
        """
        self.db = db

    def _validate_default_account(self, account_id: Optional[int]) -> None:
        if account_id is None:
            return
        account = self.db.get_ledger_account(account_id)
        if account is None:
            raise ValidationError(account_not_found(account_id))
        if not account.is_active:
            raise ValidationError(account_inactive(account_id))

    def create_contact(
        self,
        name: str,
        relation_type: RelationType | str,
        default_account_id: Optional[int] = None,
        iban: Optional[str] = None,
    ) -> int:
        """Create a contact.

        Args:
            name: Contact name
            relation_type: Customer, Supplier or Both
            default_account_id: Optional default ledger account
            iban: Optional bank account number, matched against the
                counterparty account of transactions

        Returns:
            Contact ID

        Raises:
            ValidationError: If name is empty, relation type unknown, the IBAN
                is malformed or the default account doesn't exist
        """
        name = name.strip()
        if not name:
            raise ValidationError("Contact name is required")
        try:
            relation_type = RelationType(relation_type)
        except ValueError:
            raise ValidationError(f"Unknown relation type '{relation_type}'")
        iban = normalize_iban(iban)
        if iban is not None and not _valid_iban(iban):
            raise ValidationError(f"Invalid IBAN '{iban}'")
        self._validate_default_account(default_account_id)

        contact_id = self.db.create_contact(
            name=name,
            relation_type=relation_type,
            default_account_id=default_account_id,
            iban=iban,
        )
        logger.info("contact_created", contact_id=contact_id, relation_type=relation_type.value)
        return contact_id

    def create_for_transaction(
        self, transaction: BankTransaction, name: str, default_account_id: int
    ) -> int:
        """Create a contact for a transaction's counterparty.

        The relation type follows the payment direction: Customer for money in,
        Supplier for money out. The counterparty account becomes the contact's
        IBAN so later transactions from the same account match it.
        """
        if default_account_id is None:
            raise ValidationError("A default ledger account is required")
        relation_type = RelationType.CUSTOMER if transaction.is_inflow else RelationType.SUPPLIER
        iban = normalize_iban(transaction.counterparty_account)
        if iban is not None and not _valid_iban(iban):
            iban = None
        return self.create_contact(
            name=name,
            relation_type=relation_type,
            default_account_id=default_account_id,
            iban=iban,
        )

    def get_contact(self, contact_id: int) -> Optional[Contact]:
        """Get contact by ID."""
        return self.db.get_contact(contact_id)

    def list_contacts(self, active_only: bool = False) -> list[Contact]:
        """List contacts ordered by name."""
        return self.db.list_contacts(active_only=active_only)

    def set_default_account(self, contact_id: int, account_id: Optional[int]) -> None:
        """Set (or clear with None) a contact's default ledger account.

        Raises:
            NotFoundError: If the contact doesn't exist
            ValidationError: If the account doesn't exist or is inactive
        """
        if self.db.get_contact(contact_id) is None:
            raise NotFoundError(contact_not_found(contact_id))
        self._validate_default_account(account_id)
        self.db.update_contact_default_account(contact_id, account_id)
        logger.info("contact_default_account_set", contact_id=contact_id, account_id=account_id)

    def require_counterparty(self, contact_id: Optional[int], inflow: bool) -> Contact:
        """Return an active contact usable for the payment direction or raise.

        Raises:
            ValidationError: If no contact is given, it is unknown or inactive,
                or its relation type does not fit the direction
        """
        if contact_id is None:
            raise ValidationError("A counterparty is required for via-relatie booking")
        contact = self.db.get_contact(contact_id)
        if contact is None:
            raise ValidationError(contact_not_found(contact_id))
        if not contact.is_active:
            raise ValidationError(f"Contact {contact_id} is not active")
        if not relation_accepts(contact.relation_type, inflow):
            raise ValidationError(
                relation_incompatible(contact.name, contact.relation_type.value, inflow)
            )
        return contact

    def match_counterparty(self, transaction: BankTransaction) -> Optional[Contact]:
        """Find the active contact whose name equals the counterparty name.

        Comparison ignores case and surrounding whitespace.
        """
        wanted = _normalize(transaction.counterparty_name)
        if not wanted:
            return None
        for contact in self.db.list_contacts(active_only=True):
            if _normalize(contact.name) == wanted:
                return contact
        return None

    def match_by_account(self, transaction: BankTransaction) -> Optional[Contact]:
        """Find the active contact whose IBAN is the counterparty account."""
        iban = normalize_iban(transaction.counterparty_account)
        if iban is None:
            return None
        return self.db.get_contact_by_iban(iban)

    def find_in_text(self, text: str) -> Optional[Contact]:
        """Find the first active contact whose name occurs in the text.

        A text that is itself part of a contact name matches too. Texts shorter
        than three characters never match.
        """
        haystack = _normalize(text)
        if len(haystack) < 3:
            return None
        for contact in self.db.list_contacts(active_only=True):
            name = _normalize(contact.name)
            if name and (name in haystack or haystack in name):
                return contact
        return None
