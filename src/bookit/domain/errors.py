"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class AmbiguousPostingError(DomainError):
    """The journal line to change cannot be identified unambiguously."""


class StorageError(DomainError):
    """Persistence failed; nothing was written."""


class ExternalServiceError(DomainError):
    """The external classification service failed or returned garbage."""


class BatchPreconditionError(DomainError):
    """A bulk run cannot start; no transaction was touched."""


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing bank transaction."""
    return f"Transaction {transaction_id} not found"


def account_not_found(account_id: int) -> str:
    """Return message for missing ledger account."""
    return f"Ledger account {account_id} not found"


def account_code_not_found(code: str) -> str:
    """Return message for missing ledger account by code."""
    return f"Ledger account with code {code} not found"


def account_inactive(account_id: int) -> str:
    """Return message for an inactive ledger account."""
    return f"Ledger account {account_id} is not active"


def contact_not_found(contact_id: int) -> str:
    """Return message for missing contact."""
    return f"Contact {contact_id} not found"


def transaction_already_booked(transaction_id: int) -> str:
    """Return message when booking a transaction that is already posted."""
    return f"Transaction {transaction_id} is already booked"


def transaction_not_booked(transaction_id: int) -> str:
    """Return message when reclassifying an unposted transaction."""
    return f"Transaction {transaction_id} is not yet booked"


def duplicate_rule_keyword(keyword: str) -> str:
    """Return message for duplicate bank rule keyword."""
    return f"Rule with keyword '{keyword}' already exists"


def relation_incompatible(contact_name: str, relation_type: str, inflow: bool) -> str:
    """Return message when a contact cannot be used for the transaction direction."""
    expected = "Customer or Both" if inflow else "Supplier or Both"
    direction = "incoming" if inflow else "outgoing"
    return (
        f"Contact '{contact_name}' is a {relation_type}; "
        f"{direction} payments require a {expected} relation"
    )
