"""Utilities for resolving ledger accounts and contacts given on the command line."""

from bookit.domain.account import AccountService
from bookit.domain.contact import ContactService
from bookit.domain.errors import NotFoundError, ValidationError


def resolve_ledger_account(account_service: AccountService, account: str | int) -> int:
    """Resolve a ledger account code, ID or name to an account ID.

    Ledger codes are numeric, so IDs need a "#" prefix:
    - "8000"   account with code 8000
    - "#12"    account with ID 12
    - "Sales"  account named "Sales" (case-insensitive)

    Args:
        account_service: AccountService instance
        account: Code, "#ID" or name; an int is taken as an ID

    Returns:
        Ledger account ID

    Raises:
        NotFoundError: If no account matches
        ValidationError: If a name matches more than one account
    """
    if isinstance(account, int):
        if account_service.get_account(account) is None:
            raise NotFoundError(f"Ledger account ID {account} not found")
        return account

    text = account.strip()
    if text.startswith("#"):
        try:
            account_id = int(text[1:])
        except ValueError:
            raise ValidationError(f"Invalid ledger account ID '{text}'")
        return resolve_ledger_account(account_service, account_id)

    by_code = account_service.get_account_by_code(text)
    if by_code is not None:
        return by_code.id

    matches = [acc for acc in account_service.list_accounts() if acc.name.lower() == text.lower()]
    if len(matches) > 1:
        codes = ", ".join(acc.code for acc in matches)
        raise ValidationError(f"Ledger account name '{text}' is ambiguous (codes: {codes})")
    if matches:
        return matches[0].id

    raise NotFoundError(f"Ledger account '{text}' not found")


def resolve_contact(contact_service: ContactService, contact: str | int) -> int:
    """Resolve a contact name or ID to a contact ID.

    Raises:
        NotFoundError: If no contact matches
        ValidationError: If a name matches more than one contact
    """
    try:
        contact_id = int(contact)
    except (ValueError, TypeError):
        contact_id = None
    if contact_id is not None:
        if contact_service.get_contact(contact_id) is None:
            raise NotFoundError(f"Contact ID {contact_id} not found")
        return contact_id

    name = str(contact).strip().lower()
    matches = [c for c in contact_service.list_contacts() if c.name.lower() == name]
    if len(matches) > 1:
        raise ValidationError(f"Contact name '{contact}' is ambiguous")
    if not matches:
        raise NotFoundError(f"Contact '{contact}' not found")
    return matches[0].id
