"""CLI helpers for ledger account and contact resolution."""

from __future__ import annotations

import click
from bookit.cli.error_handling import handle_domain_error
from bookit.domain.account import AccountService
from bookit.domain.contact import ContactService
from bookit.domain.errors import DomainError
from bookit.utils.ledger_resolver import resolve_contact, resolve_ledger_account


def resolve_ledger_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve ledger account code, #ID or name, or exit with a CLI error."""
    try:
        return resolve_ledger_account(account_service, account)
    except DomainError as exc:
        handle_domain_error(ctx, exc)


def resolve_contact_or_exit(
    ctx: click.Context, contact_service: ContactService, contact: str | int
) -> int:
    """Resolve contact name or ID, or exit with a CLI error."""
    try:
        return resolve_contact(contact_service, contact)
    except DomainError as exc:
        handle_domain_error(ctx, exc)
