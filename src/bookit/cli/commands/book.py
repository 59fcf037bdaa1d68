"""Booking and reclassification commands."""

import click
from bookit.cli.account_resolution import resolve_contact_or_exit, resolve_ledger_account_or_exit
from bookit.cli.error_handling import exit_on_domain_error
from bookit.domain.account import AccountService
from bookit.domain.booking import BookingService
from bookit.domain.contact import ContactService
from bookit.domain.entities import BookingMode
from bookit.domain.reclassification import ReclassificationService


@click.command("book")
@click.argument("transaction_id", type=int)
@click.argument("account")
@click.option("--description", help="Entry description (defaults to the transaction's)")
@click.option(
    "--via",
    "contact",
    help="Book via this customer/supplier (name or ID) instead of directly",
)
@click.option(
    "--set-default",
    is_flag=True,
    help="Remember ACCOUNT as the contact's default account",
)
@click.option("--rule", "rule_keyword", help="Also create a bank rule for this keyword")
@click.pass_context
def book_transaction(
    ctx,
    transaction_id: int,
    account: str,
    description: str | None,
    contact: str | None,
    set_default: bool,
    rule_keyword: str | None,
):
    """Book a bank transaction onto a ledger account.

    ACCOUNT is a ledger code, #ID or name. Without --via the transaction is
    booked directly against the bank account; with --via it is booked as an
    invoice plus payment for the contact.

    Examples:
        bookit book 1 8000 --description "Invoice 123"
        bookit book 2 4300 --via Acme --set-default
        bookit book 3 4700 --rule "bank fee"
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    service = BookingService(db, settings)

    account_id = resolve_ledger_account_or_exit(ctx, AccountService(db, settings), account)
    contact_id = None
    if contact is not None:
        contact_id = resolve_contact_or_exit(ctx, ContactService(db), contact)

    mode = BookingMode.VIA_RELATIE if contact_id is not None else BookingMode.DIRECT
    with exit_on_domain_error(ctx):
        entry_id = service.book(
            transaction_id,
            account_id,
            description=description,
            mode=mode,
            counterparty_id=contact_id,
            set_as_default=set_default,
            rule_keyword=rule_keyword,
        )

    how = "via contact" if mode == BookingMode.VIA_RELATIE else "directly"
    click.echo(f"Booked transaction {transaction_id} {how} (journal entry {entry_id})")
    if rule_keyword:
        click.echo(f"Created rule '{rule_keyword.strip()}' -> {account}")


@click.command("reclassify")
@click.argument("transaction_id", type=int)
@click.argument("account")
@click.pass_context
def reclassify_transaction(ctx, transaction_id: int, account: str):
    """Move a booked transaction to another ledger account.

    ACCOUNT is a ledger code, #ID or name.

    Examples:
        bookit reclassify 1 8100
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    service = ReclassificationService(db, settings)

    account_id = resolve_ledger_account_or_exit(ctx, AccountService(db, settings), account)
    with exit_on_domain_error(ctx):
        service.reclassify(transaction_id, account_id)

    posted = service.posted_account(transaction_id)
    label = posted.label if posted is not None else account
    click.echo(f"Reclassified transaction {transaction_id} to {label}")


def register_commands(cli):
    """Register booking commands with main CLI."""
    cli.add_command(book_transaction)
    cli.add_command(reclassify_transaction)
