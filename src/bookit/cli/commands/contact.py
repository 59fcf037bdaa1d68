"""Contact management commands."""

import click
from bookit.cli.account_resolution import resolve_contact_or_exit, resolve_ledger_account_or_exit
from bookit.cli.error_handling import exit_on_domain_error
from bookit.domain.account import AccountService
from bookit.domain.contact import ContactService
from bookit.domain.entities import RelationType
from bookit.domain.transaction import TransactionService

RELATION_TYPES = [t.value for t in RelationType]


@click.group()
def contact_group():
    """Manage customers and suppliers."""
    pass


@contact_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "relation_type",
    required=True,
    type=click.Choice(RELATION_TYPES, case_sensitive=False),
    help="Relation type",
)
@click.option("--default-account", help="Default ledger account (code, #ID or name)")
@click.option("--iban", help="Bank account number payments to or from this contact use")
@click.pass_context
def create_contact(
    ctx, name: str, relation_type: str, default_account: str | None, iban: str | None
):
    """Create a contact.

    Examples:
        bookit contact create "Acme" --type Supplier --default-account 4300
        bookit contact create "Big Client" --type Customer --iban NL91ABNA0417164300
    """
    db = ctx.obj["db"]
    service = ContactService(db)

    account_id = None
    if default_account:
        account_id = resolve_ledger_account_or_exit(
            ctx, AccountService(db, ctx.obj["settings"]), default_account
        )

    relation = next(t for t in RelationType if t.value.lower() == relation_type.lower())
    with exit_on_domain_error(ctx):
        contact_id = service.create_contact(
            name=name, relation_type=relation, default_account_id=account_id, iban=iban
        )
    click.echo(f"Created contact '{name}' (ID: {contact_id})")


@contact_group.command("add-for")
@click.argument("transaction_id", type=int)
@click.argument("name")
@click.argument("account")
@click.pass_context
def create_contact_for_transaction(ctx, transaction_id: int, name: str, account: str):
    """Create a contact for a transaction's counterparty.

    Money in makes a Customer, money out a Supplier. ACCOUNT (code, #ID or
    name) becomes the default ledger account and the transaction's
    counterparty account becomes the contact's IBAN.

    Example:
        bookit contact add-for 12 "Acme" 4300
    """
    db = ctx.obj["db"]
    service = ContactService(db)
    account_id = resolve_ledger_account_or_exit(
        ctx, AccountService(db, ctx.obj["settings"]), account
    )

    with exit_on_domain_error(ctx):
        transaction = TransactionService(db).require_transaction(transaction_id)
        contact_id = service.create_for_transaction(transaction, name, account_id)
    contact = service.get_contact(contact_id)
    click.echo(
        f"Created {contact.relation_type.value.lower()} '{contact.name}' (ID: {contact_id})"
    )


@contact_group.command("list")
@click.option("--active-only", is_flag=True, help="Hide inactive contacts")
@click.pass_context
def list_contacts(ctx, active_only: bool):
    """List contacts."""
    db = ctx.obj["db"]
    service = ContactService(db)
    account_service = AccountService(db, ctx.obj["settings"])

    contacts = service.list_contacts(active_only=active_only)
    if not contacts:
        click.echo("No contacts found.")
        return

    click.echo("\nContacts:")
    click.echo("-" * 70)
    for c in contacts:
        default = ""
        if c.default_account_id is not None:
            account = account_service.get_account(c.default_account_id)
            default = f" | Default: {account.label}" if account else ""
        iban = f" | IBAN: {c.iban}" if c.iban else ""
        inactive = " (inactive)" if not c.is_active else ""
        click.echo(
            f"ID: {c.id:3d} | {c.name:25s} | {c.relation_type.value:8s}{iban}{default}{inactive}"
        )


@contact_group.command("set-default")
@click.argument("contact")
@click.argument("account", required=False)
@click.option("--clear", is_flag=True, help="Remove the default account")
@click.pass_context
def set_default_account(ctx, contact: str, account: str | None, clear: bool):
    """Set a contact's default ledger account.

    CONTACT can be a contact name or ID. ACCOUNT is a ledger code, #ID or name.

    Examples:
        bookit contact set-default "Acme" 4300
        bookit contact set-default 3 --clear
    """
    db = ctx.obj["db"]
    service = ContactService(db)

    if clear == (account is not None):
        click.echo("Error: Provide either ACCOUNT or --clear.", err=True)
        ctx.exit(1)

    contact_id = resolve_contact_or_exit(ctx, service, contact)
    account_id = None
    if account is not None:
        account_id = resolve_ledger_account_or_exit(
            ctx, AccountService(db, ctx.obj["settings"]), account
        )

    with exit_on_domain_error(ctx):
        service.set_default_account(contact_id, account_id)
    if account_id is None:
        click.echo(f"Cleared default account of contact {contact_id}")
    else:
        click.echo(f"Set default account of contact {contact_id} to {account}")


def register_commands(cli):
    """Register contact commands with main CLI."""
    cli.add_command(contact_group, name="contact")
