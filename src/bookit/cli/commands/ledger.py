"""Ledger account (chart of accounts) commands."""

import click
from bookit.cli.error_handling import exit_on_domain_error
from bookit.domain.account import AccountService
from bookit.domain.entities import AccountType

ACCOUNT_TYPES = [t.value for t in AccountType]


@click.group()
def ledger_group():
    """Manage the chart of accounts."""
    pass


@ledger_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option(
    "--type",
    "account_type",
    required=True,
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    help="Account type",
)
@click.option("--inactive", is_flag=True, help="Create the account as inactive")
@click.pass_context
def create_ledger_account(ctx, code: str, name: str, account_type: str, inactive: bool):
    """Create a ledger account.

    Examples:
        bookit ledger create 8000 "Sales" --type Revenue
        bookit ledger create 4300 "Office Supplies" --type Expense
    """
    service = AccountService(ctx.obj["db"], ctx.obj["settings"])
    account_type = next(t for t in AccountType if t.value.lower() == account_type.lower())

    with exit_on_domain_error(ctx):
        account_id = service.create_account(
            code=code, name=name, account_type=account_type, is_active=not inactive
        )
    click.echo(f"Created ledger account {code} - {name} (ID: {account_id})")


def _echo_account(service: AccountService, acc) -> None:
    flags = []
    if service.is_cash_account(acc):
        flags.append("cash")
    if not acc.is_active:
        flags.append("inactive")
    suffix = f" ({', '.join(flags)})" if flags else ""
    click.echo(f"ID: {acc.id:3d} | {acc.code:>6s} | {acc.name:30s}{suffix}")


@ledger_group.command("list")
@click.option("--active-only", is_flag=True, help="Hide inactive accounts")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    help="Only show accounts of this type",
)
@click.option(
    "--suggestable",
    is_flag=True,
    help="Only show accounts bulk reconciliation may book to",
)
@click.pass_context
def list_ledger_accounts(ctx, active_only: bool, account_type: str | None, suggestable: bool):
    """List ledger accounts grouped by type, ordered by code."""
    service = AccountService(ctx.obj["db"], ctx.obj["settings"])

    type_filter = None
    if account_type:
        type_filter = next(t for t in AccountType if t.value.lower() == account_type.lower())
    groups = service.group_by_type(active_only=active_only, account_type=type_filter)
    if suggestable:
        allowed = {acc.id for acc in service.suggestable_accounts()}
        groups = {t: [a for a in accs if a.id in allowed] for t, accs in groups.items()}

    if not any(groups.values()):
        click.echo("No ledger accounts found.")
        return

    click.echo("\nLedger accounts:")
    for acc_type, accounts in groups.items():
        if not accounts:
            continue
        click.echo(f"\n{acc_type.value}")
        click.echo("-" * 70)
        for acc in accounts:
            _echo_account(service, acc)


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(ledger_group, name="ledger")
