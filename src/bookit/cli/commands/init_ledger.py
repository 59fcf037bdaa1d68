"""Initialize a default chart of accounts."""

import click
from bookit.domain.account import AccountService
from bookit.domain.entities import AccountType
from bookit.domain.errors import DomainError


# Default chart: (code, name, type)
DEFAULT_CHART = [
    # Equity
    ("0500", "Owner's Capital", AccountType.EQUITY),
    ("510", "Private Withdrawals", AccountType.EQUITY),
    # Cash and receivables
    ("1000", "Cash", AccountType.ASSET),
    ("1100", "Bank", AccountType.ASSET),
    ("1300", "Debtors", AccountType.ASSET),
    # Liabilities
    ("1600", "Creditors", AccountType.LIABILITY),
    ("1700", "VAT Payable", AccountType.LIABILITY),
    # Expenses
    ("4000", "Wages and Salaries", AccountType.EXPENSE),
    ("4100", "Rent", AccountType.EXPENSE),
    ("4200", "Depreciation", AccountType.EXPENSE),
    ("4300", "Office Supplies", AccountType.EXPENSE),
    ("4400", "Travel Expenses", AccountType.EXPENSE),
    ("4500", "Marketing", AccountType.EXPENSE),
    ("4600", "Telephone and Internet", AccountType.EXPENSE),
    ("4700", "Bank Charges", AccountType.EXPENSE),
    ("4800", "Subscriptions", AccountType.EXPENSE),
    ("4900", "Other Expenses", AccountType.EXPENSE),
    # Revenue
    ("8000", "Sales", AccountType.REVENUE),
    ("8100", "Service Revenue", AccountType.REVENUE),
    ("8900", "Other Income", AccountType.REVENUE),
]


@click.command("init-ledger")
@click.option("--force", is_flag=True, help="Add missing default accounts to an existing chart")
@click.pass_context
def init_ledger(ctx, force: bool):
    """Initialize the database with a default chart of accounts.

    The chart includes the system accounts bookings post against: Bank
    (1100), Debtors (1300), Creditors (1600) and Private Withdrawals (510).
    """
    service = AccountService(ctx.obj["db"], ctx.obj["settings"])

    existing = service.list_accounts()
    if existing and not force:
        click.echo("Ledger accounts already exist. Use --force to add missing defaults.")
        return

    click.echo("Creating default chart of accounts...")
    existing_codes = {acc.code for acc in existing}

    created = 0
    errors = 0
    for code, name, account_type in DEFAULT_CHART:
        if code in existing_codes:
            continue
        try:
            service.create_account(code=code, name=name, account_type=account_type)
            created += 1
        except DomainError as e:
            click.echo(f"Warning: Could not create account {code} '{name}': {e}", err=True)
            errors += 1

    if errors == 0:
        click.echo(f"Successfully created {created} ledger accounts.")
    else:
        click.echo(f"Created {created} ledger accounts with {errors} errors.")


def register_commands(cli):
    """Register init-ledger command with main CLI."""
    cli.add_command(init_ledger)
