"""Add bank transaction command."""

import click
from bookit.cli.error_handling import exit_on_domain_error
from bookit.domain.transaction import TransactionService
from bookit.utils.date_parser import parse_date
from bookit.utils.amount_parser import parse_amount


@click.command("add")
@click.option(
    "--date",
    required=True,
    help="Transaction date (YYYY-MM-DD, DD-MM-YYYY or relative like 'today', 'yesterday')",
)
@click.option(
    "--amount", required=True, help="Signed amount (e.g., 500.00 or -120,00)"
)
@click.option("--description", default="", help="Transaction description")
@click.option("--counterparty", help="Counterparty name")
@click.option("--iban", help="Counterparty account number")
@click.option("--reference", help="Payment reference")
@click.pass_context
def add_transaction(
    ctx,
    date: str,
    amount: str,
    description: str,
    counterparty: str | None,
    iban: str | None,
    reference: str | None,
):
    """Add a bank transaction manually.

    Examples:
        bookit add --date 2024-03-01 --amount 500.00 --description "Invoice 123"
        bookit add --date 01-03-2024 --amount -120,00 --counterparty Acme
    """
    service = TransactionService(ctx.obj["db"])

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    with exit_on_domain_error(ctx):
        transaction_id = service.create_transaction(
            date=txn_date,
            amount=txn_amount,
            description=description,
            counterparty_name=counterparty,
            counterparty_account=iban,
            reference=reference,
        )

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: {txn_amount:,.2f}")
    if description:
        click.echo(f"  Description: {description}")
    if counterparty:
        click.echo(f"  Counterparty: {counterparty}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
