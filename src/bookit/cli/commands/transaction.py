"""Bank transaction inspection commands."""

import click
from bookit.cli.date_filters import PERIODS, resolve_cli_date_range
from bookit.domain.account import AccountService
from bookit.domain.entities import TransactionStatus
from bookit.domain.reclassification import ReclassificationService
from bookit.domain.transaction import TransactionService

STATUSES = [s.value for s in TransactionStatus]


@click.group()
def transaction_group():
    """Inspect bank transactions."""
    pass


@transaction_group.command("list")
@click.option(
    "--status",
    type=click.Choice(STATUSES, case_sensitive=False),
    help="Only show transactions with this status",
)
@click.option("--unposted", is_flag=True, help="Only show transactions without journal entry")
@click.option("--start-date", help="First date (inclusive)")
@click.option("--end-date", help="Last date (inclusive)")
@click.option("--period", type=click.Choice(PERIODS), help="Reporting period")
@click.pass_context
def list_transactions(
    ctx,
    status: str | None,
    unposted: bool,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
):
    """List bank transactions ordered by date.

    Examples:
        bookit transaction list --status Unmatched
        bookit transaction list --period this-month --unposted
    """
    service = TransactionService(ctx.obj["db"])
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period
    )

    status_filter = None
    if status:
        status_filter = next(s for s in TransactionStatus if s.value.lower() == status.lower())
    transactions = service.list_transactions(
        status=status_filter,
        posted=False if unposted else None,
        start_date=start,
        end_date=end,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"{'ID':>4s}  {'Date':10s}  {'Amount':>12s}  {'Status':9s}  Description")
    click.echo("-" * 80)
    for txn in transactions:
        description = txn.description
        if txn.counterparty_name:
            description = f"{txn.counterparty_name}: {description}"
        click.echo(
            f"{txn.id:4d}  {txn.date.isoformat()}  {txn.amount:12,.2f}  "
            f"{txn.status.value:9s}  {description[:40]}"
        )


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_transaction(ctx, transaction_id: int):
    """Show a transaction with its journal postings."""
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    service = TransactionService(db)
    account_service = AccountService(db, settings)

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    click.echo(f"Transaction {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {txn.amount:,.2f}")
    click.echo(f"  Description: {txn.description}")
    if txn.counterparty_name:
        click.echo(f"  Counterparty: {txn.counterparty_name}")
    if txn.counterparty_account:
        click.echo(f"  IBAN: {txn.counterparty_account}")
    if txn.reference:
        click.echo(f"  Reference: {txn.reference}")
    click.echo(f"  Status: {txn.status.value}")
    if txn.confidence_score is not None:
        click.echo(f"  Suggestion score: {txn.confidence_score}")

    if not txn.is_posted:
        click.echo("  Not posted")
        return

    posted = ReclassificationService(db, settings).posted_account(txn.id)
    if posted is not None:
        click.echo(f"  Booked on: {posted.label}")

    entry = db.get_journal_entry(txn.journal_entry_id)
    if entry is None:
        return
    click.echo(f"\n  Journal entry {entry.id} ({entry.kind.value}): {entry.description}")
    for line in entry.lines:
        account = account_service.get_account(line.account_id)
        label = account.label if account else f"#{line.account_id}"
        debit = f"{line.debit:,.2f}" if line.debit else ""
        credit = f"{line.credit:,.2f}" if line.credit else ""
        click.echo(f"    {label:35s} {debit:>12s} {credit:>12s}")


@transaction_group.command("status")
@click.pass_context
def reconciliation_status(ctx):
    """Show how many transactions are posted to the ledger."""
    status = TransactionService(ctx.obj["db"]).reconciliation_status()
    click.echo(f"Total transactions: {status.total}")
    click.echo(f"Posted: {status.posted}")
    click.echo(f"Not posted: {status.unposted}")
    click.echo(f"Unmatched: {status.unmatched}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
