"""Bulk reconciliation command."""

import click
from bookit.cli.classifiers import build_classifier
from bookit.cli.error_handling import exit_on_domain_error
from bookit.domain.bulk import BulkReconciliationService
from bookit.domain.entities import BatchRequest, ProgressEvent


@click.command("reconcile")
@click.argument("transaction_ids", type=int, nargs=-1)
@click.option(
    "--private",
    "private_ids",
    type=int,
    multiple=True,
    help="Transaction ID to book as a private withdrawal (repeatable)",
)
@click.option("--rules-only", is_flag=True, help="Don't call the classification service")
@click.option("--quiet", is_flag=True, help="Don't print progress")
@click.pass_context
def reconcile(
    ctx,
    transaction_ids: tuple[int, ...],
    private_ids: tuple[int, ...],
    rules_only: bool,
    quiet: bool,
):
    """Book unmatched transactions in bulk.

    Private withdrawals (--private) are booked first, then every other
    transaction is classified and booked when the suggestion scores at least
    BOOKIT_CONFIDENCE_THRESHOLD. Without TRANSACTION_IDS all unmatched
    transactions are processed.

    Examples:
        bookit reconcile
        bookit reconcile 4 5 6 --private 5
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]

    def show_progress(event: ProgressEvent) -> None:
        if not quiet:
            click.echo(
                f"[{event.current}/{event.total}] {event.label} "
                f"(transaction {event.transaction_id})"
            )

    request = BatchRequest(
        transaction_ids=tuple(transaction_ids),
        private_ids=frozenset(private_ids),
    )
    with exit_on_domain_error(ctx):
        service = BulkReconciliationService(
            db, build_classifier(ctx, db, settings, use_service=not rules_only), settings
        )
        summary = service.run(request, on_progress=show_progress)

    click.echo(
        f"Booked {summary.total_booked} transactions "
        f"({summary.booked_private} private, {summary.booked_classified} classified), "
        f"skipped {summary.skipped}."
    )


def register_commands(cli):
    """Register reconcile command with main CLI."""
    cli.add_command(reconcile)
