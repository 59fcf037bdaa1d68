"""Classification suggestion command."""

import click
from bookit.cli.classifiers import build_classifier
from bookit.cli.error_handling import exit_on_domain_error
from bookit.domain.account import AccountService
from bookit.domain.contact import ContactService
from bookit.domain.entities import BookingMode
from bookit.domain.transaction import TransactionService


@click.command("suggest")
@click.argument("transaction_ids", type=int, nargs=-1, required=True)
@click.option("--rules-only", is_flag=True, help="Don't call the classification service")
@click.pass_context
def suggest(ctx, transaction_ids: tuple[int, ...], rules_only: bool):
    """Classify transactions and store the suggestions.

    Uses bank rules and contact defaults, then the classification service at
    BOOKIT_CLASSIFIER_URL when configured.

    Examples:
        bookit suggest 4 5 6
        bookit suggest 4 --rules-only
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    service = TransactionService(db)
    account_service = AccountService(db, settings)
    contact_service = ContactService(db)

    with exit_on_domain_error(ctx):
        classifier = build_classifier(ctx, db, settings, use_service=not rules_only)
        for transaction_id in transaction_ids:
            result = service.classify_and_store(transaction_id, classifier)
            suggestion = result.suggestion

            if suggestion.account_id is None:
                click.echo(f"Transaction {transaction_id}: no suggestion (score {result.score})")
                if suggestion.contact_id is not None and result.reason:
                    click.echo(f"  {result.reason}")
                continue

            account = account_service.get_account(suggestion.account_id)
            label = account.label if account else f"#{suggestion.account_id}"
            line = f"Transaction {transaction_id}: {label} (score {result.score})"
            if suggestion.mode == BookingMode.VIA_RELATIE:
                contact = contact_service.get_contact(suggestion.contact_id)
                name = contact.name if contact else f"#{suggestion.contact_id}"
                line += f" via {name}"
            click.echo(line)
            if result.reason:
                click.echo(f"  {result.reason}")


def register_commands(cli):
    """Register suggest command with main CLI."""
    cli.add_command(suggest)
