"""Main CLI entry point."""

import click
from bookit.database.factories import create_sqlite_database
from bookit.domain.errors import ValidationError
from bookit.logging_config import configure_logging
from bookit.settings import load_settings

# Import and register all commands at module level
from bookit.cli.commands import (
    ledger,
    init_ledger,
    contact,
    add,
    transaction,
    book,
    rule,
    suggest,
    reconcile,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BOOKIT_DB_PATH environment variable)",
    envvar="BOOKIT_DB_PATH",
)
@click.pass_context
def cli(ctx, db_path: str | None):
    """Bookit - Bank reconciliation and double-entry booking.

    Book imported bank transactions onto a chart of accounts, either
    directly or via a customer/supplier, with keyword rules and
    classifier-assisted bulk reconciliation.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            settings = load_settings()
        except ValidationError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        configure_logging(level=settings.log_level, format=settings.log_format)

        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["settings"] = settings


# Register all commands
ledger.register_commands(cli)
init_ledger.register_commands(cli)
contact.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
book.register_commands(cli)
rule.register_commands(cli)
suggest.register_commands(cli)
reconcile.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
