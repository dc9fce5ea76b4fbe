"""Main CLI entry point."""

import logging

import click

from ledgerbook.config import LedgerConfig
from ledgerbook.database.factories import create_sqlite_database
from ledgerbook.domain.errors import ValidationError

# Import and register all commands at module level
from ledgerbook.cli.commands import (
    account,
    balance,
    entry,
    period,
    template,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERBOOK_DB_PATH environment variable)",
    envvar="LEDGERBOOK_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="LEDGERBOOK_LOG_LEVEL",
    help="Logging verbosity",
)
@click.option(
    "--user",
    default="ledgerbook",
    envvar="LEDGERBOOK_USER",
    help="User name recorded on created, posted and voided records",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, user: str):
    """Ledgerbook - Double-entry bookkeeping ledger.

    Record balanced entries on a hierarchical chart of accounts, post and
    void them, and apply reusable templates.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            config = LedgerConfig.from_env()
        except ValidationError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["config"] = config
        ctx.obj["user"] = user


# Register all commands
account.register_commands(cli)
entry.register_commands(cli)
balance.register_commands(cli)
template.register_commands(cli)
period.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
