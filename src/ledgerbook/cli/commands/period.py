"""Booking period commands."""

import click

from ledgerbook.cli.date_filters import parse_date_option
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.period import PeriodService


@click.group()
def period_group():
    """Close booking periods."""
    pass


@period_group.command("close")
@click.argument("through", metavar="DATE")
@click.pass_context
def close_period(ctx, through: str):
    """Close the books up to and including DATE.

    Examples:
        ledgerbook period close 2024-12-31
        ledgerbook period close "end of last month"
    """
    service = PeriodService(ctx.obj["db"])
    through_date = parse_date_option(ctx, through, "date")
    try:
        closing = service.close_period(through_date, ctx.obj["user"])
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Books closed through {closing.closed_through.isoformat()}")


@period_group.command("show")
@click.pass_context
def show_period(ctx):
    """Show how far the books are closed."""
    service = PeriodService(ctx.obj["db"])
    closed_through = service.closed_through()
    if closed_through is None:
        click.echo("No period has been closed.")
        return
    click.echo(f"Books closed through {closed_through.isoformat()}")


def register_commands(cli):
    """Register period commands with main CLI."""
    cli.add_command(period_group, name="period")
