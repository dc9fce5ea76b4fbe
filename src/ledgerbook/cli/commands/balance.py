"""Balance and trial balance commands."""

import click

from ledgerbook.cli.date_filters import parse_date_option
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain import account_path
from ledgerbook.domain.balance import BalanceService
from ledgerbook.domain.entities import TrialBalanceRow


def print_trial_balance(rows: list[TrialBalanceRow]) -> None:
    """Print trial balance rows as a table."""
    click.echo(f"\n{'Account':40s} {'Debit':>16s} {'Credit':>16s} {'Balance':>16s}")
    click.echo("-" * 91)
    for row in rows:
        click.echo(
            f"{row.account_path:40s} {str(row.debit):>16s} "
            f"{str(row.credit):>16s} {str(row.balance):>16s}"
        )


@click.command("balance")
@click.argument("path", metavar="ACCOUNT_PATH")
@click.option("--as-of", "as_of", help="Cut-off date (inclusive, defaults to today)")
@click.option("--currency", help="Only this currency")
@click.pass_context
def balance(ctx, path: str, as_of: str | None, currency: str | None):
    """Show the posted balance of an account.

    Examples:
        ledgerbook balance "Vermögen : Bank : Girokonto"
        ledgerbook balance "Ausgaben : Büro" --as-of 2024-12-31
    """
    service = BalanceService(ctx.obj["db"])
    cutoff = parse_date_option(ctx, as_of, "as-of date")
    try:
        normalized = account_path.normalize(path)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if currency:
        balances = {currency.upper(): service.balance_as_of(normalized, cutoff, currency.upper())}
    else:
        balances = service.balances_by_currency(normalized, cutoff)
        if not balances:
            default_currency = ctx.obj["config"].default_currency
            balances = {default_currency: service.balance_as_of(normalized, cutoff, default_currency)}

    for amount in balances.values():
        click.echo(f"{normalized}: {amount}")


@click.command("trial-balance")
@click.option("--as-of", "as_of", help="Cut-off date (inclusive, defaults to today)")
@click.pass_context
def trial_balance(ctx, as_of: str | None):
    """Show the trial balance of all accounts with a non-zero balance."""
    service = BalanceService(ctx.obj["db"])
    cutoff = parse_date_option(ctx, as_of, "as-of date")

    rows = service.trial_balance(cutoff)
    if not rows:
        click.echo("No balances found.")
        return
    print_trial_balance(rows)


def register_commands(cli):
    """Register balance commands with main CLI."""
    cli.add_command(balance, name="balance")
    cli.add_command(trial_balance, name="trial-balance")
