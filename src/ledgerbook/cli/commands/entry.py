"""Entry management commands."""

import click

from ledgerbook.cli.date_filters import parse_date_option, resolve_cli_date_range
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.entities import Entry, EntryStatus
from ledgerbook.domain.entry import EntryService
from ledgerbook.utils.amount_parser import parse_position


def print_entry(entry: Entry) -> None:
    """Print an entry with its positions."""
    click.echo(f"\nEntry {entry.id} [{entry.status.value}]")
    click.echo("-" * 60)
    click.echo(f"Date:        {entry.date.isoformat()}")
    click.echo(f"Description: {entry.description}")
    if entry.reference:
        click.echo(f"Reference:   {entry.reference}")
    click.echo(f"Created by:  {entry.created_by}")
    if entry.posted_by:
        click.echo(f"Posted by:   {entry.posted_by}")
    if entry.status == EntryStatus.VOID:
        click.echo(f"Voided by:   {entry.voided_by} ({entry.void_reason})")
    if entry.reversal_entry_id:
        click.echo(f"Reversed by: entry {entry.reversal_entry_id}")
    if entry.reverses_entry_id:
        click.echo(f"Reverses:    entry {entry.reverses_entry_id}")
    click.echo("\nPositions:")
    for position in entry.positions:
        tax = "  [tax]" if position.tax_relevant else ""
        click.echo(f"  {position.account_path:40s} {str(position.amount):>16s}{tax}")


def _service(ctx) -> EntryService:
    return EntryService(ctx.obj["db"], ctx.obj["config"])


def _load(ctx, service: EntryService, entry_id: int) -> Entry:
    try:
        return service.require_entry(entry_id)
    except ValueError as e:
        handle_domain_error(ctx, e)


@click.group()
def entry_group():
    """Manage entries."""
    pass


@entry_group.command("create")
@click.option("--date", "date_str", default="today", help="Entry date (YYYY-MM-DD, DD.MM.YYYY, 'today', ...)")
@click.option("--description", required=True, help="Entry description")
@click.option("--reference", help="Reference (receipt or invoice number)")
@click.option(
    "--position",
    "positions",
    multiple=True,
    required=True,
    help="Position as 'ACCOUNT=AMOUNT' (repeatable)",
)
@click.option("--currency", help="Currency of all amounts (defaults to configured currency)")
@click.option("--post", "post_now", is_flag=True, help="Post the entry right away")
@click.pass_context
def create_entry(
    ctx,
    date_str: str,
    description: str,
    reference: str | None,
    positions: tuple[str, ...],
    currency: str | None,
    post_now: bool,
) -> None:
    """Create a draft entry.

    Examples:
        ledgerbook entry create --description "Druckerpapier" \\
            --position "Ausgaben : Büro : Material=12,50" \\
            --position "Vermögen : Bank : Girokonto=-12,50"
    """
    service = _service(ctx)
    entry_date = parse_date_option(ctx, date_str, "date")
    currency = (currency or ctx.obj["config"].default_currency).upper()

    try:
        position_inputs = [parse_position(spec, currency) for spec in positions]
        entry = service.create_entry(
            date=entry_date,
            description=description,
            positions=position_inputs,
            created_by=ctx.obj["user"],
            reference=reference,
        )
        if post_now:
            entry = service.post_entry(entry, ctx.obj["user"])
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created entry {entry.id} ({entry.status.value})")


@entry_group.command("list")
@click.option("--status", type=click.Choice([s.value for s in EntryStatus]), help="Only entries in this state")
@click.option("--account", "account", help="Only entries touching this account")
@click.option("--from", "start_date", help="Start date (inclusive)")
@click.option("--to", "end_date", help="End date (inclusive)")
@click.option("--period", help="this-month, last-month, this-year, last-year, YYYY or YYYY-MM")
@click.option("--search", help="Text in description or reference")
@click.option("--limit", type=int, help="Maximum number of entries")
@click.pass_context
def list_entries(
    ctx,
    status: str | None,
    account: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    search: str | None,
    limit: int | None,
) -> None:
    """List entries, newest first."""
    service = _service(ctx)
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)

    try:
        entries = service.list_entries(
            status=EntryStatus(status) if status else None,
            start_date=start,
            end_date=end,
            account_path=account,
            search=search,
            limit=limit,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    if not entries:
        click.echo("No entries found.")
        return

    click.echo(f"\n{'ID':>5s}  {'Date':10s}  {'Status':6s}  {'Amount':>16s}  Description")
    click.echo("-" * 80)
    for entry in entries:
        volume = ", ".join(str(amount) for amount in entry.totals_by_currency().values())
        click.echo(
            f"{entry.id:5d}  {entry.date.isoformat()}  {entry.status.value:6s}  "
            f"{volume:>16s}  {entry.description}"
        )


@entry_group.command("show")
@click.argument("entry_id", type=int)
@click.pass_context
def show_entry(ctx, entry_id: int) -> None:
    """Show an entry with its positions."""
    service = _service(ctx)
    print_entry(_load(ctx, service, entry_id))


@entry_group.command("post")
@click.argument("entry_id", type=int)
@click.pass_context
def post_entry(ctx, entry_id: int) -> None:
    """Post a draft entry. Posted entries cannot be changed."""
    service = _service(ctx)
    entry = _load(ctx, service, entry_id)
    try:
        service.post_entry(entry, ctx.obj["user"])
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Posted entry {entry_id}")


@entry_group.command("void")
@click.argument("entry_id", type=int)
@click.option("--reason", required=True, help="Why the entry is voided")
@click.option("--date", "date_str", help="Date of the reversal entry (defaults to today)")
@click.pass_context
def void_entry(ctx, entry_id: int, reason: str, date_str: str | None) -> None:
    """Void a posted entry by booking a reversal.

    Examples:
        ledgerbook entry void 12 --reason "duplicate"
    """
    service = _service(ctx)
    entry = _load(ctx, service, entry_id)
    reversal_date = parse_date_option(ctx, date_str, "date")
    try:
        voided, reversal = service.void_entry(entry, ctx.obj["user"], reason, reversal_date=reversal_date)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Voided entry {voided.id}; reversal entry {reversal.id} posted")


@entry_group.command("delete")
@click.argument("entry_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_entry(ctx, entry_id: int, yes: bool) -> None:
    """Delete a draft entry."""
    service = _service(ctx)
    entry = _load(ctx, service, entry_id)

    if not yes and not click.confirm(f"Are you sure you want to delete entry {entry_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_entry(entry)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted entry {entry_id}")


def register_commands(cli):
    """Register entry commands with main CLI."""
    cli.add_command(entry_group, name="entry")
