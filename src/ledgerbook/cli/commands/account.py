"""Account management commands."""

import click

from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain import account_path
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.entities import AccountTreeNode


def print_account_tree(nodes: list[AccountTreeNode]) -> None:
    """Recursively print account tree."""
    for node in nodes:
        acc = node.account
        status = "" if acc.active else " (inactive)"
        click.echo(f"{account_path.display(acc.path, 'leaf_with_depth')}{status}")
        print_account_tree(list(node.children))


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("path", metavar="ACCOUNT_PATH")
@click.option("--description", help="Account description")
@click.pass_context
def create_account(ctx, path: str, description: str | None):
    """Create a new account.

    Parent accounts must exist before their children.

    Examples:
        ledgerbook account create "Ausgaben"
        ledgerbook account create "Ausgaben : Büro" --description "Office costs"
    """
    service = AccountService(ctx.obj["db"], ctx.obj["config"])
    try:
        account = service.create_account(path, created_by=ctx.obj["user"], description=description)
        click.echo(f"Created account '{account.path}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include inactive accounts")
@click.pass_context
def list_accounts(ctx, show_all: bool):
    """List accounts."""
    service = AccountService(ctx.obj["db"], ctx.obj["config"])

    accounts = service.list_accounts(active=None if show_all else True)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 60)
    for acc in accounts:
        status = "" if acc.active else "  [inactive]"
        click.echo(f"{acc.path}{status}")


@account_group.command("tree")
@click.option("--all", "show_all", is_flag=True, help="Include inactive accounts")
@click.pass_context
def account_tree(ctx, show_all: bool):
    """Show accounts as a tree."""
    service = AccountService(ctx.obj["db"], ctx.obj["config"])

    tree = service.build_account_tree(active=None if show_all else True)
    if not tree:
        click.echo("No accounts found.")
        return
    print_account_tree(tree)


@account_group.command("deactivate")
@click.argument("path", metavar="ACCOUNT_PATH")
@click.pass_context
def deactivate_account(ctx, path: str):
    """Deactivate an account.

    Accounts with active children or recent posted positions cannot be
    deactivated.
    """
    service = AccountService(ctx.obj["db"], ctx.obj["config"])
    try:
        service.deactivate_account(path)
        click.echo(f"Deactivated account '{account_path.normalize(path)}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("reactivate")
@click.argument("path", metavar="ACCOUNT_PATH")
@click.pass_context
def reactivate_account(ctx, path: str):
    """Reactivate an account."""
    service = AccountService(ctx.obj["db"], ctx.obj["config"])
    try:
        service.reactivate_account(path)
        click.echo(f"Reactivated account '{account_path.normalize(path)}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("path", metavar="ACCOUNT_PATH")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, path: str, yes: bool) -> None:
    """Delete an account.

    The account can only be deleted if it has no child accounts and no
    positions. Deactivate it otherwise.

    Examples:
        ledgerbook account delete "Ausgaben : Büro"
    """
    service = AccountService(ctx.obj["db"], ctx.obj["config"])
    try:
        account = service.require_account(path)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(f"Are you sure you want to delete account '{account.path}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account.path)
        click.echo(f"Deleted account '{account.path}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
