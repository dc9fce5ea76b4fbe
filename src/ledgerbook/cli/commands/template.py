"""Template management commands."""

import click

from ledgerbook.cli.date_filters import parse_date_option
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.amount import Amount
from ledgerbook.domain.entities import AmountType, Template, TemplateLineInput
from ledgerbook.domain.entry import EntryService
from ledgerbook.domain.template import TemplateService
from ledgerbook.utils.amount_parser import parse_decimal, split_assignment

_line_options = [
    click.option("--line", "fixed_lines", multiple=True, help="Fixed line as 'ACCOUNT=AMOUNT' (repeatable)"),
    click.option("--percent-line", "percent_lines", multiple=True, help="Percentage line as 'ACCOUNT=PERCENT'"),
    click.option("--fraction-line", "fraction_lines", multiple=True, help="Fraction line as 'ACCOUNT=FRACTION'"),
    click.option("--description", help="Template description"),
    click.option("--default-total", help="Total used when applying without --total"),
    click.option("--currency", help="Currency of the default total"),
]


def line_options(func):
    for option in reversed(_line_options):
        func = option(func)
    return func


def build_lines(fixed_lines, percent_lines, fraction_lines) -> list[TemplateLineInput]:
    """Build template lines from CLI specs, numbered in option order."""
    lines = []
    for spec in fixed_lines:
        path, value = split_assignment(spec)
        lines.append(TemplateLineInput(account_path=path, amount_type=AmountType.FIXED, amount_value=parse_decimal(value)))
    for spec in percent_lines:
        path, value = split_assignment(spec)
        lines.append(TemplateLineInput(account_path=path, amount_type=AmountType.PERCENTAGE, amount_value=parse_decimal(value)))
    for spec in fraction_lines:
        path, value = split_assignment(spec)
        lines.append(TemplateLineInput(account_path=path, fraction=parse_decimal(value)))
    return [
        TemplateLineInput(
            account_path=line.account_path,
            amount_type=line.amount_type,
            amount_value=line.amount_value,
            fraction=line.fraction,
            position=index,
        )
        for index, line in enumerate(lines, start=1)
    ]


def _default_total(ctx, default_total: str | None, currency: str | None) -> Amount | None:
    if default_total is None:
        return None
    return Amount.parse(default_total, (currency or ctx.obj["config"].default_currency).upper())


def print_template(template: Template) -> None:
    """Print a template version with its lines."""
    status = "" if template.active else " [inactive]"
    click.echo(f"\n{template.name} v{template.version}{status}")
    click.echo("-" * 60)
    if template.description:
        click.echo(f"Description:   {template.description}")
    if template.default_total is not None:
        click.echo(f"Default total: {template.default_total}")
    click.echo("\nLines:")
    for line in template.lines:
        if line.amount_type == AmountType.PERCENTAGE:
            value = f"{line.amount_value.normalize():f} %"
        else:
            value = f"{line.amount_value.normalize():f} / fraction {line.fraction.normalize():f}"
        click.echo(f"  {line.position:2d}. {line.account_path:40s} {value}")


@click.group()
def template_group():
    """Manage entry templates."""
    pass


@template_group.command("create")
@click.argument("name")
@line_options
@click.pass_context
def create_template(ctx, name, fixed_lines, percent_lines, fraction_lines, description, default_total, currency):
    """Create a template, or the next version of an existing one.

    Examples:
        ledgerbook template create "Büromaterial" \\
            --percent-line "Ausgaben : Büro : Material=100" \\
            --percent-line "Vermögen : Bank : Girokonto=-100"
    """
    service = TemplateService(ctx.obj["db"], ctx.obj["config"])
    try:
        template = service.create_template(
            name,
            build_lines(fixed_lines, percent_lines, fraction_lines),
            created_by=ctx.obj["user"],
            description=description,
            default_total=_default_total(ctx, default_total, currency),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created template '{template.name}' version {template.version}")


@template_group.command("new-version")
@click.argument("name")
@click.option("--from-version", type=int, help="Version to base on (defaults to latest)")
@line_options
@click.pass_context
def new_version(ctx, name, from_version, fixed_lines, percent_lines, fraction_lines, description, default_total, currency):
    """Create the version following an existing template."""
    service = TemplateService(ctx.obj["db"], ctx.obj["config"])
    try:
        base = service.require_template(name, from_version)
        template = service.create_new_version(
            base,
            build_lines(fixed_lines, percent_lines, fraction_lines),
            created_by=ctx.obj["user"],
            description=description if description is not None else base.description,
            default_total=_default_total(ctx, default_total, currency) or base.default_total,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created template '{template.name}' version {template.version}")


@template_group.command("list")
@click.option("--all-versions", is_flag=True, help="Show every version, not only the latest")
@click.option("--active-only", is_flag=True, help="Hide inactive templates")
@click.pass_context
def list_templates(ctx, all_versions: bool, active_only: bool):
    """List templates."""
    service = TemplateService(ctx.obj["db"], ctx.obj["config"])
    templates = service.list_templates(include_all_versions=all_versions, active_only=active_only)
    if not templates:
        click.echo("No templates found.")
        return

    click.echo("\nTemplates:")
    click.echo("-" * 60)
    for template in templates:
        status = "" if template.active else "  [inactive]"
        click.echo(f"{template.name} v{template.version} ({len(template.lines)} lines){status}")


@template_group.command("show")
@click.argument("name")
@click.option("--version", "version", type=int, help="Template version (defaults to latest)")
@click.pass_context
def show_template(ctx, name: str, version: int | None):
    """Show a template version."""
    service = TemplateService(ctx.obj["db"], ctx.obj["config"])
    try:
        print_template(service.require_template(name, version))
    except ValueError as e:
        handle_domain_error(ctx, e)


def _set_active(ctx, name: str, version: int | None, active: bool) -> None:
    service = TemplateService(ctx.obj["db"], ctx.obj["config"])
    try:
        template = service.set_template_active(service.require_template(name, version), active)
    except ValueError as e:
        handle_domain_error(ctx, e)
    state = "Activated" if active else "Deactivated"
    click.echo(f"{state} template '{template.name}' version {template.version}")


@template_group.command("activate")
@click.argument("name")
@click.option("--version", "version", type=int, help="Template version (defaults to latest)")
@click.pass_context
def activate_template(ctx, name: str, version: int | None):
    """Activate a template version."""
    _set_active(ctx, name, version, True)


@template_group.command("deactivate")
@click.argument("name")
@click.option("--version", "version", type=int, help="Template version (defaults to latest)")
@click.pass_context
def deactivate_template(ctx, name: str, version: int | None):
    """Deactivate a template version."""
    _set_active(ctx, name, version, False)


@template_group.command("apply")
@click.argument("name")
@click.option("--version", "version", type=int, help="Template version (defaults to latest)")
@click.option("--total", help="Total amount")
@click.option("--currency", help="Currency of the total")
@click.option("--fractions", is_flag=True, help="Split the total by line fractions")
@click.option("--date", "date_str", default="today", help="Entry date")
@click.option("--description", help="Entry description (defaults to template name)")
@click.option("--reference", help="Entry reference")
@click.option("--post", "post_now", is_flag=True, help="Post the entry right away")
@click.pass_context
def apply_template(ctx, name, version, total, currency, fractions, date_str, description, reference, post_now):
    """Create a draft entry from a template.

    Examples:
        ledgerbook template apply "Büromaterial" --total 59,50
    """
    config = ctx.obj["config"]
    templates = TemplateService(ctx.obj["db"], config)
    entries = EntryService(ctx.obj["db"], config)
    entry_date = parse_date_option(ctx, date_str, "date")

    try:
        template = templates.require_template(name, version)
        total_amount = Amount.parse(total, (currency or config.default_currency).upper()) if total else None
        attrs = {
            "date": entry_date,
            "description": description or template.name,
            "reference": reference,
            "created_by": ctx.obj["user"],
        }
        if fractions:
            attrs = templates.apply_template_with_fractions(template, total_amount, attrs)
        else:
            attrs = templates.apply_template(template, total_amount, attrs)
        entry = entries.create_entry(**attrs)
        if post_now:
            entry = entries.post_entry(entry, ctx.obj["user"])
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created entry {entry.id} ({entry.status.value}) from template '{template.name}' v{template.version}")


def register_commands(cli):
    """Register template commands with main CLI."""
    cli.add_command(template_group, name="template")
