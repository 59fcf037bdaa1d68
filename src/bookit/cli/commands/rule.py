"""Bank rule commands."""

import click
from bookit.cli.account_resolution import resolve_ledger_account_or_exit
from bookit.cli.error_handling import exit_on_domain_error
from bookit.domain.account import AccountService
from bookit.domain.rules import RuleMatchPolicy, RuleService

POLICIES = [p.value for p in RuleMatchPolicy]


@click.group()
def rule_group():
    """Manage keyword rules."""
    pass


@rule_group.command("create")
@click.argument("keyword")
@click.argument("account")
@click.pass_context
def create_rule(ctx, keyword: str, account: str):
    """Create a rule mapping KEYWORD to a ledger account.

    Examples:
        bookit rule create "Shell" 4400
        bookit rule create "bank fee" "Bank Charges"
    """
    db = ctx.obj["db"]
    account_id = resolve_ledger_account_or_exit(
        ctx, AccountService(db, ctx.obj["settings"]), account
    )
    with exit_on_domain_error(ctx):
        rule_id = RuleService(db).create_rule(keyword, account_id)
    click.echo(f"Created rule '{keyword.strip()}' (ID: {rule_id})")


@rule_group.command("list")
@click.pass_context
def list_rules(ctx):
    """List rules in matching order."""
    db = ctx.obj["db"]
    account_service = AccountService(db, ctx.obj["settings"])

    rules = RuleService(db).list_rules()
    if not rules:
        click.echo("No rules found.")
        return

    click.echo("\nRules:")
    click.echo("-" * 60)
    for rule in rules:
        account = account_service.get_account(rule.target_account_id)
        label = account.label if account else f"#{rule.target_account_id}"
        click.echo(f"ID: {rule.id:3d} | {rule.keyword:25s} -> {label}")


@rule_group.command("match")
@click.argument("description")
@click.option(
    "--policy",
    type=click.Choice(POLICIES),
    default=RuleMatchPolicy.FIRST_CREATED.value,
    show_default=True,
    help="Which rule wins when several match",
)
@click.pass_context
def match_rule(ctx, description: str, policy: str):
    """Show which ledger account a description matches."""
    db = ctx.obj["db"]
    rule = RuleService(db).match_rule(description, RuleMatchPolicy(policy))
    if rule is None:
        click.echo("No rule matches.")
        return

    account = AccountService(db, ctx.obj["settings"]).get_account(rule.target_account_id)
    label = account.label if account else f"#{rule.target_account_id}"
    click.echo(f"Matched rule '{rule.keyword}' -> {label}")


@rule_group.command("delete")
@click.argument("rule_id", type=int)
@click.pass_context
def delete_rule(ctx, rule_id: int):
    """Delete a rule."""
    with exit_on_domain_error(ctx):
        RuleService(ctx.obj["db"]).delete_rule(rule_id)
    click.echo(f"Deleted rule {rule_id}")


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
