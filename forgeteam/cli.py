"""forgeteam CLI — plan, apply and destroy declared teams."""

import json
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from forgeteam import __version__
from forgeteam.errors import ForgeteamError, ValidationError

console = Console()

ACTION_STYLES = {
    "create": "green",
    "update": "yellow",
    "replace": "magenta",
    "delete": "red",
    "no-op": "dim",
}


def _fail(error: ForgeteamError) -> None:
    console.print(f"[red]Error:[/] {escape(str(error))}")
    if isinstance(error, ValidationError):
        for issue in error.issues:
            console.print(f"  [red]x[/] {escape(str(issue))}")
    if error.retryable:
        console.print("[yellow]This error is transient; re-running may succeed.[/]")
    sys.exit(1)


def _engine(ctx: click.Context):
    """Build config, logging, client and engine from the global options."""
    from forgeteam.client import ForgejoClient
    from forgeteam.config import ProviderConfig
    from forgeteam.engine import Engine
    from forgeteam.log import setup_logging
    from forgeteam.state import StateStore
    from forgeteam.teams.reconciler import TeamReconciler

    opts = ctx.obj
    config = ProviderConfig.from_env(
        host=opts["host"],
        api_token=opts["token"],
        username=opts["username"],
        password=opts["password"],
        timeout=opts["timeout"],
        log_level=opts["log_level"],
    )
    setup_logging(config.log_level, secrets=config.secrets())
    config.validate()

    client = ForgejoClient(config)
    ctx.call_on_close(client.close)
    return Engine(TeamReconciler(client), StateStore(opts["state"]))


@click.group()
@click.version_option(version=__version__)
@click.option("--host", default=None, help="Instance URL (default: $FORGEJO_HOST)")
@click.option("--token", default=None, help="API token (default: $FORGEJO_API_TOKEN)")
@click.option("--username", default=None, help="Basic auth user (default: $FORGEJO_USERNAME)")
@click.option("--password", default=None, help="Basic auth password (default: $FORGEJO_PASSWORD)")
@click.option("--timeout", default=None, type=float, help="Request timeout in seconds")
@click.option("--state", "-s", default=None, help="State file (default: .forgeteam/state.json)")
@click.option("--log-level", default=None, help="Log level (default: $FORGETEAM_LOG_LEVEL or INFO)")
@click.pass_context
def main(ctx, host, token, username, password, timeout, state, log_level):
    """forgeteam — declarative team management for Forgejo and Gitea.

    Declare teams in a YAML file, then plan and apply them. Re-applying the
    same file converges on the same remote teams.
    """
    ctx.obj = {
        "host": host,
        "token": token,
        "username": username,
        "password": password,
        "timeout": timeout,
        "state": state,
        "log_level": log_level,
    }


# ── Validate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("declarations_path")
def validate(declarations_path: str):
    """Validate a declaration file without contacting the platform."""
    from forgeteam.declarations import load_declarations

    try:
        specs = load_declarations(declarations_path)
    except ForgeteamError as e:
        _fail(e)
    console.print(f"[green]Valid![/] {len(specs)} team(s) declared.")


# ── Plan / Apply ─────────────────────────────────────────────────────


@main.command()
@click.argument("declarations_path")
@click.pass_context
def plan(ctx, declarations_path: str):
    """Show what apply would change."""
    from forgeteam.declarations import load_declarations

    try:
        specs = load_declarations(declarations_path)
        plans = _engine(ctx).plan(specs)
    except ForgeteamError as e:
        _fail(e)

    table = Table(title=f"Plan ({len(plans)} team(s))")
    table.add_column("Slot", style="cyan")
    table.add_column("Action")
    table.add_column("Details")
    for p in plans:
        style = ACTION_STYLES.get(p.action, "")
        table.add_row(p.slot, f"[{style}]{p.action}[/]", escape(p.summary()))
    console.print(table)


@main.command()
@click.argument("declarations_path")
@click.pass_context
def apply(ctx, declarations_path: str):
    """Create, update, replace or delete teams to match the file."""
    from forgeteam.declarations import load_declarations

    try:
        specs = load_declarations(declarations_path)
        report = _engine(ctx).apply(specs)
    except ForgeteamError as e:
        _fail(e)

    for outcome in report.outcomes:
        if not outcome.ok:
            console.print(f"  [red]FAIL[/] {outcome.slot}: {escape(str(outcome.error))}")
        elif outcome.deleted:
            console.print(f"  [red]-[/] {outcome.slot}: deleted")
        else:
            steps = ", ".join(outcome.result.steps) or "no changes"
            console.print(f"  [green]v[/] {outcome.slot}: {steps} (id={outcome.result.record.id})")

    if not report.ok:
        console.print(f"\n[red]{len(report.failures)} slot(s) failed.[/]")
        sys.exit(1)
    console.print("\n[green]Apply complete.[/]")


@main.command()
@click.confirmation_option(prompt="Delete every team in state?")
@click.pass_context
def destroy(ctx):
    """Delete every team recorded in state."""
    try:
        report = _engine(ctx).destroy()
    except ForgeteamError as e:
        _fail(e)

    for outcome in report.outcomes:
        if outcome.ok:
            console.print(f"  [red]-[/] {outcome.slot}: deleted")
        else:
            console.print(f"  [red]FAIL[/] {outcome.slot}: {escape(str(outcome.error))}")
    if not report.ok:
        sys.exit(1)


# ── Import / Show / Lookup ───────────────────────────────────────────


@main.command(name="import")
@click.argument("slot")
@click.argument("identifier")
@click.pass_context
def import_team(ctx, slot: str, identifier: str):
    """Adopt an existing team into state.

    IDENTIFIER is a numeric team id or ORGANIZATION/NAME.
    """
    try:
        record = _engine(ctx).import_team(slot, identifier)
    except ForgeteamError as e:
        _fail(e)
    console.print(f"[green]Imported[/] {record.organization}/{record.name} (id={record.id}) as '{slot}'")


@main.command()
@click.pass_context
def show(ctx):
    """List the teams recorded in state."""
    from forgeteam.state import StateStore

    try:
        items = StateStore(ctx.obj["state"]).items()
    except ForgeteamError as e:
        _fail(e)

    if not items:
        console.print("[yellow]State is empty.[/]")
        return

    table = Table(title=f"State ({len(items)} team(s))")
    table.add_column("Slot", style="cyan")
    table.add_column("ID", justify="right")
    table.add_column("Organization")
    table.add_column("Name")
    table.add_column("Permission")
    table.add_column("Units")
    for slot, record in items:
        table.add_row(
            slot,
            str(record.id),
            record.organization,
            record.name,
            record.permission.value,
            ", ".join(sorted(record.units)),
        )
    console.print(table)


@main.command()
@click.argument("organization")
@click.argument("name")
@click.pass_context
def lookup(ctx, organization: str, name: str):
    """Print the team NAME in ORGANIZATION as JSON."""
    try:
        record = _engine(ctx).reconciler.lookup(organization, name)
    except ForgeteamError as e:
        _fail(e)
    console.print_json(json.dumps(record.to_dict()))


if __name__ == "__main__":
    main()
