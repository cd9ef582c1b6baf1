"""patchscope order command - suggest a plugin load order."""

import json
from pathlib import Path

import click

from patchscope.core.progress import status


@click.command()
@click.argument("project", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def order_command(ctx: click.Context, project: Path, as_json: bool) -> None:
    """Suggest a plugin load order that avoids active conflicts.

    Plugins in the same group can load in any order relative to each other;
    earlier groups load first.
    """
    from patchscope.cli.utils import run_analysis

    analysis = run_analysis(project, verbose=ctx.obj.get("verbose", False))
    plan = analysis.plan_order()

    if as_json:
        click.echo(json.dumps(plan.to_dict(), indent=2))
        return

    for number, group in enumerate(plan.groups, start=1):
        click.echo(f"{number}. {', '.join(group)}")

    for cycle in plan.cycles:
        status(f"Circular constraint: {' <-> '.join(cycle)}", style="warning")
    if plan.violations:
        status(f"Order still conflicts for: {', '.join(plan.violations)}", style="warning")
