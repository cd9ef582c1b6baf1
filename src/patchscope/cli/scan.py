"""patchscope scan command - list conflicts."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from patchscope.analysis.models import Conflict, Edit
from patchscope.core.progress import pluralize, status


def _location(edit: Edit) -> str:
    return f"{edit.file}:{edit.span.start.line}"


def _make_conflict_table(conflicts: list[Conflict]) -> Table:
    table = Table(show_header=True, box=None, padding=(0, 1), pad_edge=False)
    table.add_column("kind", style="cyan")
    table.add_column("method")
    table.add_column("earlier")
    table.add_column("later")
    table.add_column("styles", style="dim")

    for conflict in conflicts:
        earlier, later = conflict.edits
        table.add_row(
            conflict.kind.value,
            later.key.display,
            _location(earlier),
            _location(later),
            f"{earlier.style.value} -> {later.style.value}",
            style="dim" if conflict.ignored else None,
        )
    return table


@click.command()
@click.argument("project", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--active-only", is_flag=True, help="Hide conflicts ignored by default")
@click.pass_context
def scan_command(ctx: click.Context, project: Path, as_json: bool, active_only: bool) -> None:
    """Find plugins that patch the same methods incompatibly.

    PROJECT is the game project root (default: current directory).
    """
    from patchscope.cli.utils import run_analysis

    analysis = run_analysis(project, verbose=ctx.obj.get("verbose", False))
    conflicts = analysis.active_conflicts if active_only else list(analysis.conflicts)

    if as_json:
        click.echo(json.dumps([c.to_dict() for c in conflicts], indent=2))
        return

    if not conflicts:
        status("No conflicts found", style="success")
        return

    Console().print(_make_conflict_table(conflicts))
    ignored = sum(1 for c in conflicts if c.ignored)
    summary = pluralize(len(conflicts), "conflict")
    if ignored:
        summary += f" ({ignored} ignored, shown dimmed)"
    status(summary, style="warning")
