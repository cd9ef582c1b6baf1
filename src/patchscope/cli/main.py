"""PatchScope CLI - patchscope command."""

import click

from patchscope.cli.order import order_command
from patchscope.cli.scan import scan_command
from patchscope.core.logging import configure_logging


@click.group()
@click.version_option(package_name="patchscope", prog_name="patchscope")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """PatchScope - find conflicting method patches between game plugins."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(scan_command, name="scan")
cli.add_command(order_command, name="order")


if __name__ == "__main__":
    cli()
