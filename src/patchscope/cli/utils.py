"""CLI utilities."""

from pathlib import Path

import click

from patchscope.analysis.pipeline import Analysis
from patchscope.config.loader import load_config
from patchscope.core.errors import PatchScopeError
from patchscope.core.logging import configure_logging
from patchscope.core.progress import pluralize, spinner, status
from patchscope.project.loader import find_conflicts


def run_analysis(project: Path, *, verbose: bool = False) -> Analysis:
    """Load config, analyze ``project`` and report the file count.

    Raises:
        click.ClickException: On any project, parse or config error.
    """
    project = project.resolve()
    try:
        config = load_config(project)
        if not verbose:
            configure_logging(config=config.logging)
        with spinner("Finding conflicts"):
            analysis = find_conflicts(project, config)
    except PatchScopeError as e:
        raise click.ClickException(str(e)) from e

    status(f"Analyzed {pluralize(len(analysis.files), 'file')}", style="success")
    return analysis
