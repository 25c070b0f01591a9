"""check command: validate descriptor files in a local checkout."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ufglens_core.descriptor import load_descriptor
from ufglens_core.gh.liveness import GitHubChecker
from ufglens_core.gh.pull_request import get_client
from ufglens_core.report import render_report
from ufglens_core.reviewer import review_descriptors

console = Console()

_KIND_STYLE = {"valid": "green", "unrecognized": "magenta"}


@click.command("check")
@click.argument("paths", nargs=-1, required=True)
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Checkout the paths are relative to.",
)
@click.option("--offline", is_flag=True, help="Skip the GitHub repository and label checks.")
@click.option("--markdown", is_flag=True, help="Print the Markdown report instead of a table.")
@click.pass_context
def check_cmd(ctx, paths: tuple[str, ...], root: Path, offline: bool, markdown: bool):
    """Validate project descriptor files with the same checks as the analyzer.

    Exits with status 1 if any file has a problem.
    """
    config = ctx.obj["config"]

    descriptors = []
    for path in paths:
        descriptor = load_descriptor(path, root)
        if descriptor is None:
            console.print(f"[yellow]Skipping {path}: file not found under {root}.[/yellow]")
            continue
        descriptors.append(descriptor)

    if not descriptors:
        raise click.UsageError("None of the given paths exist.")

    checker = None
    if not offline and config.get("check_liveness", True):
        checker = GitHubChecker(get_client(config.get("github_token")))

    outcomes = review_descriptors(descriptors, checker, config.get("tag_aliases"))

    if markdown:
        console.print(
            render_report(outcomes, config.get("projects_dir", "_data/projects/"), config.get("maintainer", "shiftkey")),
            markup=False,
            emoji=False,
            highlight=False,
            soft_wrap=True,
        )
    else:
        table = Table(title="Descriptor check")
        table.add_column("File", style="cyan")
        table.add_column("Result")
        table.add_column("Details")
        for outcome in outcomes:
            style = _KIND_STYLE.get(outcome.kind.value, "red")
            details = outcome.message or "\n".join(outcome.validation_errors or outcome.tags_errors)
            table.add_row(escape(outcome.path), f"[{style}]{outcome.kind.value}[/{style}]", escape(details))
        console.print(table)

    failures = [o for o in outcomes if o.failed]
    if failures:
        console.print(f"[red]{len(failures)} of {len(outcomes)} file(s) have problems.[/red]")
        ctx.exit(1)
    console.print(f"[green]All {len(outcomes)} file(s) look good.[/green]")
