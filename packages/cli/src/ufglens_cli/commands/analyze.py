"""analyze command: run the pull-request analyzer for one webhook payload."""

from __future__ import annotations

import json

import click
from rich.console import Console

from ufglens_core.events import is_eligible, parse_event
from ufglens_core.reviewer import run_analysis

console = Console()


@click.command("analyze")
@click.argument("event_file", type=click.File("r"))
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print the report without touching pull-request comments.",
)
@click.pass_context
def analyze_cmd(ctx, event_file, shadow: bool):
    """Analyze the pull request described by a webhook payload.

    EVENT_FILE is the JSON body of a GitHub `pull_request` webhook delivery
    (use `-` to read it from stdin). Events that are not synchronize, opened
    or reopened pull requests against the upstream default branch are ignored.

    \b
    Required environment variables (unless --shadow):
      GITHUB_TOKEN         GitHub token for the bot account (or use gh CLI)
    """
    config = ctx.obj["config"]

    try:
        payload = json.load(event_file)
        event = parse_event(payload)
    except (json.JSONDecodeError, ValueError) as e:
        raise click.UsageError(f"Could not read pull request event: {e}")

    if not is_eligible(event, config["upstream_repo"]):
        console.print(f"[yellow]Ignoring '{event.action}' event for {event.repo_full_name}#{event.number}.[/yellow]")
        return

    if not shadow and not config.get("github_token"):
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Use --shadow to preview the report without posting it."
        )

    summary = run_analysis(event, config, shadow=shadow)

    if summary is None:
        console.print("[yellow]No report was produced for this pull request.[/yellow]")
        return

    tally = f"{len(summary.failures)} of {len(summary.outcomes)} file(s) have problems."
    if shadow:
        console.print(summary.body, markup=False, emoji=False, highlight=False, soft_wrap=True)
        console.print(f"\n[bold]Shadow run complete. {tally}[/bold]")
    elif summary.posted:
        console.print(f"[green]Report posted: {summary.comment_url}[/green]")
        console.print(tally)
    else:
        console.print("[red]The report could not be posted. See the log for details.[/red]")
