"""CLI entry point for ufglens.

Commands:
  analyze  - run the pull-request analyzer for one webhook payload
  check    - validate descriptor files in a local checkout
"""

from __future__ import annotations

import importlib.metadata
import logging

import click

from ufglens_cli.commands.analyze import analyze_cmd
from ufglens_cli.commands.check import check_cmd

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.version_option(
    version=importlib.metadata.version("ufglens"),
    prog_name="ufglens",
)
@click.option(
    "--config",
    "config_path",
    default=".ufglens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="UFGLENS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Pull-request analyzer for the Up For Grabs project index."""
    from ufglens_core.config import load_config
    from ufglens_cli.auth import resolve_github_token

    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=_LOG_FORMAT)

    ctx.ensure_object(dict)

    config = load_config(config_path)

    # Resolve token early so all subcommands share the same resolution.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config


main.add_command(analyze_cmd)
main.add_command(check_cmd)
