"""CLI entry point for patchlens.

Commands:
  review   run AI review on a pull request and post line-anchored comments
  inspect  show how a local patch or file is parsed and chunked (no AI calls)
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from patchlens_cli.commands.inspect import inspect_cmd
from patchlens_cli.commands.review import review_cmd

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("patchlens"),
    prog_name="patchlens",
)
@click.option(
    "--config",
    "config_path",
    default=".patchlens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PATCHLENS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log line-mapping decisions and dropped comments.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI code review with line-accurate comments for GitHub pull requests."""
    from patchlens_core.config import load_config, validate_config

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path)
    errors = validate_config(config)
    if errors:
        raise click.UsageError("Invalid configuration:\n  " + "\n  ".join(errors))

    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path


main.add_command(review_cmd)
main.add_command(inspect_cmd)
