"""
Command-line interface for Pathwise.

Reads and writes JSON documents; all progress logic lives in the engine.
"""
import logging
from pathlib import Path

import click

from pathwise.commands.gate import import_gate
from pathwise.commands.recompute import recompute
from pathwise.commands.status import status
from pathwise.constants import ConfigManager, set_config_manager
from pathwise.logging_config import configure_logging


@click.group()
@click.option("-v", "--verbose", count=True, help="Show log output (-v info, -vv debug).")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to a config.json file.",
)
def cli(verbose, config_path):
    """Track progress across project and study-plan trees."""
    if verbose:
        configure_logging(logging.DEBUG if verbose > 1 else logging.INFO)
    if config_path is not None:
        set_config_manager(ConfigManager(config_path=config_path))


cli.add_command(status)
cli.add_command(recompute)
cli.add_command(import_gate)


if __name__ == '__main__':
    cli()
