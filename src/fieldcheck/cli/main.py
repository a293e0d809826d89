"""fieldcheck CLI entry point."""

import logging

import click

from fieldcheck.config import CheckConfig


@click.group()
@click.option(
    "--log-level",
    default=None,
    help="Logging level (overrides FIELDCHECK_LOG_LEVEL).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """fieldcheck: field constraint validation CLI."""
    config = CheckConfig.from_env()
    if log_level:
        config.log_level = log_level.upper()
    logging.basicConfig(level=config.level, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = config


# Register subcommands
from fieldcheck.cli.check_cmd import check  # noqa: E402
from fieldcheck.cli.schemas_cmd import schemas  # noqa: E402

cli.add_command(schemas)
cli.add_command(check)
