"""CLI entry point for the Gmail → InContact forwarder."""

import logging

import click
from dotenv import load_dotenv

from src.config import Settings

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, help="Log at DEBUG level.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Forward unread Gmail inbox messages to InContact as work items.

    With no subcommand, runs a single forwarding pass (same as `run`).
    """
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ctx.obj = Settings.from_env()
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


# Import and register commands after cli is defined to avoid circular imports.
from src.cli.commands import authorize, label, run  # noqa: E402

cli.add_command(run)
cli.add_command(authorize)
cli.add_command(label)
