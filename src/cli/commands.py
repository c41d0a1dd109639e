"""CLI command implementations — each wraps one async forwarder entry point."""

from __future__ import annotations

import asyncio
import logging

import click
import httpx
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from src.agent.forwarder import ForwardResult, authorize_only, forward_inbox, lookup_label
from src.config import Settings
from src.errors import ForwarderError

logger = logging.getLogger(__name__)
console = Console(width=200)

# Failures the forwarder reports and then exits 0 on.
_REPORTED_ERRORS = (ForwarderError, httpx.HTTPError, OSError, ValueError)


@click.command()
@click.option(
    "--max-concurrency",
    type=int,
    default=None,
    help="Cap on messages forwarded at once (default: unbounded).",
)
@click.pass_obj
def run(settings: Settings, max_concurrency: int | None) -> None:
    """Forward every inbox message to InContact and print the contact IDs."""
    if max_concurrency is not None:
        settings.max_concurrency = max_concurrency if max_concurrency > 0 else None
    try:
        results = asyncio.run(forward_inbox(settings))
    except _REPORTED_ERRORS as exc:
        logger.error("Forwarding failed: %s", exc)
        console.print(f"[red]Forwarding failed:[/red] {escape(str(exc))}")
        return
    _print_results(results)


@click.command()
@click.pass_obj
def authorize(settings: Settings) -> None:
    """Authorize Gmail access and store the token (prompts only if no token exists)."""
    try:
        asyncio.run(authorize_only(settings))
    except _REPORTED_ERRORS as exc:
        logger.error("Authorization failed: %s", exc)
        console.print(f"[red]Authorization failed:[/red] {escape(str(exc))}")
        return
    console.print(f"[green]Gmail authorized[/green] — token at {settings.token_file}")


@click.command()
@click.argument("name")
@click.pass_obj
def label(settings: Settings, name: str) -> None:
    """Print the Gmail label ID for NAME."""
    try:
        label_id = asyncio.run(lookup_label(settings, name))
    except _REPORTED_ERRORS as exc:
        logger.error("Label lookup failed: %s", exc)
        console.print(f"[red]Label lookup failed:[/red] {escape(str(exc))}")
        return
    console.print(label_id)


def _print_results(results: list[ForwardResult]) -> None:
    if not results:
        console.print("[yellow]Inbox is empty — nothing forwarded.[/yellow]")
        return

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=3)
    table.add_column("Gmail message")
    table.add_column("InContact contact")
    for i, result in enumerate(results, start=1):
        contact = "[dim]n/a[/dim]" if result.contact_id is None else str(result.contact_id)
        table.add_row(str(i), result.msg_id, contact)

    console.print(f"\nForwarded [bold]{len(results)}[/bold] message(s)\n")
    console.print(table)
