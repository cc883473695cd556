"""CLI entry point for resumable batch processing."""

from __future__ import annotations

import click

from resumable_batch.cli.commands import clear_state, demo, demo_pages, show_state


@click.group()
def cli() -> None:
    """Resumable, concurrency-limited batch processing."""


cli.add_command(show_state)
cli.add_command(clear_state)
cli.add_command(demo)
cli.add_command(demo_pages)
