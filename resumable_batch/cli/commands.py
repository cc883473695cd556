"""CLI command implementations for resumable batch processing."""

from __future__ import annotations

import asyncio
import json
import random
from typing import Any

import click

from resumable_batch.models.config import Config
from resumable_batch.models.page_data import PageData
from resumable_batch.models.snapshot import Snapshot
from resumable_batch.services.resumable_processor import create_batch_processor_with_state
from resumable_batch.services.state_manager import StateManager
from resumable_batch.utils.logger import configure_logging
from resumable_batch.utils.progress import StateTracker
from resumable_batch.utils.retry import retry_with_logging


def _get_config() -> Config:
    """Load configuration from environment and .env file."""
    return Config()


def _print_summary(title: str, processed: int, failed: int, state: Snapshot) -> None:
    """Print a formatted summary of a finished run."""
    click.echo(f"\n[SUCCESS] {title}")
    click.echo(f"  processed: {processed}")
    click.echo(f"  failed: {failed}")
    for key, value in state.to_dict().items():
        click.echo(f"  state.{key}: {value}")


def _make_processor(failure_rate: float, delay: float, rng: random.Random) -> Any:
    """Simulated item processor that sleeps and fails at ``failure_rate``."""

    async def process_item(item: int, index: int, state: Snapshot) -> dict[str, Any]:
        await asyncio.sleep(delay * rng.random())
        if rng.random() < failure_rate:
            msg = f"Failed to process item {item}"
            raise RuntimeError(msg)
        return {"id": item, "processed": True}

    return process_item


@click.command()
@click.option("--state-file", default=None, help="State file (defaults to config)")
def show_state(state_file: str | None) -> None:
    """Print the persisted progress snapshot."""
    config = _get_config()
    configure_logging(config.log_level)

    manager = StateManager(state_file or config.state_file_path)
    state = asyncio.run(manager.load_state())
    if state.is_empty:
        click.echo("[INFO] No saved state")
        return
    click.echo(json.dumps(state.to_dict(), indent=2))


@click.command()
@click.option("--state-file", default=None, help="State file (defaults to config)")
def clear_state(state_file: str | None) -> None:
    """Delete the persisted progress snapshot."""
    config = _get_config()
    configure_logging(config.log_level)

    path = state_file or config.state_file_path
    asyncio.run(StateManager(path).clear_state())
    click.echo(f"[SUCCESS] Cleared state at {path}")


@click.command()
@click.option("--items", "item_count", default=50, type=int, help="Number of items to simulate")
@click.option("--batch-size", default=None, type=int, help="Items per batch")
@click.option("--concurrency", default=None, type=int, help="Max items in flight")
@click.option("--failure-rate", default=0.1, type=float, help="Simulated failure probability")
@click.option("--delay", default=0.05, type=float, help="Max simulated seconds per item")
@click.option("--seed", default=None, type=int, help="Random seed for reproducible runs")
@click.option("--state-file", default=None, help="State file (defaults to config)")
@click.option("--keep-state", is_flag=True, help="Keep the state file after success")
def demo(
    item_count: int,
    batch_size: int | None,
    concurrency: int | None,
    failure_rate: float,
    delay: float,
    seed: int | None,
    state_file: str | None,
    keep_state: bool,
) -> None:
    """Run a simulated resumable batch job over numbered items."""
    config = _get_config()
    configure_logging(config.log_level)

    rng = random.Random(seed)
    processor = create_batch_processor_with_state(
        _make_processor(failure_rate, delay, rng),
        state_file or config.state_file_path,
        save_state_on_batch=config.save_state_on_batch,
        save_state_on_item=config.save_state_on_item,
        save_state_interval=config.save_state_interval,
    )
    items = list(range(1, item_count + 1))

    async def run() -> None:
        saved = await processor.get_state()
        if not saved.is_empty:
            click.echo(
                f"[INFO] Resuming from saved state: processed={saved.total_processed or 0}, "
                f"failed={saved.total_failed or 0}"
            )
        tracker = StateTracker(total_items=item_count, initial_state=saved)

        def on_batch_complete(
            batch_number: int,
            total_batches: int,
            batch: list[int],
            processed: int,
            failed: int,
            state: Snapshot,
        ) -> None:
            tracker.update_progress(processed, failed)
            click.echo(f"[INFO] Batch {batch_number}/{total_batches}: {tracker.format_progress()}")

        click.echo(f"[INFO] Processing {item_count} items...")
        result = await processor.process(
            items,
            batch_size=batch_size or config.batch_size,
            concurrency_limit=concurrency or config.concurrency_limit,
            state_update_interval=config.state_update_interval,
            on_batch_complete=on_batch_complete,
        )
        _print_summary("Batch processing complete", result.processed, result.failed, result.state)

        if not keep_state:
            await processor.clear_state()
            click.echo("[INFO] State cleared after successful completion")

    asyncio.run(run())


@click.command()
@click.option("--pages", default=5, type=int, help="Number of pages the simulated source reports")
@click.option("--page-size", default=10, type=int, help="Items per page")
@click.option("--concurrency", default=None, type=int, help="Max items in flight")
@click.option("--failure-rate", default=0.1, type=float, help="Simulated failure probability")
@click.option("--delay", default=0.05, type=float, help="Max simulated seconds per item")
@click.option("--seed", default=None, type=int, help="Random seed for reproducible runs")
@click.option("--state-file", default=None, help="State file (defaults to config)")
@click.option("--keep-state", is_flag=True, help="Keep the state file after success")
def demo_pages(
    pages: int,
    page_size: int,
    concurrency: int | None,
    failure_rate: float,
    delay: float,
    seed: int | None,
    state_file: str | None,
    keep_state: bool,
) -> None:
    """Run a simulated resumable job over a paginated source."""
    config = _get_config()
    configure_logging(config.log_level)

    rng = random.Random(seed)
    processor = create_batch_processor_with_state(
        _make_processor(failure_rate, delay, rng),
        state_file or config.state_file_path,
        save_state_on_batch=config.save_state_on_batch,
    )

    @retry_with_logging(max_attempts=3)
    async def fetch_page(page: int, state: Snapshot) -> PageData:
        await asyncio.sleep(delay * rng.random())
        start = (page - 1) * page_size
        return PageData(items=list(range(start + 1, start + page_size + 1)), total_pages=pages)

    def on_page_complete(
        page: int,
        total_pages: int,
        page_processed: int,
        total_processed: int,
        state: Snapshot,
    ) -> None:
        click.echo(
            f"[INFO] Page {page}/{total_pages}: {page_processed} processed "
            f"(total {total_processed}, failed {state.total_failed or 0})"
        )

    async def run() -> None:
        result = await processor.process_pages(
            fetch_page,
            concurrency_limit=concurrency or config.concurrency_limit,
            state_update_interval=config.state_update_interval,
            on_page_complete=on_page_complete,
        )
        _print_summary("Paginated processing complete", result.processed, result.failed, result.state)

        if not keep_state:
            await processor.clear_state()
            click.echo("[INFO] State cleared after successful completion")

    asyncio.run(run())
