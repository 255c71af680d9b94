"""
Sync CLI command.

Mirrors the result files into the Qdrant collection: embeds every record,
clears the collection and uploads everything in chunks.
"""

import asyncio

import click

from .extract import print_sync_summary
from .options import build_config, output_options, run_or_exit


@click.command()
@output_options
@click.option(
    "--batch-size",
    "upload_batch_size",
    type=int,
    default=None,
    help="Records per upload chunk (default: 100)",
)
def sync(verbose, **options):
    """
    Upload all result files into the Qdrant collection.

    The collection is cleared first, so after a successful sync it holds
    exactly the records in the result files. A chunk that still fails after
    its retries aborts the sync with exit code 1.

    Example:
        budgetproposals sync --output-dir ./result
        budgetproposals sync --collection budget_proposals_test --verbose
    """
    from ..ingestion.sync import SyncPipeline
    from ..utils import setup_logging

    setup_logging(verbose=verbose)
    config = build_config(**options)

    async def run_sync():
        pipeline = SyncPipeline(config)
        try:
            return await pipeline.run()
        finally:
            await pipeline.close()

    print_sync_summary(run_or_exit(lambda: asyncio.run(run_sync())))
