"""
Status CLI command.

Shows how far extraction has progressed and what the collection holds.
"""

import asyncio

import click

from .options import build_config, run_or_exit


@click.command()
@click.option(
    "--checkpoint",
    "checkpoint_path",
    default=None,
    help="Checkpoint file (default: ./data/checkpoint.json)",
)
@click.option(
    "--output-dir",
    default=None,
    help="Directory for per-document JSON results (default: ./result)",
)
@click.option(
    "--collection",
    "collection_name",
    default=None,
    help="Qdrant collection name (default: budget_proposals)",
)
def status(**options):
    """
    Show processed documents, result files and stored records.

    Example:
        budgetproposals status
        budgetproposals status --collection budget_proposals_test
    """
    from ..database.store import ProposalStore
    from ..ingestion.checkpoint import CheckpointStore, ResultWriter
    from ..utils.config import get_qdrant_settings

    config = build_config(**options)

    checkpoint = CheckpointStore(config.checkpoint_path).load()
    result_files = ResultWriter(config.output_dir).result_files()

    async def count_points():
        store = ProposalStore.from_settings(
            get_qdrant_settings(), config.collection_name, config.embedding_dimensions
        )
        try:
            return await store.count()
        finally:
            await store.close()

    points = run_or_exit(lambda: asyncio.run(count_points()))

    click.echo("=" * 60)
    click.echo("BUDGET PROPOSALS STATUS")
    click.echo("=" * 60)
    click.echo(f"Checkpoint:          {config.checkpoint_path}")
    click.echo(f"Processed Documents: {checkpoint.processed:,}")
    click.echo(f"Result Files:        {len(result_files):,}")
    click.echo(f"Collection:          {config.collection_name}")
    click.echo(f"Stored Records:      {points:,}")
