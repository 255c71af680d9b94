"""
Extraction CLI commands.

Provides the ``extract`` command, which turns committee documents into
result files, and ``run``, which extracts and then syncs in one go.
"""

import asyncio
from typing import Any, Dict

import click

from .options import build_config, input_options, output_options, run_or_exit


def print_extraction_summary(stats: Dict[str, Any]) -> None:
    """Print final extraction statistics."""
    click.echo("\n" + "=" * 60)
    click.echo("EXTRACTION COMPLETE")
    click.echo("=" * 60)
    click.echo(f"Documents Scheduled: {stats.get('total_documents', 0)}")
    click.echo(f"Processed: {stats.get('documents_processed', 0)}")
    click.echo(f"Skipped (no proposals): {stats.get('documents_skipped', 0)}")
    click.echo(f"Failed: {stats.get('documents_failed', 0)}")
    click.echo(f"Segments With Records: {stats.get('segments_processed', 0)}")
    click.echo(f"Segments Without Records: {stats.get('segments_empty', 0)}")
    click.echo(f"Records Extracted: {stats.get('records_extracted', 0)}")
    if "elapsed_time_formatted" in stats:
        click.echo(f"\nTotal Time: {stats['elapsed_time_formatted']}")


def print_sync_summary(stats: Dict[str, Any]) -> None:
    click.echo("\n" + "=" * 60)
    click.echo("SYNC COMPLETE")
    click.echo("=" * 60)
    click.echo(f"Records: {stats['records']}")
    click.echo(f"Without Vector: {stats['without_vector']}")
    click.echo(f"Uploaded: {stats['uploaded']}")


@click.command()
@input_options
@output_options
def extract(verbose, **options):
    """
    Extract proposal records from committee documents.

    Reads ``<input-dir>/<committee>/<file>.md``, extracts every proposal with
    the OpenAI model and writes ``<output-dir>/<committee>/<file>.json``.
    Documents listed in the checkpoint are skipped, so an interrupted run can
    simply be started again.

    Example:
        budgetproposals extract --input-dir ./markdown --output-dir ./result
        budgetproposals extract --mode single_attempt --exclude 附件.md
    """
    # Import here to avoid loading heavy dependencies unless needed
    from ..ingestion.pipeline import ExtractionPipeline
    from ..utils import setup_logging

    setup_logging(verbose=verbose)
    config = build_config(**options)

    def body():
        pipeline = ExtractionPipeline(config, show_progress=True)
        return asyncio.run(pipeline.run())

    print_extraction_summary(run_or_exit(body))


@click.command()
@input_options
@output_options
def run(verbose, **options):
    """
    Extract all pending documents, then sync every result into Qdrant.

    Example:
        budgetproposals run --input-dir ./markdown --output-dir ./result
    """
    from ..ingestion.pipeline import ExtractionPipeline
    from ..ingestion.sync import SyncPipeline
    from ..utils import setup_logging

    setup_logging(verbose=verbose)
    config = build_config(**options)

    async def run_both():
        extraction_stats = await ExtractionPipeline(config, show_progress=True).run()
        sync_pipeline = SyncPipeline(config)
        try:
            sync_stats = await sync_pipeline.run()
        finally:
            await sync_pipeline.close()
        return extraction_stats, sync_stats

    extraction_stats, sync_stats = run_or_exit(lambda: asyncio.run(run_both()))
    print_extraction_summary(extraction_stats)
    print_sync_summary(sync_stats)
