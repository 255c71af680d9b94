"""Shared click options and error handling for the CLI commands."""

import sys
from typing import Any, Callable, Dict

import click

from ..errors import DirectoryReadFailure, UploadFailure


def input_options(func: Callable) -> Callable:
    """Options that control document discovery and extraction."""
    options = [
        click.option(
            "--input-dir",
            default=None,
            help="Directory with one sub-directory per committee (default: ./markdown)",
        ),
        click.option(
            "--checkpoint",
            "checkpoint_path",
            default=None,
            help="Checkpoint file (default: ./data/checkpoint.json)",
        ),
        click.option(
            "--mode",
            "consensus_mode",
            type=click.Choice(["frequency_vote", "single_attempt"]),
            default=None,
            help="Consensus mode (default: frequency_vote)",
        ),
        click.option(
            "--attempts",
            type=int,
            default=None,
            help="Extraction attempts per segment for frequency voting (default: 3)",
        ),
        click.option(
            "--model",
            "extraction_model",
            default=None,
            help="OpenAI chat model used for extraction (default: gpt-4o)",
        ),
        click.option(
            "--document-concurrency",
            type=int,
            default=None,
            help="Documents processed at the same time (default: 1)",
        ),
        click.option(
            "--segment-concurrency",
            type=int,
            default=None,
            help="Segments processed at the same time per document (default: 3)",
        ),
        click.option(
            "--exclude",
            "exclude_files",
            multiple=True,
            help="File name to skip; may be given more than once",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def output_options(func: Callable) -> Callable:
    """Options shared by every command that touches the result tree."""
    options = [
        click.option(
            "--output-dir",
            default=None,
            help="Directory for per-document JSON results (default: ./result)",
        ),
        click.option(
            "--collection",
            "collection_name",
            default=None,
            help="Qdrant collection name (default: budget_proposals)",
        ),
        click.option("--verbose", is_flag=True, help="Enable verbose logging"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_config(**kwargs: Any):
    """
    Build a PipelineConfig from CLI options, ignoring options left unset.

    Exits with status 1 when the resulting configuration is invalid.
    """
    from ..utils.config import PipelineConfig

    overrides: Dict[str, Any] = {
        key: value for key, value in kwargs.items() if value not in (None, ())
    }
    if "exclude_files" in overrides:
        overrides["exclude_files"] = list(overrides["exclude_files"])

    try:
        return PipelineConfig(**overrides)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def run_or_exit(func: Callable[[], Any]) -> Any:
    """
    Run a command body, mapping fatal pipeline errors to exit code 1.

    Args:
        func: Zero-argument callable doing the command's work.
    """
    try:
        return func()
    except KeyboardInterrupt:
        click.echo("\n\nInterrupted by user")
        sys.exit(0)
    except (DirectoryReadFailure, UploadFailure) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)
