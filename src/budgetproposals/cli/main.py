"""
Main CLI entry point for BudgetProposals.

This module provides the primary command-line interface using Click.
All commands are organized into subcommands for different operations.
"""

import click
from dotenv import load_dotenv

from .. import __version__
from .extract import extract, run
from .info import status
from .sync import sync


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="budgetproposals")
@click.pass_context
def main(ctx):
    """
    BudgetProposals - structured records from legislative budget proposals.

    Extracts proposals from committee documents with an OpenAI model, writes
    them as JSON result files, and syncs them into Qdrant for search.

    \b
    Typical workflow:
        budgetproposals extract --input-dir ./markdown --output-dir ./result
        budgetproposals sync --output-dir ./result
        budgetproposals status
    """
    load_dotenv()
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register subcommands
main.add_command(extract)
main.add_command(sync)
main.add_command(run)
main.add_command(status)


if __name__ == "__main__":
    main()
