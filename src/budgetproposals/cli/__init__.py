"""
Command-line interface for BudgetProposals.

This module provides CLI commands for:
- Extracting proposal records from committee documents
- Syncing result files into Qdrant
- Showing checkpoint and collection status

Usage:
    budgetproposals extract     # Documents -> result files
    budgetproposals sync        # Result files -> Qdrant
    budgetproposals run         # extract, then sync
    budgetproposals status      # Progress and record counts
"""

from .extract import extract, run
from .info import status
from .main import main
from .sync import sync

__all__ = ["main", "extract", "run", "sync", "status"]
