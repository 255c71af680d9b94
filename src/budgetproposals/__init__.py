"""
BudgetProposals: structured extraction of legislative budget proposals.

This is the main package initialization file for BudgetProposals, a Python
library that turns unstructured committee budget-proposal documents into
validated, structured records and stores them in a Qdrant vector database
for semantic search.

The BudgetProposals system provides:
    - Segmentation of raw committee documents into individual proposals
    - Structured extraction with OpenAI tool calls and a strict output schema
    - Frequency-vote consensus across repeated extraction attempts
    - Closed-taxonomy validation with bounded re-submission
    - Resumable runs through a JSON checkpoint and per-document snapshots
    - Embedding enrichment and batched, retried uploads to Qdrant

Package Structure:
    - processors/: Segmentation, extraction, consensus, validation, embeddings
    - ingestion/: Checkpointing and the extract/sync pipelines
    - database/: Qdrant collection access and the batch uploader
    - cli/: Click command-line interface (extract, sync, run, status)
    - utils/: Configuration, logging, progress monitoring and the scheduler

Environment Requirements:
    - Python 3.10+
    - OPENAI_API_KEY (extraction oracle and embeddings)
    - Qdrant (local path, host/port or URL)

Version History:
    - 0.1.0: Initial release
"""

__version__ = "0.1.0"
