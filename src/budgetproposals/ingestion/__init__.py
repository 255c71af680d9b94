"""
Pipeline orchestration for BudgetProposals.

This module provides the two runs of the system:
- Extraction: committee documents to sorted per-document JSON result files
- Sync: result files to the Qdrant collection, with embeddings
- Resumable progress with a JSON checkpoint and overwritten snapshots

Classes:
    ExtractionPipeline: Documents -> segments -> records -> result files
    SyncPipeline: Result files -> embeddings -> Qdrant
    CheckpointStore: Set of fully processed documents
    ResultWriter: Atomic writer and reader of result files
"""

from .checkpoint import CheckpointStore, ResultWriter
from .pipeline import DocumentRef, ExtractionPipeline, SegmentProcessor, discover_documents
from .sync import SyncPipeline

__all__ = [
    "CheckpointStore",
    "ResultWriter",
    "DocumentRef",
    "ExtractionPipeline",
    "SegmentProcessor",
    "SyncPipeline",
    "discover_documents",
]
