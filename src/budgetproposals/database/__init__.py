"""
Database module for storing proposal records in Qdrant.

Key Components:
    - ProposalStore: Async client for the proposal collection (clear, insert, count)
    - BatchUploader: Chunked inserts with retry and fatal UploadFailure

Example Usage:
    from budgetproposals.database import BatchUploader, ProposalStore

    store = ProposalStore(db_path="./data/qdrant/qdrant_db")
    await store.clear()
    await BatchUploader(store).upload(records)
"""

from .store import ProposalStore, build_point, point_id
from .uploader import BatchUploader

__all__ = ["ProposalStore", "BatchUploader", "build_point", "point_id"]
