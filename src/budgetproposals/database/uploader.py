"""
Chunked, retried uploads into the proposal store.

Records are inserted in chunks of ``batch_size``. A chunk that fails is
retried up to ``max_retries`` times with a doubling delay. When a chunk
still fails, the upload stops with UploadFailure: later chunks are not
attempted and the run is aborted, because a partial collection after a
clear is worse than a visible failure.

Python Learning Notes:
    - range(0, n, step) walks a list in fixed-size slices
    - ``raise ... from e`` keeps the original exception as __cause__
"""

import asyncio
from typing import List, Sequence

from ..errors import UploadFailure
from ..processors.schema import EnrichedRecord
from ..utils import get_logger
from .store import ProposalStore

logger = get_logger(__name__)


def chunked(records: Sequence[EnrichedRecord], size: int) -> List[Sequence[EnrichedRecord]]:
    """Split records into consecutive chunks of at most ``size``."""
    return [records[i : i + size] for i in range(0, len(records), size)]


class BatchUploader:
    """
    Uploads enriched records through a ProposalStore.

    Attributes:
        store (ProposalStore): Destination of the records
        batch_size (int): Records per insert call (default 100)
        max_retries (int): Retries per chunk after the first failure
        retry_delay (float): Delay before the first retry, doubled each time

    Example:
        uploader = BatchUploader(store, batch_size=100, max_retries=3)
        uploaded = await uploader.upload(records)
    """

    def __init__(
        self,
        store: ProposalStore,
        batch_size: int = 100,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.store = store
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def upload(self, records: Sequence[EnrichedRecord]) -> int:
        """
        Insert all records chunk by chunk.

        Args:
            records: Enriched records in upload order.

        Returns:
            int: Number of records uploaded.

        Raises:
            UploadFailure: If a chunk fails after all retries.
        """
        chunks = chunked(records, self.batch_size)
        uploaded = 0

        for index, chunk in enumerate(chunks):
            await self._insert_chunk(index, chunk)
            uploaded += len(chunk)
            logger.info(
                "Uploaded chunk %d/%d (%d/%d records)",
                index + 1,
                len(chunks),
                uploaded,
                len(records),
            )

        return uploaded

    async def _insert_chunk(self, index: int, chunk: Sequence[EnrichedRecord]) -> None:
        retry_delay = self.retry_delay
        attempts = self.max_retries + 1

        for attempt in range(attempts):
            try:
                await self.store.insert(chunk)
                return
            except Exception as e:
                if attempt < attempts - 1:
                    logger.warning(
                        "Chunk %d failed on attempt %d/%d, retrying in %.1fs: %s",
                        index + 1,
                        attempt + 1,
                        attempts,
                        retry_delay,
                        e,
                    )
                    await asyncio.sleep(retry_delay)
                    retry_delay *= 2  # Exponential backoff
                else:
                    logger.error(
                        "Chunk %d failed after %d attempts: %s", index + 1, attempts, e
                    )
                    raise UploadFailure(
                        f"Chunk {index + 1} failed after {attempts} attempts: {e}",
                        chunk_index=index,
                        attempts=attempts,
                    ) from e
