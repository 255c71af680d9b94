"""
Sync pipeline: result files to the Qdrant collection.

The destination collection is a mirror of the result tree. A sync run:
    1. Reads every ``<output>/<committee>/<stem>.json`` result file
    2. Embeds each record (failures keep ``vector=None``)
    3. Clears the collection once
    4. Uploads all records in chunks through the BatchUploader

An UploadFailure aborts the run and propagates to the caller. Result files
that cannot be parsed are logged and skipped.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..database.store import ProposalStore
from ..database.uploader import BatchUploader
from ..processors.embeddings import EmbeddingGenerator
from ..processors.schema import EnrichedRecord
from ..utils import get_logger
from ..utils.config import PipelineConfig, get_qdrant_settings
from .checkpoint import ResultWriter

logger = get_logger(__name__)


class SyncPipeline:
    """
    Mirrors the extraction results into the proposal store.

    Attributes:
        config (PipelineConfig): Pipeline settings
        store (ProposalStore): Destination collection
        embedder (EmbeddingGenerator): Vector generation
        uploader (BatchUploader): Chunked uploads
        writer (ResultWriter): Reader of the result tree

    Example:
        stats = await SyncPipeline(PipelineConfig()).run()
        print(f"Uploaded {stats['uploaded']} records")
    """

    def __init__(
        self,
        config: PipelineConfig,
        store: Optional[ProposalStore] = None,
        embedder: Optional[EmbeddingGenerator] = None,
        writer: Optional[ResultWriter] = None,
    ):
        self.config = config
        self.store = store or ProposalStore.from_settings(
            get_qdrant_settings(), config.collection_name, config.embedding_dimensions
        )
        self.embedder = embedder or EmbeddingGenerator(
            model=config.embedding_model,
            dimension=config.embedding_dimensions,
            concurrency=config.embedding_concurrency,
        )
        self.uploader = BatchUploader(
            self.store,
            batch_size=config.upload_batch_size,
            max_retries=config.upload_max_retries,
            retry_delay=config.upload_retry_delay,
        )
        self.writer = writer or ResultWriter(config.output_dir)

    async def load_records(self) -> List[EnrichedRecord]:
        """Read and embed every result file, in file order."""
        files = self.writer.result_files()
        logger.info("Found %d result files in %s", len(files), self.writer.output_dir)

        enriched: List[EnrichedRecord] = []
        for index, path in enumerate(files, start=1):
            document_id = f"{path.parent.name}/{path.stem}"
            try:
                records = self.writer.read(path)
            except (OSError, ValueError, ValidationError) as e:
                logger.error("Skipping unreadable result file %s: %s", path, e)
                continue

            enriched.extend(await self.embedder.enrich(records, document_id))
            logger.info("[%s] %d/%d embedded", path.name, index, len(files))

        return enriched

    async def run(self) -> Dict[str, Any]:
        """
        Execute the sync run.

        Returns:
            Dict[str, Any]: ``records``, ``without_vector`` and ``uploaded``.

        Raises:
            UploadFailure: If a chunk cannot be uploaded.
        """
        records = await self.load_records()
        without_vector = sum(1 for record in records if record.vector is None)

        if not records:
            logger.warning("No records to sync; collection left unchanged")
            return {"records": 0, "without_vector": 0, "uploaded": 0}

        await self.store.clear()
        uploaded = await self.uploader.upload(records)

        logger.info(
            "Synced %d records (%d without vector) to %s",
            uploaded,
            without_vector,
            self.store.collection_name,
        )
        return {
            "records": len(records),
            "without_vector": without_vector,
            "uploaded": uploaded,
        }

    async def close(self) -> None:
        await self.store.close()
