"""
Embedding generation for proposal search.

This module turns accepted proposal records into vectors with OpenAI's
text-embedding models so they can be searched by meaning in Qdrant. The
embedded text is the proposal content followed by its proposer and
co-signer lines:

    <content>
    提案人：王小明
    連署人：李大華、張三

The module focuses on:
    - Retry with exponential backoff for transient API failures
    - Non-fatal failure: a record whose embedding fails keeps ``vector=None``
      and is still uploaded
    - Bounded concurrency through the shared scheduler

Python Learning Notes:
    - Vector embeddings are numerical representations of text meaning
    - AsyncOpenAI requests are awaited so many can be in flight at once
    - Returning None instead of raising lets one failure leave the batch intact
"""

import asyncio
from typing import List, Optional, Sequence

from openai import AsyncOpenAI

from ..errors import EmbeddingFailure
from ..utils import get_logger
from ..utils.config import get_openai_api_key
from ..utils.scheduler import ConcurrencyScheduler
from .schema import EnrichedRecord, ProposalRecord

logger = get_logger(__name__)


def build_embedding_text(record: ProposalRecord) -> str:
    """
    Build the text that is embedded for a record.

    Args:
        record: Accepted proposal record.

    Returns:
        str: Content, a ``提案人：`` line, and a ``連署人：`` line when the
            record has co-signers.
    """
    text = f"{record.content}\n提案人：{'、'.join(record.proposer)}"
    if record.co_signers:
        text += f"\n連署人：{'、'.join(record.co_signers)}"
    return text


class EmbeddingGenerator:
    """
    Handles generation of embeddings using OpenAI's text-embedding models.

    Attributes:
        client (AsyncOpenAI): OpenAI client instance for API calls
        model (str): The embedding model to use (text-embedding-3-small)
        dimension (int): Vector dimension size (1536 for text-embedding-3-small)
        max_retries (int): Requests allowed per text
        retry_delay (float): Initial delay between retries, doubled each time

    Example:
        generator = EmbeddingGenerator()

        vector = await generator.embed_record(record)
        if vector is None:
            print("Embedding failed; record will be stored without a vector")

        enriched = await generator.enrich(records, document_id="內政部/提案.md")
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: str = "text-embedding-3-small",
        dimension: int = 1536,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        concurrency: int = 5,
        api_key: Optional[str] = None,
    ):
        self.client = client or AsyncOpenAI(api_key=api_key or get_openai_api_key())
        self.model = model
        self.dimension = dimension
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.concurrency = concurrency

    async def generate_embedding(self, text: str) -> List[float]:
        """
        Generate an embedding for a single text.

        Args:
            text (str): Text to embed.

        Returns:
            List[float]: Vector embedding with ``dimension`` floats.

        Raises:
            EmbeddingFailure: If every retry failed.
        """
        retry_delay = self.retry_delay

        for attempt in range(self.max_retries):
            try:
                response = await self.client.embeddings.create(
                    input=text, model=self.model
                )
                return response.data[0].embedding

            except Exception as e:
                logger.warning(
                    "Embedding generation attempt %d failed: %s", attempt + 1, e
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(retry_delay)
                    retry_delay *= 2  # Exponential backoff
                else:
                    raise EmbeddingFailure(str(e)) from e

        raise EmbeddingFailure("No embedding attempts were made")

    async def embed_record(self, record: ProposalRecord) -> Optional[List[float]]:
        """Embed one record, returning None when the embedding fails."""
        try:
            return await self.generate_embedding(build_embedding_text(record))
        except EmbeddingFailure as e:
            logger.error("Embedding failed for 「%s」: %s", record.content[:30], e)
            return None

    async def enrich(
        self, records: Sequence[ProposalRecord], document_id: str = ""
    ) -> List[EnrichedRecord]:
        """
        Attach vectors to records, preserving their order.

        Args:
            records: Accepted records of one document.
            document_id: ``committee/filename`` the records came from.

        Returns:
            List[EnrichedRecord]: One enriched record per input record.
        """
        scheduler = ConcurrencyScheduler(limit=self.concurrency)
        outcomes = await scheduler.map(records, self.embed_record)

        return [
            EnrichedRecord(
                **record.model_dump(),
                vector=outcome.value if outcome.ok else None,
                document_id=document_id,
                position=position,
            )
            for position, (record, outcome) in enumerate(zip(records, outcomes))
        ]
