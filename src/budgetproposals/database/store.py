"""
Qdrant destination store for enriched proposal records.

Each record becomes one point in a collection with a single named vector
``content`` (cosine distance, 1536 dimensions for text-embedding-3-small).
The point payload is the ProposalRecord itself:

    {category, content, action, proposer, co_signers,
     cost, frozen, deleted, added, remarks, committee}

Records whose embedding failed are stored with an empty vector map so they
remain visible to payload filters and counts, just not to vector search.

Point ids are deterministic: ``uuid5`` of ``"<document_id>#<position>"``.
Re-uploading the same result files produces the same ids.

Python Learning Notes:
    - AsyncQdrantClient exposes the same API as QdrantClient with awaitable methods
    - uuid5 hashes a name into a stable UUID, unlike the random uuid4
    - Qdrant supports local file storage, a server, or Qdrant Cloud
"""

import uuid
from typing import Any, Dict, List, Optional, Sequence

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import Distance, PointStruct, VectorParams

from ..processors.schema import EnrichedRecord
from ..utils import get_logger

logger = get_logger(__name__)

VECTOR_NAME = "content"
POINT_NAMESPACE = uuid.NAMESPACE_URL


def point_id(document_id: str, position: int) -> str:
    """Deterministic point id for the record at ``position`` of a document."""
    return str(uuid.uuid5(POINT_NAMESPACE, f"{document_id}#{position}"))


def build_point(record: EnrichedRecord) -> PointStruct:
    """Convert an enriched record into a Qdrant point."""
    return PointStruct(
        id=point_id(record.document_id, record.position),
        vector={VECTOR_NAME: record.vector} if record.vector is not None else {},
        payload=record.to_payload(),
    )


class ProposalStore:
    """
    Async access to the proposal collection.

    Supports local file-based Qdrant (for development) and remote Qdrant
    instances. Provide either db_path for local storage or host/port/url for
    a remote connection.

    Attributes:
        client (AsyncQdrantClient): Underlying Qdrant client
        collection_name (str): Collection holding the proposals
        dimension (int): Length of the ``content`` vectors
        connection_mode (str): "cloud", "remote" or "local"

    Example:
        store = ProposalStore(db_path="./data/qdrant/qdrant_db")
        await store.clear()
        await store.insert(records)
        print(await store.count())
    """

    def __init__(
        self,
        collection_name: str = "budget_proposals",
        dimension: int = 1536,
        db_path: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[AsyncQdrantClient] = None,
    ):
        self.collection_name = collection_name
        self.dimension = dimension

        if client is not None:
            self.client = client
            self.connection_mode = "injected"
        # Remote connection mode (prioritize URL, then host/port)
        elif url:
            self.client = AsyncQdrantClient(url=url, api_key=api_key)
            self.connection_mode = "cloud"
            logger.info("Initialized Qdrant client with cloud URL: %s", url)
        elif host:
            self.client = AsyncQdrantClient(
                host=host, port=port or 6333, api_key=api_key
            )
            self.connection_mode = "remote"
            logger.info("Initialized Qdrant client at %s:%s", host, port or 6333)
        # Local file-based mode
        elif db_path:
            self.client = AsyncQdrantClient(path=db_path)
            self.connection_mode = "local"
            logger.info("Initialized local Qdrant client at %s", db_path)
        else:
            raise ValueError(
                "Must provide either db_path for local storage or "
                "host/port/url for remote connection"
            )

    async def collection_exists(self) -> bool:
        response = await self.client.get_collections()
        return any(col.name == self.collection_name for col in response.collections)

    async def ensure_collection(self) -> None:
        """Create the collection if it does not exist yet."""
        if await self.collection_exists():
            logger.debug("Collection %s already exists", self.collection_name)
            return

        await self.client.create_collection(
            collection_name=self.collection_name,
            vectors_config={
                VECTOR_NAME: VectorParams(size=self.dimension, distance=Distance.COSINE)
            },
        )
        logger.info("Created collection %s", self.collection_name)

    async def clear(self) -> None:
        """
        Delete every point by dropping and recreating the collection.

        Warning:
            This permanently deletes all stored proposals.
        """
        if await self.collection_exists():
            await self.client.delete_collection(self.collection_name)
            logger.info("Deleted collection %s", self.collection_name)
        await self.ensure_collection()

    async def insert(self, records: Sequence[EnrichedRecord]) -> int:
        """
        Upsert one chunk of records.

        Raises whatever the Qdrant client raises; retrying is the
        BatchUploader's job.

        Returns:
            int: Number of points written.
        """
        points = [build_point(record) for record in records]
        await self.client.upsert(
            collection_name=self.collection_name, points=points, wait=True
        )
        return len(points)

    async def count(self) -> int:
        """Exact number of points in the collection, 0 if it does not exist."""
        if not await self.collection_exists():
            return 0
        result = await self.client.count(collection_name=self.collection_name, exact=True)
        return result.count

    async def get_collection_info(self) -> Optional[Dict[str, Any]]:
        """
        Get information about the collection.

        Returns:
            Dictionary with collection statistics or None if not found
        """
        try:
            info = await self.client.get_collection(self.collection_name)
            return {
                "name": self.collection_name,
                "points_count": info.points_count,
                "indexed_vectors_count": info.indexed_vectors_count,
                "status": str(info.status),
            }
        except Exception as e:
            logger.debug("Collection %s not found: %s", self.collection_name, e)
            return None

    async def close(self) -> None:
        await self.client.close()

    @classmethod
    def from_settings(
        cls, settings: Dict[str, Any], collection_name: str, dimension: int = 1536
    ) -> "ProposalStore":
        """Build a store from ``get_qdrant_settings()`` output."""
        return cls(collection_name=collection_name, dimension=dimension, **settings)

    def describe(self) -> List[str]:
        """Human-readable connection summary for the CLI."""
        return [
            f"Collection: {self.collection_name}",
            f"Connection: {self.connection_mode}",
        ]
