"""
Shared Qdrant vector store for the semantic tool searcher.

All sessions write into ONE collection; each point carries its session id in
the payload. The collection is created lazily on the first upsert, once the
embedding dimension is known. Defaults to an in-memory client, so nothing
survives a restart.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Sequence, Tuple

from qdrant_client import QdrantClient
from qdrant_client.models import Distance, PointIdsList, PointStruct, VectorParams

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "tool_references"


class SharedVectorStore:
    """
    Thin wrapper around a single Qdrant collection.

    Args:
        location: ":memory:" for an in-process store, or a Qdrant server URL.
        collection_name: Collection shared by every session.
        client: Pre-built client (takes precedence over *location*).
    """

    def __init__(
        self,
        location: str = ":memory:",
        collection_name: str = DEFAULT_COLLECTION,
        client: Optional[QdrantClient] = None,
    ):
        self.collection_name = collection_name
        if client is None:
            logger.info(f"Initializing Qdrant vector store at: {location}")
            client = QdrantClient(location=location)
        self.client = client
        self._dimension: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    def ensure_collection(self, dimension: int) -> None:
        """Create the collection for *dimension*-sized vectors if it does not exist yet."""
        if self._dimension == dimension:
            return
        with self._lock:
            if self._dimension == dimension:
                return

            existing = {c.name for c in self.client.get_collections().collections}
            if self.collection_name in existing:
                info = self.client.get_collection(self.collection_name)
                existing_dim = info.config.params.vectors.size
                if existing_dim != dimension:
                    logger.warning(
                        f"Collection {self.collection_name} has dimension {existing_dim}, "
                        f"expected {dimension}. Recreating collection."
                    )
                    self.client.delete_collection(self.collection_name)
                    existing.discard(self.collection_name)

            if self.collection_name not in existing:
                logger.info(f"Creating collection: {self.collection_name}")
                self.client.create_collection(
                    collection_name=self.collection_name,
                    vectors_config=VectorParams(size=dimension, distance=Distance.COSINE),
                )
            self._dimension = dimension

    def upsert(self, point_id: int, vector: Sequence[float], payload: Dict[str, Any]) -> None:
        """Store or replace one vector with its payload."""
        self.ensure_collection(len(vector))
        self.client.upsert(
            collection_name=self.collection_name,
            points=[PointStruct(id=point_id, vector=list(vector), payload=payload)],
        )

    def query(
        self,
        vector: Sequence[float],
        limit: int,
        score_threshold: Optional[float] = None,
    ) -> List[Tuple[float, Dict[str, Any]]]:
        """
        Nearest neighbours of *vector* across ALL sessions.

        Returns:
            (score, payload) pairs, best first. Empty if nothing was stored yet.
        """
        if self._dimension is None:
            return []
        response = self.client.query_points(
            collection_name=self.collection_name,
            query=list(vector),
            limit=limit,
            score_threshold=score_threshold,
            with_payload=True,
        )
        return [(point.score, point.payload or {}) for point in response.points]

    def delete(self, point_ids: Sequence[int]) -> None:
        """Remove the given points. Unknown ids are ignored."""
        if not point_ids or self._dimension is None:
            return
        self.client.delete(
            collection_name=self.collection_name,
            points_selector=PointIdsList(points=list(point_ids)),
        )

    def count(self) -> int:
        """Number of points in the shared collection."""
        if self._dimension is None:
            return 0
        return self.client.count(collection_name=self.collection_name, exact=True).count

    def close(self) -> None:
        """Close the Qdrant client connection."""
        self.client.close()
