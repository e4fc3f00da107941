"""Qdrant vector database service."""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    FilterSelector,
    MatchValue,
    NearestQuery,
    PointStruct,
    Record,
    VectorParams,
)

from ragpipe.core.config import settings
from ragpipe.core.exceptions import VectorDBError
from ragpipe.models.document import Document, DocumentChunk, DocumentStatus
from ragpipe.models.response import SearchResult

logger = logging.getLogger(__name__)

SCROLL_PAGE_SIZE = 256


class VectorDBService:
    """Document store backed by a Qdrant collection of chunk points."""

    def __init__(
        self,
        client: Optional[AsyncQdrantClient] = None,
        collection_name: Optional[str] = None,
        dimensions: Optional[int] = None,
        upsert_batch_size: Optional[int] = None,
    ) -> None:
        """
        Initialize the vector database service.

        Args:
            client: Preconfigured client, e.g. an in-process ``:memory:`` one.
            collection_name: Collection holding the chunk points.
            dimensions: Embedding size used when creating the collection.
            upsert_batch_size: Points written per upsert request.
        """
        self.client: Optional[AsyncQdrantClient] = client
        self.collection_name = collection_name or settings.qdrant_collection_name
        self.dimensions = dimensions or settings.embedding_dimensions
        self.upsert_batch_size = upsert_batch_size or settings.upsert_batch_size

    async def connect(self) -> None:
        """Connect to Qdrant and make sure the collection exists."""
        try:
            if self.client is None:
                self.client = AsyncQdrantClient(
                    url=settings.qdrant_url,
                    api_key=settings.qdrant_api_key,
                    timeout=30.0,
                )
            await self._ensure_collection()
        except Exception as e:
            raise VectorDBError(
                f"Failed to connect to Qdrant: {str(e)}") from e

    async def disconnect(self) -> None:
        """Disconnect from Qdrant."""
        if self.client:
            await self.client.close()

    async def _ensure_collection(self) -> None:
        """Ensure the collection exists."""
        if not self.client:
            raise VectorDBError("Client not connected")

        collections = await self.client.get_collections()
        collection_names = [col.name for col in collections.collections]

        if self.collection_name not in collection_names:
            await self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(
                    size=self.dimensions,
                    distance=Distance.COSINE,
                ),
            )
            logger.info(
                f"Created collection {self.collection_name} "
                f"({self.dimensions} dims, cosine)")

    @staticmethod
    def _document_filter(document_id: str) -> Filter:
        return Filter(
            must=[FieldCondition(key="document_id",
                                 match=MatchValue(value=document_id))]
        )

    @staticmethod
    def _to_point(document: Document, chunk: DocumentChunk) -> PointStruct:
        return PointStruct(
            id=chunk.id,
            vector=chunk.embedding,
            payload={
                "document_id": chunk.document_id,
                "text": chunk.text,
                "chunk_index": chunk.chunk_index,
                "page_number": chunk.page_number,
                "metadata": chunk.metadata,
                "file_name": document.file_name,
                "content_type": document.content_type,
                "file_size": document.file_size,
                "uploaded_at": document.uploaded_at.isoformat(),
                "status": DocumentStatus.PROCESSING.value,
            },
        )

    @staticmethod
    def _to_chunk(point: Any) -> DocumentChunk:
        payload = point.payload or {}
        vector = point.vector if isinstance(point.vector, list) else None
        return DocumentChunk(
            id=str(point.id),
            document_id=payload.get("document_id", ""),
            text=payload.get("text", ""),
            chunk_index=payload.get("chunk_index", 0),
            page_number=payload.get("page_number", 0),
            embedding=vector,
            metadata=payload.get("metadata") or {},
        )

    @staticmethod
    def _stored_status(points: List[Record]) -> DocumentStatus:
        """Status recorded on a document's points; any failed point fails the document."""
        statuses = {
            (point.payload or {}).get("status", DocumentStatus.PROCESSING.value)
            for point in points
        }
        if DocumentStatus.FAILED.value in statuses:
            return DocumentStatus.FAILED
        if statuses == {DocumentStatus.COMPLETED.value}:
            return DocumentStatus.COMPLETED
        return DocumentStatus.PROCESSING

    @classmethod
    def _to_document(cls, document_id: str, points: List[Record]) -> Document:
        chunks = sorted(
            (cls._to_chunk(point) for point in points),
            key=lambda c: (c.page_number, c.chunk_index),
        )
        payload = points[0].payload or {}
        document = Document(
            id=document_id,
            file_name=payload.get("file_name", ""),
            content_type=payload.get("content_type", ""),
            file_size=payload.get("file_size", 0),
            status=cls._stored_status(points),
            chunks=chunks,
        )
        uploaded_at = payload.get("uploaded_at")
        if uploaded_at:
            document.uploaded_at = datetime.fromisoformat(uploaded_at)
        return document

    async def _scroll(
        self, scroll_filter: Optional[Filter] = None, with_vectors: bool = False
    ) -> List[Record]:
        if not self.client:
            raise VectorDBError("Client not connected")

        records: List[Record] = []
        offset = None
        while True:
            batch, offset = await self.client.scroll(
                collection_name=self.collection_name,
                scroll_filter=scroll_filter,
                limit=SCROLL_PAGE_SIZE,
                offset=offset,
                with_payload=True,
                with_vectors=with_vectors,
            )
            records.extend(batch)
            if offset is None:
                return records

    async def save_chunks(self, document: Document) -> bool:
        """
        Persist every chunk of a document.

        Writes are not rolled back: when a batch fails, batches written before
        it stay in the collection, are marked ``failed`` and the call reports
        failure. Points are written as ``processing`` and marked ``completed``
        once every batch has landed.

        Args:
            document: Document whose chunks are written.

        Returns:
            True if every chunk was written.
        """
        if not self.client:
            logger.error("Cannot save chunks: client not connected")
            return False

        missing = [c.chunk_index for c in document.chunks if c.embedding is None]
        if missing:
            logger.error(
                f"Cannot index document {document.id}: "
                f"{len(missing)} chunks have no embedding")
            return False

        points = [self._to_point(document, chunk) for chunk in document.chunks]
        for start in range(0, len(points), self.upsert_batch_size):
            batch = points[start:start + self.upsert_batch_size]
            try:
                await self.client.upsert(
                    collection_name=self.collection_name, points=batch, wait=True
                )
            except Exception as e:
                logger.error(
                    f"Failed to save chunks {start}-{start + len(batch) - 1} "
                    f"of document {document.id}: {str(e)}")
                if start:
                    await self._mark_status(document.id, DocumentStatus.FAILED)
                return False

        if points and not await self._mark_status(document.id, DocumentStatus.COMPLETED):
            return False

        logger.info(f"Saved {len(points)} chunks for document {document.id}")
        return True

    async def _mark_status(self, document_id: str, status: DocumentStatus) -> bool:
        """Record ``status`` on every stored point of a document."""
        try:
            await self.client.set_payload(
                collection_name=self.collection_name,
                payload={"status": status.value},
                points=FilterSelector(filter=self._document_filter(document_id)),
                wait=True,
            )
        except Exception as e:
            logger.error(
                f"Failed to mark document {document_id} as {status.value}: {str(e)}")
            return False
        return True

    async def delete_document(self, document_id: str) -> bool:
        """
        Delete all chunks for a document.

        Args:
            document_id: ID of the document to delete.

        Returns:
            True unless the backend reported an error.
        """
        if not self.client:
            logger.error("Cannot delete document: client not connected")
            return False

        try:
            await self.client.delete(
                collection_name=self.collection_name,
                points_selector=FilterSelector(
                    filter=self._document_filter(document_id)),
                wait=True,
            )
        except Exception as e:
            logger.error(f"Failed to delete document {document_id}: {str(e)}")
            return False
        return True

    async def get_document(self, document_id: str) -> Optional[Document]:
        """
        Rebuild a document from its stored chunks.

        Args:
            document_id: ID of the document.

        Returns:
            The document with chunks in ingestion order, or None if no chunk matches.
        """
        try:
            records = await self._scroll(
                self._document_filter(document_id), with_vectors=True)
        except Exception as e:
            logger.error(f"Failed to fetch document {document_id}: {str(e)}")
            return None

        if not records:
            return None
        return self._to_document(document_id, records)

    async def get_all_documents(self) -> List[Document]:
        """
        Group every stored chunk by document.

        Returns:
            One document per distinct document ID, without embeddings.
        """
        try:
            records = await self._scroll()
        except Exception as e:
            logger.error(f"Failed to list documents: {str(e)}")
            return []

        grouped: Dict[str, List[Record]] = defaultdict(list)
        for record in records:
            grouped[(record.payload or {}).get("document_id", "")].append(record)

        return [
            self._to_document(document_id, points)
            for document_id, points in grouped.items()
        ]

    async def search(
        self, query_vector: List[float], top_k: int = 5, min_score: float = 0.7
    ) -> List[SearchResult]:
        """
        Search for similar chunks.

        Args:
            query_vector: Query embedding vector.
            top_k: Maximum number of results to return.
            min_score: Minimum cosine similarity a result must reach.

        Returns:
            Matching chunks ordered by descending score; empty on no match.
        """
        if top_k <= 0:
            return []

        try:
            if not self.client:
                raise VectorDBError("Client not connected")
            response = await self.client.query_points(
                collection_name=self.collection_name,
                query=NearestQuery(nearest=query_vector),
                limit=top_k,
                score_threshold=min_score,
                with_payload=True,
            )
        except Exception as e:
            logger.error(f"Vector search failed: {str(e)}")
            return []

        results = [
            SearchResult(chunk=self._to_chunk(point), score=point.score)
            for point in response.points
            if point.score >= min_score
        ]
        results.sort(key=lambda r: r.score, reverse=True)
        return results[:top_k]
