"""Document ingestion pipeline: extract, chunk, embed and index."""

import enum
import logging
import time
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Union

from ragpipe.core.exceptions import ConfigurationError, PipelineError
from ragpipe.core.interfaces import DocumentStore, EmbeddingClient, TextExtractor
from ragpipe.models.document import (
    Document,
    DocumentChunk,
    DocumentStatus,
    PageContent,
)
from ragpipe.monitoring.metrics import (
    chunks_indexed_total,
    documents_ingested_total,
    ingestion_duration_seconds,
)
from ragpipe.services.chunking import ChunkingService

logger = logging.getLogger(__name__)


class PipelineStage(enum.Flag):
    """Optional stages of an ingestion run; chunking always happens."""

    CHUNK = enum.auto()
    EMBED = enum.auto()
    PERSIST = enum.auto()

    @classmethod
    def for_collaborators(
        cls,
        embedding_service: Optional[EmbeddingClient],
        store: Optional[DocumentStore],
    ) -> "PipelineStage":
        stages = cls.CHUNK
        if embedding_service is not None:
            stages |= cls.EMBED
        if store is not None:
            stages |= cls.PERSIST
        return stages


class IngestionService:
    """Turns source documents into indexed, embedded chunks."""

    def __init__(
        self,
        extractor: TextExtractor,
        chunking_service: ChunkingService,
        embedding_service: Optional[EmbeddingClient] = None,
        store: Optional[DocumentStore] = None,
        stages: Optional[PipelineStage] = None,
    ) -> None:
        """
        Initialize the ingestion service.

        Args:
            extractor: Page text extractor for source streams.
            chunking_service: Splits page text into chunks.
            embedding_service: Embedding backend, required by the EMBED stage.
            store: Document store, required by the PERSIST stage.
            stages: Stages to run; derived from the collaborators when omitted.
                A store may be passed without PERSIST so it still serves lookups.

        Raises:
            ConfigurationError: If a requested stage has no collaborator.
        """
        if stages is None:
            stages = PipelineStage.for_collaborators(embedding_service, store)
        stages |= PipelineStage.CHUNK

        if PipelineStage.EMBED in stages and embedding_service is None:
            raise ConfigurationError("Embedding stage requested but no embedding service configured")
        if PipelineStage.PERSIST in stages and store is None:
            raise ConfigurationError("Persist stage requested but no document store configured")

        self.extractor = extractor
        self.chunking_service = chunking_service
        self.embedding_service = embedding_service
        self.store = store
        self.stages = stages

    def _create_document(
        self, file_name: str, file_size: int, content_type: str
    ) -> Document:
        document = Document(
            file_name=file_name,
            content_type=content_type,
            file_size=file_size,
        )
        document.status = DocumentStatus.PROCESSING
        return document

    def _create_chunks(
        self, pages: List[PageContent], document_id: str
    ) -> List[DocumentChunk]:
        chunks: List[DocumentChunk] = []
        for page in pages:
            chunks.extend(
                self.chunking_service.chunk_text(
                    page.text, document_id, page.page_number)
            )
        return chunks

    async def _embed_chunks(self, chunks: List[DocumentChunk]) -> None:
        if PipelineStage.EMBED not in self.stages or not chunks:
            return

        embeddings = await self.embedding_service.embed_batch(
            [chunk.text for chunk in chunks])
        if len(embeddings) != len(chunks):
            raise PipelineError(
                f"Got {len(embeddings)} embeddings for {len(chunks)} chunks")

        for chunk, embedding in zip(chunks, embeddings):
            chunk.embedding = embedding

    async def _index_document(self, document: Document) -> None:
        if PipelineStage.PERSIST not in self.stages:
            document.status = DocumentStatus.COMPLETED_NO_INDEXING
            return

        indexed = await self.store.save_chunks(document)
        if indexed:
            document.status = DocumentStatus.COMPLETED
            chunks_indexed_total.inc(len(document.chunks))
        else:
            document.status = DocumentStatus.FAILED
            logger.error(f"Document store rejected chunks of document {document.id}")

    async def process_document(
        self,
        stream: BinaryIO,
        file_name: str,
        file_size: Optional[int] = None,
        content_type: Optional[str] = None,
    ) -> Document:
        """
        Run the full pipeline for one document.

        Args:
            stream: Binary source stream.
            file_name: Name recorded on the document.
            file_size: Size in bytes; measured from the stream when omitted.
            content_type: MIME type; defaults to the extractor's type.

        Returns:
            The document in a terminal status. ``failed`` is returned (not
            raised) when the store refuses the chunks.

        Raises:
            PipelineError: If any stage faults; the document ends ``failed``.
        """
        if file_size is None:
            file_size = _stream_size(stream)
        if content_type is None:
            content_type = getattr(self.extractor, "content_type", "application/octet-stream")

        document = self._create_document(file_name, file_size, content_type)
        logger.info(f"Processing document {document.id} ({file_name}, {file_size} bytes)")
        start_time = time.time()

        try:
            pages = await self.extractor.extract_pages(stream)
            chunks = self._create_chunks(pages, document.id)
            await self._embed_chunks(chunks)

            document.chunks = chunks
            await self._index_document(document)
        except Exception as e:
            document.status = DocumentStatus.FAILED
            documents_ingested_total.labels(status=document.status.value).inc()
            logger.error(f"Failed to process document {document.id}: {str(e)}")
            raise PipelineError(
                f"Failed to process document: {str(e)}", document=document) from e

        documents_ingested_total.labels(status=document.status.value).inc()
        ingestion_duration_seconds.observe(time.time() - start_time)
        logger.info(
            f"Document {document.id} finished as {document.status.value} "
            f"with {len(document.chunks)} chunks in {time.time() - start_time:.2f}s"
        )
        return document

    async def process_file(self, path: Union[str, Path]) -> Document:
        """
        Open a file from disk and ingest it.

        Args:
            path: Location of the source file.

        Returns:
            The processed document, named after the file.
        """
        path = Path(path)
        with path.open("rb") as stream:
            return await self.process_document(
                stream, path.name, file_size=path.stat().st_size)

    async def delete_document(self, document_id: str) -> bool:
        """
        Remove a document's chunks from the store.

        Raises:
            ConfigurationError: If no store is configured.
        """
        if self.store is None:
            raise ConfigurationError("Document store not configured")
        return await self.store.delete_document(document_id)

    async def get_document(self, document_id: str) -> Optional[Document]:
        """Fetch a stored document, or None when it has no chunks."""
        if self.store is None:
            raise ConfigurationError("Document store not configured")
        return await self.store.get_document(document_id)

    async def get_status(self) -> Dict:
        """
        Summarise what is currently indexed.

        Returns:
            Totals and one summary per stored document.
        """
        if self.store is None:
            raise ConfigurationError("Document store not configured")

        documents = await self.store.get_all_documents()
        return {
            "total_documents": len(documents),
            "total_chunks": sum(len(d.chunks) for d in documents),
            "documents": [summarize_document(d) for d in documents],
        }


def summarize_document(document: Document) -> Dict:
    return {
        "document_id": document.id,
        "file_name": document.file_name,
        "chunks_count": len(document.chunks),
        "uploaded_at": document.uploaded_at.isoformat(),
        "status": document.status.value,
    }


def _stream_size(stream: BinaryIO) -> int:
    try:
        position = stream.tell()
        stream.seek(0, 2)
        size = stream.tell()
        stream.seek(position)
        return size
    except (AttributeError, OSError):
        return 0
