"""Dependency injection for services."""

import logging
from typing import Optional

from ragpipe.core.config import Settings, settings as default_settings
from ragpipe.services.chunking import ChunkingService
from ragpipe.services.embedding import EmbeddingService
from ragpipe.services.extraction import PdfExtractor
from ragpipe.services.ingestion import IngestionService, PipelineStage
from ragpipe.services.llm import LLMService
from ragpipe.services.rag import RagService
from ragpipe.services.vector_db import VectorDBService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Container for service instances."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """
        Initialize service container.

        Args:
            settings: Settings to build from; the process settings by default.
        """
        self.settings = settings or default_settings
        self.vector_db = VectorDBService(
            collection_name=self.settings.qdrant_collection_name,
            dimensions=self.settings.embedding_dimensions,
            upsert_batch_size=self.settings.upsert_batch_size,
        )
        self.chunking_service = ChunkingService(
            self.settings.chunk_size, self.settings.chunk_overlap)
        self.extractor = PdfExtractor()

        self.embedding_service: Optional[EmbeddingService] = None
        self.llm_service: Optional[LLMService] = None
        if self.settings.openai_api_key:
            self.embedding_service = EmbeddingService(
                model=self.settings.embedding_model,
                dimensions=self.settings.embedding_dimensions,
                batch_size=self.settings.embedding_batch_size,
            )
            self.llm_service = LLMService(model=self.settings.llm_model)
        else:
            logger.warning("OPENAI_API_KEY not set: documents will not be indexed "
                           "and RAG endpoints will report 503")

        # Qdrant only stores embedded chunks, so indexing needs the embedding backend
        stages = PipelineStage.CHUNK
        if self.embedding_service:
            stages |= PipelineStage.EMBED | PipelineStage.PERSIST
        self.ingestion_service = IngestionService(
            extractor=self.extractor,
            chunking_service=self.chunking_service,
            embedding_service=self.embedding_service,
            store=self.vector_db,
            stages=stages,
        )
        self.rag_service = RagService(
            store=self.vector_db,
            embedding_service=self.embedding_service,
            llm_service=self.llm_service,
            min_score=self.settings.min_score,
            temperature=self.settings.llm_temperature,
            max_tokens=self.settings.llm_max_tokens,
        )

    async def initialize(self) -> None:
        """Initialize all services."""
        await self.vector_db.connect()

    async def shutdown(self) -> None:
        """Shutdown all services."""
        await self.vector_db.disconnect()
