"""OpenAI embedding generation service."""

import logging
from typing import List, Optional

from openai import AsyncOpenAI

from ragpipe.core.config import settings
from ragpipe.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Service for generating embeddings using OpenAI."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        dimensions: Optional[int] = None,
        batch_size: Optional[int] = None,
    ) -> None:
        """
        Initialize the embedding service.

        Args:
            client: Preconfigured OpenAI client; built from settings when omitted.
            model: Embedding model identifier.
            dimensions: Requested vector size.
            batch_size: Maximum number of inputs per embeddings request.
        """
        self.client = client or AsyncOpenAI(
            api_key=settings.openai_api_key, base_url=settings.openai_base_url
        )
        self.model = model or settings.embedding_model
        self.dimensions = dimensions or settings.embedding_dimensions
        self.batch_size = batch_size or settings.embedding_batch_size

    async def _create(self, texts: List[str]) -> List[List[float]]:
        try:
            response = await self.client.embeddings.create(
                model=self.model,
                input=texts,
                dimensions=self.dimensions,
            )
        except Exception as e:
            raise EmbeddingError(f"Failed to generate embeddings: {str(e)}") from e

        if len(response.data) != len(texts):
            raise EmbeddingError(
                f"Embedding backend returned {len(response.data)} vectors "
                f"for {len(texts)} inputs"
            )
        # the API tags every vector with the position of its input
        ordered = sorted(response.data, key=lambda item: item.index)
        return [item.embedding for item in ordered]

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of text strings to embed.

        Returns:
            List of embedding vectors, one per input and in input order.

        Raises:
            EmbeddingError: If embedding generation fails.
        """
        if not texts:
            return []

        embeddings: List[List[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start:start + self.batch_size]
            embeddings.extend(await self._create(batch))

        logger.debug(f"Generated {len(embeddings)} embeddings with {self.model}")
        return embeddings

    async def embed(self, text: str) -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: Text string to embed.

        Returns:
            Embedding vector.
        """
        embeddings = await self.embed_batch([text])
        return embeddings[0]
