"""Document chunking service."""

from typing import List, Optional

from ragpipe.core.config import settings
from ragpipe.core.exceptions import ConfigurationError
from ragpipe.models.document import DocumentChunk


class ChunkingService:
    """Splits page text into fixed-size, overlapping chunks."""

    def __init__(
        self, chunk_size: Optional[int] = None, chunk_overlap: Optional[int] = None
    ) -> None:
        """
        Initialize the chunking service.

        Args:
            chunk_size: Maximum characters per chunk.
            chunk_overlap: Characters shared by consecutive chunks.

        Raises:
            ConfigurationError: If the window would never advance.
        """
        self.chunk_size = settings.chunk_size if chunk_size is None else chunk_size
        self.chunk_overlap = (
            settings.chunk_overlap if chunk_overlap is None else chunk_overlap
        )

        if self.chunk_size <= 0:
            raise ConfigurationError(
                f"chunk_size must be positive, got {self.chunk_size}")
        if self.chunk_overlap < 0:
            raise ConfigurationError(
                f"chunk_overlap must not be negative, got {self.chunk_overlap}")
        if self.chunk_overlap >= self.chunk_size:
            raise ConfigurationError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"chunk_size ({self.chunk_size})"
            )

    @property
    def step(self) -> int:
        return self.chunk_size - self.chunk_overlap

    def chunk_text(
        self, text: str, document_id: str, page_number: int = 0
    ) -> List[DocumentChunk]:
        """
        Chunk a page of text into smaller pieces.

        Args:
            text: Page text to chunk.
            document_id: ID of the source document.
            page_number: Source page, 0 when the text is not paginated.

        Returns:
            Chunks in text order, with ``chunk_index`` starting at 0.
        """
        if not text or not text.strip():
            return []

        chunks = []
        start = 0
        while start < len(text):
            end = min(start + self.chunk_size, len(text))
            chunks.append(
                DocumentChunk(
                    document_id=document_id,
                    text=text[start:end],
                    chunk_index=len(chunks),
                    page_number=page_number,
                    metadata={"start_index": start, "end_index": end},
                )
            )
            start += self.step
        return chunks
