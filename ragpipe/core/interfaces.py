"""Capability protocols the orchestrators depend on.

Any object implementing these async methods can be injected into the
ingestion and RAG services; no base class is required.
"""

from typing import BinaryIO, List, Optional, Protocol, runtime_checkable

from ragpipe.models.document import Document, PageContent
from ragpipe.models.response import Completion, SearchResult


@runtime_checkable
class TextExtractor(Protocol):
    """Turns a binary document stream into page-numbered plain text."""

    async def extract_pages(self, stream: BinaryIO) -> List[PageContent]: ...


@runtime_checkable
class EmbeddingClient(Protocol):
    """Anything that can produce embedding vectors from text."""

    async def embed(self, text: str) -> List[float]: ...

    async def embed_batch(self, texts: List[str]) -> List[List[float]]: ...


@runtime_checkable
class GenerationClient(Protocol):
    """Chat model producing an answer and the tokens it consumed."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> Completion: ...


@runtime_checkable
class DocumentStore(Protocol):
    """Persistence and vector-similarity search over document chunks."""

    async def save_chunks(self, document: Document) -> bool: ...

    async def delete_document(self, document_id: str) -> bool: ...

    async def get_document(self, document_id: str) -> Optional[Document]: ...

    async def get_all_documents(self) -> List[Document]: ...

    async def search(
        self, query_vector: List[float], top_k: int, min_score: float
    ) -> List[SearchResult]: ...
