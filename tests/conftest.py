"""Shared fixtures: in-process Qdrant store and scripted backends."""

from typing import Dict, List, Optional

import pytest
from qdrant_client import AsyncQdrantClient

from ragpipe.core.exceptions import EmbeddingError, ExtractionError
from ragpipe.models.document import Document, PageContent
from ragpipe.models.response import Completion, SearchResult
from ragpipe.services.chunking import ChunkingService
from ragpipe.services.vector_db import VectorDBService

DIMENSIONS = 3


def vectorize(text: str) -> List[float]:
    """Deterministic, never-zero 3-d vector for a text."""
    return [float(len(text)), 1.0, float(sum(map(ord, text)) % 97)]


class FakeEmbedder:
    """Embeds through a lookup table, falling back to ``vectorize``."""

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, fail: bool = False):
        self.vectors = vectors or {}
        self.fail = fail
        self.batch_calls: List[List[str]] = []

    async def embed(self, text: str) -> List[float]:
        if self.fail:
            raise EmbeddingError("embedding endpoint unreachable")
        return self.vectors.get(text, vectorize(text))

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        self.batch_calls.append(list(texts))
        return [await self.embed(t) for t in texts]


class FakeLLM:
    """Returns a canned completion and remembers the prompts it saw."""

    def __init__(self, text: str = "Paris is the capital [Source 1].", total_tokens: int = 42):
        self.text = text
        self.total_tokens = total_tokens
        self.calls: List[dict] = []

    async def complete(self, system_prompt, user_prompt, temperature, max_tokens):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        return Completion(text=self.text, total_tokens=self.total_tokens)


class FakeExtractor:
    """Ignores the stream and returns fixed pages."""

    content_type = "application/pdf"

    def __init__(self, pages: List[str], fail: bool = False):
        self.pages = pages
        self.fail = fail

    async def extract_pages(self, stream) -> List[PageContent]:
        if self.fail:
            raise ExtractionError("not a PDF")
        return [
            PageContent(page_number=i, text=text)
            for i, text in enumerate(self.pages, start=1)
        ]


class MemoryStore:
    """Dict-backed store whose save result can be scripted."""

    def __init__(self, save_result: bool = True):
        self.save_result = save_result
        self.saved: Dict[str, Document] = {}

    async def save_chunks(self, document: Document) -> bool:
        if self.save_result:
            self.saved[document.id] = document.model_copy(deep=True)
        return self.save_result

    async def delete_document(self, document_id: str) -> bool:
        self.saved.pop(document_id, None)
        return True

    async def get_document(self, document_id: str) -> Optional[Document]:
        return self.saved.get(document_id)

    async def get_all_documents(self) -> List[Document]:
        return list(self.saved.values())

    async def search(self, query_vector, top_k, min_score) -> List[SearchResult]:
        return []


@pytest.fixture
def chunker() -> ChunkingService:
    return ChunkingService(chunk_size=100, chunk_overlap=10)


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
async def vector_db():
    service = VectorDBService(
        client=AsyncQdrantClient(location=":memory:"),
        collection_name="test-chunks",
        dimensions=DIMENSIONS,
        upsert_batch_size=2,
    )
    await service.connect()
    yield service
    await service.disconnect()
