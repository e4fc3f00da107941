"""Pydantic models for the HTTP API."""

from typing import List, Optional

from pydantic import BaseModel, Field

from ragpipe.core.config import settings

SOURCE_PREVIEW_CHARS = 200


class UploadRequest(BaseModel):
    """Model for ingesting a file from a server-side path."""

    file_path: str = Field(..., min_length=1)


class UploadResponse(BaseModel):
    """Model for ingestion result."""

    document_id: str
    file_name: str
    status: str
    chunks_count: int
    message: str


class DocumentSummary(BaseModel):
    """Model for a stored document."""

    document_id: str
    file_name: str
    chunks_count: int
    uploaded_at: str
    status: str


class IngestionStatusResponse(BaseModel):
    """Model for ingestion status."""

    total_documents: int
    total_chunks: int
    documents: List[DocumentSummary]
    message: str = "Ingestion system status"


class SearchRequest(BaseModel):
    """Semantic search request model."""

    query: str = Field(..., min_length=1)
    top_k: Optional[int] = Field(default=None, ge=1, le=100)
    min_score: Optional[float] = Field(default=None, ge=-1.0, le=1.0)

    def resolved_top_k(self) -> int:
        return self.top_k or settings.top_k

    def resolved_min_score(self) -> float:
        return settings.min_score if self.min_score is None else self.min_score


class SearchHit(BaseModel):
    """Model for a single search hit."""

    text: str
    score: float
    document_id: str
    chunk_index: int
    page_number: int


class SearchResponse(BaseModel):
    """Model for search response."""

    query: str
    results_count: int
    results: List[SearchHit]


class ChatRequest(BaseModel):
    """Chat request model."""

    question: str = Field(..., min_length=1)
    top_k: Optional[int] = Field(default=None, ge=1, le=100)


class ChatSource(BaseModel):
    """Model for a cited source, with text shortened for display."""

    text: str
    score: float
    document_id: str
    page_number: int
    chunk_index: int


class ChatResponse(BaseModel):
    """Chat response model."""

    question: str
    answer: str
    sources: List[ChatSource]
    tokens_used: int


def preview(text: str, limit: int = SOURCE_PREVIEW_CHARS) -> str:
    return text if len(text) <= limit else text[:limit] + "..."
