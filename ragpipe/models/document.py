"""Document models for the RAG system."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStatus(str, Enum):
    """Lifecycle of an ingested document."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    COMPLETED_NO_INDEXING = "completed_no_indexing"
    FAILED = "failed"


class DocumentChunk(BaseModel):
    """Chunk model representing a document fragment."""

    id: str = Field(default_factory=_new_id)
    document_id: str
    text: str
    chunk_index: int = Field(ge=0)
    page_number: int = Field(default=0, ge=0)
    embedding: Optional[List[float]] = None
    metadata: dict = Field(default_factory=dict)


class Document(BaseModel):
    """Document model representing an ingested source file."""

    id: str = Field(default_factory=_new_id)
    file_name: str = ""
    content_type: str = ""
    file_size: int = 0
    uploaded_at: datetime = Field(default_factory=_utcnow)
    status: DocumentStatus = DocumentStatus.PENDING
    chunks: List[DocumentChunk] = Field(default_factory=list)


class PageContent(BaseModel):
    """Plain text of a single source page."""

    page_number: int = Field(ge=1)
    text: str = ""
