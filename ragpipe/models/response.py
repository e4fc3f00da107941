"""Search and answer models produced by the RAG service."""

from typing import List

from pydantic import BaseModel, Field

from ragpipe.models.document import DocumentChunk


class SearchResult(BaseModel):
    """A stored chunk paired with its similarity to the query."""

    chunk: DocumentChunk
    score: float


class SourceChunk(BaseModel):
    """Excerpt cited as context for a generated answer."""

    text: str
    score: float
    document_id: str
    page_number: int
    chunk_index: int

    @classmethod
    def from_search_result(cls, result: SearchResult) -> "SourceChunk":
        return cls(
            text=result.chunk.text,
            score=result.score,
            document_id=result.chunk.document_id,
            page_number=result.chunk.page_number,
            chunk_index=result.chunk.chunk_index,
        )


class RagResponse(BaseModel):
    """Answer to a question together with the chunks it was grounded on."""

    question: str
    answer: str
    sources: List[SourceChunk] = Field(default_factory=list)
    tokens_used: int = Field(default=0, ge=0)


class Completion(BaseModel):
    """Text returned by the generation backend."""

    text: str
    total_tokens: int = Field(default=0, ge=0)
