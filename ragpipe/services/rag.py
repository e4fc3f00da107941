"""Retrieval-augmented answer generation over the document store."""

import logging
import time
from typing import List, Optional

from ragpipe.core.config import settings
from ragpipe.core.exceptions import ConfigurationError
from ragpipe.core.interfaces import DocumentStore, EmbeddingClient, GenerationClient
from ragpipe.models.response import RagResponse, SearchResult, SourceChunk
from ragpipe.monitoring.metrics import (
    query_counter,
    query_errors_total,
    query_latency_seconds,
    tokens_used_total,
)

logger = logging.getLogger(__name__)

NO_RESULTS_ANSWER = (
    "I couldn't find any relevant information in the documents to answer your question."
)

SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions based on the provided context.\n"
    "Use only the information from the context to answer the question.\n"
    "If the context doesn't contain enough information to answer the question, say so.\n"
    "Always cite which source(s) you used by referencing [Source N] in your answer."
)

USER_PROMPT_TEMPLATE = "Context:\n{context}\n\nQuestion: {question}\n\nAnswer:"


def build_context(results: List[SearchResult]) -> str:
    """
    Label each retrieved chunk and join them into one context block.

    Args:
        results: Search results in the order they should be cited.

    Returns:
        Context text with ``[Source N]`` headers, numbered from 1.
    """
    return "\n\n".join(
        f"[Source {i}] (Page {r.chunk.page_number}, Score: {r.score:.2f})\n{r.chunk.text}"
        for i, r in enumerate(results, start=1)
    )


class RagService:
    """Answers questions from the chunks held in the document store."""

    def __init__(
        self,
        store: DocumentStore,
        embedding_service: Optional[EmbeddingClient] = None,
        llm_service: Optional[GenerationClient] = None,
        min_score: Optional[float] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> None:
        """
        Initialize the RAG service.

        Args:
            store: Document store searched for context.
            embedding_service: Embeds queries; search is unavailable without it.
            llm_service: Generates answers; chat is unavailable without it.
            min_score: Similarity threshold used when answering questions.
            temperature: Sampling temperature for answer generation.
            max_tokens: Completion token budget.
        """
        if store is None:
            raise ConfigurationError("Document store not configured")
        self.store = store
        self.embedding_service = embedding_service
        self.llm_service = llm_service
        self.min_score = settings.min_score if min_score is None else min_score
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self.max_tokens = settings.llm_max_tokens if max_tokens is None else max_tokens

    def _require_embedding(self) -> EmbeddingClient:
        if self.embedding_service is None:
            raise ConfigurationError("Embedding service not configured")
        return self.embedding_service

    def _require_llm(self) -> GenerationClient:
        if self.llm_service is None:
            raise ConfigurationError("LLM service not configured")
        return self.llm_service

    async def search(
        self, query: str, top_k: int = 5, min_score: float = 0.7
    ) -> List[SearchResult]:
        """
        Find the chunks most similar to a query.

        Args:
            query: Natural-language query.
            top_k: Maximum number of results.
            min_score: Minimum similarity score.

        Returns:
            Results ordered by descending score, possibly empty.

        Raises:
            ConfigurationError: If no embedding service is configured.
            EmbeddingError: If the query cannot be embedded.
        """
        embedding_service = self._require_embedding()
        query_counter.labels(operation="search").inc()
        start_time = time.time()

        try:
            query_vector = await embedding_service.embed(query)
            results = await self.store.search(query_vector, top_k, min_score)
        except Exception:
            query_errors_total.labels(operation="search").inc()
            raise

        query_latency_seconds.labels(operation="search").observe(time.time() - start_time)
        logger.info(f"Search returned {len(results)} results for: {query[:50]}")
        return results

    async def generate_answer(self, question: str, top_k: int = 5) -> RagResponse:
        """
        Answer a question from retrieved document chunks.

        Args:
            question: User question.
            top_k: Maximum number of chunks used as context.

        Returns:
            Answer with its cited sources and token usage.

        Raises:
            ConfigurationError: If the embedding or LLM service is missing.
            BackendUnavailableError: If a backend call fails.
        """
        self._require_embedding()
        llm_service = self._require_llm()

        results = await self.search(question, top_k, min_score=self.min_score)
        if not results:
            logger.info(f"No relevant chunks for question: {question[:50]}")
            return RagResponse(
                question=question,
                answer=NO_RESULTS_ANSWER,
                sources=[],
                tokens_used=0,
            )

        context = build_context(results)
        query_counter.labels(operation="chat").inc()
        start_time = time.time()
        try:
            completion = await llm_service.complete(
                SYSTEM_PROMPT,
                USER_PROMPT_TEMPLATE.format(context=context, question=question),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception:
            query_errors_total.labels(operation="chat").inc()
            raise

        query_latency_seconds.labels(operation="chat").observe(time.time() - start_time)
        tokens_used_total.inc(completion.total_tokens)
        logger.info(
            f"Answered with {len(results)} sources, {completion.total_tokens} tokens")

        return RagResponse(
            question=question,
            answer=completion.text,
            sources=[SourceChunk.from_search_result(r) for r in results],
            tokens_used=completion.total_tokens,
        )
