"""Health check service for dependency verification."""

import time
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from ragpipe.core.config import Settings
from ragpipe.services.vector_db import VectorDBService


async def check_qdrant(vector_db: VectorDBService) -> Dict[str, Any]:
    """
    Check Qdrant connectivity and health.

    Args:
        vector_db: VectorDBService instance.

    Returns:
        Health status dictionary.
    """
    try:
        start_time = time.time()
        if not vector_db.client:
            return {"status": "unhealthy", "error": "Not connected", "latency_ms": 0}

        collections = await vector_db.client.get_collections()
        latency_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(latency_ms, 2),
            "collections": len(collections.collections),
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
            "latency_ms": 0,
        }


async def check_openai(
    settings: Settings, client: Optional[AsyncOpenAI] = None
) -> Dict[str, Any]:
    """
    Check OpenAI API connectivity.

    Args:
        settings: Settings holding the API key and models.
        client: Client to probe; built from settings when omitted.

    Returns:
        Health status dictionary.
    """
    if not settings.openai_api_key:
        return {"status": "not_configured", "error": "API key not set"}

    try:
        client = client or AsyncOpenAI(
            api_key=settings.openai_api_key, base_url=settings.openai_base_url
        )

        start_time = time.time()
        await client.models.list()
        latency_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(latency_ms, 2),
            "embedding_model": settings.embedding_model,
            "llm_model": settings.llm_model,
        }
    except Exception as e:
        error_msg = str(e).lower()
        if "api key" in error_msg or "authentication" in error_msg:
            return {"status": "unhealthy", "error": "Invalid API key"}
        return {
            "status": "unhealthy",
            "error": str(e),
            "latency_ms": 0,
        }
