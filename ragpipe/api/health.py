"""Health check utilities."""

from typing import Dict

from ragpipe.core.config import Settings
from ragpipe.services.health import check_openai, check_qdrant
from ragpipe.services.vector_db import VectorDBService


async def check_all_dependencies(
    vector_db: VectorDBService, settings: Settings
) -> Dict:
    """
    Check all service dependencies.

    An unconfigured OpenAI backend leaves the service healthy: ingestion
    still works without indexing.

    Args:
        vector_db: Vector database service.
        settings: Application settings.

    Returns:
        Dictionary with overall status and individual service statuses.
    """
    services = {}
    overall_status = "healthy"

    qdrant_status = await check_qdrant(vector_db)
    services["qdrant"] = qdrant_status
    if qdrant_status.get("status") != "healthy":
        overall_status = "unhealthy"

    openai_status = await check_openai(settings)
    services["openai"] = openai_status
    if openai_status.get("status") == "unhealthy":
        overall_status = "unhealthy"

    return {"status": overall_status, "services": services}


async def check_readiness(vector_db: VectorDBService, settings: Settings) -> Dict:
    """
    Check service readiness.

    Args:
        vector_db: Vector database service.
        settings: Application settings.

    Returns:
        Readiness status dictionary.
    """
    qdrant_status = await check_qdrant(vector_db)
    qdrant_ready = qdrant_status.get("status") == "healthy"

    return {
        "ready": qdrant_ready,
        "qdrant": qdrant_ready,
        "openai_configured": bool(settings.openai_api_key),
    }
