"""API Service: document ingestion and RAG endpoints."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from ragpipe.api.health import check_all_dependencies, check_readiness
from ragpipe.core.config import settings
from ragpipe.core.dependencies import ServiceContainer
from ragpipe.core.exceptions import (
    BackendUnavailableError,
    ConfigurationError,
    PipelineError,
)
from ragpipe.models.api import (
    ChatRequest,
    ChatResponse,
    ChatSource,
    DocumentSummary,
    IngestionStatusResponse,
    SearchHit,
    SearchRequest,
    SearchResponse,
    UploadRequest,
    UploadResponse,
    preview,
)
from ragpipe.services.ingestion import summarize_document

logger = logging.getLogger(__name__)

router = APIRouter()


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def _unavailable(e: Exception) -> HTTPException:
    return HTTPException(status_code=503, detail=str(e))


@router.post("/api/ingestion/upload", response_model=UploadResponse)
async def upload_document(
    request: UploadRequest, services: ServiceContainer = Depends(get_services)
) -> UploadResponse:
    """
    Ingest a PDF from a path readable by the service.

    Args:
        request: Upload request.

    Returns:
        Ingestion result with the document's final status.
    """
    path = Path(request.file_path)
    if not path.is_file():
        raise HTTPException(
            status_code=400, detail=f"PDF file not found at path: {request.file_path}")

    logger.info(f"Processing PDF from path: {request.file_path}")
    try:
        document = await services.ingestion_service.process_file(path)
    except PipelineError as e:
        logger.error(f"Ingestion failed: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

    return UploadResponse(
        document_id=document.id,
        file_name=document.file_name,
        status=document.status.value,
        chunks_count=len(document.chunks),
        message=f"Document processed with status {document.status.value}",
    )


@router.get("/api/ingestion/status", response_model=IngestionStatusResponse)
async def ingestion_status(
    services: ServiceContainer = Depends(get_services),
) -> IngestionStatusResponse:
    """Get ingestion system status: total documents and chunks."""
    status = await services.ingestion_service.get_status()
    return IngestionStatusResponse(**status)


@router.get("/api/ingestion/documents/{document_id}", response_model=DocumentSummary)
async def get_document(
    document_id: str, services: ServiceContainer = Depends(get_services)
) -> DocumentSummary:
    """
    Get a stored document by ID.

    Args:
        document_id: Document ID.
    """
    document = await services.ingestion_service.get_document(document_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return DocumentSummary(**summarize_document(document))


@router.delete("/api/ingestion/documents/{document_id}", status_code=204)
async def delete_document(
    document_id: str, services: ServiceContainer = Depends(get_services)
) -> Response:
    """
    Delete all chunks of a document.

    Args:
        document_id: Document ID.
    """
    deleted = await services.ingestion_service.delete_document(document_id)
    if not deleted:
        raise HTTPException(status_code=500, detail="Failed to delete document")
    return Response(status_code=204)


@router.post("/api/rag/search", response_model=SearchResponse)
async def search(
    request: SearchRequest, services: ServiceContainer = Depends(get_services)
) -> SearchResponse:
    """
    Search for relevant document chunks using semantic similarity.

    Args:
        request: Search request.
    """
    logger.info(f"Search endpoint called with query: {request.query[:50]}")
    try:
        results = await services.rag_service.search(
            request.query, request.resolved_top_k(), request.resolved_min_score())
    except (ConfigurationError, BackendUnavailableError) as e:
        raise _unavailable(e)
    except Exception as e:
        logger.error(f"Search failed: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Search failed: {str(e)}")

    return SearchResponse(
        query=request.query,
        results_count=len(results),
        results=[
            SearchHit(
                text=r.chunk.text,
                score=r.score,
                document_id=r.chunk.document_id,
                chunk_index=r.chunk.chunk_index,
                page_number=r.chunk.page_number,
            )
            for r in results
        ],
    )


@router.post("/api/rag/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest, services: ServiceContainer = Depends(get_services)
) -> ChatResponse:
    """
    Answer a question from the indexed documents.

    Args:
        request: Chat request.
    """
    logger.info(f"Chat endpoint called with question: {request.question[:50]}")
    try:
        response = await services.rag_service.generate_answer(
            request.question, request.top_k or settings.top_k)
    except (ConfigurationError, BackendUnavailableError) as e:
        raise _unavailable(e)
    except Exception as e:
        logger.error(f"Chat failed: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Chat failed: {str(e)}")

    return ChatResponse(
        question=response.question,
        answer=response.answer,
        sources=[
            ChatSource(**{**s.model_dump(), "text": preview(s.text)})
            for s in response.sources
        ],
        tokens_used=response.tokens_used,
    )


@router.get("/health")
async def health(services: ServiceContainer = Depends(get_services)) -> dict:
    """
    Health check endpoint with dependency verification.

    Returns:
        Health status with service dependencies.
    """
    result = await check_all_dependencies(services.vector_db, services.settings)
    return {"service": services.settings.service_name, **result}


@router.get("/ready")
async def readiness(services: ServiceContainer = Depends(get_services)) -> dict:
    """
    Readiness check endpoint.

    Returns:
        Readiness status.
    """
    result = await check_readiness(services.vector_db, services.settings)
    return {"service": services.settings.service_name, **result}


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def create_app(services: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Service container; built from settings when omitted.
    """
    services = services or ServiceContainer()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        await services.initialize()
        logger.info("API Service started")
        yield
        await services.shutdown()
        logger.info("API Service stopped")

    app = FastAPI(title="RAG Service", lifespan=lifespan)
    app.state.services = services
    app.include_router(router)
    return app


def main() -> None:
    import uvicorn

    logging.basicConfig(level=settings.log_level)
    uvicorn.run(create_app(), host="0.0.0.0", port=settings.service_port)


if __name__ == "__main__":
    main()
