"""Tests for the HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient
from qdrant_client import AsyncQdrantClient

from ragpipe.api_service import create_app
from ragpipe.core.config import Settings
from ragpipe.core.dependencies import ServiceContainer
from ragpipe.services.chunking import ChunkingService
from ragpipe.services.ingestion import IngestionService
from ragpipe.services.rag import RagService
from ragpipe.services.vector_db import VectorDBService

from conftest import FakeEmbedder, FakeExtractor, FakeLLM

PAGE_TEXT = "Paris is the capital of France. " * 8


class ConstantEmbedder(FakeEmbedder):
    async def embed(self, text):
        return [1.0, 1.0, 1.0]


@pytest.fixture
def services():
    container = ServiceContainer(
        Settings(_env_file=None, openai_api_key=None, embedding_dimensions=3))
    store = VectorDBService(
        client=AsyncQdrantClient(location=":memory:"),
        collection_name="api-chunks",
        dimensions=3,
    )
    container.vector_db = store
    container.ingestion_service = IngestionService(
        FakeExtractor([PAGE_TEXT]), ChunkingService(300, 30), ConstantEmbedder(), store)
    container.rag_service = RagService(store, ConstantEmbedder(), FakeLLM())
    return container


@pytest.fixture
def client(services):
    with TestClient(create_app(services)) as client:
        yield client


@pytest.fixture
def pdf_path(tmp_path):
    path = tmp_path / "capitals.pdf"
    path.write_bytes(b"%PDF-1.4 placeholder")
    return path


def _upload(client, path):
    response = client.post("/api/ingestion/upload", json={"file_path": str(path)})
    assert response.status_code == 200
    return response.json()


def test_upload_rejects_missing_file(client, tmp_path):
    response = client.post(
        "/api/ingestion/upload", json={"file_path": str(tmp_path / "nope.pdf")})

    assert response.status_code == 400


def test_upload_indexes_document(client, pdf_path):
    body = _upload(client, pdf_path)

    assert body["file_name"] == "capitals.pdf"
    assert body["status"] == "completed"
    assert body["chunks_count"] == 1


def test_ingestion_status_lists_documents(client, pdf_path):
    uploaded = _upload(client, pdf_path)

    body = client.get("/api/ingestion/status").json()

    assert body["total_documents"] == 1
    assert body["total_chunks"] == 1
    assert body["documents"][0]["document_id"] == uploaded["document_id"]


def test_get_and_delete_document(client, pdf_path):
    document_id = _upload(client, pdf_path)["document_id"]

    response = client.get(f"/api/ingestion/documents/{document_id}")
    assert response.status_code == 200
    assert response.json()["file_name"] == "capitals.pdf"

    assert client.delete(f"/api/ingestion/documents/{document_id}").status_code == 204
    assert client.get(f"/api/ingestion/documents/{document_id}").status_code == 404


def test_search_returns_scored_chunks(client, pdf_path):
    document_id = _upload(client, pdf_path)["document_id"]

    body = client.post("/api/rag/search", json={"query": "capital", "top_k": 3}).json()

    assert body["results_count"] == 1
    hit = body["results"][0]
    assert hit["document_id"] == document_id
    assert hit["page_number"] == 1
    assert hit["score"] == pytest.approx(1.0, abs=1e-4)


def test_chat_returns_answer_with_shortened_sources(client, pdf_path):
    _upload(client, pdf_path)

    body = client.post("/api/rag/chat", json={"question": "What is the capital?"}).json()

    assert body["answer"] == FakeLLM().text
    assert body["tokens_used"] == 42
    assert len(body["sources"]) == 1
    assert body["sources"][0]["text"] == PAGE_TEXT[:200] + "..."


def test_chat_without_documents_is_not_an_error(client):
    response = client.post("/api/rag/chat", json={"question": "Anyone there?"})

    assert response.status_code == 200
    assert response.json()["sources"] == []
    assert response.json()["tokens_used"] == 0


def test_unconfigured_backends_report_service_unavailable(services):
    services.rag_service = RagService(services.vector_db)

    with TestClient(create_app(services)) as client:
        search = client.post("/api/rag/search", json={"query": "capital"})
        chat = client.post("/api/rag/chat", json={"question": "capital?"})

    assert search.status_code == 503
    assert chat.status_code == 503


def test_health_and_readiness(client):
    health = client.get("/health").json()
    ready = client.get("/ready").json()

    assert health["status"] == "healthy"
    assert health["services"]["openai"]["status"] == "not_configured"
    assert ready["ready"] is True
    assert ready["openai_configured"] is False


def test_metrics_endpoint(client, pdf_path):
    _upload(client, pdf_path)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "rag_documents_ingested_total" in response.text


def test_chat_request_fields():
    from ragpipe.models.api import ChatRequest

    assert set(ChatRequest.model_fields) == {"question", "top_k"}
