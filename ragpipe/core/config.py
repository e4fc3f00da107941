"""Application configuration using Pydantic settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # OpenAI backends are optional; without a key the RAG endpoints report 503
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None

    qdrant_url: str = "http://qdrant:6333"
    qdrant_api_key: Optional[str] = None
    qdrant_collection_name: str = "rag-documents"
    service_name: str = "ragpipe"
    service_port: int = 8000
    log_level: str = "INFO"

    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    embedding_batch_size: int = 256
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 800

    chunk_size: int = 500
    chunk_overlap: int = 50
    top_k: int = 5
    min_score: float = 0.7

    upsert_batch_size: int = 64


settings = Settings()
