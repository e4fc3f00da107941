"""Custom exceptions for the application."""


class ConfigurationError(Exception):
    """Raised when a required backend is not configured or a setting is invalid."""

    pass


class ExtractionError(Exception):
    """Raised when text cannot be extracted from a source document."""

    pass


class PipelineError(Exception):
    """Raised when document ingestion fails at any stage.

    The failed document is kept on the exception so callers can report its
    final status; the underlying fault is chained as ``__cause__``.
    """

    def __init__(self, message: str, document=None) -> None:
        super().__init__(message)
        self.document = document


class BackendUnavailableError(Exception):
    """Raised when an embedding or generation endpoint cannot be reached."""

    pass


class EmbeddingError(BackendUnavailableError):
    """Raised when embedding generation fails."""

    pass


class LLMError(BackendUnavailableError):
    """Raised when LLM operations fail."""

    pass


class VectorDBError(Exception):
    """Raised when vector database operations fail."""

    pass
