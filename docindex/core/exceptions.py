from __future__ import annotations


class DocIndexError(Exception):
    """Base error for indexing and search failures."""

    default_code: str | None = None

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code or self.default_code


class EmbeddingError(DocIndexError):
    """Raised when the embedding collaborator fails or returns a bad batch."""

    default_code = "embedding_failed"


class TokenEstimationError(DocIndexError):
    """Raised when the token estimator fails or returns a negative count."""

    default_code = "token_estimation_failed"


class ConfigurationError(DocIndexError):
    """Raised for invalid or missing configuration."""

    default_code = "invalid_configuration"


def wrap_error(exc: BaseException, context: str | None = None) -> DocIndexError:
    """Return ``exc`` as a DocIndexError, prefixing the message with ``context``.

    DocIndexErrors pass through untouched so callers can re-raise the result
    with ``raise wrap_error(e, "...") from e`` without double wrapping.
    """
    if isinstance(exc, DocIndexError):
        return exc
    detail = str(exc) or type(exc).__name__
    return DocIndexError(f"{context}: {detail}" if context else detail)
