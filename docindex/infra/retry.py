"""Retry with exponential backoff for flaky collaborators (embedding APIs).

The chunking and fusion core never retries; callers opt in by wrapping their
embedder in RetryingEmbeddings.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from langchain_core.embeddings import Embeddings

from docindex.core.settings import RetrySettings

log = logging.getLogger(__name__)

T = TypeVar("T")


def is_rate_limit_error(exc: BaseException) -> bool:
    message = str(exc).lower()
    return (
        "rate limit" in message
        or "too many requests" in message
        or "rate_limit" in message
        or "429" in message
    )


def is_timeout_error(exc: BaseException) -> bool:
    if isinstance(exc, TimeoutError):
        return True
    message = str(exc).lower()
    return "timeout" in message or "timed out" in message or "time out" in message


def is_transient_error(exc: BaseException) -> bool:
    return is_rate_limit_error(exc) or is_timeout_error(exc)


def backoff_delay(attempt: int, settings: RetrySettings) -> float:
    return min(settings.initial_delay * (settings.backoff_factor**attempt), settings.max_delay)


def retry_call(
    fn: Callable[[], T],
    settings: RetrySettings | None = None,
    *,
    should_retry: Callable[[BaseException], bool] = is_transient_error,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` until it succeeds or ``max_retries`` retries are used up.

    Errors rejected by ``should_retry`` propagate immediately; the last error
    propagates once retries are exhausted.
    """
    s = settings or RetrySettings()
    attempt = 0
    while True:
        try:
            return fn()
        except Exception as e:
            if attempt >= s.max_retries or not should_retry(e):
                raise
            delay = backoff_delay(attempt, s)
            log.warning(
                "Attempt %d/%d failed (%s); retrying in %.2fs",
                attempt + 1,
                s.max_retries + 1,
                e,
                delay,
            )
            sleep(delay)
            attempt += 1


class RetryingEmbeddings(Embeddings):
    def __init__(
        self,
        base: Embeddings,
        settings: RetrySettings | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._base = base
        self._settings = settings or RetrySettings()
        self._sleep = sleep

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return retry_call(
            lambda: self._base.embed_documents(texts), self._settings, sleep=self._sleep
        )

    def embed_query(self, text: str) -> list[float]:
        return retry_call(lambda: self._base.embed_query(text), self._settings, sleep=self._sleep)
