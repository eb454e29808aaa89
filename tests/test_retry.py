from __future__ import annotations

import pytest
from langchain_core.embeddings import Embeddings

from docindex.core.settings import RetrySettings
from docindex.infra.retry import (
    RetryingEmbeddings,
    backoff_delay,
    is_transient_error,
    retry_call,
)

FAST = RetrySettings(max_retries=3, initial_delay=1.0, max_delay=5.0, backoff_factor=2.0)


class FlakyEmbeddings(Embeddings):
    def __init__(self, failures: int, error: Exception) -> None:
        self.failures = failures
        self.error = error
        self.calls = 0

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return [[1.0, 0.0] for _ in texts]

    def embed_query(self, text: str) -> list[float]:
        return self.embed_documents([text])[0]


def test_backoff_is_capped() -> None:
    assert [backoff_delay(i, FAST) for i in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]


def test_transient_error_classification() -> None:
    assert is_transient_error(RuntimeError("HTTP 429 Too Many Requests"))
    assert is_transient_error(TimeoutError())
    assert is_transient_error(RuntimeError("read timed out"))
    assert not is_transient_error(ValueError("bad input"))


def test_retries_transient_failures() -> None:
    delays: list[float] = []
    base = FlakyEmbeddings(failures=2, error=RuntimeError("rate limit exceeded"))

    emb = RetryingEmbeddings(base, FAST, sleep=delays.append)

    assert emb.embed_documents(["a", "b"]) == [[1.0, 0.0], [1.0, 0.0]]
    assert base.calls == 3
    assert delays == [1.0, 2.0]


def test_non_transient_error_is_not_retried() -> None:
    delays: list[float] = []
    base = FlakyEmbeddings(failures=1, error=ValueError("bad input"))

    with pytest.raises(ValueError):
        RetryingEmbeddings(base, FAST, sleep=delays.append).embed_query("x")
    assert base.calls == 1
    assert delays == []


def test_gives_up_after_max_retries() -> None:
    delays: list[float] = []
    calls = 0

    def always_times_out() -> int:
        nonlocal calls
        calls += 1
        raise TimeoutError("timeout")

    with pytest.raises(TimeoutError):
        retry_call(always_times_out, FAST, sleep=delays.append)
    assert calls == FAST.max_retries + 1
    assert len(delays) == FAST.max_retries
