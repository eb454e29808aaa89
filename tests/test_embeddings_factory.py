from __future__ import annotations

import pytest

from docindex.core.exceptions import ConfigurationError
from docindex.core.settings import EmbeddingConfig, RetrySettings
from docindex.domain.segmentation import cosine
from docindex.infra.embeddings.device import resolve_device
from docindex.infra.embeddings.factory import (
    build_embeddings,
    build_embeddings_with_signature,
)
from docindex.infra.retry import RetryingEmbeddings


def test_dummy_provider_embeds_deterministically() -> None:
    emb = build_embeddings(EmbeddingConfig(provider="dummy", device="cpu"))

    v1 = emb.embed_query("Hello World")
    v2 = emb.embed_query("Hello World")

    assert isinstance(v1, list) and len(v1) > 0
    assert v1 == v2


def test_dummy_vectors_reflect_shared_vocabulary() -> None:
    emb = build_embeddings(EmbeddingConfig(provider="dummy"))
    a, b, c = emb.embed_documents(
        ["cats purr and nap", "cats nap and purr all day", "stock markets fell sharply"]
    )
    assert cosine(a, b) > cosine(a, c)


def test_unknown_provider_is_rejected() -> None:
    cfg = EmbeddingConfig.model_construct(provider="nope")
    with pytest.raises(ConfigurationError):
        build_embeddings(cfg)


def test_signature_and_retry_wrapper() -> None:
    cfg = EmbeddingConfig(provider="dummy", model_name="tiny")

    emb, sig = build_embeddings_with_signature(cfg, RetrySettings(max_retries=2))
    assert isinstance(emb, RetryingEmbeddings)
    assert sig == cfg.signature

    bare, _ = build_embeddings_with_signature(cfg)
    assert not isinstance(bare, RetryingEmbeddings)


def test_resolve_device_respects_explicit() -> None:
    assert resolve_device("cpu") == "cpu"
    assert resolve_device("cuda:0") == "cuda:0"
    assert resolve_device("GPU") == "cuda"


def test_auto_device_returns_known_value() -> None:
    assert resolve_device("auto") in {"cpu", "cuda", "mps"}
