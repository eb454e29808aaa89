from __future__ import annotations

import re
import zlib
from typing import Any

import numpy as np
from langchain_core.embeddings import Embeddings

from docindex.core.exceptions import ConfigurationError
from docindex.core.settings import EmbeddingConfig, RetrySettings
from docindex.infra.embeddings.device import resolve_device
from docindex.infra.retry import RetryingEmbeddings

_WORD_RE = re.compile(r"\w+", re.UNICODE)


class DummyEmbeddings(Embeddings):
    """Small, local, test-only embedding to keep unit tests offline.

    Hashed bag of words: texts sharing vocabulary are close in cosine space,
    which is enough for the boundary detector to find topic shifts.
    """

    def __init__(self, dim: int = 64) -> None:
        self.dim = dim

    def _embed(self, text: str) -> list[float]:
        vec = np.zeros(self.dim, dtype=np.float32)
        for word in _WORD_RE.findall(text.lower()):
            vec[zlib.crc32(word.encode("utf-8")) % self.dim] += 1.0
        norm = float(np.linalg.norm(vec))
        if norm > 0:
            vec /= norm
        return vec.tolist()

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._embed(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._embed(text)


def build_embeddings(cfg: EmbeddingConfig) -> Embeddings:
    provider = cfg.provider.lower()

    if provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(
            model_name=cfg.model_name,
            model_kwargs={"device": resolve_device(cfg.device)},
            encode_kwargs={
                "normalize_embeddings": bool(cfg.normalize_embeddings),
                "batch_size": cfg.batch_size,
            },
        )

    if provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        kwargs: dict[str, Any] = {
            "model": cfg.model_name,  # e.g. text-embedding-3-small / large
            "chunk_size": cfg.batch_size,
        }
        if cfg.openai_api_key:
            kwargs["api_key"] = cfg.openai_api_key
        if cfg.openai_base_url:
            kwargs["base_url"] = cfg.openai_base_url
        # OpenAI vectors come L2-normalized already
        return OpenAIEmbeddings(**kwargs)

    if provider == "dummy":
        return DummyEmbeddings()

    raise ConfigurationError(f"Unsupported embeddings provider: {cfg.provider}")


def build_embeddings_with_signature(
    cfg: EmbeddingConfig, retry: RetrySettings | None = None
) -> tuple[Embeddings, str]:
    """Return an encoder (retrying when ``retry`` is given) with its stable signature.

    The signature is stored on every record (metadata["embedding_sig"]) so
    searches can drop hits produced by another model.
    """
    emb = build_embeddings(cfg)
    if retry is not None and retry.max_retries > 0:
        emb = RetryingEmbeddings(emb, retry)
    return emb, cfg.signature
