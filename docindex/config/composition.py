"""Composition root: assemble use cases from settings and injected stores.

Vector stores are external collaborators, so callers pass them in; everything
else (embedders, token counter, sentence strategy) is built from AppSettings.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache

from docindex.application.ports.vector_store_port import VectorStorePort
from docindex.application.use_cases import (
    IndexDocumentUseCase,
    ModalityIndex,
    MultimodalSearchUseCase,
)
from docindex.core.exceptions import ConfigurationError
from docindex.core.settings import AppSettings
from docindex.domain.fusion import PRIMARY_MODALITY, SECONDARY_MODALITY, FusionConfig
from docindex.infra.embeddings import build_embeddings_with_signature
from docindex.infra.splitting import build_chunker
from docindex.infra.tokens import build_token_counter


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


def build_index_use_case(
    store: VectorStorePort, app: AppSettings | None = None
) -> IndexDocumentUseCase:
    app = app or get_settings()
    emb, sig = build_embeddings_with_signature(app.embeddings, app.retry)
    chunker = build_chunker(emb, build_token_counter(app.tokenizer), app.segmentation)
    return IndexDocumentUseCase(
        chunker=chunker, embedder=emb, vector_store=store, embedding_sig=sig
    )


def build_search_use_case(
    stores: Mapping[str, VectorStorePort], app: AppSettings | None = None
) -> MultimodalSearchUseCase:
    """Text store first (its metadata wins on collisions), then image, then the rest."""
    app = app or get_settings()
    if not stores:
        raise ConfigurationError("at least one modality store is required")

    order = [m for m in (PRIMARY_MODALITY, SECONDARY_MODALITY) if m in stores]
    order += [m for m in stores if m not in order]

    modalities: dict[str, ModalityIndex] = {}
    for name in order:
        cfg = app.embeddings
        if name != PRIMARY_MODALITY and app.image_embeddings is not None:
            cfg = app.image_embeddings
        emb, sig = build_embeddings_with_signature(cfg, app.retry)
        modalities[name] = ModalityIndex(embedder=emb, store=stores[name], embedding_sig=sig)

    return MultimodalSearchUseCase(
        modalities=modalities,
        fusion=FusionConfig(top_k_for_confidence=app.fusion.top_k_for_confidence),
    )


__all__ = ["get_settings", "build_index_use_case", "build_search_use_case"]
