from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from docindex.application.ports.embeddings_port import EmbeddingsPort
from docindex.application.ports.vector_store_port import VectorStorePort
from docindex.core.exceptions import DocIndexError, EmbeddingError, wrap_error
from docindex.domain.fusion import FusionConfig, fuse_modalities
from docindex.domain.retrieval import FusedResult, ScoredItem, ensure_sig

log = logging.getLogger(__name__)


@dataclass
class ModalityIndex:
    """Embedding space and store serving one modality."""

    embedder: EmbeddingsPort
    store: VectorStorePort
    embedding_sig: str | None = None


@dataclass
class MultimodalSearchUseCase:
    # insertion order is the metadata precedence on fused id collisions
    modalities: Mapping[str, ModalityIndex]
    fusion: FusionConfig = field(default_factory=FusionConfig)
    fetch_k: int | None = None

    def execute(
        self,
        query: str,
        *,
        limit: int,
        metadata_filter: Mapping[str, object] | None = None,
    ) -> list[FusedResult]:
        """Search every modality and fuse the ranked lists.

        Each store is asked for ``fetch_k`` hits (default: ``limit``). Hits that
        carry a different embedding signature than the modality's are dropped.
        Any collaborator failure fails the whole query.
        """
        k = self.fetch_k or limit
        results: dict[str, list[ScoredItem]] = {}
        for name, index in self.modalities.items():
            try:
                vector = index.embedder.embed_query(query)
            except EmbeddingError:
                raise
            except Exception as e:
                raise EmbeddingError(f"Failed to embed query for {name}: {e}") from e
            try:
                hits = index.store.search(vector, k, metadata_filter=metadata_filter)
            except DocIndexError:
                raise
            except Exception as e:
                raise wrap_error(e, f"{name} search failed") from e
            if index.embedding_sig:
                hits = [h for h in hits if ensure_sig(h.metadata, index.embedding_sig)]
            results[name] = list(hits)

        fused = fuse_modalities(results, limit=limit, top_k=self.fusion.top_k_for_confidence)
        log.debug(
            "Fused %s into %d results",
            {name: len(hits) for name, hits in results.items()},
            len(fused),
        )
        return fused
