from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from docindex.domain.retrieval import FusedResult, ScoredItem
from docindex.domain.scoring import modality_confidence, modality_weights, normalize_scores

log = logging.getLogger(__name__)

PRIMARY_MODALITY = "text"
SECONDARY_MODALITY = "image"


@dataclass
class FusionConfig:
    top_k_for_confidence: int = 5


def _best_per_id(items: Sequence[ScoredItem]) -> list[ScoredItem]:
    """Drop repeated ids inside one result set, keeping the highest score."""
    best: dict[str, ScoredItem] = {}
    for it in items:
        cur = best.get(it.id)
        if cur is None or it.score > cur.score:
            best[it.id] = it
    return list(best.values())


def fuse_modalities(
    results: Mapping[str, Sequence[ScoredItem]],
    *,
    limit: int,
    top_k: int = 5,
) -> list[FusedResult]:
    """Merge per-modality ranked lists into one list ordered by fused score.

    Each modality's scores are min-max normalized and weighted by a softmax
    over the modalities' top-k confidences. Scores of an id found in several
    modalities are summed. On metadata collision the modality listed first in
    ``results`` wins. When only one modality has hits its raw scores are
    returned as they are.
    """
    if limit <= 0:
        return []
    lists = [(name, _best_per_id(items)) for name, items in results.items()]
    non_empty = [(name, items) for name, items in lists if items]
    if not non_empty:
        return []

    if len(non_empty) == 1:
        name, items = non_empty[0]
        ranked = sorted(items, key=lambda it: it.score, reverse=True)
        return [FusedResult(it.id, float(it.score), it.metadata, (name,)) for it in ranked[:limit]]

    normalized = [normalize_scores(it.score for it in items) for _name, items in lists]
    confidences = [
        modality_confidence(norm, top_k) if items else None
        for (_name, items), norm in zip(lists, normalized, strict=True)
    ]
    weights = modality_weights(confidences)
    log.debug(
        "Fusion weights: %s",
        {name: round(w, 4) for (name, _items), w in zip(lists, weights, strict=True)},
    )

    scores: dict[str, float] = {}
    metadata: dict[str, Mapping[str, Any]] = {}
    sources: dict[str, list[str]] = {}
    for (name, items), norm, weight in zip(lists, normalized, weights, strict=True):
        for it, s in zip(items, norm, strict=True):
            partial = weight * s
            if it.id in scores:
                scores[it.id] += partial
                sources[it.id].append(name)
            else:
                scores[it.id] = partial
                metadata[it.id] = it.metadata
                sources[it.id] = [name]

    fused = [FusedResult(i, scores[i], metadata[i], tuple(sources[i])) for i in scores]
    fused.sort(key=lambda r: r.score, reverse=True)
    return fused[:limit]


def fuse_results(
    primary: Sequence[ScoredItem],
    secondary: Sequence[ScoredItem],
    *,
    limit: int,
    top_k: int = 5,
) -> list[FusedResult]:
    """Two-modality fusion (text first, image second)."""
    return fuse_modalities(
        {PRIMARY_MODALITY: primary, SECONDARY_MODALITY: secondary}, limit=limit, top_k=top_k
    )
