from __future__ import annotations

import math
from collections.abc import Iterable, Sequence


def normalize_scores(scores: Iterable[float]) -> list[float]:
    """Min-max normalize one result set into [0, 1].

    A flat distribution maps to all ones, unless every score is zero.
    """
    vals = [float(v) for v in scores]
    if not vals:
        return []
    lo = min(vals)
    hi = max(vals)
    denom = hi - lo
    if denom == 0:
        flat = 1.0 if hi != 0 else 0.0
        return [flat for _ in vals]
    return [(v - lo) / denom for v in vals]


def modality_confidence(normalized: Iterable[float], top_k: int = 5) -> float:
    """Mean of the top-k normalized scores; 0 for an empty result set."""
    top = sorted(normalized, reverse=True)[: max(0, int(top_k))]
    if not top:
        return 0.0
    return sum(top) / len(top)


def softmax(values: Sequence[float]) -> list[float]:
    if not values:
        return []
    m = max(values)
    exps = [math.exp(v - m) for v in values]
    total = sum(exps)
    if total == 0:
        return [1.0 / len(values) for _ in values]
    return [e / total for e in exps]


def modality_weights(confidences: Sequence[float | None]) -> list[float]:
    """Fusion weight per modality; ``None`` marks an empty result set.

    Empty modalities get weight 0 and the rest share a softmax over their
    confidences. When every modality is empty the weights are uniform.
    """
    if not confidences:
        return []
    present = [i for i, c in enumerate(confidences) if c is not None]
    if not present:
        return [1.0 / len(confidences) for _ in confidences]
    shares = softmax([float(confidences[i]) for i in present])  # type: ignore[arg-type]
    weights = [0.0] * len(confidences)
    for i, w in zip(present, shares, strict=True):
        weights[i] = w
    return weights


def pair_weights(
    primary_confidence: float | None, secondary_confidence: float | None
) -> tuple[float, float]:
    a, b = modality_weights([primary_confidence, secondary_confidence])
    return a, b
