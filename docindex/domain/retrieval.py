from __future__ import annotations

import hashlib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


def content_hash(text: str) -> str:
    norm = " ".join((text or "").split())
    return hashlib.sha256(norm.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class ScoredItem:
    """One hit from a single modality's ranked result set."""

    id: str
    score: float
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FusedResult:
    id: str
    score: float
    metadata: Mapping[str, Any] = field(default_factory=dict)
    # names of the modalities that contributed to the score
    modalities: tuple[str, ...] = ()


@dataclass(frozen=True)
class VectorRecord:
    id: str
    values: Sequence[float]
    metadata: Mapping[str, Any] = field(default_factory=dict)


def ensure_sig(metadata: Mapping[str, object], sig: str) -> bool:
    """Return True if metadata carries the expected embedding signature."""
    return str(metadata.get("embedding_sig", "")) == str(sig)
