from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol

from docindex.domain.retrieval import ScoredItem, VectorRecord


class VectorStorePort(Protocol):
    """Narrow view of the external vector database."""

    # Ingest path
    def upsert(self, records: list[VectorRecord]) -> None:  # pragma: no cover - interface
        ...

    # Query path
    def search(
        self,
        vector: Sequence[float],
        k: int,
        *,
        metadata_filter: Mapping[str, object] | None = None,
    ) -> list[ScoredItem]:  # pragma: no cover - interface
        ...
