from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol


class EmbeddingsPort(Protocol):
    """Text to vector encoder; any LangChain ``Embeddings`` satisfies it.

    ``embed_documents`` must return exactly one vector per input, in order.
    """

    def embed_documents(self, texts: list[str]) -> list[Sequence[float]]:  # pragma: no cover
        ...

    def embed_query(self, text: str) -> Sequence[float]:  # pragma: no cover
        ...
