from __future__ import annotations

from typing import Protocol


class TokenCounterPort(Protocol):
    """Approximate token estimator; only moves chunk boundaries, never content."""

    def count_tokens(self, text: str) -> int:  # pragma: no cover - interface
        ...
