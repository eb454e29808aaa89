from __future__ import annotations

import tiktoken

from docindex.application.ports.token_counter_port import TokenCounterPort
from docindex.core.settings import TokenizerSettings


class TiktokenCounter:
    def __init__(self, encoding: str = "cl100k_base") -> None:
        self.encoding = encoding
        self._encoder = tiktoken.get_encoding(encoding)

    def count_tokens(self, text: str) -> int:
        if not text:
            return 0
        return len(self._encoder.encode(text, disallowed_special=()))


class WhitespaceTokenCounter:
    """Word count; cheap offline estimate for tests and tooling."""

    def count_tokens(self, text: str) -> int:
        return len((text or "").split())


def build_token_counter(settings: TokenizerSettings | None = None) -> TokenCounterPort:
    s = settings or TokenizerSettings()
    if s.backend == "whitespace":
        return WhitespaceTokenCounter()
    return TiktokenCounter(s.encoding)
