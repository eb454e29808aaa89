from __future__ import annotations

import importlib
import importlib.util
import logging
import re
from typing import Any, Literal, Protocol

log = logging.getLogger(__name__)

# sentence end, whitespace, then a capital letter, digit or opening quote
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+(?=[A-ZÄÖÜ0-9\"'“‘«])")


class SentenceSplitter(Protocol):
    def split(self, text: str) -> list[str]: ...


class RegexSentenceSplitter:
    """Zero-dep splitter on terminal punctuation; used when syntok is unavailable."""

    name = "regex"

    def split(self, text: str) -> list[str]:
        if not text:
            return []
        return [s.strip() for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]


class SyntokSentenceSplitter:
    """Locale-aware segmentation with syntok (abbreviations, ordinals, quotes)."""

    name = "syntok"

    def __init__(self) -> None:
        self._segmenter: Any = importlib.import_module("syntok.segmenter")

    def split(self, text: str) -> list[str]:
        sents: list[str] = []
        if not text:
            return sents
        for paragraph in self._segmenter.process(text):
            for sentence in paragraph:
                # reconstruct surface form with original spacing
                s = "".join(t.spacing + t.value for t in sentence).strip()
                if s:
                    sents.append(s)
        return sents


def syntok_available() -> bool:
    return importlib.util.find_spec("syntok") is not None


def build_sentence_splitter(
    mode: Literal["auto", "syntok", "regex"] = "auto",
) -> SentenceSplitter:
    """Pick the sentence strategy once; the result is injected into the chunker."""
    if mode == "regex":
        return RegexSentenceSplitter()
    if mode == "syntok":
        return SyntokSentenceSplitter()
    if mode != "auto":
        raise ValueError(f"Unsupported sentence splitter: {mode}")
    if syntok_available():
        return SyntokSentenceSplitter()
    log.info("syntok not installed; using regex sentence splitter")
    return RegexSentenceSplitter()
