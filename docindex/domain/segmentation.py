"""Topic-boundary detection and token-bounded size normalization.

Pure functions over sentences, sentence embeddings and an injected token
counter. The orchestration lives in :mod:`docindex.domain.chunking`.
"""

from __future__ import annotations

import logging
import math
import re
import statistics
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace

log = logging.getLogger(__name__)

# a breakpoint needs this many sentences before it and after it
MIN_SENTENCES_PER_SEGMENT = 2
# fallback offset below the mean when the smoothed series is flat
FLAT_SERIES_OFFSET = 0.05

_PARAGRAPH_BREAK_RE = re.compile(r"\n[ \t]*\n\s*")
_SENTENCE_END_RE = re.compile(r"[.!?][\"')\]”’»]*\s+")
_TRAILING_WS_RE = re.compile(r"[ \t]+\n")


@dataclass
class SegmentationConfig:
    target_tokens: int = 1200
    max_tokens: int = 1800
    min_tokens: int = 400
    similarity_drop_threshold: float = 0.25
    std_multiplier: float = 1.0
    smoothing_window_radius: int = 2
    split_edge_margin: int = 200
    embedding_batch_size: int = 64


@dataclass(frozen=True)
class Segment:
    """Sentences between two breakpoints, joined with single spaces."""

    text: str
    sentence_count: int


@dataclass(frozen=True)
class Chunk:
    text: str
    sentence_count: int
    token_count: int = 0
    # token_count > max_tokens and no valid split point was found
    oversized: bool = False


def normalize_text(text: str) -> str:
    """CRLF to LF, drop trailing blanks before newlines, trim."""
    t = (text or "").replace("\r\n", "\n")
    return _TRAILING_WS_RE.sub("\n", t).strip()


def cosine(a: Sequence[float], b: Sequence[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b, strict=False))
    na = math.sqrt(sum(x * x for x in a)) or 1.0
    nb = math.sqrt(sum(y * y for y in b)) or 1.0
    return dot / (na * nb)


def consecutive_similarities(vectors: Sequence[Sequence[float]]) -> list[float]:
    return [cosine(vectors[i], vectors[i + 1]) for i in range(len(vectors) - 1)]


def smooth(values: Sequence[float], radius: int) -> list[float]:
    """Symmetric moving average, window clipped at the array edges."""
    n = len(values)
    out: list[float] = []
    for i in range(n):
        window = values[max(0, i - radius) : min(n, i + radius + 1)]
        out.append(sum(window) / len(window))
    return out


def similarity_threshold(smoothed: Sequence[float], std_multiplier: float) -> float:
    mean = statistics.fmean(smoothed)
    std = statistics.pstdev(smoothed)
    dynamic = mean - std_multiplier * std if std > 0 else mean - FLAT_SERIES_OFFSET
    return min(max(dynamic, -1.0), mean)


def detect_breakpoints(
    vectors: Sequence[Sequence[float]],
    *,
    drop_threshold: float = 0.25,
    std_multiplier: float = 1.0,
    radius: int = 2,
) -> list[int]:
    """Return sentence indices where a new topical segment starts.

    Indices are strictly increasing; each breakpoint leaves at least
    MIN_SENTENCES_PER_SEGMENT sentences before it (since the previous
    breakpoint) and after it.
    """
    n = len(vectors)
    if n < 2 * MIN_SENTENCES_PER_SEGMENT:
        return []
    smoothed = smooth(consecutive_similarities(vectors), radius)
    mean = statistics.fmean(smoothed)
    threshold = similarity_threshold(smoothed, std_multiplier)

    breakpoints: list[int] = []
    last = 0
    for i, value in enumerate(smoothed):
        previous = smoothed[i - 1] if i > 0 else mean
        drop = previous - value
        if not ((drop > drop_threshold and value < previous) or value < threshold):
            continue
        candidate = i + 1
        if candidate - last < MIN_SENTENCES_PER_SEGMENT:
            continue
        if n - candidate < MIN_SENTENCES_PER_SEGMENT:
            continue
        breakpoints.append(candidate)
        last = candidate
    return breakpoints


def build_segments(sentences: Sequence[str], breakpoints: Sequence[int]) -> list[Segment]:
    bounds = [0, *breakpoints, len(sentences)]
    segments: list[Segment] = []
    for start, end in zip(bounds, bounds[1:], strict=False):
        part = [s for s in sentences[start:end] if s]
        if part:
            segments.append(Segment(text=" ".join(part), sentence_count=len(part)))
    return segments


def find_split_point(text: str, margin: int = 200) -> int | None:
    """Character offset to bisect ``text`` at, or None when no valid point exists.

    Paragraph breaks win over sentence ends; among candidates of the same kind
    the one nearest to the midpoint is chosen. Offsets closer than ``margin``
    characters to either edge are never used.
    """
    length = len(text)
    lo, hi = max(margin, 1), min(length - margin, length - 1)
    if lo > hi:
        return None
    mid = length // 2
    for pattern in (_PARAGRAPH_BREAK_RE, _SENTENCE_END_RE):
        candidates = [m.end() for m in pattern.finditer(text) if lo <= m.end() <= hi]
        if candidates:
            return min(candidates, key=lambda pos: abs(pos - mid))
    return None


def combine_chunks(
    pieces: Sequence[Chunk], count_tokens: Callable[[str], int] | None = None
) -> Chunk:
    """Join pieces with single spaces.

    With ``count_tokens`` the joined text is re-estimated; without it the
    piece counts are summed.
    """
    if len(pieces) == 1:
        return pieces[0]
    text = " ".join(p.text for p in pieces)
    return Chunk(
        text=text,
        sentence_count=sum(p.sentence_count for p in pieces),
        token_count=(
            count_tokens(text) if count_tokens else sum(p.token_count for p in pieces)
        ),
        oversized=any(p.oversized for p in pieces),
    )


class SizeNormalizer:
    """Bring segments into the ``[min_tokens, max_tokens]`` band.

    Every size decision on a group of pieces uses the estimator on the joined
    text, so non-additive estimators cannot push a chunk past ``max_tokens``.
    Grouping works on piece indices; callers that attach per-piece metadata
    (see ``group``) can map each chunk back to its pieces.
    """

    def __init__(
        self,
        cfg: SegmentationConfig,
        count_tokens: Callable[[str], int],
        count_sentences: Callable[[str], int],
    ) -> None:
        self.cfg = cfg
        self._count_tokens = count_tokens
        self._count_sentences = count_sentences

    def normalize(self, segments: Sequence[Segment]) -> list[Chunk]:
        pieces: list[Chunk] = []
        for seg in segments:
            pieces.extend(self.split_oversized(seg))
        return self.assemble(pieces)

    def assemble(self, pieces: Sequence[Chunk]) -> list[Chunk]:
        return [self.combine([pieces[i] for i in g]) for g in self.group(pieces)]

    def group(self, pieces: Sequence[Chunk]) -> list[list[int]]:
        """Index groups after greedy accumulation and tail merge."""
        return self._merge_groups(pieces, self._accumulate_groups(pieces))

    def combine(self, pieces: Sequence[Chunk]) -> Chunk:
        return combine_chunks(pieces, self._count_tokens)

    def split_oversized(self, segment: Segment) -> list[Chunk]:
        # explicit work stack: left halves are popped first, so output keeps text order
        stack = [
            Chunk(
                text=segment.text,
                sentence_count=segment.sentence_count,
                token_count=self._count_tokens(segment.text),
            )
        ]
        out: list[Chunk] = []
        while stack:
            piece = stack.pop()
            if piece.token_count <= self.cfg.max_tokens:
                out.append(piece)
                continue
            at = find_split_point(piece.text, self.cfg.split_edge_margin)
            if at is None:
                log.warning(
                    "Keeping oversized piece (%d tokens > %d, %d chars): no split point",
                    piece.token_count,
                    self.cfg.max_tokens,
                    len(piece.text),
                )
                out.append(replace(piece, oversized=True))
                continue
            for half in (piece.text[at:].strip(), piece.text[:at].strip()):
                stack.append(
                    Chunk(
                        text=half,
                        sentence_count=max(1, self._count_sentences(half)),
                        token_count=self._count_tokens(half),
                    )
                )
        return out


    def accumulate(self, pieces: Sequence[Chunk]) -> list[Chunk]:
        groups = self._accumulate_groups(pieces)
        return [self.combine([pieces[i] for i in g]) for g in groups]

    def merge_small(self, chunks: Sequence[Chunk]) -> list[Chunk]:
        groups = self._merge_groups(chunks, [[i] for i in range(len(chunks))])
        return [self.combine([chunks[i] for i in g]) for g in groups]

    def _tokens(self, pieces: Sequence[Chunk], group: Sequence[int]) -> int:
        if len(group) == 1:
            return pieces[group[0]].token_count
        return self.combine([pieces[i] for i in group]).token_count

    def _accumulate_groups(self, pieces: Sequence[Chunk]) -> list[list[int]]:
        groups: list[list[int]] = []
        buffer: list[int] = []
        for i in range(len(pieces)):
            if buffer and self._tokens(pieces, [*buffer, i]) > self.cfg.max_tokens:
                groups.append(buffer)
                buffer = []
            buffer.append(i)
            if self._tokens(pieces, buffer) >= self.cfg.target_tokens:
                groups.append(buffer)
                buffer = []
        if buffer:
            groups.append(buffer)
        return groups

    def _merge_groups(
        self, pieces: Sequence[Chunk], groups: Sequence[list[int]]
    ) -> list[list[int]]:
        merged: list[list[int]] = []
        for g in groups:
            if (
                merged
                and self._tokens(pieces, g) < self.cfg.min_tokens
                and self._tokens(pieces, merged[-1] + g) <= self.cfg.max_tokens
            ):
                merged[-1] = merged[-1] + g
            else:
                merged.append(list(g))
        return merged
