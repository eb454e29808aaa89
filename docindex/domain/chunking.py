from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from docindex.core.exceptions import EmbeddingError, TokenEstimationError
from docindex.domain.segmentation import (
    Chunk,
    SegmentationConfig,
    SizeNormalizer,
    build_segments,
    detect_breakpoints,
    normalize_text,
)

log = logging.getLogger(__name__)

EmbedBatch = Callable[[list[str]], Sequence[Sequence[float]]]


class SemanticChunker:
    """Split a document into topically coherent, token-bounded chunks.

    Sentences are embedded, topic shifts are located on the smoothed
    similarity curve and the resulting segments are sized into chunks.
    Collaborators are injected to keep the domain pure:

    - ``embed_documents``: one vector per input text (LangChain style)
    - ``count_tokens``: approximate token estimator
    - ``split_sentences``: sentence segmentation strategy

    Collaborator failures surface as EmbeddingError / TokenEstimationError;
    no partial chunk list is ever returned.
    """

    def __init__(
        self,
        embed_documents: EmbedBatch,
        count_tokens: Callable[[str], int],
        split_sentences: Callable[[str], list[str]],
        cfg: SegmentationConfig | None = None,
    ) -> None:
        self.cfg = cfg or SegmentationConfig()
        self._embed_documents = embed_documents
        self._count_tokens = count_tokens
        self._split_sentences = split_sentences

    def chunk(self, text: str) -> list[Chunk]:
        normalized = normalize_text(text)
        pieces = self.pieces(normalized)
        if len(pieces) == 1:
            return pieces
        chunks = self._normalizer().assemble(pieces)
        log.debug("Chunked into %d pieces, %d chunks", len(pieces), len(chunks))
        return chunks

    def chunk_sections(self, sections: Sequence[str]) -> list[tuple[Chunk, list[int]]]:
        """Chunk consecutive sections of one document as a single stream.

        Topic detection and bisection run per section; accumulation and tail
        merge run across section borders so short sections still meet
        ``min_tokens``. Each chunk comes with the indices of the sections it
        covers, in order. Empty sections produce nothing.
        """
        pieces: list[Chunk] = []
        owners: list[int] = []
        for idx, section in enumerate(sections):
            for piece in self.pieces(normalize_text(section)):
                if piece.text:
                    pieces.append(piece)
                    owners.append(idx)
        normalizer = self._normalizer()
        out: list[tuple[Chunk, list[int]]] = []
        for group in normalizer.group(pieces):
            covered = sorted({owners[i] for i in group})
            out.append((normalizer.combine([pieces[i] for i in group]), covered))
        return out

    def pieces(self, normalized: str) -> list[Chunk]:
        """Topical pieces of one normalized text, each within ``max_tokens`` when divisible."""
        sentences = self.sentences(normalized)
        if len(sentences) <= 1:
            tokens = self.count_tokens(normalized)
            return [
                Chunk(
                    text=normalized,
                    sentence_count=max(1, len(sentences)),
                    token_count=tokens,
                    oversized=tokens > self.cfg.max_tokens,
                )
            ]

        vectors = self.embed(sentences)
        breakpoints = detect_breakpoints(
            vectors,
            drop_threshold=self.cfg.similarity_drop_threshold,
            std_multiplier=self.cfg.std_multiplier,
            radius=self.cfg.smoothing_window_radius,
        )
        segments = build_segments(sentences, breakpoints)
        normalizer = self._normalizer()
        out: list[Chunk] = []
        for seg in segments:
            out.extend(normalizer.split_oversized(seg))
        log.debug(
            "Split %d sentences: %d breakpoints, %d segments",
            len(sentences),
            len(breakpoints),
            len(segments),
        )
        return out

    def _normalizer(self) -> SizeNormalizer:
        return SizeNormalizer(self.cfg, self.count_tokens, lambda s: len(self.sentences(s)))

    def sentences(self, text: str) -> list[str]:
        return [s.strip() for s in self._split_sentences(text) if s and s.strip()]

    def count_tokens(self, text: str) -> int:
        try:
            n = int(self._count_tokens(text))
        except TokenEstimationError:
            raise
        except Exception as e:
            raise TokenEstimationError(f"Token estimation failed: {e}") from e
        if n < 0:
            raise TokenEstimationError(f"Token estimator returned a negative count ({n})")
        return n

    def embed(self, texts: Sequence[str]) -> list[Sequence[float]]:
        return embed_in_batches(
            self._embed_documents, texts, self.cfg.embedding_batch_size, what="sentences"
        )


def embed_in_batches(
    embed_documents: EmbedBatch,
    texts: Sequence[str],
    batch_size: int,
    *,
    what: str = "texts",
) -> list[Sequence[float]]:
    """Embed ``texts`` in batches of ``batch_size``; one vector per text, in order."""
    size = max(1, int(batch_size))
    vectors: list[Sequence[float]] = []
    for start in range(0, len(texts), size):
        batch = list(texts[start : start + size])
        try:
            out = list(embed_documents(batch))
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Failed to embed {what}: {e}") from e
        if len(out) != len(batch):
            raise EmbeddingError(f"Embedder returned {len(out)} vectors for {len(batch)} inputs")
        vectors.extend(out)
    return vectors
