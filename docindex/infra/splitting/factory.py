from __future__ import annotations

from docindex.application.ports.embeddings_port import EmbeddingsPort
from docindex.application.ports.token_counter_port import TokenCounterPort
from docindex.core.settings import SegmentationSettings
from docindex.domain.chunking import SemanticChunker
from docindex.domain.segmentation import SegmentationConfig

from .sentence_splitter import SentenceSplitter, build_sentence_splitter


def segmentation_config_from(s: SegmentationSettings) -> SegmentationConfig:
    return SegmentationConfig(
        target_tokens=int(s.target_tokens),
        max_tokens=int(s.max_tokens),
        min_tokens=int(s.min_tokens),
        similarity_drop_threshold=float(s.similarity_drop_threshold),
        std_multiplier=float(s.std_multiplier),
        smoothing_window_radius=int(s.smoothing_window_radius),
        split_edge_margin=int(s.split_edge_margin),
        embedding_batch_size=int(s.embedding_batch_size),
    )


def build_chunker(
    embedder: EmbeddingsPort,
    token_counter: TokenCounterPort,
    settings: SegmentationSettings | None = None,
    *,
    splitter: SentenceSplitter | None = None,
) -> SemanticChunker:
    """Wire the semantic chunker with its collaborators.

    The sentence strategy is probed here once unless one is passed in.
    """
    s = settings or SegmentationSettings()
    sentence_splitter = splitter or build_sentence_splitter(s.sentence_splitter)
    return SemanticChunker(
        embed_documents=embedder.embed_documents,
        count_tokens=token_counter.count_tokens,
        split_sentences=sentence_splitter.split,
        cfg=segmentation_config_from(s),
    )
