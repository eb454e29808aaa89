"""Domain layer: pure types and logic (no I/O, no external libs).

Keep this layer free of side-effects. Collaborators such as embedders and
token estimators are injected as callables.
"""

from .chunking import SemanticChunker
from .fusion import FusionConfig, fuse_modalities, fuse_results
from .modality import ModalityDetection, detect_modality
from .retrieval import FusedResult, ScoredItem, VectorRecord, content_hash, ensure_sig
from .scoring import modality_confidence, modality_weights, normalize_scores
from .segmentation import Chunk, SegmentationConfig, detect_breakpoints, normalize_text
from .structural import TextChunk, chunk_code, chunk_markdown, chunk_text, detect_language

__all__ = [
    "Chunk",
    "SegmentationConfig",
    "SemanticChunker",
    "detect_breakpoints",
    "normalize_text",
    "TextChunk",
    "chunk_code",
    "chunk_markdown",
    "chunk_text",
    "detect_language",
    "ScoredItem",
    "FusedResult",
    "VectorRecord",
    "content_hash",
    "ensure_sig",
    "normalize_scores",
    "modality_confidence",
    "modality_weights",
    "FusionConfig",
    "fuse_modalities",
    "fuse_results",
    "ModalityDetection",
    "detect_modality",
]
