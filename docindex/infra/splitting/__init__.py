from .factory import build_chunker, segmentation_config_from
from .sentence_splitter import (
    RegexSentenceSplitter,
    SentenceSplitter,
    SyntokSentenceSplitter,
    build_sentence_splitter,
)

__all__ = [
    "SentenceSplitter",
    "RegexSentenceSplitter",
    "SyntokSentenceSplitter",
    "build_sentence_splitter",
    "build_chunker",
    "segmentation_config_from",
]
