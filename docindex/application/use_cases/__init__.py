from .index_document import IndexDocumentUseCase
from .multimodal_search import ModalityIndex, MultimodalSearchUseCase

__all__ = [
    "IndexDocumentUseCase",
    "ModalityIndex",
    "MultimodalSearchUseCase",
]
