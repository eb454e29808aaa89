from .factory import DummyEmbeddings, build_embeddings, build_embeddings_with_signature

__all__ = ["DummyEmbeddings", "build_embeddings", "build_embeddings_with_signature"]
