from .embeddings_port import EmbeddingsPort
from .token_counter_port import TokenCounterPort
from .vector_store_port import VectorStorePort

__all__ = [
    "VectorStorePort",
    "EmbeddingsPort",
    "TokenCounterPort",
]
