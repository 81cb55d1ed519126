from .embedder import Embedder, StubEmbedder, build_embedder
from .qdrant_index import QdrantConfig, QdrantIndex

__all__ = ["Embedder", "StubEmbedder", "build_embedder", "QdrantConfig", "QdrantIndex"]
