from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class Embedder:
    dim: int

    def embed(self, texts: list[str]) -> list[list[float]]:
        raise NotImplementedError


def _trigrams(text: str) -> list[str]:
    t = f"  {' '.join(text.lower().split())} "
    return [t[i : i + 3] for i in range(len(t) - 2)]


@dataclass
class StubEmbedder(Embedder):
    """Hashed character-trigram vectors.

    No model download; names sharing most of their trigrams land close
    together, which is enough for entity lookup in tests and small setups.
    """

    dim: int = 384

    def embed(self, texts: list[str]) -> list[list[float]]:
        out: list[list[float]] = []
        for t in texts:
            v = [0.0] * self.dim
            if t.strip():
                for gram in _trigrams(t):
                    h = hashlib.blake2b(gram.encode("utf-8"), digest_size=8).digest()
                    v[int.from_bytes(h, "little") % self.dim] += 1.0
            norm = sum(x * x for x in v) ** 0.5
            if norm:
                v = [x / norm for x in v]
            out.append(v)
        return out


class SentenceTransformersEmbedder(Embedder):
    def __init__(self, model_name: str):
        from sentence_transformers import SentenceTransformer

        self._m = SentenceTransformer(model_name)
        self.dim = int(self._m.get_sentence_embedding_dimension() or 384)

    def embed(self, texts: list[str]) -> list[list[float]]:
        vecs = self._m.encode(texts, normalize_embeddings=True)
        return [v.tolist() for v in vecs]


def build_embedder(*, st_model: str | None, dim: int) -> Embedder:
    if st_model:
        try:
            return SentenceTransformersEmbedder(st_model)
        except ImportError:
            logger.warning(f"sentence-transformers is not installed; using stub embeddings instead of {st_model}")
    return StubEmbedder(dim=dim)
