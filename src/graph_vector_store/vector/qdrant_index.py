from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from qdrant_client import AsyncQdrantClient
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse
from qdrant_client.http.models import Distance, PointStruct, VectorParams

from graph_vector_store.knowledge_graph.errors import DuplicateIdError, IndexWriteError
from graph_vector_store.knowledge_graph.models import IndexDocument

from .embedder import Embedder

logger = logging.getLogger(__name__)

# Qdrant point ids must be ints or UUIDs; document ids are mapped onto UUIDs.
_ID_NAMESPACE = uuid.UUID("5b0c2a36-1d8e-4c4e-9a51-2f8a8d6f3c11")

_WRITE_ERRORS = (UnexpectedResponse, ResponseHandlingException, httpx.HTTPError)


@dataclass(frozen=True)
class QdrantConfig:
    collection: str
    url: str = "http://localhost:6333"
    api_key: Optional[str] = None
    prefer_grpc: bool = False
    timeout_s: float = 10.0


def build_qdrant_client(cfg: QdrantConfig) -> AsyncQdrantClient:
    if cfg.timeout_s <= 0:
        raise ValueError("timeout_s must be > 0")

    return AsyncQdrantClient(
        url=cfg.url,
        api_key=cfg.api_key,
        prefer_grpc=cfg.prefer_grpc,
        timeout=cfg.timeout_s,
        check_compatibility=False,
    )


def point_id(doc_id: str) -> str:
    return str(uuid.uuid5(_ID_NAMESPACE, doc_id))


class QdrantIndex:
    """Similarity index over one Qdrant collection.

    Payloads are stored as ``{"page_content": ..., "metadata": {...}}``.
    Writes with an id that is already present raise `DuplicateIdError`.
    """

    def __init__(self, cfg: QdrantConfig, embedder: Embedder, client: Any | None = None):
        self.cfg = cfg
        self.embedder = embedder
        self._client = client or build_qdrant_client(cfg)
        self._ready = False

    async def close(self) -> None:
        await self._client.close()

    async def ensure_collection(self) -> None:
        if self._ready:
            return
        name = self.cfg.collection
        if not await self._client.collection_exists(name):
            logger.info(f"Creating Qdrant collection {name} (dim={self.embedder.dim})")
            await self._client.create_collection(
                collection_name=name,
                vectors_config=VectorParams(size=self.embedder.dim, distance=Distance.COSINE),
            )
        self._ready = True

    async def _embed(self, texts: list[str]) -> list[list[float]]:
        return await asyncio.to_thread(self.embedder.embed, texts)

    async def add_documents(self, docs: list[IndexDocument], ids: list[str] | None = None) -> None:
        if not docs:
            return
        if ids is not None and len(ids) != len(docs):
            raise ValueError("ids and docs must have the same length")

        try:
            await self.ensure_collection()
            if ids is None:
                point_ids = [str(uuid.uuid4()) for _ in docs]
            else:
                point_ids = [point_id(i) for i in ids]
                existing = await self._client.retrieve(
                    collection_name=self.cfg.collection,
                    ids=point_ids,
                    with_payload=False,
                    with_vectors=False,
                )
                if existing:
                    taken = {str(p.id) for p in existing}
                    raise DuplicateIdError([i for i, pid in zip(ids, point_ids) if pid in taken])

            vectors = await self._embed([d.page_content for d in docs])
            points = [
                PointStruct(
                    id=pid,
                    vector=vec,
                    payload={"page_content": d.page_content, "metadata": dict(d.metadata)},
                )
                for pid, vec, d in zip(point_ids, vectors, docs)
            ]
            await self._client.upsert(collection_name=self.cfg.collection, points=points)
        except _WRITE_ERRORS as e:
            logger.error(f"Qdrant write to {self.cfg.collection} failed: {e}")
            raise IndexWriteError(f"failed to write to {self.cfg.collection}") from e

    async def similarity_search(self, text: str, k: int) -> list[IndexDocument]:
        await self.ensure_collection()
        [vector] = await self._embed([text])
        res = await self._client.query_points(
            collection_name=self.cfg.collection,
            query=vector,
            limit=k,
            with_payload=True,
        )
        out: list[IndexDocument] = []
        for p in res.points:
            payload = p.payload or {}
            out.append(
                IndexDocument(
                    page_content=str(payload.get("page_content", "")),
                    metadata=dict(payload.get("metadata") or {}),
                )
            )
        return out
