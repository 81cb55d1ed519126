"""Shared fakes for the graph store, similarity index and generation service."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Iterable
from typing import Any

import pytest

from graph_vector_store.knowledge_graph.errors import DuplicateIdError, GraphStoreError
from graph_vector_store.knowledge_graph.models import Edge, Entity, IndexDocument, Node, Relationship, normalize_name


async def aiter_list(items: Iterable[Any]) -> AsyncIterator[Any]:
    for item in items:
        yield item


class FakeGraphStore:
    """In-memory GraphStore with the same merge semantics as the Cypher queries."""

    def __init__(self) -> None:
        self.nodes: dict[str, Node] = {}
        self.edges: dict[tuple[str, str, str], Edge] = {}
        self.fail_on: set[str] = set()
        self.reads: list[str] = []

    def _check(self, key: str) -> None:
        if key in self.fail_on:
            raise GraphStoreError(f"write failed for {key}")

    def _endpoint(self, name: str, harmonic: float) -> Node:
        if name not in self.nodes:
            self.nodes[name] = Node(name=name, count=1, harmonic=harmonic)
        return self.nodes[name]

    async def upsert_entity(self, entity: Entity) -> Node:
        self._check(entity.key)
        prev = self.nodes.get(entity.key, Node(name=entity.key))
        node = Node(
            name=entity.key,
            labels=prev.labels | set(entity.labels),
            count=prev.count + 1,
            harmonic=prev.harmonic + 1 / entity.emphasis,
        )
        self.nodes[entity.key] = node
        return node

    async def upsert_relationship(self, rel: Relationship) -> Edge:
        self._check(rel.key)
        harmonic = 1 / rel.emphasis
        self._endpoint(rel.src_key, harmonic)
        self._endpoint(rel.dst_key, harmonic)
        key = (rel.src_key, rel.dst_key, rel.key)
        prev = self.edges.get(key)
        edge = Edge(
            src=self.nodes[rel.src_key],
            dst=self.nodes[rel.dst_key],
            rel_type=rel.key,
            count=(prev.count if prev else 0) + 1,
            harmonic=(prev.harmonic if prev else 0.0) + harmonic,
        )
        self.edges[key] = edge
        return edge

    async def relationships_of(self, name: str) -> list[Edge]:
        self.reads.append(name)
        out = []
        for (src, dst, rel_type), edge in self.edges.items():
            if name in (src, dst):
                out.append(Edge(self.nodes[src], self.nodes[dst], rel_type, edge.count, edge.harmonic))
        return out

    async def close(self) -> None:
        pass


class FakeIndex:
    """In-memory SimilarityIndex; search ranks documents containing the query's identifier first."""

    def __init__(self) -> None:
        self.docs: dict[str, IndexDocument] = {}
        self.fail_with: Exception | None = None
        self.searches: list[tuple[str, int]] = []

    async def add_documents(self, docs: list[IndexDocument], ids: list[str] | None = None) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        ids = ids or [str(uuid.uuid4()) for _ in docs]
        dupes = [i for i in ids if i in self.docs]
        if dupes:
            raise DuplicateIdError(dupes)
        for i, d in zip(ids, docs):
            self.docs[i] = d

    async def similarity_search(self, text: str, k: int) -> list[IndexDocument]:
        self.searches.append((text, k))
        key = normalize_name(text)
        ranked = sorted(self.docs.values(), key=lambda d: 0 if key and key in (d.id or "") else 1)
        return ranked[:k]


class FakeGenerator:
    """Replays canned responses; streamed responses are cut into fixed-size fragments."""

    def __init__(self, responses: list[str], fragment_size: int = 7) -> None:
        self.responses = list(responses)
        self.fragment_size = fragment_size
        self.prompts: list[str] = []

    def _next(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.responses.pop(0) if self.responses else ""

    async def complete(self, prompt: str) -> str:
        return self._next(prompt)

    async def stream(self, prompt: str) -> AsyncIterator[str]:
        text = self._next(prompt)
        for i in range(0, len(text), self.fragment_size):
            yield text[i : i + self.fragment_size]


@pytest.fixture
def store() -> FakeGraphStore:
    return FakeGraphStore()


@pytest.fixture
def index() -> FakeIndex:
    return FakeIndex()
