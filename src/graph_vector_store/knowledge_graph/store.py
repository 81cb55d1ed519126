from __future__ import annotations

from typing import Protocol

from .models import Edge, Entity, IndexDocument, Node, Relationship


class GraphStore(Protocol):
    """Abstraction for the backing graph database.

    Every call runs in its own short-lived session; nothing is held open
    between calls.
    """

    async def upsert_entity(self, entity: Entity) -> Node: ...

    async def upsert_relationship(self, rel: Relationship) -> Edge: ...

    async def relationships_of(self, name: str) -> list[Edge]: ...

    async def close(self) -> None: ...


class SimilarityIndex(Protocol):
    """Nearest-by-text lookup over short documents.

    `add_documents` raises `DuplicateIdError` when any given id is already
    present; nothing from that call is written in that case.
    """

    async def add_documents(self, docs: list[IndexDocument], ids: list[str] | None = None) -> None: ...

    async def similarity_search(self, text: str, k: int) -> list[IndexDocument]: ...
