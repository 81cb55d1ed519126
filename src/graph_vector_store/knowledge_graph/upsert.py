from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator

from .errors import DuplicateIdError
from .models import Edge, Entity, GraphEvent, IndexDocument, Node
from .store import GraphStore, SimilarityIndex

logger = logging.getLogger(__name__)


def _doc(text: str, key: str, kind: str) -> IndexDocument:
    return IndexDocument(page_content=text, metadata={"id": key, "type": kind})


def index_documents(event: GraphEvent) -> list[IndexDocument]:
    """Similarity-index records for everything an event touches.

    A relationship also mirrors its endpoints, which it may have created.
    """
    if isinstance(event, Entity):
        return [_doc(event.name, event.key, "entity")]
    return [
        _doc(event.src, event.src_key, "entity"),
        _doc(event.dst, event.dst_key, "entity"),
        _doc(event.rel_type, event.key, "relationship"),
    ]


class GraphUpserter:
    """Merges graph events into the store, one at a time, in arrival order.

    Each node and relationship type is mirrored into the similarity index the
    first time it is seen; later writes of the same id are ignored. A graph
    write failure ends the run. The index write happens after the graph
    commit, so an index failure leaves that event committed in the graph.
    """

    def __init__(self, store: GraphStore, index: SimilarityIndex):
        self.store = store
        self.index = index

    async def upsert_one(self, event: GraphEvent) -> Node | Edge:
        if isinstance(event, Entity):
            item: Node | Edge = await self.store.upsert_entity(event)
            logger.debug(f"[entity] {item.name} count={item.count}")
        else:
            item = await self.store.upsert_relationship(event)
            logger.debug(f"[relationship] {item.describe()} count={item.count}")

        for doc in index_documents(event):
            try:
                await self.index.add_documents([doc], ids=[doc.id])
            except DuplicateIdError:
                logger.debug(f"{doc.id} already indexed")
        return item

    async def upsert(self, events: AsyncIterable[GraphEvent]) -> AsyncIterator[Node | Edge]:
        async for event in events:
            yield await self.upsert_one(event)
