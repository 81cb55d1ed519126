from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from dataclasses import dataclass
from itertools import islice
from typing import TypeVar

from .models import Entity, GraphEvent, RankedRelationship
from .ranking import rank_relationships
from .store import GraphStore, SimilarityIndex

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RetrievalConfig:
    # nearest index entries looked up per seed entity
    similarity_k: int = 5
    # relationships kept per seed entity
    per_seed_limit: int = 10
    # relationships kept across all seeds after interleaving
    context_limit: int = 20


class GraphRetriever:
    """Expands seed entities into ranked relationships from the graph."""

    def __init__(self, store: GraphStore, index: SimilarityIndex, cfg: RetrievalConfig | None = None):
        self.store = store
        self.index = index
        self.cfg = cfg or RetrievalConfig()

    async def expand_entity(self, entity: Entity, *, limit: int | None = None) -> list[RankedRelationship]:
        limit = self.cfg.per_seed_limit if limit is None else limit

        hits = await self.index.similarity_search(entity.name, self.cfg.similarity_k)
        # The index is searched unfiltered; relationship-type hits are dropped here.
        ids = [h.id for h in hits if h.kind == "entity" and h.id]

        per_hit = await asyncio.gather(*(self.store.relationships_of(i) for i in ids))
        candidates = [edge for edges in per_hit for edge in edges]

        ranked = rank_relationships(candidates)[:limit]
        logger.debug(f"{entity.name}: {len(ids)} entity hits, {len(candidates)} candidates, kept {len(ranked)}")
        return ranked

    async def expand(
        self, events: AsyncIterable[GraphEvent], *, limit: int | None = None
    ) -> AsyncIterator[list[RankedRelationship]]:
        """Yield one ranked batch per entity event, in input order."""
        async for event in events:
            if not isinstance(event, Entity):
                continue
            yield await self.expand_entity(event, limit=limit)

    async def expand_all(
        self, events: AsyncIterable[GraphEvent], *, limit: int | None = None
    ) -> list[list[RankedRelationship]]:
        """Like `expand`, but seeds are looked up concurrently.

        Batches are returned in seed order regardless of completion order.
        """
        seeds = [e async for e in events if isinstance(e, Entity)]
        return list(await asyncio.gather(*(self.expand_entity(s, limit=limit) for s in seeds)))


def round_robin(sources: Iterable[Iterable[T]]) -> Iterator[T]:
    """Take one item from each source per round, in a fixed order.

    Exhausted sources are dropped; ends when all are exhausted.
    """
    iterators = [iter(s) for s in sources]
    while iterators:
        alive = []
        for it in iterators:
            try:
                item = next(it)
            except StopIteration:
                continue
            alive.append(it)
            yield item
        iterators = alive


def interleave(batches: Iterable[Iterable[T]], limit: int | None = None) -> list[T]:
    """Round-robin flatten `batches` and keep at most `limit` items."""
    return list(islice(round_robin(batches), limit))
