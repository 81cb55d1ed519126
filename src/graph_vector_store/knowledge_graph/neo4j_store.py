from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from neo4j import READ_ACCESS, WRITE_ACCESS, AsyncGraphDatabase
from neo4j.exceptions import DriverError, Neo4jError

from .errors import GraphStoreError
from .models import Edge, Entity, Node, Relationship, is_identifier

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Neo4jConfig:
    uri: str
    user: str
    password: str
    database: str = "neo4j"


def _label(value: str) -> str:
    # Labels and relationship types cannot be parameterized; only normalized
    # identifiers are ever interpolated.
    if not is_identifier(value):
        raise ValueError(f"refusing to use {value!r} as a graph label")
    return f"`{value}`"


_BUMP = "{v}.count = coalesce({v}.count, 0) + 1, {v}.harmonic = coalesce({v}.harmonic, 0.0) + $harmonic"


def entity_query(entity: Entity) -> str:
    lines = ["MERGE (n {name: $name})"]
    if entity.labels:
        lines.append("SET n" + "".join(f":{_label(lbl)}" for lbl in entity.labels))
    lines.append("SET " + _BUMP.format(v="n"))
    lines.append("RETURN n")
    return "\n".join(lines)


def relationship_query(rel: Relationship) -> str:
    return "\n".join(
        [
            "MERGE (a {name: $src})",
            "ON CREATE SET a.count = 1, a.harmonic = $harmonic",
            "MERGE (b {name: $dst})",
            "ON CREATE SET b.count = 1, b.harmonic = $harmonic",
            f"MERGE (a)-[r:{_label(rel.key)}]->(b)",
            "SET " + _BUMP.format(v="r"),
            "RETURN a, r, b",
        ]
    )


# An undirected match yields a self-loop twice; DISTINCT collapses the copies.
RELATIONSHIPS_OF = "MATCH (a {name: $name})-[r]-(b) RETURN DISTINCT a, r, b"


def node_from_record(n: Any) -> Node:
    props = dict(n)
    return Node(
        name=str(props.get("name", "")),
        labels=frozenset(n.labels),
        count=int(props.get("count") or 0),
        harmonic=float(props.get("harmonic") or 0.0),
    )


def edge_from_record(a: Any, r: Any, b: Any) -> Edge:
    """Build an Edge from an undirected match.

    `a` is the matched node; when it is really the end of `r`, the ends are
    swapped so `src`/`dst` follow the stored direction.
    """
    if r.start_node is not None and r.start_node.element_id != a.element_id:
        a, b = b, a
    props = dict(r)
    return Edge(
        src=node_from_record(a),
        dst=node_from_record(b),
        rel_type=r.type,
        count=int(props.get("count") or 0),
        harmonic=float(props.get("harmonic") or 0.0),
    )


class Neo4jGraphStore:
    """Neo4j-backed graph store.

    Every operation runs in its own session and transaction, closed before
    the call returns. All values are bound parameters.
    """

    def __init__(self, cfg: Neo4jConfig, driver: Any | None = None):
        self.cfg = cfg
        # Driver is safe to share; sessions are not.
        self._driver = driver or AsyncGraphDatabase.driver(cfg.uri, auth=(cfg.user, cfg.password))

    async def close(self) -> None:
        await self._driver.close()

    async def upsert_entity(self, entity: Entity) -> Node:
        q = entity_query(entity)
        params = {"name": entity.key, "harmonic": 1.0 / entity.emphasis}
        return await self._write(self._upsert_entity_tx, q, params)

    async def upsert_relationship(self, rel: Relationship) -> Edge:
        q = relationship_query(rel)
        params = {
            "src": rel.src_key,
            "dst": rel.dst_key,
            "harmonic": 1.0 / rel.emphasis,
        }
        return await self._write(self._upsert_relationship_tx, q, params)

    async def relationships_of(self, name: str) -> list[Edge]:
        try:
            async with self._driver.session(database=self.cfg.database, default_access_mode=READ_ACCESS) as s:
                return await s.execute_read(self._relationships_tx, name)
        except (Neo4jError, DriverError) as e:
            logger.error(f"Failed to read relationships of {name}: {e}")
            raise GraphStoreError(f"failed to read relationships of {name}") from e

    async def _write(self, fn, q: str, params: dict[str, Any]):
        try:
            async with self._driver.session(database=self.cfg.database, default_access_mode=WRITE_ACCESS) as s:
                return await s.execute_write(fn, q, params)
        except (Neo4jError, DriverError) as e:
            logger.error(f"Graph write failed for {params}: {e}")
            raise GraphStoreError(f"graph write failed for {params}") from e

    @staticmethod
    async def _upsert_entity_tx(tx, q: str, params: dict[str, Any]) -> Node:
        res = await tx.run(q, **params)
        record = await res.single()
        if record is None:
            raise GraphStoreError(f"MERGE returned no node for {params['name']}")
        return node_from_record(record["n"])

    @staticmethod
    async def _upsert_relationship_tx(tx, q: str, params: dict[str, Any]) -> Edge:
        res = await tx.run(q, **params)
        record = await res.single()
        if record is None:
            raise GraphStoreError(f"MERGE returned no relationship for {params['src']} -> {params['dst']}")
        return edge_from_record(record["a"], record["r"], record["b"])

    @staticmethod
    async def _relationships_tx(tx, name: str) -> list[Edge]:
        res = await tx.run(RELATIONSHIPS_OF, name=name)
        return [edge_from_record(r["a"], r["r"], r["b"]) async for r in res]
