from __future__ import annotations

import pytest

from conftest import FakeGenerator, FakeIndex
from graph_vector_store.chunking import ChunkingConfig
from graph_vector_store.knowledge_graph.models import IndexDocument, Node
from graph_vector_store.knowledge_graph.pipeline import GraphIngestor, GraphQueryEngine
from graph_vector_store.knowledge_graph.retrieval import GraphRetriever, RetrievalConfig
from graph_vector_store.knowledge_graph.upsert import GraphUpserter

CHUNK_ONE = "\n".join(
    [
        '{"is": "entity", "name": "Apollo 11", "types": ["Mission"], "emphasis": 9}',
        '{"is": "relationship", "from": "Apollo 11", "to": "Moon", "type": "LANDED_ON", "emphasis": 8}',
        "I hope this helps!",
    ]
)
CHUNK_TWO = "\n".join(
    [
        '{"is": "entity", "name": "Moon", "types": ["Satellite"], "emphasis": 10}',
        '{"is": "relationship", "from": "Moon", "to": "Earth", "type": "ORBITS", "emphasis": 10}',
    ]
)


@pytest.mark.asyncio
async def test_ingest_text_streams_every_chunk_into_the_graph(store, index) -> None:
    documents = FakeIndex()
    gen = FakeGenerator([CHUNK_ONE, CHUNK_TWO])
    ingestor = GraphIngestor(
        gen,
        GraphUpserter(store, index),
        documents,
        graph_chunking=ChunkingConfig(target_chars=40, overlap_chars=0),
        document_chunking=ChunkingConfig(target_chars=1000, overlap_chars=0),
    )
    text = "Apollo 11 landed on the Moon in 1969.\nThe Moon orbits the Earth."
    seen = []

    stats = await ingestor.ingest_text(text, source="apollo.txt", on_item=seen.append)

    assert len(gen.prompts) == 2
    assert '<content source="apollo.txt">' in gen.prompts[0]
    assert (stats.entities, stats.relationships, stats.malformed, stats.documents) == (2, 2, 1, 1)
    assert stats.elapsed_ms >= 0
    assert [type(i).__name__ for i in seen] == ["Node", "Edge", "Node", "Edge"]
    assert store.nodes["MOON"].count == 2
    assert store.nodes["MOON"].labels == frozenset({"SATELLITE"})
    assert set(index.docs) == {"APOLLO_11", "MOON", "LANDED_ON", "EARTH", "ORBITS"}
    [doc] = documents.docs.values()
    assert doc.metadata == {"source": "apollo.txt"}


@pytest.mark.asyncio
async def test_ingest_without_document_index(store, index) -> None:
    ingestor = GraphIngestor(FakeGenerator([CHUNK_TWO]), GraphUpserter(store, index))

    stats = await ingestor.ingest_text("The Moon orbits the Earth.")

    assert stats.documents == 0
    assert isinstance(store.nodes["MOON"], Node)


async def _seed_graph(store, index) -> None:
    ingestor = GraphIngestor(FakeGenerator([CHUNK_ONE + "\n" + CHUNK_TWO]), GraphUpserter(store, index))
    await ingestor.ingest_text("seed")


@pytest.mark.asyncio
async def test_answer_combines_graph_and_documents(store, index) -> None:
    await _seed_graph(store, index)
    documents = FakeIndex()
    documents.docs = {"d1": IndexDocument("Apollo 11 landed in 1969.")}
    query_events = "\n".join(
        [
            '{"is": "entity", "name": "Moon", "types": [], "emphasis": 9}',
            '{"is": "relationship", "from": "Moon", "to": "Earth", "type": "ORBITS", "emphasis": 3}',
            '{"is": "entity", "name": "Earth", "types": [], "emphasis": 5}',
        ]
    )
    gen = FakeGenerator([query_events, "A paragraph about the Moon.", "The final answer."])
    retriever = GraphRetriever(store, index, RetrievalConfig(similarity_k=1, per_seed_limit=10, context_limit=3))
    engine = GraphQueryEngine(gen, retriever, documents, document_k=4)

    answer = await engine.answer("What orbits the Earth?")

    assert answer.text == "The final answer."
    # Moon ranks ORBITS over LANDED_ON, Earth only has ORBITS; interleaved and capped at 3.
    assert [e.rel_type for e in answer.relationships] == ["ORBITS", "ORBITS", "LANDED_ON"]
    assert documents.searches == [("A paragraph about the Moon.", 4)]
    assert [d.page_content for d in answer.documents] == ["Apollo 11 landed in 1969."]
    assert "APOLLO_11 LANDED_ON MOON;" in gen.prompts[1]
    assert gen.prompts[2].endswith("What orbits the Earth?")


@pytest.mark.asyncio
async def test_relationships_without_entities_is_empty(store, index) -> None:
    await _seed_graph(store, index)
    gen = FakeGenerator(["no graph records here"])
    engine = GraphQueryEngine(gen, GraphRetriever(store, index))

    assert await engine.relationships("hello") == []
    assert store.reads == []
