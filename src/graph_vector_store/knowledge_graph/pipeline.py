from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from graph_vector_store.chunking import ChunkingConfig, chunk_text
from graph_vector_store.llm.chains import EntityExtractor, ParagraphGenerator, QueryAnswerer, TextGenerator

from .models import Edge, IndexDocument, Node
from .retrieval import GraphRetriever, interleave
from .store import SimilarityIndex
from .upsert import GraphUpserter

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IngestStats:
    entities: int = 0
    relationships: int = 0
    malformed: int = 0
    documents: int = 0
    elapsed_ms: float = 0.0


class GraphIngestor:
    """Feeds text through extraction into the graph, and optionally into a document index."""

    def __init__(
        self,
        generator: TextGenerator,
        upserter: GraphUpserter,
        documents: SimilarityIndex | None = None,
        *,
        graph_chunking: ChunkingConfig | None = None,
        document_chunking: ChunkingConfig | None = None,
    ):
        self.generator = generator
        self.upserter = upserter
        self.documents = documents
        self.graph_chunking = graph_chunking or ChunkingConfig(target_chars=4096)
        self.document_chunking = document_chunking or ChunkingConfig(target_chars=1024)

    async def ingest_text(
        self,
        text: str,
        *,
        source: str = "unknown",
        on_item: Callable[[Node | Edge], None] | None = None,
    ) -> IngestStats:
        t0 = time.perf_counter()
        stats = IngestStats()

        if self.documents is not None:
            docs = [
                IndexDocument(page_content=chunk, metadata={"source": source})
                for chunk in chunk_text(text, self.document_chunking)
            ]
            await self.documents.add_documents(docs)
            stats.documents = len(docs)

        extractor = EntityExtractor(self.generator, source=source)
        for i, chunk in enumerate(chunk_text(text, self.graph_chunking)):
            events = extractor.stream(chunk)
            async for item in self.upserter.upsert(events):
                if isinstance(item, Node):
                    stats.entities += 1
                else:
                    stats.relationships += 1
                if on_item is not None:
                    on_item(item)
            stats.malformed += len(events.errors)
            logger.info(f"{source} chunk {i}: {stats.entities} entities, {stats.relationships} relationships so far")

        stats.elapsed_ms = (time.perf_counter() - t0) * 1000.0
        return stats


@dataclass(slots=True)
class Answer:
    text: str
    relationships: list[Edge] = field(default_factory=list)
    documents: list[IndexDocument] = field(default_factory=list)


class GraphQueryEngine:
    """Answers a prompt using graph relationships and similar documents."""

    def __init__(
        self,
        generator: TextGenerator,
        retriever: GraphRetriever,
        documents: SimilarityIndex | None = None,
        *,
        document_k: int = 16,
    ):
        self.extractor = EntityExtractor(generator, source="query")
        self.paragraphs = ParagraphGenerator(generator)
        self.answerer = QueryAnswerer(generator)
        self.retriever = retriever
        self.documents = documents
        self.document_k = document_k

    async def relationships(self, prompt: str) -> list[Edge]:
        """Seed entities from the prompt, expanded and fairly interleaved."""
        batches = await self.retriever.expand_all(self.extractor.stream(prompt))
        ranked = interleave(batches, self.retriever.cfg.context_limit)
        return [r.edge for r in ranked]

    async def answer(self, prompt: str) -> Answer:
        edges = await self.relationships(prompt)
        docs: list[IndexDocument] = []
        if self.documents is not None:
            paragraph = await self.paragraphs.invoke(edges)
            docs = await self.documents.similarity_search(paragraph, self.document_k)
        text = await self.answerer.invoke(prompt, documents=docs, edges=edges)
        return Answer(text=text, relationships=edges, documents=docs)
