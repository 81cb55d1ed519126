"""Prompted calls to the generation service."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Protocol

from graph_vector_store.knowledge_graph.models import Edge, IndexDocument
from graph_vector_store.knowledge_graph.parser import SCHEMA_EXAMPLE, EventStream, ParseResult, parse_text

from .prompts import ANSWER_TEMPLATE, ENTITY_EXTRACTION_TEMPLATE, PARAGRAPH_TEMPLATE


class TextGenerator(Protocol):
    async def complete(self, prompt: str) -> str: ...

    def stream(self, prompt: str) -> AsyncIterator[str]: ...


def render_relationships(edges: Sequence[Edge], sep: str = "\n") -> str:
    return sep.join(f"{e.describe()};" for e in edges)


class EntityExtractor:
    def __init__(self, generator: TextGenerator, source: str = "unknown"):
        self.generator = generator
        self.source = source

    def prompt(self, text: str) -> str:
        return ENTITY_EXTRACTION_TEMPLATE.format(format=SCHEMA_EXAMPLE, source=self.source, input=text)

    async def invoke(self, text: str) -> ParseResult:
        return parse_text(await self.generator.complete(self.prompt(text)))

    def stream(self, text: str) -> EventStream:
        return EventStream(self.generator.stream(self.prompt(text)))


class ParagraphGenerator:
    """Writes a paragraph from relationships, used as a document search query."""

    def __init__(self, generator: TextGenerator):
        self.generator = generator

    async def invoke(self, edges: Sequence[Edge]) -> str:
        return await self.generator.complete(PARAGRAPH_TEMPLATE.format(input=render_relationships(edges, " ")))


class QueryAnswerer:
    def __init__(self, generator: TextGenerator):
        self.generator = generator

    async def invoke(self, prompt: str, *, documents: Sequence[IndexDocument], edges: Sequence[Edge]) -> str:
        docs = "\n".join(f"<document>{d.page_content}</document>" for d in documents)
        return await self.generator.complete(
            ANSWER_TEMPLATE.format(documents=docs, relationships=render_relationships(edges), prompt=prompt)
        )
