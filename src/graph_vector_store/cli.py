"""gvs - build a knowledge graph from text and query it."""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass

import click
from rich.console import Console
from rich.table import Table

from graph_vector_store import __version__
from graph_vector_store.chunking import ChunkingConfig
from graph_vector_store.knowledge_graph.models import Edge, Node
from graph_vector_store.knowledge_graph.neo4j_store import Neo4jConfig, Neo4jGraphStore
from graph_vector_store.knowledge_graph.pipeline import GraphIngestor, GraphQueryEngine
from graph_vector_store.knowledge_graph.retrieval import GraphRetriever, RetrievalConfig
from graph_vector_store.knowledge_graph.upsert import GraphUpserter
from graph_vector_store.llm.ollama import OllamaChatClient, OllamaConfig
from graph_vector_store.settings import GraphVectorStoreSettings
from graph_vector_store.vector.embedder import build_embedder
from graph_vector_store.vector.qdrant_index import QdrantConfig, QdrantIndex

console = Console()


def _configure_logging(settings: GraphVectorStoreSettings) -> None:
    level = (settings.log_level or "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@dataclass
class Services:
    store: Neo4jGraphStore
    graph_index: QdrantIndex
    documents: QdrantIndex
    llm: OllamaChatClient


@asynccontextmanager
async def _services(settings: GraphVectorStoreSettings):
    embedder = build_embedder(st_model=settings.st_model, dim=settings.embedding_dim)
    services = Services(
        store=Neo4jGraphStore(
            Neo4jConfig(
                uri=settings.neo4j_uri,
                user=settings.neo4j_user,
                password=settings.neo4j_password,
                database=settings.neo4j_database,
            )
        ),
        graph_index=QdrantIndex(
            QdrantConfig(collection=settings.graph_collection, url=settings.qdrant_url, api_key=settings.qdrant_api_key),
            embedder,
        ),
        documents=QdrantIndex(
            QdrantConfig(
                collection=settings.document_collection, url=settings.qdrant_url, api_key=settings.qdrant_api_key
            ),
            embedder,
        ),
        llm=OllamaChatClient(
            OllamaConfig(
                base_url=settings.ollama_base_url,
                model=settings.ollama_model,
                temperature=settings.ollama_temperature,
                timeout_s=settings.ollama_timeout_s,
            )
        ),
    )
    try:
        yield services
    finally:
        await services.llm.aclose()
        await services.graph_index.close()
        await services.documents.close()
        await services.store.close()


def _print_item(item: Node | Edge) -> None:
    if isinstance(item, Node):
        console.print(f"[cyan]\\[entity][/cyan] {item.name}")
    else:
        console.print(f"[magenta]\\[relationship][/magenta] {item.src.name} -> {item.rel_type} -> {item.dst.name}")


@click.group()
@click.pass_context
def cli(ctx: click.Context):
    """Build a knowledge graph from text and answer questions with it."""
    settings = GraphVectorStoreSettings()
    _configure_logging(settings)
    ctx.obj = settings


@cli.command()
def version():
    """Print the installed version."""
    click.echo(__version__)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, allow_dash=True))
@click.option("--source", default=None, help="Source label passed to the model (defaults to PATH)")
@click.option("--no-documents", is_flag=True, help="Only build the graph; skip the document index")
@click.pass_obj
def ingest(settings: GraphVectorStoreSettings, path: str, source: str | None, no_documents: bool):
    """Extract entities and relationships from PATH into the graph."""
    with click.open_file(path, encoding="utf-8") as f:
        text = f.read()

    async def run():
        async with _services(settings) as s:
            ingestor = GraphIngestor(
                s.llm,
                GraphUpserter(s.store, s.graph_index),
                None if no_documents else s.documents,
                graph_chunking=ChunkingConfig(
                    target_chars=settings.graph_chunk_chars, overlap_chars=settings.chunk_overlap_chars
                ),
                document_chunking=ChunkingConfig(
                    target_chars=settings.document_chunk_chars, overlap_chars=settings.chunk_overlap_chars
                ),
            )
            return await ingestor.ingest_text(text, source=source or path, on_item=_print_item)

    stats = asyncio.run(run())
    console.print(
        f"[green]Done[/green]: {stats.entities} entities, {stats.relationships} relationships, "
        f"{stats.malformed} malformed lines, {stats.documents} document chunks in {stats.elapsed_ms:.0f} ms"
    )


@cli.command()
@click.argument("prompt")
@click.option("--relationships-only", is_flag=True, help="Show retrieved relationships without answering")
@click.pass_obj
def query(settings: GraphVectorStoreSettings, prompt: str, relationships_only: bool):
    """Answer PROMPT using the graph and the document index."""

    async def run():
        async with _services(settings) as s:
            retriever = GraphRetriever(
                s.store,
                s.graph_index,
                RetrievalConfig(
                    similarity_k=settings.similarity_k,
                    per_seed_limit=settings.per_seed_limit,
                    context_limit=settings.context_limit,
                ),
            )
            engine = GraphQueryEngine(s.llm, retriever, s.documents, document_k=settings.document_k)
            if relationships_only:
                return await engine.relationships(prompt), None
            answer = await engine.answer(prompt)
            return answer.relationships, answer.text

    edges, text = asyncio.run(run())

    table = Table(title=f"Relationships for '{prompt}'")
    table.add_column("From", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("To", style="cyan")
    for e in edges:
        table.add_row(e.src.name, e.rel_type, e.dst.name)
    console.print(table)

    if text is None:
        return
    if not text.strip():
        console.print("[yellow]The model returned an empty answer[/yellow]")
        sys.exit(1)
    console.print(text)


if __name__ == "__main__":
    cli()
