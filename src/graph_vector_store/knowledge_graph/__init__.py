"""Knowledge graph subsystem.

This module provides:
- A tolerant parser for newline-delimited graph records emitted by a model
- An upsert engine that merges records into a graph store and similarity index
- A retrieval expander that ranks relationships around seed entities

Ingestion and query pipelines that also drive the model live in `.pipeline`.
"""

from .models import Edge, Entity, GraphEvent, IndexDocument, Node, RankedRelationship, Relationship, normalize_name
from .parser import EventStream, ParseResult, parse_record, parse_text
from .ranking import harmonic_score, rank_relationships
from .retrieval import GraphRetriever, RetrievalConfig, interleave
from .store import GraphStore, SimilarityIndex
from .upsert import GraphUpserter

__all__ = [
    "Edge",
    "Entity",
    "GraphEvent",
    "IndexDocument",
    "Node",
    "RankedRelationship",
    "Relationship",
    "normalize_name",
    "EventStream",
    "ParseResult",
    "parse_record",
    "parse_text",
    "harmonic_score",
    "rank_relationships",
    "GraphRetriever",
    "RetrievalConfig",
    "interleave",
    "GraphStore",
    "SimilarityIndex",
    "GraphUpserter",
]
