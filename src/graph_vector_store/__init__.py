"""Incrementally built knowledge graph for retrieval-augmented answering."""

__version__ = "0.1.0"
