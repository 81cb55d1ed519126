from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GraphVectorStoreSettings(BaseSettings):
    """Configuration for the gvs command.

    Environment variables are prefixed with GVS_. Library code takes explicit
    config objects; only the CLI reads the environment.
    """

    model_config = SettingsConfigDict(env_prefix="GVS_", extra="ignore")

    # --- Core ---
    log_level: str = Field(default="INFO", description="Python logging level")

    # --- Graph DB (Neo4j) ---
    neo4j_uri: str = "neo4j://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "neo4j"
    neo4j_database: str = "neo4j"

    # --- Vector DB (Qdrant) ---
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: str | None = None
    graph_collection: str = "knowledge-graph"
    document_collection: str = "embeddings"

    # --- Embeddings ---
    embedding_dim: int = 384
    st_model: str | None = Field(
        default=None,
        description="sentence-transformers model name (optional). If unset, use stub embedder.",
    )

    # --- Generation (Ollama) ---
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3:70b-instruct"
    ollama_temperature: float | None = None
    ollama_timeout_s: float = 300.0

    # --- Retrieval ---
    similarity_k: int = Field(default=5, ge=1)
    per_seed_limit: int = Field(default=10, ge=1)
    context_limit: int = Field(default=20, ge=1)
    document_k: int = Field(default=16, ge=1)

    # --- Chunking ---
    graph_chunk_chars: int = Field(default=4096, gt=0)
    document_chunk_chars: int = Field(default=1024, gt=0)
    chunk_overlap_chars: int = Field(default=100, ge=0)
