from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import httpx

from graph_vector_store.http import async_client, transient_retry
from graph_vector_store.knowledge_graph.errors import GraphVectorStoreError

logger = logging.getLogger(__name__)


class LLMError(GraphVectorStoreError):
    pass


@dataclass(frozen=True)
class OllamaConfig:
    base_url: str = "http://localhost:11434"
    model: str = "llama3:70b-instruct"
    temperature: float | None = None
    timeout_s: float = 300.0
    options: dict[str, Any] = field(default_factory=dict)


class OllamaChatClient:
    """Single-turn chat against Ollama's /api/chat, whole or streamed."""

    def __init__(self, cfg: OllamaConfig, client: httpx.AsyncClient | None = None):
        self.cfg = cfg
        self._client = client or async_client(cfg.base_url, read_timeout=cfg.timeout_s)

    async def aclose(self) -> None:
        await self._client.aclose()

    def _payload(self, prompt: str, *, stream: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.cfg.model,
            "stream": stream,
            "messages": [{"role": "user", "content": prompt}],
        }
        options = dict(self.cfg.options)
        if self.cfg.temperature is not None:
            options["temperature"] = self.cfg.temperature
        if options:
            payload["options"] = options
        return payload

    @transient_retry()
    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        return await self._client.post("/api/chat", json=payload)

    async def complete(self, prompt: str) -> str:
        try:
            r = await self._post(self._payload(prompt, stream=False))
        except httpx.HTTPError as e:
            raise LLMError(f"Failed to connect to Ollama at {self.cfg.base_url}. Is it running? ({e})") from e

        if r.status_code != 200:
            raise LLMError(f"Ollama error {r.status_code}: {r.text}")

        try:
            data = r.json()
        except ValueError as e:
            raise LLMError(f"Ollama returned invalid JSON: {r.text}") from e
        if not isinstance(data, dict):
            raise LLMError(f"Unexpected Ollama response: {data}")
        content = (data.get("message") or {}).get("content")
        if not isinstance(content, str):
            raise LLMError(f"Unexpected Ollama response: {data}")
        return content

    async def stream(self, prompt: str) -> AsyncIterator[str]:
        """Yield response text fragments as Ollama produces them."""
        try:
            async with self._client.stream("POST", "/api/chat", json=self._payload(prompt, stream=True)) as r:
                if r.status_code != 200:
                    await r.aread()
                    raise LLMError(f"Ollama error {r.status_code}: {r.text}")
                async for line in r.aiter_lines():
                    if not line.strip():
                        continue
                    try:
                        data = json.loads(line)
                    except ValueError as e:
                        raise LLMError(f"Malformed Ollama stream frame: {line!r}") from e
                    if not isinstance(data, dict):
                        raise LLMError(f"Unexpected Ollama stream frame: {line!r}")
                    if data.get("error"):
                        raise LLMError(f"Ollama error: {data['error']}")
                    content = (data.get("message") or {}).get("content")
                    if content:
                        yield content
                    if data.get("done"):
                        break
        except httpx.HTTPError as e:
            raise LLMError(f"Ollama stream from {self.cfg.base_url} failed: {e}") from e
