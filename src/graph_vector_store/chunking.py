from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChunkingConfig:
    # target sizes are soft; overlap helps recall
    target_chars: int = 1024
    overlap_chars: int = 100
    # how far back from the target to look for a newline to end on
    boundary_window: int = 200


def _normalize(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n").strip()


def chunk_text(text: str, cfg: ChunkingConfig | None = None) -> list[str]:
    """Split text into overlapping windows, preferring newline boundaries."""
    cfg = cfg or ChunkingConfig()
    if cfg.target_chars <= 0:
        raise ValueError("target_chars must be > 0")
    if not 0 <= cfg.overlap_chars < cfg.target_chars:
        raise ValueError("overlap_chars must be in [0, target_chars)")

    t = _normalize(text)
    n = len(t)
    if n <= cfg.target_chars:
        return [t] if t else []

    out: list[str] = []
    start = 0
    while start < n:
        end = min(n, start + cfg.target_chars)
        if end < n:
            # try to end on a newline boundary
            nl = t.rfind("\n", start, end)
            if nl > start and (end - nl) < cfg.boundary_window:
                end = nl
        seg = t[start:end].strip()
        if seg:
            out.append(seg)
        if end == n:
            break
        start = max(start + 1, end - cfg.overlap_chars)
    return out
