from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal, Union

_INVALID_CHARS = re.compile(r"[^A-Za-z0-9 ._-]")
_SEPARATORS = re.compile(r"[-. ]")
_IDENTIFIER = re.compile(r"^[A-Z_][A-Z0-9_]*$")

IndexKind = Literal["entity", "relationship"]


def normalize_name(name: str) -> str:
    """Map a free-form name onto a stable graph identifier.

    "Prompt Engineering" and "prompt-engineering" both become
    ``PROMPT_ENGINEERING``; "3D Printing" becomes ``_3D_PRINTING``.
    """
    out = _SEPARATORS.sub("_", _INVALID_CHARS.sub("", name)).upper()
    if out[:1].isdigit():
        return f"_{out}"
    return out


def is_identifier(value: str) -> bool:
    return bool(_IDENTIFIER.match(value))


def _check_emphasis(emphasis: float) -> None:
    if not 0.0 < emphasis <= 1.0:
        raise ValueError(f"emphasis must be in (0, 1], got {emphasis!r}")


def _check_name(field_name: str, value: str) -> None:
    if not normalize_name(value):
        raise ValueError(f"{field_name} {value!r} has no usable characters")


@dataclass(frozen=True, slots=True)
class Entity:
    """A named concept extracted from text.

    `emphasis` is already normalized to (0, 1].
    """

    name: str
    types: frozenset[str] = frozenset()
    emphasis: float = 1.0

    def __post_init__(self) -> None:
        _check_name("name", self.name)
        _check_emphasis(self.emphasis)
        object.__setattr__(self, "types", frozenset(self.types))

    @property
    def kind(self) -> IndexKind:
        return "entity"

    @property
    def key(self) -> str:
        return normalize_name(self.name)

    @property
    def labels(self) -> list[str]:
        # Sorted so the generated query is stable for a given event.
        return sorted({lbl for lbl in (normalize_name(t) for t in self.types) if lbl})


@dataclass(frozen=True, slots=True)
class Relationship:
    """A directed, typed link between two named entities."""

    src: str
    dst: str
    rel_type: str
    emphasis: float = 1.0

    def __post_init__(self) -> None:
        _check_name("from", self.src)
        _check_name("to", self.dst)
        _check_name("type", self.rel_type)
        _check_emphasis(self.emphasis)

    @property
    def kind(self) -> IndexKind:
        return "relationship"

    @property
    def key(self) -> str:
        return normalize_name(self.rel_type)

    @property
    def src_key(self) -> str:
        return normalize_name(self.src)

    @property
    def dst_key(self) -> str:
        return normalize_name(self.dst)


GraphEvent = Union[Entity, Relationship]


@dataclass(frozen=True, slots=True)
class Node:
    """A persisted graph vertex. `name` is the normalized identifier."""

    name: str
    labels: frozenset[str] = frozenset()
    count: int = 0
    harmonic: float = 0.0

    @property
    def kind(self) -> IndexKind:
        return "entity"


@dataclass(frozen=True, slots=True)
class Edge:
    """A persisted directed relationship with both endpoints resolved."""

    src: Node
    dst: Node
    rel_type: str
    count: int = 0
    harmonic: float = 0.0

    @property
    def kind(self) -> IndexKind:
        return "relationship"

    def describe(self) -> str:
        return f"{self.src.name} {self.rel_type} {self.dst.name}"


@dataclass(frozen=True, slots=True)
class RankedRelationship:
    edge: Edge
    score: float


@dataclass(frozen=True, slots=True)
class IndexDocument:
    """A similarity-index record."""

    page_content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str | None:
        return self.metadata.get("id")

    @property
    def kind(self) -> str | None:
        return self.metadata.get("type")
