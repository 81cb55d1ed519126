"""Turn newline-delimited JSON emitted by a text-generation model into graph events.

Models are not reliable JSON writers, so every line is parsed on its own and a
line that cannot be salvaged is reported, not raised. The wire format is::

    {"is": "entity", "name": "...", "types": ["..."], "emphasis": 0-10}
    {"is": "relationship", "from": "...", "to": "...", "type": "...", "emphasis": 0-10}
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from dataclasses import dataclass, field
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import MalformedRecordError
from .models import Entity, GraphEvent, Relationship

logger = logging.getLogger(__name__)

# Emphasis arrives on a 0-10 scale. Zero would poison the harmonic sum, so it
# is rejected here rather than downstream.
Emphasis = Annotated[float, Field(gt=0, le=10)]


class EntityRecord(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    name: str
    types: list[str]
    emphasis: Emphasis

    def to_event(self) -> Entity:
        return Entity(name=self.name, types=frozenset(self.types), emphasis=self.emphasis / 10)


class RelationshipRecord(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    src: str = Field(alias="from")
    dst: str = Field(alias="to")
    type: str
    emphasis: Emphasis

    def to_event(self) -> Relationship:
        return Relationship(src=self.src, dst=self.dst, rel_type=self.type, emphasis=self.emphasis / 10)


_RECORD_MODELS: dict[str, type[EntityRecord] | type[RelationshipRecord]] = {
    "entity": EntityRecord,
    "relationship": RelationshipRecord,
}

ENTITY_EXAMPLE = {"is": "entity", "name": "entity name", "types": ["instance type", "..."], "emphasis": 9}
RELATIONSHIP_EXAMPLE = {
    "is": "relationship",
    "from": "entity name",
    "to": "entity name",
    "type": "relationship type",
    "emphasis": 5,
}

# Handed to the model so it knows what to emit.
SCHEMA_EXAMPLE = "\n".join(json.dumps(o) for o in (ENTITY_EXAMPLE, RELATIONSHIP_EXAMPLE))


def _validate(line: str) -> GraphEvent:
    data: Any = json.loads(line)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    kind = data.get("is")
    model = _RECORD_MODELS.get(kind) if isinstance(kind, str) else None
    if model is None:
        raise ValueError(f"unknown record kind {kind!r}")
    return model.model_validate(data).to_event()


def parse_record(line: str) -> GraphEvent:
    """Parse one record, retrying once without the last character.

    Models sometimes close an object with one brace too many. Lines nested
    too deeply for the JSON decoder are malformed like any other.
    """
    try:
        return _validate(line)
    except (ValueError, ValidationError, RecursionError) as first:
        try:
            return _validate(line[:-1])
        except (ValueError, ValidationError, RecursionError):
            raise MalformedRecordError(line, first) from first


@dataclass(frozen=True, slots=True)
class MalformedRecord:
    line: str
    error: Exception


@dataclass(slots=True)
class ParseResult:
    events: list[GraphEvent] = field(default_factory=list)
    errors: list[MalformedRecord] = field(default_factory=list)


def _parse_line(line: str, errors: list[MalformedRecord]) -> GraphEvent | None:
    line = line.strip()
    if not line:
        return None
    try:
        return parse_record(line)
    except MalformedRecordError as e:
        logger.warning(f"Dropping malformed graph record {e.line!r}: {e.cause}")
        errors.append(MalformedRecord(line=e.line, error=e.cause))
        return None


def parse_text(text: str) -> ParseResult:
    """Parse a complete model response."""
    result = ParseResult()
    for line in text.split("\n"):
        event = _parse_line(line, result.errors)
        if event is not None:
            result.events.append(event)
    return result


class LineBuffer:
    """Accumulates text fragments and hands back completed lines."""

    def __init__(self) -> None:
        self._buf = ""

    def feed(self, fragment: str) -> list[str]:
        self._buf += fragment
        *lines, self._buf = self._buf.split("\n")
        return lines

    def flush(self) -> str:
        rest, self._buf = self._buf, ""
        return rest


def parse_fragments(fragments: Iterable[str]) -> ParseResult:
    """Synchronous counterpart of `EventStream` for already-collected fragments."""
    result = ParseResult()
    buf = LineBuffer()
    for fragment in fragments:
        for line in buf.feed(fragment):
            event = _parse_line(line, result.errors)
            if event is not None:
                result.events.append(event)
    event = _parse_line(buf.flush(), result.errors)
    if event is not None:
        result.events.append(event)
    return result


class EventStream:
    """Lazily parses a stream of text fragments into graph events.

    Iterating yields events in input order. Lines that cannot be parsed are
    appended to `errors` as they are encountered; the stream keeps going.
    A stream can be iterated once.
    """

    def __init__(self, fragments: AsyncIterable[str]):
        self._fragments = fragments
        self.errors: list[MalformedRecord] = []

    def __aiter__(self) -> AsyncIterator[GraphEvent]:
        return self._events()

    async def _events(self) -> AsyncIterator[GraphEvent]:
        buf = LineBuffer()
        async for fragment in self._fragments:
            for line in buf.feed(fragment):
                event = _parse_line(line, self.errors)
                if event is not None:
                    yield event

        event = _parse_line(buf.flush(), self.errors)
        if event is not None:
            yield event

    async def collect(self) -> ParseResult:
        events = [e async for e in self]
        return ParseResult(events=events, errors=list(self.errors))
