from __future__ import annotations


class GraphVectorStoreError(RuntimeError):
    pass


class MalformedRecordError(GraphVectorStoreError):
    """A line of model output that is not a valid graph record."""

    def __init__(self, line: str, cause: Exception):
        super().__init__(f"malformed graph record {line!r}: {cause}")
        self.line = line
        self.cause = cause


class DuplicateIdError(GraphVectorStoreError):
    """The similarity index already holds a document with this id."""

    def __init__(self, ids: list[str]):
        super().__init__(f"Expected IDs to be unique, found duplicates of: {', '.join(ids)}")
        self.ids = ids


class GraphStoreError(GraphVectorStoreError):
    pass


class IndexWriteError(GraphVectorStoreError):
    pass
