"""Exception hierarchy for closure computation and serialization."""

from __future__ import annotations


class ClosureError(Exception):
    """Base error for workflow closure computation."""


class UnresolvedReferenceError(ClosureError):
    """Raised when a reference in the node graph matches nothing in the universe.

    `node_id` is `None` when the reference is a root rather than a node's.
    """

    def __init__(
        self, node_id: str | None, reference: object, reason: str = "no matching entry"
    ) -> None:
        self.node_id = node_id
        self.reference = reference
        self.reason = reason
        where = f"node {node_id!r}" if node_id is not None else "root"
        super().__init__(f"Unresolved reference {reference} from {where}: {reason}")


class SerializationError(ClosureError):
    """Raised when an entity cannot be encoded into an artifact payload."""

    def __init__(self, filename: str, message: str) -> None:
        self.filename = filename
        super().__init__(f"Cannot serialize {filename}: {message}")


class UniverseError(ClosureError):
    """Raised when a universe document is malformed or inconsistent."""
