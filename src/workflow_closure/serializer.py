"""Turn a project closure into uniquely named artifact payloads.

Artifact filenames follow `{index}_{name}_{kind}.pb`:

- `index` is the zero-based position of the entry within its own collection,
- `name` is the `name` field of the entry's identifier,
- `kind` is the numeric `ArtifactKind` tag.

Downstream registration tooling parses these names, so the format and the tag
values are fixed. The index makes names unique even when two entries of the
same kind share a name (for example across projects or domains).

The `.pb` extension is part of the naming contract only: payloads are
canonical UTF-8 JSON (see `encode_entity`), not protobuf.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel

from .errors import SerializationError
from .model.identifiers import _Identifier

if TYPE_CHECKING:
    from .project import ProjectClosure

logger = logging.getLogger(__name__)

ARTIFACT_EXTENSION = ".pb"


class ArtifactKind(IntEnum):
    TASK = 1
    WORKFLOW = 2
    LAUNCH_PLAN = 3


class ArtifactSink(Protocol):
    """Receives one artifact at a time. The sink owns persistence and atomicity."""

    def __call__(self, filename: str, payload: bytes) -> None: ...


def artifact_filename(index: int, name: str, kind: ArtifactKind) -> str:
    if index < 0:
        raise ValueError(f"Artifact index must be non-negative, got {index}")
    return f"{index}_{name}_{int(kind)}{ARTIFACT_EXTENSION}"


def encode_entity(entity: BaseModel) -> bytes:
    """Canonical encoding: sorted keys, compact separators, `None` fields omitted."""

    # Python mode keeps NaN/inf as floats so the encoder can reject them.
    data = entity.model_dump(exclude_none=True)
    text = json.dumps(
        data, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    )
    return text.encode("utf-8")


def iter_artifacts(closure: ProjectClosure) -> Iterator[tuple[str, _Identifier, BaseModel]]:
    """Yield `(filename, identifier, entity)` in emission order.

    Task specs go first, then workflow specs, then launch plans; within a
    collection the mapping's iteration order assigns the indexes.
    """

    collections: list[tuple[ArtifactKind, Mapping[Any, BaseModel]]] = [
        (ArtifactKind.TASK, closure.task_specs),
        (ArtifactKind.WORKFLOW, closure.workflow_specs),
        (ArtifactKind.LAUNCH_PLAN, closure.launch_plans),
    ]
    for kind, entries in collections:
        for index, (identifier, entity) in enumerate(entries.items()):
            yield artifact_filename(index, identifier.name, kind), identifier, entity


def serialize(
    closure: ProjectClosure,
    emit: ArtifactSink,
    *,
    max_payload_bytes: int | None = None,
) -> int:
    """Emit every entity of `closure` through `emit`.

    Exactly one artifact is emitted per entity and the number emitted is
    returned.

    Raises:
        SerializationError: if an entity cannot be encoded or its payload
            exceeds `max_payload_bytes`. Artifacts emitted before the failure
            are left with the sink.
    """

    total = 0
    for filename, identifier, entity in iter_artifacts(closure):
        try:
            payload = encode_entity(entity)
        except (ValueError, TypeError) as e:
            raise SerializationError(filename, str(e)) from e

        if max_payload_bytes is not None and len(payload) > max_payload_bytes:
            raise SerializationError(
                filename, f"payload is {len(payload)} bytes, limit is {max_payload_bytes}"
            )

        emit(filename, payload)
        logger.debug(
            "Artifact emitted",
            extra={"artifact": filename, "identifier": str(identifier), "bytes": len(payload)},
        )
        total += 1

    logger.info("Closure serialized", extra={"artifacts": total})
    return total
