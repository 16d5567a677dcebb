"""Resolve partial identifiers against the identifiers of a universe.

Rules, applied in order:

1. Missing `project`, `domain` and `version` are filled from `defaults`
   (normally the identifier of the referencing workflow).
2. A reference without a `name` never resolves.
3. A complete identifier resolves only to an exact match.
4. An identifier that is still incomplete resolves to the single candidate
   that matches every present field. Several matches are ambiguous.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from typing import TypeVar

from .errors import UnresolvedReferenceError
from .model import (
    LaunchPlanIdentifier,
    PartialLaunchPlanIdentifier,
    PartialWorkflowIdentifier,
    WorkflowIdentifier,
)
from .model.identifiers import _Identifier, _PartialIdentifier

_FIELDS = ("project", "domain", "name", "version")

IdT = TypeVar("IdT", bound=_Identifier)


@dataclass(frozen=True, slots=True)
class IdentifierDefaults:
    """Fallback values for the optional parts of a partial identifier."""

    project: str | None = None
    domain: str | None = None
    version: str | None = None

    @staticmethod
    def from_identifier(identifier: _Identifier) -> IdentifierDefaults:
        return IdentifierDefaults(
            project=identifier.project,
            domain=identifier.domain,
            version=identifier.version,
        )


def apply_defaults(
    partial: _PartialIdentifier, defaults: IdentifierDefaults | None
) -> dict[str, str | None]:
    """Return the partial identifier's fields with gaps filled from `defaults`."""

    fields: dict[str, str | None] = {f: getattr(partial, f) for f in _FIELDS}
    if defaults is None:
        return fields
    for f in ("project", "domain", "version"):
        if fields[f] is None:
            fields[f] = getattr(defaults, f)
    return fields


def _resolve(
    partial: _PartialIdentifier,
    candidates: Collection[IdT],
    id_type: type[IdT],
    defaults: IdentifierDefaults | None,
    node_id: str | None,
) -> IdT | None:
    fields = apply_defaults(partial, defaults)
    if fields["name"] is None:
        return None

    if all(value is not None for value in fields.values()):
        exact = id_type(**fields)
        return exact if exact in candidates else None

    present = {k: v for k, v in fields.items() if v is not None}
    matches = [
        candidate
        for candidate in candidates
        if all(getattr(candidate, k) == v for k, v in present.items())
    ]
    if len(matches) > 1:
        raise UnresolvedReferenceError(
            node_id=node_id,
            reference=partial,
            reason=f"ambiguous, {len(matches)} candidates match",
        )
    return matches[0] if matches else None


def resolve_workflow_id(
    partial: PartialWorkflowIdentifier,
    candidates: Collection[WorkflowIdentifier],
    *,
    defaults: IdentifierDefaults | None = None,
    node_id: str | None = None,
) -> WorkflowIdentifier | None:
    """Resolve a workflow reference; `None` when nothing matches."""

    return _resolve(partial, candidates, WorkflowIdentifier, defaults, node_id)


def resolve_launch_plan_id(
    partial: PartialLaunchPlanIdentifier,
    candidates: Collection[LaunchPlanIdentifier],
    *,
    defaults: IdentifierDefaults | None = None,
    node_id: str | None = None,
) -> LaunchPlanIdentifier | None:
    """Resolve a launch plan reference; `None` when nothing matches."""

    return _resolve(partial, candidates, LaunchPlanIdentifier, defaults, node_id)
