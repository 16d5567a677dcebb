"""Discover the sub-workflows referenced from a workflow's node graph."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import assert_never

from .errors import UnresolvedReferenceError
from .model import (
    LaunchPlanRef,
    Node,
    PartialWorkflowIdentifier,
    SubWorkflowRef,
    WorkflowIdentifier,
    WorkflowTemplate,
)
from .resolution import IdentifierDefaults, resolve_workflow_id

logger = logging.getLogger(__name__)


def sub_workflow_refs(nodes: Iterable[Node]) -> Iterator[tuple[Node, PartialWorkflowIdentifier]]:
    """Yield `(node, workflow_id)` for every node that references a sub-workflow."""

    for node in nodes:
        if node.workflow_node is None:
            continue
        reference = node.workflow_node.reference
        match reference:
            case SubWorkflowRef():
                yield node, reference.workflow_id
            case LaunchPlanRef():
                continue
            case _:
                assert_never(reference)


def _resolve_or_report(
    node: Node,
    partial: PartialWorkflowIdentifier,
    all_workflows: Mapping[WorkflowIdentifier, WorkflowTemplate],
    defaults: IdentifierDefaults | None,
    strict: bool,
) -> WorkflowIdentifier | None:
    try:
        resolved = resolve_workflow_id(partial, all_workflows, defaults=defaults, node_id=node.id)
    except UnresolvedReferenceError as e:
        error = e
    else:
        if resolved is not None:
            return resolved
        error = UnresolvedReferenceError(node_id=node.id, reference=partial)

    if strict:
        raise error
    logger.warning(
        "Skipping unresolved sub-workflow reference",
        extra={"node_id": node.id, "reference": str(partial), "reason": error.reason},
    )
    return None


def collect_sub_workflows(
    nodes: Sequence[Node],
    all_workflows: Mapping[WorkflowIdentifier, WorkflowTemplate],
    *,
    defaults: IdentifierDefaults | None = None,
    strict: bool = True,
) -> dict[WorkflowIdentifier, WorkflowTemplate]:
    """Return the sub-workflows referenced directly by `nodes`.

    Only one level is inspected; see `collect_sub_workflow_closure` for the
    transitive version. Several nodes referencing the same workflow contribute
    a single entry.

    Raises:
        UnresolvedReferenceError: if a reference matches nothing in
            `all_workflows`, or matches several entries, and `strict` is set.
            In lenient mode the reference is logged and skipped, so the result
            may be incomplete.
    """

    collected: dict[WorkflowIdentifier, WorkflowTemplate] = {}
    for node, partial in sub_workflow_refs(nodes):
        resolved = _resolve_or_report(node, partial, all_workflows, defaults, strict)
        if resolved is not None and resolved not in collected:
            collected[resolved] = all_workflows[resolved]
    return collected


def collect_sub_workflow_closure(
    nodes: Sequence[Node],
    all_workflows: Mapping[WorkflowIdentifier, WorkflowTemplate],
    *,
    defaults: IdentifierDefaults | None = None,
    strict: bool = True,
) -> dict[WorkflowIdentifier, WorkflowTemplate]:
    """Return every sub-workflow transitively reachable from `nodes`.

    Each discovered template's own nodes are inspected in turn, with that
    template's identifier supplying the resolution defaults. Already collected
    identifiers are never revisited, so cycles terminate. The result is in
    breadth-first discovery order.
    """

    collected: dict[WorkflowIdentifier, WorkflowTemplate] = {}
    worklist: deque[tuple[Sequence[Node], IdentifierDefaults | None]] = deque([(nodes, defaults)])

    while worklist:
        level_nodes, level_defaults = worklist.popleft()
        found = collect_sub_workflows(
            level_nodes, all_workflows, defaults=level_defaults, strict=strict
        )
        for identifier, template in found.items():
            if identifier in collected:
                continue
            collected[identifier] = template
            worklist.append((template.nodes, IdentifierDefaults.from_identifier(identifier)))

    logger.debug("Collected sub-workflow closure", extra={"workflows": len(collected)})
    return collected
