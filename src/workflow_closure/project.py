"""Compute the deployable closure of one or more root workflows."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import assert_never

from .collector import collect_sub_workflows
from .errors import UnresolvedReferenceError
from .merge import merge_layers
from .model import (
    LaunchPlan,
    LaunchPlanIdentifier,
    LaunchPlanRef,
    Node,
    Struct,
    SubWorkflowRef,
    TaskIdentifier,
    TaskTemplate,
    WorkflowIdentifier,
    WorkflowTemplate,
)
from .resolution import IdentifierDefaults, resolve_launch_plan_id, resolve_workflow_id
from .serializer import ArtifactSink, serialize
from .universe import Universe

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProjectClosure:
    """Everything that must be registered together for a set of root workflows."""

    workflow_specs: Mapping[WorkflowIdentifier, WorkflowTemplate] = field(default_factory=dict)
    task_specs: Mapping[TaskIdentifier, TaskTemplate] = field(default_factory=dict)
    launch_plans: Mapping[LaunchPlanIdentifier, LaunchPlan] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "workflow_specs", MappingProxyType(dict(self.workflow_specs)))
        object.__setattr__(self, "task_specs", MappingProxyType(dict(self.task_specs)))
        object.__setattr__(self, "launch_plans", MappingProxyType(dict(self.launch_plans)))

    def __len__(self) -> int:
        return len(self.workflow_specs) + len(self.task_specs) + len(self.launch_plans)

    def serialize(self, emit: ArtifactSink, *, max_payload_bytes: int | None = None) -> int:
        return serialize(self, emit, max_payload_bytes=max_payload_bytes)


def apply_node_defaults(
    template: WorkflowTemplate, defaults: Struct | None = None
) -> WorkflowTemplate:
    """Return a copy of `template` whose node metadata carries the layered defaults.

    Priority, highest first: the node's own metadata, the workflow's
    `node_defaults`, then the project-wide `defaults`.
    """

    nodes = tuple(
        node.model_copy(
            update={
                "metadata": merge_layers(node.metadata, template.metadata.node_defaults, defaults)
            }
        )
        for node in template.nodes
    )
    return template.model_copy(update={"nodes": nodes})


class _ClosureBuilder:
    def __init__(self, universe: Universe, *, strict: bool) -> None:
        self._universe = universe
        self._strict = strict
        self.workflows: dict[WorkflowIdentifier, WorkflowTemplate] = {}
        self.tasks: dict[TaskIdentifier, TaskTemplate] = {}
        self.launch_plans: dict[LaunchPlanIdentifier, LaunchPlan] = {}
        self._pending: deque[WorkflowIdentifier] = deque()

    def _unresolved(self, error: UnresolvedReferenceError) -> None:
        if self._strict:
            raise error
        logger.warning(
            "Skipping unresolved reference",
            extra={
                "node_id": error.node_id,
                "reference": str(error.reference),
                "reason": error.reason,
            },
        )

    def add_workflow(self, identifier: WorkflowIdentifier) -> None:
        if identifier in self.workflows:
            return
        self.workflows[identifier] = self._universe.workflows[identifier]
        self._pending.append(identifier)

    def add_launch_plan(self, identifier: LaunchPlanIdentifier, node_id: str | None) -> None:
        if identifier in self.launch_plans:
            return
        launch_plan = self._universe.launch_plans[identifier]
        self.launch_plans[identifier] = launch_plan

        try:
            target = resolve_workflow_id(
                launch_plan.workflow_id,
                self._universe.workflows,
                defaults=IdentifierDefaults.from_identifier(identifier),
                node_id=node_id,
            )
        except UnresolvedReferenceError as e:
            self._unresolved(e)
            return
        if target is None:
            self._unresolved(
                UnresolvedReferenceError(
                    node_id=node_id,
                    reference=launch_plan.workflow_id,
                    reason=f"workflow of launch plan {identifier} not found",
                )
            )
            return
        self.add_workflow(target)

    def _visit_launch_plan_ref(
        self, node: Node, reference: LaunchPlanRef, defaults: IdentifierDefaults
    ) -> None:
        try:
            resolved = resolve_launch_plan_id(
                reference.launch_plan_id,
                self._universe.launch_plans,
                defaults=defaults,
                node_id=node.id,
            )
        except UnresolvedReferenceError as e:
            self._unresolved(e)
            return
        if resolved is None:
            self._unresolved(
                UnresolvedReferenceError(node_id=node.id, reference=reference.launch_plan_id)
            )
            return
        self.add_launch_plan(resolved, node.id)

    def _visit_node(self, node: Node, defaults: IdentifierDefaults) -> None:
        if node.task_node is not None:
            task_id = node.task_node.reference_id
            if task_id in self._universe.tasks:
                self.tasks.setdefault(task_id, self._universe.tasks[task_id])
            else:
                self._unresolved(UnresolvedReferenceError(node_id=node.id, reference=task_id))

        if node.workflow_node is None:
            return
        reference = node.workflow_node.reference
        match reference:
            case SubWorkflowRef():
                # Sub-workflows are resolved through the collector below.
                pass
            case LaunchPlanRef():
                self._visit_launch_plan_ref(node, reference, defaults)
            case _:
                assert_never(reference)

    def run(self) -> None:
        while self._pending:
            identifier = self._pending.popleft()
            template = self.workflows[identifier]
            defaults = IdentifierDefaults.from_identifier(identifier)

            for node in template.nodes:
                self._visit_node(node, defaults)

            found = collect_sub_workflows(
                template.nodes,
                self._universe.workflows,
                defaults=defaults,
                strict=self._strict,
            )
            for sub_id in found:
                self.add_workflow(sub_id)


def build_project_closure(
    roots: Iterable[WorkflowIdentifier],
    universe: Universe,
    *,
    node_defaults: Struct | None = None,
    strict: bool = True,
) -> ProjectClosure:
    """Collect the root workflows and everything they transitively reference.

    The closure contains the roots, every reachable sub-workflow, the tasks
    referenced by task nodes, the launch plans referenced by launch plan
    nodes (together with the workflows they bind), and the launch plans of
    the universe that are bound to a root workflow. Node metadata in every
    collected workflow is layered with defaults via `apply_node_defaults`.

    Raises:
        UnresolvedReferenceError: if a root is not in the universe, or, in
            strict mode, if any reference is missing or ambiguous.
    """

    builder = _ClosureBuilder(universe, strict=strict)
    root_ids = list(roots)
    for root in root_ids:
        if root not in universe.workflows:
            raise UnresolvedReferenceError(node_id=None, reference=root, reason="unknown root")
        builder.add_workflow(root)

    for lp_id, launch_plan in universe.launch_plans.items():
        try:
            bound = resolve_workflow_id(
                launch_plan.workflow_id,
                universe.workflows,
                defaults=IdentifierDefaults.from_identifier(lp_id),
            )
        except UnresolvedReferenceError as e:
            # Not reachable from a root unless referenced by a node, where it is reported.
            logger.debug("Ignoring launch plan with ambiguous workflow", extra={"error": str(e)})
            continue
        if bound is not None and bound in root_ids:
            builder.add_launch_plan(lp_id, node_id=None)

    builder.run()

    closure = ProjectClosure(
        workflow_specs={
            identifier: apply_node_defaults(template, node_defaults)
            for identifier, template in builder.workflows.items()
        },
        task_specs=builder.tasks,
        launch_plans=builder.launch_plans,
    )
    logger.info(
        "Project closure computed",
        extra={
            "roots": [str(root) for root in root_ids],
            "workflows": len(closure.workflow_specs),
            "tasks": len(closure.task_specs),
            "launch_plans": len(closure.launch_plans),
        },
    )
    return closure
