"""Workflow, task and launch plan templates.

Only the parts of the schema that closure computation and serialization touch
are modelled here; everything is frozen once constructed.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from .identifiers import (
    PartialLaunchPlanIdentifier,
    PartialWorkflowIdentifier,
    TaskIdentifier,
)
from .struct import ReadOnlyDict, Struct, Value


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Variable(_Frozen):
    type: str
    description: str | None = None


class TypedInterface(_Frozen):
    inputs: ReadOnlyDict[str, Variable] = Field(default_factory=dict, validate_default=True)
    outputs: ReadOnlyDict[str, Variable] = Field(default_factory=dict, validate_default=True)


class OutputReference(_Frozen):
    node_id: str
    var: str


class Binding(_Frozen):
    """Binds a variable either to an upstream output or to a constant."""

    var: str
    promise: OutputReference | None = None
    constant: Value | None = None


class LaunchPlanRef(_Frozen):
    kind: Literal["launch_plan"] = "launch_plan"
    launch_plan_id: PartialLaunchPlanIdentifier


class SubWorkflowRef(_Frozen):
    kind: Literal["sub_workflow"] = "sub_workflow"
    workflow_id: PartialWorkflowIdentifier


Reference = Annotated[LaunchPlanRef | SubWorkflowRef, Field(discriminator="kind")]


class WorkflowNode(_Frozen):
    reference: Reference


class TaskNode(_Frozen):
    reference_id: TaskIdentifier


class Node(_Frozen):
    id: str
    inputs: tuple[Binding, ...] = ()
    upstream_node_ids: frozenset[str] = frozenset()
    metadata: Struct = Field(default_factory=Struct)
    task_node: TaskNode | None = None
    workflow_node: WorkflowNode | None = None

    @field_serializer("upstream_node_ids")
    def _serialize_upstream(self, value: frozenset[str]) -> list[str]:
        # Sets have no stable order; keep encodings canonical.
        return sorted(value)


class WorkflowMetadata(_Frozen):
    node_defaults: Struct = Field(
        default_factory=Struct,
        description="Configuration shared by every node of the workflow",
    )
    description: str | None = None


class WorkflowTemplate(_Frozen):
    interface: TypedInterface = Field(default_factory=TypedInterface)
    metadata: WorkflowMetadata = Field(default_factory=WorkflowMetadata)
    nodes: tuple[Node, ...] = ()
    outputs: tuple[Binding, ...] = ()


class TaskMetadata(_Frozen):
    retries: int = Field(default=0, ge=0)
    timeout_seconds: float | None = Field(default=None, gt=0)
    discoverable: bool = False


class TaskTemplate(_Frozen):
    type: str
    interface: TypedInterface = Field(default_factory=TypedInterface)
    custom: Struct = Field(default_factory=Struct)
    metadata: TaskMetadata = Field(default_factory=TaskMetadata)


class LaunchPlan(_Frozen):
    """A named, deployable binding of a workflow."""

    name: str
    workflow_id: PartialWorkflowIdentifier
    fixed_inputs: Struct = Field(default_factory=Struct)
    default_inputs: Struct = Field(default_factory=Struct)
    cron_schedule: str | None = None
