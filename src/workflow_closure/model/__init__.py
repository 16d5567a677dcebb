"""Immutable value types for workflows, tasks and launch plans.

Every type here is a frozen pydantic model: equality is structural and
identifiers are hashable, so they can key the closure mappings directly.
"""

from .identifiers import (
    LaunchPlanIdentifier,
    PartialLaunchPlanIdentifier,
    PartialWorkflowIdentifier,
    TaskIdentifier,
    WorkflowIdentifier,
)
from .struct import Struct, Value, ValueKind
from .templates import (
    Binding,
    LaunchPlan,
    LaunchPlanRef,
    Node,
    OutputReference,
    Reference,
    SubWorkflowRef,
    TaskMetadata,
    TaskNode,
    TaskTemplate,
    TypedInterface,
    Variable,
    WorkflowMetadata,
    WorkflowNode,
    WorkflowTemplate,
)

__all__ = [
    "Binding",
    "LaunchPlan",
    "LaunchPlanIdentifier",
    "LaunchPlanRef",
    "Node",
    "OutputReference",
    "PartialLaunchPlanIdentifier",
    "PartialWorkflowIdentifier",
    "Reference",
    "Struct",
    "SubWorkflowRef",
    "TaskIdentifier",
    "TaskMetadata",
    "TaskNode",
    "TaskTemplate",
    "TypedInterface",
    "Value",
    "ValueKind",
    "Variable",
    "WorkflowIdentifier",
    "WorkflowMetadata",
    "WorkflowNode",
    "WorkflowTemplate",
]
