"""The universe of known workflows, tasks and launch plans.

A universe document is JSON of the form:

    {
      "workflows":    [{"id": {...}, "template": {...}}],
      "tasks":        [{"id": {...}, "template": {...}}],
      "launch_plans": [{"id": {...}, "launch_plan": {...}}]
    }

Each `id` is a full `{project, domain, name, version}` identifier.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TypeVar

from pydantic import BaseModel, Field, ValidationError

from .errors import UniverseError
from .model import (
    LaunchPlan,
    LaunchPlanIdentifier,
    TaskIdentifier,
    TaskTemplate,
    WorkflowIdentifier,
    WorkflowTemplate,
)

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


def _frozen_mapping(entries: Mapping[K, V]) -> Mapping[K, V]:
    return MappingProxyType(dict(entries))


@dataclass(frozen=True, slots=True)
class Universe:
    """Every definition a closure may draw from, keyed by full identifier."""

    workflows: Mapping[WorkflowIdentifier, WorkflowTemplate] = field(default_factory=dict)
    tasks: Mapping[TaskIdentifier, TaskTemplate] = field(default_factory=dict)
    launch_plans: Mapping[LaunchPlanIdentifier, LaunchPlan] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "workflows", _frozen_mapping(self.workflows))
        object.__setattr__(self, "tasks", _frozen_mapping(self.tasks))
        object.__setattr__(self, "launch_plans", _frozen_mapping(self.launch_plans))


class WorkflowEntry(BaseModel):
    id: WorkflowIdentifier
    template: WorkflowTemplate


class TaskEntry(BaseModel):
    id: TaskIdentifier
    template: TaskTemplate


class LaunchPlanEntry(BaseModel):
    id: LaunchPlanIdentifier
    launch_plan: LaunchPlan


class UniverseDocument(BaseModel):
    workflows: list[WorkflowEntry] = Field(default_factory=list)
    tasks: list[TaskEntry] = Field(default_factory=list)
    launch_plans: list[LaunchPlanEntry] = Field(default_factory=list)


def _index(kind: str, pairs: Iterable[tuple[K, V]]) -> dict[K, V]:
    out: dict[K, V] = {}
    for key, value in pairs:
        if key in out:
            raise UniverseError(f"Duplicate {kind} identifier: {key}")
        out[key] = value
    return out


def universe_from_document(document: UniverseDocument) -> Universe:
    """Index a validated document; duplicate identifiers are rejected."""

    return Universe(
        workflows=_index("workflow", ((e.id, e.template) for e in document.workflows)),
        tasks=_index("task", ((e.id, e.template) for e in document.tasks)),
        launch_plans=_index(
            "launch plan", ((e.id, e.launch_plan) for e in document.launch_plans)
        ),
    )


def parse_universe(raw: object) -> Universe:
    try:
        document = UniverseDocument.model_validate(raw)
    except ValidationError as e:
        raise UniverseError(f"Invalid universe document:\n{e}") from e
    return universe_from_document(document)


def load_universe(path: Path) -> Universe:
    """Load and validate a universe document from a JSON file."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise UniverseError(f"Cannot read universe file {path}: {e}") from e

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise UniverseError(f"Universe file is not valid JSON: {path}: {e}") from e

    universe = parse_universe(raw)
    logger.info(
        "Universe loaded",
        extra={
            "path": str(path),
            "workflows": len(universe.workflows),
            "tasks": len(universe.tasks),
            "launch_plans": len(universe.launch_plans),
        },
    )
    return universe
