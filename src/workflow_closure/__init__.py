"""Workflow closure.

Computes the deployable closure of workflow definitions:
- discovery of every transitively referenced sub-workflow, task and launch plan
- layering of default node configuration
- serialization into uniquely named artifacts
"""

__version__ = "0.1.0"

from workflow_closure.collector import collect_sub_workflow_closure, collect_sub_workflows
from workflow_closure.errors import (
    ClosureError,
    SerializationError,
    UniverseError,
    UnresolvedReferenceError,
)
from workflow_closure.merge import merge, merge_layers
from workflow_closure.project import ProjectClosure, build_project_closure
from workflow_closure.serializer import ArtifactKind, artifact_filename, serialize
from workflow_closure.universe import Universe, load_universe

__all__ = [
    "__version__",
    "ArtifactKind",
    "ClosureError",
    "ProjectClosure",
    "SerializationError",
    "Universe",
    "UniverseError",
    "UnresolvedReferenceError",
    "artifact_filename",
    "build_project_closure",
    "collect_sub_workflow_closure",
    "collect_sub_workflows",
    "load_universe",
    "merge",
    "merge_layers",
    "serialize",
]
