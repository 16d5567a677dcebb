"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from workflow_closure.model import TypedInterface, WorkflowMetadata, WorkflowTemplate

CLOSURE_ENV_VARS = (
    "LOG_LEVEL",
    "CLOSURE_STRICT_REFERENCES",
    "CLOSURE_DEFAULT_PROJECT",
    "CLOSURE_DEFAULT_DOMAIN",
    "CLOSURE_DEFAULT_VERSION",
    "CLOSURE_MAX_PAYLOAD_BYTES",
    "CLOSURE_OUTPUT_DIR",
)


@pytest.fixture
def empty_workflow() -> WorkflowTemplate:
    """A workflow with an empty interface, no nodes and no outputs."""
    return WorkflowTemplate(
        interface=TypedInterface(inputs={}, outputs={}),
        metadata=WorkflowMetadata(),
        nodes=(),
        outputs=(),
    )


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty directory with no closure settings in the environment."""
    for var in CLOSURE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Undo `configure_logging` calls made by a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
