"""Compound identifiers used as mapping keys.

Full identifiers are frozen models, so equality and hashing are structural.
Identifiers of different kinds never compare equal, even with identical
fields.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class _Identifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    project: str
    domain: str
    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.project}:{self.domain}:{self.name}:{self.version}"


class WorkflowIdentifier(_Identifier):
    pass


class TaskIdentifier(_Identifier):
    pass


class LaunchPlanIdentifier(_Identifier):
    pass


class _PartialIdentifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    project: str | None = None
    domain: str | None = None
    name: str | None = None
    version: str | None = None

    def __str__(self) -> str:
        parts = (self.project, self.domain, self.name, self.version)
        return ":".join(part if part is not None else "?" for part in parts)

    @property
    def is_complete(self) -> bool:
        return None not in (self.project, self.domain, self.name, self.version)


class PartialWorkflowIdentifier(_PartialIdentifier):
    """A workflow reference whose fields may be filled in at resolution time."""


class PartialLaunchPlanIdentifier(_PartialIdentifier):
    """A launch plan reference whose fields may be filled in at resolution time."""
