"""Deployment configuration models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DeploymentSpec(BaseModel):
    """A single deployment declared by a target.

    ``environment``, ``description`` and ``payload`` are templates rendered
    against the commit context at dispatch time.
    """

    model_config = ConfigDict(extra="allow")

    task: str = "deploy"
    environment: str = "production"
    description: str
    payload: Any = None
    auto_merge: bool = False


class Target(BaseModel):
    """A named deployment policy."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    auto_deploy_on: str | None = None
    required_contexts: list[str] = Field(default_factory=list)
    transient_environment: bool = False
    production_environment: bool = False
    deployments: list[DeploymentSpec] = Field(default_factory=list)

    @field_validator("deployments", mode="before")
    @classmethod
    def _default_deployments(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def auto_deploy_ref(self) -> str | None:
        """Auto-deploy ref with any ``refs/`` prefix stripped."""
        if not self.auto_deploy_on:
            return None
        ref = self.auto_deploy_on
        if ref.startswith("refs/"):
            ref = ref[len("refs/") :]
        return ref


class LookupStatus(str, Enum):
    """Outcome of looking a target up by name."""

    FOUND = "found"
    MISSING = "missing"
    EMPTY = "empty"


@dataclass(frozen=True)
class TargetLookup:
    status: LookupStatus
    name: str
    target: Target | None = None


class Targets:
    """Ordered mapping of target name to target, in document order."""

    def __init__(self, targets: dict[str, Target] | None = None):
        self._targets: dict[str, Target] = dict(targets or {})

    def lookup(self, name: str) -> TargetLookup:
        """Find a target, distinguishing absent from present-but-empty."""
        target = self._targets.get(name)
        if target is None:
            return TargetLookup(LookupStatus.MISSING, name)
        if not target.deployments:
            return TargetLookup(LookupStatus.EMPTY, name, target)
        return TargetLookup(LookupStatus.FOUND, name, target)

    def auto_deploy_targets(self) -> list[Target]:
        return [t for t in self._targets.values() if t.auto_deploy_on]

    def names(self) -> list[str]:
        return list(self._targets)

    def __getitem__(self, name: str) -> Target:
        return self._targets[name]

    def __contains__(self, name: object) -> bool:
        return name in self._targets

    def __iter__(self) -> Iterator[Target]:
        return iter(self._targets.values())

    def __len__(self) -> int:
        return len(self._targets)
