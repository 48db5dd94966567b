"""Data models for install targets, scanned state, plans and apply reports."""

from __future__ import annotations

from collections import Counter
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ai_agents_skills.constant import SKILLS_SUBDIR


class InstallMode(str, Enum):
    """How a skill is materialized in a target."""

    SYMLINK = "symlink"
    """Local installation: a link back to the source skill directory."""
    COPY = "copy"
    """External installation: a full recursive copy."""


class InstallTarget(BaseModel):
    """One assistant/model destination."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str = Field(description="Symbolic model name, e.g. claude")
    root_directory: Path = Field(description="Absolute path holding a skills/ subdirectory")
    mode: InstallMode = InstallMode.SYMLINK

    @property
    def skills_dir(self) -> Path:
        return self.root_directory / SKILLS_SUBDIR

    def skill_path(self, name: str) -> Path:
        return self.skills_dir / name


class InstalledSkillRecord(BaseModel):
    """Observed state of one entry under a target's skills directory."""

    model_config = ConfigDict(frozen=True)

    name: str
    install_path: Path
    is_symlink: bool
    link_target: Path | None = Field(
        default=None, description="Absolute path the symlink points at"
    )
    broken: bool = Field(default=False, description="Symlink whose destination is missing")
    resolved_version: str | None = None


class TargetSnapshot(BaseModel):
    """Everything the scanner saw for one target at one point in time."""

    target: InstallTarget
    records: dict[str, InstalledSkillRecord] = Field(default_factory=dict)
    error: str | None = Field(default=None, description="Target-level scan failure")

    @property
    def names(self) -> list[str]:
        return sorted(self.records)


class PlanAction(str, Enum):
    CREATE = "create"
    RELINK = "relink"
    UPDATE = "update"
    SKIP = "skip"
    REMOVE = "remove"


class PlanEntry(BaseModel):
    """One action for one (target, skill) pair."""

    model_config = ConfigDict(frozen=True)

    target: InstallTarget
    skill: str
    action: PlanAction
    source_path: Path | None = Field(default=None, description="None for removals")
    reason: str = ""

    @property
    def install_path(self) -> Path:
        return self.target.skill_path(self.skill)


class InstallationPlan(BaseModel):
    """The computed diff between desired and observed state."""

    entries: list[PlanEntry] = Field(default_factory=list)
    target_errors: dict[str, str] = Field(
        default_factory=dict, description="model id -> reason the target was skipped"
    )

    @property
    def changes(self) -> list[PlanEntry]:
        return [entry for entry in self.entries if entry.action is not PlanAction.SKIP]

    @property
    def is_noop(self) -> bool:
        return not self.changes

    def for_target(self, model_id: str) -> list[PlanEntry]:
        return [entry for entry in self.entries if entry.target.model_id == model_id]

    def counts(self) -> Counter[PlanAction]:
        return Counter(entry.action for entry in self.entries)


class OperationFailure(BaseModel):
    """A filesystem operation that failed while applying one plan entry."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    skill: str
    action: PlanAction
    message: str

    def __str__(self) -> str:
        return f"[{self.model_id}] {self.action.value} {self.skill}: {self.message}"


class TargetSummary(BaseModel):
    """Per-target outcome counts."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    created: int = 0
    updated: int = 0
    relinked: int = 0
    removed: int = 0
    skipped: int = 0
    failed: int = 0

    def record(self, action: PlanAction) -> None:
        match action:
            case PlanAction.CREATE:
                self.created += 1
            case PlanAction.UPDATE:
                self.updated += 1
            case PlanAction.RELINK:
                self.relinked += 1
            case PlanAction.REMOVE:
                self.removed += 1
            case PlanAction.SKIP:
                self.skipped += 1


class ApplyReport(BaseModel):
    """Result of applying (or dry-running) an installation plan."""

    dry_run: bool = False
    targets: dict[str, TargetSummary] = Field(default_factory=dict)
    failures: list[OperationFailure] = Field(default_factory=list)
    target_errors: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.target_errors

    def summary_for(self, model_id: str) -> TargetSummary:
        if model_id not in self.targets:
            self.targets[model_id] = TargetSummary(model_id=model_id)
        return self.targets[model_id]
