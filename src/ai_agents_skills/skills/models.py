"""Data models for skill discovery, resolution and validation."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FrontmatterLayout(str, Enum):
    """Which frontmatter schema a definition document was written against."""

    CURRENT = "current"
    """Versioned fields nested under `metadata`."""
    LEGACY = "legacy"
    """Versioned fields at the top level (deprecated)."""
    MIXED = "mixed"
    """Both layouts present; `metadata` wins."""


class NormalizedFrontmatter(BaseModel):
    """Frontmatter mapped into a single shape regardless of the layout it was written in."""

    model_config = ConfigDict(frozen=True)

    layout: FrontmatterLayout = FrontmatterLayout.CURRENT
    name: str | None = None
    description: str | None = None
    license: str | None = None
    version: str | None = None
    skills: tuple[str, ...] = ()
    dependencies: dict[str, str] = Field(default_factory=dict)
    allowed_tools: tuple[str, ...] = ()
    deprecated_fields: tuple[str, ...] = Field(
        default=(), description="Top-level keys that belong under `metadata`"
    )


class Skill(BaseModel):
    """A named, versioned unit of instructional content discovered in a source tree.

    Built once per discovery pass and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Skill name (lowercase-with-hyphens)")
    path: Path = Field(description="Path to the skill directory")
    description: str = ""
    version: str | None = None
    license: str | None = None
    skill_dependencies: frozenset[str] = Field(
        default_factory=frozenset, description="Names of other skills this one references"
    )
    package_dependencies: dict[str, str] = Field(
        default_factory=dict, description="External package name -> version range (opaque)"
    )
    allowed_tools: tuple[str, ...] = ()
    layout: FrontmatterLayout = FrontmatterLayout.CURRENT
    deprecated_fields: tuple[str, ...] = ()
    malformed: bool = Field(default=False, description="Frontmatter could not be parsed")
    parse_error: str | None = None
    frontmatter: dict[str, Any] = Field(default_factory=dict, description="Raw frontmatter")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "description": self.description,
            "version": self.version,
            "license": self.license,
            "skills": sorted(self.skill_dependencies),
            "dependencies": dict(self.package_dependencies),
            "allowed_tools": list(self.allowed_tools),
        }


class ParseIssue(BaseModel):
    """A per-skill problem found during discovery."""

    model_config = ConfigDict(frozen=True)

    path: Path
    message: str
    skill: str | None = None

    def __str__(self) -> str:
        return f"{self.skill or self.path.name}: {self.message}"


class DiscoveryResult(BaseModel):
    """Skills found under a source root, plus the issues collected on the way."""

    source_root: Path
    skills: dict[str, Skill] = Field(default_factory=dict)
    issues: list[ParseIssue] = Field(default_factory=list)

    def get(self, name: str) -> Skill | None:
        return self.skills.get(name)

    @property
    def names(self) -> list[str]:
        return sorted(self.skills)


class MissingDependency(BaseModel):
    """A referenced skill name that does not resolve within the catalog."""

    model_config = ConfigDict(frozen=True)

    skill: str | None = Field(description="Skill declaring the reference, None if requested")
    reference: str

    def __str__(self) -> str:
        if self.skill is None:
            return f"Requested skill not found: {self.reference}"
        return f"{self.skill} -> {self.reference} (not found)"


class Resolution(BaseModel):
    """Transitive dependency closure of a requested set of skills."""

    requested: frozenset[str]
    closure: frozenset[str] = Field(default_factory=frozenset)
    missing: list[MissingDependency] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing


class ValidationResult(BaseModel):
    """Validation outcome for a single skill."""

    skill: str
    path: Path | None = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


class ValidationReport(BaseModel):
    """Aggregated validation outcome across a catalog."""

    results: list[ValidationResult] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list, description="Informational findings")

    @property
    def valid(self) -> bool:
        return all(result.valid for result in self.results)

    @property
    def error_count(self) -> int:
        return sum(len(result.errors) for result in self.results)

    @property
    def warning_count(self) -> int:
        return sum(len(result.warnings) for result in self.results)

    @property
    def invalid(self) -> list[ValidationResult]:
        return [result for result in self.results if not result.valid]
