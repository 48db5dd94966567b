"""Skill discovery, dependency resolution and validation.

A skill is a directory holding a SKILL.md document whose YAML frontmatter
declares its name, description and (under `metadata`) its version and the
other skills it depends on.
"""

from __future__ import annotations

from ai_agents_skills.skills.frontmatter import extract_frontmatter, split_frontmatter
from ai_agents_skills.skills.models import (
    DiscoveryResult,
    FrontmatterLayout,
    MissingDependency,
    Resolution,
    Skill,
    ValidationReport,
    ValidationResult,
)
from ai_agents_skills.skills.parser import discover_skills, parse_skill_dir
from ai_agents_skills.skills.resolver import dependents_of, find_cycles, resolve
from ai_agents_skills.skills.validator import validate_catalog, validate_installed, validate_skill

__all__ = [
    # Models
    "DiscoveryResult",
    "FrontmatterLayout",
    "MissingDependency",
    "Resolution",
    "Skill",
    "ValidationReport",
    "ValidationResult",
    # Frontmatter
    "extract_frontmatter",
    "split_frontmatter",
    # Parser
    "discover_skills",
    "parse_skill_dir",
    # Resolver
    "dependents_of",
    "find_cycles",
    "resolve",
    # Validator
    "validate_catalog",
    "validate_installed",
    "validate_skill",
]
