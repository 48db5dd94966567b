"""Skill discovery and SKILL.md frontmatter normalization."""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

from loguru import logger

from ai_agents_skills.constant import SKILL_FILE_NAMES
from ai_agents_skills.exception import MalformedFrontmatter, SourceRootError

from .frontmatter import read_frontmatter
from .models import DiscoveryResult, FrontmatterLayout, NormalizedFrontmatter, ParseIssue, Skill

if TYPE_CHECKING:
    from loguru import Logger

SKILL_NAME_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

# Keys that moved from the top level into `metadata`, with their normalized field name.
VERSIONED_KEYS: dict[str, str] = {
    "version": "version",
    "skills": "skills",
    "dependencies": "dependencies",
    "allowed-tools": "allowed_tools",
}
_METADATA_ALIASES = {"allowed-tools": ("allowed_tools", "allowed-tools")}


def is_valid_skill_name(name: object) -> bool:
    """Check a skill name against the lowercase-with-hyphens convention."""
    return isinstance(name, str) and bool(SKILL_NAME_PATTERN.match(name))


def find_skill_md(skill_dir: Path) -> Path | None:
    """Find the definition document in a skill directory.

    Prefers SKILL.md (uppercase) but accepts skill.md (lowercase).
    """
    for name in SKILL_FILE_NAMES:
        path = skill_dir / name
        if path.is_file():
            return path
    return None


def normalize_frontmatter(raw: Mapping[str, Any]) -> NormalizedFrontmatter:
    """Map either frontmatter layout into one normalized shape.

    Values under `metadata` take precedence over deprecated top-level keys.
    """
    metadata_raw = raw.get("metadata")
    metadata: Mapping[str, Any] = (
        cast(Mapping[str, Any], metadata_raw) if isinstance(metadata_raw, Mapping) else {}
    )

    deprecated = tuple(key for key in VERSIONED_KEYS if key in raw)
    nested = [key for key in VERSIONED_KEYS if _metadata_value(metadata, key) is not None]
    if deprecated and nested:
        layout = FrontmatterLayout.MIXED
    elif deprecated:
        layout = FrontmatterLayout.LEGACY
    else:
        layout = FrontmatterLayout.CURRENT

    values: dict[str, Any] = {}
    for key, field in VERSIONED_KEYS.items():
        value = _metadata_value(metadata, key)
        if value is None:
            value = raw.get(key)
        values[field] = value

    return NormalizedFrontmatter(
        layout=layout,
        name=_as_str(raw.get("name")),
        description=_as_str(raw.get("description")),
        license=_as_str(raw.get("license")),
        version=_as_str(values["version"]),
        skills=_as_str_list(values["skills"]),
        dependencies=_as_str_mapping(values["dependencies"]),
        allowed_tools=_as_str_list(values["allowed_tools"]),
        deprecated_fields=deprecated,
    )


def parse_skill_dir(skill_dir: Path, *, default_name: str | None = None) -> Skill:
    """Parse a skill directory into a Skill record.

    The name falls back to `default_name`, then to the directory name, when the
    frontmatter has none.

    Raises:
        MalformedFrontmatter: If the definition document is missing or its
            frontmatter cannot be parsed
    """
    skill_md = find_skill_md(skill_dir)
    if skill_md is None:
        raise MalformedFrontmatter("SKILL.md not found", skill_dir)

    raw = read_frontmatter(skill_md)
    if raw is None:
        raise MalformedFrontmatter("SKILL.md must start with YAML frontmatter (---)", skill_md)

    normalized = normalize_frontmatter(raw)
    return Skill(
        name=normalized.name or default_name or skill_dir.name,
        path=skill_dir,
        description=normalized.description or "",
        version=normalized.version,
        license=normalized.license,
        skill_dependencies=frozenset(normalized.skills),
        package_dependencies=normalized.dependencies,
        allowed_tools=normalized.allowed_tools,
        layout=normalized.layout,
        deprecated_fields=normalized.deprecated_fields,
        frontmatter=raw,
    )


def discover_skills(source_root: Path, *, log: Logger = logger) -> DiscoveryResult:
    """Scan one level of subdirectories under a source root for skills.

    Directories without a definition document are skipped silently. A skill
    whose frontmatter cannot be parsed is still returned (flagged as malformed,
    with no dependencies) and reported in `issues`; it never aborts discovery.

    Raises:
        SourceRootError: If the source root does not exist or cannot be listed
    """
    source_root = Path(source_root)
    if not source_root.is_dir():
        raise SourceRootError(f"Skills source directory not found: {source_root}")
    source_root = source_root.resolve()
    try:
        entries = sorted(source_root.iterdir())
    except OSError as e:
        raise SourceRootError(f"Cannot read skills source directory {source_root}: {e}") from e

    result = DiscoveryResult(source_root=source_root)
    log.debug("Scanning for skills in: {dir}", dir=source_root)

    for entry in entries:
        if entry.name.startswith(".") or not entry.is_dir():
            continue
        if find_skill_md(entry) is None:
            log.debug("Skipping {path}: no SKILL.md", path=entry)
            continue

        # Installed links are compared against fully resolved paths.
        skill_dir = entry.resolve()

        try:
            skill = parse_skill_dir(skill_dir, default_name=entry.name)
        except MalformedFrontmatter as e:
            log.warning("Failed to parse skill in {path}: {error}", path=entry, error=e)
            result.issues.append(ParseIssue(path=entry, skill=entry.name, message=e.message))
            skill = Skill(
                name=entry.name, path=skill_dir, malformed=True, parse_error=e.message
            )

        if skill.name in result.skills:
            log.warning(
                "Duplicate skill '{name}' in {path}, skipping", name=skill.name, path=entry
            )
            result.issues.append(
                ParseIssue(
                    path=entry,
                    skill=skill.name,
                    message=f"duplicate skill name (already defined in "
                    f"{result.skills[skill.name].path.name})",
                )
            )
            continue

        if skill.layout is not FrontmatterLayout.CURRENT:
            log.warning(
                "Deprecated frontmatter layout in {name}: move top-level {fields} under metadata",
                name=skill.name,
                fields=", ".join(skill.deprecated_fields),
            )
        result.skills[skill.name] = skill

    log.info("Discovered {count} skills in {dir}", count=len(result.skills), dir=source_root)
    return result


def extract_version(skill_dir: Path) -> str | None:
    """Best-effort version lookup for a skill directory (source or installed copy)."""
    skill_md = find_skill_md(skill_dir)
    if skill_md is None:
        return None
    try:
        raw = read_frontmatter(skill_md)
    except MalformedFrontmatter:
        return None
    if raw is None:
        return None
    return normalize_frontmatter(raw).version


def _metadata_value(metadata: Mapping[str, Any], key: str) -> Any:
    for alias in _METADATA_ALIASES.get(key, (key,)):
        if metadata.get(alias) is not None:
            return metadata[alias]
    return None


def _as_str(value: object) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _as_str_list(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list | tuple):
        return ()
    items = cast(list[Any], value)
    return tuple(str(item).strip() for item in items if item)


def _as_str_mapping(value: object) -> dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    mapping = cast(Mapping[Any, Any], value)
    return {str(k): "" if v is None else str(v) for k, v in mapping.items()}
