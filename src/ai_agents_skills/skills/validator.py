"""Skill frontmatter validation."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from .models import Skill, ValidationReport, ValidationResult
from .parser import is_valid_skill_name
from .resolver import find_cycles

if TYPE_CHECKING:
    from ai_agents_skills.install.models import TargetSnapshot

TRIGGER_MARKER = "Trigger:"
VERSION_PATTERN = re.compile(r"^[0-9]+\.[0-9]+(\.[0-9]+)?$")
RECOMMENDED_DESCRIPTION_LENGTH = 150


def validate_skill(
    skill: Skill, catalog: Mapping[str, Skill], *, strict: bool = False
) -> ValidationResult:
    """Validate one skill's frontmatter against the schema rules.

    Args:
        skill: The parsed skill
        catalog: All discovered skills, used to check dependency references
        strict: Report deprecated top-level fields as errors instead of warnings

    Returns:
        ValidationResult; `valid` is False when any error was found
    """
    result = ValidationResult(skill=skill.name, path=skill.path)
    errors = result.errors
    warnings = result.warnings

    if skill.malformed:
        errors.append(f"Malformed frontmatter: {skill.parse_error}")
        return result

    raw = skill.frontmatter

    name = raw.get("name")
    if not name:
        errors.append("Missing required field: name")
    elif not is_valid_skill_name(name):
        errors.append(
            f"Invalid name '{name}': must be lowercase with hyphens only (e.g. \"my-skill-name\")"
        )
    elif name != skill.path.name:
        errors.append(f"Name '{name}' does not match directory name '{skill.path.name}'")

    description = raw.get("description")
    if not description or not isinstance(description, str):
        errors.append("Missing required field: description")
    else:
        if TRIGGER_MARKER not in description:
            errors.append(f'Description must include a "{TRIGGER_MARKER}" clause')
        if len(description) > RECOMMENDED_DESCRIPTION_LENGTH:
            warnings.append(
                f"Description is {len(description)} characters "
                f"(recommended: <{RECOMMENDED_DESCRIPTION_LENGTH})"
            )

    if skill.deprecated_fields:
        message = (
            f"Deprecated top-level fields: {', '.join(skill.deprecated_fields)}. "
            'Move them under "metadata"'
        )
        (errors if strict else warnings).append(message)

    if skill.version is None:
        warnings.append('Missing "metadata.version" field')
    elif not VERSION_PATTERN.match(skill.version):
        errors.append(f'Invalid version format: "{skill.version}". Use "1.0" or "1.0.0"')

    if not skill.license:
        warnings.append('Missing "license" field (recommended)')

    for dep in sorted(skill.skill_dependencies):
        if not is_valid_skill_name(dep):
            errors.append(
                f'Invalid skill name in dependencies: "{dep}". Use lowercase-with-hyphens'
            )
        elif dep not in catalog:
            errors.append(f"Dangling reference: skill '{dep}' not found")

    return result


def validate_catalog(
    catalog: Mapping[str, Skill],
    names: Iterable[str] | None = None,
    *,
    strict: bool = False,
) -> ValidationReport:
    """Validate every skill in the catalog, or only the named subset.

    Names not present in the catalog are reported as invalid results.
    """
    selected = sorted(catalog) if names is None else sorted(set(names))
    report = ValidationReport()
    for name in selected:
        skill = catalog.get(name)
        if skill is None:
            report.results.append(ValidationResult(skill=name, errors=[f"Skill not found: {name}"]))
            continue
        report.results.append(validate_skill(skill, catalog, strict=strict))

    for cycle in find_cycles({n: s for n, s in catalog.items() if not s.malformed}):
        if names is None or set(cycle) & set(selected):
            report.notes.append(f"Dependency cycle: {' -> '.join(cycle)}")
    return report


def validate_installed(
    snapshots: Iterable[TargetSnapshot], catalog: Mapping[str, Skill]
) -> ValidationReport:
    """Check installed skills against the source catalog.

    Dangling symlinks are errors; installed skills with no source and copies
    whose version differs from the source are warnings.
    """
    report = ValidationReport()
    for snapshot in snapshots:
        model_id = snapshot.target.model_id
        if snapshot.error is not None:
            report.results.append(
                ValidationResult(
                    skill=model_id, path=snapshot.target.skills_dir, errors=[snapshot.error]
                )
            )
            continue
        for name in snapshot.names:
            record = snapshot.records[name]
            result = ValidationResult(skill=f"{model_id}/{name}", path=record.install_path)
            source = catalog.get(name)
            if record.broken:
                result.errors.append(f"Dangling symlink to {record.link_target}")
            if source is None:
                result.warnings.append(f"Source not found for installed skill: {name}")
            elif not record.is_symlink and record.resolved_version != source.version:
                result.warnings.append(
                    f"Version mismatch: installed {record.resolved_version or 'unknown'}, "
                    f"current {source.version or 'unknown'}"
                )
            report.results.append(result)
    return report
