"""Per-model instruction index listing the skills installed in a target."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from loguru import logger
from pydantic import BaseModel

from ai_agents_skills.exception import MalformedFrontmatter
from ai_agents_skills.install.models import InstallTarget
from ai_agents_skills.install.scanner import scan_target
from ai_agents_skills.skills.frontmatter import read_frontmatter
from ai_agents_skills.skills.parser import find_skill_md, normalize_frontmatter

if TYPE_CHECKING:
    from loguru import Logger

INSTRUCTION_FILES: dict[str, str] = {
    "github-copilot": "copilot-instructions.md",
}
DEFAULT_INSTRUCTION_FILE = "instructions.md"

HEADERS: dict[str, str] = {
    "github-copilot": "# GitHub Copilot Instructions",
    "claude": "# Claude Skills",
    "cursor": "# Cursor Instructions",
}


class InstalledSkillInfo(BaseModel):
    name: str
    description: str
    dependencies: list[str]


def instruction_file_name(model_id: str) -> str:
    return INSTRUCTION_FILES.get(model_id, DEFAULT_INSTRUCTION_FILE)


def read_installed_skills(
    target: InstallTarget, *, log: Logger = logger
) -> list[InstalledSkillInfo]:
    """Read name, description and dependencies of every readable installed skill."""
    skills: list[InstalledSkillInfo] = []
    for name, record in sorted(scan_target(target, log=log).records.items()):
        if record.broken:
            continue
        skill_md = find_skill_md(record.install_path)
        if skill_md is None:
            continue
        try:
            raw = read_frontmatter(skill_md)
        except MalformedFrontmatter as e:
            log.warning("Could not read frontmatter for {name}: {error}", name=name, error=e)
            continue
        if raw is None:
            log.warning("No frontmatter found for {name}", name=name)
            continue
        normalized = normalize_frontmatter(raw)
        skills.append(
            InstalledSkillInfo(
                name=normalized.name or name,
                description=normalized.description or "",
                dependencies=list(normalized.skills),
            )
        )
    return skills


def render_instructions(
    model_id: str, skills: list[InstalledSkillInfo], *, today: date | None = None
) -> str:
    header = HEADERS.get(model_id, f"# {model_id.capitalize()} Instructions")
    lines = [header, "", f"## Installed Skills ({len(skills)})", ""]
    lines.append(
        "Before making changes, read the relevant skill documentation from `./skills/`:"
    )
    lines.append("")

    for skill in skills:
        lines.extend([f"### {skill.name}", ""])
        if skill.description:
            lines.extend([skill.description, ""])
        if skill.dependencies:
            lines.extend([f"**Dependencies:** {', '.join(skill.dependencies)}", ""])
        lines.extend([f"**Location:** `./skills/{skill.name}/SKILL.md`", ""])

    lines.extend(
        [
            "---",
            "",
            "## Managing Skills",
            "",
            "```bash",
            f"ai-agents-skills install <source> --skills <name> --models {model_id}",
            f"ai-agents-skills remove --skills <name> --models {model_id}",
            "ai-agents-skills list",
            "```",
            "",
            f"*Last updated: {(today or date.today()).isoformat()}*",
            "",
        ]
    )
    return "\n".join(lines)


def regenerate_instructions(
    target: InstallTarget, *, dry_run: bool = False, log: Logger = logger
) -> bool:
    """Rewrite the target's instruction index. Returns False when nothing was written."""
    skills = read_installed_skills(target, log=log)
    if not skills:
        log.debug("[{model}] No installed skills, instructions untouched", model=target.model_id)
        return False

    path = target.root_directory / instruction_file_name(target.model_id)
    if dry_run:
        log.info("[DRY RUN] Would write {path}", path=path)
        return True
    try:
        path.write_text(render_instructions(target.model_id, skills), encoding="utf-8")
    except OSError as e:
        log.error("Failed to write {path}: {error}", path=path, error=e)
        return False
    log.debug("Wrote {path} ({count} skills)", path=path, count=len(skills))
    return True
