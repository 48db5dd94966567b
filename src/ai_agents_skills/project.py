"""Project root detection and the AGENTS.md skill list."""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from ai_agents_skills.config import CONFIG_FILE_NAME

if TYPE_CHECKING:
    from loguru import Logger

PROJECT_MARKERS = ("package.json", ".git", CONFIG_FILE_NAME)
AGENTS_MD_NAMES = ("AGENTS.md", "agents.md")
AVAILABLE_SKILLS_HEADING = "## Available Skills"

_SKILL_LINK = re.compile(r"\[([a-z0-9-]+)\]\((?:\./)?skills/[^)]+\)")
_SECTION_HEADING = re.compile(r"^#{1,2} ", re.MULTILINE)


def detect_project_root(start: Path | None = None, *, log: Logger = logger) -> Path:
    """Walk up from `start` to the nearest directory holding a project marker.

    Falls back to `start` itself when no ancestor has one.
    """
    start = (start or Path.cwd()).absolute()
    for candidate in (start, *start.parents):
        for marker in PROJECT_MARKERS:
            if (candidate / marker).exists():
                log.debug("Project root {root} (found {marker})", root=candidate, marker=marker)
                return candidate
    log.debug("No project marker above {start}, using it as the project root", start=start)
    return start


def find_agents_md(directory: Path) -> Path | None:
    for name in AGENTS_MD_NAMES:
        path = directory / name
        if path.is_file():
            return path
    return None


def parse_available_skills(text: str) -> list[str] | None:
    """Extract skill names linked from the "Available Skills" section.

    Only links into `skills/` count, e.g. `[pdf](skills/pdf/SKILL.md)`.
    Returns None when the section is absent.
    """
    start = text.find(AVAILABLE_SKILLS_HEADING)
    if start < 0:
        return None
    body = text[start + len(AVAILABLE_SKILLS_HEADING) :]
    next_section = _SECTION_HEADING.search(body)
    if next_section is not None:
        body = body[: next_section.start()]

    names: list[str] = []
    for name in _SKILL_LINK.findall(body):
        if name not in names:
            names.append(name)
    return names


def read_agents_skills(directory: Path, *, log: Logger = logger) -> list[str] | None:
    """Skill names requested by the AGENTS.md in `directory`, or None without one."""
    path = find_agents_md(directory)
    if path is None:
        log.debug("No AGENTS.md in {dir}", dir=directory)
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        log.warning("Cannot read {path}: {error}", path=path, error=e)
        return None

    names = parse_available_skills(text)
    if names is None:
        log.warning('No "Available Skills" section found in {path}', path=path)
        return None
    log.info("Found {count} skills in {path}", count=len(names), path=path)
    return names
