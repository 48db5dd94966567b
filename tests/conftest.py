from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import pytest
from loguru import logger

WriteSkill = Callable[..., Path]


def write_skill(
    root: Path,
    name: str,
    *,
    description: str | None = None,
    version: str | None = "1.0.0",
    skills: Sequence[str] = (),
    license: str | None = "MIT",
    legacy: bool = False,
    frontmatter: str | None = None,
    directory: str | None = None,
) -> Path:
    """Create `<root>/<directory or name>/SKILL.md` and return the skill directory."""
    skill_dir = root / (directory or name)
    skill_dir.mkdir(parents=True, exist_ok=True)
    if frontmatter is None:
        lines = [f"name: {name}"]
        text = description if description is not None else f"Helps with {name}. Trigger: {name}"
        lines.append(f'description: "{text}"')
        if license:
            lines.append(f"license: {license}")
        versioned: list[str] = []
        if version is not None:
            versioned.append(f'version: "{version}"')
        if skills:
            versioned.append("skills:")
            versioned.extend(f"  - {dep}" for dep in skills)
        if legacy:
            lines.extend(versioned)
        elif versioned:
            lines.append("metadata:")
            lines.extend(f"  {line}" for line in versioned)
        frontmatter = "\n".join(lines)
    (skill_dir / "SKILL.md").write_text(f"---\n{frontmatter}\n---\n\n# {name}\n", encoding="utf-8")
    return skill_dir


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    root = tmp_path / "project" / "skills"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def make_skill(source_root: Path) -> WriteSkill:
    def _make(name: str, **kwargs: object) -> Path:
        return write_skill(source_root, name, **kwargs)  # type: ignore[arg-type]

    return _make


@pytest.fixture(autouse=True)
def _reset_logger() -> Iterator[None]:
    yield
    logger.remove()
    logger.disable("ai_agents_skills")
