"""Known assistant models and the install targets built from them."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

from ai_agents_skills.constant import SKILLS_SUBDIR
from ai_agents_skills.exception import TargetConfigError, UnknownModelError

from .models import InstallMode, InstallTarget

MODEL_DIRECTORIES: dict[str, str] = {
    "claude": ".claude",
    "github-copilot": ".github",
    "codex": ".codex",
    "gemini": ".gemini",
    "cursor": ".cursor",
}

MODEL_NAMES: dict[str, str] = {
    "claude": "Claude",
    "github-copilot": "GitHub Copilot",
    "codex": "Codex (OpenAI)",
    "gemini": "Gemini",
    "cursor": "Cursor",
}

MODEL_ALIASES: dict[str, str] = {
    "copilot": "github-copilot",
}


def normalize_model_id(model_id: str) -> str:
    normalized = model_id.strip().lower()
    return MODEL_ALIASES.get(normalized, normalized)


def display_name(model_id: str) -> str:
    return MODEL_NAMES.get(model_id, model_id)


def parse_model_list(value: str | Iterable[str] | None) -> list[str]:
    """Split a comma-separated model list (or several) into normalized ids, keeping order."""
    if value is None:
        return []
    raw = [value] if isinstance(value, str) else list(value)
    ids: list[str] = []
    for chunk in raw:
        for item in chunk.split(","):
            if item.strip():
                model_id = normalize_model_id(item)
                if model_id not in ids:
                    ids.append(model_id)
    return ids


def build_targets(
    model_ids: Iterable[str],
    project_root: Path,
    mode: InstallMode,
    models: Mapping[str, str] | None = None,
) -> list[InstallTarget]:
    """Build install targets for a project.

    Args:
        model_ids: Model ids (aliases allowed); repeated ids collapse to one target
        project_root: Directory the model directories live in
        mode: Installation mode for every target
        models: Extra or overriding model id -> directory mapping

    Raises:
        UnknownModelError: If a model id has no known directory
        TargetConfigError: If two different models resolve to the same root directory
    """
    directories = {**MODEL_DIRECTORIES, **(models or {})}
    project_root = project_root.resolve()
    targets: list[InstallTarget] = []
    roots: dict[Path, str] = {}

    for model_id in parse_model_list(list(model_ids)):
        directory = directories.get(model_id)
        if directory is None:
            known = ", ".join(sorted(directories))
            raise UnknownModelError(f"Unknown model '{model_id}'. Known models: {known}")
        root = (project_root / directory).resolve()
        if root in roots:
            raise TargetConfigError(
                f"Models '{roots[root]}' and '{model_id}' both install into {root}"
            )
        roots[root] = model_id
        targets.append(InstallTarget(model_id=model_id, root_directory=root, mode=mode))
    return targets


def detect_models(project_root: Path, models: Mapping[str, str] | None = None) -> list[str]:
    """Return the model ids that already have a skills directory in the project."""
    directories = {**MODEL_DIRECTORIES, **(models or {})}
    return [
        model_id
        for model_id, directory in directories.items()
        if (project_root / directory / SKILLS_SUBDIR).is_dir()
    ]
