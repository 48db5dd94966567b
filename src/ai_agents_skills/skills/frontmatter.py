"""YAML frontmatter extraction for skill definition documents."""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

import yaml

from ai_agents_skills.exception import MalformedFrontmatter

DELIMITER = "---"


def split_frontmatter(content: str) -> tuple[dict[str, Any] | None, str]:
    """Split a markdown document into its frontmatter mapping and body.

    Args:
        content: Raw document text

    Returns:
        Tuple of (frontmatter dict or None when the document has none, markdown body)

    Raises:
        MalformedFrontmatter: If the block is unclosed, invalid YAML, or not a mapping
    """
    text = content.removeprefix("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != DELIMITER:
        return None, text

    for idx in range(1, len(lines)):
        if lines[idx].rstrip() == DELIMITER:
            block = "".join(lines[1:idx])
            body = "".join(lines[idx + 1 :])
            break
    else:
        raise MalformedFrontmatter("frontmatter not properly closed with ---")

    try:
        raw: Any = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise MalformedFrontmatter(f"Invalid YAML in frontmatter: {e}") from e

    if raw is None:
        return {}, body.strip()
    if not isinstance(raw, dict):
        raise MalformedFrontmatter("frontmatter must be a YAML mapping")

    return cast(dict[str, Any], raw), body.strip()


def extract_frontmatter(content: str) -> dict[str, Any] | None:
    """Return the parsed frontmatter of a document, or None if it has none."""
    frontmatter, _ = split_frontmatter(content)
    return frontmatter


def read_frontmatter(path: Path) -> dict[str, Any] | None:
    """Read a file and extract its frontmatter, tagging errors with the file path."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedFrontmatter(f"cannot read file: {e}", path) from e
    try:
        return extract_frontmatter(content)
    except MalformedFrontmatter as e:
        raise MalformedFrontmatter(e.message, path) from e
