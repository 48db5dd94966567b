from __future__ import annotations

import importlib.metadata

NAME = importlib.metadata.metadata("ai-agents-skills")["Name"]
VERSION = importlib.metadata.version("ai-agents-skills")

SKILL_FILE_NAMES = ("SKILL.md", "skill.md")
SKILLS_SUBDIR = "skills"

# Skills added to every install request unless --no-meta is given.
META_SKILLS = (
    "conventions",
    "a11y",
    "architecture-patterns",
    "english-writing",
    "critical-partner",
)
