from __future__ import annotations

import sys
from collections.abc import Mapping
from typing import IO, TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record
else:  # pragma: no cover - runtime fallback for typing-only import
    Logger = Any
    Record = dict[str, Any]  # type: ignore[assignment]

PACKAGE = "ai_agents_skills"
DEFAULT_LEVEL_KEY = "default"
STDERR_FORMAT = "<level>{level: <8}</level> <dim>{extra[component]}</dim> {message}"

logger.remove()
logger.configure(extra={"component": "-"})


def configure_logging(
    *,
    base_level: str,
    module_levels: Mapping[str, str] | None = None,
    sink: IO[str] | None = None,
) -> None:
    """Route package logs to stderr (or `sink`) with per-module thresholds.

    Keys of `module_levels` are dotted module prefixes such as
    `ai_agents_skills.install`, bare component names such as `scanner`, or
    `default`.
    """
    levels = LevelFilter.from_names(base_level, module_levels or {})
    logger.remove()
    logger.add(
        sink or sys.stderr,
        level="TRACE",  # the filter owns thresholds
        format=STDERR_FORMAT,
        filter=levels,
        colorize=None,
    )
    logger.enable(PACKAGE)
    logger.debug(
        "Log levels: default={default} overrides={overrides}",
        default=levels.default,
        overrides=levels.overrides,
    )


def get_logger(component: str) -> Logger:
    """Return a logger bound to a component name, to be passed into that component."""
    return logger.bind(component=component)


def parse_level(name: str) -> int:
    """Map a level name (any case) or a numeric string to a loguru severity."""
    text = name.strip()
    if text.isdigit():
        return int(text)
    try:
        return logger.level(text.upper()).no
    except ValueError as exc:
        raise ValueError(f"Invalid log level '{name}'") from exc


class LevelFilter:
    """Loguru filter choosing a threshold per record.

    A component override wins over a module override; module overrides match
    the longest dotted prefix of the emitting module's name.
    """

    def __init__(self, default: int, overrides: Mapping[str, int] | None = None) -> None:
        self.default = default
        self.overrides = dict(overrides or {})

    @classmethod
    def from_names(cls, base_level: str, levels: Mapping[str, str]) -> LevelFilter:
        default = parse_level(base_level)
        overrides: dict[str, int] = {}
        for key, level in levels.items():
            key = key.strip().rstrip(".").lower()
            if not key or key == DEFAULT_LEVEL_KEY:
                default = parse_level(level)
            else:
                overrides[key] = parse_level(level)
        return cls(default, overrides)

    def threshold(self, module: str | None, component: str | None = None) -> int:
        if component and component.lower() in self.overrides:
            return self.overrides[component.lower()]
        name = (module or "").lower()
        while name:
            if name in self.overrides:
                return self.overrides[name]
            name = name.rpartition(".")[0]
        return self.default

    def __call__(self, record: Record) -> bool:
        component = record["extra"].get("component")
        return record["level"].no >= self.threshold(record["name"], component)
