from __future__ import annotations

from pathlib import Path


class AgentSkillsError(Exception):
    """Base exception class for ai-agents-skills."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class MalformedFrontmatter(AgentSkillsError, ValueError):
    """Frontmatter delimiters are present but the enclosed block is not a YAML mapping."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path is not None else message)


class SourceRootError(AgentSkillsError, FileNotFoundError):
    """The skills source root is missing or unreadable."""

    pass


class ConfigError(AgentSkillsError, ValueError):
    """Configuration error."""

    pass


class UnknownModelError(AgentSkillsError, ValueError):
    """A model id has no known installation directory."""

    pass


class TargetConfigError(AgentSkillsError, ValueError):
    """Two install targets resolve to the same root directory."""

    pass


class TargetUnavailable(AgentSkillsError, OSError):
    """A target root cannot be read or created."""

    pass


class FilesystemOperationFailed(AgentSkillsError, OSError):
    """A copy, symlink or remove operation raised an OS-level error."""

    def __init__(self, operation: str, path: Path, reason: str):
        self.operation = operation
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to {operation} {path}: {reason}")
