from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

from ai_agents_skills.constant import META_SKILLS
from ai_agents_skills.exception import ConfigError

CONFIG_FILE_NAME = ".ai-agents-skills.toml"
CONFIG_ENV_VAR = "AI_AGENTS_SKILLS_CONFIG"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    levels: dict[str, str] = Field(
        default_factory=dict, description="Per-module log levels, e.g. {'default': 'INFO'}"
    )


class Config(BaseModel):
    """Main configuration structure."""

    source_dir: str = Field(default="skills", description="Skills source directory")
    default_models: list[str] = Field(
        default_factory=lambda: ["claude"], description="Models used when --models is omitted"
    )
    models: dict[str, str] = Field(
        default_factory=dict, description="Extra model id -> directory mappings"
    )
    strict: bool = Field(default=False, description="Treat deprecated fields as errors")
    write_instructions: bool = Field(
        default=True, description="Regenerate instruction index files after changes"
    )
    meta_skills: list[str] = Field(
        default_factory=lambda: list(META_SKILLS),
        description="Skills always added to an install when present in the source tree",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("models")
    @classmethod
    def _normalize_model_ids(cls, value: dict[str, str]) -> dict[str, str]:
        normalized: dict[str, str] = {}
        for model_id, directory in value.items():
            if not directory.strip():
                raise ValueError(f"Directory for model '{model_id}' cannot be empty")
            normalized[model_id.strip().lower()] = directory.strip()
        return normalized


def get_default_config() -> Config:
    """Get the default configuration."""
    return Config()


def load_config_from_string(text: str) -> Config:
    """Parse configuration from TOML or JSON text.

    Raises:
        ConfigError: If the text is neither valid TOML nor JSON, or fails validation
    """
    if not text.strip():
        return get_default_config()
    try:
        data = json.loads(text) if text.lstrip().startswith("{") else tomllib.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Invalid configuration text: {e}") from e
    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def find_config_file(project_root: Path) -> Path | None:
    """Locate the config file: project file first, then the environment variable."""
    project_file = project_root / CONFIG_FILE_NAME
    if project_file.is_file():
        return project_file
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return None


def load_config(config_file: Path | None = None, *, project_root: Path | None = None) -> Config:
    """Load configuration from an explicit file, the project, or defaults.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    if config_file is None:
        config_file = find_config_file(project_root or Path.cwd())
    if config_file is None:
        return get_default_config()

    logger.debug("Loading config from {file}", file=config_file)
    try:
        text = config_file.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_file}: {e}") from e
    return load_config_from_string(text)
