from __future__ import annotations

from pathlib import Path

import pytest
from inline_snapshot import snapshot

from ai_agents_skills.config import (
    CONFIG_ENV_VAR,
    Config,
    LoggingConfig,
    get_default_config,
    load_config,
    load_config_from_string,
)
from ai_agents_skills.exception import ConfigError


def test_default_config():
    config = get_default_config()
    assert config == snapshot(
        Config(
            source_dir="skills",
            default_models=["claude"],
            models={},
            strict=False,
            write_instructions=True,
            meta_skills=[
                "conventions",
                "a11y",
                "architecture-patterns",
                "english-writing",
                "critical-partner",
            ],
            logging=LoggingConfig(levels={}),
        )
    )


def test_default_config_dump():
    config = get_default_config()
    assert config.model_dump() == snapshot(
        {
            "source_dir": "skills",
            "default_models": ["claude"],
            "models": {},
            "strict": False,
            "write_instructions": True,
            "meta_skills": [
                "conventions",
                "a11y",
                "architecture-patterns",
                "english-writing",
                "critical-partner",
            ],
            "logging": {"levels": {}},
        }
    )


def test_load_config_text_toml():
    config = load_config_from_string(
        """
source_dir = "agent-skills"
default_models = ["claude", "copilot"]
strict = true
meta_skills = []

[models]
Aider = ".aider"

[logging.levels]
"ai_agents_skills.install" = "DEBUG"
"""
    )
    assert config.source_dir == "agent-skills"
    assert config.default_models == ["claude", "copilot"]
    assert config.strict
    assert config.models == {"aider": ".aider"}
    assert config.meta_skills == []
    assert config.logging.levels == {"ai_agents_skills.install": "DEBUG"}


def test_load_config_text_json():
    config = load_config_from_string('{"source_dir": "skills"}')
    assert config == get_default_config()


def test_load_config_empty_text():
    assert load_config_from_string("  \n") == get_default_config()


def test_load_config_text_invalid():
    with pytest.raises(ConfigError, match="Invalid configuration text"):
        load_config_from_string("not valid {")


def test_load_config_invalid_values():
    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_config_from_string('models = { claude = "  " }')


class TestLoadConfig:
    def test_defaults_without_files(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert load_config(project_root=tmp_path) == get_default_config()

    def test_project_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        (tmp_path / ".ai-agents-skills.toml").write_text('source_dir = "custom"\n')
        assert load_config(project_root=tmp_path).source_dir == "custom"

    def test_env_var_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        env_file = tmp_path / "global.json"
        env_file.write_text('{"strict": true}')
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_file))
        project = tmp_path / "project"
        project.mkdir()
        assert load_config(project_root=project).strict

    def test_project_file_wins_over_env_var(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        env_file = tmp_path / "global.toml"
        env_file.write_text('source_dir = "from-env"\n')
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_file))
        (tmp_path / ".ai-agents-skills.toml").write_text('source_dir = "from-project"\n')
        assert load_config(project_root=tmp_path).source_dir == "from-project"

    def test_explicit_file_wins(self, tmp_path: Path):
        (tmp_path / ".ai-agents-skills.toml").write_text('source_dir = "from-project"\n')
        explicit = tmp_path / "explicit.toml"
        explicit.write_text('source_dir = "explicit"\n')
        assert load_config(explicit, project_root=tmp_path).source_dir == "explicit"

    def test_unreadable_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Cannot read config file"):
            load_config(tmp_path / "missing.toml")
