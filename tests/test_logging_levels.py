"""Tests for per-module and per-component log thresholds."""

from __future__ import annotations

import io
from collections.abc import Iterator
from pathlib import Path

import click
import pytest
from conftest import WriteSkill
from loguru import logger

from ai_agents_skills.cli import _parse_log_level_overrides
from ai_agents_skills.install.models import InstallMode, InstallTarget
from ai_agents_skills.install.scanner import scan_targets
from ai_agents_skills.skills.parser import discover_skills
from ai_agents_skills.utils.logging import (
    PACKAGE,
    LevelFilter,
    configure_logging,
    get_logger,
    parse_level,
)

DEBUG, INFO, WARNING, ERROR = 10, 20, 30, 40


@pytest.fixture
def sink() -> Iterator[io.StringIO]:
    buffer = io.StringIO()
    yield buffer
    logger.remove()
    logger.disable(PACKAGE)


class TestParseOverrides:
    def test_default_and_modules(self):
        overrides = _parse_log_level_overrides(
            ("warning", " ai_agents_skills.install = debug ", "scanner=TRACE")
        )
        assert overrides == {
            "default": "warning",
            "ai_agents_skills.install": "debug",
            "scanner": "TRACE",
        }

    def test_module_key_is_normalized(self):
        overrides = _parse_log_level_overrides(("AI_AGENTS_SKILLS.Skills.=info",))
        assert overrides == {"ai_agents_skills.skills": "info"}

    @pytest.mark.parametrize("value", ["=INFO", "ai_agents_skills.skills=", "  "])
    def test_rejects_incomplete_entries(self, value: str):
        with pytest.raises(click.BadOptionUsage):
            _parse_log_level_overrides((value,))


class TestParseLevel:
    @pytest.mark.parametrize(
        ("name", "expected"), [("debug", DEBUG), (" Warning ", WARNING), ("25", 25)]
    )
    def test_names_and_numbers(self, name: str, expected: int):
        assert parse_level(name) == expected

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Invalid log level 'chatty'"):
            parse_level("chatty")


class TestLevelFilter:
    def test_longest_module_prefix_wins(self):
        levels = LevelFilter(
            WARNING,
            {"ai_agents_skills.install": INFO, "ai_agents_skills.install.executor": DEBUG},
        )
        assert levels.threshold("ai_agents_skills.install.executor") == DEBUG
        assert levels.threshold("ai_agents_skills.install.scanner") == INFO
        assert levels.threshold("ai_agents_skills.skills.parser") == WARNING

    def test_prefix_matches_whole_segments_only(self):
        levels = LevelFilter(WARNING, {"ai_agents_skills.skills": DEBUG})
        assert levels.threshold("ai_agents_skills.skillset") == WARNING

    def test_component_beats_module(self):
        levels = LevelFilter(INFO, {"ai_agents_skills.install": DEBUG, "scanner": ERROR})
        assert levels.threshold("ai_agents_skills.install.scanner", "scanner") == ERROR
        assert levels.threshold("ai_agents_skills.install.scanner", "executor") == DEBUG

    def test_unnamed_record_uses_default(self):
        assert LevelFilter(ERROR, {"ai_agents_skills": DEBUG}).threshold(None) == ERROR

    def test_from_names_default_key_replaces_base(self):
        levels = LevelFilter.from_names(
            "INFO", {"default": "error", "AI_AGENTS_SKILLS.Install.": "debug"}
        )
        assert levels.default == ERROR
        assert levels.overrides == {"ai_agents_skills.install": DEBUG}


class TestConfigureLogging:
    def test_module_override_lets_discovery_through(
        self, sink: io.StringIO, source_root: Path, make_skill: WriteSkill
    ):
        make_skill("alpha")
        configure_logging(
            base_level="WARNING",
            module_levels={"ai_agents_skills.skills": "INFO"},
            sink=sink,
        )
        discover_skills(source_root, log=get_logger("parser"))
        target = InstallTarget(
            model_id="claude",
            root_directory=source_root.parent / ".claude",
            mode=InstallMode.SYMLINK,
        )
        scan_targets([target], log=get_logger("scanner"))

        lines = sink.getvalue().splitlines()
        assert any("parser" in line and "Discovered 1 skills" in line for line in lines)
        assert not any("scanner" in line for line in lines)

    def test_component_override_silences_one_component(
        self, sink: io.StringIO, source_root: Path, make_skill: WriteSkill
    ):
        make_skill("alpha")
        configure_logging(base_level="INFO", module_levels={"parser": "ERROR"}, sink=sink)
        discover_skills(source_root, log=get_logger("parser"))
        get_logger("cli").info("still visible")

        output = sink.getvalue()
        assert "Discovered" not in output
        assert "still visible" in output

    def test_rejects_unknown_level(self, sink: io.StringIO):
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(base_level="LOUD", sink=sink)
