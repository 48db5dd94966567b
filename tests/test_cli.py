"""End-to-end tests for the command line interface."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner, Result
from conftest import WriteSkill, write_skill

from ai_agents_skills.cli import cli
from ai_agents_skills.config import CONFIG_ENV_VAR


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def project(source_root: Path) -> Path:
    return source_root.parent


def _run(project: Path, *args: str, input: str | None = None) -> Result:
    command, *rest = args
    return CliRunner().invoke(cli, [command, "--project", str(project), *rest], input=input)


class TestLocal:
    def test_installs_all_skills_as_symlinks(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        make_skill("beta")

        result = _run(project, "local")
        assert result.exit_code == 0, result.output
        assert "Summary" in result.output
        for name in ("alpha", "beta"):
            link = project / ".claude" / "skills" / name
            assert link.is_symlink()
        assert (project / ".claude" / "instructions.md").is_file()

    def test_second_run_changes_nothing(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        assert _run(project, "local").exit_code == 0
        link = project / ".claude" / "skills" / "alpha"
        before = link.lstat().st_mtime_ns

        result = _run(project, "local")
        assert result.exit_code == 0, result.output
        assert link.lstat().st_mtime_ns == before

    def test_dry_run_touches_nothing(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        result = _run(project, "local", "--dry-run")
        assert result.exit_code == 0, result.output
        assert "create" in result.output
        assert "dry run" in result.output
        assert not (project / ".claude").exists()

    def test_multiple_models_and_aliases(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        result = _run(project, "local", "--models", "copilot,codex", "--no-instructions")
        assert result.exit_code == 0, result.output
        assert (project / ".github" / "skills" / "alpha").is_symlink()
        assert (project / ".codex" / "skills" / "alpha").is_symlink()
        assert not (project / ".github" / "copilot-instructions.md").exists()
        assert not (project / ".claude").exists()

    def test_requested_skill_pulls_dependencies(self, project: Path, make_skill: WriteSkill):
        make_skill("app", skills=["lib"])
        make_skill("lib")
        make_skill("other")

        result = _run(project, "local", "--skills", "app")
        assert result.exit_code == 0, result.output
        installed = sorted(p.name for p in (project / ".claude" / "skills").iterdir())
        assert installed == ["app", "lib"]

    def test_missing_dependency_aborts(self, project: Path, make_skill: WriteSkill):
        make_skill("app", skills=["ghost"])
        make_skill("lib")

        result = _run(project, "local")
        assert result.exit_code == 1
        assert "app -> ghost (not found)" in result.output
        assert not (project / ".claude").exists()

    def test_ignore_missing_installs_the_rest(self, project: Path, make_skill: WriteSkill):
        make_skill("app", skills=["ghost"])
        make_skill("lib")

        result = _run(project, "local", "--ignore-missing")
        assert result.exit_code == 0, result.output
        installed = sorted(p.name for p in (project / ".claude" / "skills").iterdir())
        assert installed == ["app", "lib"]

    def test_prune_removes_skills_outside_the_request(
        self, project: Path, make_skill: WriteSkill
    ):
        make_skill("alpha")
        make_skill("beta")
        assert _run(project, "local").exit_code == 0

        result = _run(project, "local", "--skills", "alpha", "--prune")
        assert result.exit_code == 0, result.output
        assert (project / ".claude" / "skills" / "alpha").exists()
        assert not (project / ".claude" / "skills" / "beta").exists()
        assert (project / "skills" / "beta" / "SKILL.md").is_file()

    def test_agents_md_selects_skills(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha", skills=["lib"])
        make_skill("lib")
        make_skill("beta")
        (project / "AGENTS.md").write_text(
            "# Agents\n\n## Available Skills\n\n- [alpha](skills/alpha/SKILL.md)\n"
        )

        result = _run(project, "local")
        assert result.exit_code == 0, result.output
        installed = sorted(p.name for p in (project / ".claude" / "skills").iterdir())
        assert installed == ["alpha", "lib"]

    def test_skills_option_overrides_agents_md(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        make_skill("beta")
        (project / "AGENTS.md").write_text("## Available Skills\n[alpha](skills/alpha/)\n")

        result = _run(project, "local", "--skills", "beta")
        assert result.exit_code == 0, result.output
        installed = sorted(p.name for p in (project / ".claude" / "skills").iterdir())
        assert installed == ["beta"]

    def test_meta_skills_are_added(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        make_skill("beta")
        make_skill("conventions")

        result = _run(project, "local", "--skills", "alpha")
        assert result.exit_code == 0, result.output
        installed = sorted(p.name for p in (project / ".claude" / "skills").iterdir())
        assert installed == ["alpha", "conventions"]

    def test_no_meta(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        make_skill("conventions")

        result = _run(project, "local", "--skills", "alpha", "--no-meta")
        assert result.exit_code == 0, result.output
        installed = sorted(p.name for p in (project / ".claude" / "skills").iterdir())
        assert installed == ["alpha"]

    def test_configured_meta_skills(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        make_skill("conventions")
        make_skill("house-style")
        (project / ".ai-agents-skills.toml").write_text('meta_skills = ["house-style"]\n')

        result = _run(project, "local", "--skills", "alpha")
        assert result.exit_code == 0, result.output
        installed = sorted(p.name for p in (project / ".claude" / "skills").iterdir())
        assert installed == ["alpha", "house-style"]

    def test_detects_project_root_from_subdirectory(
        self, project: Path, make_skill: WriteSkill, monkeypatch: pytest.MonkeyPatch
    ):
        make_skill("alpha")
        (project / ".git").mkdir()
        (project / "docs" / "guides").mkdir(parents=True)
        monkeypatch.chdir(project / "docs" / "guides")

        result = CliRunner().invoke(cli, ["local"])
        assert result.exit_code == 0, result.output
        assert (project / ".claude" / "skills" / "alpha").is_symlink()
        assert not (project / "docs" / "guides" / ".claude").exists()

    def test_unknown_model(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        result = _run(project, "local", "--models", "vim")
        assert result.exit_code == 2
        assert "Unknown model 'vim'" in result.output

    def test_missing_source_directory(self, tmp_path: Path):
        result = _run(tmp_path, "local")
        assert result.exit_code == 1
        assert "Skills source directory not found" in result.output

    def test_configured_default_models(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        (project / ".ai-agents-skills.toml").write_text('default_models = ["gemini"]\n')
        result = _run(project, "local")
        assert result.exit_code == 0, result.output
        assert (project / ".gemini" / "skills" / "alpha").is_symlink()

    def test_invalid_config(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        (project / ".ai-agents-skills.toml").write_text("default_models = [\n")
        result = _run(project, "local")
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestInstall:
    def test_copies_from_external_tree(self, project: Path, tmp_path: Path):
        external = tmp_path / "external"
        write_skill(external / "skills", "remote", version="2.0")

        result = _run(project, "install", str(external))
        assert result.exit_code == 0, result.output
        installed = project / ".claude" / "skills" / "remote"
        assert installed.is_dir()
        assert not installed.is_symlink()

    def test_add_alias_and_version_bump(self, project: Path, tmp_path: Path):
        external = tmp_path / "external"
        write_skill(external, "remote", version="1.0")
        assert _run(project, "add", str(external)).exit_code == 0

        write_skill(external, "remote", version="1.1")
        result = _run(project, "add", str(external))
        assert result.exit_code == 0, result.output
        skill_md = project / ".claude" / "skills" / "remote" / "SKILL.md"
        assert 'version: "1.1"' in skill_md.read_text()

    def test_agents_md_in_source(self, project: Path, tmp_path: Path):
        external = tmp_path / "external"
        write_skill(external / "skills", "remote")
        write_skill(external / "skills", "unlisted")
        (external / "AGENTS.md").write_text(
            "## Available Skills\n| [remote](skills/remote/SKILL.md) | x |\n"
        )

        result = _run(project, "install", str(external))
        assert result.exit_code == 0, result.output
        installed = sorted(p.name for p in (project / ".claude" / "skills").iterdir())
        assert installed == ["remote"]


class TestRemove:
    def test_removes_only_named_skill_and_notes_dependents(
        self, project: Path, make_skill: WriteSkill
    ):
        make_skill("app", skills=["lib"])
        make_skill("lib")
        assert _run(project, "local").exit_code == 0

        result = _run(project, "remove", "--skills", "lib", "--confirm")
        assert result.exit_code == 0, result.output
        assert "lib is still required by: app" in result.output
        assert not (project / ".claude" / "skills" / "lib").exists()
        assert (project / ".claude" / "skills" / "app").is_symlink()

    def test_prompt_can_abort(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        assert _run(project, "local").exit_code == 0

        result = _run(project, "uninstall", "--skills", "alpha", input="n\n")
        assert result.exit_code == 1
        assert (project / ".claude" / "skills" / "alpha").is_symlink()

    def test_remove_all(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        make_skill("beta")
        assert _run(project, "local").exit_code == 0

        result = _run(project, "remove", "--all", "--confirm")
        assert result.exit_code == 0, result.output
        assert list((project / ".claude" / "skills").iterdir()) == []

    def test_dry_run(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        assert _run(project, "local").exit_code == 0
        result = _run(project, "remove", "--skills", "alpha", "--dry-run")
        assert result.exit_code == 0, result.output
        assert result.output.count("Reason") == 1
        assert "Summary (dry run)" in result.output
        assert (project / ".claude" / "skills" / "alpha").is_symlink()

    def test_requires_skills_or_all(self, project: Path):
        result = _run(project, "remove")
        assert result.exit_code == 2

    def test_nothing_installed(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        result = _run(project, "remove", "--skills", "alpha", "--confirm")
        assert result.exit_code == 0
        assert "No installed skills found" in result.output


class TestValidate:
    def test_valid_catalog(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        result = _run(project, "validate")
        assert result.exit_code == 0, result.output
        assert "1 checked, 0 invalid" in result.output

    def test_invalid_skill_fails(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        make_skill("beta", description="No trigger clause here.")
        result = _run(project, "validate", "--all")
        assert result.exit_code == 1
        assert 'Description must include a "Trigger:" clause' in result.output

    def test_single_skill(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        make_skill("beta", description="No trigger clause here.")
        result = _run(project, "validate", "--skill", "alpha")
        assert result.exit_code == 0, result.output

    def test_strict_rejects_deprecated_fields(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha", legacy=True)
        assert _run(project, "validate").exit_code == 0
        result = _run(project, "validate", "--strict")
        assert result.exit_code == 1
        assert "Deprecated top-level fields" in result.output

    def test_installed_dangling_link(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        skills_dir = project / ".claude" / "skills"
        skills_dir.mkdir(parents=True)
        (skills_dir / "gone").symlink_to(project / "nowhere")

        result = _run(project, "validate", "--installed")
        assert result.exit_code == 1
        assert "claude/gone" in result.output

    def test_cycle_is_a_note(self, project: Path, make_skill: WriteSkill):
        make_skill("a", skills=["b"])
        make_skill("b", skills=["a"])
        result = _run(project, "validate")
        assert result.exit_code == 0, result.output
        assert "Dependency cycle: a -> b -> a" in result.output


class TestListSyncInfo:
    def test_list(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha", version="1.2")
        assert _run(project, "local").exit_code == 0

        result = _run(project, "ls")
        assert result.exit_code == 0, result.output
        assert "alpha" in result.output
        assert "symlink" in result.output
        assert "1.2" in result.output

    def test_list_nothing_installed(self, project: Path):
        result = _run(project, "list")
        assert result.exit_code == 0
        assert "No installed skills found" in result.output

    def test_sync_adds_model(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        make_skill("beta")
        assert _run(project, "local", "--skills", "alpha").exit_code == 0

        result = _run(project, "sync", "--add-models", "codex")
        assert result.exit_code == 0, result.output
        assert (project / ".codex" / "skills" / "alpha").is_symlink()
        assert not (project / ".codex" / "skills" / "beta").exists()

    def test_info(self, project: Path, make_skill: WriteSkill):
        make_skill("app", skills=["lib"], version="3.0")
        make_skill("lib")
        assert _run(project, "local", "--skills", "app").exit_code == 0

        result = _run(project, "info", "app")
        assert result.exit_code == 0, result.output
        assert "3.0" in result.output
        assert "lib" in result.output
        assert "Claude (symlink)" in result.output

    def test_info_unknown_skill(self, project: Path, make_skill: WriteSkill):
        make_skill("alpha")
        result = _run(project, "info", "nope")
        assert result.exit_code == 1
        assert "Skill not found: nope" in result.output


def test_verbose_and_quiet_conflict():
    result = CliRunner().invoke(cli, ["-v", "-q", "list"])
    assert result.exit_code == 2
