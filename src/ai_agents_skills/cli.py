from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping
from pathlib import Path

import click
from rich.markup import escape

from ai_agents_skills.config import Config, load_config
from ai_agents_skills.constant import NAME, VERSION
from ai_agents_skills.display import (
    console,
    print_installed,
    print_plan,
    print_skill_info,
    print_summary,
    print_validation,
)
from ai_agents_skills.exception import (
    ConfigError,
    SourceRootError,
    TargetConfigError,
    UnknownModelError,
)
from ai_agents_skills.install.executor import run_apply
from ai_agents_skills.install.models import (
    InstallationPlan,
    InstallMode,
    InstallTarget,
)
from ai_agents_skills.install.planner import plan_install, plan_removal
from ai_agents_skills.install.scanner import installed_names, scan_targets
from ai_agents_skills.install.targets import build_targets, detect_models, parse_model_list
from ai_agents_skills.instructions import regenerate_instructions
from ai_agents_skills.project import detect_project_root, read_agents_skills
from ai_agents_skills.skills.models import DiscoveryResult, Resolution, Skill
from ai_agents_skills.skills.parser import discover_skills
from ai_agents_skills.skills.resolver import dependents_of, resolve
from ai_agents_skills.skills.validator import validate_catalog, validate_installed
from ai_agents_skills.utils.logging import configure_logging, get_logger

_LOG_LEVEL_OPTION = "--log-level"
_DEFAULT_LOG_LEVEL_KEY = "default"


class CliState:
    """Global options, resolved into a Config once the project root is known."""

    def __init__(
        self,
        *,
        verbose: bool,
        quiet: bool,
        log_levels: dict[str, str],
        config_file: Path | None,
    ) -> None:
        self.verbose = verbose
        self.quiet = quiet
        self.log_levels = log_levels
        self.config_file = config_file

    @property
    def base_level(self) -> str:
        if self.verbose:
            return "DEBUG"
        if self.quiet:
            return "ERROR"
        return "INFO"

    def load(self, project_root: Path) -> Config:
        """Load configuration for a project and configure logging from it."""
        try:
            config = load_config(self.config_file, project_root=project_root)
        except ConfigError as e:
            raise click.ClickException(e.message) from e
        merged_levels = {**config.logging.levels, **self.log_levels}
        try:
            configure_logging(base_level=self.base_level, module_levels=merged_levels)
        except ValueError as exc:
            raise click.BadOptionUsage(_LOG_LEVEL_OPTION, str(exc)) from exc
        return config


project_option = click.option(
    "--project",
    "-p",
    "project",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project directory. Default: nearest ancestor with package.json or .git.",
)
models_option = click.option(
    "--models",
    "-m",
    "models",
    multiple=True,
    help="Comma-separated model ids (claude, copilot, codex, gemini, cursor).",
)
skills_option = click.option(
    "--skills",
    "-s",
    "skills",
    multiple=True,
    help="Comma-separated skill names.",
)
dry_run_option = click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the plan without changing anything.",
)
prune_option = click.option(
    "--prune",
    is_flag=True,
    default=False,
    help="Remove installed skills that are not part of this installation.",
)
no_instructions_option = click.option(
    "--no-instructions",
    is_flag=True,
    default=False,
    help="Do not regenerate the per-model instruction index.",
)
ignore_missing_option = click.option(
    "--ignore-missing",
    is_flag=True,
    default=False,
    help="Install the resolvable part of the closure when dependencies are missing.",
)
no_meta_option = click.option(
    "--no-meta",
    is_flag=True,
    default=False,
    help="Do not add the configured meta-skills to the request.",
)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(VERSION, prog_name=NAME)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug information.")
@click.option("--quiet", "-q", is_flag=True, default=False, help="Only log errors.")
@click.option(
    "--log-level",
    "-L",
    "log_level_override",
    multiple=True,
    help=(
        "Override log level per module or component. Use `module=LEVEL` "
        "(e.g. `-L ai_agents_skills.install=DEBUG` or `-L scanner=DEBUG`) "
        "or just `LEVEL` to change the default level."
    ),
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (TOML or JSON). Default: .ai-agents-skills.toml in the project.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    log_level_override: tuple[str, ...],
    config_file: Path | None,
) -> None:
    """Discover, validate and install AI agent skills."""
    if verbose and quiet:
        raise click.BadOptionUsage("--quiet", "Cannot combine --verbose and --quiet")
    ctx.obj = CliState(
        verbose=verbose,
        quiet=quiet,
        log_levels=_parse_log_level_overrides(log_level_override),
        config_file=config_file,
    )


@cli.command()
@project_option
@models_option
@skills_option
@dry_run_option
@prune_option
@no_instructions_option
@ignore_missing_option
@no_meta_option
@click.pass_obj
def local(
    state: CliState,
    project: Path | None,
    models: tuple[str, ...],
    skills: tuple[str, ...],
    dry_run: bool,
    prune: bool,
    no_instructions: bool,
    ignore_missing: bool,
    no_meta: bool,
) -> None:
    """Symlink skills from the project's skills directory into model directories."""
    project_root = _project_root(project)
    config = state.load(project_root)
    _install(
        config,
        source_root=project_root / config.source_dir,
        project_root=project_root,
        agents_dir=project_root,
        mode=InstallMode.SYMLINK,
        models=models,
        skills=skills,
        dry_run=dry_run,
        prune=prune,
        write_instructions=config.write_instructions and not no_instructions,
        ignore_missing=ignore_missing,
        with_meta=not no_meta,
    )


@cli.command("install")
@click.argument("source", type=click.Path(exists=True, file_okay=False, path_type=Path))
@project_option
@models_option
@skills_option
@dry_run_option
@prune_option
@no_instructions_option
@ignore_missing_option
@no_meta_option
@click.pass_obj
def install(
    state: CliState,
    source: Path,
    project: Path | None,
    models: tuple[str, ...],
    skills: tuple[str, ...],
    dry_run: bool,
    prune: bool,
    no_instructions: bool,
    ignore_missing: bool,
    no_meta: bool,
) -> None:
    """Copy skills from SOURCE (a skills tree or a checkout containing one) into a project."""
    project_root = _project_root(project)
    config = state.load(project_root)
    source_root = source / config.source_dir
    if not source_root.is_dir():
        source_root = source
    _install(
        config,
        source_root=source_root,
        project_root=project_root,
        agents_dir=source,
        mode=InstallMode.COPY,
        models=models,
        skills=skills,
        dry_run=dry_run,
        prune=prune,
        write_instructions=config.write_instructions and not no_instructions,
        ignore_missing=ignore_missing,
        with_meta=not no_meta,
    )


@cli.command("remove")
@project_option
@models_option
@skills_option
@click.option("--all", "remove_all", is_flag=True, default=False, help="Remove every skill.")
@click.option("--confirm", "-y", is_flag=True, default=False, help="Skip the confirmation.")
@dry_run_option
@no_instructions_option
@click.pass_obj
def remove(
    state: CliState,
    project: Path | None,
    models: tuple[str, ...],
    skills: tuple[str, ...],
    remove_all: bool,
    confirm: bool,
    dry_run: bool,
    no_instructions: bool,
) -> None:
    """Remove installed skills. Only the named skills are removed, never their dependencies."""
    project_root = _project_root(project)
    config = state.load(project_root)
    log = get_logger("remove")

    names = _split_names(skills)
    if not names and not remove_all:
        raise click.BadOptionUsage("--skills", "Specify --skills or --all")
    if names and remove_all:
        raise click.BadOptionUsage("--all", "Cannot combine --skills and --all")

    targets = _targets_for_existing(project_root, models, InstallMode.SYMLINK, config)
    if not targets:
        console.print("No installed skills found.")
        return
    snapshots = scan_targets(targets, log=get_logger("scanner"))
    installed = installed_names(snapshots.values())
    if remove_all:
        names = installed

    try:
        catalog = discover_skills(project_root / config.source_dir, log=log).skills
    except SourceRootError:
        log.debug("No source catalog in {project}, skipping dependents check", project=project_root)
        catalog = {}
    for name in names:
        dependents = sorted(dependents_of(name, installed, catalog) - set(names))
        if dependents:
            console.print(
                f"[yellow]Note:[/yellow] {escape(name)} is still required by: "
                f"{escape(', '.join(dependents))}"
            )

    plan = plan_removal(names, snapshots)
    if plan.is_noop and not plan.target_errors:
        console.print("Nothing to remove.")
        return

    if not dry_run:
        print_plan(plan)
        if not confirm:
            click.confirm(f"Remove {len(plan.changes)} skill installation(s)?", abort=True)
    _apply_and_report(
        plan,
        targets,
        dry_run=dry_run,
        write_instructions=config.write_instructions and not no_instructions,
    )


@cli.command()
@project_option
@click.option("--skill", "skill_names", multiple=True, help="Skill to validate (repeatable).")
@click.option("--all", "validate_all", is_flag=True, default=False, help="Validate every skill.")
@click.option(
    "--installed",
    is_flag=True,
    default=False,
    help="Also check installed skills against the source tree.",
)
@models_option
@click.option("--strict", is_flag=True, default=False, help="Treat deprecated fields as errors.")
@click.pass_obj
def validate(
    state: CliState,
    project: Path | None,
    skill_names: tuple[str, ...],
    validate_all: bool,
    installed: bool,
    models: tuple[str, ...],
    strict: bool,
) -> None:
    """Validate skill definitions.

    Exit codes:
        0: Every validated skill is valid
        1: Validation errors found
    """
    project_root = _project_root(project)
    config = state.load(project_root)
    discovery = _discover(project_root / config.source_dir)
    _print_discovery_issues(discovery)

    names = None if validate_all or not skill_names else _split_names(skill_names)
    report = validate_catalog(discovery.skills, names, strict=strict or config.strict)
    if installed:
        targets = _targets_for_existing(project_root, models, InstallMode.SYMLINK, config)
        snapshots = scan_targets(targets, log=get_logger("scanner"))
        installed_report = validate_installed(snapshots.values(), discovery.skills)
        report.results.extend(installed_report.results)
        report.notes.extend(installed_report.notes)

    print_validation(report)
    if not report.valid:
        sys.exit(1)


@cli.command("list")
@project_option
@models_option
@click.pass_obj
def list_(state: CliState, project: Path | None, models: tuple[str, ...]) -> None:
    """List skills installed in each model directory."""
    project_root = _project_root(project)
    config = state.load(project_root)
    targets = _targets_for_existing(project_root, models, InstallMode.SYMLINK, config)
    if not targets:
        console.print("No installed skills found.")
        return
    print_installed(scan_targets(targets, log=get_logger("scanner")).values())


@cli.command()
@project_option
@click.option(
    "--add-models",
    "add_models",
    multiple=True,
    help="Comma-separated model ids to bring in sync as well.",
)
@click.option(
    "--mode",
    type=click.Choice([mode.value for mode in InstallMode]),
    default=InstallMode.SYMLINK.value,
    show_default=True,
    help="Installation mode for every synced target.",
)
@dry_run_option
@no_instructions_option
@click.pass_obj
def sync(
    state: CliState,
    project: Path | None,
    add_models: tuple[str, ...],
    mode: str,
    dry_run: bool,
    no_instructions: bool,
) -> None:
    """Install every skill found in any model directory into all of them."""
    project_root = _project_root(project)
    config = state.load(project_root)
    log = get_logger("sync")

    model_ids = detect_models(project_root, config.models) + parse_model_list(add_models)
    if not model_ids:
        console.print("No installed skills found.")
        return
    targets = _build_targets(model_ids, project_root, InstallMode(mode), config)
    snapshots = scan_targets(targets, log=get_logger("scanner"))

    catalog = _discover(project_root / config.source_dir).skills
    wanted: list[str] = []
    for name in installed_names(snapshots.values()):
        if name in catalog and not catalog[name].malformed:
            wanted.append(name)
        else:
            log.warning("Skipping {name}: source skill not found", name=name)

    resolution = resolve(wanted, catalog)
    for missing in resolution.missing:
        log.warning("{missing}", missing=missing)
    plan = plan_install(_closure_skills(resolution, catalog), snapshots)
    _apply_and_report(
        plan,
        targets,
        dry_run=dry_run,
        write_instructions=config.write_instructions and not no_instructions,
    )


@cli.command()
@click.argument("skill_name")
@project_option
@click.pass_obj
def info(state: CliState, skill_name: str, project: Path | None) -> None:
    """Show metadata, dependency closure and install locations of a skill."""
    project_root = _project_root(project)
    config = state.load(project_root)
    catalog = _discover(project_root / config.source_dir).skills
    skill = catalog.get(skill_name)
    if skill is None:
        raise click.ClickException(f"Skill not found: {skill_name}")
    if skill.malformed:
        raise click.ClickException(f"Skill {skill_name} is malformed: {skill.parse_error}")

    targets = _targets_for_existing(project_root, (), InstallMode.SYMLINK, config)
    locations: dict[str, str] = {}
    for model_id, snapshot in scan_targets(targets, log=get_logger("scanner")).items():
        record = snapshot.records.get(skill_name)
        if record is not None:
            locations[model_id] = "symlink" if record.is_symlink else "copy"
    print_skill_info(skill, resolve([skill_name], catalog), locations)


cli.add_command(install, name="add")
cli.add_command(remove, name="uninstall")
cli.add_command(list_, name="ls")


def _install(
    config: Config,
    *,
    source_root: Path,
    project_root: Path,
    agents_dir: Path,
    mode: InstallMode,
    models: Iterable[str],
    skills: Iterable[str],
    dry_run: bool,
    prune: bool,
    write_instructions: bool,
    ignore_missing: bool,
    with_meta: bool,
) -> None:
    discovery = _discover(source_root)
    _print_discovery_issues(discovery)
    catalog = discovery.skills

    requested = _split_names(skills)
    if not requested:
        requested = read_agents_skills(agents_dir, log=get_logger("agents")) or [
            name for name in discovery.names if not catalog[name].malformed
        ]
    if with_meta:
        requested += _meta_skills(config, catalog, requested)
    if not requested:
        console.print(f"No skills found in {escape(str(discovery.source_root))}")
        return

    resolution = resolve(requested, catalog)
    if resolution.missing:
        for missing in resolution.missing:
            console.print(f"[red]✗[/red] {escape(str(missing))}")
        if not ignore_missing:
            raise click.ClickException(
                f"{len(resolution.missing)} missing dependencies, nothing was installed "
                "(use --ignore-missing to install the rest)"
            )

    model_ids = parse_model_list(models) or config.default_models
    targets = _build_targets(model_ids, project_root, mode, config)
    snapshots = scan_targets(targets, log=get_logger("scanner"))
    plan = plan_install(_closure_skills(resolution, catalog), snapshots, prune=prune)
    _apply_and_report(plan, targets, dry_run=dry_run, write_instructions=write_instructions)


def _apply_and_report(
    plan: InstallationPlan,
    targets: Iterable[InstallTarget],
    *,
    dry_run: bool,
    write_instructions: bool,
) -> None:
    if dry_run:
        print_plan(plan)
    report = run_apply(plan, dry_run=dry_run, log=get_logger("executor"))
    if write_instructions and not plan.is_noop:
        for target in targets:
            if target.model_id not in report.target_errors:
                regenerate_instructions(target, dry_run=dry_run, log=get_logger("instructions"))
    print_summary(report)
    if not report.ok:
        sys.exit(1)


def _discover(source_root: Path) -> DiscoveryResult:
    try:
        return discover_skills(source_root, log=get_logger("parser"))
    except SourceRootError as e:
        raise click.ClickException(e.message) from e


def _print_discovery_issues(discovery: DiscoveryResult) -> None:
    for issue in discovery.issues:
        skill = discovery.get(issue.skill or "")
        if skill is not None and skill.malformed:
            continue
        console.print(f"[yellow]warning:[/yellow] {escape(str(issue))}")


def _build_targets(
    model_ids: Iterable[str], project_root: Path, mode: InstallMode, config: Config
) -> list[InstallTarget]:
    try:
        return build_targets(model_ids, project_root, mode, config.models)
    except (UnknownModelError, TargetConfigError) as e:
        raise click.BadOptionUsage("--models", e.message) from e


def _targets_for_existing(
    project_root: Path, models: Iterable[str], mode: InstallMode, config: Config
) -> list[InstallTarget]:
    model_ids = parse_model_list(models) or detect_models(project_root, config.models)
    return _build_targets(model_ids, project_root, mode, config)


def _closure_skills(resolution: Resolution, catalog: Mapping[str, Skill]) -> list[Skill]:
    return [catalog[name] for name in sorted(resolution.closure)]


def _project_root(project: Path | None) -> Path:
    if project is not None:
        return project.absolute()
    return detect_project_root(log=get_logger("project"))


def _meta_skills(config: Config, catalog: Mapping[str, Skill], requested: list[str]) -> list[str]:
    extra: list[str] = []
    for name in config.meta_skills:
        if name in requested or name in extra:
            continue
        skill = catalog.get(name)
        if skill is None or skill.malformed:
            get_logger("agents").debug("Meta-skill {name} not in the source tree", name=name)
            continue
        extra.append(name)
    return extra


def _split_names(values: Iterable[str]) -> list[str]:
    names: list[str] = []
    for chunk in values:
        for item in chunk.split(","):
            name = item.strip()
            if name and name not in names:
                names.append(name)
    return names


def _parse_log_level_overrides(values: tuple[str, ...]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for raw in values:
        entry = raw.strip()
        if not entry:
            raise click.BadOptionUsage(_LOG_LEVEL_OPTION, "Log level override cannot be empty")
        if "=" in entry:
            module, level = entry.split("=", 1)
            module = module.strip()
            if not module:
                raise click.BadOptionUsage(
                    _LOG_LEVEL_OPTION,
                    "Module name is required before '=' when using --log-level",
                )
        else:
            module = _DEFAULT_LOG_LEVEL_KEY
            level = entry
        level = level.strip()
        if not level:
            raise click.BadOptionUsage(_LOG_LEVEL_OPTION, "Log level cannot be empty")
        overrides[_normalize_module_key(module)] = level
    return overrides


def _normalize_module_key(module: str) -> str:
    normalized = module.strip().rstrip(".").lower()
    return normalized or _DEFAULT_LOG_LEVEL_KEY


def main():
    cli()


if __name__ == "__main__":
    main()
