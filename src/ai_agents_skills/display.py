"""Rich rendering of plans, apply reports, validation results and installed state."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ai_agents_skills.install.models import (
    ApplyReport,
    InstallationPlan,
    PlanAction,
    TargetSnapshot,
)
from ai_agents_skills.install.targets import display_name
from ai_agents_skills.skills.models import Resolution, Skill, ValidationReport

console = Console(highlight=False, soft_wrap=True)

_ACTION_STYLES: dict[PlanAction, str] = {
    PlanAction.CREATE: "green",
    PlanAction.RELINK: "cyan",
    PlanAction.UPDATE: "yellow",
    PlanAction.REMOVE: "red",
    PlanAction.SKIP: "dim",
}


def print_plan(plan: InstallationPlan) -> None:
    """Print every planned action grouped by target."""
    if not plan.entries and not plan.target_errors:
        console.print("Nothing to do.")
        return

    table = Table(show_header=True, header_style="bold cyan", padding=(0, 1))
    table.add_column("Target", style="cyan", no_wrap=True)
    table.add_column("Skill", no_wrap=True)
    table.add_column("Action", no_wrap=True)
    table.add_column("Reason", style="dim")
    for entry in plan.entries:
        style = _ACTION_STYLES[entry.action]
        table.add_row(
            entry.target.model_id,
            escape(entry.skill),
            f"[{style}]{entry.action.value}[/{style}]",
            escape(entry.reason),
        )
    console.print(table)
    for model_id, error in plan.target_errors.items():
        console.print(f"[red]✗ {model_id}: {escape(error)}[/red]")


def print_summary(report: ApplyReport) -> None:
    """Print per-target counts, then itemized failures and target errors."""
    title = "Summary (dry run)" if report.dry_run else "Summary"
    table = Table(title=title, show_header=True, header_style="bold cyan", padding=(0, 1))
    table.add_column("Target", style="cyan", no_wrap=True)
    for column in ("Created", "Updated", "Relinked", "Removed", "Skipped", "Failed"):
        table.add_column(column, justify="right")
    for model_id, summary in report.targets.items():
        table.add_row(
            model_id,
            str(summary.created),
            str(summary.updated),
            str(summary.relinked),
            str(summary.removed),
            str(summary.skipped),
            f"[red]{summary.failed}[/red]" if summary.failed else "0",
        )
    for model_id in report.target_errors:
        if model_id not in report.targets:
            table.add_row(model_id, "-", "-", "-", "-", "-", "[red]unavailable[/red]")
    console.print(table)

    if report.failures or report.target_errors:
        console.print("[bold red]Errors:[/bold red]")
        for model_id, error in report.target_errors.items():
            console.print(f"  [red]✗[/red] {model_id}: {escape(error)}")
        for failure in report.failures:
            console.print(f"  [red]✗[/red] {escape(str(failure))}")


def print_validation(report: ValidationReport) -> None:
    for result in report.results:
        if result.valid and not result.warnings:
            console.print(f"[green]✓[/green] {escape(result.skill)}")
            continue
        mark = "[green]✓[/green]" if result.valid else "[red]✗[/red]"
        console.print(f"{mark} {escape(result.skill)}")
        for error in result.errors:
            console.print(f"    [red]error:[/red] {escape(error)}")
        for warning in result.warnings:
            console.print(f"    [yellow]warning:[/yellow] {escape(warning)}")

    for note in report.notes:
        console.print(f"[dim]note: {escape(note)}[/dim]")

    invalid = len(report.invalid)
    console.print(
        f"\n{len(report.results)} checked, {invalid} invalid, "
        f"{report.error_count} errors, {report.warning_count} warnings"
    )


def print_installed(snapshots: Iterable[TargetSnapshot]) -> None:
    """Print the scanned state of each target."""
    for snapshot in snapshots:
        target = snapshot.target
        header = f"[bold]{display_name(target.model_id)}[/bold] [dim]{target.skills_dir}[/dim]"
        console.print(header)
        if snapshot.error is not None:
            console.print(f"  [red]✗ {escape(snapshot.error)}[/red]")
            continue
        if not snapshot.records:
            console.print("  (none)")
            continue
        table = Table(show_header=True, header_style="bold cyan", padding=(0, 1), box=None)
        table.add_column("Skill", no_wrap=True)
        table.add_column("Kind", no_wrap=True)
        table.add_column("Version", no_wrap=True)
        for name in snapshot.names:
            record = snapshot.records[name]
            if record.broken:
                kind = "[red]broken link[/red]"
            else:
                kind = "symlink" if record.is_symlink else "copy"
            table.add_row(escape(name), kind, record.resolved_version or "-")
        console.print(table)


def print_skill_info(
    skill: Skill, resolution: Resolution, locations: Mapping[str, str]
) -> None:
    """Print parsed metadata, the dependency closure and where the skill is installed."""
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")
    table.add_row("Name", escape(skill.name))
    table.add_row("Description", escape(skill.description or "-"))
    table.add_row("Version", skill.version or "-")
    table.add_row("License", escape(skill.license or "-"))
    table.add_row("Path", escape(str(skill.path)))
    table.add_row("Layout", skill.layout.value)
    table.add_row("Depends on", escape(", ".join(sorted(skill.skill_dependencies)) or "-"))
    closure = sorted(resolution.closure - {skill.name})
    table.add_row("Closure", escape(", ".join(closure) or "-"))
    if skill.package_dependencies:
        packages = ", ".join(f"{k} {v}".strip() for k, v in skill.package_dependencies.items())
        table.add_row("Packages", escape(packages))
    if skill.allowed_tools:
        table.add_row("Allowed tools", escape(", ".join(skill.allowed_tools)))
    console.print(table)

    for missing in resolution.missing:
        console.print(f"[red]✗ {escape(str(missing))}[/red]")

    if locations:
        console.print("[bold]Installed in:[/bold]")
        for model_id, kind in locations.items():
            console.print(f"  {display_name(model_id)} ({kind})")
    else:
        console.print("Not installed in this project.")
