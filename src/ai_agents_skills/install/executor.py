"""Apply installation plans to the filesystem."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from ai_agents_skills.exception import FilesystemOperationFailed, TargetUnavailable

from . import fs
from .models import (
    ApplyReport,
    InstallationPlan,
    InstallMode,
    InstallTarget,
    OperationFailure,
    PlanAction,
    PlanEntry,
)

if TYPE_CHECKING:
    from pathlib import Path

    from loguru import Logger


async def apply_plan(
    plan: InstallationPlan, *, dry_run: bool = False, log: Logger = logger
) -> ApplyReport:
    """Apply every entry of a plan, collecting failures instead of raising them.

    Entries touch disjoint paths, so they run concurrently; the steps of a
    single entry (remove, then create) run in order.

    Args:
        plan: The plan to apply
        dry_run: Report what would happen without calling any mutating operation
        log: Logger to report progress on

    Returns:
        ApplyReport with per-target counts, failures and target-level errors
    """
    report = ApplyReport(dry_run=dry_run, target_errors=dict(plan.target_errors))
    for model_id in dict.fromkeys(entry.target.model_id for entry in plan.entries):
        report.summary_for(model_id)

    unavailable: set[str] = set()
    if not dry_run:
        for target in _targets_needing_dir(plan):
            try:
                await _prepare_target(target)
            except TargetUnavailable as e:
                report.target_errors[target.model_id] = e.message
                unavailable.add(target.model_id)

    for model_id, error in report.target_errors.items():
        log.error("[{model}] Target skipped: {error}", model=model_id, error=error)

    async def run(entry: PlanEntry) -> None:
        summary = report.summary_for(entry.target.model_id)
        if entry.action is PlanAction.SKIP:
            log.debug("[{model}] Skipping {skill}", model=entry.target.model_id, skill=entry.skill)
            summary.record(entry.action)
            return
        if dry_run:
            log.info(
                "[DRY RUN] [{model}] Would {action} {skill}",
                model=entry.target.model_id,
                action=entry.action.value,
                skill=entry.skill,
            )
            summary.record(entry.action)
            return
        try:
            await _apply_entry(entry)
        except FilesystemOperationFailed as e:
            log.error("[{model}] {error}", model=entry.target.model_id, error=e)
            summary.failed += 1
            report.failures.append(
                OperationFailure(
                    model_id=entry.target.model_id,
                    skill=entry.skill,
                    action=entry.action,
                    message=str(e),
                )
            )
            return
        log.info(
            "[{model}] {action} {skill}",
            model=entry.target.model_id,
            action=entry.action.value,
            skill=entry.skill,
        )
        summary.record(entry.action)

    entries = [e for e in plan.entries if e.target.model_id not in unavailable]
    await asyncio.gather(*(run(entry) for entry in entries))
    return report


def run_apply(
    plan: InstallationPlan, *, dry_run: bool = False, log: Logger = logger
) -> ApplyReport:
    """Synchronous entry point for callers outside an event loop."""
    return asyncio.run(apply_plan(plan, dry_run=dry_run, log=log))


async def _apply_entry(entry: PlanEntry) -> None:
    path = entry.install_path
    match entry.action:
        case PlanAction.REMOVE:
            await fs.remove_path(path)
        case PlanAction.CREATE | PlanAction.RELINK | PlanAction.UPDATE:
            if entry.source_path is None:
                raise FilesystemOperationFailed(entry.action.value, path, "no source path")
            if fs.exists(path):
                await fs.remove_path(path)
            await _materialize(entry, entry.source_path)
        case PlanAction.SKIP:
            pass


async def _materialize(entry: PlanEntry, source_path: Path) -> None:
    if entry.target.mode is InstallMode.SYMLINK:
        await fs.create_symlink(source_path, entry.install_path)
    else:
        await fs.copy_tree(source_path, entry.install_path)


def _targets_needing_dir(plan: InstallationPlan) -> list[InstallTarget]:
    targets: dict[str, InstallTarget] = {}
    for entry in plan.changes:
        if entry.action is not PlanAction.REMOVE:
            targets.setdefault(entry.target.model_id, entry.target)
    return list(targets.values())


async def _prepare_target(target: InstallTarget) -> None:
    try:
        await fs.ensure_dir(target.skills_dir)
    except FilesystemOperationFailed as e:
        raise TargetUnavailable(f"Cannot create {target.skills_dir}: {e.reason}") from e
