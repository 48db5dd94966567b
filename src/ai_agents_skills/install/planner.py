"""Compute installation plans from a resolved skill set and scanned target state.

Planning never touches the filesystem: it is a pure function of the skills
requested, the snapshots produced by the scanner, and each target's mode.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from ai_agents_skills.skills.models import Skill

from .models import (
    InstallationPlan,
    InstalledSkillRecord,
    InstallMode,
    PlanAction,
    PlanEntry,
    TargetSnapshot,
)


def plan_install(
    skills: Iterable[Skill],
    snapshots: Mapping[str, TargetSnapshot] | Iterable[TargetSnapshot],
    *,
    prune: bool = False,
) -> InstallationPlan:
    """Plan the actions that bring every target in line with `skills`.

    Args:
        skills: The resolved closure to install
        snapshots: Current state of each target, in target order
        prune: Also remove installed skills that are not in `skills`

    Returns:
        InstallationPlan ordered by target, then skill name
    """
    desired = sorted({skill.name: skill for skill in skills}.values(), key=lambda s: s.name)
    desired_names = {skill.name for skill in desired}
    plan = InstallationPlan()

    for snapshot in _iter_snapshots(snapshots):
        target = snapshot.target
        if snapshot.error is not None:
            plan.target_errors[target.model_id] = snapshot.error
            continue

        entries: list[PlanEntry] = []
        for skill in desired:
            record = snapshot.records.get(skill.name)
            action, reason = _decide(skill, record, target.mode)
            entries.append(
                PlanEntry(
                    target=target,
                    skill=skill.name,
                    action=action,
                    source_path=skill.path,
                    reason=reason,
                )
            )
        if prune:
            for name in snapshot.names:
                if name not in desired_names:
                    entries.append(
                        PlanEntry(
                            target=target,
                            skill=name,
                            action=PlanAction.REMOVE,
                            reason="not in requested set",
                        )
                    )
        plan.entries.extend(sorted(entries, key=lambda e: e.skill))

    return plan


def plan_removal(
    names: Iterable[str],
    snapshots: Mapping[str, TargetSnapshot] | Iterable[TargetSnapshot],
) -> InstallationPlan:
    """Plan removal of exactly the named skills from every target that has them."""
    wanted = sorted(set(names))
    plan = InstallationPlan()
    for snapshot in _iter_snapshots(snapshots):
        if snapshot.error is not None:
            plan.target_errors[snapshot.target.model_id] = snapshot.error
            continue
        for name in wanted:
            if name in snapshot.records:
                plan.entries.append(
                    PlanEntry(
                        target=snapshot.target,
                        skill=name,
                        action=PlanAction.REMOVE,
                        reason="requested",
                    )
                )
    return plan


def _decide(
    skill: Skill, record: InstalledSkillRecord | None, mode: InstallMode
) -> tuple[PlanAction, str]:
    if record is None:
        return PlanAction.CREATE, "not installed"

    if mode is InstallMode.SYMLINK:
        if not record.is_symlink:
            return PlanAction.RELINK, "installed as copy"
        if record.broken:
            return PlanAction.RELINK, "dangling symlink"
        if record.link_target != skill.path:
            return PlanAction.RELINK, f"points at {record.link_target}"
        return PlanAction.SKIP, "symlink up to date"

    if record.is_symlink:
        return PlanAction.RELINK, "installed as symlink"
    # Copies are compared by version string only; edits without a version bump go unnoticed.
    if record.resolved_version != skill.version:
        installed = record.resolved_version or "none"
        return PlanAction.UPDATE, f"version {installed} -> {skill.version or 'none'}"
    return PlanAction.SKIP, "copy up to date"


def _iter_snapshots(
    snapshots: Mapping[str, TargetSnapshot] | Iterable[TargetSnapshot],
) -> Iterable[TargetSnapshot]:
    if isinstance(snapshots, Mapping):
        return list(snapshots.values())
    return list(snapshots)
