"""Scan target directories for installed skills.

There is no registry file: the skills directory of each target is listed on
every run, so state is always derived from what is actually on disk.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from loguru import logger

from ai_agents_skills.skills.parser import extract_version

from . import fs
from .models import InstalledSkillRecord, InstallTarget, TargetSnapshot

if TYPE_CHECKING:
    from loguru import Logger


def scan_target(target: InstallTarget, *, log: Logger = logger) -> TargetSnapshot:
    """Build a snapshot of the skills currently installed in one target.

    A missing skills directory is an empty snapshot; an unreadable one is a
    snapshot with `error` set so the caller can skip that target.
    """
    snapshot = TargetSnapshot(target=target)
    skills_dir = target.skills_dir

    if not fs.exists(skills_dir):
        log.debug("[{model}] No skills directory at {dir}", model=target.model_id, dir=skills_dir)
        return snapshot
    if not fs.is_directory(skills_dir):
        snapshot.error = f"Not a directory: {skills_dir}"
        return snapshot

    try:
        entries = sorted(skills_dir.iterdir())
    except OSError as e:
        snapshot.error = f"Cannot read {skills_dir}: {e}"
        log.warning("[{model}] {error}", model=target.model_id, error=snapshot.error)
        return snapshot

    for entry in entries:
        if entry.name.startswith("."):
            continue
        is_link = fs.is_symlink(entry)
        if not is_link and not entry.is_dir():
            continue
        link_target = fs.read_link_target(entry) if is_link else None
        broken = is_link and not entry.exists()
        snapshot.records[entry.name] = InstalledSkillRecord(
            name=entry.name,
            install_path=entry,
            is_symlink=is_link,
            link_target=link_target,
            broken=broken,
            resolved_version=None if broken else extract_version(entry),
        )

    log.debug(
        "[{model}] Found {count} installed skills",
        model=target.model_id,
        count=len(snapshot.records),
    )
    return snapshot


def scan_targets(
    targets: Iterable[InstallTarget], *, log: Logger = logger
) -> dict[str, TargetSnapshot]:
    """Scan every target, keyed by model id, in the order given."""
    return {target.model_id: scan_target(target, log=log) for target in targets}


def installed_names(snapshots: Iterable[TargetSnapshot]) -> list[str]:
    """Unique skill names installed in any of the snapshots."""
    names: set[str] = set()
    for snapshot in snapshots:
        names.update(snapshot.records)
    return sorted(names)
