"""Install targets, on-disk scanning, planning and plan execution."""

from __future__ import annotations

from ai_agents_skills.install.executor import apply_plan, run_apply
from ai_agents_skills.install.models import (
    ApplyReport,
    InstallationPlan,
    InstallMode,
    InstallTarget,
    PlanAction,
    TargetSnapshot,
)
from ai_agents_skills.install.planner import plan_install, plan_removal
from ai_agents_skills.install.scanner import scan_target, scan_targets
from ai_agents_skills.install.targets import build_targets, detect_models

__all__ = [
    "ApplyReport",
    "InstallMode",
    "InstallTarget",
    "InstallationPlan",
    "PlanAction",
    "TargetSnapshot",
    "apply_plan",
    "build_targets",
    "detect_models",
    "plan_install",
    "plan_removal",
    "run_apply",
    "scan_target",
    "scan_targets",
]
