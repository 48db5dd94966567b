"""Dependency closure over declared skill-to-skill references."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping

from .models import MissingDependency, Resolution, Skill


def resolve(requested: Iterable[str], catalog: Mapping[str, Skill]) -> Resolution:
    """Compute the transitive closure of `requested` over declared skill dependencies.

    Traversal is breadth-first with a visited set, so cyclic references terminate
    and every skill is expanded at most once. Unknown names are collected rather
    than raised, so a single pass reports all of them.

    Args:
        requested: Skill names asked for by the user
        catalog: Discovered skills by name

    Returns:
        Resolution with the closure and the missing references (empty on success)
    """
    requested_set = frozenset(requested)
    closure: set[str] = set()
    missing: list[MissingDependency] = []
    reported: set[tuple[str | None, str]] = set()

    def report(skill: str | None, reference: str) -> None:
        if (skill, reference) not in reported:
            reported.add((skill, reference))
            missing.append(MissingDependency(skill=skill, reference=reference))

    queue: deque[tuple[str | None, str]] = deque((None, name) for name in sorted(requested_set))
    while queue:
        parent, name = queue.popleft()
        if name in closure:
            continue
        skill = catalog.get(name)
        if skill is None or skill.malformed:
            report(parent, name)
            continue
        closure.add(name)
        for dep in sorted(skill.skill_dependencies):
            if dep not in closure:
                queue.append((name, dep))

    return Resolution(requested=requested_set, closure=frozenset(closure), missing=missing)


def find_cycles(catalog: Mapping[str, Skill]) -> list[list[str]]:
    """List dependency cycles in the catalog, each reported once.

    Cycles are allowed; this is informational output for `validate`.
    """
    cycles: list[list[str]] = []
    seen: set[frozenset[str]] = set()
    visited: set[str] = set()

    def visit(name: str, stack: list[str], on_stack: set[str]) -> None:
        visited.add(name)
        stack.append(name)
        on_stack.add(name)
        skill = catalog[name]
        for dep in sorted(skill.skill_dependencies):
            if dep not in catalog:
                continue
            if dep in on_stack:
                cycle = stack[stack.index(dep) :]
                key = frozenset(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append([*cycle, dep])
            elif dep not in visited:
                visit(dep, stack, on_stack)
        stack.pop()
        on_stack.discard(name)

    for name in sorted(catalog):
        if name not in visited:
            visit(name, [], set())
    return cycles


def dependents_of(
    name: str, installed: Iterable[str], catalog: Mapping[str, Skill]
) -> set[str]:
    """Return the installed skills (other than `name`) whose closure contains `name`."""
    dependents: set[str] = set()
    for other in installed:
        if other == name or other not in catalog:
            continue
        if name in resolve([other], catalog).closure:
            dependents.add(other)
    return dependents
