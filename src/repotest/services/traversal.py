"""Dependency-ordered, visit-once traversal over the program set.

Every candidate is an entry point. A program's resolvable dependencies are
visited (and executed) before the program itself, and each program is
executed at most once per run no matter how many paths reach it.
Dependency names with no matching program are logged and skipped.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from repotest.domain.errors import CyclicDependency
from repotest.domain.models import Program

logger = logging.getLogger(__name__)

Action = Callable[[Program], object]


def order_candidates(names: Iterable[str], pinned_first: str | None = None) -> list[str]:
    """Lexicographic order, except `pinned_first` always leads."""
    return sorted(names, key=lambda n: (n != pinned_first, n))


@dataclass
class TraversalContext:
    """Run-scoped traversal state, owned by the driver for a single run."""

    programs: dict[str, Program]
    visited: set[str] = field(default_factory=set)
    in_progress: list[str] = field(default_factory=list)
    unresolved: list[tuple[str, str]] = field(default_factory=list)
    execution_order: list[str] = field(default_factory=list)

    @classmethod
    def from_programs(cls, programs: Iterable[Program]) -> TraversalContext:
        return cls(programs={p.name: p for p in programs})

    def lookup(self, name: str) -> Program | None:
        return self.programs.get(name)


def visit(ctx: TraversalContext, program: Program, action: Action) -> None:
    if program.name in ctx.visited:
        return
    if program.name in ctx.in_progress:
        start = ctx.in_progress.index(program.name)
        raise CyclicDependency(ctx.in_progress[start:] + [program.name])
    ctx.in_progress.append(program.name)
    try:
        for dep_name in program.dependencies:
            dependency = ctx.lookup(dep_name)
            if dependency is None:
                logger.warning("Dependency not found: %s (required by %s)", dep_name, program.name)
                ctx.unresolved.append((program.name, dep_name))
                continue
            visit(ctx, dependency, action)
    finally:
        ctx.in_progress.pop()
    ctx.visited.add(program.name)
    ctx.execution_order.append(program.name)
    action(program)


def traverse(
    programs: Sequence[Program] | None,
    action: Action,
    *,
    pinned_first: str | None = None,
    ctx: TraversalContext | None = None,
) -> TraversalContext:
    """Visit every program, executing `action` once per program.

    Pass `ctx` to observe partial progress if the traversal raises; `programs`
    may then be `None`, otherwise it must name the same programs as `ctx`.
    """
    if ctx is None:
        if programs is None:
            raise ValueError("traverse() needs programs or a TraversalContext")
        ctx = TraversalContext.from_programs(programs)
    elif programs is not None and {p.name for p in programs} != set(ctx.programs):
        raise ValueError("programs do not match the TraversalContext")
    for name in order_candidates(ctx.programs, pinned_first):
        visit(ctx, ctx.programs[name], action)
    return ctx


def plan_order(programs: Sequence[Program], *, pinned_first: str | None = None) -> list[str]:
    """Execution order a real run would follow, without side effects."""
    return traverse(programs, lambda _p: None, pinned_first=pinned_first).execution_order


__all__ = [
    "TraversalContext",
    "order_candidates",
    "plan_order",
    "traverse",
    "visit",
]
