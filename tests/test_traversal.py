import itertools

import pytest

from conftest import prog
from repotest.domain.errors import CyclicDependency
from repotest.services.traversal import (
    TraversalContext,
    order_candidates,
    plan_order,
    traverse,
)


def _run(programs, pinned_first=None):
    executed: list[str] = []
    ctx = traverse(programs, lambda p: executed.append(p.name), pinned_first=pinned_first)
    return executed, ctx


def test_pinned_candidate_sorted_first():
    assert order_candidates(["zeta", "alpha", "bootstrap"], "bootstrap") == [
        "bootstrap",
        "alpha",
        "zeta",
    ]


def test_order_candidates_without_pinned_match():
    assert order_candidates(["b", "a"], "todo") == ["a", "b"]
    assert order_candidates(["b", "a"]) == ["a", "b"]


def test_dependencies_execute_first_and_once():
    programs = [
        prog("app", "db", "http"),
        prog("db", "log"),
        prog("http", "log"),
        prog("log"),
        prog("zzz"),
    ]
    executed, ctx = _run(programs)
    assert sorted(executed) == sorted(p.name for p in programs)
    assert len(executed) == len(set(executed))
    for p in programs:
        for dep in p.dependencies:
            assert executed.index(dep) < executed.index(p.name)
    assert ctx.execution_order == executed
    assert ctx.visited == set(executed)


def test_diamond_runs_shared_dependency_once():
    programs = [prog("p", "a", "b"), prog("a", "c"), prog("b", "c"), prog("c")]
    executed, _ = _run(programs)
    assert executed.count("c") == 1
    assert executed.index("c") < executed.index("a")
    assert executed.index("c") < executed.index("b")
    assert executed == ["c", "a", "b", "p"]


def test_visit_order_is_post_order_from_candidate_order():
    programs = [prog("alpha", "zeta"), prog("zeta"), prog("todo", "mid"), prog("mid")]
    executed, _ = _run(programs, pinned_first="todo")
    assert executed == ["mid", "todo", "zeta", "alpha"]


def test_unresolved_dependency_does_not_block(caplog):
    programs = [prog("a", "ghost"), prog("b", "a", "phantom")]
    with caplog.at_level("WARNING"):
        executed, ctx = _run(programs)
    assert executed == ["a", "b"]
    assert ctx.unresolved == [("a", "ghost"), ("b", "phantom")]
    messages = [r.getMessage() for r in caplog.records if "Dependency not found" in r.getMessage()]
    assert len(messages) == 2


def test_one_diagnostic_per_unresolved_edge_even_with_many_paths(caplog):
    programs = [prog("x", "shared"), prog("y", "shared"), prog("shared", "ghost")]
    with caplog.at_level("WARNING"):
        _run(programs)
    assert sum("ghost" in r.getMessage() for r in caplog.records) == 1


def test_deterministic_regardless_of_input_order():
    programs = [prog("d", "b", "c"), prog("b", "a"), prog("c", "a"), prog("a"), prog("e", "d")]
    orders = {tuple(plan_order(list(perm))) for perm in itertools.permutations(programs)}
    assert len(orders) == 1


def test_two_node_cycle_raises():
    programs = [prog("a", "b"), prog("b", "a")]
    with pytest.raises(CyclicDependency) as err:
        _run(programs)
    assert err.value.cycle == ["a", "b", "a"]


def test_self_dependency_is_a_cycle():
    with pytest.raises(CyclicDependency) as err:
        _run([prog("loop", "loop")])
    assert err.value.cycle == ["loop", "loop"]


def test_context_shows_partial_progress_after_cycle():
    programs = [prog("a"), prog("b", "c"), prog("c", "b")]
    ctx = TraversalContext.from_programs(programs)
    executed: list[str] = []
    with pytest.raises(CyclicDependency):
        traverse(programs, lambda p: executed.append(p.name), ctx=ctx)
    assert executed == ["a"]
    assert ctx.in_progress == []


def test_plan_order_has_no_side_effects():
    programs = [prog("b", "a"), prog("a")]
    assert plan_order(programs) == ["a", "b"]
    assert plan_order(programs) == ["a", "b"]


def test_traverse_with_context_only():
    ctx = TraversalContext.from_programs([prog("b", "a"), prog("a")])
    executed: list[str] = []
    assert traverse(None, lambda p: executed.append(p.name), ctx=ctx) is ctx
    assert executed == ["a", "b"]


def test_traverse_rejects_programs_not_matching_context():
    ctx = TraversalContext.from_programs([prog("a")])
    with pytest.raises(ValueError):
        traverse([prog("a"), prog("b")], lambda p: None, ctx=ctx)


def test_traverse_needs_programs_or_context():
    with pytest.raises(ValueError):
        traverse(None, lambda p: None)
