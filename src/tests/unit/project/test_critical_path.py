"""
Unit tests for compute_critical_path (src/project/critical_path.py).

Tests:
- Forward/backward pass over a diamond network gives float and critical flags
- Summary tasks pass their dependencies down and roll their leaves up
- Cycles are rejected; unknown dependency ids are ignored
"""

import pytest

from src.project.critical_path import compute_critical_path
from src.project.errors import ValidationError
from src.project.types import Task


def _task(task_id: str, duration: int, deps=(), parent_id=None) -> Task:
    return Task(id=task_id, name=task_id.upper(), duration=duration, dependencies=list(deps), parent_id=parent_id)


@pytest.fixture
def diamond():
    """A(2) feeds B(5) and C(3), which both feed D(1)."""
    return [
        _task("a", 2),
        _task("b", 5, ["a"]),
        _task("c", 3, ["a"]),
        _task("d", 1, ["b", "c"]),
    ]


class TestLeafNetwork:
    def test_diamond_finishes_on_longest_branch(self, diamond):
        result = compute_critical_path(diamond)

        assert result.project_duration == 8
        assert result.critical_path == ["a", "b", "d"]

    def test_diamond_float_and_flags(self, diamond):
        compute_critical_path(diamond)
        a, b, c, d = diamond

        assert (c.early_start, c.early_finish, c.late_start, c.late_finish) == (2, 5, 4, 7)
        assert c.float_days == 2
        assert c.free_float_days == 2
        assert not c.is_critical_path
        assert [t.is_critical_path for t in (a, b, d)] == [True, True, True]
        assert d.early_start == 7
        assert d.late_finish == 8

    def test_independent_short_task_has_float_to_finish(self):
        tasks = [_task("long", 10), _task("short", 4)]

        compute_critical_path(tasks)

        assert tasks[1].float_days == 6
        assert tasks[1].free_float_days == 6
        assert tasks[0].is_critical_path

    def test_unknown_dependency_is_ignored(self):
        tasks = [_task("a", 3, ["ghost"])]

        result = compute_critical_path(tasks)

        assert tasks[0].early_start == 0
        assert result.critical_path == ["a"]

    def test_cycle_is_rejected(self):
        tasks = [_task("a", 1, ["c"]), _task("b", 1, ["a"]), _task("c", 1, ["b"])]

        with pytest.raises(ValidationError, match="cycle"):
            compute_critical_path(tasks)

    def test_empty_task_list(self):
        result = compute_critical_path([])
        assert result.project_duration == 0
        assert result.critical_path == []

    def test_stale_flags_are_overwritten(self, diamond):
        diamond[2].is_critical_path = True

        compute_critical_path(diamond)

        assert not diamond[2].is_critical_path


class TestSummaries:
    @pytest.fixture
    def phased(self):
        """Two phases; phase two depends on phase one as a whole."""
        return [
            _task("p1", 0),
            _task("x", 4, parent_id="p1"),
            _task("y", 2, parent_id="p1"),
            _task("p2", 0, ["p1"]),
            _task("z", 3, parent_id="p2"),
        ]

    def test_summary_dependency_applies_to_descendants(self, phased):
        result = compute_critical_path(phased)
        z = phased[4]

        assert z.early_start == 4
        assert result.project_duration == 7
        assert result.critical_path == ["x", "z"]

    def test_summary_rolls_up_its_leaves(self, phased):
        compute_critical_path(phased)
        p1, x, y, p2, z = phased

        assert (p1.early_start, p1.early_finish) == (0, 4)
        assert (p1.late_start, p1.late_finish) == (0, 4)
        assert p1.float_days == 0
        assert p1.is_critical_path
        assert y.float_days == 2
        assert not y.is_critical_path
        assert (p2.early_start, p2.early_finish) == (4, 7)

    def test_dependency_on_own_parent_is_ignored(self):
        tasks = [_task("p", 0), _task("child", 2, ["p"], parent_id="p")]

        result = compute_critical_path(tasks)

        assert result.project_duration == 2
        assert tasks[1].early_start == 0
