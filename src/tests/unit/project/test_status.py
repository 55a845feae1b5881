"""
Unit tests for the project status state machine (src/project/status.py).
"""

import pytest

from src.project.errors import InvalidTransition
from src.project.status import VALID_TRANSITIONS, can_transition, ensure_transition
from src.project.types import ProjectStatus


@pytest.mark.parametrize("current,target", [
    (ProjectStatus.PLANNING, ProjectStatus.ACTIVE),
    (ProjectStatus.ACTIVE, ProjectStatus.COMPLETED),
    ("planning", "active"),
])
def test_adjacent_forward_moves_are_allowed(current, target):
    can, reason = can_transition(current, target)
    assert can is True
    assert reason == ""


@pytest.mark.parametrize("status", list(ProjectStatus))
def test_same_status_is_a_no_op(status):
    assert can_transition(status, status) == (True, "Same status")
    assert ensure_transition(status, status) == status


@pytest.mark.parametrize("current,target", [
    (ProjectStatus.PLANNING, ProjectStatus.COMPLETED),
    (ProjectStatus.ACTIVE, ProjectStatus.PLANNING),
    (ProjectStatus.COMPLETED, ProjectStatus.ACTIVE),
    (ProjectStatus.COMPLETED, ProjectStatus.PLANNING),
])
def test_skips_and_backward_moves_are_rejected(current, target):
    can, reason = can_transition(current, target)
    assert can is False
    assert "Cannot transition" in reason

    with pytest.raises(InvalidTransition) as exc_info:
        ensure_transition(current, target)
    assert exc_info.value.current == current.value
    assert exc_info.value.requested == target.value


def test_unknown_status_is_rejected():
    can, reason = can_transition(ProjectStatus.PLANNING, "archived")
    assert can is False
    assert reason == "Invalid status: archived"

    with pytest.raises(InvalidTransition, match="Invalid status"):
        ensure_transition("planning", "archived")


def test_completed_is_terminal():
    assert VALID_TRANSITIONS[ProjectStatus.COMPLETED] == []


def test_ensure_transition_returns_enum():
    assert ensure_transition("planning", "active") is ProjectStatus.ACTIVE
