"""
Project status state machine.

Enforces valid lifecycle transitions:
planning → active → completed

Staying in the same status is allowed (no-op). Skipping a state or moving
backwards is rejected.
"""

from typing import Dict, List, Tuple, Union

from ..shared.logger import get_logger
from .errors import InvalidTransition
from .types import ProjectStatus

logger = get_logger("store", __name__)


# Valid state transitions: from_status -> list of allowed to_statuses
VALID_TRANSITIONS: Dict[ProjectStatus, List[ProjectStatus]] = {
    ProjectStatus.PLANNING: [ProjectStatus.ACTIVE],
    ProjectStatus.ACTIVE: [ProjectStatus.COMPLETED],
    ProjectStatus.COMPLETED: [],
}


def _coerce(status: Union[ProjectStatus, str]) -> ProjectStatus:
    return status if isinstance(status, ProjectStatus) else ProjectStatus(status)


def can_transition(current: Union[ProjectStatus, str], new_status: Union[ProjectStatus, str]) -> Tuple[bool, str]:
    """
    Check if a project can move from ``current`` to ``new_status``.

    Returns (can_transition: bool, reason: str)
    """
    try:
        target = _coerce(new_status)
    except ValueError:
        return False, f"Invalid status: {new_status}"
    source = _coerce(current)

    if target == source:
        return True, "Same status"

    if target not in VALID_TRANSITIONS.get(source, []):
        return False, f"Cannot transition from '{source.value}' to '{target.value}'"

    return True, ""


def ensure_transition(current: Union[ProjectStatus, str], new_status: Union[ProjectStatus, str]) -> ProjectStatus:
    """Validate a transition and return the target status.

    Raises:
        InvalidTransition: If the move is not allowed.
    """
    can, reason = can_transition(current, new_status)
    if not can:
        logger.warning(
            f"Invalid status transition attempted: {reason}",
            extra={"payload": {"from": str(getattr(current, "value", current)), "to": str(new_status)}},
        )
        raise InvalidTransition(str(getattr(current, "value", current)), str(getattr(new_status, "value", new_status)), reason)
    return _coerce(new_status)
