"""
Error taxonomy for the planner core.

Every error raised by the store, generator and collaboration engine derives
from PlannerError. Each class also derives from the builtin it refines so
callers catching ValueError/LookupError/RuntimeError keep working.
"""


class PlannerError(Exception):
    """Base class for planner core errors."""


class ValidationError(PlannerError, ValueError):
    """A required field is missing or invalid at creation time."""


class NotFoundError(PlannerError, LookupError):
    """Lookup by id failed."""

    kind = "Entity"

    def __init__(self, entity_id: str, message: str = "") -> None:
        self.entity_id = entity_id
        super().__init__(message or f"{self.kind} not found: {entity_id}")


class ProjectNotFound(NotFoundError):
    kind = "Project"


class TaskNotFound(NotFoundError):
    kind = "Task"


class TemplateNotFound(NotFoundError):
    kind = "Template"


class AttachmentNotFound(NotFoundError):
    kind = "Attachment"


class InvalidTransition(PlannerError, ValueError):
    """Illegal project status change."""

    def __init__(self, current: str, requested: str, reason: str = "") -> None:
        self.current = current
        self.requested = requested
        super().__init__(reason or f"Cannot transition from '{current}' to '{requested}'")


class StoreIOError(PlannerError, RuntimeError):
    """The persistence medium failed to read or write."""


class RevisionConflict(PlannerError, RuntimeError):
    """A write was based on a stale revision of the aggregate."""

    def __init__(self, project_id: str, expected: int, actual: int) -> None:
        self.project_id = project_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Stale write for project {project_id}: "
            f"caller holds revision {expected}, stored revision is {actual}"
        )


class VersionMismatch(PlannerError, RuntimeError):
    """The stored blob changed between read and compare-and-swap."""

    def __init__(self, key: str, expected, actual) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(f"Blob '{key}' changed: expected version {expected!r}, found {actual!r}")
