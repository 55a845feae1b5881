"""Project Kernel for the planner core.

Manages Project aggregates: persistence, template-based generation, work
breakdowns with critical path analysis and the status lifecycle.
"""

from .types import Project, ProjectCreate, ProjectStatus, ProjectType, Task
from .store import ProjectStore
from .generator import ProjectGenerator
from .wbs import WbsPlan

__all__ = [
    "Project",
    "ProjectCreate",
    "ProjectStatus",
    "ProjectType",
    "Task",
    "ProjectStore",
    "ProjectGenerator",
    "WbsPlan",
]
