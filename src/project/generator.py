"""
Project Generator for the planner core.

Builds new Project aggregates either as a bare scaffold (standard mode) or by
expanding a catalog template into a sequentially scheduled task tree
(template mode). A costed work breakdown for a project type can be generated
on request; standard mode never schedules anything.
"""

from datetime import datetime, timedelta
from typing import Callable, List, Mapping, Optional, Tuple, Union

from ..shared.config import DEFAULT_OWNER_ID, DEFAULT_RESOURCE_RATE, HOURS_PER_DAY, PLANNER_START_OFFSET_DAYS
from ..shared.logger import get_logger
from ..shared.utils import ensure_utc_datetime, get_utc_now, new_id, start_of_day
from .critical_path import compute_critical_path
from .errors import TemplateNotFound, ValidationError
from .store import ProjectStore
from .templates import ProjectTemplate, get_resource_rate, get_template_by_id
from .types import Project, ProjectCreate, ProjectStatus, ProjectType, Resource, Task
from .wbs import WbsPlan, build_wbs

logger = get_logger("generator", __name__)


def schedule_template(
    template: ProjectTemplate,
    start_date: datetime,
    owner_id: str = DEFAULT_OWNER_ID,
    created_at: Optional[datetime] = None,
) -> Tuple[List[Task], List[Resource]]:
    """Expand a template into scheduled tasks and the resources they use.

    Each phase becomes a level-1 task; its work items become level-2 children
    scheduled back to back inside the phase. Phase i+1 starts exactly where
    phase i ends. Leaf tasks form a single finish-to-start chain;
    critical path flags come from compute_critical_path.

    Args:
        template: Catalog entry to expand.
        start_date: Start of the first phase.
        owner_id: Recorded as ``created_by`` on every task.
        created_at: Creation stamp for every task; defaults to now.

    Returns:
        (tasks in display order, resources in first-use order)
    """
    created_at = created_at or get_utc_now()
    tasks: List[Task] = []
    resources: List[Resource] = []
    rates = {}

    cursor = start_date
    previous_phase_id: Optional[str] = None
    previous_leaf_id: Optional[str] = None

    for phase_index, phase in enumerate(template.phases):
        phase_end = cursor + timedelta(days=phase.duration)
        phase_task = Task(
            id=new_id(),
            name=phase.name,
            wbs_code=str(phase_index + 1),
            level=1,
            duration=phase.duration,
            start_date=cursor,
            end_date=phase_end,
            due_date=phase_end,
            description=phase.description,
            dependencies=[previous_phase_id] if previous_phase_id else [],
            created_by=owner_id,
            created_at=created_at,
            updated_at=created_at,
        )
        tasks.append(phase_task)

        if not phase.tasks:
            previous_leaf_id = phase_task.id
        else:
            child_cursor = cursor
            phase_cost = 0.0
            for item_index, item in enumerate(phase.tasks):
                if item.resource and item.resource not in rates:
                    rates[item.resource] = get_resource_rate(item.resource, DEFAULT_RESOURCE_RATE)
                    resources.append(Resource(
                        name=f"{item.resource} {len(resources) + 1}",
                        role=item.resource,
                        rate=rates[item.resource],
                    ))

                child_end = child_cursor + timedelta(days=item.duration)
                cost = item.duration * HOURS_PER_DAY * rates.get(item.resource, 0.0)
                phase_cost += cost
                child = Task(
                    id=new_id(),
                    name=item.name,
                    wbs_code=f"{phase_index + 1}.{item_index + 1}",
                    level=2,
                    parent_id=phase_task.id,
                    duration=item.duration,
                    start_date=child_cursor,
                    end_date=child_end,
                    due_date=child_end,
                    resource=item.resource,
                    cost=cost,
                            dependencies=[previous_leaf_id] if previous_leaf_id else [],
                    priority=item.priority,
                    assigned_to=[item.resource] if item.resource else [],
                    description=item.description,
                    created_by=owner_id,
                    created_at=created_at,
                    updated_at=created_at,
                )
                tasks.append(child)
                previous_leaf_id = child.id
                child_cursor = child_end
            phase_task.cost = phase_cost

        previous_phase_id = phase_task.id
        cursor = phase_end

    compute_critical_path(tasks)
    return tasks, resources


class ProjectGenerator:
    """Creates projects in standard or template mode and persists them."""

    def __init__(self, store: ProjectStore, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.store = store
        self.clock = clock or store.clock

    def create_project(self, spec: Union[ProjectCreate, Mapping]) -> Project:
        """Standard mode: an empty scaffold, no scheduling."""
        return self.store.create_project(spec)

    def default_start_date(self) -> datetime:
        return start_of_day(self.clock()) + timedelta(days=PLANNER_START_OFFSET_DAYS)

    def create_project_from_template(
        self,
        template_id: str,
        name: str,
        description: str = "",
        start_date: Optional[datetime] = None,
        owner_id: str = DEFAULT_OWNER_ID,
    ) -> Project:
        """Template mode: expand a catalog entry into a scheduled project.

        Args:
            template_id: Catalog id.
            name: Project name (non-empty).
            description: Free-text description.
            start_date: Start of the first phase; defaults to today (UTC
                midnight) plus PLANNER_START_OFFSET_DAYS.
            owner_id: Project owner and task creator.

        Returns:
            The persisted Project.

        Raises:
            TemplateNotFound: If template_id is not in the catalog.
            ValidationError: If name is empty.
        """
        template = get_template_by_id(template_id)
        if template is None:
            logger.warning(f"Unknown template requested: {template_id}")
            raise TemplateNotFound(template_id)
        if not name or not name.strip():
            raise ValidationError("Project name cannot be empty")

        now = self.clock()
        start = ensure_utc_datetime(start_date) if start_date is not None else self.default_start_date()
        tasks, resources = schedule_template(template, start, owner_id=owner_id, created_at=now)

        project = Project(
            id=new_id(),
            name=name.strip(),
            description=description,
            type=template.project_type,
            status=ProjectStatus.PLANNING,
            plan_type=template.plan_type,
            start_date=start,
            duration=template.total_duration,
            budget=template.budget or 0.0,
            tasks=tasks,
            resources=resources,
            owner_id=owner_id,
            members=[owner_id],
            created_at=now,
            updated_at=now,
        )
        self.store.save_project(project)

        logger.info(
            f"Generated project '{project.name}' from template '{template_id}'",
            extra={"payload": {
                "project_id": project.id,
                "template_id": template_id,
                "task_count": len(tasks),
                "duration": project.duration,
            }},
        )
        return project

    def generate_wbs(
        self,
        project_type: Union[ProjectType, str],
        start_date: Optional[datetime] = None,
        owner_id: str = DEFAULT_OWNER_ID,
    ) -> WbsPlan:
        """Build the costed work breakdown for ``project_type`` without persisting it.

        Raises:
            ValidationError: If ``project_type`` is unknown.
        """
        start = ensure_utc_datetime(start_date) if start_date is not None else self.default_start_date()
        return build_wbs(project_type, start, owner_id=owner_id, created_at=self.clock())

    def create_project_with_wbs(
        self,
        name: str,
        project_type: Union[ProjectType, str],
        description: str = "",
        start_date: Optional[datetime] = None,
        owner_id: str = DEFAULT_OWNER_ID,
    ) -> Project:
        """Create a project whose tasks, resources, duration and budget come from generate_wbs.

        Raises:
            ValidationError: If name is empty or the project type is unknown.
        """
        if not name or not name.strip():
            raise ValidationError("Project name cannot be empty")

        now = self.clock()
        start = ensure_utc_datetime(start_date) if start_date is not None else self.default_start_date()
        plan = build_wbs(project_type, start, owner_id=owner_id, created_at=now)

        project = Project(
            id=new_id(),
            name=name.strip(),
            description=description,
            type=ProjectType(project_type),
            status=ProjectStatus.PLANNING,
            start_date=start,
            duration=plan.duration,
            budget=plan.budget,
            tasks=plan.tasks,
            resources=plan.resources,
            owner_id=owner_id,
            members=[owner_id],
            created_at=now,
            updated_at=now,
        )
        self.store.save_project(project)

        logger.info(
            f"Generated project '{project.name}' with a {project.type.value} work breakdown",
            extra={"payload": {
                "project_id": project.id,
                "task_count": len(plan.tasks),
                "duration": plan.duration,
                "budget": plan.budget,
            }},
        )
        return project
