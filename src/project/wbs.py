"""
Work breakdown catalog per project type.

Each ProjectType has a phased breakdown of work items; the larger types break
work items down further into subtasks, giving a three-level WBS. build_wbs
schedules a breakdown back to back from a start date, costs every leaf at its
role's hourly rate and runs the critical path pass over the result. The
project budget of a generated breakdown is its total cost.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, model_validator

from ..shared.config import DEFAULT_OWNER_ID, DEFAULT_RESOURCE_RATE, HOURS_PER_DAY
from ..shared.logger import get_logger
from ..shared.utils import get_utc_now, new_id
from .critical_path import compute_critical_path
from .errors import ValidationError
from .templates import CatalogModel, get_resource_rate
from .types import ProjectType, Resource, Task

logger = get_logger("generator", __name__)

PM = "Project Manager"
FRONTEND = "Frontend Developer"
BACKEND = "Backend Developer"
AI = "AI Engineer"
DATABASE = "Database Engineer"
QA = "QA Engineer"
DEVOPS = "DevOps Engineer"
DESIGNER = "UI/UX Designer"


class WbsSubtask(CatalogModel):
    """Third-level work package."""

    name: str
    duration: int = Field(..., ge=0)
    resource: str


class WbsTask(CatalogModel):
    """Second-level work item; its duration is the sum of its subtasks when it has any."""

    name: str
    resource: str
    duration: Optional[int] = Field(None, ge=0)
    subtasks: List[WbsSubtask] = Field(default_factory=list)

    @model_validator(mode="after")
    def resolve_duration(self) -> "WbsTask":
        if not self.subtasks:
            if self.duration is None:
                raise ValueError(f"Work item '{self.name}' needs a duration or at least one subtask")
            return self
        total = sum(s.duration for s in self.subtasks)
        if self.duration is None:
            object.__setattr__(self, "duration", total)
        elif self.duration != total:
            raise ValueError(f"Work item '{self.name}' declares {self.duration} days but its subtasks sum to {total}")
        return self


class WbsPhase(CatalogModel):
    name: str
    tasks: List[WbsTask] = Field(..., min_length=1)


class WbsTemplate(CatalogModel):
    project_type: ProjectType
    phases: List[WbsPhase] = Field(..., min_length=1)

    @property
    def total_duration(self) -> int:
        return sum(t.duration for p in self.phases for t in p.tasks)


class WbsPlan(BaseModel):
    """A scheduled breakdown, ready to be placed on a project."""

    tasks: List[Task]
    resources: List[Resource]
    duration: int = Field(..., ge=0, description="Days from the start date to the last finish")
    budget: float = Field(..., ge=0, description="Total cost of all leaf tasks")
    critical_path: List[str] = Field(default_factory=list)


def _sub(name: str, duration: int) -> Tuple[str, int]:
    return name, duration


def _work(name: str, resource: str, *subtasks: Tuple[str, int], duration: Optional[int] = None) -> WbsTask:
    """A work item whose subtasks are staffed by the same role."""
    return WbsTask(
        name=name,
        resource=resource,
        duration=duration,
        subtasks=[WbsSubtask(name=n, duration=d, resource=resource) for n, d in subtasks],
    )


def _phase(name: str, *tasks: WbsTask) -> WbsPhase:
    return WbsPhase(name=name, tasks=list(tasks))


WBS_CATALOG: Dict[ProjectType, WbsTemplate] = {
    t.project_type: t for t in [
        WbsTemplate(project_type=ProjectType.MOBILE_APP, phases=[
            _phase(
                "1. Project Planning & Initiation",
                _work("1.1 Project Kickoff & Setup", PM,
                      _sub("Stakeholder Meeting", 1),
                      _sub("Project Charter Creation", 1),
                      _sub("Team Assembly", 1)),
                _work("1.2 Requirements Gathering & Analysis", PM,
                      _sub("User Requirements Collection", 3),
                      _sub("Business Requirements Analysis", 2),
                      _sub("Requirements Documentation", 2),
                      _sub("Requirements Review & Approval", 1)),
                _work("1.3 Technical Architecture Design", BACKEND,
                      _sub("System Architecture Design", 4),
                      _sub("Technology Stack Selection", 2),
                      _sub("API Design & Documentation", 3),
                      _sub("Architecture Review", 1)),
            ),
            _phase(
                "2. Design Phase",
                _work("2.1 UI/UX Design", DESIGNER,
                      _sub("User Research & Personas", 3),
                      _sub("Wireframing", 4),
                      _sub("Visual Design", 5),
                      _sub("Design Review & Iteration", 3)),
                _work("2.2 Design System Creation", DESIGNER,
                      _sub("Component Library Design", 4),
                      _sub("Style Guide Development", 2),
                      _sub("Design System Documentation", 2)),
                _work("2.3 Prototype Development", FRONTEND,
                      _sub("Interactive Prototype Creation", 4),
                      _sub("User Testing & Feedback", 2),
                      _sub("Prototype Refinement", 1)),
            ),
            _phase(
                "3. Development Phase",
                _work("3.1 Backend Development", BACKEND,
                      _sub("API Endpoint Development", 15),
                      _sub("Business Logic Implementation", 12),
                      _sub("API Testing & Documentation", 5),
                      _sub("Performance Optimization", 3)),
                _work("3.2 Database Setup & Management", DATABASE,
                      _sub("Database Schema Design", 3),
                      _sub("Database Implementation", 4),
                      _sub("Data Migration Scripts", 2),
                      _sub("Database Optimization", 1)),
                _work("3.3 Frontend Development", FRONTEND,
                      _sub("UI Component Development", 15),
                      _sub("State Management Setup", 5),
                      _sub("API Integration", 10),
                      _sub("Responsive Design Implementation", 7),
                      _sub("Frontend Testing", 3)),
                _work("3.4 Authentication & Security", BACKEND,
                      _sub("Authentication System Development", 6),
                      _sub("Authorization Implementation", 3),
                      _sub("Security Audit & Fixes", 3)),
                _work("3.5 AI Features Integration", AI,
                      _sub("AI Model Integration", 8),
                      _sub("Machine Learning Pipeline", 7),
                      _sub("AI Feature Testing", 5)),
            ),
            _phase(
                "4. Testing Phase",
                _work("4.1 Unit Testing", QA,
                      _sub("Unit Test Development", 8),
                      _sub("Code Coverage Analysis", 3),
                      _sub("Unit Test Execution", 4)),
                _work("4.2 Integration Testing", QA,
                      _sub("Integration Test Planning", 2),
                      _sub("Integration Test Development", 5),
                      _sub("Integration Test Execution", 4),
                      _sub("Bug Fixing & Retesting", 1)),
                _work("4.3 User Acceptance Testing (UAT)", PM,
                      _sub("UAT Planning", 1),
                      _sub("UAT Execution", 5),
                      _sub("UAT Feedback Collection", 1),
                      _sub("Final Adjustments", 1)),
            ),
            _phase(
                "5. Deployment & Launch",
                _work("5.1 CI/CD Setup", DEVOPS,
                      _sub("CI/CD Pipeline Configuration", 4),
                      _sub("Automated Testing Integration", 2),
                      _sub("Deployment Automation", 2)),
                _work("5.2 Production Deployment", DEVOPS,
                      _sub("Production Environment Setup", 2),
                      _sub("Application Deployment", 2),
                      _sub("Deployment Verification", 1)),
                _work("5.3 Post-Launch Monitoring", DEVOPS,
                      _sub("Monitoring Setup", 3),
                      _sub("Performance Monitoring", 4),
                      _sub("Issue Resolution", 3)),
            ),
        ]),
        WbsTemplate(project_type=ProjectType.E_COMMERCE, phases=[
            _phase(
                "1. Project Planning & Analysis",
                _work("1.1 Project Initiation", PM,
                      _sub("Stakeholder Alignment", 1),
                      _sub("Project Charter", 1),
                      _sub("Team Setup", 1)),
                _work("1.2 Requirements Analysis", PM,
                      _sub("Business Requirements", 4),
                      _sub("Functional Requirements", 3),
                      _sub("Non-Functional Requirements", 2),
                      _sub("Requirements Validation", 1)),
                _work("1.3 Technical Design & Architecture", BACKEND,
                      _sub("System Architecture Design", 5),
                      _sub("Database Schema Design", 3),
                      _sub("API Design", 3),
                      _sub("Security Architecture", 1)),
            ),
            _phase(
                "2. Design Phase",
                _work("2.1 UI/UX Design", DESIGNER,
                      _sub("User Research", 4),
                      _sub("Information Architecture", 3),
                      _sub("Wireframing", 5),
                      _sub("Visual Design", 4),
                      _sub("Design Review", 2)),
                _work("2.2 Product Pages Design", DESIGNER,
                      _sub("Product Listing Design", 4),
                      _sub("Product Detail Page Design", 4),
                      _sub("Category Pages Design", 3),
                      _sub("Design Refinement", 1)),
            ),
            _phase(
                "3. Development Phase",
                _work("3.1 Database Development", DATABASE,
                      _sub("Database Implementation", 5),
                      _sub("Data Models Creation", 3),
                      _sub("Database Optimization", 2)),
                _work("3.2 Product Catalog System", BACKEND,
                      _sub("Product Management APIs", 8),
                      _sub("Category Management", 5),
                      _sub("Search & Filter APIs", 5),
                      _sub("Catalog Testing", 2)),
                _work("3.3 Shopping Cart & Checkout", FRONTEND,
                      _sub("Cart Component Development", 5),
                      _sub("Checkout Flow", 6),
                      _sub("Order Management UI", 3),
                      _sub("Cart Testing", 1)),
                _work("3.4 Payment Gateway Integration", BACKEND,
                      _sub("Payment API Integration", 8),
                      _sub("Payment Security Implementation", 4),
                      _sub("Payment Testing", 3)),
                _work("3.5 AI Recommendation Engine", AI,
                      _sub("ML Model Development", 10),
                      _sub("Recommendation Algorithm", 8),
                      _sub("Integration with Catalog", 5),
                      _sub("AI Testing & Tuning", 2)),
                _work("3.6 Admin Dashboard", FRONTEND,
                      _sub("Dashboard Layout", 5),
                      _sub("Product Management UI", 6),
                      _sub("Order Management UI", 5),
                      _sub("Analytics Dashboard", 4)),
            ),
            _phase(
                "4. Testing & Quality Assurance",
                _work("4.1 Comprehensive Testing", QA,
                      _sub("Test Planning", 2),
                      _sub("Functional Testing", 6),
                      _sub("Integration Testing", 5),
                      _sub("Performance Testing", 3),
                      _sub("Security Testing", 2)),
            ),
            _phase(
                "5. Deployment & Launch",
                _work("5.1 Production Deployment", DEVOPS,
                      _sub("Production Environment Setup", 3),
                      _sub("Application Deployment", 3),
                      _sub("Deployment Verification", 2)),
            ),
        ]),
        WbsTemplate(project_type=ProjectType.SAAS_PLATFORM, phases=[
            _phase("Planning", _work("Requirements", PM, duration=5), _work("Architecture", BACKEND, duration=8)),
            _phase("Design", _work("UI Design", DESIGNER, duration=12)),
            _phase(
                "Development",
                _work("Backend APIs", BACKEND, duration=25),
                _work("Frontend Dashboard", FRONTEND, duration=30),
                _work("Multi-tenancy Setup", BACKEND, duration=10),
                _work("AI Analytics", AI, duration=15),
            ),
            _phase("Launch", _work("Testing", QA, duration=10), _work("Deployment", DEVOPS, duration=5)),
        ]),
        WbsTemplate(project_type=ProjectType.CRM_SYSTEM, phases=[
            _phase("Planning", _work("Requirements", PM, duration=5)),
            _phase(
                "Development",
                _work("Database Design", DATABASE, duration=8),
                _work("Contact Management", BACKEND, duration=15),
                _work("Sales Pipeline", FRONTEND, duration=20),
                _work("AI Lead Scoring", AI, duration=12),
            ),
            _phase("Testing", _work("QA Testing", QA, duration=10)),
        ]),
        WbsTemplate(project_type=ProjectType.BOOKING_APP, phases=[
            _phase("Planning", _work("Requirements", PM, duration=5)),
            _phase(
                "Development",
                _work("Booking Engine", BACKEND, duration=20),
                _work("Calendar System", FRONTEND, duration=15),
                _work("Payment Integration", BACKEND, duration=10),
            ),
            _phase("Testing", _work("Testing", QA, duration=8)),
        ]),
        WbsTemplate(project_type=ProjectType.HOSPITAL_SYSTEM, phases=[
            _phase("Planning", _work("Requirements", PM, duration=8), _work("Compliance Review", PM, duration=5)),
            _phase(
                "Development",
                _work("Patient Records", BACKEND, duration=20),
                _work("Appointment System", FRONTEND, duration=15),
                _work("AI Diagnosis Assistant", AI, duration=25),
            ),
            _phase("Testing", _work("Testing", QA, duration=15)),
        ]),
        WbsTemplate(project_type=ProjectType.SCHOOL_SYSTEM, phases=[
            _phase("Planning", _work("Requirements", PM, duration=5)),
            _phase(
                "Development",
                _work("Student Management", BACKEND, duration=18),
                _work("Grade Management", FRONTEND, duration=15),
                _work("Attendance System", FRONTEND, duration=10),
            ),
            _phase("Testing", _work("Testing", QA, duration=10)),
        ]),
        WbsTemplate(project_type=ProjectType.CUSTOM, phases=[
            _phase("Planning", _work("Requirements", PM, duration=5)),
            _phase(
                "Development",
                _work("Backend Development", BACKEND, duration=20),
                _work("Frontend Development", FRONTEND, duration=20),
            ),
            _phase("Testing", _work("Testing", QA, duration=8)),
        ]),
    ]
}


def get_wbs_template(project_type: Union[ProjectType, str]) -> WbsTemplate:
    """Look up the breakdown for a project type.

    Raises:
        ValidationError: If ``project_type`` is not a known project type.
    """
    try:
        return WBS_CATALOG[ProjectType(project_type)]
    except (ValueError, KeyError) as e:
        raise ValidationError(f"No work breakdown for project type: {project_type}") from e


def build_wbs(
    project_type: Union[ProjectType, str],
    start_date: datetime,
    owner_id: str = DEFAULT_OWNER_ID,
    created_at: Optional[datetime] = None,
) -> WbsPlan:
    """Schedule, cost and analyse the breakdown of ``project_type``.

    Work items run back to back across the whole project; subtasks run back
    to back inside their work item. Phase i+1 depends on phase i.

    Args:
        project_type: Which catalog entry to expand.
        start_date: Start of the first work item.
        owner_id: Recorded as ``created_by`` on every task.
        created_at: Creation stamp for every task; defaults to now.

    Returns:
        WbsPlan with tasks in WBS order and resources in first-use order.

    Raises:
        ValidationError: If the project type has no breakdown.
    """
    template = get_wbs_template(project_type)
    created_at = created_at or get_utc_now()
    tasks: List[Task] = []
    resources: List[Resource] = []
    rates: Dict[str, float] = {}

    def rate_for(role: str) -> float:
        if role not in rates:
            rates[role] = get_resource_rate(role, DEFAULT_RESOURCE_RATE)
            resources.append(Resource(name=f"{role} {len(resources) + 1}", role=role, rate=rates[role]))
        return rates[role]

    def make_task(name: str, wbs_code: str, level: int, parent_id: Optional[str], start: datetime,
                  duration: int, resource: Optional[str], cost: float, dependencies: List[str]) -> Task:
        end = start + timedelta(days=duration)
        return Task(
            id=new_id(),
            name=name,
            wbs_code=wbs_code,
            level=level,
            parent_id=parent_id,
            duration=duration,
            start_date=start,
            end_date=end,
            due_date=end,
            resource=resource,
            cost=cost,
            dependencies=dependencies,
            assigned_to=[resource] if resource else [],
            created_by=owner_id,
            created_at=created_at,
            updated_at=created_at,
        )

    cursor = start_date
    total_cost = 0.0
    previous_phase_id: Optional[str] = None
    previous_work_id: Optional[str] = None

    for phase_index, phase in enumerate(template.phases, start=1):
        phase_task = make_task(
            phase.name, str(phase_index), 1, None, cursor, 0, None, 0.0,
            [previous_phase_id] if previous_phase_id else [],
        )
        tasks.append(phase_task)

        for work_index, work in enumerate(phase.tasks, start=1):
            work_code = f"{phase_index}.{work_index}"
            work_task = make_task(
                work.name, work_code, 2, phase_task.id, cursor, work.duration, work.resource, 0.0,
                [previous_work_id] if previous_work_id else [],
            )
            tasks.append(work_task)

            previous_sub_id: Optional[str] = None
            for sub_index, sub in enumerate(work.subtasks, start=1):
                cost = sub.duration * HOURS_PER_DAY * rate_for(sub.resource)
                subtask = make_task(
                    sub.name, f"{work_code}.{sub_index}", 3, work_task.id, cursor, sub.duration, sub.resource,
                    cost, [previous_sub_id] if previous_sub_id else [],
                )
                tasks.append(subtask)
                work_task.cost += cost
                previous_sub_id = subtask.id
                cursor = subtask.end_date

            rate = rate_for(work.resource)
            if not work.subtasks:
                work_task.cost = work.duration * HOURS_PER_DAY * rate
            cursor = work_task.end_date

            phase_task.cost += work_task.cost
            total_cost += work_task.cost
            previous_work_id = work_task.id

        phase_task.duration = (cursor - phase_task.start_date).days
        phase_task.end_date = cursor
        phase_task.due_date = cursor
        previous_phase_id = phase_task.id

    result = compute_critical_path(tasks)
    duration = (cursor - start_date).days

    logger.debug(
        f"Built work breakdown for {template.project_type.value}",
        extra={"payload": {"task_count": len(tasks), "duration": duration, "budget": total_cost}},
    )
    return WbsPlan(
        tasks=tasks,
        resources=resources,
        duration=duration,
        budget=total_cost,
        critical_path=result.critical_path,
    )
