"""
Project Aggregate Domain Models for the planner core.

Defines Pydantic models for projects, tasks and their collaboration
collections. Field names are snake_case in Python and camelCase on the wire
(``activityFeed``, ``createdAt``); timestamps are aware UTC datetimes in
memory and ISO-8601 strings once serialized.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ..shared.utils import get_utc_now, new_id
from .errors import TaskNotFound


class ProjectType(str, Enum):
    """Closed enumeration of project kinds."""
    MOBILE_APP = "mobile-app"
    E_COMMERCE = "e-commerce"
    SAAS_PLATFORM = "saas-platform"
    CRM_SYSTEM = "crm-system"
    BOOKING_APP = "booking-app"
    HOSPITAL_SYSTEM = "hospital-system"
    SCHOOL_SYSTEM = "school-system"
    CUSTOM = "custom"


class ProjectStatus(str, Enum):
    """Project lifecycle states (see status.py for legal transitions)."""
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"


class PlanType(str, Enum):
    MARKETING = "marketing"
    SALES = "sales"
    SOFTWARE = "software"
    IT = "it"
    HR = "hr"
    PROJECT = "project"
    CUSTOM = "custom"


class TaskStatus(str, Enum):
    NOT_STARTED = "notStarted"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    DEFERRED = "deferred"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ActivityAction(str, Enum):
    """Kinds of collaboration events recorded in the activity feed."""
    COMMENTED = "commented"
    ATTACHED_FILE = "attached_file"
    REMOVED_FILE = "removed_file"


class WireModel(BaseModel):
    """Base model serializing to camelCase JSON."""

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> Dict[str, Any]:
        """Dump to a JSON-compatible dict with camelCase keys and ISO timestamps."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_wire(cls, data: Dict[str, Any]):
        return cls.model_validate(data)


class TaskComment(WireModel):
    """A comment on a task. Immutable once created."""

    id: str = Field(default_factory=new_id, description="Comment identifier (UUID)")
    task_id: str = Field(..., description="Owning task id (lookup only)")
    user_id: str = Field(..., description="Author id")
    user_name: str = Field(..., description="Author display name")
    content: str = Field(..., description="Free-text comment body")
    mentions: List[str] = Field(default_factory=list, description="Handles mentioned in content, first-seen order")
    created_at: datetime = Field(default_factory=get_utc_now)
    updated_at: datetime = Field(default_factory=get_utc_now)


class TaskAttachment(WireModel):
    """File metadata attached to a task. The bytes live in the blob registry."""

    id: str = Field(default_factory=new_id, description="Attachment identifier (UUID)")
    task_id: str = Field(..., description="Owning task id (lookup only)")
    file_name: str = Field(..., description="Original file name")
    file_size: int = Field(default=0, ge=0, description="Size in bytes")
    file_type: str = Field(default="application/octet-stream", description="MIME type")
    url: str = Field(..., description="Reference into the transient blob registry")
    uploaded_by: str = Field(..., description="Uploader user id")
    uploaded_at: datetime = Field(default_factory=get_utc_now)
    version: int = Field(default=1, ge=1, description="Always 1: no replace operation exists")


class Activity(WireModel):
    """One append-only entry of a project's activity feed."""

    id: str = Field(default_factory=new_id)
    task_id: str
    project_id: str
    user_id: str
    user_name: str
    action: ActivityAction
    details: str = Field(..., description="Human-readable summary")
    timestamp: datetime = Field(default_factory=get_utc_now)


class Resource(WireModel):
    id: str = Field(default_factory=new_id)
    name: str
    role: str
    rate: float = Field(default=0.0, ge=0, description="Hourly rate")


class Task(WireModel):
    """A scheduled unit of work inside a project.

    Tasks are created during generation and persisted only as part of their
    project. Missing fields in older stored data fall back to these defaults.
    """

    id: str = Field(default_factory=new_id, description="Task identifier, unique within its project")
    name: str = Field(default="Untitled Task")
    wbs_code: str = Field(default="1", description="Work breakdown code, e.g. '2.3'")
    level: int = Field(default=1, ge=1)
    parent_id: Optional[str] = None
    duration: int = Field(default=1, ge=0, description="Duration in days")
    start_date: datetime = Field(default_factory=get_utc_now)
    end_date: datetime = Field(default_factory=get_utc_now)
    resource: Optional[str] = None
    cost: float = Field(default=0.0, ge=0)
    is_critical_path: bool = False
    dependencies: List[str] = Field(default_factory=list, description="Predecessor task ids in the same project")

    # Critical path analysis, in days from the project start; None until computed
    early_start: Optional[int] = None
    early_finish: Optional[int] = None
    late_start: Optional[int] = None
    late_finish: Optional[int] = None
    float_days: Optional[int] = None
    free_float_days: Optional[int] = None

    status: TaskStatus = TaskStatus.NOT_STARTED
    priority: TaskPriority = TaskPriority.MEDIUM
    assigned_to: List[str] = Field(default_factory=list)
    due_date: Optional[datetime] = None
    description: str = ""
    labels: List[str] = Field(default_factory=list)
    progress: int = Field(default=0, ge=0, le=100)

    comments: List[TaskComment] = Field(default_factory=list)
    attachments: List[TaskAttachment] = Field(default_factory=list)

    created_by: str = "system"
    created_at: datetime = Field(default_factory=get_utc_now)
    updated_at: datetime = Field(default_factory=get_utc_now)


class Project(WireModel):
    """The aggregate root: a project with its tasks and activity feed."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "name": "Spring Campaign",
                "description": "Launch campaign for the spring catalogue",
                "type": "custom",
                "status": "planning",
                "duration": 22,
                "budget": 15000.0,
                "tasks": [],
                "activityFeed": [],
                "createdAt": "2024-01-15T10:30:00Z",
                "updatedAt": "2024-01-15T10:30:00Z",
            }
        }
    )

    id: str = Field(default_factory=new_id, description="Unique project identifier (UUID)")
    name: str = Field(..., description="Project name")
    description: str = Field(default="", description="Free-text description")
    type: ProjectType = Field(..., description="Project kind")
    status: ProjectStatus = Field(default=ProjectStatus.PLANNING)
    plan_type: PlanType = Field(default=PlanType.PROJECT)
    start_date: Optional[datetime] = None
    duration: int = Field(default=0, ge=0, description="Total schedule span in days, fixed at generation")
    budget: float = Field(default=0.0, ge=0)
    tasks: List[Task] = Field(default_factory=list, description="Tasks in display order")
    resources: List[Resource] = Field(default_factory=list)
    activity_feed: List[Activity] = Field(default_factory=list, description="Append-only collaboration log")
    owner_id: str = Field(default="current-user")
    members: List[str] = Field(default_factory=list)
    revision: int = Field(default=0, ge=0, description="Bumped by every successful store write")
    created_at: datetime = Field(default_factory=get_utc_now)
    updated_at: datetime = Field(default_factory=get_utc_now)

    @model_validator(mode="after")
    def default_members(self) -> "Project":
        if not self.members:
            self.members = [self.owner_id]
        return self

    def find_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def require_task(self, task_id: str) -> Task:
        task = self.find_task(task_id)
        if task is None:
            raise TaskNotFound(task_id, f"Task not found: {task_id} (project {self.id})")
        return task


class ProjectCreate(BaseModel):
    """Payload for creating a new project (no ID or timestamps)."""

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        json_schema_extra={
            "example": {
                "name": "Clinic Booking",
                "description": "Appointment booking for a small clinic",
                "type": "booking-app",
            }
        }
    )

    name: str = Field(..., description="Project name")
    description: str = Field(default="", description="Free-text description")
    type: ProjectType = Field(..., description="Project kind")
    duration: int = Field(default=0, ge=0)
    budget: float = Field(default=0.0, ge=0)
    plan_type: PlanType = Field(default=PlanType.PROJECT)
    owner_id: str = Field(default="current-user")


class ActivityPage(BaseModel):
    """A window over the activity feed, newest first."""

    items: List[Activity] = Field(default_factory=list)
    total: int = Field(default=0, description="Entries matching the filter before paging")
    offset: int = 0
    limit: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total
