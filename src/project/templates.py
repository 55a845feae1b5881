"""
Project Templates for template-based project generation.

Provides pre-configured plans made of ordered phases. A phase either declares
its own duration or lists work items whose durations add up to the phase
duration. The catalog is read-only data consumed by the generator and by any
template picker.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .types import PlanType, ProjectType, TaskPriority


# Hourly rates per resource role, used to cost generated tasks
RESOURCE_RATES: Dict[str, float] = {
    "Project Manager": 150,
    "Frontend Developer": 120,
    "Backend Developer": 130,
    "AI Engineer": 150,
    "Database Engineer": 125,
    "QA Engineer": 90,
    "DevOps Engineer": 135,
    "UI/UX Designer": 110,
}


class CatalogModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, frozen=True)


class TemplateTask(CatalogModel):
    """A work item inside a template phase."""

    name: str
    description: str = ""
    duration: int = Field(..., ge=0)
    resource: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM


class TemplatePhase(CatalogModel):
    """An ordered stage of a template."""

    name: str
    description: str = ""
    duration: Optional[int] = Field(None, ge=0, description="Days; derived from tasks when omitted")
    tasks: List[TemplateTask] = Field(default_factory=list)

    @model_validator(mode="after")
    def resolve_duration(self) -> "TemplatePhase":
        if not self.tasks:
            if self.duration is None:
                raise ValueError(f"Phase '{self.name}' needs a duration or at least one task")
            return self
        total = sum(t.duration for t in self.tasks)
        if self.duration is None:
            # frozen model: bypass __setattr__
            object.__setattr__(self, "duration", total)
        elif self.duration != total:
            raise ValueError(
                f"Phase '{self.name}' declares {self.duration} days but its tasks sum to {total}"
            )
        return self


class ProjectTemplate(CatalogModel):
    """Template definition for project generation."""

    id: str
    name: str
    description: str
    icon: str = ""
    color: str = "primary"
    plan_type: PlanType = PlanType.PROJECT
    project_type: ProjectType = ProjectType.CUSTOM
    budget: Optional[float] = Field(None, ge=0, description="Default project budget")
    phases: List[TemplatePhase]

    @property
    def total_duration(self) -> int:
        return sum(p.duration for p in self.phases)


def _task(name: str, description: str, duration: int, resource: str, priority: str) -> TemplateTask:
    return TemplateTask(
        name=name,
        description=description,
        duration=duration,
        resource=resource,
        priority=TaskPriority(priority),
    )


# Default templates (can be extended or loaded from a config file)
DEFAULT_TEMPLATES: List[ProjectTemplate] = [
    ProjectTemplate(
        id="marketing-campaign",
        name="Marketing Campaign",
        description="Launch a comprehensive marketing campaign with content, social media, and analytics",
        icon="📢",
        color="chart-1",
        plan_type=PlanType.MARKETING,
        project_type=ProjectType.CUSTOM,
        budget=25000,
        phases=[
            TemplatePhase(
                name="1. Campaign Planning",
                description="Define strategy, target audience, and goals",
                tasks=[
                    _task("Market Research", "Analyze target market and competitors", 5, "Project Manager", "high"),
                    _task("Campaign Strategy", "Define campaign objectives and KPIs", 3, "Project Manager", "high"),
                    _task("Budget Planning", "Allocate budget across channels", 2, "Project Manager", "medium"),
                ],
            ),
            TemplatePhase(
                name="2. Content Creation",
                description="Develop marketing materials and content",
                tasks=[
                    _task("Content Calendar", "Plan content schedule", 3, "UI/UX Designer", "high"),
                    _task("Design Assets", "Create visual materials", 10, "UI/UX Designer", "high"),
                    _task("Copywriting", "Write marketing copy", 7, "UI/UX Designer", "medium"),
                ],
            ),
            TemplatePhase(
                name="3. Channel Setup",
                description="Configure marketing channels",
                tasks=[
                    _task("Social Media Setup", "Configure social media accounts", 5, "Frontend Developer", "medium"),
                    _task("Email Marketing Setup", "Set up email campaigns", 4, "Backend Developer", "medium"),
                    _task("Analytics Configuration", "Set up tracking and analytics", 3, "Backend Developer", "high"),
                ],
            ),
            TemplatePhase(
                name="4. Launch & Monitor",
                description="Launch campaign and monitor performance",
                tasks=[
                    _task("Campaign Launch", "Go live with campaign", 1, "Project Manager", "urgent"),
                    _task("Performance Monitoring", "Track KPIs and metrics", 14, "Project Manager", "high"),
                    _task("Optimization", "Adjust based on performance data", 7, "Project Manager", "medium"),
                ],
            ),
        ],
    ),
    ProjectTemplate(
        id="sales-pipeline",
        name="Sales Pipeline",
        description="Manage sales process from lead generation to closing",
        icon="💰",
        color="chart-2",
        plan_type=PlanType.SALES,
        project_type=ProjectType.CUSTOM,
        budget=18000,
        phases=[
            TemplatePhase(
                name="1. Lead Generation",
                description="Identify and qualify leads",
                tasks=[
                    _task("Lead Source Setup", "Configure lead sources", 3, "Project Manager", "high"),
                    _task("Lead Qualification", "Define qualification criteria", 2, "Project Manager", "high"),
                ],
            ),
            TemplatePhase(
                name="2. Prospecting",
                description="Reach out to qualified leads",
                tasks=[
                    _task("Outreach Campaign", "Email and call campaigns", 10, "Project Manager", "high"),
                    _task("Follow-up System", "Automated follow-up sequences", 5, "Backend Developer", "medium"),
                ],
            ),
            TemplatePhase(
                name="3. Sales Process",
                description="Move leads through sales stages",
                tasks=[
                    _task("Discovery Calls", "Initial sales calls", 14, "Project Manager", "high"),
                    _task("Proposal Creation", "Create custom proposals", 7, "Project Manager", "high"),
                    _task("Negotiation", "Contract negotiations", 10, "Project Manager", "urgent"),
                ],
            ),
            TemplatePhase(
                name="4. Closing",
                description="Finalize deals and onboarding",
                tasks=[
                    _task("Contract Signing", "Finalize contracts", 5, "Project Manager", "urgent"),
                    _task("Customer Onboarding", "Onboard new customers", 7, "Project Manager", "high"),
                ],
            ),
        ],
    ),
    ProjectTemplate(
        id="software-development",
        name="Software Development (Agile/Sprint)",
        description="Agile software development with sprints and iterations",
        icon="💻",
        color="chart-3",
        plan_type=PlanType.SOFTWARE,
        project_type=ProjectType.MOBILE_APP,
        budget=120000,
        phases=[
            TemplatePhase(
                name="Sprint 1: Foundation",
                description="Set up project infrastructure",
                tasks=[
                    _task("Sprint Planning", "Plan sprint goals and tasks", 1, "Project Manager", "high"),
                    _task("Environment Setup", "Set up dev, staging, production", 3, "DevOps Engineer", "high"),
                    _task("Architecture Design", "Design system architecture", 5, "Backend Developer", "high"),
                ],
            ),
            TemplatePhase(
                name="Sprint 2: Core Features",
                description="Build core functionality",
                tasks=[
                    _task("API Development", "Build REST APIs", 10, "Backend Developer", "high"),
                    _task("UI Components", "Build reusable UI components", 10, "Frontend Developer", "high"),
                    _task("Database Setup", "Design and implement database", 5, "Database Engineer", "high"),
                ],
            ),
            TemplatePhase(
                name="Sprint 3: Integration",
                description="Integrate features and test",
                tasks=[
                    _task("Feature Integration", "Integrate frontend and backend", 8, "Frontend Developer", "high"),
                    _task("Testing", "Unit and integration tests", 7, "QA Engineer", "high"),
                    _task("Bug Fixes", "Fix identified issues", 5, "Backend Developer", "medium"),
                ],
            ),
            TemplatePhase(
                name="Sprint 4: Launch",
                description="Prepare for production launch",
                tasks=[
                    _task("Performance Optimization", "Optimize for production", 5, "Backend Developer", "high"),
                    _task("Security Audit", "Security review and fixes", 3, "Backend Developer", "urgent"),
                    _task("Production Deployment", "Deploy to production", 2, "DevOps Engineer", "urgent"),
                ],
            ),
        ],
    ),
    ProjectTemplate(
        id="it-request",
        name="IT Request Management",
        description="Manage IT service requests and tickets",
        icon="🖥️",
        color="chart-4",
        plan_type=PlanType.IT,
        project_type=ProjectType.CUSTOM,
        phases=[
            TemplatePhase(
                name="1. Request Intake",
                description="Receive and categorize requests",
                tasks=[
                    _task("Request Submission", "Submit IT request", 1, "Project Manager", "high"),
                    _task("Request Triage", "Categorize and prioritize", 1, "Project Manager", "high"),
                ],
            ),
            TemplatePhase(
                name="2. Analysis",
                description="Analyze requirements and feasibility",
                tasks=[
                    _task("Requirements Analysis", "Analyze technical requirements", 3, "Backend Developer", "high"),
                    _task("Feasibility Study", "Assess technical feasibility", 2, "Backend Developer", "medium"),
                ],
            ),
            TemplatePhase(
                name="3. Implementation",
                description="Implement the solution",
                tasks=[
                    _task("Solution Design", "Design technical solution", 5, "Backend Developer", "high"),
                    _task("Development", "Implement solution", 10, "Backend Developer", "high"),
                    _task("Testing", "Test solution", 3, "QA Engineer", "high"),
                ],
            ),
            TemplatePhase(
                name="4. Deployment",
                description="Deploy and close request",
                tasks=[
                    _task("Deployment", "Deploy to production", 2, "DevOps Engineer", "urgent"),
                    _task("User Acceptance", "Get user sign-off", 2, "Project Manager", "high"),
                    _task("Request Closure", "Close request ticket", 1, "Project Manager", "medium"),
                ],
            ),
        ],
    ),
    ProjectTemplate(
        id="hr-onboarding",
        name="HR Onboarding",
        description="Complete employee onboarding process",
        icon="👥",
        color="chart-5",
        plan_type=PlanType.HR,
        project_type=ProjectType.CUSTOM,
        phases=[
            TemplatePhase(
                name="1. Pre-boarding",
                description="Prepare for new employee arrival",
                tasks=[
                    _task("Offer Acceptance", "Employee accepts offer", 1, "Project Manager", "urgent"),
                    _task("Paperwork Preparation", "Prepare employment documents", 2, "Project Manager", "high"),
                    _task("Equipment Ordering", "Order laptop and equipment", 3, "Project Manager", "high"),
                ],
            ),
            TemplatePhase(
                name="2. First Day",
                description="Welcome and orientation",
                tasks=[
                    _task("Welcome Session", "Welcome new employee", 1, "Project Manager", "urgent"),
                    _task("Office Tour", "Show office facilities", 1, "Project Manager", "medium"),
                    _task("System Access Setup", "Set up accounts and access", 2, "Backend Developer", "high"),
                ],
            ),
            TemplatePhase(
                name="3. Training",
                description="Provide necessary training",
                tasks=[
                    _task("Company Orientation", "Company culture and policies", 2, "Project Manager", "high"),
                    _task("Role Training", "Job-specific training", 5, "Project Manager", "high"),
                    _task("Tool Training", "Training on company tools", 3, "Project Manager", "medium"),
                ],
            ),
            TemplatePhase(
                name="4. Integration",
                description="Help employee integrate into team",
                tasks=[
                    _task("Team Introductions", "Introduce to team members", 1, "Project Manager", "medium"),
                    _task("Mentor Assignment", "Assign onboarding mentor", 1, "Project Manager", "high"),
                    _task("30-Day Check-in", "First month review", 1, "Project Manager", "medium"),
                ],
            ),
        ],
    ),
    ProjectTemplate(
        id="project-management",
        name="Project Management",
        description="Standard project management template with full WBS",
        icon="📊",
        color="primary",
        plan_type=PlanType.PROJECT,
        project_type=ProjectType.CUSTOM,
        phases=[
            TemplatePhase(
                name="1. Project Initiation",
                description="Kick off the project",
                tasks=[
                    _task("Project Charter", "Create project charter", 2, "Project Manager", "high"),
                    _task("Stakeholder Identification", "Identify all stakeholders", 2, "Project Manager", "high"),
                    _task("Team Assembly", "Assemble project team", 3, "Project Manager", "high"),
                ],
            ),
            TemplatePhase(
                name="2. Planning",
                description="Plan project in detail",
                tasks=[
                    _task("WBS Creation", "Create work breakdown structure", 5, "Project Manager", "high"),
                    _task("Schedule Development", "Develop project schedule", 5, "Project Manager", "high"),
                    _task("Budget Planning", "Create project budget", 3, "Project Manager", "high"),
                    _task("Risk Management", "Identify and plan for risks", 3, "Project Manager", "medium"),
                ],
            ),
            TemplatePhase(
                name="3. Execution",
                description="Execute project work",
                tasks=[
                    _task("Task Execution", "Execute project tasks", 30, "Project Manager", "high"),
                    _task("Progress Monitoring", "Monitor project progress", 30, "Project Manager", "high"),
                    _task("Quality Assurance", "Ensure quality standards", 20, "QA Engineer", "high"),
                ],
            ),
            TemplatePhase(
                name="4. Closure",
                description="Close out the project",
                tasks=[
                    _task("Final Deliverables", "Complete final deliverables", 5, "Project Manager", "urgent"),
                    _task("Project Review", "Conduct project review", 2, "Project Manager", "high"),
                    _task("Lessons Learned", "Document lessons learned", 2, "Project Manager", "medium"),
                ],
            ),
        ],
    ),
]


def get_all_templates() -> List[ProjectTemplate]:
    """Get all available project templates.

    Returns:
        List of ProjectTemplate objects (a copy of the catalog list).
    """
    return DEFAULT_TEMPLATES.copy()


def get_template_by_id(template_id: str) -> Optional[ProjectTemplate]:
    """Get a template by its ID.

    Args:
        template_id: The template identifier.

    Returns:
        ProjectTemplate if found, None otherwise.
    """
    templates = get_all_templates()
    return next((t for t in templates if t.id == template_id), None)


def get_resource_rate(role: Optional[str], default: float) -> float:
    if role is None:
        return 0.0
    return float(RESOURCE_RATES.get(role, default))
