"""
Unit tests for ProjectGenerator (src/project/generator.py).

Tests:
- Standard mode builds an unscheduled scaffold
- Template mode schedules phases back to back and sums durations
- Generation is deterministic apart from ids
- Unknown templates and empty names are rejected
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from src.project.errors import TemplateNotFound, ValidationError
from src.project.generator import schedule_template
from src.project.templates import ProjectTemplate, TemplatePhase, TemplateTask, get_template_by_id
from src.project.types import PlanType, ProjectStatus, ProjectType, TaskPriority


START = datetime(2024, 3, 4, tzinfo=timezone.utc)


@pytest.fixture
def flat_template():
    """Three phases without work items: 5, 10 and 7 days."""
    return ProjectTemplate(
        id="flat",
        name="Flat",
        description="Three sequential phases",
        phases=[
            TemplatePhase(name="Discover", duration=5),
            TemplatePhase(name="Build", duration=10),
            TemplatePhase(name="Launch", duration=7),
        ],
    )


def _shape(project):
    """Everything about the generated tasks except ids."""
    return [
        (t.name, t.wbs_code, t.level, t.duration, t.start_date - project.start_date, t.end_date - project.start_date)
        for t in project.tasks
    ]


class TestStandardMode:
    def test_scaffold_has_no_tasks(self, generator):
        project = generator.create_project({"name": "Scaffold", "description": "d", "type": "crm-system"})

        assert project.tasks == []
        assert project.status == ProjectStatus.PLANNING
        assert project.type == ProjectType.CRM_SYSTEM
        assert project.duration == 0

    def test_scaffold_is_persisted(self, generator, store):
        project = generator.create_project({"name": "Scaffold", "type": "custom"})
        assert store.get_project_by_id(project.id) == project


class TestTemplateMode:
    def test_duration_is_sum_of_phases(self, generator, flat_template):
        with patch("src.project.generator.get_template_by_id", return_value=flat_template):
            project = generator.create_project_from_template("flat", "Flat plan", "", start_date=START)

        assert project.duration == 22
        assert [t.name for t in project.tasks] == ["Discover", "Build", "Launch"]
        assert [t.duration for t in project.tasks] == [5, 10, 7]

    def test_phases_are_sequential_without_gaps(self, generator, flat_template):
        with patch("src.project.generator.get_template_by_id", return_value=flat_template):
            project = generator.create_project_from_template("flat", "Flat plan", "", start_date=START)

        tasks = project.tasks
        assert tasks[0].start_date == START
        for previous, current in zip(tasks, tasks[1:]):
            assert current.start_date == previous.end_date
        assert tasks[-1].end_date - tasks[0].start_date == timedelta(days=22)
        assert sum((t.end_date - t.start_date).days for t in tasks) == 22

    def test_phase_chain_dependencies(self, generator, flat_template):
        with patch("src.project.generator.get_template_by_id", return_value=flat_template):
            project = generator.create_project_from_template("flat", "Flat plan", "", start_date=START)

        first, second, third = project.tasks
        assert first.dependencies == []
        assert second.dependencies == [first.id]
        assert third.dependencies == [second.id]

    def test_budget_defaults_to_zero_without_template_budget(self, generator, flat_template):
        with patch("src.project.generator.get_template_by_id", return_value=flat_template):
            project = generator.create_project_from_template("flat", "Flat plan", "", start_date=START)

        assert project.budget == 0.0
        assert project.resources == []

    def test_generation_is_deterministic_except_ids(self, generator):
        first = generator.create_project_from_template("software-development", "App", "v1", start_date=START)
        second = generator.create_project_from_template("software-development", "App", "v1", start_date=START)

        assert _shape(first) == _shape(second)
        assert first.duration == second.duration
        assert first.budget == second.budget
        assert {t.id for t in first.tasks}.isdisjoint({t.id for t in second.tasks})
        assert first.id != second.id

    def test_default_start_is_today_at_midnight(self, generator, clock):
        project = generator.create_project_from_template("it-request", "Ticket", "")

        assert project.start_date == datetime(2024, 1, 15, tzinfo=timezone.utc)
        assert project.tasks[0].start_date == project.start_date
        assert project.created_at == clock()

    def test_catalog_template_expands_work_items(self, generator):
        template = get_template_by_id("marketing-campaign")
        project = generator.create_project_from_template("marketing-campaign", "Spring", "", start_date=START)

        phase_tasks = [t for t in project.tasks if t.level == 1]
        children = [t for t in project.tasks if t.level == 2]
        assert len(phase_tasks) == len(template.phases)
        assert len(children) == sum(len(p.tasks) for p in template.phases)
        assert project.duration == template.total_duration == 64
        assert project.budget == template.budget
        assert project.plan_type == PlanType.MARKETING
        assert project.type == ProjectType.CUSTOM

        first_phase = phase_tasks[0]
        own_children = [t for t in children if t.parent_id == first_phase.id]
        assert [c.wbs_code for c in own_children] == ["1.1", "1.2", "1.3"]
        assert own_children[0].start_date == first_phase.start_date
        assert own_children[-1].end_date == first_phase.end_date
        assert first_phase.cost == sum(c.cost for c in own_children)

    def test_work_items_are_costed_and_chained(self, generator):
        project = generator.create_project_from_template("sales-pipeline", "Q3", "", start_date=START)
        leaves = [t for t in project.tasks if t.level == 2]

        lead_setup = leaves[0]
        assert lead_setup.name == "Lead Source Setup"
        assert lead_setup.cost == 3 * 8 * 150
        assert lead_setup.assigned_to == ["Project Manager"]
        assert lead_setup.priority == TaskPriority.HIGH
        for previous, current in zip(leaves, leaves[1:]):
            assert current.dependencies == [previous.id]
            assert current.start_date == previous.end_date

        assert [r.role for r in project.resources] == ["Project Manager", "Backend Developer"]

    def test_project_is_persisted(self, generator, store):
        project = generator.create_project_from_template("hr-onboarding", "New hire", "", start_date=START)
        assert store.get_project_by_id(project.id) == project

    def test_unknown_template_raises(self, generator, store):
        with pytest.raises(TemplateNotFound, match="Template not found: nope"):
            generator.create_project_from_template("nope", "Name", "")
        assert store.get_projects() == []

    def test_empty_name_raises(self, generator):
        with pytest.raises(ValidationError):
            generator.create_project_from_template("it-request", "  ", "")


def test_schedule_template_mixes_flat_and_itemised_phases():
    template = ProjectTemplate(
        id="mixed",
        name="Mixed",
        description="",
        phases=[
            TemplatePhase(name="Kickoff", duration=2),
            TemplatePhase(name="Work", tasks=[
                TemplateTask(name="A", duration=3),
                TemplateTask(name="B", duration=4),
            ]),
        ],
    )

    tasks, resources = schedule_template(template, START)

    kickoff, work, a, b = tasks
    assert work.duration == 7
    assert work.start_date == kickoff.end_date
    assert a.dependencies == [kickoff.id]
    assert b.dependencies == [a.id]
    assert b.end_date == START + timedelta(days=9)
    assert a.cost == 0.0
    assert resources == []


def test_schedule_template_runs_critical_path(flat_template):
    tasks, _ = schedule_template(flat_template, START)

    assert all(t.is_critical_path for t in tasks)
    assert [t.early_start for t in tasks] == [0, 5, 15]
    assert [t.float_days for t in tasks] == [0, 0, 0]
    assert tasks[-1].early_finish == flat_template.total_duration
