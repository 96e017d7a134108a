"""
Test fixtures for the Pathwise test suite.

Provides:
- A controllable clock and an isolated event bus
- Mock data builders for creating test nodes
- Sample work and study documents with known progress values
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from pathwise.constants import reset_config_manager
from pathwise.managers.crud_manager import CRUDManager
from pathwise.managers.events import Event, EventBus, EventListener, EventType
from pathwise.managers.navigation_manager import NavigationManager
from pathwise.managers.recompute_engine import RecomputeEngine
from pathwise.models.base import NodeStatus
from pathwise.models.study import Chapter, Lecture, StudyPlan, Subject
from pathwise.models.work import Phase, Project, Step, SubTask, Task
from pathwise.progress import derive_status


START_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock returning a fixed time until advanced."""

    def __init__(self, start: datetime = START_TIME) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: int = 60) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current


class RecordingListener(EventListener):
    """Listener that records every event it receives."""

    def __init__(self, event_types: Optional[List[EventType]] = None) -> None:
        self.events: List[Event] = []
        self._event_types = event_types or list(EventType)

    @property
    def subscribed_events(self) -> List[EventType]:
        return self._event_types

    def handle(self, event: Event) -> None:
        self.events.append(event)

    def of_type(self, event_type: EventType) -> List[Event]:
        return [event for event in self.events if event.type == event_type]


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_config():
    """Make sure no test sees a config loaded by another test."""
    reset_config_manager()
    yield
    reset_config_manager()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(event_bus) -> RecordingListener:
    listener = RecordingListener()
    event_bus.subscribe(listener)
    return listener


@pytest.fixture
def engine(clock, event_bus) -> RecomputeEngine:
    return RecomputeEngine(clock=clock, integer_progress=False, event_bus=event_bus)


# =============================================================================
# Mock Data Builders
# =============================================================================


class MockDataBuilder:
    """Helper class for building mock Pathwise nodes for testing."""

    @staticmethod
    def create_subtask(
        name: str = "Test SubTask",
        progress: float = 0.0,
        status: Optional[NodeStatus] = None,
        id: Optional[str] = None,
    ) -> SubTask:
        """Create a SubTask whose status matches its progress unless given."""
        subtask = SubTask(name=name, progress=progress, status=status or derive_status(progress))
        if id:
            subtask.id = id
        return subtask

    @staticmethod
    def create_task(name: str = "Test Task", subtasks=None, id: Optional[str] = None) -> Task:
        task = Task(name=name, subtasks=subtasks or [])
        if id:
            task.id = id
        return task

    @staticmethod
    def create_step(name: str = "Test Step", tasks=None, id: Optional[str] = None) -> Step:
        step = Step(name=name, tasks=tasks or [])
        if id:
            step.id = id
        return step

    @staticmethod
    def create_phase(name: str = "Test Phase", steps=None, id: Optional[str] = None) -> Phase:
        phase = Phase(name=name, steps=steps or [])
        if id:
            phase.id = id
        return phase

    @staticmethod
    def create_project(name: str = "Test Project", phases=None, id: Optional[str] = None) -> Project:
        project = Project(name=name, phases=phases or [])
        if id:
            project.id = id
        return project

    @staticmethod
    def create_lecture(
        name: str = "Lecture 1", completed: bool = False, id: Optional[str] = None
    ) -> Lecture:
        lecture = Lecture(name=name, completed=completed)
        if id:
            lecture.id = id
        return lecture

    @staticmethod
    def create_chapter(name: str = "Test Chapter", lectures=None, id: Optional[str] = None) -> Chapter:
        chapter = Chapter(name=name, lectures=lectures or [])
        if id:
            chapter.id = id
        return chapter

    @staticmethod
    def create_subject(name: str = "Test Subject", chapters=None, id: Optional[str] = None) -> Subject:
        subject = Subject(name=name, chapters=chapters or [])
        if id:
            subject.id = id
        return subject

    @staticmethod
    def create_study_plan(name: str = "Test Plan", subjects=None, id: Optional[str] = None) -> StudyPlan:
        plan = StudyPlan(name=name, subjects=subjects or [])
        if id:
            plan.id = id
        return plan


@pytest.fixture
def builder() -> MockDataBuilder:
    return MockDataBuilder()


@pytest.fixture
def sample_project(engine) -> Project:
    """Work tree with every composite at 50%.

    Website Redesign
    ├── Research
    │   └── Interviews
    │       └── Schedule: Email users (100), Book rooms (0)
    └── Build
        └── Frontend
            └── Layout: Header (50)
    """
    b = MockDataBuilder
    project = b.create_project(
        "Website Redesign",
        id="project-1",
        phases=[
            b.create_phase(
                "Research",
                id="phase-research",
                steps=[
                    b.create_step(
                        "Interviews",
                        id="step-interviews",
                        tasks=[
                            b.create_task(
                                "Schedule",
                                id="task-schedule",
                                subtasks=[
                                    b.create_subtask("Email users", 100, id="sub-email"),
                                    b.create_subtask("Book rooms", 0, id="sub-rooms"),
                                ],
                            )
                        ],
                    )
                ],
            ),
            b.create_phase(
                "Build",
                id="phase-build",
                steps=[
                    b.create_step(
                        "Frontend",
                        id="step-frontend",
                        tasks=[
                            b.create_task(
                                "Layout",
                                id="task-layout",
                                subtasks=[b.create_subtask("Header", 50, id="sub-header")],
                            )
                        ],
                    )
                ],
            ),
        ],
    )
    engine.recompute_tree(project)
    return project


@pytest.fixture
def sample_study_plan(engine) -> StudyPlan:
    """Study tree: Algorithms at 75%, Databases at 0%, plan at 37.5%.

    GATE CS
    ├── Algorithms
    │   ├── Sorting: Lecture 1 (done), Lecture 2
    │   └── Graphs: Lecture 1 (done)
    └── Databases
        └── SQL (no lectures)
    """
    b = MockDataBuilder
    plan = b.create_study_plan(
        "GATE CS",
        id="plan-1",
        subjects=[
            b.create_subject(
                "Algorithms",
                id="subject-algo",
                chapters=[
                    b.create_chapter(
                        "Sorting",
                        id="chapter-sorting",
                        lectures=[
                            b.create_lecture("Lecture 1", completed=True, id="lecture-sort-1"),
                            b.create_lecture("Lecture 2", id="lecture-sort-2"),
                        ],
                    ),
                    b.create_chapter(
                        "Graphs",
                        id="chapter-graphs",
                        lectures=[b.create_lecture("Lecture 1", completed=True, id="lecture-graph-1")],
                    ),
                ],
            ),
            b.create_subject(
                "Databases",
                id="subject-db",
                chapters=[b.create_chapter("SQL", id="chapter-sql")],
            ),
        ],
    )
    engine.recompute_tree(plan)
    return plan


@pytest.fixture
def project_manager(sample_project, engine) -> CRUDManager:
    return CRUDManager(sample_project, NavigationManager(sample_project), engine)


@pytest.fixture
def study_manager(sample_study_plan, engine) -> CRUDManager:
    return CRUDManager(sample_study_plan, NavigationManager(sample_study_plan), engine)
