"""
Work tree models for Pathwise.

Project → Phase → Step → Task → SubTask. Leaves are defined first so each
composite can reference its child type directly.
"""

from typing import ClassVar, List, Literal, Optional, Type

from pydantic import Field

from pathwise.models.base import BaseNode, CompositeNode, LeafNode


class SubTask(LeafNode):
    """SubTask model - the leaf of a work tree.

    Progress and status are set directly by the user.
    """

    kind: Literal["subtask"] = "subtask"
    estimated_minutes: Optional[int] = None


class Task(CompositeNode):
    """Task model - groups subtasks within a step.

    Valid children: SubTask
    """

    kind: Literal["task"] = "task"
    estimated_minutes: Optional[int] = None
    subtasks: List[SubTask] = Field(default_factory=list)

    child_field: ClassVar[str] = "subtasks"
    child_model: ClassVar[Type[BaseNode]] = SubTask


class Step(CompositeNode):
    """Step model - groups tasks within a phase.

    Valid children: Task
    """

    kind: Literal["step"] = "step"
    tasks: List[Task] = Field(default_factory=list)

    child_field: ClassVar[str] = "tasks"
    child_model: ClassVar[Type[BaseNode]] = Task


class Phase(CompositeNode):
    """Phase model - groups steps within a project.

    Valid children: Step
    """

    kind: Literal["phase"] = "phase"
    steps: List[Step] = Field(default_factory=list)

    child_field: ClassVar[str] = "steps"
    child_model: ClassVar[Type[BaseNode]] = Step


class Project(CompositeNode):
    """Project model - root of a work tree.

    Valid children: Phase
    """

    kind: Literal["project"] = "project"
    type: Literal["project"] = "project"
    phases: List[Phase] = Field(default_factory=list)

    child_field: ClassVar[str] = "phases"
    child_model: ClassVar[Type[BaseNode]] = Phase
