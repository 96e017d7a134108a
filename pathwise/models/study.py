"""
Study tree models for Pathwise.

StudyPlan → Subject → Chapter → Lecture.
"""

from typing import ClassVar, List, Literal, Optional, Type

from pydantic import Field, model_validator

from pathwise.constants import PROGRESS_MAX, PROGRESS_MIN
from pathwise.models.base import BaseNode, CompositeNode, LeafNode, NodeStatus


class Lecture(LeafNode):
    """Lecture model - the leaf of a study tree.

    A lecture is either done or not: ``completed`` is the source of truth
    and progress/status always follow it (100/completed or 0/not-started).
    ``time_spent`` is a free-form duration string and plays no part in
    progress.
    """

    kind: Literal["lecture"] = "lecture"
    completed: bool = False
    time_spent: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def completed_from_progress(cls, data):
        """Infer ``completed`` from progress when a payload omits the flag."""
        if isinstance(data, dict) and "completed" not in data:
            progress = data.get("progress")
            if isinstance(progress, (int, float)) and not isinstance(progress, bool):
                data = {**data, "completed": progress >= PROGRESS_MAX}
        return data

    @model_validator(mode="after")
    def sync_with_completed(self) -> "Lecture":
        self.sync_progress()
        return self

    def sync_progress(self) -> None:
        """Set progress and status from the completed flag."""
        if self.completed:
            self.progress = PROGRESS_MAX
            self.status = NodeStatus.COMPLETED
        else:
            self.progress = PROGRESS_MIN
            self.status = NodeStatus.NOT_STARTED


class Chapter(CompositeNode):
    """Chapter model - groups lectures within a subject.

    Valid children: Lecture
    """

    kind: Literal["chapter"] = "chapter"
    lectures: List[Lecture] = Field(default_factory=list)

    child_field: ClassVar[str] = "lectures"
    child_model: ClassVar[Type[BaseNode]] = Lecture


class Subject(CompositeNode):
    """Subject model - groups chapters within a study plan.

    Valid children: Chapter
    """

    kind: Literal["subject"] = "subject"
    chapters: List[Chapter] = Field(default_factory=list)

    child_field: ClassVar[str] = "chapters"
    child_model: ClassVar[Type[BaseNode]] = Chapter


class StudyPlan(CompositeNode):
    """StudyPlan model - root of a study tree.

    Valid children: Subject
    """

    kind: Literal["study-plan"] = "study-plan"
    type: Literal["study"] = "study"
    subjects: List[Subject] = Field(default_factory=list)

    child_field: ClassVar[str] = "subjects"
    child_model: ClassVar[Type[BaseNode]] = Subject
