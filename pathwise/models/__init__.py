"""
Data models for Pathwise.

Import models explicitly from their modules:
    from pathwise.models.base import BaseNode, NodeStatus
    from pathwise.models.work import Project, Phase, Step, Task, SubTask
    from pathwise.models.study import StudyPlan, Subject, Chapter, Lecture
    from pathwise.models.document import Document, document_adapter
    from pathwise.models.patches import NodeSpec, LeafPatch
"""

from .base import BaseNode, CompositeNode, LeafNode, NodeStatus
from .document import Document, document_adapter, export_document, iter_nodes
from .patches import LeafPatch, NodeSpec
from .study import Chapter, Lecture, StudyPlan, Subject
from .work import Phase, Project, Step, SubTask, Task

__all__ = [
    "BaseNode",
    "CompositeNode",
    "LeafNode",
    "NodeStatus",
    "Document",
    "document_adapter",
    "export_document",
    "iter_nodes",
    "LeafPatch",
    "NodeSpec",
    "StudyPlan",
    "Subject",
    "Chapter",
    "Lecture",
    "Project",
    "Phase",
    "Step",
    "Task",
    "SubTask",
]
