"""
Document model for Pathwise.

A document is the root of one tree, either a Project or a StudyPlan,
distinguished by its ``kind`` field.
"""

from typing import Annotated, Any, Dict, Iterator, Type, Union

from pydantic import Field, TypeAdapter

from pathwise.models.base import BaseNode
from pathwise.models.study import Chapter, Lecture, StudyPlan, Subject
from pathwise.models.work import Phase, Project, Step, SubTask, Task

Document = Annotated[Union[Project, StudyPlan], Field(discriminator="kind")]

document_adapter: TypeAdapter = TypeAdapter(Document)

# kind discriminant -> model class
NODE_TYPES: Dict[str, Type[BaseNode]] = {
    model.model_fields["kind"].default: model
    for model in (Project, Phase, Step, Task, SubTask, StudyPlan, Subject, Chapter, Lecture)
}

# Legacy ``type`` values used by exported documents
DOCUMENT_TYPES: Dict[str, str] = {
    "project": "project",
    "study": "study-plan",
}


def iter_nodes(root: BaseNode) -> Iterator[BaseNode]:
    """Yield every node in the tree, parents before children."""
    yield root
    for child in root.children:
        yield from iter_nodes(child)


def iter_nodes_post_order(root: BaseNode) -> Iterator[BaseNode]:
    """Yield every node in the tree, children before parents."""
    for child in root.children:
        yield from iter_nodes_post_order(child)
    yield root


def export_document(document: Union[Project, StudyPlan]) -> Dict[str, Any]:
    """Dump a document to a JSON-ready dict with camelCase keys."""
    return document.model_dump(mode="json", by_alias=True)
