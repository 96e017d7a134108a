"""
Base node model for Pathwise.

Common base for every node in a work tree or a study tree.
"""

import math
from datetime import datetime
from enum import Enum
from typing import ClassVar, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from pathwise.constants import CHILD_COLLECTION_FIELDS, PROGRESS_MAX, PROGRESS_MIN
from pathwise.exceptions import InvalidOperationError, NotFoundError
from pathwise.utils import new_id, utc_now


# Fields whose explicit null means "use the default"
_DEFAULTED_FIELDS = ("progress", "status", "tags")


class NodeStatus(str, Enum):
    """Lifecycle states a node can be in."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class BaseNode(BaseModel):
    """
    Base model for all Pathwise nodes.

    Common fields:
    - id: Unique identifier, unique across the whole document
    - kind: Discriminant naming the node type (narrowed to a Literal by each subclass)
    - name: User-editable label
    - status: Current status, kept consistent with progress
    - progress: Completion in [0, 100]; out-of-range values are clamped
    - description, notes, tags: Free-form metadata, not used in aggregation
    - timestamps: created_at, updated_at

    Fields serialize with camelCase aliases (createdAt, updatedAt, ...) and
    accept either spelling on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    id: str = Field(default_factory=new_id)
    kind: str = "node"
    name: str
    description: Optional[str] = None
    status: NodeStatus = NodeStatus.NOT_STARTED
    progress: float = 0.0
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="before")
    @classmethod
    def drop_null_defaults(cls, data):
        """Treat null progress, status and tags as missing.

        Missing fields stay out of ``model_fields_set``.
        """
        if isinstance(data, dict):
            data = {
                key: value
                for key, value in data.items()
                if not (key in _DEFAULTED_FIELDS and value is None)
            }
        return data

    @field_validator("progress")
    @classmethod
    def clamp_progress(cls, v: float) -> float:
        """Clamp progress into [0, 100]; NaN becomes 0."""
        if math.isnan(v):
            return PROGRESS_MIN
        return min(max(v, PROGRESS_MIN), PROGRESS_MAX)

    @property
    def is_leaf(self) -> bool:
        """Whether this node type can never hold children."""
        return True

    @property
    def children(self) -> List["BaseNode"]:
        """Child nodes in order. Leaves always return an empty list."""
        return []

    def add_child(self, child: "BaseNode") -> None:
        raise InvalidOperationError(
            f"{type(self).__name__} '{self.name}' cannot have children."
        )

    def remove_child(self, child_id: str) -> "BaseNode":
        raise InvalidOperationError(
            f"{type(self).__name__} '{self.name}' cannot have children."
        )


class LeafNode(BaseNode):
    """A node whose progress and status are set directly by the user."""

    @model_validator(mode="before")
    @classmethod
    def reject_children(cls, data):
        """Leaves never hold a child collection, even an imported one."""
        if isinstance(data, dict):
            for key in CHILD_COLLECTION_FIELDS:
                if key in data:
                    raise ValueError(f"{cls.__name__} nodes cannot have {key}.")
        return data


class CompositeNode(BaseNode):
    """
    A node whose progress and status are derived from its children.

    Subclasses declare their child list as a regular field and point
    child_field/child_model at it, e.g. Phase keeps Steps in ``steps``.
    """

    child_field: ClassVar[str] = ""
    child_model: ClassVar[Type[BaseNode]] = BaseNode

    @property
    def is_leaf(self) -> bool:
        return False

    @property
    def children(self) -> List[BaseNode]:
        return getattr(self, self.child_field)

    def add_child(self, child: BaseNode) -> None:
        """Append a child after checking it is the right type for this level.

        Args:
            child: Node to append.

        Raises:
            InvalidOperationError: If the child is the wrong node type or is
                already present.
        """
        if not isinstance(child, self.child_model):
            raise InvalidOperationError(
                f"{type(self).__name__} nodes can only have "
                f"{self.child_model.__name__} children, got {type(child).__name__}."
            )
        if any(existing.id == child.id for existing in self.children):
            raise InvalidOperationError(
                f"Node '{child.id}' is already a child of '{self.name}'."
            )
        self.children.append(child)

    def remove_child(self, child_id: str) -> BaseNode:
        """Remove a direct child (and with it, its whole subtree).

        Args:
            child_id: Id of the child to remove.

        Returns:
            The removed child.

        Raises:
            NotFoundError: If no direct child has that id.
        """
        for index, child in enumerate(self.children):
            if child.id == child_id:
                return self.children.pop(index)
        raise NotFoundError(
            f"Node '{child_id}' is not a child of {type(self).__name__} '{self.name}'."
        )
