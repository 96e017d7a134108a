"""
CRUDManager for Pathwise.

Handles every mutation of a document. Each mutation validates first, then
changes the tree, then recomputes the affected ancestor chain, so a failed
call leaves the tree exactly as it was.
"""

from typing import Any, List, Mapping, Optional, Union

from pathwise.constants import VALIDATION_NAME_REQUIRED
from pathwise.exceptions import InvalidOperationError, ValidationError
from pathwise.logging_config import get_logger
from pathwise.managers.events import EventBus, EventType, NodeEvent
from pathwise.managers.navigation_manager import NavigationManager
from pathwise.managers.recompute_engine import RecomputeEngine
from pathwise.models.base import BaseNode, NodeStatus
from pathwise.models.patches import LeafPatch, NodeSpec, parse_input
from pathwise.models.study import Lecture
from pathwise.progress import clamp_progress, derive_status, progress_for_status

logger = get_logger(__name__)

# Leaf fields a patch may set without touching progress
_LEAF_METADATA_FIELDS = ("name", "description", "notes", "tags", "estimated_minutes", "time_spent")

_UNSET: Any = object()


class CRUDManager:
    """
    Manages mutations of one document.

    Handles:
    - Adding children (any composite level)
    - Updating leaves (progress, status, completed flag, metadata)
    - Deleting children together with their subtrees
    - Renaming nodes and editing descriptive fields
    """

    def __init__(
        self,
        document: BaseNode,
        navigator: Optional[NavigationManager] = None,
        engine: Optional[RecomputeEngine] = None,
        nominal_minimum: Optional[float] = None,
    ) -> None:
        """
        Initialize CRUDManager.

        Args:
            document: Root node (Project or StudyPlan).
            navigator: NavigationManager over the same document. Built if omitted.
            engine: RecomputeEngine used after each mutation. Built if omitted.
            nominal_minimum: Progress floor for in-progress status overrides.
                Defaults to the config value.
        """
        self.document = document
        self.navigator = navigator or NavigationManager(document)
        self.engine = engine or RecomputeEngine()
        self.nominal_minimum = nominal_minimum

    @property
    def event_bus(self) -> EventBus:
        return self.engine.event_bus

    def add_child(self, parent_id: str, spec: Union[NodeSpec, Mapping[str, Any]]) -> BaseNode:
        """Create a child under a composite node.

        The child starts at progress 0, not-started, with fresh id and
        timestamps. The parent and all its ancestors are recomputed.

        Args:
            parent_id: Id of the parent node.
            spec: Initial fields for the child; ``name`` is required.

        Returns:
            The new child.

        Raises:
            NotFoundError: If the parent doesn't exist.
            InvalidOperationError: If the parent is a leaf.
            ValidationError: If the fields are invalid for the child type.
        """
        parent = self.navigator.get_node(parent_id)
        if parent.is_leaf:
            raise InvalidOperationError(
                f"Cannot add a child to {type(parent).__name__} '{parent.name}': it has no children collection."
            )

        spec = parse_input(NodeSpec, spec)
        child_model = parent.child_model
        fields = spec.model_dump(exclude_none=True)
        self._check_fields_apply(child_model, fields.keys())

        now = self.engine.clock()
        child = child_model(**fields, created_at=now, updated_at=now)

        parent.add_child(child)
        self.navigator.register_subtree(child, parent.id)
        self.engine.recompute_ancestors([parent] + self.navigator.get_ancestors(parent.id))

        logger.info("Added %s '%s' under %s '%s'", child.kind, child.name, parent.kind, parent.name)
        self._publish(EventType.NODE_CREATED, child, parent.id)
        return child

    def update_leaf(self, node_id: str, patch: Union[LeafPatch, Mapping[str, Any]]) -> BaseNode:
        """Apply a partial update to a leaf.

        Progress and status rules:
        - progress given (with or without status): progress is clamped and
          the status is derived from it
        - status given alone: progress is back-computed from the status
          (not-started 0, completed 100, in-progress at least the nominal
          minimum)
        - lectures track a completed flag; ``completed``, progress >= 100 or
          status completed mark them done

        The leaf and all its ancestors are recomputed and stamped.

        Args:
            node_id: Id of the leaf.
            patch: Fields to change.

        Returns:
            The updated leaf.

        Raises:
            NotFoundError: If the node doesn't exist.
            InvalidOperationError: If the node is not a leaf.
            ValidationError: If the patch is empty or doesn't fit the node.
        """
        node = self.navigator.get_node(node_id)
        if not node.is_leaf:
            raise InvalidOperationError(
                f"{type(node).__name__} '{node.name}' derives its progress from its children; "
                f"use rename_node or update_details to edit it."
            )

        patch = parse_input(LeafPatch, patch)
        if not patch.model_fields_set:
            raise ValidationError(
                "No update fields provided. Specify at least one of: name, description, "
                "notes, tags, progress, status, completed."
            )
        self._check_fields_apply(type(node), patch.model_fields_set)

        if isinstance(node, Lecture):
            completed = self._resolve_lecture_completed(node, patch)
        else:
            progress, status = self._resolve_leaf_progress(node, patch)

        for field in _LEAF_METADATA_FIELDS:
            if field in patch.model_fields_set:
                value = getattr(patch, field)
                if field == "name" and value is None:
                    continue
                if field == "tags" and value is None:
                    value = []
                setattr(node, field, value)

        if isinstance(node, Lecture):
            node.completed = completed
            node.sync_progress()
        else:
            node.progress = progress
            node.status = status

        node.updated_at = self.engine.clock()
        self.engine.recompute_ancestors(self.navigator.get_ancestors(node.id))

        logger.info(
            "Updated %s '%s': %.4g%% %s", node.kind, node.name, node.progress, node.status.value
        )
        self._publish(EventType.NODE_UPDATED, node)
        return node

    def delete_child(self, parent_id: str, child_id: str) -> BaseNode:
        """Remove a child and its whole subtree from a parent.

        The parent and all its ancestors are recomputed. A composite left
        with no children drops to 0 / not-started.

        Args:
            parent_id: Id of the parent node.
            child_id: Id of the direct child to remove.

        Returns:
            The removed child (detached from the document).

        Raises:
            NotFoundError: If the parent doesn't exist or has no such child.
            InvalidOperationError: If the parent is a leaf.
        """
        parent = self.navigator.get_node(parent_id)
        if parent.is_leaf:
            raise InvalidOperationError(
                f"Cannot delete a child of {type(parent).__name__} '{parent.name}': it has no children collection."
            )

        child = parent.remove_child(child_id)
        self.navigator.unregister_subtree(child)
        self.engine.recompute_ancestors([parent] + self.navigator.get_ancestors(parent.id))

        logger.info("Deleted %s '%s' from %s '%s'", child.kind, child.name, parent.kind, parent.name)
        self._publish(EventType.NODE_DELETED, child, parent.id)
        return child

    def rename_node(self, node_id: str, name: str) -> BaseNode:
        """Rename a node. Progress is unaffected so nothing is recomputed.

        Raises:
            NotFoundError: If the node doesn't exist.
            ValidationError: If the name is empty.
        """
        node = self.navigator.get_node(node_id)
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(VALIDATION_NAME_REQUIRED)

        node.name = name
        node.updated_at = self.engine.clock()

        self._publish(EventType.NODE_RENAMED, node)
        return node

    def update_details(
        self,
        node_id: str,
        description: Optional[str] = _UNSET,
        notes: Optional[str] = _UNSET,
        tags: Optional[List[str]] = _UNSET,
    ) -> BaseNode:
        """Edit descriptive fields of any node. Nothing is recomputed.

        Pass None to clear description or notes.

        Raises:
            NotFoundError: If the node doesn't exist.
            ValidationError: If no field was given.
        """
        node = self.navigator.get_node(node_id)
        changes = {
            key: value
            for key, value in (("description", description), ("notes", notes), ("tags", tags))
            if value is not _UNSET
        }
        if not changes:
            raise ValidationError(
                "No update fields provided. Specify at least one of: description, notes, tags."
            )

        for key, value in changes.items():
            if key == "tags":
                value = list(value) if value is not None else []
            setattr(node, key, value)
        node.updated_at = self.engine.clock()

        self._publish(EventType.NODE_UPDATED, node)
        return node

    def recompute_document(self) -> int:
        """Run a full bottom-up pass over the whole document."""
        return self.engine.recompute_tree(self.document)

    def _resolve_leaf_progress(self, node: BaseNode, patch: LeafPatch):
        if patch.has("progress"):
            progress = clamp_progress(patch.progress)
            return progress, derive_status(progress)
        if patch.has("status"):
            progress = progress_for_status(patch.status, node.progress, self.nominal_minimum)
            return progress, derive_status(progress)
        return node.progress, derive_status(node.progress)

    def _resolve_lecture_completed(self, node: Lecture, patch: LeafPatch) -> bool:
        if patch.has("completed"):
            return patch.completed
        if patch.has("progress"):
            return clamp_progress(patch.progress) >= 100
        if patch.has("status"):
            if patch.status == NodeStatus.IN_PROGRESS:
                raise ValidationError(
                    f"Lecture '{node.name}' is either completed or not started; "
                    f"it can't be marked in-progress."
                )
            return patch.status == NodeStatus.COMPLETED
        return node.completed

    def _check_fields_apply(self, model, field_names) -> None:
        """Reject fields the target node type doesn't have."""
        unknown = sorted(name for name in field_names if name not in model.model_fields)
        if unknown:
            raise ValidationError(
                f"Field(s) {', '.join(unknown)} do not apply to {model.__name__} nodes."
            )

    def _publish(self, event_type: EventType, node: BaseNode, parent_id: Optional[str] = None) -> None:
        if parent_id is None and node.id in self.navigator:
            parent = self.navigator.get_parent(node.id)
            parent_id = parent.id if parent else None
        self.event_bus.publish(
            NodeEvent(
                type=event_type,
                node_id=node.id,
                node_kind=node.kind,
                node_name=node.name,
                status=node.status.value,
                progress=node.progress,
                parent_id=parent_id,
            )
        )
