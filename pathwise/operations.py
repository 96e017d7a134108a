"""
Document-level mutation functions.

Each function takes the document explicitly, changes it in place, runs the
recomputation for the touched path and returns the same document, so a
caller can hand the result straight to its persistence layer:

    project = add_child(project, phase.id, {"name": "Step 1"})
    project = update_leaf(project, subtask.id, {"status": "completed"})

The ``engine`` argument lets callers supply a clock, an event bus or
integer rounding; by default a fresh RecomputeEngine is used.
"""

from typing import Any, List, Mapping, Optional, Union

from pathwise.managers.crud_manager import CRUDManager
from pathwise.managers.navigation_manager import NavigationManager
from pathwise.managers.recompute_engine import RecomputeEngine
from pathwise.models.document import Document
from pathwise.models.patches import LeafPatch, NodeSpec


def _manager(document: Document, engine: Optional[RecomputeEngine]) -> CRUDManager:
    return CRUDManager(document, engine=engine)


def add_child(
    document: Document,
    parent_id: str,
    spec: Union[NodeSpec, Mapping[str, Any]],
    engine: Optional[RecomputeEngine] = None,
) -> Document:
    """Append a new child under ``parent_id``; it becomes the parent's last child."""
    _manager(document, engine).add_child(parent_id, spec)
    return document


def update_leaf(
    document: Document,
    node_id: str,
    patch: Union[LeafPatch, Mapping[str, Any]],
    engine: Optional[RecomputeEngine] = None,
) -> Document:
    """Apply a partial update to the leaf ``node_id``."""
    _manager(document, engine).update_leaf(node_id, patch)
    return document


def delete_child(
    document: Document,
    parent_id: str,
    child_id: str,
    engine: Optional[RecomputeEngine] = None,
) -> Document:
    """Remove ``child_id`` and its subtree from ``parent_id``."""
    _manager(document, engine).delete_child(parent_id, child_id)
    return document


def rename_node(
    document: Document,
    node_id: str,
    name: str,
    engine: Optional[RecomputeEngine] = None,
) -> Document:
    """Rename ``node_id``."""
    _manager(document, engine).rename_node(node_id, name)
    return document


def update_details(
    document: Document,
    node_id: str,
    engine: Optional[RecomputeEngine] = None,
    **changes: Any,
) -> Document:
    """Edit description, notes or tags of ``node_id``."""
    _manager(document, engine).update_details(node_id, **changes)
    return document


def recompute_document(document: Document, engine: Optional[RecomputeEngine] = None) -> Document:
    """Run a full bottom-up recomputation of the document."""
    (engine or RecomputeEngine()).recompute_tree(document)
    return document


def find_node(document: Document, node_id: str):
    """Look up any node in the document by id (None if absent)."""
    return NavigationManager(document).find_node(node_id)


def ancestors_of(document: Document, node_id: str) -> List:
    """Ancestors of ``node_id``, nearest parent first."""
    return NavigationManager(document).get_ancestors(node_id)
