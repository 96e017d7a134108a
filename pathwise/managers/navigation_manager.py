"""
NavigationManager for node lookup and ancestor resolution.

Keeps a flat id index over one document so any node, its parent and its
ancestor chain can be found without walking the tree.
"""

from typing import Dict, Iterator, List, Optional

from pathwise.exceptions import DuplicateError, NotFoundError
from pathwise.models.base import BaseNode
from pathwise.models.document import iter_nodes


class NavigationManager:
    """
    Manages lookup operations over a document.

    Handles:
    - id -> node and id -> parent indexes
    - Ancestor chains (nearest parent first, root last)
    - Path display ("Project / Phase / Step")
    - Document-wide id uniqueness
    """

    def __init__(self, document: BaseNode) -> None:
        """
        Initialize NavigationManager and index the document.

        Args:
            document: Root node (Project or StudyPlan).

        Raises:
            DuplicateError: If two nodes share an id.
        """
        self.document = document
        self._nodes: Dict[str, BaseNode] = {}
        self._parents: Dict[str, Optional[str]] = {}
        self.rebuild()

    def rebuild(self) -> None:
        """Rebuild the id indexes from the document root.

        Raises:
            DuplicateError: If two nodes share an id.
        """
        nodes: Dict[str, BaseNode] = {}
        parents: Dict[str, Optional[str]] = {}

        def _traverse(node: BaseNode, parent_id: Optional[str]) -> None:
            if node.id in nodes:
                raise DuplicateError(
                    f"Duplicate node id '{node.id}' in document '{self.document.name}'."
                )
            nodes[node.id] = node
            parents[node.id] = parent_id
            for child in node.children:
                _traverse(child, node.id)

        _traverse(self.document, None)
        self._nodes = nodes
        self._parents = parents

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[BaseNode]:
        return iter(self._nodes.values())

    def find_node(self, node_id: str) -> Optional[BaseNode]:
        """Get a node by id, or None if it isn't in the document."""
        return self._nodes.get(node_id)

    def get_node(self, node_id: str) -> BaseNode:
        """Get a node by id.

        Raises:
            NotFoundError: If no node has that id.
        """
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFoundError(
                f"Node '{node_id}' not found in document '{self.document.name}'."
            )
        return node

    def get_parent(self, node_id: str) -> Optional[BaseNode]:
        """Get a node's parent, or None for the document root.

        Raises:
            NotFoundError: If no node has that id.
        """
        self.get_node(node_id)
        parent_id = self._parents[node_id]
        return self._nodes[parent_id] if parent_id is not None else None

    def get_ancestors(self, node_id: str) -> List[BaseNode]:
        """Get the ancestor chain of a node.

        Args:
            node_id: Id of the node.

        Returns:
            Ancestors ordered nearest parent first, document root last.
            Empty for the root itself.

        Raises:
            NotFoundError: If no node has that id.
        """
        self.get_node(node_id)
        ancestors: List[BaseNode] = []
        parent_id = self._parents[node_id]
        while parent_id is not None:
            ancestors.append(self._nodes[parent_id])
            parent_id = self._parents[parent_id]
        return ancestors

    def get_path(self, node_id: str) -> List[BaseNode]:
        """Get the nodes from the root down to (and including) a node."""
        node = self.get_node(node_id)
        return list(reversed(self.get_ancestors(node_id))) + [node]

    def get_path_names(self, node_id: str, separator: str = " / ") -> str:
        """Get a readable path such as "Website / Build / Frontend"."""
        return separator.join(node.name for node in self.get_path(node_id))

    def register_subtree(self, node: BaseNode, parent_id: Optional[str]) -> None:
        """Add a freshly attached subtree to the indexes.

        Raises:
            DuplicateError: If any id in the subtree is already indexed.
        """
        for descendant in iter_nodes(node):
            if descendant.id in self._nodes:
                raise DuplicateError(
                    f"Duplicate node id '{descendant.id}' in document '{self.document.name}'."
                )
        self._nodes[node.id] = node
        self._parents[node.id] = parent_id
        for child in node.children:
            self.register_subtree(child, node.id)

    def unregister_subtree(self, node: BaseNode) -> None:
        """Drop a detached subtree from the indexes."""
        for descendant in iter_nodes(node):
            self._nodes.pop(descendant.id, None)
            self._parents.pop(descendant.id, None)
