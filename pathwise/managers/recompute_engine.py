"""
RecomputeEngine for bottom-up progress and status propagation.

Restores the progress/status invariant after a mutation by walking from the
changed node's parent up to the document root.
"""

from datetime import datetime
from typing import Callable, Dict, Optional, Sequence

from pathwise.constants import get_integer_progress
from pathwise.logging_config import get_logger
from pathwise.managers.events import EventBus, EventType, NodeEvent, get_event_bus
from pathwise.models.base import BaseNode, NodeStatus
from pathwise.models.document import iter_nodes, iter_nodes_post_order
from pathwise.models.study import Lecture
from pathwise.progress import aggregate, clamp_progress, derive_status
from pathwise.utils import utc_now

logger = get_logger(__name__)


class RecomputeEngine:
    """
    Recalculates derived progress and status.

    Handles:
    - Ancestor-chain recomputation after a mutation
    - Full bottom-up recomputation of a subtree (imports, repairs)
    - Leaf normalisation (clamped progress, status derived from progress)
    - Completion statistics for a subtree
    - Emitting NODE_COMPLETED when a composite becomes completed

    The engine assumes exclusive access to the tree for the duration of a
    pass; callers must serialise concurrent mutations of one document.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        integer_progress: Optional[bool] = None,
        event_bus: Optional[EventBus] = None,
        emit_events: bool = True,
    ) -> None:
        """
        Initialize RecomputeEngine.

        Args:
            clock: Returns the timestamp stamped on touched nodes. Defaults to UTC now.
            integer_progress: Round composite progress to whole numbers.
                Defaults to the config value (off).
            event_bus: Bus for completion events. Defaults to the shared bus.
            emit_events: Whether to emit events.
        """
        self.clock = clock or utc_now
        self.integer_progress = (
            get_integer_progress() if integer_progress is None else integer_progress
        )
        self.event_bus = event_bus or get_event_bus()
        self._emit_events = emit_events

    def recompute_node(self, node: BaseNode) -> bool:
        """Recompute one composite node from its immediate children.

        Leaves are left untouched.

        Args:
            node: Node to recompute. Its children must already be correct.

        Returns:
            True if progress or status changed.
        """
        if node.is_leaf:
            return False

        previous_status = node.status
        previous_progress = node.progress
        node.progress = aggregate(node.children, integer=self.integer_progress)
        node.status = derive_status(node.progress)

        logger.debug(
            "Recomputed %s '%s': %.4g -> %.4g (%s)",
            node.kind,
            node.name,
            previous_progress,
            node.progress,
            node.status.value,
        )

        if node.status == NodeStatus.COMPLETED and previous_status != NodeStatus.COMPLETED:
            self._emit_completed(node)

        return node.progress != previous_progress or node.status != previous_status

    def recompute_ancestors(self, ancestors: Sequence[BaseNode]) -> None:
        """Recompute an ancestor chain and stamp every node in it.

        Args:
            ancestors: Ancestors of the mutated node, nearest parent first
                and document root last (see NavigationManager.get_ancestors).
        """
        now = self.clock()
        for node in ancestors:
            self.recompute_node(node)
            node.updated_at = now

    def normalize_leaf(self, leaf: BaseNode) -> bool:
        """Bring a leaf's status in line with its progress.

        Lectures follow their ``completed`` flag; other leaves keep their
        (clamped) progress and take the status derived from it.

        Returns:
            True if progress or status changed.
        """
        previous = (leaf.progress, leaf.status)
        if isinstance(leaf, Lecture):
            leaf.sync_progress()
        else:
            leaf.progress = clamp_progress(leaf.progress)
            leaf.status = derive_status(leaf.progress)
        return (leaf.progress, leaf.status) != previous

    def recompute_tree(self, root: BaseNode) -> int:
        """Recompute every node under (and including) root, children first.

        Only nodes whose progress or status changed get a new updated_at,
        so running this twice in a row changes nothing the second time.

        Args:
            root: Root of the subtree to recompute.

        Returns:
            Number of nodes whose derived fields changed.
        """
        now = self.clock()
        changed = 0
        for node in iter_nodes_post_order(root):
            if node.is_leaf:
                touched = self.normalize_leaf(node)
            else:
                touched = self.recompute_node(node)
            if touched:
                node.updated_at = now
                changed += 1

        logger.debug("Full recompute of %s '%s' changed %d node(s)", root.kind, root.name, changed)
        if self._emit_events:
            self.event_bus.publish(
                NodeEvent(
                    type=EventType.TREE_RECOMPUTED,
                    node_id=root.id,
                    node_kind=root.kind,
                    node_name=root.name,
                    status=root.status.value,
                    progress=root.progress,
                    data={"changed": changed},
                )
            )
        return changed

    def _emit_completed(self, node: BaseNode) -> None:
        """Emit NODE_COMPLETED for a composite that just reached 100%."""
        if not self._emit_events:
            return
        self.event_bus.publish(
            NodeEvent(
                type=EventType.NODE_COMPLETED,
                node_id=node.id,
                node_kind=node.kind,
                node_name=node.name,
                status=node.status.value,
                progress=node.progress,
            )
        )

    def get_completion_stats(self, node: BaseNode) -> Dict[str, int]:
        """Get leaf completion statistics for a subtree.

        Args:
            node: Node to get stats for.

        Returns:
            Dictionary with total, completed, in_progress and not_started
            leaf counts.
        """
        leaves = [n for n in iter_nodes(node) if n.is_leaf]
        completed = sum(1 for leaf in leaves if leaf.status == NodeStatus.COMPLETED)
        in_progress = sum(1 for leaf in leaves if leaf.status == NodeStatus.IN_PROGRESS)
        return {
            "total": len(leaves),
            "completed": completed,
            "in_progress": in_progress,
            "not_started": len(leaves) - completed - in_progress,
        }
