"""
Progress calculation and status derivation.

Every place that needs an aggregate progress or a status goes through the
functions here; nothing else in the package repeats the arithmetic.

Rules:
- A composite node's progress is the unweighted mean of its immediate
  children's progress. A child with a large subtree counts the same as a
  trivial one. No children means 0.
- Status follows progress: 0 is not-started, 100 is completed, anything in
  between is in-progress.
- When a user picks a status for a leaf directly, a representative progress
  is back-computed so the two never disagree.
"""

import math
from typing import Optional, Protocol, Sequence, Union

from pathwise.constants import (
    IN_PROGRESS_MAXIMUM,
    PROGRESS_MAX,
    PROGRESS_MIN,
    get_nominal_in_progress_minimum,
)
from pathwise.models.base import NodeStatus
from pathwise.utils import round_half_up


class HasProgress(Protocol):
    """Anything exposing a numeric progress value."""

    progress: float


def clamp_progress(value: float) -> float:
    """Clamp a progress value into [0, 100]. NaN is treated as 0."""
    value = float(value)
    if math.isnan(value):
        return PROGRESS_MIN
    return min(max(value, PROGRESS_MIN), PROGRESS_MAX)


def aggregate(children: Sequence[HasProgress], integer: bool = False) -> float:
    """Calculate the aggregate progress of a collection of children.

    Args:
        children: Children exposing ``progress``. May be empty.
        integer: Round the mean half-up to a whole number, for nodes that
            store integer progress.

    Returns:
        The arithmetic mean of the clamped child progress values, or 0.0
        when there are no children.
    """
    if not children:
        return 0.0
    mean = math.fsum(clamp_progress(child.progress) for child in children) / len(children)
    mean = clamp_progress(mean)
    if integer:
        return round_half_up(mean)
    return mean


def derive_status(progress: float) -> NodeStatus:
    """Map a progress value to a status.

    Values at or below 0 (and NaN) are not-started, values at or above 100
    are completed, everything else is in-progress.
    """
    if math.isnan(progress) or progress <= PROGRESS_MIN:
        return NodeStatus.NOT_STARTED
    if progress >= PROGRESS_MAX:
        return NodeStatus.COMPLETED
    return NodeStatus.IN_PROGRESS


def progress_for_status(
    status: Union[NodeStatus, str],
    current_progress: float,
    nominal_minimum: Optional[float] = None,
) -> float:
    """Back-compute a progress value that agrees with a chosen status.

    Used when a leaf's status is set directly without a progress value.

    Args:
        status: The status picked by the user.
        current_progress: The leaf's progress before the change.
        nominal_minimum: Floor for in-progress leaves. Defaults to the
            configured nominal minimum (10).

    Returns:
        0 for not-started, 100 for completed. For in-progress, the current
        progress raised to at least the nominal minimum and kept below 100.
    """
    status = NodeStatus(status)
    if status is NodeStatus.NOT_STARTED:
        return PROGRESS_MIN
    if status is NodeStatus.COMPLETED:
        return PROGRESS_MAX

    if nominal_minimum is None:
        nominal_minimum = get_nominal_in_progress_minimum()
    current = clamp_progress(current_progress)
    return min(max(current, nominal_minimum), IN_PROGRESS_MAXIMUM)


def is_consistent(node: HasProgress) -> bool:
    """Check that a node's stored status matches its progress."""
    return derive_status(node.progress) == getattr(node, "status", None)
