"""
Tests for progress aggregation and status derivation.
"""

import math
from types import SimpleNamespace

import pytest

from pathwise.models.base import NodeStatus
from pathwise.progress import (
    aggregate,
    clamp_progress,
    derive_status,
    is_consistent,
    progress_for_status,
)
from pathwise.utils import format_percentage, round_half_up


def _nodes(*values):
    return [SimpleNamespace(progress=value) for value in values]


class TestAggregate:
    """Test aggregate (unweighted mean of children)."""

    def test_empty_is_zero(self):
        """No children means exactly 0, never NaN."""
        assert aggregate([]) == 0
        assert aggregate([], integer=True) == 0

    def test_mean_of_children(self):
        assert aggregate(_nodes(100, 0)) == 50
        assert aggregate(_nodes(100, 50, 0, 50)) == 50

    def test_unrounded_by_default(self):
        assert aggregate(_nodes(100, 0, 0)) == pytest.approx(100 / 3)

    def test_integer_rounds_half_up(self):
        assert aggregate(_nodes(100, 0, 0), integer=True) == 33
        assert aggregate(_nodes(50, 51), integer=True) == 51
        assert aggregate(_nodes(0, 1), integer=True) == 1

    def test_out_of_range_children_are_clamped(self):
        assert aggregate(_nodes(150, -10)) == 50

    def test_single_child(self):
        assert aggregate(_nodes(42.5)) == 42.5

    def test_all_complete(self):
        assert aggregate(_nodes(100, 100, 100)) == 100

    def test_same_result_regardless_of_order(self):
        assert aggregate(_nodes(10, 20, 70)) == aggregate(_nodes(70, 10, 20))


class TestDeriveStatus:
    """Test derive_status thresholds."""

    @pytest.mark.parametrize(
        "progress, expected",
        [
            (0, NodeStatus.NOT_STARTED),
            (0.0001, NodeStatus.IN_PROGRESS),
            (50, NodeStatus.IN_PROGRESS),
            (99.999, NodeStatus.IN_PROGRESS),
            (100, NodeStatus.COMPLETED),
        ],
    )
    def test_thresholds(self, progress, expected):
        assert derive_status(progress) == expected

    def test_tolerates_values_outside_range(self):
        assert derive_status(-5) == NodeStatus.NOT_STARTED
        assert derive_status(100.5) == NodeStatus.COMPLETED

    def test_nan_is_not_started(self):
        assert derive_status(math.nan) == NodeStatus.NOT_STARTED


class TestProgressForStatus:
    """Test back-computing progress from a chosen status."""

    def test_not_started_is_zero(self):
        assert progress_for_status(NodeStatus.NOT_STARTED, 60) == 0

    def test_completed_is_hundred(self):
        assert progress_for_status(NodeStatus.COMPLETED, 10) == 100

    def test_in_progress_from_zero_uses_nominal_minimum(self):
        assert progress_for_status(NodeStatus.IN_PROGRESS, 0) == 10

    def test_in_progress_keeps_existing_progress(self):
        assert progress_for_status(NodeStatus.IN_PROGRESS, 40) == 40

    def test_in_progress_from_complete_stays_below_hundred(self):
        progress = progress_for_status(NodeStatus.IN_PROGRESS, 100)
        assert progress < 100
        assert derive_status(progress) == NodeStatus.IN_PROGRESS

    def test_custom_nominal_minimum(self):
        assert progress_for_status("in-progress", 0, nominal_minimum=25) == 25

    def test_accepts_status_strings(self):
        assert progress_for_status("completed", 0) == 100

    def test_invalid_status_raises(self):
        with pytest.raises(ValueError):
            progress_for_status("paused", 0)

    def test_result_always_matches_status(self):
        for status in NodeStatus:
            for current in (0, 5, 50, 100):
                assert derive_status(progress_for_status(status, current)) == status


class TestHelpers:
    """Test clamp, rounding and display helpers."""

    def test_clamp_progress(self):
        assert clamp_progress(-1) == 0
        assert clamp_progress(101) == 100
        assert clamp_progress(55.5) == 55.5
        assert clamp_progress(math.nan) == 0

    def test_round_half_up(self):
        assert round_half_up(50.5) == 51
        assert round_half_up(49.5) == 50
        assert round_half_up(33.345, 2) == 33.35
        assert round_half_up(66.6666, 1) == 66.7

    def test_format_percentage(self):
        assert format_percentage(66.6666) == "67%"
        assert format_percentage(66.6666, 1) == "66.7%"
        assert format_percentage(0) == "0%"
        assert format_percentage(100) == "100%"

    def test_is_consistent(self):
        assert is_consistent(SimpleNamespace(progress=50, status=NodeStatus.IN_PROGRESS))
        assert not is_consistent(SimpleNamespace(progress=0, status=NodeStatus.IN_PROGRESS))
