"""
Property-based tests for progress aggregation.

Random work and study trees are recomputed and mutated, and the structural
invariants are checked after every step:
- every progress value stays within [0, 100]
- every composite holds the mean of its immediate children (0 if empty)
- every status matches its progress
- a second full recomputation changes nothing
"""

import math

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from pathwise.managers.crud_manager import CRUDManager
from pathwise.managers.events import EventBus
from pathwise.managers.recompute_engine import RecomputeEngine
from pathwise.models.base import NodeStatus
from pathwise.models.document import export_document, iter_nodes
from pathwise.models.study import Chapter, Lecture, StudyPlan, Subject
from pathwise.models.work import Phase, Project, Step, SubTask, Task
from pathwise.progress import aggregate, derive_status

PROPERTY_SETTINGS = settings(
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)

names = st.text(alphabet="abcdefghijklmnopqrstuvwxyz ", min_size=1, max_size=12).filter(str.strip)
leaf_progress = st.one_of(
    st.sampled_from([0.0, 100.0]),
    st.floats(min_value=-50, max_value=150, allow_nan=False),
)
statuses = st.sampled_from(["not-started", "in-progress", "completed"])


@composite
def subtasks(draw):
    return SubTask(name=draw(names), progress=draw(leaf_progress), status=draw(statuses))


@composite
def tasks(draw):
    return Task(name=draw(names), subtasks=draw(st.lists(subtasks(), max_size=4)))


@composite
def steps(draw):
    return Step(name=draw(names), tasks=draw(st.lists(tasks(), max_size=3)))


@composite
def phases(draw):
    return Phase(name=draw(names), steps=draw(st.lists(steps(), max_size=3)))


@composite
def projects(draw):
    return Project(name=draw(names), phases=draw(st.lists(phases(), max_size=3)))


@composite
def study_plans(draw):
    def chapter():
        lectures = draw(st.lists(st.booleans(), max_size=4))
        return Chapter(name=draw(names), lectures=[Lecture(name="Lecture", completed=done) for done in lectures])

    subjects = [
        Subject(name=draw(names), chapters=[chapter() for _ in range(draw(st.integers(0, 3)))])
        for _ in range(draw(st.integers(0, 3)))
    ]
    return StudyPlan(name=draw(names), subjects=subjects)


documents = st.one_of(projects(), study_plans())


def _engine() -> RecomputeEngine:
    return RecomputeEngine(integer_progress=False, event_bus=EventBus(), emit_events=False)


def assert_invariants(document):
    for node in iter_nodes(document):
        assert 0 <= node.progress <= 100
        assert node.status == derive_status(node.progress)
        if not node.is_leaf:
            children = node.children
            if children:
                expected = math.fsum(child.progress for child in children) / len(children)
                assert node.progress == pytest.approx(expected)
            else:
                assert node.progress == 0


class TestAggregateProperties:
    """Properties of the aggregate function alone."""

    @given(values=st.lists(st.floats(min_value=0, max_value=100), min_size=1, max_size=20))
    @PROPERTY_SETTINGS
    def test_mean_within_child_range(self, values):
        children = [SubTask(name="x", progress=value) for value in values]

        result = aggregate(children)

        assert min(values) - 1e-9 <= result <= max(values) + 1e-9

    @given(value=st.floats(min_value=0, max_value=100), count=st.integers(1, 10))
    @PROPERTY_SETTINGS
    def test_uniform_children(self, value, count):
        children = [SubTask(name="x", progress=value) for _ in range(count)]
        assert aggregate(children) == pytest.approx(value)


class TestTreeProperties:
    """Properties of full recomputation."""

    @given(document=documents)
    @PROPERTY_SETTINGS
    def test_recompute_restores_invariants(self, document):
        _engine().recompute_tree(document)
        assert_invariants(document)

    @given(document=documents)
    @PROPERTY_SETTINGS
    def test_recompute_is_idempotent(self, document):
        engine = _engine()
        engine.recompute_tree(document)
        snapshot = export_document(document)

        assert engine.recompute_tree(document) == 0
        assert export_document(document) == snapshot

    @given(document=study_plans())
    @PROPERTY_SETTINGS
    def test_completed_iff_all_children_completed(self, document):
        _engine().recompute_tree(document)

        for node in iter_nodes(document):
            if not node.is_leaf and node.children:
                all_done = all(child.status == NodeStatus.COMPLETED for child in node.children)
                assert (node.status == NodeStatus.COMPLETED) == all_done


class TestMutationProperties:
    """Invariants hold after arbitrary sequences of mutations."""

    @given(document=projects(), data=st.data())
    @PROPERTY_SETTINGS
    def test_random_project_mutations(self, document, data):
        manager = CRUDManager(document, engine=_engine(), nominal_minimum=10)
        manager.recompute_document()

        for _ in range(data.draw(st.integers(1, 8), label="mutations")):
            nodes = list(manager.navigator)
            leaves = [node for node in nodes if node.is_leaf]
            composites = [node for node in nodes if not node.is_leaf]
            action = data.draw(st.sampled_from(["update", "status", "add", "delete"]), label="action")

            if action == "update" and leaves:
                leaf = data.draw(st.sampled_from(leaves))
                manager.update_leaf(leaf.id, {"progress": data.draw(leaf_progress)})
            elif action == "status" and leaves:
                leaf = data.draw(st.sampled_from(leaves))
                manager.update_leaf(leaf.id, {"status": data.draw(statuses)})
            elif action == "add":
                parent = data.draw(st.sampled_from(composites))
                manager.add_child(parent.id, {"name": "New"})
            else:
                parents = [node for node in composites if node.children]
                if parents:
                    parent = data.draw(st.sampled_from(parents))
                    child = data.draw(st.sampled_from(parent.children))
                    manager.delete_child(parent.id, child.id)

            assert_invariants(document)

    @given(document=study_plans(), data=st.data())
    @PROPERTY_SETTINGS
    def test_random_lecture_toggles(self, document, data):
        manager = CRUDManager(document, engine=_engine())
        manager.recompute_document()
        lectures = [node for node in iter_nodes(document) if isinstance(node, Lecture)]

        for _ in range(data.draw(st.integers(0, 6), label="toggles")):
            if not lectures:
                break
            lecture = data.draw(st.sampled_from(lectures))
            manager.update_leaf(lecture.id, {"completed": not lecture.completed})
            assert_invariants(document)
