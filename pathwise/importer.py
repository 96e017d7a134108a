"""
Import and export of Pathwise documents.

Freshly imported data may carry stale or missing progress/status values, so
every import goes through one full recomputation before it is handed back.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from pathwise.constants import GATE_EMPTY_TIME_SPENT, GATE_LECTURE_NAME_TEMPLATE
from pathwise.exceptions import StorageError, ValidationError
from pathwise.logging_config import get_logger
from pathwise.managers.navigation_manager import NavigationManager
from pathwise.managers.recompute_engine import RecomputeEngine
from pathwise.models.document import (
    DOCUMENT_TYPES,
    NODE_TYPES,
    Document,
    document_adapter,
    export_document,
    iter_nodes,
)
from pathwise.models.study import Chapter, Lecture, StudyPlan, Subject
from pathwise.progress import derive_status, progress_for_status

logger = get_logger(__name__)

__all__ = [
    "import_document",
    "study_plan_from_lecture_counts",
    "export_document",
    "read_document_file",
    "load_document_file",
    "save_document_file",
]


def _resolve_kind(data: Mapping[str, Any]) -> str:
    """Work out the root kind from ``kind`` or the legacy ``type`` field."""
    kind = data.get("kind")
    if kind is None:
        legacy_type = data.get("type")
        if legacy_type not in DOCUMENT_TYPES:
            raise ValidationError('Type must be either "project" or "study".')
        return DOCUMENT_TYPES[legacy_type]
    if kind not in DOCUMENT_TYPES.values():
        raise ValidationError(
            f"Document kind must be one of: {', '.join(DOCUMENT_TYPES.values())}; got {kind!r}."
        )
    return kind


def import_document(data: Mapping[str, Any], engine: Optional[RecomputeEngine] = None) -> Document:
    """Build a typed, fully recomputed document from a raw nested mapping.

    Accepts the camelCase shape produced by export_document as well as
    documents that only carry the legacy ``type`` field. Missing progress,
    status, ids and timestamps are filled in.

    Args:
        data: Raw document, e.g. parsed JSON.
        engine: Engine used for the recomputation pass.

    Returns:
        A Project or StudyPlan whose derived fields are consistent.

    Raises:
        ValidationError: If the data doesn't describe a valid tree.
        DuplicateError: If two nodes share an id.
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Document must be a JSON object.")

    kind = _resolve_kind(data)
    child_field = NODE_TYPES[kind].child_field
    payload: Dict[str, Any] = dict(data)
    payload["kind"] = kind
    payload.pop("type", None)

    children = payload.get(child_field, [])
    if not isinstance(children, list):
        raise ValidationError(f"{NODE_TYPES[kind].__name__} must have a {child_field} array.")

    try:
        document = document_adapter.validate_python(payload)
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'document'}: {error['msg']}"
            for error in e.errors()
        )
        raise ValidationError(f"Invalid document: {details}") from e

    navigator = NavigationManager(document)

    engine = engine or RecomputeEngine()
    _apply_stored_leaf_statuses(document, engine.clock())
    changed = engine.recompute_tree(document)
    logger.info(
        "Imported %s '%s': %d node(s), %d recomputed",
        document.kind,
        document.name,
        len(navigator),
        changed,
    )
    return document


def _apply_stored_leaf_statuses(document: Document, now) -> None:
    """Back-compute progress for work leaves whose stored status disagrees with it.

    Only statuses present in the data count; a defaulted status never
    overrides progress. Lectures follow their ``completed`` flag instead.
    """
    for node in iter_nodes(document):
        if not node.is_leaf or isinstance(node, Lecture) or "status" not in node.model_fields_set:
            continue
        if node.status != derive_status(node.progress):
            progress = progress_for_status(node.status, node.progress)
            logger.debug(
                "Stored status %s of %s '%s' overrides progress %.4g -> %.4g",
                node.status.value,
                node.kind,
                node.name,
                node.progress,
                progress,
            )
            node.progress = progress
            node.updated_at = now


def study_plan_from_lecture_counts(
    counts: Mapping[str, Mapping[str, int]],
    name: str,
    description: Optional[str] = None,
    engine: Optional[RecomputeEngine] = None,
) -> StudyPlan:
    """Build a study plan from a subject -> chapter -> lecture-count mapping.

    Example input::

        {"Algorithms": {"Sorting": 3, "Graphs": 5}}

    Each chapter gets that many lectures named "Lecture 1", "Lecture 2", ...
    with nothing completed and no time spent.

    Raises:
        ValidationError: If the mapping shape or a count is invalid.
    """
    if not name or not name.strip():
        raise ValidationError("Study plan name is required.")
    if not isinstance(counts, Mapping):
        raise ValidationError("Lecture counts must be an object of subjects.")

    engine = engine or RecomputeEngine()
    now = engine.clock()
    plan = StudyPlan(name=name, description=description, created_at=now, updated_at=now)

    for subject_name, chapters in counts.items():
        if not isinstance(chapters, Mapping):
            raise ValidationError(f"Subject '{subject_name}' must map chapter names to lecture counts.")
        subject = Subject(name=subject_name, created_at=now, updated_at=now)
        for chapter_name, lecture_count in chapters.items():
            if isinstance(lecture_count, bool) or not isinstance(lecture_count, int) or lecture_count < 0:
                raise ValidationError(
                    f"Lecture count for '{subject_name} / {chapter_name}' must be a non-negative integer, "
                    f"got {lecture_count!r}."
                )
            chapter = Chapter(name=chapter_name, created_at=now, updated_at=now)
            for index in range(1, lecture_count + 1):
                chapter.add_child(
                    Lecture(
                        name=GATE_LECTURE_NAME_TEMPLATE.format(index=index),
                        time_spent=GATE_EMPTY_TIME_SPENT,
                        created_at=now,
                        updated_at=now,
                    )
                )
            subject.add_child(chapter)
        plan.add_child(subject)

    engine.recompute_tree(plan)
    return plan


def read_document_file(path: Path) -> Any:
    """Read the raw JSON of a document file without importing it.

    Raises:
        StorageError: If the file can't be read or isn't JSON.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Failed to load {path}: {e}") from e


def load_document_file(path: Path, engine: Optional[RecomputeEngine] = None) -> Document:
    """Read a JSON document file and import it.

    Raises:
        StorageError: If the file can't be read or isn't JSON.
        ValidationError: If the JSON isn't a valid document.
    """
    return import_document(read_document_file(path), engine=engine)


def save_document_file(path: Path, document: Document) -> None:
    """Write a document to a JSON file atomically.

    Raises:
        StorageError: If writing fails.
    """
    path = Path(path)
    directory = path.parent if str(path.parent) else Path(".")
    try:
        temp_fd, temp_path = tempfile.mkstemp(dir=directory, prefix=".tmp_pathwise_", suffix=".json")
    except OSError as e:
        raise StorageError(f"Failed to write to {path}: {e}") from e

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as temp_file:
            json.dump(export_document(document), temp_file, indent=2)
        os.replace(temp_path, path)
    except OSError as e:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise StorageError(f"Failed to write to {path}: {e}") from e
