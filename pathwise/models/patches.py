"""
Input models for mutation operations.

NodeSpec describes a child to create; LeafPatch describes a partial update
to a leaf. Only fields the caller actually supplied count as present
(``model_fields_set``).
"""

from typing import Any, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from pathwise.constants import VALIDATION_NAME_REQUIRED
from pathwise.exceptions import ValidationError
from pathwise.models.base import NodeStatus

M = TypeVar("M", bound=BaseModel)


class NodeSpec(BaseModel):
    """Initial fields for a new child node. Only ``name`` is required."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    name: str
    description: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    estimated_minutes: Optional[int] = None
    time_spent: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError(VALIDATION_NAME_REQUIRED)
        return v


class LeafPatch(BaseModel):
    """Partial update for a leaf node (SubTask or Lecture)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    name: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    progress: Optional[float] = None
    status: Optional[NodeStatus] = None
    completed: Optional[bool] = None
    estimated_minutes: Optional[int] = None
    time_spent: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError(VALIDATION_NAME_REQUIRED)
        return v

    def has(self, field: str) -> bool:
        """Whether the caller supplied a non-null value for ``field``."""
        return field in self.model_fields_set and getattr(self, field) is not None


def parse_input(model: Type[M], data: Union[M, Mapping[str, Any]]) -> M:
    """Validate caller input into ``model``.

    Args:
        model: NodeSpec or LeafPatch.
        data: An instance of the model, or a mapping of its fields.

    Returns:
        The validated model instance.

    Raises:
        ValidationError: If the input doesn't fit the model.
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'input'}: {error['msg']}"
            for error in e.errors()
        )
        raise ValidationError(f"Invalid {model.__name__}: {details}") from e
