"""Partial-update merge shared by the product and review endpoints."""
from __future__ import annotations

from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError

from catalog.db.errors import FailedValidation

ReadModel = TypeVar("ReadModel", bound=BaseModel)


def apply_patch(current: ReadModel, patch: BaseModel, validate_with: Type[BaseModel]) -> ReadModel:
    """Merge the fields set on ``patch`` into a copy of ``current``.

    Fields absent from the patch keep their stored value. The merged record is
    validated against ``validate_with`` (the create schema), so an explicit
    null on a required field is rejected here rather than by the database.
    """
    changes = patch.model_dump(exclude_unset=True, exclude={"version"})
    candidate = {
        name: changes.get(name, getattr(current, name))
        for name in validate_with.model_fields
    }
    try:
        validated = validate_with.model_validate(candidate)
    except ValidationError as exc:
        raise FailedValidation.from_pydantic(exc) from exc
    return current.model_copy(update=validated.model_dump())
