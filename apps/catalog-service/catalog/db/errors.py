"""
Error kinds raised by the persistence layer.

FailedValidation, RecordNotFound and EditConflict are expected outcomes that
callers branch on. StorageFault and TimeoutFault wrap unexpected database
errors; their text is for logs only.
"""
from __future__ import annotations

from typing import Dict, Optional

from pydantic import ValidationError


class StoreError(Exception):
    """Base class for everything the stores raise on purpose."""


class FailedValidation(StoreError):
    """Malformed input, reported per field."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__(", ".join(f"{k}: {v}" for k, v in self.errors.items()))

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "FailedValidation":
        """Keep the first pydantic message reported for each field."""
        errors: Dict[str, str] = {}
        for err in exc.errors():
            field = ".".join(str(part) for part in err.get("loc", ())) or "body"
            errors.setdefault(field, err.get("msg", "invalid value"))
        return cls(errors)


class RecordNotFound(StoreError):
    def __init__(self, resource: str = "record", record_id: Optional[int] = None):
        self.resource = resource
        self.record_id = record_id
        if record_id is None:
            msg = f"{resource} not found"
        else:
            msg = f"{resource} with id {record_id} not found"
        super().__init__(msg)


class EditConflict(StoreError):
    def __init__(self, resource: str = "record", record_id: Optional[int] = None):
        self.resource = resource
        self.record_id = record_id
        super().__init__(f"edit conflict on {resource} {record_id}")


class StorageFault(StoreError):
    """Unexpected storage-layer failure (connectivity, constraint, decode)."""


class TimeoutFault(StorageFault):
    """The bounded timeout elapsed before the statement completed."""
