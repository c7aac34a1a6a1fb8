from __future__ import annotations
from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Base class for errors surfaced to API callers.
    `status_code` is the HTTP status the exception handler responds with;
    `extra` is merged into the JSON body next to `message`.
    """
    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra: Dict[str, Any] = dict(extra)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"message": self.message}
        out.update(self.extra)
        return out


class ValidationError(AppError):
    status_code = 400


class NotFound(AppError):
    status_code = 404


class InvalidState(AppError):
    status_code = 400


class ConflictError(AppError):
    status_code = 409


class StoreError(AppError):
    status_code = 500


def missing_fields(data: Dict[str, Any], required: Any) -> list:
    """Fields that are absent, None or an empty string. False and 0 count as present."""
    out = []
    for name in required:
        value: Optional[Any] = data.get(name)
        if value is None or (isinstance(value, str) and value.strip() == ""):
            out.append(name)
    return out
