"""Explicit success/failure results for inventory operations.

Rejections (duplicate ids, closed acquisition gates, rented vehicles) are
routine outcomes, so registry and dealership operations return an ``Outcome``
instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailureReason(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    ACQUISITION_DISABLED = "acquisition_disabled"
    VEHICLE_RENTED = "vehicle_rented"
    INVALID_STATE = "invalid_state"
    IO = "io"


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of a single inventory operation. Truthy iff it succeeded."""

    ok: bool
    reason: FailureReason | None = None
    message: str = ""

    @classmethod
    def success(cls, message: str = "") -> Outcome:
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, reason: FailureReason, message: str) -> Outcome:
        return cls(ok=False, reason=reason, message=message)

    def __bool__(self) -> bool:
        return self.ok
