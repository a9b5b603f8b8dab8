"""Vehicle records and the per-vehicle rental state machine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from dealer_mcp.data.outcome import FailureReason, Outcome


class Variant(str, Enum):
    """Closed set of body styles. Values are the snapshot ``vehicle_type`` labels."""

    SUV = "suv"
    SEDAN = "sedan"
    PICKUP = "pickup"
    SPORTS_CAR = "sports car"


_NON_RENTABLE_VARIANTS: frozenset[Variant] = frozenset({Variant.SPORTS_CAR})


def is_rentable_variant(variant: Variant) -> bool:
    return variant not in _NON_RENTABLE_VARIANTS


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class VehicleRecord:
    """One physical unit held by a dealership.

    Rental state is either Available (``rented`` False, no rental window) or
    Rented (``rented`` True, both dates set). Sports cars never leave Available.
    """

    id: str
    variant: Variant
    manufacturer: str
    model: str
    price: float
    dealer_id: str
    acquisition_date: datetime = field(default_factory=utc_now)
    rented: bool = False
    rental_start: datetime | None = None
    rental_end: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_rentable(self) -> bool:
        return is_rentable_variant(self.variant)

    @property
    def is_available_for_rent(self) -> bool:
        return self.is_rentable and not self.rented

    @property
    def status(self) -> str:
        return "rented" if self.rented else "available"

    @property
    def dealer_name(self) -> str:
        name = self.metadata.get("dealer_name")
        return name if isinstance(name, str) else ""

    def rent(self, start: datetime, end: datetime) -> Outcome:
        """Move Available → Rented for the given window."""
        if self.rented:
            return Outcome.failure(
                FailureReason.INVALID_STATE, f"Vehicle {self.id} is already rented."
            )
        if not self.is_rentable:
            return Outcome.failure(
                FailureReason.VALIDATION,
                f"Vehicle {self.id} is a {self.variant.value} and cannot be rented.",
            )
        start, end = as_utc(start), as_utc(end)
        if not start < end:
            return Outcome.failure(
                FailureReason.VALIDATION, "Rental start must be before rental end."
            )
        self.rented = True
        self.rental_start = start
        self.rental_end = end
        return Outcome.success(f"Vehicle {self.id} rented.")

    def return_vehicle(self) -> Outcome:
        """Move Rented → Available. The rental window is cleared."""
        if not self.rented:
            return Outcome.failure(
                FailureReason.INVALID_STATE, f"Vehicle {self.id} is not currently rented."
            )
        self.rented = False
        self.rental_start = None
        self.rental_end = None
        return Outcome.success(f"Vehicle {self.id} returned.")

    def has_consistent_rental_state(self) -> bool:
        if not self.rented:
            return self.rental_start is None and self.rental_end is None
        if not self.is_rentable:
            return False
        if self.rental_start is None or self.rental_end is None:
            return False
        return as_utc(self.rental_start) < as_utc(self.rental_end)

    def copy(self) -> VehicleRecord:
        """Detached copy; callers may mutate it without touching the registry."""
        return replace(self, metadata=dict(self.metadata))

    def to_display_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.variant.value,
            "manufacturer": self.manufacturer,
            "model": self.model,
            "price": self.price,
            "dealer_id": self.dealer_id,
            "dealer_name": self.dealer_name,
            "acquisition_date": self.acquisition_date.isoformat(),
            "status": self.status,
            "rental_start": self.rental_start.isoformat() if self.rental_start else None,
            "rental_end": self.rental_end.isoformat() if self.rental_end else None,
        }
