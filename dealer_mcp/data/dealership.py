"""A single dealership tenant: its vehicles and its acquisition gate."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from dealer_mcp.data.outcome import FailureReason, Outcome
from dealer_mcp.data.vehicle import VehicleRecord


class Dealership:
    """Vehicles held by one dealer, keyed by vehicle id.

    The acquisition flag is exposed but not enforced here; the registry checks
    it before adding or transferring in.
    """

    def __init__(self, dealer_id: str, name: str | None = None) -> None:
        self.dealer_id = dealer_id
        self.name = name
        self.acquisition_enabled = True
        self._vehicles: dict[str, VehicleRecord] = {}

    def __len__(self) -> int:
        return len(self._vehicles)

    def __contains__(self, vehicle_id: object) -> bool:
        return vehicle_id in self._vehicles

    def enable_acquisition(self) -> None:
        self.acquisition_enabled = True

    def disable_acquisition(self) -> None:
        self.acquisition_enabled = False

    def add_vehicle(self, vehicle: VehicleRecord) -> Outcome:
        """Insert a vehicle. Duplicate ids are rejected, never overwritten."""
        if vehicle.id in self._vehicles:
            return Outcome.failure(
                FailureReason.DUPLICATE,
                f"Dealer {self.dealer_id} already holds a vehicle with ID {vehicle.id}.",
            )
        self._vehicles[vehicle.id] = vehicle
        return Outcome.success(f"Vehicle {vehicle.id} added to dealer {self.dealer_id}.")

    def find_by_id(self, vehicle_id: str) -> VehicleRecord | None:
        return self._vehicles.get(vehicle_id)

    def remove_vehicle(self, vehicle_id: str) -> VehicleRecord | None:
        return self._vehicles.pop(vehicle_id, None)

    def get_vehicles(self) -> list[VehicleRecord]:
        return [v.copy() for v in self._vehicles.values()]

    def transfer_vehicle(self, vehicle_id: str, target: Dealership) -> Outcome:
        """Move a vehicle to ``target`` in one step.

        Every rejection is decided before anything is mutated, so the vehicle
        is always in exactly one of the two dealerships.
        """
        vehicle = self._vehicles.get(vehicle_id)
        if vehicle is None:
            return Outcome.failure(
                FailureReason.NOT_FOUND,
                f"Vehicle {vehicle_id} not found at dealer {self.dealer_id}.",
            )
        if vehicle.rented:
            return Outcome.failure(
                FailureReason.VEHICLE_RENTED,
                f"Vehicle {vehicle_id} is rented and cannot be transferred.",
            )
        if vehicle_id in target:
            return Outcome.failure(
                FailureReason.DUPLICATE,
                f"Dealer {target.dealer_id} already holds a vehicle with ID {vehicle_id}.",
            )

        del self._vehicles[vehicle_id]
        vehicle.dealer_id = target.dealer_id
        target._vehicles[vehicle_id] = vehicle
        return Outcome.success(
            f"Vehicle {vehicle_id} transferred from dealer {self.dealer_id} "
            f"to dealer {target.dealer_id}."
        )

    def rent_vehicle(self, vehicle_id: str, start: datetime, end: datetime) -> Outcome:
        vehicle = self._vehicles.get(vehicle_id)
        if vehicle is None:
            return Outcome.failure(
                FailureReason.NOT_FOUND,
                f"Vehicle {vehicle_id} not found at dealer {self.dealer_id}.",
            )
        return vehicle.rent(start, end)

    def return_vehicle(self, vehicle_id: str) -> Outcome:
        vehicle = self._vehicles.get(vehicle_id)
        if vehicle is None:
            return Outcome.failure(
                FailureReason.NOT_FOUND,
                f"Vehicle {vehicle_id} not found at dealer {self.dealer_id}.",
            )
        return vehicle.return_vehicle()

    def summary(self) -> dict[str, Any]:
        rented = sum(1 for v in self._vehicles.values() if v.rented)
        return {
            "dealer_id": self.dealer_id,
            "name": self.name or "",
            "acquisition_enabled": self.acquisition_enabled,
            "vehicle_count": len(self._vehicles),
            "rented_count": rented,
            "available_count": len(self._vehicles) - rented,
        }
