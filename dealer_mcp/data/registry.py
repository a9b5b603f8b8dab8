"""Multi-dealership inventory registry.

The registry owns every Dealership, enforces the per-dealer acquisition gate,
and rewrites the JSON snapshot after each successful mutation. The in-memory
state is authoritative: each write replaces the snapshot file with the current
contents of the registry, never a merge with what was on disk.

No operation raises past this boundary; callers get an ``Outcome`` or a count.
"""

from __future__ import annotations

import logging
import math
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

from dealer_mcp.constants import PRICE_MATCH_TOLERANCE
from dealer_mcp.data import codec
from dealer_mcp.data.dealership import Dealership
from dealer_mcp.data.outcome import FailureReason, Outcome
from dealer_mcp.data.vehicle import VehicleRecord
from dealer_mcp.ingestion.xml_feed import normalize_dealer_feed, read_dealer_feed

logger = logging.getLogger(__name__)


def _first_blank(fields: tuple[tuple[str, object], ...]) -> str | None:
    for label, value in fields:
        if not isinstance(value, str) or not value.strip():
            return f"{label} is required"
    return None


def validate_imported_vehicle(vehicle: VehicleRecord) -> str | None:
    """Minimal checks for feed and snapshot vehicles.

    Feeds may omit the make or carry an unreadable price (defaulted to 0.0);
    such vehicles are still accepted.
    """
    problem = _first_blank((("vehicle id", vehicle.id), ("dealer id", vehicle.dealer_id)))
    if problem is not None:
        return problem
    if not isinstance(vehicle.manufacturer, str) or not isinstance(vehicle.model, str):
        return "manufacturer and model must be text"
    if isinstance(vehicle.price, bool) or not isinstance(vehicle.price, (int, float)):
        return "price must be a number"
    if not math.isfinite(vehicle.price):
        return "price must be a finite number"
    if not vehicle.has_consistent_rental_state():
        return "rental state is inconsistent"
    return None


def validate_vehicle(vehicle: VehicleRecord) -> str | None:
    """Entry-form checks: every field filled in and a positive price."""
    problem = validate_imported_vehicle(vehicle)
    if problem is not None:
        return problem
    problem = _first_blank(
        (("manufacturer", vehicle.manufacturer), ("model", vehicle.model))
    )
    if problem is not None:
        return problem
    if vehicle.price <= 0:
        return "price must be greater than 0"
    return None


class InventoryRegistry:
    """Thread-safe registry of dealerships keyed by dealer id.

    ``inventory_path`` is the snapshot file rewritten after every successful
    mutation; ``None`` keeps the registry purely in memory.
    """

    def __init__(self, inventory_path: str | Path | None = None) -> None:
        self._lock = threading.RLock()
        self._dealerships: dict[str, Dealership] = {}
        self.inventory_path = Path(inventory_path) if inventory_path is not None else None

    # ── Tenants ────────────────────────────────────────────────────

    def _resolve(self, dealer_id: str, dealer_name: str | None = None) -> Dealership:
        dealership = self._dealerships.get(dealer_id)
        if dealership is None:
            dealership = Dealership(dealer_id, dealer_name or None)
            self._dealerships[dealer_id] = dealership
            logger.info("Created dealership %s", dealer_id)
        return dealership

    def get_dealership(self, dealer_id: str) -> dict[str, Any] | None:
        with self._lock:
            dealership = self._dealerships.get(dealer_id)
            return dealership.summary() if dealership is not None else None

    def dealership_summaries(self) -> list[dict[str, Any]]:
        with self._lock:
            return [d.summary() for d in self._dealerships.values()]

    def is_acquisition_enabled(self, dealer_id: str) -> bool:
        with self._lock:
            dealership = self._dealerships.get(dealer_id)
            return dealership is None or dealership.acquisition_enabled

    def enable_acquisition(self, dealer_id: str) -> Outcome:
        with self._lock:
            self._resolve(dealer_id).enable_acquisition()
        logger.info("Acquisition enabled for dealer %s", dealer_id)
        return Outcome.success(f"Acquisition enabled for dealer {dealer_id}.")

    def disable_acquisition(self, dealer_id: str) -> Outcome:
        with self._lock:
            self._resolve(dealer_id).disable_acquisition()
        logger.info("Acquisition disabled for dealer %s", dealer_id)
        return Outcome.success(f"Acquisition disabled for dealer {dealer_id}.")

    # ── Reads ──────────────────────────────────────────────────────

    def list_vehicles(self) -> list[VehicleRecord]:
        """Copies of every vehicle across all dealerships."""
        with self._lock:
            vehicles: list[VehicleRecord] = []
            for dealership in self._dealerships.values():
                vehicles.extend(dealership.get_vehicles())
            return vehicles

    def find_vehicle(self, dealer_id: str, vehicle_id: str) -> VehicleRecord | None:
        with self._lock:
            dealership = self._dealerships.get(dealer_id)
            if dealership is None:
                return None
            vehicle = dealership.find_by_id(vehicle_id)
            return vehicle.copy() if vehicle is not None else None

    def count(self) -> int:
        with self._lock:
            return sum(len(d) for d in self._dealerships.values())

    # ── Persistence ────────────────────────────────────────────────

    def _persist(self) -> None:
        if self.inventory_path is None:
            return
        if not codec.write_inventory(self.list_vehicles(), self.inventory_path):
            logger.error("Inventory snapshot not saved to %s", self.inventory_path)

    def load(self, path: str | Path | None = None) -> int:
        """Populate the registry from a snapshot file without rewriting it.

        Vehicles go through the import checks, so duplicates and closed
        acquisition gates still reject entries. Returns the number accepted.
        """
        source = Path(path) if path is not None else self.inventory_path
        if source is None:
            return 0
        accepted = 0
        with self._lock:
            for vehicle in codec.read_inventory(source):
                if self._add(vehicle, strict=False):
                    accepted += 1
        logger.info("Loaded %d vehicle(s) from %s", accepted, source)
        return accepted

    def export_snapshot(self, source: str | Path, destination: str | Path) -> Outcome:
        """Copy the snapshot at ``source`` to ``destination``."""
        vehicles = codec.read_inventory(source)
        if not vehicles:
            return Outcome.failure(FailureReason.VALIDATION, "No vehicles to export.")
        if not codec.write_inventory(vehicles, destination):
            return Outcome.failure(FailureReason.IO, f"Could not write export file {destination}.")
        logger.info("Exported %d vehicle(s) to %s", len(vehicles), destination)
        return Outcome.success(f"Exported {len(vehicles)} vehicle(s) to {destination}.")

    def clear(self, destination: str | Path) -> Outcome:
        """Overwrite ``destination`` with an empty snapshot."""
        if not codec.write_inventory([], destination):
            return Outcome.failure(FailureReason.IO, f"Could not clear {destination}.")
        return Outcome.success(f"Cleared {destination}.")

    # ── Mutations ──────────────────────────────────────────────────

    def _add(self, vehicle: VehicleRecord, *, strict: bool = True) -> Outcome:
        validate = validate_vehicle if strict else validate_imported_vehicle
        problem = validate(vehicle)
        if problem is not None:
            logger.info("Rejected vehicle %r: %s", vehicle.id, problem)
            return Outcome.failure(FailureReason.VALIDATION, f"Invalid vehicle: {problem}.")

        dealership = self._resolve(vehicle.dealer_id, vehicle.dealer_name)
        if not dealership.acquisition_enabled:
            logger.info(
                "Rejected vehicle %s: acquisition disabled for dealer %s",
                vehicle.id,
                vehicle.dealer_id,
            )
            return Outcome.failure(
                FailureReason.ACQUISITION_DISABLED,
                f"Acquisition is disabled for dealer {vehicle.dealer_id}.",
            )

        outcome = dealership.add_vehicle(vehicle.copy())
        if outcome:
            if vehicle.dealer_name:
                dealership.name = vehicle.dealer_name
            logger.info("Vehicle %s added to dealer %s", vehicle.id, vehicle.dealer_id)
        else:
            logger.info("Rejected vehicle %s: %s", vehicle.id, outcome.message)
        return outcome

    def add_vehicle(self, vehicle: VehicleRecord) -> Outcome:
        with self._lock:
            outcome = self._add(vehicle)
            if outcome:
                self._persist()
            return outcome

    def remove_vehicle(
        self,
        dealer_id: str,
        vehicle_id: str,
        manufacturer: str,
        model: str,
        price: float,
    ) -> Outcome:
        """Remove a vehicle only when id, manufacturer, model, and price all match."""
        with self._lock:
            dealership = self._dealerships.get(dealer_id)
            if dealership is None:
                return Outcome.failure(FailureReason.NOT_FOUND, f"Dealer {dealer_id} not found.")

            vehicle = dealership.find_by_id(vehicle_id)
            if (
                vehicle is None
                or vehicle.manufacturer != manufacturer
                or vehicle.model != model
                or not abs(vehicle.price - price) < PRICE_MATCH_TOLERANCE
            ):
                return Outcome.failure(
                    FailureReason.NOT_FOUND,
                    f"No vehicle at dealer {dealer_id} matches ID {vehicle_id}, "
                    f"{manufacturer} {model}, ${price:,.2f}.",
                )
            if vehicle.rented:
                return Outcome.failure(
                    FailureReason.VEHICLE_RENTED,
                    f"Vehicle {vehicle_id} is rented and cannot be removed.",
                )

            dealership.remove_vehicle(vehicle_id)
            logger.info("Vehicle %s removed from dealer %s", vehicle_id, dealer_id)
            self._persist()
            return Outcome.success(f"Vehicle {vehicle_id} removed from dealer {dealer_id}.")

    def transfer_vehicle(self, source_id: str, target_id: str, vehicle_id: str) -> Outcome:
        with self._lock:
            source = self._dealerships.get(source_id)
            target = self._dealerships.get(target_id)
            if source is None:
                return Outcome.failure(FailureReason.NOT_FOUND, f"Dealer {source_id} not found.")
            if target is None:
                return Outcome.failure(FailureReason.NOT_FOUND, f"Dealer {target_id} not found.")
            if not target.acquisition_enabled:
                return Outcome.failure(
                    FailureReason.ACQUISITION_DISABLED,
                    f"Acquisition is disabled for dealer {target_id}.",
                )

            outcome = source.transfer_vehicle(vehicle_id, target)
            if outcome:
                logger.info(
                    "Vehicle %s transferred from dealer %s to dealer %s",
                    vehicle_id,
                    source_id,
                    target_id,
                )
                self._persist()
            return outcome

    def rent_vehicle(
        self, dealer_id: str, vehicle_id: str, start: datetime, end: datetime
    ) -> Outcome:
        with self._lock:
            dealership = self._dealerships.get(dealer_id)
            if dealership is None:
                return Outcome.failure(FailureReason.NOT_FOUND, f"Dealer {dealer_id} not found.")
            outcome = dealership.rent_vehicle(vehicle_id, start, end)
            if outcome:
                logger.info("Vehicle %s rented at dealer %s", vehicle_id, dealer_id)
                self._persist()
            return outcome

    def return_vehicle(self, dealer_id: str, vehicle_id: str) -> Outcome:
        with self._lock:
            dealership = self._dealerships.get(dealer_id)
            if dealership is None:
                return Outcome.failure(FailureReason.NOT_FOUND, f"Dealer {dealer_id} not found.")
            outcome = dealership.return_vehicle(vehicle_id)
            if outcome:
                logger.info("Vehicle %s returned at dealer %s", vehicle_id, dealer_id)
                self._persist()
            return outcome

    # ── Feed import ────────────────────────────────────────────────

    def import_vehicles(self, vehicles: list[VehicleRecord]) -> int:
        """Add a batch with the import checks; persist once if any landed."""
        accepted = 0
        with self._lock:
            for vehicle in vehicles:
                if self._add(vehicle, strict=False):
                    accepted += 1
            if accepted:
                self._persist()
        logger.info("Imported %d of %d vehicle(s)", accepted, len(vehicles))
        return accepted

    def import_feed(self, document: str | bytes) -> int:
        """Import an XML dealer feed. Returns the number of vehicles accepted."""
        return self.import_vehicles(normalize_dealer_feed(document))

    def import_feed_file(self, path: str | Path) -> int:
        return self.import_vehicles(read_dealer_feed(path))
