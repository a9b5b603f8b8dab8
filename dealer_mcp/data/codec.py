"""JSON snapshot codec for the vehicle inventory.

Document layout::

    {"car_inventory": [
        {"vehicle_id": "...", "vehicle_type": "suv", "vehicle_manufacturer": "...",
         "vehicle_model": "...", "acquisition_date": 1700000000000, "price": 1.0,
         "dealership_id": "...", "is_rented": false}
    ]}

Timestamps are epoch milliseconds. Keys not listed in ``SNAPSHOT_FIELDS`` are
kept in ``VehicleRecord.metadata`` and written back unchanged. Every write is
a full snapshot that replaces the destination's previous content.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from dealer_mcp.constants import INVENTORY_KEY
from dealer_mcp.data.vehicle import Variant, VehicleRecord, as_utc
from dealer_mcp.normalization import infer_variant_from_model, is_blank, lookup_variant

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = (
    "vehicle_id",
    "vehicle_type",
    "vehicle_manufacturer",
    "vehicle_model",
    "acquisition_date",
    "price",
    "dealership_id",
    "is_rented",
    "rental_start_date",
    "rental_end_date",
)
_REQUIRED_FIELDS = (
    "vehicle_id",
    "acquisition_date",
    "price",
    "dealership_id",
)
# Feed imports may carry an empty make or model, so these only need to be strings.
_TEXT_FIELDS = ("vehicle_manufacturer", "vehicle_model")


class SnapshotEntryError(ValueError):
    """A single inventory entry could not be decoded."""


def to_epoch_millis(value: datetime) -> int:
    return int(as_utc(value).timestamp() * 1000)


def from_epoch_millis(value: Any) -> datetime:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SnapshotEntryError(f"expected epoch milliseconds, got {value!r}")
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def resolve_variant(entry: dict[str, Any]) -> Variant:
    """Explicit ``vehicle_type`` wins; otherwise infer from the model name."""
    raw_type = entry.get("vehicle_type")
    if isinstance(raw_type, str):
        variant = lookup_variant(raw_type)
        if variant is not None:
            return variant
    model = entry.get("vehicle_model")
    return infer_variant_from_model(model if isinstance(model, str) else None)


def vehicle_from_entry(entry: Any) -> VehicleRecord:
    """Build a VehicleRecord from one snapshot entry or raise SnapshotEntryError."""
    if not isinstance(entry, dict):
        raise SnapshotEntryError("inventory entry must be an object")

    missing = [key for key in _REQUIRED_FIELDS if is_blank(entry.get(key))]
    if missing:
        raise SnapshotEntryError(f"missing required field(s): {', '.join(missing)}")
    for key in _TEXT_FIELDS:
        if not isinstance(entry.get(key), str):
            raise SnapshotEntryError(f"{key} must be a string")

    price = entry["price"]
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise SnapshotEntryError(f"price must be a number, got {price!r}")
    if not math.isfinite(price):
        raise SnapshotEntryError(f"price must be finite, got {price!r}")

    rented = entry.get("is_rented", False)
    if not isinstance(rented, bool):
        raise SnapshotEntryError(f"is_rented must be a boolean, got {rented!r}")

    start = entry.get("rental_start_date")
    end = entry.get("rental_end_date")
    vehicle = VehicleRecord(
        id=str(entry["vehicle_id"]),
        variant=resolve_variant(entry),
        manufacturer=entry["vehicle_manufacturer"],
        model=entry["vehicle_model"],
        price=float(price),
        dealer_id=str(entry["dealership_id"]),
        acquisition_date=from_epoch_millis(entry["acquisition_date"]),
        rented=rented,
        rental_start=from_epoch_millis(start) if start is not None else None,
        rental_end=from_epoch_millis(end) if end is not None else None,
        metadata={k: v for k, v in entry.items() if k not in SNAPSHOT_FIELDS},
    )
    if not vehicle.has_consistent_rental_state():
        raise SnapshotEntryError(
            f"inconsistent rental state for {vehicle.variant.value} {vehicle.id}"
        )
    return vehicle


def vehicle_to_entry(vehicle: VehicleRecord) -> dict[str, Any]:
    entry: dict[str, Any] = dict(vehicle.metadata)
    entry.update({
        "vehicle_id": vehicle.id,
        "vehicle_type": vehicle.variant.value,
        "vehicle_manufacturer": vehicle.manufacturer,
        "vehicle_model": vehicle.model,
        "acquisition_date": to_epoch_millis(vehicle.acquisition_date),
        "price": vehicle.price,
        "dealership_id": vehicle.dealer_id,
        "is_rented": vehicle.rented,
    })
    if vehicle.rented and vehicle.rental_start and vehicle.rental_end:
        entry["rental_start_date"] = to_epoch_millis(vehicle.rental_start)
        entry["rental_end_date"] = to_epoch_millis(vehicle.rental_end)
    return entry


# ── Decode ──────────────────────────────────────────────────────────


def decode_inventory(payload: Any) -> list[VehicleRecord]:
    """Decode a parsed snapshot document. Bad entries are skipped, not fatal."""
    if not isinstance(payload, dict):
        logger.warning("Inventory document is not a JSON object; ignoring it")
        return []
    entries = payload.get(INVENTORY_KEY)
    if entries is None:
        return []
    if not isinstance(entries, list):
        logger.warning("'%s' is not a list; ignoring it", INVENTORY_KEY)
        return []

    vehicles: list[VehicleRecord] = []
    for index, entry in enumerate(entries):
        try:
            vehicles.append(vehicle_from_entry(entry))
        except (SnapshotEntryError, TypeError, ValueError, OverflowError, OSError) as exc:
            logger.warning("Skipping inventory entry %d: %s", index, exc)
    return vehicles


def loads(text: str) -> list[VehicleRecord]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.error("Inventory document is not valid JSON: %s", exc)
        return []
    return decode_inventory(payload)


def read_inventory(path: str | Path) -> list[VehicleRecord]:
    """Read a snapshot file. A missing file is an empty inventory."""
    file_path = Path(path)
    if not file_path.exists():
        return []
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError:
        logger.exception("Failed to read inventory file %s", file_path)
        return []
    return loads(text)


# ── Encode ──────────────────────────────────────────────────────────


def encode_inventory(vehicles: list[VehicleRecord]) -> dict[str, Any]:
    """Build the snapshot document. Later vehicles win on duplicate ids."""
    by_id: dict[str, dict[str, Any]] = {}
    for vehicle in vehicles:
        by_id.pop(vehicle.id, None)
        by_id[vehicle.id] = vehicle_to_entry(vehicle)
    return {INVENTORY_KEY: list(by_id.values())}


def dumps(vehicles: list[VehicleRecord]) -> str:
    return json.dumps(encode_inventory(vehicles), indent=2)


def write_inventory(vehicles: list[VehicleRecord], path: str | Path) -> bool:
    """Overwrite ``path`` with a snapshot of ``vehicles``. Returns False on I/O failure."""
    file_path = Path(path)
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(dumps(vehicles), encoding="utf-8")
    except OSError:
        logger.exception("Failed to write inventory file %s", file_path)
        return False
    logger.debug("Wrote %d vehicle(s) to %s", len(vehicles), file_path)
    return True
