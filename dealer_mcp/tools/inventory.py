"""Inventory tool implementations: add, remove, list, acquisition gates."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from dealer_mcp.data.inventory import get_registry
from dealer_mcp.data.vehicle import VehicleRecord, utc_now
from dealer_mcp.normalization import (
    VARIANT_ALIASES,
    infer_variant_from_model,
    is_blank,
    lookup_variant,
    parse_price,
)

_REQUIRED_FIELDS = ("id", "manufacturer", "model", "price", "dealer_id")

_CANONICAL_ALIASES = {
    "vehicle_id": "id",
    "stock_id": "id",
    "vehicle_type": "type",
    "body_type": "type",
    "make": "manufacturer",
    "vehicle_manufacturer": "manufacturer",
    "vehicle_model": "model",
    "dealership_id": "dealer_id",
    "dealer": "dealer_id",
    "asking_price": "price",
    "list_price": "price",
}

_STATUS_FILTERS = {"", "available", "rented"}


def _canonicalize_vehicle(vehicle: dict[str, Any]) -> dict[str, Any]:
    normalized = dict(vehicle)

    for alias, canonical in _CANONICAL_ALIASES.items():
        if canonical in normalized and not is_blank(normalized.get(canonical)):
            continue
        if alias in normalized and not is_blank(normalized.get(alias)):
            normalized[canonical] = normalized[alias]

    for field in ("id", "type", "manufacturer", "model", "dealer_id", "dealer_name"):
        if field in normalized and isinstance(normalized[field], str):
            normalized[field] = normalized[field].strip()

    if "price" in normalized and isinstance(normalized["price"], str):
        parsed_price = parse_price(normalized["price"])
        if parsed_price is not None:
            normalized["price"] = parsed_price

    return normalized


def _parse_acquisition_date(raw: Any) -> datetime | None:
    if is_blank(raw):
        return utc_now()
    if not isinstance(raw, str):
        return None
    try:
        parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_vehicle(payload: dict[str, Any]) -> tuple[VehicleRecord | None, str | None]:
    """Validate a manual-entry payload. Returns (vehicle, None) or (None, error)."""
    normalized = _canonicalize_vehicle(payload)

    missing = [field for field in _REQUIRED_FIELDS if is_blank(normalized.get(field))]
    if missing:
        return None, f"Error: vehicle is missing required field(s): {', '.join(missing)}."

    for field in ("id", "manufacturer", "model", "dealer_id"):
        if not isinstance(normalized[field], str):
            return None, f"Error: vehicle field '{field}' must be a non-empty string."

    price = normalized["price"]
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return None, "Error: vehicle field 'price' must be a number."
    if price <= 0:
        return None, "Error: vehicle field 'price' must be greater than 0."

    raw_type = normalized.get("type")
    if is_blank(raw_type):
        variant = infer_variant_from_model(normalized["model"])
    else:
        variant = lookup_variant(str(raw_type))
        if variant is None:
            return None, (
                f"Error: unknown vehicle type '{raw_type}'. "
                f"Must be one of: {', '.join(sorted(VARIANT_ALIASES))}."
            )

    acquired = _parse_acquisition_date(normalized.get("acquisition_date"))
    if acquired is None:
        return None, "Error: acquisition_date must be a valid ISO datetime string."

    metadata: dict[str, Any] = {}
    dealer_name = normalized.get("dealer_name")
    if isinstance(dealer_name, str) and dealer_name:
        metadata["dealer_name"] = dealer_name

    vehicle = VehicleRecord(
        id=normalized["id"],
        variant=variant,
        manufacturer=normalized["manufacturer"],
        model=normalized["model"],
        price=float(price),
        dealer_id=normalized["dealer_id"],
        acquisition_date=acquired,
        metadata=metadata,
    )
    return vehicle, None


def add_vehicle_impl(vehicle: Any) -> str:
    """Validate and add a single vehicle to its dealership."""
    if not isinstance(vehicle, dict):
        return "Error: vehicle payload must be a dict."
    record, error = build_vehicle(vehicle)
    if error or record is None:
        return error or "Error: vehicle payload is invalid."

    outcome = get_registry().add_vehicle(record)
    if not outcome:
        return f"Error: {outcome.message}"
    return (
        f"Vehicle {record.id} ({record.manufacturer} {record.model}, "
        f"{record.variant.value}) added to dealer {record.dealer_id}."
    )


def remove_vehicle_impl(
    *,
    dealer_id: str,
    vehicle_id: str,
    manufacturer: str,
    model: str,
    price: float,
) -> str:
    """Remove a vehicle when every identifying field matches."""
    if not dealer_id.strip() or not vehicle_id.strip():
        return "Error: dealer_id and vehicle_id are required."
    outcome = get_registry().remove_vehicle(
        dealer_id.strip(),
        vehicle_id.strip(),
        manufacturer.strip(),
        model.strip(),
        price,
    )
    if not outcome:
        return f"Error: {outcome.message}"
    return outcome.message


def set_acquisition_impl(*, dealer_id: str, enabled: bool) -> str:
    if not dealer_id.strip():
        return "Error: dealer_id is required."
    registry = get_registry()
    if enabled:
        outcome = registry.enable_acquisition(dealer_id.strip())
    else:
        outcome = registry.disable_acquisition(dealer_id.strip())
    return outcome.message


def list_vehicles_impl(*, dealer_id: str = "", status: str = "") -> str:
    """Return the inventory as JSON, optionally filtered by dealer or status."""
    normalized_status = status.strip().lower()
    if normalized_status not in _STATUS_FILTERS:
        return "Error: status must be 'available', 'rented', or empty."

    vehicles = get_registry().list_vehicles()
    if dealer_id.strip():
        vehicles = [v for v in vehicles if v.dealer_id == dealer_id.strip()]
    if normalized_status:
        vehicles = [v for v in vehicles if v.status == normalized_status]

    payload = {
        "count": len(vehicles),
        "vehicles": [v.to_display_dict() for v in vehicles],
    }
    return json.dumps(payload, indent=2)


def list_dealerships_impl() -> str:
    summaries = get_registry().dealership_summaries()
    return json.dumps({"count": len(summaries), "dealerships": summaries}, indent=2)
