"""Rental lifecycle tool implementations."""

from __future__ import annotations

from datetime import datetime, timezone

from dealer_mcp.constants import RENTAL_DATE_FORMAT
from dealer_mcp.data.inventory import get_registry


def parse_rental_date(value: str) -> datetime | None:
    """Accept ``MM/DD/YYYY`` (desk format) or ISO-8601. Naive values are UTC."""
    text = value.strip()
    if not text:
        return None
    try:
        parsed = datetime.strptime(text, RENTAL_DATE_FORMAT)
    except ValueError:
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def rent_vehicle_impl(*, dealer_id: str, vehicle_id: str, start_date: str, end_date: str) -> str:
    """Start a rental for a vehicle held by ``dealer_id``."""
    if not dealer_id.strip() or not vehicle_id.strip():
        return "Error: dealer_id and vehicle_id are required."

    start = parse_rental_date(start_date)
    end = parse_rental_date(end_date)
    if start is None or end is None:
        return "Error: rental dates must be MM/DD/YYYY or ISO-8601."

    outcome = get_registry().rent_vehicle(dealer_id.strip(), vehicle_id.strip(), start, end)
    if not outcome:
        return f"Error: {outcome.message}"
    return (
        f"Vehicle {vehicle_id.strip()} rented from {start.date().isoformat()} "
        f"to {end.date().isoformat()}."
    )


def return_vehicle_impl(*, dealer_id: str, vehicle_id: str) -> str:
    if not dealer_id.strip() or not vehicle_id.strip():
        return "Error: dealer_id and vehicle_id are required."
    outcome = get_registry().return_vehicle(dealer_id.strip(), vehicle_id.strip())
    if not outcome:
        return f"Error: {outcome.message}"
    return outcome.message
