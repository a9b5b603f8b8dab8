"""Inter-dealer transfer tool implementation."""

from __future__ import annotations

from dealer_mcp.data.inventory import get_registry


def transfer_vehicle_impl(*, source_dealer_id: str, target_dealer_id: str, vehicle_id: str) -> str:
    """Move a vehicle between two existing dealerships."""
    source = source_dealer_id.strip()
    target = target_dealer_id.strip()
    vehicle = vehicle_id.strip()
    if not source or not target or not vehicle:
        return "Error: source_dealer_id, target_dealer_id, and vehicle_id are required."
    if source == target:
        return "Error: source and target dealers must differ."

    outcome = get_registry().transfer_vehicle(source, target, vehicle)
    if not outcome:
        return f"Error: {outcome.message}"
    return outcome.message
