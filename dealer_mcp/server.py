"""Dealer inventory MCP server: FastMCP entry point over the inventory registry."""

from __future__ import annotations

import logging
from typing import Any

from cip_protocol.orchestration.errors import (
    log_and_return_tool_error as _log_and_return_tool_error,
)
from mcp.server.fastmcp import FastMCP

from dealer_mcp.config import load_config, load_env_file
from dealer_mcp.tools.feeds import (
    clear_export_file_impl,
    export_inventory_impl,
    import_feed_file_impl,
    import_feed_from_url_impl,
    import_feed_impl,
)
from dealer_mcp.tools.inventory import (
    add_vehicle_impl,
    list_dealerships_impl,
    list_vehicles_impl,
    remove_vehicle_impl,
    set_acquisition_impl,
)
from dealer_mcp.tools.rentals import rent_vehicle_impl, return_vehicle_impl
from dealer_mcp.tools.transfers import transfer_vehicle_impl

load_env_file()

mcp = FastMCP("DealerInventory")
logger = logging.getLogger(__name__)

logging.getLogger("dealer_mcp").setLevel(load_config().log_level)


# ── Inventory ──────────────────────────────────────────────────────


@mcp.tool()
def add_vehicle(vehicle: dict[str, Any]) -> str:
    """Add a vehicle to its dealership.

    Required fields: id, manufacturer, model, price (> 0), dealer_id.
    Optional: type (suv, sedan, pickup, sports car), dealer_name,
    acquisition_date (ISO-8601).
    """
    try:
        return add_vehicle_impl(vehicle)
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="add_vehicle",
            exc=exc,
            user_message=(
                "I am having trouble adding that vehicle right now. "
                "Please try again in a moment."
            ),
        )


@mcp.tool()
def remove_vehicle(
    dealer_id: str,
    vehicle_id: str,
    manufacturer: str,
    model: str,
    price: float,
) -> str:
    """Remove a vehicle. Every field must match the stored vehicle exactly."""
    try:
        return remove_vehicle_impl(
            dealer_id=dealer_id,
            vehicle_id=vehicle_id,
            manufacturer=manufacturer,
            model=model,
            price=price,
        )
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="remove_vehicle",
            exc=exc,
            user_message=(
                "I am having trouble removing that vehicle right now. "
                "Please try again in a moment."
            ),
        )


@mcp.tool()
def list_vehicles(dealer_id: str = "", status: str = "") -> str:
    """List vehicles across all dealers, optionally filtered by dealer or status."""
    try:
        return list_vehicles_impl(dealer_id=dealer_id, status=status)
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="list_vehicles",
            exc=exc,
            user_message="I am having trouble listing the inventory right now.",
        )


@mcp.tool()
def list_dealerships() -> str:
    """List dealerships with their acquisition status and vehicle counts."""
    try:
        return list_dealerships_impl()
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="list_dealerships",
            exc=exc,
            user_message="I am having trouble listing dealerships right now.",
        )


@mcp.tool()
def enable_acquisition(dealer_id: str) -> str:
    """Allow a dealer to take in new vehicles."""
    try:
        return set_acquisition_impl(dealer_id=dealer_id, enabled=True)
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="enable_acquisition",
            exc=exc,
            user_message="I am having trouble updating that dealer right now.",
        )


@mcp.tool()
def disable_acquisition(dealer_id: str) -> str:
    """Stop a dealer from taking in new vehicles (adds, imports, transfers in)."""
    try:
        return set_acquisition_impl(dealer_id=dealer_id, enabled=False)
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="disable_acquisition",
            exc=exc,
            user_message="I am having trouble updating that dealer right now.",
        )


# ── Rentals & transfers ────────────────────────────────────────────


@mcp.tool()
def rent_vehicle(dealer_id: str, vehicle_id: str, start_date: str, end_date: str) -> str:
    """Rent a vehicle. Dates are MM/DD/YYYY or ISO-8601. Sports cars are not rentable."""
    try:
        return rent_vehicle_impl(
            dealer_id=dealer_id,
            vehicle_id=vehicle_id,
            start_date=start_date,
            end_date=end_date,
        )
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="rent_vehicle",
            exc=exc,
            user_message=(
                "I am having trouble starting that rental right now. "
                "Please try again in a moment."
            ),
        )


@mcp.tool()
def return_vehicle(dealer_id: str, vehicle_id: str) -> str:
    """Return a rented vehicle."""
    try:
        return return_vehicle_impl(dealer_id=dealer_id, vehicle_id=vehicle_id)
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="return_vehicle",
            exc=exc,
            user_message=(
                "I am having trouble returning that vehicle right now. "
                "Please try again in a moment."
            ),
        )


@mcp.tool()
def transfer_vehicle(source_dealer_id: str, target_dealer_id: str, vehicle_id: str) -> str:
    """Transfer a vehicle between dealers. Rented vehicles cannot be transferred."""
    try:
        return transfer_vehicle_impl(
            source_dealer_id=source_dealer_id,
            target_dealer_id=target_dealer_id,
            vehicle_id=vehicle_id,
        )
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="transfer_vehicle",
            exc=exc,
            user_message=(
                "I am having trouble transferring that vehicle right now. "
                "Please try again in a moment."
            ),
        )


# ── Feeds & snapshots ──────────────────────────────────────────────


@mcp.tool()
def import_xml_feed(document: str) -> str:
    """Import vehicles from an XML dealer feed passed as text."""
    try:
        return import_feed_impl(document)
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="import_xml_feed",
            exc=exc,
            user_message="I am having trouble importing that feed right now.",
        )


@mcp.tool()
def import_xml_feed_file(path: str) -> str:
    """Import vehicles from an XML dealer feed on disk."""
    try:
        return import_feed_file_impl(path)
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="import_xml_feed_file",
            exc=exc,
            user_message="I am having trouble importing that feed right now.",
        )


@mcp.tool()
async def import_xml_feed_from_url(url: str) -> str:
    """Download an XML dealer feed over HTTP(S) and import it."""
    try:
        return await import_feed_from_url_impl(url)
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="import_xml_feed_from_url",
            exc=exc,
            user_message="I am having trouble downloading that feed right now.",
        )


@mcp.tool()
def export_inventory(destination: str = "") -> str:
    """Copy the inventory snapshot to an export file (default: configured export path)."""
    try:
        return export_inventory_impl(destination)
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="export_inventory",
            exc=exc,
            user_message="I am having trouble exporting the inventory right now.",
        )


@mcp.tool()
def clear_export_file(destination: str = "") -> str:
    """Reset an export file to an empty inventory snapshot."""
    try:
        return clear_export_file_impl(destination)
    except Exception as exc:
        return _log_and_return_tool_error(
            tool_name="clear_export_file",
            exc=exc,
            user_message="I am having trouble clearing the export file right now.",
        )


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
