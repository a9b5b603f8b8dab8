"""Shared test fixtures: registry injection and sample vehicles."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from dealer_mcp.data.inventory import set_registry
from dealer_mcp.data.registry import InventoryRegistry
from dealer_mcp.data.vehicle import Variant, VehicleRecord

ACQUIRED = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_vehicle(
    vehicle_id: str = "V-001",
    *,
    variant: Variant = Variant.SUV,
    manufacturer: str = "Honda",
    model: str = "CR-V",
    price: float = 28_500.0,
    dealer_id: str = "485",
    **kwargs,
) -> VehicleRecord:
    return VehicleRecord(
        id=vehicle_id,
        variant=variant,
        manufacturer=manufacturer,
        model=model,
        price=price,
        dealer_id=dealer_id,
        acquisition_date=ACQUIRED,
        **kwargs,
    )


@pytest.fixture()
def inventory_path(tmp_path: Path) -> Path:
    return tmp_path / "inventory.json"


@pytest.fixture()
def registry(inventory_path: Path) -> InventoryRegistry:
    """A fresh registry persisting to a temporary snapshot file."""
    return InventoryRegistry(inventory_path)


@pytest.fixture(autouse=True)
def _inject_test_registry(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Give every test an isolated registry and keep config paths inside tmp_path."""
    monkeypatch.setenv("DEALER_INVENTORY_PATH", str(tmp_path / "active_inventory.json"))
    monkeypatch.setenv("DEALER_EXPORT_PATH", str(tmp_path / "export.json"))
    set_registry(InventoryRegistry(tmp_path / "active_inventory.json"))
    yield
    set_registry(None)


@pytest.fixture()
def vehicle_factory():
    """Build VehicleRecord instances with sensible defaults."""
    return make_vehicle
