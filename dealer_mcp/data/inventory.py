"""Registry facade for the server process.

Tool modules call ``get_registry()`` instead of holding their own reference,
so tests can swap in an isolated registry with ``set_registry()``. The
registry itself carries no global state; several can coexist.
"""

from __future__ import annotations

from dealer_mcp.config import load_config
from dealer_mcp.data.registry import InventoryRegistry

_registry: InventoryRegistry | None = None


def get_registry() -> InventoryRegistry:
    """Return the active registry, loading the configured snapshot on first use."""
    global _registry  # noqa: PLW0603
    if _registry is None:
        config = load_config()
        registry = InventoryRegistry(config.inventory_path)
        registry.load()
        _registry = registry
    return _registry


def set_registry(registry: InventoryRegistry | None) -> None:
    """Inject a registry instance for testing."""
    global _registry  # noqa: PLW0603
    _registry = registry
