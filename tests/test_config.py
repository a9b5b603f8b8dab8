"""Configuration loading tests."""

from __future__ import annotations

import os
from pathlib import Path

from dealer_mcp.config import (
    DEFAULT_EXPORT_PATH,
    DEFAULT_FEED_TIMEOUT,
    DEFAULT_INVENTORY_PATH,
    load_config,
    load_env_file,
)
from dealer_mcp.data import inventory
from dealer_mcp.data.registry import InventoryRegistry


class TestLoadConfig:
    def test_defaults(self):
        config = load_config({})
        assert config.inventory_path == DEFAULT_INVENTORY_PATH
        assert config.export_path == DEFAULT_EXPORT_PATH
        assert config.log_level == "INFO"
        assert config.feed_timeout_seconds == DEFAULT_FEED_TIMEOUT

    def test_overrides(self, tmp_path):
        config = load_config({
            "DEALER_INVENTORY_PATH": str(tmp_path / "inv.json"),
            "DEALER_EXPORT_PATH": str(tmp_path / "exp.json"),
            "DEALER_LOG_LEVEL": "debug",
            "DEALER_FEED_TIMEOUT": "2.5",
        })
        assert config.inventory_path == tmp_path / "inv.json"
        assert config.export_path == tmp_path / "exp.json"
        assert config.log_level == "DEBUG"
        assert config.feed_timeout_seconds == 2.5

    def test_bad_timeout_falls_back(self):
        assert load_config({"DEALER_FEED_TIMEOUT": "soon"}).feed_timeout_seconds == DEFAULT_FEED_TIMEOUT
        assert load_config({"DEALER_FEED_TIMEOUT": "-1"}).feed_timeout_seconds == DEFAULT_FEED_TIMEOUT

    def test_reads_process_environment(self, tmp_path):
        # The autouse fixture points DEALER_INVENTORY_PATH into tmp_path.
        assert load_config().inventory_path == tmp_path / "active_inventory.json"


class TestLoadEnvFile:
    def test_sets_missing_keys_only(self, tmp_path: Path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\n"
            "DEALER_TEST_NEW=from-file\n"
            "DEALER_TEST_EXISTING=from-file\n"
            "not a pair\n"
        )
        monkeypatch.delenv("DEALER_TEST_NEW", raising=False)
        monkeypatch.setenv("DEALER_TEST_EXISTING", "from-env")

        load_env_file(env_file)

        assert os.environ["DEALER_TEST_NEW"] == "from-file"
        assert os.environ["DEALER_TEST_EXISTING"] == "from-env"
        monkeypatch.delenv("DEALER_TEST_NEW")

    def test_missing_file_is_ignored(self, tmp_path: Path):
        load_env_file(tmp_path / "absent.env")


class TestRegistryFacade:
    def test_get_registry_loads_configured_snapshot(self, tmp_path, monkeypatch, vehicle_factory):
        path = tmp_path / "seeded.json"
        seed = InventoryRegistry(path)
        seed.add_vehicle(vehicle_factory("A"))

        monkeypatch.setenv("DEALER_INVENTORY_PATH", str(path))
        inventory.set_registry(None)

        registry = inventory.get_registry()
        assert registry.inventory_path == path
        assert registry.find_vehicle("485", "A") is not None
        assert inventory.get_registry() is registry

    def test_set_registry_injects_instance(self):
        custom = InventoryRegistry()
        inventory.set_registry(custom)
        assert inventory.get_registry() is custom
