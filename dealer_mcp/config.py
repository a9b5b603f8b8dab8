"""Runtime configuration for the dealer inventory server.

Values come from the environment, with a project-root ``.env`` file filling in
anything not already set (no extra dependency).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = PROJECT_ROOT / ".env"

DEFAULT_INVENTORY_PATH = PROJECT_ROOT / "data" / "inventory.json"
DEFAULT_EXPORT_PATH = PROJECT_ROOT / "data" / "export.json"
DEFAULT_FEED_TIMEOUT = 15.0


@dataclass(frozen=True)
class InventoryConfig:
    inventory_path: Path = DEFAULT_INVENTORY_PATH
    export_path: Path = DEFAULT_EXPORT_PATH
    log_level: str = "INFO"
    feed_timeout_seconds: float = DEFAULT_FEED_TIMEOUT


def load_env_file(path: Path = _ENV_FILE) -> None:
    """Copy ``KEY=VALUE`` lines into ``os.environ`` without overriding existing keys."""
    if not path.is_file():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            k, _, v = line.partition("=")
            os.environ.setdefault(k.strip(), v.strip())


def _parse_timeout(raw: str | None) -> float:
    if not raw:
        return DEFAULT_FEED_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_FEED_TIMEOUT
    return value if value > 0 else DEFAULT_FEED_TIMEOUT


def load_config(environ: Mapping[str, str] | None = None) -> InventoryConfig:
    """Build an InventoryConfig from ``environ`` (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ
    inventory = env.get("DEALER_INVENTORY_PATH")
    export = env.get("DEALER_EXPORT_PATH")
    return InventoryConfig(
        inventory_path=Path(inventory) if inventory else DEFAULT_INVENTORY_PATH,
        export_path=Path(export) if export else DEFAULT_EXPORT_PATH,
        log_level=(env.get("DEALER_LOG_LEVEL") or "INFO").upper(),
        feed_timeout_seconds=_parse_timeout(env.get("DEALER_FEED_TIMEOUT")),
    )
