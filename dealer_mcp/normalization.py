"""Shared canonical normalization functions for vehicle data.

Single source of truth, imported by the JSON codec (snapshot reads), the XML
feed normalizer, and the tool layer (manual entry).
"""

from __future__ import annotations

import math
from typing import Any

from dealer_mcp.constants import POUNDS_TO_DOLLARS
from dealer_mcp.data.vehicle import Variant

VARIANT_ALIASES: dict[str, Variant] = {
    "suv": Variant.SUV,
    "crossover": Variant.SUV,
    "sedan": Variant.SEDAN,
    "saloon": Variant.SEDAN,
    "pickup": Variant.PICKUP,
    "pickup truck": Variant.PICKUP,
    "truck": Variant.PICKUP,
    "sports car": Variant.SPORTS_CAR,
    "sportscar": Variant.SPORTS_CAR,
    "sports_car": Variant.SPORTS_CAR,
    "sports-car": Variant.SPORTS_CAR,
}

# Substring → variant, checked in order against the lowercased model name.
# Existing snapshots carry no type field, so changing an entry here reclassifies
# stored vehicles on the next read.
MODEL_VARIANT_HINTS: tuple[tuple[str, Variant], ...] = (
    ("cr-v", Variant.SUV),
    ("explorer", Variant.SUV),
    ("model 3", Variant.SEDAN),
    ("silverado", Variant.PICKUP),
    ("supra", Variant.SPORTS_CAR),
)

DEFAULT_VARIANT = Variant.SUV


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def clean_numeric_string(raw: str) -> str:
    """Keep only digits, ``'.'``, and ``'-'``."""
    return "".join(c for c in raw if c.isdigit() or c in {".", "-"})


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def parse_price(value: Any) -> float | None:
    """Best-effort price parsing.  Returns ``None`` for unparseable or non-finite input.

    Plain numerals (including exponents like ``1e5``) parse directly; formatted
    prices such as ``$17,500`` fall back to stripping non-numeric characters.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _finite_or_none(float(value))
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            return _finite_or_none(float(stripped))
        except ValueError:
            pass
        cleaned = clean_numeric_string(stripped)
        if not cleaned:
            return None
        try:
            return _finite_or_none(float(cleaned))
        except ValueError:
            return None
    return None


def lookup_variant(raw: str | None) -> Variant | None:
    """Map a raw type label to a Variant.  Returns ``None`` when unrecognized."""
    if not raw:
        return None
    return VARIANT_ALIASES.get(raw.strip().lower())


def normalize_variant(raw: str | None) -> Variant:
    """Map a raw type label to a Variant, defaulting to SUV."""
    return lookup_variant(raw) or DEFAULT_VARIANT


def infer_variant_from_model(model: str | None) -> Variant:
    """Guess the body style from a free-text model name."""
    if not model:
        return DEFAULT_VARIANT
    lowered = model.lower()
    for needle, variant in MODEL_VARIANT_HINTS:
        if needle in lowered:
            return variant
    return DEFAULT_VARIANT


def convert_price_to_dollars(amount: float, unit: str | None) -> float:
    """Convert a feed price to dollars.  Only ``pounds`` is converted."""
    if unit is not None and unit.strip().lower() == "pounds":
        return amount * POUNDS_TO_DOLLARS
    return amount
