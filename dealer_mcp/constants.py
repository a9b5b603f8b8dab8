"""Shared constants used across the codec, feed normalizer, and tools.

Single source of truth for wire keys, conversion rates, and date formats.
"""

from __future__ import annotations

INVENTORY_KEY = "car_inventory"

# Fixed rate; the feed format only ever tags prices as pounds or dollars.
POUNDS_TO_DOLLARS = 1.25

PRICE_MATCH_TOLERANCE = 0.01

# Date format used by the dealership desk when entering rentals.
RENTAL_DATE_FORMAT = "%m/%d/%Y"

GENERATED_ID_PREFIX = "GEN"
