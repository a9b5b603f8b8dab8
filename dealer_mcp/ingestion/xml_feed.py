"""Dealer XML feed normalization.

Feeds list dealers, each holding vehicles::

    <Dealers>
      <Dealer id="485">
        <Name>Wacky Bob's Automall</Name>
        <Vehicle type="suv" id="848432">
          <Price unit="pounds">17000</Price>
          <Make>Land Rover</Make>
          <Model>Range Rover</Model>
        </Vehicle>
      </Dealer>
    </Dealers>

Feeds in the wild also use ``<n>`` for the dealer name and ``<Manufacturer>``
for the make. Anything that cannot be read is defaulted or skipped; a bad
vehicle never aborts the rest of the feed.
"""

from __future__ import annotations

import logging
import time
import uuid
import xml.etree.ElementTree as ET
from pathlib import Path

from dealer_mcp.constants import GENERATED_ID_PREFIX
from dealer_mcp.data.vehicle import VehicleRecord, utc_now
from dealer_mcp.normalization import convert_price_to_dollars, normalize_variant, parse_price

logger = logging.getLogger(__name__)

DEALER_TAG = "Dealer"
VEHICLE_TAG = "Vehicle"
DEALER_NAME_TAGS = ("Name", "n")
MANUFACTURER_TAGS = ("Make", "Manufacturer")
MODEL_TAG = "Model"
PRICE_TAG = "Price"


def generate_vehicle_id() -> str:
    """Time-based id with a random suffix so same-millisecond ids never collide."""
    return f"{GENERATED_ID_PREFIX}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def _first_text(parent: ET.Element, tags: tuple[str, ...]) -> str:
    for tag in tags:
        child = parent.find(f".//{tag}")
        if child is not None:
            text = "".join(child.itertext()).strip()
            if text:
                return text
    return ""


def _read_price(vehicle_el: ET.Element) -> float:
    price_el = vehicle_el.find(f".//{PRICE_TAG}")
    if price_el is None:
        return 0.0
    raw = "".join(price_el.itertext())
    amount = parse_price(raw)
    if amount is None:
        logger.warning("Invalid price %r; defaulting to 0.0", raw.strip())
        return 0.0
    return convert_price_to_dollars(amount, price_el.get("unit"))


def vehicle_from_element(
    vehicle_el: ET.Element, *, dealer_id: str, dealer_name: str
) -> VehicleRecord:
    vehicle_id = (vehicle_el.get("id") or "").strip() or generate_vehicle_id()
    return VehicleRecord(
        id=vehicle_id,
        variant=normalize_variant(vehicle_el.get("type")),
        manufacturer=_first_text(vehicle_el, MANUFACTURER_TAGS),
        model=_first_text(vehicle_el, (MODEL_TAG,)),
        price=_read_price(vehicle_el),
        dealer_id=dealer_id,
        acquisition_date=utc_now(),
        metadata={"dealer_name": dealer_name},
    )


def normalize_feed_tree(root: ET.Element) -> list[VehicleRecord]:
    vehicles: list[VehicleRecord] = []
    dealers = [root] if root.tag == DEALER_TAG else list(root.iter(DEALER_TAG))
    for dealer_el in dealers:
        dealer_id = (dealer_el.get("id") or "").strip()
        if not dealer_id:
            logger.warning("Skipping <%s> without an id attribute", DEALER_TAG)
            continue
        dealer_name = _first_text(dealer_el, DEALER_NAME_TAGS)

        for index, vehicle_el in enumerate(dealer_el.iter(VEHICLE_TAG)):
            try:
                vehicles.append(
                    vehicle_from_element(vehicle_el, dealer_id=dealer_id, dealer_name=dealer_name)
                )
            except (TypeError, ValueError) as exc:
                logger.warning(
                    "Skipping vehicle %d of dealer %s: %s", index, dealer_id, exc
                )
    return vehicles


def normalize_dealer_feed(document: str | bytes) -> list[VehicleRecord]:
    """Parse a dealer feed document into vehicle records."""
    try:
        root = ET.fromstring(document)
    except ET.ParseError as exc:
        logger.error("Dealer feed is not well-formed XML: %s", exc)
        return []
    return normalize_feed_tree(root)


def read_dealer_feed(path: str | Path) -> list[VehicleRecord]:
    feed_path = Path(path)
    try:
        document = feed_path.read_bytes()
    except OSError:
        logger.exception("Failed to read dealer feed %s", feed_path)
        return []
    return normalize_dealer_feed(document)
