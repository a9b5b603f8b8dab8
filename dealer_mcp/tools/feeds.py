"""Feed import and snapshot export tool implementations."""

from __future__ import annotations

from pathlib import Path

from dealer_mcp.clients.feed import DealerFeedClient, FeedClientError
from dealer_mcp.config import load_config
from dealer_mcp.data.inventory import get_registry


def _import_summary(accepted: int, source: str) -> str:
    if accepted == 0:
        return f"No vehicles imported from {source}."
    return f"Imported {accepted} vehicle(s) from {source}."


def import_feed_impl(document: str) -> str:
    """Import an XML dealer feed passed inline."""
    if not document.strip():
        return "Error: feed document is empty."
    return _import_summary(get_registry().import_feed(document), "feed")


def import_feed_file_impl(path: str) -> str:
    if not path.strip():
        return "Error: path is required."
    feed_path = Path(path.strip())
    if not feed_path.is_file():
        return f"Error: feed file {feed_path} does not exist."
    return _import_summary(get_registry().import_feed_file(feed_path), str(feed_path))


async def import_feed_from_url_impl(url: str) -> str:
    """Download an XML dealer feed and import it."""
    if not url.strip():
        return "Error: url is required."
    config = load_config()
    try:
        async with DealerFeedClient(timeout_seconds=config.feed_timeout_seconds) as client:
            document = await client.fetch_feed(url)
    except FeedClientError as exc:
        return f"Error: {exc} (code: {exc.code})"
    return _import_summary(get_registry().import_feed(document), url.strip())


def export_inventory_impl(destination: str = "") -> str:
    """Copy the current snapshot file to ``destination`` (or the configured export path)."""
    registry = get_registry()
    config = load_config()
    source = registry.inventory_path or config.inventory_path
    target = Path(destination.strip()) if destination.strip() else config.export_path
    outcome = registry.export_snapshot(source, target)
    if not outcome:
        return f"Error: {outcome.message}"
    return outcome.message


def clear_export_file_impl(destination: str = "") -> str:
    config = load_config()
    target = Path(destination.strip()) if destination.strip() else config.export_path
    outcome = get_registry().clear(target)
    if not outcome:
        return f"Error: {outcome.message}"
    return outcome.message
