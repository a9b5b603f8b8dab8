"""Shared external API clients."""

from dealer_mcp.clients.feed import DealerFeedClient, FeedClientError

__all__ = [
    "DealerFeedClient",
    "FeedClientError",
]
