"""Async client for dealer XML feeds published over HTTP."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS = 15.0
_MAX_FEED_BYTES = 10 * 1024 * 1024


class FeedClientError(RuntimeError):
    """Raised for feed request/config errors with structured metadata."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        status: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status = status
        self.details = details or {}


def _validate_url(url: str) -> str:
    normalized = url.strip()
    if not normalized.lower().startswith(("http://", "https://")):
        raise FeedClientError(
            f"Feed URL must start with http:// or https://, got '{url}'.",
            code="INVALID_URL",
        )
    return normalized


class DealerFeedClient:
    """Fetches raw feed documents; parsing is left to the feed normalizer."""

    def __init__(self, *, timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS) -> None:
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> DealerFeedClient:
        self.session = aiohttp.ClientSession(
            headers={"Accept": "application/xml, text/xml"},
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self.session:
            await self.session.close()

    async def fetch_feed(self, url: str) -> bytes:
        """Download a feed document and return its raw bytes."""
        if not self.session:
            raise RuntimeError("Client not entered as context manager")
        normalized = _validate_url(url)

        try:
            async with self.session.get(normalized, timeout=self.timeout) as resp:
                if resp.status >= 400:
                    raise FeedClientError(
                        f"Feed request failed with HTTP {resp.status}.",
                        code="FEED_HTTP_ERROR",
                        status=resp.status,
                        details={"url": normalized},
                    )
                body = await resp.read()
        except FeedClientError:
            raise
        except TimeoutError as exc:
            raise FeedClientError(
                "Feed request timed out.",
                code="TIMEOUT",
                details={"url": normalized},
            ) from exc
        except aiohttp.ClientError as exc:
            logger.error("Feed client error (%s): %s", normalized, exc)
            raise FeedClientError(
                "Feed request failed due to a network/client error.",
                code="NETWORK_ERROR",
                details={"url": normalized, "error": str(exc)},
            ) from exc

        if len(body) > _MAX_FEED_BYTES:
            raise FeedClientError(
                f"Feed is larger than {_MAX_FEED_BYTES} bytes.",
                code="FEED_TOO_LARGE",
                details={"url": normalized, "size": len(body)},
            )
        logger.info("Fetched %d byte(s) from %s", len(body), normalized)
        return body
