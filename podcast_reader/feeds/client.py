"""Async feed fetcher.

WHY: Feeds are fetched on demand when the user enters a URL. The fetch
must not hang the server on a slow publisher, and bare hostnames that
are not http(s) URLs are still worth a try through a CORS/raw proxy.

HOW: A single httpx.AsyncClient GET with a short timeout, followed by
parse_feed(). An injected client is used as-is (tests pass one built on
httpx.MockTransport).

RULES:
- Timeout: FEED_TIMEOUT_S (10s by default)
- URLs not starting with "http" go through FEED_PROXY_URL
- Non-2xx responses raise FeedFetchError("HTTP error! status: N")
- A non-XML/RSS content type is logged, not rejected
- No retry
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from podcast_reader.config import FEED_PROXY_URL, FEED_TIMEOUT_S
from podcast_reader.feeds.parser import Feed, parse_feed

logger = logging.getLogger(__name__)


class FeedFetchError(Exception):
    """Raised when the feed document cannot be downloaded."""


def resolve_feed_url(url: str) -> str:
    url = url.strip()
    if url.startswith("http"):
        return url
    return FEED_PROXY_URL + quote(url, safe="")


async def fetch_feed_text(url: str, client: httpx.AsyncClient | None = None) -> str:
    """Download a feed document and return its text."""
    feed_url = resolve_feed_url(url)
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=FEED_TIMEOUT_S, follow_redirects=True)
    try:
        try:
            resp = await client.get(feed_url)
        except httpx.HTTPError as exc:
            raise FeedFetchError("Error fetching feed: {}".format(exc)) from exc
    finally:
        if owns_client:
            await client.aclose()

    if resp.status_code < 200 or resp.status_code >= 300:
        raise FeedFetchError("HTTP error! status: {}".format(resp.status_code))

    content_type = resp.headers.get("content-type", "")
    if "xml" not in content_type and "rss" not in content_type:
        logger.warning("Response is not RSS/XML: %s", content_type or "<none>")

    return resp.text


async def fetch_feed(url: str, client: httpx.AsyncClient | None = None) -> Feed:
    """Fetch and parse a podcast feed."""
    logger.info("Fetching feed from URL: %s", url)
    text = await fetch_feed_text(url, client=client)
    return parse_feed(text)
