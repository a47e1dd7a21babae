"""RSS and Atom feed parsing into Feed/Episode records.

WHY: The reader starts from a podcast RSS URL. The raw XML varies a lot
between publishers (audio may be an enclosure, a media:content element,
or only an <audio src> buried in the show notes) and the UI needs one
uniform episode list.

HOW: xml.etree.ElementTree parses the document; channel fields are read
with namespace-aware lookups. Each <item> becomes an Episode with the
first audio URL found in priority order. Atom documents (root <feed>)
are read the same way from <entry> elements.

RULES:
- HTML pages and malformed XML raise FeedParseError
- Feed title defaults to "Untitled Feed", description to ""
- At most MAX_FEED_ITEMS episodes, in document order
- Episode id: guid, else link, else "item-{index}"
- Audio URL priority: enclosure (audio/*), media:content (audio/*),
  first https .mp3 src in the content HTML
- date: pubDate as YYYY-MM-DD, or "" when absent/unparseable
- Atom: audio comes from <link rel="enclosure"> (audio/*), then the
  content HTML; date from published, else updated
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import asdict, dataclass, field
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any

from podcast_reader.config import MAX_FEED_ITEMS

logger = logging.getLogger(__name__)

NAMESPACES = {
    "content": "http://purl.org/rss/1.0/modules/content/",
    "media": "http://search.yahoo.com/mrss/",
    "itunes": "http://www.itunes.com/dtds/podcast-1.0.dtd",
    "atom": "http://www.w3.org/2005/Atom",
}

ATOM_FEED_TAG = "{http://www.w3.org/2005/Atom}feed"

_MP3_SRC_RE = re.compile(r'src="(https://[^"]*\.mp3)"')


class FeedParseError(ValueError):
    """Raised when a document cannot be read as an RSS feed."""


@dataclass
class Episode:
    id: str
    title: str
    description: str = ""
    content: str = ""
    date: str = ""
    link: str = ""
    audio_url: str | None = None


@dataclass
class Feed:
    title: str
    description: str
    items: list[Episode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _text(elem: ET.Element, path: str) -> str:
    found = elem.find(path, NAMESPACES)
    if found is None or found.text is None:
        return ""
    return found.text.strip()


def _audio_attr(elem: ET.Element | None) -> str | None:
    if elem is None:
        return None
    url = elem.get("url")
    media_type = elem.get("type") or ""
    if url and media_type.startswith("audio/"):
        return url
    return None


def _format_date(raw: str) -> str:
    if not raw:
        return ""
    try:
        return parsedate_to_datetime(raw).date().isoformat()
    except (TypeError, ValueError, IndexError):
        logger.debug("Unparseable pubDate: %r", raw)
        return ""


def _audio_in_html(content: str) -> str | None:
    match = _MP3_SRC_RE.search(content) if content else None
    return match.group(1) if match else None


def _format_atom_date(raw: str) -> str:
    if not raw:
        return ""
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        logger.debug("Unparseable Atom date: %r", raw)
        return ""


def _parse_item(item: ET.Element, index: int) -> Episode:
    description = _text(item, "description")
    content = _text(item, "content:encoded") or description

    audio_url = _audio_attr(item.find("enclosure"))
    if audio_url is None:
        audio_url = _audio_attr(item.find("media:content", NAMESPACES))
    if audio_url is None:
        audio_url = _audio_in_html(content)

    link = _text(item, "link")
    return Episode(
        id=_text(item, "guid") or link or "item-{}".format(index),
        title=_text(item, "title") or "Untitled Item",
        description=description,
        content=content,
        date=_format_date(_text(item, "pubDate")),
        link=link,
        audio_url=audio_url,
    )


def _parse_entry(entry: ET.Element, index: int) -> Episode:
    description = _text(entry, "atom:summary")
    content = _text(entry, "atom:content") or description

    audio_url = None
    link = ""
    for link_elem in entry.findall("atom:link", NAMESPACES):
        rel = link_elem.get("rel", "alternate")
        href = link_elem.get("href") or ""
        if rel == "enclosure" and audio_url is None:
            media_type = link_elem.get("type") or ""
            if href and media_type.startswith("audio/"):
                audio_url = href
        elif rel == "alternate" and not link:
            link = href
    if audio_url is None:
        audio_url = _audio_in_html(content)

    return Episode(
        id=_text(entry, "atom:id") or link or "item-{}".format(index),
        title=_text(entry, "atom:title") or "Untitled Item",
        description=description,
        content=content,
        date=_format_atom_date(_text(entry, "atom:published") or _text(entry, "atom:updated")),
        link=link,
        audio_url=audio_url,
    )


def _parse_atom(root: ET.Element, max_items: int) -> Feed:
    entries = root.findall("atom:entry", NAMESPACES)[:max_items]
    return Feed(
        title=_text(root, "atom:title") or "Untitled Feed",
        description=_text(root, "atom:subtitle"),
        items=[_parse_entry(entry, index) for index, entry in enumerate(entries)],
    )


def parse_feed(xml_text: str, max_items: int = MAX_FEED_ITEMS) -> Feed:
    """Parse an RSS or Atom document into a Feed.

    Raises:
        FeedParseError: For HTML documents, malformed XML, or a non-Atom
            document with no <channel>.
    """
    stripped = xml_text.strip() if xml_text else ""
    if not stripped or stripped[:9].upper() == "<!DOCTYPE" or stripped[:5].lower() == "<html":
        raise FeedParseError("Invalid feed format - received HTML instead of RSS")

    try:
        root = ET.fromstring(stripped)
    except ET.ParseError as exc:
        raise FeedParseError("Failed to parse feed: {}".format(exc)) from exc

    if root.tag == ATOM_FEED_TAG:
        feed = _parse_atom(root, max_items)
    else:
        channel = root if root.tag == "channel" else root.find("channel")
        if channel is None:
            raise FeedParseError("No channel found in feed")

        items = channel.findall("item")[:max_items]
        feed = Feed(
            title=_text(channel, "title") or "Untitled Feed",
            description=_text(channel, "description"),
            items=[_parse_item(item, index) for index, item in enumerate(items)],
        )
    logger.info(
        "Parsed feed %r: %d episodes, %d with audio",
        feed.title, len(feed.items), sum(1 for ep in feed.items if ep.audio_url),
    )
    return feed
