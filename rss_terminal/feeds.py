"""Feed fetching, parsing and list adaptation helpers."""

from __future__ import annotations

import io
import logging
import re
import time
from typing import Iterable, List
from xml.etree import ElementTree

import feedparser
import requests
from bs4 import BeautifulSoup

from .models import Feed, FeedItem, ListEntry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 2.0

_DC_CREATOR = "{http://purl.org/dc/elements/1.1/}creator"
_ITEM_TAGS = (
    "item",
    "{http://purl.org/rss/1.0/}item",
    "{http://my.netscape.com/rdf/simple/0.9/}item",
)

# feedparser reports these as bozo even though the document itself parsed.
_RECOVERABLE_BOZO = (
    feedparser.CharacterEncodingOverride,
    feedparser.NonXMLContentType,
)


class FeedError(RuntimeError):
    """Base class for feed retrieval failures."""


class FetchError(FeedError):
    """The feed could not be downloaded."""


class ParseError(FeedError):
    """The downloaded document is not a well-formed RSS channel."""


def fetch_feed_bytes(url: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """Download the raw feed document, failing once ``timeout`` seconds elapse."""
    logger.info("Fetching feed %s", url)
    deadline = time.monotonic() + timeout
    try:
        with requests.get(url, timeout=timeout, stream=True) as response:
            response.raise_for_status()
            chunks: List[bytes] = []
            for chunk in response.iter_content(chunk_size=8192):
                _check_deadline(deadline, timeout, url)
                chunks.append(chunk)
            _check_deadline(deadline, timeout, url)
    except requests.RequestException as exc:
        raise FetchError(f"Failed to fetch feed {url}: {exc}") from exc

    content = b"".join(chunks)
    logger.debug("Downloaded %d bytes from %s", len(content), url)
    return content


def _check_deadline(deadline: float, timeout: float, url: str) -> None:
    if time.monotonic() > deadline:
        raise FetchError(f"Timed out after {timeout:g}s while reading {url}")


def parse_feed(data: bytes) -> Feed:
    """Parse an RSS document into a Feed."""
    parsed = feedparser.parse(
        io.BytesIO(data), sanitize_html=False, resolve_relative_uris=False
    )

    if parsed.get("bozo"):
        exc = parsed.get("bozo_exception")
        if not isinstance(exc, _RECOVERABLE_BOZO):
            raise ParseError(f"Feed is not well-formed XML: {exc}") from exc

    version = parsed.get("version") or ""
    if not version.startswith("rss"):
        raise ParseError("Document does not contain an RSS channel")

    channel = parsed.feed
    creators = _dc_creators(data)
    items = tuple(
        _to_feed_item(entry, creators[index] if index < len(creators) else "")
        for index, entry in enumerate(parsed.entries)
    )
    feed = Feed(
        title=channel.get("title", ""),
        link=channel.get("link", ""),
        description=channel.get("subtitle", ""),
        last_build_date=channel.get("updated", ""),
        items=items,
    )
    logger.info("Parsed %d items from feed '%s'", len(items), feed.title)
    return feed


def _dc_creators(data: bytes) -> List[str]:
    """Return each item's dc:creator text in document order."""
    try:
        root = ElementTree.fromstring(data)
    except ElementTree.ParseError as exc:
        logger.debug("Skipping dc:creator lookup: %s", exc)
        return []
    return [
        (item.findtext(_DC_CREATOR) or "").strip()
        for item in root.iter()
        if item.tag in _ITEM_TAGS
    ]


def _to_feed_item(entry, creator: str = "") -> FeedItem:
    return FeedItem(
        title=entry.get("title", ""),
        link=entry.get("link", ""),
        description=entry.get("summary", ""),
        guid=entry.get("id", ""),
        published=entry.get("published", ""),
        creator=creator,
    )


def load_feed(url: str, timeout: float = DEFAULT_TIMEOUT) -> Feed:
    """Fetch and parse the feed at ``url``."""
    return parse_feed(fetch_feed_bytes(url, timeout=timeout))


def load_feed_or_empty(url: str, timeout: float = DEFAULT_TIMEOUT) -> Feed:
    """Like load_feed, but degrade to an empty Feed on failure."""
    try:
        return load_feed(url, timeout=timeout)
    except FeedError as exc:
        logger.error("Failed to fetch feed %s: %s", url, exc)
        return Feed()


def to_list_entries(items: Iterable[FeedItem]) -> List[ListEntry]:
    """Project feed items onto the list widget's entry shape, keeping order."""
    return [
        ListEntry(title=item.title, description=item.description, link=item.link)
        for item in items
    ]


def strip_html(raw_value: str) -> str:
    """Return text content extracted from HTML fragments."""
    if not raw_value:
        return ""
    soup = BeautifulSoup(raw_value, "html.parser")
    text = soup.get_text(separator=" ", strip=True)
    text = re.sub(r"\s+([.,;:!?])", r"\1", text)
    text = re.sub(r"\s{2,}", " ", text)
    return text.strip()
