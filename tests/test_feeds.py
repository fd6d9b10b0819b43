import dataclasses
import types

import pytest
import requests

from rss_terminal import feeds
from rss_terminal.models import Feed, FeedItem, ListEntry


class FakeResponse:
    def __init__(self, chunks, error=None):
        self._chunks = list(chunks)
        self._error = error

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def raise_for_status(self):
        if self._error:
            raise self._error

    def iter_content(self, chunk_size=1):
        yield from self._chunks


def test_parse_feed_reads_channel_and_items(sample_rss):
    feed = feeds.parse_feed(sample_rss)

    assert feed.title == "Playbook"
    assert feed.link == "https://example.com/"
    assert feed.description == "Morning news"
    assert feed.last_build_date == "Mon, 01 Jan 2024 06:00:00 GMT"
    assert [item.title for item in feed.items] == ["A", "B"]
    assert [item.link for item in feed.items] == ["http://a", "http://b"]

    first = feed.items[0]
    assert first.description == "First story"
    assert first.guid == "id-a"
    assert first.published == "Mon, 01 Jan 2024 05:00:00 GMT"
    assert first.creator == "Alice"


def test_parse_feed_missing_fields_decode_to_empty_text(sample_rss):
    second = feeds.parse_feed(sample_rss).items[1]

    assert second.guid == ""
    assert second.published == ""
    assert second.creator == ""


def test_parse_feed_keeps_descriptions_verbatim():
    feed = feeds.parse_feed(
        b"""<rss version="2.0"><channel><title>Raw</title>
        <item>
          <title>Scripted</title>
          <link>/stories/1</link>
          <description><![CDATA[<p>Hi</p><script>track()</script>]]></description>
        </item>
        </channel></rss>"""
    )

    (item,) = feed.items
    assert item.description == "<p>Hi</p><script>track()</script>"
    assert item.link == "/stories/1"


def test_parse_feed_reads_creator_only_from_dublin_core():
    feed = feeds.parse_feed(
        b"""<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">
        <channel><title>Authors</title>
        <item><title>Plain</title><author>editor@example.com (Ed)</author></item>
        <item><title>Dublin</title><dc:creator>Bea</dc:creator></item>
        </channel></rss>"""
    )

    assert [item.creator for item in feed.items] == ["", "Bea"]


def test_parse_feed_is_deterministic(sample_rss):
    assert feeds.parse_feed(sample_rss) == feeds.parse_feed(sample_rss)


def test_parse_feed_without_items():
    feed = feeds.parse_feed(
        b'<rss version="2.0"><channel><title>Empty</title></channel></rss>'
    )

    assert feed.title == "Empty"
    assert feed.items == ()


def test_parse_feed_rejects_malformed_xml():
    with pytest.raises(feeds.ParseError):
        feeds.parse_feed(b'<rss version="2.0"><channel><title>Broken</title>')


def test_parse_feed_rejects_documents_without_channel():
    with pytest.raises(feeds.ParseError):
        feeds.parse_feed(b"<html><body><p>Not a feed</p></body></html>")


def test_fetch_feed_bytes_returns_body(monkeypatch):
    captured = {}

    def fake_get(url, timeout=None, stream=False):
        captured["url"] = url
        captured["timeout"] = timeout
        return FakeResponse([b"<rss>", b"</rss>"])

    monkeypatch.setattr(feeds.requests, "get", fake_get)

    assert feeds.fetch_feed_bytes("https://feed.example.com") == b"<rss></rss>"
    assert captured == {"url": "https://feed.example.com", "timeout": 2.0}


def test_fetch_feed_bytes_wraps_timeouts(monkeypatch):
    def fake_get(url, timeout=None, stream=False):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(feeds.requests, "get", fake_get)

    with pytest.raises(feeds.FetchError) as excinfo:
        feeds.fetch_feed_bytes("https://slow.example.com")

    assert isinstance(excinfo.value.__cause__, requests.Timeout)


def test_fetch_feed_bytes_enforces_total_deadline(monkeypatch):
    ticks = iter([0.0, 0.5, 2.5])
    monkeypatch.setattr(
        feeds, "time", types.SimpleNamespace(monotonic=lambda: next(ticks))
    )
    monkeypatch.setattr(
        feeds.requests,
        "get",
        lambda url, timeout=None, stream=False: FakeResponse([b"<rss>", b"</rss>"]),
    )

    with pytest.raises(feeds.FetchError):
        feeds.fetch_feed_bytes("https://trickle.example.com")


def test_fetch_feed_bytes_fails_when_body_ends_after_deadline(monkeypatch):
    ticks = iter([0.0, 0.5, 0.6, 2.5])
    monkeypatch.setattr(
        feeds, "time", types.SimpleNamespace(monotonic=lambda: next(ticks))
    )
    monkeypatch.setattr(
        feeds.requests,
        "get",
        lambda url, timeout=None, stream=False: FakeResponse([b"<rss>", b"</rss>"]),
    )

    with pytest.raises(feeds.FetchError, match="Timed out"):
        feeds.fetch_feed_bytes("https://trickle.example.com")


def test_fetch_feed_bytes_treats_http_errors_as_fetch_failures(monkeypatch):
    monkeypatch.setattr(
        feeds.requests,
        "get",
        lambda url, timeout=None, stream=False: FakeResponse(
            [], error=requests.HTTPError("503 Server Error")
        ),
    )

    with pytest.raises(feeds.FetchError):
        feeds.fetch_feed_bytes("https://down.example.com")


def test_load_feed_or_empty_degrades_on_failure(monkeypatch):
    def failing_fetch(url, timeout=feeds.DEFAULT_TIMEOUT):
        raise feeds.FetchError("connection refused")

    monkeypatch.setattr(feeds, "fetch_feed_bytes", failing_fetch)

    feed = feeds.load_feed_or_empty("https://down.example.com")

    assert feed == Feed()
    assert feed.title == ""
    assert feed.items == ()


def test_load_feed_or_empty_degrades_on_parse_error(monkeypatch):
    monkeypatch.setattr(
        feeds, "fetch_feed_bytes", lambda url, timeout=feeds.DEFAULT_TIMEOUT: b"<rss"
    )

    assert feeds.load_feed_or_empty("https://broken.example.com") == Feed()


def test_to_list_entries_preserves_order_and_fields(sample_rss):
    items = feeds.parse_feed(sample_rss).items

    entries = feeds.to_list_entries(items)

    assert entries == [
        ListEntry(title="A", description="First story", link="http://a"),
        ListEntry(title="B", description="Second story", link="http://b"),
    ]
    assert [field.name for field in dataclasses.fields(ListEntry)] == [
        "title",
        "description",
        "link",
    ]


def test_to_list_entries_handles_empty_input():
    assert feeds.to_list_entries(()) == []


def test_to_list_entries_copies_text_verbatim():
    item = FeedItem(
        title="  Spaced  ", description="<p>Raw <b>html</b></p>", link="http://x"
    )

    (entry,) = feeds.to_list_entries([item])

    assert entry.title == "  Spaced  "
    assert entry.description == "<p>Raw <b>html</b></p>"


def test_strip_html_flattens_markup():
    raw = "  <p>Summary <strong>text</strong> with a <a href='#'>link</a>.</p> "

    assert feeds.strip_html(raw) == "Summary text with a link."
    assert feeds.strip_html("") == ""
