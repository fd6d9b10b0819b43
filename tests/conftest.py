import logging

import pytest

from rss_terminal.models import Feed, FeedItem, ListEntry

SAMPLE_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Playbook</title>
    <link>https://example.com/</link>
    <description>Morning news</description>
    <lastBuildDate>Mon, 01 Jan 2024 06:00:00 GMT</lastBuildDate>
    <generator>ignored</generator>
    <item>
      <title>A</title>
      <link>http://a</link>
      <description>First story</description>
      <guid isPermaLink="false">id-a</guid>
      <pubDate>Mon, 01 Jan 2024 05:00:00 GMT</pubDate>
      <dc:creator>Alice</dc:creator>
    </item>
    <item>
      <title>B</title>
      <link>http://b</link>
      <description>Second story</description>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def sample_rss() -> bytes:
    return SAMPLE_RSS


@pytest.fixture
def sample_feed() -> Feed:
    return Feed(
        title="Playbook",
        link="https://example.com/",
        description="Morning news",
        items=(
            FeedItem(title="A", link="http://a", description="First story"),
            FeedItem(title="B", link="http://b", description="Second story"),
        ),
    )


@pytest.fixture
def entries():
    return [
        ListEntry(title=f"Story {index}", description=f"About {index}", link=f"http://s/{index}")
        for index in range(10)
    ]


@pytest.fixture
def restore_root_logging():
    """Give the test a clean root logger and put the original handlers back."""
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    try:
        yield root
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in original_handlers:
            root.addHandler(handler)
        root.setLevel(original_level)
