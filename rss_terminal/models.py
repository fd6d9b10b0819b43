"""Shared data models for rss_terminal."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Tuple


@dataclass(frozen=True)
class FeedItem:
    """A single entry of an RSS channel."""

    title: str = ""
    link: str = ""
    description: str = ""
    guid: str = ""
    published: str = ""
    creator: str = ""


@dataclass(frozen=True)
class Feed:
    """Parsed RSS channel."""

    title: str = ""
    link: str = ""
    description: str = ""
    last_build_date: str = ""
    items: Tuple[FeedItem, ...] = field(default_factory=tuple)


class Listable(Protocol):
    """Anything the list widget can display and filter."""

    def get_title(self) -> str: ...

    def get_description(self) -> str: ...

    def get_filter_key(self) -> str: ...


@dataclass(frozen=True)
class ListEntry:
    """View-model projection of a FeedItem used by the list widget."""

    title: str
    description: str
    link: str

    def get_title(self) -> str:
        return self.title

    def get_description(self) -> str:
        return self.description

    def get_filter_key(self) -> str:
        return self.title
