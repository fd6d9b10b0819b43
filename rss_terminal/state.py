"""Presentation state machine for a single reader session."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from . import keys
from .listview import ListView
from .models import Feed, ListEntry
from .feeds import to_list_entries
from .styles import DEFAULT_STYLES, Styles

logger = logging.getLogger(__name__)

QUIT_KEYS = frozenset({"q", keys.CTRL_C})
ACTIVATE_KEY = keys.ENTER
DISMISS_KEY = keys.ESC
OPEN_KEY = "o"


class Mode(enum.Enum):
    LISTING = "listing"
    DETAIL = "detail"


@dataclass(frozen=True)
class KeyEvent:
    key: str


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


@dataclass(frozen=True)
class InterruptEvent:
    """The session was interrupted (signal, closed channel or idle timeout)."""

    reason: str = "interrupt"


Event = Union[KeyEvent, ResizeEvent, InterruptEvent]


@dataclass(frozen=True)
class QuitCommand:
    pass


@dataclass(frozen=True)
class OpenBrowserCommand:
    url: str


Command = Union[QuitCommand, OpenBrowserCommand]


class PresentationState:
    """List view plus an optional detail view for the highlighted entry.

    ``update`` is the only mutator. It never performs side effects; it
    returns a command for the caller to execute instead.
    """

    def __init__(
        self,
        entries: Sequence[ListEntry],
        width: int = 0,
        height: int = 0,
        title: str = "",
        styles: Styles = DEFAULT_STYLES,
    ) -> None:
        self.styles = styles
        frame_w, frame_h = styles.doc_frame
        self.list = ListView(
            entries, width=width - frame_w, height=height - frame_h, title=title
        )
        self.mode = Mode.LISTING
        self._selected: Optional[ListEntry] = None

    @classmethod
    def from_feed(
        cls, feed: Feed, width: int = 0, height: int = 0, styles: Styles = DEFAULT_STYLES
    ) -> "PresentationState":
        return cls(
            to_list_entries(feed.items),
            width=width,
            height=height,
            title=feed.title,
            styles=styles,
        )

    @property
    def entries(self):
        return self.list.items

    @property
    def detail_open(self) -> bool:
        return self.mode is Mode.DETAIL

    @property
    def selected(self) -> Optional[ListEntry]:
        """The entry shown in the detail view, or None while listing."""
        if self.mode is Mode.DETAIL:
            return self._selected
        return None

    def update(self, event: Event) -> Optional[Command]:
        if isinstance(event, InterruptEvent):
            logger.debug("Session interrupted: %s", event.reason)
            return QuitCommand()
        if isinstance(event, ResizeEvent):
            frame_w, frame_h = self.styles.doc_frame
            self.list.set_size(event.width - frame_w, event.height - frame_h)
            return None
        if isinstance(event, KeyEvent):
            return self._handle_key(event.key)
        return None

    def _handle_key(self, key: str) -> Optional[Command]:
        if key == keys.CTRL_C:
            return QuitCommand()

        if self.mode is Mode.DETAIL:
            if key in QUIT_KEYS:
                return QuitCommand()
            if key == DISMISS_KEY:
                self.mode = Mode.LISTING
                self._selected = None
            elif key == OPEN_KEY and self._selected is not None:
                return OpenBrowserCommand(self._selected.link)
            return None

        # Typed filter text owns every key but ctrl+c.
        if self.list.is_filtering:
            self.list.handle_key(key)
            return None

        if key in QUIT_KEYS:
            return QuitCommand()
        if key == ACTIVATE_KEY:
            item = self.list.selected_item()
            if item is not None:
                self._selected = item
                self.mode = Mode.DETAIL
            return None
        if key == OPEN_KEY:
            return None

        self.list.handle_key(key)
        return None
