"""Scrollable, filterable list widget."""

from __future__ import annotations

import enum
import math
from typing import List, Optional, Sequence

from rich.text import Text

from . import keys
from .feeds import strip_html
from .models import Listable
from .styles import DEFAULT_STYLES, Styles


class FilterState(enum.Enum):
    UNFILTERED = "unfiltered"
    FILTERING = "filtering"
    FILTER_APPLIED = "filter applied"


class ListView:
    """Paged list of Listable items with incremental filtering.

    Each item occupies two lines (title and a one-line description)
    followed by a blank separator. The header holds the title bar and the
    status line, the footer the page indicator and key help.
    """

    HEADER_LINES = 4
    FOOTER_LINES = 3
    ITEM_HEIGHT = 2
    ITEM_SPACING = 1

    def __init__(
        self,
        items: Sequence[Listable],
        width: int = 0,
        height: int = 0,
        title: str = "",
    ) -> None:
        self._items = tuple(items)
        self.title = title
        self.filter_state = FilterState.UNFILTERED
        self.filter_text = ""
        self.cursor = 0
        self.width = 0
        self.height = 0
        self.per_page = 1
        self.set_size(width, height)

    @property
    def items(self):
        return self._items

    def visible_items(self) -> List[Listable]:
        if self.filter_state is FilterState.UNFILTERED or not self.filter_text:
            return list(self._items)
        needle = self.filter_text.lower()
        return [
            item for item in self._items if needle in item.get_filter_key().lower()
        ]

    def selected_item(self) -> Optional[Listable]:
        visible = self.visible_items()
        if not visible:
            return None
        return visible[min(self.cursor, len(visible) - 1)]

    @property
    def is_filtering(self) -> bool:
        return self.filter_state is FilterState.FILTERING

    def set_size(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        usable = self.height - self.HEADER_LINES - self.FOOTER_LINES
        per_item = self.ITEM_HEIGHT + self.ITEM_SPACING
        self.per_page = max(1, (usable + self.ITEM_SPACING) // per_item)

    @property
    def page(self) -> int:
        return self.cursor // self.per_page

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(len(self.visible_items()) / self.per_page))

    def handle_key(self, key: str) -> None:
        if self.is_filtering:
            self._handle_filter_key(key)
            return

        if key in (keys.UP, "k"):
            self._move(-1)
        elif key in (keys.DOWN, "j"):
            self._move(1)
        elif key in (keys.LEFT, "h", keys.PGUP):
            self._move(-self.per_page)
        elif key in (keys.RIGHT, "l", keys.PGDOWN):
            self._move(self.per_page)
        elif key in (keys.HOME, "g"):
            self.cursor = 0
        elif key in (keys.END, "G"):
            self.cursor = max(0, len(self.visible_items()) - 1)
        elif key == "/":
            self.filter_state = FilterState.FILTERING
            self.filter_text = ""
            self.cursor = 0
        elif key == keys.ESC and self.filter_state is FilterState.FILTER_APPLIED:
            self.reset_filter()

    def _handle_filter_key(self, key: str) -> None:
        if key in (keys.ENTER, keys.TAB):
            self.filter_state = (
                FilterState.FILTER_APPLIED if self.filter_text else FilterState.UNFILTERED
            )
            self._clamp()
        elif key == keys.ESC:
            self.reset_filter()
        elif key == keys.BACKSPACE:
            self.filter_text = self.filter_text[:-1]
            self.cursor = 0
        elif key == keys.UP:
            self._move(-1)
        elif key == keys.DOWN:
            self._move(1)
        elif len(key) == 1 and key.isprintable():
            self.filter_text += key
            self.cursor = 0

    def reset_filter(self) -> None:
        self.filter_state = FilterState.UNFILTERED
        self.filter_text = ""
        self._clamp()

    def _move(self, delta: int) -> None:
        self.cursor += delta
        self._clamp()

    def _clamp(self) -> None:
        last = len(self.visible_items()) - 1
        self.cursor = max(0, min(self.cursor, last))

    def render(self, styles: Styles = DEFAULT_STYLES) -> Text:
        """Render the current page as styled text."""
        visible = self.visible_items()
        lines: List[Text] = []

        if self.title:
            lines.append(Text(f" {self.title} ", style=styles.title))
        else:
            lines.append(Text(""))
        lines.append(Text(""))
        lines.append(self._status_line(visible, styles))
        lines.append(Text(""))

        start = self.page * self.per_page
        for offset, item in enumerate(visible[start : start + self.per_page]):
            if offset:
                lines.append(Text(""))
            lines.extend(self._item_lines(item, start + offset == self.cursor, styles))

        if self.total_pages > 1:
            lines.append(Text(""))
            lines.append(self._pagination_line(styles))
        lines.append(Text(""))
        lines.append(Text(self._help_text(), style=styles.help))

        view = Text("\n").join(lines)
        view.no_wrap = True
        view.overflow = "ellipsis"
        return view

    def _status_line(self, visible, styles: Styles) -> Text:
        if self.is_filtering:
            line = Text("Filter: ", style=styles.filter_prompt)
            line.append(self.filter_text)
            line.append("█", style=styles.filter_prompt)
            return line
        if not self._items:
            return Text("No items.", style=styles.status)
        noun = "item" if len(visible) == 1 else "items"
        status = f"{len(visible)} {noun}"
        if self.filter_state is FilterState.FILTER_APPLIED:
            status = f'"{self.filter_text}" {status}'
        return Text(status, style=styles.status)

    @staticmethod
    def _item_lines(item: Listable, selected: bool, styles: Styles) -> List[Text]:
        description = " ".join(strip_html(item.get_description()).split())
        if selected:
            title = Text("│ ", style=styles.selected_marker)
            title.append(item.get_title(), style=styles.selected_title)
            desc = Text("│ ", style=styles.selected_marker)
            desc.append(description, style=styles.selected_description)
        else:
            title = Text("  " + item.get_title(), style=styles.normal_title)
            desc = Text("  " + description, style=styles.normal_description)
        return [title, desc]

    def _pagination_line(self, styles: Styles) -> Text:
        if self.total_pages > 10:
            return Text(f"{self.page + 1}/{self.total_pages}", style=styles.pagination)
        dots = "".join(
            "•" if page == self.page else "○" for page in range(self.total_pages)
        )
        return Text(dots, style=styles.pagination)

    def _help_text(self) -> str:
        if self.is_filtering:
            return "enter apply filter • esc cancel • ctrl+c quit"
        parts = ["↑/k up", "↓/j down", "/ filter", "enter open", "q quit"]
        if self.filter_state is FilterState.FILTER_APPLIED:
            parts.insert(3, "esc clear filter")
        return " • ".join(parts)
