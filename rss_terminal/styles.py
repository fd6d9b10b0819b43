"""Visual styling shared by every render call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Styles:
    """Immutable styling built once at startup and passed to renderers."""

    title: str = "bold #fffdf5 on color(62)"
    status: str = "color(244)"
    filter_prompt: str = "color(205)"
    selected_title: str = "bold color(170)"
    selected_description: str = "color(168)"
    selected_marker: str = "color(170)"
    normal_title: str = "color(252)"
    normal_description: str = "color(243)"
    pagination: str = "color(240)"
    help: str = "color(241)"
    modal_border: str = "color(63)"
    modal_width: int = 60
    modal_padding: Tuple[int, int] = (1, 2)
    markdown_theme: str = "dark"
    # horizontal and vertical frame around the list view
    doc_frame: Tuple[int, int] = (0, 0)

    @property
    def code_theme(self) -> str:
        return "monokai" if self.markdown_theme == "dark" else "default"


DEFAULT_STYLES = Styles()
