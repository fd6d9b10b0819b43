"""Turn presentation state into terminal frames."""

from __future__ import annotations

import io
import logging

from rich import box
from rich.console import Console, RenderableType
from rich.markdown import Markdown
from rich.panel import Panel

from .models import ListEntry
from .state import Mode, PresentationState
from .styles import DEFAULT_STYLES, Styles
from .templating import render_detail_markdown

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 80

ENTER_ALT_SCREEN = "\x1b[?1049h"
EXIT_ALT_SCREEN = "\x1b[?1049l"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CURSOR_HOME = "\x1b[H"
CLEAR_LINE = "\x1b[K"
CLEAR_BELOW = "\x1b[J"


class RenderError(RuntimeError):
    """Rich-text rendering of an entry failed."""


class Renderer:
    """Render a PresentationState with a fixed set of styles."""

    def __init__(self, styles: Styles = DEFAULT_STYLES) -> None:
        self.styles = styles

    def render(self, state: PresentationState) -> str:
        width = self._width(state)
        list_view = self._capture(state.list.render(self.styles), width)
        if state.mode is not Mode.DETAIL:
            return list_view

        try:
            modal = self.render_detail(state.selected, width)
        except RenderError:
            logger.exception("Failed to render markdown")
            return list_view
        return list_view + "\n\n" + modal

    def frame(self, state: PresentationState) -> str:
        """Render ``state`` as a full-screen frame."""
        _, frame_h = self.styles.doc_frame
        return format_frame(self.render(state), state.list.height + frame_h)

    def render_detail(self, entry: ListEntry, width: int = DEFAULT_WIDTH) -> str:
        try:
            markdown = Markdown(
                render_detail_markdown(entry), code_theme=self.styles.code_theme
            )
            panel = Panel(
                markdown,
                box=box.ROUNDED,
                border_style=self.styles.modal_border,
                padding=self.styles.modal_padding,
                width=self.styles.modal_width,
            )
            return self._capture(panel, width)
        except Exception as exc:
            raise RenderError(f"Could not render entry {entry!r}: {exc}") from exc

    def _width(self, state: PresentationState) -> int:
        frame_w, _ = self.styles.doc_frame
        width = state.list.width + frame_w
        return width if width > 0 else DEFAULT_WIDTH

    @staticmethod
    def _capture(renderable: RenderableType, width: int) -> str:
        console = Console(
            file=io.StringIO(),
            width=width,
            force_terminal=True,
            color_system="256",
            legacy_windows=False,
            highlight=False,
        )
        with console.capture() as capture:
            console.print(renderable)
        return capture.get().rstrip("\n")


def format_frame(view: str, height: int = 0) -> str:
    """Prepare a rendered view for painting over the previous frame.

    Only the last ``height`` lines are kept, so content appended below the
    list stays on screen.
    """
    lines = view.split("\n")
    if height > 0 and len(lines) > height:
        lines = lines[-height:]
    body = "\r\n".join(line + CLEAR_LINE for line in lines)
    return CURSOR_HOME + body + CLEAR_BELOW
