"""Event loop driving one reader session over any terminal."""

from __future__ import annotations

import logging
from typing import Callable, Protocol, Tuple

from .browser import launch_browser
from .rendering import Renderer
from .state import Event, OpenBrowserCommand, PresentationState, QuitCommand

logger = logging.getLogger(__name__)


class Terminal(Protocol):
    """What a session needs from the terminal it runs on."""

    def size(self) -> Tuple[int, int]: ...

    def write(self, data: str) -> None: ...

    async def read_event(self) -> Event: ...


async def run_session(
    state: PresentationState,
    terminal: Terminal,
    renderer: Renderer,
    launcher: Callable[[str], object] = launch_browser,
) -> None:
    """Render, wait for an event, apply it, repeat until a quit command.

    Browser launches are handed to ``launcher`` and never awaited.
    """
    terminal.write(renderer.frame(state))
    while True:
        event = await terminal.read_event()
        command = state.update(event)
        if isinstance(command, QuitCommand):
            logger.debug("Session ended by %s", type(event).__name__)
            return
        if isinstance(command, OpenBrowserCommand):
            launcher(command.url)
        terminal.write(renderer.frame(state))
