"""Local terminal driver: raw input, alternate screen and signals."""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import shutil
import signal
import sys
import termios
import tty
from typing import Optional, TextIO, Tuple

from .keys import decode_keys
from .rendering import (
    ENTER_ALT_SCREEN,
    EXIT_ALT_SCREEN,
    HIDE_CURSOR,
    SHOW_CURSOR,
    Renderer,
)
from .session import run_session
from .state import Event, InterruptEvent, KeyEvent, PresentationState, ResizeEvent

logger = logging.getLogger(__name__)


class LocalTerminal:
    """The controlling terminal, switched to raw mode for the session."""

    def __init__(
        self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None
    ) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._fd = self._stdin.fileno()
        self._saved_attrs = None
        self._decoder = codecs.getincrementaldecoder("utf-8")("replace")
        self._queue: "asyncio.Queue[Event]" = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def size(self) -> Tuple[int, int]:
        columns, lines = shutil.get_terminal_size()
        return columns, lines

    def write(self, data: str) -> None:
        self._stdout.write(data)
        self._stdout.flush()

    async def read_event(self) -> Event:
        return await self._queue.get()

    def __enter__(self) -> "LocalTerminal":
        self._saved_attrs = termios.tcgetattr(self._fd)
        tty.setraw(self._fd)
        self.write(ENTER_ALT_SCREEN + HIDE_CURSOR)
        return self

    def __exit__(self, *exc_info) -> None:
        self.write(SHOW_CURSOR + EXIT_ALT_SCREEN)
        if self._saved_attrs is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None

    def attach(self, loop: asyncio.AbstractEventLoop) -> None:
        """Start delivering input, resize and interrupt events."""
        self._loop = loop
        loop.add_reader(self._fd, self._on_input)
        loop.add_signal_handler(signal.SIGWINCH, self._on_resize)
        loop.add_signal_handler(signal.SIGINT, self._on_interrupt, "SIGINT")
        loop.add_signal_handler(signal.SIGTERM, self._on_interrupt, "SIGTERM")

    def detach(self) -> None:
        if self._loop is None:
            return
        self._loop.remove_reader(self._fd)
        for sig in (signal.SIGWINCH, signal.SIGINT, signal.SIGTERM):
            self._loop.remove_signal_handler(sig)
        self._loop = None

    def _on_input(self) -> None:
        data = os.read(self._fd, 1024)
        if not data:
            self._queue.put_nowait(InterruptEvent("end of input"))
            return
        for key in decode_keys(self._decoder.decode(data)):
            self._queue.put_nowait(KeyEvent(key))

    def _on_resize(self) -> None:
        width, height = self.size()
        self._queue.put_nowait(ResizeEvent(width, height))

    def _on_interrupt(self, name: str) -> None:
        self._queue.put_nowait(InterruptEvent(name))


async def _run(state: PresentationState, renderer: Renderer) -> None:
    terminal = LocalTerminal()
    loop = asyncio.get_running_loop()
    with terminal:
        terminal.attach(loop)
        try:
            await run_session(state, terminal, renderer)
        finally:
            terminal.detach()


def run_local(state: PresentationState, renderer: Renderer) -> None:
    """Run one session on the controlling terminal until the user quits."""
    asyncio.run(_run(state, renderer))
