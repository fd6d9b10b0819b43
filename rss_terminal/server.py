"""Serve reader sessions over SSH."""

from __future__ import annotations

import asyncio
import collections
import contextlib
import logging
import os
import signal
import time
from pathlib import Path
from typing import Awaitable, Callable, Deque, Optional, Set, Tuple

import asyncssh

from .config import AppConfig
from .feeds import load_feed_or_empty
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
from .styles import Styles

logger = logging.getLogger(__name__)

Handler = Callable[[asyncssh.SSHServerProcess], Awaitable[None]]
Middleware = Callable[[Handler], Handler]


class ChannelTerminal:
    """Terminal backed by an SSH session channel with a PTY."""

    def __init__(self, process: asyncssh.SSHServerProcess, idle_timeout: float = 0.0):
        self._process = process
        self._idle_timeout = idle_timeout
        self._pending: Deque[Event] = collections.deque()

    def size(self) -> Tuple[int, int]:
        width, height, _, _ = self._process.get_terminal_size()
        return width, height

    def write(self, data: str) -> None:
        self._process.stdout.write(data)

    async def read_event(self) -> Event:
        while not self._pending:
            try:
                if self._idle_timeout:
                    data = await asyncio.wait_for(
                        self._process.stdin.read(1024), self._idle_timeout
                    )
                else:
                    data = await self._process.stdin.read(1024)
            except asyncio.TimeoutError:
                logger.info("Closing session idle for %ss", self._idle_timeout)
                return InterruptEvent("idle timeout")
            except asyncssh.TerminalSizeChanged as exc:
                return ResizeEvent(exc.width, exc.height)
            except (asyncssh.BreakReceived, asyncssh.SignalReceived):
                return InterruptEvent("signal from client")
            if not data:
                return InterruptEvent("channel closed")
            self._pending.extend(KeyEvent(key) for key in decode_keys(data))
        return self._pending.popleft()


class ConnectionTracker:
    """Keeps the open connections so shutdown can drain or close them."""

    def __init__(self) -> None:
        self._connections: Set[asyncssh.SSHServerConnection] = set()
        self._empty = asyncio.Event()
        self._empty.set()

    def __len__(self) -> int:
        return len(self._connections)

    def add(self, conn) -> None:
        self._connections.add(conn)
        self._empty.clear()

    def discard(self, conn) -> None:
        self._connections.discard(conn)
        if not self._connections:
            self._empty.set()

    async def drain(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for every connection to end."""
        try:
            await asyncio.wait_for(self._empty.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True

    def close_all(self) -> None:
        for conn in list(self._connections):
            conn.close()


class FeedSSHServer(asyncssh.SSHServer):
    """Per-connection callbacks; no client authentication is required."""

    def __init__(self, tracker: ConnectionTracker) -> None:
        self._tracker = tracker
        self._conn: Optional[asyncssh.SSHServerConnection] = None

    def connection_made(self, conn: asyncssh.SSHServerConnection) -> None:
        self._conn = conn
        self._tracker.add(conn)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if exc:
            logger.warning("Connection lost: %s", exc)
        self._tracker.discard(self._conn)

    def begin_auth(self, username: str) -> bool:
        return False


def logging_middleware(handler: Handler) -> Handler:
    """Log each session's peer, terminal and duration."""

    async def handle(process: asyncssh.SSHServerProcess) -> None:
        peer = process.get_extra_info("peername") or ("?", 0)
        user = process.get_extra_info("username")
        term = process.get_terminal_type()
        width, height, _, _ = process.get_terminal_size()
        logger.info(
            "%s connect %s:%s term=%s size=%dx%d",
            user,
            peer[0],
            peer[1],
            term,
            width,
            height,
        )
        started = time.monotonic()
        try:
            await handler(process)
        finally:
            logger.info(
                "%s disconnect %s:%s %.3fs",
                user,
                peer[0],
                peer[1],
                time.monotonic() - started,
            )

    return handle


def active_terminal_middleware(handler: Handler) -> Handler:
    """Refuse sessions that did not request a PTY."""

    async def handle(process: asyncssh.SSHServerProcess) -> None:
        if process.get_terminal_type() is None:
            logger.info("Rejecting session without a PTY")
            process.stdout.write("Requires an active PTY\n")
            process.exit(1)
            return
        await handler(process)

    return handle


def build_session_handler(config: AppConfig, styles: Styles) -> Handler:
    """Create the handler that runs one reader session per connection."""

    async def handle(process: asyncssh.SSHServerProcess) -> None:
        width, height, _, _ = process.get_terminal_size()
        feed = await asyncio.to_thread(
            load_feed_or_empty, config.feed.url, config.feed.timeout
        )
        state = PresentationState.from_feed(feed, width, height, styles=styles)
        terminal = ChannelTerminal(process, config.server.idle_timeout)

        status = 0
        terminal.write(ENTER_ALT_SCREEN + HIDE_CURSOR)
        try:
            await run_session(state, terminal, Renderer(styles))
        except (OSError, asyncssh.Error) as exc:
            logger.warning("Session ended by channel error: %s", exc)
            status = 1
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error during session.")
            status = 1
        finally:
            with contextlib.suppress(OSError, asyncssh.Error):
                terminal.write(SHOW_CURSOR + EXIT_ALT_SCREEN)
            with contextlib.suppress(OSError, asyncssh.Error):
                process.exit(status)

    return handle


def compose(handler: Handler, *middlewares: Middleware) -> Handler:
    """Wrap ``handler`` so the first middleware runs outermost."""
    for middleware in reversed(middlewares):
        handler = middleware(handler)
    return handler


def ensure_host_key(path: str) -> str:
    """Return ``path``, generating an Ed25519 host key there if needed."""
    key_path = Path(path)
    if not key_path.exists():
        key_path.parent.mkdir(parents=True, exist_ok=True)
        key = asyncssh.generate_private_key("ssh-ed25519")
        key.write_private_key(str(key_path))
        key.write_public_key(str(key_path) + ".pub")
        os.chmod(key_path, 0o600)
        logger.info("Generated host key at %s", key_path)
    return str(key_path)


async def shutdown(acceptor, tracker: ConnectionTracker, grace: float) -> None:
    """Stop accepting, let sessions finish for ``grace`` seconds, then close."""
    acceptor.close()
    if len(tracker):
        logger.info("Waiting up to %ss for %d session(s)", grace, len(tracker))
    if not await tracker.drain(grace):
        logger.warning(
            "Closing %d session(s) still open after %ss", len(tracker), grace
        )
        tracker.close_all()
    await acceptor.wait_closed()


async def serve(config: AppConfig, stop: Optional[asyncio.Event] = None) -> None:
    """Run the SSH server until SIGINT/SIGTERM (or ``stop``) is set."""
    styles = config.theme.to_styles()
    tracker = ConnectionTracker()
    handler = compose(
        build_session_handler(config, styles),
        logging_middleware,
        active_terminal_middleware,
    )

    acceptor = await asyncssh.create_server(
        lambda: FeedSSHServer(tracker),
        config.server.host,
        config.server.port,
        server_host_keys=[ensure_host_key(config.server.host_key)],
        process_factory=handler,
        line_editor=False,
    )
    logger.info(
        "Starting SSH server host=%s port=%s", config.server.host, config.server.port
    )

    stop = stop or asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)
    try:
        await stop.wait()
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)

    logger.info("Stopping SSH server")
    await shutdown(acceptor, tracker, config.server.shutdown_grace)
