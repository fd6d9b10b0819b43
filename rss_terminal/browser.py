"""Best-effort opening of links in the host's default browser."""

from __future__ import annotations

import logging
import subprocess
import sys
import threading
from typing import List, Optional

logger = logging.getLogger(__name__)


class UnsupportedPlatformError(RuntimeError):
    """The host OS has no known URL opener."""


def browser_command(url: str, platform: Optional[str] = None) -> List[str]:
    """Return the argv that opens ``url`` on ``platform`` (defaults to this host)."""
    platform = platform or sys.platform
    if platform.startswith("linux"):
        return ["xdg-open", url]
    if platform == "darwin":
        return ["open", url]
    if platform in ("win32", "cygwin"):
        return ["rundll32", "url.dll,FileProtocolHandler", url]
    raise UnsupportedPlatformError(f"unsupported platform: {platform}")


def open_browser(url: str, platform: Optional[str] = None) -> subprocess.Popen:
    """Start the opener without waiting for it to finish."""
    return subprocess.Popen(
        browser_command(url, platform),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


def launch_browser(url: str) -> threading.Thread:
    """Open ``url`` from a background thread, ignoring every failure."""

    def worker() -> None:
        try:
            open_browser(url)
        except (UnsupportedPlatformError, OSError) as exc:
            logger.debug("Could not open %s in a browser: %s", url, exc)

    thread = threading.Thread(target=worker, name="browser-launcher", daemon=True)
    thread.start()
    return thread
