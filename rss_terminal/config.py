"""Configuration loading for rss_terminal."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from .styles import Styles

logger = logging.getLogger(__name__)

DEFAULT_FEED_URL = "https://rss.politico.com/playbook.xml"


@dataclass
class FeedSettings:
    url: str = DEFAULT_FEED_URL
    timeout: float = 2.0


@dataclass
class ServerConfig:
    host: str = "localhost"
    port: int = 23234
    host_key: str = ".ssh/id_ed25519"
    shutdown_grace: float = 30.0
    # 0 disables the idle check
    idle_timeout: float = 0.0


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class ThemeConfig:
    modal_border_color: str = "63"
    modal_width: int = 60
    markdown_theme: str = "dark"

    def to_styles(self) -> Styles:
        """Build the immutable Styles used for rendering."""
        border = self.modal_border_color
        if border.isdigit():
            border = f"color({border})"
        return Styles(
            modal_border=border,
            modal_width=self.modal_width,
            markdown_theme=self.markdown_theme,
        )


@dataclass
class AppConfig:
    feed: FeedSettings = field(default_factory=FeedSettings)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    theme: ThemeConfig = field(default_factory=ThemeConfig)


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def _number(node: ET.Element, tag: str, default, kind=float):
    raw = node.findtext(tag)
    if raw is None or not raw.strip():
        return default
    try:
        return kind(raw.strip())
    except ValueError as exc:
        raise ValueError(f"<{tag}> must be a number, got {raw.strip()!r}") from exc


def parse_app_config(path: str) -> AppConfig:
    """Parse the main application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    try:
        tree = ET.parse(config_path)
    except ET.ParseError as exc:
        raise ValueError(f"Config file is not valid XML: {exc}") from exc
    root = tree.getroot()

    # Feed
    feed = FeedSettings()
    feed_node = root.find("feed")
    if feed_node is not None:
        url = feed_node.findtext("url")
        if url and url.strip():
            feed.url = url.strip()
        feed.timeout = _number(feed_node, "timeout-seconds", feed.timeout)
        if feed.timeout <= 0:
            raise ValueError("<timeout-seconds> must be positive.")

    # Server
    server = ServerConfig()
    server_node = root.find("server")
    if server_node is not None:
        server.host = (server_node.findtext("host") or server.host).strip()
        server.port = _number(server_node, "port", server.port, kind=int)
        if not 0 < server.port < 65536:
            raise ValueError(f"<port> out of range: {server.port}")
        host_key = server_node.findtext("host-key")
        if host_key and host_key.strip():
            server.host_key = _resolve_path(config_path, host_key.strip())
        server.shutdown_grace = _number(
            server_node, "shutdown-grace-seconds", server.shutdown_grace
        )
        if server.shutdown_grace < 0:
            raise ValueError("<shutdown-grace-seconds> must not be negative.")
        server.idle_timeout = _number(
            server_node, "idle-timeout-seconds", server.idle_timeout
        )
        if server.idle_timeout < 0:
            raise ValueError("<idle-timeout-seconds> must not be negative.")

    # Logging
    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO").strip()
        log_file = log_node.findtext("file")
        if log_file and log_file.strip():
            logging_config.file = _resolve_path(config_path, log_file.strip())

    # Theme
    theme = ThemeConfig()
    theme_node = root.find("theme")
    if theme_node is not None:
        theme.modal_border_color = theme_node.findtext(
            "modal-border-color", theme.modal_border_color
        ).strip()
        theme.modal_width = _number(theme_node, "modal-width", theme.modal_width, kind=int)
        if theme.modal_width <= 0:
            raise ValueError("<modal-width> must be positive.")
        theme.markdown_theme = theme_node.findtext(
            "markdown-theme", theme.markdown_theme
        ).strip()

    return AppConfig(feed=feed, server=server, logging=logging_config, theme=theme)


def load_app_config(path: Optional[str] = None) -> AppConfig:
    """Parse ``path`` when given, otherwise return the built-in defaults."""
    if path is None:
        logger.debug("No configuration file given; using defaults")
        return AppConfig()
    return parse_app_config(path)
