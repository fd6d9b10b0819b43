"""Jinja2 environment for rss_terminal templates."""

from __future__ import annotations

from importlib import resources

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .feeds import strip_html

_ENV: Environment | None = None


def _plain(value: str | None) -> str:
    """Flatten an HTML fragment to text, keeping paragraph breaks."""
    if not value:
        return ""
    paragraphs = [strip_html(part) for part in value.split("\n\n")]
    return "\n\n".join(part for part in paragraphs if part)


def get_environment() -> Environment:
    """Return a cached Jinja environment configured for package templates."""
    global _ENV
    if _ENV is None:
        template_dir = resources.files(__package__) / "templates"
        loader = FileSystemLoader(str(template_dir))
        _ENV = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        _ENV.filters["plain"] = _plain
    return _ENV


def render_detail_markdown(entry) -> str:
    """Render the markdown shown in the detail panel for ``entry``."""
    template = get_environment().get_template("detail.md.j2")
    return template.render(entry=entry)
