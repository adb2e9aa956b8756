"""Render enhanced text as HTML for display."""

from __future__ import annotations

import html
import re

import markdown

_HREF = re.compile(r'<a href="([^"]*)"')
_SAFE_SCHEMES = ("http://", "https://", "mailto:")


def _safe_link(match: re.Match) -> str:
    href = match.group(1)
    if not href.lower().startswith(_SAFE_SCHEMES):
        href = "#"
    return f'<a href="{href}" target="_blank" rel="noopener noreferrer"'


def render_html(text: str) -> str:
    """Convert markdown-ish model output to HTML.

    Raw HTML in the input is escaped first, so only markdown syntax produces
    tags. Links are limited to http(s)/mailto and open in a new tab.
    """
    if not text or not text.strip():
        return ""
    body = markdown.markdown(
        html.escape(text, quote=False),
        extensions=["fenced_code", "nl2br"],
    )
    return _HREF.sub(_safe_link, body)
