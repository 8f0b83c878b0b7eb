"""Anchor rewriting for rendered post HTML.

External ``http(s)`` links open in a new tab and get a trailing indicator.
Root-relative links become client-side ``<Link>`` components. Anything else
(``mailto:``, fragments, relative paths) is left alone.
"""

from __future__ import annotations

import re

# <a href="https://..." title="...">text</a>
EXTERNAL_LINK_RE = re.compile(r'<a href="(https?://[^"]*)"([^>]*)>(.*?)</a>', re.DOTALL)

# <a href="/path">text</a>, excluding protocol-relative //host
INTERNAL_LINK_RE = re.compile(r'<a href="(/(?!/)[^"]*)"([^>]*)>(.*?)</a>', re.DOTALL)

DEFAULT_INDICATOR = "↗"


def rewrite_links(html: str, *, indicator: str = DEFAULT_INDICATOR) -> str:
    """Rewrite external and root-relative anchors in *html*."""

    def _external(m: re.Match[str]) -> str:
        href, attrs, text = m.groups()
        suffix = f" {indicator}" if indicator else ""
        return f'<a target="_blank" href="{href}"{attrs}>{text}{suffix}</a>'

    def _internal(m: re.Match[str]) -> str:
        href, attrs, text = m.groups()
        return (
            f'<Link href="{href}"><a className="cursor-pointer"{attrs}>{text}</a></Link>'
        )

    html = EXTERNAL_LINK_RE.sub(_external, html)
    return INTERNAL_LINK_RE.sub(_internal, html)

