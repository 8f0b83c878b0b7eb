"""Resolver for standalone social post URLs.

A paragraph whose only content is a status URL on a known domain, e.g.
``<p>https://twitter.com/user/status/123456?s=09</p>``, is replaced with a
``<Tweet>`` embed carrying the post id and its metadata.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Awaitable, Callable, Iterable, Protocol

from pressroom.embeds import render_embed
from pressroom.errors import MalformedDirective

log = logging.getLogger(__name__)

# Id extraction from an already-matched paragraph
STATUS_ID_RE = re.compile(r"/status(?:es)?/(\d+)")


class SocialStore(Protocol):
    """Lookup of social post metadata by post id."""

    async def get_metadata_by_id(self, post_id: str) -> Any: ...


def social_paragraph_pattern(domains: Iterable[str]) -> re.Pattern[str]:
    """Build the paragraph pattern for status URLs on *domains*.

    The id must be followed by one non-``?`` character, then an optional
    query string, matching how status links are pasted from share menus.
    """
    alternatives = "|".join(re.escape(d) for d in domains)
    return re.compile(
        r"<p>(https?://(?:www\.)?(?:" + alternatives + r")/(?:#!/)?(\w+)"
        r"/status(?:es)?/(\d+)([^?])(\?.*)?</p>)"
    )


def extract_status_id(text: str) -> str:
    """Return the numeric post id in *text*.

    Raises MalformedDirective if no ``/status/<digits>`` segment is present.
    """
    m = STATUS_ID_RE.search(text)
    if not m:
        raise MalformedDirective("Could not extract a status id", text)
    return m.group(1)


def _template_literal(value: Any) -> str:
    """Serialize *value* as JSON safe to place inside a backtick string."""
    return json.dumps(value, default=str).replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def make_social_resolver(store: SocialStore) -> Callable[[str], Awaitable[str]]:
    """Build a resolver that turns a status URL paragraph into an embed."""

    async def resolve(paragraph: str) -> str:
        post_id = extract_status_id(paragraph)
        metadata = await store.get_metadata_by_id(post_id)
        log.debug("Resolved social post %s", post_id)
        return render_embed("tweet", id=post_id, metadata=_template_literal(metadata))

    return resolve
