"""Compile stored posts into embeddable documents.

Pipeline::

    split frontmatter → render markdown → rewrite links
        → resolve <Examples/> directives → resolve social post paragraphs

Links are rewritten on the rendered HTML before any embed is spliced in, so
the JSON payloads of resolved embeds never pass through the anchor patterns.
The Examples pass runs before the social pass, so social paragraphs are
matched against text in which every Examples directive is already an embed.

A compile either returns a complete :class:`CompiledDocument` or raises;
there is no partial output. Store errors propagate unchanged.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from pressroom.config import DEFAULTS, _deep_merge
from pressroom.embeds import referenced_components
from pressroom.links import rewrite_links
from pressroom.parse import RawDocument, render_markdown, split_frontmatter
from pressroom.resolvers import (
    EXAMPLES_DIRECTIVE_RE,
    ExampleStore,
    SocialStore,
    make_examples_resolver,
    make_social_resolver,
    social_paragraph_pattern,
)
from pressroom.store.db import ContentDB
from pressroom.substitute import replace_async

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledDocument:
    """Final post markup, its frontmatter and the components it invokes."""

    body: str
    frontmatter: dict[str, Any] = field(default_factory=dict)
    components: frozenset[str] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        return {
            "body": self.body,
            "frontmatter": self.frontmatter,
            "components": sorted(self.components),
        }

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str, ensure_ascii=False)


@dataclass(frozen=True)
class CompiledPost:
    """A compiled post from the content store plus its neighbours."""

    post: dict[str, Any]
    document: CompiledDocument
    adjacent: list[dict[str, Any]] = field(default_factory=list)


async def compile_document(
    source: str | RawDocument,
    *,
    examples: ExampleStore,
    social: SocialStore,
    config: dict[str, Any] | None = None,
) -> CompiledDocument:
    """Compile markdown-with-frontmatter text into a CompiledDocument.

    *source* is either the stored text or an already split RawDocument.
    *examples* and *social* are the stores directives resolve against.
    *config* may be partial; missing keys fall back to DEFAULTS.
    """
    config = _deep_merge(DEFAULTS, config or {})
    compile_cfg = config["compile"]
    max_concurrency = compile_cfg.get("max_concurrency")

    raw = source if isinstance(source, RawDocument) else split_frontmatter(source)

    html = render_markdown(raw.body)
    html = rewrite_links(html, indicator=compile_cfg.get("external_link_indicator", "↗"))

    html = await replace_async(
        html,
        EXAMPLES_DIRECTIVE_RE,
        make_examples_resolver(examples),
        max_concurrency=max_concurrency,
    )
    html = await replace_async(
        html,
        social_paragraph_pattern(config["social"]["domains"]),
        make_social_resolver(social),
        max_concurrency=max_concurrency,
    )

    components = referenced_components(html)
    log.debug("Compiled document: %d chars, components=%s", len(html), sorted(components))
    return CompiledDocument(body=html, frontmatter=dict(raw.frontmatter), components=components)


async def compile_post(
    db: ContentDB,
    site: str,
    slug: str,
    *,
    examples: ExampleStore,
    social: SocialStore,
    config: dict[str, Any] | None = None,
) -> CompiledPost | None:
    """Fetch the post at (site, slug) and compile it.

    Returns None if no such post exists. Database queries run in worker
    threads, and adjacent posts are fetched while the body compiles.
    """
    post = await asyncio.to_thread(db.get_post, site, slug)
    if post is None:
        log.info("No post %s/%s", site, slug)
        return None

    log.info("Compiling post %s/%s", site, slug)
    document, adjacent = await asyncio.gather(
        compile_document(post["content"], examples=examples, social=social, config=config),
        asyncio.to_thread(db.adjacent_posts, site, post["id"]),
    )
    return CompiledPost(post=post, document=document, adjacent=adjacent)
