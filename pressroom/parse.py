"""Frontmatter splitting and markdown rendering.

First two stages of the compile pipeline. Raw HTML is passed through by the
renderer so that directives such as ``<Examples names=[1,2]/>`` reach the
resolvers intact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import frontmatter
import yaml
from markdown_it import MarkdownIt

from pressroom.errors import FrontmatterError

log = logging.getLogger(__name__)

_md = MarkdownIt("commonmark", {"html": True})
_yaml_handler = frontmatter.YAMLHandler()


@dataclass(frozen=True)
class RawDocument:
    """A stored post split into its metadata block and markdown body."""

    frontmatter: dict[str, Any] = field(default_factory=dict)
    body: str = ""


def split_frontmatter(text: str) -> RawDocument:
    """Separate a leading ``---`` YAML block from the markdown body.

    Text without a frontmatter block yields empty metadata and the whole
    text as body. Raises FrontmatterError if the block is not valid YAML
    or does not hold a mapping.
    """
    text = text.strip()
    if not _yaml_handler.detect(text):
        return RawDocument(body=text)
    try:
        block, body = _yaml_handler.split(text)
    except ValueError:
        # Opening delimiter with no closing one: not a frontmatter block.
        return RawDocument(body=text)

    try:
        metadata = _yaml_handler.load(block)
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"Invalid frontmatter: {exc}") from exc

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise FrontmatterError(
            f"Frontmatter must be a mapping, got {type(metadata).__name__}"
        )

    log.debug("Split frontmatter: %d key(s)", len(metadata))
    return RawDocument(frontmatter=dict(metadata), body=body.strip())


def render_markdown(body: str) -> str:
    """Render markdown body text to HTML."""
    return _md.render(body)
