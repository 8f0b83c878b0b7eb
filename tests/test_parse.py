"""Tests for pressroom.parse."""

from __future__ import annotations

import datetime

import pytest

from pressroom.errors import CompileError, FrontmatterError
from pressroom.parse import RawDocument, render_markdown, split_frontmatter


SAMPLE_POST = """\
---
title: Shipping the new editor
description: What changed and why
published: 2024-03-01
tags: [editor, release]
---

# Shipping the new editor

Body text.
"""


class TestSplitFrontmatter:
    def test_metadata_parsed(self) -> None:
        doc = split_frontmatter(SAMPLE_POST)
        assert doc.frontmatter["title"] == "Shipping the new editor"
        assert doc.frontmatter["description"] == "What changed and why"
        assert doc.frontmatter["tags"] == ["editor", "release"]
        assert doc.frontmatter["published"] == datetime.date(2024, 3, 1)

    def test_body_excludes_frontmatter(self) -> None:
        doc = split_frontmatter(SAMPLE_POST)
        assert "title:" not in doc.body
        assert doc.body.startswith("# Shipping the new editor")
        assert "Body text." in doc.body

    def test_no_frontmatter(self) -> None:
        doc = split_frontmatter("Just a body.\n")
        assert doc.frontmatter == {}
        assert doc.body.strip() == "Just a body."

    def test_empty_text(self) -> None:
        doc = split_frontmatter("")
        assert doc == RawDocument(frontmatter={}, body="")

    def test_invalid_yaml(self) -> None:
        with pytest.raises(FrontmatterError, match="Invalid frontmatter"):
            split_frontmatter("---\ntitle: [unclosed\n---\nbody\n")

    @pytest.mark.parametrize("block", ["- a\n- b", "just a string", "42"])
    def test_non_mapping_frontmatter(self, block: str) -> None:
        with pytest.raises(FrontmatterError, match="must be a mapping"):
            split_frontmatter(f"---\n{block}\n---\nbody\n")

    def test_empty_block(self) -> None:
        doc = split_frontmatter("---\n---\nbody\n")
        assert doc == RawDocument(frontmatter={}, body="body")

    def test_unclosed_block_is_body(self) -> None:
        doc = split_frontmatter("---\ntitle: x\n")
        assert doc.frontmatter == {}
        assert doc.body == "---\ntitle: x"

    def test_frontmatter_error_is_compile_error(self) -> None:
        assert issubclass(FrontmatterError, CompileError)

    def test_raw_document_is_frozen(self) -> None:
        doc = split_frontmatter(SAMPLE_POST)
        with pytest.raises(AttributeError):
            doc.body = "changed"  # type: ignore[misc]


class TestRenderMarkdown:
    def test_paragraph(self) -> None:
        assert render_markdown("Hello *world*\n") == "<p>Hello <em>world</em></p>\n"

    def test_block_directive_passes_through(self) -> None:
        html = render_markdown("Intro\n\n<Examples names=[3,1]/>\n\nOutro\n")
        assert "<Examples names=[3,1]/>" in html

    def test_inline_directive_passes_through(self) -> None:
        html = render_markdown("See <Examples names=[2]/> here\n")
        assert html == "<p>See <Examples names=[2]/> here</p>\n"

    def test_bare_status_url_stays_a_paragraph(self) -> None:
        html = render_markdown("https://twitter.com/user/status/123456?s=09\n")
        assert html == "<p>https://twitter.com/user/status/123456?s=09</p>\n"
