"""Directive resolvers plugged into :func:`pressroom.substitute.replace_async`."""

from __future__ import annotations

from pressroom.resolvers.examples import (
    EXAMPLES_DIRECTIVE_RE,
    ExampleStore,
    make_examples_resolver,
    parse_example_ids,
)
from pressroom.resolvers.social import (
    SocialStore,
    extract_status_id,
    make_social_resolver,
    social_paragraph_pattern,
)

__all__ = [
    "EXAMPLES_DIRECTIVE_RE",
    "ExampleStore",
    "SocialStore",
    "extract_status_id",
    "make_examples_resolver",
    "make_social_resolver",
    "parse_example_ids",
    "social_paragraph_pattern",
]
