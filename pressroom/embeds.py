"""Jinja2 templates for the component invocations emitted into posts.

Templates live in ``pressroom/templates/`` and use ``[[ ]]`` for variables
so the JSX braces around embed props stay literal.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

# Role -> component name the rendering layer must provide
COMPONENTS: dict[str, str] = {
    "link": "Link",
    "media": "BlurImage",
    "examples": "Examples",
    "tweet": "Tweet",
}

_COMPONENT_TAG_RE = re.compile(
    r"<(" + "|".join(sorted(COMPONENTS.values())) + r")\b"
)


@lru_cache(maxsize=1)
def _get_env() -> Environment:
    """Create a Jinja2 environment loading from pressroom/templates/."""
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        variable_start_string="[[",
        variable_end_string="]]",
        undefined=StrictUndefined,
        autoescape=False,
    )


def render_embed(name: str, **context: Any) -> str:
    """Render the ``<name>.j2`` embed template with *context*."""
    return _get_env().get_template(f"{name}.j2").render(**context)


def referenced_components(markup: str) -> frozenset[str]:
    """Component names invoked anywhere in *markup*."""
    return frozenset(_COMPONENT_TAG_RE.findall(markup))
