"""Resolver for ``<Examples names=[...]/>`` directives.

Each id in the bracket list is looked up in the example store, one at a
time and in list order. Missing records become ``null`` in the embed data,
so the data list always lines up with the id list.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Awaitable, Callable, Protocol

from pressroom.embeds import render_embed
from pressroom.errors import MalformedDirective

log = logging.getLogger(__name__)

# Whole directive, one per match even when two share a line
EXAMPLES_DIRECTIVE_RE = re.compile(r"<Examples\b[^\n]*?/>")

# Bracketed id list inside a directive
NAMES_RE = re.compile(r"names=\[([^\]]+)\]")

# Leading integer of a token, parseInt-style: " 2" -> 2, "3abc" -> 3
_INT_PREFIX_RE = re.compile(r"\s*([+-]?\d+)")


class ExampleStore(Protocol):
    """Lookup of example records by primary key."""

    async def get_by_id(self, example_id: int) -> dict[str, Any] | None: ...


def parse_example_ids(directive: str) -> list[int]:
    """Extract the ordered id list from an Examples directive.

    Tokens are split on ``,`` and not trimmed; each is read by its leading
    integer, so ``"1, 2"`` yields ``[1, 2]`` and ``"4x"`` yields ``[4]``.
    Raises MalformedDirective if there is no ``names=[...]`` list or a token
    has no leading integer.
    """
    m = NAMES_RE.search(directive)
    if not m:
        raise MalformedDirective("Examples directive has no names=[...] list", directive)

    ids: list[int] = []
    for token in m.group(1).split(","):
        num = _INT_PREFIX_RE.match(token)
        if not num:
            raise MalformedDirective(f"Example id {token!r} is not an integer", directive)
        ids.append(int(num.group(1)))
    return ids


def make_examples_resolver(store: ExampleStore) -> Callable[[str], Awaitable[str]]:
    """Build a resolver that turns an Examples directive into an embed."""

    async def resolve(directive: str) -> str:
        ids = parse_example_ids(directive)
        records: list[dict[str, Any] | None] = []
        for example_id in ids:
            record = await store.get_by_id(example_id)
            if record is None:
                log.warning("Example %d not found", example_id)
            records.append(record)

        log.debug("Resolved Examples directive: %d id(s)", len(ids))
        return render_embed("examples", data=json.dumps(records, default=str))

    return resolve
