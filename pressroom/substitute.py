"""Ordered, concurrent find-and-replace.

:func:`replace_async` is the engine behind both directive passes of the
compiler. It works in three steps:

1. Scan the text once, recording ``(start, end, matched_text)`` for every
   match in left-to-right order.
2. Run the resolver on every matched text concurrently and collect the
   results by span index, so completion order does not matter.
3. Rebuild the output in one pass over the span list, copying the text
   between spans verbatim.

The rebuild never re-runs the pattern, so replacement ``i`` always lands on
span ``i``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable

log = logging.getLogger(__name__)

Resolver = Callable[[str], Awaitable[str]]


@dataclass(frozen=True)
class Span:
    """One pattern match located in the source text."""

    start: int
    end: int
    text: str


def find_spans(text: str, pattern: re.Pattern[str]) -> list[Span]:
    """Return every match of *pattern* in *text*, sorted by start offset."""
    return [Span(m.start(), m.end(), m.group(0)) for m in pattern.finditer(text)]


def splice(text: str, spans: list[Span], replacements: list[str]) -> str:
    """Replace each span with the replacement at the same index.

    *spans* must be sorted and non-overlapping, as produced by
    :func:`find_spans`.
    """
    if len(spans) != len(replacements):
        raise ValueError(
            f"Got {len(replacements)} replacement(s) for {len(spans)} span(s)"
        )
    parts: list[str] = []
    cursor = 0
    for span, replacement in zip(spans, replacements):
        parts.append(text[cursor:span.start])
        parts.append(replacement)
        cursor = span.end
    parts.append(text[cursor:])
    return "".join(parts)


async def _gather_ordered(
    resolver: Resolver,
    spans: list[Span],
    max_concurrency: int | None,
) -> list[str]:
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def resolve(span: Span) -> str:
        if semaphore is None:
            result = await resolver(span.text)
        else:
            async with semaphore:
                result = await resolver(span.text)
        if not isinstance(result, str):
            raise TypeError(
                f"Resolver returned {type(result).__name__} for {span.text!r}, expected str"
            )
        return result

    tasks = [asyncio.ensure_future(resolve(span)) for span in spans]
    try:
        return list(await asyncio.gather(*tasks))
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()


async def replace_async(
    text: str,
    pattern: re.Pattern[str] | str,
    resolver: Resolver,
    *,
    max_concurrency: int | None = None,
) -> str:
    """Replace every match of *pattern* with ``await resolver(match_text)``.

    All resolver calls run concurrently; ``max_concurrency`` caps how many
    are in flight at once (None means no cap). The first resolver error
    propagates unchanged and no partially substituted text is returned.
    Text with no matches is returned as-is without calling the resolver.
    """
    if max_concurrency is not None and max_concurrency < 1:
        raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")

    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    spans = find_spans(text, regex)
    if not spans:
        return text

    log.debug("Resolving %d match(es) of %s", len(spans), regex.pattern[:40])
    replacements = await _gather_ordered(resolver, spans, max_concurrency)
    return splice(text, spans, replacements)
