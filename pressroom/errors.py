"""Exceptions raised by the compile pipeline.

Store failures are not wrapped: whatever an example or social store raises
propagates out of :func:`pressroom.compiler.compile_document` unchanged.
"""

from __future__ import annotations


class CompileError(Exception):
    """Base class for errors raised while compiling a post."""


class FrontmatterError(CompileError):
    """Raised when the frontmatter block is not a valid YAML mapping."""


class MalformedDirective(CompileError):
    """Raised when a directive's payload cannot be parsed from its text.

    Carries the offending directive text so callers can point at it.
    """

    def __init__(self, message: str, directive: str) -> None:
        super().__init__(f"{message}: {directive!r}")
        self.directive = directive
