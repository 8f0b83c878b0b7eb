"""Pressroom: compile markdown posts with embed directives into documents."""

from pressroom.compiler import CompiledDocument, CompiledPost, compile_document, compile_post
from pressroom.errors import CompileError, FrontmatterError, MalformedDirective
from pressroom.parse import RawDocument

__all__ = [
    "CompileError",
    "CompiledDocument",
    "CompiledPost",
    "FrontmatterError",
    "MalformedDirective",
    "RawDocument",
    "compile_document",
    "compile_post",
]
