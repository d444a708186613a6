"""
Google Docs Markdown Package

This package compiles Markdown into Google Docs API requests and publishes it.
"""

from gdocs.docs_client import DocumentClient, GoogleDocsClient
from gdocs.markdown_parser import CompilationResult, MarkdownToDocsConverter, generate_doc_requests
from gdocs.reading import get_doc_content
from gdocs.writing import (
    append_markdown,
    apply_markdown,
    create_doc,
    insert_markdown,
    preview_markdown,
)

__all__ = [
    "DocumentClient",
    "GoogleDocsClient",
    "MarkdownToDocsConverter",
    "CompilationResult",
    "generate_doc_requests",
    "get_doc_content",
    "create_doc",
    "insert_markdown",
    "append_markdown",
    "apply_markdown",
    "preview_markdown",
]
