"""
Google Docs Writing Operations

Publishes Markdown into Google Docs: create a document from Markdown, insert
or replace a document's content, append to it, and preview the generated
requests without touching any document.
"""

import json
import logging
from typing import Any

from core.config import get_document_url
from core.errors import ValidationError
from core.utils import validate_document_id, validate_positive_int
from gdocs.docs_client import DocumentClient
from gdocs.docs_helpers import create_delete_range_request, create_insert_text_request
from gdocs.docs_structure import get_body_end_index
from gdocs.managers import MaterializationReport, TableOperationManager
from gdocs.markdown_parser import CompilationResult, MarkdownToDocsConverter

logger = logging.getLogger(__name__)


def _validate_markdown(markdown: str) -> str:
    if not isinstance(markdown, str):
        raise ValidationError("markdown must be a string")
    return markdown


def _summary(result: CompilationResult, report: MaterializationReport) -> str:
    summary = f"{len(result.operations)} style operation(s)"
    if result.tables:
        summary += f", {report.tables_inserted} table(s) with {report.cells_populated} filled cell(s)"
        if report.cells_skipped:
            summary += f" ({report.cells_skipped} cell(s) missing from the document)"
    return summary


async def apply_markdown(
    client: DocumentClient,
    document_id: str,
    markdown: str,
    insert_at: int = 1,
    prefix_requests: list[dict[str, Any]] | None = None,
    smart_typography: bool | None = None,
) -> tuple[CompilationResult, MaterializationReport]:
    """
    Compile Markdown for ``insert_at`` and apply it: one text batch, then tables.

    Args:
        client: Document access.
        document_id: Target document.
        markdown: Markdown source.
        insert_at: Index the compiled text is inserted at.
        prefix_requests: Requests sent in the same batch ahead of the compiled
            ones. They must leave ``insert_at`` pointing where the text belongs.
        smart_typography: Override for the typography filter.

    Returns:
        The compilation result and the table materialization report.
    """
    result = MarkdownToDocsConverter().convert(markdown, start_index=insert_at, smart_typography=smart_typography)
    requests = list(prefix_requests or []) + result.requests()

    if requests:
        logger.debug(f"[apply_markdown] Doc={document_id}, insert_at={insert_at}, {len(requests)} request(s)")
        await client.mutate(document_id, requests)

    report = MaterializationReport()
    if result.tables:
        report = await TableOperationManager(client).materialize_tables(document_id, result.tables)
    return result, report


async def create_doc(client: DocumentClient, title: str, markdown: str = "") -> str:
    """
    Creates a new Google Doc and optionally fills it from Markdown.

    Returns:
        str: Confirmation message with document ID and link.
    """
    logger.info(f"[create_doc] Invoked. Title='{title}'")

    if not title or not title.strip():
        raise ValidationError("title is required")
    markdown = _validate_markdown(markdown)

    doc = await client.create(title)
    doc_id = doc.get("documentId")
    link = get_document_url(doc_id)

    msg = f"Created Google Doc '{title}' (ID: {doc_id})."
    if markdown.strip():
        result, report = await apply_markdown(client, doc_id, markdown, insert_at=1)
        msg += f" Inserted Markdown: {_summary(result, report)}."

    logger.info(f"Successfully created Google Doc '{title}' (ID: {doc_id}). Link: {link}")
    return f"{msg} Link: {link}"


async def insert_markdown(client: DocumentClient, document_id: str, markdown: str, replace: bool = False) -> str:
    """
    Inserts Markdown at the end of a document, or replaces the whole body with it.

    Args:
        client: Document access.
        document_id: ID of the document to update.
        markdown: Markdown source.
        replace: Delete the existing body content first (same batch as the insert).

    Returns:
        str: Confirmation message with operation details and link.
    """
    logger.info(f"[insert_markdown] Doc={document_id}, replace={replace}, length={len(markdown or '')}")

    document_id = validate_document_id(document_id)
    markdown = _validate_markdown(markdown)

    doc = await client.query(document_id)
    end_index = get_body_end_index(doc)

    prefix_requests: list[dict[str, Any]] = []
    if replace:
        # The body's final newline cannot be deleted
        if end_index - 1 > 1:
            prefix_requests.append(create_delete_range_request(1, end_index - 1))
        insert_at = 1
    else:
        insert_at = max(end_index - 1, 1)

    result, report = await apply_markdown(client, document_id, markdown, insert_at, prefix_requests)

    action = "Replaced content of" if replace else "Inserted Markdown into"
    link = get_document_url(document_id)
    return f"{action} document {document_id} at index {insert_at}: {_summary(result, report)}. Link: {link}"


async def append_markdown(client: DocumentClient, document_id: str, markdown: str) -> str:
    """
    Appends Markdown as new paragraphs after the document's existing content.

    Returns:
        str: Confirmation message with operation details and link.
    """
    logger.info(f"[append_markdown] Doc={document_id}, length={len(markdown or '')}")

    document_id = validate_document_id(document_id)
    markdown = _validate_markdown(markdown)

    doc = await client.query(document_id)
    end_index = get_body_end_index(doc)

    # Break the last paragraph so the appended blocks start on their own line
    newline_at = max(end_index - 1, 1)
    prefix_requests = [create_insert_text_request(newline_at, "\n")]
    result, report = await apply_markdown(client, document_id, markdown, newline_at + 1, prefix_requests)

    link = get_document_url(document_id)
    summary = _summary(result, report)
    return f"Appended Markdown to document {document_id} at index {newline_at + 1}: {summary}. Link: {link}"


def preview_markdown(markdown: str, insert_at: int = 1, smart_typography: bool | None = None) -> str:
    """
    Shows the requests Markdown would compile to, without any API call.

    Returns:
        str: JSON with the text payload, the batchUpdate requests and the deferred tables.
    """
    markdown = _validate_markdown(markdown)
    insert_at = validate_positive_int(insert_at, "insert_at")

    result = MarkdownToDocsConverter().convert(markdown, start_index=insert_at, smart_typography=smart_typography)
    return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
