"""
Google Docs Reading Operations

This module reads Google Docs content back as plain text.
"""

import logging

from core.config import get_document_url
from core.utils import validate_document_id
from gdocs.docs_client import DocumentClient
from gdocs.docs_structure import extract_document_text, find_tables

logger = logging.getLogger(__name__)

GOOGLE_DOC_MIME_TYPE = "application/vnd.google-apps.document"


async def get_doc_content(client: DocumentClient, document_id: str) -> str:
    """
    Retrieves the content of a Google Doc as plain text.

    Paragraph text is returned as-is; table rows are rendered as
    tab-separated cell text.

    Returns:
        str: The document title, ID and link, followed by its text.
    """
    logger.info(f"[get_doc_content] Invoked. Document/File ID: '{document_id}'")

    document_id = validate_document_id(document_id)
    doc = await client.query(document_id)

    file_name = doc.get("title", "Untitled Document")
    body_text = extract_document_text(doc)
    table_count = len(find_tables(doc))
    logger.info(f"[get_doc_content] Retrieved '{file_name}': {len(body_text)} chars, {table_count} table(s)")

    header = (
        f'File: "{file_name}" (ID: {document_id}, Type: {GOOGLE_DOC_MIME_TYPE})\n'
        f"Link: {get_document_url(document_id)}\n\n--- CONTENT ---\n"
    )
    return header + body_text
