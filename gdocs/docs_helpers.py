"""
Google Docs request builders.

Small helpers that render the `batchUpdate` request dictionaries used by the
Markdown compiler, the table materializer and the writing operations.
"""

from typing import Any


def rgb_color(red: float, green: float, blue: float) -> dict[str, Any]:
    """Wrap an RGB triple (0.0-1.0) in the OptionalColor shape the API expects."""
    return {"color": {"rgbColor": {"red": red, "green": green, "blue": blue}}}


def points(magnitude: float) -> dict[str, Any]:
    """A Dimension in points."""
    return {"magnitude": magnitude, "unit": "PT"}


def create_insert_text_request(index: int, text: str) -> dict[str, Any]:
    """
    Create an insertText request for Google Docs API.

    Args:
        index: Position to insert text
        text: Text to insert

    Returns:
        Dictionary representing the insertText request
    """
    return {
        "insertText": {
            "location": {"index": index},
            "text": text,
        }
    }


def create_delete_range_request(start_index: int, end_index: int) -> dict[str, Any]:
    """
    Create a deleteContentRange request for Google Docs API.

    Args:
        start_index: Start position of content to delete
        end_index: End position of content to delete

    Returns:
        Dictionary representing the deleteContentRange request
    """
    return {
        "deleteContentRange": {
            "range": {
                "startIndex": start_index,
                "endIndex": end_index,
            }
        }
    }


def create_update_text_style_request(
    start_index: int, end_index: int, text_style: dict[str, Any], fields: str | None = None
) -> dict[str, Any]:
    """
    Create an updateTextStyle request.

    The field mask defaults to the top-level keys of ``text_style``.
    """
    return {
        "updateTextStyle": {
            "range": {"startIndex": start_index, "endIndex": end_index},
            "textStyle": text_style,
            "fields": fields or ",".join(text_style.keys()),
        }
    }


def create_update_paragraph_style_request(
    start_index: int, end_index: int, paragraph_style: dict[str, Any], fields: str | None = None
) -> dict[str, Any]:
    """Create an updateParagraphStyle request; the field mask defaults to the style keys."""
    return {
        "updateParagraphStyle": {
            "range": {"startIndex": start_index, "endIndex": end_index},
            "paragraphStyle": paragraph_style,
            "fields": fields or ",".join(paragraph_style.keys()),
        }
    }


def create_bullet_list_request(start_index: int, end_index: int, bullet_preset: str) -> dict[str, Any]:
    """Create a createParagraphBullets request for every paragraph touching the range."""
    return {
        "createParagraphBullets": {
            "range": {"startIndex": start_index, "endIndex": end_index},
            "bulletPreset": bullet_preset,
        }
    }


def create_insert_table_request(index: int, rows: int, columns: int) -> dict[str, Any]:
    """
    Create an insertTable request for Google Docs API.

    Args:
        index: Position to insert table
        rows: Number of rows
        columns: Number of columns

    Returns:
        Dictionary representing the insertTable request
    """
    return {
        "insertTable": {
            "location": {"index": index},
            "rows": rows,
            "columns": columns,
        }
    }
