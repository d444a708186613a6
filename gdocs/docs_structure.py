"""
Google Docs document structure helpers.

Reads `documents.get` responses: top-level table layouts with their cell
positions, the body end index, and plain text for display.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellPosition:
    """
    Location of one table cell.

    ``paragraph_start`` is where text inserted into the cell lands;
    ``paragraph_end`` is the end of the cell's first paragraph (its newline included).
    """

    row: int
    column: int
    start_index: int
    end_index: int
    paragraph_start: int
    paragraph_end: int
    content: str = ""


@dataclass(frozen=True)
class TableLayout:
    """A table as found in one query; ``generation`` identifies that query."""

    start_index: int
    end_index: int
    rows: int
    columns: int
    cells: tuple[tuple[CellPosition, ...], ...]
    generation: int = 0

    def cell(self, row: int, column: int) -> CellPosition | None:
        if row >= len(self.cells) or column >= len(self.cells[row]):
            return None
        return self.cells[row][column]


def _body_content(document: dict[str, Any]) -> list[dict[str, Any]]:
    return document.get("body", {}).get("content", [])


def _paragraph_text(paragraph: dict[str, Any]) -> str:
    return "".join(
        element.get("textRun", {}).get("content", "") for element in paragraph.get("elements", [])
    )


def _cell_position(row_idx: int, col_idx: int, cell: dict[str, Any]) -> CellPosition:
    start_index = cell.get("startIndex", 0)
    end_index = cell.get("endIndex", start_index)
    content = cell.get("content", [])

    if content:
        first = content[0]
        paragraph_start = first.get("startIndex", start_index + 1)
        paragraph_end = first.get("endIndex", paragraph_start + 1)
    else:
        paragraph_start = start_index + 1
        paragraph_end = paragraph_start + 1

    text = "".join(_paragraph_text(element["paragraph"]) for element in content if "paragraph" in element)
    return CellPosition(
        row=row_idx,
        column=col_idx,
        start_index=start_index,
        end_index=end_index,
        paragraph_start=paragraph_start,
        paragraph_end=paragraph_end,
        content=text.rstrip("\n"),
    )


def find_tables(document: dict[str, Any], generation: int = 0) -> list[TableLayout]:
    """
    Collect the top-level tables of a document in document order.

    Args:
        document: A `documents.get` response.
        generation: Tag stored on every layout so stale positions can be detected.
    """
    tables: list[TableLayout] = []

    for element in _body_content(document):
        if "table" not in element:
            continue

        table = element["table"]
        cells = tuple(
            tuple(
                _cell_position(row_idx, col_idx, cell)
                for col_idx, cell in enumerate(row.get("tableCells", []))
            )
            for row_idx, row in enumerate(table.get("tableRows", []))
        )
        columns = table.get("columns") or max((len(row) for row in cells), default=0)
        tables.append(
            TableLayout(
                start_index=element.get("startIndex", 0),
                end_index=element.get("endIndex", 0),
                rows=len(cells),
                columns=columns,
                cells=cells,
                generation=generation,
            )
        )

    logger.debug(f"Found {len(tables)} table(s) at generation {generation}")
    return tables


def get_body_end_index(document: dict[str, Any]) -> int:
    """End index of the body; the last paragraph's newline sits at end - 1."""
    content = _body_content(document)
    if not content:
        return 1
    return content[-1].get("endIndex", 1)


def extract_document_text(document: dict[str, Any]) -> str:
    """Plain text of body paragraphs, with table cells as tab-separated rows."""
    lines: list[str] = []

    for element in _body_content(document):
        if "paragraph" in element:
            lines.append(_paragraph_text(element["paragraph"]))
        elif "table" in element:
            for row in element["table"].get("tableRows", []):
                cells = [_cell_position(0, 0, cell).content for cell in row.get("tableCells", [])]
                lines.append("\t".join(cells) + "\n")

    return "".join(lines)
