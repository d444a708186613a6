"""Shared pytest fixtures for gdocs-markdown tests."""

import copy
from unittest.mock import MagicMock

import pytest

from core.errors import APIError, ResourceNotFoundError

STYLE_REQUESTS = ("updateTextStyle", "updateParagraphStyle", "createParagraphBullets")


class FakeTable:
    """A table whose cells each hold a single paragraph (stored without its newline)."""

    def __init__(self, rows: int, columns: int):
        self.cells = [["" for _ in range(columns)] for _ in range(rows)]


class FakeGoogleDoc:
    """
    In-memory Google Doc implementing the DocumentClient interface.

    Index layout follows the Docs API: the section break occupies [0, 1), body
    paragraphs follow from index 1, and a table takes one index for itself,
    one per row and one per cell before the cell's paragraph, plus one at its
    end. Text is assumed to be BMP-only, so one character is one index.

    Style requests are recorded with the text they covered when applied.
    A batch is atomic: if any request fails, none of it is kept.
    """

    def __init__(self, document_id: str = "doc-123", title: str = "Test Doc", paragraphs=None):
        self.document_id = document_id
        self.title = title
        self.elements: list = list(paragraphs or ["\n"])
        self.styles: list[dict] = []
        self.batches: list[list[dict]] = []
        self.calls: list[str] = []
        self.mutate_count = 0
        self.fail_on_mutate: int | None = None
        self.visible_rows: int | None = None
        self.visible_columns: int | None = None

    # DocumentClient

    async def query(self, document_id):
        self.calls.append("query")
        self._check_id(document_id)
        return self.render()

    async def mutate(self, document_id, requests):
        self.calls.append("mutate")
        self._check_id(document_id)
        self.mutate_count += 1
        if self.fail_on_mutate == self.mutate_count:
            raise APIError("Simulated backend failure", status_code=500)

        snapshot = (copy.deepcopy(self.elements), list(self.styles))
        try:
            for request in requests:
                self.apply(request)
        except APIError:
            self.elements, self.styles = snapshot
            raise
        self.batches.append(copy.deepcopy(requests))
        return {"documentId": document_id, "replies": [{} for _ in requests]}

    async def create(self, title):
        self.calls.append("create")
        self.title = title
        self.elements = ["\n"]
        return {"documentId": self.document_id, "title": title}

    def _check_id(self, document_id):
        if document_id != self.document_id:
            raise ResourceNotFoundError(f"Requested entity was not found: {document_id}", status_code=404)

    # Inspection helpers

    @property
    def text(self) -> str:
        """Top-level paragraph text, tables omitted."""
        return "".join(element for element in self.elements if isinstance(element, str))

    @property
    def tables(self) -> list[list[list[str]]]:
        return [element.cells for element in self.elements if isinstance(element, FakeTable)]

    @property
    def end_index(self) -> int:
        return self._layout()[-1][2]

    def styles_of(self, request_name: str) -> list[dict]:
        return [style for style in self.styles if style["request"] == request_name]

    # Index arithmetic

    def _layout(self):
        """(element, start, end, rows) per element; rows holds (row_start, row_end, cells) for tables."""
        layout = []
        pos = 1
        for element in self.elements:
            if isinstance(element, str):
                layout.append((element, pos, pos + len(element), None))
                pos += len(element)
                continue

            start = pos
            pos += 1
            rows = []
            for row in element.cells:
                row_start = pos
                pos += 1
                cells = []
                for content in row:
                    cell_start = pos
                    pos += 1
                    paragraph_end = pos + len(content) + 1
                    cells.append((cell_start, pos, paragraph_end))
                    pos = paragraph_end
                rows.append((row_start, pos, cells))
            pos += 1
            layout.append((element, start, pos, rows))
        return layout

    def text_at(self, start: int, end: int) -> str:
        chars = []
        for element, el_start, _, rows in self._layout():
            if rows is None:
                chars.extend(ch for i, ch in enumerate(element) if start <= el_start + i < end)
                continue
            for r, (_, _, cells) in enumerate(rows):
                for c, (_, paragraph_start, _) in enumerate(cells):
                    content = element.cells[r][c] + "\n"
                    chars.extend(ch for i, ch in enumerate(content) if start <= paragraph_start + i < end)
        return "".join(chars)

    def render(self) -> dict:
        """A documents.get-shaped structure."""
        content = [{"startIndex": 0, "endIndex": 1, "sectionBreak": {}}]
        for element, start, end, rows in self._layout():
            if rows is None:
                content.append({"startIndex": start, "endIndex": end, "paragraph": _paragraph(start, element)})
                continue

            table_rows = []
            for r, (row_start, row_end, cells) in enumerate(rows[: self.visible_rows]):
                table_cells = []
                for c, (cell_start, paragraph_start, paragraph_end) in enumerate(cells[: self.visible_columns]):
                    table_cells.append(
                        {
                            "startIndex": cell_start,
                            "endIndex": paragraph_end,
                            "content": [
                                {
                                    "startIndex": paragraph_start,
                                    "endIndex": paragraph_end,
                                    "paragraph": _paragraph(paragraph_start, element.cells[r][c] + "\n"),
                                }
                            ],
                        }
                    )
                table_rows.append({"startIndex": row_start, "endIndex": row_end, "tableCells": table_cells})
            content.append(
                {
                    "startIndex": start,
                    "endIndex": end,
                    "table": {
                        "rows": len(table_rows),
                        "columns": len(table_rows[0]["tableCells"]) if table_rows else 0,
                        "tableRows": table_rows,
                    },
                }
            )
        return {"documentId": self.document_id, "title": self.title, "body": {"content": content}}

    # Request application

    def apply(self, request: dict):
        name, body = next(iter(request.items()))
        if name == "insertText":
            self._insert_text(body["location"]["index"], body["text"])
        elif name == "insertTable":
            self._insert_table(body["location"]["index"], body["rows"], body["columns"])
        elif name == "deleteContentRange":
            self._delete(body["range"]["startIndex"], body["range"]["endIndex"])
        elif name in STYLE_REQUESTS:
            start, end = body["range"]["startIndex"], body["range"]["endIndex"]
            if not 1 <= start < end <= self.end_index:
                raise APIError(f"Invalid range [{start}, {end}) for {name}", status_code=400)
            style = body.get("textStyle") or body.get("paragraphStyle") or {"bulletPreset": body.get("bulletPreset")}
            self.styles.append(
                {"request": name, "start": start, "end": end, "text": self.text_at(start, end), "style": style}
            )
        else:
            raise APIError(f"Unsupported request: {name}", status_code=400)

    def _insert_text(self, index: int, text: str):
        if not text:
            raise APIError("Insert text cannot be empty", status_code=400)
        for idx, (element, start, end, rows) in enumerate(self._layout()):
            if rows is None:
                if start <= index < end:
                    offset = index - start
                    self.elements[idx] = element[:offset] + text + element[offset:]
                    self._normalize()
                    return
                continue
            for r, (_, _, cells) in enumerate(rows):
                for c, (_, paragraph_start, paragraph_end) in enumerate(cells):
                    if paragraph_start <= index < paragraph_end:
                        offset = index - paragraph_start
                        current = element.cells[r][c]
                        element.cells[r][c] = current[:offset] + text + current[offset:]
                        return
        raise APIError(f"Index {index} must be inside an existing paragraph", status_code=400)

    def _insert_table(self, index: int, rows: int, columns: int):
        for idx, (element, start, end, cells) in enumerate(self._layout()):
            if cells is None and start <= index < end:
                offset = index - start
                self.elements[idx : idx + 1] = [element[:offset] + "\n", FakeTable(rows, columns), element[offset:]]
                return
        raise APIError(f"Cannot insert a table at index {index}", status_code=400)

    def _delete(self, start: int, end: int):
        if not 1 <= start < end < self.end_index:
            raise APIError(f"Invalid delete range [{start}, {end})", status_code=400)
        kept = []
        for element, el_start, el_end, rows in self._layout():
            if rows is None:
                remaining = "".join(ch for i, ch in enumerate(element) if not start <= el_start + i < end)
                if remaining:
                    kept.append(remaining)
            elif start <= el_start and el_end <= end:
                continue
            elif el_end <= start or el_start >= end:
                kept.append(element)
            else:
                raise APIError("Cannot delete part of a table", status_code=400)
        self.elements = kept
        self._normalize()

    def _normalize(self):
        """Re-split runs of paragraph text so every paragraph ends with exactly one newline."""
        merged = []
        buffer = ""
        for element in self.elements + [None]:
            if isinstance(element, str):
                buffer += element
                continue
            if buffer:
                pieces = buffer.split("\n")
                if pieces[-1]:
                    raise APIError("Paragraph would lose its newline", status_code=400)
                merged.extend(piece + "\n" for piece in pieces[:-1])
                buffer = ""
            if element is not None:
                merged.append(element)
        self.elements = merged


def _paragraph(start: int, text: str) -> dict:
    return {"elements": [{"startIndex": start, "endIndex": start + len(text), "textRun": {"content": text}}]}


@pytest.fixture
def fake_doc():
    """An empty in-memory Google Doc."""
    return FakeGoogleDoc()


@pytest.fixture
def mock_docs_service():
    """Create a mock Google Docs service."""
    service = MagicMock()
    service.documents.return_value.get.return_value.execute.return_value = {
        "documentId": "doc-123",
        "title": "Test Doc",
        "body": {"content": [{"startIndex": 1, "endIndex": 2, "paragraph": _paragraph(1, "\n")}]},
    }
    service.documents.return_value.batchUpdate.return_value.execute.return_value = {"replies": []}
    service.documents.return_value.create.return_value.execute.return_value = {
        "documentId": "doc-new",
        "title": "New Doc",
    }
    return service


@pytest.fixture
def env_override(monkeypatch):
    """Helper to override environment variables."""

    def _override(**kwargs):
        for key, value in kwargs.items():
            if value is None:
                monkeypatch.delenv(key, raising=False)
            else:
                monkeypatch.setenv(key, value)

    return _override


@pytest.fixture
def make_fake_doc():
    """Factory for fake docs with initial paragraphs, e.g. make_fake_doc(paragraphs=["Hello\n"])."""

    def _make(**kwargs):
        return FakeGoogleDoc(**kwargs)

    return _make
