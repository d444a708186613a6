"""Unit tests for reading documents.get structures."""

import pytest

from gdocs.docs_structure import extract_document_text, find_tables, get_body_end_index


@pytest.fixture
def doc_with_table(make_fake_doc):
    """'Intro' paragraph followed by an empty 2x2 table inserted at the placeholder (index 7)."""
    doc = make_fake_doc(paragraphs=["Intro\n", "\n"])
    doc.apply({"insertTable": {"location": {"index": 7}, "rows": 2, "columns": 2}})
    return doc


class TestFindTables:
    def test_no_tables(self, fake_doc):
        assert find_tables(fake_doc.render()) == []

    def test_table_positions(self, doc_with_table):
        (layout,) = find_tables(doc_with_table.render())

        assert (layout.start_index, layout.end_index) == (8, 20)
        assert (layout.rows, layout.columns) == (2, 2)
        first = layout.cell(0, 0)
        assert (first.start_index, first.paragraph_start, first.paragraph_end) == (10, 11, 12)
        assert layout.cell(1, 1).paragraph_start == 18

    def test_cell_content_excludes_newline(self, doc_with_table):
        doc_with_table.apply({"insertText": {"location": {"index": 11}, "text": "Name"}})
        (layout,) = find_tables(doc_with_table.render())

        cell = layout.cell(0, 0)
        assert cell.content == "Name"
        assert (cell.paragraph_start, cell.paragraph_end) == (11, 16)

    def test_missing_cell_is_none(self, doc_with_table):
        (layout,) = find_tables(doc_with_table.render())
        assert layout.cell(2, 0) is None
        assert layout.cell(0, 5) is None

    def test_generation_is_recorded(self, doc_with_table):
        (layout,) = find_tables(doc_with_table.render(), generation=4)
        assert layout.generation == 4

    def test_truncated_rows_are_reported(self, doc_with_table):
        doc_with_table.visible_rows = 1
        (layout,) = find_tables(doc_with_table.render())
        assert layout.rows == 1
        assert layout.cell(1, 0) is None


class TestBodyEndIndex:
    def test_empty_document(self, fake_doc):
        assert get_body_end_index(fake_doc.render()) == 2

    def test_missing_body(self):
        assert get_body_end_index({}) == 1

    def test_after_table(self, doc_with_table):
        assert get_body_end_index(doc_with_table.render()) == 21


class TestExtractDocumentText:
    def test_paragraphs_and_table_rows(self, doc_with_table):
        doc_with_table.tables[0][0][0] = "A"
        doc_with_table.tables[0][1][1] = "D"

        text = extract_document_text(doc_with_table.render())
        assert text == "Intro\n\nA\t\n\tD\n\n"
