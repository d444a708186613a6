"""
Table Operation Manager

Materializes the tables a compilation deferred. Inserting a table shifts
every index after it, so each table is handled on its own with a fresh read
of the document between structural changes:

    insertTable -> query -> fill cells (one batch) -> query -> bold header

Tables are processed from the highest anchor down, so a table's insertion
never moves the anchor of a table still waiting.
"""

import logging
from dataclasses import dataclass
from typing import Any

from core.errors import APIError, GDocsMarkdownError, StalePositionError, TableMaterializationError, ValidationError
from core.utils import TransientNetworkError
from gdocs.docs_client import DocumentClient
from gdocs.docs_helpers import create_insert_table_request, create_insert_text_request, create_update_text_style_request
from gdocs.docs_structure import TableLayout, find_tables
from gdocs.markdown_parser import TableDescriptor

logger = logging.getLogger(__name__)


@dataclass
class MaterializationReport:
    tables_inserted: int = 0
    cells_populated: int = 0
    cells_skipped: int = 0
    header_cells_bolded: int = 0


class TableOperationManager:
    """
    High-level manager for table materialization.

    Every layout read from the document is tagged with the current
    generation; every mutation starts a new one. Building requests from a
    layout of an older generation raises `StalePositionError`.
    """

    def __init__(self, client: DocumentClient):
        self.client = client
        self.generation = 0

    async def materialize_tables(self, document_id: str, tables: list[TableDescriptor]) -> MaterializationReport:
        """
        Insert and populate deferred tables.

        The text batch the tables belong to must already be applied.

        Args:
            document_id: Target document.
            tables: Descriptors from a `CompilationResult`, in any order.

        Returns:
            Counts of inserted tables, filled cells, skipped cells and bolded header cells.

        Raises:
            TableMaterializationError: A read or write failed; tables already
                materialized stay in the document.
        """
        for table in tables:
            if table.anchor_offset is None:
                raise ValidationError("Table descriptor has no anchor offset")

        ordered = sorted(tables, key=lambda t: t.anchor_offset, reverse=True)
        report = MaterializationReport()
        logger.info(f"[materialize_tables] Doc={document_id}, {len(ordered)} table(s)")

        for completed, table in enumerate(ordered):
            try:
                await self._materialize_table(document_id, table, report)
            except (GDocsMarkdownError, TransientNetworkError) as e:
                remaining = len(ordered) - completed
                logger.error(
                    f"[materialize_tables] Table at index {table.anchor_offset} failed after "
                    f"{completed} completed table(s): {e}"
                )
                raise TableMaterializationError(
                    f"Failed to materialize table at index {table.anchor_offset}: {e}",
                    tables_completed=completed,
                    tables_remaining=remaining,
                    status_code=getattr(e, "status_code", None),
                ) from e

        logger.info(
            f"[materialize_tables] Done: {report.tables_inserted} table(s), {report.cells_populated} cell(s), "
            f"{report.cells_skipped} skipped, {report.header_cells_bolded} header cell(s) bolded"
        )
        return report

    async def _materialize_table(
        self, document_id: str, table: TableDescriptor, report: MaterializationReport
    ) -> None:
        anchor = table.anchor_offset
        logger.debug(f"Inserting {table.rows}x{table.columns} table at index {anchor}")

        await self._mutate(document_id, [create_insert_table_request(anchor, table.rows, table.columns)])
        report.tables_inserted += 1

        layout = await self._locate_table(document_id, anchor)
        if layout.rows < table.rows or layout.columns < table.columns:
            logger.warning(
                f"Table at index {layout.start_index} is {layout.rows}x{layout.columns}, "
                f"expected {table.rows}x{table.columns}; filling the cells that exist"
            )

        cell_requests, skipped = self._build_cell_requests(layout, table)
        report.cells_skipped += skipped
        if not cell_requests:
            return

        await self._mutate(document_id, cell_requests)
        report.cells_populated += len(cell_requests)

        if not any(table.header_cells):
            return

        layout = await self._locate_table(document_id, anchor)
        bold_requests = self._build_header_bold_requests(layout, table)
        if bold_requests:
            await self._mutate(document_id, bold_requests)
            report.header_cells_bolded += len(bold_requests)

    async def _query(self, document_id: str) -> dict[str, Any]:
        return await self.client.query(document_id)

    async def _mutate(self, document_id: str, requests: list[dict[str, Any]]) -> dict[str, Any]:
        # Positions read before this call are invalid even if it fails part way
        self.generation += 1
        return await self.client.mutate(document_id, requests)

    async def _locate_table(self, document_id: str, anchor: int) -> TableLayout:
        """The first table starting at or after ``anchor``: the one just inserted there."""
        document = await self._query(document_id)
        for layout in find_tables(document, self.generation):
            if layout.start_index >= anchor:
                logger.debug(f"Table for anchor {anchor} found at index {layout.start_index}")
                return layout
        raise APIError(f"No table found at or after index {anchor} after insertTable")

    def _require_fresh(self, layout: TableLayout) -> None:
        if layout.generation != self.generation:
            raise StalePositionError(layout.generation, self.generation)

    def _build_cell_requests(self, layout: TableLayout, table: TableDescriptor) -> tuple[list[dict[str, Any]], int]:
        """
        insertText requests for every non-empty cell, last cell first.

        Inserting from the end keeps every earlier cell's position valid
        within the same batch. Returns the requests and the number of
        non-empty cells missing from the layout.
        """
        self._require_fresh(layout)
        requests: list[dict[str, Any]] = []
        skipped = 0

        for row in reversed(range(table.rows)):
            for column in reversed(range(table.columns)):
                text = table.cells[row][column]
                if not text:
                    continue
                position = layout.cell(row, column)
                if position is None:
                    logger.warning(f"Cell ({row},{column}) missing from table at {layout.start_index}; skipped")
                    skipped += 1
                    continue
                logger.debug(f"Cell ({row},{column}) <- {text!r} at index {position.paragraph_start}")
                requests.append(create_insert_text_request(position.paragraph_start, text))

        return requests, skipped

    def _build_header_bold_requests(self, layout: TableLayout, table: TableDescriptor) -> list[dict[str, Any]]:
        """Bold the text of each non-empty header cell, excluding the cell's trailing newline."""
        self._require_fresh(layout)
        requests: list[dict[str, Any]] = []

        for column, text in enumerate(table.header_cells):
            if not text:
                continue
            position = layout.cell(0, column)
            if position is None:
                continue
            end_index = position.paragraph_end - 1
            if end_index > position.paragraph_start:
                requests.append(
                    create_update_text_style_request(position.paragraph_start, end_index, {"bold": True}, "bold")
                )

        return requests
