"""
Markdown to Google Docs Converter

This module provides the `MarkdownToDocsConverter` class that translates Markdown
into the pieces of a Google Docs `batchUpdate`: one plain-text payload, style
operations expressed as ranges into that payload, and deferred table descriptors.

Every handler receives the index where its text will start and returns the text
it produced; the caller advances the cursor by that text's length. Nothing keeps
a shared mutable cursor, so a handler's ranges depend only on its input.

Example:
    >>> converter = MarkdownToDocsConverter()
    >>> result = converter.convert("# Title\\n**bold** text")
    >>> result.text
    'Title\\nbold text\\n'
    >>> [op.to_request() for op in result.operations]  # HEADING_1 on [1,6), bold on [7,11)

Tables cannot be part of the flat payload: inserting one restructures the
document. They are emitted as a one-line placeholder plus a `TableDescriptor`
and materialized afterwards (see `gdocs/managers/table_operation_manager.py`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from core.config import is_smart_typography_enabled
from core.utils import utf16_len
from gdocs.docs_helpers import (
    create_bullet_list_request,
    create_insert_text_request,
    create_update_paragraph_style_request,
    create_update_text_style_request,
    points,
    rgb_color,
)
from gdocs.markdown_tokens import BlockNode, InlineNode, create_parser, parse_blocks
from gdocs.typography import smart_typography as apply_smart_typography

logger = logging.getLogger(__name__)

# Named style mappings for headings (depth 1 -> HEADING_1, etc.)
HEADING_STYLE_MAP: dict[int, str] = {
    1: "HEADING_1",
    2: "HEADING_2",
    3: "HEADING_3",
    4: "HEADING_4",
    5: "HEADING_5",
    6: "HEADING_6",
}

# Bullet list presets for the Google Docs API
BULLET_PRESET_UNORDERED = "BULLET_DISC_CIRCLE_SQUARE"
BULLET_PRESET_ORDERED = "NUMBERED_DECIMAL_NESTED"

# Inline styling constants
INLINE_TEXT_STYLES: dict[str, dict[str, Any]] = {
    "strong": {"bold": True},
    "em": {"italic": True},
    "s": {"strikethrough": True},
}
LINK_COLOR = (0.06, 0.46, 0.88)
CODE_FONT_FAMILY = "Consolas"
CODE_SPAN_BACKGROUND_COLOR = (0.95, 0.95, 0.95)
CODE_BLOCK_FONT_SIZE_PT = 10

# Blockquote styling constants
BLOCKQUOTE_INDENT_PT = 36
BLOCKQUOTE_BORDER_WIDTH_PT = 3
BLOCKQUOTE_BORDER_PADDING_PT = 12
BLOCKQUOTE_BORDER_COLOR = (0.8, 0.8, 0.8)
BLOCKQUOTE_TEXT_COLOR = (0.4, 0.4, 0.4)

# Horizontal rule: the API has no insertHorizontalRule, so a styled run of line characters stands in
HR_CHARACTER = "━"  # ━ BOX DRAWINGS HEAVY HORIZONTAL
HR_WIDTH = 40
HR_COLOR = (0.8, 0.8, 0.8)
HR_FONT_SIZE_PT = 8
HR_SPACING_PT = 6

# Task list checkbox characters (Unicode ballot box symbols)
CHECKBOX_UNCHECKED = "☐"  # U+2610 BALLOT BOX
CHECKBOX_CHECKED = "☑"  # U+2611 BALLOT BOX WITH CHECK

TABLE_PLACEHOLDER = "\n"

# Replacement order matters: &amp; is decoded before &lt;/&gt;
HTML_ENTITIES: list[tuple[str, str]] = [
    ("&#39;", "'"),
    ("&#x27;", "'"),
    ("&quot;", '"'),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&nbsp;", " "),
]

OPERATION_PARAGRAPH_STYLE = "paragraph_style"
OPERATION_TEXT_STYLE = "text_style"
OPERATION_BULLETS = "bullets"


def decode_entities(text: str) -> str:
    """Decode the handful of HTML entities Markdown tokenizers leave in text."""
    for entity, char in HTML_ENTITIES:
        text = text.replace(entity, char)
    return text


@dataclass(frozen=True)
class StyleOperation:
    """
    A style or structure change over the half-open range [start, end).

    Attributes:
        kind: One of OPERATION_PARAGRAPH_STYLE, OPERATION_TEXT_STYLE, OPERATION_BULLETS.
        start: First index covered (destination document coordinates).
        end: Index just past the covered range.
        attributes: The paragraph/text style dict, or {"bulletPreset": ...} for bullets.
    """

    kind: str
    start: int
    end: int
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def fields(self) -> str:
        return ",".join(self.attributes.keys())

    def to_request(self) -> dict[str, Any]:
        if self.kind == OPERATION_BULLETS:
            return create_bullet_list_request(self.start, self.end, self.attributes["bulletPreset"])
        if self.kind == OPERATION_PARAGRAPH_STYLE:
            return create_update_paragraph_style_request(self.start, self.end, self.attributes, self.fields)
        return create_update_text_style_request(self.start, self.end, self.attributes, self.fields)


@dataclass(frozen=True)
class TableDescriptor:
    """
    A table deferred until after the text batch is applied.

    ``cells`` is row-major with the header row first; every row has exactly
    ``columns`` entries. ``anchor_offset`` is the index of the table's
    placeholder newline and is stamped by the document compiler.
    """

    rows: int
    columns: int
    cells: tuple[tuple[str, ...], ...]
    anchor_offset: int | None = None

    @property
    def header_cells(self) -> tuple[str, ...]:
        return self.cells[0] if self.cells else ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "anchorOffset": self.anchor_offset,
            "rows": self.rows,
            "columns": self.columns,
            "cells": [list(row) for row in self.cells],
            "headerCells": list(self.header_cells),
        }


@dataclass
class InlineResult:
    text: str
    operations: list[StyleOperation]


@dataclass
class BlockResult:
    text: str
    operations: list[StyleOperation]
    table: TableDescriptor | None = None


@dataclass
class CompilationResult:
    """
    Output of one compilation pass.

    ``operations`` is already in application order: bullet operations first,
    then every other operation in emission order. Applying paragraph and
    heading styles after bullets keeps the bullet paragraph reset from
    clobbering them.
    """

    text: str
    operations: list[StyleOperation]
    tables: list[TableDescriptor]
    start_index: int = 1

    @property
    def end_index(self) -> int:
        return self.start_index + utf16_len(self.text)

    def requests(self) -> list[dict[str, Any]]:
        """The batchUpdate request list: one insertText, then the style operations."""
        if not self.text:
            return [op.to_request() for op in self.operations]
        return [create_insert_text_request(self.start_index, self.text)] + [
            op.to_request() for op in self.operations
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "startIndex": self.start_index,
            "requests": self.requests(),
            "tables": [table.to_dict() for table in self.tables],
        }


def _text_style(start: int, end: int, style: dict[str, Any]) -> StyleOperation:
    return StyleOperation(OPERATION_TEXT_STYLE, start, end, style)


def _paragraph_style(start: int, end: int, style: dict[str, Any]) -> StyleOperation:
    return StyleOperation(OPERATION_PARAGRAPH_STYLE, start, end, style)


def plain_text(nodes: tuple[InlineNode, ...]) -> str:
    """Concatenate leaf text, preferring parsed children over raw text. Not entity-decoded."""
    parts: list[str] = []
    for node in nodes:
        if node.children:
            parts.append(plain_text(node.children))
        elif node.kind in ("softbreak", "hardbreak"):
            parts.append(" ")
        elif node.kind == "checkbox":
            parts.append(CHECKBOX_CHECKED if node.checked else CHECKBOX_UNCHECKED)
        else:
            parts.append(node.text)
    return "".join(parts)


class MarkdownToDocsConverter:
    """
    Converts Markdown text into a `CompilationResult`.

    The converter itself holds only configuration (the markdown-it parser and
    the typography default), so one instance can be reused for any number of
    conversions.

    Example:
        >>> converter = MarkdownToDocsConverter()
        >>> result = converter.convert("- a\\n- b")
        >>> result.text
        'a\\nb\\n'
        >>> result.operations[0].to_request()["createParagraphBullets"]["range"]
        {'startIndex': 1, 'endIndex': 4}
    """

    def __init__(self, smart_typography: bool | None = None) -> None:
        """
        Args:
            smart_typography: Default for the typography filter. None defers to
                GDOCS_SMART_TYPOGRAPHY (see core.config).
        """
        self.md = create_parser()
        self.smart_typography = smart_typography

    def convert(
        self, markdown_text: str, start_index: int = 1, smart_typography: bool | None = None
    ) -> CompilationResult:
        """
        Convert Markdown text to a compilation result.

        Args:
            markdown_text: The Markdown string to convert.
            start_index: The index the payload will be inserted at (1-based).
            smart_typography: Per-call override for the typography filter.
        """
        if smart_typography is None:
            smart_typography = self.smart_typography
        if smart_typography is None:
            smart_typography = is_smart_typography_enabled()

        source = apply_smart_typography(markdown_text) if smart_typography else markdown_text
        blocks = parse_blocks(source, self.md)
        return self.compile_blocks(blocks, start_index)

    def compile_blocks(self, blocks: tuple[BlockNode, ...], start_index: int = 1) -> CompilationResult:
        """Run the block handlers over ``blocks`` with a cursor starting at ``start_index``."""
        text_parts: list[str] = []
        operations: list[StyleOperation] = []
        tables: list[TableDescriptor] = []
        cursor = start_index

        for block in blocks:
            result = self._process_block(block, cursor)
            text_parts.append(result.text)
            operations.extend(result.operations)
            if result.table is not None:
                tables.append(replace(result.table, anchor_offset=cursor))
            cursor += utf16_len(result.text)

        bullet_operations = [op for op in operations if op.kind == OPERATION_BULLETS]
        other_operations = [op for op in operations if op.kind != OPERATION_BULLETS]

        text = "".join(text_parts)
        logger.debug(
            f"Compiled {len(blocks)} block(s): {utf16_len(text)} chars, {len(operations)} operation(s), "
            f"{len(tables)} table(s), cursor {start_index} -> {cursor}"
        )
        return CompilationResult(
            text=text,
            operations=bullet_operations + other_operations,
            tables=tables,
            start_index=start_index,
        )

    def _process_block(self, block: BlockNode, start_index: int) -> BlockResult:
        """Dispatch a block node to the handler for its kind."""
        if block.kind == "heading":
            return self._process_heading(block, start_index)
        elif block.kind == "paragraph":
            return self._process_paragraph(block, start_index)
        elif block.kind == "list":
            return self._process_list(block, start_index)
        elif block.kind == "table":
            return self._process_table(block, start_index)
        elif block.kind == "code":
            return self._process_code_block(block, start_index)
        elif block.kind == "blockquote":
            return self._process_blockquote(block, start_index)
        elif block.kind == "hr":
            return self._process_horizontal_rule(start_index)

        return self._process_unknown_block(block)

    def _process_unknown_block(self, block: BlockNode) -> BlockResult:
        """Unsupported blocks (raw HTML and the like) degrade to unstyled lines."""
        lines = self._block_plain_lines(block)
        logger.debug(f"Unsupported block kind {block.kind!r}: {len(lines)} plain line(s)")
        return BlockResult(text="".join(decode_entities(line) + "\n" for line in lines), operations=[])

    def _process_inline(self, nodes: tuple[InlineNode, ...], start_index: int) -> InlineResult:
        """
        Resolve inline nodes into text and style operations.

        Styled containers resolve their children first at the current cursor,
        then wrap exactly the text those children produced, so nested styles
        each get their own tight range.
        """
        parts: list[str] = []
        operations: list[StyleOperation] = []
        cursor = start_index

        for node in nodes:
            if node.kind in INLINE_TEXT_STYLES:
                inner = self._process_inline(node.children, cursor)
                length = utf16_len(inner.text)
                operations.extend(inner.operations)
                if length:
                    operations.append(_text_style(cursor, cursor + length, dict(INLINE_TEXT_STYLES[node.kind])))
                parts.append(inner.text)
                cursor += length
                continue

            if node.kind == "link":
                text = decode_entities(plain_text(node.children) if node.children else node.text)
                length = utf16_len(text)
                if length and node.href:
                    operations.append(
                        _text_style(
                            cursor,
                            cursor + length,
                            {
                                "link": {"url": node.href},
                                "foregroundColor": rgb_color(*LINK_COLOR),
                                "underline": True,
                            },
                        )
                    )
            elif node.kind == "codespan":
                text = decode_entities(node.text)
                length = utf16_len(text)
                if length:
                    operations.append(
                        _text_style(
                            cursor,
                            cursor + length,
                            {
                                "weightedFontFamily": {"fontFamily": CODE_FONT_FAMILY},
                                "backgroundColor": rgb_color(*CODE_SPAN_BACKGROUND_COLOR),
                            },
                        )
                    )
            elif node.kind == "text":
                text = decode_entities(node.text)
            elif node.kind == "softbreak":
                # Soft line breaks become spaces in Google Docs
                text = " "
            elif node.kind == "hardbreak":
                text = "\n"
            elif node.kind == "checkbox":
                text = CHECKBOX_CHECKED if node.checked else CHECKBOX_UNCHECKED
            elif node.children:
                logger.debug(f"Unsupported inline kind {node.kind!r}: using its children")
                inner = self._process_inline(node.children, cursor)
                operations.extend(inner.operations)
                text = inner.text
            else:
                logger.debug(f"Unsupported inline kind {node.kind!r}: using raw text")
                text = decode_entities(node.text)

            parts.append(text)
            cursor += utf16_len(text)

        return InlineResult(text="".join(parts), operations=operations)

    def _process_heading(self, block: BlockNode, start_index: int) -> BlockResult:
        """Heading text plus newline, styled HEADING_n over the text (newline excluded)."""
        level = min(max(block.depth, 1), len(HEADING_STYLE_MAP))
        if level != block.depth:
            logger.warning(f"Heading depth {block.depth} out of range, clamped to {level}")

        inline = self._process_inline(block.inline, start_index)
        text = inline.text + "\n"
        end_index = start_index + utf16_len(text) - 1

        operations: list[StyleOperation] = []
        if end_index > start_index:
            operations.append(_paragraph_style(start_index, end_index, {"namedStyleType": HEADING_STYLE_MAP[level]}))
            logger.debug(f"Heading {HEADING_STYLE_MAP[level]} on range [{start_index}, {end_index})")
        operations.extend(inline.operations)
        return BlockResult(text=text, operations=operations)

    def _process_paragraph(self, block: BlockNode, start_index: int) -> BlockResult:
        inline = self._process_inline(block.inline, start_index)
        return BlockResult(text=inline.text + "\n", operations=inline.operations)

    def _process_list(self, block: BlockNode, start_index: int) -> BlockResult:
        """
        One paragraph per item, bulleted as a whole.

        Each item is resolved at the running cursor, after the items before it.
        Nested lists are flattened into the same range, one line per item.
        """
        parts: list[str] = []
        operations: list[StyleOperation] = []
        cursor = start_index

        for item in block.items:
            for line in self._list_item_lines(item):
                inline = self._process_inline(line, cursor)
                line_text = inline.text + "\n"
                parts.append(line_text)
                operations.extend(inline.operations)
                cursor += utf16_len(line_text)

        text = "".join(parts)
        end_index = start_index + utf16_len(text) - 1
        if end_index > start_index:
            preset = BULLET_PRESET_ORDERED if block.ordered else BULLET_PRESET_UNORDERED
            operations.append(StyleOperation(OPERATION_BULLETS, start_index, end_index, {"bulletPreset": preset}))
            logger.debug(f"Bullets {preset} on range [{start_index}, {end_index})")
        return BlockResult(text=text, operations=operations)

    def _list_item_lines(self, item: tuple[BlockNode, ...]) -> list[tuple[InlineNode, ...]]:
        """Flatten one list item into lines of inline content."""
        lines: list[tuple[InlineNode, ...]] = []
        current: list[InlineNode] = []

        for child in item:
            if child.kind in ("paragraph", "heading"):
                if current:
                    current.append(InlineNode(kind="text", text=" "))
                current.extend(child.inline)
            elif child.kind == "list":
                if current:
                    lines.append(tuple(current))
                    current = []
                for nested_item in child.items:
                    lines.extend(self._list_item_lines(nested_item))
            else:
                if current:
                    lines.append(tuple(current))
                    current = []
                lines.extend((InlineNode(kind="text", text=line),) for line in self._block_plain_lines(child))

        if current or not lines:
            lines.append(tuple(current))
        return lines

    def _block_plain_lines(self, block: BlockNode) -> list[str]:
        """Unstyled text of a block, one entry per output paragraph."""
        if block.kind in ("paragraph", "heading"):
            return [plain_text(block.inline)]
        if block.kind == "code":
            return [block.text.removesuffix("\n")]
        if block.kind == "list":
            return [plain_text(line) for item in block.items for line in self._list_item_lines(item)]
        if block.kind == "table":
            return [" | ".join(plain_text(cell) for cell in row) for row in (block.header, *block.rows)]
        if block.children:
            return [line for child in block.children for line in self._block_plain_lines(child)]
        text = block.text.rstrip("\n")
        return text.split("\n") if text else []

    def _process_blockquote(self, block: BlockNode, start_index: int) -> BlockResult:
        """
        Blockquote children as plain lines with an indent, left border and grey text.

        Inline styling inside the quote is not preserved.
        """
        lines = [line for child in block.children for line in self._block_plain_lines(child)]
        text = "".join(decode_entities(line) + "\n" for line in lines)
        end_index = start_index + utf16_len(text) - 1

        operations: list[StyleOperation] = []
        if end_index > start_index:
            operations.append(
                _paragraph_style(
                    start_index,
                    end_index,
                    {
                        "indentStart": points(BLOCKQUOTE_INDENT_PT),
                        "borderLeft": {
                            "color": rgb_color(*BLOCKQUOTE_BORDER_COLOR),
                            "width": points(BLOCKQUOTE_BORDER_WIDTH_PT),
                            "padding": points(BLOCKQUOTE_BORDER_PADDING_PT),
                            "dashStyle": "SOLID",
                        },
                    },
                )
            )
            operations.append(
                _text_style(start_index, end_index, {"foregroundColor": rgb_color(*BLOCKQUOTE_TEXT_COLOR)})
            )
            logger.debug(f"Blockquote on range [{start_index}, {end_index})")
        return BlockResult(text=text, operations=operations)

    def _process_code_block(self, block: BlockNode, start_index: int) -> BlockResult:
        """Literal code text in a monospace font; the trailing newline is not styled."""
        code = block.text.removesuffix("\n")
        end_index = start_index + utf16_len(code)

        operations: list[StyleOperation] = []
        if end_index > start_index:
            operations.append(
                _text_style(
                    start_index,
                    end_index,
                    {
                        "weightedFontFamily": {"fontFamily": CODE_FONT_FAMILY},
                        "fontSize": points(CODE_BLOCK_FONT_SIZE_PT),
                    },
                )
            )
            logger.debug(f"Code block: {end_index - start_index} chars, range [{start_index}, {end_index})")
        return BlockResult(text=code + "\n", operations=operations)

    def _process_horizontal_rule(self, start_index: int) -> BlockResult:
        line = HR_CHARACTER * HR_WIDTH
        end_index = start_index + utf16_len(line)
        operations = [
            _text_style(
                start_index,
                end_index,
                {"foregroundColor": rgb_color(*HR_COLOR), "fontSize": points(HR_FONT_SIZE_PT)},
            ),
            _paragraph_style(
                start_index,
                end_index,
                {
                    "alignment": "CENTER",
                    "spaceAbove": points(HR_SPACING_PT),
                    "spaceBelow": points(HR_SPACING_PT),
                },
            ),
        ]
        return BlockResult(text=line + "\n", operations=operations)

    def _process_table(self, block: BlockNode, start_index: int) -> BlockResult:
        """
        Emit a placeholder line and describe the table for later materialization.

        Cell content is flattened to plain text; inline styling inside cells is
        not carried over.
        """
        columns = len(block.header) or max((len(row) for row in block.rows), default=0)
        if columns == 0:
            logger.warning("Table without columns skipped")
            return BlockResult(text="", operations=[])

        cells: list[tuple[str, ...]] = []
        for row in (block.header, *block.rows):
            texts = [decode_entities(plain_text(cell)) for cell in row[:columns]]
            texts.extend("" for _ in range(columns - len(texts)))
            cells.append(tuple(texts))

        table = TableDescriptor(rows=len(cells), columns=columns, cells=tuple(cells))
        logger.debug(f"Table deferred: {table.rows}x{table.columns} at index {start_index}")
        return BlockResult(text=TABLE_PLACEHOLDER, operations=[], table=table)


def generate_doc_requests(
    markdown_text: str, insert_at: int = 1, smart_typography: bool | None = None
) -> CompilationResult:
    """Convenience wrapper: compile ``markdown_text`` for insertion at ``insert_at``."""
    return MarkdownToDocsConverter().convert(markdown_text, start_index=insert_at, smart_typography=smart_typography)
