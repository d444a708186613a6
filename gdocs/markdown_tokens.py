"""
Markdown token tree.

markdown-it-py emits a flat stream of block tokens with ``*_open``/``*_close``
pairs and flat inline children. The compiler wants a tree instead, so this
module folds the stream into immutable `BlockNode`/`InlineNode` values:

    paragraph(inline=(text("Normal "), strong(text("bold")), text(" normal")))

Node kinds are plain strings. Kinds the compiler does not know about are kept
(with their children and raw text) so it can degrade to plain text instead of
failing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from markdown_it import MarkdownIt
from mdit_py_plugins.tasklists import tasklists_plugin

if TYPE_CHECKING:
    from markdown_it.token import Token

logger = logging.getLogger(__name__)

# markdown-it inline container types mapped onto node kinds
INLINE_CONTAINER_KINDS: dict[str, str] = {
    "strong_open": "strong",
    "em_open": "em",
    "s_open": "s",
    "link_open": "link",
}

TASK_CHECKBOX_CLASS = 'class="task-list-item-checkbox"'


@dataclass(frozen=True)
class InlineNode:
    """A styling construct or text leaf inside a block."""

    kind: str
    text: str = ""
    children: tuple[InlineNode, ...] = ()
    href: str | None = None
    checked: bool = False


@dataclass(frozen=True)
class BlockNode:
    """
    A top-level (or nested) block construct.

    Only the fields relevant to ``kind`` are populated:
        heading: depth, inline
        paragraph: inline
        list: ordered, items (one tuple of child blocks per item)
        table: header (cells), rows (rows of cells); a cell is a tuple of inline nodes
        code: text
        blockquote: children
    """

    kind: str
    inline: tuple[InlineNode, ...] = ()
    depth: int = 0
    ordered: bool = False
    items: tuple[tuple[BlockNode, ...], ...] = ()
    header: tuple[tuple[InlineNode, ...], ...] = ()
    rows: tuple[tuple[tuple[InlineNode, ...], ...], ...] = ()
    text: str = ""
    children: tuple[BlockNode, ...] = ()


def create_parser() -> MarkdownIt:
    """CommonMark base with GFM tables, strikethrough and task list checkboxes."""
    return MarkdownIt("commonmark").enable("table").enable("strikethrough").use(tasklists_plugin)


def parse_blocks(markdown_text: str, md: MarkdownIt | None = None) -> tuple[BlockNode, ...]:
    """
    Tokenize Markdown and fold the token stream into a tuple of block nodes.

    Args:
        markdown_text: The Markdown source (already typography-filtered if desired).
        md: Optional preconfigured parser; `create_parser()` is used otherwise.
    """
    parser = md or create_parser()
    tokens: list[Token] = parser.parse(markdown_text)
    blocks, _ = _fold_blocks(tokens, 0, None)
    return blocks


def _fold_blocks(tokens: list[Token], pos: int, close_type: str | None) -> tuple[tuple[BlockNode, ...], int]:
    """Fold block tokens from ``pos`` until ``close_type`` (or the end); return blocks and the next position."""
    blocks: list[BlockNode] = []

    while pos < len(tokens):
        token = tokens[pos]
        logger.debug(f"Token: type={token.type}, tag={token.tag}, nesting={token.nesting}")

        if close_type is not None and token.type == close_type:
            return tuple(blocks), pos + 1

        if token.type == "heading_open":
            inline, pos = _fold_inline_container(tokens, pos + 1, "heading_close")
            blocks.append(BlockNode(kind="heading", depth=_heading_depth(token.tag), inline=inline))
        elif token.type == "paragraph_open":
            inline, pos = _fold_inline_container(tokens, pos + 1, "paragraph_close")
            blocks.append(BlockNode(kind="paragraph", inline=inline))
        elif token.type in ("bullet_list_open", "ordered_list_open"):
            list_close = token.type.replace("_open", "_close")
            items, pos = _fold_list_items(tokens, pos + 1, list_close)
            blocks.append(BlockNode(kind="list", ordered=token.type == "ordered_list_open", items=items))
        elif token.type == "blockquote_open":
            children, pos = _fold_blocks(tokens, pos + 1, "blockquote_close")
            blocks.append(BlockNode(kind="blockquote", children=children))
        elif token.type in ("fence", "code_block"):
            blocks.append(BlockNode(kind="code", text=token.content))
            pos += 1
        elif token.type == "hr":
            blocks.append(BlockNode(kind="hr"))
            pos += 1
        elif token.type == "table_open":
            block, pos = _fold_table(tokens, pos + 1)
            blocks.append(block)
        elif token.nesting == 1:
            # Unknown container: keep its children so callers can degrade gracefully
            children, pos = _fold_blocks(tokens, pos + 1, token.type.replace("_open", "_close"))
            blocks.append(BlockNode(kind=token.type.removesuffix("_open"), children=children))
        elif token.nesting == -1:
            logger.debug(f"Unmatched close token skipped: {token.type}")
            pos += 1
        else:
            blocks.append(BlockNode(kind=token.type, text=token.content))
            pos += 1

    return tuple(blocks), pos


def _heading_depth(tag: str) -> int:
    try:
        return int(tag.lstrip("hH"))
    except ValueError:
        logger.warning(f"Unrecognized heading tag: {tag!r}")
        return 1


def _fold_inline_container(tokens: list[Token], pos: int, close_type: str) -> tuple[tuple[InlineNode, ...], int]:
    """Collect the inline content between an ``*_open`` token and its ``close_type``."""
    inline: list[InlineNode] = []
    while pos < len(tokens) and tokens[pos].type != close_type:
        if tokens[pos].type == "inline":
            inline.extend(fold_inline(tokens[pos].children or []))
        pos += 1
    return tuple(inline), pos + 1


def _fold_list_items(tokens: list[Token], pos: int, list_close: str) -> tuple[tuple[tuple[BlockNode, ...], ...], int]:
    items: list[tuple[BlockNode, ...]] = []
    while pos < len(tokens):
        token = tokens[pos]
        if token.type == list_close:
            return tuple(items), pos + 1
        if token.type == "list_item_open":
            children, pos = _fold_blocks(tokens, pos + 1, "list_item_close")
            items.append(children)
        else:
            pos += 1
    return tuple(items), pos


def _fold_table(tokens: list[Token], pos: int) -> tuple[BlockNode, int]:
    """Fold thead/tbody rows into header cells and body rows."""
    header: list[tuple[InlineNode, ...]] = []
    rows: list[tuple[tuple[InlineNode, ...], ...]] = []
    current_row: list[tuple[InlineNode, ...]] = []
    in_head = False

    while pos < len(tokens):
        token = tokens[pos]
        if token.type == "table_close":
            pos += 1
            break
        if token.type == "thead_open":
            in_head = True
        elif token.type == "thead_close":
            in_head = False
        elif token.type == "tr_open":
            current_row = []
        elif token.type == "tr_close":
            if in_head:
                header = current_row
            else:
                rows.append(tuple(current_row))
            current_row = []
        elif token.type == "inline":
            current_row.append(fold_inline(token.children or []))
        pos += 1

    logger.debug(f"Table folded: {len(header)} header cell(s), {len(rows)} body row(s)")
    return BlockNode(kind="table", header=tuple(header), rows=tuple(rows)), pos


def fold_inline(children: list[Token]) -> tuple[InlineNode, ...]:
    """
    Fold markdown-it inline children into nested inline nodes.

    ``strong_open text strong_close`` becomes ``strong(children=(text,))``.
    Containers left open at the end are unwrapped into their parent.
    """
    # Each frame: (kind, href, collected children)
    stack: list[tuple[str, str | None, list[InlineNode]]] = [("root", None, [])]

    for child in children:
        if child.nesting == 1:
            kind = INLINE_CONTAINER_KINDS.get(child.type, child.type.removesuffix("_open"))
            href = child.attrGet("href") if kind == "link" else None
            stack.append((kind, str(href) if href is not None else None, []))
        elif child.nesting == -1:
            if len(stack) == 1:
                logger.debug(f"Unmatched inline close skipped: {child.type}")
                continue
            kind, href, nodes = stack.pop()
            stack[-1][2].append(InlineNode(kind=kind, children=tuple(nodes), href=href))
        elif child.type == "text" and not child.content:
            # Newer markdown-it releases emit these around emphasis delimiters
            continue
        else:
            stack[-1][2].append(_inline_leaf(child))

    while len(stack) > 1:
        kind, _, nodes = stack.pop()
        logger.debug(f"Unclosed inline container unwrapped: {kind}")
        stack[-1][2].extend(nodes)

    return tuple(stack[0][2])


def _inline_leaf(token: Token) -> InlineNode:
    if token.type == "text":
        return InlineNode(kind="text", text=token.content)
    if token.type == "code_inline":
        return InlineNode(kind="codespan", text=token.content)
    if token.type in ("softbreak", "hardbreak"):
        return InlineNode(kind=token.type)
    if token.type == "html_inline" and TASK_CHECKBOX_CLASS in token.content:
        return InlineNode(kind="checkbox", checked='checked="checked"' in token.content)
    if token.type == "image":
        return InlineNode(kind="image", text=token.content, children=fold_inline(token.children or []))
    return InlineNode(kind=token.type, text=token.content)
