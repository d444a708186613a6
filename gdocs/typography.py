"""
Smart typography for Markdown source.

Replaces straight quotes, apostrophes, ellipses and dash runs with their
typographic equivalents before the text reaches the tokenizer. Lines that carry
Markdown structure made of those characters (table delimiter rows, horizontal
rules) are left untouched so tokenization is unaffected.
"""

import re

EM_DASH = "—"
EN_DASH = "–"
ELLIPSIS = "…"
LEFT_DOUBLE_QUOTE = "“"
RIGHT_DOUBLE_QUOTE = "”"
LEFT_SINGLE_QUOTE = "‘"
RIGHT_SINGLE_QUOTE = "’"

_TABLE_DELIMITER_ROW = re.compile(r"^\|?\s*:?-+:?\s*(?:\|\s*:?-+:?\s*)*\|?$")
_HORIZONTAL_RULE = re.compile(r"^(-{3,}|_{3,}|\*{3,})$")

# Applied in order; later patterns rely on earlier ones having consumed their input.
_REPLACEMENTS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"(\S)---(\S)"), rf"\1{EM_DASH}\2"),
    (re.compile(r"(\S)---(\s)"), rf"\1{EM_DASH}\2"),
    (re.compile(r"(\s)---(\S)"), rf"\1{EM_DASH}\2"),
    (re.compile(r"(\d)--(\d)"), rf"\1{EN_DASH}\2"),
    (re.compile(r"(\S)--(\S)"), rf"\1{EN_DASH}\2"),
    (re.compile(r"\.\.\."), ELLIPSIS),
    (re.compile(r"(^|[\s(])\"(\S)"), rf"\1{LEFT_DOUBLE_QUOTE}\2"),
    (re.compile(r"\""), RIGHT_DOUBLE_QUOTE),
    (re.compile(r"(\w)'(\w)"), rf"\1{RIGHT_SINGLE_QUOTE}\2"),
    (re.compile(r"(^|[\s(])'(\S)"), rf"\1{LEFT_SINGLE_QUOTE}\2"),
    (re.compile(r"'"), RIGHT_SINGLE_QUOTE),
]


def is_exempt_line(line: str) -> bool:
    """True for table delimiter rows and horizontal-rule-only lines."""
    stripped = line.strip()
    return bool(_TABLE_DELIMITER_ROW.match(stripped) or _HORIZONTAL_RULE.match(stripped))


def smart_typography_line(line: str) -> str:
    if is_exempt_line(line):
        return line
    for pattern, replacement in _REPLACEMENTS:
        line = pattern.sub(replacement, line)
    return line


def smart_typography(text: str) -> str:
    """
    Apply SmartyPants-style substitutions line by line.

    - ``---`` next to text becomes an em dash, ``--`` between text an en dash
    - ``...`` becomes an ellipsis
    - straight double/single quotes become curly quotes, apostrophes in
      contractions become right single quotes

    The filter is idempotent: none of its outputs match any of its inputs.
    """
    return "\n".join(smart_typography_line(line) for line in text.split("\n"))
