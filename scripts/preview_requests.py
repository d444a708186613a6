#!/usr/bin/env python3
"""
Print the batchUpdate requests a Markdown file compiles to.

Run with: python scripts/preview_requests.py notes.md [insert_at]
Reads Markdown from stdin when no file is given. No API calls are made.
"""

import os
import sys

project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from core.config import configure_logging  # noqa: E402
from gdocs.writing import preview_markdown  # noqa: E402


def main(argv: list[str]) -> int:
    configure_logging()

    if len(argv) > 1 and argv[1] != "-":
        with open(argv[1], encoding="utf-8") as f:
            markdown_text = f.read()
    else:
        markdown_text = sys.stdin.read()

    insert_at = int(argv[2]) if len(argv) > 2 else 1
    print(preview_markdown(markdown_text, insert_at=insert_at))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
