"""tree-sitter plumbing shared by the source readers."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterator

import tree_sitter_ruby
from tree_sitter import Language, Node, Parser, Tree
from tree_sitter_language_pack import get_language

from ..errors import SourceParseError
from ..tags import uncomment


@lru_cache(maxsize=None)
def parser_for(language: str) -> Parser:
    """A parser for `ruby` or `puppet`, built once per process."""
    if language == "ruby":
        return Parser(Language(tree_sitter_ruby.language()))
    return Parser(get_language(language))


def parse(language: str, data: bytes) -> Tree:
    return parser_for(language).parse(data)


def walk(node: Node) -> Iterator[Node]:
    """`node` and everything under it, in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def node_text(node: Node) -> str:
    return node.text.decode("utf-8")


def line_of(node: Node) -> int:
    return node.start_point[0] + 1


def check_syntax(root: Node, file: str) -> None:
    """Raise SourceParseError at the first error the parser recovered from."""
    if not root.has_error:
        return
    for node in walk(root):
        if node.is_missing:
            raise SourceParseError(file, f"missing '{node.type}'", line_of(node))
        if node.type == "ERROR":
            snippet = node_text(node).strip().split("\n")[0][:40]
            raise SourceParseError(file, f"syntax error near {snippet!r}", line_of(node))
    raise SourceParseError(file, "syntax error")


def comment_rows(root: Node, data: bytes) -> dict[int, str]:
    """Whole-line `#` comments keyed by zero-based row."""
    lines = data.split(b"\n")
    rows: dict[int, str] = {}
    for node in walk(root):
        if node.type != "comment":
            continue
        row, column = node.start_point
        text = node_text(node)
        if text.startswith("#") and not lines[row][:column].strip():
            rows[row] = text
    return rows


def leading_comment(rows: dict[int, str], row: int) -> str:
    """The contiguous comment block ending on the line above `row`."""
    block: list[str] = []
    row -= 1
    while row in rows:
        block.append(rows[row])
        row -= 1
    return uncomment(block[::-1])
