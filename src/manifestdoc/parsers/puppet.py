"""Reader for Puppet manifests (.pp).

Manifests are parsed with the tree-sitter Puppet grammar. The reader finds
class, define and function declarations, their header parameter lists and
the comment block directly above each one. Bodies are not interpreted.

Headers are read from the leaf tokens of each declaration node.
"""

from __future__ import annotations

import logging
import re

from tree_sitter import Node

from ..errors import SourceParseError
from ..nodes import DeclarationNode, NodeKind, RawParameter
from .tree import check_syntax, comment_rows, leading_comment, line_of, parse, walk

log = logging.getLogger(__name__)

_PARAM = re.compile(
    r"^(?P<type>.*?)\s*(?P<splat>\*)?\$(?P<name>\w+)\s*(?:=\s*(?P<default>.*))?$",
    re.DOTALL,
)

_KEYWORD_KINDS = {
    "class": NodeKind.CLASS,
    "define": NodeKind.DEFINED_TYPE,
    "function": NodeKind.FUNCTION,
}
_CLOSERS = {")", "]", "}"}
_HEADER_MARKS = {"(", "inherits", ">>"}
_OPAQUE_WORDS = ("string", "heredoc", "regex", "interpolation")


def _depth_change(token: Node) -> int:
    if token.type in _CLOSERS:
        return -1
    # `@(` opens as well as the plain brackets
    if not token.is_named and token.type[-1:] in ("(", "[", "{"):
        return 1
    return 0


def _opaque(node: Node) -> bool:
    return node.is_named and any(word in node.type for word in _OPAQUE_WORDS)


def _tokens(node: Node) -> list[Node]:
    """Leaf tokens of a declaration up to and including its opening `{`.

    Strings, heredocs and regexes count as single tokens.
    """
    tokens: list[Node] = []
    depth = 0
    stack = [node]
    while stack:
        current = stack.pop()
        if current.child_count and not _opaque(current):
            stack.extend(reversed(current.children))
            continue
        if current.type == "comment":
            continue
        tokens.append(current)
        if depth == 0 and current.type == "{":
            break
        depth += _depth_change(current)
    return tokens


def _span(data: bytes, start: int, end: int) -> str:
    return data[start:end].decode("utf-8").strip()


def _parse_parameter(text: str, file: str, line: int) -> RawParameter:
    m = _PARAM.match(text)
    if not m:
        raise SourceParseError(file, f"cannot parse parameter '{text}'", line)
    default = m.group("default")
    return RawParameter(
        name=m.group("name"),
        type=m.group("type").strip() or None,
        default=default.strip() if default is not None else None,
        splat=bool(m.group("splat")),
    )


def _parameters(tokens: list[Node], data: bytes, file: str) -> tuple[list[RawParameter], int]:
    """Read `( ... )` starting at tokens[0]; return the parameters and the index after `)`."""
    params: list[RawParameter] = []
    group: list[Node] = []
    depth = 0
    for i, token in enumerate(tokens):
        depth += _depth_change(token)
        if i == 0:
            continue
        if depth == 0 or (depth == 1 and token.type == ","):
            if group:
                text = _span(data, group[0].start_byte, group[-1].end_byte)
                params.append(_parse_parameter(text, file, line_of(group[0])))
            group = []
            if depth == 0:
                return params, i + 1
            continue
        group.append(token)
    raise SourceParseError(file, "unclosed parameter list", line_of(tokens[0]))


def _parse_declaration(
    node: Node, data: bytes, file: str, comments: dict[int, str]
) -> DeclarationNode | None:
    tokens = _tokens(node)
    keyword, header = tokens[0], tokens[1:]
    if not header or header[-1].type != "{":
        raise SourceParseError(
            file, f"expected '{{' to open the body of {keyword.type}", line_of(keyword)
        )
    body = header.pop()
    mark = next((i for i, t in enumerate(header) if t.type in _HEADER_MARKS), len(header))
    name_end = header[mark].start_byte if mark < len(header) else body.start_byte
    name = _span(data, keyword.end_byte, name_end).lstrip(":")
    if not name:
        # a resource-like declaration such as `class { 'apache': }`
        return None

    decl = DeclarationNode(
        kind=_KEYWORD_KINDS[keyword.type],
        name=name,
        file=file,
        line=line_of(keyword),
        comment=leading_comment(comments, keyword.start_point[0]),
    )

    i = mark
    if i < len(header) and header[i].type == "(":
        decl.parameters, consumed = _parameters(header[i:], data, file)
        i += consumed
    for j in range(i, len(header)):
        token = header[j]
        if token.type not in ("inherits", ">>"):
            continue
        marks = [k for k in range(j + 1, len(header)) if header[k].type in ("inherits", ">>")]
        end = header[marks[0]].start_byte if marks else body.start_byte
        text = _span(data, token.end_byte, end)
        if token.type == "inherits":
            decl.superclass = text.lstrip(":")
        else:
            decl.return_type = text or None
    return decl


def read_manifest(text: str, file: str = "<string>") -> list[DeclarationNode]:
    """Return the documentable declarations in a Puppet manifest, in source order."""
    data = text.encode("utf-8")
    tree = parse("puppet", data)
    root = tree.root_node
    check_syntax(root, file)
    comments = comment_rows(root, data)

    nodes: list[DeclarationNode] = []
    for node in walk(root):
        first = node.children[0] if node.child_count else None
        if first is None or first.is_named or first.type not in _KEYWORD_KINDS:
            continue
        decl = _parse_declaration(node, data, file, comments)
        if decl is not None:
            nodes.append(decl)

    log.debug(f"{file}: {len(nodes)} Puppet declaration(s)")
    return nodes
