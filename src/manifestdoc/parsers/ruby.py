"""Reader for Ruby sources that use Puppet's embedded DSLs.

Sources are parsed with the tree-sitter Ruby grammar. The reader splits a
file into top-level statements with their leading comments, and reads the
call chain and literal arguments of a statement such as

    Puppet::Type.type(:database).provide :linux do
      confine kernel: 'Linux'
    end

Extractors decide which call shapes they recognize.
"""

from __future__ import annotations

import logging
import re
import textwrap
from dataclasses import dataclass, field
from typing import Any, Iterator

from tree_sitter import Node, Tree

from ..errors import SourceParseError
from ..nodes import DeclarationNode, NodeKind, RawParameter
from .tree import check_syntax, comment_rows, leading_comment, line_of, node_text, parse, walk

log = logging.getLogger(__name__)

_ESCAPES = {"n": "\n", "t": "\t", "s": " ", "r": "\r", "0": "\0", "e": "\x1b"}
_QUOTED_ESCAPE = re.compile(r"\\([\\'])")

# containers whose children are statements of the enclosing body
_BODY_TYPES = {"body_statement", "block_body"}
_SKIPPED_TYPES = {
    "comment",
    "heredoc_body",
    "empty_statement",
    "uninterpreted",
    "block_parameters",
}


class Symbol(str):
    """A Ruby symbol literal; compares equal to its name."""

    def __repr__(self) -> str:
        return f":{str.__str__(self)}"


class Expr(str):
    """Source text of an expression that is not a plain literal."""

    def __repr__(self) -> str:
        return f"Expr({str.__repr__(self)})"


@dataclass
class Call:
    """One link of a call chain: `name(args, key: value)`."""

    name: str
    args: list[Any] = field(default_factory=list)
    kwargs: dict[str, Any] = field(default_factory=dict)
    line: int = 0
    receiver_only: bool = False  # a bare constant such as Puppet::Type


@dataclass
class Chain:
    calls: list[Call]
    block: Node | None = None

    def names(self) -> list[str]:
        return [c.name for c in self.calls]

    @property
    def last(self) -> Call | None:
        return self.calls[-1] if self.calls else None

    def find(self, name: str) -> Call | None:
        for call in self.calls:
            if call.name == name:
                return call
        return None


class _Document:
    """A parsed Ruby file with its heredoc bodies and comment lines."""

    def __init__(self, data: bytes, tree: Tree, file: str):
        self.tree = tree
        self.comments = comment_rows(tree.root_node, data)
        self.heredocs = _heredoc_bodies(tree.root_node, data, file)


def _heredoc_bodies(root: Node, data: bytes, file: str) -> dict[int, str]:
    """Heredoc text keyed by the start byte of its `<<-TAG` opener.

    Bodies follow their openers in the same order, whatever node the
    grammar hangs them under.
    """
    openers = sorted(
        (n for n in walk(root) if n.type == "heredoc_beginning"), key=lambda n: n.start_byte
    )
    bodies = sorted((n for n in walk(root) if n.type == "heredoc_body"), key=lambda n: n.start_byte)
    heredocs: dict[int, str] = {}
    for i, opener in enumerate(openers):
        body = bodies[i] if i < len(bodies) else None
        end = None
        if body is not None:
            end = next((c for c in body.children if c.type == "heredoc_end"), None)
        if end is None:
            message = f"unterminated heredoc {node_text(opener)}"
            raise SourceParseError(file, message, line_of(opener))
        start = body.start_byte
        if body.start_point[1] != 0:
            start = data.index(b"\n", start) + 1
        text = data[start : end.start_byte].decode("utf-8")
        # drop the terminator line, with any indentation before it
        text = text[: text.rfind("\n")] if "\n" in text else ""
        if node_text(opener).startswith("<<~"):
            text = textwrap.dedent(text)
        heredocs[opener.start_byte] = text
    return heredocs


def _items(node: Node) -> Iterator[Node]:
    for child in node.named_children:
        if child.type not in _SKIPPED_TYPES:
            yield child


def _string(node: Node) -> str:
    raw = node_text(node).lstrip(":")
    quoted = raw.startswith("'") or raw.startswith("%q")
    out: list[str] = []
    for child in node.children:
        text = node_text(child)
        if child.type == "string_content":
            out.append(_QUOTED_ESCAPE.sub(r"\1", text) if quoted else text)
        elif child.type == "escape_sequence":
            if quoted:
                out.append(_QUOTED_ESCAPE.sub(r"\1", text))
            elif len(text) == 2:
                out.append(_ESCAPES.get(text[1], text[1]))
            else:
                out.append(text)
        elif child.type == "interpolation":
            out.append(text)
    return "".join(out)


def _key(node: Node, doc: _Document) -> str:
    if node.type == "hash_key_symbol":
        return node_text(node)
    return str(_value(node, doc))


def _value(node: Node, doc: _Document) -> Any:
    """A Python value for a literal node, or Expr for anything else."""
    kind = node.type
    if kind == "string":
        return _string(node)
    if kind == "chained_string":
        return "".join(_string(c) for c in _items(node))
    if kind == "heredoc_beginning":
        return doc.heredocs.get(node.start_byte, "")
    if kind == "simple_symbol":
        return Symbol(node_text(node)[1:])
    if kind == "delimited_symbol":
        return Symbol(_string(node))
    if kind == "integer":
        raw = node_text(node).replace("_", "")
        return int(raw, 0) if raw[:2].lower() in ("0x", "0b", "0o") else int(raw)
    if kind == "float":
        return float(node_text(node).replace("_", ""))
    if kind in ("true", "false"):
        return kind == "true"
    if kind == "nil":
        return None
    if kind == "unary" and node_text(node).startswith("-"):
        operand = node.child_by_field_name("operand")
        if operand is not None and operand.type in ("integer", "float"):
            return -_value(operand, doc)
    if kind == "array":
        return [_value(c, doc) for c in _items(node)]
    if kind == "string_array":
        return [node_text(c) for c in _items(node)]
    if kind == "symbol_array":
        return [Symbol(node_text(c)) for c in _items(node)]
    if kind == "hash":
        holder = Call("{}")
        _arguments(node, holder, doc)
        return holder.kwargs
    return Expr(node_text(node).strip())


def _arguments(node: Node, call: Call, doc: _Document) -> None:
    """Fill call.args and call.kwargs from an argument list or hash literal."""
    for child in _items(node):
        if child.type == "pair":
            key = child.child_by_field_name("key")
            value = child.child_by_field_name("value")
            call.kwargs[_key(key, doc)] = _value(value, doc) if value is not None else None
        elif child.type == "block_argument":
            continue
        else:
            call.args.append(_value(child, doc))


def _links(node: Node, doc: _Document, calls: list[Call]) -> bool:
    """Append the calls of a receiver chain, innermost first."""
    if node.type in ("constant", "scope_resolution"):
        calls.append(Call(node_text(node), line=line_of(node), receiver_only=True))
        return True
    if node.type == "identifier":
        calls.append(Call(node_text(node), line=line_of(node)))
        return True
    if node.type != "call":
        return False
    receiver = node.child_by_field_name("receiver")
    if receiver is not None and not _links(receiver, doc, calls):
        return False
    method = node.child_by_field_name("method")
    if method is None:
        return False
    call = Call(node_text(method), line=line_of(method))
    arguments = node.child_by_field_name("arguments")
    if arguments is not None:
        _arguments(arguments, call, doc)
    calls.append(call)
    return True


def _method_parameter(node: Node) -> RawParameter:
    name = node.child_by_field_name("name")
    label = node_text(name) if name is not None else node_text(node)
    if node.type in ("optional_parameter", "keyword_parameter"):
        value = node.child_by_field_name("value")
        return RawParameter(label, default=node_text(value) if value is not None else None)
    return RawParameter(
        label,
        splat=node.type in ("splat_parameter", "hash_splat_parameter"),
        block=node.type == "block_parameter",
    )


@dataclass
class Statement:
    """A top-level (or block-level) Ruby statement with its leading comment."""

    node: Node
    document: _Document = field(repr=False)
    comment: str = ""
    line: int = 0
    _chain: Chain | None = field(default=None, repr=False)

    @property
    def text(self) -> str:
        return node_text(self.node)

    @property
    def chain(self) -> Chain:
        """The call chain this statement starts with; empty for anything else."""
        if self._chain is None:
            calls: list[Call] = []
            if _links(self.node, self.document, calls):
                block = self.node.child_by_field_name("block") if self.node.type == "call" else None
                self._chain = Chain(calls, block)
            else:
                self._chain = Chain([])
        return self._chain

    def body(self) -> list[Statement]:
        """Statements inside the block attached to this statement's call chain."""
        block = self.chain.block
        if block is None:
            return []
        return _statements(block, self.document)

    def signature(self) -> tuple[str, list[RawParameter]] | None:
        """Method name and parameters when this statement is a `def`."""
        if self.node.type != "method":
            return None
        name = self.node.child_by_field_name("name")
        params = self.node.child_by_field_name("parameters")
        raw = [_method_parameter(p) for p in _items(params)] if params is not None else []
        return node_text(name), raw


def _flatten(container: Node) -> Iterator[Node]:
    for child in _items(container):
        if child.type in _BODY_TYPES:
            yield from _flatten(child)
        else:
            yield child


def _statements(container: Node, doc: _Document) -> list[Statement]:
    statements: list[Statement] = []
    previous_end = -1
    for node in _flatten(container):
        row = node.start_point[0]
        # `a; b` on one line: only the first statement owns the comment above
        comment = "" if row == previous_end else leading_comment(doc.comments, row)
        statements.append(Statement(node, doc, comment=comment, line=row + 1))
        previous_end = node.end_point[0]
    return statements


def read_ruby(text: str, file: str = "<string>") -> list[DeclarationNode]:
    """Split a Ruby source into top-level statement nodes."""
    data = text.encode("utf-8")
    tree = parse("ruby", data)
    check_syntax(tree.root_node, file)
    doc = _Document(data, tree, file)

    nodes = [
        DeclarationNode(
            kind=NodeKind.RUBY,
            comment=stmt.comment,
            file=file,
            line=stmt.line,
            statement=stmt,
        )
        for stmt in _statements(tree.root_node, doc)
    ]
    log.debug(f"{file}: {len(nodes)} Ruby statement(s)")
    return nodes


def to_text(value: Any) -> str | None:
    """Render a literal argument value as documentation text."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "[" + ", ".join(to_text(v) or "nil" for v in value) + "]"
    if isinstance(value, dict):
        return "{" + ", ".join(f"{k} => {to_text(v)}" for k, v in value.items()) + "}"
    return str(value)
