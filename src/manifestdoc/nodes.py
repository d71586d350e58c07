"""Declaration nodes handed from the source readers to the extractors."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .parsers.ruby import Statement


class NodeKind(str, Enum):
    CLASS = "class"
    DEFINED_TYPE = "defined_type"
    FUNCTION = "function"
    RUBY = "ruby"  # host-language statement; extractors match call shapes


@dataclass
class RawParameter:
    """A parameter exactly as written in a Puppet header or Ruby `def`."""

    name: str
    type: str | None = None
    default: str | None = None
    splat: bool = False
    block: bool = False  # Ruby `&block` parameter


@dataclass
class DeclarationNode:
    kind: NodeKind
    name: str = ""
    comment: str = ""  # comment text with `#` markers already stripped
    file: str = ""
    line: int = 0
    parameters: list[RawParameter] = field(default_factory=list)
    superclass: str | None = None
    return_type: str | None = None
    statement: Statement | None = None
