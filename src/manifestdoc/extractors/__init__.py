"""Declaration extractors: one per recognized declaration shape."""

from __future__ import annotations

from typing import Callable, Union

from ..models import Entity, TypeExtension
from ..nodes import DeclarationNode, NodeKind
from .functions import extract_function_4x
from .providers import extract_provider
from .puppet import extract_class, extract_defined_type, extract_function
from .types import (
    extract_newtype,
    extract_register_type,
    extract_type_extension,
)

Extracted = Union[Entity, TypeExtension]

_PUPPET_EXTRACTORS: dict[NodeKind, Callable[[DeclarationNode], Entity]] = {
    NodeKind.CLASS: extract_class,
    NodeKind.DEFINED_TYPE: extract_defined_type,
    NodeKind.FUNCTION: extract_function,
}

# Tried in order; the first one that recognizes the call shape wins.
_RUBY_EXTRACTORS: list[Callable[[DeclarationNode], Extracted | None]] = [
    extract_function_4x,
    extract_newtype,
    extract_register_type,
    extract_provider,
    extract_type_extension,
]


def extract(node: DeclarationNode) -> Extracted | None:
    """Turn a declaration node into an entity, or None if no extractor claims it."""
    if node.kind in _PUPPET_EXTRACTORS:
        return _PUPPET_EXTRACTORS[node.kind](node)
    for extractor in _RUBY_EXTRACTORS:
        result = extractor(node)
        if result is not None:
            return result
    return None


__all__ = [
    "Extracted",
    "extract",
    "extract_class",
    "extract_defined_type",
    "extract_function",
    "extract_function_4x",
    "extract_newtype",
    "extract_provider",
    "extract_register_type",
    "extract_type_extension",
]
