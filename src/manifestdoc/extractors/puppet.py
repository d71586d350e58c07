"""Extractors for declarations written in the Puppet language."""

from __future__ import annotations

from ..models import DefinedType, Modifier, Parameter, PuppetClass, PuppetFunction
from ..nodes import DeclarationNode, RawParameter
from ..tags import parse_docstring


def _parameter(raw: RawParameter) -> Parameter:
    if raw.splat:
        modifier = Modifier.REPEATED
    elif raw.default is not None:
        modifier = Modifier.OPTIONAL
    else:
        modifier = Modifier.REQUIRED
    return Parameter(
        name=raw.name,
        declared_type=raw.type,
        default=raw.default,
        modifier=modifier,
    )


def extract_class(node: DeclarationNode) -> PuppetClass:
    doc = parse_docstring(node.comment)
    return PuppetClass(
        name=node.name,
        overview=doc.overview,
        tags=tuple(doc.tags),
        file=node.file,
        line=node.line,
        parameters=tuple(_parameter(p) for p in node.parameters),
        superclass=node.superclass,
    )


def extract_defined_type(node: DeclarationNode) -> DefinedType:
    doc = parse_docstring(node.comment)
    return DefinedType(
        name=node.name,
        overview=doc.overview,
        tags=tuple(doc.tags),
        file=node.file,
        line=node.line,
        parameters=tuple(_parameter(p) for p in node.parameters),
    )


def extract_function(node: DeclarationNode) -> PuppetFunction:
    """Extract a function written in the Puppet language.

    The return type is the `>>` annotation of the declaration, or Any. A
    `@return [Type]` tag only documents the value; it does not declare it.
    """
    doc = parse_docstring(node.comment)
    return PuppetFunction(
        name=node.name,
        overview=doc.overview,
        tags=tuple(doc.tags),
        file=node.file,
        line=node.line,
        parameters=tuple(_parameter(p) for p in node.parameters),
        return_type=node.return_type or "Any",
    )
