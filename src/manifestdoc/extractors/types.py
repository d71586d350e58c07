"""Extractors for resource types.

Three idioms end up as the same ResourceType entity:

- ``Puppet::Type.newtype(:name) do ... end``
- ``Puppet::ResourceApi.register_type(name: ..., attributes: {...})``
- ``Puppet::Type.type(:name).newparam(...)`` / ``.newproperty(...)``, which
  adds attributes to a type declared elsewhere (a TypeExtension).
"""

from __future__ import annotations

import logging
from typing import Any

from ..models import Feature, Modifier, Parameter, Relationship, ResourceType, TypeExtension
from ..nodes import DeclarationNode
from ..parsers.ruby import Expr, Statement, to_text
from ..tags import parse_docstring
from .common import arg_text, command, description, kwarg_text, names, receiver

log = logging.getLogger(__name__)

_ATTRIBUTE_CALLS = {
    "newparam": Modifier.PARAMETER,
    "newproperty": Modifier.PROPERTY,
}
_RELATIONSHIP_CALLS = ("autorequire", "autobefore", "autosubscribe", "autonotify")
_BEHAVIOURS = {
    "namevar": Modifier.NAMEVAR,
    "read_only": Modifier.READ_ONLY,
    "parameter": Modifier.PARAMETER,
    "property": Modifier.PROPERTY,
    "init_only": Modifier.PROPERTY,
}
_ENSURE_VALUES = ("present", "absent")


def _values_type(values: list[Any]) -> str | None:
    """Build a Puppet type from the values an attribute accepts."""
    plain = [to_text(v) for v in values if not isinstance(v, Expr)]
    patterns = [str(v) for v in values if isinstance(v, Expr)]
    parts = []
    if plain:
        parts.append(f"Enum[{', '.join(plain)}]")
    if patterns:
        parts.append(f"Pattern[{', '.join(patterns)}]")
    if not parts:
        return None
    return parts[0] if len(parts) == 1 else f"Variant[{', '.join(parts)}]"


def _attribute(
    stmt: Statement, name: str, modifier: Modifier, values: list[Any] | None = None
) -> Parameter:
    """Read a newparam/newproperty/ensurable block into an attribute."""
    call = stmt.chain.last
    declared_type = None
    parent = call.kwargs.get("parent") if call is not None else None
    if parent is not None and str(parent).endswith("Parameter::Boolean"):
        declared_type = "Boolean"
    if call is not None and call.kwargs.get("namevar") is True:
        modifier = Modifier.NAMEVAR
    required = names(call.kwargs.get("required_features")) if call is not None else ()

    default = None
    values = list(values or ())
    for inner in stmt.body():
        c = command(inner)
        if c is None:
            continue
        if c.name == "isnamevar":
            modifier = Modifier.NAMEVAR
        elif c.name == "defaultto":
            # a block default is computed at runtime
            default = arg_text(c) if c.args else None
        elif c.name in ("newvalue", "newvalues"):
            values.extend(c.args)
        elif c.name == "defaultvalues":
            values.extend(_ENSURE_VALUES)

    if declared_type is None:
        declared_type = _values_type(values)
    return Parameter(
        name=name,
        declared_type=declared_type,
        default=default,
        modifier=modifier,
        description=description(stmt.body()),
        required_features=required,
    )


def extract_newtype(node: DeclarationNode) -> ResourceType | None:
    stmt = node.statement
    if stmt is None or receiver(stmt) != "Puppet::Type":
        return None
    call = stmt.chain.find("newtype")
    if call is None or not call.args:
        return None

    body = stmt.body()
    doc = parse_docstring(description(body))
    attributes: list[Parameter] = []
    features: list[Feature] = []
    relationships: list[Relationship] = []
    synthesized: Parameter | None = None

    for inner in body:
        c = command(inner)
        if c is None:
            continue
        if c.name == "feature" and c.args:
            features.append(Feature(arg_text(c), arg_text(c, 1) or ""))
        elif c.name == "ensurable":
            # bare `ensurable` accepts the default values
            default_values = None if inner.chain.block is not None else list(_ENSURE_VALUES)
            synthesized = _attribute(inner, "ensure", Modifier.PROPERTY, default_values)
            attributes.append(synthesized)
        elif c.name in _ATTRIBUTE_CALLS and c.args:
            attributes.append(_attribute(inner, arg_text(c), _ATTRIBUTE_CALLS[c.name]))
        elif c.name in _RELATIONSHIP_CALLS and c.args:
            relationships.append(Relationship(arg_text(c), kind=c.name))

    # an explicit ensure property wins over the one ensurable synthesizes
    if synthesized is not None and sum(a.name == "ensure" for a in attributes) > 1:
        attributes = [a for a in attributes if a is not synthesized]

    return ResourceType(
        name=arg_text(call),
        overview=doc.overview,
        tags=tuple(doc.tags),
        file=node.file,
        line=node.line,
        attributes=tuple(attributes),
        features=tuple(features),
        relationships=tuple(relationships),
    )


def extract_register_type(node: DeclarationNode) -> ResourceType | None:
    """Extract a Resource API `register_type` definition.

    The attributes hash is the most explicit form there is: its `type:` and
    `behaviour:` entries are used verbatim.
    """
    stmt = node.statement
    if stmt is None or receiver(stmt) != "Puppet::ResourceApi":
        return None
    call = stmt.chain.find("register_type")
    if call is None:
        return None
    name = kwarg_text(call, "name")
    if not name:
        log.warning(f"{node.file}:{node.line}: register_type without a name")
        return None

    doc = parse_docstring(kwarg_text(call, "desc") or kwarg_text(call, "docs"))

    attributes: list[Parameter] = []
    declared = call.kwargs.get("attributes")
    for attr_name, options in (declared.items() if isinstance(declared, dict) else ()):
        options = options if isinstance(options, dict) else {}
        behaviour = to_text(options.get("behaviour")) or "property"
        modifier = _BEHAVIOURS.get(behaviour)
        if modifier is None:
            log.debug(f"{name}: unknown behaviour {behaviour!r} for {attr_name}")
            modifier = Modifier.PROPERTY
        attributes.append(
            Parameter(
                name=str(attr_name),
                declared_type=to_text(options.get("type")),
                default=to_text(options["default"]) if "default" in options else None,
                modifier=modifier,
                description=to_text(options.get("desc")) or "",
            )
        )

    relationships: list[Relationship] = []
    for key in _RELATIONSHIP_CALLS:
        for spelling in (key, key + "s"):
            targets = call.kwargs.get(spelling)
            if isinstance(targets, dict):
                for type_name, target in targets.items():
                    relationships.append(Relationship(str(type_name), to_text(target), kind=key))

    return ResourceType(
        name=name,
        overview=doc.overview,
        tags=tuple(doc.tags),
        file=node.file,
        line=node.line,
        attributes=tuple(attributes),
        features=tuple(Feature(n) for n in names(call.kwargs.get("features"))),
        relationships=tuple(relationships),
    )


def extract_type_extension(node: DeclarationNode) -> TypeExtension | None:
    """Extract `Puppet::Type.type(:name).newparam(:attr) do ... end`."""
    stmt = node.statement
    if stmt is None or receiver(stmt) != "Puppet::Type":
        return None
    calls = stmt.chain.calls
    if len(calls) != 3 or calls[1].name != "type" or calls[2].name not in _ATTRIBUTE_CALLS:
        return None
    type_name = arg_text(calls[1])
    attr_name = arg_text(calls[2])
    if not type_name or not attr_name:
        return None
    attribute = _attribute(stmt, attr_name, _ATTRIBUTE_CALLS[calls[2].name])
    return TypeExtension(type_name, (attribute,), file=node.file, line=node.line)
