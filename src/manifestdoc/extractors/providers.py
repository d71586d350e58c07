"""Extractor for `Puppet::Type.type(:name).provide(:provider) do ... end`."""

from __future__ import annotations

from ..models import Command, Condition, Provider
from ..nodes import DeclarationNode
from ..parsers.ruby import Call, to_text
from ..tags import parse_docstring
from .common import arg_text, command, description, names, receiver


def _conditions(call: Call) -> list[Condition]:
    """`confine kernel: 'Linux'` and `confine :a => 'x', :b => 'y'` alike."""
    conditions = [Condition(str(k), to_text(v) or "") for k, v in call.kwargs.items()]
    # `confine :feature` style positional flags
    conditions.extend(Condition(to_text(a), "true") for a in call.args if a is not None)
    return conditions


def extract_provider(node: DeclarationNode) -> Provider | None:
    stmt = node.statement
    if stmt is None or receiver(stmt) != "Puppet::Type":
        return None
    calls = stmt.chain.calls
    if len(calls) != 3 or calls[1].name != "type" or calls[2].name != "provide":
        return None
    type_name = arg_text(calls[1])
    name = arg_text(calls[2])
    if not type_name or not name:
        return None

    body = stmt.body()
    doc = parse_docstring(description(body))
    confines: list[Condition] = []
    defaults: list[Condition] = []
    features: list[str] = []
    commands: list[Command] = []

    for inner in body:
        c = command(inner)
        if c is None:
            continue
        if c.name == "confine":
            confines.extend(_conditions(c))
        elif c.name == "defaultfor":
            defaults.extend(_conditions(c))
        elif c.name in ("has_feature", "has_features"):
            for arg in c.args:
                features.extend(names(arg))
        elif c.name in ("commands", "optional_commands"):
            optional = c.name == "optional_commands"
            for cmd, path in c.kwargs.items():
                commands.append(Command(str(cmd), to_text(path) or "", optional))

    return Provider(
        name=name,
        overview=doc.overview,
        tags=tuple(doc.tags),
        file=node.file,
        line=node.line,
        type_name=type_name,
        confines=tuple(confines),
        defaults=tuple(defaults),
        features=tuple(features),
        commands=tuple(commands),
    )
