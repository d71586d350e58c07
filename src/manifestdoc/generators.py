"""Markdown output for a populated Registry.

Output is a pure function of the registry contents: groups, entities and
fields always come out in the same order, so equal registries render to
identical bytes.
"""

from __future__ import annotations

import re

from .models import (
    Documented,
    Entity,
    EntityKind,
    Function4x,
    Modifier,
    Overload,
    Parameter,
    Provider,
    PuppetClass,
    PuppetFunction,
    ResourceType,
    TagKind,
)
from .registry import Registry

GROUPS: list[tuple[str, tuple[EntityKind, ...]]] = [
    ("Classes", (EntityKind.CLASS,)),
    ("Defined types", (EntityKind.DEFINED_TYPE,)),
    ("Functions", (EntityKind.FUNCTION, EntityKind.FUNCTION_4X)),
    ("Resource types", (EntityKind.RESOURCE_TYPE,)),
    ("Providers", (EntityKind.PROVIDER,)),
]

_BEHAVIOUR_LABELS = {
    Modifier.NAMEVAR: "namevar",
    Modifier.READ_ONLY: "read-only",
    Modifier.PARAMETER: "parameter",
    Modifier.PROPERTY: "property",
}
_RELATIONSHIP_LABELS = [
    ("autorequire", "Autorequires"),
    ("autobefore", "Autobefore"),
    ("autosubscribe", "Autosubscribe"),
    ("autonotify", "Autonotify"),
]


def anchor_for(name: str) -> str:
    """Lower-kebab anchor for a qualified name: `klass::dt` -> `klass-dt`."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "entity"


def _code(text: str) -> str:
    if "`" in text:
        return f"`` {text} ``"
    return f"`{text}`"


def _cell(text: str | None) -> str:
    if not text:
        return ""
    return " ".join(text.split()).replace("|", "\\|")


def _one_line(text: str) -> str:
    return " ".join(text.split())


def _first_sentence(text: str) -> str:
    paragraph = text.strip().split("\n\n")[0]
    paragraph = _one_line(paragraph)
    m = re.match(r"(.+?[.!?])(?:\s|$)", paragraph)
    return m.group(1) if m else paragraph


def _description(doc: Documented) -> str:
    if doc.summary:
        return _one_line(doc.summary)
    if doc.overview:
        return _first_sentence(doc.overview)
    return ""


def _toc_description(entity: Entity) -> str:
    text = _description(entity)
    if not text and isinstance(entity, Function4x) and entity.overloads:
        text = _description(entity.overloads[0])
    return text


def _assign_anchors(entities: list[Entity]) -> dict[int, str]:
    anchors: dict[int, str] = {}
    used: set[str] = set()
    for entity in entities:
        base = anchor_for(entity.qualified_name)
        anchor = base
        n = 2
        while anchor in used:
            anchor = f"{base}-{n}"
            n += 1
        used.add(anchor)
        anchors[id(entity)] = anchor
    return anchors


def _signature_param(param: Parameter, puppet_language: bool) -> str:
    type_ = param.declared_type
    if param.modifier == Modifier.BLOCK:
        return f"{type_ or 'Callable'} &${param.name}"
    if param.modifier == Modifier.OPTIONAL and not puppet_language:
        type_ = f"Optional[{type_ or 'Any'}]"
    prefix = f"{type_} " if type_ else ""
    splat = "*" if param.modifier == Modifier.REPEATED else ""
    text = f"{prefix}{splat}${param.name}"
    if puppet_language and param.default is not None:
        text += f" = {param.default}"
    return text


def _signature(name: str, params: tuple[Parameter, ...], puppet_language: bool) -> list[str]:
    args = ", ".join(_signature_param(p, puppet_language) for p in params)
    return ["```puppet", f"{name}({args})", "```", ""]


def _parameter_row(param: Parameter, doc: Documented, puppet_language: bool) -> str:
    name = param.name
    type_ = param.declared_type
    if param.modifier == Modifier.BLOCK:
        name = f"&{name}"
        type_ = type_ or "Callable"
    elif param.modifier == Modifier.REPEATED:
        name = f"*{name}"
    elif param.modifier == Modifier.OPTIONAL and not puppet_language:
        type_ = f"Optional[{type_ or 'Any'}]"
    default = _code(_cell(param.default)) if param.default is not None else ""
    type_cell = _code(_cell(type_)) if type_ else ""
    return f"| {_code(name)} | {type_cell} | {_cell(doc.param_description(param.name))} | {default} |"


def _attribute_row(attr: Parameter) -> str:
    label = _BEHAVIOUR_LABELS.get(attr.modifier, attr.modifier.value)
    description = attr.description
    if attr.required_features:
        requires = ", ".join(attr.required_features)
        description = f"{description} Requires features: {requires}.".strip()
    type_cell = _code(_cell(attr.declared_type)) if attr.declared_type else ""
    default = _code(_cell(attr.default)) if attr.default is not None else ""
    return f"| {_code(attr.name)} ({label}) | {type_cell} | {_cell(description)} | {default} |"


def _table(title: str, rows: list[str], level: int) -> list[str]:
    if not rows:
        return []
    return [
        f"{'#' * level} {title}",
        "",
        "| Name | Type | Description | Default |",
        "| --- | --- | --- | --- |",
        *rows,
        "",
    ]


def _bullets(label: str, items: list[str]) -> list[str]:
    if not items:
        return []
    return [f"{label}:", "", *[f"* {item}" for item in items], ""]


def _overview(doc: Documented) -> list[str]:
    lines: list[str] = []
    if doc.summary:
        lines.extend([_one_line(doc.summary), ""])
    if doc.overview:
        lines.extend([doc.overview, ""])
    return lines


def _fence(body: str) -> str:
    """A backtick fence longer than any backtick run inside the body."""
    longest = max((len(run) for run in re.findall(r"`+", body)), default=0)
    return "`" * max(3, longest + 1)


def _examples(doc: Documented, level: int) -> list[str]:
    examples = doc.tags_of(TagKind.EXAMPLE)
    if not examples:
        return []
    lines = [f"{'#' * level} Examples", ""]
    for tag in examples:
        if tag.subject:
            lines.extend([f"*{tag.subject}*", ""])
        fence = _fence(tag.body)
        lines.extend([f"{fence}puppet", tag.body, fence, ""])
    return lines


def _options(doc: Documented) -> list[str]:
    items = []
    for tag in doc.tags_of(TagKind.OPTION):
        text = f"**{tag.subject}**" if tag.subject else "**options**"
        if tag.key:
            text += f" {_code(tag.key)}"
        if tag.types:
            text += f" ({_code(tag.types)})"
        if tag.body:
            text += f": {_one_line(tag.body)}"
        items.append(text)
    return _bullets("Options", items)


def _raises(doc: Documented) -> list[str]:
    items = []
    for tag in doc.tags_of(TagKind.RAISE):
        text = _one_line(tag.body)
        if tag.types:
            text = f"{_code(tag.types)} {text}".strip()
        items.append(text)
    if len(items) == 1:
        return [f"Raises: {items[0]}", ""]
    return _bullets("Raises", items)


def _returns(doc: Documented, return_type: str | None) -> list[str]:
    tag = doc.first_tag(TagKind.RETURN)
    type_ = (tag.types if tag and tag.types else None) or return_type
    text = _one_line(tag.body) if tag else ""
    if not type_ and not text:
        return []
    parts = [_code(type_)] if type_ else []
    if text:
        parts.append(text)
    return [f"Returns: {' '.join(parts)}", ""]


def _documented(
    doc: Documented,
    level: int,
    header: list[str] | None = None,
    table: list[str] | None = None,
    extras: list[str] | None = None,
    return_type: str | None = None,
) -> list[str]:
    """Lines for one documented item, fields in their fixed order."""
    lines = _overview(doc)
    lines.extend(header or [])
    since = doc.first_tag(TagKind.SINCE)
    if since and since.body:
        lines.extend([f"Since: {since.body}", ""])
    lines.extend(_bullets("See also", [_one_line(t.body) for t in doc.tags_of(TagKind.SEE)]))
    lines.extend(_examples(doc, level))
    lines.extend(table or [])
    lines.extend(_options(doc))
    lines.extend(extras or [])
    lines.extend(_raises(doc))
    lines.extend(_returns(doc, return_type))
    authors = [t.body for t in doc.tags_of(TagKind.AUTHOR) if t.body]
    if authors:
        lines.extend([f"Author: {', '.join(authors)}", ""])
    return lines


def _overload_lines(function: str, overload: Overload, level: int) -> list[str]:
    rows = [_parameter_row(p, overload, False) for p in overload.parameters]
    return _documented(
        overload,
        level,
        header=_signature(function, overload.parameters, False),
        table=_table("Parameters", rows, level),
        return_type=overload.return_type,
    )


def _function_4x_lines(entity: Function4x) -> list[str]:
    if len(entity.overloads) == 1:
        return _overload_lines(entity.name, entity.overloads[0], 4)
    lines = _documented(entity, 4)
    if entity.overloads:
        lines.extend(["#### Overloads", ""])
    for overload in entity.overloads:
        lines.extend([f"##### {overload.name}", ""])
        lines.extend(_overload_lines(entity.name, overload, 6))
    return lines


def _resource_type_lines(entity: ResourceType) -> list[str]:
    extras = _bullets(
        "Features",
        [
            f"{_code(f.name)}: {_one_line(f.description)}" if f.description else _code(f.name)
            for f in entity.features
        ],
    )
    for kind, label in _RELATIONSHIP_LABELS:
        extras.extend(
            _bullets(
                label,
                [
                    f"{_code(r.type_name)}: {_code(r.target)}" if r.target else _code(r.type_name)
                    for r in entity.relationships
                    if r.kind == kind
                ],
            )
        )
    rows = [_attribute_row(a) for a in entity.attributes]
    return _documented(entity, 4, table=_table("Attributes", rows, 4), extras=extras)


def _provider_lines(entity: Provider) -> list[str]:
    extras: list[str] = []
    extras.extend(_bullets("Confines", [f"{_code(c.key)}: {_code(c.value)}" for c in entity.confines]))
    extras.extend(_bullets("Default for", [f"{_code(c.key)}: {_code(c.value)}" for c in entity.defaults]))
    extras.extend(_bullets("Features", [_code(f) for f in entity.features]))
    extras.extend(
        _bullets(
            "Commands",
            [
                f"{_code(c.name)}: {_code(c.path)}" + (" (optional)" if c.optional else "")
                for c in entity.commands
            ],
        )
    )
    header = [f"Resource type: {_code(entity.type_name)}", ""] if entity.type_name else []
    return _documented(entity, 4, header=header, extras=extras)


def _entity_lines(entity: Entity, anchor: str) -> list[str]:
    lines = [f'<a id="{anchor}"></a>', f"### {entity.name}", ""]

    if isinstance(entity, Function4x):
        lines.extend(_function_4x_lines(entity))
    elif isinstance(entity, ResourceType):
        lines.extend(_resource_type_lines(entity))
    elif isinstance(entity, Provider):
        lines.extend(_provider_lines(entity))
    elif isinstance(entity, PuppetFunction):
        rows = [_parameter_row(p, entity, True) for p in entity.parameters]
        lines.extend(
            _documented(
                entity,
                4,
                header=_signature(entity.name, entity.parameters, True),
                table=_table("Parameters", rows, 4),
                return_type=entity.return_type,
            )
        )
    else:
        header = []
        if isinstance(entity, PuppetClass) and entity.superclass:
            header = [f"Inherits from: {_code(entity.superclass)}", ""]
        rows = [_parameter_row(p, entity, True) for p in entity.parameters]
        lines.extend(
            _documented(entity, 4, header=header, table=_table("Parameters", rows, 4))
        )
    return lines


def generate_markdown(registry: Registry, title: str = "Reference") -> str:
    """Render the whole registry: table of contents, then one section per group."""
    groups = []
    for label, kinds in GROUPS:
        entities = [e for kind in kinds for e in registry.all(kind)]
        if entities:
            groups.append((label, entities))

    anchors = _assign_anchors([e for _, entities in groups for e in entities])

    lines = [
        f"# {title}",
        "",
        "<!-- AUTO-GENERATED by manifestdoc. DO NOT EDIT. -->",
        "",
    ]

    if groups:
        lines.extend(["## Table of Contents", ""])
    for label, entities in groups:
        lines.extend([f"**{label}**", ""])
        for entity in entities:
            link = f"* [{_code(entity.name)}](#{anchors[id(entity)]})"
            description = _toc_description(entity)
            lines.append(f"{link}: {description}" if description else link)
        lines.append("")

    for label, entities in groups:
        lines.extend([f"## {label}", ""])
        for entity in entities:
            lines.extend(_entity_lines(entity, anchors[id(entity)]))

    while lines and lines[-1] == "":
        lines.pop()
    return "\n".join(lines) + "\n"
