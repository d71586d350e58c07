"""Comment association: split a documentation comment into overview and tags.

Parsing never fails. Unknown tags become TagKind.UNKNOWN, tags with missing
fields keep whatever text was present, and stray text is attached to the
nearest sensible place.
"""

from __future__ import annotations

import logging
import re
import textwrap
from dataclasses import dataclass, field

from .models import Tag, TagKind

log = logging.getLogger(__name__)

_TAG_LINE = re.compile(r"^@([A-Za-z_]\w*)(?:\s+(.*))?$")
_TYPES_PREFIX = re.compile(r"^\[([^\]]*)\]\s*")
_PARAM_NAME = re.compile(r"^[$*&]?([A-Za-z_][\w:]*)\s*")

_KNOWN = {k.value: k for k in TagKind if k is not TagKind.UNKNOWN}


@dataclass
class ParsedDocstring:
    """Overview text plus tags in source order."""

    overview: str = ""
    tags: list[Tag] = field(default_factory=list)


@dataclass
class _RawTag:
    name: str
    lines: list[str]
    after_blank: bool = False


def uncomment(lines: list[str]) -> str:
    """Strip leading `#` markers (and one following space) from comment lines."""
    out = []
    for line in lines:
        stripped = line.lstrip()
        if stripped.startswith("#"):
            stripped = stripped[1:]
            if stripped.startswith(" "):
                stripped = stripped[1:]
        out.append(stripped.rstrip())
    return "\n".join(out)


def parse_docstring(text: str | None) -> ParsedDocstring:
    """Split comment text into an overview and a list of tags.

    Lines before the first `@tag` line form the overview. A tag line starts
    a new tag; following lines extend its body. Once a tag body has hit a
    blank line, an unindented line of plain text ends the tag and resumes the
    overview, so prose after an indented @example is not swallowed by it.
    """
    if not text:
        return ParsedDocstring()

    overview: list[str] = []
    raw: list[_RawTag] = []
    current: _RawTag | None = None

    for line in textwrap.dedent(text).split("\n"):
        line = line.rstrip()
        m = _TAG_LINE.match(line)
        if m:
            current = _RawTag(m.group(1), [m.group(2) or ""])
            raw.append(current)
            continue

        if current is None:
            overview.append(line)
            continue

        if not line:
            current.lines.append("")
            current.after_blank = True
        elif current.after_blank and not line[0].isspace() and not line.startswith("@"):
            current = None
            overview.append(line)
        else:
            current.lines.append(line)

    result = ParsedDocstring(overview="\n".join(overview).strip())
    for r in raw:
        result.tags.append(_build_tag(r.name, r.lines))
    return result


def _join(lines: list[str]) -> str:
    return " ".join(part.strip() for part in lines if part.strip())


def _split_types(text: str) -> tuple[str | None, str]:
    m = _TYPES_PREFIX.match(text)
    if not m:
        return None, text
    return m.group(1).strip(), text[m.end() :]


def _build_tag(name: str, lines: list[str]) -> Tag:
    kind = _KNOWN.get(name)
    if kind is None:
        log.debug(f"Unknown tag @{name} kept as unknown")
        return Tag(TagKind.UNKNOWN, body=_join(lines), tag_name=name)

    if kind == TagKind.EXAMPLE:
        title = lines[0].strip() or None
        body = textwrap.dedent("\n".join(lines[1:])).strip("\n")
        return Tag(kind, body=body.rstrip(), subject=title)

    text = _join(lines)

    if kind == TagKind.PARAM:
        types, rest = _split_types(text)
        m = _PARAM_NAME.match(rest)
        if not m:
            log.debug(f"@param without a parameter name: {text!r}")
            return Tag(kind, body=rest.strip(), subject="", types=types)
        rest = rest[m.end() :]
        if types is None:
            # YARD also accepts `@param name [Type] description`
            types, rest = _split_types(rest)
        return Tag(kind, body=rest.strip(), subject=m.group(1), types=types)

    if kind == TagKind.OPTION:
        parts = text.split(None, 1)
        subject = parts[0] if parts else ""
        rest = parts[1] if len(parts) > 1 else ""
        types, rest = _split_types(rest)
        parts = rest.split(None, 1)
        key = parts[0] if parts else None
        body = parts[1] if len(parts) > 1 else ""
        return Tag(kind, body=body, subject=subject, types=types, key=key)

    if kind in (TagKind.RETURN, TagKind.RAISE):
        types, rest = _split_types(text)
        return Tag(kind, body=rest.strip(), types=types)

    return Tag(kind, body=text)
