"""Data models for extracted documentation.

Every recognized declaration idiom is normalized into one of the Entity
subclasses below; the Markdown generator only ever sees these.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class TagKind(str, Enum):
    SUMMARY = "summary"
    PARAM = "param"
    RETURN = "return"
    RAISE = "raise"
    EXAMPLE = "example"
    SEE = "see"
    SINCE = "since"
    AUTHOR = "author"
    OPTION = "option"
    UNKNOWN = "unknown"


class Modifier(str, Enum):
    # Function parameters
    REQUIRED = "required"
    OPTIONAL = "optional"
    BLOCK = "block"
    REPEATED = "repeated"
    # Resource type attributes
    NAMEVAR = "namevar"
    READ_ONLY = "read_only"
    PARAMETER = "parameter"
    PROPERTY = "property"


class EntityKind(str, Enum):
    CLASS = "class"
    DEFINED_TYPE = "defined_type"
    FUNCTION = "function"
    FUNCTION_4X = "function_4x"
    RESOURCE_TYPE = "resource_type"
    PROVIDER = "provider"


@dataclass(frozen=True)
class Tag:
    """One parsed documentation tag.

    subject holds the parameter name for @param, the title for @example and
    the options-hash name for @option. types holds a bracketed type list
    such as the `[Undef]` in `@return [Undef] Returns nothing.`
    """

    kind: TagKind
    body: str = ""
    subject: str | None = None
    types: str | None = None
    key: str | None = None  # @option key, e.g. ":foo"
    tag_name: str | None = None  # original name for UNKNOWN tags


class Documented:
    """Tag lookups shared by entities and overloads."""

    tags: tuple[Tag, ...]
    overview: str

    def tags_of(self, kind: TagKind) -> list[Tag]:
        return [t for t in self.tags if t.kind == kind]

    def first_tag(self, kind: TagKind) -> Tag | None:
        for t in self.tags:
            if t.kind == kind:
                return t
        return None

    @property
    def summary(self) -> str | None:
        tag = self.first_tag(TagKind.SUMMARY)
        return tag.body if tag and tag.body else None

    def param_description(self, name: str) -> str:
        for t in self.tags:
            if t.kind == TagKind.PARAM and t.subject == name:
                return t.body
        return ""


@dataclass(frozen=True)
class Parameter:
    """A parameter of a class, defined type or function, or a resource attribute.

    declared_type and default are verbatim source text; None means the
    source did not declare one (a missing default is a required parameter).
    """

    name: str
    declared_type: str | None = None
    default: str | None = None
    modifier: Modifier = Modifier.REQUIRED
    description: str = ""
    required_features: tuple[str, ...] = ()


@dataclass(frozen=True)
class Overload(Documented):
    """One dispatch block of a 4.x function."""

    name: str
    overview: str = ""
    tags: tuple[Tag, ...] = ()
    parameters: tuple[Parameter, ...] = ()
    return_type: str = "Any"


@dataclass(frozen=True)
class Feature:
    name: str
    description: str = ""


@dataclass(frozen=True)
class Relationship:
    """An automatic relationship (autorequire, autobefore, ...) to another type."""

    type_name: str
    target: str | None = None
    kind: str = "autorequire"


@dataclass(frozen=True)
class Condition:
    key: str
    value: str


@dataclass(frozen=True)
class Command:
    name: str
    path: str
    optional: bool = False


@dataclass(frozen=True)
class Entity(Documented):
    """Base for everything stored in the Registry."""

    kind: ClassVar[EntityKind]

    name: str
    overview: str = ""
    tags: tuple[Tag, ...] = ()
    file: str = ""
    line: int = 0

    @property
    def qualified_name(self) -> str:
        return self.name

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}" if self.line else self.file or "<unknown>"


@dataclass(frozen=True)
class PuppetClass(Entity):
    kind: ClassVar[EntityKind] = EntityKind.CLASS

    parameters: tuple[Parameter, ...] = ()
    superclass: str | None = None


@dataclass(frozen=True)
class DefinedType(Entity):
    kind: ClassVar[EntityKind] = EntityKind.DEFINED_TYPE

    parameters: tuple[Parameter, ...] = ()


@dataclass(frozen=True)
class PuppetFunction(Entity):
    """A function written in the Puppet language."""

    kind: ClassVar[EntityKind] = EntityKind.FUNCTION

    parameters: tuple[Parameter, ...] = ()
    return_type: str = "Any"


@dataclass(frozen=True)
class Function4x(Entity):
    """A function declared with Puppet::Functions.create_function."""

    kind: ClassVar[EntityKind] = EntityKind.FUNCTION_4X

    overloads: tuple[Overload, ...] = ()


@dataclass(frozen=True)
class ResourceType(Entity):
    kind: ClassVar[EntityKind] = EntityKind.RESOURCE_TYPE

    attributes: tuple[Parameter, ...] = ()
    features: tuple[Feature, ...] = ()
    relationships: tuple[Relationship, ...] = ()

    @property
    def autorequires(self) -> list[Relationship]:
        return [r for r in self.relationships if r.kind == "autorequire"]


@dataclass(frozen=True)
class Provider(Entity):
    kind: ClassVar[EntityKind] = EntityKind.PROVIDER

    type_name: str = ""
    confines: tuple[Condition, ...] = ()
    defaults: tuple[Condition, ...] = ()
    features: tuple[str, ...] = ()
    commands: tuple[Command, ...] = ()

    @property
    def qualified_name(self) -> str:
        # Provider names are only unique per resource type
        return f"{self.type_name}::{self.name}" if self.type_name else self.name


@dataclass(frozen=True)
class TypeExtension:
    """Attributes added to an existing resource type from outside its newtype block."""

    type_name: str
    attributes: tuple[Parameter, ...] = ()
    file: str = ""
    line: int = 0
