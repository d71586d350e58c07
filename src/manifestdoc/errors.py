"""Exception hierarchy for manifestdoc.

Skip-level problems (a source unit the readers cannot parse) are raised as
SourceParseError and caught by the pipeline. Collision-level and fatal-level
problems (DuplicateNameError, OutputError) propagate to the caller.
"""

from __future__ import annotations


class ManifestdocError(Exception):
    """Base exception for manifestdoc operations."""

    pass


class ConfigError(ManifestdocError):
    """Raised when settings fail validation."""

    pass


class SourceParseError(ManifestdocError):
    """Raised when a source unit cannot be parsed at all."""

    def __init__(self, file: str, message: str, line: int | None = None):
        location = f"{file}:{line}" if line else file
        super().__init__(f"{location}: {message}")
        self.file = file
        self.line = line
        self.reason = message


class DuplicateNameError(ManifestdocError):
    """Raised when two entities of the same kind share a name.

    This is an authoring error in the documented sources: picking either
    entity would produce misleading documentation.
    """

    def __init__(self, kind: str, name: str, first: str, second: str):
        super().__init__(
            f"duplicate {kind} '{name}': declared at {first} and again at {second}"
        )
        self.kind = kind
        self.name = name
        self.first = first
        self.second = second


class OutputError(ManifestdocError):
    """Raised when the rendered document cannot be written."""

    def __init__(self, target: str, message: str):
        super().__init__(f"cannot write {target}: {message}")
        self.target = target


class DocumentationError(ManifestdocError):
    """Raised in strict mode when validation reports errors."""

    def __init__(self, errors: list[str]):
        super().__init__(f"{len(errors)} documentation error(s): " + "; ".join(errors))
        self.errors = errors
