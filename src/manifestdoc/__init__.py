"""manifestdoc - Markdown reference documentation for Puppet modules.

Reads Puppet manifests and the Ruby files that define functions, resource
types and providers, and renders one Markdown reference document.

Example:
    from manifestdoc import Settings, document

    markdown = document(["manifests", "lib"], Settings(title="apt"))
"""

from manifestdoc.config import Settings
from manifestdoc.errors import (
    ConfigError,
    DocumentationError,
    DuplicateNameError,
    ManifestdocError,
    OutputError,
    SourceParseError,
)
from manifestdoc.generators import generate_markdown
from manifestdoc.output import write_output
from manifestdoc.pipeline import (
    ExtractionResult,
    SkippedUnit,
    SourceUnit,
    build_registry,
    document,
    extract_units,
)
from manifestdoc.registry import Registry

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DocumentationError",
    "DuplicateNameError",
    "ExtractionResult",
    "ManifestdocError",
    "OutputError",
    "Registry",
    "Settings",
    "SkippedUnit",
    "SourceParseError",
    "SourceUnit",
    "build_registry",
    "document",
    "extract_units",
    "generate_markdown",
    "write_output",
]
