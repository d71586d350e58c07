"""Command-line entry point.

Usage:
    manifestdoc [PATH ...] > REFERENCE.md

Paths are files or directories (searched for *.pp and *.rb). Without
arguments the paths come from MANIFESTDOC_SOURCES. Other settings:

    MANIFESTDOC_OUTPUT     write here instead of stdout
    MANIFESTDOC_TITLE      document title (default "Reference")
    MANIFESTDOC_STRICT     fail on undocumented entities
    MANIFESTDOC_LOG_LEVEL  DEBUG, INFO, WARNING (default), ERROR
"""

from __future__ import annotations

import logging
import sys

from .config import Settings
from .errors import ConfigError, ManifestdocError
from .output import write_output
from .pipeline import document

log = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Generate the reference document. Returns the process exit status."""
    args = sys.argv[1:] if argv is None else argv

    try:
        settings = Settings.from_env(sources=list(args) or None)
    except ConfigError as e:
        print(f"manifestdoc: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not settings.sources:
        log.error("No source paths given (pass them as arguments or set MANIFESTDOC_SOURCES)")
        return 1

    try:
        markdown = document(settings.sources, settings)
        write_output(markdown, settings.output)
    except ManifestdocError as e:
        log.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
