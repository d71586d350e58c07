"""Writing the rendered document to a file or stdout."""

from __future__ import annotations

import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import TextIO

from .errors import OutputError

log = logging.getLogger(__name__)


def write_output(text: str, path: str | Path | None = None, stream: TextIO | None = None) -> None:
    """Write text in one go, to path if given, otherwise to stream (stdout).

    File output goes to a temporary file in the target directory which is then
    renamed over the target, so a failed write never leaves a partial file.

    Raises:
        OutputError: If the text cannot be written.
    """
    if path is None:
        out = stream or sys.stdout
        try:
            out.write(text)
            out.flush()
        except OSError as e:
            raise OutputError("<stdout>", str(e)) from e
        return

    target = Path(path)
    directory = target.parent if str(target.parent) else Path(".")
    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.replace(tmp_name, target)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OutputError(str(target), str(e)) from e
    log.info(f"Wrote {target} ({len(text.encode('utf-8'))} bytes)")
