# treecollect/records.py

"""Record formatting: one header line plus an optional content block per file."""


from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO

from treecollect.config import FilterConfig
from treecollect.content import stream_file_content


def display_path(path: Path, config: FilterConfig) -> Path:
    """
    Return the path as it should appear in the output.

    With ``absolute_output`` the path is canonicalized; otherwise it is made
    relative to ``config.base_path``. Either way the original path is used
    when the conversion is not possible.
    """

    if config.absolute_output:
        # Older pathlib reports symlink loops as RuntimeError.
        try:
            return path.resolve(strict=True)
        except (OSError, RuntimeError):
            return path
    try:
        return path.relative_to(config.base_path)
    except ValueError:
        return path


def write_record(path: Path, config: FilterConfig, sink: BinaryIO) -> None:
    """
    Write the record for ``path`` to ``sink``.

    Without content capture the record is the bare displayed path. With it,
    a ``=== <path> ===`` header is followed by the content block.
    """

    shown = os.fsencode(display_path(path, config))

    if not config.read_content:
        sink.write(shown + b"\n")
        return

    sink.write(b"=== " + shown + b" ===\n")
    stream_file_content(path, sink, config.max_bytes)
