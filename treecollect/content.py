# treecollect/content.py

"""
File content capture.

This module streams the bytes of a single file into a binary sink. It is the
content half of a record: the header is written by
:mod:`treecollect.records`, everything after it comes from here.

Features include:
- heuristic binary detection on a fixed lookahead chunk,
- a per-file byte ceiling that is never exceeded,
- bounded memory regardless of file size,
- inline markers instead of failures for unreadable, empty or binary files.
"""


from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

LOOKAHEAD_SIZE = 8192
COPY_CHUNK_SIZE = 64 * 1024

EMPTY_MARKER = b"\n<Empty File>\n\n"
BINARY_MARKER = b"\n<Binary content suppressed>\n\n"


def open_error_marker(error: OSError) -> bytes:
    """Return the inline note written when a file cannot be opened."""
    return f"\n<Error opening file: {error}>\n\n".encode("utf-8", "replace")


def is_binary_chunk(chunk: bytes) -> bool:
    """
    Heuristically determine whether a chunk comes from a binary file.

    A single NUL byte anywhere in the chunk is taken as a strong binary
    indicator.
    """

    return b"\x00" in chunk


def copy_bounded(src: BinaryIO, sink: BinaryIO, limit: int | None) -> int:
    """
    Copy at most ``limit`` bytes from ``src`` to ``sink``.

    Data moves in fixed-size chunks and no read ever asks for more than the
    remaining allowance, so nothing past the limit is read or written.

    Parameters
    ----------
    src : BinaryIO
        Readable binary stream, positioned where copying should start.
    sink : BinaryIO
        Writable binary stream.
    limit : int | None
        Maximum number of bytes to copy. ``None`` copies until EOF.

    Returns
    -------
    int
        Number of bytes copied.
    """

    copied = 0
    while limit is None or copied < limit:
        want = COPY_CHUNK_SIZE if limit is None else min(COPY_CHUNK_SIZE, limit - copied)
        data = src.read(want)
        if not data:
            break
        sink.write(data)
        copied += len(data)
    return copied


def stream_file_content(
    path: Path,
    sink: BinaryIO,
    max_bytes: int | None = None,
) -> int:
    """
    Stream the content block of a file into ``sink``.

    The first :data:`LOOKAHEAD_SIZE` bytes are read up front and scanned for
    NUL bytes. A binary file produces a marker and nothing else is read.
    Otherwise a leading newline, up to ``max_bytes`` bytes of content and two
    trailing newlines are written.

    A file that cannot be opened is not an error for the run: an inline
    marker is written instead and the function returns normally.

    Parameters
    ----------
    path : pathlib.Path
        File to read.
    sink : BinaryIO
        Binary destination, usually the shared buffered output.
    max_bytes : int | None, default=None
        Ceiling on content bytes written for this file. ``None`` means
        unbounded.

    Returns
    -------
    int
        Number of content bytes written (markers are not counted).

    Raises
    ------
    OSError
        If reading fails after the file was opened, or if writing to
        ``sink`` fails (``BrokenPipeError`` included).
    """

    try:
        f = path.open("rb")
    except OSError as e:
        sink.write(open_error_marker(e))
        return 0

    with f:
        chunk = f.read(LOOKAHEAD_SIZE)

        if not chunk:
            sink.write(EMPTY_MARKER)
            return 0

        if is_binary_chunk(chunk):
            sink.write(BINARY_MARKER)
            return 0

        first = len(chunk) if max_bytes is None else min(len(chunk), max_bytes)

        sink.write(b"\n")
        sink.write(chunk[:first])
        written = first

        if max_bytes is None:
            written += copy_bounded(f, sink, None)
        elif max_bytes > first:
            written += copy_bounded(f, sink, max_bytes - first)

    sink.write(b"\n\n")
    return written
