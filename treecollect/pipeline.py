# treecollect/pipeline.py

"""
Collection pipeline.

:func:`collect` consumes traversal entries, applies the path filter, writes
one record per accepted file to a shared sink and tallies the run. A closed
downstream consumer (broken pipe) ends the run early without an error.
"""


from __future__ import annotations

import errno
import logging
import threading
import time
from dataclasses import dataclass
from typing import BinaryIO, Iterable

from treecollect.config import FilterConfig
from treecollect.filters import matches
from treecollect.records import write_record
from treecollect.walk import CandidateEntry

log = logging.getLogger(__name__)

SINK_BUFFER_SIZE = 64 * 1024


def is_broken_pipe(e: OSError) -> bool:
    """Return ``True`` if ``e`` means the consumer of the sink went away."""
    return isinstance(e, BrokenPipeError) or e.errno == errno.EPIPE


class SharedSink:
    """
    Output stream with a lock held for the duration of every record.

    Records are written from a single producer today; the lock keeps a
    header and its content block together if that ever changes.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream
        self.lock = threading.Lock()

    def flush(self) -> None:
        with self.lock:
            self.stream.flush()


@dataclass
class RunStats:
    files_processed: int = 0
    elapsed: float = 0.0
    aborted: bool = False


def collect(
    config: FilterConfig,
    entries: Iterable[CandidateEntry],
    sink: SharedSink,
) -> RunStats:
    """
    Run the filter-and-write pipeline over ``entries``.

    Entries at depth ``0`` (the root) and directories are never written.
    Traversal errors and per-file write errors are logged unless
    ``config.quiet`` is set, and processing continues with the next entry.

    Parameters
    ----------
    config : FilterConfig
        Active configuration.
    entries : Iterable[CandidateEntry]
        Traversal output, consumed in order.
    sink : SharedSink
        Destination for records. It is flushed before returning.

    Returns
    -------
    RunStats
        Number of files written, elapsed wall time, and whether the run
        stopped because the downstream consumer closed.

    Raises
    ------
    OSError
        If the final flush fails for a reason other than a broken pipe.
    """

    stats = RunStats()
    start = time.perf_counter()

    for entry in entries:
        if entry.error is not None:
            if not config.quiet:
                log.warning("Traversal Error: %s", entry.error)
            continue

        if entry.depth == 0 or entry.is_dir:
            continue

        if not matches(entry.path, entry.is_dir, config):
            continue

        try:
            with sink.lock:
                write_record(entry.path, config, sink.stream)
        except OSError as e:
            if is_broken_pipe(e):
                stats.aborted = True
                break
            if not config.quiet:
                log.warning("Error processing %s: %s", entry.path, e)
        stats.files_processed += 1

    if not stats.aborted:
        try:
            sink.flush()
        except OSError as e:
            if not is_broken_pipe(e):
                raise
            stats.aborted = True

    stats.elapsed = time.perf_counter() - start

    if not config.quiet and config.output is None and not stats.aborted:
        log.info(
            "Done. Processed %d files in %.2fs", stats.files_processed, stats.elapsed
        )

    return stats
