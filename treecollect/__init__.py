"""
treecollect — filter a directory tree and bundle the matching files.

This package provides a small pipeline to:
- walk a directory tree with gitignore-style exclusion,
- keep files by extension and/or regular expression,
- stream each kept path, and optionally its content, into one output.

Content capture skips binary files, honours a per-file byte ceiling and uses
bounded memory, so the output can be piped into other tools safely.
"""

from __future__ import annotations

__version__ = "1.1.0"

from .config import ConfigError, FilterConfig, Scope
from .content import stream_file_content
from .filters import matches
from .pipeline import RunStats, SharedSink, collect
from .records import write_record
from .walk import CandidateEntry, iter_entries

__all__ = [
    "CandidateEntry",
    "ConfigError",
    "FilterConfig",
    "RunStats",
    "Scope",
    "SharedSink",
    "collect",
    "iter_entries",
    "matches",
    "stream_file_content",
    "write_record",
]
