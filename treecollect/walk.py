# treecollect/walk.py

"""
Filesystem traversal.

This module yields the candidate entries that the collection pipeline
filters and writes. Traversal is depth-first and deterministic (directories
first, case-insensitive sorting), supports a depth limit, hidden-entry
skipping, optional symbolic link following, and gitignore-style exclusion:
if a directory is excluded, its entire subtree is skipped.

Gitignore pattern matching is delegated to :mod:`pathspec`.
"""


from __future__ import annotations

import errno
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

import pathspec

from treecollect.config import ConfigError, FilterConfig

# Version control metadata, build output and dependency directories.
DEFAULT_EXCLUDE_PATTERNS = (
    ".git",
    ".hg/",
    ".svn/",
    "node_modules/",
    "target/",
    "__pycache__/",
    ".venv/",
    "venv/",
    "dist/",
    "build/",
    ".tox/",
    ".mypy_cache/",
    ".pytest_cache/",
    ".ruff_cache/",
)

IGNORE_FILE_NAMES = (".gitignore", ".ignore")


@dataclass(frozen=True)
class CandidateEntry:
    """One traversal step: a path, its depth below the root and its type."""

    path: Path
    depth: int
    is_dir: bool
    error: OSError | None = None


@dataclass(frozen=True)
class _Rules:
    base: Path
    spec: pathspec.PathSpec

    def ignores(self, p: Path, is_dir: bool) -> bool:
        rel = p.relative_to(self.base).as_posix()
        return self.spec.match_file(rel + "/" if is_dir else rel)


@dataclass
class _Walk:
    root: Path
    max_depth: int | None
    include_hidden: bool
    follow_symlinks: bool
    read_ignore_files: bool
    rules: list[_Rules] = field(default_factory=list)
    ancestors: set[tuple[int, int]] = field(default_factory=set)


def compile_patterns(patterns: Iterable[str]) -> pathspec.PathSpec:
    """
    Compile gitignore-style patterns.

    Raises
    ------
    ConfigError
        If a pattern is not valid gitignore syntax.
    """

    patterns = list(patterns)
    try:
        return pathspec.GitIgnoreSpec.from_lines(patterns)
    except ValueError as e:
        raise ConfigError(f"invalid exclude pattern: {e}") from e


def is_dir(p: Path, follow_symlinks: bool = True) -> bool:
    """
    Safely determine whether a path refers to a directory.

    Filesystem errors (e.g. permission issues) make the path count as a
    non-directory. Without ``follow_symlinks`` a symlink is never a directory.
    """

    try:
        if not follow_symlinks and p.is_symlink():
            return False
        return p.is_dir()
    except OSError:
        return False


def _dir_key(p: Path) -> tuple[int, int] | None:
    try:
        st = p.stat()
    except OSError:
        return None
    return (st.st_dev, st.st_ino)


def iter_entries(
    root: Path,
    *,
    max_depth: int | None = None,
    include_hidden: bool = False,
    follow_symlinks: bool = False,
    exclude: Iterable[str] = (),
    default_excludes: bool = True,
) -> Iterator[CandidateEntry]:
    """
    Walk ``root`` and yield one :class:`CandidateEntry` per visited path.

    The root itself comes first, at depth ``0``. Children are visited in
    stable order: directories before files, each group sorted
    case-insensitively by name.

    Exclusion is checked before an entry is yielded, and excluded
    directories are not descended into.

    Parameters
    ----------
    root : pathlib.Path
        Directory (or single file) to walk.
    max_depth : int | None, default=None
        Deepest level to yield. ``0`` yields only the root.
    include_hidden : bool, default=False
        Whether to visit entries whose name starts with a dot.
    follow_symlinks : bool, default=False
        Whether to follow symbolic links to directories. Loops are reported
        as error entries.
    exclude : Iterable[str], default=()
        Extra gitignore-style patterns, relative to ``root``.
    default_excludes : bool, default=True
        Whether to apply :data:`DEFAULT_EXCLUDE_PATTERNS` and the
        ``.gitignore`` / ``.ignore`` files found along the way.

    Returns
    -------
    Iterator[CandidateEntry]
        Lazily produced entries. Directories that cannot be listed are
        reported as entries with ``error`` set.

    Raises
    ------
    ConfigError
        If an ``exclude`` pattern is invalid. This is raised immediately,
        before any entry is produced.
    """

    state = _Walk(
        root=root,
        max_depth=max_depth,
        include_hidden=include_hidden,
        follow_symlinks=follow_symlinks,
        read_ignore_files=default_excludes,
    )
    if default_excludes:
        state.rules.append(_Rules(root, compile_patterns(DEFAULT_EXCLUDE_PATTERNS)))
    exclude = list(exclude)
    if exclude:
        state.rules.append(_Rules(root, compile_patterns(exclude)))

    return _walk_root(state)


def entries_for(config: FilterConfig) -> Iterator[CandidateEntry]:
    """Walk ``config.base_path`` with the traversal settings of ``config``."""
    return iter_entries(
        config.base_path,
        max_depth=config.max_depth,
        include_hidden=config.include_hidden,
        follow_symlinks=config.follow_symlinks,
        exclude=config.exclude,
        default_excludes=config.default_excludes,
    )


def _walk_root(state: _Walk) -> Iterator[CandidateEntry]:
    root = state.root
    root_is_dir = is_dir(root)
    yield CandidateEntry(root, 0, root_is_dir)

    if not root_is_dir or state.max_depth == 0:
        return

    key = _dir_key(root)
    if key is not None:
        state.ancestors.add(key)
    yield from _walk_dir(state, root, 0)


def _load_ignore_files(state: _Walk, d: Path, depth: int) -> Iterator[CandidateEntry]:
    for name in IGNORE_FILE_NAMES:
        f = d / name
        try:
            if not f.is_file():
                continue
            lines = f.read_text(encoding="utf-8", errors="replace").splitlines()
            spec = pathspec.GitIgnoreSpec.from_lines(lines)
        except OSError as e:
            yield CandidateEntry(f, depth, False, error=e)
            continue
        except ValueError as e:
            yield CandidateEntry(
                f, depth, False, error=OSError(errno.EINVAL, f"invalid pattern: {e}", str(f))
            )
            continue
        state.rules.append(_Rules(d, spec))


def _excluded(state: _Walk, p: Path, p_is_dir: bool) -> bool:
    if not state.include_hidden and p.name.startswith("."):
        return True
    return any(r.ignores(p, p_is_dir) for r in state.rules)


def _walk_dir(state: _Walk, d: Path, depth: int) -> Iterator[CandidateEntry]:
    try:
        children = list(d.iterdir())
    except OSError as e:
        yield CandidateEntry(d, depth, True, error=e)
        return

    n_rules = len(state.rules)
    if state.read_ignore_files:
        yield from _load_ignore_files(state, d, depth + 1)

    typed = [(c, is_dir(c, state.follow_symlinks)) for c in children]
    # Stable, "tree-like" order: dirs first, then files; case-insensitive name sort.
    typed.sort(key=lambda t: (not t[1], t[0].name.casefold(), t[0].name))

    child_depth = depth + 1
    for child, child_is_dir in typed:
        if _excluded(state, child, child_is_dir):
            continue

        if not child_is_dir:
            yield CandidateEntry(child, child_depth, False)
            continue

        key = _dir_key(child) if state.follow_symlinks else None
        if key is not None and key in state.ancestors:
            yield CandidateEntry(
                child,
                child_depth,
                True,
                error=OSError(errno.ELOOP, "file system loop found", str(child)),
            )
            continue

        yield CandidateEntry(child, child_depth, True)

        if state.max_depth is not None and child_depth >= state.max_depth:
            continue

        if key is not None:
            state.ancestors.add(key)
        yield from _walk_dir(state, child, child_depth)
        if key is not None:
            state.ancestors.discard(key)

    del state.rules[n_rules:]
