# treecollect/filters.py

"""
Path filtering.

:func:`matches` is called once per discovered path, so the cheap extension
lookup runs before the regular expression.
"""


from __future__ import annotations

import os
from pathlib import Path

from treecollect.config import FilterConfig, Scope


def _as_text(s: str) -> str:
    # Undecodable bytes survive as surrogate escapes; those names match as "".
    try:
        s.encode("utf-8")
    except UnicodeEncodeError:
        return ""
    return s


def extension_of(path: Path) -> str:
    """
    Return the lower-cased extension of ``path`` without its dot.

    The extension is whatever follows the last dot of the final component.
    Names without a dot, dotfiles such as ``.bashrc`` and names ending in a
    dot have the empty extension.
    """

    stem, dot, ext = path.name.rpartition(".")
    if not dot or not stem:
        return ""
    return _as_text(ext).lower()


def scope_path_text(path: Path, config: FilterConfig) -> str:
    """
    Return the full path as the walk produced it from the base path as typed.

    ``Path(".") / "a.rs"`` collapses to ``a.rs``; rebuilding from
    ``config.base_text`` keeps the prefix, so ``--path .`` yields ``./a.rs``.
    """

    try:
        rel = path.relative_to(config.base_path)
    except ValueError:
        return str(path)
    if not rel.parts:
        return config.base_text
    return os.path.join(config.base_text, rel)


def matches(path: Path, is_dir: bool, config: FilterConfig) -> bool:
    """
    Decide whether ``path`` passes the configured filters.

    The extension check is skipped for directories. For both checks the
    entry is rejected when ``found == invert``, which covers whitelist and
    blacklist with the same comparison.

    Parameters
    ----------
    path : pathlib.Path
        Candidate path.
    is_dir : bool
        Whether the candidate is a directory.
    config : FilterConfig
        Active configuration.

    Returns
    -------
    bool
        ``True`` if the path is kept.
    """

    if not is_dir and config.extensions is not None:
        found = extension_of(path) in config.extensions
        if found == config.extension_invert:
            return False

    if config.pattern is not None:
        if config.scope is Scope.NAME:
            text = _as_text(path.name)
        else:
            text = _as_text(scope_path_text(path, config))

        found = config.pattern.search(text) is not None
        if found == config.pattern_invert:
            return False

    return True
