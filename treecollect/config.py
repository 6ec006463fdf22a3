# treecollect/config.py

"""
Run configuration.

All user input is normalized once into a frozen :class:`FilterConfig`, which
is then shared read-only by the walker, the filters and the writers.
"""


from __future__ import annotations

import enum
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable


class ConfigError(ValueError):
    """Raised when user supplied settings cannot be turned into a configuration."""


class Scope(enum.Enum):
    """Which string the regular expression is tested against."""

    NAME = "name"
    PATH = "path"


def normalize_extensions(raw: Iterable[str]) -> frozenset[str]:
    """
    Normalize user supplied extensions for case-insensitive lookup.

    Surrounding whitespace and leading dots are stripped and the result is
    lower-cased, so ``" .RS"`` and ``"rs"`` are the same entry. Blank entries
    are dropped.

    Raises
    ------
    ConfigError
        If nothing is left after normalization.
    """

    exts = frozenset(
        e.strip().lstrip(".").lower() for e in raw if e.strip().lstrip(".")
    )
    if not exts:
        raise ConfigError("extension list is empty")
    return exts


@dataclass(frozen=True)
class FilterConfig:
    # Filters
    extensions: frozenset[str] | None = None
    extension_invert: bool = False
    pattern: re.Pattern[str] | None = None
    pattern_invert: bool = False
    scope: Scope = Scope.NAME

    # Walker
    base_path: Path = field(default_factory=lambda: Path("."))
    # base path as typed; pathlib drops a leading "." component
    base_text: str = "."
    max_depth: int | None = None
    exclude: tuple[str, ...] = ()
    default_excludes: bool = True
    include_hidden: bool = False
    follow_symlinks: bool = False

    # Output
    output: Path | None = None
    absolute_output: bool = False
    max_bytes: int | None = None
    read_content: bool = False
    quiet: bool = False

    @classmethod
    def build(
        cls,
        *,
        base_path: Path | str = ".",
        extensions: Iterable[str] | None = None,
        no_extensions: Iterable[str] | None = None,
        regex: str | None = None,
        regex_invert: bool = False,
        scope: Scope | str = Scope.NAME,
        max_depth: int | None = None,
        exclude: Iterable[str] | None = None,
        default_excludes: bool = True,
        include_hidden: bool = False,
        follow_symlinks: bool = False,
        output: Path | str | None = None,
        absolute_output: bool = False,
        max_bytes: int | None = None,
        read_content: bool = False,
        quiet: bool = False,
    ) -> FilterConfig:
        """
        Validate raw settings and build the immutable configuration.

        ``extensions`` selects whitelist mode and ``no_extensions`` blacklist
        mode; only one of them may be given.

        Raises
        ------
        ConfigError
            On conflicting extension lists, an empty extension list, an
            invalid regular expression, or a negative depth or byte limit.
        """

        if extensions is not None and no_extensions is not None:
            raise ConfigError("--extension and --no-extension are mutually exclusive")

        exts: frozenset[str] | None = None
        invert = False
        if extensions is not None:
            exts = normalize_extensions(extensions)
        elif no_extensions is not None:
            exts, invert = normalize_extensions(no_extensions), True

        pattern = None
        if regex is not None:
            try:
                pattern = re.compile(regex)
            except re.error as e:
                raise ConfigError(f"invalid regex {regex!r}: {e}") from e

        if max_depth is not None and max_depth < 0:
            raise ConfigError("depth must not be negative")
        if max_bytes is not None and max_bytes < 0:
            raise ConfigError("max-bytes must not be negative")

        return cls(
            extensions=exts,
            extension_invert=invert,
            pattern=pattern,
            pattern_invert=regex_invert,
            scope=Scope(scope),
            base_path=Path(base_path),
            base_text=os.fspath(base_path),
            max_depth=max_depth,
            exclude=tuple(p.strip() for p in exclude or () if p.strip()),
            default_excludes=default_excludes,
            include_hidden=include_hidden,
            follow_symlinks=follow_symlinks,
            output=Path(output) if output is not None else None,
            absolute_output=absolute_output,
            max_bytes=max_bytes,
            read_content=read_content,
            quiet=quiet,
        )
