# tests/test_filters.py
from pathlib import Path

import pytest

from treecollect import ConfigError, FilterConfig, Scope, matches
from treecollect.filters import extension_of, scope_path_text


@pytest.mark.parametrize(
    "name, ext",
    [
        ("a.rs", "rs"),
        ("A.RS", "rs"),
        ("archive.tar.gz", "gz"),
        ("Makefile", ""),
        (".bashrc", ""),
        ("trailing.", ""),
    ],
)
def test_extension_of(name, ext):
    assert extension_of(Path("dir") / name) == ext


def test_directory_ignores_extension_check():
    cfg = FilterConfig.build(extensions=["rs"])
    assert matches(Path("src"), True, cfg) is True
    assert matches(Path("src.py"), True, cfg) is True

    cfg = FilterConfig.build(no_extensions=["py"])
    assert matches(Path("pkg.py"), True, cfg) is True


def test_whitelist():
    cfg = FilterConfig.build(extensions=["a", "b"])
    assert matches(Path("x.a"), False, cfg)
    assert matches(Path("x.B"), False, cfg)
    assert not matches(Path("x.c"), False, cfg)
    # no extension is never in the whitelist
    assert not matches(Path("README"), False, cfg)


def test_blacklist():
    cfg = FilterConfig.build(no_extensions=["a", "b"])
    assert not matches(Path("x.a"), False, cfg)
    assert not matches(Path("x.b"), False, cfg)
    assert matches(Path("x.c"), False, cfg)
    assert matches(Path("README"), False, cfg)


def test_extension_normalization():
    cfg = FilterConfig.build(extensions=[" .RS", "..Toml", ""])
    assert cfg.extensions == frozenset({"rs", "toml"})
    assert cfg.extension_invert is False


def test_empty_extension_list_is_rejected():
    with pytest.raises(ConfigError):
        FilterConfig.build(extensions=["", " . "])


def test_both_extension_lists_are_rejected():
    with pytest.raises(ConfigError):
        FilterConfig.build(extensions=["rs"], no_extensions=["py"])


def test_invalid_regex_is_rejected():
    with pytest.raises(ConfigError):
        FilterConfig.build(regex="(unclosed")


@pytest.mark.parametrize("path", [Path("src/test_a.py"), Path("src/a.py"), Path("test/x")])
def test_pattern_inversion_is_complement(path):
    normal = FilterConfig.build(regex="^test")
    inverted = FilterConfig.build(regex="^test", regex_invert=True)
    assert matches(path, False, normal) != matches(path, False, inverted)


def test_scope_name_vs_path():
    p = Path("tests/unit/helpers.py")

    by_name = FilterConfig.build(regex="tests", scope=Scope.NAME)
    assert not matches(p, False, by_name)

    by_path = FilterConfig.build(regex="tests", scope="path")
    assert matches(p, False, by_path)


def test_pattern_is_a_search_not_a_full_match():
    cfg = FilterConfig.build(regex="conf")
    assert matches(Path("app/config.toml"), False, cfg)


def test_pattern_applies_to_directories():
    cfg = FilterConfig.build(extensions=["py"], regex="^src$")
    assert matches(Path("src"), True, cfg)
    assert not matches(Path("lib"), True, cfg)


def test_extension_checked_before_pattern():
    cfg = FilterConfig.build(extensions=["py"], regex="main")
    assert matches(Path("main.py"), False, cfg)
    assert not matches(Path("main.rs"), False, cfg)
    assert not matches(Path("util.py"), False, cfg)


def test_undecodable_stem_keeps_its_extension():
    # surrogate escapes stand in for bytes that are not valid UTF-8
    p = Path("dir") / "bad\udcff.py"

    assert extension_of(p) == "py"
    assert matches(p, False, FilterConfig.build(extensions=["py"]))
    assert not matches(p, False, FilterConfig.build(no_extensions=["py"]))
    # the name as a whole is not text, so the regex sees ""
    assert matches(p, False, FilterConfig.build(regex="^$"))
    assert not matches(p, False, FilterConfig.build(regex="bad"))


def test_no_filters_accepts_everything():
    cfg = FilterConfig.build()
    assert matches(Path("anything.bin"), False, cfg)
    assert matches(Path("dir"), True, cfg)


def test_undecodable_extension_is_empty():
    p = Path("dir") / "name.p\udcffy"

    assert extension_of(p) == ""
    assert matches(p, False, FilterConfig.build(no_extensions=["py"]))


def test_path_scope_keeps_base_path_as_typed():
    # Path(".") / "src/a.rs" collapses to "src/a.rs"
    p = Path(".") / "src" / "a.rs"

    cfg = FilterConfig.build(base_path=".", regex=r"^\./src/", scope="path")
    assert scope_path_text(p, cfg) == "./src/a.rs"
    assert matches(p, False, cfg)

    cfg = FilterConfig.build(base_path="./", regex=r"^\./src/", scope="path")
    assert matches(p, False, cfg)


def test_path_scope_outside_base_uses_path_unchanged():
    cfg = FilterConfig.build(base_path="project", regex="^other/", scope="path")
    assert scope_path_text(Path("other/a.rs"), cfg) == "other/a.rs"
    assert matches(Path("other/a.rs"), False, cfg)
