import os
import time
from pathlib import Path

import pytest

from steply.entries import (
    EntryFilter,
    FileEntry,
    build_entry,
    filter_entries,
    format_age,
    format_size,
    info_suffix,
    list_dir,
    list_dir_recursive,
    list_dir_recursive_glob,
    longest_common_prefix,
    normalize_ext,
    prefilter_entries,
)


def make(name, is_dir=False):
    return build_entry(name, Path("/base") / name, is_dir)


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "src" / "sub").mkdir(parents=True)
    (tmp_path / "docs").mkdir()
    (tmp_path / "src" / "a.rs").write_text("fn")
    (tmp_path / "src" / "sub" / "b.rs").write_text("fn")
    (tmp_path / "top.rs").write_text("hello")
    (tmp_path / "docs" / "readme.md").write_text("doc")
    (tmp_path / ".hidden").write_text("x")
    return tmp_path


def test_normalize_ext_strips_dots_and_lowercases():
    assert normalize_ext(".TXT") == "txt"
    assert normalize_ext("..Md") == "md"
    assert normalize_ext("") == ""


def test_build_entry_extension():
    assert make("Archive.TAR.GZ").ext_lower == "gz"
    assert make("README").ext_lower is None
    assert make("file.").ext_lower is None
    assert make("pkg.d", is_dir=True).ext_lower is None


def test_name_lower_is_ascii_only():
    assert make("ÄBc").name_lower == "Äbc"


def test_build_entry_from_stat(tmp_path):
    target = tmp_path / "data.bin"
    target.write_bytes(b"12345")
    entry = build_entry("data.bin", target, False, os.stat(target))
    assert entry.size == 5
    assert entry.modified == os.stat(target).st_mtime
    dir_entry = build_entry("d", tmp_path, True, os.stat(tmp_path))
    assert dir_entry.size is None
    assert dir_entry.modified is not None and dir_entry.modified > 0


def test_sort_key_puts_directories_first():
    entries = [make("b.txt"), make("zeta", True), make("A.txt"), make("alpha", True)]
    ordered = sorted(entries, key=FileEntry.sort_key)
    assert [e.name for e in ordered] == ["alpha", "zeta", "A.txt", "b.txt"]


def test_list_dir_hides_hidden_and_sorts(tree):
    names = [e.name for e in list_dir(tree, True)]
    assert names == ["docs", "src", "top.rs"]
    with_hidden = [e.name for e in list_dir(tree, False)]
    assert ".hidden" in with_hidden
    assert len(with_hidden) == len(names) + 1


def test_list_dir_entry_metadata(tree):
    by_name = {e.name: e for e in list_dir(tree, True)}
    assert by_name["top.rs"].size == len("hello")
    assert by_name["src"].is_dir
    assert by_name["src"].size is None
    assert by_name["top.rs"].path == tree / "top.rs"


def test_list_dir_missing_directory(tmp_path):
    assert list_dir(tmp_path / "nope", True) == []


def test_list_dir_recursive(tree):
    entries = list_dir_recursive(tree, True)
    names = [e.name for e in entries]
    assert set(names) == {"src", "sub", "docs", "a.rs", "b.rs", "top.rs", "readme.md"}
    assert entries == sorted(entries, key=FileEntry.sort_key)
    assert (tree / "src" / "sub" / "b.rs") in {e.path for e in entries}


def test_recursive_glob_double_star(tree):
    names = {e.name for e in list_dir_recursive_glob(tree, True, "**/*.rs")}
    assert names == {"a.rs", "b.rs", "top.rs"}


def test_recursive_glob_fixed_depth(tree):
    entries = list_dir_recursive_glob(tree, True, "src/*.rs")
    assert [e.path for e in entries] == [tree / "src" / "a.rs"]


def test_recursive_glob_wildcard_dir(tree):
    entries = list_dir_recursive_glob(tree, True, "*/*.md")
    assert [e.name for e in entries] == ["readme.md"]


def test_recursive_glob_backslashes(tree):
    forward = list_dir_recursive_glob(tree, True, "src/*.rs")
    backward = list_dir_recursive_glob(tree, True, "src\\*.rs")
    assert forward == backward


def test_filter_entries_kinds():
    entries = [make("d", True), make("a.txt"), make("b.py")]
    assert [e.name for e in filter_entries(entries, EntryFilter.FILES_ONLY, None)] == ["a.txt", "b.py"]
    assert [e.name for e in filter_entries(entries, EntryFilter.DIRS_ONLY, None)] == ["d"]
    assert filter_entries(entries, EntryFilter.ALL, None) == entries


def test_filter_entries_extensions_keep_dirs():
    entries = [make("d", True), make("a.TXT"), make("b.py"), make("noext")]
    kept = filter_entries(entries, EntryFilter.ALL, {"txt"})
    assert [e.name for e in kept] == ["d", "a.TXT"]


def test_format_size_bytes_and_units():
    assert format_size(0) == "0B"
    assert format_size(1023) == "1023B"
    assert format_size(1024) == "1.0K"
    assert format_size(10 * 1024) == "10K"
    assert format_size(1024 * 1024).endswith("M")


@pytest.mark.parametrize(
    "delta, unit",
    [(0, "s"), (59, "s"), (60, "m"), (3600, "h"), (86400, "d"), (86400 * 30, "mo"), (86400 * 365, "y")],
)
def test_format_age_units(delta, unit):
    result = format_age(1_000_000_000 - delta, 1_000_000_000)
    assert result.endswith(unit)
    assert result[: -len(unit)].isdigit()


def test_format_age_future_is_zero():
    assert format_age(200.0, 100.0) == format_age(100.0, 100.0)
    assert format_age(100.0, 100.0).startswith("0")


def test_format_age_defaults_to_now():
    assert format_age(time.time()).endswith("s")


def test_info_suffix():
    now = 1_000_000.0
    file_entry = FileEntry("f.txt", Path("/f.txt"), False, 2048, now - 120)
    assert info_suffix(file_entry, now) == f"{format_size(2048)} {format_age(now - 120, now)}"
    dir_entry = FileEntry("d", Path("/d"), True, 2048, now - 120)
    assert info_suffix(dir_entry, now) == format_age(now - 120, now)
    assert info_suffix(make("bare.txt"), now) is None


def test_longest_common_prefix():
    entries = [make("alpha"), make("alphabet"), make("alps")]
    assert longest_common_prefix(entries, "al") == "alp"
    assert longest_common_prefix([make("x1"), make("y1")], "q") == "q"
    assert longest_common_prefix([], "pre") == "pre"


def test_prefilter_contains():
    entries = [make("Abc.txt"), make("xyz"), make("zabz")]
    assert prefilter_entries(entries, "AB") == [0, 2]


def test_prefilter_short_or_path_queries():
    entries = [make("abc")]
    assert prefilter_entries(entries, "a") is None
    assert prefilter_entries(entries, "a/b") is None
    assert prefilter_entries(entries, "zz") is None


def test_prefilter_dot_suffix():
    entries = [make("a.TXT"), make("b.py"), make("c.txt")]
    assert prefilter_entries(entries, ".txt") == [0, 2]
    assert prefilter_entries(entries, ".rs") is None