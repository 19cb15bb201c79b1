from pathlib import Path

import pytest

from steply.browser import FileBrowser, NewEntry, entry_option, glob_options
from steply.entries import EntryFilter, build_entry
from steply.select import OptionKind


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "deep.txt").write_text("x")
    (tmp_path / "b.txt").write_text("hello")
    (tmp_path / "a.py").write_text("print()")
    (tmp_path / ".hidden").write_text("")
    return tmp_path


def names(browser: FileBrowser) -> list[str]:
    return [entry.name for entry in browser.entries]


def test_initial_listing_sorted_dirs_first(tree):
    browser = FileBrowser(tree)
    assert names(browser) == ["sub", "a.py", "b.txt"]
    assert len(browser.select.options) == len(browser.entries)


def test_show_hidden(tree):
    browser = FileBrowser(tree)
    browser.set_show_hidden(True)
    assert ".hidden" in names(browser)
    browser.set_show_hidden(False)
    assert ".hidden" not in names(browser)


def test_toggle_entry_filter(tree):
    browser = FileBrowser(tree)
    browser.toggle_entry_filter(EntryFilter.FILES_ONLY)
    assert browser.entries and all(not e.is_dir for e in browser.entries)
    browser.toggle_entry_filter(EntryFilter.FILES_ONLY)
    assert browser.entry_filter is EntryFilter.ALL
    browser.set_entry_filter(EntryFilter.DIRS_ONLY)
    assert names(browser) == ["sub"]


def test_extension_filter(tree):
    browser = FileBrowser(tree)
    browser.set_extension_filter([".PY"])
    assert names(browser) == ["sub", "a.py"]
    browser.clear_extension_filter()
    assert "b.txt" in names(browser)
    browser.set_extension_filter(["", "."])
    assert browser.extension_filter is None


def test_recursive_fuzzy_query_finds_nested(tree):
    browser = FileBrowser(tree)
    browser.set_query("deep")
    assert names(browser) == ["deep.txt"]
    assert browser.value() == str(tree / "sub" / "deep.txt")
    assert len(browser.matches) == 1


def test_non_recursive_query_stays_in_dir(tree):
    browser = FileBrowser(tree)
    browser.recursive_search = False
    browser.set_query("deep")
    assert browser.entries == []
    assert browser.value() is None


def test_fuzzy_results_put_dirs_first(tree):
    (tree / "deps").mkdir()
    browser = FileBrowser(tree)
    browser.set_query("de")
    flags = [e.is_dir for e in browser.entries]
    assert flags == sorted(flags, reverse=True)
    assert browser.entries[0].name == "deps"


def test_non_recursive_glob(tree):
    browser = FileBrowser(tree)
    browser.set_query("*.txt")
    assert names(browser) == ["b.txt"]


def test_recursive_glob_orders_by_depth(tree):
    browser = FileBrowser(tree)
    browser.set_query("**/*.txt")
    assert names(browser) == ["b.txt", "deep.txt"]


def test_path_mode_prefix(tree):
    browser = FileBrowser(tree)
    browser.set_query("./s")
    assert "sub" in names(browser)
    assert browser.view_dir == tree


def test_query_is_normalized(tree):
    browser = FileBrowser(tree)
    browser.set_query("./sub/./")
    assert browser.query == "./sub/"
    assert names(browser) == ["deep.txt"]


def test_autocomplete_single_dir(tree):
    browser = FileBrowser(tree)
    browser.set_query("./su")
    assert browser.has_autocomplete_candidates()
    assert browser.autocomplete() is True
    assert browser.query == "./sub/"
    assert names(browser) == ["deep.txt"]


def test_autocomplete_without_candidates(tree):
    browser = FileBrowser(tree)
    browser.set_query("./zzz")
    assert not browser.has_autocomplete_candidates()
    assert browser.autocomplete() is False


def test_new_dir_candidate_and_creation(tree):
    browser = FileBrowser(tree)
    browser.set_query("./newdir")
    candidate = browser.new_entry_candidate()
    assert candidate == NewEntry(path=tree / "newdir", label="newdir", is_dir=True)
    created = browser.create_new_entry()
    assert created == tree / "newdir"
    assert created.is_dir()
    assert browser.current_dir == tree / "newdir"


def test_new_file_creation(tree):
    browser = FileBrowser(tree)
    browser.set_query("./made.md")
    created = browser.create_new_entry()
    assert created == tree / "made.md"
    assert created.is_file()


def test_new_entry_respects_filters(tree):
    browser = FileBrowser(tree)
    browser.set_entry_filter(EntryFilter.FILES_ONLY)
    browser.set_query("./plaindir")
    assert browser.new_entry_candidate() is None
    browser.set_extension_filter(["py"])
    browser.set_query("./note.txt")
    assert browser.new_entry_candidate() is None


def test_existing_path_is_not_candidate(tree):
    browser = FileBrowser(tree)
    browser.set_query("./a.py")
    assert browser.new_entry_candidate() is None


def test_enter_and_leave_dir(tree):
    browser = FileBrowser(tree)
    browser.enter_dir(tree / "sub")
    assert browser.current_dir == tree / "sub"
    assert browser.query == str(tree / "sub") + "/"
    assert names(browser) == ["deep.txt"]
    assert browser.leave_dir() is True
    assert browser.current_dir == tree


def test_entry_option_kinds(tree):
    file_entry = build_entry("a.py", tree / "a.py", False)
    dir_entry = build_entry("sub", tree / "sub", True)
    assert entry_option(file_entry).kind is OptionKind.PLAIN
    assert entry_option(file_entry, [(0, 1)]).kind is OptionKind.HIGHLIGHTED
    styled = entry_option(dir_entry)
    assert styled.kind is OptionKind.STYLED
    assert styled.text == "sub"


def test_entry_option_relative_prefix(tree):
    nested = build_entry("deep.txt", tree / "sub" / "deep.txt", False)
    option = entry_option(nested, (), tree, True, False)
    assert option.kind is OptionKind.SPLIT
    assert option.text == "sub/deep.txt"
    assert option.name_start == len("sub/")


def test_entry_option_info_suffix(tree):
    path = tree / "b.txt"
    entry = build_entry("b.txt", path, False, path.stat())
    option = entry_option(entry, (), None, False, True)
    assert option.kind is OptionKind.SUFFIX
    assert option.suffix_start == len("b.txt")
    assert option.text.startswith("b.txt  ")


def test_glob_options_highlights(tree):
    entries = [
        build_entry("a.py", tree / "a.py", False),
        build_entry("b.txt", tree / "b.txt", False),
    ]
    matched, options = glob_options(entries, "*.py", tree)
    assert [e.name for e in matched] == ["a.py"]
    start = "a.py".index(".py")
    assert options[0].highlights == ((start, start + len(".py")),)


def test_toggle_info_changes_options(tree):
    browser = FileBrowser(tree)
    browser.toggle_info()
    assert browser.show_info is True
    file_options = [o for o, e in zip(browser.select.options, browser.entries) if not e.is_dir]
    assert all(o.kind is OptionKind.SUFFIX for o in file_options)