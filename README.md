# steply

Building blocks for interactive terminal prompts, using only the standard
library. The package holds the state and logic behind a select list and a
file browser; drawing them and reading keys is left to the caller.

- `steply.select` – `SelectComponent`, a list of options for single, multi,
  radio or plain list selection, with an active row, a scrolling window and
  a position footer such as `[1-5 of 12] ↓`.
- `steply.browser` – `FileBrowser`, a file picker driven by a text query.
  The query can be a fuzzy search, a path (`./src/`, `~/notes`, `/tmp/`),
  a glob (`*.rs`, `src/**/*.py`) or a recursive fuzzy search (`**main`).
- `steply.paths`, `steply.globbing` and `steply.entries` – the path parsing,
  glob matching and directory listing the browser is built on.

## Installation

```
pip install steply
```

## Selecting from a list

```python
from steply.select import SelectComponent, SelectMode

select = SelectComponent(["red", "green", "blue"], mode=SelectMode.MULTI)
select.toggle(0)
select.move_active(1)
select.activate_current()
print(select.selected_values())   # ['red', 'green']
print(select.value())             # ['red', 'green']
```

Modes:

- `SelectMode.SINGLE` – at most one option; toggling the selected one clears it.
- `SelectMode.MULTI` – any number; `value()` returns a list of texts.
- `SelectMode.RADIO` – always exactly one once there are options.
- `SelectMode.LIST` – toggling simply selects the given option.

`move_active()` wraps around at both ends. With `set_max_visible(n)` only
`n` options are in the window; `visible_range()` gives its start and end and
`footer()` the position text (or `None` when everything fits).
`set_options()` keeps selected options whose text still appears, and
`set_value()` accepts a list of texts or comma-separated text.

Options are `SelectOption` values. Besides the text they carry highlighted
character ranges and a layout (`OptionKind`): plain, highlighted, styled, or
split into a dimmed parent-path prefix, a name and an info suffix.
`SelectOption.parts()` returns `(segment, role, highlighted)` tuples with
role `"prefix"`, `"name"` or `"suffix"`, ready to be painted.

## Browsing files

```python
from steply.browser import FileBrowser
from steply.entries import EntryFilter

browser = FileBrowser("/path/to/project")
browser.set_entry_filter(EntryFilter.FILES_ONLY)
browser.set_extension_filter(["py", ".toml"])

browser.set_query("./src/")       # list a directory
browser.autocomplete()            # complete the typed name, like Tab
browser.set_query("**/*.py")      # recursive glob
print(browser.value())            # path of the active entry, or None
```

The matching entries are in `browser.entries` and their display options in
`browser.select`. Other settings: `set_show_hidden()`,
`set_relative_paths()` (show each entry's parent directories before its
name), `toggle_info()` (append size and age), `toggle_entry_filter()` and
`clear_extension_filter()`. `enter_dir()` and `leave_dir()` move between
directories.

If the query names a path that does not exist yet, `new_entry_candidate()`
describes it (a name without a dot is taken as a directory) and
`create_new_entry()` creates it when no entries match.

## What it does not do

- It does not draw anything or read the keyboard; there is no prompt loop
  and no command to run. Key bindings and colours are up to the caller
  (directory names carry the style `"directory"`).
- Searches run synchronously when the query changes; recursive results are
  cached per query and settings within one `FileBrowser`.
- The fuzzy matching used by the browser is a simple built-in scorer, not a
  separate matching library.

## Running the tests

```
pip install -e ".[test]"
pytest
```