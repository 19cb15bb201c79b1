"""A file browser: typed paths, fuzzy and glob search, and new-entry creation."""

from __future__ import annotations

import enum
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from steply.entries import (
    EntryFilter,
    FileEntry,
    filter_entries,
    info_suffix,
    list_dir,
    list_dir_recursive,
    list_dir_recursive_glob,
    longest_common_prefix,
    normalize_ext,
    prefilter_entries,
)
from steply.globbing import highlights as glob_highlights
from steply.globbing import match_path, longest_literal_chunk, split_segments
from steply.paths import (
    ParsedInput,
    is_glob_query,
    is_recursive_glob,
    normalize_input,
    parse_input,
    path_to_string,
    rebuild_path,
    relative_prefix,
    resolve_path,
    split_glob_path,
    strip_recursive_fuzzy,
    strip_recursive_fuzzy_segment,
)
from steply.select import OptionKind, SelectComponent, SelectMode, SelectOption

MAX_MATCHES = 2000
DIR_STYLE = "directory"
_WORD_BREAKS = frozenset("/_-. ")

Highlight = tuple[int, int]


class _SearchMode(enum.Enum):
    FUZZY = "f"
    GLOB = "g"


@dataclass(frozen=True)
class _Match:
    index: int
    score: int
    matched_indices: tuple[int, ...]
    ranges: tuple[Highlight, ...]


@dataclass(frozen=True)
class _SearchResult:
    entries: list[FileEntry]
    options: list[SelectOption]
    matches: list[_Match]


@dataclass(frozen=True)
class NewEntry:
    """A file or directory that the typed path would create."""

    path: Path
    label: str
    is_dir: bool


def _ranges(positions: Sequence[int]) -> tuple[Highlight, ...]:
    ranges: list[Highlight] = []
    for pos in positions:
        if ranges and ranges[-1][1] == pos:
            ranges[-1] = (ranges[-1][0], pos + 1)
        else:
            ranges.append((pos, pos + 1))
    return tuple(ranges)


def _match_one(query: str, candidate: str) -> tuple[int, list[int]] | None:
    q = query.lower()
    text = candidate.lower()
    start = text.find(q)
    if start >= 0:
        positions = list(range(start, start + len(q)))
    else:
        positions = []
        pos = 0
        for ch in q:
            found = text.find(ch, pos)
            if found < 0:
                return None
            positions.append(found)
            pos = found + 1
    score = 0
    prev: int | None = None
    for pos in positions:
        score += 16
        if prev is not None and pos == prev + 1:
            score += 8
        elif prev is not None:
            score -= pos - prev - 1
        if pos == 0 or text[pos - 1] in _WORD_BREAKS:
            score += 8
        prev = pos
    score -= len(text) - len(q)
    return score, positions


def _fuzzy_match(query: str, candidates: Sequence[str], limit: int | None = None) -> list[_Match]:
    matches = []
    for index, candidate in enumerate(candidates):
        found = _match_one(query, candidate)
        if found is None:
            continue
        score, positions = found
        matches.append(_Match(index, score, tuple(positions), _ranges(positions)))
    if limit is not None:
        matches.sort(key=lambda m: -m.score)
        matches = matches[:limit]
    return matches


def entry_option(
    entry: FileEntry,
    highlights: Sequence[Highlight] = (),
    display_root: Path | None = None,
    show_relative: bool = False,
    show_info: bool = False,
) -> SelectOption:
    """The list option showing an entry, optionally with its parent path and info."""
    highlights = tuple(highlights)
    suffix = None
    if show_info:
        info = info_suffix(entry, time.time())
        if info is not None:
            suffix = f"  {info}"
    name_style = DIR_STYLE if entry.is_dir else None

    if show_relative and display_root is not None:
        prefix = relative_prefix(entry.path, display_root)
        if prefix is not None:
            name_start = len(prefix)
            text = f"{prefix}{entry.name}{suffix or ''}"
            if not suffix:
                return SelectOption(
                    text, highlights, OptionKind.SPLIT, name_start=name_start, style=name_style
                )
            return SelectOption(
                text,
                highlights,
                OptionKind.SPLIT_SUFFIX,
                name_start=name_start,
                suffix_start=name_start + len(entry.name),
                style=name_style,
            )

    if suffix is not None:
        return SelectOption(
            entry.name + suffix,
            highlights,
            OptionKind.SUFFIX,
            suffix_start=len(entry.name),
            style=name_style,
        )
    if entry.is_dir:
        return SelectOption(entry.name, highlights, OptionKind.STYLED, style=DIR_STYLE)
    if not highlights:
        return SelectOption(entry.name)
    return SelectOption(entry.name, highlights, OptionKind.HIGHLIGHTED)


def _relative_path_for_match(entry: FileEntry, display_root: Path | None) -> str:
    path = entry.path
    if display_root is not None:
        try:
            path = path.relative_to(display_root)
        except ValueError:
            pass
    return str(path).replace("\\", "/")


def _glob_depth(entry: FileEntry, display_root: Path | None) -> float:
    segments = split_segments(_relative_path_for_match(entry, display_root))
    return len(segments) if segments else float("inf")


def _build_glob_options(
    entries: Iterable[FileEntry],
    name_pattern: str,
    display_root: Path | None,
    show_relative: bool,
    show_info: bool,
) -> tuple[list[FileEntry], list[SelectOption]]:
    ordered = sorted(
        entries,
        key=lambda e: (_glob_depth(e, display_root), not e.is_dir, e.name.lower()),
    )
    options = [
        entry_option(
            entry,
            glob_highlights(name_pattern, entry.name),
            display_root,
            show_relative,
            show_info,
        )
        for entry in ordered
    ]
    return ordered, options


def glob_options(
    entries: Iterable[FileEntry],
    pattern: str,
    display_root: Path | None = None,
    show_relative: bool = False,
    show_info: bool = False,
) -> tuple[list[FileEntry], list[SelectOption]]:
    """Entries matching a glob pattern, ordered by depth, with their options."""
    normalized = pattern.replace("\\", "/")
    segments = split_segments(normalized)
    use_path = "/" in normalized
    name_pattern = segments[-1] if segments else ""
    literal = longest_literal_chunk(name_pattern)

    matched = []
    for entry in entries:
        if literal is not None and literal not in entry.name:
            continue
        target = _relative_path_for_match(entry, display_root) if use_path else entry.name
        if match_path(segments, target):
            matched.append(entry)
    return _build_glob_options(matched, name_pattern, display_root, show_relative, show_info)


def _options_from_query(
    entries: Sequence[FileEntry],
    query: str,
    display_root: Path | None,
    show_relative: bool,
    show_info: bool,
) -> tuple[list[FileEntry], list[SelectOption], list[_Match]]:
    query = query.strip()
    if not query:
        options = [entry_option(e, (), display_root, show_relative, show_info) for e in entries]
        return list(entries), options, []

    indices = prefilter_entries(entries, query)
    if indices is None:
        indices = list(range(len(entries)))
    names = [entries[idx].name for idx in indices]
    limit = MAX_MATCHES if len(names) > MAX_MATCHES * 4 else None
    matches = _fuzzy_match(query, names, limit)
    matches.sort(key=lambda m: (not entries[indices[m.index]].is_dir, -m.score))

    matched_entries: list[FileEntry] = []
    options: list[SelectOption] = []
    adjusted: list[_Match] = []
    for pos, match in enumerate(matches):
        entry = entries[indices[match.index]]
        matched_entries.append(entry)
        options.append(entry_option(entry, match.ranges, display_root, show_relative, show_info))
        adjusted.append(_Match(pos, match.score, match.matched_indices, match.ranges))
    return matched_entries, options, adjusted


class FileBrowser:
    """Browse, search and pick files below a current directory."""

    def __init__(self, current_dir: Path | str | None = None) -> None:
        self.current_dir = Path(current_dir) if current_dir is not None else Path.cwd()
        self.view_dir = self.current_dir
        self.query = ""
        self.select = SelectComponent(mode=SelectMode.LIST)
        self.entries: list[FileEntry] = []
        self.matches: list[_Match] = []
        self.recursive_search = True
        self.hide_hidden = True
        self.show_relative_paths = False
        self.show_info = False
        self.entry_filter = EntryFilter.ALL
        self.extension_filter: frozenset[str] | None = None
        self._cache: dict[tuple, _SearchResult] = {}
        self.refresh()

    def set_query(self, text: str) -> None:
        """Replace the typed text and update the listing."""
        self.query = text
        self.refresh()

    def set_current_dir(self, directory: Path | str) -> None:
        """Change the directory that searches and relative paths start from."""
        self.current_dir = Path(directory)
        self.refresh()

    def set_entry_filter(self, entry_filter: EntryFilter) -> None:
        """Show all entries, only files or only directories."""
        self.entry_filter = entry_filter
        self.refresh()

    def toggle_entry_filter(self, entry_filter: EntryFilter) -> None:
        """Switch to the given filter, or back to all entries if it is already on."""
        self.entry_filter = EntryFilter.ALL if self.entry_filter is entry_filter else entry_filter
        self.refresh()

    def set_extension_filter(self, exts: Iterable[str]) -> None:
        """Show only files with one of these extensions; an empty set clears the filter."""
        normalized = frozenset(filter(None, (normalize_ext(ext) for ext in exts)))
        self.extension_filter = normalized or None
        self.refresh()

    def clear_extension_filter(self) -> None:
        """Show files of every extension."""
        self.extension_filter = None
        self.refresh()

    def set_show_hidden(self, show_hidden: bool) -> None:
        """Show or hide names starting with a dot."""
        self.hide_hidden = not show_hidden
        self.refresh()

    def set_relative_paths(self, show_relative: bool) -> None:
        """Show each entry's parent directories before its name."""
        self.show_relative_paths = show_relative
        self.refresh()

    def toggle_info(self) -> None:
        """Turn the size and age column on or off."""
        self.show_info = not self.show_info
        self.refresh()

    def _filter(self, entries: Iterable[FileEntry]) -> list[FileEntry]:
        return filter_entries(entries, self.entry_filter, self.extension_filter)

    def _listed(self, directory: Path) -> list[FileEntry]:
        return self._filter(list_dir(directory, self.hide_hidden))

    def _search(
        self, directory: Path, query: str, display_root: Path, mode: _SearchMode
    ) -> _SearchResult:
        key = (
            str(directory),
            self.hide_hidden,
            query,
            self.show_relative_paths,
            self.show_info,
            mode,
            self.entry_filter,
            self.extension_filter,
        )
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        if mode is _SearchMode.GLOB:
            found = self._filter(list_dir_recursive_glob(directory, self.hide_hidden, query))
            segments = split_segments(query.replace("\\", "/"))
            entries, options = _build_glob_options(
                found,
                segments[-1] if segments else "",
                display_root,
                self.show_relative_paths,
                self.show_info,
            )
            result = _SearchResult(entries, options, [])
        else:
            found = self._filter(list_dir_recursive(directory, self.hide_hidden))
            result = _SearchResult(
                *_options_from_query(
                    found, query, display_root, self.show_relative_paths, self.show_info
                )
            )
        self._cache[key] = result
        return result

    def _plain_options(self, entries: Sequence[FileEntry], root: Path) -> list[SelectOption]:
        return [
            entry_option(e, (), root, self.show_relative_paths, self.show_info) for e in entries
        ]

    def _compute(self, normalized: str, parsed: ParsedInput) -> _SearchResult:
        raw = normalized.strip()
        rel, info = self.show_relative_paths, self.show_info
        cur = self.current_dir
        if parsed.path_mode:
            view = parsed.view_dir
            fuzzy = strip_recursive_fuzzy_segment(parsed.segment)
            if fuzzy is not None:
                return self._search(view, fuzzy, view, _SearchMode.FUZZY)
            if is_glob_query(raw):
                split = split_glob_path(raw)
                if split is None:
                    return _SearchResult([], [], [])
                base_dir, pattern = split
                base = resolve_path(base_dir, cur)
                if is_recursive_glob(pattern):
                    return self._search(base, pattern, base, _SearchMode.GLOB)
                return _SearchResult(*glob_options(self._listed(base), pattern, base, rel, info), [])
            entries = self._listed(view)
            if not parsed.segment:
                return _SearchResult(entries, self._plain_options(entries, view), [])
            return _SearchResult(*_options_from_query(entries, parsed.segment, view, rel, info))
        if not raw:
            entries = self._listed(cur)
            return _SearchResult(entries, self._plain_options(entries, cur), [])
        fuzzy = strip_recursive_fuzzy(raw)
        if fuzzy is not None:
            return self._search(cur, fuzzy, cur, _SearchMode.FUZZY)
        if is_glob_query(raw):
            if is_recursive_glob(raw):
                return self._search(cur, raw, cur, _SearchMode.GLOB)
            return _SearchResult(*glob_options(self._listed(cur), raw, cur, rel, info), [])
        if self.recursive_search:
            return self._search(cur, raw, cur, _SearchMode.FUZZY)
        return _SearchResult(*_options_from_query(self._listed(cur), raw, cur, rel, info))

    def refresh(self) -> None:
        """Recompute the listing from the typed text and the current settings."""
        normalized = normalize_input(self.query, self.current_dir)
        self.query = normalized
        parsed = parse_input(normalized, self.current_dir)
        self.view_dir = parsed.view_dir
        result = self._compute(normalized, parsed)
        self.entries = list(result.entries)
        self.matches = list(result.matches)
        self.select.set_options(result.options)
        self.select.reset_active()

    def new_entry_candidate(self) -> NewEntry | None:
        """The not-yet-existing file or directory that the typed path names, if any."""
        parsed = parse_input(self.query, self.current_dir)
        segment = parsed.segment
        if not parsed.path_mode or not segment:
            return None
        if segment == "~" or segment.startswith("~/"):
            return None
        if is_glob_query(segment) or segment.startswith("**"):
            return None
        candidate = resolve_path(parsed.dir_prefix, self.current_dir) / segment
        if candidate.exists():
            return None
        is_dir = "." not in segment
        if self.entry_filter is EntryFilter.FILES_ONLY and is_dir:
            return None
        if self.entry_filter is EntryFilter.DIRS_ONLY and not is_dir:
            return None
        if not is_dir and self.extension_filter is not None:
            ext = normalize_ext(candidate.suffix[1:]) if candidate.suffix else ""
            if not ext or ext not in self.extension_filter:
                return None
        return NewEntry(path=candidate, label=segment, is_dir=is_dir)

    def create_new_entry(self) -> Path | None:
        """Create the candidate entry when nothing matches; return its path, or None."""
        if self.entries:
            return None
        candidate = self.new_entry_candidate()
        if candidate is None:
            return None
        try:
            if candidate.is_dir:
                candidate.path.mkdir(parents=True, exist_ok=True)
                self.enter_dir(candidate.path)
            else:
                try:
                    candidate.path.parent.mkdir(parents=True, exist_ok=True)
                except OSError:
                    pass
                candidate.path.touch()
        except OSError:
            return None
        return candidate.path

    def has_autocomplete_candidates(self) -> bool:
        """Whether the last typed path segment has any completion."""
        parsed = parse_input(self.query, self.current_dir)
        if not parsed.path_mode:
            return False
        entries = self._listed(parsed.view_dir)
        if not parsed.segment:
            return bool(entries)
        return any(entry.name.startswith(parsed.segment) for entry in entries)

    def autocomplete(self) -> bool:
        """Extend the last path segment to the longest common completion; True if it changed."""
        parsed = parse_input(self.query, self.current_dir)
        if not parsed.path_mode:
            return False
        prefix = parsed.segment
        candidates = sorted(
            (e for e in self._listed(parsed.view_dir) if e.name.startswith(prefix)),
            key=FileEntry.sort_key,
        )
        if not candidates:
            return False
        if any(e.name == prefix for e in candidates) and not parsed.ends_with_slash:
            return False
        if len(candidates) == 1:
            completed = candidates[0].name
        else:
            completed = longest_common_prefix(candidates, prefix)
        if len(completed) <= len(prefix):
            return False
        if len(candidates) == 1 and candidates[0].is_dir and not completed.endswith("/"):
            completed += "/"
        self.query = rebuild_path(parsed, completed)
        self.refresh()
        return True

    def enter_dir(self, directory: Path | str) -> None:
        """Make a directory current and show its contents."""
        self.current_dir = Path(directory)
        self.query = path_to_string(self.current_dir)
        self.refresh()

    def leave_dir(self) -> bool:
        """Move to the parent of the viewed directory; False at the top."""
        parent = self.view_dir.parent
        if parent == self.view_dir:
            return False
        self.enter_dir(parent)
        return True

    def selected_entry(self) -> FileEntry | None:
        """The entry under the cursor, if any."""
        idx = self.select.active_index
        return self.entries[idx] if 0 <= idx < len(self.entries) else None

    def value(self) -> str | None:
        """The path of the entry under the cursor, as text."""
        entry = self.selected_entry()
        return str(entry.path) if entry is not None else None