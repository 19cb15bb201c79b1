"""Directory listing, filtering and formatting of file-browser entries."""

from __future__ import annotations

import enum
import os
import time
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from steply.globbing import (
    DOUBLE_STAR,
    longest_literal_chunk,
    match_segments,
    prefix_len,
    prefix_matches,
    split_segments,
)

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)

_SIZE_UNITS = ("B", "K", "M", "G", "T")

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR
_MONTH = 30 * _DAY
_YEAR = 365 * _DAY


def _ascii_lower(text: str) -> str:
    return text.translate(_ASCII_LOWER)


class EntryFilter(enum.Enum):
    """Which kinds of entries the browser shows."""

    ALL = "a"
    FILES_ONLY = "f"
    DIRS_ONLY = "d"


def normalize_ext(ext: str) -> str:
    """Strip leading dots and lowercase an extension."""
    return _ascii_lower(ext.lstrip("."))


@dataclass(frozen=True)
class FileEntry:
    """One file or directory found while listing."""

    name: str
    path: Path
    is_dir: bool
    size: int | None = None
    modified: float | None = None
    name_lower: str = field(init=False, repr=False, compare=False)
    ext_lower: str | None = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "name_lower", _ascii_lower(self.name))
        ext: str | None = None
        if not self.is_dir and "." in self.name:
            ext = normalize_ext(self.name.rsplit(".", 1)[1]) or None
        object.__setattr__(self, "ext_lower", ext)

    def sort_key(self) -> tuple[bool, str]:
        """Directories first, then by lowercased name."""
        return (not self.is_dir, self.name_lower)


def build_entry(
    name: str, path: Path, is_dir: bool, stat_result: os.stat_result | None = None
) -> FileEntry:
    """Make an entry, taking size and modification time from a stat result if given."""
    size = None
    modified = None
    if stat_result is not None:
        if not is_dir:
            size = stat_result.st_size
        modified = stat_result.st_mtime
    return FileEntry(name=name, path=Path(path), is_dir=is_dir, size=size, modified=modified)


def _scan(
    directory: Path, hide_hidden: bool
) -> Iterator[tuple[str, Path, bool, os.stat_result | None]]:
    try:
        with os.scandir(directory) as it:
            items = list(it)
    except OSError:
        return
    for item in items:
        name = item.name
        if hide_hidden and name.startswith("."):
            continue
        try:
            is_dir = item.is_dir(follow_symlinks=False)
        except OSError:
            is_dir = False
        try:
            stat_result: os.stat_result | None = item.stat(follow_symlinks=False)
        except OSError:
            stat_result = None
        yield name, Path(directory) / name, is_dir, stat_result


def _sorted(entries: Iterable[FileEntry]) -> list[FileEntry]:
    return sorted(entries, key=FileEntry.sort_key)


def list_dir(directory: Path, hide_hidden: bool) -> list[FileEntry]:
    """The sorted entries directly inside a directory; empty if it cannot be read."""
    return _sorted(build_entry(*item) for item in _scan(directory, hide_hidden))


def _walk(directory: Path, hide_hidden: bool) -> Iterator[FileEntry]:
    for name, path, is_dir, stat_result in _scan(directory, hide_hidden):
        yield build_entry(name, path, is_dir, stat_result)
        if is_dir:
            yield from _walk(path, hide_hidden)


def list_dir_recursive(directory: Path, hide_hidden: bool) -> list[FileEntry]:
    """Every entry below a directory, sorted."""
    return _sorted(_walk(directory, hide_hidden))


def _walk_glob(
    directory: Path,
    segments: Sequence[str],
    hide_hidden: bool,
    literal: str | None,
    fixed_len: int,
    has_double_star: bool,
    rel: list[str],
    found: list[FileEntry],
) -> None:
    for name, path, is_dir, stat_result in _scan(directory, hide_hidden):
        rel.append(name)
        try:
            if not has_double_star and len(rel) > len(segments):
                continue
            if len(rel) <= fixed_len and not prefix_matches(segments, rel, fixed_len):
                continue
            if (literal is None or literal in name) and match_segments(segments, rel):
                found.append(build_entry(name, path, is_dir, stat_result))
            if is_dir:
                _walk_glob(
                    path, segments, hide_hidden, literal, fixed_len, has_double_star, rel, found
                )
        finally:
            rel.pop()


def list_dir_recursive_glob(directory: Path, hide_hidden: bool, pattern: str) -> list[FileEntry]:
    """Entries below a directory whose relative path matches a glob pattern, sorted."""
    segments = split_segments(pattern.replace("\\", "/"))
    name_pattern = segments[-1] if segments else ""
    found: list[FileEntry] = []
    _walk_glob(
        directory,
        segments,
        hide_hidden,
        longest_literal_chunk(name_pattern),
        prefix_len(segments),
        DOUBLE_STAR in segments,
        [],
        found,
    )
    return _sorted(found)


def filter_entries(
    entries: Iterable[FileEntry],
    entry_filter: EntryFilter,
    ext_filter: set[str] | frozenset[str] | None,
) -> list[FileEntry]:
    """Keep entries of the wanted kind; with an extension filter, files must match it."""

    def keep(entry: FileEntry) -> bool:
        if entry_filter is EntryFilter.FILES_ONLY and entry.is_dir:
            return False
        if entry_filter is EntryFilter.DIRS_ONLY and not entry.is_dir:
            return False
        if ext_filter is not None and not entry.is_dir:
            return entry.ext_lower is not None and entry.ext_lower in ext_filter
        return True

    return [entry for entry in entries if keep(entry)]


def format_size(size: int) -> str:
    """A short human-readable size such as '512B', '1.5K' or '12M'."""
    value = float(size)
    unit = _SIZE_UNITS[0]
    for next_unit in _SIZE_UNITS[1:]:
        if value < 1024.0:
            break
        value /= 1024.0
        unit = next_unit
    if unit == "B":
        return f"{size}B"
    if value >= 10.0:
        return f"{value:.0f}{unit}"
    return f"{value:.1f}{unit}"


def format_age(modified: float, now: float | None = None) -> str:
    """How long ago a timestamp was, in the largest whole unit."""
    if now is None:
        now = time.time()
    secs = int(max(0.0, now - modified))
    if secs < _MINUTE:
        return f"{secs}s"
    if secs < _HOUR:
        return f"{secs // _MINUTE}m"
    if secs < _DAY:
        return f"{secs // _HOUR}h"
    if secs < _MONTH:
        return f"{secs // _DAY}d"
    if secs < _YEAR:
        return f"{secs // _MONTH}mo"
    return f"{secs // _YEAR}y"


def info_suffix(entry: FileEntry, now: float | None = None) -> str | None:
    """Size (for files) and age of an entry, or None when neither is known."""
    parts: list[str] = []
    if not entry.is_dir and entry.size is not None:
        parts.append(format_size(entry.size))
    if entry.modified is not None:
        parts.append(format_age(entry.modified, now))
    return " ".join(parts) if parts else None


def longest_common_prefix(entries: Sequence[FileEntry], prefix: str) -> str:
    """The longest name prefix shared by all entries, never shorter than prefix."""
    if not entries:
        return prefix
    common = os.path.commonprefix([entry.name for entry in entries])
    return prefix if len(common) < len(prefix) else common


def prefilter_entries(entries: Sequence[FileEntry], query: str) -> list[int] | None:
    """Indices of entries worth fuzzy matching, or None to consider them all."""
    if "/" in query or "\\" in query:
        return None
    needle = _ascii_lower(query)
    if query.startswith("."):
        filtered = [idx for idx, entry in enumerate(entries) if entry.name_lower.endswith(needle)]
    else:
        if len(needle) < 2:
            return None
        filtered = [idx for idx, entry in enumerate(entries) if needle in entry.name_lower]
    return filtered or None