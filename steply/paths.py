"""Parsing and normalisation of the path text typed into the file browser."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

RELATIVE_PREFIX_MAX = 24

_PATH_PREFIXES = ("~", "/", "./", "../", ".\\", "..\\")


@dataclass(frozen=True)
class ParsedInput:
    """The typed text split into the directory being viewed and the last segment."""

    path_mode: bool
    view_dir: Path
    segment: str
    ends_with_slash: bool
    dir_prefix: str


def is_path_mode(text: str) -> bool:
    """Whether the text looks like a path rather than a search query."""
    return text.startswith(_PATH_PREFIXES)


def parse_input(raw: str, current_dir: Path) -> ParsedInput:
    """Split typed text into view directory, prefix and trailing segment."""
    path_part = raw.strip()
    path_mode = is_path_mode(path_part)
    dir_prefix, segment = split_path(path_part)
    view_dir = resolve_path(dir_prefix, current_dir) if path_mode else Path(current_dir)
    return ParsedInput(
        path_mode=path_mode,
        view_dir=view_dir,
        segment=segment,
        ends_with_slash=path_part.endswith("/"),
        dir_prefix=dir_prefix,
    )


def normalize_input(raw: str, current_dir: Path) -> str:
    """Collapse '.' and '..' components in path-like input, leaving other text alone."""
    path_part = raw.strip()
    if not path_part or not is_path_mode(path_part):
        return raw
    if is_only_dot_segments(path_part):
        return raw
    if path_part.endswith(("/.", "\\.", "/..", "\\..")):
        return raw
    normalized = normalize_path_part(path_part)
    if normalized == path_part:
        return raw
    return normalized


def split_path(path: str) -> tuple[str, str]:
    """Split a path into its directory prefix (with slash) and last segment."""
    if not path:
        return "", ""
    if path == "~":
        return "~/", ""
    if path.endswith("/"):
        return path, ""
    pos = path.rfind("/")
    if pos < 0:
        return "", path
    return path[: pos + 1], path[pos + 1 :]


def resolve_path(path: str, current_dir: Path) -> Path:
    """Turn typed path text into a filesystem path relative to current_dir."""
    if path.startswith("~"):
        home = os.environ.get("HOME")
        if home is None:
            return Path(path)
        rest = path.lstrip("~").lstrip("/")
        return Path(home) / rest if rest else Path(home)
    if path.startswith("/"):
        return Path(path)
    if not path:
        return Path(current_dir)
    return Path(current_dir) / path


def _normalize_absolute(path: str) -> str:
    stack: list[str] = []
    for part in filter(None, path.split("/")):
        if part == ".":
            continue
        if part == "..":
            if stack:
                stack.pop()
        else:
            stack.append(part)
    return "/".join(stack)


def _normalize_relative(path: str) -> str:
    stack: list[str] = []
    for part in filter(None, path.split("/")):
        if part == ".":
            continue
        if part == "..":
            if stack and stack[-1] != "..":
                stack.pop()
            else:
                stack.append("..")
        else:
            stack.append(part)
    return "/".join(stack)


def normalize_path_part(path_part: str) -> str:
    """Resolve '.' and '..' textually, keeping the separator style and a trailing slash."""
    if not path_part:
        return ""

    sep = "\\" if "\\" in path_part else "/"
    path = path_part.replace("\\", "/")
    trailing_sep = path.endswith("/")
    is_absolute = path.startswith("/")

    if path.startswith("~"):
        rest = path.lstrip("~").lstrip("/")
        normalized = _normalize_relative(rest)
        rebuilt = f"~/{normalized}" if normalized else "~"
    else:
        if is_absolute:
            normalized = _normalize_absolute(path)
            rebuilt = f"/{normalized}"
        else:
            normalized = _normalize_relative(path)
            if path.startswith("./") and normalized and not normalized.startswith(".."):
                rebuilt = f"./{normalized}"
            else:
                rebuilt = normalized
        if not rebuilt and is_absolute:
            rebuilt = "/"

    if trailing_sep and not rebuilt.endswith("/"):
        rebuilt += "/"
    return rebuilt if sep == "/" else rebuilt.replace("/", sep)


def is_only_dot_segments(path: str) -> bool:
    """Whether every component of the path is '.' or '..'."""
    parts = path.replace("\\", "/").strip("/").split("/")
    return all(part in ("", ".", "..") for part in parts)


def rebuild_path(parsed: ParsedInput, segment: str) -> str:
    """Join the parsed directory prefix with a new last segment."""
    return parsed.dir_prefix + segment


def path_to_string(path: Path) -> str:
    """Render a directory path as text ending in a slash."""
    text = str(path)
    return text if text.endswith("/") else text + "/"


def is_glob_query(query: str) -> bool:
    """Whether the query holds glob wildcards."""
    return "*" in query or "?" in query


def is_recursive_glob(pattern: str) -> bool:
    """Whether a glob pattern spans more than one directory level."""
    return "**" in pattern or "/" in pattern


def split_glob_path(path_part: str) -> tuple[str, str] | None:
    """Split a glob path into the literal base directory and the pattern after it."""
    if not is_glob_query(path_part):
        return None
    normalized = path_part.replace("\\", "/")
    first_glob = min(i for i in (normalized.find("*"), normalized.find("?")) if i >= 0)
    last_slash = normalized.rfind("/", 0, first_glob)
    if last_slash < 0:
        return "", normalized
    return normalized[: last_slash + 1], normalized[last_slash + 1 :]


def _strip_double_star(text: str) -> str:
    while text.startswith("**"):
        text = text[2:]
    return text


def _plain_query(rest: str) -> str | None:
    rest = rest.strip()
    if not rest or is_glob_query(rest):
        return None
    return rest


def strip_recursive_fuzzy(query: str) -> str | None:
    """Return the fuzzy query of a '**name' search, or None if it is not one."""
    trimmed = query.strip()
    if not trimmed.startswith("**"):
        return None
    rest = _strip_double_star(trimmed)
    if rest.startswith(("/", "\\")):
        return None
    return _plain_query(rest)


def strip_recursive_fuzzy_segment(segment: str) -> str | None:
    """Like strip_recursive_fuzzy, for the last segment of a typed path."""
    trimmed = segment.strip()
    if not trimmed.startswith("**"):
        return None
    return _plain_query(_strip_double_star(trimmed))


def relative_prefix(path: Path, root: Path) -> str | None:
    """The parent directories of path below root, slash-terminated and elided if long."""
    try:
        rel = Path(path).relative_to(root)
    except ValueError:
        return None
    if not rel.parts:
        return ""
    prefix = str(rel.parent)
    if not prefix or prefix == ".":
        return ""
    display = prefix.replace("\\", "/")
    if not display.endswith("/"):
        display += "/"
    return elide_middle(display, RELATIVE_PREFIX_MAX)


def elide_middle(text: str, max_len: int) -> str:
    """Shorten text to max_len characters by replacing its middle with '...'."""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return "..."
    keep = max_len - 3
    head_len = keep // 2
    tail_len = keep - head_len
    return f"{text[:head_len]}...{text[len(text) - tail_len:]}"