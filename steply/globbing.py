"""Shell-style glob matching over '/'-separated path segments."""

from __future__ import annotations

from collections.abc import Sequence

DOUBLE_STAR = "**"
_WILDCARDS = frozenset("*?")


def split_segments(path: str) -> list[str]:
    """Split a '/'-separated path into its non-empty segments."""
    return [part for part in path.split("/") if part]


def match_segment(pattern: str, text: str) -> bool:
    """Match one segment against a pattern where '*' is any run and '?' any character."""
    pi = ti = 0
    star: int | None = None
    resume = 0
    while ti < len(text):
        if pi < len(pattern) and pattern[pi] in ("?", text[ti]):
            pi += 1
            ti += 1
        elif pi < len(pattern) and pattern[pi] == "*":
            star = pi
            resume = ti
            pi += 1
        elif star is not None:
            pi = star + 1
            resume += 1
            ti = resume
        else:
            return False
    while pi < len(pattern) and pattern[pi] == "*":
        pi += 1
    return pi == len(pattern)


def match_segments(pattern: Sequence[str], target: Sequence[str]) -> bool:
    """Match path segments against pattern segments; '**' spans any number of them."""
    return _match_from(pattern, 0, target, 0)


def _match_from(pattern: Sequence[str], pi: int, target: Sequence[str], ti: int) -> bool:
    while pi < len(pattern):
        head = pattern[pi]
        if head == DOUBLE_STAR:
            return any(
                _match_from(pattern, pi + 1, target, start)
                for start in range(ti, len(target) + 1)
            )
        if ti >= len(target) or not match_segment(head, target[ti]):
            return False
        pi += 1
        ti += 1
    return ti == len(target)


def match_path(pattern_segments: Sequence[str], target: str) -> bool:
    """Match a '/'-separated path against pattern segments."""
    return match_segments(pattern_segments, split_segments(target))


def prefix_len(pattern_segments: Sequence[str]) -> int:
    """Number of leading segments before the first '**' (all of them if none)."""
    for idx, segment in enumerate(pattern_segments):
        if segment == DOUBLE_STAR:
            return idx
    return len(pattern_segments)


def prefix_matches(pattern: Sequence[str], target: Sequence[str], prefix_len: int) -> bool:
    """Whether the target's leading segments fit the pattern's fixed prefix so far."""
    length = min(len(target), prefix_len)
    return all(
        match_segment(pat, seg) for pat, seg in zip(pattern[:length], target[:length])
    )


def literal_chunks(pattern: str) -> list[str]:
    """The runs of non-wildcard characters in a pattern, in order."""
    chunks: list[str] = []
    current: list[str] = []
    for ch in pattern:
        if ch in _WILDCARDS:
            if current:
                chunks.append("".join(current))
                current = []
        else:
            current.append(ch)
    if current:
        chunks.append("".join(current))
    return chunks


def longest_literal_chunk(pattern: str) -> str | None:
    """The first of the longest literal runs in a pattern, or None if there is none."""
    best: str | None = None
    for chunk in literal_chunks(pattern):
        if best is None or len(chunk) > len(best):
            best = chunk
    return best


def highlights(pattern: str, name: str) -> list[tuple[int, int]]:
    """Character range in name of the pattern's longest literal run, if it occurs."""
    best = longest_literal_chunk(pattern)
    if not best or len(best) > len(name):
        return []
    start = name.find(best)
    if start < 0:
        return []
    return [(start, start + len(best))]