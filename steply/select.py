"""A list of options with a cursor, selection modes and a scrolling window."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

Highlight = tuple[int, int]


class SelectMode(enum.Enum):
    """How picking an option affects the selection."""

    SINGLE = "single"
    MULTI = "multi"
    RADIO = "radio"
    LIST = "list"


class OptionKind(enum.Enum):
    """How an option's text is divided into prefix, name and suffix."""

    PLAIN = "plain"
    HIGHLIGHTED = "highlighted"
    STYLED = "styled"
    SPLIT = "split"
    SUFFIX = "suffix"
    SPLIT_SUFFIX = "split_suffix"


_SUFFIX_KINDS = frozenset({OptionKind.SUFFIX, OptionKind.SPLIT_SUFFIX})


def _push(pieces: list[tuple[str, bool]], text: str, highlighted: bool) -> None:
    if text:
        pieces.append((text, highlighted))


def split_highlights(text: str, highlights: Sequence[Highlight]) -> list[tuple[str, bool]]:
    """Cut text into (segment, highlighted) pieces along character ranges."""
    if not highlights:
        return [(text, False)]
    pieces: list[tuple[str, bool]] = []
    length = len(text)
    pos = 0
    for start, end in sorted(highlights, key=lambda rng: rng[0]):
        start = min(start, length)
        end = min(end, length)
        if start > pos:
            _push(pieces, text[pos:start], False)
        if end > start:
            _push(pieces, text[start:end], True)
        pos = end
    if pos < length:
        _push(pieces, text[pos:], False)
    return pieces


@dataclass(frozen=True)
class SelectOption:
    """One displayable option: its text, highlighted ranges and layout."""

    text: str
    highlights: tuple[Highlight, ...] = ()
    kind: OptionKind = OptionKind.PLAIN
    name_start: int = 0
    suffix_start: int | None = None
    style: str | None = None
    _hl: tuple[Highlight, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        normalized = tuple((int(start), int(end)) for start, end in self.highlights)
        object.__setattr__(self, "highlights", normalized)
        object.__setattr__(self, "_hl", normalized)
        if self.kind in _SUFFIX_KINDS and self.suffix_start is None:
            raise ValueError(f"{self.kind.value} option needs suffix_start")

    def parts(self) -> list[tuple[str, str, bool]]:
        """The text as (segment, role, highlighted) with role 'prefix', 'name' or 'suffix'."""
        text = self.text
        kind = self.kind

        def name_parts(name: str) -> list[tuple[str, str, bool]]:
            return [(seg, "name", hl) for seg, hl in split_highlights(name, self.highlights)]

        if kind is OptionKind.PLAIN:
            return [(text, "name", False)]
        if kind in (OptionKind.HIGHLIGHTED, OptionKind.STYLED):
            return name_parts(text)
        if kind is OptionKind.SPLIT:
            prefix, name = text[: self.name_start], text[self.name_start :]
            result = [(prefix, "prefix", False)] if prefix else []
            return result + name_parts(name)
        assert self.suffix_start is not None
        if kind is OptionKind.SUFFIX:
            name, suffix = text[: self.suffix_start], text[self.suffix_start :]
            result = name_parts(name)
            if suffix:
                result.append((suffix, "suffix", False))
            return result
        prefix, rest = text[: self.name_start], text[self.name_start :]
        name_len = max(0, self.suffix_start - self.name_start)
        name, suffix = rest[:name_len], rest[name_len:]
        result = [(prefix, "prefix", False)] if prefix else []
        result.extend(name_parts(name))
        if suffix:
            result.append((suffix, "suffix", False))
        return result


def _as_option(option: str | SelectOption) -> SelectOption:
    return option if isinstance(option, SelectOption) else SelectOption(str(option))


def _parse_bound_value(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class SelectComponent:
    """Options with an active cursor, a selection and an optional visible window."""

    def __init__(
        self,
        options: Iterable[str | SelectOption] = (),
        mode: SelectMode = SelectMode.SINGLE,
        max_visible: int | None = None,
    ) -> None:
        self.options: list[SelectOption] = [_as_option(opt) for opt in options]
        self.mode = mode
        self.selected: list[int] = []
        self.active_index = 0
        self.scroll_offset = 0
        self.max_visible: int | None = None
        self.focused = False
        if mode is SelectMode.RADIO and self.options:
            self.selected.append(0)
        if max_visible is not None:
            self.set_max_visible(max_visible)

    def set_max_visible(self, max_visible: int | None) -> None:
        """Limit how many options show at once; 0 or None shows them all."""
        self.max_visible = max_visible or None
        self.scroll_offset = 0
        self._clamp_active()

    def set_options(self, options: Iterable[str | SelectOption]) -> None:
        """Replace the options, keeping selected ones whose text still appears."""
        kept = {
            self.options[idx].text for idx in self.selected if 0 <= idx < len(self.options)
        }
        self.options = [_as_option(opt) for opt in options]
        self.selected = [idx for idx, opt in enumerate(self.options) if opt.text in kept]
        if self.mode is SelectMode.RADIO and not self.selected and self.options:
            self.selected.append(0)
        if not self.options:
            self.active_index = 0
            self.scroll_offset = 0
        elif self.active_index >= len(self.options):
            self.active_index = len(self.options) - 1
        self._ensure_visible()

    def toggle(self, index: int) -> None:
        """Pick or unpick the option at index according to the mode."""
        if not 0 <= index < len(self.options):
            return
        if self.mode is SelectMode.MULTI:
            if index in self.selected:
                self.selected.remove(index)
            else:
                self.selected.append(index)
        elif self.mode is SelectMode.SINGLE:
            self.selected = [] if index in self.selected else [index]
        elif self.mode is SelectMode.RADIO:
            if index not in self.selected:
                self.selected = [index]
        else:
            self.selected = [index]

    def reset_active(self) -> None:
        """Move the cursor and the window back to the top."""
        self.active_index = 0
        self.scroll_offset = 0

    def set_active_index(self, index: int) -> None:
        """Put the cursor on index, clamped to the last option."""
        if not self.options:
            self.active_index = 0
            self.scroll_offset = 0
        else:
            self.active_index = min(max(index, 0), len(self.options) - 1)
        self._ensure_visible()

    def move_active(self, delta: int) -> bool:
        """Move the cursor by delta, wrapping around; True if it moved."""
        if not self.options:
            return False
        nxt = (self.active_index + delta) % len(self.options)
        if nxt == self.active_index:
            return False
        self.active_index = nxt
        self._ensure_visible()
        return True

    def activate_current(self) -> bool:
        """Toggle the option under the cursor; True if the selection changed."""
        if not self.options:
            return False
        before = list(self.selected)
        self.toggle(self.active_index)
        return self.selected != before

    def selected_values(self) -> list[str]:
        """Texts of the selected options, in selection order."""
        return [self.options[idx].text for idx in self.selected if 0 <= idx < len(self.options)]

    def value(self) -> str | list[str] | None:
        """The selected text, or the list of them in multi mode; None without options."""
        if not self.options:
            return None
        if self.mode is SelectMode.MULTI:
            return self.selected_values()
        for idx in self.selected[:1]:
            if 0 <= idx < len(self.options):
                return self.options[idx].text
        return None

    def set_value(self, value: str | Sequence[str]) -> None:
        """Replace the options from a list, or from comma-separated text."""
        if isinstance(value, str):
            self.set_options(_parse_bound_value(value))
        elif isinstance(value, (list, tuple)):
            self.set_options([str(item) for item in value])
        else:
            raise TypeError(f"cannot set options from {type(value).__name__}")

    def visible_range(self) -> tuple[int, int]:
        """Start and end indices of the options currently in the window."""
        total = len(self.options)
        if self.max_visible is None or total <= self.max_visible:
            return 0, total
        start = min(self.scroll_offset, total)
        return start, min(start + self.max_visible, total)

    def footer(self) -> str | None:
        """Position text such as '[1-5 of 9] ↓' when not all options fit."""
        total = len(self.options)
        if self.max_visible is None or total <= self.max_visible:
            return None
        start, end = self.visible_range()
        up = start > 0
        down = end < total
        indicator = {
            (True, True): " ↑↓",
            (True, False): " ↑",
            (False, True): " ↓",
            (False, False): "",
        }[(up, down)]
        return f"[{start + 1}-{end} of {total}]{indicator}"

    def _clamp_active(self) -> None:
        if not self.options:
            self.active_index = 0
        elif self.active_index >= len(self.options):
            self.active_index = len(self.options) - 1

    def _ensure_visible(self) -> None:
        if self.max_visible is None:
            return
        total = len(self.options)
        if total <= self.max_visible:
            self.scroll_offset = 0
            return
        max_start = total - self.max_visible
        if self.active_index < self.scroll_offset:
            self.scroll_offset = self.active_index
        elif self.active_index >= self.scroll_offset + self.max_visible:
            self.scroll_offset = max(0, self.active_index - (self.max_visible - 1))
        self.scroll_offset = min(self.scroll_offset, max_start)