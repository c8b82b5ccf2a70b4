"""Text helpers for the bulletin-board description blocks.

Widths are visual: CJK ideographs, CJK punctuation and fullwidth forms
count as two columns, everything else as one.
"""

from __future__ import annotations

from typing import Iterable

MAX_WIDTH = 150

_WIDE_RANGES = (
    (0x4E00, 0x9FFF),
    (0xFF00, 0xFFEF),
    (0x3000, 0x303F),
    (0xFE30, 0xFE6F),
)


def char_width(char: str) -> int:
    code = ord(char)
    for low, high in _WIDE_RANGES:
        if low <= code <= high:
            return 2
    return 1


def visual_width(text: str) -> int:
    return sum(char_width(char) for char in text)


def wrapped_line(
    label: str,
    content: str,
    max_width: int = MAX_WIDTH,
    separator: str = " / ",
) -> str:
    """Render ``label + content`` wrapping between *separator*-joined items.

    Continuation lines are indented to the label's visual width and the
    separator stays at the end of the broken line.
    """
    if not content or not content.strip():
        return label

    indent = " " * visual_width(label)
    sep_width = visual_width(separator)
    lines: list[str] = []
    current = label
    for index, item in enumerate(content.split(separator)):
        if index == 0:
            current += item
        elif visual_width(current) + sep_width + visual_width(item) > max_width:
            lines.append(current.rstrip() + separator)
            current = indent + item
        else:
            current += separator + item
    lines.append(current)
    return "\n".join(lines)


def wrap_chars(text: str, max_width: int, indent: str) -> str:
    """Hard-wrap *text* at *max_width* columns, prefixing every line."""
    content_width = max_width - visual_width(indent)
    if content_width <= 0:
        return indent + text

    lines: list[str] = []
    current = ""
    width = 0
    for char in text:
        w = char_width(char)
        if width + w > content_width:
            lines.append(indent + current)
            current, width = char, w
        else:
            current += char
            width += w
    if current:
        lines.append(indent + current)
    return "\n".join(lines)


def wrap_words(text: str, indent: str = "  ", max_width: int = 80) -> str:
    """Word-wrap *text*; over-long words get a line of their own."""
    if not text:
        return ""
    if len(indent) >= max_width:
        indent = "  "

    lines: list[str] = []
    current = indent
    for word in str(text).split():
        if len(word) >= max_width - len(indent):
            if current != indent:
                lines.append(current)
            lines.append(indent + word)
            current = indent
            continue
        sep = "" if current == indent else " "
        if len(current) + len(sep) + len(word) > max_width:
            lines.append(current)
            current = indent + word
        else:
            current += sep + word
    if current != indent:
        lines.append(current)
    return "\n".join(lines)


def joined(values: Iterable[object] | None, separator: str = " / ") -> str:
    """Join the non-empty string forms of *values*."""
    if not values:
        return ""
    return separator.join(str(v) for v in values if v not in (None, ""))


def indented(text: str, indent: str = "　　") -> str:
    """Prefix every line of *text* with *indent*."""
    return indent + text.replace("\n", "\n" + indent)
