"""Offset and line helpers shared by the scanner and the rewrite planner."""

from __future__ import annotations


def line_start(text: str, offset: int) -> int:
    """Offset of the first character on the line containing offset."""
    return text.rfind("\n", 0, offset) + 1


def line_end(text: str, offset: int) -> int:
    """Offset just past the last visible character on the line containing offset.

    A trailing carriage return is not part of the line.
    """
    end = text.find("\n", offset)
    if end == -1:
        end = len(text)
    if end > 0 and text[end - 1] == "\r" and end - 1 >= offset:
        end -= 1
    return end


def position_at(text: str, offset: int) -> tuple[int, int]:
    """0-based (line, column) for an offset."""
    line = text.count("\n", 0, offset)
    return line, offset - line_start(text, offset)


def line_prefix(text: str, offset: int) -> str:
    """Text from the start of the line up to offset."""
    return text[line_start(text, offset):offset]
