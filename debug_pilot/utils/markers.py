"""Marker-based block management for php.ini files.

Each driver owns one block of directives at the end of php.ini, wrapped in
comment markers so it can be found, replaced and removed without touching
the rest of the file or the blocks of other drivers.

Marker Format:
    ; >>> PHP Debug Pilot - {label} Configuration <<<
    ... managed directives ...
    ; >>> End PHP Debug Pilot - {label} <<<
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_START_MARKER_RE = re.compile(r"^; >>> PHP Debug Pilot - (.+?) Configuration <<<$", re.MULTILINE)


def make_start_marker(label: str) -> str:
    """Create the start marker for a driver's block.

    Args:
        label: Human-readable extension label (e.g. "Xdebug")

    Returns:
        Comment line opening the block
    """
    return f"; >>> PHP Debug Pilot - {label} Configuration <<<"


def make_end_marker(label: str) -> str:
    """Create the end marker for a driver's block.

    Args:
        label: Human-readable extension label (e.g. "Xdebug")

    Returns:
        Comment line closing the block
    """
    return f"; >>> End PHP Debug Pilot - {label} <<<"


def wrap_block(start_marker: str, end_marker: str, lines: list[str]) -> str:
    """Wrap directive lines in block markers, ready to append to php.ini.

    The block starts with a blank line and ends with a newline so that
    :func:`strip_block` removes it cleanly again.
    """
    body = "\n".join(lines)
    return f"\n{start_marker}\n{body}\n{end_marker}\n"


@dataclass
class IniBlock:
    """A managed block located inside php.ini content."""

    content: str
    start_pos: int
    end_pos: int


def find_block(file_content: str, start_marker: str, end_marker: str) -> IniBlock | None:
    """Find the first block bounded by the given markers.

    Args:
        file_content: Full php.ini content
        start_marker: Marker opening the block
        end_marker: Marker closing the block

    Returns:
        IniBlock if both markers are present in order, None otherwise
    """
    start_pos = file_content.find(start_marker)
    if start_pos == -1:
        return None

    end_pos = file_content.find(end_marker, start_pos)
    if end_pos == -1:
        return None

    content_start = start_pos + len(start_marker)
    inner = file_content[content_start:end_pos].strip()

    return IniBlock(content=inner, start_pos=start_pos, end_pos=end_pos + len(end_marker))


def strip_block(file_content: str, start_marker: str, end_marker: str) -> str:
    """Remove every block bounded by the given markers.

    Matching is non-greedy so each start marker pairs with the nearest end
    marker, and content between separate blocks survives. One newline on
    either side of a block is removed along with it. Content without the
    block is returned unchanged.

    Args:
        file_content: Full php.ini content
        start_marker: Marker opening the block
        end_marker: Marker closing the block

    Returns:
        Content with the block removed
    """
    pattern = rf"\n?{re.escape(start_marker)}.*?{re.escape(end_marker)}\n?"
    return re.sub(pattern, "", file_content, flags=re.DOTALL)


def list_blocks(file_content: str) -> list[str]:
    """List the labels of all managed blocks present in the content."""
    return _START_MARKER_RE.findall(file_content)
