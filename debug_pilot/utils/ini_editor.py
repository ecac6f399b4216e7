"""Line-level editing of php.ini content.

Every function takes the full ini text and a directive pattern (a regular
expression matching the directive itself, e.g. ``zend_extension=xdebug``)
and returns a result without touching the filesystem. Callers own reading
and writing the file.

All transforms are idempotent: commenting already-commented content or
uncommenting already-uncommented content returns it unchanged.
"""

from __future__ import annotations

import re

COMMENT_MARKER = ";"

# Value up to an unquoted ';', which starts an inline comment
_VALUE_RE = re.compile(r'(?:"[^"]*"|[^;"]|")*')


def is_line_enabled(content: str, pattern: str) -> bool:
    """Check whether an uncommented line matching ``pattern`` exists.

    Args:
        content: Full php.ini content
        pattern: Regex matching the directive

    Returns:
        True if at least one matching line is not prefixed with ';'
    """
    regex = rf"^[ \t]*(?!;)(?:{pattern})"
    return re.search(regex, content, re.MULTILINE) is not None


def has_line(content: str, pattern: str) -> bool:
    """Check whether a line matching ``pattern`` exists, commented or not.

    Args:
        content: Full php.ini content
        pattern: Regex matching the directive

    Returns:
        True if at least one matching line exists
    """
    regex = rf"^[ \t]*(?:;+[ \t]*)?(?:{pattern})"
    return re.search(regex, content, re.MULTILINE) is not None


def comment_line(content: str, pattern: str) -> str:
    """Comment out every uncommented line matching ``pattern``.

    Leading indentation is kept in front of the inserted ';'. Lines that
    are already commented are left alone.

    Args:
        content: Full php.ini content
        pattern: Regex matching the directive

    Returns:
        Updated content
    """
    regex = rf"^([ \t]*)(?!;)((?:{pattern}).*)$"
    return re.sub(regex, rf"\1{COMMENT_MARKER}\2", content, flags=re.MULTILINE)


def uncomment_line(content: str, pattern: str) -> str:
    """Uncomment every commented line matching ``pattern``.

    The leading run of ';' and any whitespace between it and the directive
    are removed; indentation before the marker is kept.

    Args:
        content: Full php.ini content
        pattern: Regex matching the directive

    Returns:
        Updated content
    """
    regex = rf"^([ \t]*);+[ \t]*((?:{pattern}).*)$"
    return re.sub(regex, r"\1\2", content, flags=re.MULTILINE)


def append_line(content: str, line: str) -> str:
    """Append a directive line to the end of the content.

    A newline is inserted first when the content does not already end with
    one, so the new directive never lands on the previous line.

    Args:
        content: Full php.ini content
        line: Line to append, without trailing newline

    Returns:
        Updated content
    """
    separator = "\n" if content and not content.endswith("\n") else ""
    return f"{content}{separator}{line}\n"


def read_directive(content: str, directive: str) -> str | None:
    """Read the value of a ``key = value`` directive.

    When the directive is defined several times the last uncommented
    occurrence wins, matching how PHP applies duplicate settings. A
    trailing ``; comment`` outside quotes is not part of the value.

    Args:
        content: Full php.ini content
        directive: Literal directive name (e.g. "xdebug.mode")

    Returns:
        The stripped value, or None if the directive is not set
    """
    regex = rf"^[ \t]*{re.escape(directive)}[ \t]*=[ \t]*(.+)$"
    matches = re.findall(regex, content, re.MULTILINE)
    if not matches:
        return None
    value = _VALUE_RE.match(str(matches[-1]))
    return value.group(0).strip() if value else None
