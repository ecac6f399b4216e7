"""Tests for debug_pilot.utils.ini_editor module."""

import pytest

from debug_pilot.drivers.pcov import PCOV_SPEC
from debug_pilot.drivers.xdebug import XDEBUG_SPEC
from debug_pilot.utils.ini_editor import (
    append_line,
    comment_line,
    has_line,
    is_line_enabled,
    read_directive,
    uncomment_line,
)

XDEBUG = XDEBUG_SPEC.directive_pattern
PCOV = PCOV_SPEC.directive_pattern


class TestIsLineEnabled:
    """Tests for is_line_enabled function."""

    def test_uncommented_directive(self):
        """Detects an uncommented directive."""
        assert is_line_enabled("zend_extension=xdebug\n", XDEBUG) is True

    def test_commented_directive(self):
        """A commented directive is not enabled."""
        assert is_line_enabled(";zend_extension=xdebug\n", XDEBUG) is False

    def test_commented_with_indent_and_space(self):
        """Leading whitespace and space after ';' still count as commented."""
        assert is_line_enabled("  ; zend_extension=xdebug\n", XDEBUG) is False

    def test_indented_uncommented_directive(self):
        """Leading whitespace before an uncommented directive is allowed."""
        assert is_line_enabled("    zend_extension = xdebug\n", XDEBUG) is True

    def test_full_path_and_quotes(self):
        """Matches a quoted full path to the shared object."""
        content = 'zend_extension="/usr/lib/php/20230831/xdebug.so"\n'
        assert is_line_enabled(content, XDEBUG) is True

    def test_windows_dll(self):
        """Matches a Windows DLL path."""
        content = "zend_extension=C:\\php\\ext\\xdebug.dll\n"
        assert is_line_enabled(content, XDEBUG) is True

    def test_any_of_several_lines(self):
        """Finds an enabled line even when another copy is commented."""
        content = ";zend_extension=xdebug\nmemory_limit=1G\nzend_extension=xdebug\n"
        assert is_line_enabled(content, XDEBUG) is True

    def test_missing_directive(self):
        """Returns False when the directive is absent."""
        assert is_line_enabled("memory_limit = 128M\n", XDEBUG) is False

    def test_pcov_does_not_match_zend_extension(self):
        """The pcov pattern is anchored to the line start."""
        assert is_line_enabled("zend_extension=pcov\n", PCOV) is False


class TestHasLine:
    """Tests for has_line function."""

    def test_uncommented(self):
        """Finds an uncommented directive."""
        assert has_line("extension=pcov\n", PCOV) is True

    def test_commented(self):
        """Finds a commented directive."""
        assert has_line(";extension=pcov\n", PCOV) is True

    def test_commented_with_space(self):
        """Finds a commented directive with space after the marker."""
        assert has_line("; extension=pcov.so\n", PCOV) is True

    def test_absent(self):
        """Returns False when no line matches."""
        assert has_line("extension=mbstring\n", PCOV) is False

    def test_does_not_match_across_lines(self):
        """A marker on one line does not combine with a directive on the next."""
        assert has_line(";\nfoo\nextension\n=pcov\n", PCOV) is False


class TestCommentLine:
    """Tests for comment_line function."""

    def test_comments_directive(self):
        """Prefixes the directive with ';'."""
        assert comment_line("zend_extension=xdebug\n", XDEBUG) == ";zend_extension=xdebug\n"

    def test_preserves_indentation(self):
        """Keeps leading whitespace before the marker."""
        assert comment_line("  zend_extension=xdebug\n", XDEBUG) == "  ;zend_extension=xdebug\n"

    def test_leaves_commented_line(self):
        """Does not double-comment."""
        content = "; zend_extension=xdebug\n"
        assert comment_line(content, XDEBUG) == content

    def test_comments_all_matches(self):
        """Every uncommented occurrence is commented."""
        content = "zend_extension=xdebug\nx=1\nzend_extension=/opt/xdebug.so\n"
        expected = ";zend_extension=xdebug\nx=1\n;zend_extension=/opt/xdebug.so\n"
        assert comment_line(content, XDEBUG) == expected

    def test_leaves_other_lines(self):
        """Unrelated lines are untouched."""
        content = "memory_limit = 128M\nzend_extension=xdebug\n"
        assert comment_line(content, XDEBUG).startswith("memory_limit = 128M\n")

    @pytest.mark.parametrize(
        "content",
        [
            "zend_extension=xdebug\n",
            "  zend_extension = xdebug\n;zend_extension=xdebug\n",
            "a=1\nzend_extension=xdebug",
            "nothing here\n",
        ],
    )
    def test_idempotent(self, content):
        """Commenting twice equals commenting once."""
        once = comment_line(content, XDEBUG)
        assert comment_line(once, XDEBUG) == once


class TestUncommentLine:
    """Tests for uncomment_line function."""

    def test_uncomments_directive(self):
        """Removes the leading ';'."""
        assert uncomment_line(";zend_extension=xdebug\n", XDEBUG) == "zend_extension=xdebug\n"

    def test_removes_space_after_marker(self):
        """Whitespace between ';' and the directive is removed."""
        assert uncomment_line(";  extension=pcov\n", PCOV) == "extension=pcov\n"

    def test_preserves_indentation(self):
        """Whitespace before the marker is kept."""
        assert uncomment_line("\t;extension=pcov\n", PCOV) == "\textension=pcov\n"

    def test_removes_repeated_markers(self):
        """A run of ';' is removed as a single comment marker."""
        assert uncomment_line(";;extension=pcov\n", PCOV) == "extension=pcov\n"

    def test_leaves_uncommented_line(self):
        """Uncommented lines are untouched."""
        content = "extension=pcov\n"
        assert uncomment_line(content, PCOV) == content

    def test_leaves_other_comments(self):
        """Comments that are not the directive stay commented."""
        content = "; Enable pcov below\n;extension=pcov\n"
        assert uncomment_line(content, PCOV) == "; Enable pcov below\nextension=pcov\n"

    def test_idempotent(self):
        """Uncommenting twice equals uncommenting once."""
        content = ";extension=pcov\n  ; extension=pcov.so\n"
        once = uncomment_line(content, PCOV)
        assert uncomment_line(once, PCOV) == once

    @pytest.mark.parametrize(
        "content",
        [
            "zend_extension=xdebug\n",
            "memory_limit=1G\n  zend_extension = /usr/lib/xdebug.so\nfoo=bar\n",
            "zend_extension=xdebug",
        ],
    )
    def test_inverts_comment_line(self, content):
        """Uncommenting restores content that had no comment variations."""
        assert uncomment_line(comment_line(content, XDEBUG), XDEBUG) == content


class TestAppendLine:
    """Tests for append_line function."""

    def test_appends_after_newline(self):
        """No separator is added when content ends with a newline."""
        assert append_line("a=1\n", "extension=pcov") == "a=1\nextension=pcov\n"

    def test_inserts_single_newline(self):
        """Exactly one newline is inserted when content lacks one."""
        result = append_line("a=1", "extension=pcov")
        assert result == "a=1\nextension=pcov\n"
        assert "\n\n" not in result

    def test_empty_content(self):
        """Appending to empty content yields just the line."""
        assert append_line("", "extension=pcov") == "extension=pcov\n"


class TestReadDirective:
    """Tests for read_directive function."""

    def test_reads_value(self):
        """Reads and strips the value."""
        assert read_directive("xdebug.mode = debug  \n", "xdebug.mode") == "debug"

    def test_last_occurrence_wins(self):
        """The last uncommented occurrence takes precedence."""
        content = "xdebug.mode=off\nfoo=1\nxdebug.mode = debug,develop\n"
        assert read_directive(content, "xdebug.mode") == "debug,develop"

    def test_ignores_commented(self):
        """Commented occurrences are skipped."""
        content = "xdebug.mode=debug\n;xdebug.mode=off\n"
        assert read_directive(content, "xdebug.mode") == "debug"

    def test_missing(self):
        """Returns None when the directive is not set."""
        assert read_directive("memory_limit=1G\n", "xdebug.mode") is None

    def test_directive_name_is_literal(self):
        """The '.' in the directive name is not a wildcard."""
        assert read_directive("xdebugXmode = debug\n", "xdebug.mode") is None

    def test_strips_inline_comment(self):
        """A trailing '; comment' is not part of the value."""
        assert read_directive("xdebug.mode = debug,coverage ; dev\n", "xdebug.mode") == "debug,coverage"

    def test_keeps_semicolon_inside_quotes(self):
        """A ';' inside a quoted value does not start a comment."""
        content = 'xdebug.output_dir = "/tmp/a;b" ; where traces go\n'
        assert read_directive(content, "xdebug.output_dir") == '"/tmp/a;b"'

    def test_indented_directive(self):
        assert read_directive("  xdebug.mode = develop\n", "xdebug.mode") == "develop"
