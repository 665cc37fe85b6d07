"""Tests for checker output parsing and diagnostic rendering."""

from __future__ import annotations

import textwrap

from normfix.diagnostics import CheckResult, Code, Diagnostic, format_diagnostic, parse_checker_output

SAMPLE = textwrap.dedent(
    """\
    Notice: GLOBAL_VAR_DETECTED
    src/main.c: Error!
    Error: SPACE_REPLACE_TAB    (line:   3, col:   4):\tFound space when expecting tab
    Error: SPC_AFTER_POINTER    (line:  10, col:  11):\tspace after pointer
    src/util.c: OK!
    include/util.h: Error!
    Error: INVALID_HEADER       (line:   1, col:   1):\tMissing or invalid 42 header
    """
)


class TestParseCheckerOutput:
    def test_sections_and_errors(self):
        result = parse_checker_output(SAMPLE, "src")
        assert result.files_checked == 3
        assert len(result.diagnostics) == 3

        first = result.diagnostics[0]
        assert first == Diagnostic(
            "src/main.c", 3, 4, Code.SPACE_REPLACE_TAB, "Found space when expecting tab"
        )
        assert result.diagnostics[2].file == "include/util.h"
        assert result.diagnostics[2].code == Code.INVALID_HEADER

    def test_for_file(self):
        result = parse_checker_output(SAMPLE, "src")
        assert [d.line for d in result.for_file("src/main.c")] == [3, 10]
        assert result.for_file("src/util.c") == ()

    def test_error_before_section_uses_default_file(self):
        out = "Error: CONSECUTIVE_SPC (line: 2, col: 7): two spaces\n"
        result = parse_checker_output(out, "a.c")
        assert result.files_checked == 0
        assert result.diagnostics[0].file == "a.c"
        assert result.diagnostics[0].column == 7

    def test_unknown_code_is_kept(self):
        out = "a.c: Error!\nError: TOO_MANY_LINES (line: 30, col: 1): too many lines\n"
        result = parse_checker_output(out, "a.c")
        assert result.diagnostics[0].code == "TOO_MANY_LINES"

    def test_noise_is_skipped(self):
        out = "Traceback (most recent call last):\n  garbage\n"
        result = parse_checker_output(out, "a.c")
        assert result == CheckResult(0, ())

    def test_empty_output(self):
        assert parse_checker_output("", "a.c").ok


class TestCheckResult:
    def test_summary_and_status(self):
        result = parse_checker_output(SAMPLE, "src")
        assert result.summary == "Checked 3 files, found 3 errors"
        assert result.status == "Error"
        assert not result.ok

    def test_clean_result(self):
        result = CheckResult(2)
        assert result.ok
        assert result.status == "OK"
        assert result.summary == "Checked 2 files, found 0 errors"

    def test_to_dict(self):
        d = parse_checker_output(SAMPLE, "src").to_dict()
        assert d["status"] == "Error"
        assert d["files_checked"] == 3
        assert d["errors"][0] == {
            "file": "src/main.c",
            "line": 3,
            "column": 4,
            "code": "SPACE_REPLACE_TAB",
            "message": "Found space when expecting tab",
        }


class TestFormatDiagnostic:
    def test_caret_under_column(self):
        diag = Diagnostic("a.c", 1, 4, Code.SPACE_REPLACE_TAB, "Found space when expecting tab")
        text = format_diagnostic(diag, "int x;\n")
        assert text == (
            "error: SPACE_REPLACE_TAB: Found space when expecting tab\n"
            "  --> a.c:1:4\n"
            "  |\n"
            "1 | int x;\n"
            "  |    ^"
        )

    def test_tabs_expanded(self):
        diag = Diagnostic("a.c", 2, 6, Code.SPC_AFTER_POINTER)
        text = format_diagnostic(diag, "x\n\tchar * p;\n")
        lines = text.splitlines()
        assert lines[0] == "error: SPC_AFTER_POINTER"
        assert lines[3] == "2 |     char * p;"
        assert lines[4] == "  |      ^"

    def test_line_out_of_range(self):
        diag = Diagnostic("a.c", 9, 1, Code.SPC_BEFORE_NL)
        text = format_diagnostic(diag, "x\n")
        assert "9 | \n" in text
