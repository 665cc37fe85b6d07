"""Tests for norminette invocation, using fake checker scripts."""

from __future__ import annotations

from pathlib import Path

import pytest

from normfix.checker import Checker
from normfix.errors import ToolTimeoutError, ToolUnavailableError


class TestChecker:
    def test_parses_output_and_ignores_exit_status(self, tmp_path: Path, make_script):
        script = make_script(
            tmp_path / "norminette",
            'echo "$1: Error!"\n'
            'echo "Error: SPACE_REPLACE_TAB    (line:   1, col:   4):\tFound space"\n'
            "exit 1",
        )
        src = tmp_path / "a.c"
        src.write_text("int x;\n")
        result = Checker(str(script)).run(src)
        assert result.files_checked == 1
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].file == str(src)
        assert result.diagnostics[0].code == "SPACE_REPLACE_TAB"

    def test_clean_file(self, tmp_path: Path, make_script):
        script = make_script(tmp_path / "norminette", 'echo "$1: OK!"')
        result = Checker(str(script)).run(tmp_path / "a.c")
        assert result.ok
        assert result.files_checked == 1

    def test_output_on_stderr(self, tmp_path: Path, make_script):
        script = make_script(
            tmp_path / "norminette",
            'echo "$1: Error!" >&2\n'
            'echo "Error: SPC_BEFORE_NL (line: 2, col: 7): space before newline" >&2\n'
            "exit 1",
        )
        result = Checker(str(script)).run("a.c")
        assert result.diagnostics[0].line == 2

    def test_failure_without_output(self, tmp_path: Path, make_script):
        script = make_script(tmp_path / "norminette", 'echo "boom" >&2\nexit 2')
        with pytest.raises(ToolUnavailableError, match="boom"):
            Checker(str(script)).run("a.c")

    def test_missing_executable(self, tmp_path: Path):
        with pytest.raises(ToolUnavailableError) as excinfo:
            Checker(str(tmp_path / "missing")).run("a.c")
        assert excinfo.value.tool == str(tmp_path / "missing")

    def test_timeout(self, tmp_path: Path, make_script):
        script = make_script(tmp_path / "norminette", "exec sleep 5")
        with pytest.raises(ToolTimeoutError) as excinfo:
            Checker(str(script), timeout=0.2).run("a.c")
        assert excinfo.value.timeout == 0.2
        assert "timed out after 0.2s" in str(excinfo.value)
