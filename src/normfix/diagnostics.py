"""Checker diagnostics: data model, output parsing, and source-context rendering."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum


class Code(StrEnum):
    """Checker error codes the repair stages know how to handle."""

    INVALID_HEADER = "INVALID_HEADER"
    SPACE_REPLACE_TAB = "SPACE_REPLACE_TAB"
    SPACE_BEFORE_FUNC = "SPACE_BEFORE_FUNC"
    MISSING_TAB_FUNC = "MISSING_TAB_FUNC"
    MISSING_TAB_VAR = "MISSING_TAB_VAR"
    SPC_AFTER_POINTER = "SPC_AFTER_POINTER"
    SPC_BFR_POINTER = "SPC_BFR_POINTER"
    CONSECUTIVE_SPC = "CONSECUTIVE_SPC"
    TAB_INSTEAD_SPC = "TAB_INSTEAD_SPC"
    SPACE_EMPTY_LINE = "SPACE_EMPTY_LINE"
    SPC_BEFORE_NL = "SPC_BEFORE_NL"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One checker finding. ``line`` and ``column`` are 1-based."""

    file: str
    line: int
    column: int
    code: str
    message: str = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "code": self.code,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Parsed result of one checker invocation."""

    files_checked: int
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    @property
    def status(self) -> str:
        return "OK" if self.ok else "Error"

    @property
    def summary(self) -> str:
        return f"Checked {self.files_checked} files, found {len(self.diagnostics)} errors"

    def for_file(self, path: str) -> tuple[Diagnostic, ...]:
        """Return the diagnostics reported against *path*."""
        return tuple(d for d in self.diagnostics if d.file == path)

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status,
            "files_checked": self.files_checked,
            "summary": self.summary,
            "errors": [d.to_dict() for d in self.diagnostics],
        }


_SECTION_RE = re.compile(r"^(?P<file>.+): (?P<status>OK|Error)!\s*$")
_ERROR_RE = re.compile(
    r"^\s*Error:\s+(?P<code>\w+)\s*\(line:\s*(?P<line>\d+),\s*col:\s*(?P<col>\d+)\):\s*(?P<msg>.*)$"
)


def parse_checker_output(output: str, default_file: str) -> CheckResult:
    """Parse norminette-style text output into a CheckResult.

    ``<path>: OK!`` and ``<path>: Error!`` lines open a per-file section and
    set the ``file`` of the diagnostics that follow. Diagnostics seen before
    any section header are attributed to *default_file*. Lines matching
    neither form (notices, banners, tracebacks) are skipped.
    """
    current_file = default_file
    files_checked = 0
    diagnostics: list[Diagnostic] = []

    for line in output.splitlines():
        section = _SECTION_RE.match(line)
        if section is not None:
            current_file = section.group("file").strip()
            files_checked += 1
            continue

        m = _ERROR_RE.match(line)
        if m is None:
            continue
        diagnostics.append(
            Diagnostic(
                file=current_file,
                line=int(m.group("line")),
                column=int(m.group("col")),
                code=m.group("code"),
                message=m.group("msg").strip(),
            )
        )

    return CheckResult(files_checked, tuple(diagnostics))


def format_diagnostic(diag: Diagnostic, source: str, tab_width: int = 4) -> str:
    """Render a diagnostic with its source line and a caret under the column.

    The checker counts columns with tabs expanded, so the source line is
    shown expanded the same way to keep the caret aligned.
    """
    lines = source.splitlines()
    line_idx = diag.line - 1

    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].expandtabs(tab_width)
    else:
        source_line = ""

    col = max(1, diag.column)
    pad = " " * (col - 1)

    line_num = str(diag.line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    message = f"{diag.code}: {diag.message}" if diag.message else diag.code
    return (
        f"error: {message}\n"
        f"{' ' * gutter_width}--> {diag.file}:{diag.line}:{diag.column}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}^"
    )
