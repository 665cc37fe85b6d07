"""Whole-file reformatting: clang-format, or a built-in whitespace normalizer.

Both strategies implement the same ``reformat(text) -> text`` contract. The
normalizer is the degraded mode used when clang-format is missing, fails, or
times out.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import Protocol

from normfix.errors import ToolError, ToolTimeoutError, ToolUnavailableError
from normfix.lexer import tokenize
from normfix.tokens import TAB_WIDTH, Token, TokenKind, is_whitespace

logger = logging.getLogger(__name__)

# 42-school layout: tab indentation, Allman braces, right-aligned pointers
STYLE: dict[str, object] = {
    "TabWidth": 4,
    "IndentWidth": 4,
    "UseTab": "Always",
    "SpaceBeforeParens": "ControlStatements",
    "AllowShortFunctionsOnASingleLine": "None",
    "AlignEscapedNewlines": "Left",
    "AllowShortBlocksOnASingleLine": "Never",
    "AllowShortIfStatementsOnASingleLine": "Never",
    "AlwaysBreakAfterReturnType": "None",
    "AlwaysBreakBeforeMultilineStrings": False,
    "BinPackArguments": False,
    "BinPackParameters": False,
    "BreakBeforeBraces": "Allman",
    "BreakBeforeTernaryOperators": True,
    "IncludeBlocks": "Merge",
    "PointerAlignment": "Right",
    "PenaltyBreakBeforeFirstCallParameter": 1,
    "PenaltyBreakString": 1,
    "PenaltyExcessCharacter": 10,
    "PenaltyReturnTypeOnItsOwnLine": 100,
    "SpaceAfterCStyleCast": False,
    "SpaceBeforeAssignmentOperators": True,
    "SpaceBeforeSquareBrackets": False,
    "SpaceInEmptyParentheses": False,
    "SpacesInCStyleCastParentheses": False,
    "SpacesInParentheses": False,
    "SpacesInSquareBrackets": False,
    "AlignOperands": False,
    "Cpp11BracedListStyle": True,
    "SeparateDefinitionBlocks": "Always",
    "MaxEmptyLinesToKeep": 1,
    "KeepEmptyLinesAtTheStartOfBlocks": False,
    "InsertNewlineAtEOF": True,
}


class Reformatter(Protocol):
    """Anything that turns whole-file text into reformatted text."""

    name: str

    def available(self) -> bool: ...

    def reformat(self, text: str) -> str: ...


def style_argument(column_limit: int) -> str:
    """Render the fixed style profile as an inline ``--style`` value."""
    items = {**STYLE, "ColumnLimit": column_limit}
    rendered = []
    for key, value in items.items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        rendered.append(f"{key}: {value}")
    return "{" + ", ".join(rendered) + "}"


@dataclass
class ClangFormat:
    """Pipes text through an external clang-format executable."""

    executable: str = "clang-format"
    timeout: float = 10.0
    column_limit: int = 1024
    probe_timeout: float = 5.0
    name: str = "clang-format"
    _available: bool | None = field(default=None, init=False, repr=False)

    def available(self) -> bool:
        """Probe the executable with ``--version``. The answer is cached."""
        if self._available is None:
            self._available = self._probe()
        return self._available

    def _probe(self) -> bool:
        if shutil.which(self.executable) is None:
            return False
        try:
            result = subprocess.run(
                [self.executable, "--version"],
                capture_output=True,
                text=True,
                timeout=self.probe_timeout,
            )
        except (OSError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def reformat(self, text: str) -> str:
        if not self.available():
            raise ToolUnavailableError(self.executable, "not found or not runnable")

        try:
            result = subprocess.run(
                [
                    self.executable,
                    f"--style={style_argument(self.column_limit)}",
                    "--assume-filename=source.c",
                ],
                input=text,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise ToolTimeoutError(self.executable, self.timeout) from None
        except OSError as exc:
            raise ToolUnavailableError(self.executable, str(exc)) from None

        if result.returncode != 0:
            msg = f"failed (exit {result.returncode})"
            stderr = result.stderr.strip()
            if stderr:
                msg += f": {stderr}"
            raise ToolUnavailableError(self.executable, msg)

        return result.stdout


class WhitespaceNormalizer:
    """Token-based whitespace cleanup that never touches comments, strings or directives.

    Per line:
    1. Trailing whitespace is dropped; whitespace-only lines become empty.
    2. Indentation is measured with 4-column tab stops and rewritten as
       tabs, with any remainder kept as spaces.
    3. Interior runs of spaces collapse to one space.
    4. Interior runs that contain a tab collapse to one tab.
    """

    name = "whitespace-normalizer"

    def available(self) -> bool:
        return True

    def reformat(self, text: str) -> str:
        out: list[str] = []
        line: list[Token] = []
        for tok in tokenize(text):
            if tok.kind == TokenKind.NEWLINE:
                out.append(_normalize_line(line))
                out.append(tok.text)
                line = []
            elif tok.kind == TokenKind.EOF:
                out.append(_normalize_line(line))
            else:
                line.append(tok)
        return "".join(out)


def _normalize_line(tokens: list[Token]) -> str:
    # Keep a CRLF line ending out of the whitespace handling
    if tokens and tokens[-1].text == "\r":
        return _normalize_line(tokens[:-1]) + "\r"

    i = 0
    width = 0
    while i < len(tokens) and is_whitespace(tokens[i]):
        if tokens[i].kind == TokenKind.TAB:
            width = (width // TAB_WIDTH + 1) * TAB_WIDTH
        else:
            width += tokens[i].length
        i += 1

    end = len(tokens)
    while end > i and is_whitespace(tokens[end - 1]):
        end -= 1

    if i == end:
        return ""

    parts = ["\t" * (width // TAB_WIDTH), " " * (width % TAB_WIDTH)]
    run: list[Token] = []
    for tok in tokens[i:end]:
        if is_whitespace(tok):
            run.append(tok)
            continue
        if run:
            parts.append("\t" if any(t.kind == TokenKind.TAB for t in run) else " ")
            run = []
        parts.append(tok.text)
    return "".join(parts)


@dataclass(frozen=True, slots=True)
class ReformatOutcome:
    """Result of a reformat attempt: the text, which strategy produced it, and why."""

    text: str
    strategy: str
    note: str | None = None

    @property
    def degraded(self) -> bool:
        return self.note is not None


def reformat_with_fallback(
    text: str,
    primary: Reformatter | None,
    fallback: Reformatter,
) -> ReformatOutcome:
    """Reformat with *primary*, or with *fallback* when the primary tool fails."""
    note: str | None = None
    if primary is not None:
        try:
            return ReformatOutcome(primary.reformat(text), primary.name)
        except ToolError as exc:
            logger.warning("%s unusable, falling back to %s: %s", primary.name, fallback.name, exc)
            note = str(exc)
    return ReformatOutcome(fallback.reformat(text), fallback.name, note)
