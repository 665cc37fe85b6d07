"""Shared test fixtures and helpers."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from normfix.diagnostics import Diagnostic
from normfix.lexer import tokenize
from normfix.tokens import Token, TokenKind


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns tokens (excluding EOF)."""

    def _lex(source: str) -> list[Token]:
        tokens = tokenize(source)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.kind != TokenKind.EOF]

    return _lex


@pytest.fixture
def kinds(lex):
    """Return a helper that tokenizes source and returns the token kinds."""

    def _kinds(source: str) -> list[TokenKind]:
        return [t.kind for t in lex(source)]

    return _kinds


@pytest.fixture
def diag():
    """Return a factory for diagnostics against a default file name."""

    def _diag(code: str, line: int = 1, column: int = 1, file: str = "test.c") -> Diagnostic:
        return Diagnostic(file=file, line=line, column=column, code=code)

    return _diag


@pytest.fixture
def make_script():
    """Return a helper that writes an executable shell script."""

    def _make(path: Path, body: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(path.stat().st_mode | stat.S_IEXEC)
        return path

    return _make
