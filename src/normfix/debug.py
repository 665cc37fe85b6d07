"""Token stream dump for ``normfix tokens``."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from normfix.tokens import Token, TokenKind


def dump_tokens(tokens: Iterable[Token], *, file: TextIO = sys.stderr) -> None:
    """Print one token per line as ``line:col KIND 'text'`` to *file*."""
    for tok in tokens:
        _dump_token(tok, file)


def _dump_token(tok: Token, f: TextIO) -> None:
    where = f"{tok.line}:{tok.column}"
    if tok.kind == TokenKind.EOF:
        f.write(f"{where:>8}  EOF\n")
        return
    f.write(f"{where:>8}  {tok.kind.name:<16} {tok.text!r}\n")
