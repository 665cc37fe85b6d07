"""Token-level repair of norminette style violations in C sources."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from normfix.diagnostics import Diagnostic

__version__ = "0.1.0"


def format_source(source: str, diagnostics: Sequence[Diagnostic]) -> str:
    """Apply the built-in repair rules to *source* for the given diagnostics."""
    from normfix.formatter import default_formatter

    return default_formatter().format(source, diagnostics)
