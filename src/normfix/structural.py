"""Structural fixers: file-level edits keyed by checker code."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from normfix.diagnostics import Diagnostic

logger = logging.getLogger(__name__)


class StructuralFixer(Protocol):
    """A provider that can rewrite whole-file content for certain codes."""

    name: str
    codes: frozenset[str]
    priority: int

    def can_fix(self, diagnostic: Diagnostic, content: str, path: str) -> bool: ...

    def apply(self, content: str, path: str, diagnostic: Diagnostic) -> str: ...


def apply_structural_fixes(
    content: str,
    path: str,
    diagnostics: Sequence[Diagnostic],
    fixers: Iterable[StructuralFixer],
) -> tuple[str, list[str]]:
    """Run each fixer, lowest priority first, over the diagnostics it claims.

    Returns the new content and ``"<fixer>:<code>"`` for each applied fix.
    A fixer that raises is logged and skipped; the content it was given is
    kept.
    """
    result = content
    applied: list[str] = []

    for fixer in sorted(fixers, key=lambda f: f.priority):
        for diag in diagnostics:
            if diag.code not in fixer.codes or not fixer.can_fix(diag, result, path):
                continue
            try:
                result = fixer.apply(result, path, diag)
            except Exception:
                logger.exception("structural fixer %s failed on %s for %s", fixer.name, path, diag.code)
                continue
            applied.append(f"{fixer.name}:{diag.code}")

    return result, applied
