"""Staged repair of checker violations.

Per file, one forward pass:

    INITIAL -> STRUCTURAL -> REFORMAT -> TOKEN_REPAIR -> VALIDATED -> REPORTED

A clean file goes straight from INITIAL to REPORTED. Each stage is a pure
function from text to text plus a StageOutcome; the pipeline carries the
current text between them and writes it to disk only between checker runs.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path

from normfix.checker import Checker
from normfix.config import Settings
from normfix.diagnostics import CheckResult, Diagnostic
from normfix.errors import ToolError
from normfix.fileio import atomic_write_text, iter_source_files, read_source
from normfix.formatter import TokenFormatter, default_formatter, reconstruct
from normfix.lexer import tokenize
from normfix.reformat import ClangFormat, Reformatter, WhitespaceNormalizer, reformat_with_fallback
from normfix.structural import StructuralFixer, apply_structural_fixes

logger = logging.getLogger(__name__)


class Stage(Enum):
    INITIAL = auto()
    STRUCTURAL = auto()
    REFORMAT = auto()
    TOKEN_REPAIR = auto()
    VALIDATED = auto()
    REPORTED = auto()


@dataclass(frozen=True, slots=True)
class StageOutcome:
    """What one stage did to the file."""

    stage: Stage
    changed: bool
    reason: str
    note: str | None = None


@dataclass
class FileRepair:
    """Progress and result of repairing one file."""

    path: str
    stage: Stage = Stage.INITIAL
    initial: tuple[Diagnostic, ...] = ()
    final: tuple[Diagnostic, ...] = ()
    outcomes: list[StageOutcome] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return any(o.changed for o in self.outcomes)

    @property
    def edits(self) -> list[str]:
        return [o.reason for o in self.outcomes if o.changed]

    def to_dict(self) -> dict[str, object]:
        return {
            "file": self.path,
            "initial_errors": len(self.initial),
            "final_errors": len(self.final),
            "fixes": self.edits,
            "notes": list(self.notes),
        }


# ----------------------------------------------------------------------
# Stage functions
# ----------------------------------------------------------------------


def structural_stage(
    text: str,
    path: str,
    diagnostics: Sequence[Diagnostic],
    fixers: Sequence[StructuralFixer],
) -> tuple[str, StageOutcome]:
    new_text, applied = apply_structural_fixes(text, path, diagnostics, fixers)
    if new_text == text:
        return text, StageOutcome(Stage.STRUCTURAL, False, "no structural fix applicable")
    reason = "; ".join(f"Applied {name}" for name in applied)
    return new_text, StageOutcome(Stage.STRUCTURAL, True, reason)


def reformat_stage(
    text: str,
    primary: Reformatter | None,
    fallback: Reformatter,
) -> tuple[str, StageOutcome]:
    outcome = reformat_with_fallback(text, primary, fallback)
    if outcome.strategy == fallback.name:
        reason = "Applied fallback whitespace fixes"
    else:
        reason = f"Applied {outcome.strategy} for 42 School compliance"
    changed = outcome.text != text
    if not changed:
        reason = f"{outcome.strategy} made no changes"
    return outcome.text, StageOutcome(Stage.REFORMAT, changed, reason, outcome.note)


def token_repair_stage(
    text: str,
    diagnostics: Sequence[Diagnostic],
    formatter: TokenFormatter,
) -> tuple[str, StageOutcome]:
    tokens, applied = formatter.format_tokens(tokenize(text), diagnostics)
    new_text = reconstruct(tokens)
    if new_text == text:
        return text, StageOutcome(Stage.TOKEN_REPAIR, False, "no token rule matched")
    reason = "Applied norminette-specific formatting rules: " + ", ".join(applied)
    return new_text, StageOutcome(Stage.TOKEN_REPAIR, True, reason)


# ----------------------------------------------------------------------
# Per-file pipeline
# ----------------------------------------------------------------------


@dataclass
class RepairPipeline:
    """Collaborators for the per-file repair pass. Holds no per-file state."""

    checker: Checker = field(default_factory=Checker)
    reformatter: Reformatter | None = field(default_factory=ClangFormat)
    fallback: Reformatter = field(default_factory=WhitespaceNormalizer)
    formatter: TokenFormatter = field(default_factory=default_formatter)
    structural: list[StructuralFixer] = field(default_factory=list)

    def repair_file(self, path: Path) -> FileRepair:
        """Run the stages over one file. Never raises for tool or I/O failures."""
        repair = FileRepair(path=str(path))
        try:
            self._run(path, repair)
        except (ToolError, OSError, UnicodeError) as exc:
            logger.warning("%s: stopped in %s: %s", path, repair.stage.name, exc)
            repair.notes.append(f"{repair.stage.name.lower()}: {exc}")
        self._enter(repair, Stage.REPORTED)
        return repair

    def _enter(self, repair: FileRepair, stage: Stage) -> None:
        logger.debug("%s: %s -> %s", repair.path, repair.stage.name, stage.name)
        repair.stage = stage

    def _check(self, path: Path) -> tuple[Diagnostic, ...]:
        return self.checker.run(path).diagnostics

    def _run(self, path: Path, repair: FileRepair) -> None:
        repair.initial = self._check(path)
        repair.final = repair.initial
        if not repair.initial:
            return

        text = read_source(path)
        on_disk = text

        self._enter(repair, Stage.STRUCTURAL)
        text, outcome = structural_stage(text, str(path), repair.initial, self.structural)
        repair.outcomes.append(outcome)

        self._enter(repair, Stage.REFORMAT)
        text, outcome = reformat_stage(text, self.reformatter, self.fallback)
        repair.outcomes.append(outcome)
        if outcome.note:
            repair.notes.append(f"reformat: {outcome.note}")

        if text != on_disk:
            atomic_write_text(path, text)
            on_disk = text
        remaining = self._check(path)
        repair.final = remaining

        self._enter(repair, Stage.TOKEN_REPAIR)
        text, outcome = token_repair_stage(text, remaining, self.formatter)
        repair.outcomes.append(outcome)

        if text != on_disk:
            atomic_write_text(path, text)
            repair.final = self._check(path)

        self._enter(repair, Stage.VALIDATED)


def build_pipeline(settings: Settings) -> RepairPipeline:
    """Wire the default collaborators from resolved settings."""
    reformatter: Reformatter | None = None
    if settings.use_formatter:
        reformatter = ClangFormat(
            executable=settings.formatter_command,
            timeout=settings.formatter_timeout,
            column_limit=settings.column_limit,
        )
    return RepairPipeline(
        checker=Checker(settings.checker_command, settings.checker_timeout),
        reformatter=reformatter,
    )


# ----------------------------------------------------------------------
# Path-level operations
# ----------------------------------------------------------------------


@dataclass
class FixReport:
    """Before/after counts and per-file results of a fix run."""

    files: list[FileRepair]

    @property
    def original_errors(self) -> int:
        return sum(len(f.initial) for f in self.files)

    @property
    def remaining(self) -> list[Diagnostic]:
        return [d for f in self.files for d in f.final]

    @property
    def final_errors(self) -> int:
        return len(self.remaining)

    @property
    def status(self) -> str:
        return "OK" if not self.remaining else "Error"

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status,
            "original_errors": self.original_errors,
            "final_error_count": self.final_errors,
            "fixes_applied": [
                {"file": f.path, "fixes": f.edits} for f in self.files if f.changed
            ],
            "notes": [{"file": f.path, "notes": f.notes} for f in self.files if f.notes],
            "remaining_errors": [d.to_dict() for d in self.remaining],
        }


def fix_path(path: Path, pipeline: RepairPipeline, jobs: int = 1) -> FixReport:
    """Repair every C source under *path*; files are independent of one another."""
    files = list(iter_source_files(path))
    if jobs > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            results = list(pool.map(pipeline.repair_file, files))
    else:
        results = [pipeline.repair_file(f) for f in files]
    return FixReport(results)


def check_path(path: Path, checker: Checker) -> CheckResult:
    """Run the checker once over *path*."""
    return checker.run(path)
