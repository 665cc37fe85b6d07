"""Minimal LSP server for normfix: checker diagnostics and document formatting."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DID_SAVE,
    TEXT_DOCUMENT_FORMATTING,
    Diagnostic,
    DiagnosticSeverity,
    DidOpenTextDocumentParams,
    DidSaveTextDocumentParams,
    DocumentFormattingParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
    TextEdit,
)
from pygls.lsp.server import LanguageServer

from normfix import diagnostics as nd
from normfix.checker import Checker
from normfix.config import config_dir_for, load_config, settings_from_config
from normfix.errors import ToolError
from normfix.formatter import default_formatter
from normfix.tokens import TAB_WIDTH

logger = logging.getLogger(__name__)

server = LanguageServer("normfix-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full)


def _checker_for(path: Path) -> Checker:
    settings = settings_from_config(load_config(None, config_dir_for(path)))
    return Checker(settings.checker_command, settings.checker_timeout)


def _check_text(source: str, path: Path) -> tuple[nd.Diagnostic, ...]:
    """Run the checker on *source* as it would be saved at *path*.

    The editor buffer may be ahead of the file on disk, so the text goes
    to a scratch file carrying the same name.
    """
    checker = _checker_for(path)
    with tempfile.TemporaryDirectory(prefix="normfix-lsp-") as tmp:
        scratch = Path(tmp) / (path.name or "buffer.c")
        with open(scratch, "w", encoding="utf-8", newline="") as f:
            f.write(source)
        return checker.run(scratch).diagnostics


def _character(line_text: str, column: int) -> int:
    """Map a 1-based visual column (tabs to multiples of 4) to a 0-based character index."""
    visual = 1
    for idx, ch in enumerate(line_text):
        if visual >= column:
            return idx
        if ch == "\t":
            visual += TAB_WIDTH - (visual - 1) % TAB_WIDTH
        else:
            visual += 1
    return len(line_text)


def _to_lsp(diag: nd.Diagnostic, lines: list[str]) -> Diagnostic:
    line = max(diag.line - 1, 0)
    text = lines[line] if line < len(lines) else ""
    char = _character(text, diag.column)
    return Diagnostic(
        range=Range(
            start=Position(line=line, character=char),
            end=Position(line=line, character=char + 1),
        ),
        message=f"{diag.code}: {diag.message}" if diag.message else diag.code,
        severity=DiagnosticSeverity.Error,
        code=diag.code,
        source="norminette",
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Run the checker on the document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    lines = source.splitlines()
    diagnostics: list[Diagnostic] = []

    try:
        found = _check_text(source, Path(doc.path))
    except ToolError as exc:
        logger.warning("%s: %s", uri, exc.format())
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=0, character=0),
                    end=Position(line=0, character=1),
                ),
                message=exc.format(),
                severity=DiagnosticSeverity.Warning,
                source="normfix",
            )
        )
    else:
        diagnostics.extend(_to_lsp(d, lines) for d in found)

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


def _format(ls: LanguageServer, uri: str) -> list[TextEdit] | None:
    """Return one whole-document edit with the token-repair result, or None."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    try:
        found = _check_text(source, Path(doc.path))
    except ToolError as exc:
        logger.warning("%s: %s", uri, exc.format())
        return None

    formatted = default_formatter().format(source, found)
    if formatted == source:
        return []

    last_line = source.count("\n")
    last_col = len(source) - (source.rfind("\n") + 1)
    return [
        TextEdit(
            range=Range(
                start=Position(line=0, character=0),
                end=Position(line=last_line, character=last_col),
            ),
            new_text=formatted,
        )
    ]


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_SAVE)
def did_save(ls: LanguageServer, params: DidSaveTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_FORMATTING)
def formatting(ls: LanguageServer, params: DocumentFormattingParams) -> list[TextEdit] | None:
    return _format(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
