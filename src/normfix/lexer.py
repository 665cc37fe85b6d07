"""Lossless C lexer: converts source text into a flat token stream.

Every character of the input ends up in exactly one token, so joining the
``text`` of all tokens reproduces the source. Whitespace, newlines, comments
and preprocessor lines are tokens in their own right; the rule engine edits
formatting by rewriting them.
"""

from __future__ import annotations

from normfix.tokens import (
    BRACKETS,
    KEYWORDS,
    OPERATORS,
    SEPARATORS,
    SORTED_OPERATORS,
    Position,
    Token,
    TokenKind,
    is_digit,
    is_hex_digit,
    is_ident_char,
    is_ident_start,
)


class Lexer:
    """Tokenize C source text into a stream of Token objects.

    The lexer never raises: characters it cannot classify become
    UNRECOGNIZED tokens, and unterminated comments or literals run to the
    end of the input.
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._col = 1
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list, ending in EOF."""
        while self._pos < len(self._source):
            self._lex_one()
        self._tokens.append(Token(TokenKind.EOF, self._current_pos(), ""))
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _current_pos(self) -> Position:
        return Position(self._line, self._col, self._pos)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _advance_n(self, count: int) -> None:
        for _ in range(count):
            self._advance()

    def _emit(self, kind: TokenKind, start: Position) -> Token:
        tok = Token(kind, start, self._source[start.offset : self._pos])
        self._tokens.append(tok)
        return tok

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _lex_one(self) -> None:
        start = self._current_pos()
        ch = self._peek()
        nxt = self._peek(1)

        if ch == "/" and nxt == "/":
            self._lex_line_comment(start)
            return

        if ch == "/" and nxt == "*":
            self._lex_block_comment(start)
            return

        if ch == "#":
            self._lex_directive(start)
            return

        if ch == '"':
            self._lex_quoted('"', TokenKind.STRING, start)
            return

        if ch == "'":
            self._lex_quoted("'", TokenKind.CHAR_LITERAL, start)
            return

        if is_digit(ch) or (ch == "." and is_digit(nxt)):
            self._lex_number(start)
            return

        for op in SORTED_OPERATORS:
            if self._source.startswith(op, self._pos):
                self._advance_n(len(op))
                self._emit(OPERATORS[op], start)
                return

        if ch in BRACKETS:
            self._advance()
            self._emit(BRACKETS[ch], start)
            return

        if ch in SEPARATORS:
            self._advance()
            self._emit(SEPARATORS[ch], start)
            return

        if is_ident_start(ch):
            self._lex_identifier(start)
            return

        if ch == " ":
            while self._peek() == " ":
                self._advance()
            self._emit(TokenKind.SPACE, start)
            return

        if ch == "\t":
            self._advance()
            self._emit(TokenKind.TAB, start)
            return

        if ch == "\n":
            self._advance()
            self._emit(TokenKind.NEWLINE, start)
            return

        self._advance()
        self._emit(TokenKind.UNRECOGNIZED, start)

    # ------------------------------------------------------------------
    # Comments and directives
    # ------------------------------------------------------------------

    def _lex_line_comment(self, start: Position) -> None:
        while not self._at_end() and self._peek() != "\n":
            self._advance()
        self._emit(TokenKind.COMMENT, start)

    def _lex_block_comment(self, start: Position) -> None:
        self._advance_n(2)  # /*
        while not self._at_end():
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance_n(2)
                break
            self._advance()
        self._emit(TokenKind.COMMENT, start)

    def _lex_directive(self, start: Position) -> None:
        """Consume a preprocessor line, following backslash-newline continuations."""
        while not self._at_end() and self._peek() != "\n":
            if self._peek() == "\\" and self._peek(1) == "\n":
                self._advance_n(2)
                continue
            self._advance()
        self._emit(TokenKind.DIRECTIVE, start)

    # ------------------------------------------------------------------
    # Literals
    # ------------------------------------------------------------------

    def _lex_quoted(self, quote: str, kind: TokenKind, start: Position) -> None:
        self._advance()  # opening quote
        while not self._at_end():
            ch = self._peek()
            if ch == "\\":
                self._advance()
                if not self._at_end():
                    self._advance()  # escaped character, whatever it is
                continue
            self._advance()
            if ch == quote:
                break
        self._emit(kind, start)

    def _lex_number(self, start: Position) -> None:
        if self._peek() == "0" and self._peek(1) in ("x", "X"):
            self._advance_n(2)
            while is_hex_digit(self._peek()):
                self._advance()
        else:
            while is_digit(self._peek()):
                self._advance()
            if self._peek() == "." and is_digit(self._peek(1)):
                self._advance()
                while is_digit(self._peek()):
                    self._advance()

        # Suffix (u, l, f, ...) is taken as-is; validating it is the checker's job
        while self._peek() != "" and self._peek().isascii() and self._peek().isalpha():
            self._advance()
        self._emit(TokenKind.NUMBER, start)

    def _lex_identifier(self, start: Position) -> None:
        while is_ident_char(self._peek()):
            self._advance()
        word = self._source[start.offset : self._pos]
        self._emit(KEYWORDS.get(word, TokenKind.IDENTIFIER), start)


def tokenize(source: str) -> list[Token]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source).tokenize()
