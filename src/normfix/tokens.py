"""Token kinds, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenKind(Enum):
    # Literals and names
    IDENTIFIER = auto()
    NUMBER = auto()  # 42, 0x2A, 1.5f, 10UL
    STRING = auto()  # "..." including quotes and escapes
    CHAR_LITERAL = auto()  # '...' including quotes and escapes

    # Keywords
    AUTO = auto()
    BOOL = auto()  # _Bool
    BREAK = auto()
    CASE = auto()
    CHAR = auto()
    CONST = auto()
    CONTINUE = auto()
    DEFAULT = auto()
    DO = auto()
    DOUBLE = auto()
    ELSE = auto()
    ENUM = auto()
    EXTERN = auto()
    FLOAT = auto()
    FOR = auto()
    GOTO = auto()
    IF = auto()
    INLINE = auto()
    INT = auto()
    LONG = auto()
    REGISTER = auto()
    RESTRICT = auto()
    RETURN = auto()
    SHORT = auto()
    SIGNED = auto()
    SIZEOF = auto()
    STATIC = auto()
    STRUCT = auto()
    SWITCH = auto()
    TYPEDEF = auto()
    UNION = auto()
    UNSIGNED = auto()
    VOID = auto()
    VOLATILE = auto()
    WHILE = auto()

    # Operators
    RIGHT_ASSIGN = auto()  # >>=
    LEFT_ASSIGN = auto()  # <<=
    ELLIPSIS = auto()  # ...
    ADD_ASSIGN = auto()  # +=
    SUB_ASSIGN = auto()  # -=
    MUL_ASSIGN = auto()  # *=
    DIV_ASSIGN = auto()  # /=
    MOD_ASSIGN = auto()  # %=
    AND_ASSIGN = auto()  # &=
    XOR_ASSIGN = auto()  # ^=
    OR_ASSIGN = auto()  # |=
    LESS_OR_EQUAL = auto()  # <=
    GREATER_OR_EQUAL = auto()  # >=
    EQUALS = auto()  # ==
    NOT_EQUAL = auto()  # !=
    INC = auto()  # ++
    DEC = auto()  # --
    PTR = auto()  # ->
    AND = auto()  # &&
    OR = auto()  # ||
    RIGHT_SHIFT = auto()  # >>
    LEFT_SHIFT = auto()  # <<
    ASSIGN = auto()  # =
    LESS_THAN = auto()  # <
    MORE_THAN = auto()  # >
    PLUS = auto()  # +
    MINUS = auto()  # -
    MULT = auto()  # *
    DIV = auto()  # /
    MODULO = auto()  # %
    BWISE_AND = auto()  # &
    BWISE_OR = auto()  # |
    BWISE_XOR = auto()  # ^
    BWISE_NOT = auto()  # ~
    NOT = auto()  # !
    TERN_CONDITION = auto()  # ?
    COLON = auto()  # :

    # Brackets
    LPARENTHESIS = auto()
    RPARENTHESIS = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()

    # Separators
    SEMI_COLON = auto()
    COMMA = auto()
    DOT = auto()

    # Opaque runs
    DIRECTIVE = auto()  # whole preprocessor line, without the newline
    COMMENT = auto()  # // ... or /* ... */ including delimiters

    # Whitespace
    SPACE = auto()  # one or more spaces
    TAB = auto()  # exactly one tab
    NEWLINE = auto()  # \n

    UNRECOGNIZED = auto()  # single character nothing else claimed
    EOF = auto()


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token carrying its exact source text."""

    kind: TokenKind
    position: Position
    text: str

    @property
    def line(self) -> int:
        return self.position.line

    @property
    def column(self) -> int:
        return self.position.column

    @property
    def length(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return f"<{self.kind.name}={self.text!r}>" if self.text else f"<{self.kind.name}>"


KEYWORDS: dict[str, TokenKind] = {
    "auto": TokenKind.AUTO,
    "_Bool": TokenKind.BOOL,
    "break": TokenKind.BREAK,
    "case": TokenKind.CASE,
    "char": TokenKind.CHAR,
    "const": TokenKind.CONST,
    "continue": TokenKind.CONTINUE,
    "default": TokenKind.DEFAULT,
    "do": TokenKind.DO,
    "double": TokenKind.DOUBLE,
    "else": TokenKind.ELSE,
    "enum": TokenKind.ENUM,
    "extern": TokenKind.EXTERN,
    "float": TokenKind.FLOAT,
    "for": TokenKind.FOR,
    "goto": TokenKind.GOTO,
    "if": TokenKind.IF,
    "inline": TokenKind.INLINE,
    "int": TokenKind.INT,
    "long": TokenKind.LONG,
    "register": TokenKind.REGISTER,
    "restrict": TokenKind.RESTRICT,
    "return": TokenKind.RETURN,
    "short": TokenKind.SHORT,
    "signed": TokenKind.SIGNED,
    "sizeof": TokenKind.SIZEOF,
    "static": TokenKind.STATIC,
    "struct": TokenKind.STRUCT,
    "switch": TokenKind.SWITCH,
    "typedef": TokenKind.TYPEDEF,
    "union": TokenKind.UNION,
    "unsigned": TokenKind.UNSIGNED,
    "void": TokenKind.VOID,
    "volatile": TokenKind.VOLATILE,
    "while": TokenKind.WHILE,
}

OPERATORS: dict[str, TokenKind] = {
    ">>=": TokenKind.RIGHT_ASSIGN,
    "<<=": TokenKind.LEFT_ASSIGN,
    "...": TokenKind.ELLIPSIS,
    "+=": TokenKind.ADD_ASSIGN,
    "-=": TokenKind.SUB_ASSIGN,
    "*=": TokenKind.MUL_ASSIGN,
    "/=": TokenKind.DIV_ASSIGN,
    "%=": TokenKind.MOD_ASSIGN,
    "&=": TokenKind.AND_ASSIGN,
    "^=": TokenKind.XOR_ASSIGN,
    "|=": TokenKind.OR_ASSIGN,
    "<=": TokenKind.LESS_OR_EQUAL,
    ">=": TokenKind.GREATER_OR_EQUAL,
    "==": TokenKind.EQUALS,
    "!=": TokenKind.NOT_EQUAL,
    "++": TokenKind.INC,
    "--": TokenKind.DEC,
    "->": TokenKind.PTR,
    "&&": TokenKind.AND,
    "||": TokenKind.OR,
    ">>": TokenKind.RIGHT_SHIFT,
    "<<": TokenKind.LEFT_SHIFT,
    "=": TokenKind.ASSIGN,
    "<": TokenKind.LESS_THAN,
    ">": TokenKind.MORE_THAN,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.MULT,
    "/": TokenKind.DIV,
    "%": TokenKind.MODULO,
    "&": TokenKind.BWISE_AND,
    "|": TokenKind.BWISE_OR,
    "^": TokenKind.BWISE_XOR,
    "~": TokenKind.BWISE_NOT,
    "!": TokenKind.NOT,
    "?": TokenKind.TERN_CONDITION,
    ":": TokenKind.COLON,
}

# Longest lexemes first so ">>=" wins over ">>" and ">"
SORTED_OPERATORS: tuple[str, ...] = tuple(sorted(OPERATORS, key=len, reverse=True))

BRACKETS: dict[str, TokenKind] = {
    "(": TokenKind.LPARENTHESIS,
    ")": TokenKind.RPARENTHESIS,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
}

SEPARATORS: dict[str, TokenKind] = {
    ";": TokenKind.SEMI_COLON,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
}

KEYWORD_KINDS = frozenset(KEYWORDS.values())
OPERATOR_KINDS = frozenset(OPERATORS.values())
BRACKET_KINDS = frozenset(BRACKETS.values())
SEPARATOR_KINDS = frozenset(SEPARATORS.values())

# Checker columns advance a tab to the next multiple of this width
TAB_WIDTH = 4

WHITESPACE_KINDS = frozenset({TokenKind.SPACE, TokenKind.TAB})

# Keywords that can start or continue a declaration's type
TYPE_KINDS = frozenset(
    {
        TokenKind.BOOL,
        TokenKind.CHAR,
        TokenKind.CONST,
        TokenKind.DOUBLE,
        TokenKind.ENUM,
        TokenKind.EXTERN,
        TokenKind.FLOAT,
        TokenKind.INLINE,
        TokenKind.INT,
        TokenKind.LONG,
        TokenKind.REGISTER,
        TokenKind.RESTRICT,
        TokenKind.SHORT,
        TokenKind.SIGNED,
        TokenKind.STATIC,
        TokenKind.STRUCT,
        TokenKind.UNION,
        TokenKind.UNSIGNED,
        TokenKind.VOID,
        TokenKind.VOLATILE,
    }
)

_NON_CONTENT = frozenset(
    {TokenKind.SPACE, TokenKind.TAB, TokenKind.NEWLINE, TokenKind.COMMENT, TokenKind.EOF}
)


def is_whitespace(tok: Token) -> bool:
    """Return True for SPACE and TAB tokens (not NEWLINE)."""
    return tok.kind in WHITESPACE_KINDS


def is_type_like(tok: Token) -> bool:
    """Return True if tok can be the last word of a type: a type keyword or a typedef name."""
    return tok.kind in TYPE_KINDS or tok.kind == TokenKind.IDENTIFIER


def is_content(tok: Token) -> bool:
    """Return True for tokens that carry program meaning (not whitespace or comments)."""
    return tok.kind not in _NON_CONTENT


def is_ident_start(ch: str) -> bool:
    """Return True if ch can start a C identifier."""
    return ch == "_" or (ch.isascii() and ch.isalpha())


def is_ident_char(ch: str) -> bool:
    """Return True if ch can continue a C identifier."""
    return ch == "_" or (ch.isascii() and ch.isalnum())


def is_digit(ch: str) -> bool:
    return ch != "" and ch in "0123456789"


def is_hex_digit(ch: str) -> bool:
    """Return True if ch is a hexadecimal digit."""
    return ch != "" and ch in "0123456789abcdefABCDEF"
