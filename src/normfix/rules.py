"""Token repair rules.

A rule is plain data: the checker codes it answers, a priority, and two pure
functions over the token stream. ``match`` says whether the reported line
still holds the violation; ``rewrite`` returns a new stream with only the
whitespace of that line changed. Once a pattern is fixed ``match`` is false,
so running the rules again is a no-op.

Most rules look at a *gap*: a run of SPACE/TAB tokens (possibly empty)
between two non-whitespace anchor tokens on the same line.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from normfix.diagnostics import Code, Diagnostic
from normfix.tokens import (
    TAB_WIDTH,
    TYPE_KINDS,
    Position,
    Token,
    TokenKind,
    is_type_like,
    is_whitespace,
)

RuleMatch = Callable[[Sequence[Token], Diagnostic], bool]
RuleRewrite = Callable[[Sequence[Token], Diagnostic], list[Token]]


@dataclass(frozen=True, slots=True)
class Rule:
    """A stateless repair bound to one or more checker codes."""

    name: str
    codes: frozenset[str]
    priority: int
    match: RuleMatch
    rewrite: RuleRewrite

    def claims(self, diag: Diagnostic) -> bool:
        return diag.code in self.codes


@dataclass(frozen=True, slots=True)
class Gap:
    """Whitespace tokens ``[start, right)`` between anchors ``left`` and ``right``."""

    left: int
    start: int
    right: int

    @property
    def empty(self) -> bool:
        return self.start == self.right


# ----------------------------------------------------------------------
# Stream helpers
# ----------------------------------------------------------------------


def line_range(tokens: Sequence[Token], line: int) -> range:
    """Return the index range of tokens that start on *line*."""
    lo = -1
    hi = -1
    for i, tok in enumerate(tokens):
        if tok.line == line:
            if lo < 0:
                lo = i
            hi = i + 1
        elif tok.line > line:
            break
    if lo < 0:
        return range(0)
    return range(lo, hi)


def visual_columns(tokens: Sequence[Token], rng: range) -> dict[int, int]:
    """Map token indices in *rng* to checker columns (tabs advance to the next stop)."""
    cols: dict[int, int] = {}
    if not rng:
        return cols
    col = tokens[rng.start].column
    for i in rng:
        cols[i] = col
        tok = tokens[i]
        if tok.kind == TokenKind.TAB:
            col = ((col - 1) // TAB_WIDTH + 1) * TAB_WIDTH + 1
        else:
            col += tok.length
    return cols


def splice(
    tokens: Sequence[Token],
    start: int,
    end: int,
    parts: Sequence[tuple[TokenKind, str]],
) -> list[Token]:
    """Replace ``tokens[start:end]`` with new single-line tokens built from *parts*.

    Positions of the inserted tokens continue from the first replaced token
    (or from ``tokens[start]`` when nothing is replaced). Later tokens have
    their offsets, and on the same line their columns, shifted so the stream
    stays consistent with its own text.
    """
    origin = tokens[start].position
    line, col, offset = origin.line, origin.column, origin.offset

    inserted: list[Token] = []
    for kind, text in parts:
        inserted.append(Token(kind, Position(line, col, offset), text))
        col += len(text)
        offset += len(text)

    delta = sum(len(text) for _, text in parts) - sum(t.length for t in tokens[start:end])
    tail = list(tokens[end:])
    if delta:
        tail = [_shift(tok, delta, line) for tok in tail]
    return [*tokens[:start], *inserted, *tail]


def _shift(tok: Token, delta: int, line: int) -> Token:
    pos = tok.position
    column = pos.column + delta if pos.line == line else pos.column
    return Token(tok.kind, Position(pos.line, column, pos.offset + delta), tok.text)


def _next_solid(tokens: Sequence[Token], i: int) -> int:
    j = i + 1
    while j < len(tokens) - 1 and is_whitespace(tokens[j]):
        j += 1
    return min(j, len(tokens) - 1)


def _prev_solid(tokens: Sequence[Token], i: int) -> int:
    j = i - 1
    while j >= 0 and is_whitespace(tokens[j]):
        j -= 1
    return j


def _gaps(tokens: Sequence[Token], rng: range) -> Iterator[Gap]:
    solid = [i for i in rng if not is_whitespace(tokens[i])]
    for left, right in zip(solid, solid[1:]):
        yield Gap(left, left + 1, right)


def _pick(
    tokens: Sequence[Token],
    diag: Diagnostic,
    accepts: Callable[[Sequence[Token], Gap], bool],
) -> Gap | None:
    """Find the accepted gap on the diagnostic's line.

    A gap whose span covers the reported column wins; otherwise the first
    accepted gap on the line is used.
    """
    rng = line_range(tokens, diag.line)
    cols = visual_columns(tokens, rng)
    first: Gap | None = None
    for gap in _gaps(tokens, rng):
        if not accepts(tokens, gap):
            continue
        if first is None:
            first = gap
        lo = cols[gap.left]
        hi = cols[gap.right] + tokens[gap.right].length
        if lo <= diag.column <= hi:
            return gap
    return first


# ----------------------------------------------------------------------
# Gap predicates
# ----------------------------------------------------------------------

_TAGS = frozenset({TokenKind.STRUCT, TokenKind.ENUM, TokenKind.UNION})
_VAR_FOLLOW = frozenset({TokenKind.SEMI_COLON, TokenKind.LBRACKET, TokenKind.ASSIGN})
_LINE_END = frozenset({TokenKind.NEWLINE, TokenKind.EOF})
# Tokens after which a run of type words begins a declaration
_STATEMENT_START = frozenset(
    {TokenKind.NEWLINE, TokenKind.RBRACE, TokenKind.COMMENT, TokenKind.DIRECTIVE}
)


def _ws(tokens: Sequence[Token], gap: Gap) -> Sequence[Token]:
    return tokens[gap.start : gap.right]


def _has_space(tokens: Sequence[Token], gap: Gap) -> bool:
    return any(t.kind == TokenKind.SPACE for t in _ws(tokens, gap))


def _has_tab(tokens: Sequence[Token], gap: Gap) -> bool:
    return any(t.kind == TokenKind.TAB for t in _ws(tokens, gap))


def _is_type_anchor(tok: Token) -> bool:
    return is_type_like(tok) and tok.kind not in _TAGS


def _enclosing_paren(tokens: Sequence[Token], i: int) -> int:
    """Index of the unclosed ``(`` before *i*, or -1 outside any parentheses."""
    depth = 0
    for j in range(i - 1, -1, -1):
        kind = tokens[j].kind
        if kind == TokenKind.RPARENTHESIS:
            depth += 1
        elif kind == TokenKind.LPARENTHESIS:
            if depth == 0:
                return j
            depth -= 1
        elif kind in (TokenKind.LBRACE, TokenKind.RBRACE) and depth == 0:
            return -1
    return -1


def _is_parameter_list(tokens: Sequence[Token], paren: int) -> bool:
    """True for the ``(`` of a function declarator, not of a call or condition.

    ``int f(`` and ``int (`` open declarators; ``f(`` on its own, or after
    ``=`` or ``return``, is a call.
    """
    name = _prev_solid(tokens, paren)
    if name < 0 or not is_type_like(tokens[name]):
        return False
    if tokens[name].kind != TokenKind.IDENTIFIER:
        return _starts_declaration(tokens, name)
    before = _prev_solid(tokens, name)
    if before < 0:
        return False
    if not (is_type_like(tokens[before]) or tokens[before].kind == TokenKind.MULT):
        return False
    return _starts_declaration(tokens, before)


def _starts_declaration(tokens: Sequence[Token], i: int) -> bool:
    """True when the run of type words and ``*`` ending at *i* begins a declaration.

    A run holding a type keyword always does. A run of bare identifiers only
    does at the start of a statement or parameter, so ``total = count * size``
    is an expression.
    """
    j = i
    keyword = False
    while j >= 0 and (is_type_like(tokens[j]) or tokens[j].kind == TokenKind.MULT):
        keyword = keyword or tokens[j].kind in TYPE_KINDS
        j = _prev_solid(tokens, j)
    if keyword or j < 0:
        return True

    before = tokens[j].kind
    if before in _STATEMENT_START:
        return True
    if before == TokenKind.SEMI_COLON:
        # for (...; a * b; ...)
        return _enclosing_paren(tokens, j) < 0
    if before == TokenKind.LBRACE:
        prev = _prev_solid(tokens, j)
        return prev < 0 or tokens[prev].kind != TokenKind.ASSIGN
    if before == TokenKind.LPARENTHESIS:
        return _is_parameter_list(tokens, j)
    if before == TokenKind.COMMA:
        paren = _enclosing_paren(tokens, j)
        return paren < 0 or _is_parameter_list(tokens, paren)
    return False


def _declaration_anchor(tokens: Sequence[Token], i: int) -> bool:
    return _is_type_anchor(tokens[i]) and _starts_declaration(tokens, i)


def _declarator_follow(tokens: Sequence[Token], i: int) -> TokenKind | None:
    """Skip ``*`` tokens from *i*, expect a name, and return the kind after it."""
    j = i
    while tokens[j].kind == TokenKind.MULT:
        j = _next_solid(tokens, j)
    if tokens[j].kind != TokenKind.IDENTIFIER:
        return None
    return tokens[_next_solid(tokens, j)].kind


def _is_declaration_gap(tokens: Sequence[Token], gap: Gap) -> bool:
    """True where the style wants a tab: between a type and the declared name."""
    left = tokens[gap.left]
    right = tokens[gap.right]

    # } t_name;  closing a typedef'd struct
    if left.kind == TokenKind.RBRACE:
        return right.kind == TokenKind.IDENTIFIER and (
            _declarator_follow(tokens, gap.right) == TokenKind.SEMI_COLON
        )

    if not _declaration_anchor(tokens, gap.left):
        return False

    # int (*handler)(int);
    if right.kind == TokenKind.LPARENTHESIS:
        return tokens[_next_solid(tokens, gap.right)].kind == TokenKind.MULT

    follow = _declarator_follow(tokens, gap.right)
    return follow in _VAR_FOLLOW or follow == TokenKind.LPARENTHESIS


def _space_replace_tab(tokens: Sequence[Token], gap: Gap) -> bool:
    return _has_space(tokens, gap) and _is_declaration_gap(tokens, gap)


def _function_name_gap(tokens: Sequence[Token], gap: Gap) -> bool:
    return (
        _has_space(tokens, gap)
        and _declaration_anchor(tokens, gap.left)
        and _declarator_follow(tokens, gap.right) == TokenKind.LPARENTHESIS
    )


def _variable_name_gap(tokens: Sequence[Token], gap: Gap) -> bool:
    return (
        _has_space(tokens, gap)
        and _declaration_anchor(tokens, gap.left)
        and _declarator_follow(tokens, gap.right) in _VAR_FOLLOW
    )


def _tab_instead_space(tokens: Sequence[Token], gap: Gap) -> bool:
    return (
        _has_tab(tokens, gap)
        and tokens[gap.right].kind not in _LINE_END
        and not _is_declaration_gap(tokens, gap)
    )


def _space_after_pointer(tokens: Sequence[Token], gap: Gap) -> bool:
    if gap.empty or tokens[gap.left].kind != TokenKind.MULT:
        return False
    if tokens[gap.right].kind not in (
        TokenKind.IDENTIFIER,
        TokenKind.MULT,
        TokenKind.LPARENTHESIS,
    ):
        return False
    return _starts_declaration(tokens, gap.left)


def _space_before_pointer(tokens: Sequence[Token], gap: Gap) -> bool:
    if tokens[gap.right].kind != TokenKind.MULT or not is_type_like(tokens[gap.left]):
        return False
    if not _starts_declaration(tokens, gap.left):
        return False
    ws = _ws(tokens, gap)
    if not ws:
        return True
    # A lone tab is the declaration alignment; only missing or padded spacing is wrong
    return all(t.kind == TokenKind.SPACE for t in ws) and sum(t.length for t in ws) > 1


def _consecutive_space(tokens: Sequence[Token], gap: Gap) -> bool:
    if tokens[gap.right].kind in _LINE_END:
        return False
    ws = _ws(tokens, gap)
    return _has_space(tokens, gap) and sum(t.length for t in ws) > 1


# ----------------------------------------------------------------------
# Replacements
# ----------------------------------------------------------------------

Fill = Callable[[Sequence[Token]], list[tuple[TokenKind, str]]]


def _one_tab(_ws: Sequence[Token]) -> list[tuple[TokenKind, str]]:
    return [(TokenKind.TAB, "\t")]


def _one_space(_ws: Sequence[Token]) -> list[tuple[TokenKind, str]]:
    return [(TokenKind.SPACE, " ")]


def _nothing(_ws: Sequence[Token]) -> list[tuple[TokenKind, str]]:
    return []


def _collapse(ws: Sequence[Token]) -> list[tuple[TokenKind, str]]:
    if any(t.kind == TokenKind.TAB for t in ws):
        return [(TokenKind.TAB, "\t")]
    return [(TokenKind.SPACE, " ")]


# ----------------------------------------------------------------------
# Rule construction
# ----------------------------------------------------------------------


def gap_rule(
    name: str,
    codes: Sequence[str],
    priority: int,
    accepts: Callable[[Sequence[Token], Gap], bool],
    fill: Fill,
) -> Rule:
    """Build a rule that rewrites the whitespace of one accepted gap."""

    def match(tokens: Sequence[Token], diag: Diagnostic) -> bool:
        return _pick(tokens, diag, accepts) is not None

    def rewrite(tokens: Sequence[Token], diag: Diagnostic) -> list[Token]:
        gap = _pick(tokens, diag, accepts)
        if gap is None:
            return list(tokens)
        return splice(tokens, gap.start, gap.right, fill(_ws(tokens, gap)))

    return Rule(name, frozenset(codes), priority, match, rewrite)


def _trailing_run(tokens: Sequence[Token], line: int) -> tuple[int, int] | None:
    """Return the whitespace run just before the end of *line*, if any."""
    rng = line_range(tokens, line)
    end = next((i for i in rng if tokens[i].kind in _LINE_END), None)
    if end is None:
        return None
    if end - 1 in rng and tokens[end - 1].text == "\r":
        end -= 1
    start = end
    while start - 1 in rng and is_whitespace(tokens[start - 1]):
        start -= 1
    if start == end:
        return None
    return start, end


def _trailing_match(tokens: Sequence[Token], diag: Diagnostic) -> bool:
    return _trailing_run(tokens, diag.line) is not None


def _trailing_rewrite(tokens: Sequence[Token], diag: Diagnostic) -> list[Token]:
    run = _trailing_run(tokens, diag.line)
    if run is None:
        return list(tokens)
    return splice(tokens, run[0], run[1], [])


trailing_whitespace_rule = Rule(
    "trailing_whitespace",
    frozenset({Code.SPC_BEFORE_NL, Code.SPACE_EMPTY_LINE}),
    10,
    _trailing_match,
    _trailing_rewrite,
)

space_replace_tab_rule = gap_rule(
    "space_replace_tab", [Code.SPACE_REPLACE_TAB], 20, _space_replace_tab, _one_tab
)
space_before_func_rule = gap_rule(
    "space_before_func", [Code.SPACE_BEFORE_FUNC], 20, _function_name_gap, _one_tab
)
missing_tab_func_rule = gap_rule(
    "missing_tab_func", [Code.MISSING_TAB_FUNC], 20, _function_name_gap, _one_tab
)
missing_tab_var_rule = gap_rule(
    "missing_tab_var", [Code.MISSING_TAB_VAR], 20, _variable_name_gap, _one_tab
)
spc_after_pointer_rule = gap_rule(
    "spc_after_pointer", [Code.SPC_AFTER_POINTER], 30, _space_after_pointer, _nothing
)
spc_bfr_pointer_rule = gap_rule(
    "spc_bfr_pointer", [Code.SPC_BFR_POINTER], 30, _space_before_pointer, _one_space
)
consecutive_space_rule = gap_rule(
    "consecutive_space", [Code.CONSECUTIVE_SPC], 40, _consecutive_space, _collapse
)
tab_instead_space_rule = gap_rule(
    "tab_instead_space", [Code.TAB_INSTEAD_SPC], 40, _tab_instead_space, _one_space
)

DEFAULT_RULES: tuple[Rule, ...] = (
    trailing_whitespace_rule,
    space_replace_tab_rule,
    space_before_func_rule,
    missing_tab_func_rule,
    missing_tab_var_rule,
    spc_after_pointer_rule,
    spc_bfr_pointer_rule,
    consecutive_space_rule,
    tab_instead_space_rule,
)
