"""Rule engine: apply repair rules to a token stream and rebuild the text."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from normfix.diagnostics import Diagnostic
from normfix.lexer import tokenize
from normfix.rules import DEFAULT_RULES, Rule, line_range
from normfix.tokens import Token, TokenKind


class TokenFormatter:
    """Ordered set of rules applied to the diagnostics of one file."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: list[Rule] = []
        for rule in rules:
            self.add_rule(rule)

    def add_rule(self, rule: Rule) -> None:
        """Register *rule*; equal priorities keep registration order."""
        self._rules.append(rule)
        self._rules.sort(key=lambda r: r.priority)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    def rule_names(self) -> list[str]:
        return [rule.name for rule in self._rules]

    def rules_for(self, code: str) -> list[Rule]:
        """Return the rules bound to *code*, in application order."""
        return [rule for rule in self._rules if code in rule.codes]

    def format_tokens(
        self, tokens: Sequence[Token], diagnostics: Sequence[Diagnostic]
    ) -> tuple[list[Token], list[str]]:
        """Run every rule over every diagnostic it claims.

        Each rule fires at most once per diagnostic; later rules see the
        stream as rewritten by earlier ones. Returns the new stream and a
        description of each rewrite that happened.
        """
        current = list(tokens)
        applied: list[str] = []
        for rule in self._rules:
            for diag in diagnostics:
                if rule.claims(diag) and rule.match(current, diag):
                    current = rule.rewrite(current, diag)
                    applied.append(f"{rule.name} (line {diag.line})")
        return current, applied

    def format(self, source: str, diagnostics: Sequence[Diagnostic]) -> str:
        """Tokenize *source*, apply the rules, and return the repaired text."""
        tokens, _ = self.format_tokens(tokenize(source), diagnostics)
        return reconstruct(tokens)


def default_formatter() -> TokenFormatter:
    """Return a formatter loaded with the built-in rule set."""
    return TokenFormatter(DEFAULT_RULES)


def reconstruct(tokens: Iterable[Token]) -> str:
    """Join token text back into source, stopping at EOF."""
    parts: list[str] = []
    for tok in tokens:
        if tok.kind == TokenKind.EOF:
            break
        parts.append(tok.text)
    return "".join(parts)


def line_tokens(tokens: Sequence[Token], line: int) -> list[Token]:
    """Return the tokens that start on *line*."""
    return [tokens[i] for i in line_range(tokens, line)]


def token_at(tokens: Sequence[Token], line: int, column: int) -> Token | None:
    """Return the token covering character *column* on *line*, if any."""
    for tok in line_tokens(tokens, line):
        if tok.column <= column < tok.column + tok.length:
            return tok
    return None
