"""Tests for the lossless C lexer."""

from __future__ import annotations

import random

import pytest

from normfix.formatter import reconstruct
from normfix.lexer import tokenize
from normfix.tokens import TokenKind


class TestBasicKinds:
    def test_declaration(self, kinds):
        assert kinds("int x;") == [
            TokenKind.INT,
            TokenKind.SPACE,
            TokenKind.IDENTIFIER,
            TokenKind.SEMI_COLON,
        ]

    def test_keywords_and_identifiers(self, lex):
        tokens = lex("return ft_strlen")
        assert tokens[0].kind == TokenKind.RETURN
        assert tokens[2].kind == TokenKind.IDENTIFIER
        assert tokens[2].text == "ft_strlen"

    def test_bool_keyword(self, kinds):
        assert kinds("_Bool") == [TokenKind.BOOL]

    def test_keyword_prefix_is_identifier(self, lex):
        tokens = lex("integer")
        assert tokens[0].kind == TokenKind.IDENTIFIER

    def test_brackets_and_separators(self, kinds):
        assert kinds("f(a[0], b.c);") == [
            TokenKind.IDENTIFIER,
            TokenKind.LPARENTHESIS,
            TokenKind.IDENTIFIER,
            TokenKind.LBRACKET,
            TokenKind.NUMBER,
            TokenKind.RBRACKET,
            TokenKind.COMMA,
            TokenKind.SPACE,
            TokenKind.IDENTIFIER,
            TokenKind.DOT,
            TokenKind.IDENTIFIER,
            TokenKind.RPARENTHESIS,
            TokenKind.SEMI_COLON,
        ]

    def test_unrecognized_character(self, lex):
        tokens = lex("a @ b")
        assert tokens[2].kind == TokenKind.UNRECOGNIZED
        assert tokens[2].text == "@"


class TestWhitespace:
    def test_space_run_is_one_token(self, lex):
        tokens = lex("a    b")
        assert tokens[1].kind == TokenKind.SPACE
        assert tokens[1].text == "    "

    def test_each_tab_is_its_own_token(self, kinds):
        assert kinds("\t\tx") == [TokenKind.TAB, TokenKind.TAB, TokenKind.IDENTIFIER]

    def test_newline(self, kinds):
        assert kinds("a\nb") == [TokenKind.IDENTIFIER, TokenKind.NEWLINE, TokenKind.IDENTIFIER]

    def test_carriage_return_is_unrecognized(self, lex):
        tokens = lex("a\r\nb")
        assert tokens[1].kind == TokenKind.UNRECOGNIZED
        assert tokens[1].text == "\r"
        assert tokens[2].kind == TokenKind.NEWLINE


class TestOperators:
    @pytest.mark.parametrize(
        "source,kind",
        [
            (">>=", TokenKind.RIGHT_ASSIGN),
            ("<<=", TokenKind.LEFT_ASSIGN),
            ("...", TokenKind.ELLIPSIS),
            ("->", TokenKind.PTR),
            ("++", TokenKind.INC),
            ("==", TokenKind.EQUALS),
            ("*", TokenKind.MULT),
            ("?", TokenKind.TERN_CONDITION),
        ],
    )
    def test_single_operator(self, kinds, source, kind):
        assert kinds(source) == [kind]

    def test_longest_match(self, kinds):
        assert kinds("a>>=b") == [
            TokenKind.IDENTIFIER,
            TokenKind.RIGHT_ASSIGN,
            TokenKind.IDENTIFIER,
        ]

    def test_shift_then_assign_split(self, kinds):
        assert kinds(">> =") == [TokenKind.RIGHT_SHIFT, TokenKind.SPACE, TokenKind.ASSIGN]

    def test_pointer_star(self, kinds):
        assert kinds("char *p") == [
            TokenKind.CHAR,
            TokenKind.SPACE,
            TokenKind.MULT,
            TokenKind.IDENTIFIER,
        ]


class TestNumbers:
    @pytest.mark.parametrize("source", ["42", "0x2A", "0XffUL", "1.5f", "10UL", ".5f", "3.14"])
    def test_number_is_one_token(self, lex, source):
        tokens = lex(source)
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.NUMBER
        assert tokens[0].text == source

    def test_member_access_dot_is_separator(self, kinds):
        assert kinds("s.x") == [TokenKind.IDENTIFIER, TokenKind.DOT, TokenKind.IDENTIFIER]


class TestOpaqueRuns:
    def test_line_comment(self, lex):
        tokens = lex("x; // note  here\ny")
        comment = tokens[2]
        assert comment.kind == TokenKind.COMMENT
        assert comment.text == "// note  here"
        assert tokens[3].kind == TokenKind.NEWLINE

    def test_block_comment_spans_lines(self, lex):
        tokens = lex("/* a\n   b */x")
        assert tokens[0].kind == TokenKind.COMMENT
        assert tokens[0].text == "/* a\n   b */"
        assert tokens[1].line == 2

    def test_directive_whole_line(self, lex):
        tokens = lex("#include <stdio.h>\nint")
        assert tokens[0].kind == TokenKind.DIRECTIVE
        assert tokens[0].text == "#include <stdio.h>"
        assert tokens[1].kind == TokenKind.NEWLINE

    def test_directive_continuation(self, lex):
        tokens = lex("#define X \\\n  1\nint")
        assert tokens[0].kind == TokenKind.DIRECTIVE
        assert tokens[0].text == "#define X \\\n  1"
        assert tokens[2].line == 3

    def test_string_with_escapes(self, lex):
        tokens = lex('"a \\"b\\"  c"')
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.STRING

    def test_char_literal_escaped_quote(self, lex):
        tokens = lex("'\\''")
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.CHAR_LITERAL


class TestUnterminated:
    def test_unterminated_string_runs_to_end(self, lex):
        tokens = lex('"abc')
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.STRING

    def test_unterminated_block_comment(self, lex):
        tokens = lex("/* never closed")
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.COMMENT

    def test_trailing_backslash_in_string(self, lex):
        tokens = lex('"abc\\')
        assert tokens[0].text == '"abc\\'


class TestPositions:
    def test_line_and_column(self, lex):
        tokens = lex("int\tx;\n  y")
        y = tokens[-1]
        assert (y.line, y.column) == (2, 3)

    def test_offsets_index_the_source(self):
        source = "a = b;\nc"
        for tok in tokenize(source):
            assert source[tok.position.offset : tok.position.offset + tok.length] == tok.text

    def test_eof_position(self):
        tokens = tokenize("ab\n")
        eof = tokens[-1]
        assert eof.kind == TokenKind.EOF
        assert (eof.line, eof.column, eof.position.offset) == (2, 1, 3)

    def test_single_eof(self):
        tokens = tokenize("")
        assert [t.kind for t in tokens] == [TokenKind.EOF]


class TestRoundTrip:
    @pytest.mark.parametrize(
        "source",
        [
            "",
            "int\tmain(void)\n{\n\treturn (0);\n}\n",
            "char  *  p ;  \r\n",
            '#define S(x) #x\nconst char *s = "a\\tb";  // x\n',
            "/* unterminated",
            "x = 'a' + .5f @ `y`\n\n\n",
        ],
    )
    def test_reconstruct_is_identity(self, source):
        assert reconstruct(tokenize(source)) == source


# Fragments that stress the lexer's boundaries when glued together at random
_PIECES = [
    "int", "x", "_a1", "0x1F", ".5", "42u", " ", "  ", "\t", "\n", "\r\n", "\r",
    ";", ",", "(", ")", "{", "}", "[", "]", "*", "->", ">>=", "=", "+", "/",
    "/*", "*/", "//", "#", "#define", "\\", "\\\n", '"', "'", '\\"',
    "é", "€", "日本", "@", "`", "$",
]


def _generated(seed: int) -> str:
    rng = random.Random(seed)
    return "".join(rng.choice(_PIECES) for _ in range(rng.randint(0, 80)))


class TestGeneratedRoundTrip:
    @pytest.mark.parametrize("seed", range(60))
    def test_reconstruct_is_identity(self, seed):
        source = _generated(seed)
        assert reconstruct(tokenize(source)) == source

    @pytest.mark.parametrize("seed", range(60))
    def test_offsets_are_contiguous(self, seed):
        offset = 0
        for tok in tokenize(_generated(seed)):
            assert tok.position.offset == offset
            offset += tok.length
