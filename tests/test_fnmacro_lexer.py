# =============================================================================
# test_fnmacro_lexer.py - Macro Lexer and Literal Unit Tests
# =============================================================================
# Tests for the function-like macro tokenizer and numeric literal parser.
#
# Test coverage includes:
#   - Identifiers, keywords and the __asm spelling
#   - Longest-match punctuators (..., ##, ->, <<=)
#   - Preprocessing numbers, strings and character literals kept verbatim
#   - Whitespace, continuations and comments
#   - Integer suffix permutations and pasted suffixes
#   - Lexical errors
# =============================================================================

import pytest

from rtos_bindgen.fnmacro.lexer import MacroLexer, MacroTokenType, tokenize
from rtos_bindgen.fnmacro.literals import (
    IntegerSize,
    merge_suffix,
    parse_number,
    parse_suffix,
)
from rtos_bindgen.fnmacro.errors import (
    InvalidCharacterError,
    MacroLexicalError,
    UnterminatedCommentError,
    UnterminatedStringError,
)

TT = MacroTokenType


# =============================================================================
# Helper Functions
# =============================================================================

def token_types(source: str) -> list:
    """Token types without the trailing EOF."""
    return [t.type for t in tokenize(source, "<test>")][:-1]


def token_values(source: str) -> list:
    """Token values without the trailing EOF."""
    return [t.value for t in tokenize(source, "<test>")][:-1]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition."""

    def test_empty_input(self):
        """Empty text yields only EOF."""
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TT.EOF

    def test_identifier(self):
        """Identifiers keep their exact spelling."""
        assert token_values("xQueueSend") == ["xQueueSend"]
        assert token_types("xQueueSend") == [TT.IDENTIFIER]

    def test_keywords(self):
        """C keywords get their own token types."""
        assert token_types("const struct union static volatile if else do while") == [
            TT.CONST, TT.STRUCT, TT.UNION, TT.STATIC, TT.VOLATILE,
            TT.IF, TT.ELSE, TT.DO, TT.WHILE,
        ]

    def test_asm_is_identifier(self):
        """__asm is an ordinary identifier; the parser recognizes it."""
        assert token_types("__asm __asm__") == [TT.IDENTIFIER, TT.IDENTIFIER]

    def test_eof_position(self):
        """EOF is placed after the last token."""
        tokens = tokenize("ab")
        assert tokens[-1].type == TT.EOF
        assert tokens[-1].column == 3
        assert tokens[-1].text == "end of macro"


class TestPunctuators:
    """Test multi-character punctuators are matched greedily."""

    def test_ellipsis(self):
        assert token_types("...") == [TT.ELLIPSIS]

    def test_token_paste(self):
        """## is one token, # alone is stringify."""
        assert token_types("a ## b") == [TT.IDENTIFIER, TT.HASH_HASH, TT.IDENTIFIER]
        assert token_types("#x") == [TT.HASH, TT.IDENTIFIER]

    def test_arrow(self):
        assert token_types("p->f") == [TT.IDENTIFIER, TT.ARROW, TT.IDENTIFIER]

    def test_shift_assign(self):
        assert token_types("<<= >>= << >>") == [
            TT.LSHIFT_ASSIGN, TT.RSHIFT_ASSIGN, TT.LSHIFT, TT.RSHIFT,
        ]

    def test_increment_versus_plus(self):
        """+++ is ++ followed by +."""
        assert token_types("a+++b") == [TT.IDENTIFIER, TT.INCREMENT, TT.PLUS, TT.IDENTIFIER]

    def test_unsupported_operators_are_tokens(self):
        """Operators without a grammar production still tokenize."""
        assert token_types("& | ^ && || %") == [
            TT.AMPERSAND, TT.PIPE, TT.CARET, TT.AND, TT.OR, TT.PERCENT,
        ]

    def test_compound_assignment(self):
        assert token_types("+= -= *= /= %= &= |= ^=") == [
            TT.PLUS_ASSIGN, TT.MINUS_ASSIGN, TT.STAR_ASSIGN, TT.SLASH_ASSIGN,
            TT.PERCENT_ASSIGN, TT.AND_ASSIGN, TT.OR_ASSIGN, TT.XOR_ASSIGN,
        ]


class TestLiteralTokens:
    """Test numbers, strings and characters are kept verbatim."""

    def test_number_keeps_suffix(self):
        assert token_values("100u 0x1FUL 1.5f") == ["100u", "0x1FUL", "1.5f"]
        assert token_types("100u") == [TT.NUMBER]

    def test_signed_exponent(self):
        assert token_values("1e-3 + 2.5E+2f") == ["1e-3", "+", "2.5E+2f"]

    def test_hex_digit_e_before_minus(self):
        """E is a hex digit in 0x1E, so - is a separate operator."""
        assert token_values("0x1E-1") == ["0x1E", "-", "1"]

    def test_leading_dot_number(self):
        assert token_types(".5") == [TT.NUMBER]

    def test_string_verbatim(self):
        """Escapes are not interpreted."""
        assert token_values(r'"a\"b\n"') == [r'"a\"b\n"']

    def test_char_literal(self):
        assert token_types("'a'") == [TT.CHAR_LITERAL]
        assert token_values(r"'\0'") == [r"'\0'"]


class TestWhitespaceAndComments:
    """Test skipped text."""

    def test_block_comment(self):
        assert token_values("a /* comment */ b") == ["a", "b"]

    def test_line_comment(self):
        assert token_values("a // trailing\nb") == ["a", "b"]

    def test_line_continuation(self):
        """Backslash-newline is whitespace."""
        assert token_values("a \\\n b") == ["a", "b"]

    def test_crlf_continuation(self):
        assert token_values("a \\\r\n b") == ["a", "b"]

    def test_positions_across_lines(self):
        """Line and column are tracked over newlines."""
        tokens = tokenize("a\n  b")
        assert (tokens[1].line, tokens[1].column) == (2, 3)


class TestLexicalErrors:
    """Test error conditions; there is no recovery."""

    def test_invalid_character(self):
        with pytest.raises(InvalidCharacterError) as exc_info:
            tokenize("a @ b", "<macro M>")
        assert exc_info.value.location.column == 3
        assert "<macro M>:1:3" in str(exc_info.value)

    def test_backtick_is_invalid(self):
        with pytest.raises(MacroLexicalError):
            tokenize("`")

    def test_unterminated_string(self):
        with pytest.raises(UnterminatedStringError):
            tokenize('"abc')

    def test_unterminated_char(self):
        with pytest.raises(UnterminatedStringError) as exc_info:
            tokenize("'a")
        assert "character" in exc_info.value.message

    def test_unterminated_comment(self):
        with pytest.raises(UnterminatedCommentError):
            tokenize("a /* never closed")

    def test_lexer_is_lazy(self):
        """Tokens before the bad character are produced first."""
        tokens = MacroLexer("a $").tokenize()
        assert next(tokens).value == "a"
        with pytest.raises(InvalidCharacterError):
            next(tokens)


# =============================================================================
# Numeric Literal Tests
# =============================================================================

class TestIntegerSuffixes:
    """Test suffix permutations."""

    @pytest.mark.parametrize("suffix,expected", [
        ("", (False, None)),
        ("u", (True, None)),
        ("U", (True, None)),
        ("l", (False, IntegerSize.LONG)),
        ("ul", (True, IntegerSize.LONG)),
        ("LU", (True, IntegerSize.LONG)),
        ("ull", (True, IntegerSize.LONG_LONG)),
        ("LLU", (True, IntegerSize.LONG_LONG)),
        ("z", (False, IntegerSize.SIZE)),
        ("uz", (True, IntegerSize.SIZE)),
    ])
    def test_valid_suffix(self, suffix, expected):
        assert parse_suffix(suffix) == expected

    @pytest.mark.parametrize("suffix", ["uu", "lL", "lul", "x", "f"])
    def test_invalid_suffix(self, suffix):
        assert parse_suffix(suffix) is None

    def test_merge_pasted_unsigned(self):
        """1 ## U adds the unsigned marker."""
        assert merge_suffix(False, None, "U") == (True, None)

    def test_merge_pasted_size_after_unsigned(self):
        """1u ## LL adds the size marker."""
        assert merge_suffix(True, None, "LL") == (True, IntegerSize.LONG_LONG)

    def test_merge_rejects_duplicate_marker(self):
        assert merge_suffix(True, None, "u") is None
        assert merge_suffix(False, IntegerSize.LONG, "l") is None

    def test_merge_rejects_non_suffix(self):
        assert merge_suffix(False, None, "abc") is None
        assert merge_suffix(False, None, "") is None


class TestParseNumber:
    """Test literal recognition and rendered text."""

    def test_decimal_suffix_dropped(self):
        value = parse_number("100u")
        assert value.text == "100"
        assert value.is_unsigned
        assert value.size is None
        assert not value.is_float

    def test_hex(self):
        value = parse_number("0x7FUL")
        assert value.text == "0x7F"
        assert value.is_unsigned
        assert value.size == IntegerSize.LONG

    def test_octal(self):
        assert parse_number("0177").text == "0o177"

    def test_binary(self):
        assert parse_number("0b1010").text == "0b1010"

    def test_zero(self):
        assert parse_number("0").text == "0"

    @pytest.mark.parametrize("text,rendered", [
        ("1.5", "1.5"),
        ("1.5f", "1.5"),
        ("1f", "1.0"),
        ("1.", "1.0"),
        (".5", "0.5"),
        ("1e3", "1e3"),
        ("1e-3", "1e-3"),
        ("2.5E+2f", "2.5E+2"),
    ])
    def test_float(self, text, rendered):
        value = parse_number(text)
        assert value.is_float
        assert value.text == rendered

    @pytest.mark.parametrize("text", ["09", "0x", "1uu", "12abc"])
    def test_invalid(self, text):
        assert parse_number(text) is None
