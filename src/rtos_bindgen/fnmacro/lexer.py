"""
Macro Lexer (Tokenizer)
=======================

This module converts the raw text of a function-like macro signature or
body into a list of tokens for the parser.

Unlike a compiler front end, the macro lexer keeps every token as the
exact slice of source text it was read from: numbers keep their suffix
letters, strings keep their quotes and escape sequences. Interpretation is
left to the literal parser, and the code generator reproduces string and
character literals verbatim.

Token Categories
----------------
- Keywords: const, struct, union, static, volatile, if, else, do, while
- Identifiers: [A-Za-z_][A-Za-z0-9_]* (including __asm and NULL)
- Numbers: a preprocessing number, digit first, e.g. 100u, 0x1FUL, 1.5f
- Strings: "double quoted" (kept verbatim)
- Characters: 'c' (kept verbatim)
- Punctuators: ... ## -> and the C operator set, longest match first

Whitespace, backslash-newline continuations, /* block */ and // line
comments are skipped.

Example Usage
-------------
>>> from rtos_bindgen.fnmacro.lexer import MacroLexer
>>> for token in MacroLexer("a ## b", "<macro CAT>").tokenize():
...     print(token)
Token(IDENTIFIER, 'a', 1:1)
Token(HASH_HASH, '##', 1:3)
Token(IDENTIFIER, 'b', 1:6)
Token(EOF, 1:7)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from rtos_bindgen.errors import SourceLocation
from rtos_bindgen.fnmacro.errors import (
    InvalidCharacterError,
    UnterminatedCommentError,
    UnterminatedStringError,
)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class MacroTokenType(Enum):
    """
    Token types for macro signatures and bodies.

    Operators the grammar does not model (& | ^ && || %) still get their
    own token types so the parser can report them as unsupported rather
    than as an unknown character.
    """

    # === Structural Tokens ===
    EOF = auto()

    # === Identifiers and Literals ===
    IDENTIFIER = auto()
    NUMBER = auto()         # preprocessing number, suffix included
    STRING = auto()         # "..." including quotes
    CHAR_LITERAL = auto()   # '...' including quotes

    # === Keywords ===
    CONST = auto()
    STRUCT = auto()
    UNION = auto()
    STATIC = auto()
    VOLATILE = auto()
    IF = auto()
    ELSE = auto()
    DO = auto()
    WHILE = auto()

    # === Preprocessor Operators ===
    HASH = auto()           # #
    HASH_HASH = auto()      # ##
    ELLIPSIS = auto()       # ...

    # === Arithmetic Operators ===
    PLUS = auto()           # +
    MINUS = auto()          # -
    STAR = auto()           # *
    SLASH = auto()          # /
    PERCENT = auto()        # %

    # === Increment/Decrement ===
    INCREMENT = auto()      # ++
    DECREMENT = auto()      # --

    # === Comparison Operators ===
    EQ = auto()             # ==
    NE = auto()             # !=
    LT = auto()             # <
    GT = auto()             # >
    LE = auto()             # <=
    GE = auto()             # >=

    # === Logical and Bitwise Operators ===
    AND = auto()            # &&
    OR = auto()             # ||
    NOT = auto()            # !
    AMPERSAND = auto()      # &
    PIPE = auto()           # |
    CARET = auto()          # ^
    TILDE = auto()          # ~
    LSHIFT = auto()         # <<
    RSHIFT = auto()         # >>

    # === Assignment Operators ===
    ASSIGN = auto()         # =
    PLUS_ASSIGN = auto()    # +=
    MINUS_ASSIGN = auto()   # -=
    STAR_ASSIGN = auto()    # *=
    SLASH_ASSIGN = auto()   # /=
    PERCENT_ASSIGN = auto() # %=
    AND_ASSIGN = auto()     # &=
    OR_ASSIGN = auto()      # |=
    XOR_ASSIGN = auto()     # ^=
    LSHIFT_ASSIGN = auto()  # <<=
    RSHIFT_ASSIGN = auto()  # >>=

    # === Delimiters ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACE = auto()         # {
    RBRACE = auto()         # }
    LBRACKET = auto()       # [
    RBRACKET = auto()       # ]
    SEMICOLON = auto()      # ;
    COMMA = auto()          # ,
    COLON = auto()          # :
    QUESTION = auto()       # ?
    DOT = auto()            # .
    ARROW = auto()          # ->


KEYWORDS: dict[str, MacroTokenType] = {
    "const": MacroTokenType.CONST,
    "struct": MacroTokenType.STRUCT,
    "union": MacroTokenType.UNION,
    "static": MacroTokenType.STATIC,
    "volatile": MacroTokenType.VOLATILE,
    "if": MacroTokenType.IF,
    "else": MacroTokenType.ELSE,
    "do": MacroTokenType.DO,
    "while": MacroTokenType.WHILE,
}


# Punctuators ordered longest first; the first prefix that matches wins.
PUNCTUATORS: list[tuple[str, MacroTokenType]] = [
    ("...", MacroTokenType.ELLIPSIS),
    ("<<=", MacroTokenType.LSHIFT_ASSIGN),
    (">>=", MacroTokenType.RSHIFT_ASSIGN),
    ("##", MacroTokenType.HASH_HASH),
    ("->", MacroTokenType.ARROW),
    ("++", MacroTokenType.INCREMENT),
    ("--", MacroTokenType.DECREMENT),
    ("<<", MacroTokenType.LSHIFT),
    (">>", MacroTokenType.RSHIFT),
    ("<=", MacroTokenType.LE),
    (">=", MacroTokenType.GE),
    ("==", MacroTokenType.EQ),
    ("!=", MacroTokenType.NE),
    ("&&", MacroTokenType.AND),
    ("||", MacroTokenType.OR),
    ("+=", MacroTokenType.PLUS_ASSIGN),
    ("-=", MacroTokenType.MINUS_ASSIGN),
    ("*=", MacroTokenType.STAR_ASSIGN),
    ("/=", MacroTokenType.SLASH_ASSIGN),
    ("%=", MacroTokenType.PERCENT_ASSIGN),
    ("&=", MacroTokenType.AND_ASSIGN),
    ("|=", MacroTokenType.OR_ASSIGN),
    ("^=", MacroTokenType.XOR_ASSIGN),
    ("(", MacroTokenType.LPAREN),
    (")", MacroTokenType.RPAREN),
    ("{", MacroTokenType.LBRACE),
    ("}", MacroTokenType.RBRACE),
    ("[", MacroTokenType.LBRACKET),
    ("]", MacroTokenType.RBRACKET),
    (";", MacroTokenType.SEMICOLON),
    (",", MacroTokenType.COMMA),
    (":", MacroTokenType.COLON),
    ("?", MacroTokenType.QUESTION),
    (".", MacroTokenType.DOT),
    ("+", MacroTokenType.PLUS),
    ("-", MacroTokenType.MINUS),
    ("*", MacroTokenType.STAR),
    ("/", MacroTokenType.SLASH),
    ("%", MacroTokenType.PERCENT),
    ("&", MacroTokenType.AMPERSAND),
    ("|", MacroTokenType.PIPE),
    ("^", MacroTokenType.CARET),
    ("~", MacroTokenType.TILDE),
    ("!", MacroTokenType.NOT),
    ("=", MacroTokenType.ASSIGN),
    ("<", MacroTokenType.LT),
    (">", MacroTokenType.GT),
    ("#", MacroTokenType.HASH),
]


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class MacroToken:
    """
    A single token of macro text.

    Attributes:
        type: The MacroTokenType classification
        value: The exact source text of the token (None for EOF)
        line: Line number in the macro text (1-indexed)
        column: Column number (1-indexed)
        filename: Pseudo filename, normally "<macro NAME>"
    """
    type: MacroTokenType
    value: Optional[str]
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def text(self) -> str:
        """Token text for diagnostics ('end of macro' for EOF)."""
        return self.value if self.value is not None else "end of macro"


# =============================================================================
# Lexer Implementation
# =============================================================================

class MacroLexer:
    """
    Tokenizes the text of a macro signature or body.

    Usage:
        lexer = MacroLexer(body_text, "<macro xQueueSend>")
        tokens = list(lexer.tokenize())

    The token list always ends with a single EOF token. Any character
    that does not start a token raises InvalidCharacterError; there is no
    recovery.
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    # Characters that may continue a preprocessing number
    NUMBER_CHARS = string.ascii_letters + string.digits + "_."

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        line_number: int = 1,
    ):
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = line_number
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[MacroToken]:
        """
        Generate tokens from the macro text.

        Raises:
            MacroLexicalError: If a character cannot start any token
        """
        while not self._at_end():
            self._skip_whitespace_and_comments()

            if self._at_end():
                break

            yield self._scan_token()

        yield MacroToken(MacroTokenType.EOF, None, self._line, self._column, self.filename)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Character at current position + offset, or '' past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume one character, keeping line and column up to date."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _make_token(
        self,
        token_type: MacroTokenType,
        start_pos: int,
        start_line: int,
        start_column: int,
    ) -> MacroToken:
        """Create a token whose value is the source slice start_pos..current."""
        return MacroToken(
            type=token_type,
            value=self.source[start_pos:self._pos],
            line=start_line,
            column=start_column,
            filename=self.filename,
        )

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> None:
        """Skip whitespace, line continuations and comments."""
        while not self._at_end():
            char = self._peek()

            if char in " \t\n\r\f\v":
                self._advance()
                continue

            # Line continuation: backslash followed by a newline
            if char == "\\" and self._peek(1) == "\n":
                self._advance()
                self._advance()
                continue
            if char == "\\" and self._peek(1) == "\r" and self._peek(2) == "\n":
                self._advance()
                self._advance()
                self._advance()
                continue

            if char == "/" and self._peek(1) == "/":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
                continue

            if char == "/" and self._peek(1) == "*":
                self._skip_block_comment()
                continue

            break

    def _skip_block_comment(self) -> None:
        start_location = SourceLocation(self.filename, self._line, self._column)
        source_line = self._get_current_line()

        self._advance()
        self._advance()

        while not self._at_end():
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                return
            self._advance()

        raise UnterminatedCommentError(start_location, source_line)

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> MacroToken:
        start_pos = self._pos
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char in self.IDENT_START:
            return self._scan_identifier(start_pos, start_line, start_column)

        if char.isdigit():
            return self._scan_number(start_pos, start_line, start_column)

        # A leading dot followed by a digit is a number (.5f)
        if char == "." and self._peek(1).isdigit():
            return self._scan_number(start_pos, start_line, start_column)

        if char == '"':
            return self._scan_quoted('"', MacroTokenType.STRING, start_pos, start_line, start_column)

        if char == "'":
            return self._scan_quoted("'", MacroTokenType.CHAR_LITERAL, start_pos, start_line, start_column)

        return self._scan_punctuator(start_pos, start_line, start_column)

    def _scan_identifier(self, start_pos: int, start_line: int, start_column: int) -> MacroToken:
        while self._peek() and self._peek() in self.IDENT_CHARS:
            self._advance()

        name = self.source[start_pos:self._pos]
        token_type = KEYWORDS.get(name, MacroTokenType.IDENTIFIER)
        return self._make_token(token_type, start_pos, start_line, start_column)

    def _scan_number(self, start_pos: int, start_line: int, start_column: int) -> MacroToken:
        """
        Scan a preprocessing number.

        The whole run of digits, letters, underscores and dots is taken as
        one token (0x1FUL, 1.5f, 100u), as is the sign of a decimal
        exponent (1e-3). Whether it is a well-formed literal is decided by
        the literal parser.
        """
        is_hex = self.source[start_pos:start_pos + 2] in ("0x", "0X")

        while self._peek() and self._peek() in self.NUMBER_CHARS:
            char = self._advance()
            if char in "eE" and not is_hex and self._peek() in ("+", "-"):
                self._advance()
        return self._make_token(MacroTokenType.NUMBER, start_pos, start_line, start_column)

    def _scan_quoted(
        self,
        quote: str,
        token_type: MacroTokenType,
        start_pos: int,
        start_line: int,
        start_column: int,
    ) -> MacroToken:
        """Scan a string or character literal, keeping escapes as written."""
        location = SourceLocation(self.filename, start_line, start_column)
        source_line = self._get_current_line()

        self._advance()  # opening quote

        while not self._at_end():
            char = self._peek()

            if char == quote:
                self._advance()
                return self._make_token(token_type, start_pos, start_line, start_column)

            if char == "\n":
                break

            if char == "\\":
                self._advance()
            self._advance()

        raise UnterminatedStringError(location, source_line, quote=quote)

    def _scan_punctuator(self, start_pos: int, start_line: int, start_column: int) -> MacroToken:
        for text, token_type in PUNCTUATORS:
            if self.source.startswith(text, self._pos):
                for _ in text:
                    self._advance()
                return self._make_token(token_type, start_pos, start_line, start_column)

        raise InvalidCharacterError(
            self._peek(),
            SourceLocation(self.filename, start_line, start_column),
            self._get_current_line(),
        )

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _get_current_line(self) -> str:
        """Get the current line of macro text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]


def tokenize(source: str, filename: str = "<input>") -> list[MacroToken]:
    """Tokenize macro text into a list ending with EOF."""
    return list(MacroLexer(source, filename).tokenize())
