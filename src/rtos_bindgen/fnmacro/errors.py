"""
Function-Like Macro Transpiler Errors
=====================================

Every failure while translating a macro is fatal for that macro: the
transpiler never emits partial output. The taxonomy has three sibling
branches so callers can tell apart text the tokenizer could not read,
token streams that match no production, and well-formed C that is simply
outside the modelled subset.

Exception Hierarchy
-------------------
MacroError (base, inherits BindgenError)
├── MacroLexicalError - tokenizer failures
│   ├── InvalidCharacterError - unrecognized character
│   ├── UnterminatedStringError - missing closing quote
│   └── UnterminatedCommentError - missing closing */
├── MacroSyntaxError - parser failures
│   ├── UnexpectedTokenError - token does not start any expected production
│   └── MissingTokenError - required punctuation is absent
├── UnsupportedConstructError - bitwise/logical operators, arrays, unions...
└── MacroBatchError - aggregate report of a batch translation

Parser backtracking only ever catches MacroSyntaxError. The other branches
always propagate straight to the caller.
"""

from typing import List, Optional

from rtos_bindgen.errors import BindgenError, SourceLocation


# =============================================================================
# Base Macro Exception
# =============================================================================

class MacroError(BindgenError):
    """
    Base exception for all macro translation errors.

    Attributes:
        message: The error description
        location: Where in the macro text the error occurred
        hint: A suggestion for fixing the error
        source_line: The macro text line at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            <macro MAX>:1:14: error: unsupported construct: operator '&'
                ((a) & (b))
                     ^
            hint: add MAX to the denylist
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class MacroBatchError(MacroError):
    """
    Aggregate error for a batch of macros.

    The message is an already formatted report from MacroErrorCollector
    and is passed through unchanged.

    Attributes:
        macro_names: Names of the macros that failed, in source order
    """

    def __init__(self, message: str, macro_names: Optional[List[str]] = None):
        self.macro_names = list(macro_names or [])
        super().__init__(message)

    def _format_message(self) -> str:
        return self.message


# =============================================================================
# Lexical Errors
# =============================================================================

class MacroLexicalError(MacroError):
    """Raised when macro text contains a character sequence that is not a token."""
    pass


class InvalidCharacterError(MacroLexicalError):
    """Unrecognized character in a macro signature or body."""

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


class UnterminatedStringError(MacroLexicalError):
    """String or character literal not closed before the end of the text."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        quote: str = '"',
    ):
        super().__init__(
            "unterminated string literal" if quote == '"' else "unterminated character literal",
            location=location,
            hint=f"add closing '{quote}' to complete the literal",
            source_line=source_line,
        )


class UnterminatedCommentError(MacroLexicalError):
    """Block comment without a closing */."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "unterminated multi-line comment",
            location=location,
            hint="add closing */ to terminate the comment",
            source_line=source_line,
        )


# =============================================================================
# Syntax Errors
# =============================================================================

class MacroSyntaxError(MacroError):
    """
    The token stream does not match the grammar.

    Raised for signatures, types, expressions and statements alike.
    Examples:
        - Missing closing parenthesis
        - Declaration without an initializer
        - Trailing tokens after a complete body
    """
    pass


class UnexpectedTokenError(MacroSyntaxError):
    """A token that cannot start or continue the production being parsed."""

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(MacroSyntaxError):
    """A required token (like ';' or ')') is not where it should be."""

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected {expected}",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Unsupported Constructs
# =============================================================================

class UnsupportedConstructError(MacroError):
    """
    Grammatically valid C that the transpiler does not model.

    The bitwise and logical operators (&, |, ^, &&, ||), the remainder
    operator, array subscripts and unions have no production. A macro that
    uses them must be excluded by name instead of being mistranslated.
    """

    def __init__(
        self,
        construct: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.construct = construct
        super().__init__(
            f"unsupported construct: {construct}",
            location=location,
            hint="exclude this macro with the name denylist",
            source_line=source_line,
        )


# =============================================================================
# Error Collection
# =============================================================================

class MacroErrorCollector:
    """
    Collects per-macro failures while translating a whole header.

    Example:
        collector = MacroErrorCollector(max_errors=100)

        for definition in definitions:
            try:
                translate(definition)
            except MacroError as e:
                collector.add(e)
                if collector.should_stop():
                    break

        collector.raise_if_errors()
    """

    def __init__(self, max_errors: int = 100):
        self.errors: List[MacroError] = []
        self.warnings: List[str] = []
        self.max_errors = max_errors

    def add(self, error: MacroError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add a warning message."""
        if location:
            self.warnings.append(f"{location}: warning: {message}")
        else:
            self.warnings.append(f"warning: {message}")

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def should_stop(self) -> bool:
        """Return True if max_errors has been reached."""
        return len(self.errors) >= self.max_errors

    def error_count(self) -> int:
        return len(self.errors)

    def warning_count(self) -> int:
        return len(self.warnings)

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        for warning in self.warnings:
            lines.append(warning)

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        self.errors.clear()
        self.warnings.clear()

    def raise_if_errors(self, macro_names: Optional[List[str]] = None) -> None:
        """Raise a MacroBatchError naming macro_names if any errors were collected."""
        if self.has_errors():
            raise MacroBatchError(self.report(), macro_names)
