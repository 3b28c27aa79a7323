"""
rtos-bindgen Error Hierarchy
============================

This module defines the root of the exception hierarchy for the binding
generator. All exceptions raised by the package inherit from BindgenError,
allowing build scripts to catch every generator failure with a single
except clause.

Exception Hierarchy
-------------------
BindgenError (base)
└── MacroError (function-like macro transpiler, see fnmacro.errors)
    ├── MacroLexicalError - byte sequence the tokenizer cannot recognize
    ├── MacroSyntaxError - token stream matches no grammar production
    ├── UnsupportedConstructError - well-formed C the transpiler does not model
    └── MacroBatchError - aggregate report for a batch of macros

Error messages follow this format:
    <macro NAME>:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class BindgenError(Exception):
    """
    Base exception for all rtos-bindgen errors.

    Build scripts can catch every generator failure with:

        try:
            result = translate_header(text, "queue.h")
        except BindgenError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source text for error reporting.

    For macro translation the filename is a pseudo name of the form
    "<macro NAME>", so a diagnostic always names the macro it came from.

    Attributes:
        filename: Name of the source (header path or "<macro NAME>")
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int = 1

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
