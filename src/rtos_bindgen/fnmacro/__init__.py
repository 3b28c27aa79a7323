"""
FreeRTOS Function-like Macro Transpiler
=======================================

This module translates the function-like macros published in the FreeRTOS
kernel headers into Rust, for splicing into generated bindings.

- A lexer for the C subset used in macro bodies
- A recursive descent parser producing an AST
- A usage classifier deciding, per parameter, whether the macro needs a
  syntactic capture
- A code generator emitting a Rust pattern macro or typed function

Pipeline
--------
    #define -> Scanner -> Lexer -> Parser -> Classifier -> Generator -> Rust

Usage
-----
>>> from rtos_bindgen.fnmacro import translate_macro
>>> print(translate_macro("STRINGIFY(x)", "#x"))
macro_rules! STRINGIFY {
  ($x:ident) => {
    ::core::stringify!($x)
  };
}

Supported Subset
----------------
- Arithmetic, shift, relational, equality, ternary and assignment operators
- Casts to named and pointer types, address-of, field access
- Stringification, token pasting, inline assembly
- Blocks, if/else, do/while, declarations

Not supported (UnsupportedConstructError):
- Bitwise and logical &, |, ^, &&, ||, and the remainder operator %
- Array subscripts, unions
"""

from rtos_bindgen.fnmacro.ast import ASTPrinter, MacroBody, MacroSignature
from rtos_bindgen.fnmacro.codegen import RustCodeGenerator
from rtos_bindgen.fnmacro.context import ArgKind, FnMacro, classify
from rtos_bindgen.fnmacro.errors import (
    MacroError,
    MacroBatchError,
    MacroLexicalError,
    MacroSyntaxError,
    UnsupportedConstructError,
    MacroErrorCollector,
)
from rtos_bindgen.fnmacro.headers import MacroDefinition, scan_function_macros
from rtos_bindgen.fnmacro.overrides import return_type, should_skip, variable_type
from rtos_bindgen.fnmacro.parser import parse_body, parse_signature
from rtos_bindgen.fnmacro.transpiler import (
    MacroTranspiler,
    TranslationResult,
    TranspilerOptions,
    translate_header,
    translate_macro,
)

__all__ = [
    # Main interface
    "MacroTranspiler",
    "TranspilerOptions",
    "TranslationResult",
    "translate_macro",
    "translate_header",
    # Stages
    "MacroDefinition",
    "scan_function_macros",
    "parse_signature",
    "parse_body",
    "classify",
    "RustCodeGenerator",
    "ASTPrinter",
    # Data
    "MacroSignature",
    "MacroBody",
    "FnMacro",
    "ArgKind",
    # Side tables
    "variable_type",
    "return_type",
    "should_skip",
    # Errors
    "MacroError",
    "MacroBatchError",
    "MacroLexicalError",
    "MacroSyntaxError",
    "UnsupportedConstructError",
    "MacroErrorCollector",
]
