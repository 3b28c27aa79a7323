"""
rtos-bindgen - FreeRTOS Binding Generation Tools
================================================

Build-time helpers for generating the Rust bindings of the FreeRTOS
kernel.

Main Components
---------------
- **fnmacro**: function-like macro transpiler (rtos-macrogen translate)
    Converts the kernel's function-like macros into Rust pattern macros
    or typed inline functions

- **constants**: constants shim header (rtos-macrogen constants)
    Rewrites object-like kernel macros as typed C constants so the binding
    generator emits them with the right Rust type

Quick Start
-----------
Translate one macro:
    >>> from rtos_bindgen import translate_macro
    >>> print(translate_macro("MAX(a, b)", "((a) > (b) ? (a) : (b))"))

Translate a header:
    >>> from rtos_bindgen import translate_header
    >>> result = translate_header(open("queue.h").read(), "queue.h")
    >>> print(result.output)

Or use the command-line tool:
    $ rtos-macrogen translate FreeRTOS.h task.h queue.h -o macros.rs
    $ rtos-macrogen constants -o constants.h
"""

__version__ = "0.1.0"

# =============================================================================
# Public API Exports
# =============================================================================

from rtos_bindgen.errors import BindgenError, SourceLocation
from rtos_bindgen.constants import (
    KERNEL_CONSTANTS,
    write_constants_header,
)
from rtos_bindgen.fnmacro import (
    MacroTranspiler,
    TranspilerOptions,
    TranslationResult,
    translate_macro,
    translate_header,
    MacroError,
    MacroBatchError,
    MacroLexicalError,
    MacroSyntaxError,
    UnsupportedConstructError,
)

__all__ = [
    "__version__",
    # Errors
    "BindgenError",
    "SourceLocation",
    "MacroError",
    "MacroBatchError",
    "MacroLexicalError",
    "MacroSyntaxError",
    "UnsupportedConstructError",
    # Transpiler
    "MacroTranspiler",
    "TranspilerOptions",
    "TranslationResult",
    "translate_macro",
    "translate_header",
    # Constants
    "KERNEL_CONSTANTS",
    "write_constants_header",
]
