"""
Function-like Macro Transpiler
==============================

This module provides the main interface for translating FreeRTOS
function-like macros into Rust. It orchestrates the complete pipeline
for one macro:

    Signature/Body text -> Lex -> Parse -> Classify -> Generate -> Rust

Usage
-----
Programmatic:
    >>> from rtos_bindgen.fnmacro import translate_macro
    >>> print(translate_macro("MAX(a, b)", "((a) > (b) ? (a) : (b))"))
    macro_rules! MAX {
      ($a:expr, $b:expr) => {
        if ($a > $b) { $a } else { $b }
      };
    }

Whole headers:
    >>> result = translate_header(text, "queue.h")
    >>> bindings.write(result.output)

Error Handling
--------------
Translating one macro is fail-fast: the first lexical, syntax or
unsupported-construct error abandons that macro. A batch collects every
failure and raises one MacroBatchError at the end, or with keep_going
logs each failure as a warning and leaves the macro out of the output.
"""

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Iterable, Optional, Union
import logging

from rtos_bindgen.fnmacro.ast import MacroBody, MacroSignature
from rtos_bindgen.fnmacro.codegen import (
    ReturnTypeLookup,
    RustCodeGenerator,
    VariableTypeLookup,
)
from rtos_bindgen.fnmacro.context import FnMacro, classify
from rtos_bindgen.fnmacro.errors import MacroError, MacroErrorCollector
from rtos_bindgen.fnmacro.headers import MacroDefinition, scan_function_macros
from rtos_bindgen.fnmacro.lexer import MacroLexer, MacroToken
from rtos_bindgen.fnmacro.overrides import (
    return_type as default_return_type,
    should_skip,
    variable_type as default_variable_type,
)
from rtos_bindgen.fnmacro.parser import MacroParser

logger = logging.getLogger(__name__)


@dataclass
class TranspilerOptions:
    """
    Transpiler configuration options.

    Attributes:
        apply_denylist: Skip macros matched by the built-in name denylist
        skip_names: Extra shell-style patterns of macro names to skip
        keep_going: Log failing macros as warnings and continue instead of
                    raising at the end of a batch
        max_errors: Stop a batch after this many failures
    """
    apply_denylist: bool = True
    skip_names: list[str] = field(default_factory=list)
    keep_going: bool = False
    max_errors: int = 100

    def __post_init__(self):
        if self.max_errors < 1:
            raise ValueError(f"max_errors must be at least 1, got {self.max_errors}")


@dataclass
class TranslationResult:
    """
    Result of translating a batch of macros.

    Attributes:
        output: Generated Rust items separated by blank lines
        translated: Names of translated macros, in input order
        skipped: Names left out by the denylist or skip patterns
        failed: Names that failed to translate
        warnings: Formatted warning messages
    """
    output: str = ""
    translated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class MacroTranspiler:
    """
    Function-like macro to Rust transpiler.

    Example:
        transpiler = MacroTranspiler()
        text = transpiler.translate("xQueueSend(xQueue, pvItemToQueue, xTicksToWait)",
                                    ["xQueueGenericSend( ( xQueue ), ... )"])

    Attributes:
        options: Transpiler configuration
    """

    def __init__(
        self,
        options: Optional[TranspilerOptions] = None,
        variable_type: VariableTypeLookup = default_variable_type,
        return_type: ReturnTypeLookup = default_return_type,
    ):
        self.options = options or TranspilerOptions()
        self._generator = RustCodeGenerator(variable_type, return_type)

    # =========================================================================
    # Single Macro
    # =========================================================================

    def analyze(self, signature_text: str, body_lines: Union[str, list[str]]) -> FnMacro:
        """
        Parse and classify one macro without generating code.

        Raises:
            MacroError: If the macro cannot be parsed
        """
        if isinstance(body_lines, str):
            body_lines = body_lines.splitlines()

        filename = f"<macro {_macro_name(signature_text)}>"
        signature = self._parse_signature(signature_text, filename)

        body_text = "\n".join(body_lines)
        tokens = self._lex(body_text, filename)
        body = self._parse_body(tokens, filename, list(body_lines), signature.parameters)

        return self._classify(signature, body)

    def translate(self, signature_text: str, body_lines: Union[str, list[str]]) -> str:
        """
        Translate one macro to Rust.

        Args:
            signature_text: NAME(params)
            body_lines: Body text, as one string or a list of lines

        Returns:
            The generated Rust item

        Raises:
            MacroError: If the macro cannot be translated
        """
        return self._generate(self.analyze(signature_text, body_lines))

    # =========================================================================
    # Pipeline Stages
    # =========================================================================

    def _lex(self, text: str, filename: str) -> list[MacroToken]:
        return list(MacroLexer(text, filename).tokenize())

    def _parse_signature(self, text: str, filename: str) -> MacroSignature:
        tokens = self._lex(text, filename)
        return MacroParser(tokens, filename, text.splitlines()).parse_signature()

    def _parse_body(
        self,
        tokens: list[MacroToken],
        filename: str,
        source_lines: list[str],
        parameters: list[str],
    ) -> MacroBody:
        parser = MacroParser(tokens, filename, source_lines, parameters)
        return parser.parse_body()

    def _classify(self, signature: MacroSignature, body: MacroBody) -> FnMacro:
        return classify(signature, body)

    def _generate(self, fn_macro: FnMacro) -> str:
        return self._generator.generate(fn_macro)

    # =========================================================================
    # Batches
    # =========================================================================

    def is_skipped(self, name: str) -> bool:
        """True if the options exclude a macro by name."""
        if any(fnmatchcase(name, pattern) for pattern in self.options.skip_names):
            return True
        return self.options.apply_denylist and should_skip(name)

    def translate_all(self, definitions: Iterable[MacroDefinition]) -> TranslationResult:
        """
        Translate a sequence of macro definitions.

        Skipped macros are recorded but produce no output. When a name is
        defined more than once (alternative definitions under different
        conditional branches), only the first definition is translated.

        Raises:
            MacroBatchError: If any macro failed and keep_going is off
        """
        result = TranslationResult()
        collector = MacroErrorCollector(self.options.max_errors)
        items: list[str] = []
        seen: set[str] = set()

        for definition in definitions:
            name = definition.name

            if self.is_skipped(name):
                logger.debug(f"{name}: skipped")
                result.skipped.append(name)
                continue

            if name in seen:
                collector.add_warning(
                    f"duplicate definition of '{name}' ignored", definition.location
                )
                continue
            seen.add(name)

            try:
                items.append(self.translate(definition.signature, definition.body_lines))
                result.translated.append(name)
            except MacroError as e:
                result.failed.append(name)
                if self.options.keep_going:
                    logger.warning(f"{name}: not translated: {e.message}")
                    collector.add_warning(f"'{name}' not translated: {e.message}", definition.location)
                else:
                    collector.add(e)
                    if collector.should_stop():
                        break

        result.warnings = list(collector.warnings)
        collector.raise_if_errors(result.failed)

        result.output = "\n\n".join(items) + "\n" if items else ""

        logger.info(
            f"translated {len(result.translated)} macros, "
            f"skipped {len(result.skipped)}, failed {len(result.failed)}"
        )
        return result


def _macro_name(signature_text: str) -> str:
    name = signature_text.split("(", 1)[0].strip()
    return name or "?"


# =============================================================================
# Convenience Functions
# =============================================================================

def translate_macro(signature: str, body: Union[str, list[str]]) -> str:
    """
    Translate a single macro with the default options.

    Example:
        >>> print(translate_macro("STRINGIFY(x)", "#x"))
        macro_rules! STRINGIFY {
          ($x:ident) => {
            ::core::stringify!($x)
          };
        }
    """
    return MacroTranspiler().translate(signature, body)


def translate_header(
    text: str,
    filename: str = "<input>",
    options: Optional[TranspilerOptions] = None,
) -> TranslationResult:
    """
    Scan header text and translate every function-like macro in it.

    Raises:
        MacroBatchError: If any macro failed and keep_going is off
    """
    definitions = scan_function_macros(text, filename)
    return MacroTranspiler(options).translate_all(definitions)
