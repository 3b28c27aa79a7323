"""
rtos-macrogen - Macro Transpiler Command-Line Interface
=======================================================

This module implements the command-line interface used by the binding
build to translate FreeRTOS function-like macros into Rust and to write
the constants shim header.

Usage Examples
--------------
Translate headers into a bindings fragment:
    $ rtos-macrogen translate FreeRTOS.h task.h queue.h -o macros.rs

Keep going past macros that cannot be translated:
    $ rtos-macrogen translate --keep-going semphr.h

Inspect how a header's macros parse:
    $ rtos-macrogen translate --dump-ast queue.h

Translate one macro:
    $ rtos-macrogen macro "MAX(a, b)" "((a) > (b) ? (a) : (b))"

Write the constants shim header:
    $ rtos-macrogen constants -o constants.h
"""

import logging
from pathlib import Path
from typing import Optional

import click

from rtos_bindgen import __version__
from rtos_bindgen.cli.errors import handle_cli_exception
from rtos_bindgen.constants import write_constants_header
from rtos_bindgen.fnmacro.ast import ASTPrinter
from rtos_bindgen.fnmacro.errors import MacroError, MacroErrorCollector
from rtos_bindgen.fnmacro.headers import MacroDefinition, scan_function_macros
from rtos_bindgen.fnmacro.transpiler import MacroTranspiler, TranspilerOptions

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(__version__, "--version", "-V", prog_name="rtos-macrogen")
def main() -> None:
    """
    FreeRTOS function-like macro transpiler.

    Converts the function-like macros of the FreeRTOS headers into Rust
    pattern macros and typed inline functions for the kernel bindings.

    \b
    Commands:
      translate  Translate every function-like macro in headers
      macro      Translate a single macro
      constants  Write the constants shim header

    \b
    Examples:
      rtos-macrogen translate task.h queue.h -o macros.rs
      rtos-macrogen macro "STRINGIFY(x)" "#x"
      rtos-macrogen constants -o constants.h
    """
    pass


# =============================================================================
# Translate Command
# =============================================================================

@main.command("translate")
@click.argument(
    "headers",
    nargs=-1,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output Rust file (default: stdout)",
)
@click.option(
    "--no-denylist",
    is_flag=True,
    help="Attempt macros the built-in denylist would skip",
)
@click.option(
    "--skip",
    "skip_names",
    multiple=True,
    metavar="PATTERN",
    help="Skip macros whose name matches PATTERN (can be repeated)",
)
@click.option(
    "--keep-going",
    is_flag=True,
    help="Report untranslatable macros as warnings and leave them out",
)
@click.option(
    "--dump-ast",
    is_flag=True,
    help="Print each macro's AST instead of translating (for debugging)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
def cmd_translate(
    headers: tuple[Path, ...],
    output: Optional[Path],
    no_denylist: bool,
    skip_names: tuple[str, ...],
    keep_going: bool,
    dump_ast: bool,
    verbose: bool,
) -> None:
    """
    Translate the function-like macros of one or more headers.

    HEADERS are C header files. Macros are translated in the order they
    appear, headers in the order given; a name defined more than once is
    translated from its first definition.

    \b
    Examples:
      rtos-macrogen translate FreeRTOS.h task.h -o macros.rs
      rtos-macrogen translate --skip 'vTask*' task.h
      rtos-macrogen translate --no-denylist --keep-going portable.h
    """
    setup_logging(verbose)

    try:
        options = TranspilerOptions(
            apply_denylist=not no_denylist,
            skip_names=list(skip_names),
            keep_going=keep_going,
        )
        transpiler = MacroTranspiler(options)

        definitions: list[MacroDefinition] = []
        for header in headers:
            logger.debug(f"Scanning {header}...")
            definitions.extend(scan_function_macros(header.read_text(), str(header)))

        if dump_ast:
            _dump_definitions(transpiler, definitions)
            return

        result = transpiler.translate_all(definitions)

        for warning in result.warnings:
            click.echo(warning, err=True)

        if output is not None:
            output.write_text(result.output)
            click.echo(
                f"Translated {len(result.translated)} macros -> {output} "
                f"(skipped {len(result.skipped)}, failed {len(result.failed)})"
            )
        else:
            click.echo(result.output, nl=False)

    except Exception as e:
        handle_cli_exception(e, verbose, "Translation")


def _dump_definitions(transpiler: MacroTranspiler, definitions: list[MacroDefinition]) -> None:
    """Print the classified AST of every macro that is not skipped."""
    printer = ASTPrinter()
    collector = MacroErrorCollector(transpiler.options.max_errors)
    failed: list[str] = []

    for definition in definitions:
        if transpiler.is_skipped(definition.name):
            continue
        try:
            fn_macro = transpiler.analyze(definition.signature, definition.body_lines)
        except MacroError as e:
            failed.append(definition.name)
            collector.add(e)
            if collector.should_stop():
                break
            continue

        kinds = ", ".join(f"{name}={kind.value}" for name, kind in fn_macro.parameters)
        click.echo(f"{fn_macro.name}({kinds})")
        click.echo(printer.print(fn_macro.body))
        click.echo()

    collector.raise_if_errors(failed)


# =============================================================================
# Macro Command
# =============================================================================

@main.command("macro")
@click.argument("signature")
@click.argument("body", default="")
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
def cmd_macro(signature: str, body: str, verbose: bool) -> None:
    """
    Translate a single macro given on the command line.

    SIGNATURE is the macro name and parameter list, BODY its replacement
    text (empty when omitted).

    \b
    Examples:
      rtos-macrogen macro "STRINGIFY(x)" "#x"
      rtos-macrogen macro "MAX(a, b)" "((a) > (b) ? (a) : (b))"
    """
    setup_logging(verbose)

    try:
        click.echo(MacroTranspiler().translate(signature, body))
    except Exception as e:
        handle_cli_exception(e, verbose, "Translation")


# =============================================================================
# Constants Command
# =============================================================================

@main.command("constants")
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output header file (default: stdout)",
)
def cmd_constants(output: Optional[Path]) -> None:
    """
    Write the constants shim header.

    The header rewrites object-like kernel constants (portMAX_DELAY,
    pdTRUE, queueSEND_TO_BACK, ...) as typed C constants.
    """
    try:
        header = write_constants_header()
        if output is not None:
            output.write_text(header)
            click.echo(f"Wrote {output}")
        else:
            click.echo(header, nl=False)
    except Exception as e:
        handle_cli_exception(e)


if __name__ == "__main__":
    main()
