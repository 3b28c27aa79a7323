"""
Rust Code Generator for Function-like Macros
============================================

This module renders an analyzed macro (FnMacro) as Rust source text that
is appended to the generated FreeRTOS bindings.

Output Forms
------------
A macro whose parameters are all UNKNOWN (only threaded through to calls)
becomes a typed function:

    #[allow(non_snake_case)]
    #[inline(always)]
    pub unsafe extern "C" fn xQueueSend(mut xQueue: QueueHandle_t, ...) -> BaseType_t {
      xQueueGenericSend(xQueue.into(), ...)
    }

Any other macro becomes a pattern macro with one capture per parameter,
an identifier capture for IDENTIFIER parameters and an expression capture
otherwise:

    macro_rules! MAX {
      ($a:expr, $b:expr) => {
        if ($a > $b) { $a } else { $b }
      };
    }

Rendering Rules
---------------
| C construct          | Rust rendering                                      |
|----------------------|-----------------------------------------------------|
| (void) x             | { drop(x) }                                         |
| (T) x                | (x as T)                                            |
| NULL                 | ::core::ptr::null_mut()                             |
| a ## b               | ::core::concat_idents!(a, b)                        |
| #x                   | ::core::stringify!(x)                               |
| "a" #x               | ::core::concat!("a", ::core::stringify!(x))         |
| p->f, s.f            | Deref(unsafe { &mut *addr_of_mut!((*p).f) }).convert() |
| ++x, --x             | { x -= 1; x }                                       |
| x++, x--             | { let prev = x; x -= 1; prev }                      |
| !x, ~x               | !x                                                  |
| a op= b              | { a op= b; a }                                      |
| c ? a : b            | if c { a } else { b }                               |
| &x                   | ::core::ptr::addr_of_mut!(x)                        |
| do S while (c)       | loop { S if (c as u8) == 0 { break; } }             |
| __asm(...)           | ::core::arch::asm!(...)                             |

Increment and decrement both subtract, and '!' and '~' share one
operator, matching the macro translations the bindings were built with.
Integer suffixes are not rendered.

Rendering is a pure function of the FnMacro and the side tables: the same
input always yields byte-identical text.
"""

from typing import Callable, Optional
import logging

from rtos_bindgen.fnmacro.ast import (
    VA_ARGS,
    AddressOfExpression,
    AssignmentExpression,
    BinaryExpression,
    BlockStatement,
    CallExpression,
    CastExpression,
    CharLiteral,
    ConcatenatedIdentifier,
    ConcatenationExpression,
    DeclarationStatement,
    DoWhileStatement,
    Expression,
    ExpressionStatement,
    FieldAccessExpression,
    Identifier,
    IfStatement,
    InlineAsmExpression,
    MacroBody,
    NamedType,
    NumberLiteral,
    PointerType,
    SimpleIdentifier,
    Statement,
    StringifyExpression,
    StringLiteral,
    TernaryExpression,
    TypeNode,
    UnaryExpression,
    UnaryOperator,
    VariableExpression,
)
from rtos_bindgen.fnmacro.context import ArgKind, FnMacro, binding_name
from rtos_bindgen.fnmacro.errors import MacroError
from rtos_bindgen.fnmacro.overrides import (
    C_TYPE_NAMES,
    IDENTIFIER_RENAMES,
    return_type as default_return_type,
    variable_type as default_variable_type,
)

logger = logging.getLogger(__name__)


VariableTypeLookup = Callable[[str, str], Optional[str]]
ReturnTypeLookup = Callable[[str], Optional[str]]

INDENT = "  "

# Placeholder parameter type when the side table has no entry
PLACEHOLDER_TYPE = "_"

MEMORY_CLOBBER = '"memory"'


class RustCodeGenerator:
    """
    Renders FnMacro objects as Rust items.

    Usage:
        generator = RustCodeGenerator()
        text = generator.generate(fn_macro)

    Attributes:
        variable_type: (macro name, parameter) -> Rust type or None
        return_type: macro name -> Rust type or None
        renames: Identifier -> replacement text in value positions
    """

    def __init__(
        self,
        variable_type: VariableTypeLookup = default_variable_type,
        return_type: ReturnTypeLookup = default_return_type,
        renames: Optional[dict[str, str]] = None,
    ):
        self.variable_type = variable_type
        self.return_type = return_type
        self.renames = dict(IDENTIFIER_RENAMES if renames is None else renames)

        # Binding names rendered as $captures; empty for typed functions
        self._captures: set[str] = set()

    # =========================================================================
    # Entry Point
    # =========================================================================

    def generate(self, fn_macro: FnMacro) -> str:
        """
        Render one analyzed macro.

        Returns:
            The Rust item as text, without a trailing newline
        """
        if fn_macro.is_pattern_macro:
            logger.debug(f"{fn_macro.name}: emitting pattern macro")
            self._captures = {binding_name(name) for name, _ in fn_macro.parameters}
            try:
                return "\n".join(self._generate_pattern_macro(fn_macro))
            finally:
                self._captures = set()

        logger.debug(f"{fn_macro.name}: emitting typed function")
        self._captures = set()
        return "\n".join(self._generate_function(fn_macro))

    # =========================================================================
    # Output Forms
    # =========================================================================

    def _generate_pattern_macro(self, fn_macro: FnMacro) -> list[str]:
        captures = ", ".join(
            self._generate_capture(name, kind) for name, kind in fn_macro.parameters
        )

        lines = [f"macro_rules! {fn_macro.name} {{"]
        lines.append(f"{INDENT}({captures}) => {{")
        lines.extend(self._indent(self._generate_body(fn_macro.body), 2))
        lines.append(f"{INDENT}}};")
        lines.append("}")
        return lines

    def _generate_capture(self, name: str, kind: ArgKind) -> str:
        binding = binding_name(name)
        if binding == VA_ARGS:
            return f"$(${VA_ARGS}:expr),*"
        if kind is ArgKind.IDENTIFIER:
            return f"${binding}:ident"
        return f"${binding}:expr"

    def _generate_function(self, fn_macro: FnMacro) -> list[str]:
        parameters = []
        for name, _ in fn_macro.parameters:
            param_type = self.variable_type(fn_macro.name, name) or PLACEHOLDER_TYPE
            parameters.append(f"mut {name}: {param_type}")

        result_type = self.return_type(fn_macro.name)
        result = f" -> {result_type}" if result_type else ""

        lines = [
            "#[allow(non_snake_case)]",
            "#[inline(always)]",
            f'pub unsafe extern "C" fn {fn_macro.name}({", ".join(parameters)}){result} {{',
        ]
        lines.extend(self._indent(self._generate_body(fn_macro.body)))
        lines.append("}")
        return lines

    @staticmethod
    def _indent(lines: list[str], levels: int = 1) -> list[str]:
        prefix = INDENT * levels
        return [f"{prefix}{line}" if line else line for line in lines]

    def _generate_body(self, body: MacroBody) -> list[str]:
        """A block body is spliced into the enclosing item's braces."""
        if body.is_expression:
            return [self._generate_expression(body.expression)]
        if isinstance(body.statement, BlockStatement):
            return self._generate_statements(body.statement.statements)
        return self._generate_statement(body.statement)

    # =========================================================================
    # Statements
    # =========================================================================

    def _generate_statements(self, statements: list[Statement]) -> list[str]:
        lines: list[str] = []
        for stmt in statements:
            lines.extend(self._generate_statement(stmt))
        return lines

    def _generate_statement(self, stmt: Statement) -> list[str]:
        """Dispatch to the appropriate statement renderer."""
        if isinstance(stmt, ExpressionStatement):
            return [f"{self._generate_expression(stmt.expression)};"]
        elif isinstance(stmt, DeclarationStatement):
            return [self._generate_declaration(stmt)]
        elif isinstance(stmt, BlockStatement):
            return ["{", *self._indent(self._generate_statements(stmt.statements)), "}"]
        elif isinstance(stmt, IfStatement):
            return self._generate_if(stmt)
        elif isinstance(stmt, DoWhileStatement):
            return self._generate_do_while(stmt)
        raise MacroError(f"cannot render statement {stmt!r}", stmt.location)

    def _generate_declaration(self, stmt: DeclarationStatement) -> str:
        name = self._generate_identifier(stmt.name)
        var_type = self._generate_type(stmt.var_type)
        value = self._generate_expression(stmt.initializer)
        if stmt.is_static:
            return f"static mut {name}: {var_type} = {value};"
        return f"let mut {name}: {var_type} = {value};"

    def _generate_if(self, stmt: IfStatement) -> list[str]:
        lines = [f"if {self._generate_expression(stmt.condition)} {{"]
        lines.extend(self._indent(self._generate_statements(stmt.then_branch)))
        if stmt.else_branch:
            lines.append("} else {")
            lines.extend(self._indent(self._generate_statements(stmt.else_branch)))
        lines.append("}")
        return lines

    def _generate_do_while(self, stmt: DoWhileStatement) -> list[str]:
        """
        do S while (C) becomes a loop that runs S, then leaves once C,
        converted to u8, is zero.
        """
        condition = self._generate_expression(stmt.condition)
        body = self._generate_statements(stmt.body)
        body.extend([
            f"if ({condition} as u8) == 0 {{",
            f"{INDENT}break;",
            "}",
        ])
        return ["loop {", *self._indent(body), "}"]

    # =========================================================================
    # Expressions
    # =========================================================================

    def _generate_expression(self, expr: Expression) -> str:
        """Dispatch to the appropriate expression renderer."""
        if isinstance(expr, VariableExpression):
            return self._generate_variable(expr)
        elif isinstance(expr, NumberLiteral):
            return expr.text
        elif isinstance(expr, (StringLiteral, CharLiteral)):
            return expr.text
        elif isinstance(expr, CallExpression):
            return self._generate_call(expr)
        elif isinstance(expr, CastExpression):
            return self._generate_cast(expr)
        elif isinstance(expr, FieldAccessExpression):
            return self._generate_field_access(expr)
        elif isinstance(expr, StringifyExpression):
            return f"::core::stringify!({self._generate_identifier(expr.identifier)})"
        elif isinstance(expr, ConcatenationExpression):
            parts = ", ".join(self._generate_expression(part) for part in expr.parts)
            return f"::core::concat!({parts})"
        elif isinstance(expr, UnaryExpression):
            return self._generate_unary(expr)
        elif isinstance(expr, BinaryExpression):
            left = self._generate_expression(expr.left)
            right = self._generate_expression(expr.right)
            return f"({left} {expr.operator.value} {right})"
        elif isinstance(expr, AssignmentExpression):
            target = self._generate_expression(expr.target)
            value = self._generate_expression(expr.value)
            return f"{{ {target} {expr.operator.value} {value}; {target} }}"
        elif isinstance(expr, TernaryExpression):
            condition = self._generate_expression(expr.condition)
            then_expr = self._generate_expression(expr.then_expr)
            else_expr = self._generate_expression(expr.else_expr)
            return f"if {condition} {{ {then_expr} }} else {{ {else_expr} }}"
        elif isinstance(expr, AddressOfExpression):
            return f"::core::ptr::addr_of_mut!({self._generate_expression(expr.operand)})"
        elif isinstance(expr, InlineAsmExpression):
            return self._generate_asm(expr)
        raise MacroError(f"cannot render expression {expr!r}", expr.location)

    def _generate_variable(self, expr: VariableExpression) -> str:
        identifier = expr.identifier
        if (
            isinstance(identifier, SimpleIdentifier)
            and identifier.name not in self._captures
            and identifier.name in self.renames
        ):
            return self.renames[identifier.name]
        return self._generate_identifier(identifier)

    def _generate_call(self, expr: CallExpression) -> str:
        """
        Arguments that are plain names get .into() so that handle and
        integer types convert at the call boundary. NULL is left alone.
        """
        arguments = []
        for argument in expr.arguments:
            text = self._generate_expression(argument)
            if self._is_convertible_argument(argument):
                if text == self._variadic_reference():
                    text = f"$(${VA_ARGS}.into()),*"
                else:
                    text = f"{text}.into()"
            arguments.append(text)

        callee = self._generate_identifier(expr.callee)
        return f"{callee}({', '.join(arguments)})"

    @staticmethod
    def _is_convertible_argument(argument: Expression) -> bool:
        return isinstance(argument, VariableExpression) and not (
            isinstance(argument.identifier, SimpleIdentifier)
            and argument.identifier.name == "NULL"
        )

    def _generate_cast(self, expr: CastExpression) -> str:
        operand = self._generate_expression(expr.operand)
        if isinstance(expr.target_type, NamedType) and expr.target_type.is_void():
            return f"{{ drop({operand}) }}"
        return f"({operand} as {self._generate_type(expr.target_type)})"

    def _generate_field_access(self, expr: FieldAccessExpression) -> str:
        # '.' and '->' both project through a mutable pointer to the base
        base = self._generate_expression(expr.operand)
        field_name = self._generate_identifier(expr.field_name)
        return (
            f"Deref(unsafe {{ &mut *::core::ptr::addr_of_mut!((*{base}).{field_name}) }})"
            f".convert()"
        )

    def _generate_unary(self, expr: UnaryExpression) -> str:
        operand = self._generate_expression(expr.operand)
        op = expr.operator

        if op in (UnaryOperator.INCREMENT, UnaryOperator.DECREMENT):
            if expr.is_prefix:
                return f"{{ {operand} -= 1; {operand} }}"
            return f"{{ let prev = {operand}; {operand} -= 1; prev }}"

        if op in (UnaryOperator.LOGICAL_NOT, UnaryOperator.BITWISE_NOT):
            return f"!{operand}"

        if op == UnaryOperator.NEGATE:
            return f"-{operand}"

        return operand

    def _generate_asm(self, expr: InlineAsmExpression) -> str:
        """
        Template strings, then each register clobber, then the C clobber
        ABI. A "memory" clobber drops the nomem option instead of being
        listed. Operands are not rendered.
        """
        arguments = list(expr.template)
        has_memory_clobber = False
        for clobber in expr.clobbers:
            if clobber == MEMORY_CLOBBER:
                has_memory_clobber = True
            else:
                arguments.append(f"out({clobber}) _")
        arguments.append('clobber_abi("C")')
        arguments.append("options(raw)" if has_memory_clobber else "options(raw, nomem)")
        return f"::core::arch::asm!({', '.join(arguments)})"

    # =========================================================================
    # Identifiers and Types
    # =========================================================================

    def _generate_identifier(self, identifier: Identifier) -> str:
        if isinstance(identifier, ConcatenatedIdentifier):
            fragments = ", ".join(self._generate_name(name) for name in identifier.fragments)
            return f"::core::concat_idents!({fragments})"
        return self._generate_name(identifier.name)

    def _generate_name(self, name: str) -> str:
        if name in self._captures:
            if name == VA_ARGS:
                return self._variadic_reference()
            return f"${name}"
        return name

    @staticmethod
    def _variadic_reference() -> str:
        return f"$(${VA_ARGS}),*"

    def _generate_type(self, node: TypeNode) -> str:
        if isinstance(node, PointerType):
            qualifier = "mut" if node.is_mutable else "const"
            return f"*{qualifier} {self._generate_type(node.pointee)}"

        name = node.name
        if isinstance(name, SimpleIdentifier) and name.name in C_TYPE_NAMES:
            return C_TYPE_NAMES[name.name]
        return self._generate_identifier(name)


def generate(fn_macro: FnMacro) -> str:
    """Render a macro with the built-in FreeRTOS side tables."""
    return RustCodeGenerator().generate(fn_macro)
