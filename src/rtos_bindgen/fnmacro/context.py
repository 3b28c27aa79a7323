"""
Macro Parameter Usage Classification
====================================

Whether a macro can be emitted as a plain typed function depends on how
its parameters are used in the body. This module walks a parsed body and
classifies every parameter:

| Kind       | Meaning                                                       |
|------------|---------------------------------------------------------------|
| UNKNOWN    | only threaded through: call argument (casts included), callee |
| IDENTIFIER | used syntactically: stringified, pasted or a cast target type |
| EXPRESSION | used as an ordinary value: operand, field base, condition,    |
|            | or the operand of a cast that is not a call argument; always  |
|            | the variadic parameter, which no function can receive         |

Classification is monotonic. A parameter starts UNKNOWN and can only be
raised; once IDENTIFIER it never changes, and IDENTIFIER overrides
EXPRESSION whenever both uses occur in one body.

The classifier runs as a separate pass over the finished tree, so
alternatives the parser abandoned while backtracking leave no trace.
"""

from dataclasses import dataclass, field
from enum import Enum
import logging

from rtos_bindgen.fnmacro.ast import (
    VA_ARGS,
    VARIADIC,
    ASTVisitor,
    CallExpression,
    CastExpression,
    ConcatenatedIdentifier,
    Expression,
    MacroBody,
    MacroSignature,
    NamedType,
    PointerType,
    SimpleIdentifier,
    TypeNode,
    StringifyExpression,
    VariableExpression,
)

logger = logging.getLogger(__name__)


class ArgKind(Enum):
    """Usage classification of a macro parameter."""
    UNKNOWN = "unknown"
    IDENTIFIER = "identifier"
    EXPRESSION = "expression"


class MacroContext:
    """
    Per-macro classification table.

    Attributes:
        arguments: Parameter binding name -> ArgKind, in signature order.
            The variadic parameter is keyed by __VA_ARGS__.
        functions: Names of functions the body calls, in first-seen order
    """

    def __init__(self, parameters: list[str]):
        self.arguments: dict[str, ArgKind] = {
            binding_name(name): ArgKind.UNKNOWN for name in parameters
        }
        self.functions: list[str] = []

    def is_parameter(self, name: str) -> bool:
        return name in self.arguments

    def kind(self, name: str) -> ArgKind:
        return self.arguments[binding_name(name)]

    def mark_identifier(self, name: str) -> None:
        """Record a syntactic use; overrides any earlier classification."""
        if name in self.arguments:
            self.arguments[name] = ArgKind.IDENTIFIER

    def mark_expression(self, name: str) -> None:
        """Record a value use; only an UNKNOWN parameter changes."""
        if self.arguments.get(name) is ArgKind.UNKNOWN:
            self.arguments[name] = ArgKind.EXPRESSION

    def add_function(self, name: str) -> None:
        if name not in self.functions:
            self.functions.append(name)

    def needs_pattern_macro(self) -> bool:
        """True if any parameter was classified."""
        return any(kind is not ArgKind.UNKNOWN for kind in self.arguments.values())


def binding_name(parameter: str) -> str:
    """Name the body uses for a parameter ('...' is spelled __VA_ARGS__)."""
    return VA_ARGS if parameter == VARIADIC else parameter


# =============================================================================
# Classification Pass
# =============================================================================

class UsageClassifier(ASTVisitor):
    """
    Walks a macro body and fills a MacroContext.

    Names in field, type and declaration positions are not parameter uses
    unless they are pasted, so SimpleIdentifier is ignored by default and
    only VariableExpression marks a value use.
    """

    def __init__(self, context: MacroContext):
        self.context = context

    def visit_SimpleIdentifier(self, node: SimpleIdentifier):
        pass

    def visit_ConcatenatedIdentifier(self, node: ConcatenatedIdentifier):
        for fragment in node.fragments:
            self.context.mark_identifier(fragment)

    def visit_StringifyExpression(self, node: StringifyExpression):
        if isinstance(node.identifier, SimpleIdentifier):
            self.context.mark_identifier(node.identifier.name)
        else:
            self.visit(node.identifier)

    def visit_VariableExpression(self, node: VariableExpression):
        if isinstance(node.identifier, SimpleIdentifier):
            self.context.mark_expression(node.identifier.name)
        else:
            self.visit(node.identifier)

    def visit_CastExpression(self, node: CastExpression):
        self._visit_cast_target(node.target_type)
        self.visit(node.operand)

    def visit_CallExpression(self, node: CallExpression):
        if isinstance(node.callee, SimpleIdentifier):
            self.context.add_function(node.callee.name)
        else:
            self.visit(node.callee)

        for argument in node.arguments:
            self._visit_argument(argument)

    def _visit_argument(self, argument: Expression) -> None:
        """
        A parameter passed straight on to a call, possibly through casts,
        is threaded through and stays UNKNOWN.
        """
        while isinstance(argument, CastExpression):
            self._visit_cast_target(argument.target_type)
            argument = argument.operand

        if isinstance(argument, VariableExpression):
            self.visit(argument.identifier)
        else:
            self.visit(argument)

    def _visit_cast_target(self, target_type: TypeNode) -> None:
        """A parameter named as a cast target type is captured as an identifier."""
        while isinstance(target_type, PointerType):
            target_type = target_type.pointee

        if isinstance(target_type, NamedType) and isinstance(target_type.name, SimpleIdentifier):
            self.context.mark_identifier(target_type.name.name)
        else:
            self.visit(target_type)


# =============================================================================
# Analyzed Macro
# =============================================================================

@dataclass
class FnMacro:
    """
    A fully analyzed macro, ready for code generation.

    Attributes:
        name: Macro name
        parameters: (signature name, kind) pairs in signature order
        body: Parsed body
        functions: Functions called by the body
    """
    name: str
    parameters: list[tuple[str, ArgKind]]
    body: MacroBody
    functions: list[str] = field(default_factory=list)

    @property
    def is_pattern_macro(self) -> bool:
        """True if the macro must be emitted as a pattern macro."""
        return any(kind is not ArgKind.UNKNOWN for _, kind in self.parameters)


def classify(signature: MacroSignature, body: MacroBody) -> FnMacro:
    """Classify every parameter of a parsed macro."""
    context = MacroContext(signature.parameters)
    UsageClassifier(context).visit(body)

    # A Rust function cannot receive the variadic arguments
    if signature.is_variadic:
        context.mark_expression(VA_ARGS)

    parameters = [(name, context.kind(name)) for name in signature.parameters]
    logger.debug(
        f"{signature.name}: "
        + ", ".join(f"{name}={kind.value}" for name, kind in parameters)
    )

    return FnMacro(
        name=signature.name,
        parameters=parameters,
        body=body,
        functions=list(context.functions),
    )
