"""
Macro Abstract Syntax Tree (AST) Definitions
============================================

This module defines the node types produced by the macro parser. One tree
is built per macro, handed to the usage classifier and the code generator,
and then discarded.

Node Hierarchy
--------------
ASTNode (base)
├── Identifiers
│   ├── SimpleIdentifier - a plain name
│   └── ConcatenatedIdentifier - names joined with ## (token pasting)
├── Types
│   ├── NamedType - [struct] name
│   └── PointerType - pointer level, mutable or const
├── Statements
│   ├── ExpressionStatement - expression followed by ';'
│   ├── DeclarationStatement - [static] type name = expr;
│   ├── BlockStatement - { ... }
│   ├── IfStatement - if/else with statement-list branches
│   └── DoWhileStatement - do ... while (cond)
├── Expressions
│   ├── VariableExpression - identifier reference
│   ├── CallExpression - callee(args)
│   ├── CastExpression - (type) operand
│   ├── NumberLiteral, StringLiteral, CharLiteral
│   ├── FieldAccessExpression - operand.field / operand->field
│   ├── StringifyExpression - #param
│   ├── ConcatenationExpression - adjacent strings and stringifications
│   ├── UnaryExpression - prefix or postfix operator
│   ├── BinaryExpression - arithmetic, shift and comparison operators
│   ├── AssignmentExpression - = and compound assignment
│   ├── TernaryExpression - cond ? a : b
│   ├── AddressOfExpression - &operand
│   └── InlineAsmExpression - __asm [volatile] ( ... )
└── Macro
    ├── MacroSignature - name and parameter names
    └── MacroBody - a statement or a single expression

Design Notes
------------
- All nodes are dataclasses storing their source location
- Ownership is strictly tree shaped, there is no sharing between nodes
- Branches of if and do/while are statement lists; a braced branch is
  spliced into the list, a bare statement becomes a one-element list
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from rtos_bindgen.errors import SourceLocation


# Parameter spelling of the variadic marker and the name the body uses for it
VARIADIC = "..."
VA_ARGS = "__VA_ARGS__"


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Position of the node's first token in the macro text
    """
    location: SourceLocation

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}@{self.location.line}:{self.location.column}"


@dataclass
class Expression(ASTNode):
    """Base class for expression nodes."""
    pass


@dataclass
class Statement(ASTNode):
    """Base class for statement nodes."""
    pass


@dataclass
class TypeNode(ASTNode):
    """Base class for type nodes."""
    pass


# =============================================================================
# Identifiers
# =============================================================================

@dataclass
class Identifier(ASTNode):
    """Base class for identifiers."""
    pass


@dataclass
class SimpleIdentifier(Identifier):
    """A single name."""
    name: str = None


@dataclass
class ConcatenatedIdentifier(Identifier):
    """
    Names joined by token pasting (prefix ## name ## suffix).

    Attributes:
        fragments: The pasted names in source order
    """
    fragments: list[str] = field(default_factory=list)


# =============================================================================
# Types
# =============================================================================

@dataclass
class NamedType(TypeNode):
    """
    A base type name.

    Leading and trailing const on the base type are accepted by the parser
    but not recorded.

    Attributes:
        name: The type name
        is_struct: The name was preceded by the struct keyword
    """
    name: Identifier = None
    is_struct: bool = False

    def is_void(self) -> bool:
        return isinstance(self.name, SimpleIdentifier) and self.name.name == "void"


@dataclass
class PointerType(TypeNode):
    """
    One pointer level.

    Attributes:
        pointee: The type pointed to
        is_mutable: False when the '*' was followed by const
    """
    pointee: TypeNode = None
    is_mutable: bool = True


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class ExpressionStatement(Statement):
    """Expression used as a statement."""
    expression: Expression = None


@dataclass
class DeclarationStatement(Statement):
    """
    Local or static variable declaration with a mandatory initializer.

    Attributes:
        var_type: Declared type
        name: Variable name
        initializer: Initial value
        is_static: Declared static
    """
    var_type: TypeNode = None
    name: Identifier = None
    initializer: Expression = None
    is_static: bool = False


@dataclass
class BlockStatement(Statement):
    """Compound statement { ... }."""
    statements: list[Statement] = field(default_factory=list)


@dataclass
class IfStatement(Statement):
    """
    If statement.

    Attributes:
        condition: Condition expression
        then_branch: Statements run when the condition holds
        else_branch: Statements run otherwise (empty without else)
    """
    condition: Expression = None
    then_branch: list[Statement] = field(default_factory=list)
    else_branch: list[Statement] = field(default_factory=list)


@dataclass
class DoWhileStatement(Statement):
    """do { body } while (condition)."""
    body: list[Statement] = field(default_factory=list)
    condition: Expression = None


# =============================================================================
# Expression Nodes
# =============================================================================

class UnaryOperator(Enum):
    """Unary operators, valued by their C spelling."""
    PLUS = "+"
    NEGATE = "-"
    LOGICAL_NOT = "!"
    BITWISE_NOT = "~"
    INCREMENT = "++"
    DECREMENT = "--"


class BinaryOperator(Enum):
    """Binary operators, valued by their C spelling."""
    MULTIPLY = "*"
    DIVIDE = "/"
    ADD = "+"
    SUBTRACT = "-"
    LEFT_SHIFT = "<<"
    RIGHT_SHIFT = ">>"
    LESS = "<"
    LESS_EQ = "<="
    GREATER = ">"
    GREATER_EQ = ">="
    EQUAL = "=="
    NOT_EQUAL = "!="


class AssignmentOperator(Enum):
    """Assignment operators, valued by their C spelling."""
    ASSIGN = "="
    ADD_ASSIGN = "+="
    SUB_ASSIGN = "-="
    MUL_ASSIGN = "*="
    DIV_ASSIGN = "/="
    MOD_ASSIGN = "%="
    LSHIFT_ASSIGN = "<<="
    RSHIFT_ASSIGN = ">>="
    AND_ASSIGN = "&="
    XOR_ASSIGN = "^="
    OR_ASSIGN = "|="


@dataclass
class VariableExpression(Expression):
    """Reference to a name (parameter, constant, global or local)."""
    identifier: Identifier = None


@dataclass
class CallExpression(Expression):
    """
    Function call. The callee is always a name.

    Attributes:
        callee: Called function name
        arguments: Argument expressions
    """
    callee: Identifier = None
    arguments: list[Expression] = field(default_factory=list)


@dataclass
class CastExpression(Expression):
    """(target_type) operand."""
    target_type: TypeNode = None
    operand: Expression = None


@dataclass
class NumberLiteral(Expression):
    """
    Integer or floating literal.

    Attributes:
        text: Value text without suffix, as rendered
        is_unsigned: An unsigned marker was present
        size: Size marker (IntegerSize), if any
        is_float: Floating literal
    """
    text: str = None
    is_unsigned: bool = False
    size: Optional[Any] = None
    is_float: bool = False


@dataclass
class StringLiteral(Expression):
    """String literal, kept verbatim including quotes."""
    text: str = None


@dataclass
class CharLiteral(Expression):
    """Character literal, kept verbatim including quotes."""
    text: str = None


@dataclass
class FieldAccessExpression(Expression):
    """
    Field access through '.' or '->'.

    Attributes:
        operand: The structure (or pointer) expression
        field_name: Accessed field
        is_arrow: Accessed with '->'
    """
    operand: Expression = None
    field_name: Identifier = None
    is_arrow: bool = False


@dataclass
class StringifyExpression(Expression):
    """#name stringification."""
    identifier: Identifier = None


@dataclass
class ConcatenationExpression(Expression):
    """Adjacent string literals and stringifications."""
    parts: list[Expression] = field(default_factory=list)


@dataclass
class UnaryExpression(Expression):
    """
    Unary operation.

    Attributes:
        operator: The operator
        operand: The operand expression
        is_prefix: Operator written before the operand
    """
    operator: UnaryOperator = None
    operand: Expression = None
    is_prefix: bool = True


@dataclass
class BinaryExpression(Expression):
    """left op right."""
    operator: BinaryOperator = None
    left: Expression = None
    right: Expression = None


@dataclass
class AssignmentExpression(Expression):
    """target op= value."""
    operator: AssignmentOperator = None
    target: Expression = None
    value: Expression = None


@dataclass
class TernaryExpression(Expression):
    """condition ? then_expr : else_expr."""
    condition: Expression = None
    then_expr: Expression = None
    else_expr: Expression = None


@dataclass
class AddressOfExpression(Expression):
    """&operand."""
    operand: Expression = None


@dataclass
class AsmOperand(ASTNode):
    """
    Inline assembly operand: [name] "constraint" (expression).
    """
    name: Optional[str] = None
    constraint: str = None
    expression: Expression = None


@dataclass
class InlineAsmExpression(Expression):
    """
    GCC-style inline assembly.

    Attributes:
        template: Template string literals, verbatim
        outputs: Output operands
        inputs: Input operands
        clobbers: Clobber string literals, verbatim
        is_volatile: Written as __asm volatile
    """
    template: list[str] = field(default_factory=list)
    outputs: list[AsmOperand] = field(default_factory=list)
    inputs: list[AsmOperand] = field(default_factory=list)
    clobbers: list[str] = field(default_factory=list)
    is_volatile: bool = False


# =============================================================================
# Macro Nodes
# =============================================================================

@dataclass
class MacroSignature(ASTNode):
    """
    NAME(param, ...).

    Attributes:
        name: Macro name
        parameters: Parameter names; the variadic marker is spelled "..."
    """
    name: str = None
    parameters: list[str] = field(default_factory=list)

    @property
    def is_variadic(self) -> bool:
        return VARIADIC in self.parameters


@dataclass
class MacroBody(ASTNode):
    """
    Parsed macro body: exactly one of statement or expression is set.

    An empty body is an empty block statement.
    """
    statement: Optional[Statement] = None
    expression: Optional[Expression] = None

    @property
    def is_expression(self) -> bool:
        return self.expression is not None


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_<ClassName> for the node types they care
    about; everything else falls through to generic_visit, which visits
    every child node.

    Usage:
        class NameCollector(ASTVisitor):
            def visit_SimpleIdentifier(self, node):
                self.names.append(node.name)
    """

    def visit(self, node: ASTNode) -> Any:
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all children of the node."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Indented tree dump of a macro body, used by --dump-ast.

    Usage:
        printer = ASTPrinter()
        print(printer.print(body))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the tree and return it as a string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        self.output.append(f"{'  ' * self.indent_level}{text}")

    def _indent(self) -> None:
        self.indent_level += 1

    def _dedent(self) -> None:
        self.indent_level = max(0, self.indent_level - 1)

    def _children(self, label: str, nodes: list[ASTNode]) -> None:
        self._emit(label)
        self._indent()
        for node in nodes:
            self.visit(node)
        self._dedent()

    def visit_MacroBody(self, node: MacroBody):
        self._emit("Body (expression)" if node.is_expression else "Body (statement)")
        self._indent()
        self.visit(node.expression if node.is_expression else node.statement)
        self._dedent()

    def visit_BlockStatement(self, node: BlockStatement):
        self._children("Block", node.statements)

    def visit_ExpressionStatement(self, node: ExpressionStatement):
        self._children("ExprStmt", [node.expression])

    def visit_DeclarationStatement(self, node: DeclarationStatement):
        storage = "static " if node.is_static else ""
        self._emit(f"Declare {storage}{self._type_str(node.var_type)} {self._name_str(node.name)}")
        self._indent()
        self.visit(node.initializer)
        self._dedent()

    def visit_IfStatement(self, node: IfStatement):
        self._children("If", [node.condition])
        self._indent()
        self._children("Then:", node.then_branch)
        if node.else_branch:
            self._children("Else:", node.else_branch)
        self._dedent()

    def visit_DoWhileStatement(self, node: DoWhileStatement):
        self._children("DoWhile", node.body)
        self._indent()
        self._children("While:", [node.condition])
        self._dedent()

    def visit_VariableExpression(self, node: VariableExpression):
        self._emit(f"Variable {self._name_str(node.identifier)}")

    def visit_CallExpression(self, node: CallExpression):
        self._children(f"Call {self._name_str(node.callee)}", node.arguments)

    def visit_CastExpression(self, node: CastExpression):
        self._children(f"Cast {self._type_str(node.target_type)}", [node.operand])

    def visit_NumberLiteral(self, node: NumberLiteral):
        self._emit(f"Number {node.text}")

    def visit_StringLiteral(self, node: StringLiteral):
        self._emit(f"String {node.text}")

    def visit_CharLiteral(self, node: CharLiteral):
        self._emit(f"Char {node.text}")

    def visit_FieldAccessExpression(self, node: FieldAccessExpression):
        access = "->" if node.is_arrow else "."
        self._children(f"Field {access}{self._name_str(node.field_name)}", [node.operand])

    def visit_StringifyExpression(self, node: StringifyExpression):
        self._emit(f"Stringify {self._name_str(node.identifier)}")

    def visit_ConcatenationExpression(self, node: ConcatenationExpression):
        self._children("Concat", node.parts)

    def visit_UnaryExpression(self, node: UnaryExpression):
        position = "prefix" if node.is_prefix else "postfix"
        self._children(f"Unary {node.operator.value} ({position})", [node.operand])

    def visit_BinaryExpression(self, node: BinaryExpression):
        self._children(f"Binary {node.operator.value}", [node.left, node.right])

    def visit_AssignmentExpression(self, node: AssignmentExpression):
        self._children(f"Assign {node.operator.value}", [node.target, node.value])

    def visit_TernaryExpression(self, node: TernaryExpression):
        self._children("Ternary", [node.condition, node.then_expr, node.else_expr])

    def visit_AddressOfExpression(self, node: AddressOfExpression):
        self._children("AddressOf", [node.operand])

    def visit_InlineAsmExpression(self, node: InlineAsmExpression):
        self._emit(f"Asm {' '.join(node.template)}")

    def _name_str(self, identifier: Identifier) -> str:
        if isinstance(identifier, ConcatenatedIdentifier):
            return " ## ".join(identifier.fragments)
        return identifier.name

    def _type_str(self, node: TypeNode) -> str:
        if isinstance(node, PointerType):
            qualifier = "" if node.is_mutable else " const"
            return f"{self._type_str(node.pointee)}*{qualifier}"
        prefix = "struct " if node.is_struct else ""
        return f"{prefix}{self._name_str(node.name)}"
