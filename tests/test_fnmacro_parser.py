# =============================================================================
# test_fnmacro_parser.py - Macro Parser Unit Tests
# =============================================================================
# Tests for the recursive descent parser of macro signatures and bodies.
#
# Test coverage includes:
#   - Signatures, including variadic parameter lists
#   - Expression precedence and associativity
#   - Casts versus parenthesized expressions
#   - Postfix chains: calls, field access, increment
#   - Stringification, token pasting and pasted literal suffixes
#   - Inline assembly
#   - Statements: blocks, if/else, do/while, declarations
#   - Unsupported constructs and syntax errors
# =============================================================================

import pytest

from rtos_bindgen.fnmacro.parser import parse_body, parse_signature
from rtos_bindgen.fnmacro.ast import (
    AddressOfExpression,
    AssignmentExpression,
    AssignmentOperator,
    ASTPrinter,
    BinaryExpression,
    BinaryOperator,
    BlockStatement,
    CallExpression,
    CastExpression,
    CharLiteral,
    ConcatenatedIdentifier,
    ConcatenationExpression,
    DeclarationStatement,
    DoWhileStatement,
    ExpressionStatement,
    FieldAccessExpression,
    IfStatement,
    InlineAsmExpression,
    NamedType,
    NumberLiteral,
    PointerType,
    StringifyExpression,
    StringLiteral,
    TernaryExpression,
    UnaryExpression,
    UnaryOperator,
    VariableExpression,
)
from rtos_bindgen.fnmacro.errors import (
    MacroSyntaxError,
    UnsupportedConstructError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def expr(text: str, parameters=()):
    """Parse a body that must be a single expression."""
    body = parse_body(text, "M", parameters)
    assert body.is_expression, f"expected expression body for {text!r}"
    return body.expression


def stmt(text: str, parameters=()):
    """Parse a body that must be a statement."""
    body = parse_body(text, "M", parameters)
    assert not body.is_expression, f"expected statement body for {text!r}"
    return body.statement


def var_name(node) -> str:
    assert isinstance(node, VariableExpression)
    return node.identifier.name


# =============================================================================
# Signature Tests
# =============================================================================

class TestSignature:
    """Test NAME(params) parsing."""

    def test_two_parameters(self):
        sig = parse_signature("MAX(a, b)")
        assert sig.name == "MAX"
        assert sig.parameters == ["a", "b"]
        assert not sig.is_variadic

    def test_no_parameters(self):
        assert parse_signature("FOO()").parameters == []

    def test_variadic_after_names(self):
        sig = parse_signature("LOG(fmt, ...)")
        assert sig.parameters == ["fmt", "..."]
        assert sig.is_variadic

    def test_variadic_only(self):
        assert parse_signature("V(...)").parameters == ["..."]

    def test_comment_in_parameters(self):
        assert parse_signature("F(a /* first */, b)").parameters == ["a", "b"]

    @pytest.mark.parametrize("text", [
        "F(a,)",
        "F(a",
        "F",
        "F(a) x",
        "F(..., a)",
        "(a)",
    ])
    def test_malformed(self, text):
        with pytest.raises(MacroSyntaxError):
            parse_signature(text)


# =============================================================================
# Expression Tests
# =============================================================================

class TestPrecedence:
    """Test the precedence ladder and left associativity."""

    def test_ternary_structure(self):
        """(a) > (b) ? (a) : (b) is Ternary{Binary(a > b), a, b}."""
        node = expr("(a) > (b) ? (a) : (b)", ["a", "b"])
        assert isinstance(node, TernaryExpression)
        assert isinstance(node.condition, BinaryExpression)
        assert node.condition.operator == BinaryOperator.GREATER
        assert var_name(node.condition.left) == "a"
        assert var_name(node.condition.right) == "b"
        assert var_name(node.then_expr) == "a"
        assert var_name(node.else_expr) == "b"

    def test_parenthesized_ternary(self):
        node = expr("((a) > (b) ? (a) : (b))", ["a", "b"])
        assert isinstance(node, TernaryExpression)

    def test_nested_ternary_is_right_associative(self):
        node = expr("a ? b : c ? d : e")
        assert var_name(node.then_expr) == "b"
        assert isinstance(node.else_expr, TernaryExpression)

    def test_multiplicative_binds_tighter(self):
        node = expr("a + b * c")
        assert node.operator == BinaryOperator.ADD
        assert node.right.operator == BinaryOperator.MULTIPLY

    def test_left_associative(self):
        node = expr("a - b - c")
        assert node.operator == BinaryOperator.SUBTRACT
        assert isinstance(node.left, BinaryExpression)
        assert var_name(node.right) == "c"

    def test_shift_below_additive(self):
        node = expr("a << 1 + 2")
        assert node.operator == BinaryOperator.LEFT_SHIFT
        assert node.right.operator == BinaryOperator.ADD

    def test_relational_below_shift(self):
        node = expr("a << 1 < b")
        assert node.operator == BinaryOperator.LESS
        assert node.left.operator == BinaryOperator.LEFT_SHIFT

    def test_equality_below_relational(self):
        node = expr("a == b < c")
        assert node.operator == BinaryOperator.EQUAL
        assert node.right.operator == BinaryOperator.LESS

    def test_assignment_lowest(self):
        node = expr("x = a ? b : c")
        assert isinstance(node, AssignmentExpression)
        assert node.operator == AssignmentOperator.ASSIGN
        assert isinstance(node.value, TernaryExpression)

    def test_assignment_left_folded(self):
        """x = y = 1 folds as (x = y) = 1."""
        node = expr("x = y = 1")
        assert isinstance(node.target, AssignmentExpression)
        assert isinstance(node.value, NumberLiteral)

    def test_compound_assignment(self):
        node = expr("x |= 1")
        assert node.operator == AssignmentOperator.OR_ASSIGN


class TestCasts:
    """Test cast recognition against parenthesized expressions."""

    def test_named_cast(self):
        node = expr("(TickType_t) x")
        assert isinstance(node, CastExpression)
        assert isinstance(node.target_type, NamedType)
        assert node.target_type.name.name == "TickType_t"
        assert var_name(node.operand) == "x"

    def test_void_cast(self):
        node = expr("(void) x")
        assert node.target_type.is_void()

    def test_pointer_chain(self):
        """Each '*' adds a level; const after '*' makes that level immutable."""
        node = expr("(const struct tskTCB * const *) p")
        outer = node.target_type
        assert isinstance(outer, PointerType)
        assert outer.is_mutable
        inner = outer.pointee
        assert isinstance(inner, PointerType)
        assert not inner.is_mutable
        assert inner.pointee.is_struct
        assert inner.pointee.name.name == "tskTCB"

    def test_parameter_is_not_a_type(self):
        """(x) - 1 subtracts when x is a macro parameter."""
        node = expr("(x) - 1", ["x"])
        assert isinstance(node, BinaryExpression)
        assert node.operator == BinaryOperator.SUBTRACT

    def test_parameter_type_before_parenthesized_operand(self):
        """(T) (v) casts v to T even when T is a macro parameter."""
        node = expr("((T) (v))", ["T", "v"])
        assert isinstance(node, CastExpression)
        assert node.target_type.name.name == "T"
        assert var_name(node.operand) == "v"

    def test_parameter_type_before_name(self):
        node = expr("(T) v", ["T", "v"])
        assert isinstance(node, CastExpression)

    def test_parameter_before_star_multiplies(self):
        node = expr("(x) * 2", ["x"])
        assert isinstance(node, BinaryExpression)
        assert node.operator == BinaryOperator.MULTIPLY

    def test_non_parameter_reads_as_cast(self):
        """(T) - 1 is a cast when T is not a parameter."""
        node = expr("(T) - 1")
        assert isinstance(node, CastExpression)
        assert isinstance(node.operand, UnaryExpression)

    def test_nested_cast(self):
        node = expr("(uint8_t)(uint32_t) x")
        assert isinstance(node.operand, CastExpression)

    def test_cast_of_call(self):
        node = expr("(BaseType_t) f(x)")
        assert isinstance(node.operand, CallExpression)


class TestPrefixAndPostfix:
    """Test unary operators, calls and field access."""

    def test_address_of(self):
        node = expr("&x")
        assert isinstance(node, AddressOfExpression)
        assert var_name(node.operand) == "x"

    @pytest.mark.parametrize("text,operator", [
        ("-x", UnaryOperator.NEGATE),
        ("+x", UnaryOperator.PLUS),
        ("!x", UnaryOperator.LOGICAL_NOT),
        ("~x", UnaryOperator.BITWISE_NOT),
        ("++x", UnaryOperator.INCREMENT),
        ("--x", UnaryOperator.DECREMENT),
    ])
    def test_prefix_operators(self, text, operator):
        node = expr(text)
        assert isinstance(node, UnaryExpression)
        assert node.operator == operator
        assert node.is_prefix

    def test_postfix_decrement(self):
        node = expr("x--")
        assert node.operator == UnaryOperator.DECREMENT
        assert not node.is_prefix

    def test_call(self):
        node = expr("f(a, 1)")
        assert isinstance(node, CallExpression)
        assert node.callee.name == "f"
        assert len(node.arguments) == 2

    def test_call_without_arguments(self):
        assert expr("f()").arguments == []

    def test_field_chain(self):
        node = expr("p->a.b")
        assert isinstance(node, FieldAccessExpression)
        assert not node.is_arrow
        assert node.field_name.name == "b"
        assert node.operand.is_arrow
        assert var_name(node.operand.operand) == "p"

    def test_field_of_parenthesized(self):
        node = expr("((tskTCB *) x)->uxPriority")
        assert isinstance(node.operand, CastExpression)


class TestLiteralsAndPasting:
    """Test literal terms, stringification and token pasting."""

    def test_number_suffix_recorded(self):
        node = expr("100u")
        assert isinstance(node, NumberLiteral)
        assert node.text == "100"
        assert node.is_unsigned

    def test_pasted_suffix(self):
        node = expr("1 ## U")
        assert node.text == "1"
        assert node.is_unsigned

    def test_invalid_number(self):
        with pytest.raises(MacroSyntaxError, match="invalid numeric literal"):
            parse_body("1uu", "M")

    def test_string(self):
        assert isinstance(expr('"abc"'), StringLiteral)

    def test_char(self):
        assert isinstance(expr("'a'"), CharLiteral)

    def test_stringify(self):
        node = expr("#x", ["x"])
        assert isinstance(node, StringifyExpression)
        assert node.identifier.name == "x"

    def test_adjacent_strings_concatenate(self):
        node = expr('"pre" #x "post"', ["x"])
        assert isinstance(node, ConcatenationExpression)
        assert [type(p) for p in node.parts] == [StringLiteral, StringifyExpression, StringLiteral]

    def test_token_paste(self):
        node = expr("prefix ## x ## _t", ["x"])
        assert isinstance(node.identifier, ConcatenatedIdentifier)
        assert node.identifier.fragments == ["prefix", "x", "_t"]


class TestInlineAsm:
    """Test __asm recognition."""

    def test_memory_clobber(self):
        node = expr('__asm volatile ( "cpsid i" ::: "memory" )')
        assert isinstance(node, InlineAsmExpression)
        assert node.is_volatile
        assert node.template == ['"cpsid i"']
        assert node.clobbers == ['"memory"']

    def test_output_operand(self):
        node = expr('__asm__ volatile ( "mrs %0, basepri" : "=r" (ulValue) )')
        assert len(node.outputs) == 1
        assert node.outputs[0].constraint == '"=r"'
        assert node.inputs == []

    def test_named_operand(self):
        node = expr('__asm ( "msr basepri, %[v]" :: [v] "r" (x) : "r0", "r1" )')
        assert node.inputs[0].name == "v"
        assert node.clobbers == ['"r0"', '"r1"']

    def test_multiple_templates(self):
        node = expr('__asm volatile ( "dsb" "\\n" "isb" )')
        assert len(node.template) == 3

    def test_asm_without_parens_is_a_name(self):
        node = expr("__asm")
        assert isinstance(node, VariableExpression)


# =============================================================================
# Statement Tests
# =============================================================================

class TestStatements:
    """Test statement forms."""

    def test_empty_body(self):
        body = parse_body("", "M")
        assert isinstance(body.statement, BlockStatement)
        assert body.statement.statements == []

    def test_expression_statement_body(self):
        node = stmt("x = 1;")
        assert isinstance(node, ExpressionStatement)

    def test_block(self):
        node = stmt("{ a = 1; b = 2; }")
        assert isinstance(node, BlockStatement)
        assert len(node.statements) == 2

    def test_declaration(self):
        node = stmt("{ TickType_t t = x; }").statements[0]
        assert isinstance(node, DeclarationStatement)
        assert node.var_type.name.name == "TickType_t"
        assert node.name.name == "t"
        assert var_name(node.initializer) == "x"
        assert not node.is_static

    @pytest.mark.parametrize("text", [
        "{ static int n = 0; }",
        "{ int static n = 0; }",
    ])
    def test_static_declaration(self, text):
        assert stmt(text).statements[0].is_static

    def test_pointer_declaration(self):
        node = stmt("{ const char * p = s; }").statements[0]
        assert isinstance(node.var_type, PointerType)

    def test_multiplication_statement_is_not_declaration(self):
        node = stmt("{ a * b; }").statements[0]
        assert isinstance(node, ExpressionStatement)
        assert node.expression.operator == BinaryOperator.MULTIPLY

    def test_if_else_bare_statements(self):
        """Bare branches become one-element statement lists."""
        node = stmt("if (x) a = 1; else b = 2;")
        assert isinstance(node, IfStatement)
        assert len(node.then_branch) == 1
        assert len(node.else_branch) == 1

    def test_if_block_spliced(self):
        node = stmt("if (x) { a(); b(); }")
        assert len(node.then_branch) == 2
        assert node.else_branch == []

    def test_do_while(self):
        node = stmt("do { x++; } while (x < 10);", ["x"])
        assert isinstance(node, DoWhileStatement)
        assert len(node.body) == 1
        assert node.condition.operator == BinaryOperator.LESS

    def test_do_while_without_semicolon(self):
        """Kernel headers leave the ';' after while( 0 ) to the caller."""
        node = stmt("do { f(); } while( 0 )")
        assert isinstance(node, DoWhileStatement)

    def test_nested_statements(self):
        node = stmt("do { if (x) { y(); } } while (0)")
        assert isinstance(node.body[0], IfStatement)

    def test_multi_line_body(self):
        body = parse_body("{\n  a = 1;\n  b = 2;\n}", "M")
        assert len(body.statement.statements) == 2


# =============================================================================
# Error Tests
# =============================================================================

class TestUnsupportedConstructs:
    """Test well-formed C outside the modelled subset."""

    @pytest.mark.parametrize("text", [
        "a & b",
        "((a) & (b))",
        "a | b",
        "a ^ b",
        "a && b",
        "a || b",
        "a % b",
        "x[1]",
        "union u x = y;",
    ])
    def test_rejected(self, text):
        with pytest.raises(UnsupportedConstructError):
            parse_body(text, "M", ["a", "b"])

    def test_not_a_syntax_error(self):
        """Unsupported constructs are a separate branch of the taxonomy."""
        with pytest.raises(UnsupportedConstructError) as exc_info:
            parse_body("a & b", "M", ["a", "b"])
        assert not isinstance(exc_info.value, MacroSyntaxError)

    def test_location_names_macro(self):
        with pytest.raises(UnsupportedConstructError) as exc_info:
            parse_body("a & b", "MASK", ["a", "b"])
        location = exc_info.value.location
        assert location.filename == "<macro MASK>"
        assert (location.line, location.column) == (1, 3)

    def test_call_through_field(self):
        with pytest.raises(UnsupportedConstructError):
            parse_body("p->f(x)", "M")

    def test_abandoned_alternative_does_not_leak(self):
        """'&' seen while trying a cast does not reject a valid body."""
        node = expr("(a * &b)")
        assert node.operator == BinaryOperator.MULTIPLY
        assert isinstance(node.right, AddressOfExpression)


class TestSyntaxErrors:
    """Test token streams that match no production."""

    @pytest.mark.parametrize("text", [
        "a +",
        "(a",
        "a b",
        "{ a = 1;",
        "if x a;",
        "do { } until (0)",
        "{ int n; }",
        "# 1",
    ])
    def test_rejected(self, text):
        with pytest.raises(MacroSyntaxError):
            parse_body(text, "M")

    def test_message_has_position(self):
        with pytest.raises(MacroSyntaxError) as exc_info:
            parse_body("(a", "M")
        assert str(exc_info.value).startswith("<macro M>:1:")


# =============================================================================
# AST Printer Tests
# =============================================================================

class TestASTPrinter:
    """Test the --dump-ast tree format."""

    def test_ternary_dump(self):
        body = parse_body("(a) > (b) ? (a) : (b)", "MAX", ["a", "b"])
        assert ASTPrinter().print(body).splitlines() == [
            "Body (expression)",
            "  Ternary",
            "    Binary >",
            "      Variable a",
            "      Variable b",
            "    Variable a",
            "    Variable b",
        ]

    def test_statement_dump(self):
        body = parse_body("do { f(x); } while (0)", "M", ["x"])
        text = ASTPrinter().print(body)
        assert text.startswith("Body (statement)\n  DoWhile")
        assert "Call f" in text
        assert "While:" in text
