# =============================================================================
# test_fnmacro_context.py - Parameter Usage Classification Tests
# =============================================================================
# Tests for the pass that decides whether a macro becomes a pattern macro
# or a typed function.
#
# Test coverage includes:
#   - Identifier uses (stringify, token paste)
#   - Expression uses (operands, field bases, conditions)
#   - Threaded-through parameters (call arguments, casts, callees)
#   - Monotonic classification
#   - Variadic parameters
# =============================================================================

import pytest

from rtos_bindgen.fnmacro.parser import parse_body, parse_signature
from rtos_bindgen.fnmacro.context import (
    ArgKind,
    MacroContext,
    binding_name,
    classify,
)


# =============================================================================
# Helper Functions
# =============================================================================

def analyze(signature: str, body: str):
    sig = parse_signature(signature)
    return classify(sig, parse_body(body, sig.name, sig.parameters))


def kinds(signature: str, body: str) -> dict:
    return dict(analyze(signature, body).parameters)


# =============================================================================
# Classification Tests
# =============================================================================

class TestExpressionUse:
    """Test parameters used as values."""

    def test_ternary_operands(self):
        fn = analyze("MAX(a, b)", "((a) > (b) ? (a) : (b))")
        assert fn.parameters == [("a", ArgKind.EXPRESSION), ("b", ArgKind.EXPRESSION)]
        assert fn.is_pattern_macro

    def test_field_base(self):
        assert kinds("F(p)", "p->uxPriority")["p"] == ArgKind.EXPRESSION

    def test_field_name_is_not_a_use(self):
        """A field spelled like a parameter does not classify it."""
        result = kinds("F(p, x)", "p->x")
        assert result["x"] == ArgKind.UNKNOWN

    def test_condition(self):
        assert kinds("F(x)", "if (x) { f(); }")["x"] == ArgKind.EXPRESSION

    def test_nested_argument_expression(self):
        """An argument that is more than a bare name is a value use."""
        assert kinds("F(x)", "f(x + 1)")["x"] == ArgKind.EXPRESSION

    def test_assignment_target(self):
        assert kinds("F(x)", "x = 0")["x"] == ArgKind.EXPRESSION


class TestIdentifierUse:
    """Test parameters used syntactically."""

    def test_stringify(self):
        fn = analyze("STRINGIFY(x)", "#x")
        assert fn.parameters == [("x", ArgKind.IDENTIFIER)]
        assert fn.is_pattern_macro

    def test_token_paste(self):
        assert kinds("F(x)", "prefix ## x")["x"] == ArgKind.IDENTIFIER

    def test_pasted_callee(self):
        assert kinds("F(x)", "x ## _init()")["x"] == ArgKind.IDENTIFIER

    @pytest.mark.parametrize("body", [
        "x + #x",
        "f(#x, x + 1)",
    ])
    def test_identifier_overrides_expression(self, body):
        """IDENTIFIER wins whichever use comes first."""
        assert kinds("F(x)", body)["x"] == ArgKind.IDENTIFIER


class TestThreadedThrough:
    """Test parameters that are only passed along."""

    def test_call_arguments(self):
        fn = analyze(
            "xQueueSend(xQueue, pvItemToQueue, xTicksToWait)",
            "xQueueGenericSend( ( xQueue ), ( pvItemToQueue ), ( xTicksToWait ), queueSEND_TO_BACK )",
        )
        assert all(kind is ArgKind.UNKNOWN for _, kind in fn.parameters)
        assert not fn.is_pattern_macro
        assert fn.functions == ["xQueueGenericSend"]

    def test_cast_argument(self):
        assert kinds("F(x)", "f( ( void * ) x )")["x"] == ArgKind.UNKNOWN

    def test_cast_target_parameter(self):
        """A parameter naming a cast target type is captured as an identifier."""
        result = kinds("CAST(T, v)", "((T) (v))")
        assert result["T"] == ArgKind.IDENTIFIER
        assert result["v"] == ArgKind.EXPRESSION

    def test_pointer_cast_target_parameter(self):
        result = kinds("F(T, p)", "f( ( T * ) p )")
        assert result["T"] == ArgKind.IDENTIFIER
        assert result["p"] == ArgKind.UNKNOWN

    def test_standalone_cast_operand(self):
        assert kinds("F(x)", "(void) x")["x"] == ArgKind.EXPRESSION

    def test_callee_named_like_parameter(self):
        assert kinds("F(fn)", "fn(1)")["fn"] == ArgKind.UNKNOWN

    def test_declared_type_is_not_a_use(self):
        assert kinds("F(T)", "{ T t = 0; }")["T"] == ArgKind.UNKNOWN

    def test_unused_parameter(self):
        assert kinds("F(x)", "0")["x"] == ArgKind.UNKNOWN

    def test_functions_first_seen_order(self):
        fn = analyze("F(a)", "{ g(a); f(a); g(); }")
        assert fn.functions == ["g", "f"]


class TestVariadic:
    """Test the variadic parameter."""

    def test_forwarded(self):
        """Forwarded variadic arguments still need a pattern macro."""
        fn = analyze("LOG(fmt, ...)", "printf(fmt, __VA_ARGS__)")
        assert fn.parameters == [("fmt", ArgKind.UNKNOWN), ("...", ArgKind.EXPRESSION)]
        assert fn.is_pattern_macro

    def test_stringified(self):
        fn = analyze("S(...)", "#__VA_ARGS__")
        assert fn.parameters == [("...", ArgKind.IDENTIFIER)]

    def test_unused(self):
        assert kinds("F(a, ...)", "f(a)")["..."] == ArgKind.EXPRESSION

    def test_binding_name(self):
        assert binding_name("...") == "__VA_ARGS__"
        assert binding_name("x") == "x"


# =============================================================================
# MacroContext Tests
# =============================================================================

class TestMacroContext:
    """Test the classification table directly."""

    def test_starts_unknown(self):
        context = MacroContext(["a", "..."])
        assert context.arguments == {"a": ArgKind.UNKNOWN, "__VA_ARGS__": ArgKind.UNKNOWN}

    def test_unclassified_needs_no_pattern_macro(self):
        assert not MacroContext(["a", "b"]).needs_pattern_macro()

    def test_expression_does_not_downgrade_identifier(self):
        context = MacroContext(["a"])
        context.mark_identifier("a")
        context.mark_expression("a")
        assert context.kind("a") == ArgKind.IDENTIFIER

    def test_identifier_upgrades_expression(self):
        context = MacroContext(["a"])
        context.mark_expression("a")
        context.mark_identifier("a")
        assert context.kind("a") == ArgKind.IDENTIFIER

    def test_non_parameters_ignored(self):
        context = MacroContext(["a"])
        context.mark_expression("b")
        context.mark_identifier("c")
        assert not context.is_parameter("b")
        assert list(context.arguments) == ["a"]

    def test_needs_pattern_macro(self):
        context = MacroContext(["a", "b"])
        context.mark_expression("b")
        assert context.needs_pattern_macro()

    def test_functions_deduplicated(self):
        context = MacroContext([])
        context.add_function("f")
        context.add_function("f")
        assert context.functions == ["f"]
