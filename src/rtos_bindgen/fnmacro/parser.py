"""
Macro Recursive Descent Parser
==============================

This module parses the tokens of a function-like macro signature and body
into the AST defined in fnmacro.ast.

Grammar (Simplified EBNF)
-------------------------
signature       ::= IDENTIFIER '(' ( '...' | params? ) ')'
params          ::= IDENTIFIER (',' IDENTIFIER)* (',' '...')?

body            ::= <empty> | statement | expression

statement       ::= block | if_stmt | do_stmt | declaration | expr_stmt
block           ::= '{' statement* '}'
if_stmt         ::= 'if' '(' expression ')' statement ('else' statement)?
do_stmt         ::= 'do' statement 'while' '(' expression ')' ';'?
declaration     ::= 'static'? type 'static'? identifier '=' expression ';'
expr_stmt       ::= expression ';'

type            ::= 'const'* 'struct'? identifier 'const'* ('*' 'const'*)*
identifier      ::= IDENTIFIER ('##' IDENTIFIER)*

Expression Precedence (lowest to highest)
-----------------------------------------
1.  assignment     = += -= *= /= %= <<= >>= &= ^= |=   (left-folded)
2.  ternary        ?:                                  (right-associative)
3.  equality       == !=
4.  relational     < <= > >=
5.  shift          << >>
6.  additive       + -
7.  multiplicative * /
8.  prefix         (type) cast, &, ++ -- + - ! ~
9.  postfix        call, . ->, __asm(...), trailing ++ --
10. primary        literals, #param, identifiers, ( expression )

The bitwise and logical operators, the remainder operator, array
subscripts and unions have no production. Meeting one of them where an
operator or terminator is expected raises UnsupportedConstructError. Inside
a speculative alternative it only abandons that alternative, and the
construct is reported if the whole body then fails to parse.

Backtracking
------------
The parser looks ahead one token except at three genuinely ambiguous
spots, where it saves its position, tries one alternative and rewinds on
MacroSyntaxError: a parenthesis in prefix position (cast or
parenthesized expression), a statement that may be a declaration, and
the inline assembly form after __asm.

Example Usage
-------------
>>> from rtos_bindgen.fnmacro.parser import parse_body
>>> body = parse_body("((a) > (b) ? (a) : (b))", "MAX")
>>> type(body.expression).__name__
'TernaryExpression'
"""

from typing import Callable, Iterable, Optional, TypeVar

from rtos_bindgen.fnmacro.ast import (
    VA_ARGS,
    VARIADIC,
    AddressOfExpression,
    AsmOperand,
    AssignmentExpression,
    AssignmentOperator,
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
    Expression,
    ExpressionStatement,
    FieldAccessExpression,
    Identifier,
    IfStatement,
    InlineAsmExpression,
    MacroBody,
    MacroSignature,
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
from rtos_bindgen.errors import SourceLocation
from rtos_bindgen.fnmacro.errors import (
    MacroError,
    MacroSyntaxError,
    MissingTokenError,
    UnexpectedTokenError,
    UnsupportedConstructError,
)
from rtos_bindgen.fnmacro.lexer import MacroLexer, MacroToken, MacroTokenType
from rtos_bindgen.fnmacro.literals import merge_suffix, parse_number


T = TypeVar("T")

TT = MacroTokenType


# Tokens that never start or continue any production
UNSUPPORTED_TOKENS: dict[MacroTokenType, str] = {
    TT.AMPERSAND: "bitwise operator '&'",
    TT.PIPE: "bitwise operator '|'",
    TT.CARET: "bitwise operator '^'",
    TT.AND: "logical operator '&&'",
    TT.OR: "logical operator '||'",
    TT.PERCENT: "remainder operator '%'",
    TT.LBRACKET: "array subscript",
    TT.RBRACKET: "array subscript",
    TT.UNION: "union type",
}

ASSIGNMENT_OPERATORS: dict[MacroTokenType, AssignmentOperator] = {
    TT.ASSIGN: AssignmentOperator.ASSIGN,
    TT.PLUS_ASSIGN: AssignmentOperator.ADD_ASSIGN,
    TT.MINUS_ASSIGN: AssignmentOperator.SUB_ASSIGN,
    TT.STAR_ASSIGN: AssignmentOperator.MUL_ASSIGN,
    TT.SLASH_ASSIGN: AssignmentOperator.DIV_ASSIGN,
    TT.PERCENT_ASSIGN: AssignmentOperator.MOD_ASSIGN,
    TT.LSHIFT_ASSIGN: AssignmentOperator.LSHIFT_ASSIGN,
    TT.RSHIFT_ASSIGN: AssignmentOperator.RSHIFT_ASSIGN,
    TT.AND_ASSIGN: AssignmentOperator.AND_ASSIGN,
    TT.XOR_ASSIGN: AssignmentOperator.XOR_ASSIGN,
    TT.OR_ASSIGN: AssignmentOperator.OR_ASSIGN,
}

PREFIX_OPERATORS: dict[MacroTokenType, UnaryOperator] = {
    TT.INCREMENT: UnaryOperator.INCREMENT,
    TT.DECREMENT: UnaryOperator.DECREMENT,
    TT.PLUS: UnaryOperator.PLUS,
    TT.MINUS: UnaryOperator.NEGATE,
    TT.NOT: UnaryOperator.LOGICAL_NOT,
    TT.TILDE: UnaryOperator.BITWISE_NOT,
}

# Tokens that start a prefix term and also a binary operator, so '(x) - 1'
# with x a macro parameter is a subtraction rather than a cast
AMBIGUOUS_CAST_FOLLOWERS = (
    TT.PLUS, TT.MINUS, TT.STAR, TT.AMPERSAND, TT.INCREMENT, TT.DECREMENT,
)

# Identifiers that introduce inline assembly
ASM_KEYWORDS = ("__asm", "__asm__")


class MacroParser:
    """
    Recursive descent parser for one macro's signature or body.

    Usage:
        tokens = list(MacroLexer(text, "<macro NAME>").tokenize())
        parser = MacroParser(tokens, "<macro NAME>", text.splitlines())
        body = parser.parse_body()

    A parser instance is used for exactly one parse_signature() or
    parse_body() call.

    Macro parameter names are passed in so that '(param)' followed by a
    token that can continue a binary expression is not read as a cast:
    '(x) - 1' subtracts, while '(T) (v)' still casts v to T.
    """

    def __init__(
        self,
        tokens: list[MacroToken],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
        parameters: Iterable[str] = (),
    ):
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []
        self.parameters = {VA_ARGS if name == VARIADIC else name for name in parameters}
        self._pos = 0

        # Nesting depth of _attempt(); unsupported tokens met while
        # speculating are recorded instead of raised
        self._speculation = 0
        self._unsupported: Optional[UnsupportedConstructError] = None

    # =========================================================================
    # Entry Points
    # =========================================================================

    def parse_signature(self) -> MacroSignature:
        """
        Parse NAME(params).

        Raises:
            MacroSyntaxError: If the text is not a function-like signature
        """
        name_token = self._expect(TT.IDENTIFIER, "macro name")
        self._expect(TT.LPAREN, "'(' after macro name")

        parameters: list[str] = []
        if not self._check(TT.RPAREN):
            while True:
                if self._match(TT.ELLIPSIS):
                    parameters.append(VARIADIC)
                    break
                parameters.append(self._expect(TT.IDENTIFIER, "parameter name").value)
                if not self._match(TT.COMMA):
                    break

        self._expect(TT.RPAREN, "')'")
        self._expect_end()

        return MacroSignature(
            location=name_token.location,
            name=name_token.value,
            parameters=parameters,
        )

    def parse_body(self) -> MacroBody:
        """
        Parse a macro body.

        A statement is tried first, then a lone expression; either must
        consume every token. When both fail, the error that got furthest
        into the body is reported, preferring an unsupported construct met
        along the way.
        """
        location = self._peek().location

        if self._at_end():
            return MacroBody(location=location, statement=BlockStatement(location=location))

        try:
            statement = self._parse_statement()
            self._expect_end()
            return MacroBody(location=location, statement=statement)
        except MacroSyntaxError as statement_error:
            self._pos = 0
            try:
                expression = self._parse_expression()
                self._expect_end()
                return MacroBody(location=location, expression=expression)
            except MacroSyntaxError as expression_error:
                error = self._furthest(statement_error, expression_error)
                if self._unsupported is not None:
                    error = self._furthest(error, self._unsupported, prefer_second=True)
                raise error from None

    # =========================================================================
    # Token Helpers
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().type == TT.EOF

    def _peek(self, offset: int = 0) -> MacroToken:
        """Look at token at current position + offset."""
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _advance(self) -> MacroToken:
        """Consume and return the current token."""
        if not self._at_end():
            token = self.tokens[self._pos]
            self._pos += 1
            return token
        return self.tokens[-1]

    def _check(self, *types: MacroTokenType) -> bool:
        return self._peek().type in types

    def _match(self, *types: MacroTokenType) -> Optional[MacroToken]:
        """Consume the current token if it is one of the given types."""
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: MacroTokenType, description: str) -> MacroToken:
        """
        Consume a token of the given type.

        Raises:
            UnsupportedConstructError: If an unmodelled operator is found instead
            MissingTokenError: If any other token is found instead
        """
        if self._check(token_type):
            return self._advance()

        current = self._peek()
        self._reject_unsupported(current)
        raise MissingTokenError(
            description,
            current.location,
            self._get_source_line(current.line),
        )

    def _expect_end(self) -> None:
        token = self._peek()
        if token.type != TT.EOF:
            raise self._unexpected(token, "end of macro")

    def _unexpected(self, token: MacroToken, expected: str) -> UnexpectedTokenError:
        self._reject_unsupported(token)
        return UnexpectedTokenError(
            token.text,
            expected,
            token.location,
            self._get_source_line(token.line),
        )

    def _reject_unsupported(self, token: MacroToken) -> None:
        if token.type in UNSUPPORTED_TOKENS:
            self._unsupported_construct(UNSUPPORTED_TOKENS[token.type], token.location)

    def _unsupported_construct(self, construct: str, location: SourceLocation) -> None:
        """
        Raise UnsupportedConstructError, or a plain syntax error while
        speculating so that the enclosing alternative can be abandoned.
        """
        error = UnsupportedConstructError(
            construct,
            location,
            self._get_source_line(location.line),
        )
        if self._speculation == 0:
            raise error

        if self._unsupported is None or self._furthest(self._unsupported, error) is error:
            self._unsupported = error
        raise MacroSyntaxError(f"unsupported construct: {construct}", location)

    def _attempt(self, production: Callable[[], T]) -> Optional[T]:
        """Run a production, rewinding and returning None on a syntax error."""
        saved = self._pos
        self._speculation += 1
        try:
            return production()
        except MacroSyntaxError:
            self._pos = saved
            return None
        finally:
            self._speculation -= 1

    def _get_source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    @staticmethod
    def _furthest(first: MacroError, second: MacroError, prefer_second: bool = False) -> MacroError:
        """Return whichever error lies further into the macro text."""
        def position(error: MacroError) -> tuple[int, int]:
            if error.location is None:
                return (0, 0)
            return (error.location.line, error.location.column)

        if prefer_second:
            return second if position(second) >= position(first) else first
        return second if position(second) > position(first) else first

    # =========================================================================
    # Identifiers and Types
    # =========================================================================

    def _parse_identifier(self) -> Identifier:
        """Parse a name, folding '## name' suffixes into one identifier."""
        token = self._peek()
        if token.type != TT.IDENTIFIER:
            raise UnexpectedTokenError(
                token.text,
                "identifier",
                token.location,
                self._get_source_line(token.line),
            )
        self._advance()

        fragments = [token.value]
        while self._check(TT.HASH_HASH) and self._peek(1).type == TT.IDENTIFIER:
            self._advance()
            fragments.append(self._advance().value)

        if len(fragments) == 1:
            return SimpleIdentifier(location=token.location, name=token.value)
        return ConcatenatedIdentifier(location=token.location, fragments=fragments)

    def _parse_type(self) -> TypeNode:
        """
        Parse [const] [struct] name [const] ('*' [const])*.

        Each '*' wraps the type parsed so far in a new pointer level.
        """
        location = self._peek().location

        while self._match(TT.CONST):
            pass

        if self._check(TT.UNION):
            self._reject_unsupported(self._peek())

        is_struct = self._match(TT.STRUCT) is not None
        name = self._parse_identifier()

        while self._match(TT.CONST):
            pass

        result: TypeNode = NamedType(location=location, name=name, is_struct=is_struct)

        while self._check(TT.STAR):
            star = self._advance()
            is_mutable = True
            while self._match(TT.CONST):
                is_mutable = False
            result = PointerType(location=star.location, pointee=result, is_mutable=is_mutable)

        return result

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Statement:
        if self._check(TT.LBRACE):
            return self._parse_block()
        if self._check(TT.IF):
            return self._parse_if_statement()
        if self._check(TT.DO):
            return self._parse_do_while_statement()

        declaration = self._attempt(self._parse_declaration)
        if declaration is not None:
            return declaration

        return self._parse_expression_statement()

    def _parse_block(self) -> BlockStatement:
        location = self._expect(TT.LBRACE, "'{'").location

        statements = []
        while not self._check(TT.RBRACE, TT.EOF):
            statements.append(self._parse_statement())

        self._expect(TT.RBRACE, "'}'")
        return BlockStatement(location=location, statements=statements)

    def _parse_branch(self) -> list[Statement]:
        """Parse an if/else/do branch as a statement list."""
        statement = self._parse_statement()
        if isinstance(statement, BlockStatement):
            return statement.statements
        return [statement]

    def _parse_condition(self) -> Expression:
        self._expect(TT.LPAREN, "'('")
        condition = self._parse_expression()
        self._expect(TT.RPAREN, "')'")
        return condition

    def _parse_if_statement(self) -> IfStatement:
        location = self._advance().location
        condition = self._parse_condition()
        then_branch = self._parse_branch()

        else_branch: list[Statement] = []
        if self._match(TT.ELSE):
            else_branch = self._parse_branch()

        return IfStatement(
            location=location,
            condition=condition,
            then_branch=then_branch,
            else_branch=else_branch,
        )

    def _parse_do_while_statement(self) -> DoWhileStatement:
        """
        Parse do stmt while (cond).

        The trailing ';' is optional: kernel headers write
        do { ... } while( 0 ) and leave the semicolon to the caller.
        """
        location = self._advance().location
        body = self._parse_branch()
        self._expect(TT.WHILE, "'while'")
        condition = self._parse_condition()
        self._match(TT.SEMICOLON)
        return DoWhileStatement(location=location, body=body, condition=condition)

    def _parse_declaration(self) -> DeclarationStatement:
        location = self._peek().location

        is_static = self._match(TT.STATIC) is not None
        var_type = self._parse_type()
        if not is_static:
            is_static = self._match(TT.STATIC) is not None

        name = self._parse_identifier()
        self._expect(TT.ASSIGN, "'=' in declaration")
        initializer = self._parse_expression()
        self._expect(TT.SEMICOLON, "';'")

        return DeclarationStatement(
            location=location,
            var_type=var_type,
            name=name,
            initializer=initializer,
            is_static=is_static,
        )

    def _parse_expression_statement(self) -> ExpressionStatement:
        expression = self._parse_expression()
        self._expect(TT.SEMICOLON, "';'")
        return ExpressionStatement(location=expression.location, expression=expression)

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """Parse assignment and compound assignment (left-folded)."""
        expr = self._parse_ternary()

        while self._peek().type in ASSIGNMENT_OPERATORS:
            op_token = self._advance()
            value = self._parse_ternary()
            expr = AssignmentExpression(
                location=expr.location,
                operator=ASSIGNMENT_OPERATORS[op_token.type],
                target=expr,
                value=value,
            )

        return expr

    def _parse_ternary(self) -> Expression:
        expr = self._parse_equality()

        if self._match(TT.QUESTION):
            then_expr = self._parse_ternary()
            self._expect(TT.COLON, "':'")
            else_expr = self._parse_ternary()
            return TernaryExpression(
                location=expr.location,
                condition=expr,
                then_expr=then_expr,
                else_expr=else_expr,
            )

        return expr

    def _parse_equality(self) -> Expression:
        return self._parse_binary(
            self._parse_relational,
            {
                TT.EQ: BinaryOperator.EQUAL,
                TT.NE: BinaryOperator.NOT_EQUAL,
            },
        )

    def _parse_relational(self) -> Expression:
        return self._parse_binary(
            self._parse_shift,
            {
                TT.LT: BinaryOperator.LESS,
                TT.LE: BinaryOperator.LESS_EQ,
                TT.GT: BinaryOperator.GREATER,
                TT.GE: BinaryOperator.GREATER_EQ,
            },
        )

    def _parse_shift(self) -> Expression:
        return self._parse_binary(
            self._parse_additive,
            {
                TT.LSHIFT: BinaryOperator.LEFT_SHIFT,
                TT.RSHIFT: BinaryOperator.RIGHT_SHIFT,
            },
        )

    def _parse_additive(self) -> Expression:
        return self._parse_binary(
            self._parse_multiplicative,
            {
                TT.PLUS: BinaryOperator.ADD,
                TT.MINUS: BinaryOperator.SUBTRACT,
            },
        )

    def _parse_multiplicative(self) -> Expression:
        return self._parse_binary(
            self._parse_prefix,
            {
                TT.STAR: BinaryOperator.MULTIPLY,
                TT.SLASH: BinaryOperator.DIVIDE,
            },
        )

    def _parse_binary(
        self,
        operand_parser: Callable[[], Expression],
        operators: dict[MacroTokenType, BinaryOperator],
    ) -> Expression:
        """
        Generic left-associative binary expression parser.

        Args:
            operand_parser: Parser for the next tighter level
            operators: Map of token types to binary operators
        """
        expr = operand_parser()

        while self._peek().type in operators:
            op_token = self._advance()
            right = operand_parser()
            expr = BinaryExpression(
                location=expr.location,
                operator=operators[op_token.type],
                left=expr,
                right=right,
            )

        return expr

    def _parse_prefix(self) -> Expression:
        """Parse casts, address-of and prefix unary operators."""
        token = self._peek()

        if token.type == TT.LPAREN:
            cast = self._attempt(self._parse_cast)
            if cast is not None:
                return cast
            return self._parse_postfix()

        if token.type == TT.AMPERSAND:
            self._advance()
            operand = self._parse_prefix()
            return AddressOfExpression(location=token.location, operand=operand)

        if token.type in PREFIX_OPERATORS:
            self._advance()
            operand = self._parse_prefix()
            return UnaryExpression(
                location=token.location,
                operator=PREFIX_OPERATORS[token.type],
                operand=operand,
                is_prefix=True,
            )

        return self._parse_postfix()

    def _parse_cast(self) -> CastExpression:
        location = self._expect(TT.LPAREN, "'('").location
        target_type = self._parse_type()
        self._expect(TT.RPAREN, "')'")
        if (
            isinstance(target_type, NamedType)
            and isinstance(target_type.name, SimpleIdentifier)
            and target_type.name.name in self.parameters
            and self._check(*AMBIGUOUS_CAST_FOLLOWERS)
        ):
            raise MacroSyntaxError("macro parameter is not a type", location)
        operand = self._parse_prefix()
        return CastExpression(location=location, target_type=target_type, operand=operand)

    def _parse_postfix(self) -> Expression:
        """Parse calls, field access chains and trailing ++/--."""
        expr = self._parse_primary()

        if isinstance(expr, (NumberLiteral, StringLiteral, CharLiteral,
                             StringifyExpression, ConcatenationExpression)):
            return expr

        if self._is_asm_keyword(expr):
            asm = self._attempt(lambda: self._parse_inline_asm(expr.location))
            if asm is not None:
                return asm

        while True:
            if self._match(TT.LPAREN):
                expr = self._parse_call(expr)
            elif self._check(TT.DOT, TT.ARROW):
                access = self._advance()
                field_name = self._parse_identifier()
                expr = FieldAccessExpression(
                    location=expr.location,
                    operand=expr,
                    field_name=field_name,
                    is_arrow=access.type == TT.ARROW,
                )
            else:
                break

        if self._check(TT.INCREMENT, TT.DECREMENT):
            op_token = self._advance()
            expr = UnaryExpression(
                location=expr.location,
                operator=PREFIX_OPERATORS[op_token.type],
                operand=expr,
                is_prefix=False,
            )

        return expr

    def _parse_call(self, callee: Expression) -> CallExpression:
        """Parse call arguments; the opening '(' is already consumed."""
        if not isinstance(callee, VariableExpression):
            self._unsupported_construct("call through a non-identifier expression", callee.location)

        arguments = []
        if not self._check(TT.RPAREN):
            while True:
                arguments.append(self._parse_expression())
                if not self._match(TT.COMMA):
                    break

        self._expect(TT.RPAREN, "')'")

        return CallExpression(
            location=callee.location,
            callee=callee.identifier,
            arguments=arguments,
        )

    def _parse_primary(self) -> Expression:
        """Parse literals, stringification, names and parenthesized expressions."""
        token = self._peek()

        if token.type in (TT.STRING, TT.HASH):
            return self._parse_string_sequence()

        if token.type == TT.NUMBER:
            return self._parse_number_literal()

        if token.type == TT.CHAR_LITERAL:
            self._advance()
            return CharLiteral(location=token.location, text=token.value)

        if token.type == TT.IDENTIFIER:
            identifier = self._parse_identifier()
            return VariableExpression(location=token.location, identifier=identifier)

        if token.type == TT.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect(TT.RPAREN, "')'")
            return expr

        raise self._unexpected(token, "expression")

    # =========================================================================
    # Literals
    # =========================================================================

    def _parse_string_sequence(self) -> Expression:
        """Parse adjacent string literals and #param into one expression."""
        parts = [self._parse_string_piece()]
        while self._check(TT.STRING, TT.HASH):
            parts.append(self._parse_string_piece())

        if len(parts) == 1:
            return parts[0]
        return ConcatenationExpression(location=parts[0].location, parts=parts)

    def _parse_string_piece(self) -> Expression:
        token = self._advance()
        if token.type == TT.STRING:
            return StringLiteral(location=token.location, text=token.value)

        name = self._expect(TT.IDENTIFIER, "parameter name after '#'")
        return StringifyExpression(
            location=token.location,
            identifier=SimpleIdentifier(location=name.location, name=name.value),
        )

    def _parse_number_literal(self) -> NumberLiteral:
        """
        Parse a numeric literal and any pasted suffix tokens (1 ## U).
        """
        token = self._advance()
        value = parse_number(token.value)
        if value is None:
            raise MacroSyntaxError(
                f"invalid numeric literal '{token.value}'",
                token.location,
                source_line=self._get_source_line(token.line),
            )

        is_unsigned, size = value.is_unsigned, value.size
        if not value.is_float:
            while self._check(TT.HASH_HASH) and self._peek(1).type == TT.IDENTIFIER:
                merged = merge_suffix(is_unsigned, size, self._peek(1).value)
                if merged is None:
                    break
                self._advance()
                self._advance()
                is_unsigned, size = merged

        return NumberLiteral(
            location=token.location,
            text=value.text,
            is_unsigned=is_unsigned,
            size=size,
            is_float=value.is_float,
        )

    # =========================================================================
    # Inline Assembly
    # =========================================================================

    @staticmethod
    def _is_asm_keyword(expr: Expression) -> bool:
        return (
            isinstance(expr, VariableExpression)
            and isinstance(expr.identifier, SimpleIdentifier)
            and expr.identifier.name in ASM_KEYWORDS
        )

    def _parse_inline_asm(self, location: SourceLocation) -> InlineAsmExpression:
        """
        Parse [volatile] ( templates [: outputs [: inputs [: clobbers]]] ).
        """
        is_volatile = self._match(TT.VOLATILE) is not None
        self._expect(TT.LPAREN, "'(' after __asm")

        template = [self._expect(TT.STRING, "assembler template").value]
        while self._check(TT.STRING, TT.COMMA):
            self._match(TT.COMMA)
            template.append(self._expect(TT.STRING, "assembler template").value)

        outputs: list[AsmOperand] = []
        inputs: list[AsmOperand] = []
        clobbers: list[str] = []

        if self._match(TT.COLON):
            outputs = self._parse_asm_operands()
            if self._match(TT.COLON):
                inputs = self._parse_asm_operands()
                if self._match(TT.COLON):
                    clobbers = self._parse_asm_clobbers()

        self._expect(TT.RPAREN, "')'")

        return InlineAsmExpression(
            location=location,
            template=template,
            outputs=outputs,
            inputs=inputs,
            clobbers=clobbers,
            is_volatile=is_volatile,
        )

    def _parse_asm_operands(self) -> list[AsmOperand]:
        operands: list[AsmOperand] = []
        if not self._check(TT.STRING, TT.LBRACKET):
            return operands

        while True:
            location = self._peek().location
            name = None
            if self._match(TT.LBRACKET):
                name = self._expect(TT.IDENTIFIER, "operand name").value
                self._expect(TT.RBRACKET, "']'")
            constraint = self._expect(TT.STRING, "operand constraint").value
            self._expect(TT.LPAREN, "'('")
            expression = self._parse_expression()
            self._expect(TT.RPAREN, "')'")
            operands.append(AsmOperand(
                location=location,
                name=name,
                constraint=constraint,
                expression=expression,
            ))
            if not self._match(TT.COMMA):
                return operands

    def _parse_asm_clobbers(self) -> list[str]:
        clobbers: list[str] = []
        if not self._check(TT.STRING):
            return clobbers

        while True:
            clobbers.append(self._expect(TT.STRING, "clobber").value)
            if not self._match(TT.COMMA):
                return clobbers


# =============================================================================
# Convenience Functions
# =============================================================================

def _make_parser(text: str, filename: str, parameters: Iterable[str] = ()) -> MacroParser:
    tokens = list(MacroLexer(text, filename).tokenize())
    return MacroParser(tokens, filename, text.splitlines(), parameters)


def parse_signature(text: str, filename: str = "<input>") -> MacroSignature:
    """Parse signature text such as 'xQueueSend(xQueue, pvItem, xTicks)'."""
    return _make_parser(text, filename).parse_signature()


def parse_body(text: str, macro_name: str = "", parameters: Iterable[str] = ()) -> MacroBody:
    """Parse body text; diagnostics are attributed to <macro macro_name>."""
    filename = f"<macro {macro_name}>" if macro_name else "<input>"
    return _make_parser(text, filename, parameters).parse_body()
