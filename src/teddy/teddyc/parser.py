"""
Teddy Recursive Descent Parser
==============================

This module implements a recursive descent parser for the Teddy language.
It takes the token list produced by the lexer and builds an Abstract
Syntax Tree (AST).

Grammar (Simplified EBNF)
-------------------------
program          ::= statement*
statement        ::= function_def | if_let | if_stmt | enum_def
                   | variable_decl | return_stmt | print_stmt | expr ';'

function_def     ::= 'func' prototype block
prototype        ::= IDENTIFIER arg_list '->' type
arg_list         ::= '(' (IDENTIFIER ':' type (',' IDENTIFIER ':' type)*)? ')'
block            ::= '{' statement* '}'

if_stmt          ::= 'if' expr block
if_let           ::= 'if' 'let' IDENTIFIER ':' type '=' '.' IDENTIFIER arg_list? block
enum_def         ::= 'enum' IDENTIFIER '{' ('case' IDENTIFIER arg_list? ';')* '}'
variable_decl    ::= ('let' | 'var') IDENTIFIER ':' type
                     (';' | '=' (enum_construction | expr) ';')
enum_construction::= '.' IDENTIFIER expr_list?
return_stmt      ::= 'return' expr ';'
print_stmt       ::= 'print' expr_list ';'
expr_list        ::= '(' (expr (',' expr)*)? ')'

expr             ::= primary (OPERATOR primary)*
primary          ::= IDENTIFIER expr_list? | INTEGER | FLOAT | STRING | BOOL
                   | '(' expr ')'
type             ::= 'Int' | 'Float' | 'String' | 'Bool' | 'Void' | IDENTIFIER

Operator Precedence
-------------------
Binary operators are parsed by precedence climbing using the precedence
carried on each OPERATOR token:

    + -   20
    * /   40

Operators of equal precedence associate to the left.

Error Handling
--------------
The first grammar violation raises ParseError; there is no recovery and
no partial AST.

Example Usage
-------------
>>> from teddy.teddyc.parser import parse_source
>>> program = parse_source('func one() -> Int { return 1; }')
>>> len(program)
1
"""

from typing import Optional

from teddy.teddyc.lexer import Token, TokenType, tokenize
from teddy.teddyc.ast import (
    ProgramNode,
    ASTNode,
    FunctionNode,
    PrototypeNode,
    VariableNode,
    Mutability,
    AssignExpression,
    ReturnNode,
    PrintNode,
    CallNode,
    FieldAccessNode,
    IfStatementNode,
    IfLetNode,
    TypeNode,
    IntegerLiteral,
    FloatLiteral,
    StringLiteral,
    BoolLiteral,
    BinaryOperation,
    EnumDefinitionNode,
    EnumCaseDefinitionNode,
    EnumConstruction,
    Expression,
)
from teddy.teddyc.errors import ParseError, ParseErrorKind


# Built-in type keywords and the TypeNode each denotes
_BUILTIN_TYPES = {
    TokenType.INT: TypeNode.INT,
    TokenType.FLOAT: TypeNode.FLOAT,
    TokenType.STRING: TypeNode.STRING,
    TokenType.BOOL: TypeNode.BOOL,
    TokenType.VOID: TypeNode.VOID,
}

# Tokens that can begin a primary expression
_PRIMARY_START = frozenset({
    TokenType.IDENTIFIER,
    TokenType.INTEGER_LITERAL,
    TokenType.FLOAT_LITERAL,
    TokenType.STRING_LITERAL,
    TokenType.BOOL_LITERAL,
    TokenType.LPAREN,
})


class TeddyParser:
    """
    Recursive descent parser for Teddy.

    Parses a list of tokens into a ProgramNode. Each instance keeps only
    a cursor into its token list.

    Attributes:
        tokens: List of tokens to parse
    """

    def __init__(self, tokens: list[Token]):
        self.tokens = list(tokens)
        self._pos = 0

    def parse(self) -> ProgramNode:
        """
        Parse the token stream into an AST.

        Returns:
            ProgramNode holding the top-level nodes in source order

        Raises:
            ParseError: At the first grammar violation
        """
        statements = []
        while not self._at_end():
            statements.append(self._parse_statement())
        return ProgramNode(tuple(statements))

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've consumed every token."""
        return self._pos >= len(self.tokens)

    def _peek(self, offset: int = 0) -> Optional[Token]:
        """Look at token at current position + offset, None past the end."""
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return None
        return self.tokens[pos]

    def _advance(self) -> Optional[Token]:
        """Consume and return the current token."""
        token = self._peek()
        if token is not None:
            self._pos += 1
        return token

    def _check(self, *types: TokenType, offset: int = 0) -> bool:
        """Check if the token at offset is one of the given types."""
        token = self._peek(offset)
        return token is not None and token.type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        """
        Consume current token if it matches one of the types.

        Returns:
            The consumed token, or None if no match
        """
        if self._check(*types):
            return self._advance()
        return None

    def _error(
        self,
        kind: ParseErrorKind,
        expected: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> ParseError:
        """Build a ParseError for the current token."""
        return ParseError(kind, self._peek(), self._pos, expected=expected, hint=hint)

    def _expect(
        self,
        token_type: TokenType,
        kind: ParseErrorKind = ParseErrorKind.EXPECTED_CHARACTER,
        expected: Optional[str] = None,
    ) -> Token:
        """
        Expect and consume a specific token type.

        Args:
            token_type: The expected token type
            kind: Error kind reported when the token is missing
            expected: Description used in the error message

        Returns:
            The consumed token

        Raises:
            ParseError: If the expected token is not found
        """
        if self._check(token_type):
            return self._advance()
        raise self._error(kind, expected)

    def _expect_symbol(self, token_type: TokenType, symbol: str) -> Token:
        return self._expect(token_type, ParseErrorKind.EXPECTED_CHARACTER, f"'{symbol}'")

    def _expect_identifier(self) -> str:
        return self._expect(TokenType.IDENTIFIER, ParseErrorKind.EXPECTED_IDENTIFIER).value

    def _expect_statement_end(self) -> None:
        """
        Consume the ';' that ends a statement.

        A token that could start another operand means an operator is
        missing between two expressions ('a b;').
        """
        if self._match(TokenType.SEMICOLON):
            return
        if self._check(*_PRIMARY_START):
            raise self._error(ParseErrorKind.EXPECTED_OPERATOR)
        raise self._error(ParseErrorKind.EXPECTED_CHARACTER, "';'")

    # =========================================================================
    # Statements
    # =========================================================================

    def _parse_statement(self) -> ASTNode:
        """Parse one statement, dispatching on its first token."""
        if self._check(TokenType.FUNC):
            return self._parse_function()

        if self._check(TokenType.IF):
            if self._check(TokenType.LET, offset=1):
                return self._parse_if_let()
            return self._parse_if()

        if self._check(TokenType.ENUM):
            return self._parse_enum_definition()

        if self._check(TokenType.LET, TokenType.VAR):
            return self._parse_variable_declaration()

        if self._check(TokenType.RETURN):
            return self._parse_return()

        if self._check(TokenType.PRINT):
            return self._parse_print()

        expr = self._parse_expression()
        self._expect_statement_end()
        return expr

    def _parse_block(self) -> tuple[ASTNode, ...]:
        """Parse '{' statement* '}'."""
        self._expect_symbol(TokenType.LBRACE, "{")
        statements = []
        while not self._check(TokenType.RBRACE):
            if self._at_end():
                raise self._error(ParseErrorKind.EXPECTED_CHARACTER, "'}'")
            statements.append(self._parse_statement())
        self._advance()
        return tuple(statements)

    def _parse_function(self) -> FunctionNode:
        """
        Parse a function definition.

            func add(a: Int, b: Int) -> Int { return a + b; }
        """
        self._expect(TokenType.FUNC, expected="'func'")
        prototype = self._parse_prototype()
        body = self._parse_block()
        return FunctionNode(prototype, body)

    def _parse_prototype(self) -> PrototypeNode:
        name = self._expect_identifier()
        formals = self._parse_arg_list()
        self._expect_symbol(TokenType.ARROW, "->")
        return_type = self._parse_type()
        return PrototypeNode(name, formals, return_type)

    def _parse_arg_list(self) -> tuple[VariableNode, ...]:
        """
        Parse a typed parameter list: (a: Int, b: Float)

        Used for function formals, enum associated values and if-let
        bindings. Every entry is immutable.
        """
        self._expect_symbol(TokenType.LPAREN, "(")
        args = []
        if not self._check(TokenType.RPAREN):
            while True:
                identifier = self._expect_identifier()
                self._expect_symbol(TokenType.COLON, ":")
                arg_type = self._parse_type()
                args.append(VariableNode(Mutability.IMMUTABLE, arg_type, identifier))
                if not self._match(TokenType.COMMA):
                    break
        self._expect_symbol(TokenType.RPAREN, ")")
        return tuple(args)

    def _parse_type(self) -> TypeNode:
        """Parse a built-in type keyword or a nominal type name."""
        token = self._peek()
        if token is not None and token.type in _BUILTIN_TYPES:
            self._advance()
            return _BUILTIN_TYPES[token.type]
        if token is not None and token.type == TokenType.IDENTIFIER:
            self._advance()
            return TypeNode(token.value)
        raise self._error(ParseErrorKind.EXPECTED_TYPE)

    def _parse_variable_declaration(self) -> ASTNode:
        """
        Parse a let/var declaration, with or without initializer.

            let x: Int;                -> VariableNode
            var y: Float = 2.5;        -> AssignExpression
            let s: Shape = .circle(1.0);
        """
        keyword = self._match(TokenType.LET, TokenType.VAR)
        if keyword is None:
            raise self._error(ParseErrorKind.EXPECTED_VARIABLE_DECLARATION)

        mutability = Mutability.IMMUTABLE if keyword.type == TokenType.LET else Mutability.MUTABLE
        identifier = self._expect_identifier()
        self._expect_symbol(TokenType.COLON, ":")
        var_type = self._parse_type()
        variable = VariableNode(mutability, var_type, identifier)

        if self._match(TokenType.SEMICOLON):
            return variable

        self._expect_symbol(TokenType.EQUAL, "=")

        if self._check(TokenType.PERIOD):
            value = self._parse_enum_construction(var_type)
        else:
            value = self._parse_expression()

        self._expect_statement_end()
        return AssignExpression(variable, value)

    def _parse_enum_construction(self, enum_type: TypeNode) -> EnumConstruction:
        """
        Parse '.case(args)' for a variable declared with an enum type.

        The enum is named by the declared type, so a built-in type here
        is an error.
        """
        if enum_type.is_builtin:
            raise self._error(
                ParseErrorKind.EXPECTED_ENUM,
                hint=f"'.case' construction needs an enum type, not '{enum_type.name}'",
            )
        self._expect_symbol(TokenType.PERIOD, ".")
        case_name = self._expect_identifier()
        arguments: tuple[Expression, ...] = ()
        if self._check(TokenType.LPAREN):
            arguments = self._parse_expr_list()
        return EnumConstruction(enum_type.name, case_name, arguments)

    def _parse_return(self) -> ReturnNode:
        self._expect(TokenType.RETURN, ParseErrorKind.EXPECTED_RETURN)
        expr = self._parse_expression()
        self._expect_statement_end()
        return ReturnNode(expr)

    def _parse_print(self) -> PrintNode:
        self._expect(TokenType.PRINT, ParseErrorKind.EXPECTED_PRINT)
        expressions = self._parse_expr_list()
        self._expect_statement_end()
        return PrintNode(expressions)

    def _parse_if(self) -> IfStatementNode:
        """Parse 'if' condition block."""
        self._expect(TokenType.IF, expected="'if'")
        condition = self._parse_expression()
        body = self._parse_block()
        return IfStatementNode(condition, body)

    def _parse_if_let(self) -> IfLetNode:
        """
        Parse an enum case test with bindings.

            if let s: Shape = .circle(r: Float) { print(r); }
        """
        self._expect(TokenType.IF, expected="'if'")
        self._expect(TokenType.LET, ParseErrorKind.EXPECTED_VARIABLE_DECLARATION, "'let'")

        identifier = self._expect_identifier()
        self._expect_symbol(TokenType.COLON, ":")
        var_type = self._parse_type()
        if var_type.is_builtin:
            raise self._error(
                ParseErrorKind.EXPECTED_ENUM,
                hint=f"'if let' tests an enum-typed variable, not '{var_type.name}'",
            )

        self._expect_symbol(TokenType.EQUAL, "=")
        self._expect_symbol(TokenType.PERIOD, ".")
        case_name = self._expect_identifier()

        bindings: tuple[VariableNode, ...] = ()
        if self._check(TokenType.LPAREN):
            bindings = self._parse_arg_list()

        body = self._parse_block()
        test_variable = VariableNode(Mutability.IMMUTABLE, var_type, identifier)
        return IfLetNode(test_variable, case_name, bindings, body)

    def _parse_enum_definition(self) -> EnumDefinitionNode:
        """
        Parse an enum definition.

            enum Shape {
                case circle(r: Float);
                case square(side: Float);
                case empty;
            }
        """
        self._expect(TokenType.ENUM, expected="'enum'")
        name = self._expect_identifier()
        self._expect_symbol(TokenType.LBRACE, "{")

        cases = []
        while not self._match(TokenType.RBRACE):
            self._expect(TokenType.CASE, expected="'case' or '}'")
            case_name = self._expect_identifier()
            associated_values: tuple[VariableNode, ...] = ()
            if self._check(TokenType.LPAREN):
                associated_values = self._parse_arg_list()
            self._expect_statement_end()
            cases.append(EnumCaseDefinitionNode(name, case_name, associated_values))

        return EnumDefinitionNode(name, tuple(cases))

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """Parse a full binary expression."""
        lhs = self._parse_primary()
        return self._parse_binary_rhs(0, lhs)

    def _parse_binary_rhs(self, min_precedence: int, lhs: Expression) -> Expression:
        """
        Precedence climbing over OPERATOR tokens.

        Consumes operators binding at least as tightly as min_precedence.
        A tighter operator to the right of an operand takes that operand
        as its own left side first.
        """
        while True:
            op = self._peek()
            if op is None or not op.is_operator() or op.precedence < min_precedence:
                return lhs
            self._advance()

            rhs = self._parse_primary()

            next_op = self._peek()
            if next_op is not None and next_op.is_operator() and next_op.precedence > op.precedence:
                rhs = self._parse_binary_rhs(op.precedence + 1, rhs)

            lhs = BinaryOperation(lhs, op.value, rhs)

    def _parse_primary(self) -> Expression:
        """Parse an identifier, call, literal or parenthesized expression."""
        token = self._peek()
        if token is None:
            raise self._error(ParseErrorKind.EXPECTED_EXPRESSION)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            if self._check(TokenType.LPAREN):
                return CallNode(token.value, self._parse_expr_list())
            return FieldAccessNode(token.value)

        if token.type == TokenType.INTEGER_LITERAL:
            self._advance()
            return IntegerLiteral(token.value)

        if token.type == TokenType.FLOAT_LITERAL:
            self._advance()
            return FloatLiteral(token.value)

        if token.type == TokenType.STRING_LITERAL:
            self._advance()
            return StringLiteral(token.value)

        if token.type == TokenType.BOOL_LITERAL:
            self._advance()
            return BoolLiteral(token.value)

        if token.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect_symbol(TokenType.RPAREN, ")")
            return expr

        raise self._error(ParseErrorKind.EXPECTED_EXPRESSION)

    def _parse_expr_list(self) -> tuple[Expression, ...]:
        """Parse '(' (expr (',' expr)*)? ')'."""
        self._expect_symbol(TokenType.LPAREN, "(")
        expressions = []
        if not self._check(TokenType.RPAREN):
            while True:
                expressions.append(self._parse_expression())
                if not self._match(TokenType.COMMA):
                    break
        self._expect_symbol(TokenType.RPAREN, ")")
        return tuple(expressions)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse(tokens: list[Token]) -> ProgramNode:
    """
    Parse a token list into a ProgramNode.

    An empty token list yields an empty program.

    Raises:
        ParseError: At the first grammar violation
    """
    return TeddyParser(tokens).parse()


def parse_source(source: str) -> ProgramNode:
    """Tokenize and parse Teddy source text."""
    return parse(tokenize(source))
