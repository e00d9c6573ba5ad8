"""
Teddy Compiler Error Hierarchy
==============================

This module defines the exception hierarchy for the Teddy compiler.
All exceptions inherit from TeddyCompilerError, which itself inherits from
the base TeddyError for consistent error handling across the toolchain.

Exception Hierarchy
-------------------
TeddyCompilerError (base for all compiler errors)
├── LexError - no lexical rule matches the input
│   ├── InvalidCharacterError - character outside the language alphabet
│   └── UnterminatedStringError - missing closing quote
├── ParseError - grammar violation (kind: ParseErrorKind)
└── CodeGenError - AST cannot be lowered
    ├── UnsupportedFeatureError - construct not available with current options
    ├── EntryPointConflictError - user main() plus top-level statements
    └── EnumError - enum layout problems
        ├── DuplicateEnumError - enum defined twice
        ├── DuplicateEnumCaseError - case defined twice (or colliding names)
        ├── ReservedNameError - enum, case or field named after a C/C++ keyword
        ├── UnknownEnumError - if-let against an undefined enum
        ├── UnknownEnumCaseError - construction of an undefined case
        └── EnumBindingError - if-let binding count mismatch

Propagation Policy
------------------
Lexical and syntactic errors abort compilation of the whole source unit
immediately. There is no resynchronization and no multi-error report.

Semantic checks are deliberately NOT performed: undeclared identifiers,
calls to undefined functions and argument count or type mismatches are
passed through to the C compiler. The enum errors above exist only because
the tagged-union lowering cannot be emitted without a consistent layout.
"""

from enum import Enum, auto
from typing import Optional, Any

from teddy.errors import TeddyError


# =============================================================================
# Base Compiler Exception
# =============================================================================

class TeddyCompilerError(TeddyError):
    """
    Base exception for all Teddy compiler errors.

    Example:
        error: expected ';', found '}' (at offset 31)
    """
    pass


# =============================================================================
# Lexical Errors
# =============================================================================

class LexError(TeddyCompilerError):
    """
    No lexical rule matched the input at the current cursor.

    Attributes:
        position: Character offset of the offending input
    """
    pass


class InvalidCharacterError(LexError):
    """
    Character that cannot start any Teddy token.

    Example:
        let x: Int = 4 % 2;    // '%' is not a Teddy operator
    """

    def __init__(self, char: str, position: int):
        self.char = char
        super().__init__(
            f"unexpected character '{char}' (0x{ord(char):02X})",
            position=position,
        )


class UnterminatedStringError(LexError):
    """
    String literal without a closing double quote.

    Example:
        print("hello);
    """

    def __init__(self, position: int):
        super().__init__(
            "unterminated string literal",
            position=position,
            hint="add closing '\"' to complete the string",
        )


# =============================================================================
# Syntax Errors
# =============================================================================

class ParseErrorKind(Enum):
    """
    The grammar expectation violated by a ParseError.

    Each kind names what the parser required at the current token.
    """
    EXPECTED_CHARACTER = auto()
    EXPECTED_IDENTIFIER = auto()
    EXPECTED_NUMBER = auto()
    EXPECTED_STRING = auto()
    EXPECTED_BOOL = auto()
    EXPECTED_EXPRESSION = auto()
    EXPECTED_PRINT = auto()
    EXPECTED_OPERATOR = auto()
    EXPECTED_TYPE = auto()
    EXPECTED_RETURN = auto()
    EXPECTED_VARIABLE_DECLARATION = auto()
    EXPECTED_ENUM = auto()


# Human-readable descriptions used when no explicit expectation is given
_KIND_DESCRIPTIONS = {
    ParseErrorKind.EXPECTED_CHARACTER: "symbol",
    ParseErrorKind.EXPECTED_IDENTIFIER: "identifier",
    ParseErrorKind.EXPECTED_NUMBER: "number",
    ParseErrorKind.EXPECTED_STRING: "string literal",
    ParseErrorKind.EXPECTED_BOOL: "boolean literal",
    ParseErrorKind.EXPECTED_EXPRESSION: "expression",
    ParseErrorKind.EXPECTED_PRINT: "'print'",
    ParseErrorKind.EXPECTED_OPERATOR: "operator",
    ParseErrorKind.EXPECTED_TYPE: "type",
    ParseErrorKind.EXPECTED_RETURN: "'return'",
    ParseErrorKind.EXPECTED_VARIABLE_DECLARATION: "'let' or 'var'",
    ParseErrorKind.EXPECTED_ENUM: "enum",
}


class ParseError(TeddyCompilerError):
    """
    The token stream does not match the grammar at the current position.

    Raised eagerly by the parser at the first violation.

    Attributes:
        kind: Which expectation failed
        expected: Description of what was required (e.g. "';'")
        token: The offending token, or None at end of input
        index: Index of the offending token in the token list
    """

    def __init__(
        self,
        kind: ParseErrorKind,
        token: Optional[Any] = None,
        index: Optional[int] = None,
        expected: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.kind = kind
        self.token = token
        self.index = index
        self.expected = expected or _KIND_DESCRIPTIONS[kind]

        found = f"'{token.text}'" if token is not None else "end of input"
        position = token.position if token is not None else None

        super().__init__(
            f"expected {self.expected}, found {found}",
            position=position,
            hint=hint,
        )


# =============================================================================
# Code Generation Errors
# =============================================================================

class CodeGenError(TeddyCompilerError):
    """
    Error during code generation.

    Raised when the generator encounters a node or combination of
    options it cannot lower to the selected target.
    """
    pass


class UnsupportedFeatureError(CodeGenError):
    """
    Construct not supported with the current target or options.

    Example:
        'if let' with enum_tags=False (there is no tag to test)
    """

    def __init__(self, feature: str, alternative: Optional[str] = None):
        self.feature = feature
        super().__init__(f"unsupported feature: {feature}", hint=alternative)


class EntryPointConflictError(CodeGenError):
    """
    Program defines main() and also has top-level statements.

    Top-level statements are collected into a synthesized main(), which
    would clash with the user's own definition.
    """

    def __init__(self):
        super().__init__(
            "program defines 'main' and also contains top-level statements",
            hint="move the top-level statements into main() or disable the entry point",
        )


class EnumError(CodeGenError):
    """Base class for enum layout errors."""
    pass


class DuplicateEnumError(EnumError):
    """
    Enum with the same name defined twice.

    Also raised when an enum's tag type name is already taken by an
    identifier generated for an earlier enum.
    """

    def __init__(self, enum_name: str, generated_name: Optional[str] = None):
        self.enum_name = enum_name
        hint = None
        if generated_name:
            hint = f"enum collides with an earlier enum on generated identifier '{generated_name}'"
        super().__init__(f"redefinition of enum '{enum_name}'", hint=hint)


class DuplicateEnumCaseError(EnumError):
    """
    Two cases of one enum map to the same name.

    Also raised when distinct case names produce the same generated
    struct name, e.g. 'circle' and 'Circle' both lower to _ShapeCircle.
    """

    def __init__(self, enum_name: str, case_name: str, generated_name: Optional[str] = None):
        self.enum_name = enum_name
        self.case_name = case_name
        hint = None
        if generated_name:
            hint = f"case names collide on generated identifier '{generated_name}'"
        super().__init__(f"duplicate case '{case_name}' in enum '{enum_name}'", hint=hint)


class UnknownEnumError(EnumError):
    """Reference to an enum that was never defined."""

    def __init__(self, enum_name: str):
        self.enum_name = enum_name
        super().__init__(f"unknown enum '{enum_name}'")


class UnknownEnumCaseError(EnumError):
    """Reference to a case that the enum does not define."""

    def __init__(self, enum_name: str, case_name: str, known_cases: Optional[list[str]] = None):
        self.enum_name = enum_name
        self.case_name = case_name
        self.known_cases = known_cases or []

        hint = None
        if self.known_cases:
            cases = ", ".join(f"'{c}'" for c in self.known_cases)
            hint = f"'{enum_name}' defines {cases}"

        super().__init__(f"enum '{enum_name}' has no case '{case_name}'", hint=hint)


class EnumBindingError(EnumError):
    """'if let' binds a different number of values than the case holds."""

    def __init__(self, enum_name: str, case_name: str, expected: int, actual: int):
        self.enum_name = enum_name
        self.case_name = case_name
        self.expected = expected
        self.actual = actual

        word = "value" if expected == 1 else "values"
        super().__init__(
            f"case '{enum_name}.{case_name}' holds {expected} {word}, {actual} bound"
        )


class ReservedNameError(EnumError):
    """
    Enum, case or associated value named after a C or C++ keyword.

    Example:
        enum Kind { case int(x: Int); }    // member 'int' is not valid C
    """

    def __init__(self, enum_name: str, name: str):
        self.enum_name = enum_name
        self.name = name
        super().__init__(
            f"'{name}' in enum '{enum_name}' is a reserved word in C/C++",
            hint="rename it; enum, case and field names become C identifiers",
        )
