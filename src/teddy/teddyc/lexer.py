"""
Teddy Lexer (Tokenizer)
=======================

This module implements the lexer for the Teddy language.
It converts source text into an ordered list of tokens for the parser.

Token Categories
----------------
- Keywords: func, let, var, Int, Float, Void, Bool, String, return,
  print, enum, case, if
- Identifiers: letter followed by letters, digits or underscores
- Literals: integers (42), floats (3.14), booleans (true/false),
  strings ("double quoted")
- Operators: + - (precedence 20), * / (precedence 40)
- Symbols: -> = : ; ( ) { } , .

Matching Rules
--------------
At each cursor position the lexer tries, in order:

1. whitespace (discarded, produces no token)
2. a word, matched as long as possible, then classified as keyword,
   boolean literal or identifier
3. the arrow '->' (before the '-' operator)
4. single character operators and symbols
5. numeric literals of ASCII digits (digits '.' digits is a float,
   digits alone an integer)
6. string literals

Anything else raises InvalidCharacterError. Comments are not handled here;
see teddy.teddyc.preprocessor.strip_comments.

Example Usage
-------------
>>> from teddy.teddyc.lexer import tokenize
>>> for token in tokenize('let x: Int = 2 + 3;'):
...     print(token)
Token(LET, 'let', @0)
Token(IDENTIFIER, 'x', @4)
Token(COLON, ':', @5)
Token(INT, 'Int', @7)
Token(EQUAL, '=', @11)
Token(INTEGER_LITERAL, 2, @13)
Token(OPERATOR, '+'/20, @15)
Token(INTEGER_LITERAL, 3, @17)
Token(SEMICOLON, ';', @18)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Union
import string

from teddy.teddyc.errors import InvalidCharacterError, UnterminatedStringError


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token types for the Teddy language.

    Keywords are distinguished from identifiers to simplify parsing.
    All binary operators share the OPERATOR type and are told apart by
    their value and precedence.
    """

    # === Keywords - Declarations ===
    FUNC = auto()               # func
    LET = auto()                # let
    VAR = auto()                # var
    ENUM = auto()               # enum
    CASE = auto()               # case

    # === Keywords - Types ===
    INT = auto()                # Int
    FLOAT = auto()              # Float
    VOID = auto()               # Void
    BOOL = auto()               # Bool
    STRING = auto()             # String

    # === Keywords - Statements ===
    RETURN = auto()             # return
    PRINT = auto()              # print
    IF = auto()                 # if

    # === Identifiers and Literals ===
    IDENTIFIER = auto()
    INTEGER_LITERAL = auto()
    FLOAT_LITERAL = auto()
    BOOL_LITERAL = auto()
    STRING_LITERAL = auto()

    # === Operators ===
    OPERATOR = auto()           # + - * /

    # === Symbols ===
    ARROW = auto()              # ->
    EQUAL = auto()              # =
    COLON = auto()              # :
    SEMICOLON = auto()          # ;
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    LBRACE = auto()             # {
    RBRACE = auto()             # }
    COMMA = auto()              # ,
    PERIOD = auto()             # .


# =============================================================================
# Lexical Tables
# =============================================================================

KEYWORDS: dict[str, TokenType] = {
    "func": TokenType.FUNC,
    "let": TokenType.LET,
    "var": TokenType.VAR,
    "Int": TokenType.INT,
    "Float": TokenType.FLOAT,
    "Void": TokenType.VOID,
    "Bool": TokenType.BOOL,
    "String": TokenType.STRING,
    "return": TokenType.RETURN,
    "print": TokenType.PRINT,
    "enum": TokenType.ENUM,
    "case": TokenType.CASE,
    "if": TokenType.IF,
}

BOOLEANS: dict[str, bool] = {
    "true": True,
    "false": False,
}

# Binary operators and their binding power (higher binds tighter)
OPERATOR_PRECEDENCE: dict[str, int] = {
    "+": 20,
    "-": 20,
    "*": 40,
    "/": 40,
}

SYMBOLS: dict[str, TokenType] = {
    "=": TokenType.EQUAL,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
    ".": TokenType.PERIOD,
}

TYPE_KEYWORDS = frozenset({
    TokenType.INT,
    TokenType.FLOAT,
    TokenType.VOID,
    TokenType.BOOL,
    TokenType.STRING,
})


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single lexical token.

    Attributes:
        type: The TokenType classification
        value: Decoded value (int, float, bool, str; the symbol for
               operators and punctuation; the keyword text for keywords)
        text: The raw lexeme as written in the source
        position: Zero-based character offset of the lexeme
        precedence: Binding power for OPERATOR tokens, -1 otherwise
    """
    type: TokenType
    value: Union[str, int, float, bool]
    text: str
    position: int = 0
    precedence: int = -1

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.type == TokenType.OPERATOR:
            return f"Token(OPERATOR, {self.value!r}/{self.precedence}, @{self.position})"
        return f"Token({self.type.name}, {self.value!r}, @{self.position})"

    @property
    def length(self) -> int:
        """Raw textual length of the token, used to advance the cursor."""
        return len(self.text)

    def is_type_keyword(self) -> bool:
        """Return True if this token names a built-in type."""
        return self.type in TYPE_KEYWORDS

    def is_operator(self) -> bool:
        """Return True if this token is a binary operator."""
        return self.type == TokenType.OPERATOR


# =============================================================================
# Lexer Implementation
# =============================================================================

class TeddyLexer:
    """
    Tokenizes Teddy source code.

    The lexer keeps only a cursor into the source; each instance tokenizes
    exactly one source unit.

    Usage:
        lexer = TeddyLexer(source_text)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
    """

    WHITESPACE = " \t\r\n"

    # Characters that can start a word (keyword, boolean or identifier)
    WORD_START = string.ascii_letters

    # Characters that can continue a word
    WORD_CHARS = string.ascii_letters + string.digits + "_"

    # ASCII digits only
    DIGITS = string.digits

    ESCAPE_SEQUENCES = {
        "n": "\n",
        "t": "\t",
        "r": "\r",
        "0": "\0",
        "\\": "\\",
        '"': '"',
    }

    def __init__(self, source: str):
        self.source = source
        self._pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects in source order

        Raises:
            LexError: If a character cannot start any token
        """
        while not self._at_end():
            char = self._peek()

            if char in self.WHITESPACE:
                self._pos += 1
                continue

            token = self._scan_token()
            self._pos += token.length
            yield token

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Character at cursor + offset, or empty string past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        """
        Scan one token starting at the cursor without moving it.

        The caller advances the cursor by the token's raw length.
        """
        char = self._peek()

        if char in self.WORD_START:
            return self._scan_word()

        if char == "-" and self._peek(1) == ">":
            return Token(TokenType.ARROW, "->", "->", self._pos)

        if char in OPERATOR_PRECEDENCE:
            return Token(TokenType.OPERATOR, char, char, self._pos, OPERATOR_PRECEDENCE[char])

        if char in SYMBOLS:
            return Token(SYMBOLS[char], char, char, self._pos)

        if char in self.DIGITS:
            return self._scan_number()

        if char == '"':
            return self._scan_string()

        raise InvalidCharacterError(char, self._pos)

    def _scan_word(self) -> Token:
        """
        Scan the longest word at the cursor and classify it.

        Keywords and booleans only match whole words, so 'printer'
        is an identifier rather than 'print' followed by 'er'.
        """
        end = self._pos
        while end < len(self.source) and self.source[end] in self.WORD_CHARS:
            end += 1

        word = self.source[self._pos:end]

        if word in KEYWORDS:
            return Token(KEYWORDS[word], word, word, self._pos)

        if word in BOOLEANS:
            return Token(TokenType.BOOL_LITERAL, BOOLEANS[word], word, self._pos)

        return Token(TokenType.IDENTIFIER, word, word, self._pos)

    def _scan_number(self) -> Token:
        """
        Scan an integer or float literal.

        A float needs at least one digit on both sides of the dot;
        '5.' is the integer 5 followed by a period.
        """
        end = self._pos
        while end < len(self.source) and self.source[end] in self.DIGITS:
            end += 1

        if (
            end + 1 < len(self.source)
            and self.source[end] == "."
            and self.source[end + 1] in self.DIGITS
        ):
            end += 1
            while end < len(self.source) and self.source[end] in self.DIGITS:
                end += 1
            text = self.source[self._pos:end]
            return Token(TokenType.FLOAT_LITERAL, float(text), text, self._pos)

        text = self.source[self._pos:end]
        return Token(TokenType.INTEGER_LITERAL, int(text), text, self._pos)

    def _scan_string(self) -> Token:
        """
        Scan a double-quoted string literal.

        The token value holds the decoded content; the token text holds
        the quoted lexeme so the cursor advances past both quotes.
        """
        end = self._pos + 1
        chars = []

        while end < len(self.source):
            char = self.source[end]

            if char == '"':
                text = self.source[self._pos:end + 1]
                return Token(TokenType.STRING_LITERAL, "".join(chars), text, self._pos)

            if char == "\n":
                break

            if char == "\\" and end + 1 < len(self.source):
                escaped = self.source[end + 1]
                # Unknown escapes keep the character as written
                chars.append(self.ESCAPE_SEQUENCES.get(escaped, escaped))
                end += 2
                continue

            chars.append(char)
            end += 1

        raise UnterminatedStringError(self._pos)


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str) -> list[Token]:
    """
    Tokenize Teddy source into a list of tokens.

    An empty (or whitespace-only) source yields an empty list.

    Raises:
        LexError: If the source contains a character no rule matches
    """
    return list(TeddyLexer(source).tokenize())
