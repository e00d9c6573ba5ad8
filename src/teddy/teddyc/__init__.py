"""
Teddy Compiler
==============

This package implements a compiler for Teddy, a small statically typed
language with Swift-like syntax, producing C or C++ source code.

- A preprocessor that strips '//' comments
- A lexer (tokenizer) for Teddy source
- A recursive descent parser producing an immutable AST
- A code generator emitting C or C++, including tagged-union lowering
  for Teddy enums

Pipeline
--------
    Teddy Source → Strip comments → Lexer → Parser → AST → Code Generator → C/C++

The generated code is handed to a regular C or C++ compiler.

Usage
-----
>>> from teddy.teddyc import compile_teddy
>>> source = '''
... func add(a: Int, b: Int) -> Int {
...     return a + b;
... }
... print(add(2, 3));
... '''
>>> print(compile_teddy(source))

Language Subset
---------------
- Types: Int, Float, String, Bool, Void, user enums
- Declarations: let/var with optional initializer, func, enum
- Statements: return, print, if, if let
- Operators: + - * / (no unary minus, no comparisons)
"""

__version__ = "1.0.0"

from teddy.teddyc.compiler import (
    TeddyCompiler,
    CompilerOptions,
    CompilerResult,
    compile_teddy,
    compile_file,
    load_source,
    render_report,
)
from teddy.teddyc.errors import (
    TeddyCompilerError,
    LexError,
    InvalidCharacterError,
    UnterminatedStringError,
    ParseError,
    ParseErrorKind,
    CodeGenError,
    UnsupportedFeatureError,
    EntryPointConflictError,
    EnumError,
    DuplicateEnumError,
    DuplicateEnumCaseError,
    ReservedNameError,
    UnknownEnumError,
    UnknownEnumCaseError,
    EnumBindingError,
)
from teddy.teddyc.lexer import TeddyLexer, Token, TokenType, tokenize
from teddy.teddyc.parser import TeddyParser, parse, parse_source
from teddy.teddyc.codegen import CodeGenerator, generate
from teddy.teddyc.preprocessor import strip_comments
from teddy.teddyc.targets import TargetDialect, get_target_by_name

__all__ = [
    # Version
    "__version__",
    # Main API
    "TeddyCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_teddy",
    "compile_file",
    "load_source",
    "render_report",
    # Errors
    "TeddyCompilerError",
    "LexError",
    "InvalidCharacterError",
    "UnterminatedStringError",
    "ParseError",
    "ParseErrorKind",
    "CodeGenError",
    "UnsupportedFeatureError",
    "EntryPointConflictError",
    "EnumError",
    "DuplicateEnumError",
    "DuplicateEnumCaseError",
    "ReservedNameError",
    "UnknownEnumError",
    "UnknownEnumCaseError",
    "EnumBindingError",
    # Lexer
    "TeddyLexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "TeddyParser",
    "parse",
    "parse_source",
    # Code Generator
    "CodeGenerator",
    "generate",
    # Preprocessor
    "strip_comments",
    # Targets
    "TargetDialect",
    "get_target_by_name",
]
