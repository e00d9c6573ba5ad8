"""
Teddy Compiler Main Module
==========================

This module provides the main compiler interface for Teddy.
It orchestrates the complete compilation process:

    Source → Strip comments → Lex → Parse → Generate → C/C++

Usage
-----
Command line:
    $ teddyc hello.teddy -o hello.c

Programmatic:
    >>> from teddy.teddyc import compile_teddy
    >>> c_source = compile_teddy('print(42);')

Compilation Pipeline
--------------------
1. **Preprocessing**: Remove '//' comments
2. **Lexical Analysis**: Convert source to tokens
3. **Parsing**: Build Abstract Syntax Tree (AST)
4. **Code Generation**: Lower the AST to C or C++

Error Handling
--------------
The first error in any stage aborts compilation. Errors are raised as
TeddyCompilerError subclasses carrying the offending source offset.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from teddy.teddyc.ast import ASTPrinter, ProgramNode
from teddy.teddyc.codegen import CodeGenerator
from teddy.teddyc.lexer import Token, TeddyLexer
from teddy.teddyc.parser import TeddyParser
from teddy.teddyc.preprocessor import strip_comments
from teddy.teddyc.targets import TargetDialect, get_target_by_name

logger = logging.getLogger(__name__)


# Accepted spellings for boolean environment variables
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _env_flag(name: str) -> Optional[bool]:
    """Read a boolean environment variable; None if unset or invalid."""
    value = os.environ.get(name)
    if value is None:
        return None
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return None


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        target: Output dialect (C or C++)
        strip_comments: Remove '//' comments before lexing
        emit_entry_point: Collect top-level statements into int main(void).
                          When False, they are emitted at file scope in
                          source order.
        enum_tags: Add a discriminant tag to lowered enums. Required for
                   'if let'; when False the tag-free layout is emitted.
        forward_declarations: Emit a prototype for every function before
                              the definitions, so call order does not matter
        indent: Indentation unit for generated code
    """
    target: TargetDialect = TargetDialect.C
    strip_comments: bool = True
    emit_entry_point: bool = True
    enum_tags: bool = True
    forward_declarations: bool = True
    indent: str = "    "

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Environment variables (all optional):
            TEDDY_TARGET: Output dialect ("c" or "cpp")
            TEDDY_ENUM_TAGS: Enum discriminant tags (1/0, true/false)
            TEDDY_ENTRY_POINT: Synthesized main (1/0, true/false)
            TEDDY_FORWARD_DECLS: Function prototypes (1/0, true/false)

        Invalid values are ignored.

        Returns:
            CompilerOptions with values from environment variables
        """
        options = cls()

        if target_name := os.environ.get("TEDDY_TARGET"):
            if target := get_target_by_name(target_name):
                options.target = target

        if (enum_tags := _env_flag("TEDDY_ENUM_TAGS")) is not None:
            options.enum_tags = enum_tags

        if (entry_point := _env_flag("TEDDY_ENTRY_POINT")) is not None:
            options.emit_entry_point = entry_point

        if (forward_decls := _env_flag("TEDDY_FORWARD_DECLS")) is not None:
            options.forward_declarations = forward_decls

        return options


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Every stage's output is kept so callers can dump intermediate
    representations (see render_report).

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        source: Source text as given
        stripped_source: Source after comment removal
        tokens: Tokens produced by the lexer
        ast: Abstract syntax tree
        code: Generated C/C++ source
        target: Output dialect
    """
    filename: str = ""
    success: bool = False
    source: str = ""
    stripped_source: str = ""
    tokens: list[Token] = field(default_factory=list)
    ast: Optional[ProgramNode] = None
    code: str = ""
    target: TargetDialect = TargetDialect.C


class TeddyCompiler:
    """
    Teddy to C/C++ compiler.

    Example:
        compiler = TeddyCompiler()
        result = compiler.compile_file("hello.teddy")
        print(result.code)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile Teddy source code to C or C++.

        Args:
            source: Teddy source code string
            filename: Source filename for diagnostics

        Returns:
            CompilerResult containing the generated code and every
            intermediate stage

        Raises:
            TeddyCompilerError: If any stage fails
        """
        result = CompilerResult(filename=filename, source=source, target=self.options.target)
        logger.debug(f"Compiling {filename} ({len(source)} chars) for {self.options.target.get_info().name}")

        # Stage 1: Preprocessing
        stripped = self._preprocess(source)
        result.stripped_source = stripped

        # Stage 2: Lexical analysis
        result.tokens = self._lex(stripped)
        logger.debug(f"Lexed {len(result.tokens)} tokens")

        # Stage 3: Parsing
        result.ast = self._parse(result.tokens)
        logger.debug(f"Parsed {len(result.ast)} top-level nodes")

        # Stage 4: Code generation
        result.code = self._generate(result.ast)
        result.success = True

        return result

    def compile_file(self, filepath: str) -> CompilerResult:
        """
        Compile a Teddy source file.

        Raises:
            TeddyCompilerError: If compilation fails
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))

    def _preprocess(self, source: str) -> str:
        if self.options.strip_comments:
            return strip_comments(source)
        return source

    def _lex(self, source: str) -> list[Token]:
        """Tokenize preprocessed source."""
        return list(TeddyLexer(source).tokenize())

    def _parse(self, tokens: list[Token]) -> ProgramNode:
        """Parse tokens into AST."""
        return TeddyParser(tokens).parse()

    def _generate(self, ast: ProgramNode) -> str:
        """Generate C/C++ from AST."""
        generator = CodeGenerator(
            target=self.options.target,
            indent=self.options.indent,
            enum_tags=self.options.enum_tags,
            emit_entry_point=self.options.emit_entry_point,
            forward_declarations=self.options.forward_declarations,
        )
        return generator.generate(ast)


# =============================================================================
# Utility Functions
# =============================================================================

def load_source(path: str) -> Optional[str]:
    """
    Read a Teddy source file.

    Returns:
        File contents, or None if the file cannot be read
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Cannot read {path}: {e}")
        return None


def format_banner(text: str, width: int = 100) -> str:
    """
    Format a centered section banner.

    Example:
        ------...
        (blank)
                 Lexical Analysis
        (blank)
        ------...
    """
    rule = "-" * width
    padding = max((width - len(text)) // 2, 0)
    return "\n".join([rule, "", f"{' ' * padding}{text}", "", rule])


def render_report(result: CompilerResult) -> str:
    """
    Render every stage of a compilation as one text report.

    Sections: source input, tokens, AST and generated code, each
    introduced by a banner.
    """
    sections = [
        format_banner("Source Input (.teddy)"),
        result.source.rstrip("\n"),
        format_banner("Lexical Analysis"),
        "\n".join(repr(token) for token in result.tokens),
        format_banner("Parsing"),
        ASTPrinter().print(result.ast) if result.ast is not None else "",
        format_banner(f"Code Generation (Target: {result.target.get_info().name})"),
        result.code.rstrip("\n"),
    ]
    return "\n\n".join(sections) + "\n"


def compile_teddy(
    source: str,
    target: Optional[TargetDialect] = None,
    options: Optional[CompilerOptions] = None,
) -> str:
    """
    Compile Teddy source code to C or C++.

    This is the primary high-level interface for compiling Teddy.

    Args:
        source: Teddy source code
        target: Output dialect; overrides options.target when given
                (default: options.target, or C)
        options: Compiler options (defaults if None)

    Returns:
        Generated C/C++ source code

    Raises:
        TeddyCompilerError: If compilation fails

    Example:
        >>> print(compile_teddy('print("hi");', TargetDialect.CPP))
    """
    options = options or CompilerOptions()
    if target is not None:
        options = replace(options, target=target)
    return TeddyCompiler(options).compile_source(source).code


def compile_file(
    filepath: str,
    output_path: Optional[str] = None,
    options: Optional[CompilerOptions] = None,
) -> str:
    """
    Compile a Teddy source file to C or C++.

    Args:
        filepath: Path to the .teddy file
        output_path: Optional path to write the generated code to
        options: Compiler options (defaults if None)

    Returns:
        Generated C/C++ source code

    Raises:
        TeddyCompilerError: If compilation fails
        FileNotFoundError: If source file not found
    """
    result = TeddyCompiler(options).compile_file(filepath)

    if output_path:
        Path(output_path).write_text(result.code, encoding="utf-8")

    return result.code
