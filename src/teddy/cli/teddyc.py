"""
teddyc - Teddy Compiler Command-Line Interface
==============================================

This module implements the command-line interface for the Teddy compiler.

Usage Examples
--------------
Basic compilation:
    $ teddyc hello.teddy

With output file:
    $ teddyc hello.teddy -o hello.c

Generate C++ instead of C:
    $ teddyc -t cpp hello.teddy

Inspect intermediate stages:
    $ teddyc --tokens hello.teddy
    $ teddyc --ast hello.teddy
    $ teddyc --report hello.teddy

Full pipeline to an executable:
    $ teddyc hello.teddy && cc hello.c -o hello
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from teddy import __version__
from teddy.cli.errors import ExitCode, handle_cli_exception
from teddy.teddyc import TeddyCompiler, CompilerOptions, load_source, render_report
from teddy.teddyc.ast import ASTPrinter
from teddy.teddyc.lexer import tokenize
from teddy.teddyc.parser import parse
from teddy.teddyc.preprocessor import strip_comments
from teddy.teddyc.targets import get_target_by_name

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: input.c, or input.cpp for C++)",
)
@click.option(
    "-t", "--target",
    type=click.Choice(["c", "cpp"], case_sensitive=False),
    default=None,
    help="Output language. Default: c, or $TEDDY_TARGET.",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print tokens and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print AST and exit (for debugging)",
)
@click.option(
    "-E", "--preprocess-only",
    is_flag=True,
    help="Strip comments only, output to stdout",
)
@click.option(
    "--report",
    is_flag=True,
    help="Print source, tokens, AST and generated code to stdout",
)
@click.option(
    "--no-entry-point",
    is_flag=True,
    help="Emit top-level statements at file scope instead of in main()",
)
@click.option(
    "--no-enum-tags",
    is_flag=True,
    help="Lower enums without a discriminant tag (disables 'if let')",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="teddyc")
def main(
    input_file: Path,
    output: Optional[Path],
    target: Optional[str],
    tokens: bool,
    ast: bool,
    preprocess_only: bool,
    report: bool,
    no_entry_point: bool,
    no_enum_tags: bool,
    verbose: bool,
) -> None:
    """
    Compile Teddy source code to C or C++.

    INPUT_FILE is the Teddy source file (.teddy) to compile.

    \b
    Examples:
        teddyc hello.teddy               # Outputs hello.c
        teddyc hello.teddy -o out.c      # Specify output file
        teddyc -t cpp hello.teddy        # Outputs hello.cpp
        teddyc --ast hello.teddy         # Dump the syntax tree
        teddyc -v hello.teddy            # Verbose output
    """
    setup_logging(verbose)

    options = CompilerOptions.from_env()
    if target:
        options.target = get_target_by_name(target)
    if no_entry_point:
        options.emit_entry_point = False
    if no_enum_tags:
        options.enum_tags = False

    if output is None:
        output = input_file.with_suffix(options.target.get_info().extension)

    source = load_source(str(input_file))
    if source is None:
        click.echo(f"Error: cannot read {input_file}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    try:
        logger.debug(f"Compiling {input_file} to {options.target.get_info().name}")

        stripped = strip_comments(source) if options.strip_comments else source

        if preprocess_only:
            click.echo(stripped)
            return

        if tokens:
            for token in tokenize(stripped):
                click.echo(repr(token))
            return

        if ast:
            click.echo(ASTPrinter().print(parse(tokenize(stripped))))
            return

        compiler = TeddyCompiler(options)
        result = compiler.compile_source(source, str(input_file))

        if report:
            click.echo(render_report(result))

        output.write_text(result.code, encoding="utf-8")

        logger.debug(f"Wrote {len(result.code)} bytes to {output}")
        click.echo(f"Compiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
