"""
Teddy - A Small Language Compiled to C
======================================

This package provides the toolchain for Teddy, a small statically typed
language with Swift-like syntax that compiles to C or C++ source code.

Main Components
---------------
- **teddyc**: the compiler
    Strips comments, tokenizes, parses and lowers Teddy source to C/C++

- **cli**: command-line tools
    The ``teddyc`` command wrapping the compiler

Quick Start
-----------
Compile a program:
    >>> from teddy.teddyc import compile_teddy
    >>> c_source = compile_teddy('let x: Int = 2 + 3; print(x);')

Or use the command-line tool:
    $ teddyc hello.teddy -o hello.c
    $ cc hello.c -o hello
"""

__version__ = "1.0.0"

from teddy.errors import TeddyError

__all__ = ["__version__", "TeddyError"]
