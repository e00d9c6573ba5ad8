"""
Teddy Command-Line Interface
============================

This package provides command-line tools for the Teddy toolchain:

- **teddyc**: Teddy to C/C++ compiler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["teddyc"]
