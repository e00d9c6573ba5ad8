"""
Teddy Error Hierarchy
=====================

This module defines the root of the exception hierarchy for the Teddy
toolchain. All exceptions raised by the package inherit from TeddyError,
allowing callers to catch every toolchain error with a single except clause:

    try:
        compile_teddy(source)
    except TeddyError as e:
        print(f"Error: {e}")

Exception Hierarchy
-------------------
TeddyError (base)
└── TeddyCompilerError (see teddy.teddyc.errors)
    ├── LexError - no lexical rule matched the input
    ├── ParseError - token stream does not match the grammar
    └── CodeGenError - AST cannot be lowered to the target

Error Message Format
--------------------
    error: description (at offset N)
    hint: suggestion for fixing (when available)

Positions are zero-based character offsets into the (comment-stripped)
source text. Line and column tracking is intentionally not provided.
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class TeddyError(Exception):
    """
    Base exception for all Teddy toolchain errors.

    This class provides common formatting for error messages including
    an optional source offset and an optional hint.

    Attributes:
        message: The error description
        position: Character offset in the source (optional)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.position = position
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with position and hint.

        Example output:
            error: unexpected character '$' (at offset 14)
            hint: remove the character or quote it inside a string
        """
        parts = []

        if self.position is not None:
            parts.append(f"error: {self.message} (at offset {self.position})")
        else:
            parts.append(f"error: {self.message}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)
