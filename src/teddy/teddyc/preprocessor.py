"""
Teddy Source Preprocessor
=========================

Teddy has a single preprocessing step: removing line comments.

    let x: Int = 5;   // the answer  ->  let x: Int = 5;
    // whole line comment            ->  (empty line)

A comment runs from '//' to the end of the line. '//' inside a string
literal is left alone. Every line of the input survives (possibly
empty), so line numbers in the stripped source match the original.

The lexer itself knows nothing about comments and would read '//' as
two division operators, so the compiler strips comments by default.

Example
-------
>>> from teddy.teddyc.preprocessor import strip_comments
>>> strip_comments('print("a//b"); // done')
'print("a//b");'
"""

import logging

logger = logging.getLogger(__name__)


def _comment_start(line: str) -> int:
    """
    Index of the '//' that starts a comment on this line, or -1.

    Tracks double-quoted strings (with backslash escapes) so that '//'
    inside a literal is not taken as a comment.
    """
    in_string = False
    i = 0
    while i < len(line):
        char = line[i]
        if in_string:
            if char == "\\":
                i += 2
                continue
            if char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "/" and line[i + 1:i + 2] == "/":
            return i
        i += 1
    return -1


def strip_comments(source: str) -> str:
    """
    Remove '//' line comments from Teddy source.

    Text before a comment is kept with trailing whitespace removed;
    lines are never dropped or merged.

    Args:
        source: Teddy source text

    Returns:
        Source text without comments
    """
    lines = source.split("\n")
    removed = 0

    for index, line in enumerate(lines):
        start = _comment_start(line)
        if start >= 0:
            lines[index] = line[:start].rstrip()
            removed += 1

    if removed:
        logger.debug(f"Stripped {removed} comment(s)")
    return "\n".join(lines)
