"""
Target Dialect Definitions
==========================

The Teddy compiler emits either C or C++. The two dialects share the
whole lowering; they differ only in:

    - the standard headers included at the top of the file
    - a 'using namespace std;' line (C++ only)
    - how the String type is spelled
    - how print statements are lowered (printf vs cout)
    - the default output file extension

Each difference is captured as data in TargetInfo so the code generator
never branches on the dialect name itself.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TargetDialect(Enum):
    """
    Output language of the code generator.

    Usage:
        >>> TargetDialect.C.get_info().extension
        '.c'
    """
    C = "c"
    CPP = "cpp"

    def get_info(self) -> "TargetInfo":
        """Return the emission settings for this dialect."""
        return TARGET_INFO[self]


@dataclass(frozen=True)
class TargetInfo:
    """
    Emission settings for one target dialect.

    Attributes:
        name: Human-readable dialect name
        headers: Standard headers, emitted as '#include <...>' lines
        namespace_line: Extra line after the headers, or None
        string_type: C spelling of the Teddy String type
        uses_stream_output: True to lower print to 'cout <<', False for printf
        extension: Default output file extension
    """
    name: str
    headers: tuple[str, ...]
    namespace_line: Optional[str]
    string_type: str
    uses_stream_output: bool
    extension: str

    @property
    def include_lines(self) -> list[str]:
        return [f"#include <{header}>" for header in self.headers]


TARGET_INFO: dict[TargetDialect, TargetInfo] = {
    TargetDialect.C: TargetInfo(
        name="C",
        headers=("stdio.h", "stdlib.h", "stdbool.h", "string.h"),
        namespace_line=None,
        string_type="char*",
        uses_stream_output=False,
        extension=".c",
    ),
    TargetDialect.CPP: TargetInfo(
        name="C++",
        headers=("iostream", "string", "cstdlib", "cstring"),
        namespace_line="using namespace std;",
        string_type="string",
        uses_stream_output=True,
        extension=".cpp",
    ),
}


# Teddy built-in types and their C spelling; String depends on the target
BUILTIN_C_TYPES: dict[str, str] = {
    "Int": "int",
    "Float": "float",
    "Bool": "bool",
    "Void": "void",
}


def c_type_name(type_name: str, target: TargetDialect) -> str:
    """
    Map a Teddy type name to its spelling in the target dialect.

    Names that are not built-in (enums) pass through unchanged.

    Example:
        >>> c_type_name("String", TargetDialect.CPP)
        'string'
        >>> c_type_name("Shape", TargetDialect.C)
        'Shape'
    """
    if type_name == "String":
        return target.get_info().string_type
    return BUILTIN_C_TYPES.get(type_name, type_name)


def get_target_by_name(name: str) -> Optional[TargetDialect]:
    """
    Look up a target dialect by name.

    Accepts 'c', 'cpp', 'c++' and 'cxx', case-insensitively.

    Returns:
        TargetDialect, or None if not found

    Example:
        >>> get_target_by_name("C++")
        <TargetDialect.CPP: 'cpp'>
    """
    name_lower = name.lower().strip()
    if name_lower in ("c++", "cxx"):
        return TargetDialect.CPP
    for target in TargetDialect:
        if target.value == name_lower:
            return target
    return None


# Words that cannot name a struct, member or field in either dialect.
# bool/true/false come from <stdbool.h> in C.
RESERVED_WORDS = frozenset({
    # C
    "auto", "break", "case", "char", "const", "continue", "default", "do",
    "double", "else", "enum", "extern", "float", "for", "goto", "if",
    "inline", "int", "long", "register", "restrict", "return", "short",
    "signed", "sizeof", "static", "struct", "switch", "typedef", "union",
    "unsigned", "void", "volatile", "while",
    "bool", "true", "false",
    # C++ only
    "alignas", "alignof", "and", "and_eq", "asm", "bitand", "bitor",
    "catch", "char16_t", "char32_t", "char8_t", "class", "compl", "concept",
    "consteval", "constexpr", "constinit", "const_cast", "co_await",
    "co_return", "co_yield", "decltype", "delete", "dynamic_cast",
    "explicit", "export", "friend", "mutable", "namespace", "new",
    "noexcept", "not", "not_eq", "nullptr", "operator", "or", "or_eq",
    "private", "protected", "public", "reinterpret_cast", "requires",
    "static_assert", "static_cast", "template", "this", "thread_local",
    "throw", "try", "typeid", "typename", "using", "virtual", "wchar_t",
    "xor", "xor_eq",
})


def const_declaration(c_type: str, identifier: str) -> str:
    """
    Declare a read-only parameter or local of an already mapped C type.

    Pointer types get a const pointer rather than a pointer to const,
    so the value can still be stored in or returned as a plain pointer.

    Example:
        >>> const_declaration("int", "a")
        'const int a'
        >>> const_declaration("char*", "s")
        'char* const s'
    """
    if c_type.endswith("*"):
        return f"{c_type} const {identifier}"
    return f"const {c_type} {identifier}"
