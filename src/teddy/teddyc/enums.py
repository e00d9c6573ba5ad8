"""
Enum Layout and Tagged-Union Lowering
=====================================

Teddy enums are sum types whose cases carry typed associated values.
They have no direct C equivalent, so each enum is lowered to a family
of structs:

    enum Shape {                    typedef struct _ShapeCircle {
        case circle(r: Float);          float r;
        case empty;                 } _ShapeCircle;
    }
                                    typedef struct _ShapeEmpty {
                                        char _empty;
                                    } _ShapeEmpty;

                                    typedef enum {
                                        _ShapeCircleTag,
                                        _ShapeEmptyTag
                                    } _ShapeTag;

                                    typedef struct Shape {
                                        _ShapeTag tag;
                                        _ShapeCircle circle;
                                        _ShapeEmpty empty;
                                    } Shape;

plus one constructor function per case (_ShapeCreateCircleCase) that
returns a zeroed Shape with the tag set and the case's fields filled in.

Naming
------
For enum E and case c (with C = c with an upper-case first letter):

    case struct     _EC
    outer member    c with a lower-case first letter
    constructor     _ECreateCCase
    tag constant    _ECTag
    tag type        _ETag

Because these names are derived, two distinct case names can collide
('circle' and 'Circle' both map to _ShapeCircle), and so can cases of
different enums (enum A case bC and enum AB case c both map to _ABC).
The registry rejects such layouts up front, together with names that
are C or C++ keywords, so the emitted declarations always compile.

The constructor's local is called _value; Teddy identifiers start with
a letter, so no field can shadow it.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from teddy.teddyc.ast import EnumDefinitionNode, ProgramNode, VariableNode
from teddy.teddyc.errors import (
    DuplicateEnumError,
    DuplicateEnumCaseError,
    UnknownEnumError,
    UnknownEnumCaseError,
    ReservedNameError,
)
from teddy.teddyc.targets import RESERVED_WORDS, TargetDialect, const_declaration

logger = logging.getLogger(__name__)

# Member of the outer struct holding the discriminant
TAG_MEMBER = "tag"

# Placeholder member for cases without associated values (C forbids empty structs)
EMPTY_MEMBER = "_empty"

# Local holding the value under construction in case constructors
RESULT_LOCAL = "_value"


def upper_first(name: str) -> str:
    return name[:1].upper() + name[1:]


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


# =============================================================================
# Layout Data Classes
# =============================================================================

@dataclass(frozen=True)
class EnumCaseLayout:
    """
    Generated names and payload of one enum case.

    Attributes:
        enum_name: Name of the owning enum
        case_name: Case name as written in the source
        associated_values: Payload fields in declaration order
    """
    enum_name: str
    case_name: str
    associated_values: tuple[VariableNode, ...] = ()

    @property
    def struct_name(self) -> str:
        return f"_{self.enum_name}{upper_first(self.case_name)}"

    @property
    def member_name(self) -> str:
        return lower_first(self.case_name)

    @property
    def constructor_name(self) -> str:
        return f"_{self.enum_name}Create{upper_first(self.case_name)}Case"

    @property
    def tag_name(self) -> str:
        return f"_{self.enum_name}{upper_first(self.case_name)}Tag"

    @property
    def arity(self) -> int:
        return len(self.associated_values)


@dataclass
class EnumLayout:
    """
    Layout of one enum: its cases in declaration order.

    Attributes:
        name: Enum name
        cases: Case layouts keyed by case name, in declaration order
    """
    name: str
    cases: dict[str, EnumCaseLayout] = field(default_factory=dict)

    @property
    def tag_type_name(self) -> str:
        return f"_{self.name}Tag"

    @property
    def case_names(self) -> list[str]:
        return list(self.cases)

    def get_case(self, case_name: str) -> Optional[EnumCaseLayout]:
        return self.cases.get(case_name)


# =============================================================================
# Layout Registry
# =============================================================================

class EnumLayoutRegistry:
    """
    Maps (enum, case) pairs to their generated layout.

    Built once per generation run from every enum definition in the
    program. Registration validates that enum names are unique and that
    the generated identifiers of each enum's cases do not collide.

    Usage:
        registry = EnumLayoutRegistry.from_program(program)
        layout = registry.lookup_case("Shape", "circle")
        layout.constructor_name      # '_ShapeCreateCircleCase'
    """

    def __init__(self):
        self._enums: dict[str, EnumLayout] = {}
        # File-scope identifiers generated so far -> enum that owns them
        self._generated: dict[str, str] = {}

    @classmethod
    def from_program(cls, program: ProgramNode) -> "EnumLayoutRegistry":
        """Register every top-level enum definition of a program."""
        registry = cls()
        for node in program:
            if isinstance(node, EnumDefinitionNode):
                registry.register(node)
        return registry

    def register(self, definition: EnumDefinitionNode) -> EnumLayout:
        """
        Register an enum definition.

        Struct, tag and constructor names live in one C namespace, so they
        are checked against every enum registered before, not only within
        this one. Nothing is recorded unless the whole enum is valid.

        Raises:
            DuplicateEnumError: If an enum with this name already exists,
                or its tag type name is already generated
            DuplicateEnumCaseError: If two cases share a name or a
                generated identifier
            ReservedNameError: If the enum, a case or a field is named
                after a C/C++ keyword
        """
        name = definition.name
        if name in self._enums:
            raise DuplicateEnumError(name)
        self._check_reserved(name, name)

        layout = EnumLayout(name)
        if layout.tag_type_name in self._generated:
            raise DuplicateEnumError(name, layout.tag_type_name)

        generated = {layout.tag_type_name: name}
        members: dict[str, str] = {TAG_MEMBER: TAG_MEMBER}

        for case in definition.cases:
            if case.case_name in layout.cases:
                raise DuplicateEnumCaseError(name, case.case_name)

            case_layout = EnumCaseLayout(name, case.case_name, case.associated_values)
            self._check_reserved(name, case_layout.member_name)
            for value in case.associated_values:
                self._check_reserved(name, value.identifier)

            for identifier in (case_layout.struct_name, case_layout.tag_name, case_layout.constructor_name):
                if identifier in generated or identifier in self._generated:
                    raise DuplicateEnumCaseError(name, case.case_name, identifier)
                generated[identifier] = name

            if case_layout.member_name in members:
                raise DuplicateEnumCaseError(name, case.case_name, case_layout.member_name)
            members[case_layout.member_name] = case.case_name

            layout.cases[case.case_name] = case_layout

        self._enums[name] = layout
        self._generated.update(generated)
        logger.debug(f"Registered enum {name} with cases {layout.case_names}")
        return layout

    def _check_reserved(self, enum_name: str, name: str) -> None:
        if name in RESERVED_WORDS:
            raise ReservedNameError(enum_name, name)

    def get(self, enum_name: str) -> Optional[EnumLayout]:
        return self._enums.get(enum_name)

    def lookup_case(self, enum_name: str, case_name: str) -> EnumCaseLayout:
        """
        Find the layout of one case.

        Raises:
            UnknownEnumError: If the enum is not registered
            UnknownEnumCaseError: If the enum has no such case
        """
        layout = self._enums.get(enum_name)
        if layout is None:
            raise UnknownEnumError(enum_name)
        case_layout = layout.get_case(case_name)
        if case_layout is None:
            raise UnknownEnumCaseError(enum_name, case_name, layout.case_names)
        return case_layout

    def __contains__(self, enum_name: str) -> bool:
        return enum_name in self._enums

    def __iter__(self) -> Iterator[EnumLayout]:
        return iter(self._enums.values())

    def __len__(self) -> int:
        return len(self._enums)


# =============================================================================
# C Emission
# =============================================================================

class EnumEmitter:
    """
    Renders enum layouts as C (or C++) declarations.

    Attributes:
        target: Output dialect
        type_name: Maps a Teddy type name to its C spelling
        indent: Indentation unit for struct and function bodies
        enum_tags: Emit the discriminant enum and 'tag' member
    """

    def __init__(
        self,
        target: TargetDialect,
        type_name: Callable[[str], str],
        indent: str = "    ",
        enum_tags: bool = True,
    ):
        self.target = target
        self.type_name = type_name
        self.indent = indent
        self.enum_tags = enum_tags

    def emit_enum(self, layout: EnumLayout) -> list[str]:
        """Emit case structs, tag enum, outer struct and constructors."""
        lines: list[str] = []
        cases = list(layout.cases.values())

        for case in cases:
            members = [self._declaration(v) for v in case.associated_values]
            lines.extend(self._typedef_struct(case.struct_name, members))

        if self.enum_tags and cases:
            lines.append("typedef enum {")
            tags = [case.tag_name for case in cases]
            for i, tag in enumerate(tags):
                separator = "," if i < len(tags) - 1 else ""
                lines.append(f"{self.indent}{tag}{separator}")
            lines.append(f"}} {layout.tag_type_name};")

        members = []
        if self.enum_tags and cases:
            members.append(f"{layout.tag_type_name} {TAG_MEMBER}")
        members.extend(f"{case.struct_name} {case.member_name}" for case in cases)
        lines.extend(self._typedef_struct(layout.name, members))

        for case in cases:
            lines.extend(self.emit_constructor(layout, case))

        return lines

    def emit_constructor(self, layout: EnumLayout, case: EnumCaseLayout) -> list[str]:
        """
        Emit the constructor function of one case.

        C zeroes the value with memset. C++ value-initializes it instead,
        since memset would corrupt a std::string member.
        """
        params = ", ".join(
            const_declaration(self.type_name(v.type.name), v.identifier) for v in case.associated_values
        )
        signature = f"{layout.name} {case.constructor_name}({params or 'void'})"

        body = []
        if self.target == TargetDialect.CPP:
            body.append(f"{layout.name} {RESULT_LOCAL} = {layout.name}();")
        else:
            body.append(f"{layout.name} {RESULT_LOCAL};")
            body.append(f"memset(&{RESULT_LOCAL}, 0, sizeof({RESULT_LOCAL}));")
        if self.enum_tags:
            body.append(f"{RESULT_LOCAL}.{TAG_MEMBER} = {case.tag_name};")
        for v in case.associated_values:
            body.append(f"{RESULT_LOCAL}.{case.member_name}.{v.identifier} = {v.identifier};")
        body.append(f"return {RESULT_LOCAL};")

        return [f"{signature} {{"] + [f"{self.indent}{line}" for line in body] + ["}"]

    def emit_case_test(self, variable: str, case: EnumCaseLayout) -> str:
        """Condition testing whether a variable holds a case."""
        return f"{variable}.{TAG_MEMBER} == {case.tag_name}"

    def emit_binding(self, variable: str, case: EnumCaseLayout, binding: VariableNode, field_name: str) -> str:
        """Declaration copying one associated value out of a variable."""
        declaration = const_declaration(self.type_name(binding.type.name), binding.identifier)
        return f"{declaration} = {variable}.{case.member_name}.{field_name};"

    def _declaration(self, variable: VariableNode) -> str:
        return f"{self.type_name(variable.type.name)} {variable.identifier}"

    def _typedef_struct(self, name: str, members: list[str]) -> list[str]:
        lines = [f"typedef struct {name} {{"]
        if not members:
            lines.append(f"{self.indent}char {EMPTY_MEMBER};")
        for member in members:
            lines.append(f"{self.indent}{member};")
        lines.append(f"}} {name};")
        return lines
