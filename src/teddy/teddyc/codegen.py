"""
C/C++ Code Generator for Teddy
==============================

This module lowers a Teddy AST to C or C++ source text. It is the last
stage of the compiler; its output is meant to be handed to a regular C
compiler.

Output Layout
-------------
The generated file is laid out in a fixed order:

    1. #include lines for the target's standard headers
    2. 'using namespace std;' (C++ only)
    3. enum lowering: case structs, tag enums, outer structs, constructors
    4. forward prototypes for every function
    5. function definitions
    6. int main(void), holding all other top-level statements

Type Mapping
------------
| Teddy  | C       | C++     |
|--------|---------|---------|
| Int    | int     | int     |
| Float  | float   | float   |
| Bool   | bool    | bool    |
| Void   | void    | void    |
| String | char*   | string  |
| (enum) | (name)  | (name)  |

Print Lowering
--------------
C++ streams each printed expression: cout << e << endl;

C has no generic print, so each expression becomes a printf call whose
format is picked from the type the expression evidently has: its literal
kind, the declared type of a variable or formal, the return type of a
called function, or Float if any operand of an arithmetic expression is a
Float. Anything else falls back to %s.

Semantic Checking
-----------------
None, apart from what the enum lowering needs. Undeclared names, calls
to undefined functions and argument mismatches are emitted as written
and left for the C compiler to report.

Usage
-----
>>> from teddy.teddyc.parser import parse_source
>>> from teddy.teddyc.codegen import CodeGenerator
>>> ast = parse_source('func add(a: Int, b: Int) -> Int { return a + b; }')
>>> print(CodeGenerator().generate(ast))
"""

import logging
from typing import Optional

from teddy.teddyc.ast import (
    ASTNode,
    ASTVisitor,
    ProgramNode,
    FunctionNode,
    PrototypeNode,
    VariableNode,
    AssignExpression,
    ReturnNode,
    PrintNode,
    CallNode,
    FieldAccessNode,
    IfStatementNode,
    IfLetNode,
    IntegerLiteral,
    FloatLiteral,
    StringLiteral,
    BoolLiteral,
    BinaryOperation,
    EnumDefinitionNode,
    EnumConstruction,
    Expression,
)
from teddy.teddyc.enums import EnumCaseLayout, EnumEmitter, EnumLayoutRegistry
from teddy.teddyc.errors import (
    CodeGenError,
    UnsupportedFeatureError,
    EntryPointConflictError,
    EnumBindingError,
)
from teddy.teddyc.lexer import OPERATOR_PRECEDENCE
from teddy.teddyc.targets import TargetDialect, c_type_name, const_declaration

logger = logging.getLogger(__name__)


# Node types that produce a value and may stand alone as a statement
_EXPRESSION_NODES = (
    IntegerLiteral,
    FloatLiteral,
    StringLiteral,
    BoolLiteral,
    FieldAccessNode,
    CallNode,
    BinaryOperation,
    EnumConstruction,
)

# printf conversion per Teddy type; unknown types use the fallback
PRINTF_FORMATS: dict[str, str] = {
    "Int": "%d",
    "Bool": "%d",
    "Float": "%f",
    "String": "%s",
}
PRINTF_FALLBACK = "%s"

# C escapes for characters that cannot appear raw in a string literal
_C_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\0": "\\0",
}


def escape_c_string(value: str) -> str:
    """Render a decoded string as a double-quoted C literal."""
    return '"' + "".join(_C_ESCAPES.get(char, char) for char in value) + '"'


# =============================================================================
# Code Generator Class
# =============================================================================

class CodeGenerator(ASTVisitor):
    """
    Generates C or C++ source from a Teddy AST.

    Statement visitors append lines to the output; expression visitors
    return the rendered expression as a string. Each call to generate()
    starts from a clean state, but an instance is not meant to be shared
    between threads.

    Attributes:
        target: Output dialect
        indent: Indentation unit
        enum_tags: Emit discriminant tags for enums (required by 'if let')
        emit_entry_point: Wrap top-level statements in int main(void)
        forward_declarations: Emit a prototype for every function
    """

    def __init__(
        self,
        target: TargetDialect = TargetDialect.C,
        indent: str = "    ",
        enum_tags: bool = True,
        emit_entry_point: bool = True,
        forward_declarations: bool = True,
    ):
        self.target = target
        self.indent = indent
        self.enum_tags = enum_tags
        self.emit_entry_point = emit_entry_point
        self.forward_declarations = forward_declarations

        self._output: list[str] = []
        self._indent_level = 0

        # Enum layouts of the program being generated
        self._registry = EnumLayoutRegistry()
        self._enum_emitter = EnumEmitter(target, self._type_name, indent, enum_tags)

        # Symbol tables for print format inference: name -> Teddy type name
        self._scopes: list[dict[str, str]] = [{}]
        self._functions: dict[str, str] = {}

        # Nesting depth inside function or main bodies
        self._body_depth = 0

    def generate(self, program: ProgramNode) -> str:
        """
        Generate C/C++ source from an AST.

        Args:
            program: The root AST node

        Returns:
            Complete source text, ending in a newline

        Raises:
            CodeGenError: If the program cannot be lowered
        """
        info = self.target.get_info()
        logger.debug(f"Generating {info.name} for {len(program)} top-level nodes")

        self._output = []
        self._indent_level = 0
        self._scopes = [{}]
        self._body_depth = 0
        self._registry = EnumLayoutRegistry.from_program(program)

        functions = [node for node in program if isinstance(node, FunctionNode)]
        self._functions = {f.prototype.name: f.prototype.return_type.name for f in functions}
        statements = [
            node for node in program
            if not isinstance(node, (FunctionNode, EnumDefinitionNode))
        ]

        if self.emit_entry_point and statements and "main" in self._functions:
            raise EntryPointConflictError()

        self._emit_header()
        self._emit_enums()

        if self.forward_declarations and functions:
            for func in functions:
                self._emit(f"{self._signature(func.prototype)};")
            self._emit()

        if self.emit_entry_point:
            for func in functions:
                self.visit(func)
                self._emit()
            if statements:
                self._emit_entry_point(statements)
        else:
            for node in program:
                if isinstance(node, EnumDefinitionNode):
                    continue
                self._generate_statement(node)
                if isinstance(node, FunctionNode):
                    self._emit()

        while self._output and not self._output[-1]:
            self._output.pop()

        logger.debug(f"Generated {len(self._output)} lines")
        return "\n".join(self._output) + "\n"

    # =========================================================================
    # Output Methods
    # =========================================================================

    def _emit(self, line: str = "") -> None:
        """Emit a line at the current indentation."""
        if line:
            self._output.append(f"{self.indent * self._indent_level}{line}")
        else:
            self._output.append("")

    def _emit_header(self) -> None:
        info = self.target.get_info()
        for line in info.include_lines:
            self._emit(line)
        if info.namespace_line:
            self._emit(info.namespace_line)
        self._emit()

    def _emit_enums(self) -> None:
        for layout in self._registry:
            for line in self._enum_emitter.emit_enum(layout):
                self._emit(line)
            self._emit()

    def _emit_entry_point(self, statements: list[ASTNode]) -> None:
        """Wrap the top-level statements in int main(void)."""
        self._emit("int main(void) {")
        self._enter_body()
        for stmt in statements:
            self._generate_statement(stmt)
        self._emit("return 0;")
        self._leave_body()
        self._emit("}")

    def _emit_block(self, body: tuple[ASTNode, ...]) -> None:
        """Emit the statements of a '{ }' block one level deeper."""
        self._enter_body()
        for stmt in body:
            self._generate_statement(stmt)
        self._leave_body()

    def _enter_body(self) -> None:
        self._indent_level += 1
        self._body_depth += 1
        self._scopes.append({})

    def _leave_body(self) -> None:
        self._scopes.pop()
        self._body_depth -= 1
        self._indent_level -= 1

    # =========================================================================
    # Symbol Tables
    # =========================================================================

    def _declare(self, variable: VariableNode) -> None:
        self._scopes[-1][variable.identifier] = variable.type.name

    def _lookup(self, name: str) -> Optional[str]:
        """Look up a variable's Teddy type, innermost scope first."""
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        return None

    def _type_name(self, type_name: str) -> str:
        return c_type_name(type_name, self.target)

    def _declaration(self, variable: VariableNode) -> str:
        return f"{self._type_name(variable.type.name)} {variable.identifier}"

    def _signature(self, prototype: PrototypeNode) -> str:
        formals = ", ".join(
            const_declaration(self._type_name(f.type.name), f.identifier) for f in prototype.formals
        )
        return f"{self._type_name(prototype.return_type.name)} {prototype.name}({formals})"

    # =========================================================================
    # Statements
    # =========================================================================

    def _generate_statement(self, stmt: ASTNode) -> None:
        if isinstance(stmt, _EXPRESSION_NODES):
            self._emit(f"{self.visit(stmt)};")
        else:
            self.visit(stmt)

    def visit_FunctionNode(self, node: FunctionNode) -> None:
        if self._body_depth > 0:
            raise UnsupportedFeatureError(
                f"nested function '{node.prototype.name}'",
                "define functions at the top level",
            )
        self._emit(f"{self._signature(node.prototype)} {{")
        self._enter_body()
        for formal in node.prototype.formals:
            self._declare(formal)
        for stmt in node.body:
            self._generate_statement(stmt)
        self._leave_body()
        self._emit("}")

    def visit_PrototypeNode(self, node: PrototypeNode) -> None:
        self._emit(f"{self._signature(node)};")

    def visit_EnumDefinitionNode(self, node: EnumDefinitionNode) -> None:
        # Top-level enums are emitted up front; only nested ones get here
        raise UnsupportedFeatureError(
            f"nested enum '{node.name}'",
            "define enums at the top level",
        )

    def visit_VariableNode(self, node: VariableNode) -> None:
        self._declare(node)
        self._emit(f"{self._declaration(node)};")

    def visit_AssignExpression(self, node: AssignExpression) -> None:
        value = self.visit(node.value)
        self._declare(node.variable)
        self._emit(f"{self._declaration(node.variable)} = {value};")

    def visit_ReturnNode(self, node: ReturnNode) -> None:
        self._emit(f"return {self.visit(node.expression)};")

    def visit_PrintNode(self, node: PrintNode) -> None:
        for expr in node.expressions:
            rendered = self.visit(expr)
            if self.target.get_info().uses_stream_output:
                self._emit(f"cout << {rendered} << endl;")
            else:
                self._emit(f'printf("{self._printf_format(expr)}\\n", {rendered});')

    def visit_IfStatementNode(self, node: IfStatementNode) -> None:
        self._emit(f"if ({self.visit(node.condition)}) {{")
        self._emit_block(node.body)
        self._emit("}")

    def visit_IfLetNode(self, node: IfLetNode) -> None:
        """
        Lower 'if let' to a tag test plus const copies of the payload.

            if (s.tag == _ShapeCircleTag) {
                const float r = s.circle.r;
                ...
            }
        """
        enum_name = node.test_variable.type.name
        if not self.enum_tags:
            raise UnsupportedFeatureError(
                f"'if let' on enum '{enum_name}' without enum tags",
                "enable enum tags to test enum cases",
            )

        case = self._registry.lookup_case(enum_name, node.case_name)
        if len(node.unwrapped_variables) != case.arity:
            raise EnumBindingError(enum_name, node.case_name, case.arity, len(node.unwrapped_variables))

        variable = node.test_variable.identifier
        bindings = [
            self._enum_emitter.emit_binding(variable, case, binding, field.identifier)
            for binding, field in zip(node.unwrapped_variables, case.associated_values)
        ]

        self._emit(f"if ({self._enum_emitter.emit_case_test(variable, case)}) {{")
        self._enter_body()
        for binding, line in zip(node.unwrapped_variables, bindings):
            self._declare(binding)
            self._emit(line)
        for stmt in node.body:
            self._generate_statement(stmt)
        self._leave_body()
        self._emit("}")

    def generic_visit(self, node: ASTNode):
        raise CodeGenError(f"cannot generate code for {type(node).__name__}")

    # =========================================================================
    # Expressions
    # =========================================================================

    def visit_IntegerLiteral(self, node: IntegerLiteral) -> str:
        return str(node.value)

    def visit_FloatLiteral(self, node: FloatLiteral) -> str:
        return repr(node.value)

    def visit_StringLiteral(self, node: StringLiteral) -> str:
        return escape_c_string(node.value)

    def visit_BoolLiteral(self, node: BoolLiteral) -> str:
        return "true" if node.value else "false"

    def visit_FieldAccessNode(self, node: FieldAccessNode) -> str:
        return node.identifier

    def visit_CallNode(self, node: CallNode) -> str:
        args = ", ".join(self.visit(arg) for arg in node.arguments)
        return f"{node.identifier}({args})"

    def visit_BinaryOperation(self, node: BinaryOperation) -> str:
        """
        Render lhs op rhs, parenthesizing operands only where C would
        otherwise group them differently from the tree.
        """
        precedence = OPERATOR_PRECEDENCE[node.operator]
        lhs = self.visit(node.lhs)
        rhs = self.visit(node.rhs)

        if isinstance(node.lhs, BinaryOperation) and OPERATOR_PRECEDENCE[node.lhs.operator] < precedence:
            lhs = f"({lhs})"
        if isinstance(node.rhs, BinaryOperation) and OPERATOR_PRECEDENCE[node.rhs.operator] <= precedence:
            rhs = f"({rhs})"

        return f"{lhs} {node.operator} {rhs}"

    def visit_EnumConstruction(self, node: EnumConstruction) -> str:
        args = ", ".join(self.visit(arg) for arg in node.arguments)
        if node.enum_name in self._registry:
            constructor = self._registry.lookup_case(node.enum_name, node.case_name).constructor_name
        else:
            # Enum defined outside this unit; emit the conventional name unchecked
            constructor = EnumCaseLayout(node.enum_name, node.case_name).constructor_name
        return f"{constructor}({args})"

    # =========================================================================
    # Print Format Inference
    # =========================================================================

    def _infer_type(self, expr: Expression) -> Optional[str]:
        """Return the Teddy type name an expression evidently has, if any."""
        if isinstance(expr, IntegerLiteral):
            return "Int"
        if isinstance(expr, FloatLiteral):
            return "Float"
        if isinstance(expr, StringLiteral):
            return "String"
        if isinstance(expr, BoolLiteral):
            return "Bool"
        if isinstance(expr, FieldAccessNode):
            return self._lookup(expr.identifier)
        if isinstance(expr, CallNode):
            return self._functions.get(expr.identifier)
        if isinstance(expr, EnumConstruction):
            return expr.enum_name
        if isinstance(expr, BinaryOperation):
            types = {self._infer_type(expr.lhs), self._infer_type(expr.rhs)}
            if "Float" in types:
                return "Float"
            if types == {"Int"}:
                return "Int"
        return None

    def _printf_format(self, expr: Expression) -> str:
        return PRINTF_FORMATS.get(self._infer_type(expr), PRINTF_FALLBACK)


# =============================================================================
# Convenience Functions
# =============================================================================

def generate(program: ProgramNode, target: TargetDialect = TargetDialect.C, **settings) -> str:
    """
    Generate C/C++ source from a parsed program.

    Keyword settings are passed to CodeGenerator (indent, enum_tags,
    emit_entry_point, forward_declarations).

    Raises:
        CodeGenError: If the program cannot be lowered
    """
    return CodeGenerator(target, **settings).generate(program)
