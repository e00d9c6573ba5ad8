"""
Teddy Abstract Syntax Tree (AST) Definitions
============================================

This module defines the AST node types produced by the Teddy parser and
consumed by the code generator.

Node Hierarchy
--------------
ASTNode (base)
├── ProgramNode - root node, an ordered sequence of top-level nodes
├── Declarations
│   ├── FunctionNode - prototype plus body
│   ├── PrototypeNode - name, formals, return type
│   ├── VariableNode - let/var declaration without initializer
│   ├── EnumDefinitionNode - sum type with named cases
│   └── EnumCaseDefinitionNode - one case and its associated values
├── Statements
│   ├── AssignExpression - declaration with initializer
│   ├── ReturnNode - return statement
│   ├── PrintNode - print statement
│   ├── IfStatementNode - if with a block body
│   └── IfLetNode - enum case test with value bindings
├── Expressions
│   ├── BinaryOperation - lhs op rhs
│   ├── CallNode - function call
│   ├── FieldAccessNode - variable reference
│   ├── EnumConstruction - .case(args) for a declared enum type
│   ├── IntegerLiteral, FloatLiteral, StringLiteral, BoolLiteral
└── TypeNode - nominal type reference

Design Notes
------------
- All nodes are frozen dataclasses; the AST is never mutated after parsing
- Child sequences are tuples so nodes stay hashable and immutable
- TypeNode compares by name, so TypeNode("Int") == TypeNode.INT
- The node set is closed: the code generator handles every class here
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Union


# =============================================================================
# AST Node Base Class
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes."""
    pass


# =============================================================================
# Types and Variables
# =============================================================================

@dataclass(frozen=True)
class TypeNode(ASTNode):
    """
    Nominal type reference.

    The five built-in types are available as TypeNode.INT, TypeNode.FLOAT,
    TypeNode.STRING, TypeNode.BOOL and TypeNode.VOID. Any other name
    (typically an enum) is carried through unchanged.

    Attributes:
        name: The type name as written in the source
    """
    name: str

    @property
    def is_builtin(self) -> bool:
        """Return True for Int, Float, String, Bool and Void."""
        return self.name in BUILTIN_TYPE_NAMES


BUILTIN_TYPE_NAMES = frozenset({"Int", "Float", "String", "Bool", "Void"})

TypeNode.INT = TypeNode("Int")
TypeNode.FLOAT = TypeNode("Float")
TypeNode.STRING = TypeNode("String")
TypeNode.BOOL = TypeNode("Bool")
TypeNode.VOID = TypeNode("Void")


class Mutability(Enum):
    """Declared mutability of a variable."""
    IMMUTABLE = auto()  # let
    MUTABLE = auto()    # var


@dataclass(frozen=True)
class VariableNode(ASTNode):
    """
    Variable declaration without an initializer.

    Also used for function formals, enum associated values and if-let
    bindings.

    Attributes:
        mutability: let (IMMUTABLE) or var (MUTABLE)
        type: Declared type
        identifier: Variable name
    """
    mutability: Mutability
    type: TypeNode
    identifier: str


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class IntegerLiteral(ASTNode):
    value: int


@dataclass(frozen=True)
class FloatLiteral(ASTNode):
    value: float


@dataclass(frozen=True)
class StringLiteral(ASTNode):
    """
    String literal.

    Attributes:
        value: Decoded content, without quotes
    """
    value: str


@dataclass(frozen=True)
class BoolLiteral(ASTNode):
    value: bool


@dataclass(frozen=True)
class FieldAccessNode(ASTNode):
    """
    Bare identifier used as a value.

    Attributes:
        identifier: The referenced name
    """
    identifier: str


@dataclass(frozen=True)
class CallNode(ASTNode):
    """
    Function call expression.

    Attributes:
        identifier: Name of the called function
        arguments: Argument expressions in order
    """
    identifier: str
    arguments: tuple["Expression", ...] = ()


@dataclass(frozen=True)
class BinaryOperation(ASTNode):
    """
    Binary operation (lhs op rhs).

    Precedence is encoded in the tree shape: 2 + 3 * 4 is
    BinaryOperation(2, "+", BinaryOperation(3, "*", 4)).

    Attributes:
        lhs: Left operand
        operator: Operator symbol (+, -, *, /)
        rhs: Right operand
    """
    lhs: "Expression"
    operator: str
    rhs: "Expression"


@dataclass(frozen=True)
class EnumConstruction(ASTNode):
    """
    Construction of one case of an enum: let s: Shape = .circle(5.0);

    The enum name comes from the declared type of the variable being
    initialized. Whether the case exists is checked during code
    generation, not parsing.

    Attributes:
        enum_name: Name of the enum type
        case_name: Name of the constructed case
        arguments: Associated value expressions in order
    """
    enum_name: str
    case_name: str
    arguments: tuple["Expression", ...] = ()


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True)
class AssignExpression(ASTNode):
    """
    Declaration with initializer: let x: Int = 5;

    Attributes:
        variable: The declared variable
        value: Initializer expression (or EnumConstruction)
    """
    variable: VariableNode
    value: "Expression"


@dataclass(frozen=True)
class ReturnNode(ASTNode):
    expression: "Expression"


@dataclass(frozen=True)
class PrintNode(ASTNode):
    """
    print(a, b, ...);

    Attributes:
        expressions: Printed expressions; each is printed on its own line
    """
    expressions: tuple["Expression", ...] = ()


@dataclass(frozen=True)
class IfStatementNode(ASTNode):
    """
    if condition { body }

    Attributes:
        condition: Condition expression
        body: Statements executed when the condition is non-zero
    """
    condition: "Expression"
    body: tuple[ASTNode, ...] = ()


@dataclass(frozen=True)
class IfLetNode(ASTNode):
    """
    Enum case test with bindings:

        if let s: Shape = .circle(r: Float) { print(r); }

    The body runs when the existing variable s currently holds the
    circle case; r is bound to the case's first associated value.
    Bindings map positionally onto the case's associated values and are
    scoped to the body.

    Attributes:
        test_variable: The enum-typed variable being tested
        case_name: The case to match
        unwrapped_variables: Bindings for the associated values
        body: Statements executed on a match
    """
    test_variable: VariableNode
    case_name: str
    unwrapped_variables: tuple[VariableNode, ...] = ()
    body: tuple[ASTNode, ...] = ()


# =============================================================================
# Declaration Nodes
# =============================================================================

@dataclass(frozen=True)
class PrototypeNode(ASTNode):
    """
    Function signature: add(a: Int, b: Int) -> Int

    Attributes:
        name: Function name
        formals: Parameters (always immutable)
        return_type: Declared return type
    """
    name: str
    formals: tuple[VariableNode, ...]
    return_type: TypeNode


@dataclass(frozen=True)
class FunctionNode(ASTNode):
    """
    Function definition.

    The body has no implicit return; a non-Void function that falls off
    its end is passed to C as written.
    """
    prototype: PrototypeNode
    body: tuple[ASTNode, ...] = ()


@dataclass(frozen=True)
class EnumCaseDefinitionNode(ASTNode):
    """
    One case of an enum: case circle(r: Float);

    Attributes:
        enum_name: Name of the owning enum
        case_name: Case name, unique within the enum
        associated_values: Typed payload fields
    """
    enum_name: str
    case_name: str
    associated_values: tuple[VariableNode, ...] = ()


@dataclass(frozen=True)
class EnumDefinitionNode(ASTNode):
    """
    Sum type with named, struct-like cases.

    Attributes:
        name: Enum name
        cases: Case definitions in declaration order
    """
    name: str
    cases: tuple[EnumCaseDefinitionNode, ...] = ()

    @property
    def case_names(self) -> list[str]:
        return [case.case_name for case in self.cases]


# =============================================================================
# Program Root Node
# =============================================================================

@dataclass(frozen=True)
class ProgramNode(ASTNode):
    """
    Root of the AST: the ordered top-level nodes of one source unit.

    Behaves as a read-only sequence, so len(program), program[0] and
    iteration work directly on the statements.
    """
    statements: tuple[ASTNode, ...] = ()

    def __len__(self) -> int:
        return len(self.statements)

    def __iter__(self):
        return iter(self.statements)

    def __getitem__(self, index):
        return self.statements[index]


Expression = Union[
    IntegerLiteral,
    FloatLiteral,
    StringLiteral,
    BoolLiteral,
    FieldAccessNode,
    CallNode,
    BinaryOperation,
    EnumConstruction,
]


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatches to visit_<ClassName> methods. Subclasses override the
    methods for the node types they handle.

    Usage:
        class MyVisitor(ASTVisitor):
            def visit_FunctionNode(self, node):
                ...

        MyVisitor().visit(program)
    """

    def visit(self, node: ASTNode):
        """Visit a node by dispatching to the appropriate method."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode):
        """
        Default visit method for unhandled node types.

        Visits all child nodes, including those held in tuples.
        """
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, tuple):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Produces an indented, human-readable tree.

    Usage:
        printer = ASTPrinter()
        print(printer.print(program))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _visit_block(self, statements) -> None:
        self.indent_level += 1
        for stmt in statements:
            self.visit(stmt)
        self.indent_level -= 1

    def visit_ProgramNode(self, node: ProgramNode):
        self._emit("Program")
        self._visit_block(node.statements)

    def visit_FunctionNode(self, node: FunctionNode):
        proto = node.prototype
        formals = ", ".join(self._var_str(f) for f in proto.formals)
        self._emit(f"Function: {proto.name}({formals}) -> {proto.return_type.name}")
        self._visit_block(node.body)

    def visit_PrototypeNode(self, node: PrototypeNode):
        formals = ", ".join(self._var_str(f) for f in node.formals)
        self._emit(f"Prototype: {node.name}({formals}) -> {node.return_type.name}")

    def visit_VariableNode(self, node: VariableNode):
        self._emit(f"Variable: {self._decl_str(node)}")

    def visit_AssignExpression(self, node: AssignExpression):
        self._emit(f"Assign: {self._decl_str(node.variable)} = {self._expr_str(node.value)}")

    def visit_ReturnNode(self, node: ReturnNode):
        self._emit(f"Return {self._expr_str(node.expression)}")

    def visit_PrintNode(self, node: PrintNode):
        exprs = ", ".join(self._expr_str(e) for e in node.expressions)
        self._emit(f"Print({exprs})")

    def visit_IfStatementNode(self, node: IfStatementNode):
        self._emit(f"If {self._expr_str(node.condition)}")
        self._visit_block(node.body)

    def visit_IfLetNode(self, node: IfLetNode):
        bindings = ", ".join(self._var_str(v) for v in node.unwrapped_variables)
        self._emit(
            f"IfLet {node.test_variable.identifier}: {node.test_variable.type.name}"
            f" = .{node.case_name}({bindings})"
        )
        self._visit_block(node.body)

    def visit_EnumDefinitionNode(self, node: EnumDefinitionNode):
        self._emit(f"Enum: {node.name}")
        self._visit_block(node.cases)

    def visit_EnumCaseDefinitionNode(self, node: EnumCaseDefinitionNode):
        values = ", ".join(self._var_str(v) for v in node.associated_values)
        self._emit(f"Case: {node.case_name}({values})")

    def generic_visit(self, node: ASTNode):
        # Expressions used as statements
        self._emit(f"Expr: {self._expr_str(node)}")

    def _var_str(self, var: VariableNode) -> str:
        return f"{var.identifier}: {var.type.name}"

    def _decl_str(self, var: VariableNode) -> str:
        keyword = "let" if var.mutability == Mutability.IMMUTABLE else "var"
        return f"{keyword} {self._var_str(var)}"

    def _expr_str(self, expr: ASTNode) -> str:
        """Convert expression to string representation."""
        if isinstance(expr, (IntegerLiteral, FloatLiteral)):
            return str(expr.value)
        if isinstance(expr, BoolLiteral):
            return "true" if expr.value else "false"
        if isinstance(expr, StringLiteral):
            return f'"{expr.value}"'
        if isinstance(expr, FieldAccessNode):
            return expr.identifier
        if isinstance(expr, CallNode):
            args = ", ".join(self._expr_str(a) for a in expr.arguments)
            return f"{expr.identifier}({args})"
        if isinstance(expr, BinaryOperation):
            return f"({self._expr_str(expr.lhs)} {expr.operator} {self._expr_str(expr.rhs)})"
        if isinstance(expr, EnumConstruction):
            args = ", ".join(self._expr_str(a) for a in expr.arguments)
            return f"{expr.enum_name}.{expr.case_name}({args})"
        return f"<{type(expr).__name__}>"
