"""
Teddy Code Generator Test Suite
===============================

Tests for lowering Teddy ASTs to C and C++ source text.

Test Organization
-----------------
- TestProgramLayout: headers, prototypes, synthesized main
- TestDeclarations: functions and variables
- TestExpressions: literals, calls, operator parenthesization
- TestPrint: printf format inference and cout lowering
- TestCodeGenErrors: conditions the generator rejects
- TestHostCompiler: generated code builds cleanly with cc / c++
"""

import shutil
import subprocess

import pytest
from teddy.teddyc.parser import parse_source
from teddy.teddyc.codegen import CodeGenerator, generate, escape_c_string
from teddy.teddyc.ast import ProgramNode, TypeNode
from teddy.teddyc.targets import TargetDialect, get_target_by_name, c_type_name
from teddy.teddyc.errors import (
    CodeGenError,
    UnsupportedFeatureError,
    EntryPointConflictError,
)


C_HEADERS = (
    "#include <stdio.h>\n"
    "#include <stdlib.h>\n"
    "#include <stdbool.h>\n"
    "#include <string.h>\n"
)


def gen(source: str, target: TargetDialect = TargetDialect.C, **settings) -> str:
    """Parse and generate in one step."""
    return generate(parse_source(source), target, **settings)


def squash(text: str) -> str:
    """Remove all whitespace, for layout-independent comparisons."""
    return "".join(text.split())


# Skip if no host compiler is available
requires_cc = pytest.mark.skipif(shutil.which("cc") is None, reason="No C compiler (cc) on PATH")
requires_cxx = pytest.mark.skipif(shutil.which("c++") is None, reason="No C++ compiler (c++) on PATH")


def compile_object(compiler: str, flags: list[str], code: str, suffix: str, tmp_path) -> subprocess.CompletedProcess:
    """Compile generated code to an object file with warnings as errors."""
    src = tmp_path / f"out{suffix}"
    src.write_text(code, encoding="utf-8")
    return subprocess.run(
        [compiler, *flags, "-Wall", "-Wextra", "-Werror", "-c", str(src), "-o", str(tmp_path / "out.o")],
        capture_output=True,
        text=True,
    )


# =============================================================================
# Program Layout Tests
# =============================================================================

class TestProgramLayout:
    """Tests for the overall shape of the generated file."""

    def test_empty_program_c(self):
        """An empty program produces only the standard headers."""
        assert generate(ProgramNode()) == C_HEADERS

    def test_empty_program_cpp(self):
        code = generate(ProgramNode(), TargetDialect.CPP)
        assert code == (
            "#include <iostream>\n"
            "#include <string>\n"
            "#include <cstdlib>\n"
            "#include <cstring>\n"
            "using namespace std;\n"
        )

    def test_top_level_statements_in_main(self):
        code = gen("let x: Int = 2 + 3; print(x);")
        assert code == C_HEADERS + (
            "\n"
            "int main(void) {\n"
            "    int x = 2 + 3;\n"
            '    printf("%d\\n", x);\n'
            "    return 0;\n"
            "}\n"
        )

    def test_function_and_prototype(self):
        code = gen("func add(a: Int, b: Int) -> Int { return a + b; }")
        assert code == C_HEADERS + (
            "\n"
            "int add(const int a, const int b);\n"
            "\n"
            "int add(const int a, const int b) {\n"
            "    return a + b;\n"
            "}\n"
        )

    def test_functions_before_main(self):
        code = gen("print(twice(2)); func twice(n: Int) -> Int { return n * 2; }")
        assert code.index("int twice(const int n) {") < code.index("int main(void) {")
        assert "printf(\"%d\\n\", twice(2));" in code

    def test_forward_declarations_disabled(self):
        code = gen("func one() -> Int { return 1; }", forward_declarations=False)
        assert code.count("int one()") == 1
        assert "int one();" not in code

    def test_no_main_without_statements(self):
        code = gen("func one() -> Int { return 1; }")
        assert "main" not in code

    def test_user_main_kept(self):
        code = gen("func main() -> Int { print(1); return 0; }")
        assert "int main() {" in code
        assert "int main(void)" not in code

    def test_entry_point_disabled(self):
        """Without an entry point, nodes are emitted in source order."""
        code = gen("let x: Int = 1; func f() -> Int { return x; }", emit_entry_point=False)
        assert "main" not in code
        body = code[len(C_HEADERS):]
        assert body.index("int x = 1;") < body.index("int f() {")


# =============================================================================
# Declaration Tests
# =============================================================================

class TestDeclarations:
    """Tests for functions and variable declarations."""

    def test_function_matches_reference(self):
        code = gen("func add(a: Int, b: Int) -> Int { return a + b; }", forward_declarations=False)
        assert squash("int add(const int a, const int b) {return a + b;}") in squash(code)

    def test_void_function(self):
        code = gen('func hello() -> Void { print("hi"); }')
        assert "void hello() {" in code
        assert '    printf("%s\\n", "hi");' in code

    def test_bare_declaration(self):
        code = gen("var count: Int;")
        assert "    int count;" in code

    def test_string_declaration_c(self):
        code = gen('let s: String = "hi";')
        assert '    char* s = "hi";' in code

    def test_string_declaration_cpp(self):
        code = gen('let s: String = "hi";', TargetDialect.CPP)
        assert '    string s = "hi";' in code

    def test_float_and_bool_types(self):
        code = gen("let f: Float = 5.0; let b: Bool = true;")
        assert "    float f = 5.0;" in code
        assert "    bool b = true;" in code

    def test_string_formal_in_c(self):
        """A String formal is a const pointer, so it can be returned as char*."""
        code = gen("func echo(s: String) -> String { return s; }")
        assert "char* echo(char* const s);" in code
        assert "char* echo(char* const s) {" in code

    def test_string_formal_in_cpp(self):
        code = gen("func greet(name: String) -> Void { print(name); }", TargetDialect.CPP)
        assert "void greet(const string name) {" in code

    def test_if_statement(self):
        code = gen("let x: Int = 1; if x { print(1); }")
        assert (
            "    if (x) {\n"
            '        printf("%d\\n", 1);\n'
            "    }\n"
        ) in code

    def test_nested_if(self):
        code = gen("if a { if b { print(c); } }")
        assert "    if (a) {\n        if (b) {\n            printf(" in code

    def test_expression_statement(self):
        code = gen("func f() -> Void { } f();")
        assert "    f();\n" in code


# =============================================================================
# Expression Tests
# =============================================================================

class TestExpressions:
    """Tests for expression rendering."""

    def test_call_arguments(self):
        assert "add(1, x * 2)" in gen("print(add(1, x * 2));")

    @pytest.mark.parametrize("source,expected", [
        ("2 + 3 * 4", "2 + 3 * 4"),
        ("(2 + 3) * 4", "(2 + 3) * 4"),
        ("1 - 2 - 3", "1 - 2 - 3"),
        ("1 - (2 - 3)", "1 - (2 - 3)"),
        ("8 / (4 / 2)", "8 / (4 / 2)"),
        ("a * (b + c)", "a * (b + c)"),
    ])
    def test_parenthesization(self, source, expected):
        """Parentheses appear only where the tree shape needs them."""
        code = gen(f"print({source});")
        assert f", {expected});" in code

    def test_float_literal(self):
        assert "1.5 * 2" in gen("print(1.5 * 2);")

    def test_string_escaping(self):
        code = gen(r'print("say \"hi\"\n");')
        assert r'"say \"hi\"\n"' in code

    def test_escape_c_string(self):
        assert escape_c_string('a"b\\c\t') == r'"a\"b\\c\t"'


# =============================================================================
# Print Lowering Tests
# =============================================================================

class TestPrint:
    """Tests for printf format inference and stream output."""

    @pytest.mark.parametrize("expr,fmt", [
        ("42", "%d"),
        ("1.5", "%f"),
        ('"text"', "%s"),
        ("true", "%d"),
        ("1 + 2", "%d"),
        ("1 + 2.5", "%f"),
        ("unknown", "%s"),
    ])
    def test_literal_formats(self, expr, fmt):
        code = gen(f"print({expr});")
        assert f'printf("{fmt}\\n", ' in code

    def test_declared_variable_format(self):
        code = gen("let f: Float = 2.0; print(f);")
        assert 'printf("%f\\n", f);' in code

    def test_formal_format(self):
        code = gen("func show(s: String, n: Int) -> Void { print(s, n); }")
        assert 'printf("%s\\n", s);' in code
        assert 'printf("%d\\n", n);' in code

    def test_function_return_format(self):
        code = gen("func half() -> Float { return 0.5; } print(half());")
        assert 'printf("%f\\n", half());' in code

    def test_float_variable_contaminates_arithmetic(self):
        code = gen("let r: Float = 2.0; print(r * 2);")
        assert 'printf("%f\\n", r * 2);' in code

    def test_scope_ends_with_function(self):
        """A formal is not visible after its function."""
        code = gen("func f(v: Float) -> Void { } print(v);")
        assert 'printf("%s\\n", v);' in code

    def test_one_line_per_expression(self):
        code = gen("print(1, 2.0);")
        assert '    printf("%d\\n", 1);\n    printf("%f\\n", 2.0);\n' in code

    def test_cpp_stream_output(self):
        code = gen('print(1, "a");', TargetDialect.CPP)
        assert '    cout << 1 << endl;\n    cout << "a" << endl;\n' in code
        assert "printf" not in code


# =============================================================================
# Target Tests
# =============================================================================

class TestTargets:
    """Tests for target dialect lookup and type mapping."""

    @pytest.mark.parametrize("name,target", [
        ("c", TargetDialect.C),
        ("C", TargetDialect.C),
        ("cpp", TargetDialect.CPP),
        ("c++", TargetDialect.CPP),
        ("CXX", TargetDialect.CPP),
    ])
    def test_get_target_by_name(self, name, target):
        assert get_target_by_name(name) == target

    def test_unknown_target(self):
        assert get_target_by_name("rust") is None

    def test_type_mapping(self):
        assert c_type_name("Int", TargetDialect.C) == "int"
        assert c_type_name("String", TargetDialect.C) == "char*"
        assert c_type_name("String", TargetDialect.CPP) == "string"
        assert c_type_name("Shape", TargetDialect.CPP) == "Shape"

    def test_extensions(self):
        assert TargetDialect.C.get_info().extension == ".c"
        assert TargetDialect.CPP.get_info().extension == ".cpp"


# =============================================================================
# Error Tests
# =============================================================================

class TestCodeGenErrors:
    """Tests for programs the generator refuses to lower."""

    def test_main_conflicts_with_top_level_statements(self):
        with pytest.raises(EntryPointConflictError):
            gen("func main() -> Int { return 0; } print(1);")

    def test_main_allowed_without_entry_point(self):
        code = gen("func main() -> Int { return 0; } print(1);", emit_entry_point=False)
        assert "int main() {" in code

    def test_nested_function(self):
        with pytest.raises(UnsupportedFeatureError):
            gen("func outer() -> Void { func inner() -> Void { } }")

    def test_nested_enum(self):
        with pytest.raises(UnsupportedFeatureError):
            gen("func f() -> Void { enum E { case a; } }")

    def test_unhandled_node(self):
        """Nodes outside the statement set are rejected, not skipped."""
        with pytest.raises(CodeGenError):
            CodeGenerator().generate(ProgramNode((TypeNode.INT,)))

    def test_generator_is_reusable(self):
        generator = CodeGenerator()
        first = generator.generate(parse_source("print(1);"))
        second = generator.generate(parse_source("print(1);"))
        assert first == second


# =============================================================================
# Host Compiler Tests
# =============================================================================

SCALARS = """
let a: Int = 2 + 3 * 4;
let b: Float = 1.5 * (2.0 - 0.5);
let c: Bool = true;
let d: String = "hi";
var e: Int = a / 2 - 1;
print(a, b, c, d, e);
"""

ENUMS_AND_FUNCTIONS = """
func echo(s: String) -> String { return s; }
enum Shape { case circle(r: Float); case square(s: Float); }
enum Box { case full(value: Int); case none; }
let x: Shape = .circle(5.0);
if let x: Shape = .circle(radius: Float) { print(radius * 2); }
let b: Box = .full(3);
if let b: Box = .full(v: Int) { print(v); }
print(echo("hi"));
"""


class TestHostCompiler:
    """Generated code must compile without any diagnostics."""

    @requires_cc
    @pytest.mark.parametrize("source", [SCALARS, ENUMS_AND_FUNCTIONS])
    def test_c(self, source, tmp_path):
        result = compile_object("cc", ["-std=c11"], gen(source), ".c", tmp_path)
        assert result.returncode == 0, result.stderr
        assert result.stderr == ""

    @requires_cxx
    @pytest.mark.parametrize("source", [SCALARS, ENUMS_AND_FUNCTIONS])
    def test_cpp(self, source, tmp_path):
        result = compile_object("c++", ["-std=c++17"], gen(source, TargetDialect.CPP), ".cpp", tmp_path)
        assert result.returncode == 0, result.stderr
        assert result.stderr == ""
