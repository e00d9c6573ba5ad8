"""
Teddy Compiler Pipeline Tests
=============================

Tests for the end-to-end compiler interface: options, the staged
pipeline, file handling and the stage report.
"""

import logging

import pytest
from teddy.errors import TeddyError
from teddy.teddyc import (
    TeddyCompiler,
    CompilerOptions,
    compile_teddy,
    compile_file,
    load_source,
    render_report,
)
from teddy.teddyc.compiler import format_banner
from teddy.teddyc.ast import ProgramNode
from teddy.teddyc.targets import TargetDialect
from teddy.teddyc.errors import (
    TeddyCompilerError,
    LexError,
    ParseError,
    CodeGenError,
)


HELLO = """
// Adds two numbers
func add(a: Int, b: Int) -> Int {
    return a + b;   // sum
}

print(add(2, 3));
"""


# =============================================================================
# Options
# =============================================================================

class TestCompilerOptions:
    """Tests for CompilerOptions defaults and environment overrides."""

    def test_defaults(self):
        options = CompilerOptions()
        assert options.target == TargetDialect.C
        assert options.strip_comments is True
        assert options.emit_entry_point is True
        assert options.enum_tags is True
        assert options.forward_declarations is True
        assert options.indent == "    "

    def test_from_env_unset(self, monkeypatch):
        for name in ("TEDDY_TARGET", "TEDDY_ENUM_TAGS", "TEDDY_ENTRY_POINT", "TEDDY_FORWARD_DECLS"):
            monkeypatch.delenv(name, raising=False)
        assert CompilerOptions.from_env() == CompilerOptions()

    def test_from_env_values(self, monkeypatch):
        monkeypatch.setenv("TEDDY_TARGET", "c++")
        monkeypatch.setenv("TEDDY_ENUM_TAGS", "0")
        monkeypatch.setenv("TEDDY_ENTRY_POINT", "false")
        monkeypatch.setenv("TEDDY_FORWARD_DECLS", "no")
        options = CompilerOptions.from_env()
        assert options.target == TargetDialect.CPP
        assert options.enum_tags is False
        assert options.emit_entry_point is False
        assert options.forward_declarations is False

    def test_from_env_ignores_invalid(self, monkeypatch):
        monkeypatch.setenv("TEDDY_TARGET", "fortran")
        monkeypatch.setenv("TEDDY_ENUM_TAGS", "maybe")
        options = CompilerOptions.from_env()
        assert options.target == TargetDialect.C
        assert options.enum_tags is True


# =============================================================================
# Pipeline
# =============================================================================

class TestPipeline:
    """Tests for TeddyCompiler.compile_source and compile_teddy."""

    def test_result_keeps_every_stage(self):
        result = TeddyCompiler().compile_source(HELLO, "hello.teddy")
        assert result.success
        assert result.filename == "hello.teddy"
        assert result.source == HELLO
        assert "//" not in result.stripped_source
        assert result.tokens[0].value == "func"
        assert isinstance(result.ast, ProgramNode)
        assert len(result.ast) == 2
        assert result.target == TargetDialect.C

    def test_compile_teddy_c(self):
        code = compile_teddy(HELLO)
        assert "int add(const int a, const int b) {" in code
        assert 'printf("%d\\n", add(2, 3));' in code

    def test_compile_teddy_cpp(self):
        code = compile_teddy(HELLO, TargetDialect.CPP)
        assert code.startswith("#include <iostream>")
        assert "cout << add(2, 3) << endl;" in code

    def test_target_argument_overrides_options(self):
        options = CompilerOptions(target=TargetDialect.CPP)
        code = compile_teddy("print(1);", TargetDialect.C, options)
        assert "printf" in code
        # The caller's options object is left untouched
        assert options.target == TargetDialect.CPP

    def test_options_target_used_without_target_argument(self):
        options = CompilerOptions(target=TargetDialect.CPP)
        code = compile_teddy('print("hi");', options=options)
        assert 'cout << "hi" << endl;' in code
        assert "printf" not in code

    def test_options_reach_generator(self):
        options = CompilerOptions(emit_entry_point=False, indent="\t")
        code = compile_teddy("func f() -> Int { return 1; } print(f());", options=options)
        assert "main" not in code
        assert "\treturn 1;" in code

    def test_comments_must_be_stripped(self):
        options = CompilerOptions(strip_comments=False)
        with pytest.raises(ParseError):
            compile_teddy("print(1); // hi", options=options)

    def test_empty_source(self):
        code = compile_teddy("")
        assert "main" not in code
        assert code.startswith("#include <stdio.h>")

    @pytest.mark.parametrize("source,error", [
        ("let x: Int = 4 % 2;", LexError),
        ("let x: Int = ;", ParseError),
        ("func main() -> Int { return 0; } print(1);", CodeGenError),
    ])
    def test_stage_errors(self, source, error):
        with pytest.raises(error):
            compile_teddy(source)

    def test_errors_share_base(self):
        with pytest.raises(TeddyCompilerError):
            compile_teddy('print("open);')


# =============================================================================
# Files
# =============================================================================

class TestFiles:
    """Tests for file loading and compile_file."""

    def test_compile_file_writes_output(self, tmp_path):
        src = tmp_path / "hello.teddy"
        src.write_text(HELLO, encoding="utf-8")
        out = tmp_path / "hello.c"

        code = compile_file(str(src), str(out))

        assert out.read_text(encoding="utf-8") == code
        assert "int main(void) {" in code

    def test_compile_file_without_output(self, tmp_path):
        src = tmp_path / "one.teddy"
        src.write_text("print(1);", encoding="utf-8")
        assert "printf" in compile_file(str(src))
        assert sorted(p.name for p in tmp_path.iterdir()) == ["one.teddy"]

    def test_compile_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            TeddyCompiler().compile_file(str(tmp_path / "missing.teddy"))

    def test_load_source(self, tmp_path):
        src = tmp_path / "a.teddy"
        src.write_text("print(1);", encoding="utf-8")
        assert load_source(str(src)) == "print(1);"

    def test_load_source_missing(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            assert load_source(str(tmp_path / "nope.teddy")) is None
        assert "Cannot read" in caplog.text


# =============================================================================
# Report
# =============================================================================

class TestReport:
    """Tests for the per-stage text report."""

    def test_format_banner(self):
        banner = format_banner("Parsing", width=20).split("\n")
        assert banner[0] == "-" * 20
        assert banner[1] == ""
        assert banner[2] == "      Parsing"
        assert banner[3] == ""
        assert banner[4] == "-" * 20

    def test_report_sections_in_order(self):
        report = render_report(TeddyCompiler().compile_source(HELLO))
        titles = [
            "Source Input (.teddy)",
            "Lexical Analysis",
            "Parsing",
            "Code Generation (Target: C)",
        ]
        positions = [report.index(title) for title in titles]
        assert positions == sorted(positions)
        assert "Token(FUNC, 'func', @" in report
        assert "Function: add(a: Int, b: Int) -> Int" in report
        assert "return a + b;" in report

    def test_report_names_cpp_target(self):
        options = CompilerOptions(target=TargetDialect.CPP)
        report = render_report(TeddyCompiler(options).compile_source("print(1);"))
        assert "Code Generation (Target: C++)" in report


# =============================================================================
# Error Formatting
# =============================================================================

class TestErrorFormatting:
    """Tests for the shared TeddyError message format."""

    def test_message_only(self):
        assert str(TeddyError("bad thing")) == "error: bad thing"

    def test_with_position_and_hint(self):
        error = TeddyError("bad thing", position=12, hint="try again")
        assert str(error) == "error: bad thing (at offset 12)\nhint: try again"

    def test_parse_error_at_end_of_input(self):
        with pytest.raises(ParseError) as exc_info:
            compile_teddy("print(1)")
        assert "end of input" in str(exc_info.value)
        assert exc_info.value.position is None
