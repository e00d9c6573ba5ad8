"""
Tests for the teddyc command-line interface.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from teddy import __version__
from teddy.cli.teddyc import main
from teddy.cli.errors import ExitCode


HELLO = """\
// Greeting
func add(a: Int, b: Int) -> Int { return a + b; }
print(add(2, 3));
"""


@pytest.fixture
def runner(monkeypatch):
    for name in ("TEDDY_TARGET", "TEDDY_ENUM_TAGS", "TEDDY_ENTRY_POINT", "TEDDY_FORWARD_DECLS"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


class TestCompile:
    """Tests for normal compilation runs."""

    def test_default_output_name(self, runner):
        with runner.isolated_filesystem():
            Path("hello.teddy").write_text(HELLO)
            result = runner.invoke(main, ["hello.teddy"])

            assert result.exit_code == 0, f"Compile failed: {result.output}"
            assert "Compiled hello.teddy -> hello.c" in result.output
            code = Path("hello.c").read_text()
            assert "int add(const int a, const int b) {" in code
            assert "int main(void) {" in code

    def test_explicit_output(self, runner):
        with runner.isolated_filesystem():
            Path("hello.teddy").write_text(HELLO)
            result = runner.invoke(main, ["hello.teddy", "-o", "out.c"])

            assert result.exit_code == 0
            assert Path("out.c").exists()
            assert not Path("hello.c").exists()

    def test_cpp_target(self, runner):
        with runner.isolated_filesystem():
            Path("hello.teddy").write_text(HELLO)
            result = runner.invoke(main, ["-t", "cpp", "hello.teddy"])

            assert result.exit_code == 0
            code = Path("hello.cpp").read_text()
            assert "using namespace std;" in code
            assert "cout << add(2, 3) << endl;" in code

    def test_target_from_environment(self, runner, monkeypatch):
        monkeypatch.setenv("TEDDY_TARGET", "cpp")
        with runner.isolated_filesystem():
            Path("hello.teddy").write_text(HELLO)
            result = runner.invoke(main, ["hello.teddy"])

            assert result.exit_code == 0
            assert Path("hello.cpp").exists()

    def test_no_entry_point(self, runner):
        with runner.isolated_filesystem():
            Path("hello.teddy").write_text(HELLO)
            result = runner.invoke(main, ["--no-entry-point", "hello.teddy"])

            assert result.exit_code == 0
            assert "main" not in Path("hello.c").read_text()

    def test_no_enum_tags(self, runner):
        with runner.isolated_filesystem():
            Path("shape.teddy").write_text("enum Shape { case dot; }")
            result = runner.invoke(main, ["--no-enum-tags", "shape.teddy"])

            assert result.exit_code == 0
            assert "_ShapeTag" not in Path("shape.c").read_text()

    def test_report(self, runner):
        with runner.isolated_filesystem():
            Path("hello.teddy").write_text(HELLO)
            result = runner.invoke(main, ["--report", "hello.teddy"])

            assert result.exit_code == 0
            assert "Lexical Analysis" in result.output
            assert "Code Generation (Target: C)" in result.output
            assert Path("hello.c").exists()


class TestInspection:
    """Tests for the stage dump options, which write no output file."""

    def test_tokens(self, runner):
        with runner.isolated_filesystem():
            Path("hello.teddy").write_text(HELLO)
            result = runner.invoke(main, ["--tokens", "hello.teddy"])

            assert result.exit_code == 0
            assert "Token(FUNC, 'func', @" in result.output
            assert "Token(OPERATOR, '+'/20, @" in result.output
            assert not Path("hello.c").exists()

    def test_ast(self, runner):
        with runner.isolated_filesystem():
            Path("hello.teddy").write_text(HELLO)
            result = runner.invoke(main, ["--ast", "hello.teddy"])

            assert result.exit_code == 0
            assert result.output.startswith("Program")
            assert "Function: add(a: Int, b: Int) -> Int" in result.output

    def test_preprocess_only(self, runner):
        with runner.isolated_filesystem():
            Path("hello.teddy").write_text(HELLO)
            result = runner.invoke(main, ["-E", "hello.teddy"])

            assert result.exit_code == 0
            assert "Greeting" not in result.output
            assert "print(add(2, 3));" in result.output
            assert not Path("hello.c").exists()

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "teddyc" in result.output
        assert __version__ in result.output


class TestErrors:
    """Tests for error reporting and exit codes."""

    def test_syntax_error(self, runner):
        with runner.isolated_filesystem():
            Path("bad.teddy").write_text("let x: Int = ;")
            result = runner.invoke(main, ["bad.teddy"])

            assert result.exit_code == ExitCode.BUILD_ERROR
            assert "error: expected expression, found ';'" in result.output
            assert not Path("bad.c").exists()

    def test_lex_error_in_token_dump(self, runner):
        with runner.isolated_filesystem():
            Path("bad.teddy").write_text("print(4 % 2);")
            result = runner.invoke(main, ["--tokens", "bad.teddy"])

            assert result.exit_code == ExitCode.BUILD_ERROR
            assert "unexpected character '%'" in result.output

    def test_codegen_error(self, runner):
        with runner.isolated_filesystem():
            Path("bad.teddy").write_text("func main() -> Int { return 0; } print(1);")
            result = runner.invoke(main, ["bad.teddy"])

            assert result.exit_code == ExitCode.BUILD_ERROR
            assert "hint:" in result.output

    def test_missing_input(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["missing.teddy"])
            assert result.exit_code == ExitCode.INVALID_ARGS

    def test_invalid_target(self, runner):
        with runner.isolated_filesystem():
            Path("hello.teddy").write_text(HELLO)
            result = runner.invoke(main, ["-t", "rust", "hello.teddy"])
            assert result.exit_code == ExitCode.INVALID_ARGS
