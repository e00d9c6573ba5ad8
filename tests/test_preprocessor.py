"""
Tests for the Teddy comment stripper.
"""

from teddy.teddyc.preprocessor import strip_comments
from teddy.teddyc.lexer import tokenize


class TestStripComments:
    """Test '//' line comment removal."""

    def test_no_comments(self):
        source = "let x: Int = 1;\nprint(x);"
        assert strip_comments(source) == source

    def test_trailing_comment(self):
        assert strip_comments("let x: Int = 5;   // the answer") == "let x: Int = 5;"

    def test_whole_line_comment_keeps_line(self):
        """Line count is preserved so offsets stay meaningful."""
        source = "// header\nprint(1);\n// footer\n"
        stripped = strip_comments(source)
        assert stripped == "\nprint(1);\n\n"
        assert stripped.count("\n") == source.count("\n")

    def test_comment_marker_inside_string(self):
        assert strip_comments('print("a//b"); // done') == 'print("a//b");'

    def test_escaped_quote_inside_string(self):
        source = r'print("say \"//\""); // note'
        assert strip_comments(source) == r'print("say \"//\"");'

    def test_single_slash_is_division(self):
        assert strip_comments("print(8 / 2);") == "print(8 / 2);"

    def test_stripped_source_lexes(self):
        """Without stripping, '//' would lex as two division operators."""
        tokens = tokenize(strip_comments("print(1); // two / three"))
        assert [t.text for t in tokens] == ["print", "(", "1", ")", ";"]

    def test_empty_source(self):
        assert strip_comments("") == ""
