"""
Scanner tests for the Lox language
Token kinds, literal payloads, line numbers and scan errors
"""

import pytest
from scanning import Token, create_scanner, scan
from error_handling import LoxScanError


def kinds(tokens):
  return [token.type for token in tokens]


class TestTokens:
  """Test tokenization of well-formed input"""

  @pytest.fixture
  def scanner(self):
    """Provide a fresh scanner instance for each test"""
    return create_scanner()

  def test_single_characters(self, scanner):
    tokens = scanner.scan("=+")
    assert tokens == [
        Token("EQUAL", None, "=", 1),
        Token("PLUS", None, "+", 1),
        Token("EOF", None, "", 1),
    ]

  def test_expression_with_spaces(self, scanner):
    tokens = scanner.scan(" a = 1 + 2 ; ")
    assert kinds(tokens) == [
        "IDENTIFIER", "EQUAL", "NUMBER", "PLUS", "NUMBER", "SEMICOLON", "EOF"
    ]
    assert tokens[0].value == "a"
    assert tokens[2].value == 1.0
    assert tokens[2].lexeme == "1"

  def test_two_character_operators(self, scanner):
    tokens = scanner.scan("!= == >= <= ! = < > /")
    assert kinds(tokens) == [
        "BANG_EQUAL", "EQUAL_EQUAL", "GREATER_EQUAL", "LESS_EQUAL",
        "BANG", "EQUAL", "LESS", "GREATER", "SLASH", "EOF"
    ]

  def test_operators_without_spaces(self, scanner):
    tokens = scanner.scan("a>=b==!c")
    assert kinds(tokens) == [
        "IDENTIFIER", "GREATER_EQUAL", "IDENTIFIER", "EQUAL_EQUAL", "BANG", "IDENTIFIER", "EOF"
    ]

  def test_numbers(self, scanner):
    tokens = scanner.scan("120,120.5,121")
    numbers = [token.value for token in tokens if token.type == "NUMBER"]
    assert numbers == [120.0, 120.5, 121.0]
    assert kinds(tokens).count("COMMA") == 2

  def test_trailing_dot_is_not_part_of_number(self, scanner):
    assert kinds(scanner.scan("1.")) == ["NUMBER", "DOT", "EOF"]

  def test_keywords_and_identifiers(self, scanner):
    tokens = scanner.scan("var orchid = nil or true;")
    assert kinds(tokens) == [
        "VAR", "IDENTIFIER", "EQUAL", "NIL", "OR", "TRUE", "SEMICOLON", "EOF"
    ]
    assert tokens[1].value == "orchid"

  def test_line_numbers(self, scanner):
    tokens = scanner.scan("a=\r\nb+c")
    assert [(token.type, token.line) for token in tokens] == [
        ("IDENTIFIER", 1), ("EQUAL", 1),
        ("IDENTIFIER", 2), ("PLUS", 2), ("IDENTIFIER", 2),
        ("EOF", 2),
    ]

  def test_function_source(self, scanner):
    tokens = scanner.scan("fun addPair(a, b) {\n  return a + b;\n}")
    assert kinds(tokens) == [
        "FUN", "IDENTIFIER", "LEFT_PAREN", "IDENTIFIER", "COMMA", "IDENTIFIER",
        "RIGHT_PAREN", "LEFT_BRACE", "RETURN", "IDENTIFIER", "PLUS", "IDENTIFIER",
        "SEMICOLON", "RIGHT_BRACE", "EOF"
    ]
    assert tokens[8].line == 2
    assert tokens[-2].line == 3

  def test_comments_are_skipped(self, scanner):
    tokens = scanner.scan("// heading\nprint 1; // trailing")
    assert kinds(tokens) == ["PRINT", "NUMBER", "SEMICOLON", "EOF"]
    assert tokens[0].line == 2

  def test_slash_inside_string_is_not_a_comment(self, scanner):
    tokens = scanner.scan('"a // b"')
    assert tokens[0].value == "a // b"

  def test_strings(self, scanner):
    tokens = scanner.scan('var s = "hello";')
    string = tokens[3]
    assert string.type == "STRING"
    assert string.value == "hello"
    assert string.lexeme == '"hello"'

  def test_multiline_string_reports_closing_line(self, scanner):
    tokens = scanner.scan('"a\nb" x')
    assert tokens[0].value == "a\nb"
    assert tokens[0].line == 2
    assert tokens[1].line == 2

  def test_tabs_are_preserved_in_strings(self, scanner):
    tokens = scanner.scan('"a\tb"')
    assert tokens[0].value == "a\tb"

  def test_empty_source(self, scanner):
    assert scanner.scan("") == [Token("EOF", None, "", 1)]

  def test_module_level_scan(self):
    assert kinds(scan("print 1;")) == ["PRINT", "NUMBER", "SEMICOLON", "EOF"]


class TestTokenDisplay:
  """Test the token dump format"""

  def test_describe(self):
    tokens = scan('x 1 "hi" (')
    assert [token.describe() for token in tokens] == [
        "IDENTIFIER x null",
        "NUMBER 1 1.0",
        'STRING "hi" hi',
        "LEFT_PAREN ( null",
        "EOF  null",
    ]

  def test_str_is_lexeme(self):
    assert str(scan("while")[0]) == "while"


class TestScanErrors:
  """Test error reporting for bad input"""

  def test_unexpected_character(self):
    with pytest.raises(LoxScanError) as exc_info:
      scan("var a = @;")
    error = exc_info.value
    assert error.message == "Unexpected character '@'"
    assert error.line == 1
    assert error.column == 9

  def test_unexpected_character_line(self):
    with pytest.raises(LoxScanError) as exc_info:
      scan("print 1;\nprint #;")
    assert exc_info.value.line == 2

  def test_unterminated_string(self):
    with pytest.raises(LoxScanError) as exc_info:
      scan('print "abc;')
    assert exc_info.value.message == "Unterminated string"

  def test_error_carries_context(self):
    with pytest.raises(LoxScanError) as exc_info:
      scan("var a = @;")
    assert "^ Error here" in str(exc_info.value)
