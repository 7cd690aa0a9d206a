"""
Tests for value helpers and operator implementations
"""

import io
import math
import pytest
from error_handling import LoxRuntimeError
from stdlib import (
  BUILTIN_OPERATORS, UNARY_BUILTINS, is_truthy, lox_add, lox_div, lox_eq,
  lox_ne, lox_print, values_equal,
)
from syntax import Operator, make_boolean, make_nil, make_number, make_string, make_value
from utilities import describe_value, format_value, ieee_divide, num_format


class TestNumberFormat:
  """Test number display"""

  @pytest.mark.parametrize("number,text", [
      (100.0, "100.0"),
      (100.12, "100.12"),
      (100.1234, "100.123"),
      (0.0, "0.0"),
      (-0.0, "-0.0"),
      (-4.0, "-4.0"),
      (2.5, "2.5"),
      (1e21, "1000000000000000000000.0"),
      (math.inf, "inf"),
      (-math.inf, "-inf"),
      (math.nan, "NaN"),
  ])
  def test_num_format(self, number, text):
    assert num_format(number) == text

  def test_format_value(self):
    assert format_value(make_string("hi")) == "hi"
    assert format_value(make_boolean(False)) == "false"
    assert format_value(make_nil()) == "nil"
    assert format_value(make_number(3)) == "3.0"

  def test_describe_value_quotes_strings(self):
    assert describe_value(make_string("hi")) == '"hi"'
    assert describe_value(make_number(3)) == "3.0"


class TestDivision:
  """Test IEEE-754 division"""

  def test_ordinary(self):
    assert ieee_divide(6.0, 3.0) == 2.0

  def test_zero_divisor(self):
    assert ieee_divide(1.0, 0.0) == math.inf
    assert ieee_divide(-1.0, 0.0) == -math.inf
    assert ieee_divide(1.0, -0.0) == -math.inf
    assert math.isnan(ieee_divide(0.0, 0.0))
    assert math.isnan(ieee_divide(math.nan, 0.0))

  def test_lox_div(self):
    assert lox_div(make_number(1), make_number(0)) == make_number(math.inf)


class TestValues:
  """Test truthiness, equality and printing"""

  def test_truthiness(self):
    assert not is_truthy(make_nil())
    assert not is_truthy(make_boolean(False))
    assert is_truthy(make_boolean(True))
    assert is_truthy(make_number(0))
    assert is_truthy(make_string(""))

  def test_equality(self):
    assert values_equal(make_nil(), make_nil())
    assert values_equal(make_number(1), make_number(1))
    assert not values_equal(make_number(1), make_string("1"))
    assert not values_equal(make_boolean(False), make_nil())
    assert lox_eq(make_string("a"), make_string("a")) == make_boolean(True)
    assert lox_ne(make_string("a"), make_string("a")) == make_boolean(False)

  def test_unknown_kind_cannot_be_compared(self):
    with pytest.raises(LoxRuntimeError) as exc_info:
      values_equal(make_value(None, "Function"), make_nil())
    assert exc_info.value.message == "Don't know how to compare <Function> and nil"

  def test_add(self):
    assert lox_add(make_number(1), make_number(2)) == make_number(3)
    assert lox_add(make_string("a"), make_string("b")) == make_string("ab")

  def test_print_writes_display_form(self):
    out = io.StringIO()
    assert lox_print(make_string("hi"), out) == make_nil()
    lox_print(make_number(1), out)
    assert out.getvalue() == "hi\n1.0\n"

  def test_operator_tables(self):
    assert set(BUILTIN_OPERATORS) == {
        Operator.PLUS, Operator.MINUS, Operator.STAR, Operator.SLASH,
        Operator.EQUAL_EQUAL, Operator.BANG_EQUAL, Operator.LESS,
        Operator.GREATER, Operator.LESS_EQUAL, Operator.GREATER_EQUAL,
    }
    assert set(UNARY_BUILTINS) == {Operator.BANG, Operator.MINUS}
