"""
Lox Standard Library
Operator implementations and value display used by the interpreter
"""

from typing import Callable, Dict, TextIO
import operator
from utilities import (
  binary_comparison_op,
  binary_arithmetic_op,
  describe_value,
  format_value,
  get_number,
  ieee_divide,
  is_value_dict,
)
from error_handling import LoxRuntimeError
from syntax import Operator, VALUE_TYPES, make_value


# ============================================================================
# TRUTHINESS
# ============================================================================

def is_truthy(value: Dict) -> bool:
  """Everything except false and nil is true"""
  if value['type'] == "Nil":
    return False
  if value['type'] == "Boolean":
    return value['value']
  return True


# ============================================================================
# PRINT FUNCTIONS
# ============================================================================

def lox_show(value: Dict) -> Dict:
  """Convert value to its display string"""
  return make_value(format_value(value), "String")


def lox_print(value: Dict, out: TextIO) -> Dict:
  """Write a value and a newline to the output sink"""
  out.write(lox_show(value)['value'] + "\n")
  return make_value(None, "Nil")


# ============================================================================
# ARITHMETIC
# ============================================================================

_lox_add_numbers = binary_arithmetic_op(operator.add, "+")


def lox_string_append(x: Dict, y: Dict) -> Dict:
  """Concatenate two strings"""
  if y['type'] != "String":
    raise LoxRuntimeError(
      f"Cannot append {describe_value(y)} to string {describe_value(x)}"
    )
  return make_value(x['value'] + y['value'], "String")


def lox_add(x: Dict, y: Dict) -> Dict:
  """Add two numbers, or concatenate when the left operand is a string"""
  # Only the left operand selects concatenation: "a" + 1 fails in
  # lox_string_append, 1 + "a" fails as arithmetic.
  if x['type'] == "String":
    return lox_string_append(x, y)
  return _lox_add_numbers(x, y, make_value)


_lox_sub = binary_arithmetic_op(operator.sub, "-")
_lox_mul = binary_arithmetic_op(operator.mul, "*")
_lox_div = binary_arithmetic_op(ieee_divide, "/")


def lox_sub(x: Dict, y: Dict) -> Dict:
  return _lox_sub(x, y, make_value)


def lox_mul(x: Dict, y: Dict) -> Dict:
  return _lox_mul(x, y, make_value)


def lox_div(x: Dict, y: Dict) -> Dict:
  """Divide; a zero divisor gives inf or NaN"""
  return _lox_div(x, y, make_value)


# ============================================================================
# COMPARISON
# ============================================================================

_lox_lt = binary_comparison_op(operator.lt, "<")
_lox_gt = binary_comparison_op(operator.gt, ">")
_lox_le = binary_comparison_op(operator.le, "<=")
_lox_ge = binary_comparison_op(operator.ge, ">=")


def lox_lt(x: Dict, y: Dict) -> Dict:
  return _lox_lt(x, y, make_value)


def lox_gt(x: Dict, y: Dict) -> Dict:
  return _lox_gt(x, y, make_value)


def lox_le(x: Dict, y: Dict) -> Dict:
  return _lox_le(x, y, make_value)


def lox_ge(x: Dict, y: Dict) -> Dict:
  return _lox_ge(x, y, make_value)


def values_equal(x: Dict, y: Dict) -> bool:
  """
  Equality between two values

  nil equals only nil, values of different kinds are never equal and
  values of the same kind compare by their contents.
  """
  for value in (x, y):
    if not is_value_dict(value) or value['type'] not in VALUE_TYPES:
      raise LoxRuntimeError(
        f"Don't know how to compare {describe_value(x)} and {describe_value(y)}"
      )
  if x['type'] != y['type']:
    return False
  if x['type'] == "Nil":
    return True
  return x['value'] == y['value']


def lox_eq(x: Dict, y: Dict) -> Dict:
  return make_value(values_equal(x, y), "Boolean")


def lox_ne(x: Dict, y: Dict) -> Dict:
  return make_value(not values_equal(x, y), "Boolean")


# ============================================================================
# UNARY
# ============================================================================

def lox_not(x: Dict) -> Dict:
  """Logical negation of the operand's truthiness"""
  return make_value(not is_truthy(x), "Boolean")


def lox_negate(x: Dict) -> Dict:
  """Arithmetic negation; numbers only"""
  n = get_number(x)
  if n is None:
    raise LoxRuntimeError(f"Cannot negate {describe_value(x)}")
  return make_value(-n, "Number")


# ============================================================================
# OPERATOR TABLES
# ============================================================================

BUILTIN_OPERATORS: Dict[Operator, Callable[[Dict, Dict], Dict]] = {
    Operator.PLUS: lox_add,
    Operator.MINUS: lox_sub,
    Operator.STAR: lox_mul,
    Operator.SLASH: lox_div,
    Operator.EQUAL_EQUAL: lox_eq,
    Operator.BANG_EQUAL: lox_ne,
    Operator.LESS: lox_lt,
    Operator.GREATER: lox_gt,
    Operator.LESS_EQUAL: lox_le,
    Operator.GREATER_EQUAL: lox_ge,
}

UNARY_BUILTINS: Dict[Operator, Callable[[Dict], Dict]] = {
    Operator.BANG: lox_not,
    Operator.MINUS: lox_negate,
}
