"""
Utilities module for the Lox interpreter
Contains common helper functions to reduce code duplication
"""

from typing import Any, Callable, Dict, Optional
import math

from error_handling import LoxRuntimeError


# ==================== NUMBER FORMATTING ====================

def num_format(num: float) -> str:
  """
  Format a number for display

  At least one fractional digit is kept and at most three are shown,
  trailing zeros beyond the first fractional digit are dropped.

  Examples:
    num_format(100.0) -> "100.0"
    num_format(100.12) -> "100.12"
    num_format(100.1234) -> "100.123"
  """
  if math.isnan(num):
    return "NaN"
  if math.isinf(num):
    return "inf" if num > 0 else "-inf"
  text = f"{num:.3f}".rstrip('0')
  if text.endswith('.'):
    text += '0'
  return text


# ==================== VALUE INSPECTION ====================

def is_value_dict(val: Any) -> bool:
  """
  Check if value is a wrapped value dict

  Args:
    val: Value to check

  Returns:
    True if val is a dict with 'type' and 'value' keys
  """
  return isinstance(val, dict) and 'type' in val and 'value' in val


def get_number(val: Dict) -> Optional[float]:
  """Return the float inside a Number value, None for any other kind"""
  if val.get('type') == "Number":
    return val['value']
  return None


def format_value(val: Dict) -> str:
  """Human-readable form of a value, as written by print"""
  value_type = val.get('type')
  if value_type == "Number":
    return num_format(val['value'])
  elif value_type == "String":
    return val['value']
  elif value_type == "Boolean":
    return "true" if val['value'] else "false"
  elif value_type == "Nil":
    return "nil"
  return f"<{value_type}>"


def describe_value(val: Dict) -> str:
  """Like format_value, but strings are quoted so error messages stay unambiguous"""
  if val.get('type') == "String":
    return f'"{val["value"]}"'
  return format_value(val)


# ==================== ERROR MESSAGE BUILDERS ====================

def arithmetic_error(op: str, left: Dict, right: Dict) -> LoxRuntimeError:
  """
  Generate arithmetic error

  Args:
    op: Operator symbol
    left: Left operand value
    right: Right operand value

  Returns:
    LoxRuntimeError with formatted message
  """
  return LoxRuntimeError(
    f"Arithmetic error: {describe_value(left)} {op} {describe_value(right)}"
  )


def comparison_error(op: str, left: Dict, right: Dict) -> LoxRuntimeError:
  """
  Generate comparison error

  Args:
    op: Operator symbol
    left: Left operand value
    right: Right operand value

  Returns:
    LoxRuntimeError with formatted message
  """
  return LoxRuntimeError(
    f"Comparison error: {describe_value(left)} {op} {describe_value(right)}"
  )


# ==================== ARITHMETIC ====================

def ieee_divide(a: float, b: float) -> float:
  """Float division with IEEE-754 results for a zero divisor instead of ZeroDivisionError"""
  if b != 0.0:
    return a / b
  if a == 0.0 or math.isnan(a):
    return math.nan
  return math.copysign(math.inf, a) * math.copysign(1.0, b)


# ==================== BINARY OPERATION FACTORIES ====================

def binary_comparison_op(
  op: Callable[[float, float], bool],
  op_name: str
) -> Callable[[Dict, Dict, Callable], Dict]:
  """
  Factory for binary comparison operations

  Args:
    op: Python operator function (e.g., operator.lt)
    op_name: Operator symbol for error messages

  Returns:
    Function that performs the comparison

  Examples:
    lox_lt = binary_comparison_op(operator.lt, "<")
    result = lox_lt({"type": "Number", "value": 1.0}, {"type": "Number", "value": 2.0}, make_value)
  """
  def comparison(x: Dict, y: Dict, make_value: Callable) -> Dict:
    a, b = get_number(x), get_number(y)
    if a is None or b is None:
      raise comparison_error(op_name, x, y)
    return make_value(op(a, b), "Boolean")

  return comparison


def binary_arithmetic_op(
  op: Callable[[float, float], float],
  op_name: str
) -> Callable[[Dict, Dict, Callable], Dict]:
  """
  Factory for binary arithmetic operations

  Args:
    op: Python operator function (e.g., operator.add)
    op_name: Operator symbol for error messages

  Returns:
    Function that performs the arithmetic operation

  Examples:
    lox_sub = binary_arithmetic_op(operator.sub, "-")
    result = lox_sub({"type": "Number", "value": 3.0}, {"type": "Number", "value": 2.0}, make_value)
  """
  def arithmetic(x: Dict, y: Dict, make_value: Callable) -> Dict:
    a, b = get_number(x), get_number(y)
    if a is None or b is None:
      raise arithmetic_error(op_name, x, y)
    return make_value(op(a, b), "Number")

  return arithmetic
