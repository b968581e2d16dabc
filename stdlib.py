"""
xc Standard Library
Operator semantics over signed 128-bit integers
"""

from typing import Any, Callable, Dict, Optional

from error_handling import ArithmeticOverflowError, DivisionByZeroError
from parsing import Operator
from utilities import (
  INT_BITS,
  U32_MAX,
  binary_arithmetic_op,
  check_i128,
  check_operand_range,
  trunc_divmod,
  wrap_i128,
)


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def make_value(value: Any, type_name: str = "Num") -> Dict:
  """Create an immutable runtime value"""
  return {
      'value': value,
      'type': type_name
  }


# ============================================================================
# ARITHMETIC
# ============================================================================

def xc_add(x: int, y: int) -> int:
  return check_i128(x + y, "Addition")


def xc_sub(x: int, y: int) -> int:
  return check_i128(x - y, "Subtraction")


def xc_mul(x: int, y: int) -> int:
  return check_i128(x * y, "Multiplication")


def xc_div(x: int, y: int) -> int:
  """Divide, truncating toward zero"""
  if y == 0:
    raise DivisionByZeroError("Division by zero")
  quotient, _ = trunc_divmod(x, y)
  return check_i128(quotient, "Division")


def xc_rem(x: int, y: int) -> int:
  """Remainder with the sign of the dividend"""
  if y == 0:
    raise DivisionByZeroError("Remainder by zero")
  _, remainder = trunc_divmod(x, y)
  return remainder


def xc_pow(x: int, y: int) -> int:
  """Raise x to a non-negative exponent that fits 32 unsigned bits"""
  check_operand_range(y, 0, U32_MAX, "Exponent")
  # Any base other than 0 and +-1 leaves the range long before 2**32
  if abs(x) > 1 and y >= INT_BITS:
    raise ArithmeticOverflowError("Exponentiation overflowed 128 bits")
  return check_i128(x ** y, "Exponentiation")


def xc_neg(_: int, y: int) -> int:
  """Unary minus; the left operand is the synthesized zero"""
  return check_i128(-y, "Negation")


# ============================================================================
# BITWISE
# ============================================================================

def xc_bit_not(_: int, y: int) -> int:
  return ~y


def xc_bit_xor(x: int, y: int) -> int:
  return x ^ y


def xc_bit_or(x: int, y: int) -> int:
  return x | y


def xc_bit_and(x: int, y: int) -> int:
  return x & y


def xc_shl(x: int, y: int) -> int:
  """Shift left, discarding bits pushed past bit 127"""
  check_operand_range(y, 0, INT_BITS - 1, "Shift amount")
  return wrap_i128(x << y)


def xc_shr(x: int, y: int) -> int:
  """Arithmetic shift right"""
  check_operand_range(y, 0, INT_BITS - 1, "Shift amount")
  return x >> y


# ============================================================================
# OPERATOR TABLE
# ============================================================================

INT_OPERATORS: Dict[Operator, Callable[[int, int], int]] = {
    Operator.ADD: xc_add,
    Operator.SUB: xc_sub,
    Operator.MUL: xc_mul,
    Operator.DIV: xc_div,
    Operator.REMAINDER: xc_rem,
    Operator.POW: xc_pow,
    Operator.NEG: xc_neg,
    Operator.BIT_NOT: xc_bit_not,
    Operator.BIT_XOR: xc_bit_xor,
    Operator.BIT_OR: xc_bit_or,
    Operator.BIT_AND: xc_bit_and,
    Operator.SHIFT_LEFT: xc_shl,
    Operator.SHIFT_RIGHT: xc_shr,
}

BUILTIN_OPERATORS: Dict[Operator, Callable[[Optional[Dict], Optional[Dict]], Optional[Dict]]] = {
    op: binary_arithmetic_op(func, make_value) for op, func in INT_OPERATORS.items()
}
