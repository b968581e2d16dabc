"""
Utilities module for the xc calculator
Fixed-width integer helpers shared by the operator library and the interpreter
"""

from typing import Any, Callable, Dict, Optional, Tuple

from error_handling import ArithmeticOverflowError, OperandRangeError


# ==================== 128-BIT DOMAIN ====================

INT_BITS = 128
I128_MIN = -(1 << (INT_BITS - 1))
I128_MAX = (1 << (INT_BITS - 1)) - 1
U128_MASK = (1 << INT_BITS) - 1

U32_MAX = (1 << 32) - 1


def in_i128_range(value: int) -> bool:
  return I128_MIN <= value <= I128_MAX


def check_i128(value: int, op_name: str) -> int:
  """
  Return value unchanged if it fits a signed 128-bit integer

  Raises:
    ArithmeticOverflowError naming the operation that overflowed
  """
  if not in_i128_range(value):
    raise ArithmeticOverflowError(f"{op_name} overflowed 128 bits")
  return value


def wrap_i128(value: int) -> int:
  """
  Reinterpret the low 128 bits of value as a two's-complement integer

  Examples:
    wrap_i128(1 << 127) -> I128_MIN
    wrap_i128(-1) -> -1
  """
  value &= U128_MASK
  if value > I128_MAX:
    value -= 1 << INT_BITS
  return value


def to_unsigned(value: int) -> int:
  """Two's-complement bit pattern of value as a non-negative int"""
  return value & U128_MASK


def check_operand_range(value: int, low: int, high: int, what: str) -> int:
  if not low <= value <= high:
    raise OperandRangeError(f"{what} {value} is outside [{low}, {high}]")
  return value


# ==================== TRUNCATING DIVISION ====================

def trunc_divmod(x: int, y: int) -> Tuple[int, int]:
  """
  Integer division rounding toward zero

  The remainder takes the sign of the dividend, so x == q * y + r always holds.
  Caller guarantees y != 0.

  Examples:
    trunc_divmod(-7, 2) -> (-3, -1)
    trunc_divmod(7, -2) -> (-3, 1)
  """
  q = abs(x) // abs(y)
  if (x < 0) != (y < 0):
    q = -q
  return q, x - q * y


# ==================== BINARY OPERATION FACTORIES ====================

def is_number(val: Any) -> bool:
  return isinstance(val, dict) and val.get('type') == "Num"


def binary_arithmetic_op(
  op: Callable[[int, int], int],
  make_value: Callable[[Any, str], Dict]
) -> Callable[[Optional[Dict], Optional[Dict]], Optional[Dict]]:
  """
  Lift an int operation to runtime values

  Args:
    op: Function over two ints (e.g. xc_add)
    make_value: Runtime value constructor

  Returns:
    Function taking two optional runtime values; it yields None unless both
    are numbers, so a missing operand silences the whole term

  Examples:
    add = binary_arithmetic_op(xc_add, make_value)
    add({"type": "Num", "value": 1}, {"type": "Num", "value": 2}) -> {"type": "Num", "value": 3}
    add(None, {"type": "Num", "value": 2}) -> None
  """
  def arithmetic(x: Optional[Dict], y: Optional[Dict]) -> Optional[Dict]:
    if not (is_number(x) and is_number(y)):
      return None
    return make_value(op(x['value'], y['value']), "Num")

  return arithmetic
