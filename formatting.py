"""
Presentation of xc results
Numbers are shown in decimal, hex and binary with digit grouping and a bit
index ruler under the binary form
"""

from typing import Callable, Dict, List, Tuple

from parsing import render_operand, render_parameters
from utilities import to_unsigned


def group_str(s: str, every: int) -> Tuple[str, str]:
  """
  Insert a space every `every` characters counting from the right

  Returns:
    (grouped text, ruler labelling each group boundary with its digit index)

  Examples:
    group_str("10000", 4) -> ("1 0000", "----4----0 ")
  """
  chars = []
  ruler = "----0 "
  for i, c in enumerate(reversed(s)):
    if i > 0 and i % every == 0:
      chars.append(' ')
      ruler = f"{i:->{every + 1}}" + ruler
    chars.append(c)
  return "".join(reversed(chars)), ruler


def as_dec(n: int) -> str:
  sign = "-" if n < 0 else ""
  return sign + group_str(str(abs(n)), 3)[0] + "  "


def as_hex(n: int) -> str:
  """Hex of the two's-complement bit pattern, grouped in bytes"""
  return group_str(format(to_unsigned(n), 'x'), 2)[0] + " h"


def as_bin(n: int) -> Tuple[str, str]:
  grouped, ruler = group_str(format(to_unsigned(n), 'b'), 4)
  return grouped + " b", ruler


def show_all(n: int) -> str:
  """All three renderings right-aligned, followed by the aligned ruler"""
  bin_str, ruler = as_bin(n)
  ruler = ruler[len(ruler) - len(bin_str):]
  strs = [as_dec(n), as_hex(n), bin_str]
  max_len = max(len(s) for s in strs)
  lines = [s.rjust(max_len) for s in strs]
  lines.append(ruler.rjust(max_len))
  return "\n".join(lines)


OUTPUT_FORMATS: Dict[str, Callable[[int], str]] = {
    'dec': as_dec,
    'hex': as_hex,
    'bin': lambda n: as_bin(n)[0],
}


def show_selected(n: int, outputs: List[str]) -> str:
  """Only the requested renderings, in the order they were requested"""
  return "\n".join(OUTPUT_FORMATS[name](n) for name in outputs)


def show_function(value: Dict) -> str:
  return f"{render_parameters(value['params'])} -> {render_operand(value['body'])}"


def show_value(value: Dict) -> str:
  """Render an evaluation result for the user"""
  if value['type'] == 'Function':
    return show_function(value)
  return show_all(value['value'])
