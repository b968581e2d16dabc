"""
Numeric literal decoding for xc
Radix is chosen by a 0x/0b prefix or an h/b suffix; unmarked digits are tried
as decimal first and hexadecimal second
"""

from typing import Dict, List, Optional, Tuple

from pyparsing import Combine, ParseException, ParserElement, Word, hexnums, nums, one_of, Opt

from error_handling import NumberParseError, SourceSpan
from utilities import in_i128_range


HEX_PREFIX = "0x"
HEX_SUFFIX = "h"
BIN_PREFIX = "0b"
BIN_SUFFIX = "b"

# Unmarked literals fall back through these radixes in order
DEFAULT_RADIXES = [10, 16]

_RADIX_DIGITS = {
    2: "01",
    10: nums,
    16: hexnums,
}


def _digit_grammar(radix: int) -> ParserElement:
    """Optional sign followed by digits of one radix, no whitespace anywhere"""
    sign = Opt(one_of("+ -"))
    digits = Word(_RADIX_DIGITS[radix])
    grammar = Combine(sign + digits).leave_whitespace()
    return grammar.set_parse_action(lambda t: int(t[0], radix))


DIGIT_GRAMMARS: Dict[int, ParserElement] = {
    radix: _digit_grammar(radix) for radix in _RADIX_DIGITS
}


def split_radix_marker(num_str: str) -> Tuple[str, Optional[int]]:
    """Strip at most one radix marker and report the radix it selects"""
    if num_str.startswith(HEX_PREFIX):
        return num_str[len(HEX_PREFIX):], 16
    if num_str.endswith(HEX_SUFFIX):
        return num_str[:-len(HEX_SUFFIX)], 16
    if num_str.startswith(BIN_PREFIX):
        return num_str[len(BIN_PREFIX):], 2
    if num_str.endswith(BIN_SUFFIX):
        return num_str[:-len(BIN_SUFFIX)], 2
    return num_str, None


def parse_digits(digits: str, radix: int) -> Optional[int]:
    """Parse digits in one radix, None if they are malformed or exceed 128 bits"""
    try:
        value = DIGIT_GRAMMARS[radix].parse_string(digits, parse_all=True)[0]
    except ParseException:
        return None
    return value if in_i128_range(value) else None


def parse_num(num_str: str, span: Optional[SourceSpan] = None) -> int:
    """
    Decode a numeric literal

    Examples:
        parse_num("0xc") -> 12
        parse_num("12h") -> 18
        parse_num("011101110b") -> 238
        parse_num("Cc") -> 204
        parse_num("0xCh") -> NumberParseError
    """
    digits, radix = split_radix_marker(num_str)
    radixes: List[int] = [radix] if radix is not None else DEFAULT_RADIXES

    for candidate in radixes:
        value = parse_digits(digits, candidate)
        if value is not None:
            return value

    raise NumberParseError(num_str, span)
