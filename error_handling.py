"""
Error taxonomy for the xc expression language
Parse errors stop an expression before evaluation, runtime errors stop it
before any binding is committed
"""

from dataclasses import dataclass
from typing import Optional
from pyparsing import ParseException


@dataclass(frozen=True)
class SourceSpan:
    """Source location of a token inside one expression"""
    filename: str
    start_col: int
    end_col: int
    text: str = ""

    def __str__(self) -> str:
        return f"{self.filename}:{self.start_col}-{self.end_col}"


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class XCError(Exception):
    """Base class for every error reported to the user"""
    kind = "Error"

    def __init__(self, message: str, span: Optional[SourceSpan] = None):
        self.message = message
        self.span = span
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        if self.span:
            return f"{self.kind} at {self.span}: {self.message}"
        return f"{self.kind}: {self.message}"


class XCParseError(XCError):
    """Expression could not be tokenized or reduced to a single tree"""
    kind = "Parse error"


class NumberParseError(XCParseError):
    def __init__(self, text: str, span: Optional[SourceSpan] = None):
        self.text = text
        super().__init__(f"Could not parse number {text}", span)


class OperatorParseError(XCParseError):
    def __init__(self, text: str, span: Optional[SourceSpan] = None):
        self.text = text
        super().__init__(f"Unknown operator {text}", span)


class ExpressionParseError(XCParseError):
    """An operator could not find the operands it reduces over"""

    def __init__(self, operator, span: Optional[SourceSpan] = None):
        self.operator = operator
        super().__init__(f"Could not parse expression around {operator}", span)


class ExpressionTermCountError(XCParseError):
    def __init__(self, count: int = 0):
        self.count = count
        super().__init__(f"Expression reduced to {count} terms instead of 1")


class UnmatchedParenthesisError(XCParseError):
    def __init__(self, span: Optional[SourceSpan] = None):
        super().__init__("Unmatched parenthesis", span)


class XCRuntimeError(XCError):
    """Evaluation left the fixed-width integer domain"""
    kind = "Runtime error"


class ArithmeticOverflowError(XCRuntimeError):
    pass


class DivisionByZeroError(XCRuntimeError):
    pass


class OperandRangeError(XCRuntimeError):
    """Exponent or shift amount outside the range the operator accepts"""
    pass


class ExpressionDepthError(XCRuntimeError):
    def __init__(self):
        super().__init__("Expression nested too deeply to evaluate")


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, span: SourceSpan) -> str:
    """Render the source line with a caret under the error span"""
    width = max(1, span.end_col - span.start_col)
    line = source_text.split('\n')[0]
    marker = f"{' ' * (span.start_col - 1)}{'^' * width}"
    return f"  {line}\n  {marker}"


def format_error(error: XCError, source_text: Optional[str] = None) -> str:
    """Format an error for display, with context when the source is known"""
    error_msg = f"Error: {error.message}"
    if source_text is not None and error.span:
        error_msg += "\n" + get_context_lines(source_text, error.span)
    return error_msg


def span_from_parse_exception(exc: ParseException, text: str, offset: int,
                              filename: str = "<input>") -> SourceSpan:
    """Translate a pyparsing failure inside a token back to expression columns"""
    col = offset + exc.loc + 1
    return SourceSpan(filename, col, col + 1, text)
