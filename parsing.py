"""
xc Expression Parser
Lazy tokenizer plus a precedence-climbing shift/reduce parser producing
immutable operand trees
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, List, Optional, Tuple, Union

from pyparsing import Combine, DelimitedList, Opt, ParseException, Suppress, Word, alphanums

from error_handling import (
    ExpressionParseError,
    ExpressionTermCountError,
    OperatorParseError,
    SourceSpan,
    UnmatchedParenthesisError,
    span_from_parse_exception,
)
from literals import parse_num


UNARY_PRECEDENCE = 100


class Operator(Enum):
    """Operator tags with their display symbol and binding strength"""
    SENTINEL = ("", -1)
    ASSIGN = ("=", 0)
    COMMA = (",", 1)
    LEFT_PAREN = ("(", 2)
    RIGHT_PAREN = (")", 2)
    FUNCTION_BODY = ("||", 5)
    BIT_OR = ("|", 10)
    BIT_XOR = ("^", 20)
    BIT_AND = ("&", 30)
    SHIFT_LEFT = ("<<", 40)
    SHIFT_RIGHT = (">>", 40)
    ADD = ("+", 50)
    SUB = ("-", 50)
    MUL = ("*", 60)
    DIV = ("/", 60)
    REMAINDER = ("%", 60)
    POW = ("**", 70)
    NEG = ("-", UNARY_PRECEDENCE)
    BIT_NOT = ("~", UNARY_PRECEDENCE)
    FUNCTION_CALL = ("()", 110)

    def __init__(self, symbol: str, precedence: int):
        self.symbol = symbol
        self.precedence = precedence

    @property
    def is_unary(self) -> bool:
        return self.precedence == UNARY_PRECEDENCE

    def __str__(self) -> str:
        return f"'{self.symbol}'" if self.symbol else self.name


# An operator arriving with equal precedence to the stack top does not reduce it
RIGHT_ASSOCIATIVE = {Operator.ASSIGN, Operator.COMMA, Operator.NEG, Operator.BIT_NOT}

SYMBOL_OPERATORS = {
    "+": Operator.ADD,
    "*": Operator.MUL,
    "/": Operator.DIV,
    "%": Operator.REMAINDER,
    "**": Operator.POW,
    "~": Operator.BIT_NOT,
    "^": Operator.BIT_XOR,
    "|": Operator.BIT_OR,
    "&": Operator.BIT_AND,
    "<<": Operator.SHIFT_LEFT,
    ">>": Operator.SHIFT_RIGHT,
    "=": Operator.ASSIGN,
    ",": Operator.COMMA,
}

VARIABLE_SIGIL = "$"
PARAMETER_DELIMITER = "|"
VARIABLE_CHARS = alphanums + "_"


# ============================================================================
# TOKENS AND OPERANDS
# ============================================================================

@dataclass(frozen=True)
class Token:
    """xc token with source information"""
    type: str
    value: Any
    span: SourceSpan

    def __str__(self) -> str:
        return f"{self.type}({self.value})"


@dataclass(frozen=True)
class Number:
    value: int


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class ParameterList:
    """Formal parameters; only ever the left child of a function body"""
    names: Tuple[str, ...]


@dataclass(frozen=True)
class Term:
    op: Operator
    left: 'Operand'
    right: 'Operand'


Operand = Union[Number, Variable, ParameterList, Term]


def is_comma_term(operand: Operand) -> bool:
    return isinstance(operand, Term) and operand.op is Operator.COMMA


# Parameter lists are small enough to hand to pyparsing whole
variable_name = Combine(Suppress(VARIABLE_SIGIL) + Word(VARIABLE_CHARS))
parameter_list = (
    Suppress(PARAMETER_DELIMITER) +
    Opt(DelimitedList(variable_name)) +
    Suppress(PARAMETER_DELIMITER)
)


# ============================================================================
# TOKENIZER
# ============================================================================

class XCTokenizer:
    """
    Lazy tokenizer over one expression

    Iterating starts a fresh scan each time. The only context carried between
    tokens is whether the last one emitted completed an operand, which decides
    between binary and unary minus, between BitOr and a parameter list, and
    whether '(' opens a function call.
    """

    def __init__(self, text: str, filename: str = "<input>"):
        self.text = text
        self.filename = filename

    def __iter__(self) -> Iterator[Token]:
        return self._scan()

    def _span(self, start: int, end: int) -> SourceSpan:
        return SourceSpan(self.filename, start + 1, end + 1, self.text[start:end])

    def _scan(self) -> Iterator[Token]:
        text = self.text
        pos = 0
        last_operand = False

        while True:
            while pos < len(text) and text[pos].isspace():
                pos += 1
            if pos >= len(text):
                return

            char = text[pos]

            if char.isalnum():
                end = self._number_end(pos)
                span = self._span(pos, end)
                digits = "".join(text[pos:end].split())
                yield Token("NUMBER", parse_num(digits, span), span)
                last_operand = True

            elif char == VARIABLE_SIGIL:
                end = pos + 1
                while end < len(text) and text[end] in VARIABLE_CHARS:
                    end += 1
                span = self._span(pos, end)
                if end == pos + 1:
                    raise OperatorParseError(char, span)
                yield Token("VARIABLE", text[pos + 1:end], span)
                last_operand = True

            elif char == PARAMETER_DELIMITER and not last_operand:
                close = text.find(PARAMETER_DELIMITER, pos + 1)
                end = close + 1 if close >= 0 else len(text)
                span = self._span(pos, end)
                if close < 0:
                    raise OperatorParseError(text[pos:], span)
                yield Token("PARAMETER_LIST", self._parameter_names(pos, end), span)
                last_operand = False

            elif char == "(":
                end = pos + 1
                span = self._span(pos, end)
                if last_operand:
                    yield Token("OPERATOR", Operator.FUNCTION_CALL, span)
                yield Token("LEFT_PAREN", Operator.LEFT_PAREN, span)
                last_operand = False

            elif char == ")":
                end = pos + 1
                yield Token("RIGHT_PAREN", Operator.RIGHT_PAREN, self._span(pos, end))
                last_operand = True

            else:
                end = pos
                while end < len(text) and text[end] == char:
                    end += 1
                run = text[pos:end]
                span = self._span(pos, end)
                if run == "-":
                    op = Operator.SUB if last_operand else Operator.NEG
                else:
                    op = SYMBOL_OPERATORS.get(run)
                    if op is None:
                        raise OperatorParseError(run, span)
                yield Token("OPERATOR", op, span)
                last_operand = False

            pos = end

    def _number_end(self, pos: int) -> int:
        """End of an alphanumeric run, interior whitespace included"""
        text = self.text
        end = pos
        while end < len(text) and (text[end].isalnum() or text[end].isspace()):
            end += 1
        while text[end - 1].isspace():
            end -= 1
        return end

    def _parameter_names(self, start: int, end: int) -> Tuple[str, ...]:
        source = self.text[start:end]
        try:
            names = parameter_list.parse_string(source, parse_all=True)
        except ParseException as e:
            span = span_from_parse_exception(e, source, start, self.filename)
            raise OperatorParseError(source, span) from e
        return tuple(names)


# ============================================================================
# PARSER
# ============================================================================

class XCParser:
    """Shift/reduce parser over an operand stack and an operator stack"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.operands: List[Operand] = []
        self.operators: List[Tuple[Operator, Optional[SourceSpan]]] = []

    def parse_expression(self, text: str, filename: str = "<input>") -> Operand:
        """Parse a single xc expression into one operand tree"""
        self.operands = []
        self.operators = [(Operator.SENTINEL, None)]

        for token in XCTokenizer(text, filename):
            if self.debug:
                print(f"Token: {token}")
            self._shift(token)

        while True:
            top, span = self.operators[-1]
            if top is Operator.SENTINEL:
                break
            if top is Operator.LEFT_PAREN:
                raise UnmatchedParenthesisError(span)
            self.push_expr()

        if len(self.operands) != 1:
            raise ExpressionTermCountError(len(self.operands))

        root = self.operands[0]
        if is_comma_term(root):
            raise ExpressionParseError(Operator.COMMA)
        return root

    def _shift(self, token: Token) -> None:
        if token.type == "NUMBER":
            self.operands.append(Number(token.value))
        elif token.type == "VARIABLE":
            self.operands.append(Variable(token.value))
        elif token.type == "LEFT_PAREN":
            self.operators.append((Operator.LEFT_PAREN, token.span))
        elif token.type == "RIGHT_PAREN":
            self._close_paren(token.span)
        elif token.type == "PARAMETER_LIST":
            self.operands.append(ParameterList(token.value))
            self.operators.append((Operator.FUNCTION_BODY, token.span))
        elif token.type == "OPERATOR":
            self.push_operator(token.value, token.span)
        else:
            raise RuntimeError(f"Unknown token type: {token.type}")

    def _close_paren(self, span: SourceSpan) -> None:
        while True:
            top, _ = self.operators[-1]
            if top is Operator.LEFT_PAREN:
                self.operators.pop()
                return
            if top is Operator.SENTINEL:
                raise UnmatchedParenthesisError(span)
            self.push_expr()

    def push_operator(self, op: Operator, span: Optional[SourceSpan] = None) -> None:
        """Reduce everything that binds at least as tightly as op, then push it"""
        if op.is_unary:
            self.operands.append(Number(0))
        while self._reduces_before(op):
            self.push_expr()
        self.operators.append((op, span))

    def _reduces_before(self, op: Operator) -> bool:
        top, _ = self.operators[-1]
        if top in (Operator.SENTINEL, Operator.LEFT_PAREN):
            return False
        if op in RIGHT_ASSOCIATIVE:
            return op.precedence < top.precedence
        return op.precedence <= top.precedence

    def push_expr(self) -> None:
        """Pop one operator and combine the two newest operands under it"""
        op, span = self.operators.pop()
        if len(self.operands) < 2:
            raise ExpressionParseError(op, span)
        right = self.operands.pop()
        left = self.operands.pop()
        check_term(op, left, right, span)
        if self.debug:
            print(f"Reduce: {op.name} -> {render_operand(Term(op, left, right))}")
        self.operands.append(Term(op, left, right))


def check_term(op: Operator, left: Operand, right: Operand,
               span: Optional[SourceSpan] = None) -> None:
    """Reject term shapes the evaluator has no meaning for"""
    if op is Operator.ASSIGN and not isinstance(left, Variable):
        raise ExpressionParseError(op, span)
    if op.is_unary and left != Number(0):
        raise ExpressionParseError(op, span)
    if (op is Operator.FUNCTION_BODY) != isinstance(left, ParameterList):
        raise ExpressionParseError(op, span)
    if isinstance(right, ParameterList):
        raise ExpressionParseError(op, span)
    if is_comma_term(left):
        raise ExpressionParseError(Operator.COMMA, span)
    if is_comma_term(right) and op not in (Operator.COMMA, Operator.FUNCTION_CALL):
        raise ExpressionParseError(Operator.COMMA, span)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> XCParser:
    """Create an xc parser"""
    return XCParser(debug=debug)


def create_debug_parser() -> XCParser:
    """Create an xc parser with debug enabled"""
    return XCParser(debug=True)


# ============================================================================
# RENDERING
# ============================================================================

def render_parameters(names) -> str:
    return PARAMETER_DELIMITER + ", ".join(VARIABLE_SIGIL + name for name in names) + PARAMETER_DELIMITER


def render_operand(operand: Operand) -> str:
    """Render a tree as fully parenthesized text that parses back to the same tree"""
    if isinstance(operand, Number):
        return str(operand.value)
    if isinstance(operand, Variable):
        return VARIABLE_SIGIL + operand.name
    if isinstance(operand, ParameterList):
        return render_parameters(operand.names)

    op = operand.op
    if op.is_unary:
        return f"({op.symbol}{render_operand(operand.right)})"
    if op is Operator.FUNCTION_BODY:
        return f"({render_operand(operand.left)} {render_operand(operand.right)})"
    if op is Operator.FUNCTION_CALL:
        return f"({render_operand(operand.left)}({render_operand(operand.right)}))"
    if op is Operator.COMMA:
        return f"({render_operand(operand.left)}, {render_operand(operand.right)})"
    return f"({render_operand(operand.left)} {op.symbol} {render_operand(operand.right)})"


def pretty_print_operand(operand: Operand, indent: int = 0) -> str:
    """Pretty print an operand tree for debugging"""
    prefix = "  " * indent
    if isinstance(operand, Number):
        return f"{prefix}Number({operand.value})\n"
    if isinstance(operand, Variable):
        return f"{prefix}Variable({operand.name})\n"
    if isinstance(operand, ParameterList):
        return f"{prefix}ParameterList({', '.join(operand.names)})\n"

    result = f"{prefix}Term({operand.op.name})\n"
    result += pretty_print_operand(operand.left, indent + 1)
    result += pretty_print_operand(operand.right, indent + 1)
    return result
