"""
Evaluation tests for xc
Arithmetic semantics, environments, functions and runtime errors
"""

import pytest
from error_handling import (
  ArithmeticOverflowError,
  DivisionByZeroError,
  ExpressionDepthError,
  OperandRangeError,
  UnmatchedParenthesisError,
  XCError,
  XCRuntimeError,
)
from interpreter import (
  create_debug_interpreter,
  create_interpreter,
  eval_ast,
  evaluate_expression,
  make_function,
  split_statements,
)
from parsing import Number, Operator, Term, Variable, create_parser
from stdlib import make_value
from utilities import I128_MAX, I128_MIN


def value_of(text, env=None):
  """Evaluate text and unwrap the numeric result"""
  result = evaluate_expression(text, {} if env is None else env)
  assert result is not None and result['type'] == "Num"
  return result['value']


class TestArithmetic:
  """Test operator semantics"""

  def test_precedence(self):
    assert value_of("01110b * 0x10 + 1") == 225
    assert value_of("(0xb*1) + (0*0b1111011111)+1") == 12
    assert value_of("(2 * 40) - 1") == 79

  def test_basic_operators(self):
    assert value_of("10 - 5") == 5
    assert value_of("10 / 3") == 3
    assert value_of("10 % 3") == 1
    assert value_of("2 ** 10") == 1024

  def test_bitwise_operators(self):
    assert value_of("0b111 ^ 0b101") == 0b010
    assert value_of("0b010 | 0b100") == 0b110
    assert value_of("0b011 & 0b101") == 0b001
    assert value_of("1 << 8") == 256
    assert value_of("0xFFFFFFFF >> 8") == 0xFFFFFF

  def test_unary(self):
    assert value_of("-1 * -2") == 2
    assert value_of("~1 + -10") == ~1 - 10
    assert value_of("~5 * ~8 - -0x10 * -12") == (~5 * ~8) - (16 * 12)

  def test_division_truncates_toward_zero(self):
    assert value_of("-7 / 2") == -3
    assert value_of("-7 % 2") == -1
    assert value_of("7 / -2") == -3
    assert value_of("7 % -2") == 1

  def test_shift_semantics(self):
    assert value_of("1 << 127") == I128_MIN
    assert value_of("3 << 127") == I128_MIN
    assert value_of("-8 >> 1") == -4

  def test_pow_edges(self):
    assert value_of("2 ** 126") == 2 ** 126
    assert value_of("1 ** 4294967295") == 1
    assert value_of("-1 ** 3") == -1
    assert value_of("0 ** 0") == 1


class TestRuntimeErrors:
  """Test the fixed-width error policy"""

  def test_division_by_zero(self):
    with pytest.raises(DivisionByZeroError):
      evaluate_expression("1 / 0", {})
    with pytest.raises(DivisionByZeroError):
      evaluate_expression("1 % 0", {})

  def test_overflow(self):
    with pytest.raises(ArithmeticOverflowError):
      evaluate_expression("2 ** 127", {})
    with pytest.raises(ArithmeticOverflowError):
      evaluate_expression("0x7" + "f" * 31 + " + 1", {})
    with pytest.raises(ArithmeticOverflowError):
      evaluate_expression("3 ** 4000000", {})

  def test_negating_minimum_value(self):
    with pytest.raises(ArithmeticOverflowError):
      evaluate_expression("-(1 << 127)", {})
    with pytest.raises(ArithmeticOverflowError):
      evaluate_expression("(1 << 127) / -1", {})
    assert value_of("(1 << 127) % -1") == 0

  def test_operand_ranges(self):
    with pytest.raises(OperandRangeError):
      evaluate_expression("2 ** -1", {})
    with pytest.raises(OperandRangeError):
      evaluate_expression("1 ** 4294967296", {})
    with pytest.raises(OperandRangeError):
      evaluate_expression("1 << 128", {})
    with pytest.raises(OperandRangeError):
      evaluate_expression("1 >> -1", {})

  def test_deep_expression(self, env):
    """Trees too deep to walk report a runtime error, not a crash"""
    text = "$s = 1" + " + 1" * 5000
    assert create_parser().parse_expression(text) is not None
    with pytest.raises(ExpressionDepthError) as excinfo:
      evaluate_expression(text, env)
    assert isinstance(excinfo.value, XCRuntimeError)
    assert "s" not in env

  def test_internal_defect_is_not_a_user_error(self):
    """Shapes the parser never builds abort with a plain RuntimeError"""
    with pytest.raises(RuntimeError) as excinfo:
      eval_ast(Term(Operator.LEFT_PAREN, Number(1), Number(2)), {})
    assert not isinstance(excinfo.value, XCError)


class TestEnvironment:
  """Test bindings across statements"""

  def test_assignment_is_silent(self, env):
    assert evaluate_expression("$x = 1", env) is None
    assert value_of("$x", env) == 1

  def test_statements_share_environment(self, env):
    evaluate_expression("$x = 1", env)
    evaluate_expression("$y = ($x*3) << ($x+1)", env)
    assert value_of("$y", env) == 12
    evaluate_expression("$x = -$x*$y", env)
    assert value_of("$x", env) == -12

  def test_chained_assignment(self, env):
    evaluate_expression("$a = $b = 4", env)
    assert value_of("$b", env) == 4
    assert "a" not in env

  def test_unbound_reads_produce_nothing(self, env):
    assert evaluate_expression("$nope", env) is None
    assert evaluate_expression("$nope + 1", env) is None
    assert evaluate_expression("$z = $nope", env) is None
    assert "z" not in env

  def test_pure_expressions_are_idempotent(self, env):
    evaluate_expression("$x = 7", env)
    snapshot = dict(env)
    first = evaluate_expression("$x * 3 + 1", env)
    second = evaluate_expression("$x * 3 + 1", env)
    assert first == second == make_value(22, "Num")
    assert env == snapshot

  def test_failed_expressions_leave_environment(self, env):
    evaluate_expression("$x = 1", env)
    with pytest.raises(DivisionByZeroError):
      evaluate_expression("$x = 1 / 0", env)
    with pytest.raises(UnmatchedParenthesisError):
      evaluate_expression("$x = (2", env)
    assert value_of("$x", env) == 1

  def test_nested_assignment_rolls_back_on_error(self, env):
    """A binding made earlier in a failing expression is not kept"""
    evaluate_expression("$x = 1", env)
    with pytest.raises(DivisionByZeroError):
      evaluate_expression("($x = 2) + 1 / 0", env)
    assert value_of("$x", env) == 1

    evaluate_expression("$id = |$a, $b| $a", env)
    with pytest.raises(DivisionByZeroError):
      evaluate_expression("$id(($y = 5), 1 / 0)", env)
    assert "y" not in env

  def test_nested_assignment_commits_on_success(self, env):
    assert value_of("($x = 2) + 1", env) == 3
    assert value_of("$x", env) == 2

  def test_interpreter_object_rolls_back(self, env):
    interpreter = create_interpreter()
    interpreter.evaluate("$x = 1", env)
    with pytest.raises(ArithmeticOverflowError):
      interpreter.evaluate("($x = 9) * (2 ** 127)", env)
    assert env["x"] == make_value(1, "Num")


class TestFunctions:
  """Test function definition and application"""

  def test_definition_evaluates_to_function(self, env):
    result = evaluate_expression("|$a| $a * 2", env)
    assert result == make_function(["a"], Term(Operator.MUL, Variable("a"), Number(2)))

  def test_call(self, env):
    assert evaluate_expression("$f = |$x, $y, $z| ($x+$y)*$z", env) is None
    assert value_of("$f(1, 2, 3)", env) == 9

  def test_nested_anonymous_application(self, env):
    assert value_of("(|$i, $j| (|$x, $y, $z| $x*$y + $z)($i, 2, $j))(3, 1)", env) == 7

  def test_arguments_use_caller_environment(self, env):
    evaluate_expression("$n = 5", env)
    evaluate_expression("$sq = |$v| $v * $v", env)
    assert value_of("$sq($n + 1)", env) == 36

  def test_body_sees_only_parameters(self, env):
    evaluate_expression("$k = 10", env)
    evaluate_expression("$g = |$a| $a + $k", env)
    assert evaluate_expression("$g(1)", env) is None

  def test_parameters_shadow_session_names(self, env):
    evaluate_expression("$a = 5", env)
    evaluate_expression("$h = |$a| $a", env)
    assert value_of("$h(1)", env) == 1
    assert value_of("$a", env) == 5

  def test_assignment_inside_body_does_not_leak(self, env):
    evaluate_expression("$s = |$a| ($b = $a)", env)
    assert evaluate_expression("$s(3)", env) is None
    assert "b" not in env

  def test_argument_count_mismatch(self, env):
    evaluate_expression("$one = |$a| $a", env)
    assert value_of("$one(1, 2)", env) == 1
    evaluate_expression("$two = |$a, $b| $b", env)
    assert evaluate_expression("$two(1)", env) is None

  def test_calling_a_number(self, env):
    evaluate_expression("$n = 3", env)
    assert evaluate_expression("$n(1)", env) is None

  def test_no_capture_in_curried_functions(self, env):
    """The inner function does not remember the outer argument"""
    evaluate_expression("$add = |$a| |$b| $a + $b", env)
    assert evaluate_expression("$add(1)", env)['type'] == 'Function'
    assert evaluate_expression("$add(1)(2)", env) is None

  def test_recursion_through_arguments(self, env):
    evaluate_expression("$twice = |$f, $x| $f($f($x))", env)
    evaluate_expression("$inc = |$x| $x + 1", env)
    assert value_of("$twice($inc, 40)", env) == 42


class TestInterpreterFactory:

  def test_interpreter_object(self, env):
    interpreter = create_interpreter()
    assert interpreter.evaluate("$v = 2", env) is None
    assert interpreter.evaluate("$v ** 8", env) == make_value(256, "Num")

  def test_debug_interpreter_traces(self, env, capsys):
    create_debug_interpreter().evaluate("1 + $missing", env)
    out = capsys.readouterr().out
    assert "Evaluating: (1 + $missing)" in out
    assert "Unbound variable: $missing" in out


def test_split_statements():
  assert split_statements("$x = 1; $x ;; ") == ["$x = 1", "$x"]


def test_i128_bounds():
  assert I128_MAX == 2 ** 127 - 1
  assert I128_MIN == -(2 ** 127)
