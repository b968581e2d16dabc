"""
xc Interpreter
Tree-walking evaluator over operand trees and a mutable name -> value environment
Functions see only their own parameters: every call runs in a fresh environment
"""

from typing import Dict, List, Optional

from error_handling import ExpressionDepthError
from parsing import (
  Number,
  Operand,
  Operator,
  ParameterList,
  Term,
  Variable,
  create_parser,
  is_comma_term,
  render_operand,
)
from stdlib import BUILTIN_OPERATORS, make_value


STATEMENT_SEPARATOR = ";"


# ============================================================================
# DATA STRUCTURES
# ============================================================================

def make_function(params: List[str], body: Operand) -> Dict:
  """Create a function value owning its body tree"""
  return {
      'type': 'Function',
      'params': params,
      'body': body
  }


def is_function(val: Optional[Dict]) -> bool:
  return val is not None and val.get('type') == 'Function'


def make_runtime_env(bindings: Optional[Dict[str, Dict]] = None) -> Dict[str, Dict]:
  """Create a session or call environment"""
  return dict(bindings or {})


def env_bind_value(env: Dict[str, Dict], name: str, value: Dict) -> None:
  env[name] = value


def env_lookup_value(env: Dict[str, Dict], name: str) -> Optional[Dict]:
  return env.get(name)


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_ast(node: Operand, env: Dict[str, Dict], debug: bool = False) -> Optional[Dict]:
  """
  Evaluate an operand tree against env.
  Returns None when the expression has no visible value (bindings, unbound
  names, arithmetic on a missing operand).
  """
  if debug:
    print(f"Evaluating: {render_operand(node)}")

  if isinstance(node, Number):
    return eval_number(node, env, debug)
  elif isinstance(node, Variable):
    return eval_variable(node, env, debug)
  elif isinstance(node, Term):
    op = node.op
    if op is Operator.ASSIGN:
      return eval_assign(node, env, debug)
    elif op is Operator.FUNCTION_BODY:
      return eval_function_def(node, env, debug)
    elif op is Operator.FUNCTION_CALL:
      return eval_function_call(node, env, debug)
    elif op in BUILTIN_OPERATORS:
      return eval_operation(node, env, debug)

  raise RuntimeError(f"Found {node!r} in eval")


def eval_number(node: Number, env: Dict[str, Dict], debug: bool = False) -> Optional[Dict]:
  return make_value(node.value, "Num")


def eval_variable(node: Variable, env: Dict[str, Dict], debug: bool = False) -> Optional[Dict]:
  """Look up a variable; an unbound name reads as no value"""
  value = env_lookup_value(env, node.name)
  if value is None and debug:
    print(f"Unbound variable: ${node.name}")
  return value


def eval_assign(node: Term, env: Dict[str, Dict], debug: bool = False) -> Optional[Dict]:
  """Bind the right-hand side if it produced a value; assignments never print"""
  if not isinstance(node.left, Variable):
    raise RuntimeError(f"Found {node.left!r} on the left of an assignment")

  value = eval_ast(node.right, env, debug)
  if value is not None:
    env_bind_value(env, node.left.name, value)
  return None


def eval_function_def(node: Term, env: Dict[str, Dict], debug: bool = False) -> Optional[Dict]:
  """A function definition evaluates to the function value, the body is not run"""
  if not isinstance(node.left, ParameterList):
    raise RuntimeError(f"Found {node.left!r} as a parameter list")
  return make_function(list(node.left.names), node.right)


def flatten_arguments(node: Operand) -> List[Operand]:
  """Unpack a right-associated comma chain into argument trees"""
  args = []
  while is_comma_term(node):
    args.append(node.left)
    node = node.right
  args.append(node)
  return args


def eval_function_call(node: Term, env: Dict[str, Dict], debug: bool = False) -> Optional[Dict]:
  """Evaluate arguments in the caller's environment, the body in a fresh one"""
  func_val = eval_ast(node.left, env, debug)
  if not is_function(func_val):
    if debug:
      print(f"Not a function: {render_operand(node.left)}")
    return None

  arg_vals = [eval_ast(arg, env, debug) for arg in flatten_arguments(node.right)]

  # Extra arguments are dropped, missing ones stay unbound
  call_env = make_runtime_env()
  for name, value in zip(func_val['params'], arg_vals):
    if value is not None:
      env_bind_value(call_env, name, value)

  return eval_ast(func_val['body'], call_env, debug)


def eval_operation(node: Term, env: Dict[str, Dict], debug: bool = False) -> Optional[Dict]:
  """Evaluate an arithmetic or bitwise term"""
  left_val = eval_ast(node.left, env, debug)
  right_val = eval_ast(node.right, env, debug)
  return BUILTIN_OPERATORS[node.op](left_val, right_val)


# ============================================================================
# EXPRESSION EVALUATION
# ============================================================================

def eval_staged(tree: Operand, env: Dict[str, Dict], debug: bool = False) -> Optional[Dict]:
  """
  Evaluate a whole tree against a scratch copy of env and commit the
  bindings only once nothing has raised
  """
  scratch = make_runtime_env(env)
  try:
    result = eval_ast(tree, scratch, debug)
  except RecursionError:
    raise ExpressionDepthError() from None
  env.update(scratch)
  return result


def evaluate_expression(text: str, env: Dict[str, Dict], debug: bool = False) -> Optional[Dict]:
  """
  Parse and evaluate one expression.
  Raises an XCParseError before env is touched, or an XCRuntimeError before
  any assignment in the expression commits.
  """
  tree = create_parser(debug).parse_expression(text)
  return eval_staged(tree, env, debug)


def split_statements(text: str) -> List[str]:
  """Split input on the statement separator, dropping blank statements"""
  return [stmt.strip() for stmt in text.split(STATEMENT_SEPARATOR) if stmt.strip()]


# ============================================================================
# FACTORY FUNCTIONS (for main.py and the session actor)
# ============================================================================

class XCInterpreter:
  """Parser and evaluator bound to one debug setting"""

  def __init__(self, debug: bool = False):
    self.debug = debug
    self.parser = create_parser(debug)

  def parse(self, text: str) -> Operand:
    return self.parser.parse_expression(text)

  def evaluate(self, text: str, env: Dict[str, Dict]) -> Optional[Dict]:
    return eval_staged(self.parse(text), env, self.debug)


def create_interpreter(debug: bool = False) -> XCInterpreter:
  """Factory function returning an interpreter"""
  return XCInterpreter(debug=debug)


def create_debug_interpreter() -> XCInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
