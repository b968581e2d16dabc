"""
Calculator sessions as actors (Using Pykka)
One actor owns one environment; every evaluation for that session goes through
its mailbox, so the environment never has two writers
"""

from typing import Dict, List, Optional, Tuple

import pykka

from error_handling import XCError
from interpreter import create_interpreter, make_runtime_env, split_statements


StatementResult = Tuple[str, Optional[Dict], Optional[XCError]]


class XCSession(pykka.ThreadingActor):
  """Actor holding the variable environment of one calculator session"""

  def __init__(self, debug: bool = False):
    super().__init__()
    self.debug = debug
    self.interpreter = create_interpreter(debug)
    self.env = make_runtime_env()

  def evaluate(self, text: str) -> Optional[Dict]:
    """Evaluate one expression; errors propagate through the caller's future"""
    return self.interpreter.evaluate(text, self.env)

  def evaluate_statements(self, text: str) -> List[StatementResult]:
    """
    Evaluate ';'-separated statements in order.
    A failing statement is reported in its slot and the rest still run.
    """
    results = []
    for stmt in split_statements(text):
      try:
        results.append((stmt, self.evaluate(stmt), None))
      except XCError as e:
        results.append((stmt, None, e))
    return results

  def parse(self, text: str):
    return self.interpreter.parse(text)

  def bindings(self) -> Dict[str, Dict]:
    """Snapshot of the current environment"""
    return dict(self.env)

  def reset(self) -> None:
    self.env = make_runtime_env()


def start_session(debug: bool = False) -> pykka.ActorRef:
  """Start a session actor; the caller stops it when the session ends"""
  return XCSession.start(debug=debug)
