"""
xc - Pocket-sized calculator - Main Entry Point
Evaluates integer expressions given on the command line or read interactively
"""

import sys
import argparse
import os
from typing import Dict, List, Optional

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from error_handling import XCError, format_error
from formatting import show_function, show_selected, show_value
from parsing import pretty_print_operand
from session import start_session


VERSION = "0.1.0"
PROMPT = ">> "
HISTORY_FILE = "~/.xc_history"
HISTORY_LENGTH = 1000
REPL_COMMANDS = [":env", ":parse ", ":help", "exit"]


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='xc',
      description='Pocket-sized calculator for 128-bit integer expressions',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s '0xff * 2'                 # Show result in dec, hex and bin
  %(prog)s -x '1 << 20'               # Only hex output
  %(prog)s '$x = 3; $x ** 4'          # Statements share one environment
  %(prog)s '$f = |$a, $b| $a ^ $b; $f(0b1100, 0b1010)'
  %(prog)s -i                         # Interactive mode
        """
  )

  parser.add_argument(
      'expr',
      nargs='?',
      metavar='EXPR',
      help="Expression to calculate; separate statements with ';'"
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Read expressions from input instead of an argument'
  )

  # Output flags keep the order they were given in
  parser.add_argument(
      '-d', '--dec',
      dest='outputs',
      action='append_const',
      const='dec',
      help='Only print decimal output'
  )

  parser.add_argument(
      '-x', '--hex',
      dest='outputs',
      action='append_const',
      const='hex',
      help='Only print hex output'
  )

  parser.add_argument(
      '-b', '--bin',
      dest='outputs',
      action='append_const',
      const='bin',
      help='Only print binary output'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Trace tokens, reductions and evaluation'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=f'xc v{VERSION}'
  )

  return parser


def print_result(value: Optional[Dict], outputs: Optional[List[str]]) -> None:
  """Print an evaluation result; assignments and unbound reads print nothing"""
  if value is None:
    return
  if outputs and value['type'] == 'Num':
    print(show_selected(value['value'], outputs))
  else:
    print(show_value(value))


def run_expressions(text: str, outputs: Optional[List[str]] = None, debug: bool = False) -> bool:
  """Evaluate ';'-separated statements in one session; False if any failed"""
  session_ref = start_session(debug)
  success = True
  try:
    session = session_ref.proxy()
    for stmt, value, error in session.evaluate_statements(text).get():
      print(f"> {stmt}")
      if error is not None:
        print(format_error(error, stmt), file=sys.stderr)
        success = False
      else:
        print_result(value, outputs)
  except Exception as e:
    print(f"Unexpected error: {e}", file=sys.stderr)
    if debug:
      import traceback
      traceback.print_exc()
    success = False
  finally:
    session_ref.stop()
  return success


def setup_readline(session) -> None:
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First run, no history yet

  readline.set_history_length(HISTORY_LENGTH)

  def completer(text, state):
    names = ["$" + name for name in session.bindings().get()]
    options = [cmd for cmd in REPL_COMMANDS + names if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.set_completer_delims(" \t\n;()+-*/%^&|~<>=,")
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def print_help() -> None:
  print("REPL Commands:")
  print("  :parse <expr>     - Show the parsed tree")
  print("  :env              - Show current bindings")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL (or Ctrl-D)")
  print()
  print("Language features:")
  print("  0x1f, 1fh, 0b101, 101b    - Hex and binary literals")
  print("  1 000 000                 - Digit grouping")
  print("  + - * / % **              - Arithmetic")
  print("  ~ ^ | & << >>             - Bitwise operations")
  print("  $x = 5                    - Variable binding")
  print("  $f = |$a, $b| $a + $b     - Function definition")
  print("  $f(1, 2)                  - Function call")


def run_interactive_mode(outputs: Optional[List[str]] = None, debug: bool = False) -> None:
  """Run xc in interactive mode with one shared session"""
  print(f"xc v{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  session_ref = start_session(debug)
  session = session_ref.proxy()
  setup_readline(session)

  try:
    while True:
      try:
        code = input(PROMPT).strip()
      except KeyboardInterrupt:
        print()
        continue
      except EOFError:
        print()
        break

      if not code:
        continue
      if code == "exit":
        break

      if code == ":help":
        print_help()
        continue

      if code == ":env":
        bindings = session.bindings().get()
        if bindings:
          for name, value in bindings.items():
            val_str = show_function(value) if value['type'] == 'Function' else str(value['value'])
            print(f"  ${name} = {val_str}")
        else:
          print("  (no bindings)")
        continue

      if code.startswith(":parse "):
        try:
          print(pretty_print_operand(session.parse(code[7:]).get()), end="")
        except XCError as e:
          print(format_error(e, code[7:]), file=sys.stderr)
        continue

      try:
        print_result(session.evaluate(code).get(), outputs)
      except XCError as e:
        print(format_error(e, code), file=sys.stderr)
      except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if debug:
          import traceback
          traceback.print_exc()
      print()
  finally:
    session_ref.stop()


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for xc"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.interactive:
    run_interactive_mode(args.outputs, debug=args.debug)
  elif args.expr is not None:
    if not run_expressions(args.expr, args.outputs, debug=args.debug):
      sys.exit(1)
  else:
    print("Please provide either an expression or the --interactive flag", file=sys.stderr)
    sys.exit(2)


if __name__ == "__main__":
  main()
