"""
loopcalc - Main Entry Point
A line-oriented calculator with variables, loop variables and the
@print, @range and @loop directives
"""

import sys
import argparse
import os
from typing import List, Optional

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from decoding import decode_initial_state
from error_handling import DuplicateNameError, InvalidDefinitionError
from interpreter import (
  Session,
  create_debug_interpreter,
  create_interpreter,
  execute_line,
  print_tables,
)
from stdlib import list_builtin_functions
from utilities import DEFAULT_SIG_FIGS, MAX_SIG_FIGS, MIN_SIG_FIGS


PROGRAM_NAME = "loopcalc"
VERSION = "loopcalc v1.0.0"

EXIT_USAGE = 4
EXIT_DUPLICATE = 6
EXIT_FILE = 7
EXIT_INVALID = 12

USAGE = (f"Usage: {PROGRAM_NAME} [--loopable string] [--define string] "
         f"[--significantfigures {MIN_SIG_FIGS}..{MAX_SIG_FIGS}] [inputfilename]")

DIRECTIVES = ["@print", "@range ", "@loop "]


# ============================================================================
# COMMAND LINE
# ============================================================================

class CalculatorArgumentParser(argparse.ArgumentParser):
  """Argument parser that reports every usage problem the same way"""

  def error(self, message: str):
    print(USAGE, file=sys.stderr)
    sys.exit(EXIT_USAGE)


class StoreOnceAction(argparse.Action):
  """Store an option value, rejecting a second occurrence"""

  def __call__(self, parser, namespace, values, option_string=None):
    if getattr(namespace, self.dest) is not None:
      parser.error(f"{option_string} given more than once")
    setattr(namespace, self.dest, values)


def non_empty(text: str) -> str:
  if not text:
    raise argparse.ArgumentTypeError("value must not be empty")
  return text


def significant_figures(text: str) -> int:
  """Accept exactly one digit in the allowed range"""
  if len(text) == 1 and str(MIN_SIG_FIGS) <= text <= str(MAX_SIG_FIGS):
    return int(text)
  raise argparse.ArgumentTypeError(
      f"expected a single digit {MIN_SIG_FIGS}..{MAX_SIG_FIGS}")


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = CalculatorArgumentParser(
      prog=PROGRAM_NAME,
      allow_abbrev=False,
      description='Calculator with variables, loop variables and directives',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.txt                         # Run a script
  %(prog)s                                    # Read from standard input
  %(prog)s --define x=2 --loopable a,0,1,3    # Start with x and loop a
  %(prog)s --significantfigures 5 script.txt  # Print 5 significant figures
  %(prog)s --debug script.txt                 # Trace execution on stderr
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='input file to execute line by line'
  )

  parser.add_argument(
      '--define',
      action='append',
      default=[],
      type=non_empty,
      metavar='NAME=VALUE',
      help='define a variable before reading input (repeatable)'
  )

  parser.add_argument(
      '--loopable',
      action='append',
      default=[],
      type=non_empty,
      metavar='NAME,START,INCREMENT,END',
      help='define a loop variable before reading input (repeatable)'
  )

  parser.add_argument(
      '--significantfigures',
      action=StoreOnceAction,
      default=None,
      type=significant_figures,
      metavar=f'{MIN_SIG_FIGS}..{MAX_SIG_FIGS}',
      help=f'significant figures for printed values (default {DEFAULT_SIG_FIGS})'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output on stderr'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def check_open_file(script_path: str) -> bool:
  """Check that a script can be opened for reading"""
  try:
    with open(script_path, 'r', encoding='utf-8'):
      return True
  except OSError:
    return False


# ============================================================================
# RUNNERS
# ============================================================================

def run_script_file(session: Session, script_path: str) -> None:
  """Execute every line of a script file"""
  session.trace(f"reading {script_path}")
  with open(script_path, 'r', encoding='utf-8', errors='replace') as f:
    for line in f:
      execute_line(session, line)


def setup_readline(session: Session) -> None:
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  # Setup history file
  history_file = os.path.expanduser(f"~/.{PROGRAM_NAME}_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  # Directives, live variable and loop names, built-ins
  def completer(text, state):
    candidates = DIRECTIVES + session.store.names() + list_builtin_functions()
    options = [word for word in candidates if word.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.set_completer_delims(" \t\n=,()+-*/%^")
  readline.parse_and_bind("tab: complete")

  # Save history on exit
  import atexit
  atexit.register(readline.write_history_file, history_file)


def run_interactive_mode(session: Session) -> None:
  """Read and execute lines from standard input until end of input"""
  print("Please enter your expressions and assignment operations.")
  if sys.stdin.isatty():
    setup_readline(session)

  while True:
    try:
      line = input()
    except EOFError:
      break
    except KeyboardInterrupt:
      print()
      break
    execute_line(session, line)
    sys.stdout.flush()


# ============================================================================
# ENTRY POINT
# ============================================================================

def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for loopcalc"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.script == "":
    arg_parser.error("empty input file name")

  if args.script is not None and not check_open_file(args.script):
    print(f"{PROGRAM_NAME}: can't open file \"{args.script}\" for reading",
          file=sys.stderr)
    sys.exit(EXIT_FILE)

  try:
    store = decode_initial_state(args.define, args.loopable, debug=args.debug)
  except InvalidDefinitionError as e:
    if args.debug:
      print(f"[debug] {e.message}", file=sys.stderr)
    print(f"{PROGRAM_NAME}: invalid variable(s) were found", file=sys.stderr)
    sys.exit(EXIT_INVALID)
  except DuplicateNameError as e:
    if args.debug:
      print(f"[debug] {e.message}", file=sys.stderr)
    print(f"{PROGRAM_NAME}: one or more variables are duplicated", file=sys.stderr)
    sys.exit(EXIT_DUPLICATE)

  sig_figs = args.significantfigures or DEFAULT_SIG_FIGS
  if args.debug:
    session = create_debug_interpreter(store, sig_figs)
  else:
    session = create_interpreter(store, sig_figs)

  print(f"Welcome to {PROGRAM_NAME}!")
  print_tables(session)

  if args.script is not None:
    run_script_file(session, args.script)
  else:
    run_interactive_mode(session)

  print(f"Thank you for using {PROGRAM_NAME}.")


if __name__ == "__main__":
  main()
