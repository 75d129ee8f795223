"""
loopcalc Interpreter
Executes classified commands against a Session: the stores, the
significant figure setting and the expression parser travel together in
one context object that is passed explicitly
"""

from typing import Callable, Iterable, List, Optional
import sys

from commands import (
  ASSIGNMENT,
  BLANK,
  COMMENT,
  EXPRESSION,
  LOOP_ASSIGNMENT,
  LOOP_EXPRESSION,
  PRINT_ALL,
  RANGE,
  Command,
  classify_line,
)
from decoding import split_range
from error_handling import (
  GENERIC_COMMAND_ERROR,
  CalculatorError,
  CommandSyntaxError,
  ExpressionSyntaxError,
)
from parsing import ExpressionParser, create_parser
from stores import LOOP, VARIABLE, Loop, Store, build_bindings
from utilities import (
  DEFAULT_SIG_FIGS,
  format_loop,
  format_number,
  iteration_count,
  iteration_value,
  validate_name,
  validate_sig_figs,
)


# ============================================================================
# SESSION CONTEXT
# ============================================================================

class Session:
  """Everything one run of the calculator owns"""

  def __init__(self, store: Optional[Store] = None, sig_figs: int = DEFAULT_SIG_FIGS,
               debug: bool = False, parser: Optional[ExpressionParser] = None):
    self.store = store if store is not None else Store()
    self.sig_figs = validate_sig_figs(sig_figs)
    self.debug = debug
    self.parser = parser if parser is not None else create_parser(debug)

  def fmt(self, value: float) -> str:
    return format_number(value, self.sig_figs)

  def trace(self, message: str) -> None:
    if self.debug:
      print(f"[debug] {message}", file=sys.stderr)


def create_interpreter(store: Optional[Store] = None, sig_figs: int = DEFAULT_SIG_FIGS,
                       debug: bool = False) -> Session:
  """Factory function returning a ready Session"""
  return Session(store, sig_figs, debug)


def create_debug_interpreter(store: Optional[Store] = None,
                             sig_figs: int = DEFAULT_SIG_FIGS) -> Session:
  """Factory function returning a Session with debug tracing"""
  return create_interpreter(store, sig_figs, debug=True)


# ============================================================================
# EVALUATION
# ============================================================================

def evaluate(session: Session, expression: str) -> float:
  """Evaluate an expression against a fresh snapshot of the stores"""
  bindings = build_bindings(session.store)
  session.trace(f"bindings: {bindings}")
  return session.parser.compile(expression, bindings).evaluate()


# ============================================================================
# LISTINGS
# ============================================================================

def print_tables(session: Session) -> None:
  """Print live variables and all loops, as @print does"""
  variables = session.store.variables
  if variables.live_count == 0:
    print("No variables were defined.")
  else:
    print("Variables:")
    for variable in variables.live():
      print(f"{variable.name} = {session.fmt(variable.value)}")

  loops = session.store.loops
  if len(loops) == 0:
    print("No loop variables were defined.")
  else:
    print("Loop variables:")
    for loop in loops:
      print(describe_loop(session, loop))


def describe_loop(session: Session, loop: Loop) -> str:
  return format_loop(loop.name, loop.current, loop.start, loop.increment,
                     loop.end, session.sig_figs)


# ============================================================================
# COMMANDS
# ============================================================================

def run_print_all(session: Session, command: Command) -> None:
  print_tables(session)


def run_range(session: Session, command: Command) -> None:
  """@range name,start,increment,end: declare, promote or redefine a loop"""
  name, start, increment, end = split_range(command.argument)
  loop = session.store.promote_or_redefine_loop(name, start, increment, end)
  print(describe_loop(session, loop))


def run_assignment(session: Session, command: Command) -> None:
  name = validate_name(command.target)
  value = evaluate(session, command.expression)
  session.store.set_value(name, value)
  print(f"{name} = {session.fmt(value)}")


def run_expression(session: Session, command: Command) -> None:
  value = evaluate(session, command.expression)
  print(f"Result = {session.fmt(value)}")


# ============================================================================
# LOOP DRIVER
# ============================================================================

def find_loop(session: Session, name: str) -> Loop:
  found = session.store.find(name)
  if found is None or found[0] != LOOP:
    raise CommandSyntaxError(f"'{name}' is not a loop variable")
  return session.store.loops[found[1]]


def sweep(session: Session, loop: Loop, body: Callable[[float], None]) -> None:
  """
  Run body once per value of the loop

  Each value is recomputed from start and increment so that rounding does
  not accumulate, and is stored in the loop before body runs. An exception
  from body ends the sweep.
  """
  repetitions = iteration_count(loop.start, loop.increment, loop.end)
  session.trace(f"sweeping {loop.name} {repetitions} time(s)")
  for i in range(repetitions):
    current = iteration_value(loop.start, loop.increment, i)
    loop.current = current
    body(current)


def resolve_loop_target(session: Session, target: str) -> Callable[[float], None]:
  """
  Resolve an assignment target once, before iterating

  Returns a writer for the existing loop or variable of that name; a new
  name gets a variable created with value 0.
  """
  validate_name(target)
  store = session.store
  found = store.find(target)
  if found is None:
    variable = store.variables.add(target, 0.0)
    session.trace(f"created variable {target} for loop assignment")
  elif found[0] == VARIABLE:
    variable = store.variables.entries[found[1]]
  else:
    loop = store.loops[found[1]]

    def write_loop(value: float) -> None:
      loop.current = value
    return write_loop

  def write_variable(value: float) -> None:
    variable.value = value
  return write_variable


def run_loop_expression(session: Session, command: Command) -> None:
  loop = find_loop(session, command.loop_name)
  loop.current = loop.start

  def body(current: float) -> None:
    value = evaluate(session, command.expression)
    print(f"Result = {session.fmt(value)} when {loop.name} = {session.fmt(current)}")

  sweep(session, loop, body)


def run_loop_assignment(session: Session, command: Command) -> None:
  loop = find_loop(session, command.loop_name)
  loop.current = loop.start
  write = resolve_loop_target(session, command.target)

  def body(current: float) -> None:
    value = evaluate(session, command.expression)
    write(value)
    print(f"{command.target} = {session.fmt(value)} when {loop.name} = {session.fmt(current)}")

  sweep(session, loop, body)


# ============================================================================
# LINE EXECUTION
# ============================================================================

COMMAND_HANDLERS = {
    PRINT_ALL: run_print_all,
    RANGE: run_range,
    LOOP_EXPRESSION: run_loop_expression,
    LOOP_ASSIGNMENT: run_loop_assignment,
    ASSIGNMENT: run_assignment,
    EXPRESSION: run_expression,
}


def report_error(session: Session, error: CalculatorError) -> None:
  """One generic diagnostic per failed command, details only when debugging"""
  print(GENERIC_COMMAND_ERROR, file=sys.stderr)
  if session.debug:
    detail = str(error) if isinstance(error, ExpressionSyntaxError) else error.message
    print(f"[debug] {type(error).__name__}: {detail}", file=sys.stderr)


def execute_line(session: Session, line: str) -> bool:
  """
  Classify and execute one line

  Returns:
    False if the command failed (the error has been reported), else True
  """
  try:
    command = classify_line(line)
    session.trace(f"{command.kind}: {command.line!r}")
    if command.kind in (COMMENT, BLANK):
      return True
    COMMAND_HANDLERS[command.kind](session, command)
  except CalculatorError as e:
    report_error(session, e)
    return False
  return True


def execute_lines(session: Session, lines: Iterable[str]) -> List[bool]:
  """Execute lines in order; a failing line never stops the rest"""
  return [execute_line(session, line) for line in lines]
