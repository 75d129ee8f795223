"""
Command classification for loopcalc
Decides which kind of command a raw input line is and slices out its parts
without touching any state
"""

from typing import Optional
from dataclasses import dataclass

from error_handling import CommandSyntaxError


COMMENT = "COMMENT"
BLANK = "BLANK"
PRINT_ALL = "PRINT_ALL"
RANGE = "RANGE"
LOOP_EXPRESSION = "LOOP_EXPRESSION"
LOOP_ASSIGNMENT = "LOOP_ASSIGNMENT"
ASSIGNMENT = "ASSIGNMENT"
EXPRESSION = "EXPRESSION"

PRINT_DIRECTIVE = "@print"
RANGE_DIRECTIVE = "@range"
LOOP_PREFIX = "@loop "


@dataclass(frozen=True)
class Command:
  """A classified line; unused fields stay None"""
  kind: str
  line: str
  expression: Optional[str] = None
  target: Optional[str] = None
  loop_name: Optional[str] = None
  argument: Optional[str] = None


def classify_line(line: str) -> Command:
  """
  Classify one input line

  Args:
    line: Raw line, with or without its trailing newline

  Returns:
    The Command describing how to execute the line

  Raises:
    CommandSyntaxError if the line is malformed
  """
  line = line.rstrip('\r\n')

  if '#' in line:
    return Command(COMMENT, line)
  stripped = line.strip()
  if not stripped:
    return Command(BLANK, line)

  if stripped == PRINT_DIRECTIVE:
    return Command(PRINT_ALL, line)

  if stripped.split(' ')[0] == RANGE_DIRECTIVE:
    return classify_range(line, stripped)

  if is_loop_line(line):
    return classify_loop(line)

  return classify_plain(line)


def classify_range(line: str, stripped: str) -> Command:
  """'@range name,start,increment,end' with a single space and no indent"""
  if line != stripped or stripped.count(' ') != 1:
    raise CommandSyntaxError("@range takes exactly one argument", line)
  argument = stripped.split(' ')[1]
  if not argument:
    raise CommandSyntaxError("@range takes exactly one argument", line)
  return Command(RANGE, line, argument=argument)


def is_loop_line(line: str) -> bool:
  return (len(line) > len(LOOP_PREFIX) and line.startswith(LOOP_PREFIX)
          and line[len(LOOP_PREFIX)].isascii() and line[len(LOOP_PREFIX)].isalpha())


def classify_loop(line: str) -> Command:
  """'@loop name expression' or '@loop name target = expression'"""
  loop_name, _, rest = line[len(LOOP_PREFIX):].partition(' ')
  if not rest.strip():
    raise CommandSyntaxError("@loop needs an expression or assignment", line)

  equals = rest.count('=')
  if equals == 0:
    return Command(LOOP_EXPRESSION, line, expression=rest, loop_name=loop_name)
  if equals == 1:
    target, _, expression = rest.partition('=')
    return Command(LOOP_ASSIGNMENT, line, expression=expression,
                   target=target.strip(), loop_name=loop_name)
  raise CommandSyntaxError("Too many '=' in @loop command", line)


def classify_plain(line: str) -> Command:
  """Bare expression or 'name = expression'"""
  equals = line.count('=')
  if equals == 0:
    return Command(EXPRESSION, line, expression=line)
  if equals == 1:
    target, _, expression = line.partition('=')
    return Command(ASSIGNMENT, line, expression=expression, target=target.strip())
  raise CommandSyntaxError("Too many '=' in assignment", line)
