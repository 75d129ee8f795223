"""
Initial state decoding for loopcalc
Turns --define and --loopable strings into a populated Store before any
input is read
"""

from typing import Iterable, Optional, Tuple
import sys

from error_handling import (
  DuplicateNameError,
  InvalidDefinitionError,
  InvalidNameError,
  InvalidRangeError,
)
from stores import Store
from utilities import parse_number


LOOP_FIELDS = 4


# ============================================================================
# PURE DECODERS
# ============================================================================

def split_definition(text: str) -> Tuple[str, float]:
  """
  Decode 'name=value'

  Raises:
    InvalidDefinitionError unless there is exactly one '=' with a
    non-empty name and a fully numeric value
  """
  if text.count('=') != 1:
    raise InvalidDefinitionError(text, "expected exactly one '='")
  name, _, value_text = text.partition('=')
  if not name:
    raise InvalidDefinitionError(text, "missing name")
  value = parse_number(value_text)
  if value is None:
    raise InvalidDefinitionError(text, "value is not a number")
  return name, value


def split_range(text: str) -> Tuple[str, float, float, float]:
  """
  Decode 'name,start,increment,end'

  Used for both --loopable strings and the @range directive.

  Raises:
    InvalidDefinitionError unless there are exactly four non-empty,
    comma-separated fields and the last three are fully numeric
  """
  fields = text.split(',')
  if len(fields) != LOOP_FIELDS:
    raise InvalidDefinitionError(text, "expected name,start,increment,end")
  name = fields[0]
  if not name:
    raise InvalidDefinitionError(text, "missing name")
  numbers = [parse_number(field) for field in fields[1:]]
  if any(number is None for number in numbers):
    raise InvalidDefinitionError(text, "range bounds must be numbers")
  start, increment, end = numbers
  return name, start, increment, end


# ============================================================================
# STORE POPULATION
# ============================================================================

def decode_initial_state(defines: Iterable[str], loopables: Iterable[str],
                         debug: bool = False) -> Store:
  """
  Build the starting Store from command line definitions

  Every define is decoded, then every loopable. Invalid entries win over
  duplicates: duplicates are only reported once everything has decoded.

  Raises:
    InvalidDefinitionError for the first invalid entry
    DuplicateNameError for the first repeated name
  """
  store = Store()
  duplicate: Optional[DuplicateNameError] = None

  for text in defines:
    try:
      name, value = split_definition(text)
      store.define_variable(name, value)
    except DuplicateNameError as e:
      duplicate = duplicate or e
      continue
    except (InvalidNameError, InvalidRangeError) as e:
      raise InvalidDefinitionError(text, e.message) from e
    if debug:
      print(f"[debug] defined variable {name} = {value}", file=sys.stderr)

  for text in loopables:
    try:
      name, start, increment, end = split_range(text)
      store.define_loop(name, start, increment, end)
    except DuplicateNameError as e:
      duplicate = duplicate or e
      continue
    except (InvalidNameError, InvalidRangeError) as e:
      raise InvalidDefinitionError(text, e.message) from e
    if debug:
      print(f"[debug] defined loop {name} ({start}, {increment}, {end})", file=sys.stderr)

  if duplicate is not None:
    raise duplicate
  return store
