"""
Utilities module for loopcalc
Validation, number parsing and formatting helpers shared by the stores,
the command classifier and the interpreter
"""

from typing import Optional
import math
import re

from error_handling import InvalidNameError, InvalidRangeError


MAX_NAME_LENGTH = 22
DEFAULT_SIG_FIGS = 3
MIN_SIG_FIGS = 2
MAX_SIG_FIGS = 8

NAME_PATTERN = re.compile(r'[A-Za-z]{1,%d}' % MAX_NAME_LENGTH)

# Decimal subset of what C strtod() accepts, leading whitespace included
NUMBER_PATTERN = re.compile(
  r'\s*[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)',
  re.IGNORECASE
)


# ==================== VALIDATION UTILITIES ====================

def is_valid_name(name: str) -> bool:
  """
  Check a variable or loop name

  Args:
    name: Candidate name

  Returns:
    True if name is 1-22 ASCII letters
  """
  return NAME_PATTERN.fullmatch(name) is not None


def validate_name(name: str) -> str:
  """Return name unchanged or raise InvalidNameError"""
  if not is_valid_name(name):
    raise InvalidNameError(name)
  return name


def validate_range(start: float, increment: float, end: float) -> None:
  """
  Check that a loop range can be swept

  Args:
    start: First value
    increment: Step, must be non-zero and point from start towards end
    end: Value the sweep must not pass

  Raises:
    InvalidRangeError if the range is inconsistent or not finite
  """
  if not all(math.isfinite(v) for v in (start, increment, end)):
    raise InvalidRangeError(start, increment, end)
  if increment == 0:
    raise InvalidRangeError(start, increment, end)
  if (start < end and increment < 0) or (start > end and increment > 0):
    raise InvalidRangeError(start, increment, end)
  # The step count must be representable
  if not math.isfinite((end - start) / increment):
    raise InvalidRangeError(start, increment, end)


def validate_sig_figs(sig_figs: int) -> int:
  if not MIN_SIG_FIGS <= sig_figs <= MAX_SIG_FIGS:
    raise ValueError(
      f"significant figures must be between {MIN_SIG_FIGS} and {MAX_SIG_FIGS}")
  return sig_figs


# ==================== NUMBER UTILITIES ====================

def parse_number(text: Optional[str]) -> Optional[float]:
  """
  Parse a number that must consume the whole string

  Args:
    text: Source text (None and empty strings are rejected)

  Returns:
    The float value, or None if text is empty or has trailing characters

  Examples:
    parse_number("2.5") -> 2.5
    parse_number(" -1e3") -> -1000.0
    parse_number("3x") -> None
  """
  if not text:
    return None
  match = NUMBER_PATTERN.fullmatch(text)
  if match is None:
    return None
  return float(text.strip())


def iteration_count(start: float, increment: float, end: float) -> int:
  """
  Number of values a loop sweeps

  The quotient is computed in floating point and floored, so bounds that
  are exact multiples of the increment on paper can lose the last value.
  """
  return 1 + int(math.floor((end - start) / increment))


def iteration_value(start: float, increment: float, index: int) -> float:
  return start + index * increment


# ==================== FORMATTING ====================

def format_number(value: float, sig_figs: int = DEFAULT_SIG_FIGS) -> str:
  """
  Render a value with a fixed number of significant figures

  Args:
    value: Value to render
    sig_figs: Significant figures (2-8)

  Returns:
    The value in C printf "%.Ng" form

  Examples:
    format_number(1 / 3, 3) -> "0.333"
    format_number(1234567.0, 3) -> "1.23e+06"
  """
  return '%.*g' % (sig_figs, value)


def format_loop(name: str, current: float, start: float, increment: float,
                end: float, sig_figs: int) -> str:
  """Render a loop as 'name = current (start, increment, end)'"""
  values = [format_number(v, sig_figs) for v in (start, increment, end)]
  return f"{name} = {format_number(current, sig_figs)} ({', '.join(values)})"
