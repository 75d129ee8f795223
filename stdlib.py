"""
loopcalc Standard Library
Built-in functions and constants available inside expressions
Every function follows IEEE double semantics: domain errors give nan and
overflow gives inf instead of raising
"""

from typing import Dict, Callable, List, Optional
import math


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def make_builtin_function(name: str, func: Callable, arity: int, doc: str = "") -> Dict:
  """Create a built-in function descriptor"""
  return {
      'name': name,
      'func': func,
      'arity': arity,
      'doc': doc
  }


def ieee_call(func: Callable, *args: float) -> float:
  """Call a math function, mapping Python exceptions to IEEE results"""
  try:
    return float(func(*args))
  except OverflowError:
    return math.inf
  except (ValueError, ZeroDivisionError):
    return math.nan


# ============================================================================
# ARITHMETIC
# ============================================================================

def calc_add(x: float, y: float) -> float:
  return x + y


def calc_sub(x: float, y: float) -> float:
  return x - y


def calc_mul(x: float, y: float) -> float:
  return x * y


def calc_div(x: float, y: float) -> float:
  """Divide, giving +-inf or nan for a zero divisor"""
  if y == 0:
    if x == 0 or math.isnan(x):
      return math.nan
    # Sign of a signed zero divisor matters: 1/-0 is -inf
    return math.copysign(math.inf, x) * math.copysign(1.0, y)
  return x / y


def calc_mod(x: float, y: float) -> float:
  """Remainder with the sign of the dividend (C fmod)"""
  return ieee_call(math.fmod, x, y)


def calc_pow(x: float, y: float) -> float:
  """Power that never produces complex numbers"""
  try:
    return math.pow(x, y)
  except OverflowError:
    if x < 0 and float(y).is_integer() and int(y) % 2 == 1:
      return -math.inf
    return math.inf
  except ValueError:
    if x == 0 and y < 0:
      return math.inf
    return math.nan


def calc_neg(x: float) -> float:
  return -x


def calc_comma(x: float, y: float) -> float:
  """Comma operator: both sides are evaluated, the right one is kept"""
  return y


# ============================================================================
# COMBINATORICS
# ============================================================================

def calc_fac(a: float) -> float:
  """Factorial of floor(a); nan for negative input, inf on overflow"""
  if math.isnan(a) or a < 0:
    return math.nan
  if math.isinf(a):
    return math.inf
  result = 1.0
  for i in range(2, int(math.floor(a)) + 1):
    result *= i
    if math.isinf(result):
      return math.inf
  return result


def calc_ncr(n: float, r: float) -> float:
  """Binomial coefficient of floor(n) and floor(r)"""
  if math.isnan(n) or math.isnan(r) or n < 0 or r < 0 or n < r:
    return math.nan
  if math.isinf(n) or math.isinf(r):
    return math.inf
  un = int(math.floor(n))
  ur = int(math.floor(r))
  if ur > un // 2:
    ur = un - ur
  result = 1.0
  for i in range(1, ur + 1):
    result = result * (un - ur + i) / i
    if math.isinf(result):
      return math.inf
  return result


def calc_npr(n: float, r: float) -> float:
  """Number of ordered arrangements: ncr(n, r) * r!"""
  return calc_ncr(n, r) * calc_fac(r)


# ============================================================================
# ELEMENTARY FUNCTIONS
# ============================================================================

def _wrap1(func: Callable) -> Callable[[float], float]:
  def wrapped(x: float) -> float:
    return ieee_call(func, x)
  wrapped.__name__ = getattr(func, '__name__', 'wrapped')
  return wrapped


def _wrap2(func: Callable) -> Callable[[float, float], float]:
  def wrapped(x: float, y: float) -> float:
    return ieee_call(func, x, y)
  wrapped.__name__ = getattr(func, '__name__', 'wrapped')
  return wrapped


def calc_ln(x: float) -> float:
  if x == 0:
    return -math.inf
  return ieee_call(math.log, x)


def calc_log10(x: float) -> float:
  if x == 0:
    return -math.inf
  return ieee_call(math.log10, x)


def calc_ceil(x: float) -> float:
  if not math.isfinite(x):
    return x
  return float(math.ceil(x))


def calc_floor(x: float) -> float:
  if not math.isfinite(x):
    return x
  return float(math.floor(x))


# ============================================================================
# BUILTIN REGISTRY
# ============================================================================

BUILTIN_FUNCTIONS: Dict[str, Dict] = {
    entry['name']: entry for entry in [
        make_builtin_function('abs', _wrap1(math.fabs), 1, "absolute value"),
        make_builtin_function('acos', _wrap1(math.acos), 1, "arc cosine"),
        make_builtin_function('asin', _wrap1(math.asin), 1, "arc sine"),
        make_builtin_function('atan', _wrap1(math.atan), 1, "arc tangent"),
        make_builtin_function('atan2', _wrap2(math.atan2), 2, "arc tangent of y/x"),
        make_builtin_function('ceil', calc_ceil, 1, "round up"),
        make_builtin_function('cos', _wrap1(math.cos), 1, "cosine"),
        make_builtin_function('cosh', _wrap1(math.cosh), 1, "hyperbolic cosine"),
        make_builtin_function('e', lambda: math.e, 0, "Euler's number"),
        make_builtin_function('exp', _wrap1(math.exp), 1, "e to the power x"),
        make_builtin_function('fac', calc_fac, 1, "factorial"),
        make_builtin_function('floor', calc_floor, 1, "round down"),
        make_builtin_function('ln', calc_ln, 1, "natural logarithm"),
        make_builtin_function('log', calc_log10, 1, "base 10 logarithm"),
        make_builtin_function('log10', calc_log10, 1, "base 10 logarithm"),
        make_builtin_function('ncr', calc_ncr, 2, "combinations"),
        make_builtin_function('npr', calc_npr, 2, "permutations"),
        make_builtin_function('pi', lambda: math.pi, 0, "ratio of circumference to diameter"),
        make_builtin_function('pow', calc_pow, 2, "x to the power y"),
        make_builtin_function('sin', _wrap1(math.sin), 1, "sine"),
        make_builtin_function('sinh', _wrap1(math.sinh), 1, "hyperbolic sine"),
        make_builtin_function('sqrt', _wrap1(math.sqrt), 1, "square root"),
        make_builtin_function('tan', _wrap1(math.tan), 1, "tangent"),
        make_builtin_function('tanh', _wrap1(math.tanh), 1, "hyperbolic tangent"),
    ]
}

BINARY_OPERATORS: Dict[str, Callable[[float, float], float]] = {
    '+': calc_add,
    '-': calc_sub,
    '*': calc_mul,
    '/': calc_div,
    '%': calc_mod,
    '^': calc_pow,
    ',': calc_comma,
}


def get_builtin_function(name: str) -> Optional[Dict]:
  """Look up a built-in function by name"""
  return BUILTIN_FUNCTIONS.get(name)


def is_builtin_constant(name: str) -> bool:
  """Zero-argument built-ins can be written without parentheses"""
  entry = BUILTIN_FUNCTIONS.get(name)
  return entry is not None and entry['arity'] == 0


def list_builtin_functions() -> List[str]:
  """List all built-in function names"""
  return sorted(BUILTIN_FUNCTIONS.keys())
