"""
Variable and loop storage for loopcalc
Variables can be promoted to loops; the promoted entry stays in place as a
tombstone so that listings can tell "none live" from "none ever defined"
"""

from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass

from error_handling import DuplicateNameError
from utilities import validate_name, validate_range


VARIABLE = "variable"
LOOP = "loop"


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass
class Variable:
  name: str
  value: float
  live: bool = True


@dataclass
class Loop:
  """A loop variable sweeping start, start + increment, ... up to end"""
  name: str
  current: float
  start: float
  increment: float
  end: float

  def redefine(self, start: float, increment: float, end: float) -> None:
    self.current = start
    self.start = start
    self.increment = increment
    self.end = end


# ============================================================================
# STORES
# ============================================================================

class VariableStore:
  """Append-only variables with a name index over the live entries"""

  def __init__(self):
    self.entries: List[Variable] = []
    self.index: Dict[str, int] = {}
    self.tombstoned = 0

  def add(self, name: str, value: float) -> Variable:
    variable = Variable(name, value)
    self.entries.append(variable)
    self.index[name] = len(self.entries) - 1
    return variable

  def find(self, name: str) -> Optional[int]:
    return self.index.get(name)

  def tombstone(self, name: str) -> None:
    position = self.index.pop(name)
    self.entries[position].live = False
    self.tombstoned += 1

  def live(self) -> List[Variable]:
    return [v for v in self.entries if v.live]

  @property
  def live_count(self) -> int:
    return len(self.entries) - self.tombstoned

  def __len__(self) -> int:
    return len(self.entries)


class LoopStore:
  """Loops in declaration order with a name index"""

  def __init__(self):
    self.entries: List[Loop] = []
    self.index: Dict[str, int] = {}

  def add(self, name: str, start: float, increment: float, end: float) -> Loop:
    loop = Loop(name, start, start, increment, end)
    self.entries.append(loop)
    self.index[name] = len(self.entries) - 1
    return loop

  def find(self, name: str) -> Optional[int]:
    return self.index.get(name)

  def __iter__(self):
    return iter(self.entries)

  def __getitem__(self, position: int) -> Loop:
    return self.entries[position]

  def __len__(self) -> int:
    return len(self.entries)


class Store:
  """Variables and loops sharing one namespace"""

  def __init__(self):
    self.variables = VariableStore()
    self.loops = LoopStore()

  def find(self, name: str) -> Optional[Tuple[str, int]]:
    """Locate a live name: ('variable', index), ('loop', index) or None"""
    position = self.variables.find(name)
    if position is not None:
      return (VARIABLE, position)
    position = self.loops.find(name)
    if position is not None:
      return (LOOP, position)
    return None

  def define_variable(self, name: str, value: float) -> Variable:
    validate_name(name)
    if self.find(name) is not None:
      raise DuplicateNameError(name)
    return self.variables.add(name, value)

  def define_loop(self, name: str, start: float, increment: float, end: float) -> Loop:
    validate_name(name)
    validate_range(start, increment, end)
    if self.find(name) is not None:
      raise DuplicateNameError(name)
    return self.loops.add(name, start, increment, end)

  def promote_or_redefine_loop(self, name: str, start: float, increment: float,
                               end: float) -> Loop:
    """
    Declare a loop, reusing the name if it is taken

    An existing loop is redefined in place. A live variable of that name is
    tombstoned and replaced by a new loop. Name and range are validated first.
    """
    validate_name(name)
    validate_range(start, increment, end)
    found = self.find(name)
    if found is not None and found[0] == LOOP:
      loop = self.loops[found[1]]
      loop.redefine(start, increment, end)
      return loop
    if found is not None:
      self.variables.tombstone(name)
    return self.loops.add(name, start, increment, end)

  def get_value(self, name: str) -> Optional[float]:
    found = self.find(name)
    if found is None:
      return None
    kind, position = found
    if kind == VARIABLE:
      return self.variables.entries[position].value
    return self.loops[position].current

  def set_value(self, name: str, value: float) -> None:
    """Assign to a live variable or loop, creating a variable for a new name"""
    found = self.find(name)
    if found is None:
      self.variables.add(name, value)
      return
    kind, position = found
    if kind == VARIABLE:
      self.variables.entries[position].value = value
    else:
      self.loops[position].current = value

  def names(self) -> List[str]:
    return [loop.name for loop in self.loops] + [v.name for v in self.variables.live()]


# ============================================================================
# BINDING BUILDER
# ============================================================================

def build_bindings(store: Store) -> List[Tuple[str, float]]:
  """
  Snapshot every live loop then every live variable as (name, value)

  Must be called again before each evaluation: loop values and assignments
  change between the iterations of a single command.
  """
  bindings = [(loop.name, loop.current) for loop in store.loops]
  bindings.extend((v.name, v.value) for v in store.variables.entries if v.live)
  return bindings
