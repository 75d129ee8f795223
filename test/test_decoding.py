"""
Tests for --define and --loopable decoding
"""

import pytest
from decoding import decode_initial_state, split_definition, split_range
from error_handling import DuplicateNameError, InvalidDefinitionError
from stores import LOOP, VARIABLE


class TestSplitting:
  """Test the pure decoders"""

  def test_definition(self):
    assert split_definition("x=2.5") == ("x", 2.5)

  def test_range(self):
    assert split_range("a,1,2,3") == ("a", 1.0, 2.0, 3.0)

  def test_range_allows_leading_space_in_numbers(self):
    assert split_range("a, 0, -1e1, -20") == ("a", 0.0, -10.0, -20.0)

  @pytest.mark.parametrize("text", ["x", "x==1", "=1", "x=", "x=1a", "x=1 "])
  def test_bad_definitions(self, text):
    with pytest.raises(InvalidDefinitionError):
      split_definition(text)

  @pytest.mark.parametrize("text", ["a,1,1", "a,1,1,3,4", ",0,1,3", "a,1,,3", "a,x,1,3"])
  def test_bad_ranges(self, text):
    with pytest.raises(InvalidDefinitionError):
      split_range(text)


class TestInitialState:
  """Test building the starting store"""

  def test_populated(self):
    store = decode_initial_state(["x=1", "y=2.5"], ["a,0,1,3"])
    assert store.find("x") == (VARIABLE, 0)
    assert store.get_value("y") == 2.5
    assert store.find("a") == (LOOP, 0)

  def test_empty(self):
    store = decode_initial_state([], [])
    assert len(store.variables) == 0
    assert len(store.loops) == 0

  @pytest.mark.parametrize("defines,loopables", [
      (["1x=2"], []),
      ([], ["a,0,-1,3"]),
      ([], ["a,0,0,3"]),
      (["x"], []),
  ])
  def test_invalid(self, defines, loopables):
    with pytest.raises(InvalidDefinitionError):
      decode_initial_state(defines, loopables)

  @pytest.mark.parametrize("defines,loopables", [
      (["x=1", "x=2"], []),
      (["x=1"], ["x,0,1,3"]),
      ([], ["a,0,1,3", "a,1,1,3"]),
  ])
  def test_duplicates(self, defines, loopables):
    with pytest.raises(DuplicateNameError):
      decode_initial_state(defines, loopables)

  def test_invalid_beats_earlier_duplicate(self):
    with pytest.raises(InvalidDefinitionError):
      decode_initial_state(["x=1", "x=2"], ["bad"])
