"""
Tests for validation, number parsing and formatting helpers
"""

import math
import pytest
from utilities import (
  format_loop,
  format_number,
  is_valid_name,
  iteration_count,
  parse_number,
  validate_range,
  validate_sig_figs,
)
from error_handling import InvalidRangeError


class TestFormatting:
  """Test significant figure formatting"""

  @pytest.mark.parametrize("sig_figs", range(2, 9))
  def test_one_third(self, sig_figs):
    assert format_number(1 / 3, sig_figs) == "0." + "3" * sig_figs

  @pytest.mark.parametrize("value,expected", [
      (2.0, "2"),
      (-0.5, "-0.5"),
      (1234567.0, "1.23e+06"),
      (0.0001234, "0.000123"),
      (math.inf, "inf"),
      (-math.inf, "-inf"),
      (math.nan, "nan"),
      (-0.0, "-0"),
  ])
  def test_default_three(self, value, expected):
    assert format_number(value) == expected

  def test_rounding_hides_binary_noise(self):
    assert format_number(0.1 + 0.2, 8) == "0.3"

  def test_loop_format(self):
    assert format_loop("a", 1.0, 0.0, 0.5, 2.0, 3) == "a = 1 (0, 0.5, 2)"


class TestNames:
  """Test the naming rule"""

  @pytest.mark.parametrize("name", ["a", "abc", "XyZ", "a" * 22])
  def test_valid(self, name):
    assert is_valid_name(name)

  @pytest.mark.parametrize("name", ["", "a" * 23, "a1", "a_b", " a", "é", "x y"])
  def test_invalid(self, name):
    assert not is_valid_name(name)


class TestNumbers:
  """Test strict number parsing"""

  @pytest.mark.parametrize("text,expected", [
      ("2.5", 2.5),
      (" -1e3", -1000.0),
      ("+.5", 0.5),
      ("5.", 5.0),
      ("0", 0.0),
  ])
  def test_parsed(self, text, expected):
    assert parse_number(text) == expected

  def test_special_values(self):
    assert parse_number("inf") == math.inf
    assert parse_number("-Infinity") == -math.inf
    assert math.isnan(parse_number("nan"))

  @pytest.mark.parametrize("text", [None, "", " ", "3x", "3 ", "1_000", "1e", "--1", "0x10"])
  def test_rejected(self, text):
    assert parse_number(text) is None


class TestRanges:
  """Test range validation and iteration counts"""

  @pytest.mark.parametrize("start,increment,end", [
      (0, 1, 5), (5, -1, 0), (1, 1, 1), (1, -1, 1), (0, 0.25, 1)
  ])
  def test_valid(self, start, increment, end):
    validate_range(start, increment, end)

  @pytest.mark.parametrize("start,increment,end", [
      (0, -1, 5), (5, 1, 0), (0, 0, 5), (0, 0, 0), (0, math.inf, 5), (math.nan, 1, 5),
      (0, 1e-300, 1e300), (-1e308, 1, 1e308)
  ])
  def test_invalid(self, start, increment, end):
    with pytest.raises(InvalidRangeError):
      validate_range(start, increment, end)

  @pytest.mark.parametrize("start,increment,end,expected", [
      (0, 1, 3, 4),
      (0, 2, 5, 3),
      (5, -1, 0, 6),
      (1, 1, 1, 1),
      (1, -1, 1, 1),
      (0, 10, 3, 1),
  ])
  def test_iteration_count(self, start, increment, end, expected):
    assert iteration_count(start, increment, end) == expected

  def test_iteration_count_floors_inexact_quotient(self):
    # 0.3 / 0.1 is 2.9999999999999996, so 0.3 itself is never reached
    assert iteration_count(0, 0.1, 0.3) == 3

  def test_sig_figs_bounds(self):
    assert validate_sig_figs(2) == 2
    assert validate_sig_figs(8) == 8
    with pytest.raises(ValueError):
      validate_sig_figs(9)
