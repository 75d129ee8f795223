"""
Command line tests for loopcalc
"""

import io
import pytest
from main import (
  EXIT_DUPLICATE,
  EXIT_FILE,
  EXIT_INVALID,
  EXIT_USAGE,
  USAGE,
  main,
)


@pytest.fixture
def script(tmp_path):
  """Write a script file and return its path"""
  def write(text):
    path = tmp_path / "input.txt"
    path.write_text(text)
    return str(path)
  return write


def exit_code(argv):
  with pytest.raises(SystemExit) as excinfo:
    main(argv)
  return excinfo.value.code


class TestScriptRuns:
  """Test complete sessions"""

  def test_script_file(self, script, capsys):
    path = script("x = 2\n@range a,1,1,3\n@loop a x = x * a\n# done\n@print\n")
    main([path])
    assert capsys.readouterr().out.splitlines() == [
        "Welcome to loopcalc!",
        "No variables were defined.",
        "No loop variables were defined.",
        "x = 2",
        "a = 1 (1, 1, 3)",
        "x = 2 when a = 1",
        "x = 4 when a = 2",
        "x = 12 when a = 3",
        "Variables:",
        "x = 12",
        "Loop variables:",
        "a = 3 (1, 1, 3)",
        "Thank you for using loopcalc.",
    ]

  def test_mixed_precedence_script(self, script, capsys):
    path = script("y = 1+2*3\n-y*2\n@range i,0,1,2\n@loop i 2*i+1\n@loop i z = -i^2 + y\n")
    main([path])
    assert capsys.readouterr().out.splitlines()[3:-1] == [
        "y = 7",
        "Result = -14",
        "i = 0 (0, 1, 2)",
        "Result = 1 when i = 0",
        "Result = 3 when i = 1",
        "Result = 5 when i = 2",
        "z = 7 when i = 0",
        "z = 8 when i = 1",
        "z = 11 when i = 2",
    ]

  def test_unsweepable_loopable(self):
    assert exit_code(["--loopable", "a,0,1e-300,1e300"]) == EXIT_INVALID

  def test_standard_input(self, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("1+1\nbad +\n"))
    main([])
    captured = capsys.readouterr()
    assert captured.out.splitlines() == [
        "Welcome to loopcalc!",
        "No variables were defined.",
        "No loop variables were defined.",
        "Please enter your expressions and assignment operations.",
        "Result = 2",
        "Thank you for using loopcalc.",
    ]
    assert captured.err.splitlines() == ["Error in command, expression or assignment operation"]

  def test_initial_state_is_listed(self, script, capsys):
    path = script("x + a\n")
    main(["--define", "x=1", "--loopable", "a,0,1,3", "--define", "y=2", path])
    assert capsys.readouterr().out.splitlines()[1:7] == [
        "Variables:",
        "x = 1",
        "y = 2",
        "Loop variables:",
        "a = 0 (0, 1, 3)",
        "Result = 1",
    ]

  def test_significant_figures(self, script, capsys):
    path = script("1/3\n")
    main(["--significantfigures", "5", path])
    assert "Result = 0.33333" in capsys.readouterr().out.splitlines()

  def test_script_before_options(self, script, capsys):
    path = script("1/3\n")
    main([path, "--significantfigures", "2"])
    assert "Result = 0.33" in capsys.readouterr().out.splitlines()


class TestExitCodes:
  """Test startup failures"""

  @pytest.mark.parametrize("argv", [
      ["--significantfigures", "9"],
      ["--significantfigures", "1"],
      ["--significantfigures", "05"],
      ["--significantfigures", "3", "--significantfigures", "4"],
      ["--define", ""],
      ["--loopable"],
      ["--bogus"],
      ["--sig", "3"],
      ["one", "two"],
      [""],
  ])
  def test_usage(self, capsys, argv):
    assert exit_code(argv) == EXIT_USAGE
    captured = capsys.readouterr()
    assert captured.err.splitlines() == [USAGE]
    assert captured.out == ""

  def test_missing_file(self, tmp_path, capsys):
    missing = str(tmp_path / "missing.txt")
    assert exit_code([missing]) == EXIT_FILE
    assert capsys.readouterr().err.splitlines() == [
        f"loopcalc: can't open file \"{missing}\" for reading"]

  def test_invalid_definition(self, capsys):
    assert exit_code(["--define", "x"]) == EXIT_INVALID
    assert capsys.readouterr().err.splitlines() == ["loopcalc: invalid variable(s) were found"]

  def test_duplicate_definition(self, capsys):
    assert exit_code(["--define", "x=1", "--loopable", "x,0,1,2"]) == EXIT_DUPLICATE
    assert capsys.readouterr().err.splitlines() == [
        "loopcalc: one or more variables are duplicated"]

  def test_invalid_beats_duplicate(self):
    assert exit_code(["--define", "x=1", "--define", "x=2", "--loopable", "a,0,-1,2"]) == EXIT_INVALID

  def test_file_checked_before_definitions(self, tmp_path):
    missing = str(tmp_path / "missing.txt")
    assert exit_code(["--define", "x", missing]) == EXIT_FILE
