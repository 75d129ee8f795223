"""
Test configuration for loopcalc tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import create_interpreter
from stores import Store


@pytest.fixture
def store():
  """A fresh, empty store"""
  return Store()


@pytest.fixture
def session(store):
  """A session with the default three significant figures"""
  return create_interpreter(store)
