"""
Test configuration for the Lox interpreter tests
"""

import io
import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import create_interpreter
from parsing import create_parser


@pytest.fixture
def run_lox():
  """Run Lox source in a fresh interpreter and return everything it printed"""
  def run(source: str) -> str:
    out = io.StringIO()
    statements = create_parser().parse_string(source)
    create_interpreter(out=out).interpret(statements)
    return out.getvalue()
  return run
