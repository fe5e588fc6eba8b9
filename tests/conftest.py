"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Console isolation so log capture in one test does not leak into another.
- A default analyzer configuration that ignores the repository's own
  pyproject.toml.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add src to path so we can import 'widgetscope' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Tree builders live next to this file
sys.path.insert(0, str(Path(__file__).parent))

from widgetscope.config import AnalyzerConfig  # noqa: E402
from widgetscope.utils.console import LOGGER_NAME, reset_console  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_logging():
  """Restores the package logger level and console after every test."""
  logger = logging.getLogger(LOGGER_NAME)
  level = logger.level
  yield
  logger.setLevel(level)
  reset_console()


@pytest.fixture
def config() -> AnalyzerConfig:
  return AnalyzerConfig()
