"""
Exception hierarchy for widgetscope.

Only two conditions are raised. Everything else the analyzer finds is
reported as data (structural errors and validation issues on the result).
"""

from typing import Any, Optional


class WidgetScopeError(Exception):
  """Base class for all widgetscope exceptions."""


class InvalidTreeError(WidgetScopeError):
  """
  Raised when the input tree is absent or structurally invalid.

  This is the only fatal condition of an analysis run.
  """


class AnalysisError(WidgetScopeError):
  """
  Raised in strict mode when structural errors were recorded.

  Attributes:
      partial_result: The result assembled before the error was raised.
  """

  def __init__(self, message: str, partial_result: Optional[Any] = None):
    super().__init__(message)
    self.partial_result = partial_result
