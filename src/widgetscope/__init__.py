"""
widgetscope Package.

A deterministic semantic analyzer for widget-based UI source trees. It
classifies widgets, links stateful widgets to their state classes, maps
context providers to their consumers, and scores server-side rendering
compatibility with an ordered migration plan.

Input is the JSON tree produced by an external parser; this package does
not parse source text.

Usage
-----

Simple Analysis
^^^^^^^^^^^^^^^

.. code-block:: python

    import widgetscope
    result = widgetscope.analyze(tree_json)
    print(result.ssr_compatibility_score, result.overall_compatibility)

Advanced Usage (Analysis Engine)
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from widgetscope import AnalysisEngine, AnalyzerConfig
    from widgetscope.utils.console import set_log_level

    set_log_level("INFO")
    config = AnalyzerConfig(strict_mode=True)
    engine = AnalysisEngine(config=config)
    result = engine.run(tree_json)
    print(result.to_json())
"""

from typing import Any, Optional

from widgetscope.config import AnalyzerConfig
from widgetscope.core.engine import AnalysisEngine
from widgetscope.core.result import AnalysisResult
from widgetscope.errors import AnalysisError, InvalidTreeError, WidgetScopeError
from widgetscope.utils.console import set_log_level

__version__ = "0.0.1"


def analyze(tree: Any, strict: bool = False, config: Optional[AnalyzerConfig] = None) -> AnalysisResult:
  """
  Analyzes one parsed source tree.

  This is a high-level convenience wrapper around the `AnalysisEngine`.

  Args:
      tree: Parser output as a dict, JSON text, or a Program model.
      strict (bool): If True, structural errors raise `AnalysisError`.
      config (AnalyzerConfig, optional): Overrides the default vocabulary.
          Loaded from the nearest pyproject.toml if None. Its own
          ``strict_mode`` is used unless ``strict`` is set, and its
          ``log_level`` is applied to the package logger.

  Returns:
      AnalysisResult: The full analysis model.

  Raises:
      InvalidTreeError: If the tree root is absent or invalid.
      AnalysisError: In strict mode, if structural errors were recorded.
  """
  if config is None:
    config = AnalyzerConfig.load(strict_mode=strict or None)
  elif strict:
    config = config.model_copy(update={"strict_mode": True})

  set_log_level(config.log_level)
  engine = AnalysisEngine(config=config)
  return engine.run(tree)


__all__ = [
  "AnalysisEngine",
  "AnalysisError",
  "AnalysisResult",
  "AnalyzerConfig",
  "InvalidTreeError",
  "WidgetScopeError",
  "analyze",
  "__version__",
]
