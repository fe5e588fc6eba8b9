"""
Orchestration Engine for Widget Analysis.

This module provides the `AnalysisEngine`, the primary driver of an analysis
run. It validates the input tree and coordinates the four passes:

1.  **Ingestion**: The parser's JSON output is validated into a typed
    :class:`Program`. An absent or malformed root raises
    :class:`InvalidTreeError`, the only fatal condition.

2.  **Widget Classification**: Roles, members, functions, imports and the
    entry point.

3.  **State Linking** and **Context Graph**: Independent of each other, both
    read the classifier output. Links found by the state pass are applied to
    the widget descriptors once, here.

4.  **SSR Scoring**: Reads the two previous outputs and produces the score
    and migration plan.

Each run gets its own :class:`Diagnostics` sink; nothing is shared between
runs, so analysing the same tree twice gives byte-identical results.
"""

from typing import Any, List, Optional

from widgetscope.analysis.context import ContextGraphBuilder
from widgetscope.analysis.ssr import SSRScorer
from widgetscope.analysis.state import StateLinker
from widgetscope.analysis.widgets import WidgetClassifier
from widgetscope.config import AnalyzerConfig
from widgetscope.core.diagnostics import Diagnostics
from widgetscope.core.result import AnalysisResult
from widgetscope.errors import AnalysisError, InvalidTreeError
from widgetscope.schema import Classification, WidgetDescriptor
from widgetscope.tree.loader import load_tree
from widgetscope.utils.console import get_logger


class AnalysisEngine:
  """
  The main analysis unit.

  Runs the passes over one tree at a time. The result of the last run, even
  a failed one, is kept in :attr:`partial_result`.
  """

  def __init__(self, config: Optional[AnalyzerConfig] = None, diagnostics: Optional[Diagnostics] = None):
    """
    Initializes the Engine.

    Args:
        config (AnalyzerConfig, optional): Vocabulary and runtime switches.
            Loaded from the nearest pyproject.toml if None.
        diagnostics (Diagnostics, optional): Event sink for the next run.
            A fresh sink is created per run when omitted.
    """
    self.config = config or AnalyzerConfig.load()
    self._injected_diagnostics = diagnostics
    self.diagnostics: Optional[Diagnostics] = None
    self.partial_result = AnalysisResult()

  def run(self, tree: Any) -> AnalysisResult:
    """
    Executes the full analysis pipeline.

    Args:
        tree: The parser output (dict, JSON text, or a Program).

    Returns:
        AnalysisResult: Descriptors, graphs, score and issues.

    Raises:
        InvalidTreeError: If the tree root is absent or invalid.
        AnalysisError: In strict mode, if structural errors were recorded.
    """
    diagnostics = self._injected_diagnostics or Diagnostics()
    self._injected_diagnostics = None
    self.diagnostics = diagnostics
    self.partial_result = AnalysisResult()
    logger = get_logger("engine")

    diagnostics.start_phase("engine", "Analysis Pipeline", "Tree -> Report")

    try:
      program = load_tree(tree)
    except InvalidTreeError as e:
      diagnostics.channel("engine").failure(str(e))
      diagnostics.end_phase("engine")
      raise

    result = self.partial_result

    classification = WidgetClassifier(self.config, diagnostics.channel("widgets")).classify(program)
    self._apply_classification(result, classification)

    state = StateLinker(self.config, diagnostics.channel("state")).analyze(program, classification)
    result.widgets = self.apply_links(classification.widgets, state.links)
    result.state_classes = state.state_classes
    result.state_fields = state.state_fields
    result.set_state_calls = state.set_state_calls
    result.lifecycle_methods = state.lifecycle_methods
    result.event_handlers = state.event_handlers
    result.dependency_graph = state.dependency_graph
    result.errors.extend(state.errors)

    context = ContextGraphBuilder(self.config, diagnostics.channel("context")).analyze(program, classification)
    result.inherited_widgets = context.inherited_widgets
    result.change_notifiers = context.change_notifiers
    result.providers = context.providers
    result.context_access_points = context.context_access_points
    result.inherited_widget_graph = context.inherited_widget_graph
    result.provider_graph = context.provider_graph
    result.context_requirements = context.requirements

    report = SSRScorer(self.config, diagnostics.channel("ssr")).score(context, state)
    result.ssr_compatibility_score = report.score
    result.overall_compatibility = report.compatibility
    result.ssr_safe_patterns = report.safe_patterns
    result.ssr_unsafe_patterns = report.unsafe_patterns
    result.hydration_requirements = report.hydration_requirements
    result.lazy_load_opportunities = report.lazy_load_opportunities
    result.ssr_migration_path = report.migration_path
    result.estimated_effort = report.estimated_effort
    result.ssr_summary = report.summary

    result.validation_issues = state.validation_issues + context.validation_issues + report.validation_issues

    diagnostics.end_phase("engine")
    logger.info(
      f"{len(result.widgets)} widget(s), score {result.ssr_compatibility_score} ({result.overall_compatibility.value})"
    )

    if result.errors:
      logger.warning(f"{len(result.errors)} structural error(s)")
      if self.config.strict_mode:
        messages = "\n".join(error.message for error in result.errors)
        raise AnalysisError(f"Structural errors found:\n{messages}", partial_result=result)

    return result

  def _apply_classification(self, result: AnalysisResult, classification: Classification) -> None:
    result.widgets = classification.widgets
    result.functions = classification.functions
    result.imports = classification.imports
    result.external_dependencies = classification.external_dependencies
    result.widget_tree = classification.widget_tree
    result.errors.extend(classification.errors)

  @staticmethod
  def apply_links(widgets: List[WidgetDescriptor], links: dict) -> List[WidgetDescriptor]:
    """
    Returns the widgets with ``linked_state_class`` set from ``links``.

    The classifier's descriptors are copied, not modified.
    """
    linked = []
    for widget in widgets:
      state_class = links.get(widget.name)
      if state_class is not None:
        widget = widget.model_copy(update={"linked_state_class": state_class})
      linked.append(widget)
    return linked
