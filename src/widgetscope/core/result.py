"""
Data structures representing the output of the analysis pipeline.

This module defines the `AnalysisResult` Pydantic model, which flattens the
outputs of the four passes into the record handed to report renderers.
Serialized keys are camelCase (``stateClasses``, ``ssrCompatibilityScore``...).
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from widgetscope.analysis.catalog import CATALOG_VERSION
from widgetscope.enums import Compatibility, EstimatedEffort, Severity
from widgetscope.schema import (
  ChangeNotifierDescriptor,
  ContextGraphEntry,
  ContextRequirementsSummary,
  ContextUsagePattern,
  DependencyGraph,
  EventHandlerDescriptor,
  FunctionDescriptor,
  HydrationRequirement,
  ImportRecord,
  InheritedWidgetDescriptor,
  LazyLoadOpportunity,
  LifecycleMethodDescriptor,
  MigrationStep,
  ProviderDescriptor,
  Record,
  SSRSummary,
  StateClassDescriptor,
  StateFieldDescriptor,
  StateUpdateCall,
  StructuralError,
  ValidationIssue,
  WidgetDescriptor,
  WidgetTree,
)


class AnalysisResult(Record):
  """
  Container for the results of one analysis run.
  """

  # Widget classification
  widgets: List[WidgetDescriptor] = Field(default_factory=list)
  functions: List[FunctionDescriptor] = Field(default_factory=list)
  imports: List[ImportRecord] = Field(default_factory=list)
  external_dependencies: List[str] = Field(default_factory=list)
  widget_tree: WidgetTree = Field(default_factory=WidgetTree)

  # State
  state_classes: List[StateClassDescriptor] = Field(default_factory=list)
  state_fields: List[StateFieldDescriptor] = Field(default_factory=list)
  set_state_calls: List[StateUpdateCall] = Field(default_factory=list)
  lifecycle_methods: List[LifecycleMethodDescriptor] = Field(default_factory=list)
  event_handlers: List[EventHandlerDescriptor] = Field(default_factory=list)
  dependency_graph: DependencyGraph = Field(default_factory=DependencyGraph)

  # Context
  inherited_widgets: List[InheritedWidgetDescriptor] = Field(default_factory=list)
  change_notifiers: List[ChangeNotifierDescriptor] = Field(default_factory=list)
  providers: List[ProviderDescriptor] = Field(default_factory=list)
  context_access_points: List[ContextUsagePattern] = Field(default_factory=list)
  inherited_widget_graph: Dict[str, ContextGraphEntry] = Field(default_factory=dict)
  provider_graph: Dict[str, ContextGraphEntry] = Field(default_factory=dict)
  context_requirements: ContextRequirementsSummary = Field(default_factory=ContextRequirementsSummary)

  # SSR
  ssr_compatibility_score: int = Field(default=100, ge=0, le=100)
  overall_compatibility: Compatibility = Compatibility.FULL
  ssr_safe_patterns: List[ContextUsagePattern] = Field(default_factory=list)
  ssr_unsafe_patterns: List[ContextUsagePattern] = Field(default_factory=list)
  hydration_requirements: List[HydrationRequirement] = Field(default_factory=list)
  lazy_load_opportunities: List[LazyLoadOpportunity] = Field(default_factory=list)
  ssr_migration_path: List[MigrationStep] = Field(default_factory=list)
  estimated_effort: EstimatedEffort = EstimatedEffort.MINIMAL
  ssr_summary: Optional[SSRSummary] = None

  # Diagnostics
  validation_issues: List[ValidationIssue] = Field(default_factory=list)
  errors: List[StructuralError] = Field(default_factory=list, description="Non-fatal structural errors.")
  catalog_version: str = Field(default=CATALOG_VERSION, description="Version of the pattern catalog used.")

  @property
  def has_errors(self) -> bool:
    """
    Check if any structural error was recorded.

    Returns:
        True if one or more errors are present.
    """
    return len(self.errors) > 0

  def issues_by_severity(self) -> Dict[str, List[ValidationIssue]]:
    """
    Partitions validation issues by severity.

    Every severity is present as a key, most severe first, and issues keep
    their original order within a bucket.
    """
    buckets: Dict[str, List[ValidationIssue]] = {severity.value: [] for severity in Severity}
    for issue in self.validation_issues:
      buckets[issue.severity.value].append(issue)
    return buckets

  def summary(self) -> Dict[str, Any]:
    """Headline counts for console output."""
    return {
      "widgets": len(self.widgets),
      "stateClasses": len(self.state_classes),
      "providers": len(self.providers),
      "ssrCompatibilityScore": self.ssr_compatibility_score,
      "overallCompatibility": self.overall_compatibility.value,
      "validationIssues": len(self.validation_issues),
      "errors": len(self.errors),
    }

  def to_dict(self) -> Dict[str, Any]:
    """JSON-compatible dict with camelCase keys."""
    return self.model_dump(by_alias=True, mode="json")

  def to_json(self, indent: Optional[int] = 2) -> str:
    """Serializes the result. Identical inputs give identical text."""
    return self.model_dump_json(by_alias=True, indent=indent)
