"""
Pydantic Schema Definitions for Analysis Descriptors.

Every pass produces plain records defined here. Records are built fresh per
run, never shared between runs, and serialize with camelCase keys
(``linkedStateClass``, ``ssrSafe``...) for the report renderer.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from widgetscope.enums import (
  AccessMode,
  Compatibility,
  Effort,
  EstimatedEffort,
  LazyTargetKind,
  LifecycleKind,
  Priority,
  Severity,
  WidgetRole,
)
from widgetscope.tree.nodes import SourceLocation


class Record(BaseModel):
  """Base for all output records."""

  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Diagnostics records ---


class StructuralError(Record):
  """
  A linking failure. The affected entity is skipped, the run continues.
  """

  type: str = Field(..., description="missing-create-state | cannot-parse-create-state | ...")
  message: str
  widget: Optional[str] = None
  state_class: Optional[str] = None
  location: Optional[SourceLocation] = None


class ValidationIssue(Record):
  """
  A descriptive finding. Never aborts analysis.
  """

  type: str
  severity: Severity
  message: str
  suggestion: Optional[str] = None
  field: Optional[str] = None
  method: Optional[str] = None
  handler: Optional[str] = None
  event: Optional[str] = None
  pattern: Optional[str] = None
  subject: Optional[str] = Field(None, description="Class or provider the issue belongs to.")
  count: Optional[int] = None
  location: Optional[SourceLocation] = None
  locations: List[SourceLocation] = Field(default_factory=list)


# --- Widget classification ---


class FieldDescriptor(Record):
  name: str
  type: str = "dynamic"
  initial_value: Optional[str] = None
  is_static: bool = False
  referenced_by: List[str] = Field(default_factory=list, description="Methods that access this field.")
  location: Optional[SourceLocation] = None


class MethodDescriptor(Record):
  name: str
  params: List[str] = Field(default_factory=list)
  is_static: bool = False
  is_async: bool = False
  has_body: bool = True
  uses_fields: List[str] = Field(default_factory=list, description="Fields accessed via the receiver.")
  location: Optional[SourceLocation] = None


class WidgetDescriptor(Record):
  """
  A classified top-level class.

  ``linked_state_class`` is only ever set for stateful widgets, once, by the
  engine after the state linker has resolved the factory method.
  """

  name: str
  role: WidgetRole
  parent_type: Optional[str] = None
  fields: List[FieldDescriptor] = Field(default_factory=list)
  methods: List[MethodDescriptor] = Field(default_factory=list)
  constructor: Optional[MethodDescriptor] = None
  linked_state_class: Optional[str] = None
  location: Optional[SourceLocation] = None

  def find_method(self, name: str) -> Optional[MethodDescriptor]:
    for method in self.methods:
      if method.name == name:
        return method
    return None

  def find_field(self, name: str) -> Optional[FieldDescriptor]:
    for field in self.fields:
      if field.name == name:
        return field
    return None


class FunctionDescriptor(Record):
  name: str
  params: List[str] = Field(default_factory=list)
  is_async: bool = False
  is_entry_point: bool = False
  location: Optional[SourceLocation] = None


class ImportRecord(Record):
  source: str
  items: List[str] = Field(default_factory=list)
  location: Optional[SourceLocation] = None


class WidgetTree(Record):
  """Entry function and the root component it bootstraps."""

  entry_function: Optional[str] = None
  root_widget: Optional[str] = None


class Classification(Record):
  """Output of the widget classifier."""

  widgets: List[WidgetDescriptor] = Field(default_factory=list)
  functions: List[FunctionDescriptor] = Field(default_factory=list)
  imports: List[ImportRecord] = Field(default_factory=list)
  external_dependencies: List[str] = Field(default_factory=list)
  widget_tree: WidgetTree = Field(default_factory=WidgetTree)
  errors: List[StructuralError] = Field(default_factory=list)

  def find_widget(self, name: str) -> Optional[WidgetDescriptor]:
    for widget in self.widgets:
      if widget.name == name:
        return widget
    return None

  def summary(self) -> Dict[str, int]:
    """Counts per role plus totals."""
    counts = {role.value: 0 for role in WidgetRole}
    for widget in self.widgets:
      counts[widget.role.value] += 1
    counts["total"] = len(self.widgets)
    counts["functions"] = len(self.functions)
    counts["imports"] = len(self.imports)
    return counts


# --- State linking ---


class StateClassDescriptor(Record):
  name: str
  widget: str
  fields: List[str] = Field(default_factory=list)
  methods: List[str] = Field(default_factory=list)
  lifecycle_methods: List[str] = Field(default_factory=list)
  location: Optional[SourceLocation] = None


class StateFieldDescriptor(Record):
  """
  A mutable field of a state class.

  ``is_used`` holds iff the field appears in a state-update call or the
  render method mentions it.
  """

  state_class: str
  name: str
  type: str = "dynamic"
  initial_value: Optional[str] = None
  read_by: List[str] = Field(default_factory=list)
  mutated_by: List[str] = Field(default_factory=list)
  is_used: bool = False
  location: Optional[SourceLocation] = None


class StateUpdateCall(Record):
  method: str
  state_class: str
  updates: List[str] = Field(default_factory=list)
  is_valid: bool = True
  issues: List[ValidationIssue] = Field(default_factory=list)
  location: Optional[SourceLocation] = None


class LifecycleMethodDescriptor(Record):
  name: str
  kind: LifecycleKind
  state_class: str
  calls_super: bool = False
  has_side_effects: bool = False
  is_valid: bool = True
  location: Optional[SourceLocation] = None


class EventHandlerDescriptor(Record):
  event: str
  handler: str
  component: Optional[str] = None
  state_class: Optional[str] = None
  location: Optional[SourceLocation] = None


class DependencyGraph(Record):
  """
  Field/method/event relations keyed by name. Values are ordered, unique.
  """

  state_to_methods: Dict[str, List[str]] = Field(default_factory=dict)
  method_to_state: Dict[str, List[str]] = Field(default_factory=dict)
  event_to_state: Dict[str, List[str]] = Field(default_factory=dict)


class StateAnalysis(Record):
  """Output of the state linker and mutation tracker."""

  links: Dict[str, str] = Field(default_factory=dict, description="Stateful widget name to state class name.")
  state_classes: List[StateClassDescriptor] = Field(default_factory=list)
  state_fields: List[StateFieldDescriptor] = Field(default_factory=list)
  set_state_calls: List[StateUpdateCall] = Field(default_factory=list)
  lifecycle_methods: List[LifecycleMethodDescriptor] = Field(default_factory=list)
  event_handlers: List[EventHandlerDescriptor] = Field(default_factory=list)
  dependency_graph: DependencyGraph = Field(default_factory=DependencyGraph)
  validation_issues: List[ValidationIssue] = Field(default_factory=list)
  errors: List[StructuralError] = Field(default_factory=list)


# --- Context / providers ---


class ProviderProperty(Record):
  name: str
  type: str = "dynamic"
  required: bool = True


class StaticAccessor(Record):
  name: str
  signature: str
  uses_inherited_lookup: bool = False
  location: Optional[SourceLocation] = None


class InheritedWidgetDescriptor(Record):
  name: str
  parent_type: str
  properties: List[ProviderProperty] = Field(default_factory=list)
  static_accessors: List[StaticAccessor] = Field(default_factory=list)
  update_should_notify_implemented: bool = False
  has_child_property: bool = False
  usage_count: int = 0
  used_in: List[str] = Field(default_factory=list)
  provided_by: List[str] = Field(default_factory=list)
  location: Optional[SourceLocation] = None


class NotifierProperty(Record):
  name: str
  type: str = "dynamic"
  initial_value: Optional[str] = None


class NotifierGetter(Record):
  name: str
  location: Optional[SourceLocation] = None


class NotifierMethod(Record):
  name: str
  calls_notify: bool = False
  mutates_fields: List[str] = Field(default_factory=list)
  is_async: bool = False
  params: List[str] = Field(default_factory=list)
  location: Optional[SourceLocation] = None


class ChangeNotifierDescriptor(Record):
  name: str
  properties: List[NotifierProperty] = Field(default_factory=list)
  getters: List[NotifierGetter] = Field(default_factory=list)
  methods: List[NotifierMethod] = Field(default_factory=list)
  consumers: List[str] = Field(default_factory=list)
  location: Optional[SourceLocation] = None


class ProviderDescriptor(Record):
  key: str = Field(..., description="Wrapper name plus generic, e.g. 'Provider<CounterNotifier>'.")
  value_type: str
  create_function: Optional[str] = None
  dispose: Optional[str] = None
  lazy: bool = True
  child: Optional[str] = None
  consumers: List[str] = Field(default_factory=list)
  access_modes: List[AccessMode] = Field(default_factory=list)
  location: Optional[SourceLocation] = None


class ContextUsagePattern(Record):
  pattern: str
  category: str
  ssr_safe: bool
  reason: str
  returns: str = "dynamic"
  severity: Optional[Severity] = None
  confidence: float = 1.0
  dependent: Optional[str] = Field(None, description="Class whose render method contains the usage.")
  method: Optional[str] = None
  migration_hint: Optional[str] = None
  location: Optional[SourceLocation] = None


class ContextGraphEntry(Record):
  provided_by: str
  provided_value: str
  consumed_by: List[str] = Field(default_factory=list)
  access_modes: List[AccessMode] = Field(default_factory=list)
  flow_path: str = ""


class ContextRequirementsSummary(Record):
  requires_theme_provider: bool = False
  requires_media_query: bool = False
  requires_navigator: bool = False
  requires_change_notifier_provider: bool = False
  custom_inherited_widgets: List[str] = Field(default_factory=list)
  required_providers: List[str] = Field(default_factory=list)


class ContextAnalysis(Record):
  """Output of the context/provider graph builder."""

  inherited_widgets: List[InheritedWidgetDescriptor] = Field(default_factory=list)
  change_notifiers: List[ChangeNotifierDescriptor] = Field(default_factory=list)
  providers: List[ProviderDescriptor] = Field(default_factory=list)
  context_access_points: List[ContextUsagePattern] = Field(default_factory=list)
  inherited_widget_graph: Dict[str, ContextGraphEntry] = Field(default_factory=dict)
  provider_graph: Dict[str, ContextGraphEntry] = Field(default_factory=dict)
  requirements: ContextRequirementsSummary = Field(default_factory=ContextRequirementsSummary)
  validation_issues: List[ValidationIssue] = Field(default_factory=list)


# --- SSR ---


class HydrationRequirement(Record):
  dependency: str
  reason: str
  order: int = 0
  required_providers: List[str] = Field(default_factory=list)
  required_state: List[str] = Field(default_factory=list)


class LazyLoadOpportunity(Record):
  target: str
  kind: LazyTargetKind
  reason: str
  estimated_size_kb: int
  priority: Priority
  recommendation: str


class MigrationStep(Record):
  step: int
  action: str
  description: str
  example: str
  effort: Effort
  priority: Priority
  locations: List[SourceLocation] = Field(default_factory=list)
  count: int = 0


class SSRSummary(Record):
  compatibility: Compatibility
  score: int
  safe_patterns: int
  unsafe_patterns: int
  hydration_needed: int
  migration_steps: int
  critical_issues: int
  effort: EstimatedEffort


class SSRReport(Record):
  score: int = Field(..., ge=0, le=100)
  compatibility: Compatibility
  safe_patterns: List[ContextUsagePattern] = Field(default_factory=list)
  unsafe_patterns: List[ContextUsagePattern] = Field(default_factory=list)
  hydration_requirements: List[HydrationRequirement] = Field(default_factory=list)
  lazy_load_opportunities: List[LazyLoadOpportunity] = Field(default_factory=list)
  migration_path: List[MigrationStep] = Field(default_factory=list)
  validation_issues: List[ValidationIssue] = Field(default_factory=list)
  estimated_effort: EstimatedEffort = EstimatedEffort.MINIMAL
  summary: Optional[SSRSummary] = None
