"""
Context and Provider Graph Pass.

Detects the three declarative context patterns of a program and how render
methods consume them:

1.  **Value providers**: classes whose parent type contains the
    ``InheritedWidget`` token, with their ``of`` accessors and the
    ``updateShouldNotify`` comparison.
2.  **Observables**: classes whose parent type is exactly ``ChangeNotifier``,
    with getters, methods and whether each method notifies.
3.  **DI wrappers**: ``new Provider<T>({...})`` constructions.

Every render method is then matched against the pattern catalog, producing
one :class:`ContextUsagePattern` per matched entry, and provider/consumer
graphs are assembled. The pass reads the tree only; it does not depend on
state linking.
"""

import re
from typing import Dict, List, Optional, Tuple

from widgetscope.analysis.catalog import access_generics, first_generic, match_catalog
from widgetscope.analysis.state import mutation_target, property_key
from widgetscope.analysis.widgets import WidgetClassifier, ordered_unique, param_names
from widgetscope.config import AnalyzerConfig
from widgetscope.core.diagnostics import DiagnosticsChannel, null_channel
from widgetscope.enums import AccessMode, Severity
from widgetscope.schema import (
  ChangeNotifierDescriptor,
  Classification,
  ContextAnalysis,
  ContextGraphEntry,
  ContextRequirementsSummary,
  ContextUsagePattern,
  InheritedWidgetDescriptor,
  NotifierGetter,
  NotifierMethod,
  NotifierProperty,
  ProviderDescriptor,
  ProviderProperty,
  StaticAccessor,
  ValidationIssue,
)
from widgetscope.tree.nodes import (
  BlockStatement,
  CallExpression,
  ClassDeclaration,
  Literal,
  MethodDeclaration,
  NewExpression,
  ObjectLiteral,
  Program,
  ReturnStatement,
)
from widgetscope.tree.printer import to_source
from widgetscope.tree.visitor import dotted_name, head_name, receiver_field, walk

GENERIC_IN_NAME = re.compile(r"<(\w+)>")
INHERITED_LOOKUPS = ("dependOnInheritedWidgetOfExactType", "inheritedWidgetOfExactType")


class RenderScan:
  """Printed render bodies of one class, computed once per run."""

  def __init__(self, class_node: ClassDeclaration, method: MethodDeclaration):
    self.class_name = class_node.name
    self.method = method
    self.text = to_source(method.body)
    self.elided_text = to_source(method.body, elide_functions=True)


class ContextGraphBuilder:
  """
  Builds context descriptors, usage patterns and provider graphs.
  """

  def __init__(self, config: Optional[AnalyzerConfig] = None, diagnostics: Optional[DiagnosticsChannel] = None):
    self.config = config or AnalyzerConfig()
    self.diagnostics = diagnostics or null_channel("context")
    self._members = WidgetClassifier(self.config, self.diagnostics)

  def analyze(self, program: Program, classification: Optional[Classification] = None) -> ContextAnalysis:
    """
    Runs detection, usage scanning and graph construction.

    Args:
        program: The validated tree root.
        classification: Optional classifier output; only its detected root
            widget is used, to name the provider of every context.

    Returns:
        ContextAnalysis: Descriptors, usage patterns, graphs and issues.
    """
    self.diagnostics.start_phase("Context Analysis", "Providers, notifiers, usages")
    result = ContextAnalysis()

    for class_node in program.classes():
      parent = class_node.parent_type or ""
      if self.config.value_provider_token in parent:
        result.inherited_widgets.append(self.describe_inherited_widget(class_node))
      elif parent == self.config.observable_base:
        result.change_notifiers.append(self.describe_change_notifier(class_node))
    self.diagnostics.count("InheritedWidgets", len(result.inherited_widgets))
    self.diagnostics.count("ChangeNotifiers", len(result.change_notifiers))

    result.providers = self.find_providers(program)
    self.diagnostics.count("Providers", len(result.providers))

    scans = self.render_scans(program)
    result.context_access_points = self.find_usage_patterns(scans, result.inherited_widgets)
    self.diagnostics.count("Context usage points", len(result.context_access_points))

    root = self.provider_root(classification)
    self.resolve_consumers(scans, result, root)
    self.build_graphs(result, root)
    result.requirements = self.summarize_requirements(result)
    result.validation_issues = self.validate(result)

    self.diagnostics.end_phase()
    return result

  # --- Detection ---

  def describe_inherited_widget(self, node: ClassDeclaration) -> InheritedWidgetDescriptor:
    members = self._members.describe_class(node)
    properties = [ProviderProperty(name=f.name, type=f.type, required=f.initial_value is None) for f in members.fields]

    accessors = []
    should_notify = False
    for method in node.body.methods:
      if method.name == self.config.accessor_name and method.is_static:
        body_text = to_source(method.body)
        accessors.append(
          StaticAccessor(
            name=method.name,
            signature=f"static {method.name}({', '.join(param_names(method.params)) or self.config.context_name})",
            uses_inherited_lookup=any(token in body_text for token in INHERITED_LOOKUPS),
            location=method.location,
          )
        )
      if method.name == self.config.should_notify:
        should_notify = True

    self.diagnostics.trace(f"InheritedWidget: {node.name}")
    return InheritedWidgetDescriptor(
      name=node.name,
      parent_type=node.parent_type or self.config.value_provider_token,
      properties=properties,
      static_accessors=accessors,
      update_should_notify_implemented=should_notify,
      has_child_property=any(p.name == "child" for p in properties),
      location=node.location,
    )

  def is_getter(self, method: MethodDeclaration) -> bool:
    """A ``get`` accessor, or a zero-parameter method that returns a value."""
    if method.kind == "get":
      return True
    if method.params or method.body is None:
      return False
    if not isinstance(method.body, BlockStatement):
      return True
    return any(isinstance(n, ReturnStatement) and n.argument is not None for n in walk(method.body))

  def calls_notify(self, method: MethodDeclaration) -> bool:
    for node in walk(method.body):
      if isinstance(node, CallExpression) and head_name(node.callee) == self.config.notify_call:
        return True
    return False

  def mutated_fields(self, method: MethodDeclaration) -> List[str]:
    names = []
    for node in walk(method.body):
      target = mutation_target(node)
      name = receiver_field(target, self.config.receivers) if target is not None else None
      if name is not None and name not in names:
        names.append(name)
    return names

  def describe_change_notifier(self, node: ClassDeclaration) -> ChangeNotifierDescriptor:
    members = self._members.describe_class(node)
    properties = [NotifierProperty(name=f.name, type=f.type, initial_value=f.initial_value) for f in members.fields]

    getters: List[NotifierGetter] = []
    methods: List[NotifierMethod] = []
    for method in node.body.methods:
      if method.name == self.config.constructor_name:
        continue
      if self.is_getter(method):
        getters.append(NotifierGetter(name=method.name, location=method.location))
        continue
      methods.append(
        NotifierMethod(
          name=method.name,
          calls_notify=self.calls_notify(method),
          mutates_fields=self.mutated_fields(method),
          is_async=method.is_async,
          params=param_names(method.params),
          location=method.location,
        )
      )

    self.diagnostics.trace(f"ChangeNotifier: {node.name}")
    return ChangeNotifierDescriptor(
      name=node.name,
      properties=properties,
      getters=getters,
      methods=methods,
      location=node.location,
    )

  def find_providers(self, program: Program) -> List[ProviderDescriptor]:
    """
    Finds ``new Provider<T>(...)`` constructions anywhere in the program.

    The generic comes from the call's type arguments, or from the callee
    text when the parser folds it into the name. The first construction of
    each key wins.
    """
    providers: Dict[str, ProviderDescriptor] = {}
    for node in walk(program):
      if not isinstance(node, NewExpression):
        continue
      callee_text = dotted_name(node.callee) or to_source(node.callee)
      wrapper = callee_text.split("<", 1)[0]
      if not wrapper.split(".")[-1].startswith(self.config.provider_token):
        continue

      generic = node.type_arguments[0] if node.type_arguments else None
      if generic is None:
        match = GENERIC_IN_NAME.search(callee_text)
        generic = match.group(1) if match else None
      if generic is None:
        continue

      key = f"{wrapper}<{generic}>"
      if key in providers:
        continue
      provider = ProviderDescriptor(key=key, value_type=generic, location=node.location)
      self.read_provider_options(node, provider)
      providers[key] = provider
      self.diagnostics.trace(f"Provider: {key}")
    return list(providers.values())

  def read_provider_options(self, node: NewExpression, provider: ProviderDescriptor) -> None:
    for arg in node.args:
      if not isinstance(arg, ObjectLiteral):
        continue
      for prop in arg.properties:
        key = property_key(prop.key)
        if prop.value is None:
          continue
        if key == "create":
          provider.create_function = to_source(prop.value)
        elif key == "dispose":
          provider.dispose = to_source(prop.value)
        elif key == "lazy" and isinstance(prop.value, Literal) and isinstance(prop.value.value, bool):
          provider.lazy = prop.value.value
        elif key == "child":
          provider.child = head_name(prop.value) or to_source(prop.value)

  # --- Usage ---

  def render_scans(self, program: Program) -> List[RenderScan]:
    scans = []
    for class_node in program.classes():
      method = class_node.find_method(self.config.render_method)
      if method is not None and method.body is not None:
        scans.append(RenderScan(class_node, method))
    return scans

  def find_usage_patterns(
    self, scans: List[RenderScan], inherited: List[InheritedWidgetDescriptor]
  ) -> List[ContextUsagePattern]:
    """
    Matches every render method against value-provider lookups and the catalog.
    """
    usages: List[ContextUsagePattern] = []
    for scan in scans:
      for widget in inherited:
        if re.search(rf"\b{re.escape(widget.name)}\.{re.escape(self.config.accessor_name)}\(", scan.text):
          provided = widget.properties[0].type if widget.properties else widget.name
          usages.append(
            ContextUsagePattern(
              pattern=f"{widget.name}.{self.config.accessor_name}({self.config.context_name})",
              category="inherited-widget-lookup",
              ssr_safe=True,
              reason="Pure value access, no subscription required",
              returns=provided,
              dependent=scan.class_name,
              method=scan.method.name,
              location=scan.method.location,
            )
          )

      for entry in match_catalog(scan.text, scan.elided_text):
        generic = "T"
        if entry.access_mode is not None:
          generic = first_generic(scan.text, entry.access_mode) or "T"
        usages.append(
          ContextUsagePattern(
            pattern=entry.pattern.format(generic=generic),
            category=entry.category,
            ssr_safe=entry.ssr_safe,
            reason=entry.reason,
            returns=entry.returns.format(generic=generic),
            severity=entry.severity,
            confidence=entry.confidence,
            dependent=scan.class_name,
            method=scan.method.name,
            migration_hint=None if entry.ssr_safe else entry.migration_hint,
            location=scan.method.location,
          )
        )
    return usages

  def resolve_consumers(self, scans: List[RenderScan], result: ContextAnalysis, root: str) -> None:
    """
    Fills consumers, access modes and usage counters.

    An access without a written generic counts for every provider and
    notifier; one with a generic only for the matching type.
    """
    accesses: List[Tuple[str, AccessMode, Optional[str]]] = []
    for scan in scans:
      for mode, generic in access_generics(scan.text):
        accesses.append((scan.class_name, mode, generic))

    for provider in result.providers:
      for consumer, mode, generic in accesses:
        if generic is not None and generic != provider.value_type:
          continue
        if mode not in provider.access_modes:
          provider.access_modes.append(mode)
        if consumer not in provider.consumers:
          provider.consumers.append(consumer)

    for notifier in result.change_notifiers:
      consumers = [c for c, _, generic in accesses if generic is None or generic == notifier.name]
      consumers += [u.dependent for u in result.context_access_points if notifier.name in u.pattern and u.dependent]
      notifier.consumers = ordered_unique(consumers)

    for widget in result.inherited_widgets:
      used_in = ordered_unique(
        u.dependent for u in result.context_access_points if widget.name in u.pattern and u.dependent
      )
      widget.used_in = used_in
      widget.usage_count = len(used_in)
      widget.provided_by = [root]

  def provider_root(self, classification: Optional[Classification]) -> str:
    if classification is not None and classification.widget_tree.root_widget:
      return classification.widget_tree.root_widget
    return self.config.root_component

  def build_graphs(self, result: ContextAnalysis, root: str) -> None:
    for widget in result.inherited_widgets:
      consumers = widget.used_in
      result.inherited_widget_graph[widget.name] = ContextGraphEntry(
        provided_by=root,
        provided_value=widget.properties[0].type if widget.properties else "unknown",
        consumed_by=list(consumers),
        flow_path=f"{root} -> {widget.name} -> {', '.join(consumers) or '[no consumers]'}",
      )

    for provider in result.providers:
      consumers = provider.consumers
      result.provider_graph[provider.key] = ContextGraphEntry(
        provided_by=root,
        provided_value=provider.value_type,
        consumed_by=list(consumers),
        access_modes=list(provider.access_modes),
        flow_path=f"{root} -> {provider.key} -> {', '.join(consumers) or '[no consumers]'}",
      )

  def summarize_requirements(self, result: ContextAnalysis) -> ContextRequirementsSummary:
    patterns = " ".join(u.pattern for u in result.context_access_points)
    categories = {u.category for u in result.context_access_points}
    notifier_names = {n.name for n in result.change_notifiers}
    return ContextRequirementsSummary(
      requires_theme_provider="Theme.of" in patterns or "context.theme" in patterns,
      requires_media_query="mediaQuery" in patterns,
      requires_navigator="navigation" in categories,
      requires_change_notifier_provider=any(p.value_type in notifier_names for p in result.providers)
      or any(n.consumers for n in result.change_notifiers),
      custom_inherited_widgets=[w.name for w in result.inherited_widgets],
      required_providers=[p.key for p in result.providers],
    )

  # --- Validation ---

  def validate(self, result: ContextAnalysis) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    token = self.config.value_provider_token

    for widget in result.inherited_widgets:
      if not widget.has_child_property:
        issues.append(
          ValidationIssue(
            type="missing-child-property",
            severity=Severity.WARNING,
            message=f"{token} \"{widget.name}\" should have a 'child' property",
            suggestion="Declare a child field and pass it to the parent constructor",
            subject=widget.name,
            location=widget.location,
          )
        )
      if not widget.static_accessors:
        issues.append(
          ValidationIssue(
            type="missing-static-accessor",
            severity=Severity.WARNING,
            message=f'{token} "{widget.name}" should have a static {self.config.accessor_name}() method',
            suggestion=f"Add static {self.config.accessor_name}(context) returning the nearest instance",
            subject=widget.name,
            location=widget.location,
          )
        )
      if not widget.update_should_notify_implemented:
        issues.append(
          ValidationIssue(
            type="missing-update-notification",
            severity=Severity.ERROR,
            message=f'{token} "{widget.name}" must implement {self.config.should_notify}()',
            suggestion=f"Implement {self.config.should_notify}(oldWidget) comparing the provided values",
            subject=widget.name,
            location=widget.location,
          )
        )

    notify = self.config.notify_call
    for notifier in result.change_notifiers:
      if notifier.methods and not any(m.calls_notify for m in notifier.methods):
        issues.append(
          ValidationIssue(
            type="missing-notify-listeners",
            severity=Severity.WARNING,
            message=f'{self.config.observable_base} "{notifier.name}" has methods but none call {notify}()',
            suggestion=f"Call {notify}() after mutating state",
            subject=notifier.name,
            location=notifier.location,
          )
        )
      for method in notifier.methods:
        if method.mutates_fields and not method.calls_notify:
          issues.append(
            ValidationIssue(
              type="mutation-without-notification",
              severity=Severity.WARNING,
              message=f'Method "{method.name}" mutates state but doesn\'t call {notify}()',
              suggestion=f"Call {notify}() at the end of {method.name}()",
              method=method.name,
              subject=notifier.name,
              location=method.location,
            )
          )
      if notifier.properties and not notifier.getters:
        issues.append(
          ValidationIssue(
            type="missing-getters",
            severity=Severity.INFO,
            message=f'{self.config.observable_base} "{notifier.name}" has properties but no getters',
            suggestion="Consider adding getters for encapsulation",
            subject=notifier.name,
            location=notifier.location,
          )
        )

    for provider in result.providers:
      if not provider.create_function:
        issues.append(
          ValidationIssue(
            type="missing-create",
            severity=Severity.ERROR,
            message=f"{provider.key} must have a create function",
            suggestion="Pass create: (context) => new Value()",
            subject=provider.key,
            location=provider.location,
          )
        )
      if not provider.consumers:
        issues.append(
          ValidationIssue(
            type="unused-provider",
            severity=Severity.INFO,
            message=f"{provider.key} is defined but not consumed by any widget",
            suggestion="Remove the provider or read it with context.read()/context.watch()",
            subject=provider.key,
            location=provider.location,
          )
        )
      if AccessMode.SUBSCRIBE in provider.access_modes and AccessMode.READ_ONCE not in provider.access_modes:
        issues.append(
          ValidationIssue(
            type="watch-without-read",
            severity=Severity.INFO,
            message=f"{provider.key} uses context.watch() but not context.read()",
            suggestion="Consider both patterns",
            subject=provider.key,
            location=provider.location,
          )
        )

    return issues
