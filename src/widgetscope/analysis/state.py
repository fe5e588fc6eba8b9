"""
State Linking and Mutation Tracking Pass.

Pairs each stateful widget with the state class its factory constructs and
then analyses that state class:

1.  **Linking**: ``createState`` must construct (or return) a class whose
    parent type starts with the state-holder prefix. Failures become
    structural errors for that widget only.
2.  **Update Calls**: ``this.setState(() => {...})`` calls anywhere in the
    state class; the callback's assignment and increment targets on the
    receiver form the call's update set.
3.  **Lifecycle**: ``initState``, ``dispose``, ``didUpdateWidget`` and
    ``build``, with super-call and side-effect detection.
4.  **Event Handlers**: ``on[A-Z]...`` properties of object literals in the
    render method.
5.  **Dependency Graph** and field validation (unused fields, mutation
    outside an update call, missing handlers).

The classifier output is read, never modified. Links are returned in
:attr:`StateAnalysis.links` for the engine to apply.
"""

import re
from typing import Dict, List, Optional, Set, Tuple

from widgetscope.analysis.widgets import ordered_unique
from widgetscope.config import AnalyzerConfig
from widgetscope.core.diagnostics import DiagnosticsChannel, null_channel
from widgetscope.enums import LifecycleKind, Severity, WidgetRole
from widgetscope.schema import (
  Classification,
  DependencyGraph,
  EventHandlerDescriptor,
  LifecycleMethodDescriptor,
  StateAnalysis,
  StateClassDescriptor,
  StateFieldDescriptor,
  StateUpdateCall,
  StructuralError,
  ValidationIssue,
  WidgetDescriptor,
)
from widgetscope.tree.nodes import (
  ArrowFunctionExpression,
  AssignmentExpression,
  BlockStatement,
  CallExpression,
  ClassDeclaration,
  Identifier,
  Literal,
  MemberExpression,
  MethodDeclaration,
  NewExpression,
  Node,
  ObjectLiteral,
  Program,
  ReturnStatement,
  SourceLocation,
  UpdateExpression,
)
from widgetscope.tree.printer import to_source
from widgetscope.tree.visitor import (
  TreeVisitor,
  head_name,
  is_receiver,
  member_name,
  receiver_field,
  statements_of,
  unwrap_statement,
  walk,
)

EVENT_KEY = re.compile(r"^on[A-Z]")


def mutation_target(node: Node) -> Optional[Node]:
  """Returns the written target of an assignment or increment, else None."""
  if isinstance(node, AssignmentExpression):
    return node.left
  if isinstance(node, UpdateExpression):
    return node.argument
  return None


class SetStateCollector(TreeVisitor):
  """
  Finds update calls in one method and resolves their mutated fields.

  Attributes:
      calls: ``(call node, updates)`` in source order.
      sanctioned: ids of the mutation nodes found inside update callbacks.
  """

  def __init__(self, config: AnalyzerConfig, declared_fields: Set[str]):
    self.config = config
    self.declared_fields = declared_fields
    self.calls: List[Tuple[CallExpression, List[str]]] = []
    self.sanctioned: Set[int] = set()

  def is_update_call(self, node: CallExpression) -> bool:
    callee = node.callee
    return (
      isinstance(callee, MemberExpression)
      and is_receiver(callee.object, self.config.receivers)
      and member_name(callee) == self.config.set_state
    )

  def visit_CallExpression(self, node: CallExpression) -> Optional[bool]:
    if not self.is_update_call(node):
      return True

    updates: List[str] = []
    callback = node.args[0] if len(node.args) == 1 else None
    if isinstance(callback, ArrowFunctionExpression):
      for inner in walk(callback.body):
        target = mutation_target(inner)
        if target is None:
          continue
        name = self.resolve_target(target)
        if name is None:
          continue
        self.sanctioned.add(id(inner))
        if name not in updates:
          updates.append(name)

    self.calls.append((node, updates))
    return True

  def resolve_target(self, target: Node) -> Optional[str]:
    name = receiver_field(target, self.config.receivers)
    if name is not None:
      return name
    # Bare identifiers only count when they name a declared field.
    if isinstance(target, Identifier) and target.name in self.declared_fields:
      return target.name
    return None


class EventHandlerCollector(TreeVisitor):
  """
  Finds ``on[A-Z]`` properties in a render method.

  Keeps a stack of enclosing constructor/call names so each handler knows
  the component it is bound on.
  """

  def __init__(self, config: AnalyzerConfig):
    self.config = config
    self.found: List[Tuple[str, str, Optional[str], Optional[SourceLocation]]] = []
    self._components: List[Optional[str]] = []
    self._seen: Set[Tuple[str, str]] = set()

  def visit_CallExpression(self, node: CallExpression) -> Optional[bool]:
    self._components.append(head_name(node.callee))
    return True

  def leave_CallExpression(self, node: CallExpression) -> None:
    self._components.pop()

  def visit_NewExpression(self, node: NewExpression) -> Optional[bool]:
    self._components.append(head_name(node.callee))
    return True

  def leave_NewExpression(self, node: NewExpression) -> None:
    self._components.pop()

  def visit_ObjectLiteral(self, node: ObjectLiteral) -> Optional[bool]:
    component = self._components[-1] if self._components else None
    for prop in node.properties:
      event = property_key(prop.key)
      if event is None or not EVENT_KEY.match(event):
        continue
      handler = self.resolve_handler(prop.value)
      if handler is None or (event, handler) in self._seen:
        continue
      self._seen.add((event, handler))
      location = prop.location or (prop.value.location if prop.value is not None else None)
      self.found.append((event, handler, component, location))
    return True

  def resolve_handler(self, value: Optional[Node]) -> Optional[str]:
    """
    Resolves the handler name bound to an event property.

    ``() => this.inc()`` and ``() => inc`` resolve through the arrow body;
    ``this.inc`` and ``inc`` resolve directly.
    """
    if isinstance(value, ArrowFunctionExpression):
      body = value.body
      if isinstance(body, (CallExpression, Identifier)):
        return head_name(body)
      for stmt in statements_of(body):
        expr = unwrap_statement(stmt)
        if isinstance(expr, CallExpression):
          return head_name(expr)
      return None
    if isinstance(value, (Identifier, MemberExpression)):
      return head_name(value)
    return None


def property_key(key: Optional[Node]) -> Optional[str]:
  if isinstance(key, Identifier):
    return key.name
  if isinstance(key, Literal) and key.value is not None:
    return str(key.value)
  return None


class StateLinker:
  """
  Links stateful widgets to their state classes and tracks mutation.
  """

  def __init__(self, config: Optional[AnalyzerConfig] = None, diagnostics: Optional[DiagnosticsChannel] = None):
    self.config = config or AnalyzerConfig()
    self.diagnostics = diagnostics or null_channel("state")

  def analyze(self, program: Program, classification: Classification) -> StateAnalysis:
    """
    Runs linking, mutation tracking and validation.

    Args:
        program: The validated tree root.
        classification: Output of the widget classifier (read only).

    Returns:
        StateAnalysis: All state descriptors plus the widget-to-state links.
    """
    self.diagnostics.start_phase("State Linking", "Stateful widgets to state classes")
    result = StateAnalysis()
    self._outside_mutations: Dict[str, Dict[str, List[Tuple[str, Node]]]] = {}

    linked: List[Tuple[ClassDeclaration, WidgetDescriptor, str]] = []
    for widget in classification.widgets:
      if widget.role != WidgetRole.STATEFUL:
        continue
      state_node = self.link(program, widget, result.errors)
      if state_node is None:
        continue
      result.links[widget.name] = state_node.name
      if any(node.name == state_node.name for node, _, _ in linked):
        continue
      state_widget = classification.find_widget(state_node.name)
      linked.append((state_node, state_widget, widget.name))

    self.diagnostics.count("State classes linked", len(linked))

    for state_node, state_widget, owner in linked:
      self.analyze_state_class(state_node, state_widget, owner, result)

    result.dependency_graph = self.build_dependency_graph(linked, result)
    self.validate_fields(result)
    self.validate_event_handlers(linked, result)

    self.diagnostics.count("setState calls", len(result.set_state_calls))
    self.diagnostics.count("Event handlers", len(result.event_handlers))
    self.diagnostics.count("Validation issues", len(result.validation_issues))
    self.diagnostics.end_phase()
    return result

  # --- Linking ---

  def link(self, program: Program, widget: WidgetDescriptor, errors: List[StructuralError]) -> Optional[ClassDeclaration]:
    """
    Resolves the state class of one stateful widget.

    Returns:
        The state class node, or None when linking failed (an error is
        appended unless the classifier already reported the widget).
    """
    class_node = program.find_class(widget.name)
    factory = class_node.find_method(self.config.create_state) if class_node else None
    if factory is None:
      # Reported by the classifier as missing-create-state.
      return None

    state_name = self.extract_state_class_name(factory)
    if state_name is None:
      errors.append(
        StructuralError(
          type="cannot-parse-create-state",
          message=f"Cannot determine which State class is returned by {widget.name}.{self.config.create_state}()",
          widget=widget.name,
          location=factory.location,
        )
      )
      return None

    state_node = program.find_class(state_name)
    if state_node is None:
      errors.append(
        StructuralError(
          type="missing-state-class",
          message=f'State class "{state_name}" not found',
          widget=widget.name,
          state_class=state_name,
          location=factory.location,
        )
      )
      return None

    if not (state_node.parent_type or "").startswith(self.config.state_prefix):
      errors.append(
        StructuralError(
          type="invalid-state-class",
          message=f'Class "{state_name}" does not extend {self.config.state_prefix}',
          widget=widget.name,
          state_class=state_name,
          location=state_node.location,
        )
      )
      return None

    self.diagnostics.trace(f"Linked {widget.name} -> {state_name}")
    return state_node

  def extract_state_class_name(self, factory: MethodDeclaration) -> Optional[str]:
    """
    Finds the class constructed by a factory method.

    Supports ``{ return new _CounterState(); }`` and an expression body
    ``=> new _CounterState()``.
    """
    body = factory.body
    if body is None:
      return None
    if isinstance(body, BlockStatement):
      candidates = [stmt.argument for stmt in body.body if isinstance(stmt, ReturnStatement)]
    else:
      candidates = [unwrap_statement(body)]
    for expr in candidates:
      if isinstance(expr, (NewExpression, CallExpression)):
        return head_name(expr.callee)
    return None

  # --- Per state class ---

  def analyze_state_class(
    self,
    node: ClassDeclaration,
    descriptor: Optional[WidgetDescriptor],
    owner: str,
    result: StateAnalysis,
  ) -> None:
    declared = [f for f in descriptor.fields if not f.is_static] if descriptor else []
    declared_names = {f.name for f in declared}
    lifecycle_names = self.config.lifecycle_methods

    result.state_classes.append(
      StateClassDescriptor(
        name=node.name,
        widget=owner,
        fields=[f.name for f in declared],
        methods=[m.name for m in node.body.methods],
        lifecycle_methods=[m.name for m in node.body.methods if m.name in lifecycle_names],
        location=node.location,
      )
    )

    sanctioned: Set[int] = set()
    for method in node.body.methods:
      collector = SetStateCollector(self.config, declared_names)
      if method.body is not None:
        collector.visit(method.body)
      sanctioned |= collector.sanctioned
      for call_node, updates in collector.calls:
        result.set_state_calls.append(self.describe_update_call(node.name, method.name, call_node, updates, declared_names))

    calls = [c for c in result.set_state_calls if c.state_class == node.name]
    render = node.find_method(self.config.render_method)
    render_text = to_source(render.body) if render is not None and render.body is not None else ""

    for field in declared:
      mutated_by = ordered_unique(c.method for c in calls if field.name in c.updates)
      read_by = [m.name for m in node.body.methods if field.name in self.reads_of(m)]
      result.state_fields.append(
        StateFieldDescriptor(
          state_class=node.name,
          name=field.name,
          type=field.type,
          initial_value=field.initial_value,
          read_by=read_by,
          mutated_by=mutated_by,
          is_used=bool(mutated_by) or field.name in render_text,
          location=field.location,
        )
      )

    self._outside_mutations[node.name] = self.find_outside_mutations(node, declared_names, sanctioned)

    for method in node.body.methods:
      if method.name in lifecycle_names:
        result.lifecycle_methods.append(self.describe_lifecycle(node.name, method))
    self.validate_lifecycle(node.name, result)

    if render is not None and render.body is not None:
      collector = EventHandlerCollector(self.config)
      collector.visit(render.body)
      for event, handler, component, location in collector.found:
        result.event_handlers.append(
          EventHandlerDescriptor(
            event=event,
            handler=handler,
            component=component,
            state_class=node.name,
            location=location,
          )
        )

  def describe_update_call(
    self,
    state_class: str,
    method: str,
    node: CallExpression,
    updates: List[str],
    declared: Set[str],
  ) -> StateUpdateCall:
    issues: List[ValidationIssue] = []
    if not updates:
      issues.append(
        ValidationIssue(
          type="empty-update",
          severity=Severity.WARNING,
          message=f"{self.config.set_state} called with no state updates",
          suggestion="Remove the call or assign a state field inside the callback",
          method=method,
          subject=state_class,
          location=node.location,
        )
      )
    unknown = [name for name in updates if name not in declared]
    for name in unknown:
      issues.append(
        ValidationIssue(
          type="unknown-field",
          severity=Severity.ERROR,
          message=f'{self.config.set_state} updates unknown field "{name}"',
          suggestion=f'Declare "{name}" as a field of {state_class}',
          field=name,
          method=method,
          subject=state_class,
          location=node.location,
        )
      )
    return StateUpdateCall(
      method=method,
      state_class=state_class,
      updates=updates,
      is_valid=not unknown,
      issues=issues,
      location=node.location,
    )

  def reads_of(self, method: MethodDeclaration) -> Set[str]:
    """Receiver fields read by a method; plain ``=`` targets are writes only."""
    written: Set[int] = set()
    for node in walk(method.body):
      if isinstance(node, AssignmentExpression) and node.operator == "=":
        written.add(id(node.left))
    reads = set()
    for node in walk(method.body):
      if isinstance(node, MemberExpression) and id(node) not in written:
        name = receiver_field(node, self.config.receivers)
        if name is not None:
          reads.add(name)
    return reads

  def find_outside_mutations(
    self,
    node: ClassDeclaration,
    declared: Set[str],
    sanctioned: Set[int],
  ) -> Dict[str, List[Tuple[str, Node]]]:
    """
    Maps field name to ``(method, node)`` for receiver writes outside update callbacks.

    The init hook and the constructor initialize state and are exempt.
    """
    exempt = {self.config.init_method, self.config.constructor_name}
    found: Dict[str, List[Tuple[str, Node]]] = {}
    for method in node.body.methods:
      if method.name in exempt:
        continue
      for inner in walk(method.body):
        target = mutation_target(inner)
        if target is None or id(inner) in sanctioned:
          continue
        name = receiver_field(target, self.config.receivers)
        if name in declared:
          found.setdefault(name, []).append((method.name, inner))
    return found

  # --- Lifecycle ---

  def lifecycle_kind(self, name: str) -> LifecycleKind:
    kinds = dict(zip(self.config.lifecycle_methods, LifecycleKind))
    return kinds[name]

  def find_super_call(self, method: MethodDeclaration) -> Optional[CallExpression]:
    """Returns the first-level ``super.<name>()`` call of a method, if any."""
    for stmt in statements_of(method.body):
      expr = unwrap_statement(stmt)
      if not isinstance(expr, CallExpression):
        continue
      callee = expr.callee
      if (
        isinstance(callee, MemberExpression)
        and isinstance(callee.object, Identifier)
        and callee.object.name == self.config.super_name
        and member_name(callee) == method.name
      ):
        return expr
    return None

  def has_side_effects(self, method: MethodDeclaration, super_call: Optional[CallExpression]) -> bool:
    """True if a first-level statement assigns, increments or calls (the super call aside)."""
    for stmt in statements_of(method.body):
      expr = unwrap_statement(stmt)
      if expr is super_call:
        continue
      if isinstance(expr, (AssignmentExpression, UpdateExpression, CallExpression)):
        return True
    return False

  def describe_lifecycle(self, state_class: str, method: MethodDeclaration) -> LifecycleMethodDescriptor:
    kind = self.lifecycle_kind(method.name)
    super_call = self.find_super_call(method)
    calls_super = super_call is not None
    return LifecycleMethodDescriptor(
      name=method.name,
      kind=kind,
      state_class=state_class,
      calls_super=calls_super,
      has_side_effects=self.has_side_effects(method, super_call),
      is_valid=calls_super or kind != LifecycleKind.DISPOSE,
      location=method.location,
    )

  def validate_lifecycle(self, state_class: str, result: StateAnalysis) -> None:
    for hook in result.lifecycle_methods:
      if hook.state_class != state_class or hook.calls_super:
        continue
      if hook.kind == LifecycleKind.DISPOSE:
        severity = Severity.ERROR
        suggestion = f"Add {self.config.super_name}.{hook.name}() call at the end of {hook.name}()"
      elif hook.kind == LifecycleKind.INIT:
        severity = Severity.WARNING
        suggestion = f"Add {self.config.super_name}.{hook.name}() call"
      else:
        continue
      result.validation_issues.append(
        ValidationIssue(
          type="lifecycle-issue",
          severity=severity,
          message=f"{hook.name}() should call {self.config.super_name}.{hook.name}()",
          suggestion=suggestion,
          method=hook.name,
          subject=state_class,
          location=hook.location,
        )
      )

  # --- Graph & validation ---

  def build_dependency_graph(
    self, linked: List[Tuple[ClassDeclaration, Optional[WidgetDescriptor], str]], result: StateAnalysis
  ) -> DependencyGraph:
    """
    Builds field/method/event relations.

    ``state_to_methods`` takes the methods whose update calls mutate the
    field, plus the render method when its text mentions the field.
    """
    graph = DependencyGraph()
    render_texts = {}
    for node, _, _ in linked:
      render = node.find_method(self.config.render_method)
      if render is not None and render.body is not None:
        render_texts[node.name] = to_source(render.body)

    for field in result.state_fields:
      methods = ordered_unique(
        c.method for c in result.set_state_calls if c.state_class == field.state_class and field.name in c.updates
      )
      if field.name in render_texts.get(field.state_class, ""):
        if self.config.render_method not in methods:
          methods.append(self.config.render_method)
      if methods:
        existing = graph.state_to_methods.setdefault(field.name, [])
        existing.extend(m for m in methods if m not in existing)

    for field_name, methods in graph.state_to_methods.items():
      for method in methods:
        fields = graph.method_to_state.setdefault(method, [])
        if field_name not in fields:
          fields.append(field_name)

    for handler in result.event_handlers:
      changed = self.state_changed_by(handler, result)
      if changed:
        existing = graph.event_to_state.setdefault(handler.event, [])
        existing.extend(f for f in changed if f not in existing)

    return graph

  def state_changed_by(self, handler: EventHandlerDescriptor, result: StateAnalysis) -> List[str]:
    """Union of update sets of the calls made in the handler's method."""
    changed: List[str] = []
    for call in result.set_state_calls:
      if call.state_class != handler.state_class:
        continue
      inline = handler.handler == self.config.set_state and call.method == self.config.render_method
      if call.method == handler.handler or inline:
        changed.extend(f for f in call.updates if f not in changed)
    return changed

  def validate_fields(self, result: StateAnalysis) -> None:
    for call in result.set_state_calls:
      result.validation_issues.extend(call.issues)

    for field in result.state_fields:
      if not field.is_used:
        result.validation_issues.append(
          ValidationIssue(
            type="unused-state-field",
            severity=Severity.WARNING,
            message=f'State field "{field.name}" is defined but never used',
            suggestion="Remove unused field or implement its usage",
            field=field.name,
            subject=field.state_class,
            location=field.location,
          )
        )

      outside = self._outside_mutations.get(field.state_class, {}).get(field.name, [])
      if outside:
        result.validation_issues.append(
          ValidationIssue(
            type="mutation-outside-setstate",
            severity=Severity.ERROR,
            message=f'State field "{field.name}" is mutated outside {self.config.set_state}()',
            suggestion=f"Always use {self.config.set_state}() to update state fields",
            field=field.name,
            method=outside[0][0],
            subject=field.state_class,
            locations=[n.location for _, n in outside if n.location is not None],
          )
        )

  def validate_event_handlers(self, linked, result: StateAnalysis) -> None:
    members: Dict[str, Set[str]] = {}
    for node, _, _ in linked:
      members[node.name] = {m.name for m in node.body.methods} | {f.key.name for f in node.body.fields}

    for handler in result.event_handlers:
      if handler.handler == self.config.set_state:
        continue
      if handler.handler in members.get(handler.state_class, set()):
        continue
      result.validation_issues.append(
        ValidationIssue(
          type="missing-handler",
          severity=Severity.ERROR,
          message=f'Event handler "{handler.handler}" not found',
          suggestion=f"Create a method called {handler.handler} in the State class",
          handler=handler.handler,
          event=handler.event,
          subject=handler.state_class,
          location=handler.location,
        )
      )
