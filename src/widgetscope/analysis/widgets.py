"""
Widget Classification Pass.

Scans the top-level class declarations of a :class:`Program` and produces one
:class:`WidgetDescriptor` per class:

1.  **Role**: decided by the declared parent type. Exact match against the
    stateless/stateful base names, then a prefix match against the
    state-holder name (``State<Counter>``); any other parent is a generic
    component, no parent is a plain value class.
2.  **Members**: declared fields (with inferred type) plus receiver fields
    assigned in the constructor, and every method with the set of fields it
    references through the receiver. Field and method indices are kept
    bidirectional.
3.  **Program Shape**: free functions, imports, and the entry function /
    root component pair found via the bootstrap call.

A stateful widget without a state factory is recorded as a structural error;
the remaining classes are still classified.
"""

from typing import Dict, List, Optional

from widgetscope.analysis.inference import infer_type
from widgetscope.config import AnalyzerConfig
from widgetscope.core.diagnostics import DiagnosticsChannel, null_channel
from widgetscope.enums import WidgetRole
from widgetscope.schema import (
  Classification,
  FieldDescriptor,
  FunctionDescriptor,
  ImportRecord,
  MethodDescriptor,
  StructuralError,
  WidgetDescriptor,
  WidgetTree,
)
from widgetscope.tree.nodes import (
  AssignmentExpression,
  CallExpression,
  ClassDeclaration,
  FunctionDeclaration,
  ImportDeclaration,
  MemberExpression,
  MethodDeclaration,
  Node,
  Parameter,
  Program,
)
from widgetscope.tree.printer import to_source
from widgetscope.tree.visitor import TreeVisitor, head_name, receiver_field, walk


def ordered_unique(items) -> List[str]:
  """Deduplicates while keeping first-seen order."""
  return list(dict.fromkeys(items))


def param_names(params: List[Node]) -> List[str]:
  names = []
  for param in params:
    if isinstance(param, Parameter):
      names.append(param.name.name)
    elif hasattr(param, "name") and isinstance(param.name, str):
      names.append(param.name)
  return names


class ReceiverAccessCollector(TreeVisitor):
  """
  Collects the member names accessed through the instance receiver.

  ``this.count`` and ``this.widget.title`` both contribute their first
  member (``count``, ``widget``).
  """

  def __init__(self, receivers: List[str]):
    self.receivers = receivers
    self.names: List[str] = []

  def visit_MemberExpression(self, node: MemberExpression) -> Optional[bool]:
    name = receiver_field(node, self.receivers)
    if name is not None and name not in self.names:
      self.names.append(name)
    return True


def collect_receiver_accesses(node: Optional[Node], receivers: List[str]) -> List[str]:
  if node is None:
    return []
  collector = ReceiverAccessCollector(receivers)
  collector.visit(node)
  return collector.names


class WidgetClassifier:
  """
  Classifies the classes of one program.
  """

  def __init__(self, config: Optional[AnalyzerConfig] = None, diagnostics: Optional[DiagnosticsChannel] = None):
    self.config = config or AnalyzerConfig()
    self.diagnostics = diagnostics or null_channel("widgets")

  def classify(self, program: Program) -> Classification:
    """
    Runs the classification over the whole program.

    Args:
        program: The validated tree root.

    Returns:
        Classification: Widgets in declaration order plus program shape.
    """
    self.diagnostics.start_phase("Widget Classification", "Classes, functions, imports")

    widgets: List[WidgetDescriptor] = []
    errors: List[StructuralError] = []

    for class_node in program.classes():
      widget = self.describe_class(class_node)
      widgets.append(widget)
      self.diagnostics.trace(f"{widget.name} is {widget.role.value}")

      if widget.role == WidgetRole.STATEFUL and class_node.find_method(self.config.create_state) is None:
        errors.append(
          StructuralError(
            type="missing-create-state",
            message=f'StatefulWidget "{widget.name}" has no {self.config.create_state}() method',
            widget=widget.name,
            location=class_node.location,
          )
        )

    functions = [self.describe_function(fn) for fn in program.functions()]
    imports = [self.describe_import(node) for node in program.imports()]
    widget_tree = self.find_entry_point(program)

    result = Classification(
      widgets=widgets,
      functions=functions,
      imports=imports,
      external_dependencies=ordered_unique(rec.source for rec in imports if rec.source),
      widget_tree=widget_tree,
      errors=errors,
    )

    self.diagnostics.count("Widgets classified", len(widgets))
    self.diagnostics.count("Functions found", len(functions))
    if errors:
      self.diagnostics.warning(f"{len(errors)} structural error(s) during classification")
    self.diagnostics.end_phase()
    return result

  def classify_role(self, parent_type: Optional[str]) -> WidgetRole:
    if not parent_type:
      return WidgetRole.PLAIN
    if parent_type == self.config.stateless_base:
      return WidgetRole.STATELESS
    if parent_type == self.config.stateful_base:
      return WidgetRole.STATEFUL
    if parent_type.startswith(self.config.state_prefix):
      return WidgetRole.STATE
    return WidgetRole.COMPONENT

  def describe_class(self, node: ClassDeclaration) -> WidgetDescriptor:
    receivers = self.config.receivers
    method_names = {m.name for m in node.body.methods}

    fields: Dict[str, FieldDescriptor] = {}
    for field in node.body.fields:
      fields[field.key.name] = FieldDescriptor(
        name=field.key.name,
        type=infer_type(field.initial_value),
        initial_value=to_source(field.initial_value) if field.initial_value is not None else None,
        is_static=field.is_static,
        location=field.location,
      )

    constructor: Optional[MethodDescriptor] = None
    methods: List[MethodDescriptor] = []

    for method in node.body.methods:
      used = [
        name
        for name in collect_receiver_accesses(method.body, receivers)
        if name not in method_names and name != self.config.set_state
      ]
      descriptor = MethodDescriptor(
        name=method.name,
        params=param_names(method.params),
        is_static=method.is_static,
        is_async=method.is_async,
        has_body=method.body is not None,
        uses_fields=used,
        location=method.location,
      )
      if method.name == self.config.constructor_name:
        constructor = descriptor
        self._capture_constructor_fields(method, fields)
      else:
        methods.append(descriptor)

    # Bidirectional index: field -> methods referencing it.
    for descriptor in ([constructor] if constructor else []) + methods:
      for name in descriptor.uses_fields:
        field = fields.get(name)
        if field is not None and descriptor.name not in field.referenced_by:
          field.referenced_by.append(descriptor.name)

    return WidgetDescriptor(
      name=node.name,
      role=self.classify_role(node.parent_type),
      parent_type=node.parent_type,
      fields=list(fields.values()),
      methods=methods,
      constructor=constructor,
      location=node.location,
    )

  def _capture_constructor_fields(self, method: MethodDeclaration, fields: Dict[str, FieldDescriptor]) -> None:
    """Adds ``this.x = ...`` targets of the constructor as undeclared fields."""
    for node in walk(method.body):
      if not isinstance(node, AssignmentExpression):
        continue
      name = receiver_field(node.left, self.config.receivers)
      if name is None or name in fields:
        continue
      fields[name] = FieldDescriptor(name=name, type=infer_type(node.right), location=node.location)

  def describe_function(self, node: FunctionDeclaration) -> FunctionDescriptor:
    return FunctionDescriptor(
      name=node.name,
      params=param_names(node.params),
      is_async=node.is_async,
      is_entry_point=node.name == self.config.entry_function,
      location=node.location,
    )

  def describe_import(self, node: ImportDeclaration) -> ImportRecord:
    source = ""
    if node.source is not None and node.source.value is not None:
      source = str(node.source.value)
    items = []
    for spec in node.specifiers:
      ident = spec.local or spec.imported
      if ident is not None:
        items.append(ident.name)
    return ImportRecord(source=source, items=items, location=node.location)

  def find_entry_point(self, program: Program) -> WidgetTree:
    """
    Finds the entry function and the component passed to the bootstrap call.

    The first bootstrap call anywhere in the entry body wins; its first
    argument's head identifier names the root component.
    """
    entry = next((fn for fn in program.functions() if fn.name == self.config.entry_function), None)
    if entry is None:
      return WidgetTree()

    for node in walk(entry.body):
      if not isinstance(node, CallExpression):
        continue
      if head_name(node.callee) != self.config.bootstrap_call or not node.args:
        continue
      root = head_name(node.args[0])
      self.diagnostics.trace(f"Root widget: {root}")
      return WidgetTree(entry_function=entry.name, root_widget=root)

    return WidgetTree(entry_function=entry.name)
