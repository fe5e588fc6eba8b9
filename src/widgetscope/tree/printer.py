"""
Source Printer.

Renders tree nodes back into compact, source-like text. The output is not
meant to round-trip through a parser; it is the canonical text that the
analysis passes search when a check is defined over "what the code says"
(catalog matching, access-mode detection, field containment).

``elide_functions=True`` prints nested arrow functions as ``(params) => ...``
so callers can inspect only what executes directly, not deferred callbacks.
"""

import json
from typing import Iterable, Optional

from widgetscope.tree.nodes import Node, OpaqueNode


class SourcePrinter:
  """
  Dispatches on node class name to ``print_<ClassName>`` methods.

  Attributes:
      elide_functions (bool): If True, arrow function bodies print as ``...``.
  """

  def __init__(self, elide_functions: bool = False):
    self.elide_functions = elide_functions

  def render(self, node: Optional[Node]) -> str:
    if node is None:
      return ""
    if isinstance(node, OpaqueNode):
      return f"<{node.type}>"
    printer = getattr(self, f"print_{type(node).__name__}", None)
    if printer is None:
      return f"<{getattr(node, 'type', type(node).__name__)}>"
    return printer(node)

  def _join(self, nodes: Iterable[Node], sep: str = ", ") -> str:
    return sep.join(self.render(n) for n in nodes)

  def _type_args(self, node) -> str:
    if node.type_arguments:
      return f"<{', '.join(node.type_arguments)}>"
    return ""

  def _operand(self, node: Node) -> str:
    text = self.render(node)
    if type(node).__name__ in ("BinaryExpression", "ConditionalExpression", "AssignmentExpression"):
      return f"({text})"
    return text

  # --- Expressions ---

  def print_Identifier(self, node) -> str:
    return node.name

  def print_Literal(self, node) -> str:
    if node.raw:
      return node.raw
    value = node.value
    if value is None:
      return "null"
    if isinstance(value, bool):
      return "true" if value else "false"
    if isinstance(value, str):
      return json.dumps(value)
    return str(value)

  def print_CallExpression(self, node) -> str:
    return f"{self.render(node.callee)}{self._type_args(node)}({self._join(node.args)})"

  def print_NewExpression(self, node) -> str:
    return f"new {self.render(node.callee)}{self._type_args(node)}({self._join(node.args)})"

  def print_MemberExpression(self, node) -> str:
    obj = self._operand(node.object)
    if node.computed:
      accessor = "?.[" if node.optional else "["
      return f"{obj}{accessor}{self.render(node.property)}]"
    dot = "?." if node.optional else "."
    return f"{obj}{dot}{self.render(node.property)}"

  def print_AssignmentExpression(self, node) -> str:
    return f"{self.render(node.left)} {node.operator} {self.render(node.right)}"

  def print_UpdateExpression(self, node) -> str:
    arg = self.render(node.argument)
    return f"{node.operator}{arg}" if node.prefix else f"{arg}{node.operator}"

  def print_BinaryExpression(self, node) -> str:
    return f"{self._operand(node.left)} {node.operator} {self._operand(node.right)}"

  def print_UnaryExpression(self, node) -> str:
    sep = " " if node.operator.isalpha() else ""
    return f"{node.operator}{sep}{self._operand(node.argument)}"

  def print_ConditionalExpression(self, node) -> str:
    return f"{self._operand(node.test)} ? {self.render(node.consequent)} : {self.render(node.alternate)}"

  def print_Parameter(self, node) -> str:
    text = node.name.name + ("?" if node.optional else "")
    if node.default_value is not None:
      text += f" = {self.render(node.default_value)}"
    return text

  def print_ArrowFunctionExpression(self, node) -> str:
    prefix = "async " if node.is_async else ""
    body = "..." if self.elide_functions else self.render(node.body)
    return f"{prefix}({self._join(node.params)}) => {body}"

  def print_Property(self, node) -> str:
    if node.value is None:
      return self.render(node.key)
    return f"{self.render(node.key)}: {self.render(node.value)}"

  def print_ObjectLiteral(self, node) -> str:
    if not node.properties:
      return "{}"
    return f"{{ {self._join(node.properties)} }}"

  def print_ArrayLiteral(self, node) -> str:
    return f"[{self._join(node.elements)}]"

  # --- Statements ---

  def print_ExpressionStatement(self, node) -> str:
    return f"{self.render(node.expression)};"

  def print_ReturnStatement(self, node) -> str:
    if node.argument is None:
      return "return;"
    return f"return {self.render(node.argument)};"

  def print_BlockStatement(self, node) -> str:
    if not node.body:
      return "{}"
    return f"{{ {self._join(node.body, ' ')} }}"

  def print_VariableDeclarator(self, node) -> str:
    if node.init is None:
      return self.render(node.id)
    return f"{self.render(node.id)} = {self.render(node.init)}"

  def print_VariableDeclaration(self, node) -> str:
    return f"{node.kind} {self._join(node.declarations)};"

  def print_IfStatement(self, node) -> str:
    text = f"if ({self.render(node.test)}) {self.render(node.consequent)}"
    if node.alternate is not None:
      text += f" else {self.render(node.alternate)}"
    return text

  # --- Declarations ---

  def print_FieldDeclaration(self, node) -> str:
    prefix = "static " if node.is_static else ""
    if node.initial_value is None:
      return f"{prefix}{node.key.name};"
    return f"{prefix}{node.key.name} = {self.render(node.initial_value)};"

  def print_MethodDeclaration(self, node) -> str:
    prefix = ""
    if node.is_static:
      prefix += "static "
    if node.is_async:
      prefix += "async "
    if node.kind in ("get", "set"):
      prefix += f"{node.kind} "
    body = self.render(node.body) if node.body is not None else ";"
    return f"{prefix}{node.name}({self._join(node.params)}) {body}"

  def print_ClassBody(self, node) -> str:
    members = [self.render(f) for f in node.fields] + [self.render(m) for m in node.methods]
    if not members:
      return "{}"
    return f"{{ {' '.join(members)} }}"

  def print_ClassDeclaration(self, node) -> str:
    extends = f" extends {node.parent_type}" if node.super_class else ""
    return f"class {node.name}{extends} {self.render(node.body)}"

  def print_FunctionDeclaration(self, node) -> str:
    prefix = "async " if node.is_async else ""
    body = self.render(node.body) if node.body is not None else "{}"
    return f"{prefix}function {node.name}({self._join(node.params)}) {body}"

  def print_ImportSpecifier(self, node) -> str:
    imported = node.imported.name if node.imported else ""
    local = node.local.name if node.local else imported
    if local and local != imported:
      return f"{imported} as {local}"
    return imported

  def print_ImportDeclaration(self, node) -> str:
    source = self.render(node.source) if node.source is not None else '""'
    return f"import {{ {self._join(node.specifiers)} }} from {source};"

  def print_Program(self, node) -> str:
    return self._join(node.body, "\n")


def to_source(node: Optional[Node], elide_functions: bool = False) -> str:
  """
  Renders a node as compact source text.

  Args:
      node: Any tree node. ``None`` renders as an empty string.
      elide_functions: Replace arrow function bodies with ``...``.

  Returns:
      str: The rendered text.
  """
  return SourcePrinter(elide_functions=elide_functions).render(node)
