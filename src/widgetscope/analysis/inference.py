"""
Literal and structural type inference for initializers.

Only the shape of the expression is inspected; no flow or scope analysis.
"""

from typing import Optional

from widgetscope.tree.nodes import (
  ArrayLiteral,
  CallExpression,
  Identifier,
  Literal,
  NewExpression,
  Node,
  ObjectLiteral,
)
from widgetscope.tree.visitor import head_name

DYNAMIC = "dynamic"


def infer_type(expr: Optional[Node]) -> str:
  """
  Infers the declared type of a field from its initializer.

  Examples:
      ``0`` -> ``int``, ``1.5`` -> ``double``, ``"a"`` -> ``String``,
      ``[]`` -> ``List``, ``{}`` -> ``Map``, ``new Foo()`` -> ``Foo``.
  """
  if expr is None:
    return DYNAMIC

  if isinstance(expr, Literal):
    value = expr.value
    if value is None:
      return "Null"
    if isinstance(value, bool):
      return "bool"
    if isinstance(value, int):
      return "int"
    if isinstance(value, float):
      return "double"
    if isinstance(value, str):
      return "String"
    return DYNAMIC

  if isinstance(expr, ArrayLiteral):
    return "List"
  if isinstance(expr, ObjectLiteral):
    return "Map"

  if isinstance(expr, NewExpression):
    return head_name(expr.callee) or DYNAMIC

  if isinstance(expr, CallExpression):
    # Constructor calls without `new` are capitalized by convention.
    name = head_name(expr.callee)
    if name and name[0].isupper():
      return name
    return DYNAMIC

  if isinstance(expr, Identifier):
    return expr.name

  return DYNAMIC
