"""
Tree Traversal.

Provides :class:`TreeVisitor`, a visit/leave dispatcher modelled on the
LibCST visitor protocol: for a node of class ``CallExpression`` the visitor
calls ``visit_CallExpression`` on entry and ``leave_CallExpression`` on exit.
Returning ``False`` from a ``visit_*`` method prunes that subtree.

Also exposes :func:`walk` for plain pre-order iteration and a few shape
helpers shared by the analysis passes (receiver detection, callee names).
"""

from typing import Iterable, Iterator, Optional

from widgetscope.tree.nodes import (
  BlockStatement,
  CallExpression,
  ExpressionStatement,
  Identifier,
  Literal,
  MemberExpression,
  NewExpression,
  Node,
)


class TreeVisitor:
  """
  Base class for tree visitors.

  Subclasses implement ``visit_<NodeClass>`` and/or ``leave_<NodeClass>``.
  Unhandled node classes fall through to :meth:`on_visit` / :meth:`on_leave`,
  which traverse children by default.
  """

  def visit(self, node: Node) -> None:
    """
    Traverses ``node`` and its descendants.

    Args:
        node: The subtree root.
    """
    if self.on_visit(node):
      for child in node.children():
        self.visit(child)
    self.on_leave(node)

  def on_visit(self, node: Node) -> bool:
    visit_fn = getattr(self, f"visit_{type(node).__name__}", None)
    if visit_fn is None:
      return True
    result = visit_fn(node)
    return result is not False

  def on_leave(self, node: Node) -> None:
    leave_fn = getattr(self, f"leave_{type(node).__name__}", None)
    if leave_fn is not None:
      leave_fn(node)


def walk(node: Optional[Node]) -> Iterator[Node]:
  """
  Yields ``node`` and every descendant in pre-order.

  Args:
      node: The subtree root. ``None`` yields nothing.
  """
  if node is None:
    return
  stack = [node]
  while stack:
    current = stack.pop()
    yield current
    stack.extend(reversed(list(current.children())))


def statements_of(body: Optional[Node]) -> list:
  """
  Returns the first-level statements of a function body.

  A block yields its statement list; a bare expression body (arrow or
  expression-bodied method) is treated as a single statement.
  """
  if body is None:
    return []
  if isinstance(body, BlockStatement):
    return list(body.body)
  return [body]


def unwrap_statement(stmt: Node) -> Node:
  """Returns the expression of an expression statement, else the node."""
  if isinstance(stmt, ExpressionStatement):
    return stmt.expression
  return stmt


def is_receiver(node: Optional[Node], names: Iterable[str]) -> bool:
  """True if ``node`` is an identifier naming the instance receiver."""
  return isinstance(node, Identifier) and node.name in names


def member_name(node: Optional[Node]) -> Optional[str]:
  """
  Returns the property name of a member access.

  Handles ``obj.prop`` and computed string keys ``obj["prop"]``.
  """
  if not isinstance(node, MemberExpression):
    return None
  prop = node.property
  if isinstance(prop, Identifier) and not node.computed:
    return prop.name
  if isinstance(prop, Literal) and isinstance(prop.value, str):
    return prop.value
  return None


def receiver_field(node: Optional[Node], receivers: Iterable[str]) -> Optional[str]:
  """
  Resolves ``this.<field>`` (or ``self.<field>``) to the field name.

  Args:
      node: Candidate member access.
      receivers: Identifier names that denote the instance.

  Returns:
      The field name, or None when the node is not a receiver access.
  """
  if isinstance(node, MemberExpression) and is_receiver(node.object, receivers):
    return member_name(node)
  return None


def head_name(node: Optional[Node]) -> Optional[str]:
  """
  Returns the head identifier of a constructed or referenced expression.

  ``new Foo()`` / ``Foo()`` / ``Foo`` give ``Foo``; ``this.foo`` and
  ``a.b.foo`` give ``foo``.
  """
  if isinstance(node, (NewExpression, CallExpression)):
    return head_name(node.callee)
  if isinstance(node, Identifier):
    return node.name
  if isinstance(node, MemberExpression):
    return member_name(node)
  return None


def dotted_name(node: Optional[Node]) -> Optional[str]:
  """Flattens ``a.b.c`` member chains to a dotted string."""
  if isinstance(node, Identifier):
    return node.name
  if isinstance(node, MemberExpression):
    base = dotted_name(node.object)
    prop = member_name(node)
    if base and prop:
      return f"{base}.{prop}"
  return None
