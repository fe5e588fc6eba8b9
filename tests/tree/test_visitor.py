"""
Tests for Tree Traversal and shape helpers.
"""

from tree_builders import arrow, block, call, ident, inc, klass, lit, member, method, new, program, stmt, this
from widgetscope.tree import TreeVisitor, load_tree, walk
from widgetscope.tree.nodes import Identifier, Literal, MemberExpression
from widgetscope.tree.visitor import dotted_name, head_name, member_name, receiver_field, statements_of


def sample():
  return load_tree(
    program(
      klass(
        "A",
        methods=[
          method("m", stmt(call(this("f"), lit(1))), stmt(inc(this("count")))),
          method("n", stmt(call(member("x", "y"), arrow(block(stmt(call(ident("inner")))))))),
        ],
      )
    )
  )


class IdentifierCollector(TreeVisitor):
  def __init__(self, prune_arrows=False):
    self.names = []
    self.left = []
    self.prune_arrows = prune_arrows

  def visit_Identifier(self, node):
    self.names.append(node.name)

  def visit_ArrowFunctionExpression(self, node):
    return not self.prune_arrows

  def leave_MethodDeclaration(self, node):
    self.left.append(node.name)


def test_visitor_dispatch_and_leave_order():
  collector = IdentifierCollector()
  collector.visit(sample())
  assert collector.names == ["A", "m", "this", "f", "this", "count", "n", "x", "y", "inner"]
  assert collector.left == ["m", "n"]


def test_visitor_prunes_on_false():
  collector = IdentifierCollector(prune_arrows=True)
  collector.visit(sample())
  assert "inner" not in collector.names
  assert "y" in collector.names


def test_walk_is_preorder():
  names = [n.name for n in walk(sample()) if isinstance(n, Identifier)]
  assert names == ["A", "m", "this", "f", "this", "count", "n", "x", "y", "inner"]
  assert list(walk(None)) == []


def test_member_helpers():
  access = MemberExpression(object=Identifier(name="this"), property=Identifier(name="count"))
  assert member_name(access) == "count"
  assert receiver_field(access, ["this"]) == "count"
  assert receiver_field(access, ["self"]) is None

  computed = MemberExpression(object=Identifier(name="self"), property=Literal(value="count"), computed=True)
  assert receiver_field(computed, ["this", "self"]) == "count"


def test_head_and_dotted_names():
  tree = load_tree(program(klass("A", methods=[method("m", stmt(new("Foo")), stmt(call(member(member("a", "b"), "c"))))])))
  first, second = tree.classes()[0].body.methods[0].body.body
  assert head_name(first.expression) == "Foo"
  assert head_name(second.expression) == "c"
  assert dotted_name(second.expression.callee) == "a.b.c"


def test_statements_of_expression_body():
  tree = load_tree(program(klass("A", methods=[method("m", body=new("Foo"))])))
  body = tree.classes()[0].body.methods[0].body
  assert len(statements_of(body)) == 1
  assert statements_of(None) == []
