"""
Tests for the Source Printer.
"""

from tree_builders import arrow, assign, block, call, ident, inc, lit, member, new, obj, ret, stmt, this
from widgetscope.tree import load_tree, to_source
from widgetscope.tree.nodes import MethodDeclaration


def render(fragment, elide=False):
  # Wrap the fragment in a method so it validates through the normal path.
  tree = load_tree(
    {
      "type": "Program",
      "body": [
        {
          "type": "ClassDeclaration",
          "id": ident("Host"),
          "body": {
            "type": "ClassBody",
            "methods": [{"type": "MethodDeclaration", "key": ident("m"), "body": fragment}],
          },
        }
      ],
    }
  )
  body = tree.classes()[0].body.methods[0].body
  return to_source(body, elide_functions=elide)


def test_generic_call():
  text = render(call(member("context", "watch"), generics=["CounterNotifier"]))
  assert text == "context.watch<CounterNotifier>()"


def test_new_with_object_argument():
  text = render(new("Text", lit("hi"), obj(style=ident("s"))))
  assert text == 'new Text("hi", { style: s })'


def test_literal_raw_wins():
  assert render(lit(1.0, raw="1.0")) == "1.0"
  assert render(lit(True)) == "true"
  assert render(lit(None)) == "null"


def test_empty_raw_falls_back_to_value():
  assert render(lit(2.5, raw="")) == "2.5"
  assert render(lit("a", raw="")) == '"a"'


def test_block_with_update_and_assignment():
  text = render(block(stmt(inc(this("_count"))), stmt(assign(this("name"), lit("x"))), ret(this("name"))))
  assert text == '{ this._count++; this.name = "x"; return this.name; }'


def test_elided_arrow_hides_callback_body():
  fragment = call(member("list", "map"), arrow(call(this("setState"), arrow(block())), "e"))
  assert "setState" in render(fragment)
  assert render(fragment, elide=True) == "list.map((e) => ...)"


def test_none_renders_empty():
  assert to_source(None) == ""


def test_method_prefixes():
  method = MethodDeclaration.model_validate(
    {"key": ident("of"), "params": [ident("context")], "body": block(), "isStatic": True}
  )
  assert to_source(method) == "static of(context) {}"
