"""
Tests for the Widget Classifier.
"""

from tree_builders import (
  assign,
  build,
  call,
  counter_state,
  counter_widget,
  field,
  function,
  ident,
  import_decl,
  klass,
  lit,
  member,
  method,
  new,
  program,
  stmt,
  this,
)
from widgetscope.analysis.widgets import WidgetClassifier
from widgetscope.enums import WidgetRole
from widgetscope.tree import load_tree


def classify(*declarations, config=None):
  return WidgetClassifier(config).classify(load_tree(program(*declarations)))


def test_roles_by_parent_type():
  result = classify(
    klass("Title", "StatelessWidget"),
    counter_widget(),
    counter_state(),
    klass("Box", "Container"),
    klass("Point"),
  )
  roles = {w.name: w.role for w in result.widgets}
  assert roles == {
    "Title": WidgetRole.STATELESS,
    "Counter": WidgetRole.STATEFUL,
    "_CounterState": WidgetRole.STATE,
    "Box": WidgetRole.COMPONENT,
    "Point": WidgetRole.PLAIN,
  }
  assert result.summary()["total"] == 5
  assert result.summary()["stateful"] == 1


def test_exact_match_for_base_names():
  # A parent that merely contains the stateless name is a generic component.
  result = classify(klass("Fancy", "MyStatelessWidget"))
  assert result.widgets[0].role == WidgetRole.COMPONENT


def test_fields_and_bidirectional_index():
  result = classify(counter_state(build_method=build(new("Text", this("_count")))))
  state = result.find_widget("_CounterState")

  count = state.find_field("_count")
  assert count.type == "int"
  assert count.initial_value == "0"
  assert count.referenced_by == ["inc", "build"]

  assert state.find_method("inc").uses_fields == ["_count"]
  assert state.find_method("build").params == ["context"]


def test_set_state_and_method_names_are_not_fields():
  state = klass(
    "_S",
    "State<W>",
    methods=[
      method("helper"),
      method("act", stmt(call(this("setState"), ident("f"))), stmt(call(this("helper")))),
    ],
  )
  assert classify(state).widgets[0].find_method("act").uses_fields == []


def test_constructor_fields_are_captured():
  result = classify(
    klass(
      "Model",
      methods=[method("constructor", stmt(assign(this("name"), lit("x"))), stmt(assign(this("items"), {"type": "ArrayLiteral"})))],
    )
  )
  model = result.widgets[0]
  assert [f.name for f in model.fields] == ["name", "items"]
  assert [f.type for f in model.fields] == ["String", "List"]
  assert model.constructor is not None
  assert model.methods == []


def test_missing_create_state_is_structural_error():
  result = classify(klass("Broken", "StatefulWidget"), klass("Fine", "StatelessWidget"))
  assert [e.type for e in result.errors] == ["missing-create-state"]
  assert result.errors[0].widget == "Broken"
  assert len(result.widgets) == 2


def test_entry_point_and_imports():
  result = classify(
    import_decl("package:flutter/material.dart", "StatelessWidget", "Text"),
    import_decl("package:provider/provider.dart", "Provider"),
    import_decl("package:flutter/material.dart", "Colors"),
    klass("MyApp", "StatelessWidget"),
    function("main", stmt(call("runApp", new("MyApp")))),
    function("helper", params=["x"], is_async=True),
  )
  assert result.widget_tree.entry_function == "main"
  assert result.widget_tree.root_widget == "MyApp"
  assert result.external_dependencies == ["package:flutter/material.dart", "package:provider/provider.dart"]
  assert result.imports[0].items == ["StatelessWidget", "Text"]

  functions = {f.name: f for f in result.functions}
  assert functions["main"].is_entry_point is True
  assert functions["helper"].is_async is True
  assert functions["helper"].params == ["x"]


def test_entry_point_through_nested_call():
  result = classify(function("main", stmt(call(member("app", "start"), call("runApp", call("Home"))))))
  assert result.widget_tree.root_widget == "Home"


def test_no_main_gives_empty_tree():
  result = classify(klass("A"))
  assert result.widget_tree.entry_function is None
  assert result.widget_tree.root_widget is None


def test_custom_vocabulary(config):
  custom = config.model_copy(update={"stateful_base": "Component", "create_state": "makeState"})
  result = classify(klass("W", "Component", methods=[method("makeState")]), config=custom)
  assert result.widgets[0].role == WidgetRole.STATEFUL
  assert result.errors == []


def test_static_fields_flagged():
  result = classify(klass("K", fields=[field("shared", lit(1.5), static=True)]))
  shared = result.widgets[0].fields[0]
  assert shared.is_static is True
  assert shared.type == "double"
