"""
Tests for the Context/Provider Graph Builder.
"""

from tree_builders import (
  arrow,
  build,
  call,
  field,
  function,
  ident,
  inc,
  klass,
  lit,
  member,
  method,
  new,
  obj,
  program,
  ret,
  stmt,
  this,
)
from widgetscope.analysis.context import ContextGraphBuilder
from widgetscope.analysis.widgets import WidgetClassifier
from widgetscope.enums import AccessMode, Severity
from widgetscope.tree import load_tree


def counter_notifier(*extra_methods):
  return klass(
    "CounterNotifier",
    "ChangeNotifier",
    fields=[field("_count", lit(0))],
    methods=[
      method("count", ret(this("_count")), kind="get"),
      method("increment", stmt(inc(this("_count"))), stmt(call("notifyListeners"))),
      *extra_methods,
    ],
  )


def theme_holder():
  return klass(
    "ThemeHolder",
    "InheritedWidget",
    fields=[field("color", lit("blue")), field("child")],
    methods=[
      method(
        "of",
        ret(call(member("context", "dependOnInheritedWidgetOfExactType"), generics=["ThemeHolder"])),
        params=["context"],
        static=True,
      ),
      method("updateShouldNotify", ret(lit(True)), params=["old"]),
    ],
  )


def counter_view():
  return klass(
    "CounterView",
    "StatelessWidget",
    methods=[
      method(
        "build",
        stmt(call(member("context", "watch"), generics=["CounterNotifier"])),
        ret(new("Text", call(member("ThemeHolder", "of"), ident("context")))),
        params=["context"],
      )
    ],
  )


def my_app():
  provider = new(
    "Provider",
    obj(create=arrow(new("CounterNotifier"), "ctx"), child=new("CounterView")),
    generics=["CounterNotifier"],
  )
  return klass("MyApp", "StatelessWidget", methods=[build(provider)])


def analyze(*declarations, with_classification=True):
  tree = load_tree(program(*declarations))
  classification = WidgetClassifier().classify(tree) if with_classification else None
  return ContextGraphBuilder().analyze(tree, classification)


def full_app():
  return analyze(
    counter_notifier(method("reset", stmt({"type": "AssignmentExpression", "left": this("_count"), "right": lit(0)}))),
    theme_holder(),
    counter_view(),
    my_app(),
    function("main", stmt(call("runApp", new("MyApp")))),
  )


def test_watch_usage_is_unsafe():
  result = full_app()
  watch = [u for u in result.context_access_points if u.category == "provider-watch"]
  assert len(watch) == 1
  assert watch[0].ssr_safe is False
  assert watch[0].pattern == "context.watch<CounterNotifier>()"
  assert watch[0].returns == "CounterNotifier"
  assert watch[0].dependent == "CounterView"
  assert watch[0].severity == Severity.ERROR
  assert watch[0].migration_hint


def test_usage_order_and_inherited_lookup():
  result = full_app()
  assert [(u.pattern, u.ssr_safe) for u in result.context_access_points] == [
    ("ThemeHolder.of(context)", True),
    ("context.watch<CounterNotifier>()", False),
  ]
  lookup = result.context_access_points[0]
  assert lookup.category == "inherited-widget-lookup"
  assert lookup.returns == "String"


def test_inherited_widget_descriptor():
  holder = full_app().inherited_widgets[0]
  assert holder.name == "ThemeHolder"
  assert [(p.name, p.type, p.required) for p in holder.properties] == [
    ("color", "String", False),
    ("child", "dynamic", True),
  ]
  assert holder.has_child_property is True
  assert holder.update_should_notify_implemented is True
  assert len(holder.static_accessors) == 1
  assert holder.static_accessors[0].uses_inherited_lookup is True
  assert holder.static_accessors[0].signature == "static of(context)"
  assert holder.used_in == ["CounterView"]
  assert holder.usage_count == 1
  assert holder.provided_by == ["MyApp"]


def test_change_notifier_descriptor():
  notifier = full_app().change_notifiers[0]
  assert [p.name for p in notifier.properties] == ["_count"]
  assert [g.name for g in notifier.getters] == ["count"]
  methods = {m.name: m for m in notifier.methods}
  assert set(methods) == {"increment", "reset"}
  assert methods["increment"].calls_notify is True
  assert methods["increment"].mutates_fields == ["_count"]
  assert methods["reset"].calls_notify is False
  assert notifier.consumers == ["CounterView"]


def test_provider_descriptor_and_graphs():
  result = full_app()
  provider = result.providers[0]
  assert provider.key == "Provider<CounterNotifier>"
  assert provider.value_type == "CounterNotifier"
  assert provider.create_function == "(ctx) => new CounterNotifier()"
  assert provider.child == "CounterView"
  assert provider.lazy is True
  assert provider.consumers == ["CounterView"]
  assert provider.access_modes == [AccessMode.SUBSCRIBE]

  entry = result.provider_graph["Provider<CounterNotifier>"]
  assert entry.provided_by == "MyApp"
  assert entry.consumed_by == ["CounterView"]
  assert entry.flow_path == "MyApp -> Provider<CounterNotifier> -> CounterView"

  holder = result.inherited_widget_graph["ThemeHolder"]
  assert holder.provided_value == "String"
  assert holder.flow_path == "MyApp -> ThemeHolder -> CounterView"


def test_validation_of_full_app():
  result = full_app()
  assert [(i.type, i.severity) for i in result.validation_issues] == [
    ("mutation-without-notification", Severity.WARNING),
    ("watch-without-read", Severity.INFO),
  ]
  assert result.validation_issues[0].method == "reset"


def test_requirements_summary():
  requirements = full_app().requirements
  assert requirements.requires_theme_provider is False
  assert requirements.requires_change_notifier_provider is True
  assert requirements.custom_inherited_widgets == ["ThemeHolder"]
  assert requirements.required_providers == ["Provider<CounterNotifier>"]


def test_root_falls_back_to_conventional_name():
  result = analyze(theme_holder(), counter_view(), with_classification=False)
  assert result.inherited_widgets[0].provided_by == ["MyApp"]


def test_detected_root_is_used():
  result = analyze(theme_holder(), counter_view(), function("main", stmt(call("runApp", new("Shell")))))
  assert result.inherited_widget_graph["ThemeHolder"].provided_by == "Shell"


def test_bare_inherited_widget_issues():
  result = analyze(klass("Bare", "InheritedWidget"))
  assert [(i.type, i.severity) for i in result.validation_issues] == [
    ("missing-child-property", Severity.WARNING),
    ("missing-static-accessor", Severity.WARNING),
    ("missing-update-notification", Severity.ERROR),
  ]
  assert result.inherited_widgets[0].usage_count == 0
  assert result.inherited_widget_graph["Bare"].flow_path == "MyApp -> Bare -> [no consumers]"


def test_non_static_of_is_not_an_accessor():
  holder = klass("H", "InheritedWidget", fields=[field("child")], methods=[method("of", params=["context"])])
  assert analyze(holder).inherited_widgets[0].static_accessors == []


def test_silent_notifier_issues():
  notifier = klass(
    "Cart",
    "ChangeNotifier",
    fields=[field("items", {"type": "ArrayLiteral"})],
    methods=[method("constructor"), method("add", stmt(call(member(this("items"), "add"), ident("x"))), params=["x"]), method("clear", stmt({"type": "AssignmentExpression", "left": this("items"), "right": {"type": "ArrayLiteral"}}))],
  )
  result = analyze(notifier)
  cart = result.change_notifiers[0]
  assert [m.name for m in cart.methods] == ["add", "clear"]
  assert cart.methods[0].params == ["x"]
  assert [i.type for i in result.validation_issues] == [
    "missing-notify-listeners",
    "mutation-without-notification",
    "missing-getters",
  ]


def test_zero_param_returning_method_is_getter():
  notifier = klass("N", "ChangeNotifier", methods=[method("total", ret(lit(1))), method("ping", ret())])
  n = analyze(notifier).change_notifiers[0]
  assert [g.name for g in n.getters] == ["total"]
  assert [m.name for m in n.methods] == ["ping"]


def test_provider_variants():
  view = klass(
    "View",
    "StatelessWidget",
    methods=[build(call(member("context", "read")))],
  )
  app = klass(
    "App",
    "StatelessWidget",
    methods=[
      build(
        {
          "type": "ArrayLiteral",
          "elements": [
            new("Provider<Cart>", obj(create=arrow(new("Cart")), lazy=lit(False), dispose=arrow(lit(None), "c"))),
            new("Provider", obj(create=arrow(new("Other"))), generics=["Cart"]),
            new("Provider", obj(create=arrow(new("Prefs"))), generics=["Prefs"]),
            new("Provider", obj()),
            new("ChangeNotifierProvider", obj(), generics=["Ignored"]),
          ],
        }
      )
    ],
  )
  result = analyze(view, app)
  assert [p.key for p in result.providers] == ["Provider<Cart>", "Provider<Prefs>"]

  cart, prefs = result.providers
  assert cart.create_function == "() => new Cart()"
  assert cart.lazy is False
  assert cart.dispose == "(c) => null"

  # An access without a generic counts for every provider.
  assert cart.consumers == ["View"]
  assert prefs.access_modes == [AccessMode.READ_ONCE]
  assert not [i for i in result.validation_issues if i.type == "watch-without-read"]


def test_missing_create_and_unused_provider():
  app = klass("App", "StatelessWidget", methods=[build(new("Provider", obj(), generics=["Cart"]))])
  result = analyze(app)
  assert [(i.type, i.severity) for i in result.validation_issues] == [
    ("missing-create", Severity.ERROR),
    ("unused-provider", Severity.INFO),
  ]
