"""
Tests for the render-time pattern catalog.
"""

from widgetscope.analysis.catalog import CATALOG, CATALOG_VERSION, access_generics, first_generic, match_catalog
from widgetscope.enums import AccessMode, Severity


def categories(text, elided_text=None):
  return [e.category for e in match_catalog(text, text if elided_text is None else elided_text)]


def test_catalog_is_versioned_and_closed():
  assert CATALOG_VERSION == "1.0"
  patterns = [e.pattern for e in CATALOG]
  assert len(patterns) == len(set(patterns))
  for entry in CATALOG:
    if not entry.ssr_safe:
      assert entry.severity is not None
      assert entry.migration_hint
    assert 0.0 <= entry.confidence <= 1.0


def test_access_modes():
  assert categories("context.watch<Cart>()") == ["provider-watch"]
  assert categories("context.read<Cart>()") == ["provider-read"]
  assert categories("context.select<Cart, int>((c) => c.n)") == ["provider-select"]
  assert categories("context.watcher.go()") == []


def test_browser_and_determinism():
  assert categories("window.localStorage.getItem('k')") == ["browser-api"]
  assert categories("var x = Math.random();") == ["determinism"]
  assert categories("setTimeout(() => ..., 10)") == ["async-operation"]


def test_context_services():
  assert categories("Theme.of(context).primaryColor") == ["inherited-widget-lookup"]
  assert categories("MediaQuery.of(context).size") == ["context-service"]
  assert categories("Navigator.of(context).push(route)") == ["navigation"]


def test_set_state_only_counts_when_executed_directly():
  text = "new GestureDetector({ onTap: () => this.setState(() => {}) })"
  elided = "new GestureDetector({ onTap: () => ... })"
  assert categories(text, elided) == ["user-interaction"]
  assert categories("{ this.setState(() => {}); }") == ["state-management"]


def test_notify_is_global_mutation():
  entries = match_catalog("counter.notifyListeners();", "counter.notifyListeners();")
  assert [e.category for e in entries] == ["global-state-mutation"]
  assert entries[0].severity == Severity.ERROR
  assert "mutation" in entries[0].pattern


def test_access_generics():
  text = "context.read<Cart>(); context.watch(); context.watch<Prefs>();"
  assert access_generics(text) == [
    (AccessMode.READ_ONCE, "Cart"),
    (AccessMode.SUBSCRIBE, None),
    (AccessMode.SUBSCRIBE, "Prefs"),
  ]
  assert first_generic(text, AccessMode.SUBSCRIBE) == "Prefs"
  assert first_generic(text, AccessMode.SELECT) is None
