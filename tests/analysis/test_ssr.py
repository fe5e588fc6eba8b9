"""
Tests for the SSR Compatibility Scorer.
"""

import pytest

from widgetscope.analysis.migration import plan_migration
from widgetscope.analysis.ssr import SSRScorer, compatibility_for, compute_score, estimate_effort, size_priority
from widgetscope.enums import AccessMode, Compatibility, EstimatedEffort, LazyTargetKind, Priority, Severity
from widgetscope.schema import (
  ChangeNotifierDescriptor,
  ContextAnalysis,
  ContextUsagePattern,
  EventHandlerDescriptor,
  HydrationRequirement,
  InheritedWidgetDescriptor,
  NotifierMethod,
  ProviderDescriptor,
  StateAnalysis,
)


def usage(pattern, category, safe=False):
  return ContextUsagePattern(pattern=pattern, category=category, ssr_safe=safe, reason="r", dependent="View")


WATCH = usage("context.watch<Cart>()", "provider-watch")
READ = usage("context.read<Cart>()", "provider-read", safe=True)
BROWSER = usage("Browser APIs (window, document, localStorage)", "browser-api")
RANDOM = usage("Math.random()", "determinism")
TAP = usage("GestureDetector and interaction handlers", "user-interaction")


@pytest.fixture
def scorer(config):
  return SSRScorer(config)


def test_score_starts_at_hundred():
  assert compute_score(0, 0, 0, 0, 0) == 100


def test_unsafe_penalty_is_capped():
  assert compute_score(3, 0, 0, 0, 0) == 85
  assert compute_score(8, 0, 0, 0, 0) == 60
  assert compute_score(50, 0, 0, 0, 0) == 60


def test_safe_bonus_is_capped():
  assert compute_score(8, 0, 0, 3, 0) == 66
  assert compute_score(8, 0, 0, 100, 0) == 75


def test_score_is_clamped():
  assert compute_score(25, 12, 5, 0, 0) == 0
  assert compute_score(0, 0, 0, 20, 6) == 100


def test_long_plan_alone_keeps_full_compatibility():
  score = compute_score(0, 0, 0, 0, 4)
  assert score == 100
  assert compatibility_for(score) == Compatibility.FULL


@pytest.mark.parametrize(
  "score, label",
  [
    (100, Compatibility.FULL),
    (85, Compatibility.FULL),
    (84, Compatibility.PARTIAL),
    (60, Compatibility.PARTIAL),
    (59, Compatibility.LIMITED),
    (30, Compatibility.LIMITED),
    (29, Compatibility.NONE),
    (0, Compatibility.NONE),
  ],
)
def test_compatibility_thresholds(score, label):
  assert compatibility_for(score) == label


def test_effort_buckets():
  assert estimate_effort(plan_migration([], [], [])) == EstimatedEffort.MINIMAL
  assert estimate_effort(plan_migration([WATCH, BROWSER], [], [])) == EstimatedEffort.MODERATE
  hydration = [HydrationRequirement(dependency="Cart", reason="r")]
  assert estimate_effort(plan_migration([WATCH, BROWSER], hydration, [])) == EstimatedEffort.SIGNIFICANT


def test_size_priority():
  assert size_priority(15) == Priority.LOW
  assert size_priority(22) == Priority.MEDIUM
  assert size_priority(60) == Priority.HIGH


def test_watch_lowers_score(scorer):
  with_watch = scorer.score(ContextAnalysis(context_access_points=[WATCH]), StateAnalysis())
  without = scorer.score(ContextAnalysis(), StateAnalysis())
  assert without.score == 100
  assert with_watch.score <= without.score - 5
  assert with_watch.unsafe_patterns == [WATCH]
  assert with_watch.migration_path[0].action == "Replace context.watch() with context.read() for SSR"


def test_partition_keeps_detection_order(scorer):
  report = scorer.score(ContextAnalysis(context_access_points=[TAP, READ, WATCH]), StateAnalysis())
  assert report.safe_patterns == [READ]
  assert report.unsafe_patterns == [TAP, WATCH]


def test_validation_issues_and_summary(scorer):
  context = ContextAnalysis(context_access_points=[BROWSER, RANDOM, TAP, TAP])
  report = scorer.score(context, StateAnalysis())

  assert [(i.type, i.severity) for i in report.validation_issues] == [
    ("browser-api-usage", Severity.CRITICAL),
    ("non-deterministic", Severity.ERROR),
    ("event-handlers-in-build", Severity.WARNING),
  ]
  assert report.validation_issues[0].subject == "View"
  assert report.validation_issues[2].count == 2
  assert "build()" in report.validation_issues[2].message

  # 100 - 4*5 - 15 - 10
  assert report.score == 55
  assert report.compatibility == Compatibility.LIMITED
  assert [s.action for s in report.migration_path] == [
    "Wrap browser-specific APIs in kIsWeb checks",
    "Set up SSR testing pipeline",
  ]
  assert report.estimated_effort == EstimatedEffort.MINIMAL
  assert report.summary.critical_issues == 1
  assert report.summary.unsafe_patterns == 4
  assert report.summary.migration_steps == 2


def test_hydration_order(scorer):
  context = ContextAnalysis(
    change_notifiers=[
      ChangeNotifierDescriptor(name="Cart", consumers=["CartView", "Badge"]),
      ChangeNotifierDescriptor(name="Idle"),
    ],
    providers=[
      ProviderDescriptor(key="Provider<Cart>", value_type="Cart", access_modes=[AccessMode.SUBSCRIBE]),
      ProviderDescriptor(key="Provider<Prefs>", value_type="Prefs", access_modes=[AccessMode.READ_ONCE]),
      ProviderDescriptor(key="Provider<User>", value_type="User", access_modes=[AccessMode.SUBSCRIBE]),
    ],
  )
  state = StateAnalysis(
    event_handlers=[
      EventHandlerDescriptor(event="onTap", handler="add"),
      EventHandlerDescriptor(event="onLongPress", handler="add"),
      EventHandlerDescriptor(event="onTap", handler="Cart"),
    ]
  )

  report = scorer.score(context, state)
  hydration = report.hydration_requirements
  assert [(h.dependency, h.order) for h in hydration] == [
    ("Cart", 0),
    ("Provider<Cart>", 1),
    ("Provider<User>", 1),
    ("add", 2),
  ]
  assert hydration[0].required_state == ["CartView.state", "Badge.state"]
  assert hydration[1].required_providers == ["Provider<Cart>"]
  assert report.migration_path[0].action == "Create hydration layer to re-subscribe listeners post-render"
  assert report.migration_path[0].count == 4
  assert not [i for i in report.validation_issues if i.type == "incomplete-hydration"]


def test_incomplete_hydration_guard(scorer):
  issues = scorer.validate([], [HydrationRequirement(dependency="Cart", reason="r")], [])
  assert [(i.type, i.severity, i.count) for i in issues] == [("incomplete-hydration", Severity.ERROR, 1)]


def test_lazy_loads(scorer):
  many = [NotifierMethod(name=f"m{i}") for i in range(11)]
  huge = [NotifierMethod(name=f"m{i}") for i in range(30)]
  context = ContextAnalysis(
    inherited_widgets=[
      InheritedWidgetDescriptor(name="Rare", parent_type="InheritedWidget", usage_count=1),
      InheritedWidgetDescriptor(name="Busy", parent_type="InheritedWidget", usage_count=4),
    ],
    change_notifiers=[
      ChangeNotifierDescriptor(name="Small", methods=many[:3]),
      ChangeNotifierDescriptor(name="Medium", methods=many),
      ChangeNotifierDescriptor(name="Huge", methods=huge),
    ],
  )

  lazy = scorer.detect_lazy_loads(context)
  assert [(o.target, o.kind, o.estimated_size_kb, o.priority) for o in lazy] == [
    ("Rare", LazyTargetKind.WIDGET, 15, Priority.LOW),
    ("Medium", LazyTargetKind.NOTIFIER, 22, Priority.MEDIUM),
    ("Huge", LazyTargetKind.NOTIFIER, 60, Priority.HIGH),
  ]
