"""
Tests for the SSR Migration Planner.
"""

from widgetscope.analysis.migration import effort_points, plan_migration
from widgetscope.enums import Effort, LazyTargetKind, Priority
from widgetscope.schema import ContextUsagePattern, HydrationRequirement, LazyLoadOpportunity
from widgetscope.tree.nodes import SourceLocation


def unsafe(pattern, category, line=None):
  return ContextUsagePattern(
    pattern=pattern,
    category=category,
    ssr_safe=False,
    reason="r",
    location=SourceLocation(line=line) if line else None,
  )


WATCH = unsafe("context.watch<Cart>()", "provider-watch", line=12)
MUTATION = unsafe("State mutation via notifyListeners()", "global-state-mutation")
BROWSER = unsafe("Browser APIs (window, document, localStorage)", "browser-api")
HYDRATION = HydrationRequirement(dependency="Cart", reason="r")
LAZY = LazyLoadOpportunity(
  target="Big", kind=LazyTargetKind.NOTIFIER, reason="r", estimated_size_kb=30, priority=Priority.MEDIUM, recommendation="x"
)


def test_only_testing_step_without_triggers():
  steps = plan_migration([], [], [])
  assert len(steps) == 1
  assert steps[0].step == 1
  assert steps[0].action == "Set up SSR testing pipeline"
  assert steps[0].priority == Priority.CRITICAL


def test_all_triggers_in_fixed_order():
  steps = plan_migration([WATCH, MUTATION, BROWSER], [HYDRATION], [LAZY])
  assert [s.step for s in steps] == [1, 2, 3, 4, 5, 6]
  assert [s.action for s in steps] == [
    "Replace context.watch() with context.read() for SSR",
    "Move notifyListeners() calls to client-only code",
    "Create hydration layer to re-subscribe listeners post-render",
    "Wrap browser-specific APIs in kIsWeb checks",
    "Implement code splitting for lazy-loaded widgets",
    "Set up SSR testing pipeline",
  ]
  assert [(s.effort, s.priority) for s in steps] == [
    (Effort.MEDIUM, Priority.HIGH),
    (Effort.LOW, Priority.HIGH),
    (Effort.HIGH, Priority.CRITICAL),
    (Effort.LOW, Priority.MEDIUM),
    (Effort.MEDIUM, Priority.LOW),
    (Effort.MEDIUM, Priority.CRITICAL),
  ]
  assert effort_points(steps) == 11


def test_numbering_is_over_emitted_steps():
  steps = plan_migration([BROWSER], [], [])
  assert [(s.step, s.action) for s in steps] == [
    (1, "Wrap browser-specific APIs in kIsWeb checks"),
    (2, "Set up SSR testing pipeline"),
  ]
  assert steps[0].count == 1
  assert steps[0].description == "Found 1 browser API calls"


def test_step_carries_locations():
  steps = plan_migration([WATCH, WATCH], [], [])
  assert steps[0].count == 2
  assert [loc.line for loc in steps[0].locations] == [12, 12]
  assert "context.read<CounterNotifier>()" in steps[0].example
