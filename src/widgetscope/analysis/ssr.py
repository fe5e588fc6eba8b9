"""
SSR Compatibility Scoring Pass.

Reads the context and state analyses (never modifies them) and produces an
:class:`SSRReport`:

1.  **Partition**: detected usage patterns split into safe and unsafe lists,
    keeping detection order.
2.  **Hydration**: what the client must re-initialize after a server render,
    sorted by order with ties kept in detection order.
3.  **Lazy Loading**: rarely used value providers and heavy observables.
4.  **Migration Plan**: see :mod:`widgetscope.analysis.migration`.
5.  **Validation and Score**: issues derived from the same inputs, then the
    bounded score and its compatibility label.
"""

from typing import List, Optional

from widgetscope.analysis.migration import HYDRATION_ACTION, effort_points, plan_migration
from widgetscope.config import AnalyzerConfig
from widgetscope.core.diagnostics import DiagnosticsChannel, null_channel
from widgetscope.enums import AccessMode, Compatibility, EstimatedEffort, LazyTargetKind, Priority, Severity
from widgetscope.schema import (
  ContextAnalysis,
  ContextUsagePattern,
  HydrationRequirement,
  LazyLoadOpportunity,
  MigrationStep,
  SSRReport,
  SSRSummary,
  StateAnalysis,
  ValidationIssue,
)

INHERITED_WIDGET_SIZE_KB = 15
NOTIFIER_MIN_SIZE_KB = 8
HEAVY_NOTIFIER_METHODS = 10

COMPATIBILITY_THRESHOLDS = (
  (85, Compatibility.FULL),
  (60, Compatibility.PARTIAL),
  (30, Compatibility.LIMITED),
)


def compute_score(unsafe: int, critical: int, browser_api: int, safe: int, steps: int) -> int:
  """
  Computes the bounded SSR compatibility score.

  Args:
      unsafe: Number of unsafe usage patterns.
      critical: Number of critical validation issues.
      browser_api: Number of browser-API validation issues.
      safe: Number of safe usage patterns.
      steps: Number of migration steps.

  Returns:
      int: Score clamped to [0, 100].
  """
  score = 100
  score -= min(unsafe * 5, 40)
  score -= critical * 15
  score -= browser_api * 10
  score += min(safe * 2, 15)
  if steps > 3:
    score += 10
  return max(0, min(100, score))


def compatibility_for(score: int) -> Compatibility:
  for threshold, label in COMPATIBILITY_THRESHOLDS:
    if score >= threshold:
      return label
  return Compatibility.NONE


def estimate_effort(steps: List[MigrationStep]) -> EstimatedEffort:
  total = effort_points(steps)
  if total <= 3:
    return EstimatedEffort.MINIMAL
  if total <= 6:
    return EstimatedEffort.MODERATE
  if total <= 9:
    return EstimatedEffort.SIGNIFICANT
  return EstimatedEffort.MAJOR_REWRITE


def size_priority(size_kb: int) -> Priority:
  if size_kb > 50:
    return Priority.HIGH
  if size_kb > 20:
    return Priority.MEDIUM
  return Priority.LOW


class SSRScorer:
  """
  Scores SSR compatibility and plans the migration.
  """

  def __init__(self, config: Optional[AnalyzerConfig] = None, diagnostics: Optional[DiagnosticsChannel] = None):
    self.config = config or AnalyzerConfig()
    self.diagnostics = diagnostics or null_channel("ssr")

  def score(self, context: ContextAnalysis, state: StateAnalysis) -> SSRReport:
    """
    Runs the full scoring pipeline.

    Args:
        context: Output of the context/provider graph builder.
        state: Output of the state linker (event handlers are used).

    Returns:
        SSRReport: Score, label, patterns, hydration, plan and issues.
    """
    self.diagnostics.start_phase("SSR Scoring", "Patterns, hydration, migration")

    safe = [p for p in context.context_access_points if p.ssr_safe]
    unsafe = [p for p in context.context_access_points if not p.ssr_safe]
    self.diagnostics.count("Safe patterns", len(safe))
    self.diagnostics.count("Unsafe patterns", len(unsafe))

    hydration = self.identify_hydration(context, state)
    lazy_loads = self.detect_lazy_loads(context)
    steps = plan_migration(unsafe, hydration, lazy_loads)
    issues = self.validate(unsafe, hydration, steps)

    critical = sum(1 for issue in issues if issue.severity == Severity.CRITICAL)
    browser_api = sum(1 for issue in issues if issue.type == "browser-api-usage")
    score = compute_score(len(unsafe), critical, browser_api, len(safe), len(steps))
    compatibility = compatibility_for(score)
    effort = estimate_effort(steps)

    self.diagnostics.trace(f"Score {score} ({compatibility.value})", effort=effort.value)
    self.diagnostics.end_phase()

    return SSRReport(
      score=score,
      compatibility=compatibility,
      safe_patterns=safe,
      unsafe_patterns=unsafe,
      hydration_requirements=hydration,
      lazy_load_opportunities=lazy_loads,
      migration_path=steps,
      validation_issues=issues,
      estimated_effort=effort,
      summary=SSRSummary(
        compatibility=compatibility,
        score=score,
        safe_patterns=len(safe),
        unsafe_patterns=len(unsafe),
        hydration_needed=len(hydration),
        migration_steps=len(steps),
        critical_issues=critical,
        effort=effort,
      ),
    )

  def identify_hydration(self, context: ContextAnalysis, state: StateAnalysis) -> List[HydrationRequirement]:
    """
    Lists client re-initialization needs.

    Observables with consumers come first (order 0), subscribed providers
    next (order 1), then each event handler not already named (order 2).
    """
    needs: List[HydrationRequirement] = []

    for notifier in context.change_notifiers:
      if notifier.consumers:
        needs.append(
          HydrationRequirement(
            dependency=notifier.name,
            reason=(
              "State needs to be re-created and listeners re-attached post-hydration "
              f"for {len(notifier.consumers)} consumer(s)"
            ),
            order=0,
            required_state=[f"{consumer}.state" for consumer in notifier.consumers],
          )
        )

    for provider in context.providers:
      if AccessMode.SUBSCRIBE in provider.access_modes:
        needs.append(
          HydrationRequirement(
            dependency=provider.key,
            reason="context.watch() subscriptions need to be re-established on client for reactive updates",
            order=1,
            required_providers=[provider.key],
          )
        )

    for handler in state.event_handlers:
      if any(need.dependency == handler.handler for need in needs):
        continue
      needs.append(
        HydrationRequirement(
          dependency=handler.handler,
          reason=f'Event handler "{handler.handler}" must be attached to DOM after hydration',
          order=2,
        )
      )

    # sorted() is stable: equal orders keep detection order.
    needs = sorted(needs, key=lambda need: need.order)
    self.diagnostics.count("Hydration requirements", len(needs))
    return needs

  def detect_lazy_loads(self, context: ContextAnalysis) -> List[LazyLoadOpportunity]:
    opportunities: List[LazyLoadOpportunity] = []

    for widget in context.inherited_widgets:
      if widget.usage_count <= 1:
        opportunities.append(
          LazyLoadOpportunity(
            target=widget.name,
            kind=LazyTargetKind.WIDGET,
            reason=f"{widget.name} is not needed until user navigates to it",
            estimated_size_kb=INHERITED_WIDGET_SIZE_KB,
            priority=size_priority(INHERITED_WIDGET_SIZE_KB),
            recommendation="Use LazyRoute or dynamic import: import(widgetPath)",
          )
        )

    for notifier in context.change_notifiers:
      if len(notifier.methods) > HEAVY_NOTIFIER_METHODS:
        size = max(NOTIFIER_MIN_SIZE_KB, 2 * len(notifier.methods))
        opportunities.append(
          LazyLoadOpportunity(
            target=notifier.name,
            kind=LazyTargetKind.NOTIFIER,
            reason=f"{notifier.name} is complex and only needed if feature is used",
            estimated_size_kb=size,
            priority=size_priority(size),
            recommendation="Lazy create in Provider: create: (context) => Provider.lazy(() => import(...))",
          )
        )

    return opportunities

  def validate(
    self,
    unsafe: List[ContextUsagePattern],
    hydration: List[HydrationRequirement],
    steps: List[MigrationStep],
  ) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []

    for pattern in unsafe:
      if pattern.category == "browser-api":
        issues.append(
          ValidationIssue(
            type="browser-api-usage",
            severity=Severity.CRITICAL,
            message=f'Browser API "{pattern.pattern}" is not available on server',
            suggestion="Wrap in kIsWeb check or use platform-agnostic alternative",
            pattern=pattern.pattern,
            subject=pattern.dependent,
            location=pattern.location,
          )
        )

    for pattern in unsafe:
      if pattern.category == "determinism":
        issues.append(
          ValidationIssue(
            type="non-deterministic",
            severity=Severity.ERROR,
            message=f'Non-deterministic operation "{pattern.pattern}" causes hydration mismatch',
            suggestion="Use seeded random or remove randomness from render path",
            pattern=pattern.pattern,
            subject=pattern.dependent,
            location=pattern.location,
          )
        )

    interactions = [p for p in unsafe if p.category == "user-interaction"]
    if interactions:
      issues.append(
        ValidationIssue(
          type="event-handlers-in-build",
          severity=Severity.WARNING,
          message=(
            f"{len(interactions)} event handlers defined in {self.config.render_method}() "
            "- they'll be recreated on every render"
          ),
          suggestion=f"Move event handler definitions to {self.config.init_method} or class level",
          count=len(interactions),
        )
      )

    if hydration and not any(step.action == HYDRATION_ACTION for step in steps):
      issues.append(
        ValidationIssue(
          type="incomplete-hydration",
          severity=Severity.ERROR,
          message=f"App has {len(hydration)} hydration needs but no hydration layer implemented",
          suggestion="Add hydration step to migration path",
          count=len(hydration),
        )
      )

    return issues
