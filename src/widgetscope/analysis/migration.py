"""
SSR Migration Planner.

Turns the scorer's findings into an ordered checklist. Each template is
emitted only when its trigger holds; emitted steps are numbered 1..n in
template order, and the testing step always closes the plan.
"""

from dataclasses import dataclass
from typing import Callable, List

from widgetscope.enums import Effort, Priority
from widgetscope.schema import ContextUsagePattern, HydrationRequirement, LazyLoadOpportunity, MigrationStep

EFFORT_POINTS = {Effort.LOW: 1, Effort.MEDIUM: 2, Effort.HIGH: 3}


@dataclass
class PlanInputs:
  unsafe_patterns: List[ContextUsagePattern]
  hydration: List[HydrationRequirement]
  lazy_loads: List[LazyLoadOpportunity]


@dataclass(frozen=True)
class StepTemplate:
  action: str
  example: str
  effort: Effort
  priority: Priority
  select: Callable[[PlanInputs], list]
  describe: Callable[[int], str]
  always: bool = False


def _unsafe_named(token: str) -> Callable[[PlanInputs], list]:
  return lambda inputs: [p for p in inputs.unsafe_patterns if token in p.pattern]


def _unsafe_in_category(category: str) -> Callable[[PlanInputs], list]:
  return lambda inputs: [p for p in inputs.unsafe_patterns if p.category == category]


STEP_TEMPLATES = (
  StepTemplate(
    action="Replace context.watch() with context.read() for SSR",
    example=(
      "// Before (not SSR safe):\n"
      "final counter = context.watch<CounterNotifier>();\n\n"
      "// After (SSR safe):\n"
      "final counter = context.read<CounterNotifier>();\n"
      "// Subscribe to changes in didChangeDependencies() instead (client-only)"
    ),
    effort=Effort.MEDIUM,
    priority=Priority.HIGH,
    select=_unsafe_named("watch"),
    describe=lambda n: f"Found {n} context.watch() calls that need refactoring",
  ),
  StepTemplate(
    action="Move notifyListeners() calls to client-only code",
    example=(
      "// Before (not SSR safe):\n"
      "counter.increment();\n\n"
      "// After (SSR safe):\n"
      "if (kIsWeb) {  // Only on client\n"
      "  counter.increment();\n"
      "}"
    ),
    effort=Effort.LOW,
    priority=Priority.HIGH,
    select=_unsafe_named("mutation"),
    describe=lambda n: f"Found {n} state mutations that don't work in SSR",
  ),
  StepTemplate(
    action="Create hydration layer to re-subscribe listeners post-render",
    example=(
      "// After runApp():\n"
      "if (kIsWeb) {\n"
      "  // Re-create listeners, reattach subscriptions\n"
      "  hydrate(app);\n"
      "}"
    ),
    effort=Effort.HIGH,
    priority=Priority.CRITICAL,
    select=lambda inputs: list(inputs.hydration),
    describe=lambda n: f"App requires hydration for {n} dependencies",
  ),
  StepTemplate(
    action="Wrap browser-specific APIs in kIsWeb checks",
    example=(
      "// Before:\n"
      "final stored = window.localStorage.getItem('key');\n\n"
      "// After:\n"
      "final stored = kIsWeb ? window.localStorage.getItem('key') : null;"
    ),
    effort=Effort.LOW,
    priority=Priority.MEDIUM,
    select=_unsafe_in_category("browser-api"),
    describe=lambda n: f"Found {n} browser API calls",
  ),
  StepTemplate(
    action="Implement code splitting for lazy-loaded widgets",
    example=(
      "// Use dynamic routes\n"
      "final route = await LazyRoute.create(\n"
      "  () => import('pages/DetailPage.dart')\n"
      ");"
    ),
    effort=Effort.MEDIUM,
    priority=Priority.LOW,
    select=lambda inputs: list(inputs.lazy_loads),
    describe=lambda n: f"{n} opportunities identified",
  ),
  StepTemplate(
    action="Set up SSR testing pipeline",
    example=(
      "// Test SSR output matches CSR:\n"
      "const serverHtml = await renderAppOnServer();\n"
      "const clientHtml = await renderAppOnClient();\n"
      "assert(serverHtml === clientHtml, 'SSR/CSR mismatch');"
    ),
    effort=Effort.MEDIUM,
    priority=Priority.CRITICAL,
    select=lambda inputs: [],
    describe=lambda n: "Render app on server, verify HTML structure",
    always=True,
  ),
)

HYDRATION_ACTION = STEP_TEMPLATES[2].action


def plan_migration(
  unsafe_patterns: List[ContextUsagePattern],
  hydration: List[HydrationRequirement],
  lazy_loads: List[LazyLoadOpportunity],
) -> List[MigrationStep]:
  """
  Builds the ordered migration checklist.

  Args:
      unsafe_patterns: Usages judged SSR-unsafe.
      hydration: Sorted hydration requirements.
      lazy_loads: Lazy-load candidates.

  Returns:
      List[MigrationStep]: Emitted steps numbered sequentially from 1.
  """
  inputs = PlanInputs(unsafe_patterns, hydration, lazy_loads)
  steps: List[MigrationStep] = []
  for template in STEP_TEMPLATES:
    matched = template.select(inputs)
    if not matched and not template.always:
      continue
    locations = [m.location for m in matched if isinstance(m, ContextUsagePattern) and m.location is not None]
    steps.append(
      MigrationStep(
        step=len(steps) + 1,
        action=template.action,
        description=template.describe(len(matched)),
        example=template.example,
        effort=template.effort,
        priority=template.priority,
        locations=locations,
        count=len(matched),
      )
    )
  return steps


def effort_points(steps: List[MigrationStep]) -> int:
  return sum(EFFORT_POINTS[step.effort] for step in steps)
