"""
Render-Time Pattern Catalog.

A closed, versioned table of code patterns whose presence in a render
method decides SSR safety. Each entry carries its verdict, severity and
confidence; matching is textual over the printed render body.

Bump :data:`CATALOG_VERSION` whenever an entry is added, removed or its
verdict changes, since scores are only comparable within one version.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from widgetscope.enums import AccessMode, Severity

CATALOG_VERSION = "1.0"

ACCESS_PATTERN = re.compile(r"\bcontext\.(watch|read|select)\b(?:<(\w+)>)?")

ACCESS_MODES = {
  "watch": AccessMode.SUBSCRIBE,
  "read": AccessMode.READ_ONCE,
  "select": AccessMode.SELECT,
}


@dataclass(frozen=True)
class CatalogEntry:
  """
  One row of the catalog.

  Attributes:
      pattern: Display name; may contain ``{generic}`` for access entries.
      regex: Matched against the render body text.
      category: Usage category (``provider-watch``, ``browser-api``...).
      ssr_safe: Verdict when the pattern is present.
      reason: Why the verdict holds.
      returns: Type the expression yields.
      severity: Set for unsafe entries.
      confidence: How reliable the textual match is, in [0, 1].
      migration_hint: How to make an unsafe usage SSR-safe.
      elided: Match against the text with callbacks elided (direct execution only).
      access_mode: Provider access mode the entry represents, if any.
      requirement: Context service the usage needs (``theme``, ``media-query``, ``navigator``).
  """

  pattern: str
  regex: re.Pattern
  category: str
  ssr_safe: bool
  reason: str
  returns: str = "dynamic"
  severity: Optional[Severity] = None
  confidence: float = 1.0
  migration_hint: Optional[str] = None
  elided: bool = False
  access_mode: Optional[AccessMode] = None
  requirement: Optional[str] = None


CATALOG: Tuple[CatalogEntry, ...] = (
  CatalogEntry(
    pattern="Theme.of(context)",
    regex=re.compile(r"\bTheme\.of\("),
    category="inherited-widget-lookup",
    ssr_safe=True,
    reason="Pure value access, no subscription required",
    returns="ThemeData",
    requirement="theme",
  ),
  CatalogEntry(
    pattern="context.theme()",
    regex=re.compile(r"\bcontext\.theme\b"),
    category="context-service",
    ssr_safe=True,
    reason="Service access during build",
    returns="ThemeData",
    requirement="theme",
  ),
  CatalogEntry(
    pattern="context.watch<{generic}>()",
    regex=re.compile(r"\bcontext\.watch\b"),
    category="provider-watch",
    ssr_safe=False,
    reason="Requires reactive subscription - not SSR safe",
    returns="{generic}",
    severity=Severity.ERROR,
    migration_hint="Replace with context.read() for initial SSR render, use watch() in didChangeDependencies() on client",
    access_mode=AccessMode.SUBSCRIBE,
  ),
  CatalogEntry(
    pattern="context.read<{generic}>()",
    regex=re.compile(r"\bcontext\.read\b"),
    category="provider-read",
    ssr_safe=True,
    reason="Single read at render time - SSR safe",
    returns="{generic}",
    confidence=0.95,
    access_mode=AccessMode.READ_ONCE,
  ),
  CatalogEntry(
    pattern="context.select<{generic}>()",
    regex=re.compile(r"\bcontext\.select\b"),
    category="provider-select",
    ssr_safe=False,
    reason="Selective subscription still re-renders on change; treated as unsafe until proven static",
    returns="{generic}",
    severity=Severity.WARNING,
    confidence=0.8,
    migration_hint="Read the selected value once with context.read() during SSR, subscribe on the client",
    access_mode=AccessMode.SELECT,
  ),
  CatalogEntry(
    pattern="context.mediaQuery()",
    regex=re.compile(r"\bcontext\.mediaQuery\b|\bMediaQuery\.of\("),
    category="context-service",
    ssr_safe=True,
    reason="Read-only responsive info; server renders a default viewport",
    returns="MediaQueryData",
    confidence=0.85,
    requirement="media-query",
  ),
  CatalogEntry(
    pattern="Browser APIs (window, document, localStorage)",
    regex=re.compile(r"\b(window|document|localStorage|sessionStorage)\."),
    category="browser-api",
    ssr_safe=False,
    reason="window and document objects don't exist on the server",
    severity=Severity.CRITICAL,
    migration_hint="Guard browser access behind a client-only check",
  ),
  CatalogEntry(
    pattern="Timers and intervals",
    regex=re.compile(r"\b(setTimeout|setInterval|setImmediate)\("),
    category="async-operation",
    ssr_safe=False,
    reason="Can cause unexpected behavior and performance issues during server render",
    severity=Severity.WARNING,
    confidence=0.9,
    migration_hint="Start timers in initState on the client only",
  ),
  CatalogEntry(
    pattern="Math.random()",
    regex=re.compile(r"\bMath\.random\("),
    category="determinism",
    ssr_safe=False,
    reason="Different values on server vs client cause hydration mismatch",
    returns="double",
    severity=Severity.ERROR,
    confidence=0.99,
    migration_hint="Use a seeded generator or compute the value outside the render path",
  ),
  CatalogEntry(
    pattern="Navigator.of(context)",
    regex=re.compile(r"\bNavigator\.(of|push|pop)\b"),
    category="navigation",
    ssr_safe=False,
    reason="Navigation happens on client, not on server",
    returns="NavigatorState",
    severity=Severity.WARNING,
    migration_hint="Trigger navigation from event handlers attached after hydration",
    requirement="navigator",
  ),
  CatalogEntry(
    pattern="GestureDetector and interaction handlers",
    regex=re.compile(r"\b(GestureDetector|onTap|onLongPress)\b"),
    category="user-interaction",
    ssr_safe=False,
    reason="User interactions don't exist on server",
    severity=Severity.WARNING,
    migration_hint="Event handlers don't exist during SSR, only attach after hydration on client",
  ),
  CatalogEntry(
    pattern="setState during render",
    regex=re.compile(r"\b(this|self)\.setState\("),
    category="state-management",
    ssr_safe=False,
    reason="Triggers re-render during render cycle, can cause infinite loops",
    severity=Severity.CRITICAL,
    confidence=0.95,
    migration_hint="Move the update into an event handler or a lifecycle hook",
    elided=True,
  ),
  CatalogEntry(
    pattern="State mutation via notifyListeners()",
    regex=re.compile(r"\bnotifyListeners\("),
    category="global-state-mutation",
    ssr_safe=False,
    reason="Mutations do not trigger re-render in SSR",
    returns="void",
    severity=Severity.ERROR,
    confidence=0.95,
    migration_hint="Move mutations to client-only code, wrap in a server check",
  ),
)


def access_generics(text: str) -> List[Tuple[AccessMode, Optional[str]]]:
  """
  Lists every provider access in ``text`` with its generic, if written.

  ``context.watch<Counter>()`` gives ``(SUBSCRIBE, "Counter")``;
  ``context.read()`` gives ``(READ_ONCE, None)``.
  """
  return [(ACCESS_MODES[m.group(1)], m.group(2)) for m in ACCESS_PATTERN.finditer(text)]


def first_generic(text: str, mode: AccessMode) -> Optional[str]:
  for found_mode, generic in access_generics(text):
    if found_mode == mode and generic:
      return generic
  return None


def match_catalog(text: str, elided_text: str) -> List[CatalogEntry]:
  """Returns the catalog entries present in a render body, in catalog order."""
  matched = []
  for entry in CATALOG:
    haystack = elided_text if entry.elided else text
    if entry.regex.search(haystack):
      matched.append(entry)
  return matched
