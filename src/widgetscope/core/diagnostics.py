"""
Analysis Diagnostics Sink.

Records the step-by-step execution of an analysis run:
1. Phases (Classification, State Linking, Context Graph, SSR Scoring).
2. Counts reported by each pass.
3. Trace and warning messages.

A :class:`Diagnostics` object is created per run and handed to each pass.
It is purely observational: nothing recorded here ever reaches the
analysis result. Events are numbered sequentially, so two identical runs
record identical event lists.
"""

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from widgetscope.utils.console import get_logger


class DiagnosticEventType(str, Enum):
  PHASE_START = "phase_start"
  PHASE_END = "phase_end"
  COUNT = "count"
  TRACE = "trace"
  WARNING = "warning"
  FAILURE = "failure"


@dataclass
class DiagnosticEvent:
  id: int
  type: DiagnosticEventType
  component: str
  description: str
  parent_id: Optional[int] = None
  metadata: Dict[str, Any] = field(default_factory=dict)


class Diagnostics:
  """
  Ordered event log shared by the passes of one run.
  """

  def __init__(self, logger: Optional[logging.Logger] = None):
    self._events: List[DiagnosticEvent] = []
    self._active_phases: List[int] = []
    self._next_id = 1
    self._logger = logger or get_logger()

  def channel(self, component: str) -> "DiagnosticsChannel":
    """Returns a view of this sink that tags events with ``component``."""
    return DiagnosticsChannel(self, component)

  def record(
    self,
    evt_type: DiagnosticEventType,
    component: str,
    description: str,
    metadata: Optional[Dict[str, Any]] = None,
  ) -> int:
    parent = self._active_phases[-1] if self._active_phases else None
    event = DiagnosticEvent(
      id=self._next_id,
      type=evt_type,
      component=component,
      description=description,
      parent_id=parent,
      metadata=metadata or {},
    )
    self._next_id += 1
    self._events.append(event)
    self._forward(event)
    return event.id

  def start_phase(self, component: str, name: str, detail: str = "") -> int:
    """Opens a nested phase. Returns its event id."""
    phase_id = self.record(DiagnosticEventType.PHASE_START, component, name, {"detail": detail})
    self._active_phases.append(phase_id)
    return phase_id

  def end_phase(self, component: str) -> None:
    """Closes the innermost open phase. No-op when none is open."""
    if not self._active_phases:
      return
    phase_id = self._active_phases.pop()
    self.record(DiagnosticEventType.PHASE_END, component, "End Phase", {"phase": phase_id})

  @property
  def events(self) -> List[DiagnosticEvent]:
    return list(self._events)

  def export(self) -> List[Dict[str, Any]]:
    """Returns list of dicts for JSON serialization."""
    return [asdict(e) for e in self._events]

  def _forward(self, event: DiagnosticEvent) -> None:
    logger = self._logger.getChild(event.component)
    if event.type == DiagnosticEventType.WARNING:
      logger.warning(event.description)
    elif event.type == DiagnosticEventType.FAILURE:
      logger.error(event.description)
    elif event.type == DiagnosticEventType.COUNT:
      logger.info(f"{event.description}: {event.metadata.get('value')}")
    else:
      logger.debug(event.description)


class DiagnosticsChannel:
  """
  A component-scoped handle on a :class:`Diagnostics` sink.
  """

  def __init__(self, sink: Diagnostics, component: str):
    self.sink = sink
    self.component = component

  def start_phase(self, name: str, detail: str = "") -> int:
    return self.sink.start_phase(self.component, name, detail)

  def end_phase(self) -> None:
    self.sink.end_phase(self.component)

  def count(self, label: str, value: int) -> None:
    self.sink.record(DiagnosticEventType.COUNT, self.component, label, {"value": value})

  def trace(self, message: str, **metadata: Any) -> None:
    self.sink.record(DiagnosticEventType.TRACE, self.component, message, metadata)

  def warning(self, message: str, **metadata: Any) -> None:
    self.sink.record(DiagnosticEventType.WARNING, self.component, message, metadata)

  def failure(self, message: str, **metadata: Any) -> None:
    self.sink.record(DiagnosticEventType.FAILURE, self.component, message, metadata)


def null_channel(component: str) -> DiagnosticsChannel:
  """A throwaway channel for passes run outside the engine."""
  return Diagnostics().channel(component)
