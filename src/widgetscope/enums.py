"""
Enumerations for widgetscope.

String-valued so that they serialize as their plain value in results.
"""

from enum import Enum


class WidgetRole(str, Enum):
  """Role of a top-level class, decided by its declared parent type."""

  STATELESS = "stateless"
  STATEFUL = "stateful"
  STATE = "state"
  COMPONENT = "component"
  PLAIN = "plain"


class Severity(str, Enum):
  """Severity of a validation issue or catalog entry."""

  CRITICAL = "critical"
  ERROR = "error"
  WARNING = "warning"
  INFO = "info"


class AccessMode(str, Enum):
  """How a render method reads a provided value."""

  SUBSCRIBE = "subscribe"  # context.watch
  READ_ONCE = "read-once"  # context.read
  SELECT = "select"  # context.select


class Compatibility(str, Enum):
  """Overall SSR compatibility label."""

  FULL = "full"
  PARTIAL = "partial"
  LIMITED = "limited"
  NONE = "none"


class Priority(str, Enum):
  CRITICAL = "critical"
  HIGH = "high"
  MEDIUM = "medium"
  LOW = "low"


class Effort(str, Enum):
  HIGH = "high"
  MEDIUM = "medium"
  LOW = "low"


class EstimatedEffort(str, Enum):
  """Total migration effort, bucketed from the summed step efforts."""

  MINIMAL = "minimal"
  MODERATE = "moderate"
  SIGNIFICANT = "significant"
  MAJOR_REWRITE = "major-rewrite"


class LifecycleKind(str, Enum):
  """The four lifecycle hooks a state class may override."""

  INIT = "init"
  DISPOSE = "dispose"
  POST_UPDATE = "post-update"
  RENDER = "render"


class LazyTargetKind(str, Enum):
  WIDGET = "widget"
  NOTIFIER = "notifier"
