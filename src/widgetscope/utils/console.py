"""
Central Logging and Console Utilities.

All widgetscope output goes through the standard `logging` library under the
``widgetscope`` logger namespace, rendered by `rich`.

The Rich Console sits behind a proxy so that the destination (stdout, a file,
or an in-memory buffer for tests) can be swapped at runtime via
`set_console` without re-importing modules that hold the ``console`` object.

Attributes:
    console (_ConsoleProxy): A stable reference to the active Rich Console.
    LOGGER_NAME (str): Root of the package logger hierarchy.
"""

import logging
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

LOGGER_NAME = "widgetscope"

# Between INFO and WARNING
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "widget": "bold blue",
    "code": "bold magenta",
  }
)


class _ConsoleProxy:
  """
  A Proxy wrapper around `rich.console.Console`.

  Printing is forwarded to the backend Console. Swapping the backend also
  re-binds the RichHandler of the ``widgetscope`` logger to it.

  Attributes:
      _backend (Console): The active Rich Console instance.
  """

  def __init__(self) -> None:
    self._backend: Console = Console(theme=_THEME)
    self._configure_logging()

  def set_backend(self, new_console: Console) -> None:
    """
    Injects a new Console backend and updates logging handlers.

    Args:
        new_console (Console): The new Rich Console instance to use.
    """
    self._backend = new_console
    self._configure_logging()

  def reset(self) -> None:
    """Resets the proxy to a fresh standard output console."""
    self._backend = Console(theme=_THEME)
    self._configure_logging()

  @property
  def backend(self) -> Console:
    return self._backend

  def _configure_logging(self) -> None:
    """
    Binds the package logger to the current backend console.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
      if isinstance(handler, RichHandler):
        logger.removeHandler(handler)

    rich_handler = RichHandler(
      console=self._backend,
      show_time=False,
      omit_repeated_times=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
    logger.addHandler(rich_handler)
    logger.propagate = False
    if logger.level == logging.NOTSET:
      logger.setLevel(logging.WARNING)

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def export_text(self, **kwargs: Any) -> str:
    """
    Forwards `export_text` (useful for log capturing).

    Returns:
        str: The captured text output.
    """
    return self._backend.export_text(**kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


# Modules import this object; the backend behind it can be replaced.
console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Injects a specific console instance for both printing and logging.

  Args:
      new_console (Console): The configured Rich console to use.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Resets logging and console to standard output."""
  console.reset()


def get_console() -> Console:
  """
  Retrieves the currently active console backend.

  Returns:
      Console: The active Rich Console.
  """
  return console.backend


def get_logger(component: Optional[str] = None) -> logging.Logger:
  """
  Returns the package logger, or a child logger for one component.

  Args:
      component (Optional[str]): Suffix such as ``"state"`` gives ``widgetscope.state``.
  """
  if component:
    return logging.getLogger(f"{LOGGER_NAME}.{component}")
  return logging.getLogger(LOGGER_NAME)


def set_log_level(level: str) -> None:
  """Sets the level of the package logger by name (``"INFO"``, ``"DEBUG"``...)."""
  get_logger().setLevel(getattr(logging, level.upper(), logging.WARNING))


def log_info(msg: str) -> None:
  get_logger().info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  get_logger().log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  get_logger().warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  get_logger().error(f"❌ {msg}", extra={"markup": True})
