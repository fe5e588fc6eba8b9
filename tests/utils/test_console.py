"""
Tests for Centralized Logging Utility and Injection Mechanics.

Verifies:
1. Singleton Proxy correctness.
2. Injection capabilities (`set_console`).
3. Standard logging wrappers and level control.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from widgetscope.utils.console import (
  LOGGER_NAME,
  console,
  get_console,
  get_logger,
  log_error,
  log_info,
  log_success,
  log_warning,
  reset_console,
  set_console,
  set_log_level,
)


def test_console_singleton_proxy():
  assert callable(console.print)
  assert hasattr(console, "export_text")
  assert isinstance(get_console(), Console)


def test_custom_console_injection():
  capture_console = Console(record=True, file=None)
  set_console(capture_console)
  set_log_level("INFO")

  log_info("Captured Log")
  log_success("Done")

  output = capture_console.export_text()
  assert "Captured Log" in output
  assert "Done" in output


def test_default_level_hides_info():
  capture_console = Console(record=True, file=None)
  set_console(capture_console)
  set_log_level("WARNING")

  log_info("Hidden")
  log_warning("Shown")
  log_error("Also shown")

  output = capture_console.export_text()
  assert "Hidden" not in output
  assert "Shown" in output
  assert "Also shown" in output


def test_reset_functionality():
  temp = Console()
  set_console(temp)
  assert get_console() is temp

  reset_console()
  assert get_console() is not temp
  assert isinstance(get_console(), Console)


def test_single_handler_after_rebinding():
  set_console(Console(record=True))
  set_console(Console(record=True))
  handlers = [h for h in logging.getLogger(LOGGER_NAME).handlers if isinstance(h, RichHandler)]
  assert len(handlers) == 1


def test_component_loggers_are_children():
  assert get_logger("state").name == f"{LOGGER_NAME}.state"
  assert get_logger().name == LOGGER_NAME


def test_proxy_getattr_delegation():
  width = console.width
  assert isinstance(width, int)
  assert width > 0
