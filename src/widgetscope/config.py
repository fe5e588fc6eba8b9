"""
Analyzer Configuration Store.

Holds the reserved vocabulary of the widget language (base class names,
hook names, framework calls) so that no analysis pass hard-codes them, plus
the runtime switches of the engine.
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator


class AnalyzerConfig(BaseModel):
  """
  Configuration container for the analysis engine.
  """

  # Widget classification
  stateless_base: str = Field("StatelessWidget", description="Parent type of stateless widgets (exact match).")
  stateful_base: str = Field("StatefulWidget", description="Parent type of stateful widgets (exact match).")
  state_prefix: str = Field("State", description="Prefix of state-holder parent types, e.g. 'State<Counter>'.")
  create_state: str = Field("createState", description="Factory method of a stateful widget.")

  # State tracking
  set_state: str = Field("setState", description="The sanctioned state-update call.")
  receivers: List[str] = Field(default_factory=lambda: ["this", "self"], description="Names of the instance receiver.")
  super_name: str = Field("super", description="Identifier used for parent-class calls.")
  init_method: str = Field("initState", description="Init lifecycle hook.")
  dispose_method: str = Field("dispose", description="Dispose lifecycle hook.")
  update_method: str = Field("didUpdateWidget", description="Post-update lifecycle hook.")
  render_method: str = Field("build", description="Render method.")
  constructor_name: str = Field("constructor", description="Name of the constructor method.")

  # Context / provider detection
  value_provider_token: str = Field("InheritedWidget", description="Parent-type token of value providers.")
  accessor_name: str = Field("of", description="Static accessor of a value provider.")
  should_notify: str = Field("updateShouldNotify", description="Change comparison of a value provider.")
  observable_base: str = Field("ChangeNotifier", description="Parent type of observables (exact match).")
  notify_call: str = Field("notifyListeners", description="Notify primitive of an observable.")
  provider_token: str = Field("Provider", description="Callee prefix of DI wrapper constructions.")
  context_name: str = Field("context", description="Name of the build context parameter.")

  # Entry point
  entry_function: str = Field("main", description="Name of the entry function.")
  bootstrap_call: str = Field("runApp", description="Bootstrap call inside the entry function.")
  root_component: str = Field("MyApp", description="Conventional root component, used when none is detected.")

  # Runtime
  strict_mode: bool = Field(False, description="If True, raise AnalysisError when structural errors are found.")
  log_level: str = Field("WARNING", description="Level for the widgetscope loggers.")

  @field_validator("log_level")
  @classmethod
  def validate_log_level(cls, v: str) -> str:
    """
    Normalizes the level name.

    Raises:
        ValueError: If the name is not a standard logging level.
    """
    level = v.upper().strip()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
      raise ValueError(f"Unknown log level: '{v}'")
    return level

  @property
  def lifecycle_methods(self) -> Tuple[str, str, str, str]:
    """The reserved lifecycle names in init, dispose, post-update, render order."""
    return (self.init_method, self.dispose_method, self.update_method, self.render_method)

  @classmethod
  def load(cls, search_path: Optional[Path] = None, **overrides: Any) -> "AnalyzerConfig":
    """
    Loads configuration from pyproject.toml and applies overrides.

    Values from ``[tool.widgetscope]`` in the nearest pyproject.toml are used
    first; keyword overrides that are not None replace them.

    Args:
        search_path (Optional[Path]): Directory to start searching for TOML config.
        **overrides: Field values that take precedence over the file.

    Returns:
        AnalyzerConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, _ = _load_toml_settings(start_dir)

    merged = {k: v for k, v in toml_config.items() if k in cls.model_fields}
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return cls(**merged)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches parents for 'pyproject.toml' and extracts the tool section.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      return data.get("tool", {}).get("widgetscope", {}), parent

  return {}, None
