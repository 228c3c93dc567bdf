"""
Runtime Configuration Store.

Settings are read from the `[tool.unsafe_switcheroo]` table of the nearest
`pyproject.toml` and overridden by command-line values.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from unsafe_switcheroo.core.generators import GeneratorOptions
from unsafe_switcheroo.enums import UnsafeIdiom
from unsafe_switcheroo.utils.console import log_warning

if sys.version_info >= (3, 11):
  import tomllib
else:
  try:
    import tomli as tomllib
  except ImportError:
    tomllib = None  # type: ignore

TOOL_SECTION = "unsafe_switcheroo"


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the rewrite engine.
  """

  enabled_idioms: List[UnsafeIdiom] = Field(
    default_factory=lambda: list(UnsafeIdiom), description="Idioms the classifier may report."
  )
  zero_fill_value: str = Field("0", description="Element used to initialise reserved buffers.")
  validated_unwrap: str = Field(
    ".unwrap()", description="Suffix appended to validated string constructors (e.g. '?')."
  )
  markdown: bool = Field(True, description="Render previews as markdown. If False, plain text.")
  extensions: List[str] = Field(default_factory=lambda: [".rs"], description="File suffixes scanned by the CLI.")

  @field_validator("enabled_idioms", mode="before")
  @classmethod
  def validate_idioms(cls, v: Any) -> Any:
    """
    Accepts idiom names as a list or a comma separated string.

    Args:
        v: Raw value from TOML or the command line.

    Returns:
        The value as a list of names, ready for enum coercion.

    Raises:
        ValueError: If a name is not part of the catalog.
    """
    if isinstance(v, str):
      v = [item for item in v.split(",") if item.strip()]
    if not isinstance(v, (list, tuple)):
      return v

    known = {idiom.value for idiom in UnsafeIdiom}
    cleaned = []
    for item in v:
      name = item.value if isinstance(item, UnsafeIdiom) else str(item).lower().strip()
      if name not in known:
        raise ValueError(f"Unknown idiom: '{name}'. Supported idioms: {sorted(known)}")
      cleaned.append(name)
    return cleaned

  @field_validator("zero_fill_value", "validated_unwrap", mode="before")
  @classmethod
  def stringify(cls, v: Any) -> Any:
    # `zero_fill_value=0` arrives from the CLI parser as an int.
    if isinstance(v, (int, float)) and not isinstance(v, bool):
      return str(v)
    return v

  @field_validator("extensions", mode="before")
  @classmethod
  def normalize_extensions(cls, v: Any) -> Any:
    if isinstance(v, str):
      v = v.split(",")
    if isinstance(v, (list, tuple)):
      return [ext if ext.startswith(".") else f".{ext}" for ext in (str(e).strip() for e in v) if ext]
    return v

  @property
  def generator_options(self) -> GeneratorOptions:
    """
    Rendering knobs for the Code Generators.

    Returns:
        GeneratorOptions: Options derived from this config.
    """
    return GeneratorOptions(zero_fill_value=self.zero_fill_value, validated_unwrap=self.validated_unwrap)

  @classmethod
  def load(
    cls,
    overrides: Optional[Dict[str, Any]] = None,
    markdown: Optional[bool] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        overrides (Optional[Dict]): `key=value` settings from `--config`.
        markdown (Optional[bool]): Override for the preview rendering mode.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, _ = _load_toml_settings(start_dir)

    # 1. File settings, then CLI key/values
    merged = {**toml_config, **(overrides or {})}

    # 2. Explicit flags win
    if markdown is not None:
      merged["markdown"] = markdown

    unknown = sorted(set(merged) - set(cls.model_fields))
    for key in unknown:
      log_warning(f"Ignoring unknown setting '{key}'.")
      merged.pop(key)

    return cls(**merged)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory (or file) to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory definition was found in.
  """
  if not tomllib:
    return {}, None

  current = start_path.resolve()
  if current.is_file():
    current = current.parent

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError) as e:
        log_warning(f"Could not read {toml_path}: {e}")
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get(TOOL_SECTION, {}), parent

  return {}, None


def parse_cli_key_values(items: Optional[List[str]]) -> Dict[str, Any]:
  """
  Parses a list of 'key=value' strings into a dictionary.

  Types are inferred (int, float, bool, or string).

  Args:
      items (Optional[List[str]]): List of raw CLI strings directly from argparse.

  Returns:
      Dict[str, Any]: Parsed dictionary.
  """
  if not items:
    return {}

  config = {}
  for item in items:
    if "=" not in item:
      log_warning(f"Ignoring invalid config format: '{item}'. Expected 'key=value'.")
      continue

    key, val_str = item.split("=", 1)
    key = key.strip()
    val_str = val_str.strip()

    final_val: Any = val_str

    if val_str.lower() == "true":
      final_val = True
    elif val_str.lower() == "false":
      final_val = False
    else:
      try:
        if "." in val_str or "e" in val_str:
          final_val = float(val_str)
        else:
          final_val = int(val_str)
      except ValueError:
        pass

    config[key] = final_val

  return config
