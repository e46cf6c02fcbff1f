"""Configuration loading utilities.

Supports YAML and JSON configuration files. Files may use either the
CamelCase option keys (``ContainerTag``) or the snake_case field names
(``container_tag``); unrecognized keys are ignored.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from freighter_cmd.core.schemas import ExecutionConfig


def load_config(path: Path | str, overrides: Mapping[str, Any] | None = None) -> ExecutionConfig:
    """Load and validate an execution configuration file.

    Args:
        path: Path to YAML or JSON configuration file
        overrides: Options applied on top of the file contents

    Returns:
        Validated ExecutionConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported or the top level is not a mapping
        pydantic.ValidationError: If config is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, encoding="utf-8") as f:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping at the top level")

    return ExecutionConfig.from_options({**data, **(overrides or {})})


def parse_option_pairs(pairs: list[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` strings into an option mapping.

    Raises:
        ValueError: If an entry has no '=' or an empty key
    """
    options: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid option '{pair}', expected KEY=VALUE")
        options[key.strip()] = value
    return options
