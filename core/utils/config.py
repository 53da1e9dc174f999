"""
YAML helpers for config files
"""

from pathlib import Path
from typing import Any

import yaml


def load_yaml(filepath: str) -> dict[str, Any]:
    """
    Load a YAML mapping

    An empty document loads as {}.

    Args:
        filepath: Path to YAML file (relative or absolute)

    Returns:
        Dictionary with YAML data

    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If YAML is invalid or the document root is not a mapping

    Example:
        >>> config = load_yaml("config/providers/screener.yaml")
        >>> print(config["timeframes"]["primary"])
        5m
    """
    path = Path(filepath)

    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {filepath}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise yaml.YAMLError(f"Expected a mapping at the root of {filepath}")
    return data

