"""YAML configuration loading.

Provides safe YAML file loading using ``yaml.safe_load`` so untrusted YAML
cannot instantiate arbitrary Python objects. Used by
[BaseService.from_yaml()][uns.core.base_service.BaseService.from_yaml] and
[StaticRegistry.from_yaml()][uns.registries.static.StaticRegistry.from_yaml].

Examples:
    ```python
    from uns.core.yaml import load_yaml

    config = load_yaml("config/services/resolver.yaml")
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from uns.exceptions import ConfigurationError


def load_yaml(config_path: str | Path) -> dict[str, Any]:
    """Load and parse a YAML configuration file into a mapping.

    Args:
        config_path: Path to the YAML file (absolute or relative).

    Returns:
        Parsed configuration as a nested dictionary. Returns an empty dict
        if the file exists but contains no data.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the file is not valid YAML or its top level
            is not a mapping.

    Warning:
        The structure of the returned dictionary is not validated; pass it
        to a Pydantic model (e.g.
        [ResolverConfig][uns.services.resolver.ResolverConfig]).
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {config_path} must contain a mapping, got {type(data).__name__}"
        )
    return data
