"""
Reading and writing JSON or YAML documents.

The format is chosen from the file suffix: ``.yaml``/``.yml`` use PyYAML, every
other suffix is treated as JSON. Read and parse failures are reported as
:class:`~pasim.simulators.types.ConfigurationError`.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from pasim.simulators.types import ConfigurationError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = ('.yaml', '.yml')


def is_yaml_path(path: Union[str, Path]) -> bool:
    return Path(path).suffix.lower() in YAML_SUFFIXES


def read_document(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a mapping from a JSON or YAML file.

    Args:
        path: File to read

    Returns:
        Parsed top-level mapping

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or its root is not a mapping
    """
    path = Path(path)
    try:
        with open(path, 'r') as f:
            if is_yaml_path(path):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}") from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot parse {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} is malformed: root should be a mapping")
    logger.debug(f"Read document {path}")
    return data


def write_document(path: Union[str, Path], data: Dict[str, Any]) -> None:
    """Write a mapping as JSON (indent 2) or YAML, creating parent directories."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            if is_yaml_path(path):
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(data, f, indent=2)
                f.write('\n')
    except OSError as exc:
        raise ConfigurationError(f"Cannot write {path}: {exc}") from exc
    logger.debug(f"Wrote document {path}")
