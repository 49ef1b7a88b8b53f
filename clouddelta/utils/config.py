"""
YAML configuration loading.

Values from a config file are merged over ``DEFAULT_CONFIG`` section by
section, so a file only needs the keys it changes.
"""

import copy
import yaml
from pathlib import Path
from typing import Optional, Union

DEFAULT_CONFIG = {
    'compression': {
        'method': 'huffman',
        'verify': False,
    },
    'benchmark': {
        'patterns': ['squared', 'sin', 'linear', 'random'],
        'sizes': [100, 1000, 10000],
        'seed': 42,
        'runs': 3,
        'resolution': 2 ** -12,
    },
}


def _merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Union[str, Path]] = None) -> dict:
    """
    Loads a YAML config and fills in defaults.

    Args:
        config_path: Path to a YAML file, or None for defaults only

    Returns:
        Complete configuration dictionary

    Raises:
        FileNotFoundError: If ``config_path`` does not exist
        ValueError: If the file does not hold a mapping
    """
    if config_path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping at the top level")

    return _merge(DEFAULT_CONFIG, loaded)
