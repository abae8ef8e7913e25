"""
Configuration loading.

Settings come from three layers, later ones overriding earlier ones:
1. DEFAULT_CONFIG below
2. YAML config file (conf/kitgen_config.yaml by default)
3. Command line arguments that were explicitly set
"""

import copy
import logging
import os
from typing import Any, Dict, Optional

import yaml

from kitgen.errors import ConfigError
from kitgen.samples import ExistingSamplePolicy


DEFAULT_CONFIG_PATH = 'conf/kitgen_config.yaml'

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    'generation': {
        'destination_sample_directory': 'KITS',
        'combine_all': False,
        'force': False,
        'existing_sample_policy': 'skip',
        'create_card_folders': False,
    },
    'kit': {
        'firmware_version': '4.1.4',
        'earliest_compatible_firmware': '4.1.0',
    },
    'logging': {
        'level': 'INFO',
    },
}


def merge_config(base: Dict, override: Dict) -> Dict:
    """Recursively merge `override` into a copy of `base`."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> Dict:
    """
    Load the configuration.

    Args:
        config_path: YAML file to load. When None, the default path is used
            if it exists and the built-in defaults otherwise.

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: If an explicit file is missing or a file is not valid YAML
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if not os.path.exists(path):
        if config_path is not None:
            raise ConfigError(f"Config file not found: {config_path}")
        logging.debug(f"No config file at {path}, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            file_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot load config file: {path}", e) from e

    if not isinstance(file_config, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")

    return merge_config(DEFAULT_CONFIG, file_config)


def update_config_from_args(cfg: Dict, args_dict: Dict[str, Any], section: str) -> None:
    """Set every argument that is not None into `cfg[section]`."""
    for k, v in args_dict.items():
        if v is not None:
            if section not in cfg:
                cfg[section] = {}
            cfg[section][k] = v


def validate_config(cfg: Dict) -> None:
    """
    Check values that cannot be validated by argparse.

    Raises:
        ConfigError: On an invalid policy or log level
    """
    generation = cfg.get('generation', {})
    ExistingSamplePolicy.parse(generation.get('existing_sample_policy', 'skip'))

    level = str(cfg.get('logging', {}).get('level', 'INFO')).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"Invalid log level: '{level}'")
