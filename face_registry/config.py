"""
Configuration Module

Loads the YAML configuration file and merges it over the built-in defaults.
"""

import copy
import logging
from typing import Dict, Any, Optional

import yaml

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    'embedding': {
        'embedding_size': 128,
        'input_size': [160, 160],
        'normalization': False
    },
    'recognition': {
        'match_threshold': 0.6,
        'unknown_label': 'Unknown'
    },
    'storage': {
        'database_file': 'data/faces.json'
    },
    'logging': {
        'level': 'INFO',
        'log_file': None
    }
}


def get_default_config() -> Dict[str, Any]:
    """Get a fresh copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge configuration overrides into a base configuration.

    Args:
        base: Base configuration (not modified)
        overrides: Values that take precedence over the base

    Returns:
        Merged configuration dictionary
    """
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file (defaults only if None)

    Returns:
        Configuration dictionary merged over the defaults
    """
    defaults = get_default_config()
    if config_path is None:
        return defaults

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        if not isinstance(config, dict):
            raise ValueError("top-level YAML value must be a mapping")
        logger.info(f"Configuration loaded from {config_path}")
        return merge_config(defaults, config)
    except (OSError, yaml.YAMLError, ValueError) as e:
        logger.error(f"Failed to load config: {e}")
        # Return default configuration
        return defaults
