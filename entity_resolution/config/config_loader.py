"""Configuration loader for synonyms, scoring constants and category rules"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml

from entity_resolution.models.configs import ResolutionConfig

DEFAULT_CONFIG_PATH = Path(__file__).parent / "resolution_config.yaml"


def load_config(config_path: Optional[Path] = None) -> ResolutionConfig:
    """
    Load resolution configuration from YAML file.

    Args:
        config_path: Path to configuration file. If None, uses the packaged default.

    Returns:
        ResolutionConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If config is invalid
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    return ResolutionConfig(**config_data)


@lru_cache(maxsize=1)
def get_default_config() -> ResolutionConfig:
    """Packaged configuration, loaded once"""
    return load_config()


def reload_config(config_path: Optional[Path] = None) -> ResolutionConfig:
    """
    Force reload of configuration (clears cache).

    Args:
        config_path: Path to configuration file

    Returns:
        ResolutionConfig object
    """
    get_default_config.cache_clear()
    if config_path is None:
        return get_default_config()
    return load_config(config_path)
