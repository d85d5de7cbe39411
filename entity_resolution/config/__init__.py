"""Resolution configuration"""

from entity_resolution.config.config_loader import (
    DEFAULT_CONFIG_PATH,
    get_default_config,
    load_config,
    reload_config,
)

__all__ = ["DEFAULT_CONFIG_PATH", "load_config", "get_default_config", "reload_config"]
