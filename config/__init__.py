"""Config package facade."""

from config.loader import config_from_dict, load_config
from config.models import Config, LoggingConfig, PhotoPrismConfig, StorageConfig

__all__ = [
    "Config",
    "LoggingConfig",
    "PhotoPrismConfig",
    "StorageConfig",
    "config_from_dict",
    "load_config",
]
