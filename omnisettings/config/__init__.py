"""
Configuration Management

Flat properties file loading and the resolver's own pydantic models.
"""

from omnisettings.config.settings import (
    BootstrapSettings,
    ResolverOptions,
    get_options,
    reset_options,
)
from omnisettings.config.loader import ConfigLoader, PropertiesFormatError

__all__ = [
    "BootstrapSettings",
    "ResolverOptions",
    "get_options",
    "reset_options",
    "ConfigLoader",
    "PropertiesFormatError",
]
