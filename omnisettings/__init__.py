"""
omnisettings Package

Layered, stage-aware application settings resolved once into an
immutable mapping, with typed accessors on top.
"""

__version__ = "0.1.0"
__author__ = "omnisettings Team"

from typing import Iterable, Optional, Union

from omnisettings.core import (
    PropertiesLoader,
    LoaderDescriptor,
    SettingsError,
    FatalConfigError,
    BootstrapError,
    BundleError,
    ExternalSettingsError,
    LoaderError,
    SettingParseError,
)
from omnisettings.config import BootstrapSettings, ConfigLoader, ResolverOptions, get_options
from omnisettings.loaders import (
    LoaderChain,
    EnvironmentPropertiesLoader,
    FilePropertiesLoader,
    MappingPropertiesLoader,
)
from omnisettings.stage import StageResolver
from omnisettings.resolver import (
    ACTUAL_STAGE_KEY,
    FrozenSettings,
    SettingsBuilder,
    SettingsResolver,
    get_application_settings,
    reset_application_settings,
)
from omnisettings.accessor import (
    AccessRequest,
    SettingKind,
    SettingValue,
    TypedAccessor,
    resolve_setting,
)


def get_accessor(
    loaders: Union[LoaderChain, Iterable[PropertiesLoader], None] = None,
) -> TypedAccessor:
    """TypedAccessor over the process settings, resolving them on first use."""
    return TypedAccessor(get_application_settings(loaders=loaders))


__all__ = [
    # Version
    "__version__",
    # Loader contract
    "PropertiesLoader",
    "LoaderDescriptor",
    "LoaderChain",
    "EnvironmentPropertiesLoader",
    "FilePropertiesLoader",
    "MappingPropertiesLoader",
    # Errors
    "SettingsError",
    "FatalConfigError",
    "BootstrapError",
    "BundleError",
    "ExternalSettingsError",
    "LoaderError",
    "SettingParseError",
    # Configuration
    "BootstrapSettings",
    "ConfigLoader",
    "ResolverOptions",
    "get_options",
    # Resolution
    "StageResolver",
    "ACTUAL_STAGE_KEY",
    "FrozenSettings",
    "SettingsBuilder",
    "SettingsResolver",
    "get_application_settings",
    "reset_application_settings",
    # Access
    "AccessRequest",
    "SettingKind",
    "SettingValue",
    "TypedAccessor",
    "resolve_setting",
    "get_accessor",
]
