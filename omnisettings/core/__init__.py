"""
omnisettings Core Package

This package contains the loader contract and the exception hierarchy
shared by the resolver, the loaders and the typed accessor.
"""

from omnisettings.core.interfaces.loader import LoaderDescriptor, PropertiesLoader

from omnisettings.core.exceptions import (
    # Base
    SettingsError,
    ErrorContext,
    # Resolution errors
    FatalConfigError,
    BootstrapError,
    BundleError,
    ExternalSettingsError,
    LoaderError,
    # Access errors
    SettingParseError,
)

__all__ = [
    # Interfaces
    "LoaderDescriptor",
    "PropertiesLoader",
    # Exceptions
    "SettingsError",
    "ErrorContext",
    "FatalConfigError",
    "BootstrapError",
    "BundleError",
    "ExternalSettingsError",
    "LoaderError",
    "SettingParseError",
]
