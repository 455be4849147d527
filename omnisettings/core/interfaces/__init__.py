"""Core interfaces package."""

from omnisettings.core.interfaces.loader import LoaderDescriptor, PropertiesLoader

__all__ = [
    "LoaderDescriptor",
    "PropertiesLoader",
]
