"""
Settings Loaders

Loader chain and built-in PropertiesLoader implementations.
"""

from omnisettings.loaders.chain import LoaderChain
from omnisettings.loaders.builtin import (
    EnvironmentPropertiesLoader,
    FilePropertiesLoader,
    MappingPropertiesLoader,
)

__all__ = [
    "LoaderChain",
    "EnvironmentPropertiesLoader",
    "FilePropertiesLoader",
    "MappingPropertiesLoader",
]
